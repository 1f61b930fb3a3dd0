from dataclasses import dataclass

NATIVE_TOKEN_ADDRESS = "0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee"
""" Sentinel address used by many protocols to represent the chain's native currency """

INFINITE_THRESHOLD = 2**255
""" Amounts at or above this magnitude are displayed as unlimited """

MAX_DISPLAY_DECIMALS = 6


@dataclass(frozen=True)
class TokenInfo:
    """Symbol & decimals of a token, used to scale raw amounts"""

    symbol: str
    decimals: int
    name: str | None = None


def _tokens(table: dict[str, tuple[str, int]]) -> dict[str, TokenInfo]:
    return {address: TokenInfo(symbol=symbol, decimals=decimals) for address, (symbol, decimals) in table.items()}


# Keyed by chain id, then lower-cased token address
KNOWN_TOKENS: dict[int, dict[str, TokenInfo]] = {
    1: _tokens(
        {
            "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48": ("USDC", 6),
            "0xdac17f958d2ee523a2206206994597c13d831ec7": ("USDT", 6),
            "0x6b175474e89094c44da98b954eedeac495271d0f": ("DAI", 18),
            "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2": ("WETH", 18),
            "0x2260fac5e5542a773aa44fbcfedf7c193bc2c599": ("WBTC", 8),
            "0x514910771af9ca656af840dff83e8264ecf986ca": ("LINK", 18),
            "0x1f9840a85d5af5bf1d1762f925bdaddc4201f984": ("UNI", 18),
            "0x7fc66500c84a76ad7e9c93437bfc5ac33e2ddae9": ("AAVE", 18),
            "0x95ad61b0a150d79219dcf64e1e6cc01f0b64c4ce": ("SHIB", 18),
            "0x4d224452801aced8b2f0aebe155379bb5d594381": ("APE", 18),
        }
    ),
    42161: _tokens(
        {
            "0xaf88d065e77c8cc2239327c5edb3a432268e5831": ("USDC", 6),
            "0xfd086bc7cd5c481dcc9c85ebe478a1c0b69fcbb9": ("USDT", 6),
            "0xda10009cbd5d07dd0cecc66161fc93d7c9000da1": ("DAI", 18),
            "0x82af49447d8a07e3bd95bd0d56f35241523fbab1": ("WETH", 18),
        }
    ),
    10: _tokens(
        {
            "0x0b2c639c533813f4aa9d7837caf62653d097ff85": ("USDC", 6),
            "0x94b008aa00579c1307b0ef2c499ad98a8ce58e58": ("USDT", 6),
            "0xda10009cbd5d07dd0cecc66161fc93d7c9000da1": ("DAI", 18),
            "0x4200000000000000000000000000000000000006": ("WETH", 18),
        }
    ),
    8453: _tokens(
        {
            "0x833589fcd6edb6e08f4c7c32d4f71b54bda02913": ("USDC", 6),
            "0x4200000000000000000000000000000000000006": ("WETH", 18),
        }
    ),
    137: _tokens(
        {
            "0x2791bca1f2de4661ed88a30c99a7a9449aa84174": ("USDC.e", 6),
            "0x3c499c542cef5e3811e1192ce70d8cc03d5c3359": ("USDC", 6),
            "0xc2132d05d31c914a87c6611c10748aeb04b58e8f": ("USDT", 6),
            "0x8f3cf7ad23cd3cadbd9735aff958023239c6a063": ("DAI", 18),
            "0x7ceb23fd6bc0add59e62ac25578270cff1b9f619": ("WETH", 18),
        }
    ),
}

NATIVE_CURRENCY: dict[int, TokenInfo] = {
    1: TokenInfo("ETH", 18),
    10: TokenInfo("ETH", 18),
    56: TokenInfo("BNB", 18),
    137: TokenInfo("MATIC", 18),
    8453: TokenInfo("ETH", 18),
    42161: TokenInfo("ETH", 18),
    43114: TokenInfo("AVAX", 18),
}


def get_known_token(chain_id: int, address: str) -> TokenInfo | None:
    """Returns the token info of a well-known token"""
    return KNOWN_TOKENS.get(chain_id, {}).get(address.lower())


def get_native_currency(chain_id: int) -> TokenInfo | None:
    """Returns the native currency of a chain"""
    return NATIVE_CURRENCY.get(chain_id)


def is_infinite_approval(amount: int) -> bool:
    """True if the amount is at or above 2**255"""
    return amount >= INFINITE_THRESHOLD


def format_amount(raw_amount: int, decimals: int, symbol: str | None = None) -> str:
    """
    Scales a raw integer amount by the token decimals.  The integer part is grouped with thousands separators,
    and the fraction is stripped of trailing zeros and truncated to 6 digits.  Magnitudes at or above 2**255
    are displayed as unlimited.

    >>> format_amount(100_000_000, 6, "USDC")
    '100 USDC'
    >>> format_amount(1_234_567_891_234_567_891_234, 18, "DAI")
    '1,234.567891 DAI'
    >>> format_amount(2**256 - 1, 18, "WETH")
    'Unlimited WETH'
    """
    if is_infinite_approval(raw_amount):
        return f"Unlimited {symbol}" if symbol else "Unlimited"

    sign = "-" if raw_amount < 0 else ""
    integer_part, fractional_part = divmod(abs(raw_amount), 10**decimals)

    formatted = f"{sign}{integer_part:,}"
    if fractional_part:
        fraction = str(fractional_part).rjust(decimals, "0").rstrip("0")[:MAX_DISPLAY_DECIMALS].rstrip("0")
        if fraction:
            formatted += f".{fraction}"

    return f"{formatted} {symbol}" if symbol else formatted
