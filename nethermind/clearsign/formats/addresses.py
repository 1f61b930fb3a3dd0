from .tokens import NATIVE_TOKEN_ADDRESS

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

REVERSE_NAME_CHAINS = frozenset({1, 10, 8453, 42161})
""" Chains where reverse name resolution is attempted """

SENTINEL_ADDRESSES: dict[str, str] = {
    ZERO_ADDRESS: "Null Address",
    "0x0000000000000000000000000000000000000001": "Null Address",
    "0x000000000000000000000000000000000000dead": "Burn Address",
    NATIVE_TOKEN_ADDRESS: "Native Token",
}

# Keyed by chain id, then lower-cased contract address
KNOWN_ADDRESSES: dict[int, dict[str, str]] = {
    1: {
        # Tokens
        "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48": "USDC",
        "0xdac17f958d2ee523a2206206994597c13d831ec7": "USDT",
        "0x6b175474e89094c44da98b954eedeac495271d0f": "DAI",
        "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2": "WETH",
        # Uniswap
        "0x68b3465833fb72a70ecdf485e0e4c7bd8665fc45": "Uniswap V3 Router",
        "0xe592427a0aece92de3edee1f18e0157c05861564": "Uniswap V3 Router (Old)",
        "0x7a250d5630b4cf539739df2c5dacb4c659f2488d": "Uniswap V2 Router",
        "0x3fc91a3afd70395cd496c647d5a6cc9d4b2b7fad": "Uniswap Universal Router",
        # Aave
        "0x87870bca3f3fd6335c3f4ce8392d69350b4fa4e2": "Aave V3 Pool",
        "0x7d2768de32b0b80b7a3454c06bdac94a69ddc7a9": "Aave V2 Pool",
        # Aggregators
        "0x1111111254eeb25477b68fb85ed929f73a960582": "1inch Router V5",
        "0xdef1c0ded9bec7f1a1670819833240f027b25eff": "0x Exchange Proxy",
        "0x881d40237659c251811cec9c364ef91dc08d300c": "MetaMask Swap Router",
        # NFT
        "0x00000000000000adc04c56bf30ac9d3c0aaf14dc": "OpenSea Seaport",
        "0x00000000006c3852cbef3e08e8df289169ede581": "OpenSea Seaport 1.1",
        # ENS
        "0x57f1887a8bf19b14fc0df6fd9b2acc9af147ea85": "ENS Registrar",
        "0x253553366da8546fc250f225fe3d25d0c782303b": "ENS ETH Registrar Controller",
        # Safe
        "0xd9db270c1b5e3bd161e8c8503c55ceabee709552": "Gnosis Safe Singleton",
        "0xa6b71e26c5e0845f74c812102ca7114b6a896ab2": "Gnosis Safe Proxy Factory",
    },
    42161: {
        "0xe592427a0aece92de3edee1f18e0157c05861564": "Uniswap V3 Router",
        "0x68b3465833fb72a70ecdf485e0e4c7bd8665fc45": "Uniswap V3 Router 2",
        "0x1111111254eeb25477b68fb85ed929f73a960582": "1inch Router V5",
        "0x794a61358d6845594f94dc1db02a252b5b4814ad": "Aave V3 Pool",
    },
    10: {
        "0xe592427a0aece92de3edee1f18e0157c05861564": "Uniswap V3 Router",
        "0x68b3465833fb72a70ecdf485e0e4c7bd8665fc45": "Uniswap V3 Router 2",
        "0x794a61358d6845594f94dc1db02a252b5b4814ad": "Aave V3 Pool",
    },
    8453: {
        "0x2626664c2603336e57b271c5c0b26f421741e481": "Uniswap V3 Router",
        "0x3fc91a3afd70395cd496c647d5a6cc9d4b2b7fad": "Uniswap Universal Router",
    },
    137: {
        "0xe592427a0aece92de3edee1f18e0157c05861564": "Uniswap V3 Router",
        "0x68b3465833fb72a70ecdf485e0e4c7bd8665fc45": "Uniswap V3 Router 2",
        "0x1111111254eeb25477b68fb85ed929f73a960582": "1inch Router V5",
        "0x794a61358d6845594f94dc1db02a252b5b4814ad": "Aave V3 Pool",
    },
}


def is_zero_address(address: str | None) -> bool:
    """True for a missing destination or the zero address"""
    return not address or address.lower() == ZERO_ADDRESS


def get_sentinel_name(address: str) -> str | None:
    """Returns the fixed label of null, burn & native token sentinel addresses"""
    return SENTINEL_ADDRESSES.get(address.lower())


def get_known_address_name(chain_id: int, address: str) -> str | None:
    """Returns the name of a well-known contract"""
    return KNOWN_ADDRESSES.get(chain_id, {}).get(address.lower())


def truncate_address(address: str) -> str:
    """
    Shortens an address for display

    >>> truncate_address("0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045")
    '0xd8dA...6045'
    """
    return f"{address[:6]}...{address[-4:]}"
