CHAIN_NAMES: dict[int, str] = {
    1: "Ethereum",
    10: "OP Mainnet",
    56: "BNB Smart Chain",
    100: "Gnosis",
    137: "Polygon",
    324: "zkSync Era",
    8453: "Base",
    42161: "Arbitrum One",
    43114: "Avalanche",
    59144: "Linea",
    534352: "Scroll",
    11155111: "Sepolia",
}

PUBLIC_RPCS: dict[int, list[str]] = {
    1: ["https://eth.llamarpc.com", "https://rpc.ankr.com/eth", "https://1rpc.io/eth"],
    10: ["https://rpc.ankr.com/optimism", "https://1rpc.io/op"],
    56: ["https://rpc.ankr.com/bsc", "https://1rpc.io/bnb"],
    137: ["https://polygon-rpc.com", "https://rpc.ankr.com/polygon", "https://1rpc.io/matic"],
    8453: ["https://rpc.ankr.com/base", "https://1rpc.io/base"],
    42161: ["https://rpc.ankr.com/arbitrum", "https://1rpc.io/arb"],
}

CHAIN_NAME_TO_ID: dict[str, int] = {
    "ethereum": 1,
    "mainnet": 1,
    "arbitrum": 42161,
    "optimism": 10,
    "base": 8453,
    "polygon": 137,
}


def chain_name_to_id(name: str) -> int:
    """
    Converts a chain name or a numeric string into a chain id

    >>> chain_name_to_id("Arbitrum")
    42161
    >>> chain_name_to_id("137")
    137
    """
    if name.isdigit():
        return int(name)

    try:
        return CHAIN_NAME_TO_ID[name.lower()]
    except KeyError:
        raise ValueError(  # pylint: disable=raise-missing-from
            f"Unknown chain name: {name}.  Supported: {', '.join(CHAIN_NAME_TO_ID)}"
        )


def get_chain_name(chain_id: int) -> str:
    """Returns a display name for a chain"""
    return CHAIN_NAMES.get(chain_id, f"Chain {chain_id}")


def get_default_rpc(chain_id: int) -> str | None:
    """
    Returns a public RPC for a chain.

    .. warning::
        Public RPCs are rate limited and not guaranteed to be available.  For anything beyond occasional lookups,
        pass an RPC URL explicitly.
    """
    rpcs = PUBLIC_RPCS.get(chain_id)
    return rpcs[0] if rpcs else None
