from typing import Any

from eth_abi import encode

from nethermind.clearsign.decoding import canonicalize, compute_selector, parse_signature_types
from nethermind.clearsign.exceptions import ExternalLookupFailure
from nethermind.clearsign.formats import TokenInfo
from nethermind.clearsign.providers import UNVERIFIED, VerifiedSource

USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
WETH = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
VITALIK = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"
UNISWAP_V3_ROUTER = "0xE592427A0AEce92De3Edee1F18E0157C05861564"


def expand_to_decimals(num: int, decimals: int = 18) -> int:
    return (10**decimals) * num


def uint_max(bits: int) -> int:
    return 2**bits - 1


def encode_call(signature: str, args: list[Any]) -> str:
    """ABI encodes a function call with eth_abi, returning 0x prefixed calldata"""
    types = [t.type_str for t in parse_signature_types(canonicalize(signature))]
    return compute_selector(signature) + encode(types, args).hex()


class FakeChainReader:
    """Chain reader backed by in-memory tables, recording every call"""

    def __init__(self, tokens: dict[str, TokenInfo] | None = None, names: dict[str, str] | None = None):
        self.tokens = {address.lower(): token for address, token in (tokens or {}).items()}
        self.names = {address.lower(): name for address, name in (names or {}).items()}
        self.token_calls: list[tuple[int, str]] = []
        self.name_calls: list[tuple[int, str]] = []

    async def token_metadata(self, chain_id: int, address: str) -> TokenInfo | None:
        self.token_calls.append((chain_id, address))
        return self.tokens.get(address.lower())

    async def reverse_name(self, chain_id: int, address: str) -> str | None:
        self.name_calls.append((chain_id, address))
        return self.names.get(address.lower())


class FakeSourceLookup:
    """Verified source lookup serving ABIs from a dict keyed by lower-cased address"""

    def __init__(self, abis: dict[str, list[dict[str, Any]]] | None = None, name: str | None = None):
        self.abis = {address.lower(): abi for address, abi in (abis or {}).items()}
        self.name = name
        self.calls: list[tuple[int, str]] = []

    async def fetch(self, chain_id: int, address: str) -> VerifiedSource:
        self.calls.append((chain_id, address))
        abi = self.abis.get(address.lower())
        if abi is None:
            return UNVERIFIED
        return VerifiedSource(verified=True, abi=abi, name=self.name, match="exact_match")


class FailingSourceLookup:
    """Verified source lookup that always fails"""

    def __init__(self):
        self.calls: list[tuple[int, str]] = []

    async def fetch(self, chain_id: int, address: str) -> VerifiedSource:
        self.calls.append((chain_id, address))
        raise ExternalLookupFailure("Sourcify API error 500: Internal Server Error")
