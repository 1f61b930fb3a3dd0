from dataclasses import dataclass, field
from typing import Any, Protocol

from nethermind.clearsign.formats.tokens import TokenInfo


@dataclass(frozen=True)
class VerifiedSource:
    """Result of a verified source lookup.  ``abi`` is only set for verified contracts"""

    verified: bool
    abi: list[dict[str, Any]] | None = field(default=None, hash=False)
    name: str | None = None
    match: str | None = None


UNVERIFIED = VerifiedSource(verified=False)


class VerifiedSourceLookup(Protocol):
    """Fetches the verified interface of a deployed contract"""

    async def fetch(self, chain_id: int, address: str) -> VerifiedSource:
        """
        Returns the verified ABI of a contract.  Implementations may raise on network & parsing errors, callers
        treat any exception as a miss.
        """
        ...


class ChainReader(Protocol):
    """Optional on-chain reads used while formatting fields"""

    async def token_metadata(self, chain_id: int, address: str) -> TokenInfo | None:
        """Returns the symbol & decimals of an ERC20 token, or None if the contract is not a token"""
        ...

    async def reverse_name(self, chain_id: int, address: str) -> str | None:
        """Returns the primary name of an address, or None if no reverse record exists"""
        ...


class NullSourceLookup:
    """Offline lookup that never finds a verified contract"""

    async def fetch(self, chain_id: int, address: str) -> VerifiedSource:  # pylint: disable=unused-argument
        return UNVERIFIED


class NullChainReader:
    """Offline chain reader that never resolves metadata or names"""

    async def token_metadata(self, chain_id: int, address: str) -> TokenInfo | None:  # pylint: disable=unused-argument
        return None

    async def reverse_name(self, chain_id: int, address: str) -> str | None:  # pylint: disable=unused-argument
        return None
