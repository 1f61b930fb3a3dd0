import asyncio
import logging
from typing import Any

import aiohttp
from aiohttp.client_exceptions import ClientError, ContentTypeError

from nethermind.clearsign.exceptions import ExternalLookupFailure

from .base import UNVERIFIED, VerifiedSource

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("clearsign").getChild("providers").getChild("sourcify")

SOURCIFY_API_URL = "https://sourcify.dev/server"

DEFAULT_HEADERS = {"Accept": "application/json"}

# pylint: disable=raise-missing-from


def extract_contract_name(abi: list[dict[str, Any]] | None) -> str | None:
    """
    Guesses a display name for a contract from the function & event names of its ABI.  Sourcify does not
    return contract names alongside the ABI.

    >>> extract_contract_name([{"type": "function", "name": "swapExactTokensForTokens"}])
    'DEX Contract'
    """
    if not isinstance(abi, list):
        return None

    names = [item["name"] for item in abi if isinstance(item, dict) and isinstance(item.get("name"), str)]
    lower_names = [name.lower() for name in names]

    if any(name in {"stake", "unstake", "getreward"} for name in lower_names):
        return "Staking Contract"
    if any("swap" in name for name in lower_names):
        return "DEX Contract"
    if {"transfer", "approve", "balanceOf"}.issubset(names):
        return "Token Contract"
    if {"safeTransferFrom", "tokenURI"}.issubset(names):
        return "NFT Contract"
    return None


class SourcifyClient:
    """
    Fetches verified contract ABIs from the Sourcify v2 API.

    A new :class:`aiohttp.ClientSession` is opened for each request unless a session is supplied.  A 404
    response means the contract is not verified.  Any other failure raises :class:`ExternalLookupFailure`.
    """

    base_url: str
    """ Sourcify server URL.  Default: https://sourcify.dev/server """

    timeout: float
    """ Total request timeout in seconds """

    session: aiohttp.ClientSession | None
    """ Shared session, owned by the caller """

    def __init__(
        self,
        base_url: str = SOURCIFY_API_URL,
        timeout: float = 10,
        session: aiohttp.ClientSession | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session

    def contract_url(self, chain_id: int, address: str) -> str:
        """Returns the v2 contract endpoint, requesting only the ABI field"""
        return f"{self.base_url}/v2/contract/{chain_id}/{address}?fields=abi"

    async def fetch(self, chain_id: int, address: str) -> VerifiedSource:
        """
        Fetches the verified ABI of a contract

        :raises ExternalLookupFailure: on connection errors, timeouts, unexpected status codes & invalid JSON
        """
        if self.session is not None:
            return await self._fetch(self.session, chain_id, address)

        async with aiohttp.ClientSession(
            headers=DEFAULT_HEADERS,
            timeout=aiohttp.ClientTimeout(total=self.timeout),
        ) as session:
            return await self._fetch(session, chain_id, address)

    async def _fetch(self, session: aiohttp.ClientSession, chain_id: int, address: str) -> VerifiedSource:
        url = self.contract_url(chain_id, address)
        logger.debug(f"Requesting verified source for {address} on chain {chain_id}")

        try:
            async with session.get(url) as response:
                match response.status:
                    case 200:
                        try:
                            response_json = await response.json()
                        except (ContentTypeError, ValueError):
                            raise ExternalLookupFailure(f"Invalid JSON returned by Sourcify for {address}")
                    case 404:
                        logger.debug(f"Contract {address} is not verified on Sourcify for chain {chain_id}")
                        return UNVERIFIED
                    case _:
                        raise ExternalLookupFailure(f"Sourcify API error {response.status}: {response.reason}")

        except (ClientError, asyncio.TimeoutError) as e:
            raise ExternalLookupFailure(f"Sourcify request failed for {address}: {e!r}") from e

        abi = response_json.get("abi") if isinstance(response_json, dict) else None
        return VerifiedSource(
            verified=bool(response_json.get("match")) if isinstance(response_json, dict) else False,
            abi=abi if isinstance(abi, list) else None,
            name=extract_contract_name(abi),
            match=response_json.get("match") if isinstance(response_json, dict) else None,
        )
