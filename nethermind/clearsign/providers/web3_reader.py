import logging

from eth_utils import to_checksum_address
from web3 import AsyncHTTPProvider, AsyncWeb3

from nethermind.clearsign.formats.tokens import TokenInfo

from .chains import get_default_rpc

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("clearsign").getChild("providers").getChild("web3")

ERC20_METADATA_ABI = [
    {
        "type": "function",
        "name": "name",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "string"}],
    },
    {
        "type": "function",
        "name": "symbol",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "string"}],
    },
    {
        "type": "function",
        "name": "decimals",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint8"}],
    },
]


class Web3ChainReader:
    """
    Reads token metadata & reverse names over JSON RPC.  One :class:`~web3.AsyncWeb3` connection is kept per chain.

    Every read failure is logged & returned as None so that formatting can fall back to raw values.
    """

    rpc_urls: dict[int, str]
    """ RPC URL for each chain id """

    use_public_rpcs: bool
    """ Fall back to a public RPC for chains without a configured URL """

    def __init__(self, rpc_urls: dict[int, str] | None = None, use_public_rpcs: bool = True):
        self.rpc_urls = dict(rpc_urls or {})
        self.use_public_rpcs = use_public_rpcs

        self._connections: dict[int, AsyncWeb3] = {}
        self._token_cache: dict[tuple[int, str], TokenInfo | None] = {}

    def get_web3(self, chain_id: int) -> AsyncWeb3 | None:
        """Returns the connection for a chain, or None if no RPC is available"""
        if chain_id in self._connections:
            return self._connections[chain_id]

        rpc_url = self.rpc_urls.get(chain_id)
        if rpc_url is None and self.use_public_rpcs:
            rpc_url = get_default_rpc(chain_id)
        if rpc_url is None:
            return None

        w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url))  # pylint: disable=invalid-name
        self._connections[chain_id] = w3
        return w3

    async def token_metadata(self, chain_id: int, address: str) -> TokenInfo | None:
        cache_key = (chain_id, address.lower())
        if cache_key in self._token_cache:
            return self._token_cache[cache_key]

        w3 = self.get_web3(chain_id)  # pylint: disable=invalid-name
        if w3 is None:
            return None

        token_contract = w3.eth.contract(to_checksum_address(address), abi=ERC20_METADATA_ABI)
        try:
            symbol = await token_contract.functions.symbol().call()
            decimals = await token_contract.functions.decimals().call()
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.debug(f"Could not read token metadata for {address} on chain {chain_id}: {exc}")
            self._token_cache[cache_key] = None
            return None

        token = TokenInfo(symbol=symbol, decimals=int(decimals))
        self._token_cache[cache_key] = token
        return token

    async def reverse_name(self, chain_id: int, address: str) -> str | None:
        w3 = self.get_web3(chain_id)  # pylint: disable=invalid-name
        if w3 is None:
            return None

        try:
            return await w3.ens.name(to_checksum_address(address))  # type: ignore[union-attr]
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.debug(f"Reverse name lookup failed for {address} on chain {chain_id}: {exc}")
            return None
