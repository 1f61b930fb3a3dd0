import os
from dataclasses import dataclass, field

from nethermind.clearsign.formats.addresses import REVERSE_NAME_CHAINS
from nethermind.clearsign.providers.sourcify import SOURCIFY_API_URL

AMOUNT_FLOOR = 1000
""" Smallest integer displayed as a token amount when no descriptor is known """

AMOUNT_CEILING = 2**160
""" Largest integer displayed as a token amount when no descriptor is known """

TRUTHY_VALUES = {"1", "true", "yes", "on"}


@dataclass
class SignerConfig:
    """Configuration of a :class:`~nethermind.clearsign.ClearSigner`"""

    use_sourcify_fallback: bool = True
    """ Fetch verified ABIs for contracts missing from the registry """

    use_community_registry: bool = True
    """ Consult the community registry tier, when one is loaded """

    sourcify_url: str = SOURCIFY_API_URL

    chain_id: int = 1
    """ Chain served by ``rpc_url`` """

    rpc_url: str | None = None
    """ JSON RPC used for token metadata & reverse names """

    use_public_rpcs: bool = False
    """ Fall back to public RPCs for chains without a configured RPC """

    external_cache_size: int | None = None
    """ Maximum number of contracts kept in the verified source cache.  Unbounded when None """

    request_timeout: float = 10

    amount_floor: int = AMOUNT_FLOOR
    amount_ceiling: int = AMOUNT_CEILING

    reverse_name_chains: frozenset[int] = field(default=REVERSE_NAME_CHAINS)

    @classmethod
    def from_env(cls, **overrides) -> "SignerConfig":
        """
        Builds a config from environment variables.  Keyword arguments override the environment.

            - ``SOURCIFY_URL``: Sourcify server URL
            - ``JSON_RPC``: JSON RPC URL
            - ``CLEARSIGN_DISABLE_SOURCIFY``: disables the verified source fallback when truthy
            - ``CLEARSIGN_CACHE_SIZE``: size of the verified source cache
        """
        env_values: dict = {}
        if sourcify_url := os.environ.get("SOURCIFY_URL"):
            env_values["sourcify_url"] = sourcify_url
        if rpc_url := os.environ.get("JSON_RPC"):
            env_values["rpc_url"] = rpc_url
        if disable_sourcify := os.environ.get("CLEARSIGN_DISABLE_SOURCIFY"):
            env_values["use_sourcify_fallback"] = disable_sourcify.lower() not in TRUTHY_VALUES
        if cache_size := os.environ.get("CLEARSIGN_CACHE_SIZE"):
            env_values["external_cache_size"] = int(cache_size)

        env_values.update(overrides)
        return cls(**env_values)
