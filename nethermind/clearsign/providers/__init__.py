from .base import (
    UNVERIFIED,
    ChainReader,
    NullChainReader,
    NullSourceLookup,
    VerifiedSource,
    VerifiedSourceLookup,
)
from .chains import chain_name_to_id, get_chain_name, get_default_rpc
from .sourcify import SourcifyClient, extract_contract_name
from .web3_reader import Web3ChainReader
