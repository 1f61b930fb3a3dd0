from .abi_types import AbiKind, AbiType, parse_abi_type, parse_signature_types
from .calldata import CalldataCodec, extract_selector
from .signatures import (
    FunctionSignature,
    SignatureRegistry,
    canonicalize,
    compute_selector,
    parse_signature,
)
