import logging
from dataclasses import dataclass, field

from eth_abi.exceptions import ABITypeError, ParseError
from eth_abi.grammar import normalize
from eth_utils.abi import function_signature_to_4byte_selector

from nethermind.clearsign.exceptions import DecodingError
from nethermind.clearsign.types.abi import AbiParameter

from .abi_types import parse_signature_types
from .utils import parse_parameter, signature_to_name, split_top_level

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("clearsign").getChild("decoding").getChild("signatures")


@dataclass(frozen=True)
class FunctionSignature:
    """Canonical function signature with its 4 byte selector and, when known, its parameter names"""

    selector: str
    signature: str
    name: str
    parameters: tuple[AbiParameter, ...] = field(default=(), compare=False)


# Human-readable signatures are used for the builtin table so parameter names are available for
# descriptor paths.  Selectors are derived from the canonical form at registry construction.
COMMON_SIGNATURES: list[str] = [
    # ERC20
    "transfer(address to, uint256 amount)",
    "approve(address spender, uint256 amount)",
    "transferFrom(address from, address to, uint256 amount)",
    "balanceOf(address account)",
    "allowance(address owner, address spender)",
    "totalSupply()",
    "increaseAllowance(address spender, uint256 addedValue)",
    "decreaseAllowance(address spender, uint256 subtractedValue)",
    # ERC721
    "safeTransferFrom(address from, address to, uint256 tokenId)",
    "safeTransferFrom(address from, address to, uint256 tokenId, bytes data)",
    "setApprovalForAll(address operator, bool approved)",
    "getApproved(uint256 tokenId)",
    "ownerOf(uint256 tokenId)",
    # ERC1155
    "safeTransferFrom(address from, address to, uint256 id, uint256 amount, bytes data)",
    "safeBatchTransferFrom(address from, address to, uint256[] ids, uint256[] amounts, bytes data)",
    # Common DeFi
    "execute(bytes commands, bytes[] inputs, uint256 deadline)",
    "exactInputSingle((address tokenIn, address tokenOut, uint24 fee, address recipient, uint256 deadline, "
    "uint256 amountIn, uint256 amountOutMinimum, uint160 sqrtPriceLimitX96) params)",
    "exactInput((bytes path, address recipient, uint256 deadline, uint256 amountIn, uint256 amountOutMinimum) params)",
    "exactOutputSingle((address tokenIn, address tokenOut, uint24 fee, address recipient, uint256 deadline, "
    "uint256 amountOut, uint256 amountInMaximum, uint160 sqrtPriceLimitX96) params)",
    "multicall(uint256 deadline, bytes[] data)",
    "multicall(bytes[] data)",
    # WETH
    "deposit()",
    "withdraw(uint256 wad)",
    # Permit
    "permit(address owner, address spender, uint256 value, uint256 deadline, uint8 v, bytes32 r, bytes32 s)",
    # Proxy patterns
    "implementation()",
    "upgradeTo(address newImplementation)",
    # Gnosis Safe
    "execTransaction(address to, uint256 value, bytes data, uint8 operation, uint256 safeTxGas, uint256 baseGas, "
    "uint256 gasPrice, address gasToken, address refundReceiver, bytes signatures)",
]


def is_selector(value: str) -> bool:
    """True if the value is a 0x prefixed 4 byte selector rather than a signature"""
    return value.startswith("0x") and "(" not in value


def parse_signature(signature: str) -> tuple[str, list[AbiParameter]]:
    """
    Splits a function signature into its name and parameters.  Parameter names are kept when present.

    >>> name, params = parse_signature("transfer(address to, uint256 amount)")
    >>> name, [(p.name, p.type) for p in params]
    ('transfer', [('to', 'address'), ('amount', 'uint256')])

    :raises DecodingError: if the signature is not of the form ``name(...)``
    """
    signature = signature.strip()
    open_paren = signature.find("(")
    name = signature_to_name(signature)
    if open_paren <= 0 or not signature.endswith(")") or not name.replace("_", "").replace("$", "").isalnum():
        raise DecodingError(f"Invalid function signature: {signature}")

    return name, [parse_parameter(p) for p in split_top_level(signature[open_paren + 1 : -1])]


def _canonical_parameter_type(param: AbiParameter) -> str:
    if param.is_tuple:
        return param.canonical_type()
    try:
        return normalize(param.type)
    except (ParseError, ABITypeError):
        return param.type


def _canonical_parameter(param: AbiParameter) -> AbiParameter:
    return AbiParameter(
        name=param.name,
        type=param.type if param.is_tuple else _canonical_parameter_type(param),
        components=tuple(_canonical_parameter(c) for c in param.components),
    )


def canonicalize(signature: str) -> str:
    """
    Normalizes a function signature to its canonical form, stripping parameter names and data locations.
    Selectors are returned lower-cased and untouched.

    >>> canonicalize("transfer(address to, uint256 amount)")
    'transfer(address,uint256)'
    >>> canonicalize("swap((address tokenIn, uint amount) params, bytes calldata data)")
    'swap((address,uint256),bytes)'
    >>> canonicalize("0xA9059CBB")
    '0xa9059cbb'
    """
    if is_selector(signature):
        return signature.lower()

    name, params = parse_signature(signature)
    return f"{name}({','.join(_canonical_parameter(p).canonical_type() for p in params)})"


def compute_selector(signature: str) -> str:
    """
    Computes the 4 byte selector of a signature.  Keys that are already selectors are returned lower-cased.

    >>> compute_selector("transfer(address,uint256)")
    '0xa9059cbb'
    """
    if is_selector(signature):
        return signature.lower()
    return "0x" + function_signature_to_4byte_selector(canonicalize(signature)).hex()


def build_signature(signature: str) -> FunctionSignature:
    """Parses a (possibly named) signature into a FunctionSignature"""
    name, params = parse_signature(signature)
    canonical = canonicalize(signature)
    return FunctionSignature(
        selector=compute_selector(canonical),
        signature=canonical,
        name=name,
        parameters=tuple(_canonical_parameter(p) for p in params),
    )


class SignatureRegistry:
    """
    Maps 4 byte selectors to function signatures.

    Holds the builtin table of common signatures, and a custom table filled by descriptor registration.  Custom
    signatures override builtin signatures sharing the same selector.
    """

    builtin_signatures: dict[str, FunctionSignature]
    """ Mapping from selector to the builtin signature """

    custom_signatures: dict[str, FunctionSignature]
    """ Mapping from selector to signatures registered at runtime """

    def __init__(self, builtin: list[str] | None = None):
        self.builtin_signatures = {}
        for signature in COMMON_SIGNATURES if builtin is None else builtin:
            func = build_signature(signature)
            self.builtin_signatures.setdefault(func.selector, func)
        self.custom_signatures = {}

    def get_by_selector(self, selector: str) -> FunctionSignature | None:
        """Returns the signature for a selector, checking custom signatures first"""
        normalized = selector.lower()
        return self.custom_signatures.get(normalized) or self.builtin_signatures.get(normalized)

    def register(self, signature: str) -> FunctionSignature:
        """
        Registers a custom signature.  Registering a signature without parameter names does not erase the names of
        an equivalent signature that was registered with names.

        :raises DecodingError: if the signature is malformed, or a parameter type is not a valid ABI type
        """
        func = build_signature(signature)
        parse_signature_types(func.signature)

        existing = self.custom_signatures.get(func.selector)
        if existing and existing.signature == func.signature and existing.parameters and not _has_names(func):
            return existing

        logger.debug(f"Registering signature {func.signature} with selector {func.selector}")
        self.custom_signatures[func.selector] = func
        return func

    def register_many(self, signatures: list[str]):
        """Registers multiple signatures"""
        for signature in signatures:
            self.register(signature)

    def clear_custom(self):
        """Removes all signatures registered at runtime"""
        self.custom_signatures.clear()

    def all_signatures(self) -> list[FunctionSignature]:
        """Returns every known signature, custom signatures shadowing builtin ones"""
        merged = dict(self.builtin_signatures)
        merged.update(self.custom_signatures)
        return sorted(merged.values(), key=lambda s: s.signature)


def _has_names(func: FunctionSignature) -> bool:
    return any(p.name for p in func.parameters)
