"""
Typed ABI type trees.

Type strings are parsed once with the :mod:`eth_abi.grammar` parser, then converted into a small immutable tree of
:class:`AbiType` nodes that carry everything the calldata walker needs (dynamic flag, inline head size, array
length, tuple components).  Trees are cached per type string, so nested tuple brackets of hot signatures are only
parsed once per process.
"""
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache

from eth_abi.exceptions import ABITypeError, ParseError
from eth_abi.grammar import BasicType, TupleType, normalize, parse

from nethermind.clearsign.exceptions import DecodingError

from .utils import split_top_level

WORD_SIZE = 32

# pylint: disable=invalid-name


class AbiKind(Enum):
    """Node kinds of an ABI type tree"""

    address = "address"
    uint = "uint"
    int = "int"
    bool = "bool"
    fixed_bytes = "fixed_bytes"
    bytes = "bytes"
    string = "string"
    fixed = "fixed"
    ufixed = "ufixed"
    function = "function"
    array = "array"
    tuple = "tuple"


@dataclass(frozen=True)
class AbiType:
    """
    Node of a parsed ABI type.

    ``size`` is the bit width for integers, the byte width for ``bytesN``, and the number of decimals for fixed
    point types.  Arrays carry their ``item`` type and ``length`` (None for dynamic arrays), tuples carry their
    ``components``.
    """

    kind: AbiKind
    type_str: str
    dynamic: bool
    head_size: int
    size: int = 0
    length: int | None = None
    item: "AbiType | None" = None
    components: tuple["AbiType", ...] = ()


def _basic(base: str, sub: int | tuple[int, int] | None) -> AbiType:
    match base:
        case "address" | "bool" | "function":
            return AbiType(kind=AbiKind(base), type_str=base, dynamic=False, head_size=WORD_SIZE)
        case "uint" | "int":
            assert isinstance(sub, int)
            return AbiType(kind=AbiKind(base), type_str=f"{base}{sub}", dynamic=False, head_size=WORD_SIZE, size=sub)
        case "bytes" if sub is None:
            return AbiType(kind=AbiKind.bytes, type_str="bytes", dynamic=True, head_size=WORD_SIZE)
        case "bytes":
            assert isinstance(sub, int)
            return AbiType(
                kind=AbiKind.fixed_bytes, type_str=f"bytes{sub}", dynamic=False, head_size=WORD_SIZE, size=sub
            )
        case "string":
            return AbiType(kind=AbiKind.string, type_str="string", dynamic=True, head_size=WORD_SIZE)
        case "fixed" | "ufixed":
            assert isinstance(sub, tuple)
            bits, decimals = sub
            return AbiType(
                kind=AbiKind(base),
                type_str=f"{base}{bits}x{decimals}",
                dynamic=False,
                head_size=WORD_SIZE,
                size=decimals,
            )
        case _:
            raise DecodingError(f"Unsupported ABI base type: {base}")


def _array(item: AbiType, length: int | None) -> AbiType:
    dims = f"[{length}]" if length is not None else "[]"
    dynamic = length is None or item.dynamic
    return AbiType(
        kind=AbiKind.array,
        type_str=item.type_str + dims,
        dynamic=dynamic,
        head_size=WORD_SIZE if dynamic else item.head_size * (length or 0),
        length=length,
        item=item,
    )


def _tuple(components: tuple[AbiType, ...]) -> AbiType:
    dynamic = any(c.dynamic for c in components)
    return AbiType(
        kind=AbiKind.tuple,
        type_str=f"({','.join(c.type_str for c in components)})",
        dynamic=dynamic,
        head_size=WORD_SIZE if dynamic else sum(c.head_size for c in components),
        components=components,
    )


def _from_grammar(grammar_type: BasicType | TupleType) -> AbiType:
    if isinstance(grammar_type, TupleType):
        node = _tuple(tuple(_from_grammar(c) for c in grammar_type.components))
    else:
        node = _basic(grammar_type.base, grammar_type.sub)

    # arrlist is ordered innermost dimension first: uint256[2][] -> ((2,), ())
    for dim in grammar_type.arrlist or ():
        node = _array(node, dim[0] if dim else None)
    return node


@lru_cache(maxsize=None)
def parse_abi_type(type_str: str) -> AbiType:
    """
    Parses a canonical or aliased ABI type string into an AbiType tree.

    >>> parse_abi_type("(address,uint256)[]").dynamic
    True
    >>> parse_abi_type("(address,uint256)").head_size
    64

    :raises DecodingError: if the type string is not a valid ABI type
    """
    try:
        grammar_type = parse(normalize(type_str))
        grammar_type.validate()
    except (ParseError, ABITypeError) as e:
        raise DecodingError(f"Invalid ABI type: {type_str}") from e

    return _from_grammar(grammar_type)


@lru_cache(maxsize=4096)
def parse_signature_types(canonical_signature: str) -> tuple[AbiType, ...]:
    """
    Returns the type trees of every parameter of a canonical signature.  Cached by signature.

    >>> [t.type_str for t in parse_signature_types("transfer(address,uint256)")]
    ['address', 'uint256']
    """
    open_paren = canonical_signature.find("(")
    if open_paren == -1 or not canonical_signature.endswith(")"):
        raise DecodingError(f"Invalid function signature: {canonical_signature}")

    return tuple(parse_abi_type(t) for t in split_top_level(canonical_signature[open_paren + 1 : -1]))
