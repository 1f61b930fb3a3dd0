import logging
from typing import Any

from nethermind.clearsign.types.abi import AbiParameter

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("clearsign").getChild("decoding")

# Keywords allowed between a type and its name in Solidity-style signatures
_DATA_LOCATION_KEYWORDS = {"memory", "calldata", "storage", "indexed", "payable"}


def abi_to_signature(abi: dict[str, Any]) -> str:
    """
    Converts a JSON ABI function to its canonical signature.

    >>> abi_to_signature({"name": "transfer", "type": "function", "inputs": [
    ...     {"name": "to", "type": "address"}, {"name": "amount", "type": "uint256"}
    ... ]})
    'transfer(address,uint256)'

    """
    collapsed = [collapse_if_tuple(abi_input) for abi_input in abi.get("inputs", [])]
    return f"{abi['name']}({','.join(collapsed)})"


def collapse_if_tuple(abi_params: dict[str, Any]) -> str:
    """
    Converts a tuple from a dict to a parenthesized list of its types.

    >>> collapse_if_tuple(
    ...     {
    ...         'components': [
    ...             {'name': 'anAddress', 'type': 'address'},
    ...             {'name': 'anInt', 'type': 'uint256'},
    ...             {'name': 'someBytes', 'type': 'bytes'},
    ...         ],
    ...         'type': 'tuple',
    ...     }
    ... )
    '(address,uint256,bytes)'
    """

    typ = abi_params["type"]
    if not isinstance(typ, str):
        raise TypeError(f"The 'type' must be a string, but got {typ} of type {type(typ)}")

    if not typ.startswith("tuple"):
        return typ

    delimited = ",".join(collapse_if_tuple(c) for c in abi_params["components"])
    # Whatever comes after "tuple" is the array dims.  The ABI spec states that
    # this will have the form "", "[]", or "[k]".
    array_dim = typ[5:]
    collapsed = f"({delimited}){array_dim}"

    return collapsed


def filter_functions(contract_abi: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Filters out all non-function ABIs, and functions without a name"""
    return [abi for abi in contract_abi if abi.get("type") == "function" and isinstance(abi.get("name"), str)]


def signature_to_name(function_sig: str) -> str:
    """
    Removes types from function signature

    >>> signature_to_name("swap(address,address,uint256,uint256,int128)")
    'swap'
    """
    index = function_sig.find("(")
    if index != -1:
        return function_sig[:index].strip()
    return function_sig.strip()


def split_top_level(params: str) -> list[str]:
    """
    Splits a comma separated parameter list, ignoring commas nested inside tuple parentheses.

    >>> split_top_level("address,(uint256,bytes)[],bool")
    ['address', '(uint256,bytes)[]', 'bool']
    """
    if not params.strip():
        return []

    parts, depth, current = [], 0, ""
    for char in params:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1

        if char == "," and depth == 0:
            parts.append(current.strip())
            current = ""
        else:
            current += char

    if current.strip():
        parts.append(current.strip())
    return parts


def find_matching_paren(value: str, start: int = 0) -> int:
    """Returns the index of the parenthesis closing the one at ``start``, or len(value) if unbalanced"""
    depth = 0
    for index in range(start, len(value)):
        if value[index] == "(":
            depth += 1
        elif value[index] == ")":
            depth -= 1
            if depth == 0:
                return index
    return len(value)


def parse_parameter(param: str) -> AbiParameter:
    """
    Parses a single Solidity-style parameter declaration into an AbiParameter.  Parameter names & data
    locations are optional, tuples may be written with or without the ``tuple`` keyword.

    >>> param = parse_parameter("(address tokenIn, uint256 amountIn)[] memory swaps")
    >>> param.name, param.type, [c.name for c in param.components]
    ('swaps', 'tuple[]', ['tokenIn', 'amountIn'])
    """
    param = param.strip()
    if param.startswith("tuple("):
        param = param[5:]

    if param.startswith("("):
        close = find_matching_paren(param)
        components = tuple(parse_parameter(p) for p in split_top_level(param[1:close]))
        remainder = param[close + 1 :].split()
        array_dims = remainder[0] if remainder and remainder[0].startswith("[") else ""
        name_tokens = remainder[1:] if array_dims else remainder
        return AbiParameter(name=_parameter_name(name_tokens), type=f"tuple{array_dims}", components=components)

    tokens = param.split()
    return AbiParameter(name=_parameter_name(tokens[1:]), type=tokens[0] if tokens else "")


def _parameter_name(tokens: list[str]) -> str:
    names = [token for token in tokens if token not in _DATA_LOCATION_KEYWORDS]
    return names[-1] if names else ""
