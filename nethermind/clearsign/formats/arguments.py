import re
from typing import Any

from nethermind.clearsign.types import AbiParameter, RawDecoded, TransactionInput

PATH_SEGMENT = re.compile(r"\[\d+\]|[^.\[\]]+")

CONSTANTS_PREFIX = "$.metadata.constants."


class _Missing:
    def __repr__(self):
        return "MISSING"


MISSING: Any = _Missing()
""" Returned by :meth:`ArgumentMap.resolve` when a path does not resolve to a value """


def parse_transaction_value(value: int | str | None) -> int | None:
    """
    Normalizes the native value of a transaction.  Strings may be decimal or 0x prefixed hex.

    >>> parse_transaction_value("0xde0b6b3a7640000")
    1000000000000000000
    """
    match value:
        case None:
            return None
        case int():
            return value
        case str() if value[:2].lower() == "0x":
            return int(value, 16)
        case str():
            return int(value)
        case _:
            raise TypeError(f"Unsupported transaction value: {value!r}")


def _segment_index(segment: str) -> int | None:
    if segment.startswith("["):
        return int(segment[1:-1])
    if segment.isdigit():
        return int(segment)
    return None


def _array_element(param: AbiParameter) -> AbiParameter:
    return AbiParameter(name=param.name, type=param.type[: param.type.rfind("[")], components=param.components)


class ArgumentMap:
    """
    Resolves descriptor field paths against the decoded arguments of a call.

    Supported paths:
        * ``@.to``, ``@.from`` & ``@.value`` for transaction level values
        * ``$.metadata.constants.<name>`` for descriptor constants
        * positional paths: ``[0]`` or ``0``
        * named paths: ``amount``, when parameter names are known
        * dotted struct paths: ``[0].amountIn``, ``params.amountIn``, ``[0].[1]``

    A leading ``#.`` marks a calldata path and is stripped.
    """

    raw: RawDecoded
    parameters: list[AbiParameter]
    tx: TransactionInput
    constants: dict[str, Any]

    def __init__(
        self,
        raw: RawDecoded,
        tx: TransactionInput,
        parameters: list[AbiParameter] | None = None,
        constants: dict[str, Any] | None = None,
    ):
        self.raw = raw
        self.tx = tx
        self.parameters = list(parameters) if parameters else list(raw.parameters)
        self.constants = constants or {}

    def resolve(self, path: str) -> Any:
        """Returns the value at a path, or :data:`MISSING`"""
        match path:
            case "@.to":
                return self.tx.to
            case "@.from":
                return self.tx.sender if self.tx.sender is not None else MISSING
            case "@.value":
                try:
                    value = parse_transaction_value(self.tx.value)
                except (TypeError, ValueError):
                    return MISSING
                return value if value is not None else MISSING

        if path.startswith(CONSTANTS_PREFIX):
            return self.constants.get(path[len(CONSTANTS_PREFIX) :], MISSING)

        if path.startswith("#."):
            path = path[2:]

        segments = PATH_SEGMENT.findall(path)
        if not segments:
            return MISSING

        value: Any = self.raw.args
        fields: list[AbiParameter] = self.parameters
        element: AbiParameter | None = None
        for segment in segments:
            if not isinstance(value, (list, tuple)):
                return MISSING

            index = _segment_index(segment)
            if index is None:
                index = next((i for i, p in enumerate(fields) if p.name == segment), None)
                if index is None:
                    return MISSING
            if index >= len(value):
                return MISSING

            # Array elements share one type, tuple members each have their own
            param = element if element is not None else (fields[index] if index < len(fields) else None)
            value = value[index]

            if param is not None and param.is_array:
                fields, element = [], _array_element(param)
            else:
                fields, element = list(param.components) if param else [], None

        return value
