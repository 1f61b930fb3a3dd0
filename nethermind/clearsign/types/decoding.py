from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from .abi import AbiParameter
from .descriptor import FieldFormat

# pylint: disable=invalid-name


@dataclass(frozen=True)
class TransactionInput:
    """Unsigned transaction to describe.  ``data`` is the calldata, as a hex string or raw bytes"""

    to: str
    data: str | bytes
    chain_id: int
    value: int | str | None = None
    sender: str | None = None


@dataclass(frozen=True)
class UndecodedArgument:
    """Raw byte range of a parameter that could not be decoded, ie a truncated tail or an out of range offset"""

    data: bytes

    def hex(self) -> str:
        """0x prefixed hex of the undecoded bytes"""
        return "0x" + self.data.hex()


@dataclass
class RawDecoded:
    """Decoding result of the calldata alone, before any descriptor is applied"""

    selector: str
    signature: str | None
    function_name: str | None
    args: list[Any]
    input_types: list[str]
    parameters: list[AbiParameter] = field(default_factory=list)


class Confidence(Enum):
    """Trust level of a decoding result"""

    high = "high"
    medium = "medium"
    low = "low"


class DecodingSource(Enum):
    """Resolution tier that produced a decoding result"""

    registry = "registry"
    sourcify = "sourcify"
    inferred = "inferred"
    basic = "basic"

    @property
    def confidence(self) -> Confidence:
        """Confidence level that always accompanies the source"""
        match self:
            case DecodingSource.registry | DecodingSource.sourcify:
                return Confidence.high
            case DecodingSource.inferred:
                return Confidence.medium
            case DecodingSource.basic:
                return Confidence.low
            case _:
                raise NotImplementedError(f"Unknown decoding source: {self}")


class Severity(Enum):
    """Severity of a security warning"""

    low = "low"
    medium = "medium"
    high = "high"


@dataclass(frozen=True)
class SecurityWarning:
    """Risk raised by a security rule on a formatted field"""

    type: str
    severity: Severity
    message: str


@dataclass(frozen=True)
class DecodedField:
    """Single formatted value of a decoded transaction"""

    label: str
    value: str
    raw_value: Any
    path: str
    format: FieldFormat


@dataclass(frozen=True)
class TransactionMetadata:
    """Protocol & contract information attached to a decoding result"""

    chain_id: int
    contract_address: str
    protocol: str | None = None
    contract_name: str | None = None


@dataclass(frozen=True)
class RawCall:
    """Raw selector & decoded arguments kept alongside the formatted fields"""

    selector: str
    args: tuple[Any, ...]


@dataclass(frozen=True)
class DecodedTransaction:
    """Human-readable description of a transaction, tagged with the confidence and source of the decoding"""

    confidence: Confidence
    source: DecodingSource
    intent: str
    function_name: str | None
    signature: str
    fields: tuple[DecodedField, ...]
    warnings: tuple[SecurityWarning, ...]
    metadata: TransactionMetadata
    raw: RawCall

    def to_dict(self) -> dict[str, Any]:
        """Returns a JSON serializable dict.  Integers are encoded as decimal strings, bytes as hex"""
        return {
            "confidence": self.confidence.value,
            "source": self.source.value,
            "intent": self.intent,
            "functionName": self.function_name,
            "signature": self.signature,
            "fields": [
                {
                    "label": f.label,
                    "value": f.value,
                    "rawValue": json_safe(f.raw_value),
                    "path": f.path,
                    "format": f.format.value,
                }
                for f in self.fields
            ],
            "warnings": [{"type": w.type, "severity": w.severity.value, "message": w.message} for w in self.warnings],
            "metadata": {
                "chainId": self.metadata.chain_id,
                "contractAddress": self.metadata.contract_address,
                "protocol": self.metadata.protocol,
                "contractName": self.metadata.contract_name,
            },
            "raw": {"selector": self.raw.selector, "args": [json_safe(a) for a in self.raw.args]},
        }


def json_safe(value: Any) -> Any:
    """Recursively converts decoded values into JSON compatible values"""
    match value:
        case bool() | None:
            return value
        case int() | Decimal():
            return str(value)
        case bytes():
            return "0x" + value.hex()
        case UndecodedArgument():
            return value.hex()
        case list() | tuple():
            return [json_safe(v) for v in value]
        case _:
            return value
