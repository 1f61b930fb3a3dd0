from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from nethermind.clearsign.exceptions import DescriptorValidationError

from .abi import AbiParameter

# pylint: disable=invalid-name


class FieldFormat(Enum):
    """
    Closed set of display formats a descriptor field can declare.  Every member has exactly one formatting
    strategy in :class:`~nethermind.clearsign.formats.formatter.FieldFormatter`
    """

    raw = "raw"
    addressName = "addressName"
    tokenAmount = "tokenAmount"
    nftName = "nftName"
    date = "date"
    enum = "enum"
    calldata = "calldata"
    duration = "duration"
    unit = "unit"

    @classmethod
    def values(cls) -> list[str]:
        """Returns the format tags in declaration order"""
        return [member.value for member in cls]


@dataclass(frozen=True)
class FieldDefinition:
    """Display rule for a single value of a function call"""

    path: str
    label: str
    format: FieldFormat = FieldFormat.raw
    params: dict[str, Any] = field(default_factory=dict, hash=False)

    @classmethod
    def from_dict(cls, field_dict: dict[str, Any]) -> "FieldDefinition":
        """Builds a field from its ERC-7730 JSON shape.  A missing format tag is displayed raw"""
        format_tag = field_dict.get("format")
        try:
            field_format = FieldFormat(format_tag) if format_tag is not None else FieldFormat.raw
        except ValueError as e:
            raise DescriptorValidationError(f"Unsupported field format: {format_tag}") from e

        return cls(
            path=field_dict["path"],
            label=field_dict["label"],
            format=field_format,
            params=dict(field_dict.get("params") or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        """Returns the ERC-7730 JSON shape of the field"""
        output: dict[str, Any] = {"path": self.path, "label": self.label, "format": self.format.value}
        if self.params:
            output["params"] = self.params
        return output


@dataclass(frozen=True)
class FunctionFormat:
    """Presentation rule for one function: an intent phrase and an ordered list of fields"""

    intent: str | None
    fields: tuple[FieldDefinition, ...] = ()
    required: tuple[str, ...] | None = None
    excluded: tuple[str, ...] | None = None

    @classmethod
    def from_dict(cls, format_dict: dict[str, Any]) -> "FunctionFormat":
        """Builds a function format from its ERC-7730 JSON shape"""
        required, excluded = format_dict.get("required"), format_dict.get("excluded")
        return cls(
            intent=format_dict.get("intent"),
            fields=tuple(FieldDefinition.from_dict(f) for f in format_dict.get("fields") or []),
            required=tuple(required) if required is not None else None,
            excluded=tuple(excluded) if excluded is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        """Returns the ERC-7730 JSON shape of the format"""
        output: dict[str, Any] = {"fields": [f.to_dict() for f in self.fields]}
        if self.intent is not None:
            output["intent"] = self.intent
        if self.required is not None:
            output["required"] = list(self.required)
        if self.excluded is not None:
            output["excluded"] = list(self.excluded)
        return output


@dataclass(frozen=True)
class ContractDeployment:
    """Chain & address a descriptor is bound to"""

    chain_id: int
    address: str

    def matches(self, address: str, chain_id: int) -> bool:
        """Case-insensitive address comparison on the same chain"""
        return self.chain_id == chain_id and self.address.lower() == address.lower()


@dataclass(frozen=True)
class DescriptorContext:
    """
    Binding context of a descriptor.  Either a list of contract deployments, or an EIP-712 domain.  Descriptors
    for token standards have an empty deployment list, and match purely on function signature.
    """

    id: str | None = None
    deployments: tuple[ContractDeployment, ...] = ()
    abi: tuple[dict[str, Any], ...] | None = field(default=None, compare=False, hash=False)
    eip712: dict[str, Any] | None = field(default=None, hash=False)

    def function_parameters(self, canonical_signature: str) -> list[AbiParameter] | None:
        """Returns the named parameters of a function in the context ABI, if the ABI contains it"""
        # pylint: disable=import-outside-toplevel
        from nethermind.clearsign.decoding.utils import abi_to_signature, filter_functions

        for abi_function in filter_functions(list(self.abi or [])):
            if abi_to_signature(abi_function) == canonical_signature:
                return [AbiParameter.from_abi(p) for p in abi_function.get("inputs", [])]
        return None


@dataclass(frozen=True)
class DescriptorMetadata:
    """Owner & protocol information, plus constants and enum tables used by formatters"""

    owner: str | None = None
    info: dict[str, Any] | None = field(default=None, hash=False)
    token: dict[str, Any] | None = field(default=None, hash=False)
    constants: dict[str, Any] | None = field(default=None, hash=False)
    enums: dict[str, dict[str, str]] | None = field(default=None, hash=False)


@dataclass(frozen=True)
class Descriptor:
    """
    Declarative document mapping function signatures (or selectors) to human-readable presentation rules.

    Descriptors are immutable once built.  Use :meth:`from_dict` to convert an ERC-7730 JSON document that has
    already passed :func:`~nethermind.clearsign.registry.validation.validate_descriptor`.
    """

    context: DescriptorContext
    formats: dict[str, FunctionFormat] = field(hash=False)
    metadata: DescriptorMetadata | None = None
    schema: str | None = None

    @classmethod
    def from_dict(cls, descriptor: dict[str, Any]) -> "Descriptor":
        """
        Converts an ERC-7730 JSON document into a Descriptor.

        :param descriptor: parsed JSON document
        :raises DescriptorValidationError: if a required key is missing or a field format is unsupported
        """
        try:
            context = descriptor["context"]
            contract = context.get("contract") or {}
            metadata = descriptor.get("metadata")

            return cls(
                context=DescriptorContext(
                    id=context.get("$id"),
                    deployments=tuple(
                        ContractDeployment(chain_id=d["chainId"], address=d["address"])
                        for d in contract.get("deployments") or []
                    ),
                    abi=tuple(contract["abi"]) if isinstance(contract.get("abi"), list) else None,
                    eip712=context.get("eip712"),
                ),
                formats={
                    signature: FunctionFormat.from_dict(fmt)
                    for signature, fmt in descriptor["display"]["formats"].items()
                },
                metadata=(
                    DescriptorMetadata(
                        owner=metadata.get("owner"),
                        info=metadata.get("info"),
                        token=metadata.get("token"),
                        constants=metadata.get("constants"),
                        enums=metadata.get("enums"),
                    )
                    if metadata
                    else None
                ),
                schema=descriptor.get("$schema"),
            )
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise DescriptorValidationError(f"Descriptor is missing required structure: {e}") from e

    def to_dict(self) -> dict[str, Any]:
        """Returns the ERC-7730 JSON shape of the descriptor"""
        context: dict[str, Any] = {}
        if self.context.deployments or self.context.abi is not None:
            contract: dict[str, Any] = {
                "deployments": [{"chainId": d.chain_id, "address": d.address} for d in self.context.deployments]
            }
            if self.context.abi is not None:
                contract["abi"] = list(self.context.abi)
            context["contract"] = contract
        if self.context.id is not None:
            context["$id"] = self.context.id
        if self.context.eip712 is not None:
            context["eip712"] = self.context.eip712

        output: dict[str, Any] = {
            "context": context,
            "display": {"formats": {sig: fmt.to_dict() for sig, fmt in self.formats.items()}},
        }
        if self.schema is not None:
            output["$schema"] = self.schema
        if self.metadata is not None:
            metadata = {
                key: value
                for key, value in {
                    "owner": self.metadata.owner,
                    "info": self.metadata.info,
                    "token": self.metadata.token,
                    "constants": self.metadata.constants,
                    "enums": self.metadata.enums,
                }.items()
                if value is not None
            }
            output["metadata"] = metadata
        return output

    @property
    def owner(self) -> str | None:
        """Display name of the protocol owning the descriptor"""
        return self.metadata.owner if self.metadata else None

    def is_deployed_at(self, address: str, chain_id: int) -> bool:
        """True if one of the descriptor deployments matches the chain & address"""
        return any(d.matches(address, chain_id) for d in self.context.deployments)


@dataclass(frozen=True)
class FormatMatch:
    """Result of a descriptor resolution: the owning descriptor and the function format that matched"""

    descriptor: Descriptor
    format: FunctionFormat
    signature_key: str
    parameters: list[AbiParameter] | None = field(default=None, compare=False, hash=False)
