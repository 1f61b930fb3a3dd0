import re
from dataclasses import dataclass, field
from typing import Any

from nethermind.clearsign.types import Descriptor, FieldFormat

ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")


@dataclass(frozen=True)
class ValidationIssue:
    """Single structural violation.  ``path`` is a dotted path into the descriptor document"""

    path: str
    message: str


@dataclass
class ValidationResult:
    """Outcome of a structural validation.  Every violation is collected, in document order"""

    valid: bool
    errors: list[ValidationIssue] = field(default_factory=list)

    def summary(self) -> str:
        """Returns one line per violation, for logging"""
        return "\n".join(f"  - {e.path}: {e.message}" for e in self.errors)


def validate_descriptor(descriptor: Any) -> ValidationResult:
    """
    Performs the minimal structural checks required before a descriptor can be indexed.  This is not a full
    ERC-7730 schema conformance check.

    * ``context`` must contain a non-empty ``contract.deployments`` list, or an ``eip712`` domain
    * ``display.formats`` must be a non-empty mapping, and each format must declare a ``fields`` list
    * every field must have a non-empty ``path`` and ``label``, and a supported ``format`` if one is declared

    :param descriptor: parsed descriptor document, or a :class:`~nethermind.clearsign.types.Descriptor`
    :return: :class:`ValidationResult`
    """
    if isinstance(descriptor, Descriptor):
        descriptor = descriptor.to_dict()

    if not isinstance(descriptor, dict):
        return ValidationResult(valid=False, errors=[ValidationIssue("", "Descriptor must be an object")])

    errors: list[ValidationIssue] = []

    if not descriptor.get("context"):
        errors.append(ValidationIssue("context", "Context is required"))
    else:
        _validate_context(descriptor["context"], errors)

    if not descriptor.get("display"):
        errors.append(ValidationIssue("display", "Display is required"))
    else:
        _validate_display(descriptor["display"], errors)

    if descriptor.get("metadata"):
        _validate_metadata(descriptor["metadata"], errors)

    return ValidationResult(valid=len(errors) == 0, errors=errors)


def _validate_context(context: Any, errors: list[ValidationIssue]):
    if not isinstance(context, dict):
        errors.append(ValidationIssue("context", "Context must be an object"))
        return

    if not context.get("contract") and not context.get("eip712"):
        errors.append(ValidationIssue("context", 'Context must have either "contract" or "eip712"'))
        return

    if context.get("contract"):
        _validate_contract(context["contract"], errors)


def _validate_contract(contract: Any, errors: list[ValidationIssue]):
    if not isinstance(contract, dict):
        errors.append(ValidationIssue("context.contract", "Contract must be an object"))
        return

    deployments = contract.get("deployments")
    if not isinstance(deployments, list):
        errors.append(ValidationIssue("context.contract.deployments", "Deployments must be an array"))
        return

    if len(deployments) == 0:
        errors.append(ValidationIssue("context.contract.deployments", "Deployments must have at least one entry"))
        return

    for index, deployment in enumerate(deployments):
        path = f"context.contract.deployments[{index}]"
        if not isinstance(deployment, dict):
            errors.append(ValidationIssue(path, "Deployment must be an object"))
            continue

        chain_id = deployment.get("chainId")
        if not isinstance(chain_id, int) or isinstance(chain_id, bool):
            errors.append(ValidationIssue(f"{path}.chainId", "Chain ID must be a number"))

        address = deployment.get("address")
        if not isinstance(address, str) or not ADDRESS_PATTERN.match(address):
            errors.append(ValidationIssue(f"{path}.address", "Address must be a valid Ethereum address"))


def _validate_display(display: Any, errors: list[ValidationIssue]):
    if not isinstance(display, dict):
        errors.append(ValidationIssue("display", "Display must be an object"))
        return

    formats = display.get("formats")
    if not isinstance(formats, dict):
        errors.append(ValidationIssue("display.formats", "Formats must be an object"))
        return

    if len(formats) == 0:
        errors.append(ValidationIssue("display.formats", "Formats must declare at least one function"))
        return

    for signature, function_format in formats.items():
        _validate_function_format(signature, function_format, errors)


def _validate_function_format(signature: str, function_format: Any, errors: list[ValidationIssue]):
    path = f'display.formats["{signature}"]'

    if not isinstance(function_format, dict):
        errors.append(ValidationIssue(path, "Format must be an object"))
        return

    if function_format.get("intent") is not None and not isinstance(function_format["intent"], str):
        errors.append(ValidationIssue(f"{path}.intent", "Intent must be a string"))

    fields = function_format.get("fields")
    if not isinstance(fields, list):
        errors.append(ValidationIssue(f"{path}.fields", "Fields must be an array"))
        return

    for index, field_def in enumerate(fields):
        _validate_field(field_def, f"{path}.fields[{index}]", errors)


def _validate_field(field_def: Any, path: str, errors: list[ValidationIssue]):
    if not isinstance(field_def, dict):
        errors.append(ValidationIssue(path, "Field must be an object"))
        return

    if not isinstance(field_def.get("path"), str) or not field_def["path"]:
        errors.append(ValidationIssue(f"{path}.path", "Path must be a non-empty string"))

    if not isinstance(field_def.get("label"), str) or not field_def["label"]:
        errors.append(ValidationIssue(f"{path}.label", "Label must be a non-empty string"))

    if "format" in field_def and field_def["format"] not in FieldFormat.values():
        errors.append(
            ValidationIssue(f"{path}.format", f"Format must be one of: {', '.join(FieldFormat.values())}")
        )


def _validate_metadata(metadata: Any, errors: list[ValidationIssue]):
    if not isinstance(metadata, dict):
        errors.append(ValidationIssue("metadata", "Metadata must be an object"))
        return

    if metadata.get("owner") is not None and not isinstance(metadata["owner"], str):
        errors.append(ValidationIssue("metadata.owner", "Owner must be a string"))

    if metadata.get("info") is not None and not isinstance(metadata["info"], dict):
        errors.append(ValidationIssue("metadata.info", "Info must be an object"))
