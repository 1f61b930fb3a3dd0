import logging
from typing import Any

from nethermind.clearsign.decoding.utils import abi_to_signature, filter_functions
from nethermind.clearsign.types import (
    ContractDeployment,
    Descriptor,
    DescriptorContext,
    DescriptorMetadata,
    FieldDefinition,
    FieldFormat,
    FunctionFormat,
)

from .infer_format import infer_format, infer_label
from .infer_intent import infer_intent

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("clearsign").getChild("generate")

GENERATED_SCHEMA = "https://eips.ethereum.org/EIPS/eip-7730"

READ_ONLY_MUTABILITY = {"view", "pure"}


def generate_field_definitions(abi_param: dict[str, Any], base_path: str) -> list[FieldDefinition]:
    """
    Generates field definitions for a single ABI parameter.  Structs are flattened into one field per
    component, with dotted paths (``[0].amountIn``).  Arrays, including arrays of structs, are displayed
    as a single raw field.
    """
    param_type = abi_param["type"]
    name = abi_param.get("name") or ""

    if param_type == "tuple" and abi_param.get("components"):
        fields = []
        for index, component in enumerate(abi_param["components"]):
            # Unnamed struct members are addressed by position
            member = component.get("name") or f"[{index}]"
            fields.extend(generate_field_definitions(component, f"{base_path}.{member}"))
        return fields

    if param_type.endswith("]"):
        return [FieldDefinition(path=base_path, label=infer_label(name or "items"), format=FieldFormat.raw)]

    inferred = infer_format(name, param_type)
    return [
        FieldDefinition(
            path=base_path,
            label=infer_label(name or f"param{base_path}"),
            format=inferred.format,
            params=inferred.params or {},
        )
    ]


def generate_function_format(abi_function: dict[str, Any]) -> FunctionFormat:
    """Generates the display format of an ABI function, with one field per (flattened) input"""
    fields = []
    for index, abi_input in enumerate(abi_function.get("inputs") or []):
        fields.extend(generate_field_definitions(abi_input, f"[{index}]"))

    return FunctionFormat(intent=infer_intent(abi_function["name"]), fields=tuple(fields))


def generate_descriptor(
    chain_id: int,
    address: str,
    abi: list[dict[str, Any]],
    owner: str | None = None,
    url: str | None = None,
    functions: list[str] | None = None,
    skip_read_only: bool = True,
) -> Descriptor:
    """
    Generates a descriptor from a contract ABI.  Field formats, labels and intents are inferred from the
    parameter & function names.

    The ABI is kept in the descriptor context, so parameter names remain available when matching calldata
    against the canonical signatures used as format keys.

    :param chain_id: chain id of the deployment
    :param address: contract address of the deployment
    :param abi: JSON ABI of the contract
    :param owner: protocol display name
    :param url: protocol URL, stored in the metadata info
    :param functions: only generate formats for these function names
    :param skip_read_only: skip ``view`` & ``pure`` functions.  Default: True
    """
    abi_functions = filter_functions(abi)

    if functions is not None:
        abi_functions = [f for f in abi_functions if f["name"] in functions]

    if skip_read_only:
        abi_functions = [f for f in abi_functions if f.get("stateMutability") not in READ_ONLY_MUTABILITY]

    formats = {abi_to_signature(f): generate_function_format(f) for f in abi_functions}
    logger.debug(f"Generated {len(formats)} formats for {address} on chain {chain_id}")

    metadata = None
    if owner or url:
        metadata = DescriptorMetadata(owner=owner, info={"url": url} if url else None)

    return Descriptor(
        context=DescriptorContext(
            deployments=(ContractDeployment(chain_id=chain_id, address=address.lower()),),
            abi=tuple(abi),
        ),
        formats=formats,
        metadata=metadata,
        schema=GENERATED_SCHEMA,
    )


def generate_function_descriptor(abi_function: dict[str, Any], chain_id: int, address: str) -> Descriptor:
    """Generates a descriptor declaring a single function.  Useful for extending a signer with one function"""
    return Descriptor(
        context=DescriptorContext(
            deployments=(ContractDeployment(chain_id=chain_id, address=address.lower()),),
            abi=(abi_function,),
        ),
        formats={abi_to_signature(abi_function): generate_function_format(abi_function)},
    )
