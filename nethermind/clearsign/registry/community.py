import json
import logging
from pathlib import Path
from typing import Any

from nethermind.clearsign.decoding.signatures import compute_selector
from nethermind.clearsign.exceptions import DecodingError, DescriptorValidationError
from nethermind.clearsign.types import (
    ContractDeployment,
    Descriptor,
    DescriptorContext,
    DescriptorMetadata,
    FieldDefinition,
    FieldFormat,
    FormatMatch,
    FunctionFormat,
)

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("clearsign").getChild("registry").getChild("community")

EMPTY_STATS = {"protocols": 0, "descriptors": 0, "selectors": 0, "addresses": 0}


def _selector_for_key(signature_key: str) -> str | None:
    try:
        return compute_selector(signature_key)
    except DecodingError:
        logger.debug(f"Skipping format key that is neither a selector nor a signature: {signature_key}")
        return None


def _convert_field(field_dict: dict[str, Any]) -> FieldDefinition | None:
    # References to shared definitions without a label of their own are skipped
    if field_dict.get("$ref") and not field_dict.get("label"):
        return None

    format_tag = field_dict.get("format")
    if format_tag is not None and format_tag not in FieldFormat.values():
        logger.debug(f"Field {field_dict.get('path')} uses unsupported format {format_tag}, displaying raw")
        format_tag = None

    return FieldDefinition(
        path=field_dict.get("path") or "",
        label=field_dict.get("label") or field_dict.get("$id") or "Unknown",
        format=FieldFormat(format_tag) if format_tag else FieldFormat.raw,
        params=dict(field_dict.get("params") or {}),
    )


def convert_entry(entry: dict[str, Any]) -> Descriptor:
    """
    Converts a community registry entry into a Descriptor.  Community documents are not validated, so any
    part of an entry that cannot be displayed is skipped rather than rejecting the whole entry.

    :raises DescriptorValidationError: if the entry structure cannot be read at all
    """
    try:
        return _convert_entry(entry)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise DescriptorValidationError(f"Malformed community entry: {e}") from e


def _convert_entry(entry: dict[str, Any]) -> Descriptor:
    formats = {}
    for signature_key, format_dict in ((entry.get("display") or {}).get("formats") or {}).items():
        if not isinstance(format_dict, dict):
            logger.debug(f"Skipping community format {signature_key}: not an object")
            continue
        intent = format_dict.get("intent") or format_dict.get("$id")
        formats[signature_key] = FunctionFormat(
            intent=intent if isinstance(intent, str) else None,
            fields=tuple(
                converted
                for converted in (_convert_field(f) for f in format_dict.get("fields") or [] if isinstance(f, dict))
                if converted is not None
            ),
            required=tuple(format_dict["required"]) if format_dict.get("required") else None,
            excluded=tuple(format_dict["excluded"]) if format_dict.get("excluded") else None,
        )

    context = entry.get("context") or {}
    metadata = entry.get("metadata")
    return Descriptor(
        context=DescriptorContext(
            id=context.get("$id"),
            deployments=tuple(
                ContractDeployment(chain_id=d["chainId"], address=d["address"])
                for d in (context.get("contract") or {}).get("deployments") or []
                if isinstance(d, dict) and d.get("chainId") and d.get("address")
            ),
        ),
        formats=formats,
        metadata=(
            DescriptorMetadata(
                owner=metadata.get("owner"),
                info=metadata.get("info"),
                constants=metadata.get("constants"),
                enums=metadata.get("enums"),
            )
            if isinstance(metadata, dict) and metadata
            else None
        ),
    )


class CommunityRegistry:
    """
    Read-only tier of community maintained descriptors.

    Wraps a pre-built registry bundle with the following layout, where descriptor entries are kept in
    their raw JSON form and are converted lazily on lookup:

    .. code-block:: json

        {
            "descriptors": {"d0": {"context": {...}, "metadata": {...}, "display": {...}}},
            "bySelector": {"0xa9059cbb": ["d0"]},
            "byAddress": {"1:0xabc...": ["d0"]},
            "stats": {"protocols": 1, "descriptors": 1, "selectors": 1, "addresses": 1}
        }

    Bundle building & publishing is handled outside this package.  An empty registry is used by default.
    """

    bundle: dict[str, Any]
    """ Raw registry bundle """

    def __init__(self, bundle: dict[str, Any] | None = None):
        self.bundle = bundle or {}

    @classmethod
    def from_file(cls, path: str | Path) -> "CommunityRegistry":
        """Loads a registry bundle from a JSON file"""
        with open(path, "r", encoding="utf-8") as bundle_file:
            return cls(json.load(bundle_file))

    @classmethod
    def from_descriptors(cls, descriptors: list[dict[str, Any]], protocol: str = "community") -> "CommunityRegistry":
        """
        Builds a registry bundle from descriptor documents, indexing every format key by selector and every
        deployment by ``chainId:address``
        """
        bundle: dict[str, Any] = {"descriptors": {}, "bySelector": {}, "byAddress": {}}

        for index, descriptor in enumerate(descriptors):
            entry_id = f"d{index}"
            bundle["descriptors"][entry_id] = {"protocol": protocol, **descriptor}

            for signature_key in ((descriptor.get("display") or {}).get("formats") or {}).keys():
                selector = _selector_for_key(signature_key)
                if selector:
                    bundle["bySelector"].setdefault(selector, []).append(entry_id)

            for deployment in ((descriptor.get("context") or {}).get("contract") or {}).get("deployments") or []:
                if isinstance(deployment, dict) and deployment.get("chainId") and deployment.get("address"):
                    key = f"{deployment['chainId']}:{deployment['address'].lower()}"
                    bundle["byAddress"].setdefault(key, []).append(entry_id)

        bundle["stats"] = {
            "protocols": len({entry.get("protocol") for entry in bundle["descriptors"].values()}),
            "descriptors": len(bundle["descriptors"]),
            "selectors": len(bundle["bySelector"]),
            "addresses": len(bundle["byAddress"]),
        }
        return cls(bundle)

    def _get_descriptor(self, entry_id: str) -> Descriptor | None:
        entry = self.bundle.get("descriptors", {}).get(entry_id)
        if not isinstance(entry, dict) or not entry:
            return None

        try:
            return convert_entry(entry)
        except DescriptorValidationError as e:
            logger.debug(f"Skipping community entry {entry_id}: {e}")
            return None

    def find_by_selector(self, selector: str) -> FormatMatch | None:
        """Returns the first community format declared for a selector.  Malformed entries are skipped"""
        normalized = selector.lower()
        for entry_id in self.bundle.get("bySelector", {}).get(normalized, []):
            descriptor = self._get_descriptor(entry_id)
            if descriptor is None:
                continue

            for signature_key, function_format in descriptor.formats.items():
                if _selector_for_key(signature_key) == normalized:
                    return FormatMatch(descriptor=descriptor, format=function_format, signature_key=signature_key)
        return None

    def find_by_address(self, address: str, chain_id: int) -> Descriptor | None:
        """Returns the first community descriptor deployed at an address"""
        for entry_id in self.bundle.get("byAddress", {}).get(f"{chain_id}:{address.lower()}", []):
            if descriptor := self._get_descriptor(entry_id):
                return descriptor
        return None

    def get_all(self) -> list[Descriptor]:
        """Converts every entry of the bundle, skipping malformed entries"""
        descriptors = (self._get_descriptor(entry_id) for entry_id in self.bundle.get("descriptors", {}))
        return [descriptor for descriptor in descriptors if descriptor is not None]

    def get_stats(self) -> dict[str, int]:
        """Returns the bundle statistics"""
        return dict(self.bundle.get("stats") or EMPTY_STATS)
