import logging
from typing import Any, Sequence

from nethermind.clearsign.decoding.signatures import (
    SignatureRegistry,
    build_signature,
    canonicalize,
    compute_selector,
    is_selector,
)
from nethermind.clearsign.exceptions import DecodingError, DescriptorValidationError
from nethermind.clearsign.types import Descriptor, FormatMatch, FunctionFormat

from .builtin import BUILTIN_DESCRIPTORS
from .community import CommunityRegistry
from .validation import ValidationIssue, ValidationResult, validate_descriptor

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("clearsign").getChild("registry")


def _build_match(descriptor: Descriptor, signature_key: str, function_format: FunctionFormat) -> FormatMatch:
    parameters = None
    if not is_selector(signature_key):
        named_params = list(build_signature(signature_key).parameters)
        if any(p.name for p in named_params):
            parameters = named_params

    return FormatMatch(
        descriptor=descriptor,
        format=function_format,
        signature_key=signature_key,
        parameters=parameters,
    )


class DescriptorIndex:
    """
    Resolves function signatures and selectors to descriptor formats across three precedence tiers.

    1. **custom** descriptors registered at runtime with :meth:`extend`
    2. **community** descriptors from a :class:`~nethermind.clearsign.registry.community.CommunityRegistry`
       (selector keyed)
    3. **builtin** descriptors for token standards, in declaration order

    The first tier with a match wins.  Tiers are never merged, so a custom descriptor for
    ``transfer(address,uint256)`` fully replaces the builtin ERC20 format.
    """

    signatures: SignatureRegistry
    """ Signature registry that receives the signatures of every custom descriptor """

    community: CommunityRegistry | None
    """ Community tier.  Disabled when None """

    builtin: list[Descriptor]
    """ Builtin descriptors in precedence order """

    custom_descriptors: list[Descriptor]
    """ Custom descriptors in registration order """

    custom_index: dict[str, FormatMatch]
    """ Custom formats keyed by canonical signature and by selector """

    builtin_index: dict[str, FormatMatch]
    """ Builtin formats keyed by canonical signature and by selector.  First declaration wins """

    def __init__(
        self,
        signatures: SignatureRegistry,
        community: CommunityRegistry | None = None,
        builtin: list[Descriptor] | None = None,
    ):
        self.signatures = signatures
        self.community = community
        self.builtin = list(BUILTIN_DESCRIPTORS if builtin is None else builtin)
        self.custom_descriptors = []
        self.custom_index = {}
        self.builtin_index = {}

        for descriptor in self.builtin:
            for signature_key, function_format in descriptor.formats.items():
                match = _build_match(descriptor, signature_key, function_format)
                self.builtin_index.setdefault(canonicalize(signature_key), match)
                self.builtin_index.setdefault(compute_selector(signature_key), match)

    def find(self, signature_or_selector: str) -> FormatMatch | None:
        """
        Resolves a canonical signature, a named signature, or a 4 byte selector to a descriptor format.

        :param signature_or_selector: ``transfer(address,uint256)``, ``transfer(address to, uint256 amount)``
            or ``0xa9059cbb``
        :return: :class:`~nethermind.clearsign.types.FormatMatch`, or None if no tier declares the function
        """
        try:
            normalized = canonicalize(signature_or_selector)
        except DecodingError:
            logger.debug(f"Cannot resolve malformed signature {signature_or_selector}")
            return None

        if custom := self.custom_index.get(normalized):
            return custom

        if self.community is not None:
            selector = normalized if is_selector(normalized) else compute_selector(normalized)
            if community := self.community.find_by_selector(selector):
                return community

        return self.builtin_index.get(normalized)

    def find_by_address(self, address: str, chain_id: int) -> Descriptor | None:
        """
        Returns the descriptor deployed at an address, checking the tiers in the same precedence order as
        :meth:`find`.  Address and signature resolution are independent lookups.
        """
        for descriptor in self.custom_descriptors:
            if descriptor.is_deployed_at(address, chain_id):
                return descriptor

        if self.community is not None:
            if community := self.community.find_by_address(address, chain_id):
                return community

        for descriptor in self.builtin:
            if descriptor.is_deployed_at(address, chain_id):
                return descriptor

        return None

    def extend(
        self,
        descriptors: Descriptor | dict[str, Any] | Sequence[Descriptor | dict[str, Any]],
    ) -> list[ValidationResult]:
        """
        Validates and registers custom descriptors.  Invalid descriptors are skipped, and reported in the
        returned validation results.  Every non-selector format key is also registered with the signature
        registry so matching calldata can be decoded.

        Registering an identical descriptor twice stores it once, and resolves identically.

        :param descriptors: descriptor, or list of descriptors, as documents or Descriptor instances
        :return: one :class:`ValidationResult` per descriptor, in input order
        """
        to_add = list(descriptors) if isinstance(descriptors, (list, tuple)) else [descriptors]
        results: list[ValidationResult] = []

        for index, descriptor_input in enumerate(to_add):
            validation = validate_descriptor(descriptor_input)
            if validation.valid:
                try:
                    descriptor = (
                        descriptor_input
                        if isinstance(descriptor_input, Descriptor)
                        else Descriptor.from_dict(descriptor_input)
                    )
                except DescriptorValidationError as e:
                    validation = ValidationResult(valid=False, errors=[ValidationIssue("", str(e))])

            results.append(validation)
            if not validation.valid:
                logger.warning(f"Invalid descriptor at index {index}, skipping:\n{validation.summary()}")
                continue

            self._register(descriptor)

        return results

    def _register(self, descriptor: Descriptor):
        if descriptor not in self.custom_descriptors:
            self.custom_descriptors.append(descriptor)

        for signature_key, function_format in descriptor.formats.items():
            try:
                match = _build_match(descriptor, signature_key, function_format)
                canonical = canonicalize(signature_key)

                if not is_selector(signature_key):
                    registered = self.signatures.register(signature_key)
                    self.custom_index[registered.selector] = match
                self.custom_index[canonical] = match
            except DecodingError as e:
                logger.warning(f"Skipping format {signature_key} of descriptor {descriptor.context.id}: {e}")
                continue

            logger.debug(f"Indexed custom format {signature_key}")

        logger.info(
            f"Registered descriptor {descriptor.context.id or descriptor.owner or ''} with "
            f"{len(descriptor.formats)} formats"
        )

    def get_all(self) -> list[Descriptor]:
        """Returns every descriptor in precedence order"""
        community = self.community.get_all() if self.community is not None else []
        return [*self.custom_descriptors, *community, *self.builtin]

    def get_stats(self) -> dict[str, Any]:
        """Returns the number of descriptors in each tier"""
        return {
            "custom": len(self.custom_descriptors),
            "builtin": len(self.builtin),
            "external": (
                self.community.get_stats()
                if self.community is not None
                else {"protocols": 0, "descriptors": 0, "selectors": 0, "addresses": 0}
            ),
        }
