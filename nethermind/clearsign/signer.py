import asyncio
import logging
from typing import Any

from nethermind.clearsign.config import SignerConfig
from nethermind.clearsign.decoding import CalldataCodec, SignatureRegistry
from nethermind.clearsign.external_source import ExternalSourceAdapter
from nethermind.clearsign.formats import ArgumentMap, FieldFormatter, is_zero_address
from nethermind.clearsign.generate import infer_intent
from nethermind.clearsign.providers import (
    ChainReader,
    NullChainReader,
    NullSourceLookup,
    SourcifyClient,
    VerifiedSourceLookup,
    Web3ChainReader,
    chain_name_to_id,
)
from nethermind.clearsign.registry import CommunityRegistry, DescriptorIndex, ValidationResult
from nethermind.clearsign.security import SecurityRuleEngine
from nethermind.clearsign.types import (
    DecodedField,
    DecodedTransaction,
    DecodingSource,
    Descriptor,
    FieldDefinition,
    FieldFormat,
    FormatMatch,
    RawCall,
    RawDecoded,
    TransactionInput,
    TransactionMetadata,
)

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("clearsign").getChild("signer")


class ClearSigner:
    """
    Decodes unsigned transactions into human-readable descriptions.

    Each call to :meth:`decode` runs the following states in order.  The first state that produces a result wins,
    and no state is retried:

    1. **decode** the calldata with the signature registry.  Calldata shorter than a selector raises
       :class:`~nethermind.clearsign.exceptions.MalformedCalldata`
    2. **registry**: format the call with a custom, community or builtin descriptor (high confidence)
    3. **sourcify**: generate a descriptor from the verified ABI of the destination (high confidence)
    4. **inferred**: format each argument from its type & value (medium confidence when the signature is known,
       low confidence otherwise)

    A ClearSigner owns all of its mutable state: the signature table, the custom descriptor tier and the
    verified source cache.

    .. code-block:: python

        signer = ClearSigner()
        result = signer.decode_sync(
            TransactionInput(to=USDC, data="0xa9059cbb...", chain_id=1)
        )
        result.intent  # "Send tokens"
    """

    config: SignerConfig
    signatures: SignatureRegistry
    codec: CalldataCodec
    index: DescriptorIndex
    formatter: FieldFormatter
    security: SecurityRuleEngine
    external: ExternalSourceAdapter

    def __init__(
        self,
        config: SignerConfig | None = None,
        chain_reader: ChainReader | None = None,
        source_lookup: VerifiedSourceLookup | None = None,
        community: CommunityRegistry | None = None,
        custom: list[Descriptor | dict[str, Any]] | None = None,
        security: SecurityRuleEngine | None = None,
    ):
        """
        :param config: signer configuration.  Defaults to :class:`SignerConfig`
        :param chain_reader: token metadata & reverse name reader.  When None, a web3 reader is created if an RPC
            is configured, otherwise no chain reads are made
        :param source_lookup: verified source lookup.  Defaults to an offline lookup that never matches
        :param community: community registry tier
        :param custom: descriptors to register in the custom tier
        :param security: security rules.  Defaults to the builtin rules
        """
        self.config = config if config is not None else SignerConfig()

        self.signatures = SignatureRegistry()
        self.codec = CalldataCodec(self.signatures)
        self.index = DescriptorIndex(
            self.signatures,
            community=community if self.config.use_community_registry else None,
        )
        self.formatter = FieldFormatter(
            chain_reader if chain_reader is not None else self._default_chain_reader(),
            reverse_name_chains=self.config.reverse_name_chains,
        )
        self.security = security if security is not None else SecurityRuleEngine()
        self.external = ExternalSourceAdapter(
            source_lookup if source_lookup is not None else NullSourceLookup(),
            index=self.index,
            codec=self.codec,
            cache_size=self.config.external_cache_size,
        )

        if custom:
            self.extend(custom)

    def _default_chain_reader(self) -> ChainReader:
        if self.config.rpc_url is None and not self.config.use_public_rpcs:
            return NullChainReader()

        return Web3ChainReader(
            rpc_urls={self.config.chain_id: self.config.rpc_url} if self.config.rpc_url else None,
            use_public_rpcs=self.config.use_public_rpcs,
        )

    @classmethod
    def for_chain(cls, chain: str | int, rpc_url: str | None = None, **config_kwargs) -> "ClearSigner":
        """
        Creates an online signer for a chain, reading token metadata over JSON RPC and fetching verified ABIs
        from Sourcify.  Public RPCs are used when no RPC URL is given.

        :param chain: chain name (``ethereum``, ``arbitrum``...) or chain id
        :param rpc_url: JSON RPC URL for the chain
        """
        chain_id = chain if isinstance(chain, int) else chain_name_to_id(chain)
        config = SignerConfig(chain_id=chain_id, rpc_url=rpc_url, use_public_rpcs=rpc_url is None, **config_kwargs)
        return cls(
            config=config,
            source_lookup=(
                SourcifyClient(config.sourcify_url, timeout=config.request_timeout)
                if config.use_sourcify_fallback
                else None
            ),
        )

    def extend(
        self,
        descriptors: Descriptor | dict[str, Any] | list[Descriptor | dict[str, Any]],
    ) -> list[ValidationResult]:
        """
        Registers custom descriptors, which take precedence over community & builtin descriptors.  Invalid
        descriptors are skipped and reported in the returned validation results.
        """
        return self.index.extend(descriptors)

    def get_stats(self) -> dict[str, Any]:
        """Returns descriptor counts per registry tier"""
        return self.index.get_stats()

    async def decode(self, tx: TransactionInput) -> DecodedTransaction:
        """
        Decodes a transaction into a human-readable description

        :param tx: unsigned transaction
        :raises MalformedCalldata: if the calldata is shorter than a function selector, or is not hex
        """
        raw = self.codec.decode(tx.data)

        match = self.index.find(raw.signature) if raw.signature else None
        if match is not None:
            logger.debug(f"Registry match for {raw.signature}: {match.descriptor.context.id or match.signature_key}")
            return await self._from_descriptor(tx, raw, match, DecodingSource.registry)

        if self.config.use_sourcify_fallback and not is_zero_address(tx.to):
            if resolved := await self.external.resolve(tx):
                external_match, external_raw = resolved
                return await self._from_descriptor(tx, external_raw, external_match, DecodingSource.sourcify)

        return await self._inferred(tx, raw)

    def decode_sync(self, tx: TransactionInput) -> DecodedTransaction:
        """Runs :meth:`decode` in a new event loop"""
        return asyncio.run(self.decode(tx))

    async def _from_descriptor(
        self,
        tx: TransactionInput,
        raw: RawDecoded,
        match: FormatMatch,
        source: DecodingSource,
    ) -> DecodedTransaction:
        descriptor = match.descriptor
        parameters = match.parameters
        if not parameters and raw.signature:
            parameters = descriptor.context.function_parameters(raw.signature)

        args = ArgumentMap(
            raw,
            tx,
            parameters=parameters,
            constants=descriptor.metadata.constants if descriptor.metadata else None,
        )
        fields = [await self.formatter.format_field(field_def, args, descriptor) for field_def in match.format.fields]

        return self._build_result(
            tx,
            raw,
            fields,
            source=source,
            intent=match.format.intent or infer_intent(raw.function_name),
            descriptor=descriptor,
        )

    def infer_field_format(self, abi_type: str, value: Any) -> FieldFormat:
        """Picks a display format for an argument when no descriptor is known"""
        if abi_type == "address":
            return FieldFormat.addressName

        if abi_type.startswith(("uint", "int")) and "[" not in abi_type:
            if isinstance(value, int) and not isinstance(value, bool):
                if self.config.amount_floor <= value <= self.config.amount_ceiling:
                    return FieldFormat.tokenAmount

        return FieldFormat.raw

    async def _inferred(self, tx: TransactionInput, raw: RawDecoded) -> DecodedTransaction:
        args = ArgumentMap(raw, tx)
        fields = []
        for index, (value, abi_type) in enumerate(zip(raw.args, raw.input_types)):
            field_def = FieldDefinition(
                path=f"[{index}]",
                label=f"Param {index + 1}",
                format=self.infer_field_format(abi_type, value),
            )
            fields.append(await self.formatter.format_field(field_def, args))

        return self._build_result(
            tx,
            raw,
            fields,
            source=DecodingSource.inferred if raw.signature else DecodingSource.basic,
            intent=infer_intent(raw.function_name),
        )

    def _build_result(
        self,
        tx: TransactionInput,
        raw: RawDecoded,
        fields: list[DecodedField],
        source: DecodingSource,
        intent: str,
        descriptor: Descriptor | None = None,
    ) -> DecodedTransaction:
        return DecodedTransaction(
            confidence=source.confidence,
            source=source,
            intent=intent,
            function_name=raw.function_name,
            signature=raw.signature or raw.selector,
            fields=tuple(fields),
            warnings=tuple(self.security.check_all(fields, raw)),
            metadata=TransactionMetadata(
                chain_id=tx.chain_id,
                contract_address=tx.to,
                protocol=descriptor.owner if descriptor else None,
                contract_name=descriptor.context.id if descriptor else None,
            ),
            raw=RawCall(selector=raw.selector, args=tuple(raw.args)),
        )
