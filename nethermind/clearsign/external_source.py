import logging
from collections import OrderedDict

from nethermind.clearsign.decoding import CalldataCodec, canonicalize
from nethermind.clearsign.exceptions import DecodingError
from nethermind.clearsign.generate import generate_descriptor
from nethermind.clearsign.providers import VerifiedSourceLookup
from nethermind.clearsign.registry import DescriptorIndex
from nethermind.clearsign.types import Descriptor, FormatMatch, RawDecoded, TransactionInput

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("clearsign").getChild("external")


def find_format(descriptor: Descriptor, raw: RawDecoded) -> FormatMatch | None:
    """Returns the format of a descriptor declaring the decoded function, matching on canonical signature"""
    if raw.signature is None:
        return None

    for signature_key, function_format in descriptor.formats.items():
        try:
            if canonicalize(signature_key) != raw.signature:
                continue
        except DecodingError:
            continue

        return FormatMatch(
            descriptor=descriptor,
            format=function_format,
            signature_key=signature_key,
            parameters=descriptor.context.function_parameters(raw.signature),
        )
    return None


class ExternalSourceAdapter:
    """
    Synthesizes descriptors for contracts with verified source code.

    On a miss in every registry tier, the verified ABI of the destination contract is fetched, a descriptor is
    generated from it and registered in the descriptor index, and the calldata is decoded again with the newly
    registered signatures.

    Results are cached per ``(chain_id, address)``.  Unverified contracts and failed lookups are cached as
    negative results, and are never retried for the lifetime of the adapter.
    """

    lookup: VerifiedSourceLookup
    index: DescriptorIndex
    codec: CalldataCodec

    cache_size: int | None
    """ Maximum number of cached contracts.  Unbounded when None """

    cache: dict[tuple[int, str], Descriptor | None]

    def __init__(
        self,
        lookup: VerifiedSourceLookup,
        index: DescriptorIndex,
        codec: CalldataCodec,
        cache_size: int | None = None,
    ):
        self.lookup = lookup
        self.index = index
        self.codec = codec
        self.cache_size = cache_size
        self.cache = OrderedDict() if cache_size is not None else {}

    def _cache_get(self, key: tuple[int, str]) -> tuple[bool, Descriptor | None]:
        if key not in self.cache:
            return False, None
        if isinstance(self.cache, OrderedDict):
            self.cache.move_to_end(key)
        return True, self.cache[key]

    def _cache_set(self, key: tuple[int, str], descriptor: Descriptor | None):
        self.cache[key] = descriptor
        if isinstance(self.cache, OrderedDict) and self.cache_size is not None:
            self.cache.move_to_end(key)
            while len(self.cache) > self.cache_size:
                self.cache.popitem(last=False)

    async def resolve(self, tx: TransactionInput) -> tuple[FormatMatch, RawDecoded] | None:
        """
        Resolves a transaction through the verified source of its destination.

        :return: the matched format and the calldata decoded with the verified signatures, or None
        """
        cache_key = (tx.chain_id, tx.to.lower())

        hit, cached = self._cache_get(cache_key)
        if hit:
            if cached is None:
                return None
            raw = self.codec.decode(tx.data)
            match = find_format(cached, raw)
            return (match, raw) if match else None

        descriptor = await self._fetch_descriptor(tx)
        self._cache_set(cache_key, descriptor)
        if descriptor is None:
            return None

        raw = self.codec.decode(tx.data)
        match = find_format(descriptor, raw)
        return (match, raw) if match else None

    async def _fetch_descriptor(self, tx: TransactionInput) -> Descriptor | None:
        try:
            source = await self.lookup.fetch(tx.chain_id, tx.to)
            if not source.verified or not source.abi:
                logger.debug(f"No verified source for {tx.to} on chain {tx.chain_id}")
                return None

            descriptor = generate_descriptor(
                chain_id=tx.chain_id,
                address=tx.to,
                abi=source.abi,
                owner=source.name,
            )
            results = self.index.extend([descriptor])
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.warning(f"Verified source lookup failed for {tx.to} on chain {tx.chain_id}: {e}")
            return None

        if not results[0].valid:
            logger.debug(f"Generated descriptor for {tx.to} is not usable: {results[0].summary()}")
            return None

        logger.info(f"Generated descriptor for {tx.to} with {len(descriptor.formats)} formats")
        return descriptor
