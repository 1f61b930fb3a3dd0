import logging
from decimal import Decimal
from typing import Any

from eth_utils import to_checksum_address

from nethermind.clearsign.exceptions import DecodingError, MalformedCalldata
from nethermind.clearsign.types import RawDecoded, UndecodedArgument

from .abi_types import WORD_SIZE, AbiKind, AbiType, parse_signature_types
from .signatures import SignatureRegistry

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("clearsign").getChild("decoding").getChild("calldata")

SELECTOR_SIZE = 4


class AbiDecodeError(DecodingError):
    """Raised internally when a single parameter cannot be decoded from its head/tail region"""


def calldata_to_bytes(calldata: str | bytes) -> bytes:
    """
    Converts hex calldata into bytes, validating that a 4 byte selector is present.

    :raises MalformedCalldata: if the payload is shorter than a selector or is not valid hex
    """
    if isinstance(calldata, (bytes, bytearray)):
        data = bytes(calldata)
    else:
        hex_str = calldata[2:] if calldata[:2].lower() == "0x" else calldata
        if len(hex_str) < SELECTOR_SIZE * 2:
            raise MalformedCalldata(f"Invalid calldata: too short ({calldata!r})")
        try:
            data = bytes.fromhex(hex_str)
        except ValueError as e:
            raise MalformedCalldata(f"Invalid calldata: not a hex string ({calldata!r})") from e

    if len(data) < SELECTOR_SIZE:
        raise MalformedCalldata(f"Invalid calldata: too short ({len(data)} bytes)")
    return data


def extract_selector(calldata: str | bytes) -> str:
    """
    Extracts the lower-cased 0x prefixed function selector from calldata

    >>> extract_selector("0xA9059CBB000000000000000000000000d8da6bf26964af9d7eed9e03e53415d37aa96045")
    '0xa9059cbb'
    """
    return "0x" + calldata_to_bytes(calldata)[:SELECTOR_SIZE].hex()


def _read_word(data: bytes, offset: int) -> bytes:
    if offset < 0 or offset + WORD_SIZE > len(data):
        raise AbiDecodeError(f"Word at offset {offset} exceeds data length {len(data)}")
    return data[offset : offset + WORD_SIZE]


def _read_uint(data: bytes, offset: int) -> int:
    return int.from_bytes(_read_word(data, offset), "big")


def _scale_fixed(raw_value: int, decimals: int) -> Decimal:
    """Shifts the decimal point of a fixed point value.  String construction keeps every digit of 256 bit values"""
    return Decimal(f"{raw_value}e-{decimals}")


def _read_length(data: bytes, offset: int, element_size: int) -> int:
    """Reads a length word, rejecting lengths that could not fit in the remaining data"""
    length = _read_uint(data, offset)
    if length * element_size > len(data) - offset - WORD_SIZE:
        raise AbiDecodeError(f"Length {length} at offset {offset} exceeds data length {len(data)}")
    return length


class CalldataCodec:
    """
    Decodes calldata into a :class:`~nethermind.clearsign.types.RawDecoded` using the selectors known to a
    :class:`~nethermind.clearsign.decoding.signatures.SignatureRegistry`.

    Parameters are decoded by walking cached ABI type trees over the parameter block.  Each top level parameter is
    decoded independently, so a malformed offset or truncated tail only affects the parameter that points to it.
    """

    signatures: SignatureRegistry

    def __init__(self, signatures: SignatureRegistry | None = None):
        self.signatures = signatures if signatures is not None else SignatureRegistry()

    def decode(self, calldata: str | bytes) -> RawDecoded:
        """
        Decodes calldata bytes or hex.

        Unknown selectors are not an error.  The result has no function name or signature, and a single ``bytes``
        argument holding everything after the selector.

        :param calldata: 0x prefixed hex string, or raw bytes
        :raises MalformedCalldata: if calldata is shorter than a 4 byte selector
        """
        data = calldata_to_bytes(calldata)
        selector = "0x" + data[:SELECTOR_SIZE].hex()
        params_data = data[SELECTOR_SIZE:]

        function_signature = self.signatures.get_by_selector(selector)
        if function_signature is None:
            logger.debug(f"No signature registered for selector {selector}")
            return RawDecoded(
                selector=selector,
                signature=None,
                function_name=None,
                args=[params_data],
                input_types=["bytes"],
            )

        types = parse_signature_types(function_signature.signature)
        return RawDecoded(
            selector=selector,
            signature=function_signature.signature,
            function_name=function_signature.name,
            args=self.decode_parameters(types, params_data, function_signature.signature),
            input_types=[t.type_str for t in types],
            parameters=list(function_signature.parameters),
        )

    def decode_parameters(self, types: tuple[AbiType, ...], data: bytes, signature: str = "") -> list[Any]:
        """
        Decodes a parameter block.  Parameters that fail to decode are returned as
        :class:`~nethermind.clearsign.types.UndecodedArgument` holding the bytes of their head slot.
        """
        values: list[Any] = []
        head = 0
        for index, typ in enumerate(types):
            try:
                values.append(self._decode_head_item(typ, data, base=0, head=head))
            except AbiDecodeError as e:
                logger.debug(f"Failed to decode parameter {index} ({typ.type_str}) of {signature}: {e}")
                values.append(UndecodedArgument(data=data[head : head + typ.head_size]))
            head += typ.head_size
        return values

    def _decode_head_item(self, typ: AbiType, data: bytes, base: int, head: int) -> Any:
        """Decodes an item whose head slot is at ``head``.  Dynamic offsets are relative to ``base``"""
        if typ.dynamic:
            offset = _read_uint(data, head)
            if offset > len(data):
                raise AbiDecodeError(f"Offset {offset} for {typ.type_str} exceeds data length {len(data)}")
            return self._decode_tail_item(typ, data, base + offset)
        return self._decode_static(typ, data, head)

    def _decode_sequence(self, types: tuple[AbiType, ...] | list[AbiType], data: bytes, base: int) -> list[Any]:
        values, head = [], base
        for typ in types:
            values.append(self._decode_head_item(typ, data, base=base, head=head))
            head += typ.head_size
        return values

    def _decode_tail_item(self, typ: AbiType, data: bytes, start: int) -> Any:
        match typ.kind:
            case AbiKind.bytes | AbiKind.string:
                length = _read_length(data, start, element_size=1)
                content = data[start + WORD_SIZE : start + WORD_SIZE + length]
                if typ.kind == AbiKind.string:
                    return content.decode("utf-8", errors="replace")
                return content

            case AbiKind.array if typ.length is None:
                assert typ.item is not None
                length = _read_length(data, start, element_size=typ.item.head_size)
                return self._decode_sequence([typ.item] * length, data, start + WORD_SIZE)

            case AbiKind.array:
                assert typ.item is not None and typ.length is not None
                return self._decode_sequence([typ.item] * typ.length, data, start)

            case AbiKind.tuple:
                return tuple(self._decode_sequence(typ.components, data, start))

            case _:
                raise AbiDecodeError(f"Type {typ.type_str} is not dynamic")

    def _decode_static(self, typ: AbiType, data: bytes, offset: int) -> Any:
        match typ.kind:
            case AbiKind.tuple:
                return tuple(self._decode_sequence(typ.components, data, offset))

            case AbiKind.array:
                assert typ.item is not None and typ.length is not None
                return self._decode_sequence([typ.item] * typ.length, data, offset)

            case AbiKind.address:
                return to_checksum_address(_read_word(data, offset)[12:])

            case AbiKind.uint:
                return _read_uint(data, offset)

            case AbiKind.int:
                return int.from_bytes(_read_word(data, offset), "big", signed=True)

            case AbiKind.bool:
                return _read_uint(data, offset) != 0

            case AbiKind.fixed_bytes:
                return _read_word(data, offset)[: typ.size]

            case AbiKind.function:
                return _read_word(data, offset)[:24]

            case AbiKind.ufixed:
                return _scale_fixed(_read_uint(data, offset), typ.size)

            case AbiKind.fixed:
                return _scale_fixed(int.from_bytes(_read_word(data, offset), "big", signed=True), typ.size)

            case _:
                raise AbiDecodeError(f"Type {typ.type_str} is not static")
