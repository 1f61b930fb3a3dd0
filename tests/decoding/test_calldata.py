from decimal import Decimal

import pytest
from eth_abi import encode

from nethermind.clearsign.decoding import CalldataCodec, SignatureRegistry, compute_selector, extract_selector
from nethermind.clearsign.exceptions import DecodingError, MalformedCalldata
from nethermind.clearsign.types import UndecodedArgument
from tests.utils import USDC, VITALIK, encode_call, expand_to_decimals, uint_max


def test_decode_transfer(codec):
    calldata = encode_call("transfer(address,uint256)", [VITALIK, 100_000_000])

    decoded = codec.decode(calldata)

    assert decoded.selector == "0xa9059cbb"
    assert decoded.signature == "transfer(address,uint256)"
    assert decoded.function_name == "transfer"
    assert decoded.args == [VITALIK, 100_000_000]
    assert decoded.input_types == ["address", "uint256"]
    assert [p.name for p in decoded.parameters] == ["to", "amount"]


def test_decode_accepts_bytes_and_uppercase_hex(codec):
    calldata = encode_call("approve(address,uint256)", [USDC, uint_max(256)])

    from_bytes = codec.decode(bytes.fromhex(calldata[2:]))
    from_upper = codec.decode("0x" + calldata[2:].upper())

    assert from_bytes.args == from_upper.args == [USDC, uint_max(256)]


def test_unknown_selector_returns_remaining_bytes(codec):
    tail = "00" * 31 + "2a"

    decoded = codec.decode("0xdeadbeef" + tail)

    assert decoded.selector == "0xdeadbeef"
    assert decoded.signature is None
    assert decoded.function_name is None
    assert decoded.args == [bytes.fromhex(tail)]
    assert decoded.input_types == ["bytes"]


def test_selector_only_calldata(codec):
    decoded = codec.decode("0xd0e30db0")

    assert decoded.signature == "deposit()"
    assert decoded.args == []


@pytest.mark.parametrize("calldata", ["0x", "0x1234", "0xa9059c", "", "0xzzzzzzzz", b"\x12\x34"])
def test_malformed_calldata(codec, calldata):
    with pytest.raises(MalformedCalldata):
        codec.decode(calldata)


def test_malformed_calldata_is_a_decoding_error(codec):
    with pytest.raises(DecodingError):
        codec.decode("0x12")


def test_extract_selector():
    assert extract_selector("0xA9059CBB" + "00" * 64) == "0xa9059cbb"

    with pytest.raises(MalformedCalldata):
        extract_selector("0x1234")


def test_decode_dynamic_parameters():
    registry = SignatureRegistry(builtin=[])
    registry.register("setProfile(string name, bytes avatar, uint256[] scores, address[2] owners)")
    codec = CalldataCodec(registry)

    calldata = encode_call(
        "setProfile(string,bytes,uint256[],address[2])",
        ["vitalik.eth", b"\x01\x02\x03", [1, 2, 3], [VITALIK, USDC]],
    )
    decoded = codec.decode(calldata)

    assert decoded.args == ["vitalik.eth", b"\x01\x02\x03", [1, 2, 3], [VITALIK, USDC]]
    assert decoded.input_types == ["string", "bytes", "uint256[]", "address[2]"]


def test_decode_nested_tuples():
    registry = SignatureRegistry(builtin=[])
    registry.register("route((address token, uint256 amount)[] hops, (string memo, bytes32 salt) extra)")
    codec = CalldataCodec(registry)

    salt = bytes.fromhex("ab" * 32)
    calldata = encode_call(
        "route((address,uint256)[],(string,bytes32))",
        [[(USDC, 5), (VITALIK, 6)], ("hello", salt)],
    )
    decoded = codec.decode(calldata)

    assert decoded.args == [[(USDC, 5), (VITALIK, 6)], ("hello", salt)]
    assert decoded.parameters[0].components[1].name == "amount"


def test_decode_signed_and_boolean_values():
    registry = SignatureRegistry(builtin=[])
    registry.register("adjust(int256 delta, int8 tick, bool enabled, bytes4 tag)")
    codec = CalldataCodec(registry)

    calldata = encode_call("adjust(int256,int8,bool,bytes4)", [-expand_to_decimals(5), -7, True, b"\xca\xfe\xba\xbe"])
    decoded = codec.decode(calldata)

    assert decoded.args == [-expand_to_decimals(5), -7, True, b"\xca\xfe\xba\xbe"]


def test_decode_fixed_point():
    registry = SignatureRegistry(builtin=[])
    registry.register("setRate(ufixed128x18 rate)")
    codec = CalldataCodec(registry)

    raw_rate = (15 * 10**17).to_bytes(32, "big")
    decoded = codec.decode(compute_selector("setRate(ufixed128x18)") + raw_rate.hex())

    assert decoded.args == [Decimal("1.5")]


def test_decode_fixed_point_keeps_full_precision():
    registry = SignatureRegistry(builtin=[])
    registry.register("setRate(ufixed256x18 rate)")
    codec = CalldataCodec(registry)
    raw_rate = uint_max(256)

    decoded = codec.decode(compute_selector("setRate(ufixed256x18)") + raw_rate.to_bytes(32, "big").hex())

    assert str(decoded.args[0]) == f"{str(raw_rate)[:-18]}.{str(raw_rate)[-18:]}"


def test_out_of_range_offset_only_affects_its_parameter():
    registry = SignatureRegistry(builtin=[])
    registry.register("setName(string name, uint256 amount)")
    codec = CalldataCodec(registry)

    bad_offset = (2**32).to_bytes(32, "big")
    amount = (1234).to_bytes(32, "big")
    decoded = codec.decode(compute_selector("setName(string,uint256)") + (bad_offset + amount).hex())

    assert decoded.args[0] == UndecodedArgument(bad_offset)
    assert decoded.args[1] == 1234


def test_truncated_tail_is_undecoded():
    registry = SignatureRegistry(builtin=[])
    registry.register("store(bytes data)")
    codec = CalldataCodec(registry)

    payload = encode(["bytes"], [b"\xff" * 64])
    # Drop the last word of the byte string
    decoded = codec.decode(compute_selector("store(bytes)") + payload[:-32].hex())

    assert isinstance(decoded.args[0], UndecodedArgument)
    assert decoded.args[0].data == payload[:32]


def test_missing_static_parameter_is_undecoded(codec):
    calldata = encode_call("transfer(address,uint256)", [VITALIK, 1])

    decoded = codec.decode(calldata[:-64])

    assert decoded.args[0] == VITALIK
    assert decoded.args[1] == UndecodedArgument(b"")
