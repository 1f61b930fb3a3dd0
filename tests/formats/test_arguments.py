import pytest

from nethermind.clearsign.decoding import CalldataCodec, SignatureRegistry
from nethermind.clearsign.formats import MISSING, ArgumentMap, parse_transaction_value
from nethermind.clearsign.types import TransactionInput
from tests.utils import USDC, VITALIK, WETH, encode_call

ROUTE_SIGNATURE = "route((address token, uint256 amount)[] hops, (string memo, uint256 deadline) extra, uint256 fee)"


def _decode(signature: str, args: list):
    registry = SignatureRegistry(builtin=[])
    registry.register(signature)
    return CalldataCodec(registry).decode(encode_call(signature, args))


@pytest.fixture(name="route_args")
def fixture_route_args() -> ArgumentMap:
    raw = _decode(ROUTE_SIGNATURE, [[(USDC, 5), (WETH, 6)], ("hello", 1_700_000_000), 30])
    tx = TransactionInput(to=USDC, data="0x", chain_id=1, value="0x10", sender=VITALIK)
    return ArgumentMap(raw, tx, constants={"maxFee": 100})


@pytest.mark.parametrize(
    "path, expected",
    [
        ("fee", 30),
        ("[2]", 30),
        ("2", 30),
        ("#.fee", 30),
        ("extra.memo", "hello"),
        ("[1].[1]", 1_700_000_000),
        ("[1].deadline", 1_700_000_000),
        ("hops.[1].token", WETH),
        ("hops[0].amount", 5),
        ("[0][1][1]", 6),
        ("@.to", USDC),
        ("@.from", VITALIK),
        ("@.value", 16),
        ("$.metadata.constants.maxFee", 100),
    ],
)
def test_resolve(route_args, path, expected):
    assert route_args.resolve(path) == expected


@pytest.mark.parametrize(
    "path",
    ["[3]", "unknown", "fee.amount", "hops.[2].token", "extra.salt", "$.metadata.constants.minFee", "", "."],
)
def test_unresolved_paths(route_args, path):
    assert route_args.resolve(path) is MISSING


def test_transaction_values_may_be_missing():
    raw = _decode("withdraw(uint256 wad)", [1])
    args = ArgumentMap(raw, TransactionInput(to=WETH, data="0x", chain_id=1))

    assert args.resolve("@.from") is MISSING
    assert args.resolve("@.value") is MISSING
    assert args.resolve("wad") == 1


def test_parameters_override_decoded_names():
    raw = _decode("transfer(address,uint256)", [VITALIK, 7])
    tx = TransactionInput(to=USDC, data="0x", chain_id=1)

    assert ArgumentMap(raw, tx).resolve("amount") is MISSING

    named = ArgumentMap(raw, tx, parameters=_decode("transfer(address dst, uint256 wad)", [VITALIK, 7]).parameters)
    assert named.resolve("wad") == 7
    assert named.resolve("dst") == VITALIK


@pytest.mark.parametrize(
    "value, expected",
    [(None, None), (1000, 1000), ("1000", 1000), ("0xde0b6b3a7640000", 10**18), ("0X10", 16)],
)
def test_parse_transaction_value(value, expected):
    assert parse_transaction_value(value) == expected


@pytest.mark.parametrize("value", ["1.5", "0xzz", 1.5])
def test_malformed_transaction_value_is_missing(value):
    raw = _decode("deposit()", [])
    args = ArgumentMap(raw, TransactionInput(to=WETH, data="0x", chain_id=1, value=value))

    assert args.resolve("@.value") is MISSING
