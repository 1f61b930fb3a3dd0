import pytest

from nethermind.clearsign.generate import (
    generate_descriptor,
    generate_function_descriptor,
    infer_format,
    infer_intent,
    infer_label,
)
from nethermind.clearsign.registry import validate_descriptor
from nethermind.clearsign.types import FieldFormat
from tests.utils import UNISWAP_V3_ROUTER

ROUTER_ABI = [
    {
        "type": "function",
        "name": "exactInputSingle",
        "stateMutability": "payable",
        "inputs": [
            {
                "name": "params",
                "type": "tuple",
                "components": [
                    {"name": "tokenIn", "type": "address"},
                    {"name": "tokenOut", "type": "address"},
                    {"name": "recipient", "type": "address"},
                    {"name": "deadline", "type": "uint256"},
                    {"name": "amountIn", "type": "uint256"},
                ],
            }
        ],
        "outputs": [{"name": "amountOut", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "multicall",
        "stateMutability": "payable",
        "inputs": [{"name": "data", "type": "bytes[]"}],
    },
    {
        "type": "function",
        "name": "stake",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "amount", "type": "uint256"}, {"name": "duration", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "balanceOf",
        "stateMutability": "view",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {"type": "event", "name": "Staked", "inputs": [{"name": "amount", "type": "uint256", "indexed": False}]},
]


@pytest.mark.parametrize(
    "name, abi_type, expected_format, expected_params",
    [
        ("recipient", "address", FieldFormat.addressName, {"types": ["eoa", "contract"]}),
        ("tokenIn", "address", FieldFormat.addressName, {"types": ["token"]}),
        ("spender", "address", FieldFormat.addressName, {"types": ["contract"]}),
        ("collection", "address", FieldFormat.addressName, {"types": ["nft"]}),
        ("pool", "address", FieldFormat.addressName, None),
        ("amountIn", "uint256", FieldFormat.tokenAmount, None),
        ("lockDuration", "uint64", FieldFormat.duration, None),
        ("deadline", "uint256", FieldFormat.date, {"encoding": "timestamp"}),
        ("startBlock", "uint256", FieldFormat.date, {"encoding": "blockheight"}),
        ("nonce", "uint256", FieldFormat.raw, None),
        ("delta", "int256", FieldFormat.tokenAmount, None),
        ("tick", "int24", FieldFormat.raw, None),
        ("amounts", "uint256[]", FieldFormat.raw, None),
        ("params", "tuple", FieldFormat.raw, None),
        ("path", "bytes", FieldFormat.raw, None),
        ("approved", "bool", FieldFormat.raw, None),
    ],
)
def test_infer_format(name, abi_type, expected_format, expected_params):
    inferred = infer_format(name, abi_type)

    assert inferred.format == expected_format
    assert inferred.params == expected_params


@pytest.mark.parametrize(
    "name, label",
    [
        ("amountOutMinimum", "Amount Out Minimum"),
        ("recv_addr", "Receiver Address"),
        ("tokenId", "Token ID"),
        ("to", "To"),
        ("", "Value"),
    ],
)
def test_infer_label(name, label):
    assert infer_label(name) == label


@pytest.mark.parametrize(
    "function_name, intent",
    [
        ("swapExactTokensForTokens", "Swap tokens"),
        ("addLiquidityETH", "Add liquidity"),
        ("claimRewards", "Claim rewards"),
        ("setApprovalForAll", "Set approval for all"),
        ("unstake", "Unstake"),
        ("unwrapWETH9", "Unwrap"),
        ("unlockTokens", "Unlock"),
        ("stake", "Stake"),
        ("transfer", "Transfer"),
        ("rebalancePortfolio", "Rebalance Portfolio"),
        (None, "Contract interaction"),
        ("", "Contract interaction"),
    ],
)
def test_infer_intent(function_name, intent):
    assert infer_intent(function_name) == intent


def test_generate_descriptor():
    descriptor = generate_descriptor(
        chain_id=1,
        address=UNISWAP_V3_ROUTER,
        abi=ROUTER_ABI,
        owner="Uniswap",
        url="https://uniswap.org",
    )

    assert list(descriptor.formats) == [
        "exactInputSingle((address,address,address,uint256,uint256))",
        "multicall(bytes[])",
        "stake(uint256,uint256)",
    ]
    assert descriptor.owner == "Uniswap"
    assert descriptor.metadata.info == {"url": "https://uniswap.org"}
    assert descriptor.is_deployed_at(UNISWAP_V3_ROUTER, 1)
    assert descriptor.context.deployments[0].address == UNISWAP_V3_ROUTER.lower()

    assert validate_descriptor(descriptor).valid


def test_generated_struct_fields_are_flattened():
    descriptor = generate_descriptor(chain_id=1, address=UNISWAP_V3_ROUTER, abi=ROUTER_ABI)

    swap = descriptor.formats["exactInputSingle((address,address,address,uint256,uint256))"]

    assert swap.intent == "Exact Input Single"
    assert [(f.path, f.label, f.format) for f in swap.fields] == [
        ("[0].tokenIn", "Token In", FieldFormat.addressName),
        ("[0].tokenOut", "Token Out", FieldFormat.addressName),
        ("[0].recipient", "Recipient", FieldFormat.addressName),
        ("[0].deadline", "Deadline", FieldFormat.date),
        ("[0].amountIn", "Amount In", FieldFormat.tokenAmount),
    ]
    assert descriptor.metadata is None


def test_generated_array_fields_are_raw():
    descriptor = generate_descriptor(chain_id=1, address=UNISWAP_V3_ROUTER, abi=ROUTER_ABI)

    multicall = descriptor.formats["multicall(bytes[])"]

    assert multicall.intent == "Multiple calls"
    assert [(f.path, f.label, f.format) for f in multicall.fields] == [("[0]", "Data", FieldFormat.raw)]


def test_generate_descriptor_filters():
    with_read_only = generate_descriptor(chain_id=1, address=UNISWAP_V3_ROUTER, abi=ROUTER_ABI, skip_read_only=False)
    only_stake = generate_descriptor(chain_id=1, address=UNISWAP_V3_ROUTER, abi=ROUTER_ABI, functions=["stake"])

    assert "balanceOf(address)" in with_read_only.formats
    assert list(only_stake.formats) == ["stake(uint256,uint256)"]
    assert [f.format for f in only_stake.formats["stake(uint256,uint256)"].fields] == [
        FieldFormat.tokenAmount,
        FieldFormat.duration,
    ]


def test_generate_function_descriptor():
    descriptor = generate_function_descriptor(ROUTER_ABI[2], chain_id=10, address=UNISWAP_V3_ROUTER)

    assert list(descriptor.formats) == ["stake(uint256,uint256)"]
    assert descriptor.formats["stake(uint256,uint256)"].intent == "Stake"
    assert descriptor.is_deployed_at(UNISWAP_V3_ROUTER, 10)
    assert not descriptor.is_deployed_at(UNISWAP_V3_ROUTER, 1)
    assert [p.name for p in descriptor.context.function_parameters("stake(uint256,uint256)")] == ["amount", "duration"]


def test_unnamed_struct_members_use_positional_paths():
    abi = [
        {
            "type": "function",
            "name": "settle",
            "stateMutability": "nonpayable",
            "inputs": [
                {
                    "name": "order",
                    "type": "tuple",
                    "components": [{"name": "", "type": "address"}, {"name": "", "type": "uint256"}],
                }
            ],
        }
    ]
    descriptor = generate_descriptor(chain_id=1, address=UNISWAP_V3_ROUTER, abi=abi)

    settle = descriptor.formats["settle((address,uint256))"]

    assert [f.path for f in settle.fields] == ["[0].[0]", "[0].[1]"]
    assert all(f.label for f in settle.fields)
    assert validate_descriptor(descriptor).valid
