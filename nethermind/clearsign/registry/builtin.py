from typing import Any

from nethermind.clearsign.types import Descriptor

ERC7730_SCHEMA = "https://eips.ethereum.org/assets/eip-7730/erc7730-v1.schema.json"

# Signature keys carry parameter names so that field paths resolve by name.  Token standards have no
# deployments, and match on function signature alone.

WETH_DESCRIPTOR: dict[str, Any] = {
    "$schema": ERC7730_SCHEMA,
    "context": {
        "$id": "WETH",
        "contract": {
            "deployments": [
                {"chainId": 1, "address": "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"},
                {"chainId": 42161, "address": "0x82aF49447D8a07e3bd95BD0d56f35241523fBab1"},
                {"chainId": 10, "address": "0x4200000000000000000000000000000000000006"},
                {"chainId": 8453, "address": "0x4200000000000000000000000000000000000006"},
                {"chainId": 137, "address": "0x7ceB23fD6bC0adD59E62ac25578270cFf1b9f619"},
            ]
        },
    },
    "metadata": {"owner": "WETH", "info": {"url": "https://weth.io"}},
    "display": {
        "formats": {
            "deposit()": {"intent": "Wrap ETH", "fields": []},
            "withdraw(uint256 wad)": {
                "intent": "Unwrap ETH",
                "fields": [
                    {"path": "wad", "label": "Amount", "format": "tokenAmount", "params": {"tokenPath": "@.to"}},
                ],
            },
        }
    },
}

ERC20_DESCRIPTOR: dict[str, Any] = {
    "$schema": ERC7730_SCHEMA,
    "context": {"$id": "ERC20", "contract": {"deployments": []}},
    "metadata": {"owner": "ERC-20 Standard", "info": {"url": "https://eips.ethereum.org/EIPS/eip-20"}},
    "display": {
        "formats": {
            "transfer(address to, uint256 amount)": {
                "intent": "Send tokens",
                "fields": [
                    {"path": "to", "label": "Recipient", "format": "addressName"},
                    {"path": "amount", "label": "Amount", "format": "tokenAmount"},
                ],
            },
            "approve(address spender, uint256 amount)": {
                "intent": "Approve spending",
                "fields": [
                    {"path": "spender", "label": "Spender", "format": "addressName"},
                    {"path": "amount", "label": "Amount", "format": "tokenAmount"},
                ],
            },
            "transferFrom(address from, address to, uint256 amount)": {
                "intent": "Transfer tokens (on behalf)",
                "fields": [
                    {"path": "from", "label": "From", "format": "addressName"},
                    {"path": "to", "label": "To", "format": "addressName"},
                    {"path": "amount", "label": "Amount", "format": "tokenAmount"},
                ],
            },
            "increaseAllowance(address spender, uint256 addedValue)": {
                "intent": "Increase allowance",
                "fields": [
                    {"path": "spender", "label": "Spender", "format": "addressName"},
                    {"path": "addedValue", "label": "Additional Amount", "format": "tokenAmount"},
                ],
            },
            "decreaseAllowance(address spender, uint256 subtractedValue)": {
                "intent": "Decrease allowance",
                "fields": [
                    {"path": "spender", "label": "Spender", "format": "addressName"},
                    {"path": "subtractedValue", "label": "Reduced Amount", "format": "tokenAmount"},
                ],
            },
        }
    },
}

ERC721_DESCRIPTOR: dict[str, Any] = {
    "$schema": ERC7730_SCHEMA,
    "context": {"$id": "ERC721", "contract": {"deployments": []}},
    "metadata": {"owner": "ERC-721 Standard", "info": {"url": "https://eips.ethereum.org/EIPS/eip-721"}},
    "display": {
        "formats": {
            "safeTransferFrom(address from, address to, uint256 tokenId)": {
                "intent": "Transfer NFT",
                "fields": [
                    {"path": "from", "label": "From", "format": "addressName"},
                    {"path": "to", "label": "To", "format": "addressName"},
                    {"path": "tokenId", "label": "Token ID", "format": "raw"},
                ],
            },
            "safeTransferFrom(address from, address to, uint256 tokenId, bytes data)": {
                "intent": "Transfer NFT (with data)",
                "fields": [
                    {"path": "from", "label": "From", "format": "addressName"},
                    {"path": "to", "label": "To", "format": "addressName"},
                    {"path": "tokenId", "label": "Token ID", "format": "raw"},
                ],
            },
            # Shadowed by ERC20 transferFrom & approve in the builtin tier
            "transferFrom(address from, address to, uint256 tokenId)": {
                "intent": "Transfer NFT (unsafe)",
                "fields": [
                    {"path": "from", "label": "From", "format": "addressName"},
                    {"path": "to", "label": "To", "format": "addressName"},
                    {"path": "tokenId", "label": "Token ID", "format": "raw"},
                ],
            },
            "approve(address to, uint256 tokenId)": {
                "intent": "Approve NFT transfer",
                "fields": [
                    {"path": "to", "label": "Approved Address", "format": "addressName"},
                    {"path": "tokenId", "label": "Token ID", "format": "raw"},
                ],
            },
            "setApprovalForAll(address operator, bool approved)": {
                "intent": "Set approval for all NFTs",
                "fields": [
                    {"path": "operator", "label": "Operator", "format": "addressName"},
                    {"path": "approved", "label": "Approved", "format": "raw"},
                ],
            },
        }
    },
}

BUILTIN_DESCRIPTORS: list[Descriptor] = [
    Descriptor.from_dict(WETH_DESCRIPTOR),
    Descriptor.from_dict(ERC20_DESCRIPTOR),
    Descriptor.from_dict(ERC721_DESCRIPTOR),
]
""" Builtin descriptors in precedence order.  On a signature collision, the first descriptor wins """
