import re
from dataclasses import dataclass, field
from typing import Any

from nethermind.clearsign.types import FieldFormat

# Keyword sets are matched as case-insensitive substrings of the parameter name.  Order of the checks in
# infer_format matters, ie "token" contains "to" and must be tested before the broad address names.
NFT_ADDRESS_KEYWORDS = ["collection", "nft"]
CONTRACT_ADDRESS_KEYWORDS = ["spender", "operator"]
TOKEN_ADDRESS_KEYWORDS = ["asset", "token", "currency"]
ACCOUNT_ADDRESS_KEYWORDS = ["from", "to", "owner", "recipient", "receiver", "account", "sender", "user"]

DURATION_KEYWORDS = ["duration", "period", "interval"]
BLOCK_HEIGHT_KEYWORDS = ["height", "block"]
TIMESTAMP_KEYWORDS = ["deadline", "expiration", "expiry", "until", "time", "timestamp", "validUntil", "validAfter"]
AMOUNT_KEYWORDS = ["amount", "value", "price", "balance", "quantity", "fee", "cost"]
SIGNED_AMOUNT_KEYWORDS = ["amount", "value", "delta"]

LABEL_ABBREVIATIONS = {
    "amt": "Amount",
    "addr": "Address",
    "recv": "Receiver",
    "src": "Source",
    "dst": "Destination",
    "qty": "Quantity",
    "val": "Value",
    "tx": "Transaction",
    "msg": "Message",
    "sig": "Signature",
    "idx": "Index",
    "id": "ID",
    "nft": "NFT",
    "erc": "ERC",
    "eth": "ETH",
}


@dataclass(frozen=True)
class InferredFormat:
    """Display format guessed from a parameter name & type, with the format parameters to attach to the field"""

    format: FieldFormat
    params: dict[str, Any] | None = field(default=None, hash=False)


def _contains_any(name: str, keywords: list[str]) -> bool:
    lower = name.lower()
    return any(keyword.lower() in lower for keyword in keywords)


def infer_format(name: str, abi_type: str) -> InferredFormat:
    """
    Infers an ERC-7730 field format from an ABI parameter name and type.

    >>> infer_format("recipient", "address")
    InferredFormat(format=<FieldFormat.addressName: 'addressName'>, params={'types': ['eoa', 'contract']})
    >>> infer_format("amountIn", "uint256").format
    <FieldFormat.tokenAmount: 'tokenAmount'>
    >>> infer_format("deadline", "uint256").params
    {'encoding': 'timestamp'}
    """
    normalized_type = abi_type.lower()

    if normalized_type.endswith("]") or normalized_type.startswith("tuple") or normalized_type.startswith("("):
        return InferredFormat(FieldFormat.raw)

    if normalized_type == "address":
        if _contains_any(name, NFT_ADDRESS_KEYWORDS):
            return InferredFormat(FieldFormat.addressName, {"types": ["nft"]})
        if _contains_any(name, CONTRACT_ADDRESS_KEYWORDS):
            return InferredFormat(FieldFormat.addressName, {"types": ["contract"]})
        if _contains_any(name, TOKEN_ADDRESS_KEYWORDS):
            return InferredFormat(FieldFormat.addressName, {"types": ["token"]})
        if _contains_any(name, ACCOUNT_ADDRESS_KEYWORDS):
            return InferredFormat(FieldFormat.addressName, {"types": ["eoa", "contract"]})
        return InferredFormat(FieldFormat.addressName)

    if normalized_type.startswith("uint"):
        if _contains_any(name, DURATION_KEYWORDS):
            return InferredFormat(FieldFormat.duration)
        if _contains_any(name, BLOCK_HEIGHT_KEYWORDS):
            return InferredFormat(FieldFormat.date, {"encoding": "blockheight"})
        if _contains_any(name, TIMESTAMP_KEYWORDS):
            return InferredFormat(FieldFormat.date, {"encoding": "timestamp"})
        if _contains_any(name, AMOUNT_KEYWORDS):
            return InferredFormat(FieldFormat.tokenAmount)
        return InferredFormat(FieldFormat.raw)

    if normalized_type.startswith("int"):
        if _contains_any(name, SIGNED_AMOUNT_KEYWORDS):
            return InferredFormat(FieldFormat.tokenAmount)
        return InferredFormat(FieldFormat.raw)

    # bytes, bytesN, bool, string & fixed point values are displayed as is
    return InferredFormat(FieldFormat.raw)


def infer_label(name: str) -> str:
    """
    Generates a human-readable label from a camelCase or snake_case parameter name

    >>> infer_label("amountOutMinimum")
    'Amount Out Minimum'
    >>> infer_label("recv_addr")
    'Receiver Address'
    >>> infer_label("")
    'Value'
    """
    spaced = re.sub(r"([A-Z])", r" \1", name).replace("_", " ")
    words = spaced.split()

    label = " ".join(
        LABEL_ABBREVIATIONS.get(word.lower(), word[:1].upper() + word[1:].lower()) for word in words
    )
    return label or "Value"
