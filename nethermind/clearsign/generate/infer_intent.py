import re
from typing import NamedTuple


class IntentPattern(NamedTuple):
    """Intent used when every keyword is a substring of the function name.  Higher priorities are checked first"""

    keywords: tuple[str, ...]
    intent: str
    priority: int


INTENT_PATTERNS: list[IntentPattern] = [
    # Compound patterns
    IntentPattern(("swap", "exact", "input"), "Swap exact input amount", 10),
    IntentPattern(("swap", "exact", "output"), "Swap for exact output amount", 10),
    IntentPattern(("add", "liquidity"), "Add liquidity", 10),
    IntentPattern(("remove", "liquidity"), "Remove liquidity", 10),
    IntentPattern(("claim", "reward"), "Claim rewards", 10),
    IntentPattern(("claim", "fee"), "Claim fees", 10),
    IntentPattern(("set", "approval", "all"), "Set approval for all", 10),
    IntentPattern(("safe", "transfer"), "Safe transfer", 10),
    IntentPattern(("batch", "transfer"), "Batch transfer", 10),
    IntentPattern(("flash", "loan"), "Flash loan", 10),
    IntentPattern(("increase", "allowance"), "Increase allowance", 10),
    IntentPattern(("decrease", "allowance"), "Decrease allowance", 10),
    IntentPattern(("permit", "transfer"), "Permit and transfer", 10),
    # Single keywords
    IntentPattern(("unstake",), "Unstake", 6),
    IntentPattern(("unwrap",), "Unwrap", 6),
    IntentPattern(("unlock",), "Unlock", 6),
    IntentPattern(("unpause",), "Unpause", 6),
    IntentPattern(("transfer",), "Transfer", 5),
    IntentPattern(("approve",), "Approve spending", 5),
    IntentPattern(("swap",), "Swap tokens", 5),
    IntentPattern(("deposit",), "Deposit", 5),
    IntentPattern(("withdraw",), "Withdraw", 5),
    IntentPattern(("stake",), "Stake", 5),
    IntentPattern(("claim",), "Claim", 5),
    IntentPattern(("mint",), "Mint", 5),
    IntentPattern(("burn",), "Burn", 5),
    IntentPattern(("redeem",), "Redeem", 5),
    IntentPattern(("borrow",), "Borrow", 5),
    IntentPattern(("repay",), "Repay", 5),
    IntentPattern(("supply",), "Supply", 5),
    IntentPattern(("execute",), "Execute", 5),
    IntentPattern(("multicall",), "Multiple calls", 5),
    IntentPattern(("delegate",), "Delegate", 5),
    IntentPattern(("vote",), "Vote", 5),
    IntentPattern(("revoke",), "Revoke", 5),
    IntentPattern(("cancel",), "Cancel", 5),
    IntentPattern(("update",), "Update", 5),
    IntentPattern(("create",), "Create", 5),
    IntentPattern(("destroy",), "Destroy", 5),
    IntentPattern(("initialize",), "Initialize", 5),
    IntentPattern(("upgrade",), "Upgrade", 5),
    IntentPattern(("pause",), "Pause", 5),
    IntentPattern(("lock",), "Lock", 5),
    IntentPattern(("wrap",), "Wrap", 5),
    IntentPattern(("bridge",), "Bridge", 5),
    IntentPattern(("permit",), "Permit", 5),
    IntentPattern(("collect",), "Collect", 5),
    IntentPattern(("harvest",), "Harvest", 5),
    IntentPattern(("compound",), "Compound", 5),
    IntentPattern(("liquidate",), "Liquidate", 5),
    IntentPattern(("settle",), "Settle", 5),
    IntentPattern(("fill",), "Fill order", 5),
    IntentPattern(("register",), "Register", 5),
    IntentPattern(("renew",), "Renew", 5),
    IntentPattern(("order",), "Place order", 4),
    IntentPattern(("set",), "Configure", 3),
    IntentPattern(("get",), "Query", 3),
]

# Stable sort, patterns sharing a priority keep their declaration order
_SORTED_PATTERNS = sorted(INTENT_PATTERNS, key=lambda p: p.priority, reverse=True)

DEFAULT_INTENT = "Contract interaction"


def humanize_function_name(name: str) -> str:
    """
    Converts a camelCase function name to readable text

    >>> humanize_function_name("rebalancePortfolio")
    'Rebalance Portfolio'
    """
    spaced = re.sub(r"([A-Z])", r" \1", name)
    return (spaced[:1].upper() + spaced[1:]).strip()


def infer_intent(function_name: str | None) -> str:
    """
    Infers an intent phrase from a function name.  Compound keyword patterns are checked before single
    keywords, and the humanized function name is used when no pattern matches.

    >>> infer_intent("swapExactTokensForETH")
    'Swap tokens'
    >>> infer_intent("unstakeAll")
    'Unstake'
    >>> infer_intent("exactInputSingle")
    'Exact Input Single'
    """
    if not function_name:
        return DEFAULT_INTENT

    lower_name = function_name.lower()
    for pattern in _SORTED_PATTERNS:
        if all(keyword in lower_name for keyword in pattern.keywords):
            return pattern.intent

    return humanize_function_name(function_name)
