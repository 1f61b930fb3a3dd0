from dataclasses import dataclass
from typing import Callable

from nethermind.clearsign.formats.tokens import is_infinite_approval
from nethermind.clearsign.types import (
    DecodedField,
    FieldFormat,
    RawDecoded,
    SecurityWarning,
    Severity,
)


@dataclass(frozen=True)
class SecurityRule:
    """
    Risk check evaluated against every formatted field.  The predicate receives the formatted field and the raw
    decoding of the call.
    """

    type: str
    severity: Severity
    message: str
    predicate: Callable[[DecodedField, RawDecoded], bool]

    def evaluate(self, field: DecodedField, raw: RawDecoded) -> SecurityWarning | None:
        """Returns a warning if the predicate holds for the field"""
        if self.predicate(field, raw):
            return SecurityWarning(type=self.type, severity=self.severity, message=self.message)
        return None


def _is_infinite_approval(field: DecodedField, raw: RawDecoded) -> bool:
    return (
        field.format == FieldFormat.tokenAmount
        and raw.function_name == "approve"
        and isinstance(field.raw_value, int)
        and not isinstance(field.raw_value, bool)
        and is_infinite_approval(field.raw_value)
    )


INFINITE_APPROVAL_RULE = SecurityRule(
    type="infinite_approval",
    severity=Severity.high,
    message="This approval grants unlimited spending access to your tokens",
    predicate=_is_infinite_approval,
)

DEFAULT_RULES: tuple[SecurityRule, ...] = (INFINITE_APPROVAL_RULE,)


class SecurityRuleEngine:
    """Evaluates a set of security rules against formatted fields"""

    rules: list[SecurityRule]

    def __init__(self, rules: list[SecurityRule] | None = None):
        self.rules = list(rules) if rules is not None else list(DEFAULT_RULES)

    def add_rule(self, rule: SecurityRule):
        """Appends a rule.  Rules are evaluated in insertion order"""
        self.rules.append(rule)

    def check(self, field: DecodedField, raw: RawDecoded) -> list[SecurityWarning]:
        """Returns the warnings raised by a single field"""
        warnings = []
        for rule in self.rules:
            warning = rule.evaluate(field, raw)
            if warning is not None:
                warnings.append(warning)
        return warnings

    def check_all(self, fields: list[DecodedField], raw: RawDecoded) -> list[SecurityWarning]:
        """Returns the warnings of every field, in field order"""
        return [warning for field in fields for warning in self.check(field, raw)]
