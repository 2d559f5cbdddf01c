"""Data models for explain/dry-run output."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

__all__ = [
    "AccessExplanation",
    "AccessRuleEvaluation",
    "EntityExplanation",
    "QueryExplanation",
    "RuleEvaluation",
]


class _Serializable:
    __slots__ = ()

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable dictionary."""
        return asdict(self)  # type: ignore[call-overload]


@dataclass(frozen=True, slots=True)
class RuleEvaluation(_Serializable):
    """A rule as it contributes to a query explanation.

    Attributes:
        description: Rule text, e.g. ``"can read Ledger where {...}"``.
        behavior: ``"can"`` or ``"cannot"``.
        filter_sql: SQL of the rule's own conditions, literal binds inlined.
    """

    description: str
    behavior: str
    filter_sql: str


@dataclass(frozen=True, slots=True)
class EntityExplanation(_Serializable):
    """How the rules of one selected entity fold into its WHERE clause.

    Attributes:
        entity_name: Class name, e.g. ``"Ledger"``.
        entity_type: Dotted path of the class.
        action: The action being explained.
        rules_found: Number of relevant rules.
        rules: The relevant rules in definition order.
        combined_filter_sql: SQL of the folded filter.
        deny_by_default: No rule was relevant.
    """

    entity_name: str
    entity_type: str
    action: str
    rules_found: int
    rules: list[RuleEvaluation]
    combined_filter_sql: str
    deny_by_default: bool

    def describe(self) -> list[str]:
        out = [f"  Entity: {self.entity_name}"]
        if self.deny_by_default:
            return out + ["    DENY BY DEFAULT (no relevant rules)"]
        out.append(f"    Rules ({self.rules_found}):")
        for rule in self.rules:
            out += [f"      - {rule.description}", f"        SQL: {rule.filter_sql}"]
        out.append(f"    Combined SQL: {self.combined_filter_sql}")
        return out


@dataclass(frozen=True, slots=True)
class QueryExplanation(_Serializable):
    """What ``authorize_query`` would do to a SELECT, without running it.

    Attributes:
        action: The action being explained.
        ability_repr: ``repr()`` of the ability.
        entities: One explanation per selected entity.
        authorized_sql: The restricted statement as SQL.
        has_deny_by_default: At least one entity had no relevant rule.
    """

    action: str
    ability_repr: str
    entities: list[EntityExplanation]
    authorized_sql: str
    has_deny_by_default: bool

    def __str__(self) -> str:
        out = [
            f"Query Explanation for action={self.action!r}",
            f"  Ability: {self.ability_repr}",
            "",
        ]
        for entity in self.entities:
            out += entity.describe() + [""]
        out.append(f"  Authorized SQL: {self.authorized_sql}")
        if self.has_deny_by_default:
            out.append("  WARNING: Some entities have no relevant rules (deny by default)")
        return "\n".join(out)


@dataclass(frozen=True, slots=True)
class AccessRuleEvaluation(_Serializable):
    """One relevant rule tried against a subject.

    Attributes:
        description: Rule text.
        behavior: ``"can"`` or ``"cannot"``.
        matched: The rule matched the subject.
        decisive: The rule decided the check.
    """

    description: str
    behavior: str
    matched: bool
    decisive: bool

    def describe(self) -> str:
        status = "MATCH" if self.matched else "NO MATCH"
        suffix = " (decisive)" if self.decisive else ""
        return f"    - {self.description} [{status}]{suffix}"


@dataclass(frozen=True, slots=True)
class AccessExplanation(_Serializable):
    """Why ``allows(action, subject)`` returned what it did.

    Attributes:
        action: The action checked.
        subject_type: Class name of the subject.
        subject_repr: ``repr()`` of the subject.
        allowed: The verdict.
        deny_by_default: No rule was relevant.
        rules: Rules tried, most recent first, ending at the deciding one.
    """

    action: str
    subject_type: str
    subject_repr: str
    allowed: bool
    deny_by_default: bool
    rules: list[AccessRuleEvaluation]

    def __str__(self) -> str:
        out = [
            f"Access Check: {'ALLOWED' if self.allowed else 'DENIED'}",
            f"  Action: {self.action}",
            f"  Subject: {self.subject_type} ({self.subject_repr})",
            "",
        ]
        if self.deny_by_default:
            out.append("  DENY BY DEFAULT (no relevant rules)")
        else:
            out.append("  Rule Results:")
            out += [rule.describe() for rule in self.rules]
        return "\n".join(out)
