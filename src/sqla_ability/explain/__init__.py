"""Explain/dry-run mode — structured insight into authorization decisions."""

from sqla_ability.explain._access import explain_access
from sqla_ability.explain._models import (
    AccessExplanation,
    AccessRuleEvaluation,
    EntityExplanation,
    QueryExplanation,
    RuleEvaluation,
)
from sqla_ability.explain._query import explain_query

__all__ = [
    "AccessExplanation",
    "AccessRuleEvaluation",
    "EntityExplanation",
    "QueryExplanation",
    "RuleEvaluation",
    "explain_access",
    "explain_query",
]
