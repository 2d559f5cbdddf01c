"""Compiler — transforms ability rules into SQL filter expressions."""

from sqla_ability.compiler._conditions import compile_conditions
from sqla_ability.compiler._eval import match_conditions
from sqla_ability.compiler._expression import evaluate_rules
from sqla_ability.compiler._query import accessible_by, authorize_query
from sqla_ability.compiler._relationship import relationship_exists

__all__ = [
    "accessible_by",
    "authorize_query",
    "compile_conditions",
    "evaluate_rules",
    "match_conditions",
    "relationship_exists",
]
