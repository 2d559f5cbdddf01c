"""sqla-ability — Rule-based abilities for SQLAlchemy 2.0.

Declare what an actor can do with ``can``/``cannot`` rules whose
conditions are plain mappings, then check single records in memory or
turn the same rules into SQL WHERE clauses.

Example::

    from sqla_ability import Ability

    ability = Ability()
    ability.can("read", Ledger, {"records": {"name": "better_record"}})
    ability.cannot("read", Ledger, {"records": {"name": "crappy_record"}})

    ability.allows("read", ledger)
    stmt = ability.accessible_by(Ledger).order_by(Ledger.title)
    ledgers = session.scalars(stmt).all()
"""

from importlib.metadata import PackageNotFoundError, version

from sqla_ability._checks import authorize, is_allowed
from sqla_ability._types import ALL, MANAGE, NOT
from sqla_ability.ability._ability import Ability
from sqla_ability.ability._rule import Rule
from sqla_ability.compiler._conditions import compile_conditions
from sqla_ability.compiler._eval import match_conditions
from sqla_ability.compiler._expression import evaluate_rules
from sqla_ability.compiler._query import accessible_by, authorize_query
from sqla_ability.config._config import AbilityConfig, configure
from sqla_ability.exceptions import (
    AbilityError,
    AccessDenied,
    InvalidConditionError,
    NoRuleError,
    UnloadedRelationshipError,
    UnsupportedRuleError,
)

try:
    __version__ = version("sqla-ability")
except PackageNotFoundError:
    __version__ = "dev"

__all__ = [
    "__version__",
    "ALL",
    "MANAGE",
    "NOT",
    "Ability",
    "AbilityConfig",
    "AbilityError",
    "AccessDenied",
    "InvalidConditionError",
    "NoRuleError",
    "Rule",
    "UnloadedRelationshipError",
    "UnsupportedRuleError",
    "accessible_by",
    "authorize",
    "authorize_query",
    "compile_conditions",
    "configure",
    "evaluate_rules",
    "is_allowed",
    "match_conditions",
]
