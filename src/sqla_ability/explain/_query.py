"""explain_query() — explain how an ability would restrict a SELECT."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import ColumnElement, Select, false, true

from sqla_ability.compiler._conditions import compile_conditions
from sqla_ability.compiler._expression import evaluate_rules, query_rules
from sqla_ability.config._config import get_global_config
from sqla_ability.explain._models import (
    EntityExplanation,
    QueryExplanation,
    RuleEvaluation,
)

if TYPE_CHECKING:
    from sqla_ability.ability._ability import Ability

__all__ = ["explain_query"]


def _compile_sql(expr: ColumnElement[bool]) -> str:
    """Compile a SQLAlchemy expression to SQL with literal binds."""
    return str(expr.compile(compile_kwargs={"literal_binds": True}))


def explain_query(
    stmt: Select[Any],
    *,
    ability: Ability,
    action: str | None = None,
) -> QueryExplanation:
    """Explain how *ability* would restrict a SELECT.

    Does not execute the query. Returns the relevant rules per entity, the
    SQL each rule contributes, the folded filter, and the final authorized
    statement.

    Args:
        stmt: A SQLAlchemy 2.0 Select statement.
        ability: The ability to authorize with.
        action: The action string. Defaults to the configured
            ``default_action``.

    Returns:
        A ``QueryExplanation`` with per-entity breakdowns.
    """
    if action is None:
        action = get_global_config().default_action

    entities: list[EntityExplanation] = []
    authorized_stmt = stmt
    has_deny_by_default = False
    seen: set[type] = set()

    desc_list: list[dict[str, Any]] = stmt.column_descriptions
    for desc in desc_list:
        entity: type | None = desc.get("entity")
        if entity is None or entity in seen:
            continue
        seen.add(entity)

        rules = query_rules(ability, entity, action)
        combined = evaluate_rules(ability, entity, action)
        authorized_stmt = authorized_stmt.where(combined)

        evaluations = [
            RuleEvaluation(
                description=str(rule),
                behavior="can" if rule.base_behavior else "cannot",
                filter_sql=_compile_sql(
                    compile_conditions(entity, rule.conditions)
                    if rule.has_conditions
                    else (true() if rule.base_behavior else false())
                ),
            )
            for rule in rules
        ]
        if not rules:
            has_deny_by_default = True

        entities.append(
            EntityExplanation(
                entity_name=entity.__name__,
                entity_type=f"{entity.__module__}.{entity.__qualname__}",
                action=action,
                rules_found=len(rules),
                rules=evaluations,
                combined_filter_sql=_compile_sql(combined),
                deny_by_default=not rules,
            )
        )

    authorized_sql = str(authorized_stmt.compile(compile_kwargs={"literal_binds": True}))

    return QueryExplanation(
        action=action,
        ability_repr=repr(ability),
        entities=entities,
        authorized_sql=authorized_sql,
        has_deny_by_default=has_deny_by_default,
    )
