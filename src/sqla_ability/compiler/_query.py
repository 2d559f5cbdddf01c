"""accessible_by() and authorize_query() — apply abilities to SELECT statements."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import Select, select

from sqla_ability.compiler._expression import evaluate_rules
from sqla_ability.config._config import get_global_config

if TYPE_CHECKING:
    from sqla_ability.ability._ability import Ability

__all__ = ["accessible_by", "authorize_query"]


def authorize_query(
    stmt: Select[Any],
    *,
    ability: Ability,
    action: str | None = None,
) -> Select[Any]:
    """Restrict a SQLAlchemy SELECT statement to what *ability* permits.

    Every ORM entity selected by the statement gets the folded filter of
    its relevant rules. Columns without an entity pass through.

    Args:
        stmt: A SQLAlchemy 2.0 Select statement.
        ability: The ability to authorize with.
        action: The action being performed. Defaults to the configured
            ``default_action``.

    Returns:
        A new Select with authorization filters applied.

    Example::

        stmt = select(Ledger).where(Ledger.title.startswith("2024"))
        stmt = authorize_query(stmt, ability=ability, action="read")
    """
    if action is None:
        action = get_global_config().default_action

    seen: set[type] = set()
    desc_list: list[dict[str, Any]] = stmt.column_descriptions
    for desc in desc_list:
        entity: type | None = desc.get("entity")
        if entity is None or entity in seen:
            continue
        seen.add(entity)

        filter_expr = evaluate_rules(ability, entity, action)
        stmt = stmt.where(filter_expr)

    return stmt


def accessible_by(
    ability: Ability,
    model: type,
    action: str | None = None,
) -> Select[Any]:
    """Return ``select(model)`` restricted to the records *ability* permits.

    The result is an ordinary ``Select``: callers may add filters,
    ordering, pagination or loader options before executing it.

    Args:
        ability: The ability to authorize with.
        model: The SQLAlchemy model class.
        action: The action being performed. Defaults to the configured
            ``default_action``.

    Returns:
        A Select over *model* with authorization filters applied.

    Example::

        stmt = accessible_by(ability, Parent).order_by(Parent.created_at)
        parents = session.scalars(stmt.options(selectinload(Parent.children))).all()
    """
    return authorize_query(select(model), ability=ability, action=action)
