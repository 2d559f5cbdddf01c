"""Relationship filters — correlated EXISTS subqueries via has()/any()."""

from __future__ import annotations

from typing import Any

from sqlalchemy import ColumnElement
from sqlalchemy.orm import RelationshipDirection, RelationshipProperty

__all__ = ["relationship_exists"]


def relationship_exists(
    model: type,
    prop: RelationshipProperty[Any],
    condition: ColumnElement[bool] | None = None,
) -> ColumnElement[bool]:
    """Wrap *condition* in an EXISTS subquery over the relationship *prop*.

    Uses ``has()`` for MANYTOONE relationships and ``any()`` for
    ONETOMANY / MANYTOMANY relationships. The subquery is correlated to the
    outer row and never joins the relationship into the outer FROM clause,
    so the outer query cannot return duplicate rows.

    Args:
        model: The model class that owns the relationship.
        prop: The relationship property (from ``mapper.relationships``).
        condition: Filter on the related model, or ``None`` to test for the
            existence of any related row.

    Returns:
        A ``ColumnElement[bool]`` EXISTS expression.

    Example::

        prop = sa_inspect(Ledger).relationships["records"]
        expr = relationship_exists(Ledger, prop, Record.name == "better_record")
        # EXISTS (SELECT 1 FROM records
        #   WHERE ledgers.id = records.ledger_id AND records.name = :name_1)
    """
    relationship_attr: Any = getattr(model, prop.key)
    if prop.direction is RelationshipDirection.MANYTOONE:
        result: ColumnElement[bool] = relationship_attr.has(condition)
    else:
        result = relationship_attr.any(condition)
    return result
