"""Condition compilation — turn a rule's condition mapping into SQL."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from typing import Any

from sqlalchemy import ColumnElement, Enum, and_, false, not_, or_, true
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Mapper

from sqla_ability._types import NOT, Conditions
from sqla_ability.compiler._relationship import relationship_exists
from sqla_ability.exceptions import InvalidConditionError

__all__ = ["compile_conditions"]

# Values of these types mean "any of", compiled to IN.
COLLECTION_TYPES = (list, tuple, set, frozenset)


def compile_conditions(model: type, conditions: Conditions) -> ColumnElement[bool]:
    """Compile a condition mapping for *model* into a filter expression.

    Keys name column attributes, relationships, or the ``"not"`` marker.
    All keys of one mapping are AND'ed together.

    - column, scalar: ``col = value``; ``None`` gives ``col IS NULL``
    - column, list/tuple/set: ``col IN (...)``
    - column, ``range``: ``col >= start AND col < stop``
    - relationship, mapping: ``EXISTS`` over related rows matching the
      mapping; a ``"not"`` key inside it becomes a separate ``NOT EXISTS``
    - ``"not"``, mapping: ``NOT (...)``

    Args:
        model: A mapped class.
        conditions: The condition mapping. Empty means "every row".

    Returns:
        A ``ColumnElement[bool]`` suitable for ``Select.where()``.

    Raises:
        InvalidConditionError: If a key or value does not fit the model.

    Example::

        expr = compile_conditions(
            Ledger,
            {"records": {"not": {"name": "crappy_record"}, "name": "better_record"}},
        )
        # EXISTS (... records.name = 'better_record')
        #   AND NOT (EXISTS (... records.name = 'crappy_record'))
    """
    if not conditions:
        return true()

    mapper = mapper_for(model)
    clauses: list[ColumnElement[bool]] = []
    for key, value in conditions.items():
        if key == NOT:
            nested = require_mapping(model, key, value)
            clauses.append(not_(compile_conditions(model, nested)))
        elif key in mapper.relationships:
            nested = require_mapping(model, key, value)
            clauses.append(_compile_relationship(model, mapper, key, nested))
        elif key in mapper.column_attrs:
            clauses.append(_compile_column(model, mapper, key, value))
        else:
            raise InvalidConditionError(f"{model.__name__} has no attribute {key!r}")

    if len(clauses) == 1:
        return clauses[0]
    return and_(*clauses)


def _compile_relationship(
    model: type,
    mapper: Mapper[Any],
    key: str,
    nested: Conditions,
) -> ColumnElement[bool]:
    # Positive and negative clauses get one EXISTS each, so a parent
    # qualifies when some child matches the positive part and no child
    # matches the negative part. They are never tied to the same child row.
    prop = mapper.relationships[key]
    target: type = prop.mapper.class_
    positive = {k: v for k, v in nested.items() if k != NOT}

    clauses: list[ColumnElement[bool]] = []
    if positive or NOT not in nested:
        inner = compile_conditions(target, positive) if positive else None
        clauses.append(relationship_exists(model, prop, inner))
    if NOT in nested:
        negative = require_mapping(target, NOT, nested[NOT])
        inner = compile_conditions(target, negative) if negative else None
        clauses.append(not_(relationship_exists(model, prop, inner)))

    if len(clauses) == 1:
        return clauses[0]
    return and_(*clauses)


def _compile_column(model: type, mapper: Mapper[Any], key: str, value: Any) -> ColumnElement[bool]:
    column: Any = getattr(model, key)

    if isinstance(value, Mapping):
        raise InvalidConditionError(
            f"{model.__name__}.{key} is a column; nested conditions need a relationship"
        )
    if value is None:
        return column.is_(None)
    if isinstance(value, range):
        check_range(model, key, value)
        if value.start >= value.stop:
            return false()
        return and_(column >= value.start, column < value.stop)
    if isinstance(value, COLLECTION_TYPES):
        values = [coerce_value(mapper, key, v) for v in value]
        non_null = [v for v in values if v is not None]
        clauses: list[ColumnElement[bool]] = []
        if non_null:
            clauses.append(column.in_(non_null))
        if len(non_null) != len(values):
            clauses.append(column.is_(None))
        if not clauses:
            return false()
        return or_(*clauses)
    return column == coerce_value(mapper, key, value)


# ---------------------------------------------------------------------------
# Helpers shared with the in-memory matcher
# ---------------------------------------------------------------------------


def mapper_for(model: type) -> Mapper[Any]:
    """Return the mapper of *model*, raising if it is not a mapped class."""
    mapper = sa_inspect(model, raiseerr=False)
    if not isinstance(mapper, Mapper):
        raise InvalidConditionError(f"{model!r} is not a mapped class")
    return mapper


def require_mapping(model: type, key: str, value: Any) -> Conditions:
    if not isinstance(value, Mapping):
        raise InvalidConditionError(
            f"condition {key!r} on {model.__name__} expects a mapping, got {type(value).__name__}"
        )
    return value


def check_range(model: type, key: str, value: range) -> None:
    if value.step != 1:
        raise InvalidConditionError(
            f"range condition on {model.__name__}.{key} must have step 1, got {value.step}"
        )


def coerce_value(mapper: Mapper[Any], key: str, value: Any) -> Any:
    """Turn an enum member name into the member for ``Enum`` columns."""
    if not isinstance(value, str) or isinstance(value, enum.Enum):
        return value
    column_type = mapper.column_attrs[key].columns[0].type
    if isinstance(column_type, Enum) and column_type.enum_class is not None:
        members = column_type.enum_class.__members__
        if value in members:
            return members[value]
    return value
