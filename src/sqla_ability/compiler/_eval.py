"""In-memory condition matcher for point checks (allows/authorize).

Evaluates a condition mapping against a single mapped instance with the
same semantics as :func:`compile_conditions`, including SQL's three-valued
logic: a comparison against a NULL attribute is *unknown*, unknown stays
unknown under ``not``, and only a *true* result counts as a match.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Mapper, RelationshipProperty
from sqlalchemy.orm.base import ATTR_EMPTY, NO_VALUE

from sqla_ability._types import NOT, Conditions
from sqla_ability.compiler._conditions import (
    COLLECTION_TYPES,
    check_range,
    coerce_value,
    mapper_for,
    require_mapping,
)
from sqla_ability.config._config import get_global_config
from sqla_ability.exceptions import InvalidConditionError, UnloadedRelationshipError

__all__ = ["handle_unloaded_relationship", "match_conditions", "validate_conditions"]

logger = logging.getLogger(__name__)

# True, False, or None for SQL's UNKNOWN.
Ternary = Optional[bool]


def match_conditions(conditions: Conditions, instance: Any) -> bool:
    """Whether *instance* satisfies the condition mapping.

    Args:
        conditions: A condition mapping as accepted by ``Ability.can``.
        instance: A mapped SQLAlchemy model instance.

    Returns:
        ``True`` only if the conditions evaluate to true; ``False`` for
        false and for unknown (NULL) results.

    Raises:
        InvalidConditionError: If a key or value does not fit the model.
        UnloadedRelationshipError: If a relationship of a detached instance
            was never loaded.

    Example::

        match_conditions({"not": {"name": "unreadable"}}, record)
    """
    validate_conditions(type(instance), conditions)
    return _match(conditions, instance) is True


def validate_conditions(model: type, conditions: Conditions) -> None:
    """Reject every key or value that ``compile_conditions`` would reject.

    Matching stops at the first false clause, so the whole mapping is
    checked up front.
    """
    if not conditions:
        return
    mapper = mapper_for(model)
    for key, value in conditions.items():
        if key == NOT:
            validate_conditions(model, require_mapping(model, key, value))
        elif key in mapper.relationships:
            nested = require_mapping(model, key, value)
            target: type = mapper.relationships[key].mapper.class_
            positive = {k: v for k, v in nested.items() if k != NOT}
            validate_conditions(target, positive)
            if NOT in nested:
                validate_conditions(target, require_mapping(target, NOT, nested[NOT]))
        elif key in mapper.column_attrs:
            if isinstance(value, Mapping):
                raise InvalidConditionError(
                    f"{model.__name__}.{key} is a column; nested conditions need a relationship"
                )
            if isinstance(value, range):
                check_range(model, key, value)
        else:
            raise InvalidConditionError(f"{model.__name__} has no attribute {key!r}")


def _match(conditions: Conditions, instance: Any) -> Ternary:
    if not conditions:
        return True

    model = type(instance)
    mapper = mapper_for(model)
    result: Ternary = True
    for key, value in conditions.items():
        if key == NOT:
            inner = _match(require_mapping(model, key, value), instance)
            outcome: Ternary = None if inner is None else not inner
        elif key in mapper.relationships:
            nested = require_mapping(model, key, value)
            outcome = _match_relationship(instance, mapper.relationships[key], nested)
        elif key in mapper.column_attrs:
            outcome = _match_column(model, mapper, key, value, getattr(instance, key))
        else:
            raise InvalidConditionError(f"{model.__name__} has no attribute {key!r}")

        if outcome is False:
            return False
        if outcome is None:
            result = None
    return result


def _match_column(
    model: type,
    mapper: Mapper[Any],
    key: str,
    expected: Any,
    actual: Any,
) -> Ternary:
    if isinstance(expected, Mapping):
        raise InvalidConditionError(
            f"{model.__name__}.{key} is a column; nested conditions need a relationship"
        )
    if expected is None:
        return actual is None
    if isinstance(expected, range):
        check_range(model, key, expected)
        if expected.start >= expected.stop:
            return False
        if actual is None:
            return None
        try:
            return bool(expected.start <= actual < expected.stop)
        except TypeError:
            # Incompatible types (e.g., str vs int) -- treat as non-match
            return False
    if isinstance(expected, COLLECTION_TYPES):
        values = [coerce_value(mapper, key, v) for v in expected]
        if not values:
            return False
        if actual is None:
            return True if None in values else None
        return any(v is not None and actual == v for v in values)
    if actual is None:
        return None
    return bool(actual == coerce_value(mapper, key, expected))


def _match_relationship(
    instance: Any,
    prop: RelationshipProperty[Any],
    nested: Conditions,
) -> Ternary:
    related = _load_related(instance, prop)
    if prop.uselist:
        candidates = list(related)
    else:
        candidates = [] if related is None else [related]

    positive = {k: v for k, v in nested.items() if k != NOT}
    if positive or NOT not in nested:
        if not any(_match(positive, c) is True for c in candidates):
            return False
    if NOT in nested:
        negative = require_mapping(prop.mapper.class_, NOT, nested[NOT])
        if any(_match(negative, c) is True for c in candidates):
            return False
    return True


def _load_related(instance: Any, prop: RelationshipProperty[Any]) -> Any:
    """Return the related object(s), lazy-loading when the instance allows it."""
    state = sa_inspect(instance)
    loaded_value = state.attrs[prop.key].loaded_value
    if loaded_value is ATTR_EMPTY or loaded_value is NO_VALUE:
        if state.detached:
            raise UnloadedRelationshipError(model=type(instance).__name__, relationship=prop.key)
        # Transient and pending instances yield empty defaults; persistent
        # instances lazy-load through their session.
        return getattr(instance, prop.key)
    return loaded_value


def handle_unloaded_relationship(exc: UnloadedRelationshipError) -> bool:
    """Apply ``on_unloaded_relationship`` to a failed point check.

    Re-raises in ``"raise"`` mode; otherwise denies, logging a warning in
    ``"warn"`` mode.
    """
    mode = get_global_config().on_unloaded_relationship

    if mode == "raise":
        raise exc
    if mode == "warn":
        logger.warning(
            "Relationship '%s' on %s is not loaded; defaulting to deny.",
            exc.relationship,
            exc.model,
        )
    return False
