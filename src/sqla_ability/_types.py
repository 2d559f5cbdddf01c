"""Shared markers and type aliases for sqla-ability."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Literal, Union

from sqlalchemy import ColumnElement

__all__ = [
    "ALL",
    "MANAGE",
    "NOT",
    "BlockCondition",
    "Conditions",
    "FilterExpression",
    "OnMissingRule",
    "OnUnloadedRelationship",
    "SubjectType",
]

# Subject marker: a rule for ALL applies to every model.
ALL = "all"

# Action marker: a rule for MANAGE applies to every action.
MANAGE = "manage"

# Condition key that negates the nested mapping.
NOT = "not"

# Valid values for AbilityConfig.on_missing_rule.
OnMissingRule = Literal["deny", "raise"]

# Valid values for AbilityConfig.on_unloaded_relationship.
OnUnloadedRelationship = Literal["deny", "raise", "warn"]

# A condition mapping: attribute name -> value, collection, range or nested mapping.
Conditions = Mapping[str, Any]

# A rule block receives the instance being checked.
BlockCondition = Callable[[Any], bool]

# A mapped class, or the ALL marker.
SubjectType = Union[type, str]

# The universal output type of the compiler.
FilterExpression = ColumnElement[bool]
