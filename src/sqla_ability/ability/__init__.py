"""Abilities — rule definition, aliasing and lookup."""

from sqla_ability.ability._ability import DEFAULT_ALIASES, Ability
from sqla_ability.ability._rule import Rule

__all__ = ["Ability", "DEFAULT_ALIASES", "Rule"]
