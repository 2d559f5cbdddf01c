"""Layered configuration for sqla-ability."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from sqla_ability._types import OnMissingRule, OnUnloadedRelationship

__all__ = [
    "AbilityConfig",
    "configure",
    "get_global_config",
    "_reset_global_config",
    "_set_global_config",
]

# Allowed values per literal-typed field.
_CHOICES: dict[str, tuple[str, ...]] = {
    "on_missing_rule": ("deny", "raise"),
    "on_unloaded_relationship": ("deny", "raise", "warn"),
}


@dataclass(frozen=True, slots=True)
class AbilityConfig:
    """Process-wide settings with merge semantics.

    Attributes:
        on_missing_rule: Behavior when no rule is relevant to a query.
            ``"deny"`` returns zero rows (WHERE FALSE).
            ``"raise"`` raises ``NoRuleError``.
        default_action: Action used by ``accessible_by`` when none is given.
        log_rule_decisions: Log query compilation and point checks.
        on_unloaded_relationship: What an in-memory check does with a
            relationship it cannot load.

    Example::

        config = AbilityConfig(on_missing_rule="raise")
        merged = config.merge(default_action="index")
    """

    on_missing_rule: OnMissingRule = "deny"
    default_action: str = "read"
    log_rule_decisions: bool = False
    on_unloaded_relationship: OnUnloadedRelationship = "deny"

    def __post_init__(self) -> None:
        for name, choices in _CHOICES.items():
            value = getattr(self, name)
            if value not in choices:
                raise ValueError(f"{name} must be one of {choices!r}, got {value!r}")
        if not self.default_action:
            raise ValueError("default_action must be a non-empty string")

    def merge(
        self,
        *,
        on_missing_rule: OnMissingRule | None = None,
        default_action: str | None = None,
        log_rule_decisions: bool | None = None,
        on_unloaded_relationship: OnUnloadedRelationship | None = None,
    ) -> AbilityConfig:
        """Return a new config with non-None overrides applied.

        Example::

            base = AbilityConfig()
            strict = base.merge(on_missing_rule="raise")
        """
        return replace(
            self,
            **_overrides(
                on_missing_rule=on_missing_rule,
                default_action=default_action,
                log_rule_decisions=log_rule_decisions,
                on_unloaded_relationship=on_unloaded_relationship,
            ),
        )


def _overrides(**values: Any) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


# ---------------------------------------------------------------------------
# Global configuration singleton
# ---------------------------------------------------------------------------

_global_config = AbilityConfig()


def get_global_config() -> AbilityConfig:
    """Return the current global configuration."""
    return _global_config


def configure(
    *,
    on_missing_rule: OnMissingRule | None = None,
    default_action: str | None = None,
    log_rule_decisions: bool | None = None,
    on_unloaded_relationship: OnUnloadedRelationship | None = None,
) -> AbilityConfig:
    """Update the global configuration by merging overrides.

    Only non-None values are applied. Returns the new global config.

    Example::

        configure(on_missing_rule="raise")
        # accessible_by now raises NoRuleError instead of returning no rows
    """
    global _global_config
    _global_config = _global_config.merge(
        on_missing_rule=on_missing_rule,
        default_action=default_action,
        log_rule_decisions=log_rule_decisions,
        on_unloaded_relationship=on_unloaded_relationship,
    )
    return _global_config


def _set_global_config(cfg: AbilityConfig) -> None:
    """Replace global config with an exact snapshot. For testing only."""
    global _global_config
    _global_config = cfg


def _reset_global_config() -> None:
    """Reset global config to defaults. For testing only."""
    global _global_config
    _global_config = AbilityConfig()
