"""Configuration module for sqla-ability."""

from __future__ import annotations

from sqla_ability.config._config import AbilityConfig, configure, get_global_config

__all__ = ["AbilityConfig", "configure", "get_global_config"]
