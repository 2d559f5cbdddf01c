"""Tests for config/_config.py — AbilityConfig and the global config."""

from __future__ import annotations

import dataclasses

import pytest

from sqla_ability import AbilityConfig, configure
from sqla_ability.config._config import (
    _reset_global_config,
    _set_global_config,
    get_global_config,
)


class TestAbilityConfig:
    def test_defaults(self):
        config = AbilityConfig()
        assert config.on_missing_rule == "deny"
        assert config.default_action == "read"
        assert config.log_rule_decisions is False
        assert config.on_unloaded_relationship == "deny"

    def test_frozen(self):
        config = AbilityConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.default_action = "update"  # type: ignore[misc]

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"on_missing_rule": "explode"},
            {"on_unloaded_relationship": "ignore"},
            {"default_action": ""},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            AbilityConfig(**kwargs)

    def test_merge_applies_overrides(self):
        base = AbilityConfig()
        merged = base.merge(on_missing_rule="raise", log_rule_decisions=True)
        assert merged.on_missing_rule == "raise"
        assert merged.log_rule_decisions is True
        assert merged.default_action == "read"
        assert base.on_missing_rule == "deny"

    def test_merge_ignores_none(self):
        base = AbilityConfig(default_action="index")
        assert base.merge() == base


class TestGlobalConfig:
    def setup_method(self) -> None:
        _reset_global_config()

    def teardown_method(self) -> None:
        _reset_global_config()

    def test_configure_updates_global(self):
        result = configure(on_unloaded_relationship="warn")
        assert result is get_global_config()
        assert get_global_config().on_unloaded_relationship == "warn"

    def test_configure_accumulates(self):
        configure(default_action="index")
        configure(on_missing_rule="raise")
        config = get_global_config()
        assert config.default_action == "index"
        assert config.on_missing_rule == "raise"

    def test_set_and_reset(self):
        _set_global_config(AbilityConfig(log_rule_decisions=True))
        assert get_global_config().log_rule_decisions is True
        _reset_global_config()
        assert get_global_config() == AbilityConfig()
