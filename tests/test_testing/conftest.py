"""Import fixtures from sqla_ability.testing for test discovery."""

from sqla_ability.testing._fixtures import ability, ability_config, isolated_ability_state

__all__ = ["ability", "ability_config", "isolated_ability_state"]
