"""sqla-ability testing utilities — assertions, fixtures and isolation.

Example::

    from sqla_ability.testing import assert_accessible

    def test_only_green_shapes(session, ability, shapes):
        ability.can("read", Shape, color=Color.GREEN)
        assert_accessible(session, ability, Shape, [shapes["green"]])
"""

from sqla_ability.testing._assertions import (
    assert_accessible,
    assert_allowed,
    assert_denied,
    assert_query_contains,
)
from sqla_ability.testing._fixtures import (
    ability,
    ability_config,
    isolated_ability_state,
)
from sqla_ability.testing._isolation import isolated_config

__all__ = [
    "ability",
    "ability_config",
    "assert_accessible",
    "assert_allowed",
    "assert_denied",
    "assert_query_contains",
    "isolated_ability_state",
    "isolated_config",
]
