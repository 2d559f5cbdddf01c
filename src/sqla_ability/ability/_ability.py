"""Ability — ordered collection of rules and action aliases."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any, TypeVar

from sqla_ability._types import MANAGE, NOT, Conditions, SubjectType
from sqla_ability.ability._rule import Rule
from sqla_ability.exceptions import AbilityError

if TYPE_CHECKING:
    from sqlalchemy import Select

__all__ = ["Ability", "DEFAULT_ALIASES"]

T = TypeVar("T")

# Checking any alias also consults rules defined for the target action.
DEFAULT_ALIASES: dict[str, tuple[str, ...]] = {
    "read": ("index", "show"),
    "create": ("new",),
    "update": ("edit",),
}

_SCALAR_SKIP = (Mapping, list, tuple, set, frozenset, range)


def _as_tuple(value: Any, what: str) -> tuple[Any, ...]:
    if isinstance(value, (str, type)):
        return (value,)
    items = tuple(value)
    if not items:
        raise AbilityError(f"a rule needs at least one {what}")
    return items


class Ability:
    """The permissions of one actor.

    Rules are kept in definition order. Later rules take precedence over
    earlier ones, both for point checks and for ``accessible_by``.

    Example::

        ability = Ability()
        ability.can("read", Ledger, {"records": {"name": "better_record"}})
        ability.cannot("read", Ledger, title="archived")

        ability.allows("read", ledger)
        stmt = ability.accessible_by(Ledger).order_by(Ledger.id)
    """

    def __init__(self, *, aliases: Mapping[str, Iterable[str]] | None = None) -> None:
        self._rules: list[Rule] = []
        self._aliases: dict[str, list[str]] = {}
        source = DEFAULT_ALIASES if aliases is None else aliases
        for target, actions in source.items():
            self.alias_action(*actions, to=target)

    # ------------------------------------------------------------------
    # Definition
    # ------------------------------------------------------------------

    def can(
        self,
        action: str | Iterable[str],
        subject: SubjectType | Iterable[SubjectType],
        conditions: Conditions | Any = None,
        /,
        **kw_conditions: Any,
    ) -> Rule:
        """Grant *action* on *subject*, optionally restricted by conditions.

        Args:
            action: An action name or a list of them.
            subject: A mapped class, a list of classes, or ``ALL``.
            conditions: A condition mapping, or a callable block that
                receives the instance being checked.
            **kw_conditions: Extra conditions merged into the mapping.

        Returns:
            The new ``Rule``.

        Example::

            ability.can("read", Record, {"not": {"name": "unreadable"}})
            ability.can("update", Shape, color=[Color.RED, Color.BLUE])
        """
        return self._add_rule(True, action, subject, conditions, kw_conditions)

    def cannot(
        self,
        action: str | Iterable[str],
        subject: SubjectType | Iterable[SubjectType],
        conditions: Conditions | Any = None,
        /,
        **kw_conditions: Any,
    ) -> Rule:
        """Revoke *action* on *subject* for records matching the conditions.

        Takes the same arguments as :meth:`can`.
        """
        return self._add_rule(False, action, subject, conditions, kw_conditions)

    def _add_rule(
        self,
        base_behavior: bool,
        action: str | Iterable[str],
        subject: SubjectType | Iterable[SubjectType],
        conditions: Conditions | Any,
        kw_conditions: dict[str, Any],
    ) -> Rule:
        block = None
        mapping: dict[str, Any] = {}
        if conditions is not None and not isinstance(conditions, Mapping):
            if not callable(conditions):
                raise AbilityError(
                    f"conditions must be a mapping or a callable, got {type(conditions).__name__}"
                )
            if kw_conditions:
                raise AbilityError("a rule takes either a block or conditions, not both")
            block = conditions
        else:
            mapping.update(conditions or {})
            mapping.update(kw_conditions)

        rule = Rule(
            base_behavior=base_behavior,
            actions=_as_tuple(action, "action"),
            subjects=_as_tuple(subject, "subject"),
            conditions=mapping,
            block=block,
        )
        self._rules.append(rule)
        return rule

    def alias_action(self, *actions: str, to: str) -> None:
        """Make checks for any of *actions* also consult rules for *to*.

        Example::

            ability.alias_action("archive", "restore", to="curate")
        """
        if to in actions:
            raise AbilityError(f"you cannot alias the action {to!r} to itself")
        if to in self.expand_actions(actions):
            raise AbilityError(f"aliasing {actions!r} to {to!r} would create a cycle")
        targets = self._aliases.setdefault(to, [])
        for action in actions:
            if action not in targets:
                targets.append(action)

    def merge(self, other: Ability) -> Ability:
        """Append the rules and aliases of *other* to this ability."""
        self._rules.extend(other.rules)
        for target, actions in other.aliases.items():
            targets = self._aliases.setdefault(target, [])
            targets.extend(a for a in actions if a not in targets)
        return self

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    @property
    def rules(self) -> tuple[Rule, ...]:
        """All rules in definition order."""
        return tuple(self._rules)

    @property
    def aliases(self) -> dict[str, tuple[str, ...]]:
        return {target: tuple(actions) for target, actions in self._aliases.items()}

    def expand_actions(self, actions: Iterable[str]) -> set[str]:
        """Return *actions* plus every action aliased to them, recursively."""
        expanded: set[str] = set()
        pending = list(actions)
        while pending:
            action = pending.pop()
            if action in expanded:
                continue
            expanded.add(action)
            pending.extend(self._aliases.get(action, ()))
        return expanded

    def relevant_rules(self, action: str, subject: Any) -> list[Rule]:
        """Rules that apply to *action* on *subject*, most recent first.

        *subject* may be an instance or a class.
        """
        subject_class = subject if isinstance(subject, (type, str)) else type(subject)
        relevant: list[Rule] = []
        for rule in reversed(self._rules):
            if not rule.applies_to(subject_class):
                continue
            expanded = self.expand_actions(rule.actions)
            if MANAGE in expanded or action in expanded:
                relevant.append(rule)
        return relevant

    def attributes_for(self, action: str, model: type) -> dict[str, Any]:
        """Scalar equality conditions of relevant ``can`` rules.

        Useful to pre-populate a new record so that it satisfies the rules
        it will be checked against. Later rules override earlier ones.

        Example::

            ability.can("create", Record, ledger_id=7)
            record = Record(**ability.attributes_for("create", Record))
        """
        attributes: dict[str, Any] = {}
        for rule in reversed(self.relevant_rules(action, model)):
            if not rule.base_behavior:
                continue
            for key, value in rule.conditions.items():
                if key == NOT or isinstance(value, _SCALAR_SKIP):
                    continue
                attributes[key] = value
        return attributes

    # ------------------------------------------------------------------
    # Checks and queries
    # ------------------------------------------------------------------

    def allows(self, action: str, subject: Any) -> bool:
        """Whether *action* is permitted on *subject* (instance or class)."""
        from sqla_ability._checks import is_allowed

        return is_allowed(self, action, subject)

    def denies(self, action: str, subject: Any) -> bool:
        """Inverse of :meth:`allows`."""
        return not self.allows(action, subject)

    def authorize(self, action: str, subject: T, *, message: str | None = None) -> T:
        """Return *subject*, or raise ``AccessDenied`` if not permitted."""
        from sqla_ability._checks import authorize

        return authorize(self, action, subject, message=message)

    def accessible_by(self, model: type, action: str | None = None) -> Select[Any]:
        """Return ``select(model)`` restricted to the permitted records."""
        from sqla_ability.compiler._query import accessible_by

        return accessible_by(self, model, action)

    def __repr__(self) -> str:
        return f"Ability(rules={len(self._rules)})"
