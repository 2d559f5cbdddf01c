"""Point checks — is_allowed() and authorize() for single subjects."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from sqla_ability.compiler._eval import handle_unloaded_relationship
from sqla_ability.config._config import get_global_config
from sqla_ability.exceptions import AccessDenied, UnloadedRelationshipError

if TYPE_CHECKING:
    from sqla_ability.ability._ability import Ability

__all__ = ["authorize", "is_allowed"]

T = TypeVar("T")


def is_allowed(ability: Ability, action: str, subject: Any) -> bool:
    """Check whether *ability* permits *action* on *subject*.

    Relevant rules are consulted from the most recently defined to the
    oldest; the first one that matches decides. No match means deny.
    The database is never queried for column values; relationships are
    read from the instance (lazy-loading where the session allows it).

    Args:
        ability: The ability to check.
        action: The action string (e.g., ``"read"``, ``"update"``).
        subject: A mapped instance, or a model class for a class-level
            check ("can the actor read some records of this type?").

    Returns:
        ``True`` if access is granted, ``False`` if denied.

    Example::

        if is_allowed(ability, "read", ledger):
            return ledger
    """
    log_decisions = get_global_config().log_rule_decisions
    for rule in ability.relevant_rules(action, subject):
        try:
            matched = rule.matches(subject)
        except UnloadedRelationshipError as exc:
            return handle_unloaded_relationship(exc)
        if matched:
            if log_decisions:
                from sqla_ability._audit import log_access_check

                log_access_check(action=action, subject=subject, rule=rule)
            return rule.base_behavior

    if log_decisions:
        from sqla_ability._audit import log_access_check

        log_access_check(action=action, subject=subject, rule=None)
    return False


def authorize(
    ability: Ability,
    action: str,
    subject: T,
    *,
    message: str | None = None,
) -> T:
    """Assert that *ability* permits *action* on *subject*.

    Raises :class:`~sqla_ability.exceptions.AccessDenied` when access is
    denied. Returns the subject on success, so it can wrap a lookup.

    Args:
        ability: The ability to check.
        action: The action string.
        subject: A mapped instance or model class.
        message: Optional custom error message for the exception.

    Raises:
        AccessDenied: If the action is not permitted.

    Example::

        ledger = authorize(ability, "update", session.get(Ledger, 1))
    """
    if not is_allowed(ability, action, subject):
        raise AccessDenied(action=action, subject=subject, message=message)
    return subject
