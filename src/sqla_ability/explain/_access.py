"""explain_access() — explain why an action is or is not permitted."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqla_ability.compiler._eval import handle_unloaded_relationship
from sqla_ability.exceptions import UnloadedRelationshipError
from sqla_ability.explain._models import AccessExplanation, AccessRuleEvaluation

if TYPE_CHECKING:
    from sqla_ability.ability._ability import Ability

__all__ = ["explain_access"]


def explain_access(ability: Ability, action: str, subject: Any) -> AccessExplanation:
    """Explain the outcome of ``ability.allows(action, subject)``.

    Walks the relevant rules from the most recent one, recording whether
    each matched, and stops at the rule that decides the check.

    Args:
        ability: The ability to check.
        action: The action string (e.g., ``"read"``).
        subject: A mapped instance or model class.

    Returns:
        An ``AccessExplanation`` with per-rule results and the verdict.
    """
    subject_type = subject.__name__ if isinstance(subject, type) else type(subject).__name__
    relevant = ability.relevant_rules(action, subject)

    evaluations: list[AccessRuleEvaluation] = []
    allowed = False
    for rule in relevant:
        unloaded: UnloadedRelationshipError | None = None
        try:
            matched = rule.matches(subject)
        except UnloadedRelationshipError as exc:
            # The check cannot continue past this rule; the config decides.
            matched, unloaded = False, exc
        evaluations.append(
            AccessRuleEvaluation(
                description=str(rule),
                behavior="can" if rule.base_behavior else "cannot",
                matched=matched,
                decisive=matched or unloaded is not None,
            )
        )
        if unloaded is not None:
            allowed = handle_unloaded_relationship(unloaded)
            break
        if matched:
            allowed = rule.base_behavior
            break

    return AccessExplanation(
        action=action,
        subject_type=subject_type,
        subject_repr=repr(subject),
        allowed=allowed,
        deny_by_default=not relevant,
        rules=evaluations,
    )
