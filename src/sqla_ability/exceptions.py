"""Exception hierarchy for sqla-ability."""

from __future__ import annotations

__all__ = [
    "AbilityError",
    "AccessDenied",
    "InvalidConditionError",
    "NoRuleError",
    "UnloadedRelationshipError",
    "UnsupportedRuleError",
]


def _subject_name(subject: object) -> str:
    if isinstance(subject, type):
        return subject.__name__
    if isinstance(subject, str):
        return subject
    return type(subject).__name__


class AbilityError(Exception):
    """Base exception for all sqla-ability errors."""


class AccessDenied(AbilityError):  # noqa: N818
    """The ability does not permit the requested action on the subject.

    Attributes:
        action: The action that was attempted.
        subject: The instance or class the action targeted.
        subject_name: Class name of the subject.

    Example::

        try:
            ability.authorize("destroy", ledger)
        except AccessDenied as exc:
            print(f"cannot {exc.action} {exc.subject_name}")
    """

    def __init__(
        self,
        *,
        action: str,
        subject: object,
        message: str | None = None,
    ) -> None:
        self.action = action
        self.subject = subject
        self.subject_name = _subject_name(subject)
        if message is None:
            message = f"Not authorized to {action} {self.subject_name}"
        super().__init__(message)


class NoRuleError(AbilityError):
    """No rule is relevant to (resource_type, action).

    Raised when configured with ``on_missing_rule="raise"`` instead of the
    default deny-by-default (WHERE FALSE) behavior.

    Attributes:
        resource_type: Name of the model with no relevant rule.
        action: The action with no relevant rule.
    """

    def __init__(self, *, resource_type: str, action: str) -> None:
        self.resource_type = resource_type
        self.action = action
        super().__init__(f"No rule defined for ({resource_type}, {action!r})")


class InvalidConditionError(AbilityError):
    """A condition mapping cannot be applied to its model.

    Raised for unknown attribute names, mappings given for plain columns,
    non-mapping values given for relationships, and unsupported ranges.
    """


class UnsupportedRuleError(AbilityError):
    """A rule cannot be translated into SQL.

    Raised when ``accessible_by`` meets a relevant rule defined with a
    Python block instead of a condition mapping.
    """


class UnloadedRelationshipError(AbilityError):
    """Relationship was not loaded and cannot be matched in-memory.

    Raised when ``on_unloaded_relationship`` is ``"raise"`` and a point
    check needs a relationship of a detached instance that was never loaded.

    Attributes:
        model: The model class that owns the relationship.
        relationship: The name of the unloaded relationship.
    """

    def __init__(self, *, model: str, relationship: str) -> None:
        self.model = model
        self.relationship = relationship
        super().__init__(
            f"Relationship '{relationship}' on {model} is not loaded. "
            f"Either eagerly load it or set on_unloaded_relationship='deny'."
        )
