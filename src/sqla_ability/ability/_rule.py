"""Rule dataclass — one ``can`` or ``cannot`` definition."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from sqla_ability._types import ALL, BlockCondition, Conditions, SubjectType
from sqla_ability.compiler._eval import match_conditions

__all__ = ["Rule"]


@dataclass(frozen=True, slots=True)
class Rule:
    """A single permission granted or revoked on an ability.

    Attributes:
        base_behavior: ``True`` for ``can`` rules, ``False`` for ``cannot``.
        actions: Action names the rule was defined for (before aliasing).
        subjects: Mapped classes the rule covers, or the ``ALL`` marker.
        conditions: Condition mapping; empty means "every record".
        block: Optional callable deciding in-memory checks instead of
            ``conditions``. Block rules cannot be turned into SQL.
    """

    base_behavior: bool
    actions: tuple[str, ...]
    subjects: tuple[SubjectType, ...]
    conditions: Conditions = field(default_factory=dict)
    block: BlockCondition | None = None

    @property
    def has_conditions(self) -> bool:
        return bool(self.conditions)

    def applies_to(self, subject_class: SubjectType) -> bool:
        """Whether the rule covers *subject_class* (or one of its bases)."""
        for subject in self.subjects:
            if subject == ALL or subject == subject_class:
                return True
            if (
                isinstance(subject, type)
                and isinstance(subject_class, type)
                and issubclass(subject_class, subject)
            ):
                return True
        return False

    def matches(self, subject: Any) -> bool:
        """Whether the rule decides a check on *subject*.

        A class subject is matched by rules without conditions and by any
        ``can`` rule, so ``ability.allows("read", Ledger)`` answers "can
        read some ledgers". ``cannot`` rules with conditions never decide a
        class-level check.
        """
        if isinstance(subject, type):
            return not self.has_conditions or self.base_behavior
        if self.block is not None:
            return bool(self.block(subject))
        return match_conditions(self.conditions, subject)

    def __str__(self) -> str:
        behavior = "can" if self.base_behavior else "cannot"
        actions = ", ".join(self.actions)
        subjects = ", ".join(s.__name__ if isinstance(s, type) else str(s) for s in self.subjects)
        if self.block is not None:
            name = getattr(self.block, "__name__", "<block>")
            return f"{behavior} {actions} {subjects} if {name}()"
        if self.conditions:
            return f"{behavior} {actions} {subjects} where {dict(self.conditions)!r}"
        return f"{behavior} {actions} {subjects}"
