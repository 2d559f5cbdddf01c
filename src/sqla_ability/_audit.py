"""Audit logging for rule evaluation decisions."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy import ColumnElement

from sqla_ability.ability._rule import Rule

__all__ = ["log_access_check", "log_rule_evaluation"]

logger = logging.getLogger("sqla_ability")


def log_rule_evaluation(
    *,
    entity: type,
    action: str,
    rules: Sequence[Rule],
    result_expr: ColumnElement[bool],
) -> None:
    """Log how the rules for (entity, action) were folded into a filter.

    Logging levels:
    - INFO: Summary (entity, action, rule count)
    - DEBUG: Detailed (each rule, filter expression)
    - WARNING: No relevant rule (deny-by-default triggered)
    """
    entity_name = entity.__name__
    rule_count = len(rules)

    if rule_count == 0:
        logger.warning(
            "No rule defined for (%s, %r) — deny-by-default applied",
            entity_name,
            action,
        )
        return

    logger.info(
        "Rule evaluation: %s.%s — %d rule(s) applied",
        entity_name,
        action,
        rule_count,
    )

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "Rules for %s.%s: %s — filter: %s",
            entity_name,
            action,
            [str(r) for r in rules],
            result_expr,
        )


def log_access_check(*, action: str, subject: Any, rule: Rule | None) -> None:
    """Log the outcome of a point check and the rule that decided it."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    subject_name = subject.__name__ if isinstance(subject, type) else type(subject).__name__
    if rule is None:
        logger.debug("Access check: %s %s denied — no matching rule", action, subject_name)
        return
    logger.debug(
        "Access check: %s %s %s by rule %r",
        action,
        subject_name,
        "allowed" if rule.base_behavior else "denied",
        str(rule),
    )
