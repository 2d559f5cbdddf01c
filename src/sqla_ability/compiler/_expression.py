"""Rule folding — combine an ability's relevant rules into one filter."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ColumnElement, and_, false, not_, or_, true

from sqla_ability.compiler._conditions import compile_conditions
from sqla_ability.config._config import get_global_config
from sqla_ability.exceptions import NoRuleError, UnsupportedRuleError

if TYPE_CHECKING:
    from sqla_ability.ability._ability import Ability
    from sqla_ability.ability._rule import Rule

__all__ = ["evaluate_rules", "query_rules"]


def query_rules(ability: Ability, model: type, action: str) -> list[Rule]:
    """Relevant rules for (model, action) in definition order.

    Consecutive identical rules are kept once; they cannot change the
    folded filter.

    Raises:
        UnsupportedRuleError: If a relevant rule was defined with a block.
    """
    ordered: list[Rule] = []
    for rule in reversed(ability.relevant_rules(action, model)):
        if rule.block is not None:
            raise UnsupportedRuleError(
                f"The accessible_by call cannot be used with a block rule ({rule}); "
                f"define the rule with a condition mapping instead"
            )
        if ordered and ordered[-1] == rule:
            continue
        ordered.append(rule)
    return ordered


def evaluate_rules(ability: Ability, model: type, action: str) -> ColumnElement[bool]:
    """Fold all relevant rules for (model, action) into a single filter.

    Rules are applied in definition order, starting from ``false()``:

    - a rule without conditions resets the filter to ``true()`` (``can``)
      or ``false()`` (``cannot``);
    - a ``can`` rule gives ``(conditions) OR (previous)``;
    - a ``cannot`` rule gives ``NOT (conditions) AND (previous)``.

    A later rule therefore overrides an earlier one, exactly like
    ``Ability.allows``. Returns ``false()`` (deny by default) when no rule
    is relevant.

    When ``log_rule_decisions`` is enabled in the global config, logs
    the evaluation via the ``sqla_ability`` logger.

    Args:
        ability: The ability holding the rules.
        model: The SQLAlchemy model class.
        action: The action string.

    Returns:
        A ``ColumnElement[bool]`` suitable for ``Select.where()``.

    Raises:
        NoRuleError: If no rule is relevant and ``on_missing_rule="raise"``.
        UnsupportedRuleError: If a relevant rule was defined with a block.
    """
    config = get_global_config()
    rules = query_rules(ability, model, action)

    if not rules and config.on_missing_rule == "raise":
        raise NoRuleError(resource_type=model.__name__, action=action)

    result: ColumnElement[bool] = false()
    for rule in rules:
        result = _merge(result, rule, model)

    if config.log_rule_decisions:
        from sqla_ability._audit import log_rule_evaluation

        log_rule_evaluation(
            entity=model,
            action=action,
            rules=rules,
            result_expr=result,
        )

    return result


def _merge(
    accumulated: ColumnElement[bool],
    rule: Rule,
    model: type,
) -> ColumnElement[bool]:
    if not rule.has_conditions:
        return true() if rule.base_behavior else false()

    condition = compile_conditions(model, rule.conditions)
    if rule.base_behavior:
        return or_(condition, accumulated)
    # A NULL condition leaves the row to the earlier rules, as in-memory
    # checks skip a cannot rule whose conditions are not true.
    return and_(or_(not_(condition), condition.is_(None)), accumulated)
