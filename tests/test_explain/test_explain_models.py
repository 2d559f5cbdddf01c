"""Tests for the explain data models."""

from __future__ import annotations

import dataclasses

import pytest

from sqla_ability.explain import (
    AccessExplanation,
    AccessRuleEvaluation,
    EntityExplanation,
    QueryExplanation,
    RuleEvaluation,
)


def _entity(deny: bool = False) -> EntityExplanation:
    rules = [] if deny else [RuleEvaluation("can read Shape", "can", "true")]
    return EntityExplanation(
        entity_name="Shape",
        entity_type="tests.models.Shape",
        action="read",
        rules_found=len(rules),
        rules=rules,
        combined_filter_sql="false" if deny else "true",
        deny_by_default=deny,
    )


def test_models_are_frozen():
    evaluation = RuleEvaluation("can read Shape", "can", "true")
    with pytest.raises(dataclasses.FrozenInstanceError):
        evaluation.behavior = "cannot"  # type: ignore[misc]


def test_query_explanation_warns_on_deny_by_default():
    explanation = QueryExplanation(
        action="read",
        ability_repr="Ability(rules=0)",
        entities=[_entity(deny=True)],
        authorized_sql="SELECT 1",
        has_deny_by_default=True,
    )
    text = str(explanation)
    assert "DENY BY DEFAULT" in text
    assert "WARNING" in text


def test_entity_to_dict_nests_rules():
    data = _entity().to_dict()
    assert data["rules"] == [
        {"description": "can read Shape", "behavior": "can", "filter_sql": "true"}
    ]


def test_access_explanation_no_match_marker():
    explanation = AccessExplanation(
        action="read",
        subject_type="Shape",
        subject_repr="<Shape>",
        allowed=False,
        deny_by_default=False,
        rules=[AccessRuleEvaluation("can read Shape", "can", False, False)],
    )
    assert "[NO MATCH]" in str(explanation)
    assert "(decisive)" not in str(explanation)
