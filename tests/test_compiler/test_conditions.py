"""Tests for compiler/_conditions.py — compile_conditions()."""

from __future__ import annotations

import pytest
from sqlalchemy import ColumnElement

from sqla_ability import NOT, InvalidConditionError, compile_conditions
from tests.models import Color, Ledger, Record, Shape


def _sql(expr: ColumnElement[bool]) -> str:
    return str(expr.compile(compile_kwargs={"literal_binds": True}))


class TestColumnConditions:
    """Column keys compile to equality, IN, IS NULL and range checks."""

    def test_empty_conditions_are_true(self):
        assert _sql(compile_conditions(Record, {})) in ("true", "1 = 1")

    def test_equality(self):
        assert _sql(compile_conditions(Record, {"name": "x"})) == "records.name = 'x'"

    def test_none_is_null(self):
        assert _sql(compile_conditions(Record, {"name": None})) == "records.name IS NULL"

    def test_list_is_in(self):
        sql = _sql(compile_conditions(Record, {"name": ["a", "b"]}))
        assert sql == "records.name IN ('a', 'b')"

    def test_list_with_none_adds_is_null(self):
        sql = _sql(compile_conditions(Record, {"name": ["a", None]}))
        assert "records.name IN ('a')" in sql
        assert "records.name IS NULL" in sql
        assert " OR " in sql

    def test_empty_list_is_false(self):
        sql = _sql(compile_conditions(Record, {"name": []}))
        assert sql in ("false", "0 = 1", "1 != 1")

    def test_enum_value(self):
        sql = _sql(compile_conditions(Shape, {"color": Color.BLUE}))
        assert sql == "shapes.color = 'BLUE'"

    def test_enum_set(self):
        sql = _sql(compile_conditions(Shape, {"color": (Color.RED, Color.BLUE)}))
        assert sql == "shapes.color IN ('RED', 'BLUE')"

    def test_range(self):
        sql = _sql(compile_conditions(Shape, {"sides": range(3, 6)}))
        assert sql == "shapes.sides >= 3 AND shapes.sides < 6"

    def test_multiple_keys_are_anded(self):
        sql = _sql(compile_conditions(Record, {"name": "x", "ledger_id": 2}))
        assert sql == "records.name = 'x' AND records.ledger_id = 2"


class TestNegation:
    """The ``not`` key negates its mapping."""

    def test_not_single_field(self):
        sql = _sql(compile_conditions(Record, {NOT: {"name": "unreadable"}}))
        assert sql == "records.name != 'unreadable'"

    def test_not_multiple_fields(self):
        sql = _sql(compile_conditions(Record, {NOT: {"name": "x", "ledger_id": 1}}))
        assert sql.startswith("NOT (")

    def test_not_around_relationship(self):
        sql = _sql(compile_conditions(Ledger, {NOT: {"records": {"name": "x"}}}))
        assert sql.startswith("NOT")
        assert "EXISTS" in sql


class TestRelationshipConditions:
    """Relationship keys compile to correlated EXISTS subqueries."""

    def test_one_to_many(self):
        sql = _sql(compile_conditions(Ledger, {"records": {"name": "x"}}))
        assert sql.startswith("EXISTS (SELECT 1")
        assert "records.name = 'x'" in sql
        assert "JOIN" not in sql

    def test_positive_and_negative_are_separate_subqueries(self):
        sql = _sql(
            compile_conditions(
                Ledger,
                {"records": {NOT: {"name": "crappy_record"}, "name": "better_record"}},
            )
        )
        assert sql.count("EXISTS") == 2
        assert sql.index("NOT") < sql.rindex("EXISTS")
        assert "JOIN" not in sql

    def test_split_form_matches_nested_form(self):
        nested = compile_conditions(
            Ledger, {"records": {NOT: {"name": "crappy_record"}, "name": "better_record"}}
        )
        split = compile_conditions(
            Ledger,
            {"records": {"name": "better_record"}, NOT: {"records": {"name": "crappy_record"}}},
        )
        assert _sql(nested) == _sql(split)

    def test_empty_nested_mapping_tests_existence(self):
        sql = _sql(compile_conditions(Ledger, {"records": {}}))
        assert sql.startswith("EXISTS")
        assert "records.name" not in sql

    def test_two_levels(self):
        sql = _sql(compile_conditions(Ledger, {"records": {"labels": {"name": "urgent"}}}))
        assert sql.count("EXISTS") == 2
        assert "labels.name = 'urgent'" in sql


class TestInvalidConditions:
    """Malformed conditions raise InvalidConditionError."""

    def test_unknown_attribute(self):
        with pytest.raises(InvalidConditionError, match="no attribute 'nope'"):
            compile_conditions(Record, {"nope": 1})

    def test_mapping_on_column(self):
        with pytest.raises(InvalidConditionError, match="is a column"):
            compile_conditions(Record, {"name": {"x": 1}})

    def test_scalar_on_relationship(self):
        with pytest.raises(InvalidConditionError, match="expects a mapping"):
            compile_conditions(Ledger, {"records": "x"})

    def test_scalar_under_not(self):
        with pytest.raises(InvalidConditionError, match="expects a mapping"):
            compile_conditions(Record, {NOT: "x"})

    def test_range_with_step(self):
        with pytest.raises(InvalidConditionError, match="step 1"):
            compile_conditions(Shape, {"sides": range(0, 10, 2)})

    def test_unmapped_class(self):
        class Plain:
            pass

        with pytest.raises(InvalidConditionError, match="not a mapped class"):
            compile_conditions(Plain, {"x": 1})
