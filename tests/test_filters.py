"""Tests for filter expression types and the field proxy."""

from __future__ import annotations

import pytest

from scalarq.filters import (
    NULL_VALUE_ERROR,
    ComparisonExpression,
    FieldProxy,
    LogicalExpression,
    field_ref,
    iter_field_names,
)
from scalarq.parser import parse_filter


class TestFilterExpression:
    def test_comparison_creation(self):
        expr = ComparisonExpression("fieldInt64", "<", 10)
        assert expr.field_name == "fieldInt64"
        assert expr.op == "<"
        assert expr.value == 10

    def test_logical_and(self):
        a = ComparisonExpression("x", ">", 1)
        b = ComparisonExpression("x", "<", 5)
        combined = a & b
        assert isinstance(combined, LogicalExpression)
        assert combined.op == "AND"
        assert combined.children == [a, b]

    def test_logical_or(self):
        combined = ComparisonExpression("x", "==", 1) | ComparisonExpression("x", "==", 2)
        assert combined.op == "OR"

    def test_logical_not(self):
        negated = ~ComparisonExpression("b", "==", True)
        assert negated.op == "NOT"
        assert len(negated.children) == 1

    def test_equality_distinguishes_value_types(self):
        assert ComparisonExpression("x", "==", 1) != ComparisonExpression("x", "==", True)
        assert ComparisonExpression("x", "==", 1) != ComparisonExpression("x", "==", 1.0)

    def test_hashable(self):
        a = ComparisonExpression("x", "IN", [1, 2])
        b = ComparisonExpression("x", "IN", [1, 2])
        assert hash(a) == hash(b)
        assert len({a & b, a & b}) == 1

    def test_to_dict(self):
        expr = parse_filter("x < 10 and not y in [1]")
        assert expr.to_dict() == {
            "op": "AND",
            "children": [
                {"field": "x", "op": "<", "value": 10},
                {"op": "NOT", "children": [{"field": "y", "op": "IN", "value": [1]}]},
            ],
        }


class TestFieldProxy:
    def test_comparisons(self):
        f = field_ref("fieldInt64")
        assert isinstance(f, FieldProxy)
        assert (f == 3) == ComparisonExpression("fieldInt64", "==", 3)
        assert (f != 3).op == "!="
        assert (f > 3).op == ">"
        assert (f >= 3).op == ">="
        assert (f < 3).op == "<"
        assert (f <= 3).op == "<="

    def test_none_rejected(self):
        with pytest.raises(TypeError, match=NULL_VALUE_ERROR):
            field_ref("x") == None  # noqa: E711

    def test_membership(self):
        assert field_ref("x").in_((1, 2)) == ComparisonExpression("x", "IN", [1, 2])
        assert field_ref("x").not_in([3]).op == "NOT_IN"

    def test_like_and_startswith(self):
        assert field_ref("s").like("a_c%").value == "a_c%"
        assert field_ref("s").startswith("50%_off").value == "50\\%\\_off%"

    def test_between_matches_chained_parse(self):
        assert field_ref("x").between(1, 5) == parse_filter("1 <= x <= 5")

    def test_bool_helpers(self):
        assert field_ref("b").is_true() == parse_filter("b")
        assert field_ref("b").is_false() == parse_filter("b == false")


def test_iter_field_names():
    expr = parse_filter("b == 1 and (a < 2 or b > 3) and not c in [1]")
    assert iter_field_names(expr) == ["b", "a", "c"]
