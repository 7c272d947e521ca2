"""Tests for branch condition evaluation.

Tests enforce pure function behavior:
- Deterministic outputs
- All operators handled
- Unanswered or mistyped answers never match
"""

import pytest

from leadflow.domain.branching import evaluate_condition, match_branch
from leadflow.schemas.questions import BranchCondition, BranchOperator, BranchRule

pytestmark = pytest.mark.unit


def _cond(operator: BranchOperator, value, question_id: str = "q") -> BranchCondition:
    return BranchCondition(question_id=question_id, operator=operator, value=value)


def test_operator_enum_has_all_types():
    assert BranchOperator.EQUALS == "equals"
    assert BranchOperator.CONTAINS == "contains"
    assert BranchOperator.GREATER_THAN == "greater_than"
    assert BranchOperator.LESS_THAN == "less_than"


class TestEquals:
    def test_matching_string(self):
        assert evaluate_condition(_cond(BranchOperator.EQUALS, "enterprise"), {"q": "enterprise"})

    def test_non_matching_string(self):
        assert not evaluate_condition(_cond(BranchOperator.EQUALS, "enterprise"), {"q": "startup"})

    def test_boolean_true_does_not_equal_one(self):
        """Yes-no answers compare strictly: True is not 1."""
        assert not evaluate_condition(_cond(BranchOperator.EQUALS, 1), {"q": True})
        assert not evaluate_condition(_cond(BranchOperator.EQUALS, True), {"q": 1})

    def test_boolean_false_matches_false(self):
        assert evaluate_condition(_cond(BranchOperator.EQUALS, False), {"q": False})
        assert not evaluate_condition(_cond(BranchOperator.EQUALS, False), {"q": 0})

    def test_int_equals_float(self):
        assert evaluate_condition(_cond(BranchOperator.EQUALS, 3), {"q": 3.0})


class TestContains:
    def test_list_membership(self):
        assert evaluate_condition(_cond(BranchOperator.CONTAINS, "payment"), {"q": ["cms", "payment"]})

    def test_list_without_value(self):
        assert not evaluate_condition(_cond(BranchOperator.CONTAINS, "payment"), {"q": ["cms"]})

    def test_string_substring(self):
        assert evaluate_condition(_cond(BranchOperator.CONTAINS, "shop"), {"q": "an online shop"})

    def test_number_answer_never_contains(self):
        assert not evaluate_condition(_cond(BranchOperator.CONTAINS, "1"), {"q": 123})


class TestNumericComparisons:
    def test_greater_than(self):
        assert evaluate_condition(_cond(BranchOperator.GREATER_THAN, 10), {"q": 11})
        assert not evaluate_condition(_cond(BranchOperator.GREATER_THAN, 10), {"q": 10})

    def test_less_than(self):
        assert evaluate_condition(_cond(BranchOperator.LESS_THAN, 10), {"q": 9.5})
        assert not evaluate_condition(_cond(BranchOperator.LESS_THAN, 10), {"q": 10})

    def test_string_answer_never_compares(self):
        assert not evaluate_condition(_cond(BranchOperator.GREATER_THAN, 10), {"q": "50"})

    def test_boolean_answer_is_not_a_number(self):
        assert not evaluate_condition(_cond(BranchOperator.GREATER_THAN, 0), {"q": True})

    @pytest.mark.parametrize("operator", [BranchOperator.GREATER_THAN, BranchOperator.LESS_THAN])
    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_answer_never_compares(self, operator, value):
        assert not evaluate_condition(_cond(operator, 10), {"q": value})


class TestUnanswered:
    @pytest.mark.parametrize("operator", list(BranchOperator))
    def test_missing_answer_never_matches(self, operator):
        assert not evaluate_condition(_cond(operator, "x"), {})

    @pytest.mark.parametrize("operator", list(BranchOperator))
    def test_none_answer_never_matches(self, operator):
        assert not evaluate_condition(_cond(operator, None), {"q": None})


class TestMatchBranch:
    def test_first_match_wins(self):
        rules = (
            BranchRule(condition=_cond(BranchOperator.GREATER_THAN, 5), next_question_id="big"),
            BranchRule(condition=_cond(BranchOperator.GREATER_THAN, 1), next_question_id="medium"),
        )
        assert match_branch(rules, {"q": 10}) == "big"
        assert match_branch(rules, {"q": 3}) == "medium"

    def test_no_match_returns_none(self):
        rules = (BranchRule(condition=_cond(BranchOperator.EQUALS, "a"), next_question_id="x"),)
        assert match_branch(rules, {"q": "b"}) is None

    def test_no_rules_returns_none(self):
        assert match_branch((), {"q": "b"}) is None
