"""Tests for the question catalog and its structural invariants."""

import pytest
from pydantic import ValidationError

from leadflow.core.exceptions import CatalogError
from leadflow.domain.catalog import QUESTIONNAIRE_VERSION, QuestionCatalog, get_default_catalog
from leadflow.schemas.questions import (
    BranchCondition,
    BranchOperator,
    BranchRule,
    Question,
    QuestionOption,
    QuestionType,
)

pytestmark = pytest.mark.unit


def _text(question_id: str, branching: tuple[BranchRule, ...] = ()) -> Question:
    return Question(id=question_id, type=QuestionType.TEXT, title=question_id, branching=branching)


def _rule(source: str, target: str, value="x") -> BranchRule:
    return BranchRule(
        condition=BranchCondition(question_id=source, operator=BranchOperator.EQUALS, value=value),
        next_question_id=target,
    )


class TestDefaultCatalog:
    """The portal questionnaire shipped with the engine."""

    def test_version_matches_constant(self):
        assert get_default_catalog().version == QUESTIONNAIRE_VERSION == "1.0.0"

    def test_default_order(self):
        ids = [q.id for q in get_default_catalog().get_all_questions()]
        assert ids == [
            "project_type",
            "industry",
            "features",
            "design_style",
            "timeline",
            "budget",
            "current_website",
            "current_website_url",
            "decision_maker",
            "project_goals",
            "biggest_challenge",
            "additional_info",
        ]

    def test_get_all_questions_is_restartable(self):
        """Every call returns the same order and mutating the result does not affect the catalog."""
        catalog = get_default_catalog()
        first = catalog.get_all_questions()
        first.clear()
        assert [q.id for q in catalog.get_all_questions()] == [q.id for q in get_default_catalog().get_all_questions()]
        assert len(catalog.get_all_questions()) == 12

    def test_lookup_helpers(self):
        catalog = get_default_catalog()
        assert catalog.get_question("budget").type == QuestionType.CARD_SELECT
        assert catalog.get_question("missing") is None
        assert catalog.index_of("timeline") == 4
        assert "budget" in catalog
        assert "missing" not in catalog
        assert len(catalog) == 12

    def test_index_of_unknown_raises_key_error(self):
        with pytest.raises(KeyError):
            get_default_catalog().index_of("missing")

    def test_budget_option_points_follow_score_table(self):
        budget = get_default_catalog().get_question("budget")
        assert {o.value: o.points for o in budget.options} == {
            "under_5k": 5,
            "5k_10k": 15,
            "10k_25k": 25,
            "25k_50k": 30,
            "50k_plus": 35,
        }

    def test_current_website_branches_both_ways(self):
        rules = get_default_catalog().get_question("current_website").branching
        assert [(r.condition.value, r.next_question_id) for r in rules] == [
            (True, "current_website_url"),
            (False, "decision_maker"),
        ]


class TestCatalogInvariants:
    """QuestionCatalog rejects structurally broken catalogs at construction."""

    def test_duplicate_ids_rejected(self):
        with pytest.raises(CatalogError, match="Duplicate question id 'a'"):
            QuestionCatalog("1", [_text("a"), _text("a")])

    def test_dangling_branch_target_rejected(self):
        with pytest.raises(CatalogError, match="unknown question 'ghost'"):
            QuestionCatalog("1", [_text("a", (_rule("a", "ghost"),)), _text("b")])

    def test_dangling_condition_question_rejected(self):
        with pytest.raises(CatalogError, match="branches on unknown question 'ghost'"):
            QuestionCatalog("1", [_text("a", (_rule("ghost", "b"),)), _text("b")])

    def test_backward_branch_rejected(self):
        with pytest.raises(CatalogError, match="branches backwards"):
            QuestionCatalog("1", [_text("a"), _text("b", (_rule("b", "a"),))])

    def test_self_branch_rejected(self):
        with pytest.raises(CatalogError, match="branches backwards"):
            QuestionCatalog("1", [_text("a", (_rule("a", "a"),))])

    def test_choice_question_without_options_rejected(self):
        question = Question(id="pick", type=QuestionType.SELECT, title="Pick one")
        with pytest.raises(CatalogError, match="has no options"):
            QuestionCatalog("1", [question])

    def test_valid_forward_branch_accepted(self):
        catalog = QuestionCatalog("2", [_text("a", (_rule("a", "c"),)), _text("b"), _text("c")])
        assert catalog.version == "2"
        assert len(catalog) == 3

    def test_empty_catalog_is_allowed(self):
        assert QuestionCatalog("0", []).get_all_questions() == []


class TestQuestionModel:
    def test_option_lookup(self):
        question = Question(
            id="size",
            type=QuestionType.SELECT,
            title="Size",
            options=(QuestionOption(value="s", label="Small"), QuestionOption(value="l", label="Large")),
        )
        assert question.option("l").label == "Large"
        assert question.option("xl") is None

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            Question(id="q", type="dropdown", title="Q")

    def test_unknown_operator_rejected(self):
        with pytest.raises(ValidationError):
            BranchCondition(question_id="q", operator="not_equals", value=1)

    def test_empty_id_rejected(self):
        with pytest.raises(ValidationError):
            Question(id="", type=QuestionType.TEXT, title="Q")
