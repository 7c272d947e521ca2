"""Question catalog schemas — the nodes of the adaptive questionnaire."""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class QuestionType(StrEnum):
    """Input types a question can render as."""

    TEXT = "text"
    TEXTAREA = "textarea"
    SELECT = "select"
    MULTI_SELECT = "multi-select"
    CARD_SELECT = "card-select"
    SLIDER = "slider"
    YES_NO = "yes-no"
    FILE_UPLOAD = "file-upload"


# Range a slider without validation bounds renders over
SLIDER_DEFAULT_MIN = 0.0
SLIDER_DEFAULT_MAX = 100.0

CHOICE_TYPES = frozenset({QuestionType.SELECT, QuestionType.CARD_SELECT, QuestionType.MULTI_SELECT})
TEXT_TYPES = frozenset({QuestionType.TEXT, QuestionType.TEXTAREA, QuestionType.FILE_UPLOAD})


class BranchOperator(StrEnum):
    """Comparison applied by a branch condition."""

    EQUALS = "equals"
    CONTAINS = "contains"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"


class QuestionOption(BaseModel):
    """A selectable option for choice-based questions."""

    model_config = ConfigDict(frozen=True)

    value: str
    label: str
    description: str | None = None
    points: int | None = None


class AnswerValidation(BaseModel):
    """Validation rules applied before an answer is accepted."""

    model_config = ConfigDict(frozen=True)

    min: float | None = None
    max: float | None = None
    pattern: str | None = None
    custom_message: str | None = None


class BranchCondition(BaseModel):
    model_config = ConfigDict(frozen=True)

    question_id: str
    operator: BranchOperator
    value: Any


class BranchRule(BaseModel):
    """Jump to next_question_id when condition matches (first match wins)."""

    model_config = ConfigDict(frozen=True)

    condition: BranchCondition
    next_question_id: str


class CountBonus(BaseModel):
    """Points awarded when a multi-select answer has at least min_selected items."""

    model_config = ConfigDict(frozen=True)

    min_selected: int = Field(..., ge=1)
    points: int = Field(..., ge=0)


class QuestionMetadata(BaseModel):
    """Scoring metadata.

    score_weight is the question's share of the overall lead score; a weight of
    zero keeps the question out of scoring. category names the scoring bucket.
    points is the fixed award for an affirmative yes-no, a non-empty text answer
    or the top of a slider's range.
    """

    model_config = ConfigDict(frozen=True)

    score_weight: float = Field(default=0.0, ge=0.0, le=1.0)
    category: str | None = None
    points: int | None = None
    count_bonuses: tuple[CountBonus, ...] = ()


class Question(BaseModel):
    """A single questionnaire node."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    type: QuestionType
    title: str
    description: str | None = None
    placeholder: str | None = None
    required: bool = False
    options: tuple[QuestionOption, ...] = ()
    validation: AnswerValidation | None = None
    branching: tuple[BranchRule, ...] = ()
    metadata: QuestionMetadata = QuestionMetadata()

    def option(self, value: str) -> QuestionOption | None:
        """Return the option with the given value, or None."""
        for option in self.options:
            if option.value == value:
                return option
        return None

    def slider_range(self) -> tuple[float, float]:
        """Return the (min, max) a slider answer lives in, defaulting to 0-100."""
        rules = self.validation
        low = rules.min if rules is not None and rules.min is not None else SLIDER_DEFAULT_MIN
        high = rules.max if rules is not None and rules.max is not None else SLIDER_DEFAULT_MAX
        return low, high
