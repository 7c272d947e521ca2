"""Answer validation applied before a response is recorded."""

import re
from typing import Any

from leadflow.core.exceptions import AnswerValidationError
from leadflow.domain.branching import is_number
from leadflow.domain.flow import has_answer
from leadflow.schemas.questions import TEXT_TYPES, Question, QuestionType

REQUIRED_MESSAGE = "This field is required"


def _format_bound(bound: float) -> str:
    return str(int(bound)) if float(bound).is_integer() else str(bound)


def _check_shape(question: Question, value: Any) -> None:
    match question.type:
        case QuestionType.YES_NO:
            if not isinstance(value, bool):
                raise AnswerValidationError(question.id, "Please answer yes or no")
        case QuestionType.SELECT | QuestionType.CARD_SELECT:
            if not isinstance(value, str) or question.option(value) is None:
                raise AnswerValidationError(question.id, "Please choose one of the available options")
        case QuestionType.MULTI_SELECT:
            if not isinstance(value, (list, tuple)) or not all(
                isinstance(item, str) and question.option(item) is not None for item in value
            ):
                raise AnswerValidationError(question.id, "Please choose from the available options")
            if len(set(value)) != len(value):
                raise AnswerValidationError(question.id, "Each option can only be selected once")
        case QuestionType.SLIDER:
            if not is_number(value):
                raise AnswerValidationError(question.id, "Please choose a number")
        case _ if question.type in TEXT_TYPES:
            if not isinstance(value, str):
                raise AnswerValidationError(question.id, "Please enter text")


def _measure(question: Question, value: Any) -> float:
    """The quantity min/max apply to: length for text, selections for multi-select, value for sliders."""
    if question.type == QuestionType.SLIDER:
        return value
    if question.type == QuestionType.MULTI_SELECT:
        return len(value)
    if isinstance(value, str):
        return len(value.strip())
    return 0


def validate_answer(question: Question, value: Any) -> None:
    """Validate an answer against its question.

    Args:
        question: Question being answered
        value: Raw answer value

    Raises:
        AnswerValidationError: With the inline message to show the respondent

    Rules:
        - Required questions reject empty answers (False is a valid yes-no answer)
        - Optional questions accept empty answers without further checks
        - The value must have the shape the question type expects
        - validation.min / validation.max bound the length, selection count, or value
        - Sliders without bounds accept 0-100; NaN and infinities are rejected
        - validation.pattern must be found in string answers
    """
    if not has_answer(value):
        if question.required:
            raise AnswerValidationError(question.id, REQUIRED_MESSAGE)
        return

    _check_shape(question, value)

    rules = question.validation
    custom_message = rules.custom_message if rules is not None else None

    if question.type == QuestionType.SLIDER:
        low, high = question.slider_range()
    elif rules is not None:
        low, high = rules.min, rules.max
    else:
        low = high = None

    if low is not None or high is not None:
        measure = _measure(question, value)
        if low is not None and measure < low:
            raise AnswerValidationError(question.id, custom_message or f"Minimum value is {_format_bound(low)}")
        if high is not None and measure > high:
            raise AnswerValidationError(question.id, custom_message or f"Maximum value is {_format_bound(high)}")

    if rules is not None and rules.pattern and isinstance(value, str):
        if re.search(rules.pattern, value) is None:
            raise AnswerValidationError(question.id, custom_message or "Invalid format")
