"""Branch condition evaluation.

Pure functions -- no side effects, no I/O.
"""

import math
from collections.abc import Mapping
from numbers import Real
from typing import Any

from leadflow.schemas.questions import BranchCondition, BranchOperator, BranchRule


def is_number(value: Any) -> bool:
    """True for finite real numbers. Booleans, NaN and infinities are not numbers here."""
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def _strict_equals(left: Any, right: Any) -> bool:
    # True == 1 in Python; a yes-no answer must not match a numeric rule value
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    return left == right


def evaluate_condition(condition: BranchCondition, responses: Mapping[str, Any]) -> bool:
    """Evaluate a single branch condition against the answers gathered so far.

    Args:
        condition: Condition referencing a question id, an operator and a value
        responses: {question_id: answer_value}

    Returns:
        True if the condition matches. An unanswered question never matches.

    Rules:
        - EQUALS: strict equality (booleans only equal booleans)
        - CONTAINS: membership in a list answer, or substring of a string answer
        - GREATER_THAN / LESS_THAN: numeric comparison; non-numeric answers never match
    """
    if condition.question_id not in responses:
        return False
    answer = responses[condition.question_id]
    if answer is None:
        return False

    match condition.operator:
        case BranchOperator.EQUALS:
            return _strict_equals(answer, condition.value)
        case BranchOperator.CONTAINS:
            if isinstance(answer, (list, tuple, set, frozenset)):
                return any(_strict_equals(item, condition.value) for item in answer)
            if isinstance(answer, str) and isinstance(condition.value, str):
                return condition.value in answer
            return False
        case BranchOperator.GREATER_THAN:
            return is_number(answer) and is_number(condition.value) and answer > condition.value
        case BranchOperator.LESS_THAN:
            return is_number(answer) and is_number(condition.value) and answer < condition.value

    # Should never reach here due to enum constraint
    raise ValueError(f"Unknown branch operator: {condition.operator}")


def match_branch(rules: tuple[BranchRule, ...], responses: Mapping[str, Any]) -> str | None:
    """Return the target of the first matching rule, or None if no rule matches."""
    for rule in rules:
        if evaluate_condition(rule.condition, responses):
            return rule.next_question_id
    return None
