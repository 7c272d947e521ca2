"""Adaptive questionnaire flow resolution.

The flow is recomputed from scratch on every call, so changing an earlier
branching answer re-routes the remaining questions without duplicating or
losing any of them.
"""

from collections.abc import Mapping
from typing import Any

from leadflow.core.exceptions import SchemaDriftError
from leadflow.domain.branching import match_branch
from leadflow.domain.catalog import QuestionCatalog, get_default_catalog
from leadflow.schemas.questions import Question


def has_answer(value: Any) -> bool:
    """True unless the value is None, a blank string, or an empty collection.

    False and 0 are real answers (yes-no, slider).
    """
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        return len(value) > 0
    return True


def resolve_flow(
    responses: Mapping[str, Any],
    catalog: QuestionCatalog | None = None,
) -> list[Question]:
    """Compute the ordered question sequence for the given answers.

    Args:
        responses: {question_id: answer_value}
        catalog: Catalog to resolve against (defaults to the portal questionnaire)

    Returns:
        Questions in presentation order. With no answers this is the full
        default order.

    Pure function -- deterministic, no side effects. Branch rules are
    first-match-wins; a match jumps to its target, skipping the questions
    in between. The catalog guarantees targets are forward-only.
    """
    catalog = catalog or get_default_catalog()
    questions = catalog.get_all_questions()

    flow: list[Question] = []
    position = 0
    while position < len(questions):
        question = questions[position]
        flow.append(question)

        target = match_branch(question.branching, responses)
        if target is not None:
            position = catalog.index_of(target)
        else:
            position += 1

    return flow


def next_question(flow: list[Question], question_id: str) -> Question | None:
    """Return the question after question_id in the flow, or None if it is last or absent."""
    for i, question in enumerate(flow):
        if question.id == question_id:
            return flow[i + 1] if i + 1 < len(flow) else None
    return None


def first_unanswered(flow: list[Question], responses: Mapping[str, Any]) -> Question | None:
    """Return the first question in the flow still waiting for an answer.

    An optional question with a recorded empty response was skipped on
    purpose and is not waiting.
    """
    for question in flow:
        if has_answer(responses.get(question.id)):
            continue
        if not question.required and question.id in responses:
            continue
        return question
    return None


def missing_required(flow: list[Question], responses: Mapping[str, Any]) -> list[str]:
    """Return ids of required questions in the flow that have no answer."""
    return [q.id for q in flow if q.required and not has_answer(responses.get(q.id))]


def locate_resume_question(
    flow: list[Question],
    responses: Mapping[str, Any],
    last_question_id: str | None,
    version: str,
) -> Question | None:
    """Find where a respondent should continue.

    Args:
        flow: Freshly resolved flow
        responses: Answers recorded so far
        last_question_id: Resume pointer (last answered question), or None
        version: Catalog version, used for the drift error message

    Returns:
        The question after the resume pointer; the first unanswered question
        when there is no pointer; None when the pointer is the final question.

    Raises:
        SchemaDriftError: If last_question_id is not in the resolved flow
    """
    if last_question_id is None:
        return first_unanswered(flow, responses)

    if not any(q.id == last_question_id for q in flow):
        raise SchemaDriftError(last_question_id, version)

    return next_question(flow, last_question_id)


def completion_percentage(flow: list[Question], responses: Mapping[str, Any]) -> int:
    """Compute flow completion as percentage (integer truncation)."""
    if not flow:
        return 0
    answered = sum(1 for q in flow if has_answer(responses.get(q.id)))
    return int(answered / len(flow) * 100)
