"""Response accumulator — working map of answers with per-answer timing."""

from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import Any

from leadflow.schemas.questionnaire import QuestionnaireResponse


class ResponseAccumulator:
    """Upsert map of question_id -> QuestionnaireResponse.

    Re-answering a question overwrites the earlier response. No validation is
    done here; callers validate before recording.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None):
        self._clock = clock or (lambda: datetime.now(UTC))
        self._responses: dict[str, QuestionnaireResponse] = {}

    @classmethod
    def from_responses(
        cls,
        responses: Iterable[QuestionnaireResponse],
        clock: Callable[[], datetime] | None = None,
    ) -> "ResponseAccumulator":
        """Rebuild an accumulator from a persisted response list (later entries win)."""
        accumulator = cls(clock=clock)
        for response in responses:
            accumulator._responses[response.question_id] = response
        return accumulator

    def record_answer(
        self,
        question_id: str,
        value: Any,
        time_spent_seconds: int | None,
        answered_at: datetime | None = None,
    ) -> QuestionnaireResponse:
        """Record (or overwrite) the answer to a question."""
        response = QuestionnaireResponse(
            question_id=question_id,
            value=value,
            answered_at=answered_at or self._clock(),
            time_spent=time_spent_seconds,
        )
        # Re-insert so iteration order follows the latest answer
        self._responses.pop(question_id, None)
        self._responses[question_id] = response
        return response

    def discard(self, question_ids: Iterable[str]) -> list[str]:
        """Drop responses for the given question ids; returns the ids actually removed."""
        removed = []
        for question_id in question_ids:
            if self._responses.pop(question_id, None) is not None:
                removed.append(question_id)
        return removed

    def get(self, question_id: str) -> QuestionnaireResponse | None:
        return self._responses.get(question_id)

    def values(self) -> dict[str, Any]:
        """Return {question_id: value} for flow resolution and scoring."""
        return {question_id: r.value for question_id, r in self._responses.items()}

    def to_response_list(self) -> list[QuestionnaireResponse]:
        """Return responses ordered by answer time (ties keep recording order)."""
        return sorted(self._responses.values(), key=lambda r: r.answered_at)

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._responses

    def __len__(self) -> int:
        return len(self._responses)
