"""QuestionnaireService — orchestrates the questionnaire session lifecycle.

Responsibilities:
- Session lifecycle: create, resume, answer, complete (never writes abandoned)
- Resume pointer handling with recovery from catalog drift
- Answer validation and per-answer timing
- Lead scoring on completion
- Sole writer of the session document through a SessionStore
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

import structlog

from leadflow.core.exceptions import (
    QuestionNotInFlowError,
    SchemaDriftError,
    SessionCompletedError,
    SessionNotCompletedError,
    SessionNotFoundError,
)
from leadflow.domain.accumulator import ResponseAccumulator
from leadflow.domain.catalog import QuestionCatalog, get_default_catalog
from leadflow.domain.flow import (
    completion_percentage,
    first_unanswered,
    locate_resume_question,
    missing_required,
    next_question,
    resolve_flow,
)
from leadflow.domain.scoring import (
    calculate_lead_score,
    get_follow_up_timing,
    get_score_interpretation,
    temperature_emoji,
)
from leadflow.domain.validation import validate_answer
from leadflow.schemas.questionnaire import (
    FollowUpTiming,
    LeadScoreBreakdown,
    QuestionnaireSession,
    ScoreInterpretation,
    SessionStatus,
)
from leadflow.schemas.questions import Question
from leadflow.store.session_store import SessionStore

logger = structlog.get_logger(__name__)


@dataclass
class QuestionnaireProgress:
    """Where a respondent stands: the session, its resolved flow and the question to show."""

    session: QuestionnaireSession
    flow: list[Question]
    current_question: Question | None

    @property
    def completed(self) -> bool:
        return self.session.status == SessionStatus.COMPLETED

    @property
    def answers(self) -> dict[str, Any]:
        return {r.question_id: r.value for r in self.session.responses}

    @property
    def progress_percent(self) -> int:
        if self.completed:
            return 100
        return completion_percentage(self.flow, self.answers)

    @property
    def question_number(self) -> int:
        """1-based position of the current question in the flow (0 when none)."""
        if self.current_question is None:
            return 0
        for i, question in enumerate(self.flow):
            if question.id == self.current_question.id:
                return i + 1
        return 0


@dataclass
class QuestionnaireResults:
    """Score and recommendations for a completed session."""

    session: QuestionnaireSession
    score: LeadScoreBreakdown
    interpretation: ScoreInterpretation
    follow_up: FollowUpTiming
    temperature_emoji: str


class QuestionnaireService:
    """Service layer for the adaptive questionnaire."""

    def __init__(
        self,
        store: SessionStore,
        catalog: QuestionCatalog | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize with a SessionStore, catalog, and clock.

        Args:
            store: SessionStore implementation (SessionStoreFake for tests, SqlSessionStore for production)
            catalog: Question catalog (defaults to the portal questionnaire)
            clock: Returns the current UTC time (injectable for tests)
        """
        self.store = store
        self.catalog = catalog or get_default_catalog()
        self.clock = clock or (lambda: datetime.now(UTC))

    async def start_or_resume(self, user_id: str) -> QuestionnaireProgress:
        """Create the user's session on first visit, otherwise resume it.

        Args:
            user_id: Portal user ID

        Returns:
            QuestionnaireProgress. For a completed session current_question is
            None and nothing is re-scored or written.

        Raises:
            PersistenceError: If the store fails
        """
        session = await self.store.load_session(user_id)

        if session is None:
            now = self.clock()
            session = QuestionnaireSession(
                id=f"session_{user_id}_{uuid4().hex[:12]}",
                user_id=user_id,
                status=SessionStatus.IN_PROGRESS,
                version=self.catalog.version,
                responses=[],
                started_at=now,
                updated_at=now,
                last_question_shown_at=now,
            )
            await self.store.save_session(session)
            logger.info(
                "questionnaire_started",
                user_id=user_id,
                session_id=session.id,
                version=self.catalog.version,
            )
            flow = resolve_flow({}, self.catalog)
            return QuestionnaireProgress(session=session, flow=flow, current_question=flow[0] if flow else None)

        if session.status == SessionStatus.COMPLETED:
            answers = {r.question_id: r.value for r in session.responses}
            return QuestionnaireProgress(
                session=session,
                flow=resolve_flow(answers, self.catalog),
                current_question=None,
            )

        accumulator = self._reconcile_with_catalog(session)
        answers = accumulator.values()
        flow = resolve_flow(answers, self.catalog)

        try:
            current = locate_resume_question(flow, answers, session.last_question_id, self.catalog.version)
        except SchemaDriftError as exc:
            logger.warning(
                "questionnaire_resume_drift",
                user_id=user_id,
                session_id=session.id,
                last_question_id=exc.question_id,
                version=exc.version,
            )
            session.last_question_id = None
            current = first_unanswered(flow, answers)

        if current is None:
            # Everything answered but never completed; show the final question again
            current = first_unanswered(flow, answers) or (flow[-1] if flow else None)

        session.responses = accumulator.to_response_list()
        session.last_question_shown_at = self.clock()
        session.updated_at = session.last_question_shown_at
        await self.store.save_session(session)

        logger.info(
            "questionnaire_resumed",
            user_id=user_id,
            session_id=session.id,
            current_question_id=current.id if current else None,
        )
        return QuestionnaireProgress(session=session, flow=flow, current_question=current)

    async def submit_answer(
        self,
        user_id: str,
        question_id: str,
        value: Any,
        time_spent: int | None = None,
    ) -> QuestionnaireProgress:
        """Validate and record an answer, then advance or complete the session.

        Args:
            user_id: Portal user ID
            question_id: Question being answered
            value: Answer value
            time_spent: Seconds spent on the question; derived from when the
                question was shown if omitted

        Returns:
            Updated QuestionnaireProgress

        Raises:
            SessionNotFoundError: If the user has no session
            SessionCompletedError: If the session is already completed
            QuestionNotInFlowError: If the question is unknown or skipped by the current flow
            AnswerValidationError: If the answer fails validation
            PersistenceError: If the store fails
        """
        session = await self.store.load_session(user_id)
        if session is None:
            raise SessionNotFoundError(user_id)
        if session.status != SessionStatus.IN_PROGRESS:
            raise SessionCompletedError(f"Session {session.id} is {session.status.value}; answers are closed")

        accumulator = self._reconcile_with_catalog(session)

        question = self.catalog.get_question(question_id)
        if question is None or question_id not in {q.id for q in resolve_flow(accumulator.values(), self.catalog)}:
            raise QuestionNotInFlowError(question_id)

        validate_answer(question, value)

        now = self.clock()
        if time_spent is None and session.last_question_shown_at is not None:
            time_spent = max(0, round((now - session.last_question_shown_at).total_seconds()))

        accumulator.record_answer(question_id, value, time_spent, answered_at=now)
        answers = accumulator.values()
        flow = resolve_flow(answers, self.catalog)

        session.responses = accumulator.to_response_list()
        session.last_question_id = question_id
        session.updated_at = now

        upcoming = next_question(flow, question_id)
        if upcoming is None:
            outstanding = missing_required(flow, answers)
            if not outstanding:
                return await self._complete(session, flow, answers, now)
            upcoming = self.catalog.get_question(outstanding[0])
            logger.info(
                "questionnaire_required_outstanding",
                user_id=user_id,
                session_id=session.id,
                missing=outstanding,
            )

        session.last_question_shown_at = now
        await self.store.save_session(session)

        logger.info(
            "questionnaire_answer_recorded",
            user_id=user_id,
            session_id=session.id,
            question_id=question_id,
            time_spent=time_spent,
            next_question_id=upcoming.id if upcoming else None,
        )
        return QuestionnaireProgress(session=session, flow=flow, current_question=upcoming)

    async def get_results(self, user_id: str) -> QuestionnaireResults:
        """Return the score and recommendations for a completed session.

        Raises:
            SessionNotFoundError: If the user has no session
            SessionNotCompletedError: If the session is not completed yet
            PersistenceError: If the store fails
        """
        session = await self.store.load_session(user_id)
        if session is None:
            raise SessionNotFoundError(user_id)
        if session.status != SessionStatus.COMPLETED or session.score_breakdown is None:
            raise SessionNotCompletedError(f"Session {session.id} has not been completed")

        score = session.score_breakdown
        return QuestionnaireResults(
            session=session,
            score=score,
            interpretation=get_score_interpretation(score),
            follow_up=get_follow_up_timing(score),
            temperature_emoji=temperature_emoji(score.temperature),
        )

    # =========================================================================
    # PRIVATE HELPERS
    # =========================================================================

    async def _complete(
        self,
        session: QuestionnaireSession,
        flow: list[Question],
        answers: dict[str, Any],
        now: datetime,
    ) -> QuestionnaireProgress:
        """Score the session and mark it completed."""
        breakdown = calculate_lead_score(answers, self.catalog)

        session.score = breakdown.total
        session.score_breakdown = breakdown
        session.status = SessionStatus.COMPLETED
        session.completed_at = now
        session.last_question_shown_at = None

        await self.store.save_session(session)

        logger.info(
            "questionnaire_completed",
            user_id=session.user_id,
            session_id=session.id,
            score=breakdown.total,
            temperature=breakdown.temperature.value,
            duration_seconds=round((now - session.started_at).total_seconds()),
            version=session.version,
        )
        return QuestionnaireProgress(session=session, flow=flow, current_question=None)

    def _reconcile_with_catalog(self, session: QuestionnaireSession) -> ResponseAccumulator:
        """Load responses into an accumulator, dropping answers the catalog no longer knows.

        A session started under another catalog version is brought forward to
        the current version rather than reinterpreted under the old rules.
        """
        accumulator = ResponseAccumulator.from_responses(session.responses, clock=self.clock)
        stale = [r.question_id for r in session.responses if r.question_id not in self.catalog]
        if stale:
            accumulator.discard(stale)

        if session.version != self.catalog.version or stale:
            logger.warning(
                "questionnaire_version_drift",
                user_id=session.user_id,
                session_id=session.id,
                session_version=session.version,
                catalog_version=self.catalog.version,
                dropped_question_ids=stale,
            )
            session.version = self.catalog.version

        return accumulator
