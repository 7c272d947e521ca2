"""SqlSessionStore — SQLAlchemy-backed SessionStore (one row per user)."""

from datetime import UTC, datetime

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm.attributes import flag_modified

from leadflow.core.exceptions import PersistenceError
from leadflow.db.models.questionnaire_session import QuestionnaireSessionRecord
from leadflow.schemas.questionnaire import QuestionnaireSession

logger = structlog.get_logger(__name__)


def _as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes returned by backends without tz support."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _to_session(record: QuestionnaireSessionRecord) -> QuestionnaireSession:
    return QuestionnaireSession.model_validate({
        "id": record.id,
        "user_id": record.user_id,
        "status": record.status,
        "version": record.version,
        "responses": record.responses or [],
        "last_question_id": record.last_question_id,
        "last_question_shown_at": _as_utc(record.last_question_shown_at),
        "score": record.score,
        "score_breakdown": record.score_breakdown,
        "started_at": _as_utc(record.started_at),
        "updated_at": _as_utc(record.updated_at),
        "completed_at": _as_utc(record.completed_at),
    })


class SqlSessionStore:
    """SessionStore backed by the questionnaire_sessions table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        """Initialize with a SQLAlchemy async session factory."""
        self.session_factory = session_factory

    async def load_session(self, user_id: str) -> QuestionnaireSession | None:
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(QuestionnaireSessionRecord).where(QuestionnaireSessionRecord.user_id == user_id)
                )
                record = result.scalar_one_or_none()
                if record is None:
                    return None
                return _to_session(record)
        except SQLAlchemyError as exc:
            logger.error("session_load_failed", user_id=user_id, error=str(exc), error_type=type(exc).__name__)
            raise PersistenceError(f"Failed to load questionnaire session for user '{user_id}'") from exc

    async def save_session(self, questionnaire_session: QuestionnaireSession) -> None:
        data = questionnaire_session.model_dump(mode="json")
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(QuestionnaireSessionRecord).where(
                        QuestionnaireSessionRecord.user_id == questionnaire_session.user_id
                    )
                )
                record = result.scalar_one_or_none()
                if record is None:
                    record = QuestionnaireSessionRecord(
                        id=questionnaire_session.id,
                        user_id=questionnaire_session.user_id,
                    )
                    session.add(record)

                record.status = questionnaire_session.status.value
                record.version = questionnaire_session.version
                record.last_question_id = questionnaire_session.last_question_id
                record.last_question_shown_at = questionnaire_session.last_question_shown_at
                record.responses = data["responses"]
                record.score = questionnaire_session.score
                record.score_breakdown = data["score_breakdown"]
                record.started_at = questionnaire_session.started_at
                record.updated_at = questionnaire_session.updated_at or datetime.now(UTC)
                record.completed_at = questionnaire_session.completed_at
                flag_modified(record, "responses")

                await session.commit()
        except SQLAlchemyError as exc:
            logger.error(
                "session_save_failed",
                user_id=questionnaire_session.user_id,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise PersistenceError(
                f"Failed to save questionnaire session for user '{questionnaire_session.user_id}'"
            ) from exc
