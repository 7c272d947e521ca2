"""QuestionnaireSessionRecord model — one JSON-backed questionnaire document per user."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, JSON, String

from leadflow.db.base import Base


class QuestionnaireSessionRecord(Base):
    __tablename__ = "questionnaire_sessions"

    id = Column(String(128), primary_key=True)
    user_id = Column(String(255), nullable=False, unique=True, index=True)

    # Session state
    status = Column(String(20), nullable=False, default="in_progress")  # in_progress, completed, abandoned
    version = Column(String(32), nullable=False)
    last_question_id = Column(String(128), nullable=True)
    last_question_shown_at = Column(DateTime(timezone=True), nullable=True)

    # JSON columns for flexible data storage
    responses = Column(JSON, nullable=False, default=list)  # [QuestionnaireResponse as dict]
    score = Column(Integer, nullable=True)
    score_breakdown = Column(JSON, nullable=True)  # LeadScoreBreakdown as dict

    # Timestamps
    started_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
    completed_at = Column(DateTime(timezone=True), nullable=True)
