"""Questionnaire Pydantic schemas — session state, lead score, and API contracts."""

from datetime import datetime
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

from leadflow.schemas.questions import Question

# Category ceilings (points)
BUDGET_MAX = 35
TIMELINE_MAX = 25
AUTHORITY_MAX = 15
COMPLEXITY_MAX = 15
ENGAGEMENT_MAX = 10


class Temperature(StrEnum):
    """Lead temperature buckets, hottest first."""

    HOT = "hot"
    WARM = "warm"
    QUALIFIED = "qualified"
    COOL = "cool"
    EARLY = "early"


class SessionStatus(StrEnum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ABANDONED = "abandoned"  # inferred by admin reporting, never written by the engine


class QuestionnaireResponse(BaseModel):
    """One answered question."""

    question_id: str
    value: Any
    answered_at: datetime
    time_spent: int | None = None  # seconds


class LeadScoreBreakdown(BaseModel):
    """Weighted lead score across the five scoring categories."""

    budget: int = Field(..., ge=0, le=BUDGET_MAX)
    timeline: int = Field(..., ge=0, le=TIMELINE_MAX)
    authority: int = Field(..., ge=0, le=AUTHORITY_MAX)
    complexity: int = Field(..., ge=0, le=COMPLEXITY_MAX)
    engagement: int = Field(..., ge=0, le=ENGAGEMENT_MAX)
    total: int = Field(..., ge=0, le=100)
    temperature: Temperature

    @model_validator(mode="after")
    def total_matches_categories(self) -> "LeadScoreBreakdown":
        """Reject a total that is not the sum of the category scores."""
        expected = self.budget + self.timeline + self.authority + self.complexity + self.engagement
        if self.total != expected:
            raise ValueError(f"total {self.total} does not equal category sum {expected}")
        return self


class QuestionnaireSession(BaseModel):
    """One respondent's questionnaire attempt (one per user)."""

    id: str
    user_id: str
    status: SessionStatus = SessionStatus.IN_PROGRESS
    version: str
    responses: list[QuestionnaireResponse] = Field(default_factory=list)
    last_question_id: str | None = None
    last_question_shown_at: datetime | None = None
    score: int | None = None
    score_breakdown: LeadScoreBreakdown | None = None
    started_at: datetime
    updated_at: datetime | None = None
    completed_at: datetime | None = None


class AnswerRequest(BaseModel):
    """Request to answer a question."""

    question_id: str = Field(..., min_length=1)
    value: Any = None
    time_spent: int | None = Field(default=None, ge=0)


class ScoreInterpretation(BaseModel):
    title: str
    description: str
    next_steps: list[str]
    priority: Literal["immediate", "high", "medium", "low"]


class FollowUpTiming(BaseModel):
    initial: str
    reminder: str
    method: Literal["call", "email"]


class QuestionnaireProgressResponse(BaseModel):
    """Response for starting, resuming, or answering the questionnaire."""

    session_id: str
    status: SessionStatus
    version: str
    current_question: Question | None
    question_number: int
    total_questions: int
    progress_percent: int
    answers: dict[str, Any]
    completed: bool


class QuestionnaireResultsResponse(BaseModel):
    """Response for a completed questionnaire."""

    session_id: str
    completed_at: datetime | None
    score: LeadScoreBreakdown
    temperature_emoji: str
    interpretation: ScoreInterpretation
    follow_up: FollowUpTiming


class CatalogResponse(BaseModel):
    version: str
    questions: list[Question]
