"""Re-export all models so Base.metadata sees them."""

from leadflow.db.models.questionnaire_session import QuestionnaireSessionRecord

__all__ = [
    "QuestionnaireSessionRecord",
]
