class LeadFlowError(Exception):
    """Base exception for the LeadFlow questionnaire engine."""

    pass


class CatalogError(LeadFlowError):
    """Raised when a question catalog violates its structural invariants."""

    pass


class AnswerValidationError(LeadFlowError):
    """Raised when an answer fails its question's validation rules."""

    def __init__(self, question_id: str, message: str):
        self.question_id = question_id
        self.message = message
        super().__init__(f"Invalid answer for '{question_id}': {message}")


class QuestionNotInFlowError(LeadFlowError):
    """Raised when an answer targets a question the current flow does not show."""

    def __init__(self, question_id: str):
        self.question_id = question_id
        super().__init__(f"Question '{question_id}' is not part of the current questionnaire flow")


class SchemaDriftError(LeadFlowError):
    """Raised when a resume pointer references a question missing from the resolved flow."""

    def __init__(self, question_id: str, version: str):
        self.question_id = question_id
        self.version = version
        super().__init__(f"Resume question '{question_id}' is not in catalog version {version}")


class ScoringAnomaly(LeadFlowError):
    """Raised for an answer the scoring engine cannot interpret."""

    def __init__(self, question_id: str, reason: str):
        self.question_id = question_id
        self.reason = reason
        super().__init__(f"Unscorable answer for '{question_id}': {reason}")


class PersistenceError(LeadFlowError):
    """Raised when the session store fails to load or save."""

    pass


class SessionNotFoundError(LeadFlowError):
    """Raised when a user has no questionnaire session."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"No questionnaire session for user '{user_id}'")


class SessionCompletedError(LeadFlowError):
    """Raised when answering a session that is already completed."""

    pass


class SessionNotCompletedError(LeadFlowError):
    """Raised when results are requested before the session is completed."""

    pass
