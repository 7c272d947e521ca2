"""SessionStore Protocol: the persistence boundary of the questionnaire engine.

Any backend that can store and retrieve a QuestionnaireSession keyed by user id
satisfies it:
- load_session: Return the user's session, or None if they never started
- save_session: Persist the full session document (last write wins)

Both raise PersistenceError on backend failure. The engine never retries;
retry policy belongs to the caller.
"""

from typing import Protocol, runtime_checkable

from leadflow.schemas.questionnaire import QuestionnaireSession


@runtime_checkable
class SessionStore(Protocol):
    """Protocol for questionnaire session persistence.

    Implementations:
    1. SqlSessionStore (SQLAlchemy, production)
    2. SessionStoreFake (in-memory, scenario driven, tests and local dev)
    """

    async def load_session(self, user_id: str) -> QuestionnaireSession | None:
        """Load the session owned by user_id.

        Args:
            user_id: Portal user ID

        Returns:
            The stored session, or None if the user has none

        Raises:
            PersistenceError: If the backend read fails
        """
        ...

    async def save_session(self, session: QuestionnaireSession) -> None:
        """Persist a session, replacing any stored document for session.user_id.

        Args:
            session: Session to persist

        Raises:
            PersistenceError: If the backend write fails
        """
        ...
