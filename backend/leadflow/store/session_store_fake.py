"""SessionStoreFake: Scenario-based in-memory test double for SessionStore.

Scenarios:
- happy_path: Reads and writes succeed against an in-memory dict
- save_failure: Reads succeed, every write raises PersistenceError
- load_failure: Every read raises PersistenceError
"""

from leadflow.core.exceptions import PersistenceError
from leadflow.schemas.questionnaire import QuestionnaireSession


class SessionStoreFake:
    """In-memory SessionStore keyed by user id.

    Stored sessions are deep copies, so callers mutating a loaded session do
    not change what is stored until they save it.
    """

    VALID_SCENARIOS = {"happy_path", "save_failure", "load_failure"}

    def __init__(self, scenario: str = "happy_path"):
        """Initialize SessionStoreFake with a named scenario.

        Raises:
            ValueError: If scenario is not recognized
        """
        if scenario not in self.VALID_SCENARIOS:
            raise ValueError(
                f"Unknown scenario: {scenario}. Valid scenarios: {self.VALID_SCENARIOS}"
            )
        self.scenario = scenario
        self.sessions: dict[str, QuestionnaireSession] = {}
        self.save_count = 0

    async def load_session(self, user_id: str) -> QuestionnaireSession | None:
        if self.scenario == "load_failure":
            raise PersistenceError("Session store unavailable (simulated read failure)")

        stored = self.sessions.get(user_id)
        return stored.model_copy(deep=True) if stored is not None else None

    async def save_session(self, session: QuestionnaireSession) -> None:
        if self.scenario == "save_failure":
            raise PersistenceError("Session store unavailable (simulated write failure)")

        self.sessions[session.user_id] = session.model_copy(deep=True)
        self.save_count += 1
