"""Shared test fixtures for all test groups."""

from datetime import UTC, datetime, timedelta

import pytest

from leadflow.domain.catalog import get_default_catalog
from leadflow.services.questionnaire_service import QuestionnaireService
from leadflow.store.session_store_fake import SessionStoreFake

DETAILED_GOALS = (
    "Double our qualified inbound leads within six months and give the sales team "
    "a dashboard they actually use."
)
DETAILED_CHALLENGE = (
    "Our current site is slow, impossible to update without a developer, and "
    "converts less than one percent of visitors."
)


class FakeClock:
    """Deterministic clock; advance() moves time forward."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 3, 2, 9, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


@pytest.fixture
def catalog():
    """The portal questionnaire catalog."""
    return get_default_catalog()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store_fake():
    """Fresh SessionStoreFake with happy_path scenario (default)."""
    return SessionStoreFake(scenario="happy_path")


@pytest.fixture
def service(store_fake, clock):
    """QuestionnaireService wired to the in-memory store and fake clock."""
    return QuestionnaireService(store_fake, clock=clock)


@pytest.fixture
def perfect_answers():
    """Answers that max out every scoring category (100 points, hot)."""
    return {
        "project_type": "web_app",
        "industry": "technology",
        "features": ["cms", "user_auth", "payment", "api", "analytics", "search"],
        "design_style": "modern_minimal",
        "timeline": "asap",
        "budget": "50k_plus",
        "current_website": True,
        "current_website_url": "https://example.com",
        "decision_maker": "sole_decision",
        "project_goals": DETAILED_GOALS,
        "biggest_challenge": DETAILED_CHALLENGE,
        "additional_info": "We would like to launch before the spring trade show.",
    }
