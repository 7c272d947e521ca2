"""Lead scoring: weighted category scores and temperature classification.

Pure functions, best-effort: an answer that cannot be scored is skipped and
never blocks the rest of the computation.
"""

import math
from collections.abc import Mapping
from enum import StrEnum
from typing import Any

import structlog

from leadflow.core.exceptions import ScoringAnomaly
from leadflow.domain.branching import is_number
from leadflow.domain.catalog import QuestionCatalog, get_default_catalog
from leadflow.domain.flow import has_answer, resolve_flow
from leadflow.schemas.questionnaire import (
    AUTHORITY_MAX,
    BUDGET_MAX,
    COMPLEXITY_MAX,
    ENGAGEMENT_MAX,
    TIMELINE_MAX,
    FollowUpTiming,
    LeadScoreBreakdown,
    ScoreInterpretation,
    Temperature,
)
from leadflow.schemas.questions import Question, QuestionType

logger = structlog.get_logger(__name__)


class ScoreCategory(StrEnum):
    BUDGET = "budget"
    TIMELINE = "timeline"
    AUTHORITY = "authority"
    COMPLEXITY = "complexity"
    ENGAGEMENT = "engagement"


CATEGORY_CEILINGS: dict[ScoreCategory, int] = {
    ScoreCategory.BUDGET: BUDGET_MAX,
    ScoreCategory.TIMELINE: TIMELINE_MAX,
    ScoreCategory.AUTHORITY: AUTHORITY_MAX,
    ScoreCategory.COMPLEXITY: COMPLEXITY_MAX,
    ScoreCategory.ENGAGEMENT: ENGAGEMENT_MAX,
}

# Catalog category -> scoring bucket. Unlisted categories (business, design) are informational.
CATEGORY_ALIASES: dict[str, ScoreCategory] = {
    "budget": ScoreCategory.BUDGET,
    "timeline": ScoreCategory.TIMELINE,
    "authority": ScoreCategory.AUTHORITY,
    "complexity": ScoreCategory.COMPLEXITY,
    "project": ScoreCategory.COMPLEXITY,
    "technical": ScoreCategory.COMPLEXITY,
    "engagement": ScoreCategory.ENGAGEMENT,
}

# Lower bound of each band, hottest first (inclusive)
TEMPERATURE_THRESHOLDS: tuple[tuple[int, Temperature], ...] = (
    (80, Temperature.HOT),
    (60, Temperature.WARM),
    (40, Temperature.QUALIFIED),
    (20, Temperature.COOL),
)

COMPLETION_POINTS = 7
DETAILED_ANSWER_MIN_CHARS = 50

TEMPERATURE_EMOJI: dict[Temperature, str] = {
    Temperature.HOT: "\U0001f525",
    Temperature.WARM: "\U0001f31f",
    Temperature.QUALIFIED: "\U0001f48e",
    Temperature.COOL: "❄️",
    Temperature.EARLY: "\U0001f331",
}


def calculate_temperature(total: int) -> Temperature:
    """Map a total score to its temperature band (monotonic step function)."""
    for threshold, temperature in TEMPERATURE_THRESHOLDS:
        if total >= threshold:
            return temperature
    return Temperature.EARLY


def temperature_emoji(temperature: Temperature) -> str:
    return TEMPERATURE_EMOJI.get(temperature, "❓")


def _answer_points(question: Question, value: Any) -> int:
    """Points a single answer contributes to its category.

    Raises:
        ScoringAnomaly: If the value cannot be interpreted for the question type
    """
    match question.type:
        case QuestionType.SELECT | QuestionType.CARD_SELECT:
            if not isinstance(value, str):
                raise ScoringAnomaly(question.id, f"expected option value, got {type(value).__name__}")
            option = question.option(value)
            if option is None:
                raise ScoringAnomaly(question.id, f"unknown option {value!r}")
            return option.points or 0

        case QuestionType.MULTI_SELECT:
            if not isinstance(value, (list, tuple)):
                raise ScoringAnomaly(question.id, f"expected list of options, got {type(value).__name__}")
            selected = [question.option(item) for item in value if isinstance(item, str)]
            selected = [option for option in selected if option is not None]
            points = sum(option.points or 0 for option in selected)
            for bonus in sorted(question.metadata.count_bonuses, key=lambda b: b.min_selected, reverse=True):
                if len(selected) >= bonus.min_selected:
                    points += bonus.points
                    break
            return points

        case QuestionType.YES_NO:
            if not isinstance(value, bool):
                raise ScoringAnomaly(question.id, f"expected boolean, got {type(value).__name__}")
            return (question.metadata.points or 0) if value else 0

        case QuestionType.SLIDER:
            if not is_number(value):
                raise ScoringAnomaly(question.id, f"expected finite number, got {value!r}")
            full = question.metadata.points or 0
            low, high = question.slider_range()
            if high <= low:
                return full
            position = (min(max(value, low), high) - low) / (high - low)
            return int(math.floor(full * position + 0.5))

        case QuestionType.TEXT | QuestionType.TEXTAREA | QuestionType.FILE_UPLOAD:
            if not isinstance(value, str):
                raise ScoringAnomaly(question.id, f"expected text, got {type(value).__name__}")
            return (question.metadata.points or 0) if value.strip() else 0

    raise ScoringAnomaly(question.id, f"unsupported question type {question.type}")


def _engagement_score(responses: Mapping[str, Any], catalog: QuestionCatalog) -> int:
    """Engagement from completion of the resolved flow plus detailed free-text answers.

    0-7 points for completion (rounded half up), +3 for two or more detailed
    textarea answers or +1 for one, capped at the engagement ceiling.
    """
    if not responses:
        return 0

    flow = resolve_flow(responses, catalog)
    answered = 0
    detailed = 0
    for question in flow:
        value = responses.get(question.id)
        if not has_answer(value):
            continue
        answered += 1
        if question.type == QuestionType.TEXTAREA and isinstance(value, str) and len(value) > DETAILED_ANSWER_MIN_CHARS:
            detailed += 1

    score = int(math.floor(answered / len(flow) * COMPLETION_POINTS + 0.5))
    if detailed >= 2:
        score += 3
    elif detailed >= 1:
        score += 1

    return min(CATEGORY_CEILINGS[ScoreCategory.ENGAGEMENT], score)


def calculate_lead_score(
    responses: Mapping[str, Any],
    catalog: QuestionCatalog | None = None,
) -> LeadScoreBreakdown:
    """Score a (partial or complete) response set.

    Args:
        responses: {question_id: answer_value}
        catalog: Catalog the answers belong to (defaults to the portal questionnaire)

    Returns:
        LeadScoreBreakdown with capped category scores, total and temperature

    Pure function -- deterministic, no side effects. Contributions within a
    category are summed and then capped at the category ceiling. Unknown
    question ids and malformed values are skipped.
    """
    catalog = catalog or get_default_catalog()
    buckets: dict[ScoreCategory, int] = {category: 0 for category in ScoreCategory}

    for question_id, value in responses.items():
        question = catalog.get_question(question_id)
        if question is None:
            logger.debug("scoring_anomaly", question_id=question_id, reason="unknown question")
            continue
        if not has_answer(value) or question.metadata.score_weight <= 0:
            continue

        category = CATEGORY_ALIASES.get(question.metadata.category or "")
        if category is None or category == ScoreCategory.ENGAGEMENT:
            continue

        try:
            points = _answer_points(question, value)
        except ScoringAnomaly as exc:
            logger.debug("scoring_anomaly", question_id=exc.question_id, reason=exc.reason)
            continue

        buckets[category] = min(CATEGORY_CEILINGS[category], buckets[category] + max(0, points))

    buckets[ScoreCategory.ENGAGEMENT] = _engagement_score(responses, catalog)

    total = min(100, sum(buckets.values()))

    return LeadScoreBreakdown(
        budget=buckets[ScoreCategory.BUDGET],
        timeline=buckets[ScoreCategory.TIMELINE],
        authority=buckets[ScoreCategory.AUTHORITY],
        complexity=buckets[ScoreCategory.COMPLEXITY],
        engagement=buckets[ScoreCategory.ENGAGEMENT],
        total=total,
        temperature=calculate_temperature(total),
    )


def get_score_interpretation(score: LeadScoreBreakdown) -> ScoreInterpretation:
    """Return the respondent-facing interpretation of a score."""
    match score.temperature:
        case Temperature.HOT:
            return ScoreInterpretation(
                title="You're a perfect fit!",
                description=(
                    "Your project aligns perfectly with our expertise and your timeline is urgent. "
                    "Let's talk immediately."
                ),
                next_steps=[
                    "Schedule a call within 24 hours",
                    "Prepare a custom proposal",
                    "Fast-track your project",
                ],
                priority="immediate",
            )
        case Temperature.WARM:
            return ScoreInterpretation(
                title="Great potential match!",
                description="Your project looks very promising and we'd love to explore how we can help.",
                next_steps=[
                    "Schedule a discovery call this week",
                    "Review similar case studies",
                    "Discuss project approach",
                ],
                priority="high",
            )
        case Temperature.QUALIFIED:
            return ScoreInterpretation(
                title="Let's explore possibilities",
                description=(
                    "Your project has good potential. "
                    "Let's discuss how to make it work within your constraints."
                ),
                next_steps=[
                    "Review educational resources",
                    "Consider project phasing options",
                    "Schedule a consultation",
                ],
                priority="medium",
            )
        case Temperature.COOL:
            return ScoreInterpretation(
                title="Building foundation",
                description=(
                    "While we may not be the perfect fit right now, here are resources to help you plan."
                ),
                next_steps=[
                    "Access planning templates",
                    "Read our project guides",
                    "Join our newsletter for tips",
                ],
                priority="low",
            )
        case _:
            return ScoreInterpretation(
                title="Just getting started",
                description=(
                    "You're in the early stages of planning. We're here with resources when you're ready."
                ),
                next_steps=[
                    "Download our planning guide",
                    "Explore case studies",
                    "Subscribe for web development tips",
                ],
                priority="low",
            )


def get_follow_up_timing(score: LeadScoreBreakdown) -> FollowUpTiming:
    """Return how quickly and by which channel the team should follow up."""
    match score.temperature:
        case Temperature.HOT:
            return FollowUpTiming(initial="Within 2 hours", reminder="24 hours", method="call")
        case Temperature.WARM:
            return FollowUpTiming(initial="Within 24 hours", reminder="3 days", method="call")
        case Temperature.QUALIFIED:
            return FollowUpTiming(initial="Within 48 hours", reminder="1 week", method="email")
        case _:
            return FollowUpTiming(initial="Within 1 week", reminder="1 month", method="email")
