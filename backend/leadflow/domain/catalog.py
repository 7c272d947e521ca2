"""Versioned question catalog and the portal's default questionnaire.

Pure domain logic with no external dependencies.
"""

from functools import lru_cache

from leadflow.core.exceptions import CatalogError
from leadflow.schemas.questions import (
    CHOICE_TYPES,
    AnswerValidation,
    BranchCondition,
    BranchOperator,
    BranchRule,
    CountBonus,
    Question,
    QuestionMetadata,
    QuestionOption,
    QuestionType,
)

QUESTIONNAIRE_VERSION = "1.0.0"


class QuestionCatalog:
    """Ordered, versioned set of questions.

    Construction validates the catalog:
        - question ids are unique
        - every branch condition and branch target references an existing question
        - every branch target lies strictly after its source (forward-only)
        - choice questions declare at least one option
    """

    def __init__(self, version: str, questions: list[Question]):
        self.version = version
        self._questions = tuple(questions)
        self._index: dict[str, int] = {}

        for position, question in enumerate(self._questions):
            if question.id in self._index:
                raise CatalogError(f"Duplicate question id '{question.id}'")
            self._index[question.id] = position

        for position, question in enumerate(self._questions):
            if question.type in CHOICE_TYPES and not question.options:
                raise CatalogError(f"Choice question '{question.id}' has no options")
            for rule in question.branching:
                if rule.condition.question_id not in self._index:
                    raise CatalogError(
                        f"Question '{question.id}' branches on unknown question '{rule.condition.question_id}'"
                    )
                target = self._index.get(rule.next_question_id)
                if target is None:
                    raise CatalogError(
                        f"Question '{question.id}' branches to unknown question '{rule.next_question_id}'"
                    )
                if target <= position:
                    raise CatalogError(
                        f"Question '{question.id}' branches backwards to '{rule.next_question_id}'"
                    )

    def get_all_questions(self) -> list[Question]:
        """Return every question in default order."""
        return list(self._questions)

    def get_question(self, question_id: str) -> Question | None:
        position = self._index.get(question_id)
        if position is None:
            return None
        return self._questions[position]

    def index_of(self, question_id: str) -> int:
        """Return the default-order position of a question.

        Raises:
            KeyError: If the question is not in the catalog
        """
        return self._index[question_id]

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._index

    def __len__(self) -> int:
        return len(self._questions)

    def __repr__(self) -> str:
        return f"QuestionCatalog(version={self.version!r}, questions={len(self._questions)})"


DEFAULT_QUESTIONS: list[Question] = [
    # 1. Project type
    Question(
        id="project_type",
        type=QuestionType.CARD_SELECT,
        title="What type of project are you looking to build?",
        description="This helps us understand the scope and technical requirements.",
        required=True,
        options=(
            QuestionOption(
                value="new_website",
                label="New Website",
                description="Build a brand new website from scratch",
                points=5,
            ),
            QuestionOption(
                value="redesign",
                label="Website Redesign",
                description="Refresh and modernize an existing website",
                points=5,
            ),
            QuestionOption(
                value="web_app",
                label="Web Application",
                description="Build a complex, interactive web application",
                points=10,
            ),
            QuestionOption(
                value="ecommerce",
                label="E-commerce",
                description="Online store with payment processing",
                points=8,
            ),
        ),
        metadata=QuestionMetadata(score_weight=0.15, category="project"),
    ),
    # 2. Industry
    Question(
        id="industry",
        type=QuestionType.SELECT,
        title="What industry is your business in?",
        description="This helps us tailor our approach to your sector.",
        required=True,
        options=(
            QuestionOption(value="technology", label="Technology / SaaS"),
            QuestionOption(value="healthcare", label="Healthcare / Medical"),
            QuestionOption(value="finance", label="Finance / Banking"),
            QuestionOption(value="retail", label="Retail / E-commerce"),
            QuestionOption(value="education", label="Education / E-learning"),
            QuestionOption(value="realestate", label="Real Estate"),
            QuestionOption(value="hospitality", label="Hospitality / Travel"),
            QuestionOption(value="nonprofit", label="Non-profit / NGO"),
            QuestionOption(value="other", label="Other"),
        ),
        metadata=QuestionMetadata(score_weight=0.05, category="business"),
    ),
    # 3. Key features
    Question(
        id="features",
        type=QuestionType.MULTI_SELECT,
        title="Which features are essential for your project?",
        description="Select all that apply.",
        required=True,
        options=(
            QuestionOption(value="cms", label="Content Management System"),
            QuestionOption(value="user_auth", label="User Authentication"),
            QuestionOption(value="payment", label="Payment Processing"),
            QuestionOption(value="api", label="API Integration"),
            QuestionOption(value="analytics", label="Analytics Dashboard"),
            QuestionOption(value="search", label="Advanced Search"),
            QuestionOption(value="mobile", label="Mobile App"),
            QuestionOption(value="multilingual", label="Multi-language Support"),
            QuestionOption(value="social", label="Social Media Integration"),
            QuestionOption(value="booking", label="Booking/Scheduling System"),
        ),
        metadata=QuestionMetadata(
            score_weight=0.10,
            category="technical",
            count_bonuses=(
                CountBonus(min_selected=6, points=5),
                CountBonus(min_selected=4, points=3),
            ),
        ),
    ),
    # 4. Design style
    Question(
        id="design_style",
        type=QuestionType.CARD_SELECT,
        title="What design style resonates with your brand?",
        description="This helps us align with your visual preferences.",
        required=True,
        options=(
            QuestionOption(
                value="modern_minimal",
                label="Modern & Minimal",
                description="Clean, spacious, focus on content",
            ),
            QuestionOption(
                value="bold_creative",
                label="Bold & Creative",
                description="Unique, artistic, stand out from the crowd",
            ),
            QuestionOption(
                value="corporate_professional",
                label="Corporate & Professional",
                description="Trustworthy, established, traditional",
            ),
            QuestionOption(
                value="playful_friendly",
                label="Playful & Friendly",
                description="Approachable, fun, engaging",
            ),
        ),
        metadata=QuestionMetadata(score_weight=0.05, category="design"),
    ),
    # 5. Timeline
    Question(
        id="timeline",
        type=QuestionType.CARD_SELECT,
        title="When do you need this project completed?",
        description="Be realistic - quality takes time.",
        required=True,
        options=(
            QuestionOption(
                value="asap",
                label="ASAP",
                description="Need it yesterday (rush charges may apply)",
                points=25,
            ),
            QuestionOption(
                value="1_month",
                label="Within 1 month",
                description="Fast turnaround needed",
                points=22,
            ),
            QuestionOption(
                value="2_3_months",
                label="2-3 months",
                description="Standard timeline for most projects",
                points=18,
            ),
            QuestionOption(
                value="3_6_months",
                label="3-6 months",
                description="Comfortable timeline for complex projects",
                points=12,
            ),
            QuestionOption(
                value="flexible",
                label="Flexible",
                description="No hard deadline",
                points=5,
            ),
        ),
        metadata=QuestionMetadata(score_weight=0.25, category="timeline"),
    ),
    # 6. Budget
    Question(
        id="budget",
        type=QuestionType.CARD_SELECT,
        title="What's your budget for this project?",
        description="This helps us recommend the best solution within your range.",
        required=True,
        options=(
            QuestionOption(
                value="under_5k",
                label="Under $5,000",
                description="Essential features only",
                points=5,
            ),
            QuestionOption(
                value="5k_10k",
                label="$5,000 - $10,000",
                description="Good for small business websites",
                points=15,
            ),
            QuestionOption(
                value="10k_25k",
                label="$10,000 - $25,000",
                description="Professional sites with custom features",
                points=25,
            ),
            QuestionOption(
                value="25k_50k",
                label="$25,000 - $50,000",
                description="Complex applications and platforms",
                points=30,
            ),
            QuestionOption(
                value="50k_plus",
                label="$50,000+",
                description="Enterprise-level solutions",
                points=35,
            ),
        ),
        metadata=QuestionMetadata(score_weight=0.35, category="budget"),
    ),
    # 7. Current website (branches past the URL question when answered "no")
    Question(
        id="current_website",
        type=QuestionType.YES_NO,
        title="Do you currently have a website?",
        description="This helps us understand your starting point.",
        required=True,
        branching=(
            BranchRule(
                condition=BranchCondition(
                    question_id="current_website", operator=BranchOperator.EQUALS, value=True
                ),
                next_question_id="current_website_url",
            ),
            BranchRule(
                condition=BranchCondition(
                    question_id="current_website", operator=BranchOperator.EQUALS, value=False
                ),
                next_question_id="decision_maker",
            ),
        ),
        metadata=QuestionMetadata(score_weight=0.05, category="business"),
    ),
    # 7a. Current website URL
    Question(
        id="current_website_url",
        type=QuestionType.TEXT,
        title="What's your current website URL?",
        description="This helps us review your existing presence.",
        placeholder="https://example.com",
        required=False,
        validation=AnswerValidation(
            pattern=r"^https?://.+",
            custom_message="Please enter a valid URL starting with http:// or https://",
        ),
        metadata=QuestionMetadata(score_weight=0.0, category="business"),
    ),
    # 8. Decision making
    Question(
        id="decision_maker",
        type=QuestionType.CARD_SELECT,
        title="What is your role in this project?",
        description="This helps us understand the decision-making process.",
        required=True,
        options=(
            QuestionOption(
                value="sole_decision",
                label="I'm the decision maker",
                description="I have full authority to approve this project",
                points=15,
            ),
            QuestionOption(
                value="key_influencer",
                label="Key influencer",
                description="I heavily influence the decision",
                points=10,
            ),
            QuestionOption(
                value="team_member",
                label="Team member",
                description="Part of the decision-making team",
                points=5,
            ),
            QuestionOption(
                value="researching",
                label="Just researching",
                description="Gathering information for others",
                points=2,
            ),
        ),
        metadata=QuestionMetadata(score_weight=0.15, category="authority"),
    ),
    # 9. Project goals
    Question(
        id="project_goals",
        type=QuestionType.TEXTAREA,
        title="What are your main goals for this project?",
        description="Tell us what success looks like for you.",
        placeholder=(
            "Example: Increase online sales by 50%, improve user experience, "
            "establish professional brand presence..."
        ),
        required=True,
        validation=AnswerValidation(
            min=20,
            custom_message="Please provide at least 20 characters about your goals",
        ),
        metadata=QuestionMetadata(score_weight=0.10, category="engagement"),
    ),
    # 10. Biggest challenge
    Question(
        id="biggest_challenge",
        type=QuestionType.TEXTAREA,
        title="What's your biggest challenge right now?",
        description="What problem are you trying to solve?",
        placeholder="Example: Our current website doesn't convert visitors, it's slow and outdated...",
        required=True,
        validation=AnswerValidation(
            min=20,
            custom_message="Please provide at least 20 characters about your challenges",
        ),
        metadata=QuestionMetadata(score_weight=0.05, category="engagement"),
    ),
    # 11. Additional context
    Question(
        id="additional_info",
        type=QuestionType.TEXTAREA,
        title="Anything else we should know?",
        description="Special requirements, inspirations, or questions for us.",
        placeholder=(
            "Optional: Share any additional context, links to sites you like, "
            "specific requirements..."
        ),
        required=False,
        metadata=QuestionMetadata(score_weight=0.05, category="engagement"),
    ),
]


@lru_cache
def get_default_catalog() -> QuestionCatalog:
    """Return the portal's questionnaire catalog (validated once)."""
    return QuestionCatalog(QUESTIONNAIRE_VERSION, DEFAULT_QUESTIONS)
