"""
Domain entities for the engagement bounded context.

Entities represent the signals, scores and decisions of the adaptive
interface recommendation engine.
They contain no framework imports and no IO operations.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, assert_never


class InterfaceMode(Enum):
    """Interaction surface the engine can recommend."""

    QUICK = "quick"
    HYBRID = "hybrid"
    DENSE = "dense"


class MessageRole(Enum):
    """Author of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class QuestionDepth(Enum):
    """Ordered depth category of a question found in a message."""

    NONE = "none"
    SIMPLE = "simple"
    MODERATE = "moderate"
    DEEP = "deep"

    @property
    def rank(self) -> int:
        """Position in the none < simple < moderate < deep ordering."""
        match self:
            case QuestionDepth.NONE:
                return 0
            case QuestionDepth.SIMPLE:
                return 1
            case QuestionDepth.MODERATE:
                return 2
            case QuestionDepth.DEEP:
                return 3
            case _:
                assert_never(self)


class ScoreAxis(Enum):
    """Behavioral dimension tracked per conversation."""

    HURRIED = "hurried"
    ANALYTICAL = "analytical"
    CONVERSATIONAL = "conversational"


def governing_axis(mode: InterfaceMode) -> ScoreAxis:
    """Return the score axis that drives a recommendation for a mode."""
    match mode:
        case InterfaceMode.QUICK:
            return ScoreAxis.HURRIED
        case InterfaceMode.DENSE:
            return ScoreAxis.ANALYTICAL
        case InterfaceMode.HYBRID:
            return ScoreAxis.CONVERSATIONAL
        case _:
            assert_never(mode)


def mode_for_axis(axis: ScoreAxis) -> InterfaceMode:
    """Return the interface mode governed by a score axis."""
    match axis:
        case ScoreAxis.HURRIED:
            return InterfaceMode.QUICK
        case ScoreAxis.ANALYTICAL:
            return InterfaceMode.DENSE
        case ScoreAxis.CONVERSATIONAL:
            return InterfaceMode.HYBRID
        case _:
            assert_never(axis)


def mode_label(mode: InterfaceMode) -> str:
    """Short display name of a mode."""
    match mode:
        case InterfaceMode.QUICK:
            return "Quick Mode"
        case InterfaceMode.HYBRID:
            return "Hybrid Mode"
        case InterfaceMode.DENSE:
            return "Terminal Mode"
        case _:
            assert_never(mode)


@dataclass(frozen=True)
class MessageFeatureRecord:
    """Measurable signals derived from a single user message.

    Created once per message, never mutated. ``question_depth`` is
    ``QuestionDepth.NONE`` exactly when ``has_question`` is False.
    """

    conversation_id: str
    created_at: datetime
    word_count: int = 0
    character_count: int = 0
    has_question: bool = False
    question_depth: QuestionDepth = QuestionDepth.NONE
    technical_term_count: int = 0
    urgency_signals: frozenset[str] = field(default_factory=frozenset)
    response_time_seconds: Optional[int] = None
    social_signal_count: int = 0


@dataclass(frozen=True)
class ConversationScoreState:
    """Rolling behavioral scores for one conversation.

    Scores stay within [0, 100]. ``message_count`` counts the feature
    records folded so far. ``suggestion_message_count`` snapshots
    ``message_count`` when a suggestion was last surfaced, and
    ``pending_mode``/``pending_reason`` hold that suggestion until the
    user dismisses it. ``version`` backs the optimistic update check.
    """

    conversation_id: str
    hurried_score: float = 0.0
    analytical_score: float = 0.0
    conversational_score: float = 0.0
    message_count: int = 0
    last_message_at: Optional[datetime] = None
    last_recommended_mode: Optional[InterfaceMode] = None
    last_suggestion_at: Optional[datetime] = None
    suggestion_message_count: Optional[int] = None
    pending_mode: Optional[InterfaceMode] = None
    pending_reason: Optional[str] = None
    version: int = 0

    def score_for(self, axis: ScoreAxis) -> float:
        """Return the current score of an axis."""
        match axis:
            case ScoreAxis.HURRIED:
                return self.hurried_score
            case ScoreAxis.ANALYTICAL:
                return self.analytical_score
            case ScoreAxis.CONVERSATIONAL:
                return self.conversational_score
            case _:
                assert_never(axis)

    @property
    def scores(self) -> dict[ScoreAxis, float]:
        return {axis: self.score_for(axis) for axis in ScoreAxis}


@dataclass(frozen=True)
class RecommendationDecision:
    """Outcome of the recommendation pipeline. Never persisted."""

    recommended_mode: Optional[InterfaceMode]
    reason: str
    should_show: bool = False

    @classmethod
    def none(cls, reason: str) -> "RecommendationDecision":
        """The neutral "no recommendation" outcome."""
        return cls(recommended_mode=None, reason=reason, should_show=False)


@dataclass(frozen=True)
class DismissalState:
    """What the user rejected in this conversation and when.

    Passed into the suggestion gate on every call; persistence is the
    caller's concern.
    """

    conversation_id: str
    dismissed_modes: frozenset[InterfaceMode] = field(default_factory=frozenset)
    dismissed_at: Optional[datetime] = None


@dataclass(frozen=True)
class EngineTuning:
    """Numeric constants of the engine.

    Attributes:
        score_decay: Multiplier applied to every axis once per folded message.
        activation_threshold: Minimum governing-axis score for a recommendation.
        dominance_margin: Lead required over the runner-up axis.
        min_messages: Messages required since start or since the last suggestion.
        suggestion_cooldown_seconds: Quiet period after a suggestion or dismissal.
        dismissal_ttl_hours: How long a dismissed mode stays rejected.
    """

    score_decay: float = 0.85
    activation_threshold: float = 60.0
    dominance_margin: float = 15.0
    min_messages: int = 3
    suggestion_cooldown_seconds: int = 300
    dismissal_ttl_hours: int = 24

    @property
    def release_threshold(self) -> float:
        """Level every axis must fall below before settling back to hybrid."""
        return self.activation_threshold - self.dominance_margin
