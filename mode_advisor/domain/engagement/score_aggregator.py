"""
Domain service: Incremental conversation scoring.

Folds one MessageFeatureRecord at a time into a ConversationScoreState.
Each axis is an exponentially-weighted accumulation:

    score' = clamp(0, 100, score * decay + contribution)

Each contribution is capped at 30 points, so a single message can never
saturate an axis. Consistent signals accumulate toward the bound and
isolated outliers decay back out within a handful of messages.

No framework imports. No IO. No side effects.
"""

from dataclasses import replace
from typing import Optional

from mode_advisor.domain.engagement.entities import (
    ConversationScoreState,
    EngineTuning,
    MessageFeatureRecord,
    QuestionDepth,
)
from mode_advisor.domain.engagement.errors import OutOfOrderFoldError

SCORE_MIN = 0.0
SCORE_MAX = 100.0

# Hurried axis
HURRIED_TERSE_POINTS = ((3, 12.0), (8, 8.0), (15, 4.0))  # (max words, points)
HURRIED_FAST_REPLY_POINTS = ((5, 10.0), (15, 6.0), (30, 3.0))  # (max seconds, points)
HURRIED_URGENCY_POINTS = 4.0
HURRIED_URGENCY_CAP = 8.0

# Analytical axis
ANALYTICAL_DEPTH_POINTS = {
    QuestionDepth.NONE: 0.0,
    QuestionDepth.SIMPLE: 3.0,
    QuestionDepth.MODERATE: 8.0,
    QuestionDepth.DEEP: 14.0,
}
ANALYTICAL_TERM_POINTS = 4.0
ANALYTICAL_TERM_CAP = 12.0
ANALYTICAL_LONG_MESSAGE_WORDS = 25
ANALYTICAL_LONG_MESSAGE_POINTS = 4.0

# Conversational axis
CONVERSATIONAL_LENGTH_POINTS = ((40, 10.0), (20, 7.0), (10, 4.0))  # (min words, points)
CONVERSATIONAL_MAX_JARGON_FOR_LENGTH = 1
CONVERSATIONAL_NARRATIVE_WORDS = 10
CONVERSATIONAL_NARRATIVE_POINTS = 6.0
CONVERSATIONAL_NO_JARGON_POINTS = 4.0
CONVERSATIONAL_LIGHT_JARGON_POINTS = 1.0
CONVERSATIONAL_UNHURRIED_SECONDS = 15
CONVERSATIONAL_UNHURRIED_POINTS = 3.0
CONVERSATIONAL_SOCIAL_POINTS = 2.0
CONVERSATIONAL_SOCIAL_CAP = 4.0


def clamp(value: float, low: float = SCORE_MIN, high: float = SCORE_MAX) -> float:
    """Bound a score to [low, high]."""
    return max(low, min(high, value))


def hurried_contribution(record: MessageFeatureRecord) -> float:
    """Points for short messages, fast replies and urgency cues."""
    points = 0.0
    for max_words, word_points in HURRIED_TERSE_POINTS:
        if 0 < record.word_count <= max_words:
            points += word_points
            break

    if record.response_time_seconds is not None:
        for max_seconds, reply_points in HURRIED_FAST_REPLY_POINTS:
            if record.response_time_seconds <= max_seconds:
                points += reply_points
                break

    points += min(
        HURRIED_URGENCY_CAP, HURRIED_URGENCY_POINTS * len(record.urgency_signals)
    )
    return points


def analytical_contribution(record: MessageFeatureRecord) -> float:
    """Points for question depth, jargon and long-form messages."""
    points = ANALYTICAL_DEPTH_POINTS[record.question_depth]
    points += min(
        ANALYTICAL_TERM_CAP, ANALYTICAL_TERM_POINTS * record.technical_term_count
    )
    if record.word_count > ANALYTICAL_LONG_MESSAGE_WORDS:
        points += ANALYTICAL_LONG_MESSAGE_POINTS
    return points


def conversational_contribution(record: MessageFeatureRecord) -> float:
    """Points for longer narrative messages, low jargon and unhurried replies."""
    points = 0.0
    if record.technical_term_count <= CONVERSATIONAL_MAX_JARGON_FOR_LENGTH:
        for min_words, length_points in CONVERSATIONAL_LENGTH_POINTS:
            if record.word_count >= min_words:
                points += length_points
                break

    substantial = record.word_count >= CONVERSATIONAL_NARRATIVE_WORDS
    if substantial and not record.has_question:
        points += CONVERSATIONAL_NARRATIVE_POINTS
    if substantial and record.technical_term_count == 0:
        points += CONVERSATIONAL_NO_JARGON_POINTS
    elif record.technical_term_count == 1:
        points += CONVERSATIONAL_LIGHT_JARGON_POINTS

    if (
        record.response_time_seconds is not None
        and record.response_time_seconds >= CONVERSATIONAL_UNHURRIED_SECONDS
    ):
        points += CONVERSATIONAL_UNHURRIED_POINTS

    points += min(
        CONVERSATIONAL_SOCIAL_CAP,
        CONVERSATIONAL_SOCIAL_POINTS * record.social_signal_count,
    )
    return points


class ScoreAggregator:
    """Domain service maintaining the three rolling scores of a conversation.

    Records must be folded exactly once each, in message-creation order.
    """

    def __init__(self, tuning: EngineTuning | None = None) -> None:
        self._tuning = tuning or EngineTuning()

    def fold(
        self,
        state: Optional[ConversationScoreState],
        record: MessageFeatureRecord,
    ) -> ConversationScoreState:
        """Fold one feature record into the conversation's scores.

        Args:
            state: Current score state, or None for a conversation with no
                (usable) prior state.
            record: Feature record of the newest message.

        Returns:
            A new score state; the input is left untouched.

        Raises:
            OutOfOrderFoldError: If the record predates the last folded message.
        """
        if state is None:
            state = ConversationScoreState(conversation_id=record.conversation_id)

        if (
            state.last_message_at is not None
            and state.message_count > 0
            and record.created_at < state.last_message_at
        ):
            raise OutOfOrderFoldError(record.conversation_id)

        decay = self._tuning.score_decay
        return replace(
            state,
            hurried_score=clamp(state.hurried_score * decay + hurried_contribution(record)),
            analytical_score=clamp(
                state.analytical_score * decay + analytical_contribution(record)
            ),
            conversational_score=clamp(
                state.conversational_score * decay + conversational_contribution(record)
            ),
            message_count=state.message_count + 1,
            last_message_at=record.created_at,
        )
