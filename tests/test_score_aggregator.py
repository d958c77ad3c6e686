"""
Tests for the ScoreAggregator domain service and its contribution rules.
"""

import itertools

import pytest

from mode_advisor.domain.engagement.entities import (
    ConversationScoreState,
    MessageFeatureRecord,
    QuestionDepth,
)
from mode_advisor.domain.engagement.errors import OutOfOrderFoldError
from mode_advisor.domain.engagement.feature_extractor import MessageFeatureExtractor
from mode_advisor.domain.engagement.score_aggregator import (
    ScoreAggregator,
    analytical_contribution,
    clamp,
    conversational_contribution,
    hurried_contribution,
)
from support import HURRIED_MESSAGES, SHARPE_QUESTION, T0, at

CONV = "conv-1"


def _record(**overrides) -> MessageFeatureRecord:
    values = {"conversation_id": CONV, "created_at": T0}
    values.update(overrides)
    return MessageFeatureRecord(**values)


def _replay(texts: list[str], gap_seconds: float) -> list[ConversationScoreState]:
    """Extract and fold messages sent ``gap_seconds`` apart."""
    extractor = MessageFeatureExtractor()
    aggregator = ScoreAggregator()
    state = None
    states = []
    for i, text in enumerate(texts):
        record = extractor.extract(
            CONV, text, at(i * gap_seconds), state.last_message_at if state else None
        )
        state = aggregator.fold(state, record)
        states.append(state)
    return states


class TestContributions:
    """Per-message points for each axis."""

    def test_terse_fast_urgent_message(self) -> None:
        record = _record(
            word_count=1, response_time_seconds=1, urgency_signals=frozenset({"now"})
        )
        assert hurried_contribution(record) == 12 + 10 + 4

    def test_urgency_is_capped(self) -> None:
        record = _record(
            word_count=20, urgency_signals=frozenset({"now", "asap", "urgent"})
        )
        assert hurried_contribution(record) == 8

    def test_slow_long_message_is_not_hurried(self) -> None:
        assert hurried_contribution(_record(word_count=40, response_time_seconds=120)) == 0

    def test_deep_technical_question(self) -> None:
        record = _record(
            word_count=21,
            has_question=True,
            question_depth=QuestionDepth.DEEP,
            technical_term_count=4,
        )
        assert analytical_contribution(record) == 14 + 12

    def test_long_message_bonus(self) -> None:
        record = _record(word_count=30, has_question=False)
        assert analytical_contribution(record) == 4

    def test_narrative_plain_message(self) -> None:
        record = _record(word_count=22, response_time_seconds=40, social_signal_count=1)
        # length 7, narrative 6, no jargon 4, unhurried 3, social 2
        assert conversational_contribution(record) == 22

    def test_jargon_heavy_message_skips_length_points(self) -> None:
        record = _record(word_count=45, has_question=True, technical_term_count=3)
        assert conversational_contribution(record) == 0

    def test_every_contribution_is_bounded(self) -> None:
        grid = itertools.product(
            (0, 1, 5, 12, 30, 80),
            (None, 0, 3, 10, 20, 100),
            (0, 1, 2, 6),
            tuple(QuestionDepth),
            (0, 1, 3),
        )
        for words, response, terms, depth, social in grid:
            record = _record(
                word_count=words,
                has_question=depth is not QuestionDepth.NONE,
                question_depth=depth,
                technical_term_count=terms,
                urgency_signals=frozenset({"now", "asap", "fast"}),
                response_time_seconds=response,
                social_signal_count=social,
            )
            for contribution in (
                hurried_contribution,
                analytical_contribution,
                conversational_contribution,
            ):
                assert 0 <= contribution(record) <= 30


class TestFold:
    """Folding records into the rolling state."""

    def test_fold_starts_fresh_state(self) -> None:
        state = ScoreAggregator().fold(None, _record(word_count=1))
        assert state.conversation_id == CONV
        assert state.hurried_score == 12
        assert state.message_count == 1
        assert state.last_message_at == T0
        assert state.version == 0

    def test_scores_decay_without_new_signal(self) -> None:
        state = ConversationScoreState(
            conversation_id=CONV, analytical_score=50.0, message_count=3, last_message_at=T0
        )
        folded = ScoreAggregator().fold(state, _record(created_at=at(60)))
        assert folded.analytical_score == pytest.approx(42.5)
        assert folded.message_count == 4

    def test_scores_are_clamped(self) -> None:
        state = ConversationScoreState(
            conversation_id=CONV, hurried_score=100.0, message_count=9, last_message_at=T0
        )
        record = _record(
            created_at=at(1),
            word_count=1,
            response_time_seconds=1,
            urgency_signals=frozenset({"now", "asap"}),
        )
        assert ScoreAggregator().fold(state, record).hurried_score == 100.0
        assert clamp(-3.0) == 0.0
        assert clamp(140.0) == 100.0

    def test_input_state_is_untouched(self) -> None:
        state = ConversationScoreState(conversation_id=CONV, message_count=2, last_message_at=T0)
        folded = ScoreAggregator().fold(state, _record(created_at=at(5), word_count=2))
        assert state.message_count == 2
        assert state.hurried_score == 0.0
        assert folded is not state

    def test_fold_keeps_suggestion_bookkeeping(self) -> None:
        state = ConversationScoreState(
            conversation_id=CONV,
            message_count=5,
            last_message_at=T0,
            suggestion_message_count=4,
            version=7,
        )
        folded = ScoreAggregator().fold(state, _record(created_at=at(5)))
        assert folded.suggestion_message_count == 4
        assert folded.version == 7

    def test_out_of_order_record_is_rejected(self) -> None:
        state = ConversationScoreState(
            conversation_id=CONV, message_count=2, last_message_at=at(60)
        )
        with pytest.raises(OutOfOrderFoldError):
            ScoreAggregator().fold(state, _record(created_at=at(30)))

    def test_clock_only_state_accepts_any_first_record(self) -> None:
        state = ConversationScoreState(
            conversation_id=CONV, message_count=0, last_message_at=at(60)
        )
        assert ScoreAggregator().fold(state, _record(created_at=at(30))).message_count == 1

    def test_replay_is_deterministic(self) -> None:
        texts = HURRIED_MESSAGES + [SHARPE_QUESTION, "thanks, that makes sense to me now"]
        assert _replay(texts, 7) == _replay(texts, 7)


class TestScenarios:
    """Score trajectories of representative conversations."""

    def test_terse_burst_builds_hurried_score(self) -> None:
        states = _replay(HURRIED_MESSAGES, 1)
        hurried = [s.hurried_score for s in states]
        assert hurried == pytest.approx([12.0, 32.2, 49.37, 67.9645])
        assert states[-1].analytical_score == 0.0
        assert states[-1].conversational_score == 0.0

    def test_repeated_sharpe_question_builds_analytical_score(self) -> None:
        states = _replay([SHARPE_QUESTION] * 3, 120)
        analytical = [s.analytical_score for s in states]
        assert analytical == pytest.approx([26.0, 48.1, 66.885])
        assert states[-1].hurried_score == 0.0
        assert states[-1].analytical_score - states[-1].conversational_score >= 15

    def test_single_outlier_does_not_saturate(self) -> None:
        states = _replay([SHARPE_QUESTION], 0)
        assert max(states[0].scores.values()) <= 30
