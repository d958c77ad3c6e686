"""
Tests for the MessageFeatureExtractor domain service.

Pure domain logic; no database or network calls.
"""

from datetime import datetime, timedelta

import pytest

from mode_advisor.domain.engagement.entities import QuestionDepth
from mode_advisor.domain.engagement.feature_extractor import MessageFeatureExtractor
from support import SHARPE_QUESTION, T0, at

CONV = "conv-1"


@pytest.fixture
def extractor() -> MessageFeatureExtractor:
    return MessageFeatureExtractor()


class TestCounts:
    """Word and character counts."""

    def test_single_word(self, extractor) -> None:
        record = extractor.extract(CONV, "ok", T0)
        assert record.word_count == 1
        assert record.character_count == 2
        assert record.conversation_id == CONV
        assert record.created_at == T0

    def test_whitespace_runs_do_not_add_words(self, extractor) -> None:
        record = extractor.extract(CONV, "  show   me\tthe\nchart  ", T0)
        assert record.word_count == 4


class TestQuestionDepth:
    """Question detection and the none < simple < moderate < deep ordering."""

    def test_statement_has_no_question(self, extractor) -> None:
        record = extractor.extract(CONV, "I bought more shares today", T0)
        assert record.has_question is False
        assert record.question_depth is QuestionDepth.NONE

    def test_short_question_is_simple(self, extractor) -> None:
        record = extractor.extract(CONV, "Is it open?", T0)
        assert record.has_question is True
        assert record.question_depth is QuestionDepth.SIMPLE

    def test_interrogative_without_question_mark(self, extractor) -> None:
        record = extractor.extract(CONV, "what now", T0)
        assert record.has_question is True
        assert record.question_depth is QuestionDepth.SIMPLE

    @pytest.mark.parametrize("text", ["What's my balance", "who’s selling", "\"how\" then"])
    def test_first_word_ignores_possessive_and_quotes(self, extractor, text) -> None:
        assert extractor.extract(CONV, text, T0).has_question is True

    @pytest.mark.parametrize("text", ["Can't wait", "Isn't it lovely", "Won't sell", "Whatever"])
    def test_contractions_are_not_interrogatives(self, extractor, text) -> None:
        record = extractor.extract(CONV, text, T0)
        assert record.has_question is False
        assert record.question_depth is QuestionDepth.NONE

    def test_single_technical_term_is_moderate(self, extractor) -> None:
        record = extractor.extract(CONV, "What is my beta?", T0)
        assert record.technical_term_count == 1
        assert record.question_depth is QuestionDepth.MODERATE

    def test_longer_plain_question_is_moderate(self, extractor) -> None:
        record = extractor.extract(
            CONV, "Can you tell me how my account did over the last month?", T0
        )
        assert record.technical_term_count == 0
        assert record.question_depth is QuestionDepth.MODERATE

    def test_two_technical_terms_make_it_deep(self, extractor) -> None:
        record = extractor.extract(
            CONV, "How should I weigh the Sharpe ratio against drawdown for this fund?", T0
        )
        assert record.technical_term_count == 2
        assert record.question_depth is QuestionDepth.DEEP

    def test_several_question_marks_make_it_deep(self, extractor) -> None:
        record = extractor.extract(CONV, "Why? How? When?", T0)
        assert record.question_depth is QuestionDepth.DEEP

    def test_depth_rank_is_ordered(self) -> None:
        ranks = [d.rank for d in (
            QuestionDepth.NONE,
            QuestionDepth.SIMPLE,
            QuestionDepth.MODERATE,
            QuestionDepth.DEEP,
        )]
        assert ranks == sorted(ranks)
        assert len(set(ranks)) == 4


class TestVocabulary:
    """Jargon, urgency and social phrase matching."""

    def test_sharpe_question_terms(self, extractor) -> None:
        record = extractor.extract(CONV, SHARPE_QUESTION, T0)
        # beta, sharpe, rebalancing, volatility
        assert record.technical_term_count == 4
        assert record.word_count == 21
        assert record.question_depth is QuestionDepth.DEEP

    def test_terms_are_case_insensitive(self, extractor) -> None:
        record = extractor.extract(CONV, "VOLATILITY and Volatility", T0)
        assert record.technical_term_count == 2

    def test_longer_term_wins_over_its_prefix(self, extractor) -> None:
        record = extractor.extract(CONV, "the derivatives desk", T0)
        assert record.technical_term_count == 1

    def test_multi_word_and_slash_terms(self, extractor) -> None:
        record = extractor.extract(CONV, "Compare the P/E ratio and market cap", T0)
        assert record.technical_term_count == 2

    def test_terms_inside_other_words_do_not_match(self, extractor) -> None:
        record = extractor.extract(CONV, "alphabet betamax", T0)
        assert record.technical_term_count == 0

    def test_urgency_signals_are_distinct(self, extractor) -> None:
        record = extractor.extract(CONV, "quick quick, now please", T0)
        assert record.urgency_signals == frozenset({"quick", "now"})

    def test_social_phrases(self, extractor) -> None:
        record = extractor.extract(CONV, "Thanks, I think that helps a lot", T0)
        assert record.social_signal_count == 2

    def test_greeting_not_found_inside_words(self, extractor) -> None:
        record = extractor.extract(CONV, "this thing", T0)
        assert record.social_signal_count == 0


class TestResponseTime:
    """Whole seconds since the previous message in the conversation."""

    def test_first_message_has_no_response_time(self, extractor) -> None:
        assert extractor.extract(CONV, "hi", T0).response_time_seconds is None

    def test_seconds_are_floored(self, extractor) -> None:
        record = extractor.extract(CONV, "hi", at(7.9), previous_message_at=T0)
        assert record.response_time_seconds == 7

    def test_clock_skew_is_clamped_to_zero(self, extractor) -> None:
        record = extractor.extract(CONV, "hi", T0, previous_message_at=at(30))
        assert record.response_time_seconds == 0

    def test_naive_and_aware_timestamps_give_none(self, extractor) -> None:
        naive = datetime(2025, 1, 6, 9, 0)
        record = extractor.extract(CONV, "hi", T0, previous_message_at=naive)
        assert record.response_time_seconds is None


class TestMalformedInput:
    """Empty or non-string text degrades to a zeroed record."""

    @pytest.mark.parametrize("text", ["", "   \n\t", None, 42])
    def test_zeroed_record(self, extractor, text) -> None:
        record = extractor.extract(CONV, text, T0)
        assert record.word_count == 0
        assert record.character_count == 0
        assert record.has_question is False
        assert record.question_depth is QuestionDepth.NONE
        assert record.technical_term_count == 0
        assert record.urgency_signals == frozenset()
        assert record.social_signal_count == 0

    def test_zeroed_record_keeps_response_time(self, extractor) -> None:
        record = extractor.extract(CONV, "", T0 + timedelta(seconds=12), previous_message_at=T0)
        assert record.response_time_seconds == 12

    def test_extraction_is_deterministic(self, extractor) -> None:
        first = extractor.extract(CONV, SHARPE_QUESTION, at(60), previous_message_at=T0)
        second = extractor.extract(CONV, SHARPE_QUESTION, at(60), previous_message_at=T0)
        assert first == second
