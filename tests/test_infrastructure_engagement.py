"""
Tests for the engagement SQLAlchemy adapters.

Each test runs against its own in-memory SQLite database.
"""

from dataclasses import replace
from datetime import datetime, timezone

import pytest
from sqlalchemy import insert
from sqlalchemy.pool import StaticPool

from mode_advisor.domain.engagement.entities import (
    ConversationScoreState,
    DismissalState,
    InterfaceMode,
    MessageFeatureRecord,
    QuestionDepth,
)
from mode_advisor.domain.engagement.errors import (
    ConcurrentScoreUpdateError,
    CorruptScoreStateError,
)
from mode_advisor.infrastructure.engagement.schema import (
    build_engine,
    conversation_scores,
    from_storage_time,
    suggestion_dismissals,
    to_storage_time,
)
from support import T0, at

CONV = "conv-1"


def _raw_score_row(**overrides) -> dict:
    row = {
        "conversation_id": CONV,
        "hurried_score": 10.0,
        "analytical_score": 20.0,
        "conversational_score": 30.0,
        "message_count": 3,
        "version": 6,
    }
    row.update(overrides)
    return row


class TestSchema:
    """Engine construction and timestamp normalization."""

    def test_in_memory_sqlite_shares_one_connection(self) -> None:
        assert isinstance(build_engine("sqlite://").pool, StaticPool)
        assert isinstance(build_engine("sqlite:///:memory:").pool, StaticPool)
        assert not isinstance(build_engine("sqlite:///./advisor.db").pool, StaticPool)

    def test_storage_time_is_utc(self) -> None:
        naive = datetime(2025, 1, 6, 10, 0)
        assert to_storage_time(naive).tzinfo is timezone.utc
        assert from_storage_time(naive) == T0
        assert to_storage_time(None) is None
        assert from_storage_time(None) is None


class TestMessageMetricsRepository:
    """Tests for the append-only metrics store."""

    def test_append_and_list_in_creation_order(self, metrics_store) -> None:
        later = MessageFeatureRecord(
            conversation_id=CONV,
            created_at=at(30),
            word_count=3,
            character_count=14,
            has_question=True,
            question_depth=QuestionDepth.SIMPLE,
            urgency_signals=frozenset({"now", "asap"}),
            response_time_seconds=30,
        )
        earlier = MessageFeatureRecord(conversation_id=CONV, created_at=T0, word_count=1)
        metrics_store.append(later)
        metrics_store.append(earlier)

        records = metrics_store.list_for_conversation(CONV)

        assert records == [earlier, later]
        assert records[1].urgency_signals == {"now", "asap"}
        assert records[1].created_at.tzinfo is not None

    def test_other_conversations_are_excluded(self, metrics_store) -> None:
        metrics_store.append(MessageFeatureRecord(conversation_id="other", created_at=T0))
        assert metrics_store.list_for_conversation(CONV) == []


class TestScoreStateRepository:
    """Tests for the versioned score state store."""

    def test_unknown_conversation(self, score_repo) -> None:
        assert score_repo.get(CONV) is None

    def test_insert_then_update(self, score_repo) -> None:
        state = ConversationScoreState(
            conversation_id=CONV,
            hurried_score=12.5,
            message_count=1,
            last_message_at=T0,
            pending_mode=InterfaceMode.QUICK,
            pending_reason="fast",
        )
        stored = score_repo.save(state, expected_version=0)
        assert stored.version == 1

        loaded = score_repo.get(CONV)
        assert loaded == stored

        updated = score_repo.save(replace(loaded, message_count=2), expected_version=1)
        assert updated.version == 2
        assert score_repo.get(CONV).message_count == 2

    def test_stale_update_is_rejected(self, score_repo) -> None:
        state = score_repo.save(ConversationScoreState(conversation_id=CONV), expected_version=0)
        score_repo.save(replace(state, message_count=1), expected_version=1)

        with pytest.raises(ConcurrentScoreUpdateError):
            score_repo.save(replace(state, message_count=5), expected_version=1)
        assert score_repo.get(CONV).message_count == 1

    def test_duplicate_insert_is_rejected(self, score_repo) -> None:
        score_repo.save(ConversationScoreState(conversation_id=CONV), expected_version=0)
        with pytest.raises(ConcurrentScoreUpdateError):
            score_repo.save(ConversationScoreState(conversation_id=CONV), expected_version=0)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"hurried_score": 150.0},
            {"analytical_score": -1.0},
            {"conversational_score": 100.5},
            {"message_count": -2},
            {"pending_mode": "terminal"},
        ],
    )
    def test_corrupt_rows_are_reported(self, engine, score_repo, overrides) -> None:
        with engine.begin() as conn:
            conn.execute(insert(conversation_scores).values(**_raw_score_row(**overrides)))

        with pytest.raises(CorruptScoreStateError) as exc_info:
            score_repo.get(CONV)
        assert exc_info.value.stored_version == 6

    def test_corrupt_row_can_be_overwritten(self, engine, score_repo) -> None:
        with engine.begin() as conn:
            conn.execute(
                insert(conversation_scores).values(**_raw_score_row(hurried_score=500.0))
            )

        fresh = ConversationScoreState(conversation_id=CONV, message_count=1)
        assert score_repo.save(fresh, expected_version=6).version == 7
        assert score_repo.get(CONV).hurried_score == 0.0


class TestDismissalRepository:
    """Tests for the dismissal session store."""

    def test_empty_state_for_unknown_conversation(self, dismissal_repo) -> None:
        state = dismissal_repo.get(CONV)
        assert state == DismissalState(conversation_id=CONV)

    def test_save_and_replace(self, dismissal_repo) -> None:
        dismissal_repo.save(
            DismissalState(CONV, frozenset({InterfaceMode.QUICK}), dismissed_at=T0)
        )
        dismissal_repo.save(
            DismissalState(
                CONV, frozenset({InterfaceMode.QUICK, InterfaceMode.DENSE}), dismissed_at=at(60)
            )
        )

        state = dismissal_repo.get(CONV)
        assert state.dismissed_modes == {InterfaceMode.QUICK, InterfaceMode.DENSE}
        assert state.dismissed_at == at(60)

    def test_unknown_modes_are_ignored(self, engine, dismissal_repo) -> None:
        with engine.begin() as conn:
            conn.execute(
                insert(suggestion_dismissals).values(
                    conversation_id=CONV, dismissed_modes="dense,terminal", dismissed_at=T0
                )
            )
        assert dismissal_repo.get(CONV).dismissed_modes == {InterfaceMode.DENSE}
