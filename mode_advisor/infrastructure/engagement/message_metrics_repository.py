"""
Adapter: Message metrics store.

Implements MetricsStore port.
Appends one row per folded message to the message_metrics table.
Raw message text is never stored.
"""

import logging

from sqlalchemy import insert, select
from sqlalchemy.engine import Engine

from mode_advisor.domain.engagement.entities import MessageFeatureRecord, QuestionDepth
from mode_advisor.domain.engagement.ports import MetricsStore
from mode_advisor.infrastructure.engagement.schema import (
    from_storage_time,
    message_metrics,
    to_storage_time,
)

logger = logging.getLogger(__name__)


class MessageMetricsRepositoryAdapter(MetricsStore):
    """SQLAlchemy adapter for the message_metrics table."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def append(self, record: MessageFeatureRecord) -> None:
        """Insert a feature record."""
        with self._engine.begin() as conn:
            conn.execute(
                insert(message_metrics).values(
                    conversation_id=record.conversation_id,
                    created_at=to_storage_time(record.created_at),
                    word_count=record.word_count,
                    character_count=record.character_count,
                    has_question=record.has_question,
                    question_depth=record.question_depth.value,
                    technical_term_count=record.technical_term_count,
                    urgency_signals=",".join(sorted(record.urgency_signals)),
                    response_time_seconds=record.response_time_seconds,
                    social_signal_count=record.social_signal_count,
                )
            )
        logger.debug(
            "Stored message metrics: conversation=%s words=%d depth=%s",
            record.conversation_id,
            record.word_count,
            record.question_depth.value,
        )

    def list_for_conversation(self, conversation_id: str) -> list[MessageFeatureRecord]:
        """Return the conversation's records, oldest first."""
        query = (
            select(message_metrics)
            .where(message_metrics.c.conversation_id == conversation_id)
            .order_by(message_metrics.c.created_at.asc(), message_metrics.c.id.asc())
        )
        with self._engine.connect() as conn:
            rows = conn.execute(query).mappings().all()

        return [
            MessageFeatureRecord(
                conversation_id=row["conversation_id"],
                created_at=from_storage_time(row["created_at"]),
                word_count=row["word_count"],
                character_count=row["character_count"],
                has_question=bool(row["has_question"]),
                question_depth=QuestionDepth(row["question_depth"]),
                technical_term_count=row["technical_term_count"],
                urgency_signals=frozenset(
                    s for s in (row["urgency_signals"] or "").split(",") if s
                ),
                response_time_seconds=row["response_time_seconds"],
                social_signal_count=row["social_signal_count"],
            )
            for row in rows
        ]
