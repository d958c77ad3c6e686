"""
Adapter: Conversation score state repository.

Implements ScoreStateRepository port.
One row per conversation in the conversation_scores table. Writes are
guarded by an optimistic version check so concurrent updates of the same
conversation cannot silently overwrite each other.
"""

import logging
import math
from dataclasses import replace
from typing import Optional

from sqlalchemy import insert, select, update
from sqlalchemy.engine import Engine, RowMapping
from sqlalchemy.exc import IntegrityError

from mode_advisor.domain.engagement.entities import ConversationScoreState, InterfaceMode
from mode_advisor.domain.engagement.errors import (
    ConcurrentScoreUpdateError,
    CorruptScoreStateError,
)
from mode_advisor.domain.engagement.ports import ScoreStateRepository
from mode_advisor.infrastructure.engagement.schema import (
    conversation_scores,
    from_storage_time,
    to_storage_time,
)

logger = logging.getLogger(__name__)

SCORE_COLUMNS = ("hurried_score", "analytical_score", "conversational_score")


def _mode_or_none(value: Optional[str]) -> Optional[InterfaceMode]:
    return InterfaceMode(value) if value else None


def _row_to_state(row: RowMapping) -> ConversationScoreState:
    """Map a DB row to a score state, rejecting rows that break invariants."""
    conversation_id = row["conversation_id"]
    version = row["version"] or 0

    for column in SCORE_COLUMNS:
        value = row[column]
        if value is None or not math.isfinite(value) or not 0.0 <= value <= 100.0:
            raise CorruptScoreStateError(
                conversation_id, f"{column} out of range: {value!r}", stored_version=version
            )
    if row["message_count"] is None or row["message_count"] < 0:
        raise CorruptScoreStateError(
            conversation_id, "negative message_count", stored_version=version
        )

    try:
        last_mode = _mode_or_none(row["last_recommended_mode"])
        pending_mode = _mode_or_none(row["pending_mode"])
    except ValueError as exc:
        raise CorruptScoreStateError(
            conversation_id, f"unknown mode: {exc}", stored_version=version
        ) from exc

    return ConversationScoreState(
        conversation_id=conversation_id,
        hurried_score=row["hurried_score"],
        analytical_score=row["analytical_score"],
        conversational_score=row["conversational_score"],
        message_count=row["message_count"],
        last_message_at=from_storage_time(row["last_message_at"]),
        last_recommended_mode=last_mode,
        last_suggestion_at=from_storage_time(row["last_suggestion_at"]),
        suggestion_message_count=row["suggestion_message_count"],
        pending_mode=pending_mode,
        pending_reason=row["pending_reason"],
        version=version,
    )


def _state_to_values(state: ConversationScoreState) -> dict:
    return {
        "hurried_score": state.hurried_score,
        "analytical_score": state.analytical_score,
        "conversational_score": state.conversational_score,
        "message_count": state.message_count,
        "last_message_at": to_storage_time(state.last_message_at),
        "last_recommended_mode": (
            state.last_recommended_mode.value if state.last_recommended_mode else None
        ),
        "last_suggestion_at": to_storage_time(state.last_suggestion_at),
        "suggestion_message_count": state.suggestion_message_count,
        "pending_mode": state.pending_mode.value if state.pending_mode else None,
        "pending_reason": state.pending_reason,
    }


class ScoreStateRepositoryAdapter(ScoreStateRepository):
    """SQLAlchemy adapter for the conversation_scores table."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def get(self, conversation_id: str) -> Optional[ConversationScoreState]:
        """Return the score state for a conversation, or None.

        Raises:
            CorruptScoreStateError: If the stored row breaks an invariant.
        """
        query = select(conversation_scores).where(
            conversation_scores.c.conversation_id == conversation_id
        )
        with self._engine.connect() as conn:
            row = conn.execute(query).mappings().first()

        if row is None:
            return None
        return _row_to_state(row)

    def save(
        self, state: ConversationScoreState, expected_version: int
    ) -> ConversationScoreState:
        """Insert (expected_version 0) or update the row at expected_version.

        Returns:
            The stored state carrying its new version.

        Raises:
            ConcurrentScoreUpdateError: If the row was created or changed
                by someone else in the meantime.
        """
        new_version = expected_version + 1
        values = _state_to_values(state)

        if expected_version == 0:
            try:
                with self._engine.begin() as conn:
                    conn.execute(
                        insert(conversation_scores).values(
                            conversation_id=state.conversation_id,
                            version=new_version,
                            **values,
                        )
                    )
            except IntegrityError as exc:
                raise ConcurrentScoreUpdateError(
                    state.conversation_id, expected_version
                ) from exc
        else:
            statement = (
                update(conversation_scores)
                .where(conversation_scores.c.conversation_id == state.conversation_id)
                .where(conversation_scores.c.version == expected_version)
                .values(version=new_version, **values)
            )
            with self._engine.begin() as conn:
                result = conn.execute(statement)
            if result.rowcount == 0:
                raise ConcurrentScoreUpdateError(state.conversation_id, expected_version)

        logger.debug(
            "Saved score state: conversation=%s version=%d messages=%d",
            state.conversation_id,
            new_version,
            state.message_count,
        )
        return replace(state, version=new_version)
