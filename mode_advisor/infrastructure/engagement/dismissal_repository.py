"""
Adapter: Suggestion dismissal store.

Implements DismissalRepository port.
Server-side session store for what the user rejected, one row per
conversation in the suggestion_dismissals table.
"""

import logging

from sqlalchemy import insert, select, update
from sqlalchemy.engine import Engine

from mode_advisor.domain.engagement.entities import DismissalState, InterfaceMode
from mode_advisor.domain.engagement.ports import DismissalRepository
from mode_advisor.infrastructure.engagement.schema import (
    from_storage_time,
    suggestion_dismissals,
    to_storage_time,
)

logger = logging.getLogger(__name__)


def _parse_modes(raw: str | None) -> frozenset[InterfaceMode]:
    """Decode the comma-separated mode list, ignoring unknown entries."""
    modes = set()
    for value in (raw or "").split(","):
        try:
            modes.add(InterfaceMode(value))
        except ValueError:
            if value:
                logger.warning("Ignoring unknown dismissed mode: %s", value)
    return frozenset(modes)


class DismissalRepositoryAdapter(DismissalRepository):
    """SQLAlchemy adapter for the suggestion_dismissals table."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def get(self, conversation_id: str) -> DismissalState:
        """Return the conversation's dismissal state (empty when none)."""
        query = select(suggestion_dismissals).where(
            suggestion_dismissals.c.conversation_id == conversation_id
        )
        with self._engine.connect() as conn:
            row = conn.execute(query).mappings().first()

        if row is None:
            return DismissalState(conversation_id=conversation_id)

        return DismissalState(
            conversation_id=conversation_id,
            dismissed_modes=_parse_modes(row["dismissed_modes"]),
            dismissed_at=from_storage_time(row["dismissed_at"]),
        )

    def save(self, state: DismissalState) -> None:
        """Replace the conversation's dismissal state."""
        values = {
            "dismissed_modes": ",".join(sorted(m.value for m in state.dismissed_modes)),
            "dismissed_at": to_storage_time(state.dismissed_at),
        }
        with self._engine.begin() as conn:
            result = conn.execute(
                update(suggestion_dismissals)
                .where(suggestion_dismissals.c.conversation_id == state.conversation_id)
                .values(**values)
            )
            if result.rowcount == 0:
                conn.execute(
                    insert(suggestion_dismissals).values(
                        conversation_id=state.conversation_id, **values
                    )
                )
        logger.debug(
            "Saved dismissals: conversation=%s modes=%s",
            state.conversation_id,
            values["dismissed_modes"],
        )
