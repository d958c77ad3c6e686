"""
Use case: Read the suggestion currently waiting for the user.

Input: GetModeSuggestionQuery (conversation_id, ready, current_mode)
Output: ModeSuggestionResult | None
Side effects: None (read-only query, safe to poll).
Failure cases: None. Storage failures read as "no suggestion".
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from mode_advisor.application.engagement.dtos import (
    GetModeSuggestionQuery,
    ModeSuggestionResult,
)
from mode_advisor.domain.engagement.ports import DismissalRepository, ScoreStateRepository
from mode_advisor.domain.engagement.suggestion_gate import SuggestionGate

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class GetModeSuggestionUseCase:
    """Returns the pending suggestion unless it no longer applies.

    A pending suggestion is hidden when the caller is not ready, when the
    user already declined that mode in this session, or when the caller
    is already displaying it.
    """

    def __init__(
        self,
        score_repo: ScoreStateRepository,
        dismissal_repo: DismissalRepository,
        gate: SuggestionGate,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._score_repo = score_repo
        self._dismissal_repo = dismissal_repo
        self._gate = gate
        self._clock = clock

    def execute(self, query: GetModeSuggestionQuery) -> ModeSuggestionResult | None:
        """Run the suggestion query.

        Args:
            query: Conversation id, readiness flag and optional current mode.

        Returns:
            The suggestion to show, or None.
        """
        if not query.ready:
            return None

        try:
            state = self._score_repo.get(query.conversation_id)
            if state is None or state.pending_mode is None:
                return None

            dismissal = self._dismissal_repo.get(query.conversation_id)
        except Exception:
            logger.warning(
                "Suggestion lookup failed for conversation=%s",
                query.conversation_id,
                exc_info=True,
            )
            return None

        mode = state.pending_mode
        if mode in self._gate.active_dismissals(dismissal, self._clock()):
            return None
        if query.current_mode == mode.value:
            return None

        return ModeSuggestionResult(
            recommended_mode=mode.value,
            reason=state.pending_reason or "",
        )
