"""
Use case: Record that the user dismissed a mode suggestion.

Input: DismissSuggestionCommand (conversation_id, optional mode)
Output: DismissSuggestionResult
Side effects: Saves the dismissal state, clears the pending suggestion.
Failure cases: NothingToDismissError, ConcurrentScoreUpdateError.
"""

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from mode_advisor.application.engagement.conversation_locks import ConversationLockRegistry
from mode_advisor.application.engagement.dtos import (
    DismissSuggestionCommand,
    DismissSuggestionResult,
)
from mode_advisor.application.engagement.get_mode_suggestion import utc_now
from mode_advisor.domain.engagement.entities import InterfaceMode
from mode_advisor.domain.engagement.errors import NothingToDismissError
from mode_advisor.domain.engagement.ports import DismissalRepository, ScoreStateRepository
from mode_advisor.domain.engagement.suggestion_gate import SuggestionGate

logger = logging.getLogger(__name__)


class DismissSuggestionUseCase:
    """Orchestrates a dismissal and starts the suggestion cooldown."""

    def __init__(
        self,
        score_repo: ScoreStateRepository,
        dismissal_repo: DismissalRepository,
        gate: SuggestionGate,
        locks: ConversationLockRegistry,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._score_repo = score_repo
        self._dismissal_repo = dismissal_repo
        self._gate = gate
        self._locks = locks
        self._clock = clock

    def execute(self, command: DismissSuggestionCommand) -> DismissSuggestionResult:
        """Run the dismiss use case.

        Args:
            command: Conversation id and the mode being rejected. Without a
                mode, the pending suggestion is the one rejected.

        Returns:
            The rejected mode and when the cooldown ends.

        Raises:
            NothingToDismissError: If no mode is named and none is pending.
        """
        conversation_id = command.conversation_id
        now = self._clock()

        with self._locks.hold(conversation_id):
            state = self._score_repo.get(conversation_id)

            if command.mode is not None:
                mode = InterfaceMode(command.mode)
            elif state is not None and state.pending_mode is not None:
                mode = state.pending_mode
            else:
                raise NothingToDismissError(conversation_id)

            dismissal = self._gate.dismiss(
                self._dismissal_repo.get(conversation_id), mode, now
            )
            self._dismissal_repo.save(dismissal)

            if state is not None and state.pending_mode is not None:
                self._score_repo.save(
                    replace(state, pending_mode=None, pending_reason=None),
                    expected_version=state.version,
                )

        logger.info(
            "Suggestion dismissed: conversation=%s mode=%s",
            conversation_id,
            mode.value,
        )
        return DismissSuggestionResult(
            conversation_id=conversation_id,
            dismissed_mode=mode.value,
            cooldown_until=now + self._gate.cooldown,
        )
