"""
Port interfaces (ABCs) for the engagement bounded context.

Ports define the contracts that the domain requires from the outside world.
Infrastructure adapters implement these interfaces.
The domain layer never depends on concrete implementations.
"""

from abc import ABC, abstractmethod
from typing import Optional

from mode_advisor.domain.engagement.entities import (
    ConversationScoreState,
    DismissalState,
    MessageFeatureRecord,
)


class MetricsStore(ABC):
    """Append-only store of one feature record per folded message."""

    @abstractmethod
    def append(self, record: MessageFeatureRecord) -> None:
        """Persist a feature record. Records are never updated or deleted."""
        raise NotImplementedError

    @abstractmethod
    def list_for_conversation(self, conversation_id: str) -> list[MessageFeatureRecord]:
        """Return the conversation's records ordered by creation time ascending."""
        raise NotImplementedError


class ScoreStateRepository(ABC):
    """Port for reading and writing per-conversation score state."""

    @abstractmethod
    def get(self, conversation_id: str) -> Optional[ConversationScoreState]:
        """Return the score state, or None when the conversation is unknown.

        Raises:
            CorruptScoreStateError: If the stored row cannot be trusted.
        """
        raise NotImplementedError

    @abstractmethod
    def save(self, state: ConversationScoreState, expected_version: int) -> ConversationScoreState:
        """Insert or update a score state guarded by an optimistic version check.

        Args:
            state: The state to persist.
            expected_version: Version the caller read. 0 means "not stored yet".

        Returns:
            The stored state with its version bumped.

        Raises:
            ConcurrentScoreUpdateError: If the stored version moved on.
        """
        raise NotImplementedError


class DismissalRepository(ABC):
    """Port for the per-conversation dismissal state."""

    @abstractmethod
    def get(self, conversation_id: str) -> DismissalState:
        """Return the dismissal state; an empty one when nothing was dismissed."""
        raise NotImplementedError

    @abstractmethod
    def save(self, state: DismissalState) -> None:
        """Persist the dismissal state, replacing any previous one."""
        raise NotImplementedError
