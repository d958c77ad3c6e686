"""
Domain-specific errors for the engagement bounded context.

All errors raised from the domain layer must be defined here.
These are mapped to HTTP responses at the interface layer.
No framework imports allowed.
"""


class EngagementDomainError(Exception):
    """Base error for all engagement domain errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class ConversationNotFoundError(EngagementDomainError):
    """Raised when no score state exists for a conversation."""

    def __init__(self, conversation_id: str) -> None:
        super().__init__(f"Conversation not found: {conversation_id}")
        self.conversation_id = conversation_id


class CorruptScoreStateError(EngagementDomainError):
    """Raised when a stored score state cannot be trusted."""

    def __init__(self, conversation_id: str, reason: str, stored_version: int = 0) -> None:
        super().__init__(
            f"Corrupt score state for conversation {conversation_id}: {reason}"
        )
        self.conversation_id = conversation_id
        self.reason = reason
        self.stored_version = stored_version


class OutOfOrderFoldError(EngagementDomainError):
    """Raised when a feature record is older than the last folded message."""

    def __init__(self, conversation_id: str) -> None:
        super().__init__(
            f"Feature record folded out of creation order for conversation {conversation_id}"
        )
        self.conversation_id = conversation_id


class ConcurrentScoreUpdateError(EngagementDomainError):
    """Raised when the score state changed between read and write."""

    def __init__(self, conversation_id: str, expected_version: int) -> None:
        super().__init__(
            f"Score state for conversation {conversation_id} is no longer "
            f"at version {expected_version}"
        )
        self.conversation_id = conversation_id
        self.expected_version = expected_version


class NothingToDismissError(EngagementDomainError):
    """Raised when a dismiss call names no mode and nothing is pending."""

    def __init__(self, conversation_id: str) -> None:
        super().__init__(f"No suggestion to dismiss for conversation {conversation_id}")
        self.conversation_id = conversation_id
