"""
Data Transfer Objects for the engagement application layer.

DTOs carry data between the interface and application layers.
They are plain dataclasses with no behavior.
"""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class IngestMessageCommand:
    """Input DTO for the message-ingestion hook.

    Attributes:
        conversation_id: Conversation the message was persisted in.
        role: Author role (user/assistant/system).
        text: Message text as persisted by the chat transport.
        created_at: Creation time of the message.
    """

    conversation_id: str
    role: str
    text: str
    created_at: datetime


@dataclass(frozen=True)
class ModeSuggestionResult:
    """Output DTO for a surfaced mode suggestion.

    Attributes:
        recommended_mode: Suggested interface mode (quick/hybrid/dense).
        reason: Human-readable justification.
    """

    recommended_mode: str
    reason: str


@dataclass(frozen=True)
class IngestMessageResult:
    """Output DTO of the ingestion hook.

    Attributes:
        conversation_id: Conversation the message belongs to.
        folded: Whether the message was folded into the scores.
        suggestion: Suggestion surfaced by this message, if any.
        warnings: Non-fatal problems met while processing.
    """

    conversation_id: str
    folded: bool
    suggestion: ModeSuggestionResult | None = None
    warnings: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class GetModeSuggestionQuery:
    """Input DTO for polling the current suggestion.

    Attributes:
        conversation_id: Conversation to query.
        ready: Caller signals its mode context is initialized.
        current_mode: Mode the caller is currently displaying, if known.
    """

    conversation_id: str
    ready: bool = True
    current_mode: str | None = None


@dataclass(frozen=True)
class DismissSuggestionCommand:
    """Input DTO for dismissing a suggestion.

    Attributes:
        conversation_id: Conversation the suggestion was shown in.
        mode: Mode being rejected. Defaults to the pending suggestion.
    """

    conversation_id: str
    mode: str | None = None


@dataclass(frozen=True)
class DismissSuggestionResult:
    """Output DTO of a dismissal.

    Attributes:
        conversation_id: Conversation the dismissal applies to.
        dismissed_mode: Mode recorded as rejected.
        cooldown_until: No suggestion is surfaced before this time.
    """

    conversation_id: str
    dismissed_mode: str
    cooldown_until: datetime


@dataclass(frozen=True)
class GetConversationContextQuery:
    """Input DTO for reading a conversation's scores.

    Attributes:
        conversation_id: Conversation to read.
    """

    conversation_id: str


@dataclass(frozen=True)
class ConversationContextResult:
    """Output DTO describing a conversation's current behavioral profile.

    Attributes:
        conversation_id: Conversation identifier.
        hurried_score: Hurried axis score (0-100).
        analytical_score: Analytical axis score (0-100).
        conversational_score: Conversational axis score (0-100).
        message_count: Number of folded messages.
        avg_response_time_seconds: Mean response time over folded messages.
        last_recommended_mode: Last mode surfaced to the user.
        pending_mode: Suggestion currently waiting for the user, if any.
    """

    conversation_id: str
    hurried_score: float
    analytical_score: float
    conversational_score: float
    message_count: int
    avg_response_time_seconds: int | None
    last_recommended_mode: str | None
    pending_mode: str | None
