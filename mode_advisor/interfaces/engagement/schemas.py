"""
Pydantic schemas for engagement API request/response validation.

These schemas enforce input validation and define the API contract.
No business logic belongs here.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

CONVERSATION_ID_PATTERN = r"^[A-Za-z0-9_\-:.]+$"
CONVERSATION_ID_MAX_LEN = 128
MESSAGE_MAX_LEN = 20_000


class ModeName(str, Enum):
    """Interface mode as exposed on the wire."""

    QUICK = "quick"
    HYBRID = "hybrid"
    DENSE = "dense"


class RoleName(str, Enum):
    """Message author role as exposed on the wire."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class IngestMessageRequest(BaseModel):
    """Request schema for the message-ingestion hook.

    Attributes:
        role: Author role of the persisted message.
        text: Message text; may be empty.
        created_at: When the transport persisted the message.
    """

    role: RoleName
    text: str = Field(default="", max_length=MESSAGE_MAX_LEN)
    created_at: datetime


class SuggestionItem(BaseModel):
    """A surfaced mode suggestion."""

    recommended_mode: ModeName
    reason: str


class IngestMessageResponse(BaseModel):
    """Response schema for the message-ingestion hook."""

    conversation_id: str
    folded: bool
    suggestion: SuggestionItem | None = None
    warnings: list[str] = Field(default_factory=list)


class ModeSuggestionResponse(BaseModel):
    """Response schema for the polled suggestion endpoint."""

    should_show: bool
    recommended_mode: ModeName | None = None
    reason: str | None = None


class DismissSuggestionRequest(BaseModel):
    """Request schema for dismissing a suggestion.

    Attributes:
        mode: Mode being rejected; defaults to the pending suggestion.
    """

    mode: ModeName | None = None


class DismissSuggestionResponse(BaseModel):
    """Response schema for a dismissal."""

    conversation_id: str
    dismissed_mode: ModeName
    cooldown_until: datetime


class ConversationContextResponse(BaseModel):
    """Response schema for a conversation's behavioral profile."""

    conversation_id: str
    hurried_score: float = Field(..., ge=0, le=100)
    analytical_score: float = Field(..., ge=0, le=100)
    conversational_score: float = Field(..., ge=0, le=100)
    message_count: int = Field(..., ge=0)
    avg_response_time_seconds: int | None = None
    last_recommended_mode: ModeName | None = None
    pending_mode: ModeName | None = None


class HealthResponse(BaseModel):
    """Response schema for health check endpoint."""

    status: str
    version: str


class ErrorResponse(BaseModel):
    """Standard error response returned by all error handlers."""

    error: str
    detail: str | None = None
