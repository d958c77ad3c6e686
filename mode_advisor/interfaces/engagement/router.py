"""
FastAPI router for the engagement bounded context.

All routes delegate to use cases. No business logic here.
Input validation is handled by Pydantic schemas.
Error mapping is handled by centralized error handlers.
"""

from fastapi import APIRouter, Depends, Path, Query, Request

from mode_advisor.application.engagement.dismiss_suggestion import DismissSuggestionUseCase
from mode_advisor.application.engagement.dtos import (
    DismissSuggestionCommand,
    GetConversationContextQuery,
    GetModeSuggestionQuery,
    IngestMessageCommand,
)
from mode_advisor.application.engagement.get_conversation_context import (
    GetConversationContextUseCase,
)
from mode_advisor.application.engagement.get_mode_suggestion import GetModeSuggestionUseCase
from mode_advisor.application.engagement.ingest_message import IngestMessageUseCase
from mode_advisor.core.config import settings
from mode_advisor.interfaces.engagement.dependencies import (
    get_conversation_context_use_case,
    get_dismiss_suggestion_use_case,
    get_ingest_message_use_case,
    get_mode_suggestion_use_case,
)
from mode_advisor.interfaces.engagement.schemas import (
    CONVERSATION_ID_MAX_LEN,
    CONVERSATION_ID_PATTERN,
    ConversationContextResponse,
    DismissSuggestionRequest,
    DismissSuggestionResponse,
    ErrorResponse,
    IngestMessageRequest,
    IngestMessageResponse,
    ModeName,
    ModeSuggestionResponse,
    SuggestionItem,
)
from mode_advisor.shared.security.rate_limiting import limiter

router = APIRouter(prefix="/engagement", tags=["engagement"])

ConversationId = Path(
    ...,
    min_length=1,
    max_length=CONVERSATION_ID_MAX_LEN,
    pattern=CONVERSATION_ID_PATTERN,
    description="Chat conversation identifier",
)


@router.post(
    "/conversations/{conversation_id}/messages",
    response_model=IngestMessageResponse,
    responses={422: {"model": ErrorResponse}},
    summary="Ingest a persisted chat message",
    description=(
        "Called by the chat transport once a message is persisted. "
        "Never fails because of the recommendation engine."
    ),
)
@limiter.limit(settings.rate_limit_default)
def ingest_message(
    request: Request,
    payload: IngestMessageRequest,
    conversation_id: str = ConversationId,
    use_case: IngestMessageUseCase = Depends(get_ingest_message_use_case),
) -> IngestMessageResponse:
    """Run the recommendation pipeline for one message."""
    command = IngestMessageCommand(
        conversation_id=conversation_id,
        role=payload.role.value,
        text=payload.text,
        created_at=payload.created_at,
    )
    result = use_case.execute(command)
    return IngestMessageResponse(
        conversation_id=result.conversation_id,
        folded=result.folded,
        suggestion=(
            SuggestionItem(
                recommended_mode=ModeName(result.suggestion.recommended_mode),
                reason=result.suggestion.reason,
            )
            if result.suggestion
            else None
        ),
        warnings=list(result.warnings),
    )


@router.get(
    "/conversations/{conversation_id}/suggestion",
    response_model=ModeSuggestionResponse,
    responses={422: {"model": ErrorResponse}},
    summary="Poll the current mode suggestion",
    description="Returns the suggestion waiting for the user, if any.",
)
@limiter.limit(settings.rate_limit_polling)
def get_mode_suggestion(
    request: Request,
    conversation_id: str = ConversationId,
    ready: bool = Query(True, description="Caller's mode context is initialized"),
    current_mode: ModeName | None = Query(None, description="Mode currently displayed"),
    use_case: GetModeSuggestionUseCase = Depends(get_mode_suggestion_use_case),
) -> ModeSuggestionResponse:
    """Return the gated suggestion for a conversation."""
    query = GetModeSuggestionQuery(
        conversation_id=conversation_id,
        ready=ready,
        current_mode=current_mode.value if current_mode else None,
    )
    result = use_case.execute(query)
    if result is None:
        return ModeSuggestionResponse(should_show=False)
    return ModeSuggestionResponse(
        should_show=True,
        recommended_mode=ModeName(result.recommended_mode),
        reason=result.reason,
    )


@router.post(
    "/conversations/{conversation_id}/suggestion/dismiss",
    response_model=DismissSuggestionResponse,
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    summary="Dismiss a mode suggestion",
    description="Records the rejection and starts the suggestion cooldown.",
)
def dismiss_suggestion(
    payload: DismissSuggestionRequest | None = None,
    conversation_id: str = ConversationId,
    use_case: DismissSuggestionUseCase = Depends(get_dismiss_suggestion_use_case),
) -> DismissSuggestionResponse:
    """Dismiss the pending (or named) suggestion."""
    mode = payload.mode if payload else None
    command = DismissSuggestionCommand(
        conversation_id=conversation_id,
        mode=mode.value if mode else None,
    )
    result = use_case.execute(command)
    return DismissSuggestionResponse(
        conversation_id=result.conversation_id,
        dismissed_mode=ModeName(result.dismissed_mode),
        cooldown_until=result.cooldown_until,
    )


@router.get(
    "/conversations/{conversation_id}/context",
    response_model=ConversationContextResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get conversation context",
    description="Scores, message count and average response time of a conversation.",
)
def get_conversation_context(
    conversation_id: str = ConversationId,
    use_case: GetConversationContextUseCase = Depends(get_conversation_context_use_case),
) -> ConversationContextResponse:
    """Return the behavioral profile of a conversation."""
    result = use_case.execute(GetConversationContextQuery(conversation_id=conversation_id))
    return ConversationContextResponse(
        conversation_id=result.conversation_id,
        hurried_score=result.hurried_score,
        analytical_score=result.analytical_score,
        conversational_score=result.conversational_score,
        message_count=result.message_count,
        avg_response_time_seconds=result.avg_response_time_seconds,
        last_recommended_mode=(
            ModeName(result.last_recommended_mode) if result.last_recommended_mode else None
        ),
        pending_mode=ModeName(result.pending_mode) if result.pending_mode else None,
    )
