"""
Centralized error handlers for FastAPI.

Maps engagement domain errors to HTTP responses.
No stack traces or internal details are exposed to clients.
All error responses use the ErrorResponse schema.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from mode_advisor.domain.engagement.errors import (
    ConcurrentScoreUpdateError,
    ConversationNotFoundError,
    EngagementDomainError,
    NothingToDismissError,
)

logger = logging.getLogger(__name__)

HTTP_404 = 404
HTTP_409 = 409
HTTP_500 = 500


def _error_response(status_code: int, error: str, detail: str | None = None) -> JSONResponse:
    """Build a consistent JSON error response."""
    body: dict[str, str | None] = {"error": error}
    if detail:
        body["detail"] = detail
    return JSONResponse(status_code=status_code, content=body)


def register_error_handlers(app: FastAPI) -> None:
    """Register all domain error handlers on the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """

    @app.exception_handler(ConversationNotFoundError)
    async def handle_conversation_not_found(
        _request: Request, exc: ConversationNotFoundError
    ) -> JSONResponse:
        logger.warning("Conversation not found: %s", exc.conversation_id)
        return _error_response(HTTP_404, "Conversation not found")

    @app.exception_handler(NothingToDismissError)
    async def handle_nothing_to_dismiss(
        _request: Request, exc: NothingToDismissError
    ) -> JSONResponse:
        logger.warning("Nothing to dismiss: %s", exc.conversation_id)
        return _error_response(HTTP_409, "No suggestion to dismiss")

    @app.exception_handler(ConcurrentScoreUpdateError)
    async def handle_concurrent_update(
        _request: Request, exc: ConcurrentScoreUpdateError
    ) -> JSONResponse:
        logger.warning("Concurrent score update: %s", exc.conversation_id)
        return _error_response(HTTP_409, "Conversation was updated concurrently", "Retry the request.")

    @app.exception_handler(EngagementDomainError)
    async def handle_engagement_domain(
        _request: Request, exc: EngagementDomainError
    ) -> JSONResponse:
        """Catch-all for unhandled engagement domain errors."""
        logger.error("Unhandled engagement domain error: %s", exc.message)
        return _error_response(HTTP_500, "Internal server error")

    @app.exception_handler(Exception)
    async def handle_unexpected(
        _request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all for unexpected errors. Never exposes internals."""
        logger.exception("Unexpected error: %s", type(exc).__name__)
        return _error_response(HTTP_500, "Internal server error")
