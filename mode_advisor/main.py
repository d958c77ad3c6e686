"""
Application entry point.

Creates the FastAPI application and wires together:
- Routers (one per bounded context)
- Error handlers (centralized domain-to-HTTP mapping)
- Security middleware (headers, rate limiting)
- Logging configuration
- Engagement schema bootstrap

No business logic belongs here.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError

from mode_advisor.core.config import settings
from mode_advisor.infrastructure.engagement.schema import create_schema
from mode_advisor.interfaces.engagement.dependencies import get_engine
from mode_advisor.interfaces.engagement.router import router as engagement_router
from mode_advisor.interfaces.health import router as health_router
from mode_advisor.shared.errors.handlers import register_error_handlers
from mode_advisor.shared.logging import configure_logging
from mode_advisor.shared.security.headers import SecurityHeadersMiddleware
from mode_advisor.shared.security.rate_limiting import limiter, rate_limit_exceeded_handler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: make sure the engagement tables exist."""
    try:
        create_schema(get_engine())
    except SQLAlchemyError:
        # Ingestion degrades to warnings until the database is back.
        logger.error("Engagement schema could not be created.", exc_info=True)
    yield
    get_engine().dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Registers routers, error handlers, and security middleware.
    This is the composition root of the application.

    Returns:
        A fully configured FastAPI application instance.
    """
    configure_logging(level=settings.log_level)

    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # --- Rate Limiting ---
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    # --- Security Middleware ---
    app.add_middleware(SecurityHeadersMiddleware)

    # --- Error Handlers ---
    register_error_handlers(app)

    # --- Routers ---
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(engagement_router, prefix="/api/v1")

    return app


app = create_app()
