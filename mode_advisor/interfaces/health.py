"""
Health check router.

Provides a simple health endpoint for liveness/readiness probes.
Reports whether the engagement database answers, without failing
the probe when it does not.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from mode_advisor.core.config import settings
from mode_advisor.interfaces.engagement.dependencies import get_engine
from mode_advisor.interfaces.engagement.schemas import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns application health status and version.",
)
def health_check(engine: Engine = Depends(get_engine)) -> HealthResponse:
    """Return current application health status."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.warning("Engagement database unreachable", exc_info=True)
        return HealthResponse(status="degraded", version=settings.version)
    return HealthResponse(status="ok", version=settings.version)
