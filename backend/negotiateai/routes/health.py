"""
NegotiateAI Backend - Health Check Route
=========================================

What:  GET /api/health for monitoring and load balancer health checks.
How:   Checks the database (critical) and the model gateway (non-critical)
       and returns an aggregate status.

Status levels:
    - healthy:   Database and gateway reachable
    - degraded:  Gateway unreachable; analyses still succeed with fallbacks
    - unhealthy: Database unreachable
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter
from sqlalchemy import text

from negotiateai import __version__
from negotiateai.config import settings
from negotiateai.database import engine
from negotiateai.schemas.common import HealthResponse
from negotiateai.services.gemini_service import gemini_gateway

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Returns the health status of the backend service and its dependencies.",
)
async def health_check() -> HealthResponse:
    """
    Check details:
        Database: SELECT 1
        Gateway:  list available models (no tokens spent)
    """
    db_status = "connected"
    gateway_status = "available"
    overall = "healthy"

    # ── Check Database ────────────────────────────────────────────────────
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    # ── Check Model Gateway ───────────────────────────────────────────────
    if not await gemini_gateway.health_check():
        gateway_status = "unavailable"
        if overall != "unhealthy":
            overall = "degraded"

    return HealthResponse(
        status=overall,
        version=__version__,
        environment=settings.environment,
        database=db_status,
        gateway=gateway_status,
        uptime_seconds=round(time.time() - _start_time, 2),
        timestamp=datetime.now(timezone.utc),
    )
