"""
iShop Payments Backend — Health Check Route
=============================================

What:  Health check endpoint for monitoring and load balancer checks.
How:   Runs SELECT 1 against the database and reports whether the gateway
       client was built with credentials. It never calls the gateway.

Status levels:
    - healthy:   database reachable, gateway configured (HTTP 200)
    - degraded:  gateway credentials missing (HTTP 200)
    - unhealthy: database unreachable (HTTP 200, status field says so)
"""

import logging
import time

from fastapi import APIRouter
from sqlalchemy import text

from ishop import __version__
from ishop.config import settings
from ishop.database import engine
from ishop.schemas.payment import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    db_status = "connected"
    gateway_status = "configured"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    try:
        settings.validate_required_for_production()
    except ValueError:
        gateway_status = "unconfigured"
        overall = "degraded" if overall != "unhealthy" else overall

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        gateway=gateway_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
