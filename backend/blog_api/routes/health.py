"""
Blog API Backend — Health Check Route
=======================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Runs SELECT 1 against the bound database and reports uptime.
Who:   Called by container health checks, load balancers, and monitoring.

Status levels:
    - healthy:   Database reachable (HTTP 200)
    - unhealthy: Database unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Response
from sqlalchemy import text

from blog_api import __version__
from blog_api.database import get_engine
from blog_api.schemas.post import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(response: Response) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        response.status_code = 503
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
