"""
Travel Planner Backend — Health Check Route
=============================================

What:  Health check endpoint for monitoring and load balancer probes.
Why:   Load balancers route away from instances that cannot serve requests.
How:   Runs `SELECT 1` against the database and pings the cache backend.
Who:   Called by Docker health checks, load balancers, and monitoring systems.

Status levels:
    - healthy:   database and cache reachable, live data served      (HTTP 200)
    - degraded:  serving fallback data, or cache unreachable         (HTTP 200)
    - unhealthy: database and cache both unreachable                  (HTTP 503)

The database check here only reports. It does not flip the connectivity
gate; the country service keeps the mode chosen at startup.
"""

import logging
import time

from fastapi import APIRouter, Request, Response
from sqlalchemy import text

from app import __version__
from app.schemas.country import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description=(
        "Returns the health status of the backend service and its dependencies, "
        "and whether country data is currently served live or from the fallback set."
    ),
)
async def health_check(request: Request, response: Response) -> HealthResponse:
    db_status = "connected"
    cache_status = "available"

    # ── Check Database ────────────────────────────────────────────────────
    try:
        from app.database import engine
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        logger.warning("Health check: database unreachable: %s", str(e))

    # ── Check Cache ───────────────────────────────────────────────────────
    service = getattr(request.app.state, "country_service", None)
    if service is None or not await service.cache.ping():
        cache_status = "unavailable"

    mode = "fallback" if service is None or service.using_fallback else "live"

    if db_status == "disconnected" and cache_status == "unavailable":
        overall = "unhealthy"
        response.status_code = 503
    elif db_status == "disconnected" or cache_status == "unavailable" or mode == "fallback":
        overall = "degraded"
    else:
        overall = "healthy"

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        cache=cache_status,
        mode=mode,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
