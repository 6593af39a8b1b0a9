"""
Document CRUD Gateway — Health Check Route
===========================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Reports whether a database handle is available, plus version and uptime.
Who:   Called by container health checks, load balancers, and monitoring.

The check never reads or writes documents: a probe every few seconds must not
generate billable Firestore operations.

Status levels:
    - healthy:   Database handle configured (HTTP 200)
    - degraded:  No database handle; CRUD routes will answer 500 (HTTP 200)
"""

import logging
import time

from fastapi import APIRouter, Request

from crud_api import __version__
from crud_api.schemas.document import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request) -> HealthResponse:
    db = getattr(request.app.state, "db", None)
    if db is None:
        logger.warning("Health check: no database handle configured")
        database, overall = "not_configured", "degraded"
    else:
        database, overall = "configured", "healthy"

    return HealthResponse(
        status=overall,
        version=__version__,
        database=database,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
