"""
Treble API — Health Check Route
================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Runs SELECT 1 against the database and reports uptime.
Who:   Called by container health checks, load balancers, and monitoring.

Status levels:
    - healthy:   Database reachable
    - unhealthy: Database unreachable (the API itself still answers;
                 pattern routes will fail with 500 until it recovers)
"""

import logging
import time

from fastapi import APIRouter, Request

from treble_api import __version__
from treble_api.schemas.pattern import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Probe the database and return aggregate status with uptime."""
    connected = await request.app.state.database.ping()

    return HealthResponse(
        status="healthy" if connected else "unhealthy",
        version=__version__,
        database="connected" if connected else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
