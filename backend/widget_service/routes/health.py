"""
Widget Service - Health Check Route
===================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Asks the active backend for its health and reports it with uptime.

Status levels:
    - healthy:   backend reachable (HTTP 200)
    - unhealthy: backend unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from widget_service import __version__
from widget_service.routes.widgets import get_widget_service
from widget_service.schemas.widget import HealthResponse
from widget_service.services.widget_base import WidgetService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Backend unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(service: WidgetService = Depends(get_widget_service)):
    """
    Report service and backend health.

    The in-memory backend is always available. The Cosmos backend reads the
    container properties, which needs a working endpoint, key, database and
    container.
    """
    backend_ok = await service.health_check()
    if not backend_ok:
        logger.warning("Health check: backend %s unavailable", service.name)

    body = HealthResponse(
        status="healthy" if backend_ok else "unhealthy",
        version=__version__,
        backend=service.name,
        backend_status="available" if backend_ok else "unavailable",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if not backend_ok:
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
