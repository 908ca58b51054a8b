"""Health check endpoint."""

import time
from fastapi import APIRouter, Request

from content_validation.models.responses import HealthResponse, ValidationStatus

router = APIRouter()

_start_time = time.time()


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Service health with validation config status."""
    listener = getattr(request.app.state, "listener", None)

    if listener is None:
        return HealthResponse(
            status="unhealthy",
            uptime_seconds=round(time.time() - _start_time, 2),
            validation=None,
        )

    return HealthResponse(
        status="healthy",
        uptime_seconds=round(time.time() - _start_time, 2),
        validation=ValidationStatus(
            routes_configured=len(listener.config),
            input_filters_cached=listener.registry.cached_names(),
        ),
    )
