"""API response models."""

from pydantic import BaseModel
from typing import Optional, Literal


class ValidationStatus(BaseModel):
    """Validation config loaded by the running service."""

    routes_configured: int
    input_filters_cached: list[str] = []


class HealthResponse(BaseModel):
    """System health check response."""

    status: Literal["healthy", "unhealthy"]
    version: str = "1.0.0"
    uptime_seconds: float
    validation: Optional[ValidationStatus] = None
