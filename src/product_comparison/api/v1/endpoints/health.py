"""Liveness and readiness probes.

Readiness looks at the comparison service and its quota limiter; liveness
only proves the process answers.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from product_comparison.core.config import Settings, get_settings


router = APIRouter(tags=["health"])


def _app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


class HealthResponse(BaseModel):
    """Liveness body."""

    status: str = Field(..., examples=["healthy"])
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Time the probe was answered (UTC)",
    )
    version: str
    environment: str = Field(..., description="APP_ENV of the running process")


class ReadinessResponse(HealthResponse):
    """Readiness body with per-component state."""

    dependencies: dict[str, str] = Field(
        default_factory=dict,
        description="Status of internal components",
    )
    quota_available: int | None = Field(
        default=None,
        description="Provider permits left in the current window",
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness probe",
)
async def health_check(
    settings: Annotated[Settings, Depends(_app_settings)],
) -> HealthResponse:
    """Answer without inspecting any component."""
    return HealthResponse(
        status="healthy",
        version=settings.app.version,
        environment=settings.APP_ENV,
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
    description="Reports whether the comparison service and quota limiter are up.",
)
async def readiness_check(
    request: Request,
    settings: Annotated[Settings, Depends(_app_settings)],
) -> ReadinessResponse:
    """Report "ready" only when the service exists and its limiter runs.

    Reads ``app.state`` directly: a missing service is "degraded", not a 503.
    """
    service = getattr(request.app.state, "comparison_service", None)

    dependencies: dict[str, str] = {}
    quota_available: int | None = None
    if service is None:
        dependencies["comparison_service"] = "unavailable"
    else:
        dependencies["comparison_service"] = "healthy"
        quota = service.quota
        dependencies["quota_limiter"] = "healthy" if quota.running else "stopped"
        quota_available = quota.available

    all_healthy = all(state == "healthy" for state in dependencies.values())

    return ReadinessResponse(
        status="ready" if all_healthy else "degraded",
        version=settings.app.version,
        environment=settings.APP_ENV,
        dependencies=dependencies,
        quota_available=quota_available,
    )
