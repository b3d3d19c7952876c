"""Health check endpoints — Service and adapter health monitoring."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from solrfeed import __version__
from solrfeed.adapters.base.adapter import AdapterHealth
from solrfeed.api.deps import get_service
from solrfeed.core.service import FeedService

router = APIRouter()


# ── Response models ──────────────────────────────────────────────────────


class HealthResponse(BaseModel):
    """Service health check response."""

    status: str = Field(description="Health status (e.g. 'healthy')")
    version: str = Field(description="solrfeed server version")
    service: str = Field(description="Service name ('solrfeed')")
    adapter: str = Field(description="Name of the active search adapter")
    failure_mode: str = Field(description="Record failure mode: strict or lenient")


class AdapterHealthResponse(BaseModel):
    """Per-adapter health check response."""

    adapters: dict[str, AdapterHealth] = Field(
        description="Map of adapter name to its health status",
    )


# ── Endpoints ────────────────────────────────────────────────────────────


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service Health Check",
    description="Returns overall service health, version, the active adapter and the record failure mode.",
)
async def health_check(
    service: FeedService = Depends(get_service),
) -> HealthResponse:
    """Basic health check endpoint."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        service="solrfeed",
        adapter=service.adapter.name,
        failure_mode=service.settings.mapping.failure_mode.value,
    )


@router.get(
    "/health/adapters",
    response_model=AdapterHealthResponse,
    summary="Adapter Health Check",
    description="Run a health check against the search backend and return its status and latency.",
)
async def adapter_health(
    service: FeedService = Depends(get_service),
) -> AdapterHealthResponse:
    """Check health of the search adapter."""
    health = await service.adapter.health_check()
    return AdapterHealthResponse(adapters={service.adapter.name: health})
