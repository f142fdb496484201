"""Health endpoints — Liveness of the service and reachability of its backend."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from eatsift import __version__
from eatsift.adapters.base.adapter import AdapterHealth
from eatsift.adapters.base.registry import AdapterRegistry
from eatsift.api.deps import get_engine, get_registry
from eatsift.core.engine import EatSiftEngine

router = APIRouter()


# ── Response models ──────────────────────────────────────────────────────


class HealthResponse(BaseModel):
    """Service liveness and configuration summary."""

    status: str = Field(default="healthy", description="Always 'healthy' when the process answers")
    version: str = Field(default=__version__, description="EatSift server version")
    service: str = Field(default="eatsift", description="Service name")
    backend: str = Field(description="Configured search backend")
    active_adapters: list[str] = Field(description="Initialised adapter names")
    cache_backend: str | None = Field(default=None, description="Cache backend in use, None when caching is off")


class AdapterHealthResponse(BaseModel):
    """Result of probing every live adapter."""

    adapters: dict[str, AdapterHealth] = Field(description="Adapter name → health")


# ── Endpoints ────────────────────────────────────────────────────────────


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="System Health Check",
    description="Cheap liveness check; does not contact the search backend.",
)
async def health_check(
    engine: EatSiftEngine = Depends(get_engine),
    registry: AdapterRegistry = Depends(get_registry),
) -> HealthResponse:
    return HealthResponse(
        backend=engine.config.backend,
        active_adapters=registry.active_adapters,
        cache_backend=engine.cache.backend if engine.cache else None,
    )


@router.get(
    "/health/adapters",
    response_model=AdapterHealthResponse,
    summary="Adapter Health Check",
    description="Probe each live adapter's backend and report status, latency and a diagnostic message.",
)
async def adapter_health(
    registry: AdapterRegistry = Depends(get_registry),
) -> AdapterHealthResponse:
    return AdapterHealthResponse(adapters=await registry.health_check_all())
