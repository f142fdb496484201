"""API dependencies — Dependency injection for FastAPI endpoints."""

from __future__ import annotations

from eatsift.adapters.base.registry import AdapterRegistry
from eatsift.core.engine import EatSiftEngine

# Set during application lifespan (or by tests)
_engine: EatSiftEngine | None = None
_registry: AdapterRegistry | None = None


def set_engine(engine: EatSiftEngine | None, registry: AdapterRegistry | None = None) -> None:
    """Set the engine (and the registry owning its adapter) used by the endpoints.

    When no registry is given, one tracking only the engine's adapter is
    created so health endpoints keep working.
    """
    global _engine, _registry
    _engine = engine
    if engine is not None and registry is None:
        registry = AdapterRegistry()
        registry.add_instance(engine.adapter)
    _registry = registry


def get_engine() -> EatSiftEngine:
    """Get the EatSift engine instance.

    Raises:
        RuntimeError: If the engine is not initialized.
    """
    if _engine is None:
        raise RuntimeError("EatSift engine not initialized. Is the server running?")
    return _engine


def get_registry() -> AdapterRegistry:
    """Get the adapter registry.

    Raises:
        RuntimeError: If the engine is not initialized.
    """
    if _registry is None:
        raise RuntimeError("EatSift engine not initialized. Is the server running?")
    return _registry
