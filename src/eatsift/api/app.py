"""FastAPI application factory and lifecycle management."""

from __future__ import annotations

import importlib
import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from eatsift import __version__
from eatsift.adapters.base.adapter import SearchAdapter
from eatsift.adapters.base.registry import AdapterRegistry
from eatsift.api.deps import set_engine
from eatsift.api.v1.router import router as v1_router
from eatsift.cache.manager import CacheManager
from eatsift.config.settings import Settings
from eatsift.core.engine import EatSiftEngine
from eatsift.observability.logging import setup_logging

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "eatsift-config.yaml"


def load_settings() -> Settings:
    """Load settings from ``$EATSIFT_CONFIG_FILE``, ``./eatsift-config.yaml`` or the environment."""
    configured = os.environ.get("EATSIFT_CONFIG_FILE")
    yaml_path = Path(configured) if configured else Path(DEFAULT_CONFIG_FILE)
    if configured or yaml_path.exists():
        logger.info("Loading configuration from %s", yaml_path)
        return Settings.from_yaml(yaml_path)
    return Settings()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings. If None, loads from the config file
            or environment.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = load_settings()

    setup_logging(settings.observability)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Manage application lifecycle (startup/shutdown)."""
        logger.info("Starting EatSift v%s with backend '%s'", __version__, settings.search.backend)

        registry = AdapterRegistry()
        record_store = _build_record_store(settings)
        try:
            adapter = await _initialize_backend(registry, settings, record_store)
        except Exception:
            if record_store is not None:
                await record_store.aclose()
            raise

        cache: CacheManager | None = None
        if settings.cache.enabled:
            cache = CacheManager(settings.cache)
            await cache.initialize()

        engine = EatSiftEngine(settings.engine_config(), adapter, cache)
        set_engine(engine, registry)

        app.state.settings = settings
        app.state.engine = engine

        logger.info("EatSift is ready to serve requests on port %d", settings.server.port)
        yield

        logger.info("Shutting down EatSift...")
        await engine.shutdown()
        await registry.shutdown_all()
        if record_store is not None:
            await record_store.aclose()
        set_engine(None)
        logger.info("EatSift shutdown complete")

    app = FastAPI(
        title="EatSift",
        description=(
            "Restaurant search and discovery service — full-text search with "
            "filters, highlights, autocomplete and combined ratings over a "
            "pluggable search backend."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(v1_router, prefix="/v1")

    return app


# ── Backend construction ──

# Maps backend names to (module_path, class_name) for lazy import
_ADAPTER_MAP: dict[str, tuple[str, str]] = {
    "relational": ("eatsift.adapters.relational.adapter", "RelationalAdapter"),
    "typesense": ("eatsift.adapters.typesense.adapter", "TypesenseAdapter"),
}


def adapter_kwargs(settings: Settings, record_store: Any = None) -> dict[str, Any]:
    """Constructor arguments for the configured backend."""
    if settings.search.backend == "relational":
        rel = settings.relational
        return {
            "base_url": rel.base_url,
            "api_key": rel.api_key,
            "function": rel.function,
            "suggestions_table": rel.suggestions_table,
            "timeout": rel.timeout,
        }

    ts = settings.typesense
    return {
        "host": ts.host,
        "api_key": ts.api_key,
        "collection": ts.collection,
        "suggestion_collection": ts.suggestion_collection,
        "connection_timeout_seconds": ts.connection_timeout_seconds,
        "record_store": record_store,
    }


def _build_record_store(settings: Settings) -> Any:
    """Relational record store backing the external index, if configured."""
    if settings.search.backend != "typesense" or not settings.typesense.use_record_store:
        return None

    from eatsift.adapters.relational.records import PostgrestRecordStore

    rel = settings.relational
    return PostgrestRecordStore(
        base_url=rel.base_url,
        api_key=rel.api_key,
        view=rel.tags_view,
        timeout=rel.timeout,
    )


async def _initialize_backend(
    registry: AdapterRegistry,
    settings: Settings,
    record_store: Any = None,
) -> SearchAdapter:
    """Register, construct and initialise the configured backend adapter.

    Initialisation failures propagate: the service does not start without
    a reachable, correctly configured backend.
    """
    name = settings.search.backend
    module_path, class_name = _ADAPTER_MAP[name]
    module = importlib.import_module(module_path)
    adapter_class = getattr(module, class_name)

    registry.register(name, adapter_class)
    adapter = await registry.initialize_adapter(name, **adapter_kwargs(settings, record_store))
    logger.info("Adapter '%s' registered and initialised", name)
    return adapter
