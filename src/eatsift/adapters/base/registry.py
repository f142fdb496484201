"""Adapter Registry — Backend name → adapter class, plus the live instances.

The application registers the class for the configured backend, asks the
registry to build and initialise it, and later shuts every live instance
down in one call. Nothing outside the registry needs to know which concrete
adapter is in use.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from eatsift.adapters.base.adapter import AdapterHealth, SearchAdapter

logger = logging.getLogger(__name__)


class AdapterNotFoundError(Exception):
    """Raised when a backend name has no registered class or live instance."""


class AdapterRegistry:
    """Registry of search backends.

    Example:
        >>> registry = AdapterRegistry()
        >>> registry.register("typesense", TypesenseAdapter)
        >>> adapter = await registry.initialize_adapter("typesense", host="localhost", api_key="...")
        >>> registry.get("typesense") is adapter
        True
    """

    def __init__(self) -> None:
        self._classes: dict[str, type[SearchAdapter]] = {}
        self._live: dict[str, SearchAdapter] = {}

    def register(self, name: str, adapter_class: type[SearchAdapter]) -> None:
        """Associate ``name`` with an adapter class, replacing any earlier one."""
        previous = self._classes.get(name)
        if previous is not None and previous is not adapter_class:
            logger.warning("Backend '%s' re-registered: %s replaces %s", name, adapter_class.__name__, previous.__name__)
        self._classes[name] = adapter_class

    async def initialize_adapter(self, name: str, **kwargs: Any) -> SearchAdapter:
        """Construct the adapter registered as ``name`` and initialise it.

        The instance is only tracked once ``initialize()`` succeeded;
        initialisation errors propagate to the caller.

        Raises:
            AdapterNotFoundError: If ``name`` was never registered.
        """
        adapter_class = self._classes.get(name)
        if adapter_class is None:
            raise AdapterNotFoundError(f"Unknown backend '{name}'. Registered: {sorted(self._classes)}")

        adapter = adapter_class(**kwargs)
        await adapter.initialize()
        self._live[name] = adapter
        return adapter

    def add_instance(self, adapter: SearchAdapter) -> None:
        """Track an adapter that was built and initialised elsewhere."""
        self._live[adapter.name] = adapter

    def get(self, name: str) -> SearchAdapter:
        """Return the live adapter for ``name``.

        Raises:
            AdapterNotFoundError: If no live instance exists.
        """
        try:
            return self._live[name]
        except KeyError:
            raise AdapterNotFoundError(f"Backend '{name}' is not initialized") from None

    async def health_check_all(self) -> dict[str, AdapterHealth]:
        """Health of every live adapter, checked concurrently.

        A health check that raises is reported as ``unhealthy``.
        """
        names = list(self._live)
        outcomes = await asyncio.gather(
            *(self._live[name].health_check() for name in names),
            return_exceptions=True,
        )
        report: dict[str, AdapterHealth] = {}
        for name, outcome in zip(names, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                report[name] = AdapterHealth(status="unhealthy", message=str(outcome) or type(outcome).__name__)
            else:
                report[name] = outcome
        return report

    async def shutdown_all(self) -> None:
        """Shut down every live adapter; one failing shutdown does not stop the rest."""
        while self._live:
            name, adapter = self._live.popitem()
            try:
                await adapter.shutdown()
                logger.info("Shut down adapter: %s", name)
            except Exception:
                logger.warning("Error shutting down adapter: %s", name, exc_info=True)

    @property
    def registered_adapters(self) -> list[str]:
        """Registered backend names."""
        return list(self._classes)

    @property
    def active_adapters(self) -> list[str]:
        """Names of live (initialised) adapters."""
        return list(self._live)
