"""Tests for the adapter registry."""

from __future__ import annotations

import pytest

from eatsift.adapters.base.adapter import AdapterHealth
from eatsift.adapters.base.registry import AdapterNotFoundError, AdapterRegistry


class TestAdapterRegistry:
    async def test_initialize_tracks_instance(self, make_adapter) -> None:
        registry = AdapterRegistry()
        registry.register("stub", make_adapter)
        adapter = await registry.initialize_adapter("stub", delay=0.0)

        assert registry.get("stub") is adapter
        assert registry.registered_adapters == ["stub"]
        assert registry.active_adapters == ["stub"]

    async def test_unknown_backend(self) -> None:
        registry = AdapterRegistry()
        with pytest.raises(AdapterNotFoundError, match="Unknown backend"):
            await registry.initialize_adapter("elasticsearch")
        with pytest.raises(AdapterNotFoundError):
            registry.get("elasticsearch")

    async def test_health_check_all_reports_failures(self, make_adapter) -> None:
        class Broken(make_adapter):  # type: ignore[misc, valid-type]
            @property
            def name(self) -> str:
                return "broken"

            async def health_check(self) -> AdapterHealth:
                raise RuntimeError("no route to host")

        registry = AdapterRegistry()
        registry.add_instance(make_adapter())
        registry.add_instance(Broken())

        report = await registry.health_check_all()
        assert report["stub"].status == "healthy"
        assert report["broken"].status == "unhealthy"
        assert report["broken"].message == "no route to host"

    async def test_shutdown_all(self, make_adapter) -> None:
        registry = AdapterRegistry()
        adapter = make_adapter()
        registry.add_instance(adapter)

        await registry.shutdown_all()

        assert adapter.shut_down
        assert registry.active_adapters == []
