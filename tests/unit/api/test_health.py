"""Tests for the health check endpoints."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from eatsift.api.app import create_app
from eatsift.api.deps import set_engine
from eatsift.cache.manager import CacheManager
from eatsift.config.settings import CacheSettings, EngineConfig, Settings
from eatsift.core.engine import EatSiftEngine


@pytest.fixture
def client(settings: Settings, engine_config: EngineConfig, make_adapter) -> Iterator[TestClient]:
    """Create a test client for the API."""
    app = create_app(settings)
    engine = EatSiftEngine(engine_config, make_adapter(), CacheManager(CacheSettings(enabled=True)))
    set_engine(engine)
    yield TestClient(app)
    set_engine(None)


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_health_check(self, client: TestClient) -> None:
        response = client.get("/v1/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "eatsift"
        assert data["backend"] == "stub"
        assert data["active_adapters"] == ["stub"]
        assert data["cache_backend"] == "memory"
        assert "version" in data

    def test_adapter_health_check(self, client: TestClient) -> None:
        response = client.get("/v1/health/adapters")
        assert response.status_code == 200
        data = response.json()
        assert data["adapters"]["stub"]["status"] == "healthy"
