"""Tests for the EatSift Python SDK client."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable

import httpx
import pytest

from eatsift.adapters.base.adapter import SearchAdapter
from eatsift.adapters.base.exceptions import SearchUnavailableError
from eatsift.api.app import create_app
from eatsift.api.deps import set_engine
from eatsift.client.client import AsyncEatSiftClient, EatSiftClient, search_params
from eatsift.config.settings import EngineConfig, Settings
from eatsift.core.engine import EatSiftEngine

SdkFactory = Callable[[SearchAdapter], AsyncEatSiftClient]


@pytest.fixture
async def sdk_for(settings: Settings, engine_config: EngineConfig) -> AsyncIterator[SdkFactory]:
    """Async SDK clients talking to the app in-process through ASGITransport."""
    clients: list[AsyncEatSiftClient] = []
    app = create_app(settings)

    def _sdk(adapter: SearchAdapter) -> AsyncEatSiftClient:
        set_engine(EatSiftEngine(engine_config, adapter))
        client = AsyncEatSiftClient("http://test", transport=httpx.ASGITransport(app=app))
        clients.append(client)
        return client

    yield _sdk
    for client in clients:
        await client.close()
    set_engine(None)


class TestSearchParams:
    def test_omits_unset_values(self) -> None:
        assert search_params("pizza") == {"q": "pizza"}

    def test_lists_and_pagination(self) -> None:
        params = search_params("pizza", city="Harare", cuisines=("thai",), limit=5, offset=0)
        assert params == {"q": "pizza", "city": "Harare", "cuisines": ["thai"], "limit": 5, "offset": 0}


class TestAsyncClient:
    async def test_health(self, sdk_for: SdkFactory, make_adapter) -> None:
        sdk = sdk_for(make_adapter())
        data = await sdk.health()
        assert data["service"] == "eatsift"
        assert (await sdk.adapter_health())["adapters"]["stub"]["status"] == "healthy"

    async def test_search(self, sdk_for: SdkFactory, make_adapter, sample_results) -> None:
        adapter = make_adapter(results=sample_results)
        sdk = sdk_for(adapter)
        data = await sdk.search("brunch", cuisines=["cafe", "breakfast"], limit=10)
        assert data["status"] == "completed"
        assert [r["slug"] for r in data["results"]] == ["the-corner-cafe", "brunch-club", "mama-africa"]
        assert adapter.queries[0].cuisine_tags == ("cafe", "breakfast")
        assert adapter.queries[0].limit == 10

    async def test_search_unavailable_returns_body(self, sdk_for: SdkFactory, make_adapter) -> None:
        sdk = sdk_for(make_adapter(error=SearchUnavailableError("down")))
        data = await sdk.search("pizza")
        assert data["status"] == "unavailable"
        assert data["results"] == []

    async def test_suggestions(self, sdk_for: SdkFactory, make_adapter) -> None:
        sdk = sdk_for(make_adapter())
        data = await sdk.suggestions("pizza")
        assert [s["term"] for s in data["suggestions"]] == ["pizza"]

    async def test_combined_rating(self, sdk_for: SdkFactory, make_adapter) -> None:
        sdk = sdk_for(make_adapter())
        data = await sdk.combined_rating(
            {"google": {"rating": 4.5, "count": 100}, "tripadvisor": {"rating": 3.0, "count": 50}}
        )
        assert data["display"] == "4.0"

    async def test_other_errors_raise(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(500, json={"detail": "boom"}))
        async with AsyncEatSiftClient("http://test", transport=transport) as sdk:
            with pytest.raises(httpx.HTTPStatusError):
                await sdk.search("pizza")


class TestSyncClient:
    def test_search_over_mock_transport(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"status": "no_results", "results": []})

        client = EatSiftClient("http://test", transport=httpx.MockTransport(handler))
        data = client.search("pizza", city="Harare", features=["wifi", "parking"])

        assert data["status"] == "no_results"
        assert seen[0].url.path == "/v1/search"
        assert seen[0].url.params.get_list("features") == ["wifi", "parking"]
        assert seen[0].url.params["city"] == "Harare"
