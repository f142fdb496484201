"""Tests for the search orchestrator."""

from __future__ import annotations

import pytest

from eatsift.adapters.base.exceptions import SearchUnavailableError
from eatsift.cache.manager import CacheManager
from eatsift.config.settings import CacheSettings, EngineConfig
from eatsift.core.engine import EatSiftEngine
from eatsift.models.response import (
    NO_RESULTS_MESSAGE,
    UNAVAILABLE_MESSAGE,
    ErrorKind,
    SearchStatus,
    SuggestionStatus,
)
from eatsift.models.result import HighlightSource, SearchResult


class TestEngineSearch:
    async def test_results_keep_backend_order(self, make_adapter, engine_config, sample_results) -> None:
        engine = EatSiftEngine(engine_config, make_adapter(results=sample_results))
        resp = await engine.search("brunch", "Harare")
        assert resp.status == SearchStatus.COMPLETED
        assert resp.error is None
        assert [r.restaurant_id for r in resp.results] == ["r1", "r2", "r3"]
        assert resp.request_id.startswith("req_")

    async def test_missing_highlights_are_built(self, make_adapter, engine_config, sample_results) -> None:
        engine = EatSiftEngine(engine_config, make_adapter(results=sample_results))
        resp = await engine.search("brunch")
        first, second, third = resp.results
        assert first.highlight == "Great <mark>brunch</mark> spot, cosy atmosphere"
        assert first.highlight_source == HighlightSource.DESCRIPTION
        assert second.highlight == "<mark>Brunch</mark> Club"
        assert second.highlight_source == HighlightSource.NAME
        assert third.highlight is None

    async def test_backend_highlights_are_sanitized(self, make_adapter, engine_config) -> None:
        result = SearchResult(
            restaurant_id="r1",
            slug="x",
            name="X",
            highlight="<mark>pizza</mark> <script>alert(1)</script>",
            highlight_source=HighlightSource.DESCRIPTION,
        )
        engine = EatSiftEngine(engine_config, make_adapter(results=[result]))
        resp = await engine.search("pizza")
        assert resp.results[0].highlight == "<mark>pizza</mark> &lt;script&gt;alert(1)&lt;/script&gt;"

    async def test_adapter_receives_normalized_query(self, make_adapter, engine_config) -> None:
        adapter = make_adapter()
        engine = EatSiftEngine(engine_config, adapter)
        await engine.search("  sushi ", " Harare ", ["japanese", "japanese"], None, "abc", "-4")
        query = adapter.queries[0]
        assert query.text == "sushi"
        assert query.city == "Harare"
        assert query.cuisine_tags == ("japanese",)
        assert query.limit == 20
        assert query.offset == 0

    async def test_max_limit_from_config(self, make_adapter) -> None:
        adapter = make_adapter()
        engine = EatSiftEngine(EngineConfig(backend="stub", max_limit=50), adapter)
        resp = await engine.search("pizza", limit=500)
        assert resp.query.limit == 50

    async def test_no_results(self, make_adapter, engine_config) -> None:
        engine = EatSiftEngine(engine_config, make_adapter())
        resp = await engine.search("nothing matches")
        assert resp.status == SearchStatus.NO_RESULTS
        assert resp.message == NO_RESULTS_MESSAGE
        assert resp.results == []
        assert not resp.is_error

    async def test_backend_error_is_unavailable(self, make_adapter, engine_config, sample_results) -> None:
        adapter = make_adapter(results=sample_results, error=SearchUnavailableError("db down"))
        engine = EatSiftEngine(engine_config, adapter)
        resp = await engine.search("brunch")
        assert resp.status == SearchStatus.UNAVAILABLE
        assert resp.error == ErrorKind.BACKEND_UNAVAILABLE
        assert resp.message == UNAVAILABLE_MESSAGE
        assert resp.results == []
        assert resp.is_error

    async def test_timeout_is_unavailable_and_not_retried(self, make_adapter, engine_config, sample_results) -> None:
        adapter = make_adapter(results=sample_results, delay=0.5)
        engine = EatSiftEngine(engine_config, adapter)
        resp = await engine.search("brunch", timeout=0.01)
        assert resp.status == SearchStatus.UNAVAILABLE
        assert len(adapter.queries) == 1

    async def test_repeated_query_is_idempotent(self, make_adapter, engine_config, sample_results) -> None:
        engine = EatSiftEngine(engine_config, make_adapter(results=sample_results))
        first = await engine.search("brunch", cuisines=["cafe"])
        second = await engine.search("brunch", cuisines=["cafe"])
        assert [r.model_dump() for r in first.results] == [r.model_dump() for r in second.results]

    async def test_unexpected_errors_propagate(self, make_adapter, engine_config) -> None:
        engine = EatSiftEngine(engine_config, make_adapter(error=RuntimeError("bug")))
        with pytest.raises(RuntimeError):
            await engine.search("pizza")


class TestEngineCache:
    async def test_successful_pages_are_cached(self, make_adapter, engine_config, sample_results) -> None:
        adapter = make_adapter(results=sample_results)
        cache = CacheManager(CacheSettings(enabled=True))
        engine = EatSiftEngine(engine_config, adapter, cache)

        first = await engine.search("brunch", cuisines=["cafe", "breakfast"])
        second = await engine.search("brunch", cuisines=["breakfast", "cafe"])

        assert len(adapter.queries) == 1
        assert [r.model_dump() for r in second.results] == [r.model_dump() for r in first.results]

    async def test_failures_are_not_cached(self, make_adapter, engine_config) -> None:
        adapter = make_adapter(error=SearchUnavailableError("down"))
        engine = EatSiftEngine(engine_config, adapter, CacheManager(CacheSettings(enabled=True)))

        await engine.search("pizza")
        await engine.search("pizza")

        assert len(adapter.queries) == 2

    async def test_shutdown_leaves_adapter_open(self, make_adapter, engine_config) -> None:
        adapter = make_adapter()
        engine = EatSiftEngine(engine_config, adapter, CacheManager(CacheSettings(enabled=True)))
        await engine.shutdown()
        assert not adapter.shut_down


class TestEngineSuggest:
    async def test_delegates_to_suggestion_engine(self, make_adapter, engine_config) -> None:
        engine = EatSiftEngine(engine_config, make_adapter())
        resp = await engine.suggest("pizza")
        assert resp.status == SuggestionStatus.COMPLETED
        assert [s.term for s in resp.suggestions] == ["pizza"]

    async def test_suggestion_limit_from_config(self, make_adapter) -> None:
        adapter = make_adapter()
        engine = EatSiftEngine(EngineConfig(backend="stub", suggestion_limit=3), adapter)
        await engine.suggest("piz")
        assert adapter.prefixes == [("piz", 3)]
