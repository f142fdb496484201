"""Shared test fixtures and configuration."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from eatsift.adapters.base.adapter import AdapterHealth, SearchAdapter
from eatsift.config.settings import EngineConfig, Settings
from eatsift.models.query import Query
from eatsift.models.result import SearchResult
from eatsift.models.suggestion import Suggestion


class StubAdapter(SearchAdapter):
    """In-memory adapter returning canned results (or raising a canned error)."""

    def __init__(
        self,
        results: list[SearchResult] | None = None,
        suggestions: list[Suggestion] | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self.results = results or []
        self.suggestions = suggestions or []
        self.error = error
        self.delay = delay
        self.queries: list[Query] = []
        self.prefixes: list[tuple[str, int]] = []
        self.shut_down = False

    @property
    def name(self) -> str:
        return "stub"

    async def initialize(self) -> None:
        pass

    async def shutdown(self) -> None:
        self.shut_down = True

    async def search(self, query: Query) -> list[SearchResult]:
        self.queries.append(query)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return [r.model_copy() for r in self.results]

    async def suggest(self, prefix: str, limit: int) -> list[Suggestion]:
        self.prefixes.append((prefix, limit))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.suggestions[:limit]

    async def health_check(self) -> AdapterHealth:
        return AdapterHealth(status="healthy", message="stub")


@pytest.fixture
def settings() -> Settings:
    """Create a test Settings instance with defaults."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        debug=True,
        observability={"log_level": "debug", "log_format": "console"},
    )


@pytest.fixture
def engine_config() -> EngineConfig:
    return EngineConfig(backend="stub", timeout_seconds=1.0, suggestion_timeout_seconds=1.0)


@pytest.fixture
def sample_results() -> list[SearchResult]:
    """Three restaurants in backend rank order."""
    return [
        SearchResult(
            restaurant_id="r1",
            slug="the-corner-cafe",
            name="The Corner Cafe",
            city="Harare",
            description="Great brunch spot, cosy atmosphere",
            rank=0.91,
            cuisines=["cafe", "breakfast"],
            features=["wifi"],
        ),
        SearchResult(
            restaurant_id="r2",
            slug="brunch-club",
            name="Brunch Club",
            city="Harare",
            description="Weekend favourite",
            rank=0.74,
            highlight="<mark>Brunch</mark> Club",
            highlight_source="name",
        ),
        SearchResult(
            restaurant_id="r3",
            slug="mama-africa",
            name="Mama Africa",
            city="Harare",
            description=None,
            rank=0.12,
            cuisines=["african"],
        ),
    ]


@pytest.fixture
def suggestion_rows() -> list[dict[str, Any]]:
    """Rows as stored in the ``search_suggestions`` table."""
    return [
        {
            "id": 11,
            "term": "Pizza Palace",
            "kind": "restaurant",
            "restaurant_id": "r9",
            "menu_item_id": None,
            "popularity_score": 42.0,
        },
        {
            "id": 12,
            "term": "Pizza Margherita",
            "kind": "dish",
            "restaurant_id": "r9",
            "menu_item_id": "m1",
            "popularity_score": 17.5,
        },
    ]


@pytest.fixture
def make_adapter() -> type[StubAdapter]:
    """Factory for in-memory adapters: ``make_adapter(results=..., error=...)``."""
    return StubAdapter
