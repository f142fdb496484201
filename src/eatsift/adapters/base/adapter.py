"""The contract between the search engine and a concrete restaurant index.

An adapter turns a normalized ``Query`` into backend calls and maps rows or
hits back to ``SearchResult`` objects, keeping the backend's rank order. It
also serves prefix suggestions and answers health probes.

Adapters never retry and never swallow backend failures: transport errors,
timeouts and backend-reported errors are raised as
``SearchUnavailableError`` and handled by the engine.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel, Field

from eatsift.models.query import Query
from eatsift.models.result import SearchResult
from eatsift.models.suggestion import Suggestion


class AdapterHealth(BaseModel):
    """Outcome of one backend probe."""

    status: str = Field(description="healthy, degraded or unhealthy")
    latency_ms: int = Field(default=0, description="Round trip of the probe")
    last_check: str | None = Field(default=None, description="When the probe ran (ISO 8601, UTC)")
    message: str | None = Field(default=None, description="Backend error or other diagnostic")


class SearchAdapter(ABC):
    """A search backend.

    Adapters hold only immutable configuration plus a connection pool and are
    safe for concurrent use by any number of requests.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique adapter name (e.g., 'relational', 'typesense')."""

    @abstractmethod
    async def initialize(self) -> None:
        """Open the HTTP pool and verify the backend configuration; called once at startup."""

    @abstractmethod
    async def shutdown(self) -> None:
        """Close the HTTP pool."""

    @abstractmethod
    async def search(self, query: Query) -> list[SearchResult]:
        """Execute a search against the backend.

        Args:
            query: The normalized query.

        Returns:
            Results in the order the backend ranked them.

        Raises:
            SearchUnavailableError: On any transport or backend failure.
        """

    @abstractmethod
    async def suggest(self, prefix: str, limit: int) -> list[Suggestion]:
        """Return up to ``limit`` suggestions whose term starts with ``prefix``.

        Args:
            prefix: Trimmed, non-empty user input.
            limit: Maximum number of suggestions.

        Returns:
            Suggestions ordered by descending popularity.

        Raises:
            SearchUnavailableError: On any transport or backend failure.
        """

    @abstractmethod
    async def health_check(self) -> AdapterHealth:
        """Probe the backend with a cheap request; must not raise."""
