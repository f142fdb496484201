"""EatSift Engine — Search orchestrator.

The engine manages the request lifecycle of a search:
  1. Normalization: raw parameters → canonical ``Query``
  2. Retrieval: the configured adapter, bounded by a timeout
  3. Highlighting: sanitize backend snippets, build the missing ones
  4. Response Assembly: results in backend rank order plus an explicit status

and forwards keystrokes to the suggestion engine. Backend failures never
escape: they become ``status="unavailable"`` (search) or a degraded
suggestion list.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections.abc import Iterable

from eatsift.adapters.base.adapter import SearchAdapter
from eatsift.adapters.base.exceptions import AdapterError
from eatsift.cache.manager import CacheManager
from eatsift.config.settings import EngineConfig
from eatsift.core.highlight import build_highlight, highlight_candidates, sanitize_highlight
from eatsift.core.normalizer import normalize
from eatsift.core.suggestions import SuggestionEngine
from eatsift.models.query import Query
from eatsift.models.response import (
    NO_RESULTS_MESSAGE,
    UNAVAILABLE_MESSAGE,
    ErrorKind,
    SearchResponse,
    SearchStatus,
    SuggestionResponse,
)
from eatsift.models.result import SearchResult

logger = logging.getLogger(__name__)


class EatSiftEngine:
    """Search orchestrator.

    Pipeline:
      raw params → [Normalizer] → Query
                 → [Adapter]    → ranked SearchResult list
                 → [Highlighter] → sanitized / filled highlights
                 → SearchResponse

    The engine holds no mutable shared state besides the optional cache;
    any number of searches may run concurrently.

    Attributes:
        config: Immutable engine configuration.
        adapter: The active search backend.
        cache: Optional result cache.
        suggestions: Autocomplete engine bound to the same adapter.
    """

    def __init__(
        self,
        config: EngineConfig,
        adapter: SearchAdapter,
        cache: CacheManager | None = None,
    ) -> None:
        self.config = config
        self.adapter = adapter
        self.cache = cache
        self.suggestions = SuggestionEngine(
            adapter,
            limit=config.suggestion_limit,
            timeout_seconds=config.suggestion_timeout_seconds,
        )

    async def shutdown(self) -> None:
        """Release the cache connection.

        The adapter is owned by whoever created it (see ``AdapterRegistry``).
        """
        if self.cache:
            await self.cache.shutdown()
        logger.info("EatSift engine shut down")

    # ──────────────────────────────────────────────────────────────────────
    # Search
    # ──────────────────────────────────────────────────────────────────────

    def normalize(
        self,
        text: str | None,
        city: str | None = None,
        cuisines: str | Iterable[object] | None = None,
        features: str | Iterable[object] | None = None,
        limit: object = None,
        offset: object = None,
    ) -> Query:
        """Normalize raw parameters with the engine's page-size policy."""
        return normalize(
            text,
            city,
            cuisines,
            features,
            limit,
            offset,
            default_limit=self.config.default_limit,
            max_limit=self.config.max_limit,
        )

    async def search(
        self,
        text: str | None,
        city: str | None = None,
        cuisines: str | Iterable[object] | None = None,
        features: str | Iterable[object] | None = None,
        limit: object = None,
        offset: object = None,
        *,
        timeout: float | None = None,
    ) -> SearchResponse:
        """Normalize raw request values and run the search."""
        query = self.normalize(text, city, cuisines, features, limit, offset)
        return await self.execute(query, timeout=timeout)

    async def execute(self, query: Query, *, timeout: float | None = None) -> SearchResponse:
        """Run a normalized query against the active adapter.

        Args:
            query: The normalized query.
            timeout: Upper bound in seconds for the adapter call; defaults
                to ``config.timeout_seconds``. A timeout is handled like any
                other backend failure and is not retried.

        Returns:
            A SearchResponse. Never raises for backend failures.
        """
        start_time = time.monotonic()
        request_id = f"req_{uuid.uuid4().hex[:12]}"
        cache_key = f"search:{self.adapter.name}:{query.cache_key()}"

        results = await self._cached(cache_key)
        if results is None:
            try:
                raw = await asyncio.wait_for(
                    self.adapter.search(query),
                    timeout=timeout if timeout is not None else self.config.timeout_seconds,
                )
            except (AdapterError, TimeoutError) as e:
                processing_time_ms = int((time.monotonic() - start_time) * 1000)
                logger.warning(
                    "Search on '%s' unavailable after %d ms: %s",
                    self.adapter.name,
                    processing_time_ms,
                    str(e) or type(e).__name__,
                )
                return SearchResponse(
                    request_id=request_id,
                    status=SearchStatus.UNAVAILABLE,
                    error=ErrorKind.BACKEND_UNAVAILABLE,
                    message=UNAVAILABLE_MESSAGE,
                    query=query,
                    processing_time_ms=processing_time_ms,
                )

            results = [self._with_highlight(result, query.text) for result in raw]
            if self.cache:
                await self.cache.set(
                    cache_key,
                    [r.model_dump(mode="json") for r in results],
                    ttl=self.config.cache_ttl_seconds,
                )

        processing_time_ms = int((time.monotonic() - start_time) * 1000)
        logger.info(
            "Search %r on '%s': %d results in %d ms",
            query.text,
            self.adapter.name,
            len(results),
            processing_time_ms,
        )

        if not results:
            return SearchResponse(
                request_id=request_id,
                status=SearchStatus.NO_RESULTS,
                message=NO_RESULTS_MESSAGE,
                query=query,
                processing_time_ms=processing_time_ms,
            )

        return SearchResponse(
            request_id=request_id,
            status=SearchStatus.COMPLETED,
            query=query,
            results=results,
            processing_time_ms=processing_time_ms,
        )

    # ──────────────────────────────────────────────────────────────────────
    # Suggestions
    # ──────────────────────────────────────────────────────────────────────

    async def suggest(self, text: str | None, *, timeout: float | None = None) -> SuggestionResponse:
        """Autocomplete suggestions for the current input."""
        return await self.suggestions.suggest(text, timeout=timeout)

    # ──────────────────────────────────────────────────────────────────────
    # Internals
    # ──────────────────────────────────────────────────────────────────────

    async def _cached(self, key: str) -> list[SearchResult] | None:
        if not self.cache:
            return None
        cached = await self.cache.get(key)
        if cached is None:
            return None
        try:
            return [SearchResult.model_validate(item) for item in cached]
        except (ValueError, TypeError):
            logger.debug("Discarding malformed cache entry: %s", key, exc_info=True)
            return None

    @staticmethod
    def _with_highlight(result: SearchResult, text: str) -> SearchResult:
        """Return ``result`` with an HTML-safe highlight, building one if missing."""
        if result.highlight:
            return result.model_copy(update={"highlight": sanitize_highlight(result.highlight)})

        built = build_highlight(text, highlight_candidates(result))
        if built is None:
            return result
        return result.model_copy(update={"highlight": built.snippet, "highlight_source": built.source})
