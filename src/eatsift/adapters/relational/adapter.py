"""Relational ranking adapter — Full-text ranking delegated to a database function.

The restaurant database exposes a ranking function (``search_restaurants``
by default) through PostgREST, as Supabase does. The function owns the
ranking: it returns one row per restaurant, already ordered by descending
``rank``, optionally with a precomputed highlight. This adapter passes the
normalized query through and keeps the row order exactly as returned.

Autocomplete reads the ``search_suggestions`` table with a case-insensitive
prefix match on ``normalized_term``, ordered by popularity.

Usage::

    adapter = RelationalAdapter(
        base_url="https://project.supabase.co",
        api_key="service-role-key",
    )
    await adapter.initialize()
    results = await adapter.search(normalize("brunch", "Harare", [], [], 20, 0))
"""

from __future__ import annotations

import logging
import time
from datetime import UTC, datetime
from typing import Any

import httpx

from eatsift.adapters.base.adapter import AdapterHealth, SearchAdapter
from eatsift.adapters.base.exceptions import ConnectionError, SearchUnavailableError
from eatsift.models.query import Query
from eatsift.models.result import HighlightSource, SearchResult
from eatsift.models.suggestion import RestaurantRef, Suggestion, SuggestionKind

logger = logging.getLogger(__name__)

SUGGESTION_COLUMNS = "id,term,kind,restaurant_id,menu_item_id,popularity_score"


def postgrest_client(
    base_url: str,
    api_key: str | None,
    timeout: float,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Build an ``httpx.AsyncClient`` carrying PostgREST auth headers."""
    headers: dict[str, str] = {"Content-Type": "application/json", "Accept": "application/json"}
    if api_key:
        headers["apikey"] = api_key
        headers["Authorization"] = f"Bearer {api_key}"
    return httpx.AsyncClient(
        base_url=base_url.rstrip("/"),
        timeout=httpx.Timeout(timeout),
        headers=headers,
        transport=transport,
    )


def ilike_prefix(prefix: str) -> str:
    """PostgREST ``ilike`` operand matching values that start with ``prefix``."""
    escaped = prefix.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_").replace("*", "")
    return f"ilike.{escaped}*"


class RelationalAdapter(SearchAdapter):
    """Search adapter for a PostgREST-exposed ranking function.

    Args:
        base_url: PostgREST / Supabase project URL.
        api_key: API key sent as ``apikey`` and bearer token.
        function: Name of the ranking RPC function.
        suggestions_table: Table holding autocomplete terms.
        timeout: HTTP request timeout in seconds.
        transport: Optional httpx transport (used by tests).
        **kwargs: Extra keyword arguments stored for future use.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:54321",
        api_key: str | None = None,
        function: str = "search_restaurants",
        suggestions_table: str = "search_suggestions",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
        **kwargs: Any,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._function = function
        self._suggestions_table = suggestions_table
        self._timeout = timeout
        self._transport = transport
        self._extra_kwargs = kwargs
        self._client: httpx.AsyncClient | None = None

    @property
    def name(self) -> str:
        return "relational"

    async def initialize(self) -> None:
        """Create the HTTP client and verify that PostgREST answers."""
        self._client = postgrest_client(self._base_url, self._api_key, self._timeout, self._transport)

        try:
            resp = await self._client.get("/rest/v1/")
            resp.raise_for_status()
            logger.info(
                "Connected to PostgREST at %s (function: %s)",
                self._base_url,
                self._function,
            )
        except httpx.HTTPError as e:
            raise ConnectionError(f"Failed to connect to PostgREST: {e}") from e

    async def shutdown(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    # ── Search ───────────────────────────────────────────────────────────

    def build_rpc_payload(self, query: Query) -> dict[str, Any]:
        """Arguments for the ranking function.

        Empty tag lists are sent as ``null``: the function treats ``null`` as
        "unfiltered", whereas an empty array would filter everything out.
        """
        return {
            "q_input": query.text,
            "city_input": query.city,
            "cuisine_slugs_input": query.cuisine_filter(),
            "feature_slugs_input": query.feature_filter(),
            "limit_input": query.limit,
            "offset_input": query.offset,
        }

    async def search(self, query: Query) -> list[SearchResult]:
        """Call the ranking function and map its rows in the order returned."""
        if not self._client:
            raise ConnectionError("PostgREST client not initialized.")

        try:
            start = time.monotonic()
            resp = await self._client.post(
                f"/rest/v1/rpc/{self._function}",
                json=self.build_rpc_payload(query),
            )
            resp.raise_for_status()
            rows = resp.json()
        except httpx.HTTPError as e:
            raise SearchUnavailableError(f"{self._function} failed: {e}") from e
        except ValueError as e:
            raise SearchUnavailableError(f"{self._function} returned invalid JSON: {e}") from e

        if not isinstance(rows, list):
            raise SearchUnavailableError(f"{self._function} returned {type(rows).__name__}, expected a list")

        logger.debug(
            "%s returned %d rows in %d ms",
            self._function,
            len(rows),
            int((time.monotonic() - start) * 1000),
        )
        try:
            return [self.map_row(row) for row in rows]
        except (ValueError, TypeError, AttributeError) as e:
            raise SearchUnavailableError(f"{self._function} returned malformed rows: {e}") from e

    @staticmethod
    def map_row(row: dict[str, Any]) -> SearchResult:
        """Map one ranking-function row to ``SearchResult``."""
        highlight = row.get("highlight") or None
        return SearchResult(
            restaurant_id=str(row.get("restaurant_id", "")),
            slug=row.get("slug") or "",
            name=row.get("name") or "",
            city=row.get("city"),
            description=row.get("description"),
            rank=float(row.get("rank") or 0.0),
            highlight=highlight,
            highlight_source=HighlightSource.parse(row.get("highlight_source")) if highlight else None,
            cuisines=list(row.get("cuisines") or []),
            features=list(row.get("features") or []),
        )

    # ── Suggestions ──────────────────────────────────────────────────────

    async def suggest(self, prefix: str, limit: int) -> list[Suggestion]:
        """Prefix-match ``normalized_term`` and order by popularity."""
        if not self._client:
            raise ConnectionError("PostgREST client not initialized.")

        params = {
            "select": SUGGESTION_COLUMNS,
            "normalized_term": ilike_prefix(prefix),
            "order": "popularity_score.desc",
            "limit": str(limit),
        }
        try:
            resp = await self._client.get(f"/rest/v1/{self._suggestions_table}", params=params)
            resp.raise_for_status()
            rows = resp.json()
        except httpx.HTTPError as e:
            raise SearchUnavailableError(f"Suggestion lookup failed: {e}") from e
        except ValueError as e:
            raise SearchUnavailableError(f"Suggestion lookup returned invalid JSON: {e}") from e

        if not isinstance(rows, list):
            raise SearchUnavailableError(f"Suggestion lookup returned {type(rows).__name__}, expected a list")

        suggestions: list[Suggestion] = []
        for row in rows:
            suggestion = self._map_suggestion(row)
            if suggestion is not None:
                suggestions.append(suggestion)
        return suggestions[:limit]

    @staticmethod
    def _map_suggestion(row: dict[str, Any]) -> Suggestion | None:
        try:
            kind = SuggestionKind(row.get("kind"))
        except ValueError:
            logger.debug("Skipping suggestion with unknown kind: %r", row.get("kind"))
            return None

        restaurant_id = row.get("restaurant_id")
        menu_item_id = row.get("menu_item_id")
        return Suggestion(
            id=str(row.get("id", "")),
            term=str(row.get("term", "")),
            kind=kind,
            restaurant_ref=RestaurantRef(restaurant_id=str(restaurant_id)) if restaurant_id else None,
            menu_item_id=str(menu_item_id) if menu_item_id else None,
            popularity_score=float(row.get("popularity_score") or 0.0),
        )

    # ── Health ───────────────────────────────────────────────────────────

    async def health_check(self) -> AdapterHealth:
        """Check that PostgREST answers."""
        if not self._client:
            return AdapterHealth(status="unhealthy", message="Client not initialized")

        try:
            start = time.monotonic()
            resp = await self._client.get("/rest/v1/")
            latency_ms = int((time.monotonic() - start) * 1000)

            if resp.status_code == 200:
                return AdapterHealth(
                    status="healthy",
                    latency_ms=latency_ms,
                    last_check=datetime.now(UTC).isoformat(),
                    message=f"Function: {self._function}",
                )
            return AdapterHealth(
                status="degraded",
                latency_ms=latency_ms,
                last_check=datetime.now(UTC).isoformat(),
                message=f"PostgREST returned HTTP {resp.status_code}",
            )
        except Exception as e:
            return AdapterHealth(status="unhealthy", message=str(e))
