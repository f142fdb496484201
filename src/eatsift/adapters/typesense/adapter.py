"""Typesense adapter — Grouped full-text search against a managed index.

The collection holds one document per searchable piece of restaurant
content (the restaurant itself, its dishes, ...), each tagged with its
``restaurant_id``. A search matches ``name`` and ``content``, groups hits by
restaurant so at most one hit per restaurant survives, keeps only published
documents and asks Typesense for native ``<mark>`` highlighting.

The adapter talks to the REST API with ``httpx``; no Typesense SDK is needed.

Usage::

    adapter = TypesenseAdapter(
        host="https://search.example.com:443",
        api_key="xyz",
        collection="restaurant_content",
    )
    await adapter.initialize()
    results = await adapter.search(query)
"""

from __future__ import annotations

import logging
import time
from datetime import UTC, datetime
from typing import Any

import httpx

from eatsift.adapters.base.adapter import AdapterHealth, SearchAdapter
from eatsift.adapters.base.exceptions import ConfigurationError, ConnectionError, SearchUnavailableError
from eatsift.adapters.base.records import RecordStore
from eatsift.models.query import Query
from eatsift.models.result import HighlightSource, SearchResult
from eatsift.models.suggestion import RestaurantRef, Suggestion, SuggestionKind

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8108
QUERY_FIELDS = ("name", "content")
HIGHLIGHT_FIELDS = ("name", "content")
PUBLISHED_FILTER = "status:=PUBLISHED"
SUGGESTION_KINDS = (SuggestionKind.RESTAURANT, SuggestionKind.DISH)


def parse_host(raw_host: str) -> str:
    """Turn a ``TYPESENSE_HOST``-style value into a base URL.

    Accepts a bare host (``"localhost"``), ``host:port`` or a full URL.
    The protocol is https only when the value starts with ``https``; the
    port defaults to 8108.

    >>> parse_host("search.example.com")
    'http://search.example.com:8108'
    >>> parse_host("https://search.example.com:443")
    'https://search.example.com:443'
    """
    raw = (raw_host or "localhost").strip()
    protocol = "https" if raw.startswith("https") else "http"
    without_scheme = raw.split("://", 1)[1] if "://" in raw else raw
    host_part = without_scheme.split("/", 1)[0]
    host, _, port_str = host_part.partition(":")
    try:
        port = int(port_str) if port_str else DEFAULT_PORT
    except ValueError:
        port = DEFAULT_PORT
    return f"{protocol}://{host or 'localhost'}:{port}"


def quote_filter_value(value: str) -> str:
    """Backtick-quote a filter value so commas and spaces are taken literally."""
    return "`" + value.replace("`", "") + "`"


def build_filter(query: Query) -> str:
    """Compose the ``filter_by`` expression for a query.

    Predicates are ANDed. A filter with no values is omitted entirely rather
    than expressed as an always-true predicate.
    """
    clauses = [PUBLISHED_FILTER]
    if query.city:
        clauses.append(f"city:={quote_filter_value(query.city)}")
    cuisines = query.cuisine_filter()
    if cuisines:
        clauses.append(f"cuisines:=[{', '.join(quote_filter_value(c) for c in cuisines)}]")
    features = query.feature_filter()
    if features:
        clauses.append(f"features:=[{', '.join(quote_filter_value(f) for f in features)}]")
    return " && ".join(clauses)


class TypesenseAdapter(SearchAdapter):
    """Search adapter for Typesense.

    Args:
        host: Host name or URL (see ``parse_host``).
        api_key: Typesense API key. Required.
        collection: Content collection used for search.
        suggestion_collection: Collection used for autocomplete; defaults to
            ``collection``.
        connection_timeout_seconds: HTTP timeout in seconds.
        suggestion_sort_by: ``sort_by`` expression for suggestions.
        record_store: Optional store used to fill cuisines/features for hits
            whose documents do not carry them.
        transport: Optional httpx transport (used by tests).
        **kwargs: Extra keyword arguments stored for future use.
    """

    def __init__(
        self,
        host: str = "localhost",
        api_key: str | None = None,
        collection: str = "restaurant_content",
        suggestion_collection: str | None = None,
        connection_timeout_seconds: float = 5.0,
        suggestion_sort_by: str = "popularity_score:desc",
        record_store: RecordStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        **kwargs: Any,
    ) -> None:
        self._base_url = parse_host(host)
        self._api_key = api_key
        self._collection = collection
        self._suggestion_collection = suggestion_collection or collection
        self._timeout = connection_timeout_seconds
        self._suggestion_sort_by = suggestion_sort_by
        self._record_store = record_store
        self._transport = transport
        self._extra_kwargs = kwargs
        self._client: httpx.AsyncClient | None = None

    @property
    def name(self) -> str:
        return "typesense"

    async def initialize(self) -> None:
        """Create an ``httpx.AsyncClient`` and verify connection to Typesense."""
        if not self._api_key:
            raise ConfigurationError("Typesense API key is not configured.")

        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(self._timeout),
            headers={"X-TYPESENSE-API-KEY": self._api_key},
            transport=self._transport,
        )

        try:
            resp = await self._client.get("/health")
            resp.raise_for_status()
            if not resp.json().get("ok"):
                raise ConnectionError(f"Typesense not healthy: {resp.text}")
            logger.info(
                "Connected to Typesense at %s (collection: %s)",
                self._base_url,
                self._collection,
            )
        except (httpx.HTTPError, ValueError) as e:
            raise ConnectionError(f"Failed to connect to Typesense: {e}") from e

    async def shutdown(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    # ── Search ───────────────────────────────────────────────────────────

    def build_search_params(self, query: Query) -> dict[str, Any]:
        """Typesense search parameters for a normalized query."""
        return {
            "q": query.text or "*",
            "query_by": ",".join(QUERY_FIELDS),
            "group_by": "restaurant_id",
            "group_limit": 1,
            "highlight_fields": ",".join(HIGHLIGHT_FIELDS),
            "highlight_start_tag": "<mark>",
            "highlight_end_tag": "</mark>",
            "filter_by": build_filter(query),
            "limit": query.limit,
            "offset": query.offset,
        }

    async def search(self, query: Query) -> list[SearchResult]:
        """Execute a grouped search and map each group's best hit."""
        if not self._client:
            raise ConnectionError("Typesense client not initialized.")

        data = await self._get(
            f"/collections/{self._collection}/documents/search",
            self.build_search_params(query),
        )

        try:
            best_hits = [
                group["hits"][0]
                for group in data.get("grouped_hits") or []
                if group.get("hits")
            ]
            # Hits without a document carry no restaurant to show.
            best_hits = [hit for hit in best_hits if isinstance(hit.get("document"), dict)]
            results = [self.map_hit(hit) for hit in best_hits]
            missing = [
                result.restaurant_id
                for result, hit in zip(results, best_hits, strict=True)
                if not {"cuisines", "features"} & hit["document"].keys()
            ]
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            raise SearchUnavailableError(f"Typesense returned malformed hits: {e}") from e

        if missing and self._record_store is not None:
            await self._fill_tags(results, missing)

        return results

    def map_hit(self, hit: dict[str, Any]) -> SearchResult:
        """Map a Typesense hit to ``SearchResult``."""
        doc: dict[str, Any] = hit.get("document") or {}
        kind = doc.get("kind")

        highlight: str | None = None
        source: HighlightSource | None = None
        for entry in hit.get("highlights") or []:
            snippet = entry.get("snippet") or next(iter(entry.get("snippets") or []), None)
            if snippet:
                highlight = snippet
                source = self._highlight_source(entry.get("field", ""), doc)
                break

        description = doc.get("description")
        if description is None and kind == SuggestionKind.RESTAURANT.value:
            description = doc.get("content")

        return SearchResult(
            restaurant_id=str(doc.get("restaurant_id", "")),
            slug=doc.get("restaurant_slug") or doc.get("slug") or "",
            name=doc.get("restaurant_name") or doc.get("name") or "",
            city=doc.get("city"),
            description=description,
            rank=float(hit.get("text_match") or 0.0),
            highlight=highlight,
            highlight_source=source,
            cuisines=list(doc.get("cuisines") or []),
            features=list(doc.get("features") or []),
        )

    @staticmethod
    def _highlight_source(field: str, doc: dict[str, Any]) -> HighlightSource:
        if doc.get("kind") == SuggestionKind.DISH.value:
            return HighlightSource.MENU_ITEM
        if field == "name":
            return HighlightSource.NAME
        return HighlightSource.parse(doc.get("content_source")) or HighlightSource.DESCRIPTION

    async def _fill_tags(self, results: list[SearchResult], restaurant_ids: list[str]) -> None:
        assert self._record_store is not None
        try:
            tags = await self._record_store.restaurant_tags(restaurant_ids)
        except SearchUnavailableError:
            logger.warning("Tag lookup failed for %d restaurants; returning results without tags", len(restaurant_ids))
            return
        for result in results:
            found = tags.get(result.restaurant_id)
            if found is not None and not result.cuisines and not result.features:
                result.cuisines = list(found.cuisines)
                result.features = list(found.features)

    # ── Suggestions ──────────────────────────────────────────────────────

    async def suggest(self, prefix: str, limit: int) -> list[Suggestion]:
        """Prefix-match restaurant and dish names, most popular first."""
        if not self._client:
            raise ConnectionError("Typesense client not initialized.")

        kinds = ",".join(k.value for k in SUGGESTION_KINDS)
        params = {
            "q": prefix,
            "query_by": "name",
            "prefix": "true",
            "filter_by": f"{PUBLISHED_FILTER} && kind:=[{kinds}]",
            "sort_by": self._suggestion_sort_by,
            "per_page": limit,
            "highlight_fields": "none",
        }
        data = await self._get(f"/collections/{self._suggestion_collection}/documents/search", params)

        suggestions: list[Suggestion] = []
        try:
            for hit in data.get("hits") or []:
                suggestion = self._map_suggestion(hit.get("document") or {})
                if suggestion is not None:
                    suggestions.append(suggestion)
        except (ValueError, TypeError, AttributeError) as e:
            raise SearchUnavailableError(f"Typesense returned malformed suggestions: {e}") from e
        return suggestions[:limit]

    @staticmethod
    def _map_suggestion(doc: dict[str, Any]) -> Suggestion | None:
        try:
            kind = SuggestionKind(doc.get("kind"))
        except ValueError:
            return None

        restaurant_id = doc.get("restaurant_id")
        ref = None
        if restaurant_id:
            is_restaurant = kind == SuggestionKind.RESTAURANT
            ref = RestaurantRef(
                restaurant_id=str(restaurant_id),
                slug=doc.get("restaurant_slug") or (doc.get("slug") if is_restaurant else None),
                name=doc.get("restaurant_name") or (doc.get("name") if is_restaurant else None),
            )
        return Suggestion(
            id=str(doc.get("id", "")),
            term=str(doc.get("name", "")),
            kind=kind,
            restaurant_ref=ref,
            menu_item_id=doc.get("menu_item_id"),
            popularity_score=float(doc.get("popularity_score") or 0.0),
        )

    # ── Health ───────────────────────────────────────────────────────────

    async def health_check(self) -> AdapterHealth:
        """Check Typesense health."""
        if not self._client:
            return AdapterHealth(status="unhealthy", message="Client not initialized")

        try:
            start = time.monotonic()
            resp = await self._client.get("/health")
            latency_ms = int((time.monotonic() - start) * 1000)

            if resp.status_code == 200:
                ok = bool(resp.json().get("ok"))
                return AdapterHealth(
                    status="healthy" if ok else "degraded",
                    latency_ms=latency_ms,
                    last_check=datetime.now(UTC).isoformat(),
                    message=f"Collection: {self._collection}",
                )
            return AdapterHealth(
                status="degraded",
                latency_ms=latency_ms,
                last_check=datetime.now(UTC).isoformat(),
                message=f"Typesense returned HTTP {resp.status_code}",
            )
        except Exception as e:
            return AdapterHealth(status="unhealthy", message=str(e))

    # ── Helpers ──────────────────────────────────────────────────────────

    async def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        assert self._client is not None
        try:
            start = time.monotonic()
            resp = await self._client.get(path, params=params)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as e:
            raise SearchUnavailableError(f"Typesense query failed: {e}") from e
        except ValueError as e:
            raise SearchUnavailableError(f"Typesense returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise SearchUnavailableError(f"Typesense returned {type(data).__name__}, expected an object")
        logger.debug("Typesense %s answered in %d ms", path, int((time.monotonic() - start) * 1000))
        return data
