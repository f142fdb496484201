"""HTTP clients for the EatSift REST API.

``AsyncEatSiftClient`` is the real implementation; ``EatSiftClient`` drives it
from synchronous code. Responses come back as the JSON dicts the server sends.
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine, Mapping, Sequence
from typing import Any, TypeVar, cast

import httpx

_T = TypeVar("_T")

# ═══════════════════════════════════════════════════════════════════════════════
# Response shapes (plain JSON dicts)
# ═══════════════════════════════════════════════════════════════════════════════

SearchPage = dict[str, Any]
"""Search response dict (mirrors ``SearchResponse`` JSON)."""

SuggestionList = dict[str, Any]
"""Suggestion response dict (mirrors ``SuggestionResponse`` JSON)."""

RatingResult = dict[str, Any]
"""Combined rating dict (mirrors ``CombinedRating`` JSON)."""


def search_params(
    query: str,
    *,
    city: str | None = None,
    cuisines: Sequence[str] | None = None,
    features: Sequence[str] | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> dict[str, Any]:
    """Query-string parameters for ``GET /v1/search``.

    List values are sent as repeated keys (``cuisines=a&cuisines=b``).
    """
    params: dict[str, Any] = {"q": query}
    if city:
        params["city"] = city
    if cuisines:
        params["cuisines"] = list(cuisines)
    if features:
        params["features"] = list(features)
    if limit is not None:
        params["limit"] = limit
    if offset is not None:
        params["offset"] = offset
    return params


# ═══════════════════════════════════════════════════════════════════════════════
# Async client
# ═══════════════════════════════════════════════════════════════════════════════


class AsyncEatSiftClient:
    """Talks to a running EatSift server over HTTP.

    Extra keyword arguments go straight to :class:`httpx.AsyncClient`, which
    is how tests plug in a ``transport``.

    Example::

        async with AsyncEatSiftClient("http://localhost:8080") as sdk:
            page = await sdk.search("ramen", cuisines=["japanese"])
            for r in page["results"]:
                print(r["name"], r["highlight"])
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8080",
        *,
        timeout: float = 10.0,
        **httpx_kwargs: Any,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, **httpx_kwargs)

    async def __aenter__(self) -> AsyncEatSiftClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    @staticmethod
    def _json(resp: httpx.Response, *, tolerate: tuple[int, ...] = ()) -> dict[str, Any]:
        if resp.status_code not in tolerate:
            resp.raise_for_status()
        return cast(dict[str, Any], resp.json())

    # ── Health ──

    async def health(self) -> dict[str, Any]:
        """``GET /v1/health``: liveness plus the configured backend."""
        return self._json(await self._client.get("/v1/health"))

    async def adapter_health(self) -> dict[str, Any]:
        """``GET /v1/health/adapters``: probes the search backend."""
        return self._json(await self._client.get("/v1/health/adapters"))

    # ── Search ──

    async def search(
        self,
        query: str,
        *,
        city: str | None = None,
        cuisines: Sequence[str] | None = None,
        features: Sequence[str] | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> SearchPage:
        """Search restaurants.

        A 503 from the server is not raised: its body is a regular search
        response with ``status="unavailable"`` and is returned as such.

        Raises:
            httpx.HTTPStatusError: For any other non-2xx response.
        """
        params = search_params(
            query,
            city=city,
            cuisines=cuisines,
            features=features,
            limit=limit,
            offset=offset,
        )
        resp = await self._client.get("/v1/search", params=params)
        return self._json(resp, tolerate=(503,))

    async def suggestions(self, text: str) -> SuggestionList:
        """Autocomplete suggestions for the text typed so far."""
        return self._json(await self._client.get("/v1/search/suggestions", params={"q": text}))

    # ── Ratings ──

    async def combined_rating(
        self,
        sources: Mapping[str, Mapping[str, Any]],
        *,
        review_ratings: Sequence[float] | None = None,
    ) -> RatingResult:
        """Combine per-source ratings.

        Args:
            sources: ``{"google": {"rating": 4.5, "count": 100}, ...}``.
            review_ratings: Optional first-party review scores.
        """
        payload: dict[str, Any] = {"sources": {name: dict(src) for name, src in sources.items()}}
        if review_ratings is not None:
            payload["review_ratings"] = list(review_ratings)
        return self._json(await self._client.post("/v1/ratings/combined", json=payload))


# ═══════════════════════════════════════════════════════════════════════════════
# Sync client
# ═══════════════════════════════════════════════════════════════════════════════


class EatSiftClient:
    """Synchronous Python client for the EatSift API.

    Every call opens a short-lived :class:`AsyncEatSiftClient` and drives it
    to completion, so the object is safe to share between threads.

    Example::

        client = EatSiftClient("http://localhost:8080")
        resp = client.search("pizza", city="Porto")
        print(resp["status"], len(resp["results"]))
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8080",
        *,
        timeout: float = 10.0,
        **httpx_kwargs: Any,
    ) -> None:
        self._base_url = base_url
        self._timeout = timeout
        self._httpx_kwargs = httpx_kwargs

    def health(self) -> dict[str, Any]:
        """Check server health."""
        return self._call("health")

    def adapter_health(self) -> dict[str, Any]:
        """Check adapter health."""
        return self._call("adapter_health")

    def search(self, query: str, **kwargs: Any) -> SearchPage:
        """Search restaurants. See :meth:`AsyncEatSiftClient.search`."""
        return self._call("search", query, **kwargs)

    def suggestions(self, text: str) -> SuggestionList:
        """Autocomplete suggestions."""
        return self._call("suggestions", text)

    def combined_rating(
        self,
        sources: Mapping[str, Mapping[str, Any]],
        *,
        review_ratings: Sequence[float] | None = None,
    ) -> RatingResult:
        """Combine per-source ratings."""
        return self._call("combined_rating", sources, review_ratings=review_ratings)

    def _call(self, method: str, *args: Any, **kwargs: Any) -> Any:
        async def _run() -> Any:
            async with AsyncEatSiftClient(self._base_url, timeout=self._timeout, **self._httpx_kwargs) as client:
                return await getattr(client, method)(*args, **kwargs)

        return _run_sync(_run())


def _run_sync(coro: Coroutine[Any, Any, _T]) -> _T:
    """Run ``coro`` to completion, off-thread when an event loop is already running."""
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    # Inside a running loop (e.g. Jupyter): asyncio.run would refuse.
    import concurrent.futures

    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(asyncio.run, coro).result()
