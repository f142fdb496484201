"""PostgREST record store — Cuisine/feature slugs for restaurants found elsewhere."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import httpx

from eatsift.adapters.base.exceptions import SearchUnavailableError
from eatsift.adapters.base.records import RecordStore, RestaurantTags
from eatsift.adapters.relational.adapter import postgrest_client

logger = logging.getLogger(__name__)


class PostgrestRecordStore(RecordStore):
    """Reads ``restaurant_id, cuisines, features`` rows from a PostgREST view.

    Args:
        base_url: PostgREST / Supabase project URL.
        api_key: API key sent as ``apikey`` and bearer token.
        view: View exposing one row per restaurant with slug arrays.
        timeout: HTTP request timeout in seconds.
        transport: Optional httpx transport (used by tests).
    """

    def __init__(
        self,
        base_url: str = "http://localhost:54321",
        api_key: str | None = None,
        view: str = "restaurant_search_tags",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._view = view
        self._client = postgrest_client(base_url, api_key, timeout, transport)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def restaurant_tags(self, restaurant_ids: Iterable[str]) -> dict[str, RestaurantTags]:
        ids = sorted({str(i) for i in restaurant_ids if i})
        if not ids:
            return {}

        quoted = ",".join(f'"{i}"' for i in ids)
        params = {
            "select": "restaurant_id,cuisines,features",
            "restaurant_id": f"in.({quoted})",
        }
        try:
            resp = await self._client.get(f"/rest/v1/{self._view}", params=params)
            resp.raise_for_status()
            rows: Any = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise SearchUnavailableError(f"Tag lookup failed: {e}") from e

        if not isinstance(rows, list):
            raise SearchUnavailableError(f"Tag lookup returned {type(rows).__name__}, expected a list")
        try:
            return {
                str(row["restaurant_id"]): RestaurantTags(
                    cuisines=list(row.get("cuisines") or []),
                    features=list(row.get("features") or []),
                )
                for row in rows
                if row.get("restaurant_id") is not None
            }
        except (TypeError, AttributeError, ValueError) as e:
            raise SearchUnavailableError(f"Tag lookup returned malformed rows: {e}") from e
