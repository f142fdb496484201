"""Search controller — Keystroke and submit handling for an interactive search box.

Suggestions are debounced (200 ms by default) and both suggestion and search
responses are guarded by a ``RequestSequencer``: a response that arrives after
a newer request was issued never overwrites the newer state.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from eatsift.client.client import AsyncEatSiftClient
from eatsift.core.sequencing import Outcome, RequestSequencer
from eatsift.core.suggestions import query_suggestion
from eatsift.models.response import UNAVAILABLE_MESSAGE, ErrorKind, SearchStatus

logger = logging.getLogger(__name__)

SUGGESTION_DEBOUNCE_SECONDS = 0.2


class SearchController:
    """State holder for one search box.

    Attributes:
        suggestions: Suggestion dicts currently shown, synthetic entry first.
        response: The last applied search response dict, if any.
    """

    def __init__(
        self,
        client: AsyncEatSiftClient,
        *,
        suggestion_delay: float = SUGGESTION_DEBOUNCE_SECONDS,
    ) -> None:
        self._client = client
        self._suggest_seq: RequestSequencer[list[dict[str, Any]]] = RequestSequencer(
            delay=suggestion_delay, name="suggestions"
        )
        self._search_seq: RequestSequencer[dict[str, Any]] = RequestSequencer(name="search")
        self.suggestions: list[dict[str, Any]] = []
        self.response: dict[str, Any] | None = None

    @property
    def results(self) -> list[dict[str, Any]]:
        return self.response.get("results", []) if self.response else []

    @property
    def status(self) -> str | None:
        return self.response.get("status") if self.response else None

    @property
    def message(self) -> str | None:
        return self.response.get("message") if self.response else None

    async def input_changed(self, text: str) -> Outcome[list[dict[str, Any]]]:
        """Handle a keystroke.

        Blank input clears the suggestions immediately and invalidates any
        pending request. If the suggestion call itself fails, the synthetic
        "search for this" entry is shown alone.
        """
        term = text.strip()
        if not term:
            token = self._suggest_seq.next_token()
            self.suggestions = []
            return Outcome(token=token, applied=True, value=[])

        async def request() -> list[dict[str, Any]]:
            try:
                body = await self._client.suggestions(term)
            except httpx.HTTPError as e:
                logger.warning("Suggestion request for %r failed: %s", term, e)
                return [query_suggestion(term).model_dump(mode="json")]
            return list(body.get("suggestions", []))

        return await self._suggest_seq.run(request, self._apply_suggestions)

    async def submit(
        self,
        text: str,
        *,
        city: str | None = None,
        cuisines: Sequence[str] | None = None,
        features: Sequence[str] | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> Outcome[dict[str, Any]]:
        """Run a full search, closing the suggestion list.

        A transport failure is shown as "temporarily unavailable", never as
        an empty result list.
        """
        self._suggest_seq.next_token()
        self.suggestions = []

        async def request() -> dict[str, Any]:
            try:
                return await self._client.search(
                    text,
                    city=city,
                    cuisines=cuisines,
                    features=features,
                    limit=limit,
                    offset=offset,
                )
            except httpx.HTTPError as e:
                logger.warning("Search request for %r failed: %s", text, e)
                return {
                    "status": SearchStatus.UNAVAILABLE.value,
                    "error": ErrorKind.BACKEND_UNAVAILABLE.value,
                    "message": UNAVAILABLE_MESSAGE,
                    "results": [],
                }

        return await self._search_seq.run(request, self._apply_response)

    def _apply_suggestions(self, suggestions: list[dict[str, Any]]) -> None:
        self.suggestions = suggestions

    def _apply_response(self, response: dict[str, Any]) -> None:
        self.response = response
