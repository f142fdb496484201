"""Suggestion engine — Prefix autocomplete with a synthetic "search for this" entry."""

from __future__ import annotations

import asyncio
import logging

from eatsift.adapters.base.adapter import SearchAdapter
from eatsift.adapters.base.exceptions import AdapterError
from eatsift.models.response import ErrorKind, SuggestionResponse, SuggestionStatus
from eatsift.models.suggestion import Suggestion, SuggestionKind

logger = logging.getLogger(__name__)

QUERY_SUGGESTION_ID = "query"
MAX_BACKEND_SUGGESTIONS = 8


def query_suggestion(term: str) -> Suggestion:
    """The synthetic suggestion that runs a full search for ``term`` verbatim."""
    return Suggestion(id=QUERY_SUGGESTION_ID, term=term, kind=SuggestionKind.QUERY)


def merge_suggestions(term: str, backend: list[Suggestion], limit: int = MAX_BACKEND_SUGGESTIONS) -> list[Suggestion]:
    """Put the synthetic suggestion first, then up to ``limit`` unique backend terms.

    Terms are compared case-insensitively, against the synthetic term and
    against each other; the first occurrence wins. Backend entries of kind
    ``query`` are dropped so the synthetic one stays the only query entry.
    """
    merged = [query_suggestion(term)]
    seen = {term.casefold()}
    for suggestion in backend:
        if len(merged) > limit:
            break
        if suggestion.kind == SuggestionKind.QUERY:
            continue
        key = suggestion.term.strip().casefold()
        if not key or key in seen:
            continue
        seen.add(key)
        merged.append(suggestion)
    return merged


class SuggestionEngine:
    """Autocomplete on top of a search adapter.

    Args:
        adapter: Backend providing prefix-ranked suggestions.
        limit: Maximum backend suggestions per request (the synthetic
            suggestion comes on top).
        timeout_seconds: Default upper bound on the backend call.
    """

    def __init__(
        self,
        adapter: SearchAdapter,
        limit: int = MAX_BACKEND_SUGGESTIONS,
        timeout_seconds: float = 2.0,
    ) -> None:
        self._adapter = adapter
        self._limit = limit
        self._timeout = timeout_seconds

    async def suggest(self, raw_text: str | None, *, timeout: float | None = None) -> SuggestionResponse:
        """Suggestions for what the user has typed so far.

        Whitespace-only input yields no suggestions at all. A failing or slow
        backend degrades to the synthetic suggestion alone.
        """
        term = raw_text.strip() if isinstance(raw_text, str) else ""
        if not term:
            return SuggestionResponse()

        try:
            backend = await asyncio.wait_for(
                self._adapter.suggest(term, self._limit),
                timeout=timeout if timeout is not None else self._timeout,
            )
        except (AdapterError, TimeoutError) as e:
            logger.warning("Suggestion backend '%s' failed for %r: %s", self._adapter.name, term, str(e) or "timeout")
            return SuggestionResponse(
                status=SuggestionStatus.DEGRADED,
                error=ErrorKind.PARTIAL_DEGRADATION,
                suggestions=[query_suggestion(term)],
            )

        return SuggestionResponse(suggestions=merge_suggestions(term, backend, self._limit))
