"""Search endpoints — Ranked restaurant search and autocomplete suggestions.

Both endpoints always answer with a well-formed body. When the backend is
down, ``GET /search`` responds 503 with ``status="unavailable"`` and an empty
result list, so clients can tell "no results" apart from "temporarily
unavailable"; ``GET /search/suggestions`` still returns the synthetic
suggestion with ``status="degraded"``.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from eatsift.api.deps import get_engine
from eatsift.core.engine import EatSiftEngine
from eatsift.models.response import SearchResponse, SearchStatus, SuggestionResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/search",
    response_model=SearchResponse,
    summary="Restaurant Search",
    description=(
        "Full-text restaurant search with city, cuisine and feature filters.\n\n"
        "Repeat `cuisines` / `features` to pass several slugs. Malformed `limit` / "
        "`offset` values fall back to their defaults instead of failing.\n\n"
        "| Status | HTTP | Meaning |\n"
        "|--------|------|---------|\n"
        "| `completed` | 200 | Results found |\n"
        "| `no_results` | 200 | Backend answered with no matches |\n"
        "| `unavailable` | 503 | Backend failed or timed out; `results` is empty |"
    ),
    responses={
        503: {"model": SearchResponse, "description": "Search backend unavailable"},
    },
)
async def search(
    response: Response,
    q: str = Query(default="", description="Free-text query"),
    city: str | None = Query(default=None, description="City filter"),
    cuisines: list[str] | None = Query(default=None, description="Cuisine slugs"),
    features: list[str] | None = Query(default=None, description="Feature slugs"),
    limit: str | None = Query(default=None, description="Page size (default 20)"),
    offset: str | None = Query(default=None, description="Page offset (default 0)"),
    engine: EatSiftEngine = Depends(get_engine),
) -> SearchResponse:
    """Execute a restaurant search."""
    try:
        result = await engine.search(q, city, cuisines, features, limit, offset)
    except Exception as e:
        logger.error("Search failed: %s", e, exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Search processing failed: {e!s}",
        ) from e

    if result.status == SearchStatus.UNAVAILABLE:
        response.status_code = 503
    return result


@router.get(
    "/search/suggestions",
    response_model=SuggestionResponse,
    summary="Autocomplete Suggestions",
    description=(
        "Prefix suggestions for the text typed so far. The first entry is always "
        "`kind=query` with the trimmed input; up to 8 backend suggestions follow, "
        "deduplicated case-insensitively. Blank input returns an empty list."
    ),
)
async def suggestions(
    q: str = Query(default="", description="Text typed so far"),
    engine: EatSiftEngine = Depends(get_engine),
) -> SuggestionResponse:
    """Return autocomplete suggestions."""
    return await engine.suggest(q)
