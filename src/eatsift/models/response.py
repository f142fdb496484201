"""Response models — What the engine and the HTTP API hand back to callers.

Backend failures never surface as exceptions. Instead every response carries
an explicit ``status`` and, when something went wrong, an ``error`` drawn
from ``ErrorKind``:

- ``completed`` / ``no_results``: the backend answered.
- ``unavailable``: the backend failed or timed out; ``results`` is empty.
- ``degraded`` (suggestions only): the backend failed, but the synthetic
  "search for what I typed" suggestion is still returned.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from eatsift.models.query import Query
from eatsift.models.result import SearchResult
from eatsift.models.suggestion import Suggestion

NO_RESULTS_MESSAGE = "No results found. Try adjusting your search or filters."
UNAVAILABLE_MESSAGE = "Search is temporarily unavailable. Please try again shortly."


class ErrorKind(str, Enum):
    """Error taxonomy shared by search and suggestion responses."""

    VALIDATION_DEGRADED = "validation_degraded"
    BACKEND_UNAVAILABLE = "backend_unavailable"
    PARTIAL_DEGRADATION = "partial_degradation"


class SearchStatus(str, Enum):
    COMPLETED = "completed"
    NO_RESULTS = "no_results"
    UNAVAILABLE = "unavailable"


class SuggestionStatus(str, Enum):
    COMPLETED = "completed"
    DEGRADED = "degraded"


class SearchResponse(BaseModel):
    """Ranked, paginated search results for one normalized query."""

    request_id: str = Field(description="Unique request identifier")
    status: SearchStatus = Field(default=SearchStatus.COMPLETED, description="Processing status")
    error: ErrorKind | None = Field(default=None, description="Error category when status is not completed")
    message: str | None = Field(default=None, description="User-facing status message")
    query: Query = Field(description="The normalized query that was executed")
    results: list[SearchResult] = Field(default_factory=list, description="Results in backend rank order")
    processing_time_ms: int = Field(default=0, description="Total processing time in ms")

    @property
    def is_error(self) -> bool:
        return self.status == SearchStatus.UNAVAILABLE


class SuggestionResponse(BaseModel):
    """Autocomplete suggestions for one keystroke."""

    status: SuggestionStatus = Field(default=SuggestionStatus.COMPLETED, description="Processing status")
    error: ErrorKind | None = Field(default=None, description="Set when the backend failed")
    suggestions: list[Suggestion] = Field(default_factory=list, description="Synthetic query first, then backend terms")
