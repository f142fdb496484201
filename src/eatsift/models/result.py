"""Search result models — One ranked restaurant per result."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class HighlightSource(str, Enum):
    """Which restaurant field a highlight snippet was taken from."""

    NAME = "name"
    DESCRIPTION = "description"
    CUISINES = "cuisines"
    FEATURES = "features"
    MENU_ITEM = "menu_item"

    @classmethod
    def parse(cls, value: object) -> HighlightSource | None:
        """Return the matching member, or None for unknown/empty values."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


class Highlight(BaseModel):
    """An HTML-safe snippet and the field it came from."""

    snippet: str = Field(description="Escaped HTML fragment; only <mark> tags are present")
    source: HighlightSource = Field(description="Field the snippet was extracted from")


class SearchResult(BaseModel):
    """A single restaurant returned by a search backend."""

    restaurant_id: str = Field(description="Restaurant identifier")
    slug: str = Field(description="URL slug of the restaurant page")
    name: str = Field(description="Restaurant display name")
    city: str | None = Field(default=None, description="City the restaurant is in")
    description: str | None = Field(default=None, description="Restaurant description")
    rank: float = Field(default=0.0, description="Backend relevance score (higher is better)")
    highlight: str | None = Field(
        default=None,
        description="Escaped HTML fragment showing why the result matched; only <mark> allowed",
    )
    highlight_source: HighlightSource | None = Field(default=None, description="Field the highlight came from")
    cuisines: list[str] = Field(default_factory=list, description="Cuisine slugs")
    features: list[str] = Field(default_factory=list, description="Feature slugs")
