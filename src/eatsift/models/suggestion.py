"""Autocomplete suggestion models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class SuggestionKind(str, Enum):
    RESTAURANT = "restaurant"
    DISH = "dish"
    AREA = "area"
    QUERY = "query"


class RestaurantRef(BaseModel):
    """Restaurant a suggestion points at."""

    restaurant_id: str = Field(description="Restaurant identifier")
    slug: str | None = Field(default=None, description="Restaurant slug, when the backend provides it")
    name: str | None = Field(default=None, description="Restaurant name, when the backend provides it")


class Suggestion(BaseModel):
    """A single autocomplete candidate."""

    id: str = Field(description="Suggestion identifier")
    term: str = Field(description="Text to place in the search box")
    kind: SuggestionKind = Field(description="What the term refers to")
    restaurant_ref: RestaurantRef | None = Field(default=None, description="Linked restaurant, if any")
    menu_item_id: str | None = Field(default=None, description="Linked menu item, if any")
    popularity_score: float = Field(default=0.0, description="Backend popularity used for ranking")
