"""Record store interface — Read-only lookups against the restaurant database.

Search backends that only return restaurant identifiers use a record store
to fill in denormalized display fields. The store is an external
collaborator; EatSift never writes through it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from pydantic import BaseModel, Field


class RestaurantTags(BaseModel):
    """Cuisine and feature slugs attached to a restaurant."""

    cuisines: list[str] = Field(default_factory=list)
    features: list[str] = Field(default_factory=list)


class RecordStore(ABC):
    """Read-only access to restaurant display rows."""

    @abstractmethod
    async def restaurant_tags(self, restaurant_ids: Iterable[str]) -> dict[str, RestaurantTags]:
        """Return tags for the given restaurants.

        Identifiers without a matching row are absent from the result.

        Raises:
            SearchUnavailableError: If the store cannot be reached.
        """
