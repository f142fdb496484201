"""Query model — The canonical, normalized form of a search request."""

from __future__ import annotations

import json

from pydantic import BaseModel, ConfigDict, Field


class Query(BaseModel):
    """A normalized search query.

    Instances are produced by ``eatsift.core.normalizer.normalize`` and are
    immutable. Tag tuples keep the caller's first-seen order; adapters read
    them through ``cuisine_filter()`` / ``feature_filter()``, which return a
    stably sorted list so identical filter sets always produce the same
    backend call.
    """

    model_config = ConfigDict(frozen=True)

    text: str = Field(default="", description="Trimmed free text; empty means match all")
    city: str | None = Field(default=None, description="Trimmed city filter, None when unfiltered")
    cuisine_tags: tuple[str, ...] = Field(default=(), description="Cuisine slugs, deduplicated")
    feature_tags: tuple[str, ...] = Field(default=(), description="Feature slugs, deduplicated")
    limit: int = Field(default=20, gt=0, description="Page size")
    offset: int = Field(default=0, ge=0, description="Page offset")

    def cuisine_filter(self) -> list[str] | None:
        """Sorted cuisine slugs, or None when no cuisine filter applies."""
        return sorted(self.cuisine_tags) if self.cuisine_tags else None

    def feature_filter(self) -> list[str] | None:
        """Sorted feature slugs, or None when no feature filter applies."""
        return sorted(self.feature_tags) if self.feature_tags else None

    def cache_key(self) -> str:
        """Deterministic key; tag order does not affect it."""
        payload = {
            "text": self.text,
            "city": self.city,
            "cuisines": self.cuisine_filter(),
            "features": self.feature_filter(),
            "limit": self.limit,
            "offset": self.offset,
        }
        return json.dumps(payload, sort_keys=True, ensure_ascii=False)
