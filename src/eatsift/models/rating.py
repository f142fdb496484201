"""Rating models — Per-source ratings and their count-weighted combination."""

from __future__ import annotations

from pydantic import BaseModel, Field, computed_field

NO_RATINGS_LABEL = "No ratings yet"


class RatingSource(BaseModel):
    """Rating reported by one review source."""

    rating: float | None = Field(default=None, ge=0, le=5, description="Average rating 0-5, None if unknown")
    count: int | None = Field(default=None, description="Number of reviews, None if unknown")

    @property
    def weight(self) -> int:
        """Number of reviews this source contributes (0 if it does not contribute)."""
        if self.rating is None or self.count is None or self.count <= 0:
            return 0
        return self.count


class CombinedRating(BaseModel):
    """Count-weighted mean across rating sources."""

    combined_rating: float | None = Field(default=None, description="Weighted mean, None when nothing contributes")
    total_count: int = Field(default=0, description="Sum of contributing review counts")
    source_counts: dict[str, int] = Field(default_factory=dict, description="Contributing count per source")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def display(self) -> str:
        """Human-readable rating, e.g. ``"4.3"`` or ``"No ratings yet"``."""
        if self.combined_rating is None or self.total_count == 0:
            return NO_RATINGS_LABEL
        return f"{self.combined_rating:.1f}"
