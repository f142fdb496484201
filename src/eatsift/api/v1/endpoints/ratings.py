"""Ratings endpoint — Combined rating for a restaurant detail page."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter
from pydantic import BaseModel, Field

from eatsift.core.ratings import compute_combined_rating, first_party_source
from eatsift.models.rating import CombinedRating, RatingSource

router = APIRouter()

ReviewScore = Annotated[float, Field(ge=0, le=5)]


class CombinedRatingRequest(BaseModel):
    """Ratings to combine.

    ``sources`` carries third-party aggregates (e.g. ``google``,
    ``tripadvisor``). ``review_ratings`` optionally carries the site's own
    individual review scores, which are averaged into the
    ``first_party_source`` entry.
    """

    sources: dict[str, RatingSource] = Field(default_factory=dict, description="Per-source rating and count")
    review_ratings: list[ReviewScore] | None = Field(
        default=None, description="Individual first-party review scores (0-5)"
    )
    first_party_source: str = Field(default="easyeats", description="Source name for review_ratings")


@router.post(
    "/ratings/combined",
    response_model=CombinedRating,
    summary="Combined Rating",
    description=(
        "Count-weighted mean of several rating sources. Sources with an unknown "
        "rating or a non-positive count are ignored; if none remain, "
        "`combined_rating` is null and `display` reads \"No ratings yet\"."
    ),
)
async def combined_rating(request: CombinedRatingRequest) -> CombinedRating:
    """Combine ratings from several sources."""
    sources = dict(request.sources)
    if request.review_ratings is not None:
        sources[request.first_party_source] = first_party_source(request.review_ratings)
    return compute_combined_rating(sources)
