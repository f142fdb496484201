"""Rating aggregation — Count-weighted mean across independent review sources.

    R = Σ(rating_i × count_i) / Σ count_i

A source contributes only when its rating is known and its review count is
a positive integer. When nothing contributes the combined rating is None
("No ratings yet"), never zero.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from eatsift.models.rating import CombinedRating, RatingSource


def compute_combined_rating(sources: Mapping[str, RatingSource]) -> CombinedRating:
    """Combine per-source ratings.

    Args:
        sources: Ratings keyed by source name (e.g. ``google``,
            ``tripadvisor``, ``easyeats``).

    Returns:
        The combined rating, with the contributing count per source.
    """
    source_counts = {name: source.weight for name, source in sources.items()}
    total = sum(source_counts.values())
    if total == 0:
        return CombinedRating(combined_rating=None, total_count=0, source_counts=source_counts)

    weighted = sum(
        (source.rating or 0.0) * source_counts[name]
        for name, source in sources.items()
    )
    return CombinedRating(
        combined_rating=weighted / total,
        total_count=total,
        source_counts=source_counts,
    )


def first_party_source(review_ratings: Iterable[float]) -> RatingSource:
    """Rating source built from the site's own review scores."""
    ratings = list(review_ratings)
    if not ratings:
        return RatingSource(rating=None, count=0)
    return RatingSource(rating=sum(ratings) / len(ratings), count=len(ratings))
