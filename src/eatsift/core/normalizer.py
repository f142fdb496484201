"""Query normalizer — Turns raw request parameters into a canonical ``Query``.

``normalize`` is total: whatever the caller sends, it returns a valid query.
Malformed page parameters are silently replaced by defaults (logged at
DEBUG), never reported as errors.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable

from eatsift.models.query import Query

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20
DEFAULT_OFFSET = 0


def _parse_int(raw: object) -> int | None:
    """Parse an integer-like value; None when it is missing, malformed or non-finite."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if math.isfinite(raw) else None
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            pass
        try:
            value = float(text)
        except ValueError:
            return None
        return int(value) if math.isfinite(value) else None
    return None


def _clean_tags(raw: str | Iterable[object] | None) -> tuple[str, ...]:
    if raw is None:
        return ()
    if isinstance(raw, str):
        items: Iterable[object] = [raw]
    elif isinstance(raw, Iterable):
        items = raw
    else:
        return ()
    seen: dict[str, None] = {}
    for item in items:
        if not isinstance(item, str):
            continue
        tag = item.strip()
        if tag and tag not in seen:
            seen[tag] = None
    return tuple(seen)


def normalize(
    raw_text: str | None,
    raw_city: str | None = None,
    raw_cuisines: str | Iterable[object] | None = None,
    raw_features: str | Iterable[object] | None = None,
    raw_limit: object = None,
    raw_offset: object = None,
    *,
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int | None = None,
) -> Query:
    """Build a canonical ``Query`` from raw request values.

    Args:
        raw_text: Free text; trimmed, ``None`` becomes ``""``.
        raw_city: City filter; trimmed, empty becomes ``None``.
        raw_cuisines: Cuisine slugs (a single string or an iterable).
        raw_features: Feature slugs (a single string or an iterable).
        raw_limit: Page size; invalid or non-positive values fall back to
            ``default_limit``.
        raw_offset: Page offset; invalid values fall back to 0, negative
            values are clamped to 0.
        default_limit: Page size used when ``raw_limit`` is unusable.
        max_limit: Optional ceiling applied to the page size.

    Returns:
        A valid ``Query`` (``limit > 0``, ``offset >= 0``).
    """
    text = raw_text.strip() if isinstance(raw_text, str) else ""
    city = raw_city.strip() if isinstance(raw_city, str) else ""

    limit = _parse_int(raw_limit)
    if limit is None or limit <= 0:
        if raw_limit is not None:
            logger.debug("Invalid limit %r, using %d", raw_limit, default_limit)
        limit = default_limit if default_limit > 0 else DEFAULT_LIMIT
    if max_limit is not None and limit > max_limit:
        limit = max_limit

    offset = _parse_int(raw_offset)
    if offset is None:
        if raw_offset is not None:
            logger.debug("Invalid offset %r, using %d", raw_offset, DEFAULT_OFFSET)
        offset = DEFAULT_OFFSET
    elif offset < 0:
        offset = 0

    return Query(
        text=text,
        city=city or None,
        cuisine_tags=_clean_tags(raw_cuisines),
        feature_tags=_clean_tags(raw_features),
        limit=limit,
        offset=offset,
    )
