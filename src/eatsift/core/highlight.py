"""Highlight builder — Deterministic, HTML-safe "why did this match" snippets.

Highlights are rendered as raw HTML by the front end, so every snippet that
leaves this module contains only escaped text plus balanced
``<mark>…</mark>`` tags.

- ``build_highlight`` extracts a snippet when the backend did not attach one.
- ``sanitize_highlight`` re-escapes snippets produced by a backend, whose
  native highlighters do not escape the surrounding text.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from eatsift.models.result import Highlight, HighlightSource, SearchResult

WINDOW = 32
ELLIPSIS = "..."
MARK_OPEN = "<mark>"
MARK_CLOSE = "</mark>"

_ESCAPES = str.maketrans(
    {
        "&": "&amp;",
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#39;",
    }
)
_MARK_TOKEN = re.compile(r"(<mark>|</mark>)", re.IGNORECASE)


def escape_html(text: str) -> str:
    """Escape ``& < > " '`` for safe inclusion in HTML."""
    return text.translate(_ESCAPES)


def build_highlight(
    text: str,
    candidates: Sequence[tuple[str | None, HighlightSource]],
) -> Highlight | None:
    """Build a snippet from the first candidate field containing ``text``.

    Candidates are tried in order and the first case-insensitive substring
    match wins. The snippet shows up to 32 characters on either side of the
    match; ``"..."`` marks a window clipped away from the field's start or
    end.

    Args:
        text: The (trimmed) query text.
        candidates: ``(field_text, source)`` pairs in priority order. Empty
            or missing fields are skipped.

    Returns:
        The highlight, or None if ``text`` is empty or nothing matches.
    """
    needle = text.strip()
    if not needle:
        return None

    pattern = re.compile(re.escape(needle), re.IGNORECASE)
    for field_text, source in candidates:
        if not field_text:
            continue
        match = pattern.search(field_text)
        if match is None:
            continue

        match_start, match_end = match.span()
        start = max(0, match_start - WINDOW)
        end = min(len(field_text), match_end + WINDOW)

        before = escape_html(field_text[start:match_start])
        matched = escape_html(field_text[match_start:match_end])
        after = escape_html(field_text[match_end:end])

        prefix = ELLIPSIS if start > 0 else ""
        suffix = ELLIPSIS if end < len(field_text) else ""
        return Highlight(
            snippet=f"{prefix}{before}{MARK_OPEN}{matched}{MARK_CLOSE}{after}{suffix}",
            source=source,
        )
    return None


def highlight_candidates(result: SearchResult) -> list[tuple[str | None, HighlightSource]]:
    """Candidate fields of a result in priority order: description, name, cuisines, features."""
    candidates: list[tuple[str | None, HighlightSource]] = [
        (result.description, HighlightSource.DESCRIPTION),
        (result.name, HighlightSource.NAME),
    ]
    if result.cuisines:
        candidates.append((", ".join(result.cuisines), HighlightSource.CUISINES))
    if result.features:
        candidates.append((", ".join(result.features), HighlightSource.FEATURES))
    return candidates


def sanitize_highlight(fragment: str) -> str:
    """Escape everything in ``fragment`` except balanced ``<mark>`` tags.

    Stray closing tags are escaped as text and an unclosed ``<mark>`` is
    closed at the end.
    """
    out: list[str] = []
    open_mark = False
    for token in _MARK_TOKEN.split(fragment):
        if not token:
            continue
        lowered = token.lower()
        if lowered == MARK_OPEN and not open_mark:
            out.append(MARK_OPEN)
            open_mark = True
        elif lowered == MARK_CLOSE and open_mark:
            out.append(MARK_CLOSE)
            open_mark = False
        else:
            out.append(escape_html(token))
    if open_mark:
        out.append(MARK_CLOSE)
    return "".join(out)
