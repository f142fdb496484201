"""Tests for the highlight builder."""

from __future__ import annotations

from eatsift.core.highlight import (
    build_highlight,
    escape_html,
    highlight_candidates,
    sanitize_highlight,
)
from eatsift.models.result import Highlight, HighlightSource, SearchResult


def _result(**overrides: object) -> SearchResult:
    fields: dict[str, object] = {"restaurant_id": "r1", "slug": "r1", "name": "Somewhere"}
    fields.update(overrides)
    return SearchResult(**fields)  # type: ignore[arg-type]


def _build(text: str, result: SearchResult) -> Highlight | None:
    return build_highlight(text, highlight_candidates(result))


class TestBuildHighlight:
    def test_exact_snippet(self) -> None:
        h = _build("brunch", _result(description="Great brunch spot, cosy atmosphere"))
        assert h is not None
        assert h.snippet == "Great <mark>brunch</mark> spot, cosy atmosphere"
        assert h.source == HighlightSource.DESCRIPTION

    def test_description_wins_over_name(self) -> None:
        h = _build("brunch", _result(name="Brunch Club", description="Best brunch in town"))
        assert h is not None
        assert h.source == HighlightSource.DESCRIPTION
        assert h.snippet == "Best <mark>brunch</mark> in town"

    def test_falls_back_to_name_preserving_case(self) -> None:
        h = _build("brunch", _result(name="Brunch Club", description="Weekend favourite"))
        assert h is not None
        assert h.snippet == "<mark>Brunch</mark> Club"
        assert h.source == HighlightSource.NAME

    def test_falls_back_to_cuisines_then_features(self) -> None:
        cuisine = _build("african", _result(name="Mama Africa", cuisines=["african"]))
        assert cuisine is not None
        assert cuisine.snippet == "<mark>african</mark>"
        assert cuisine.source == HighlightSource.CUISINES

        feature = _build("outdoor", _result(cuisines=["cafe"], features=["wifi", "outdoor-seating"]))
        assert feature is not None
        assert feature.snippet == "wifi, <mark>outdoor</mark>-seating"
        assert feature.source == HighlightSource.FEATURES

    def test_script_tags_are_escaped(self) -> None:
        h = _build("pizza", _result(description="<script>alert(1)</script> pizza"))
        assert h is not None
        assert "<script>" not in h.snippet
        assert h.snippet == "&lt;script&gt;alert(1)&lt;/script&gt; <mark>pizza</mark>"

    def test_script_wrapped_match_is_escaped(self) -> None:
        h = _build("beef", _result(description="<script>beef</script>"))
        assert h is not None
        assert h.snippet == "&lt;script&gt;<mark>beef</mark>&lt;/script&gt;"
        assert "<script>" not in h.snippet
        assert h.source == HighlightSource.DESCRIPTION

    def test_matched_text_is_escaped_too(self) -> None:
        h = _build("<b>", _result(description="a <b> tag"))
        assert h is not None
        assert h.snippet == "a <mark>&lt;b&gt;</mark> tag"

    def test_apostrophe_escaped(self) -> None:
        h = _build("chicken", _result(description="Nando's chicken"))
        assert h is not None
        assert h.snippet == "Nando&#39;s <mark>chicken</mark>"

    def test_window_and_ellipsis(self) -> None:
        text = "x" * 40 + "pizza" + "y" * 40
        h = _build("pizza", _result(description=text))
        assert h is not None
        assert h.snippet == "..." + "x" * 32 + "<mark>pizza</mark>" + "y" * 32 + "..."

    def test_no_ellipsis_when_window_reaches_edges(self) -> None:
        h = _build("pizza", _result(description="x" * 32 + "pizza"))
        assert h is not None
        assert not h.snippet.startswith("...")
        assert not h.snippet.endswith("...")

    def test_empty_text_or_no_match(self) -> None:
        assert _build("", _result(description="anything")) is None
        assert _build("   ", _result(description="anything")) is None
        assert _build("sushi", _result(description="pizza place")) is None

    def test_deterministic(self) -> None:
        result = _result(description="Great brunch spot, cosy atmosphere")
        assert _build("brunch", result) == _build("brunch", result)

    def test_regex_metacharacters_are_literal(self) -> None:
        h = _build("(1)", _result(description="menu (1) page"))
        assert h is not None
        assert h.snippet == "menu <mark>(1)</mark> page"


class TestSanitizeHighlight:
    def test_keeps_marks_and_escapes_the_rest(self) -> None:
        assert (
            sanitize_highlight("<mark>Pizza</mark> & <b>pasta</b>")
            == "<mark>Pizza</mark> &amp; &lt;b&gt;pasta&lt;/b&gt;"
        )

    def test_closes_unbalanced_mark(self) -> None:
        assert sanitize_highlight("<mark>pizza") == "<mark>pizza</mark>"

    def test_escapes_stray_close(self) -> None:
        assert sanitize_highlight("pizza</mark>") == "pizza&lt;/mark&gt;"

    def test_escapes_nested_open(self) -> None:
        assert sanitize_highlight("<mark>a<mark>b</mark>") == "<mark>a&lt;mark&gt;b</mark>"

    def test_normalizes_tag_case(self) -> None:
        assert sanitize_highlight("<MARK>x</MARK>") == "<mark>x</mark>"


def test_escape_html() -> None:
    assert escape_html("""<a href="x">Tom & Jerry's</a>""") == (
        "&lt;a href=&quot;x&quot;&gt;Tom &amp; Jerry&#39;s&lt;/a&gt;"
    )
