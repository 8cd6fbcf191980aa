"""
Tests for per-page grouping and highlight validation.

Run with: pytest tests/test_highlights.py -v
"""
import pytest

from conftest import FAKE_IMAGE, FakeBackend
from flet_pdf_highlighter.errors import ConsistencyError
from flet_pdf_highlighter.highlights import (
    group_by_page,
    pages_touched,
    to_viewport_highlight,
    validate_highlight,
    viewport_highlights_for_page,
)
from flet_pdf_highlighter.types import (
    Comment,
    Content,
    Highlight,
    HighlightType,
    Scaled,
    ScaledPosition,
)


def scaled(x1, y1, x2, y2, page_number=None):
    return Scaled(x1, y1, x2, y2, 600, 800, page_number=page_number)


def text_highlight(id, page_number, rects, text="text"):
    bounding = Scaled(
        min(r.x1 for r in rects),
        min(r.y1 for r in rects),
        max(r.x2 for r in rects),
        max(r.y2 for r in rects),
        600,
        800,
    )
    return Highlight(
        position=ScaledPosition(bounding, tuple(rects), page_number),
        content=Content(text=text),
        id=id,
    )


def image_highlight(id, page_number):
    return Highlight(
        position=ScaledPosition(scaled(10, 10, 50, 50), (), page_number),
        content=Content(image=FAKE_IMAGE),
        type=HighlightType.IMAGE,
        id=id,
    )


class TestGroupByPage:
    """Tests for splitting highlights into page-scoped copies."""

    def setup_method(self):
        self.spanning = text_highlight(
            "h1", 2, [scaled(50, 700, 250, 720), scaled(50, 10, 150, 30, page_number=3)]
        )
        self.area = image_highlight("h2", 1)
        self.ghost = text_highlight(None, 3, [scaled(0, 100, 100, 120)])

    def test_keys_ascending(self):
        grouped = group_by_page([self.spanning, self.area], self.ghost)
        assert list(grouped) == [1, 2, 3]

    def test_page_copies_carry_only_their_rects(self):
        """Each copy keeps the page's rects and the original bounding rect."""
        grouped = group_by_page([self.spanning])
        on_two, on_three = grouped[2][0], grouped[3][0]

        assert on_two.position.rects == (self.spanning.position.rects[0],)
        assert on_three.position.rects == (self.spanning.position.rects[1],)
        assert on_three.position.page_number == 3
        assert on_three.position.bounding_rect == self.spanning.position.bounding_rect
        assert on_three.id == "h1"

    def test_every_rect_lands_exactly_once(self):
        grouped = group_by_page([self.spanning, self.area], self.ghost)
        placed = [r for copies in grouped.values() for h in copies for r in h.position.rects]
        expected = list(self.spanning.position.rects) + list(self.ghost.position.rects)
        assert sorted(placed, key=repr) == sorted(expected, key=repr)

    def test_transient_highlight_included(self):
        grouped = group_by_page([self.spanning], self.ghost)
        assert [h.id for h in grouped[3]] == ["h1", None]

    def test_area_highlight_on_its_page(self):
        """Highlights without rects still appear on their own page."""
        grouped = group_by_page([self.area])
        assert list(grouped) == [1]
        assert grouped[1][0].position.rects == ()

    def test_deterministic(self):
        first = group_by_page([self.spanning, self.area], self.ghost)
        second = group_by_page([self.spanning, self.area], self.ghost)
        assert first == second

    def test_none_ignored(self):
        assert group_by_page([None], None) == {}

    def test_originals_untouched(self):
        group_by_page([self.spanning])
        assert len(self.spanning.position.rects) == 2
        assert self.spanning.position.page_number == 2

    def test_pages_touched(self):
        assert pages_touched(self.spanning) == [2, 3]


class TestValidateHighlight:
    """Tests for type invariants."""

    def test_valid_highlights_pass(self):
        validate_highlight(text_highlight("a", 1, [scaled(0, 0, 10, 10)]))
        validate_highlight(image_highlight("b", 1))

    def test_text_without_text_raises(self):
        with pytest.raises(ConsistencyError):
            validate_highlight(text_highlight("a", 1, [scaled(0, 0, 10, 10)], text=""))

    def test_image_with_rects_raises(self):
        highlight = image_highlight("b", 1)
        highlight.position = ScaledPosition(
            highlight.position.bounding_rect, (scaled(0, 0, 1, 1),), 1
        )
        with pytest.raises(ConsistencyError):
            validate_highlight(highlight)

    def test_image_without_image_raises(self):
        highlight = image_highlight("b", 1)
        highlight.content = Content()
        with pytest.raises(ConsistencyError):
            validate_highlight(highlight)


class TestViewportHighlights:
    """Tests for resolving highlights for a render pass."""

    def test_resolves_against_current_scale(self):
        backend = FakeBackend(scale=2.0)
        highlight = text_highlight("a", 1, [scaled(10, 10, 20, 20)])
        highlight.comment = Comment("note", emoji="!")
        result = to_viewport_highlight(highlight, backend)
        assert result.position.rects[0].left == pytest.approx(20)
        assert result.position.rects[0].width == pytest.approx(20)
        assert result.id == "a"
        assert result.comment.text == "note"

    def test_page_not_laid_out_is_skipped(self):
        """A page without a viewport yet draws nothing instead of failing."""
        backend = FakeBackend()
        backend.missing_pages.add(2)
        grouped = group_by_page([text_highlight("a", 2, [scaled(0, 0, 10, 10)])])
        assert viewport_highlights_for_page(grouped, 2, backend) == []

    def test_unknown_page_empty(self):
        assert viewport_highlights_for_page({}, 1, FakeBackend()) == []
