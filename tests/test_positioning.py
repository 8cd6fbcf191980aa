"""
Tests for popup placement.

Run with: pytest tests/test_positioning.py -v
"""
from flet_pdf_highlighter.backends.base import PageElement
from flet_pdf_highlighter.positioning import clamp, compute_popup_position
from flet_pdf_highlighter.types import Rect

PAGE = PageElement(1, 0, 0, 600, 800)
POPUP = (200, 48)


class TestComputePopupPosition:
    """Tests for placing the popup next to a highlight."""

    def test_above_and_centred(self):
        placement = compute_popup_position(Rect(100, 200, 50, 20), PAGE, POPUP, 0)
        assert placement.left == 25
        assert placement.top == 200 - 48 - 5
        assert placement.visible

    def test_flips_below_when_scrolled_past(self):
        """If the space above is scrolled off, the popup goes below."""
        placement = compute_popup_position(Rect(100, 200, 50, 20), PAGE, POPUP, 160)
        assert placement.top == 220 + 5

    def test_clamped_to_left_edge(self):
        placement = compute_popup_position(Rect(0, 200, 20, 20), PAGE, POPUP, 0)
        assert placement.left == 0

    def test_clamped_to_right_edge(self):
        placement = compute_popup_position(Rect(590, 200, 10, 20), PAGE, POPUP, 0)
        assert placement.left == 400

    def test_page_offset_applied(self):
        page = PageElement(2, 20, 810, 600, 800)
        placement = compute_popup_position(Rect(100, 200, 50, 20), page, POPUP, 0)
        assert placement.top == 1010 - 48 - 5
        assert placement.left == 45

    def test_hidden_until_measured(self):
        assert not compute_popup_position(Rect(100, 200, 50, 20), PAGE, None, 0).visible
        assert not compute_popup_position(Rect(100, 200, 50, 20), PAGE, (0, 0), 0).visible

    def test_wider_than_page(self):
        """The right bound wins when the popup cannot fit."""
        placement = compute_popup_position(Rect(100, 200, 50, 20), PAGE, (700, 48), 0)
        assert placement.left == -100


class TestClamp:
    def test_within_range(self):
        assert clamp(5, 0, 10) == 5

    def test_below_and_above(self):
        assert clamp(-1, 0, 10) == 0
        assert clamp(11, 0, 10) == 10
