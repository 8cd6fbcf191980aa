"""
Tests for character hit-testing text selection.

Run with: pytest tests/test_text_selection.py -v
"""
from conftest import make_line
from flet_pdf_highlighter.interactions.selection import TextSelectionHandler
from flet_pdf_highlighter.types import Rect


class TestTextSelectionHandler:
    """Tests for selecting characters with a drag."""

    def setup_method(self):
        self.changes = []
        self.handler = TextSelectionHandler(on_selection_change=lambda: self.changes.append(1))
        self.handler.set_selectable_chars(make_line("abc", 0) + make_line("def", 20))

    def test_single_line(self):
        self.handler.start_selection(1, 1)
        self.handler.update_selection(15, 5)

        assert self.handler.selected_text == "ab"
        assert self.handler.get_client_rects() == [Rect(0, 0, 20, 10, page_number=1)]
        assert self.handler.pages() == [1]
        assert self.changes == [1]

    def test_multiple_lines_extend_to_line_ends(self):
        """The first line runs to its end, the last from its start."""
        self.handler.start_selection(15, 5)
        self.handler.update_selection(5, 25)

        assert self.handler.selected_text == "abc\nde"
        assert self.handler.get_client_rects() == [
            Rect(0, 0, 30, 10, page_number=1),
            Rect(0, 20, 20, 10, page_number=1),
        ]

    def test_no_hit_is_collapsed(self):
        self.handler.start_selection(100, 100)
        self.handler.update_selection(200, 200)
        assert self.handler.is_collapsed
        assert self.handler.get_client_rects() == []

    def test_disabled_ignores_drag(self):
        self.handler.enabled = False
        self.handler.start_selection(1, 1)
        self.handler.update_selection(15, 5)
        assert not self.handler.is_selecting
        assert self.handler.is_collapsed
        assert self.changes == []

    def test_end_and_clear(self):
        self.handler.start_selection(1, 1)
        self.handler.update_selection(15, 5)
        self.handler.end_selection()
        assert not self.handler.is_selecting
        assert not self.handler.is_collapsed

        self.handler.clear()
        assert self.handler.is_collapsed
        assert self.handler.selected_text == ""
