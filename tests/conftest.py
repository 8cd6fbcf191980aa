"""
Shared fixtures: an in-memory rendering backend with a fixed page layout.
"""

from typing import Dict, List, Optional, Sequence, Set, Tuple

import pytest

from flet_pdf_highlighter.backends.base import PageElement, PageViewport, RenderingBackend
from flet_pdf_highlighter.errors import MissingPageError
from flet_pdf_highlighter.types import Rect, SelectableChar

FAKE_IMAGE = "data:image/png;base64,AAA"


class FakeBackend(RenderingBackend):
    """Pages stacked vertically with a fixed gap, nothing rasterised."""

    def __init__(
        self,
        page_sizes: Sequence[Tuple[float, float]] = ((600, 800), (600, 800), (600, 800)),
        scale: float = 1.0,
        gap: float = 10,
        chars: Optional[Dict[int, List[SelectableChar]]] = None,
    ):
        super().__init__()
        self.page_sizes = list(page_sizes)
        self._scale = scale
        self.gap = gap
        self.chars = chars or {}
        self.missing_pages: Set[int] = set()
        self.captures: List[Tuple[int, Rect]] = []

    @property
    def page_count(self) -> int:
        return len(self.page_sizes)

    @property
    def scale(self) -> float:
        return self._scale

    @scale.setter
    def scale(self, value: float) -> None:
        self._scale = value
        self.emit("pagerendered")

    def get_viewport(self, page_number: int) -> PageViewport:
        self._check_page(page_number)
        if page_number in self.missing_pages:
            raise MissingPageError(page_number)
        width, height = self.page_sizes[page_number - 1]
        return PageViewport(width, height, self._scale)

    def get_page_element(self, page_number: int) -> PageElement:
        self._check_page(page_number)
        top = 0.0
        for width, height in self.page_sizes[: page_number - 1]:
            top += height * self._scale + self.gap
        width, height = self.page_sizes[page_number - 1]
        return PageElement(page_number, 0.0, top, width * self._scale, height * self._scale)

    def capture_region(self, page_number: int, rect: Rect) -> str:
        self._check_page(page_number)
        self.captures.append((page_number, rect))
        return FAKE_IMAGE

    def render_page(self, page_number: int) -> str:
        return ""

    def get_selectable_chars(self, page_number: int) -> List[SelectableChar]:
        return self.chars.get(page_number, [])


def make_line(text: str, y: float, page_number: int = 1, x: float = 0, size: float = 10):
    """Character boxes for ``text`` laid out left to right."""
    return [
        SelectableChar(
            char=c,
            x=x + i * size,
            y=y,
            width=size,
            height=size,
            page_number=page_number,
        )
        for i, c in enumerate(text)
    ]


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def text_backend():
    """Three pages; page 1 has two lines of text."""
    return FakeBackend(chars={1: make_line("abc", 0) + make_line("def", 20)})
