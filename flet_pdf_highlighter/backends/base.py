"""
Abstract rendering backend.

The highlighter never paints pages itself. Backends lay pages out, rasterise
them and describe how page space maps to rendered pixels; the highlighter
only consumes these capabilities.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..errors import MissingPageError
from ..types import PdfRect, Point, Rect, SelectableChar


class ViewportDescriptor(ABC):
    """Maps one page between native PDF space and rendered pixels."""

    @property
    @abstractmethod
    def width(self) -> float:
        """Rendered page width in pixels."""
        ...

    @property
    @abstractmethod
    def height(self) -> float:
        """Rendered page height in pixels."""
        ...

    @property
    @abstractmethod
    def native_width(self) -> float:
        """Page width in PDF points."""
        ...

    @property
    @abstractmethod
    def native_height(self) -> float:
        """Page height in PDF points."""
        ...

    @abstractmethod
    def to_pdf_point(self, x: float, y: float) -> Point:
        """Convert a rendered pixel position to a native PDF point."""
        ...

    @abstractmethod
    def to_viewport_point(self, x: float, y: float) -> Point:
        """Convert a native PDF point to a rendered pixel position."""
        ...

    def to_viewport_rect(self, rect: PdfRect) -> PdfRect:
        """Convert a native (x1, y1, x2, y2) rect to rendered corners.

        The corners are not reordered; y flips between the two spaces.
        """
        x1, y1 = self.to_viewport_point(rect[0], rect[1])
        x2, y2 = self.to_viewport_point(rect[2], rect[3])
        return (x1, y1, x2, y2)


class PageViewport(ViewportDescriptor):
    """Viewport of an unrotated page rendered at ``scale``.

    Native space has its origin at the bottom-left corner with y pointing up;
    rendered space has it at the top-left with y pointing down.
    """

    def __init__(self, native_width: float, native_height: float, scale: float = 1.0):
        self._native_width = native_width
        self._native_height = native_height
        self.scale = scale

    @property
    def width(self) -> float:
        return self._native_width * self.scale

    @property
    def height(self) -> float:
        return self._native_height * self.scale

    @property
    def native_width(self) -> float:
        return self._native_width

    @property
    def native_height(self) -> float:
        return self._native_height

    def to_pdf_point(self, x: float, y: float) -> Point:
        return (x / self.scale, self._native_height - y / self.scale)

    def to_viewport_point(self, x: float, y: float) -> Point:
        return (x * self.scale, (self._native_height - y) * self.scale)

    def __repr__(self) -> str:
        return (
            f"PageViewport({self._native_width}x{self._native_height}, "
            f"scale={self.scale})"
        )


@dataclass
class PageElement:
    """A laid out page inside the scrolling content."""

    page_number: int
    offset_left: float
    offset_top: float
    width: float
    height: float

    def bounding_client_rect(self) -> Rect:
        """Page box in scroll-content coordinates."""
        return Rect(
            left=self.offset_left,
            top=self.offset_top,
            width=self.width,
            height=self.height,
            page_number=self.page_number,
        )

    def contains_point(self, x: float, y: float) -> bool:
        return (
            self.offset_left <= x <= self.offset_left + self.width
            and self.offset_top <= y <= self.offset_top + self.height
        )


class RenderingBackend(ABC):
    """Abstract interface for the page rendering collaborator."""

    def __init__(self) -> None:
        self._listeners: Dict[str, List[Callable[..., None]]] = {}
        self._scroll_top = 0.0
        self._visible_height = 0.0

    @property
    @abstractmethod
    def page_count(self) -> int:
        """Number of pages."""
        ...

    @property
    @abstractmethod
    def scale(self) -> float:
        """Current zoom factor."""
        ...

    @abstractmethod
    def get_viewport(self, page_number: int) -> ViewportDescriptor:
        """Viewport descriptor of a page.

        Raises:
            MissingPageError: If the page is not available.
        """
        ...

    @abstractmethod
    def get_page_element(self, page_number: int) -> PageElement:
        """Layout box of a page.

        Raises:
            MissingPageError: If the page is not available.
        """
        ...

    @abstractmethod
    def capture_region(self, page_number: int, rect: Rect) -> str:
        """Rasterise a page-relative viewport rect as a PNG data URI."""
        ...

    @abstractmethod
    def render_page(self, page_number: int) -> str:
        """Rasterise a whole page at the current scale (base64 PNG)."""
        ...

    def get_page_for_element(self, element: Any) -> Optional[int]:
        """Page number an element belongs to, or None."""
        if isinstance(element, PageElement) and 1 <= element.page_number <= self.page_count:
            return element.page_number
        return None

    def page_elements(self) -> List[PageElement]:
        """All page layout boxes, in page order."""
        return [self.get_page_element(n) for n in range(1, self.page_count + 1)]

    def page_at_point(self, x: float, y: float) -> Optional[PageElement]:
        """Page under a scroll-content point, if any."""
        for element in self.page_elements():
            if element.contains_point(x, y):
                return element
        return None

    def content_size(self) -> Tuple[float, float]:
        """Width and height of the whole scrolling content."""
        elements = self.page_elements()
        if not elements:
            return (0.0, 0.0)
        width = max(e.offset_left + e.width for e in elements)
        height = max(e.offset_top + e.height for e in elements)
        return (width, height)

    def scroll_page_into_view(self, page_number: int, destination: Optional[Point] = None) -> float:
        """Scroll so that ``destination`` (native PDF point) is at the top.

        Without a destination the page top is used.

        Returns:
            The new scroll offset of the container.
        """
        element = self.get_page_element(page_number)
        offset = element.offset_top
        if destination is not None:
            _, y = self.get_viewport(page_number).to_viewport_point(*destination)
            offset += y
        self._scroll_top = max(0.0, offset)
        return self._scroll_top

    def update_scroll(self, top: float, height: Optional[float] = None) -> None:
        """Record the scroll container's current state."""
        self._scroll_top = top
        if height is not None:
            self._visible_height = height

    @property
    def container_bounds(self) -> Rect:
        """Visible part of the scrolling content."""
        width, _ = self.content_size()
        return Rect(left=0.0, top=self._scroll_top, width=width, height=self._visible_height)

    def get_selectable_chars(self, page_number: int) -> List[SelectableChar]:
        """Character boxes for text selection. Backends without text return none."""
        return []

    # Events

    def add_listener(self, event: str, callback: Callable[..., None]) -> None:
        self._listeners.setdefault(event, []).append(callback)

    def remove_listener(self, event: str, callback: Callable[..., None]) -> None:
        callbacks = self._listeners.get(event, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    def emit(self, event: str, *args: Any) -> None:
        for callback in list(self._listeners.get(event, [])):
            callback(*args)

    def _check_page(self, page_number: int) -> None:
        if not 1 <= page_number <= self.page_count:
            raise MissingPageError(page_number)
