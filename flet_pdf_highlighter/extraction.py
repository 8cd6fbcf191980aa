"""
Build draft highlights from raw selections.

Two sources feed this module: the client rects of a text selection (one or
more per line, in scroll-content coordinates) and the rectangle of an area
drag. Both end up as a viewport :class:`Position` plus a draft
:class:`Highlight` in stored form. Nothing here is time or event dependent,
so it can be called directly without the interactive layer.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, NamedTuple, Optional, Sequence

from .backends.base import PageElement, RenderingBackend
from .coordinates import viewport_position_to_scaled
from .errors import InvalidSelectionError
from .geometry import meets_minimum_size, union
from .types import Content, Highlight, HighlightType, Position, Rect

logger = logging.getLogger(__name__)

LINE_MARGIN = 5.0
GAP_MARGIN = 10.0


class SelectionResult(NamedTuple):
    """A finalized selection: where it is on screen and what to store."""

    viewport_position: Position
    highlight: Highlight


def _inside_page(rect: Rect, page: Rect) -> bool:
    return (
        rect.top >= page.top
        and rect.bottom <= page.bottom
        and rect.left >= page.left
        and rect.right <= page.right
    )


def get_client_rects(
    client_rects: Iterable[Rect],
    pages: Sequence[PageElement],
    optimize: bool = True,
) -> List[Rect]:
    """Assign client rects to pages and make them page-relative.

    Rects outside every page, empty ones, and ones as large as the page itself
    (block containers rather than text) are dropped.
    """
    rects: List[Rect] = []
    for client_rect in client_rects:
        if client_rect.width <= 0 or client_rect.height <= 0:
            continue
        for page in pages:
            page_rect = page.bounding_client_rect()
            if (
                _inside_page(client_rect, page_rect)
                and client_rect.width < page_rect.width
                and client_rect.height < page_rect.height
            ):
                rects.append(
                    Rect(
                        left=client_rect.left - page_rect.left,
                        top=client_rect.top - page_rect.top,
                        width=client_rect.width,
                        height=client_rect.height,
                        page_number=page.page_number,
                    )
                )
                break

    return optimize_client_rects(rects) if optimize else rects


def _same_line(a: Rect, b: Rect) -> bool:
    return (
        a.page_number == b.page_number
        and abs(a.top - b.top) < LINE_MARGIN
        and abs(a.height - b.height) < LINE_MARGIN
    )


def _strictly_inside(a: Rect, b: Rect) -> bool:
    return a.top > b.top and a.left > b.left and a.bottom < b.bottom and a.right < b.right


def _mergeable(a: Rect, b: Rect) -> bool:
    return _same_line(a, b) and b.left <= a.right + GAP_MARGIN and a.left <= b.right + GAP_MARGIN


def _merge_pass(rects: List[Rect]) -> List[Rect]:
    merged: List[Rect] = []
    for rect in rects:
        for i, current in enumerate(merged):
            if _mergeable(current, rect):
                merged[i] = union([current, rect])
                break
        else:
            merged.append(rect)
    return merged


def optimize_client_rects(rects: Sequence[Rect]) -> List[Rect]:
    """Collapse the per-span rects of a selection into one rect per line run.

    Rects nested inside another rect are dropped; rects on the same line that
    overlap or are separated by a small gap are merged.
    """
    ordered = sorted(rects, key=lambda r: (r.page_number or 0, r.top, r.left))
    result = [r for r in ordered if not any(_strictly_inside(r, other) for other in ordered)]

    while True:
        merged = _merge_pass(result)
        if len(merged) == len(result):
            return merged
        result = merged


def extract_text_selection(
    client_rects: Iterable[Rect],
    pages: Sequence[PageElement],
    text: str,
    backend: RenderingBackend,
    use_pdf_coordinates: bool = False,
) -> SelectionResult:
    """Turn a text selection into a draft text highlight.

    The highlight lives on the first (lowest) page the selection touches.

    Raises:
        InvalidSelectionError: If the selection is empty or lies outside pages.
    """
    if not text:
        raise InvalidSelectionError("Text selection is empty")

    rects = get_client_rects(client_rects, pages)
    if not rects:
        raise InvalidSelectionError("Text selection has no rectangles on a page")

    page_number = min(r.page_number for r in rects)
    viewport_position = Position(
        bounding_rect=union(rects).with_page(page_number),
        rects=tuple(rects),
        page_number=page_number,
    )
    position = viewport_position_to_scaled(viewport_position, backend, use_pdf_coordinates)
    highlight = Highlight(
        position=position,
        content=Content(text=text),
        type=HighlightType.TEXT,
    )
    return SelectionResult(viewport_position, highlight)


def extract_area_selection(
    bounding_rect: Rect,
    start_target: Optional[Any],
    backend: RenderingBackend,
    use_pdf_coordinates: bool = False,
) -> SelectionResult:
    """Turn a finished drag rectangle into a draft image highlight.

    ``bounding_rect`` is in scroll-content coordinates; ``start_target`` is
    the page element the drag started on.

    Raises:
        InvalidSelectionError: If the drag did not start on a page or is
            smaller than the minimum selection size.
    """
    page_number = backend.get_page_for_element(start_target)
    if page_number is None:
        raise InvalidSelectionError("Area selection did not start on a page")

    page: PageElement = backend.get_page_element(page_number)
    rect = bounding_rect.translate(-page.offset_left, -page.offset_top).with_page(page_number)
    if not meets_minimum_size(rect):
        raise InvalidSelectionError(f"Area selection {rect} is too small")

    viewport_position = Position(bounding_rect=rect, rects=(), page_number=page_number)
    image = backend.capture_region(page_number, rect)
    logger.debug("Captured %d bytes for area on page %d", len(image), page_number)

    position = viewport_position_to_scaled(viewport_position, backend, use_pdf_coordinates)
    highlight = Highlight(
        position=position,
        content=Content(image=image),
        type=HighlightType.IMAGE,
    )
    return SelectionResult(viewport_position, highlight)
