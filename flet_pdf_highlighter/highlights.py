"""
Highlight model helpers: per-page grouping, validation, viewport resolution.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from .backends.base import RenderingBackend
from .coordinates import scaled_position_to_viewport
from .errors import ConsistencyError, MissingPageError
from .types import Highlight, HighlightType, ScaledPosition, ViewportHighlight

logger = logging.getLogger(__name__)


def pages_touched(highlight: Highlight) -> List[int]:
    """Page numbers a highlight has geometry on, ascending."""
    position = highlight.position
    pages = {position.page_number}
    pages.update(r.page_number for r in position.rects if r.page_number)
    return sorted(pages)


def group_by_page(
    highlights: Iterable[Optional[Highlight]],
    transient: Optional[Highlight] = None,
) -> Dict[int, List[Highlight]]:
    """Split highlights into page-scoped copies, keyed by page number.

    Each copy only carries the rects drawn on its page (rects without a page
    number belong to the highlight's own page) but keeps the original bounding
    rect. A page gets a copy when it received rects or when it is the
    highlight's own page, which covers area highlights without rects.

    Keys are ascending and highlights keep their input order, so identical
    input always yields identical output.
    """
    working = [h for h in list(highlights) + [transient] if h is not None]

    page_numbers = set()
    for highlight in working:
        page_numbers.update(pages_touched(highlight))

    grouped: Dict[int, List[Highlight]] = {}
    for page_number in sorted(page_numbers):
        page_highlights: List[Highlight] = []
        for highlight in working:
            position = highlight.position
            rects = tuple(
                r for r in position.rects
                if (r.page_number or position.page_number) == page_number
            )
            if not rects and page_number != position.page_number:
                continue
            page_highlights.append(
                replace(
                    highlight,
                    position=ScaledPosition(
                        bounding_rect=position.bounding_rect,
                        rects=rects,
                        page_number=page_number,
                        use_pdf_coordinates=position.use_pdf_coordinates,
                    ),
                )
            )
        grouped[page_number] = page_highlights

    return grouped


def validate_highlight(highlight: Highlight) -> None:
    """Check the text/image invariants of a highlight.

    Raises:
        ConsistencyError: If the highlight's content or rects don't match its type.
    """
    position = highlight.position
    if highlight.type == HighlightType.TEXT:
        if not highlight.content.text:
            raise ConsistencyError(f"Text highlight {highlight.id!r} has no text")
        if not position.rects:
            raise ConsistencyError(f"Text highlight {highlight.id!r} has no rects")
    elif highlight.type == HighlightType.IMAGE:
        if not highlight.content.image:
            raise ConsistencyError(f"Image highlight {highlight.id!r} has no image")
        if position.rects:
            raise ConsistencyError(f"Image highlight {highlight.id!r} must not have rects")


def to_viewport_highlight(highlight: Highlight, backend: RenderingBackend) -> ViewportHighlight:
    """Resolve a highlight against the backend's current layout.

    Raises:
        MissingPageError: If a page involved is not laid out.
    """
    return ViewportHighlight(
        position=scaled_position_to_viewport(highlight.position, backend),
        content=highlight.content,
        type=highlight.type,
        comment=highlight.comment,
        id=highlight.id,
    )


def viewport_highlights_for_page(
    grouped: Dict[int, List[Highlight]],
    page_number: int,
    backend: RenderingBackend,
) -> List[ViewportHighlight]:
    """Viewport highlights to draw on one page; empty if it isn't laid out yet."""
    try:
        return [to_viewport_highlight(h, backend) for h in grouped.get(page_number, [])]
    except MissingPageError as e:
        logger.debug("Skipping highlights on page %d: %s", page_number, e)
        return []
