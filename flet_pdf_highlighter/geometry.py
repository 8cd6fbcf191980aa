"""
Rectangle helpers: bounding boxes, drag rectangles, size checks.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from .errors import ConsistencyError, EmptyInputError
from .types import Point, Position, Rect

MIN_SELECTION_SIZE = 1.0


def union(rects: Sequence[Rect]) -> Rect:
    """Return the tight bounding box of ``rects``.

    The result is tagged with the lowest page number among the inputs.

    Raises:
        EmptyInputError: If ``rects`` is empty.
    """
    if not rects:
        raise EmptyInputError("Cannot compute the bounding box of no rectangles")

    if len(rects) == 1:
        return rects[0]

    left = min(r.left for r in rects)
    top = min(r.top for r in rects)
    right = max(r.right for r in rects)
    bottom = max(r.bottom for r in rects)
    pages = [r.page_number for r in rects if r.page_number is not None]

    return Rect(
        left=left,
        top=top,
        width=right - left,
        height=bottom - top,
        page_number=min(pages) if pages else None,
    )


def from_points(a: Point, b: Point) -> Rect:
    """Normalized rect spanning two corner points, in any order."""
    return Rect(
        left=min(a[0], b[0]),
        top=min(a[1], b[1]),
        width=abs(b[0] - a[0]),
        height=abs(b[1] - a[1]),
    )


def meets_minimum_size(
    rect: Rect,
    min_width: float = MIN_SELECTION_SIZE,
    min_height: float = MIN_SELECTION_SIZE,
) -> bool:
    """Whether a rect is large enough to count as a deliberate drag."""
    return rect.width >= min_width and rect.height >= min_height


def contains(outer: Rect, inner: Rect, tolerance: float = 1e-6) -> bool:
    """Whether ``inner`` lies within ``outer`` (edges included)."""
    return (
        inner.left >= outer.left - tolerance
        and inner.top >= outer.top - tolerance
        and inner.right <= outer.right + tolerance
        and inner.bottom <= outer.bottom + tolerance
    )


def _close(a: float, b: float, tolerance: float) -> bool:
    return abs(a - b) <= tolerance


def validate_position(position: Position, tolerance: float = 1e-6) -> None:
    """Check that a position's bounding rect is the tight union of its rects.

    Positions without rects (area highlights) only carry a bounding rect and
    always pass.

    Raises:
        ConsistencyError: If the bounding rect does not match.
    """
    if not position.rects:
        return

    expected = union(list(position.rects))
    actual = position.bounding_rect
    edges: Iterable[tuple] = (
        (actual.left, expected.left),
        (actual.top, expected.top),
        (actual.right, expected.right),
        (actual.bottom, expected.bottom),
    )
    if not all(_close(a, e, tolerance) for a, e in edges):
        raise ConsistencyError(
            f"Bounding rect {actual} is not the union of its rects ({expected})"
        )
