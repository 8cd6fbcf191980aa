"""
Conversion between viewport and scaled coordinates.

Scaled rects are stored once and rendered many times; every render resolves
them again against the page's live viewport so zoom and layout changes are
reflected without touching the stored values.
"""

from __future__ import annotations

from typing import Optional

from .backends.base import RenderingBackend, ViewportDescriptor
from .errors import ConsistencyError
from .geometry import validate_position
from .types import Position, Rect, Scaled, ScaledPosition


def viewport_to_scaled(
    rect: Rect,
    viewport: ViewportDescriptor,
    use_pdf_coordinates: bool = False,
) -> Scaled:
    """Convert a page-relative viewport rect to its stored form.

    In screen coordinates the corners are kept as they are and the page size
    at capture time is recorded next to them, which is what lets
    :func:`scaled_to_viewport` rescale them later. In PDF coordinates the
    corners are converted to native page points.
    """
    if use_pdf_coordinates:
        ax, ay = viewport.to_pdf_point(rect.left, rect.top)
        bx, by = viewport.to_pdf_point(rect.right, rect.bottom)
        return Scaled(
            x1=min(ax, bx),
            y1=min(ay, by),
            x2=max(ax, bx),
            y2=max(ay, by),
            width=viewport.native_width,
            height=viewport.native_height,
            page_number=rect.page_number,
        )

    return Scaled(
        x1=rect.left,
        y1=rect.top,
        x2=rect.right,
        y2=rect.bottom,
        width=viewport.width,
        height=viewport.height,
        page_number=rect.page_number,
    )


def _pdf_to_viewport(scaled: Scaled, viewport: ViewportDescriptor) -> Rect:
    x1, y1, x2, y2 = viewport.to_viewport_rect((scaled.x1, scaled.y1, scaled.x2, scaled.y2))
    return Rect(
        left=min(x1, x2),
        top=min(y1, y2),
        width=abs(x2 - x1),
        height=abs(y2 - y1),
        page_number=scaled.page_number,
    )


def scaled_to_viewport(
    scaled: Scaled,
    viewport: ViewportDescriptor,
    use_pdf_coordinates: bool = False,
) -> Rect:
    """Resolve a stored rect against a page's current viewport.

    Raises:
        ConsistencyError: If a screen-coordinate rect has no page size to
            scale against.
    """
    if use_pdf_coordinates:
        return _pdf_to_viewport(scaled, viewport)

    if scaled.width <= 0 or scaled.height <= 0:
        raise ConsistencyError(
            f"Scaled rect {scaled} has no page size; was it stored with PDF coordinates?"
        )

    x_ratio = viewport.width / scaled.width
    y_ratio = viewport.height / scaled.height
    x1 = scaled.x1 * x_ratio
    y1 = scaled.y1 * y_ratio
    x2 = scaled.x2 * x_ratio
    y2 = scaled.y2 * y_ratio

    return Rect(
        left=x1,
        top=y1,
        width=x2 - x1,
        height=y2 - y1,
        page_number=scaled.page_number,
    )


def _page_for(rect_page: Optional[int], position_page: int) -> int:
    return rect_page or position_page


def scaled_position_to_viewport(
    position: ScaledPosition,
    backend: RenderingBackend,
) -> Position:
    """Resolve a stored position for the current render pass.

    Raises:
        MissingPageError: If a page involved is not laid out.
    """
    use_pdf = position.use_pdf_coordinates

    def resolve(scaled: Scaled) -> Rect:
        viewport = backend.get_viewport(_page_for(scaled.page_number, position.page_number))
        return scaled_to_viewport(scaled, viewport, use_pdf)

    return Position(
        bounding_rect=resolve(position.bounding_rect),
        rects=tuple(resolve(r) for r in position.rects),
        page_number=position.page_number,
    )


def viewport_position_to_scaled(
    position: Position,
    backend: RenderingBackend,
    use_pdf_coordinates: bool = False,
) -> ScaledPosition:
    """Convert a freshly captured viewport position to its stored form.

    Raises:
        ConsistencyError: If the bounding rect is not the union of the rects.
        MissingPageError: If a page involved is not laid out.
    """
    validate_position(position)

    def convert(rect: Rect) -> Scaled:
        viewport = backend.get_viewport(_page_for(rect.page_number, position.page_number))
        return viewport_to_scaled(rect, viewport, use_pdf_coordinates)

    return ScaledPosition(
        bounding_rect=convert(position.bounding_rect),
        rects=tuple(convert(r) for r in position.rects),
        page_number=position.page_number,
        use_pdf_coordinates=use_pdf_coordinates,
    )
