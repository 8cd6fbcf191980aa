"""
Popup placement next to a highlight.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .backends.base import PageElement
from .types import Rect

POPUP_MARGIN = 5.0


@dataclass
class PopupPlacement:
    """Where to put the popup, in scroll-content coordinates."""

    left: float
    top: float
    visible: bool = True


def clamp(value: float, low: float, high: float) -> float:
    """Clamp ``value`` to [low, high]; ``high`` wins if the range is empty."""
    return min(max(value, low), high)


def compute_popup_position(
    bounding_rect: Rect,
    page: PageElement,
    popup_size: Optional[Tuple[float, float]],
    scroll_top: float,
    margin: float = POPUP_MARGIN,
) -> PopupPlacement:
    """Place a popup above a highlight, or below it when above is scrolled off.

    ``bounding_rect`` is page-relative. The popup is centred on the rect and
    kept within the page horizontally. Until the popup has been measured
    (``popup_size`` is None or zero) the placement is marked invisible.
    """
    width, height = popup_size or (0.0, 0.0)
    measured = width > 0 or height > 0

    center_x = page.offset_left + bounding_rect.center_x
    top = page.offset_top + bounding_rect.top
    bottom = top + bounding_rect.height

    above = top - height - margin
    placed_top = bottom + margin if above < scroll_top else above
    left = clamp(center_x - width / 2, 0, page.width - width)

    return PopupPlacement(left=left, top=placed_top, visible=measured)
