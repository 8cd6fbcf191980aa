"""
Highlight layers - converts viewport highlights to Flet controls.
"""

from __future__ import annotations

from typing import Callable, List, Optional

import flet as ft

from ..types import HighlightType, Rect, ViewportHighlight

LAYER_OPACITY = 0.6


def _rect_container(
    rect: Rect,
    color: str,
    on_hover: Optional[Callable[[ft.ControlEvent], None]] = None,
    content: Optional[ft.Control] = None,
    border: Optional[ft.Border] = None,
) -> ft.Container:
    return ft.Container(
        left=rect.left,
        top=rect.top,
        width=rect.width,
        height=rect.height,
        bgcolor=ft.Colors.with_opacity(LAYER_OPACITY, color),
        border=border,
        content=content,
        on_hover=on_hover,
    )


def build_highlight_layer(
    highlight: ViewportHighlight,
    color: str,
    on_hover: Optional[Callable[[ViewportHighlight], None]] = None,
) -> List[ft.Control]:
    """Controls drawing one highlight on its page layer.

    Text highlights get one box per rect; image highlights a single framed box
    over the bounding rect.
    """

    def hover(e: ft.ControlEvent) -> None:
        if on_hover and e.data == "true":
            on_hover(highlight)

    if highlight.type == HighlightType.TEXT:
        return [_rect_container(rect, color, hover) for rect in highlight.position.rects]
    elif highlight.type == HighlightType.IMAGE:
        return [
            _rect_container(
                highlight.position.bounding_rect,
                color,
                hover,
                border=ft.border.all(1, color),
            )
        ]
    return []


def build_area_selection_rect(rect: Optional[Rect], color: str = "#3390ff") -> ft.Container:
    """The rubber band shown while dragging an area.

    Without a rect the band is built hidden, styled and ready to be moved.
    """
    return ft.Container(
        left=rect.left if rect else 0,
        top=rect.top if rect else 0,
        width=rect.width if rect else 0,
        height=rect.height if rect else 0,
        bgcolor=ft.Colors.with_opacity(0.15, color),
        border=ft.border.all(1, color),
        visible=rect is not None,
    )
