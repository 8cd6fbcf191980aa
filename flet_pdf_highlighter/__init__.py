"""
Flet PDF Highlighter

Text and area highlights over PDF pages, stored in zoom-independent
coordinates.

Usage:
    import flet as ft
    from flet_pdf_highlighter import Highlighter, PyMuPDFBackend

    def main(page: ft.Page):
        backend = PyMuPDFBackend("/path/to/file.pdf")
        highlighter = Highlighter(
            backend,
            highlights=[],
            enable_area_selection=True,
            on_selection=lambda highlight: print(highlight.to_dict()),
        )
        page.add(highlighter.control)
        highlighter.attach(page)

    ft.app(main)
"""

from __future__ import annotations

from .backends import (
    PageElement,
    PageViewport,
    PyMuPDFBackend,
    RenderingBackend,
    ViewportDescriptor,
    open_document,
)
from .coordinates import (
    scaled_position_to_viewport,
    scaled_to_viewport,
    viewport_position_to_scaled,
    viewport_to_scaled,
)
from .errors import (
    ConsistencyError,
    EmptyInputError,
    HighlighterError,
    InvalidSelectionError,
    MissingPageError,
)
from .extraction import SelectionResult, extract_area_selection, extract_text_selection
from .highlighter import Highlighter
from .highlights import group_by_page
from .types import (
    Comment,
    Content,
    Highlight,
    HighlightType,
    Position,
    Rect,
    Scaled,
    ScaledPosition,
    ViewportHighlight,
)

__version__ = "0.1.0"

__all__ = [
    "Highlighter",
    "RenderingBackend",
    "PyMuPDFBackend",
    "PageElement",
    "PageViewport",
    "ViewportDescriptor",
    "open_document",
    "Highlight",
    "HighlightType",
    "ViewportHighlight",
    "Content",
    "Comment",
    "Rect",
    "Scaled",
    "Position",
    "ScaledPosition",
    "SelectionResult",
    "extract_text_selection",
    "extract_area_selection",
    "group_by_page",
    "viewport_to_scaled",
    "scaled_to_viewport",
    "viewport_position_to_scaled",
    "scaled_position_to_viewport",
    "HighlighterError",
    "EmptyInputError",
    "InvalidSelectionError",
    "MissingPageError",
    "ConsistencyError",
    "__version__",
]
