"""
Rendering backends - page layout, rasterisation and coordinate mapping.
"""

from .base import PageElement, PageViewport, RenderingBackend, ViewportDescriptor
from .pymupdf import PyMuPDFBackend, open_document

__all__ = [
    "PageElement",
    "PageViewport",
    "RenderingBackend",
    "ViewportDescriptor",
    "PyMuPDFBackend",
    "open_document",
]
