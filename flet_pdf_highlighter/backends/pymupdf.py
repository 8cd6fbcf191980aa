"""
PyMuPDF backend implementation.
"""

from __future__ import annotations

import base64
import io
import logging
import warnings
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

warnings.filterwarnings("ignore", message="builtin type Swig")

import pymupdf

from ..types import Rect, SelectableChar  # noqa: E402
from .base import PageElement, PageViewport, RenderingBackend  # noqa: E402

logger = logging.getLogger(__name__)


class PyMuPDFBackend(RenderingBackend):
    """Renders a document with PyMuPDF in a continuous vertical layout.

    Args:
        source: Path to PDF file, bytes, or BytesIO
        password: Password for encrypted PDFs (optional)
        scale: Zoom factor (1.0 = 72 dpi)
        page_gap: Vertical gap between pages in pixels

    Raises:
        ValueError: If document is encrypted and no password provided,
                   or if password is invalid
    """

    def __init__(
        self,
        source: Union[str, Path, bytes, io.BytesIO],
        password: Optional[str] = None,
        scale: float = 1.0,
        page_gap: int = 16,
    ):
        super().__init__()
        if isinstance(source, (str, Path)):
            self._doc = pymupdf.open(str(source))
        elif isinstance(source, bytes):
            self._doc = pymupdf.open(stream=source, filetype="pdf")
        elif isinstance(source, io.BytesIO):
            self._doc = pymupdf.open(stream=source.read(), filetype="pdf")
        else:
            raise TypeError(f"Unsupported source type: {type(source)}")

        if self._doc.is_encrypted:
            if password is None:
                raise ValueError("Document is encrypted and requires a password")
            if not self._doc.authenticate(password):
                raise ValueError("Invalid password")

        self._scale = scale
        self._page_gap = page_gap
        self._layout: Optional[List[PageElement]] = None
        self._renders: Dict[int, str] = {}
        self._chars: Dict[int, List[SelectableChar]] = {}

    @property
    def page_count(self) -> int:
        return len(self._doc)

    @property
    def scale(self) -> float:
        return self._scale

    @scale.setter
    def scale(self, value: float) -> None:
        if value == self._scale:
            return
        self._scale = value
        self._invalidate()
        self.emit("pagerendered")

    @property
    def page_gap(self) -> int:
        return self._page_gap

    def _page(self, page_number: int) -> pymupdf.Page:
        self._check_page(page_number)
        return self._doc[page_number - 1]

    def _invalidate(self) -> None:
        self._layout = None
        self._renders.clear()
        self._chars.clear()

    def _compute_layout(self) -> List[PageElement]:
        elements = []
        y_offset = 0.0
        for index in range(self.page_count):
            rect = self._doc[index].rect
            width = rect.width * self._scale
            height = rect.height * self._scale
            elements.append(PageElement(index + 1, 0.0, y_offset, width, height))
            y_offset += height + self._page_gap
        return elements

    def page_elements(self) -> List[PageElement]:
        if self._layout is None:
            self._layout = self._compute_layout()
        return list(self._layout)

    def get_page_element(self, page_number: int) -> PageElement:
        self._check_page(page_number)
        return self.page_elements()[page_number - 1]

    def get_viewport(self, page_number: int) -> PageViewport:
        rect = self._page(page_number).rect
        return PageViewport(rect.width, rect.height, self._scale)

    def _pixmap_png(self, page_number: int, clip: Optional[pymupdf.Rect] = None) -> bytes:
        page = self._page(page_number)
        matrix = pymupdf.Matrix(self._scale, self._scale)
        pix = page.get_pixmap(matrix=matrix, clip=clip, alpha=False)
        return pix.tobytes("png")

    def render_page(self, page_number: int) -> str:
        if page_number not in self._renders:
            png = self._pixmap_png(page_number)
            self._renders[page_number] = base64.b64encode(png).decode("ascii")
        return self._renders[page_number]

    def capture_region(self, page_number: int, rect: Rect) -> str:
        """Rasterise a page-relative viewport rect as a PNG data URI."""
        clip = pymupdf.Rect(
            rect.left / self._scale,
            rect.top / self._scale,
            rect.right / self._scale,
            rect.bottom / self._scale,
        )
        page_rect = self._page(page_number).rect
        clip = clip & page_rect
        if clip.is_empty:
            logger.debug("Capture region %s is outside page %d", rect, page_number)
            return ""
        png = self._pixmap_png(page_number, clip)
        return "data:image/png;base64," + base64.b64encode(png).decode("ascii")

    def get_selectable_chars(self, page_number: int) -> List[SelectableChar]:
        """Character boxes of a page in page-relative viewport pixels."""
        if page_number in self._chars:
            return self._chars[page_number]

        page = self._page(page_number)
        element = self.get_page_element(page_number)
        chars: List[SelectableChar] = []
        text_dict = page.get_text("rawdict", flags=pymupdf.TEXT_PRESERVE_WHITESPACE)

        for block in text_dict.get("blocks", []):
            if block.get("type") != 0:
                continue
            for line in block.get("lines", []):
                for span in line.get("spans", []):
                    for char_info in span.get("chars", []):
                        c = char_info.get("c", "")
                        if not c:
                            continue
                        x0, y0, x1, y1 = char_info.get("bbox", (0, 0, 0, 0))
                        chars.append(
                            SelectableChar(
                                char=c,
                                x=x0 * self._scale,
                                y=y0 * self._scale,
                                width=(x1 - x0) * self._scale,
                                height=(y1 - y0) * self._scale,
                                page_number=page_number,
                                page_offset_x=element.offset_left,
                                page_offset_y=element.offset_top,
                            )
                        )

        self._chars[page_number] = chars
        return chars

    def page_size(self, page_number: int) -> Tuple[float, float]:
        """Native page size (width, height) in points."""
        rect = self._page(page_number).rect
        return (rect.width, rect.height)

    def close(self) -> None:
        """Close and release resources."""
        if self._doc:
            self._doc.close()
        self._invalidate()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def open_document(
    source: Union[str, Path, bytes, io.BytesIO],
    password: Optional[str] = None,
    scale: float = 1.0,
) -> PyMuPDFBackend:
    """Open a PDF for highlighting."""
    return PyMuPDFBackend(source, password=password, scale=scale)
