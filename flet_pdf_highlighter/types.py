"""
Shared data types for the highlighter.

Two coordinate spaces are involved:

- viewport: CSS-like pixels of the page as currently rendered (zoom dependent)
- scaled: the stored, zoom independent form of the same geometry

Page numbers are 1-based throughout.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class HighlightType(Enum):
    """Kind of highlight."""

    TEXT = "text"
    IMAGE = "image"


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle (left, top, width, height).

    ``page_number`` is only set when the rect belongs to a different page than
    its parent position (multi-page text selections).
    """

    left: float
    top: float
    width: float
    height: float
    page_number: Optional[int] = None

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def center_x(self) -> float:
        return self.left + self.width / 2

    def with_page(self, page_number: Optional[int]) -> "Rect":
        return replace(self, page_number=page_number)

    def translate(self, dx: float, dy: float) -> "Rect":
        return replace(self, left=self.left + dx, top=self.top + dy)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "left": self.left,
            "top": self.top,
            "width": self.width,
            "height": self.height,
        }
        if self.page_number is not None:
            data["pageNumber"] = self.page_number
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Rect":
        return cls(
            left=data["left"],
            top=data["top"],
            width=data["width"],
            height=data["height"],
            page_number=data.get("pageNumber"),
        )


@dataclass(frozen=True)
class Scaled:
    """Stored rectangle.

    (x1, y1)-(x2, y2) is the corner pair. ``width``/``height`` describe the
    page the corners were measured against: rendered page size at capture
    time for screen coordinates, native page size for PDF coordinates.
    """

    x1: float
    y1: float
    x2: float
    y2: float
    width: float
    height: float
    page_number: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "x1": self.x1,
            "y1": self.y1,
            "x2": self.x2,
            "y2": self.y2,
            "width": self.width,
            "height": self.height,
        }
        if self.page_number is not None:
            data["pageNumber"] = self.page_number
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Scaled":
        return cls(
            x1=data["x1"],
            y1=data["y1"],
            x2=data["x2"],
            y2=data["y2"],
            width=data["width"],
            height=data["height"],
            page_number=data.get("pageNumber"),
        )


@dataclass(frozen=True)
class Position:
    """Highlight geometry in viewport space."""

    bounding_rect: Rect
    rects: Tuple[Rect, ...]
    page_number: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "boundingRect": self.bounding_rect.to_dict(),
            "rects": [r.to_dict() for r in self.rects],
            "pageNumber": self.page_number,
        }


@dataclass(frozen=True)
class ScaledPosition:
    """Highlight geometry in stored (scaled) space."""

    bounding_rect: Scaled
    rects: Tuple[Scaled, ...]
    page_number: int
    use_pdf_coordinates: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "boundingRect": self.bounding_rect.to_dict(),
            "rects": [r.to_dict() for r in self.rects],
            "pageNumber": self.page_number,
        }
        if self.use_pdf_coordinates:
            data["usePdfCoordinates"] = True
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScaledPosition":
        return cls(
            bounding_rect=Scaled.from_dict(data["boundingRect"]),
            rects=tuple(Scaled.from_dict(r) for r in data.get("rects", [])),
            page_number=data["pageNumber"],
            use_pdf_coordinates=bool(data.get("usePdfCoordinates", False)),
        )


@dataclass
class Content:
    """Highlighted content: selected text or a data URI of the area."""

    text: Optional[str] = None
    image: Optional[str] = None


@dataclass
class Comment:
    """User comment attached to a highlight."""

    text: str
    emoji: Optional[str] = None


@dataclass
class Highlight:
    """A highlight in stored form.

    ``id`` is assigned by the host when it keeps the highlight; a highlight
    without one is a ghost still being created.
    """

    position: ScaledPosition
    content: Content = field(default_factory=Content)
    type: HighlightType = HighlightType.TEXT
    comment: Optional[Comment] = None
    id: Optional[str] = None

    def with_comment(self, comment: Optional[Comment]) -> "Highlight":
        return replace(self, comment=comment)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": self.type.value,
            "position": self.position.to_dict(),
            "content": {
                k: v
                for k, v in (("text", self.content.text), ("image", self.content.image))
                if v is not None
            },
        }
        if self.comment is not None:
            data["comment"] = {"text": self.comment.text}
            if self.comment.emoji is not None:
                data["comment"]["emoji"] = self.comment.emoji
        if self.id is not None:
            data["id"] = self.id
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Highlight":
        content = data.get("content") or {}
        comment = data.get("comment")
        return cls(
            id=data.get("id"),
            type=HighlightType(data.get("type", "text")),
            position=ScaledPosition.from_dict(data["position"]),
            content=Content(text=content.get("text"), image=content.get("image")),
            comment=Comment(comment["text"], comment.get("emoji")) if comment else None,
        )


@dataclass
class ViewportHighlight:
    """A highlight resolved for the current render pass. Never stored."""

    position: Position
    content: Content = field(default_factory=Content)
    type: HighlightType = HighlightType.TEXT
    comment: Optional[Comment] = None
    id: Optional[str] = None


@dataclass
class SelectableChar:
    """A character box available for text selection.

    ``x``/``y`` are page-relative viewport pixels; the offsets place the page
    inside the scrolling content.
    """

    char: str
    x: float
    y: float
    width: float
    height: float
    page_number: int
    page_offset_x: float = 0
    page_offset_y: float = 0


# Type aliases for clarity
Point = Tuple[float, float]
PdfRect = Tuple[float, float, float, float]
