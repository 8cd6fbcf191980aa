"""
Highlighter exceptions.
"""


class HighlighterError(Exception):
    """Base class for highlighter errors."""


class EmptyInputError(HighlighterError, ValueError):
    """A geometry operation received no rectangles."""


class InvalidSelectionError(HighlighterError, ValueError):
    """There is no usable text range or drag rectangle to build a highlight from."""


class MissingPageError(HighlighterError, LookupError):
    """A page has no viewport or element yet (not laid out, or out of range)."""

    def __init__(self, page_number: int):
        super().__init__(f"Page {page_number} is not available")
        self.page_number = page_number


class ConsistencyError(HighlighterError, ValueError):
    """Geometry or highlight data breaks an invariant. Indicates caller misuse."""
