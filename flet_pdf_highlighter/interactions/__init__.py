"""
User interaction handlers - text selection, area selection, debouncing.
"""

from .area_selection import AreaSelectionHandler, AreaSelectionPhase
from .debounce import Debouncer
from .selection import TextSelectionHandler

__all__ = [
    "AreaSelectionHandler",
    "AreaSelectionPhase",
    "Debouncer",
    "TextSelectionHandler",
]
