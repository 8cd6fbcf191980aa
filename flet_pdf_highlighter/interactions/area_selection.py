"""
Area selection handler - tracks a pointer drag into a rectangle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from ..geometry import MIN_SELECTION_SIZE, from_points, meets_minimum_size
from ..types import Point, Rect

logger = logging.getLogger(__name__)


class AreaSelectionPhase(Enum):
    """Phases of an area selection."""

    IDLE = "idle"
    DRAGGING = "dragging"
    LOCKED = "locked"


@dataclass
class AreaSelectionState:
    """Current area selection state."""

    phase: AreaSelectionPhase = AreaSelectionPhase.IDLE
    anchor: Optional[Point] = None
    current: Optional[Point] = None
    start_target: Any = None


class AreaSelectionHandler:
    """Handles area (rectangle) selection logic.

    The handler only knows coordinates. Whether a drag may start, and whether
    a target counts as inside the selectable surface, is decided by the
    caller-supplied predicates.

    Args:
        is_enabled: Accepts or rejects the pointer-down event
        is_eligible: Whether a pointer target lies within the selectable surface
        on_selection: Called with (start_target, rect) when a drag finalizes
        on_change: Called with the new visibility of the drag rectangle
        on_text_selection_toggle: Called with False while dragging, True when idle again
    """

    def __init__(
        self,
        is_enabled: Callable[[Any], bool],
        is_eligible: Callable[[Any], bool],
        on_selection: Callable[[Any, Rect], None],
        on_change: Optional[Callable[[bool], None]] = None,
        on_text_selection_toggle: Optional[Callable[[bool], None]] = None,
        min_width: float = MIN_SELECTION_SIZE,
        min_height: float = MIN_SELECTION_SIZE,
    ):
        self._state = AreaSelectionState()
        self._is_enabled = is_enabled
        self._is_eligible = is_eligible
        self._on_selection = on_selection
        self._on_change = on_change
        self._on_text_selection_toggle = on_text_selection_toggle
        self._min_width = min_width
        self._min_height = min_height
        self._visible = False

    @property
    def phase(self) -> AreaSelectionPhase:
        """Current phase."""
        return self._state.phase

    @property
    def is_visible(self) -> bool:
        """Whether there is a rectangle to draw."""
        return self._state.anchor is not None and self._state.current is not None

    @property
    def current_rect(self) -> Optional[Rect]:
        """The rectangle from anchor to current point, normalized."""
        if not self.is_visible:
            return None
        return from_points(self._state.anchor, self._state.current)

    def pointer_down(self, point: Point, target: Any = None, event: Any = None) -> bool:
        """Start a drag at ``point``.

        Any previous selection, locked or not, is discarded first.

        Returns:
            True if a drag started
        """
        self.reset()
        if not self._is_enabled(event) or not self._is_eligible(target):
            return False

        self._state = AreaSelectionState(
            phase=AreaSelectionPhase.DRAGGING,
            anchor=point,
            current=None,
            start_target=target,
        )
        self._toggle_text_selection(False)
        self._notify_change()
        return True

    def pointer_move(self, point: Point) -> None:
        """Extend the drag to ``point``."""
        if self._state.phase != AreaSelectionPhase.DRAGGING:
            return
        self._state.current = point
        self._notify_change()

    def pointer_up(self, point: Point, target: Any = None) -> Optional[Rect]:
        """Finish the drag at ``point``.

        Returns:
            The finalized rect, or None if the drag was discarded
        """
        if self._state.phase != AreaSelectionPhase.DRAGGING:
            return None

        rect = from_points(self._state.anchor, point)
        if not self._is_eligible(target) or not meets_minimum_size(
            rect, self._min_width, self._min_height
        ):
            logger.debug("Discarding area selection %s", rect)
            self.reset()
            return None

        self._state.current = point
        self._state.phase = AreaSelectionPhase.LOCKED
        self._notify_change()
        self._on_selection(self._state.start_target, rect)
        return rect

    def reset(self) -> None:
        """Return to idle, restoring text selection if it was suppressed."""
        was_active = self._state.phase != AreaSelectionPhase.IDLE
        self._state = AreaSelectionState()
        if was_active:
            self._toggle_text_selection(True)
        self._notify_change()

    def _toggle_text_selection(self, enabled: bool) -> None:
        if self._on_text_selection_toggle:
            self._on_text_selection_toggle(enabled)

    def _notify_change(self) -> None:
        visible = self.is_visible
        if visible == self._visible:
            return
        self._visible = visible
        if self._on_change:
            self._on_change(visible)
