"""
Text selection handler - hit-tests character boxes against a drag.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from ..geometry import from_points, union
from ..types import Point, Rect, SelectableChar

LINE_BUCKET = 10


@dataclass
class SelectionState:
    """Current selection state."""

    start: Optional[Point] = None
    end: Optional[Point] = None
    is_selecting: bool = False
    selected_chars: List[SelectableChar] = field(default_factory=list)


def _box(char: SelectableChar) -> Rect:
    """Character box in scroll-content coordinates."""
    return Rect(
        left=char.x + char.page_offset_x,
        top=char.y + char.page_offset_y,
        width=char.width,
        height=char.height,
        page_number=char.page_number,
    )


def _line_key(char: SelectableChar) -> int:
    return round((char.y + char.page_offset_y) / LINE_BUCKET)


def _intersects(a: Rect, b: Rect) -> bool:
    return a.left < b.right and a.right > b.left and a.top < b.bottom and a.bottom > b.top


class TextSelectionHandler:
    """Turns a pointer drag over character boxes into a text selection.

    Selected lines are reported as client rects, the same shape a browser
    range would give, so the extraction step does not care where they came
    from.
    """

    def __init__(self, on_selection_change: Optional[Callable[[], None]] = None):
        self._state = SelectionState()
        self._selectable_chars: List[SelectableChar] = []
        self._on_selection_change = on_selection_change
        self.enabled = True

    @property
    def selected_chars(self) -> List[SelectableChar]:
        """Currently selected characters."""
        return self._state.selected_chars

    @property
    def is_selecting(self) -> bool:
        """Whether selection is in progress."""
        return self._state.is_selecting

    @property
    def is_collapsed(self) -> bool:
        """Whether nothing is selected."""
        return not self._state.selected_chars

    @property
    def selected_text(self) -> str:
        """Get the currently selected text."""
        if not self._state.selected_chars:
            return ""

        sorted_chars = sorted(
            self._state.selected_chars,
            key=lambda c: (c.page_number, _line_key(c), c.x),
        )

        result = []
        current_line: List[str] = []
        last_char = None

        for char in sorted_chars:
            if last_char is not None and (
                abs(char.y - last_char.y) > char.height * 0.5
                or char.page_number != last_char.page_number
            ):
                result.append("".join(current_line))
                current_line = []
                last_char = None

            if last_char is not None:
                gap = char.x - (last_char.x + last_char.width)
                avg_width = (char.width + last_char.width) / 2
                if gap > avg_width * 0.3 and char.char != " " and current_line[-1] != " ":
                    current_line.append(" ")

            current_line.append(char.char)
            last_char = char

        if current_line:
            result.append("".join(current_line))

        return "\n".join(line.strip() for line in result)

    def set_selectable_chars(self, chars: List[SelectableChar]) -> None:
        """Update the list of selectable characters."""
        self._selectable_chars = chars
        self._state.selected_chars = []

    def start_selection(self, x: float, y: float) -> None:
        """Start a new selection."""
        if not self.enabled:
            return
        self._state = SelectionState(start=(x, y), end=(x, y), is_selecting=True)

    def update_selection(self, x: float, y: float) -> None:
        """Update selection end point."""
        if not self._state.is_selecting:
            return

        self._state.end = (x, y)
        self._update_selected_chars()
        if self._on_selection_change:
            self._on_selection_change()

    def end_selection(self) -> None:
        """End the current selection."""
        self._state.is_selecting = False

    def clear(self) -> None:
        """Clear the current selection."""
        self._state = SelectionState()

    def _update_selected_chars(self) -> None:
        """Update selected characters based on the drag rectangle."""
        if not self._state.start or not self._state.end:
            return

        drag = from_points(self._state.start, self._state.end)
        directly_selected = [c for c in self._selectable_chars if _intersects(drag, _box(c))]

        if not directly_selected:
            self._state.selected_chars = []
            return

        lines = self._group_lines(directly_selected)
        if len(lines) <= 1:
            self._state.selected_chars = directly_selected
            return

        # Multiple lines: extend the first line to its end and the last to its start
        keys = sorted(lines)
        first_key, last_key = keys[0], keys[-1]
        first_x = min(_box(c).left for c in lines[first_key])
        last_x = max(_box(c).right for c in lines[last_key])

        selected = []
        for char in self._selectable_chars:
            key = _line_key(char)
            if key < first_key or key > last_key:
                continue
            box = _box(char)
            if key == first_key and box.left < first_x - 1:
                continue
            if key == last_key and box.right > last_x + 1:
                continue
            selected.append(char)

        self._state.selected_chars = selected

    @staticmethod
    def _group_lines(chars: List[SelectableChar]) -> Dict[int, List[SelectableChar]]:
        lines: Dict[int, List[SelectableChar]] = {}
        for char in chars:
            lines.setdefault(_line_key(char), []).append(char)
        return lines

    def _line_extents(self) -> Dict[int, Tuple[float, float]]:
        extents: Dict[int, Tuple[float, float]] = {}
        for char in self._selectable_chars:
            box = _box(char)
            key = _line_key(char)
            if key in extents:
                lo, hi = extents[key]
                extents[key] = (min(lo, box.left), max(hi, box.right))
            else:
                extents[key] = (box.left, box.right)
        return extents

    def get_client_rects(self) -> List[Rect]:
        """One rect per selected line, in scroll-content coordinates."""
        chars = self._state.selected_chars
        if not chars:
            return []

        lines = self._group_lines(chars)
        keys = sorted(lines)
        extents = self._line_extents()

        rects = []
        for i, key in enumerate(keys):
            line_box = union([_box(c) for c in lines[key]])
            line_start, line_end = extents.get(key, (line_box.left, line_box.right))

            left = line_box.left if i == 0 or len(keys) == 1 else line_start
            right = line_box.right if i == len(keys) - 1 or len(keys) == 1 else line_end

            rects.append(
                Rect(
                    left=left,
                    top=line_box.top,
                    width=right - left,
                    height=line_box.height,
                    page_number=line_box.page_number,
                )
            )

        return rects

    def pages(self) -> List[int]:
        """Page numbers the selection touches, ascending."""
        return sorted({c.page_number for c in self._state.selected_chars})
