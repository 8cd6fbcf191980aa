"""
Tests for the area selection state machine.

Run with: pytest tests/test_area_selection.py -v
"""
from flet_pdf_highlighter.interactions.area_selection import (
    AreaSelectionHandler,
    AreaSelectionPhase,
)
from flet_pdf_highlighter.types import Rect

PAGE = object()


class Recorder:
    """Collects handler callbacks."""

    def __init__(self, enabled=True):
        self.enabled = enabled
        self.selections = []
        self.changes = []
        self.toggles = []

    def handler(self, **kwargs):
        return AreaSelectionHandler(
            is_enabled=lambda event: self.enabled,
            is_eligible=lambda target: target is not None,
            on_selection=lambda target, rect: self.selections.append((target, rect)),
            on_change=self.changes.append,
            on_text_selection_toggle=self.toggles.append,
            **kwargs,
        )


class TestTransitions:
    """Tests for IDLE -> DRAGGING -> LOCKED."""

    def setup_method(self):
        self.recorder = Recorder()
        self.handler = self.recorder.handler()

    def test_full_drag(self):
        assert self.handler.pointer_down((50, 50), PAGE)
        assert self.handler.phase == AreaSelectionPhase.DRAGGING
        assert not self.handler.is_visible

        self.handler.pointer_move((30, 30))
        assert self.handler.current_rect == Rect(30, 30, 20, 20)

        rect = self.handler.pointer_up((10, 10), PAGE)
        assert rect == Rect(10, 10, 40, 40)
        assert self.handler.phase == AreaSelectionPhase.LOCKED
        assert self.recorder.selections == [(PAGE, Rect(10, 10, 40, 40))]

    def test_disabled_does_not_start(self):
        self.recorder.enabled = False
        assert not self.handler.pointer_down((50, 50), PAGE)
        assert self.handler.phase == AreaSelectionPhase.IDLE
        assert self.recorder.toggles == []

    def test_ineligible_target_does_not_start(self):
        assert not self.handler.pointer_down((50, 50), None)
        assert self.handler.phase == AreaSelectionPhase.IDLE

    def test_move_ignored_when_idle(self):
        self.handler.pointer_move((10, 10))
        assert self.handler.current_rect is None
        assert self.recorder.changes == []

    def test_up_ignored_when_idle(self):
        assert self.handler.pointer_up((10, 10), PAGE) is None
        assert self.recorder.selections == []

    def test_too_small_discarded(self):
        """A click without a real drag never produces a selection."""
        self.handler.pointer_down((50, 50), PAGE)
        self.handler.pointer_move((50.5, 50.5))
        assert self.handler.pointer_up((50.5, 50.5), PAGE) is None
        assert self.handler.phase == AreaSelectionPhase.IDLE
        assert self.recorder.selections == []

    def test_release_outside_discarded(self):
        self.handler.pointer_down((50, 50), PAGE)
        self.handler.pointer_move((10, 10))
        assert self.handler.pointer_up((10, 10), None) is None
        assert self.handler.phase == AreaSelectionPhase.IDLE

    def test_custom_minimum_size(self):
        handler = self.recorder.handler(min_width=20, min_height=20)
        handler.pointer_down((0, 0), PAGE)
        assert handler.pointer_up((10, 10), PAGE) is None

    def test_pointer_down_while_locked_starts_over(self):
        self.handler.pointer_down((50, 50), PAGE)
        self.handler.pointer_move((10, 10))
        self.handler.pointer_up((10, 10), PAGE)

        assert self.handler.pointer_down((100, 100), PAGE)
        assert self.handler.phase == AreaSelectionPhase.DRAGGING
        assert self.handler.current_rect is None


class TestCallbacks:
    """Tests for visibility and text selection notifications."""

    def setup_method(self):
        self.recorder = Recorder()
        self.handler = self.recorder.handler()

    def test_visibility_reported_on_change_only(self):
        self.handler.pointer_down((50, 50), PAGE)
        self.handler.pointer_move((40, 40))
        self.handler.pointer_move((30, 30))
        self.handler.pointer_up((10, 10), PAGE)
        self.handler.reset()
        assert self.recorder.changes == [True, False]

    def test_text_selection_suppressed_while_active(self):
        self.handler.pointer_down((50, 50), PAGE)
        assert self.recorder.toggles == [False]
        self.handler.pointer_move((10, 10))
        self.handler.pointer_up((10, 10), PAGE)
        assert self.recorder.toggles == [False]
        self.handler.reset()
        assert self.recorder.toggles == [False, True]

    def test_restart_restores_then_suppresses(self):
        self.handler.pointer_down((50, 50), PAGE)
        self.handler.pointer_move((10, 10))
        self.handler.pointer_up((10, 10), PAGE)
        self.handler.pointer_down((100, 100), PAGE)
        assert self.recorder.toggles == [False, True, False]
        assert self.recorder.changes == [True, False]

    def test_reset_when_idle_is_quiet(self):
        self.handler.reset()
        assert self.recorder.toggles == []
        assert self.recorder.changes == []
