"""
Highlighter - Main interactive component.

Composes a rendering backend, highlight layers and selection handling into a
single Flet control.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Union

import flet as ft

from .backends.base import PageElement, RenderingBackend
from .coordinates import scaled_position_to_viewport, scaled_to_viewport
from .errors import InvalidSelectionError, MissingPageError
from .extraction import extract_area_selection, extract_text_selection
from .highlights import group_by_page, validate_highlight, viewport_highlights_for_page
from .interactions.area_selection import AreaSelectionHandler, AreaSelectionPhase
from .interactions.debounce import Debouncer
from .interactions.selection import TextSelectionHandler
from .positioning import compute_popup_position
from .rendering.layers import build_area_selection_rect, build_highlight_layer
from .types import Highlight, Point, Position, Rect, ViewportHighlight

logger = logging.getLogger(__name__)

SELECTION_DEBOUNCE_SECONDS = 0.5
SCROLL_MARGIN = 10

_CONTAINER = "container"

SelectionColor = Union[str, Callable[[bool], str]]


class Highlighter:
    """
    PDF highlighter component.

    Usage:
        from flet_pdf_highlighter import Highlighter, PyMuPDFBackend

        backend = PyMuPDFBackend("/path/to/file.pdf")
        highlighter = Highlighter(backend, highlights=stored, on_selection=save_draft)
        page.add(highlighter.control)
        highlighter.attach(page)
    """

    def __init__(
        self,
        backend: RenderingBackend,
        highlights: Optional[Iterable[Highlight]] = None,
        enable_area_selection: Union[bool, Callable[[Any], bool]] = False,
        use_pdf_coordinates: bool = False,
        bgcolor: str = "#ffffff",
        selection_color: SelectionColor = "#fce897",
        scroll_to_color: str = "#ff6467",
        text_selection_color: str = "#3390ff",
        selection_debounce: float = SELECTION_DEBOUNCE_SECONDS,
        popup_builder: Optional[Callable[["Highlighter", Highlight], ft.Control]] = None,
        popup_size: Optional[Tuple[float, float]] = (200, 48),
        on_selection: Optional[Callable[[Highlight], None]] = None,
        on_area_selection_change: Optional[Callable[[bool], None]] = None,
        on_scroll_to_complete: Optional[Callable[[Highlight], None]] = None,
    ):
        self._backend = backend
        self._highlights: List[Highlight] = []
        self._enable_area_selection = enable_area_selection
        self._use_pdf_coordinates = use_pdf_coordinates
        self._bgcolor = bgcolor
        self._selection_color = selection_color
        self._scroll_to_color = scroll_to_color
        self._text_selection_color = text_selection_color
        self._popup_builder = popup_builder
        self._popup_size = popup_size
        self._on_selection = on_selection
        self._on_area_selection_change = on_area_selection_change
        self._on_scroll_to_complete = on_scroll_to_complete

        # Highlight state
        self._ghost: Optional[Highlight] = None
        self._current: Optional[Highlight] = None
        self._viewport_position: Optional[Position] = None
        self._scroll_id: Optional[str] = None
        self._area_selection_in_progress = False
        self._last_pointer: Optional[Point] = None

        # Components
        self._selection_changed = Debouncer(self._handle_selection_change, selection_debounce)
        self._text = TextSelectionHandler(on_selection_change=self._selection_changed)
        self._area = AreaSelectionHandler(
            is_enabled=self._is_area_selection_enabled,
            is_eligible=lambda target: target is not None,
            on_selection=self._on_area_selection,
            on_change=self._on_area_change,
            on_text_selection_toggle=self._toggle_text_selection,
        )

        # UI state
        self._page: Optional[ft.Page] = None
        self._previous_keyboard_handler: Optional[Callable] = None
        self._wrapper: Optional[ft.Container] = None
        self._scroller: Optional[ft.Column] = None
        self._content: Optional[ft.Stack] = None
        self._content_with_overlay: Optional[ft.Stack] = None
        self._layers: Dict[int, ft.Stack] = {}
        self._text_overlay: Optional[ft.Container] = None
        self._area_overlay: Optional[ft.Container] = None
        self._popup: Optional[ft.Container] = None

        if highlights is not None:
            self.highlights = list(highlights)

        self._build()

    # Properties

    @property
    def control(self) -> ft.Control:
        """The Flet control to add to a page."""
        return self._wrapper

    @property
    def backend(self) -> RenderingBackend:
        return self._backend

    @property
    def highlights(self) -> List[Highlight]:
        """Highlights being displayed."""
        return list(self._highlights)

    @highlights.setter
    def highlights(self, value: List[Highlight]):
        for highlight in value:
            validate_highlight(highlight)
        self._highlights = list(value)
        self._render_layers()

    @property
    def current_highlight(self) -> Optional[Highlight]:
        """Highlight the popup is showing: a fresh draft or a hovered highlight."""
        return self._current

    @property
    def viewport_position(self) -> Optional[Position]:
        return self._viewport_position

    @property
    def ghost_highlight(self) -> Optional[Highlight]:
        """Draft highlight drawn alongside the stored ones."""
        return self._ghost

    @property
    def scroll_id(self) -> Optional[str]:
        """Id of the highlight last scrolled to."""
        return self._scroll_id

    @property
    def area_selection_phase(self) -> AreaSelectionPhase:
        return self._area.phase

    @property
    def enable_area_selection(self) -> Union[bool, Callable[[Any], bool]]:
        return self._enable_area_selection

    @enable_area_selection.setter
    def enable_area_selection(self, value: Union[bool, Callable[[Any], bool]]):
        self._enable_area_selection = value

    @property
    def scale(self) -> float:
        """Zoom scale."""
        return self._backend.scale

    @scale.setter
    def scale(self, value: float):
        self._backend.scale = max(0.1, min(5.0, value))
        # Attached highlighters refresh from the backend's "pagerendered" event
        if self._page is None:
            self._refresh()

    def zoom_in(self, factor: float = 1.25):
        """Increase zoom."""
        self.scale = self.scale * factor

    def zoom_out(self, factor: float = 1.25):
        """Decrease zoom."""
        self.scale = self.scale / factor

    def layer_controls(self, page_number: int) -> List[ft.Control]:
        """Controls currently drawn on a page's highlight layer."""
        layer = self._layers.get(page_number)
        return list(layer.controls) if layer else []

    # Lifecycle

    def attach(self, page: ft.Page) -> None:
        """Start listening for keyboard and backend render events."""
        if self._page is not None:
            self.detach()
        self._page = page
        self._previous_keyboard_handler = page.on_keyboard_event
        page.on_keyboard_event = self._on_keyboard
        self._backend.add_listener("pagerendered", self._refresh)

    def detach(self) -> None:
        """Remove every listener added by :meth:`attach`."""
        if self._page is None:
            return
        if self._page.on_keyboard_event == self._on_keyboard:
            self._page.on_keyboard_event = self._previous_keyboard_handler
        self._backend.remove_listener("pagerendered", self._refresh)
        self._selection_changed.cancel()
        self._page = None
        self._previous_keyboard_handler = None

    # Actions

    def show_ghost(self) -> None:
        """Keep drawing the current draft while the user works on it."""
        if self._current is None:
            return
        self._ghost = self._current
        self._text.clear()
        self._update_text_overlay()
        self._render_layers()

    def clear(self) -> None:
        """Cancel any pending or in-progress highlight."""
        self._selection_changed.cancel()
        self._area.reset()
        self._text.clear()
        self._clear_state()
        self._update_area_overlay()
        self._update_text_overlay()

    def scroll_to(self, highlight: Highlight) -> None:
        """Scroll so the highlight sits just below the top of the view."""
        position = highlight.position
        page_number = position.bounding_rect.page_number or position.page_number
        try:
            viewport = self._backend.get_viewport(page_number)
            rect = scaled_to_viewport(
                position.bounding_rect, viewport, position.use_pdf_coordinates
            )
            destination = viewport.to_pdf_point(0, rect.top - SCROLL_MARGIN)
            offset = self._backend.scroll_page_into_view(page_number, destination)
        except MissingPageError as e:
            logger.warning("Cannot scroll to highlight %r: %s", highlight.id, e)
            return

        self._scroll_id = highlight.id
        if self._scroller and self._scroller.page:
            self._scroller.scroll_to(offset=offset, duration=300)
        self._render_layers()

        if self._on_scroll_to_complete:
            self._on_scroll_to_complete(highlight)

    def set_popup_size(self, width: float, height: float) -> None:
        """Report the measured popup size so it can be placed."""
        self._popup_size = (width, height)
        self._show_popup()

    # Private methods

    def _build(self):
        """Build the highlighter UI."""
        self._content = self._build_content()

        self._text_overlay = ft.Container(
            content=ft.Stack(controls=[]),
            left=0,
            top=0,
        )
        self._area_overlay = build_area_selection_rect(None)
        self._popup = self._create_popup()

        self._content_with_overlay = ft.Stack(
            controls=[
                self._content,
                self._text_overlay,
                self._area_overlay,
                self._popup,
            ],
            width=self._content.width,
            height=self._content.height,
        )

        gesture_detector = ft.GestureDetector(
            content=self._content_with_overlay,
            on_pan_start=self._on_pan_start,
            on_pan_update=self._on_pan_update,
            on_pan_end=self._on_pan_end,
            on_tap_down=self._on_tap,
            drag_interval=10,
        )

        self._scroller = ft.Column(
            controls=[gesture_detector],
            scroll=ft.ScrollMode.AUTO,
            expand=True,
            on_scroll=self._on_scroll,
        )
        self._wrapper = ft.Container(content=self._scroller, expand=True)

        self._load_selectable_chars()
        self._render_layers()

    def _build_content(self) -> ft.Stack:
        """Build the page stack with one highlight layer per page."""
        self._layers = {}
        pages = []

        for element in self._backend.page_elements():
            layer = ft.Stack(controls=[], width=element.width, height=element.height)
            self._layers[element.page_number] = layer
            pages.append(self._create_page_container(element, layer))

        width, height = self._backend.content_size()
        return ft.Stack(controls=pages, width=width, height=height)

    def _create_page_container(self, element: PageElement, layer: ft.Stack) -> ft.Container:
        """Create a container for a single page."""
        image = ft.Image(
            src_base64=self._backend.render_page(element.page_number),
            width=element.width,
            height=element.height,
            fit=ft.ImageFit.FILL,
        )
        return ft.Container(
            content=ft.Stack(
                controls=[image, layer],
                width=element.width,
                height=element.height,
            ),
            left=element.offset_left,
            top=element.offset_top,
            width=element.width,
            height=element.height,
            bgcolor=self._bgcolor,
            border_radius=2,
            shadow=ft.BoxShadow(
                spread_radius=0,
                blur_radius=20,
                color=ft.Colors.with_opacity(0.3, "#000000"),
            ),
        )

    def _load_selectable_chars(self):
        chars = []
        for page_number in range(1, self._backend.page_count + 1):
            try:
                chars.extend(self._backend.get_selectable_chars(page_number))
            except MissingPageError:
                continue
        self._text.set_selectable_chars(chars)

    def _refresh(self, *args):
        """Rebuild after the layout changed (zoom, re-render)."""
        if not self._wrapper:
            return

        self._selection_changed.cancel()
        self._area.reset()
        self._text.clear()

        self._content = self._build_content()
        if self._content_with_overlay:
            self._content_with_overlay.controls[0] = self._content
            self._content_with_overlay.width = self._content.width
            self._content_with_overlay.height = self._content.height

        self._load_selectable_chars()
        self._update_text_overlay()
        self._update_area_overlay()

        if self._current is not None:
            try:
                self._viewport_position = scaled_position_to_viewport(
                    self._current.position, self._backend
                )
            except MissingPageError:
                self._viewport_position = None
        self._show_popup()
        self._render_layers()

        if self._wrapper.page:
            self._wrapper.update()

    def _render_layers(self):
        """Redraw every page's highlights against the live layout."""
        if not self._layers:
            return

        grouped = group_by_page(self._highlights, self._ghost)
        for page_number, layer in self._layers.items():
            controls = []
            for highlight in viewport_highlights_for_page(grouped, page_number, self._backend):
                controls.extend(
                    build_highlight_layer(
                        highlight, self._color_for(highlight), self._on_layer_hover
                    )
                )
            layer.controls = controls
            if layer.page:
                layer.update()

    def _color_for(self, highlight: ViewportHighlight) -> str:
        is_scroll_to = highlight.id is not None and highlight.id == self._scroll_id
        if callable(self._selection_color):
            return self._selection_color(is_scroll_to)
        if is_scroll_to:
            return self._scroll_to_color
        return self._selection_color

    def _target_at(self, x: float, y: float) -> Any:
        """Page under a point, the content itself, or None outside it."""
        element = self._backend.page_at_point(x, y)
        if element is not None:
            return element
        width, height = self._backend.content_size()
        if 0 <= x <= width and 0 <= y <= height:
            return _CONTAINER
        return None

    def _is_area_selection_enabled(self, event: Any) -> bool:
        enabled = self._enable_area_selection
        if callable(enabled):
            enabled = enabled(event)
        if not enabled or event is None:
            return False
        return self._backend.page_at_point(event.local_x, event.local_y) is not None

    # Event handlers

    def _on_keyboard(self, e: ft.KeyboardEvent):
        if e.key == "Escape":
            self.clear()
        if self._previous_keyboard_handler:
            self._previous_keyboard_handler(e)

    def _on_scroll(self, e: ft.OnScrollEvent):
        self._backend.update_scroll(e.pixels, e.viewport_dimension)

    def _on_tap(self, e: ft.TapEvent):
        if self._popup_contains(e.local_x, e.local_y):
            return
        self.clear()

    def _on_pan_start(self, e: ft.DragStartEvent):
        point = (e.local_x, e.local_y)
        self._last_pointer = point
        if self._popup_contains(*point):
            return

        self._clear_state()
        if self._area.pointer_down(point, self._target_at(*point), e):
            self._update_area_overlay()
            return

        self._text.start_selection(*point)

    def _on_pan_update(self, e: ft.DragUpdateEvent):
        point = (e.local_x, e.local_y)
        self._last_pointer = point

        if self._area.phase == AreaSelectionPhase.DRAGGING:
            self._area.pointer_move(point)
            self._update_area_overlay()
        elif self._area.phase == AreaSelectionPhase.IDLE:
            self._text.update_selection(*point)
            self._update_text_overlay()

    def _on_pan_end(self, e: ft.DragEndEvent):
        if self._area.phase == AreaSelectionPhase.DRAGGING and self._last_pointer:
            self._area.pointer_up(self._last_pointer, self._target_at(*self._last_pointer))
            self._update_area_overlay()
        else:
            self._text.end_selection()

    def _on_layer_hover(self, highlight: ViewportHighlight):
        in_progress = (
            not self._text.is_collapsed
            or self._ghost is not None
            or self._area_selection_in_progress
        )
        if in_progress:
            return
        if self._current is not None and highlight.id == self._current.id:
            return

        stored = next((h for h in self._highlights if h.id == highlight.id), None)
        if stored is None:
            return
        self._clear_state()
        self._change_highlight(highlight.position, stored)

    def _on_area_change(self, visible: bool):
        self._area_selection_in_progress = visible
        if self._on_area_selection_change:
            self._on_area_selection_change(visible)

    def _toggle_text_selection(self, enabled: bool):
        self._text.enabled = enabled
        if not enabled:
            self._text.clear()
            self._update_text_overlay()

    # Selection

    def _handle_selection_change(self):
        """Build a draft from the current text selection."""
        if self._text.is_collapsed:
            return

        try:
            pages = [self._backend.get_page_element(n) for n in self._text.pages()]
            result = extract_text_selection(
                self._text.get_client_rects(),
                pages,
                self._text.selected_text,
                self._backend,
                self._use_pdf_coordinates,
            )
        except (InvalidSelectionError, MissingPageError) as e:
            logger.debug("Ignoring text selection: %s", e)
            return

        self._change_highlight(result.viewport_position, result.highlight)
        if self._on_selection:
            self._on_selection(result.highlight)

    def _on_area_selection(self, start_target: Any, rect: Rect):
        try:
            result = extract_area_selection(
                rect, start_target, self._backend, self._use_pdf_coordinates
            )
        except (InvalidSelectionError, MissingPageError) as e:
            logger.debug("Ignoring area selection: %s", e)
            self._area.reset()
            self._update_area_overlay()
            return

        self._change_highlight(result.viewport_position, result.highlight)
        if self._on_selection:
            self._on_selection(result.highlight)

    def _change_highlight(self, viewport_position: Position, highlight: Highlight):
        self._viewport_position = viewport_position
        self._current = highlight
        self._show_popup()

    def _clear_state(self):
        had_ghost = self._ghost is not None
        self._ghost = None
        self._current = None
        self._viewport_position = None
        self._hide_popup()
        if had_ghost:
            self._render_layers()

    # Popup

    def _create_popup(self) -> ft.Container:
        """Create the popup shell; content is filled in per highlight."""
        return ft.Container(
            content=None,
            bgcolor="#18181b",
            border=ft.border.all(1, "rgba(255,255,255,0.1)"),
            border_radius=12,
            padding=ft.padding.symmetric(horizontal=6, vertical=4),
            shadow=ft.BoxShadow(
                spread_radius=0,
                blur_radius=20,
                color=ft.Colors.with_opacity(0.5, "#000000"),
                offset=ft.Offset(0, 4),
            ),
            visible=False,
            left=0,
            top=0,
        )

    def _build_popup_content(self, highlight: Highlight) -> ft.Control:
        if self._popup_builder:
            return self._popup_builder(self, highlight)

        if highlight.id is None:

            def action_btn(icon: str, tooltip: str, on_click, color: str):
                return ft.Container(
                    content=ft.Icon(icon, size=20, color=color),
                    width=40,
                    height=40,
                    border_radius=8,
                    alignment=ft.alignment.center,
                    on_click=on_click,
                    tooltip=tooltip,
                )

            return ft.Row(
                controls=[
                    action_btn(ft.Icons.EDIT, "Highlight", lambda e: self.show_ghost(), "#facc15"),
                    action_btn(ft.Icons.CLOSE, "Cancel", lambda e: self.clear(), "#a1a1a1"),
                ],
                spacing=2,
            )

        if highlight.comment:
            text = " ".join(p for p in (highlight.comment.emoji, highlight.comment.text) if p)
        else:
            text = highlight.content.text or ""
        return ft.Text(text, size=12, color="#e4e4e7", max_lines=3)

    def _show_popup(self):
        """Show popup next to the current highlight."""
        if not self._popup:
            return
        if self._current is None or self._viewport_position is None:
            self._hide_popup()
            return

        position = self._viewport_position
        page_number = position.bounding_rect.page_number or position.page_number
        try:
            element = self._backend.get_page_element(page_number)
        except MissingPageError:
            self._hide_popup()
            return

        placement = compute_popup_position(
            position.bounding_rect,
            element,
            self._popup_size,
            self._backend.container_bounds.top,
        )
        self._popup.content = self._build_popup_content(self._current)
        self._popup.left = placement.left
        self._popup.top = placement.top
        self._popup.visible = placement.visible

        if self._popup.page:
            self._popup.update()

    def _hide_popup(self):
        """Hide popup."""
        if self._popup:
            self._popup.visible = False
            if self._popup.page:
                self._popup.update()

    def _popup_contains(self, x: float, y: float) -> bool:
        if not self._popup or not self._popup.visible or not self._popup_size:
            return False
        width, height = self._popup_size
        left, top = self._popup.left or 0, self._popup.top or 0
        return left <= x <= left + width and top <= y <= top + height

    # Overlays

    def _update_text_overlay(self):
        """Update the live text selection boxes."""
        if not self._text_overlay or not self._text_overlay.content:
            return

        self._text_overlay.content.controls = [
            ft.Container(
                left=r.left,
                top=r.top,
                width=r.width,
                height=r.height,
                bgcolor=ft.Colors.with_opacity(0.3, self._text_selection_color),
            )
            for r in self._text.get_client_rects()
        ]
        if self._text_overlay.page:
            self._text_overlay.update()

    def _update_area_overlay(self):
        """Update the rubber band rectangle."""
        if not self._area_overlay:
            return

        rect = self._area.current_rect
        self._area_overlay.visible = rect is not None
        if rect is not None:
            self._area_overlay.left = rect.left
            self._area_overlay.top = rect.top
            self._area_overlay.width = rect.width
            self._area_overlay.height = rect.height
        if self._area_overlay.page:
            self._area_overlay.update()
