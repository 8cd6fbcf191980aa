"""
Rendering - highlight layers as Flet controls.
"""

from .layers import build_area_selection_rect, build_highlight_layer

__all__ = ["build_area_selection_rect", "build_highlight_layer"]
