"""
Text modules for layer rendering.

This subpackage contains modules for:
- CSS font string parsing and font registration
- Greedy word wrap layout inside a bounded box
"""

from .font_manager import (
    FontSpec,
    get_skia_font,
    load_font_data,
    parse_font,
    register_font,
)
from .layout_engine import LinePlacement, layout_text

__all__ = [
    "FontSpec",
    "get_skia_font",
    "load_font_data",
    "parse_font",
    "register_font",
    "LinePlacement",
    "layout_text",
]
