"""TUI components."""

from rester.tui.components.block import Block
from rester.tui.components.paragraph import ScrollableContent, WrappedCache, clamp_scroll, wrap_text
from rester.tui.components.select_list import SelectList
from rester.tui.components.text_area import TextArea

__all__ = [
    "Block",
    "ScrollableContent",
    "SelectList",
    "TextArea",
    "WrappedCache",
    "clamp_scroll",
    "wrap_text",
]
