"""Minimal full-screen terminal UI toolkit used by rester."""

from rester.tui.components import (
    Block,
    ScrollableContent,
    SelectList,
    TextArea,
    WrappedCache,
    clamp_scroll,
    wrap_text,
)
from rester.tui.keys import KeyId, is_key_release, matches_key, parse_key, parse_key_id
from rester.tui.screen import Screen, composite_overlay
from rester.tui.stdin_buffer import StdinBuffer
from rester.tui.terminal import ProcessTerminal, Terminal
from rester.tui.text_buffer import EditBuffer, EditCommand, Row, row_topology
from rester.tui.utils import sanitize_text, truncate_to_width, visible_width

__all__ = [
    "Block",
    "EditBuffer",
    "EditCommand",
    "KeyId",
    "ProcessTerminal",
    "Row",
    "Screen",
    "ScrollableContent",
    "SelectList",
    "StdinBuffer",
    "Terminal",
    "TextArea",
    "WrappedCache",
    "clamp_scroll",
    "composite_overlay",
    "is_key_release",
    "matches_key",
    "parse_key",
    "parse_key_id",
    "row_topology",
    "sanitize_text",
    "truncate_to_width",
    "visible_width",
    "wrap_text",
]
