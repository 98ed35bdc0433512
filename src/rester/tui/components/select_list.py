"""Vertical list with a wrap-around selection cursor."""

from __future__ import annotations

import re

from rester.tui.utils import pad_to_width, truncate_to_width


def _normalize_to_single_line(text: str) -> str:
    return re.sub(r"[\r\n]+", " ", text).strip()


class SelectList:
    """List of labels with one selected entry.

    Moving past either end wraps around. The visible window follows the
    selection when there are more items than rows.
    """

    def __init__(self, items: list[str] | None = None) -> None:
        self._items: list[str] = list(items or [])
        self.selected_index = 0

    @property
    def items(self) -> list[str]:
        return self._items

    def set_items(self, items: list[str]) -> None:
        self._items = list(items)
        self.set_selected_index(self.selected_index)

    def set_selected_index(self, index: int) -> None:
        self.selected_index = max(0, min(index, len(self._items) - 1))

    def selected(self) -> str | None:
        if not self._items:
            return None
        return self._items[self.selected_index]

    def move_up(self) -> None:
        if self._items:
            self.selected_index = (self.selected_index - 1) % len(self._items)

    def move_down(self) -> None:
        if self._items:
            self.selected_index = (self.selected_index + 1) % len(self._items)

    def render(self, width: int, height: int) -> list[str]:
        if width <= 0 or height <= 0:
            return []
        if not self._items:
            return [pad_to_width("  (no saved requests)", width)]

        start = max(0, min(self.selected_index - height // 2, len(self._items) - height))
        lines: list[str] = []
        for i in range(start, min(start + height, len(self._items))):
            label = _normalize_to_single_line(self._items[i])
            if i == self.selected_index:
                text = truncate_to_width(f"→ {label}", width, ellipsis="…")
                lines.append("\x1b[7m" + pad_to_width(text, width) + "\x1b[27m")
            else:
                lines.append(pad_to_width(truncate_to_width(f"  {label}", width, ellipsis="…"), width))
        return lines
