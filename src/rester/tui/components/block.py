"""Bordered box with a title, drawn around already-rendered inner lines."""

from __future__ import annotations

from dataclasses import dataclass

from rester.tui.utils import pad_to_width, truncate_to_width, visible_width

BOLD = "\x1b[1m"
RESET = "\x1b[0m"


@dataclass(frozen=True)
class BorderChars:
    top_left: str
    top_right: str
    bottom_left: str
    bottom_right: str
    horizontal: str
    vertical: str


PLAIN = BorderChars("┌", "┐", "└", "┘", "─", "│")
DOUBLE = BorderChars("╔", "╗", "╚", "╝", "═", "║")


class Block:
    """A titled frame. The active block is drawn with a double border."""

    def __init__(self, title: str = "", active: bool = False) -> None:
        self.title = title
        self.active = active

    @staticmethod
    def inner_size(width: int, height: int) -> tuple[int, int]:
        return max(0, width - 2), max(0, height - 2)

    def render(self, width: int, height: int, inner: list[str]) -> list[str]:
        """Frame *inner* (already ``inner_size`` wide) into *height* lines."""
        if width < 2 or height < 2:
            return [" " * max(0, width)] * max(0, height)

        chars = DOUBLE if self.active else PLAIN
        inner_width, inner_height = self.inner_size(width, height)

        top = self._title_bar(chars, inner_width)
        if self.active:
            top = BOLD + top + RESET
        lines = [top]

        for i in range(inner_height):
            body = inner[i] if i < len(inner) else ""
            if visible_width(body) != inner_width:
                body = pad_to_width(body, inner_width)
            lines.append(chars.vertical + body + chars.vertical)

        lines.append(chars.bottom_left + chars.horizontal * inner_width + chars.bottom_right)
        return lines

    def _title_bar(self, chars: BorderChars, inner_width: int) -> str:
        title = truncate_to_width(self.title, inner_width, ellipsis="…") if self.title else ""
        fill = chars.horizontal * (inner_width - visible_width(title))
        return chars.top_left + title + fill + chars.top_right
