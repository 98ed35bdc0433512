"""Full-screen differential renderer.

A frame is a list of lines exactly as wide as the terminal. ``Screen``
remembers the previous frame and only rewrites the rows that changed; a size
change or an explicit ``invalidate`` forces a full repaint.
"""

from __future__ import annotations

import logging

from rester.tui.terminal import Terminal
from rester.tui.utils import extract_segments, pad_to_width, visible_width

logger = logging.getLogger(__name__)

RESET = "\x1b[0m"


def composite_line(base_line: str, overlay_line: str, col: int, overlay_width: int, term_width: int) -> str:
    """Draw *overlay_line* over *base_line* starting at column *col*.

    The base line keeps columns ``[0, col)`` and
    ``[col + overlay_width, term_width)``; the overlay is padded to
    *overlay_width* and fills the gap.
    """
    after_start = col + overlay_width
    after_len = max(0, term_width - after_start)
    before, after = extract_segments(base_line, col, after_start, after_len)

    overlay_line = pad_to_width(overlay_line, overlay_width)
    before_pad = " " * max(0, col - visible_width(before))
    return before + before_pad + RESET + overlay_line + RESET + after


def composite_overlay(
    base: list[str],
    overlay: list[str],
    term_width: int,
    term_height: int,
) -> list[str]:
    """Centre *overlay* on *base* and return the combined frame."""
    if not overlay:
        return base
    overlay_width = min(term_width, max(visible_width(line) for line in overlay))
    overlay = overlay[:term_height]
    top = max(0, (term_height - len(overlay)) // 2)
    left = max(0, (term_width - overlay_width) // 2)

    result = list(base)
    for i, line in enumerate(overlay):
        row = top + i
        if row >= len(result):
            break
        result[row] = composite_line(result[row], line, left, overlay_width, term_width)
    return result


class Screen:
    """Writes frames to a :class:`Terminal`, repainting only changed rows."""

    def __init__(self, terminal: Terminal) -> None:
        self.terminal = terminal
        self._previous_lines: list[str] = []
        self._previous_size: tuple[int, int] = (0, 0)
        self._full_redraw_count = 0

    @property
    def full_redraws(self) -> int:
        return self._full_redraw_count

    @property
    def size(self) -> tuple[int, int]:
        """``(columns, rows)`` of the terminal."""
        return self.terminal.columns, self.terminal.rows

    def invalidate(self) -> None:
        """Forget the previous frame so the next render repaints everything."""
        self._previous_lines = []
        self._previous_size = (0, 0)

    def render(self, lines: list[str]) -> int:
        """Draw *lines* and return how many rows were written."""
        width, height = self.size
        if width <= 0 or height <= 0:
            return 0

        lines = lines[:height]
        lines += [""] * (height - len(lines))

        out: list[str] = []
        full = (width, height) != self._previous_size
        if full:
            self._full_redraw_count += 1
            out.append(RESET + "\x1b[2J")

        written = 0
        for row, line in enumerate(lines):
            if not full and row < len(self._previous_lines) and self._previous_lines[row] == line:
                continue
            out.append(f"\x1b[{row + 1};1H")
            out.append(line)
            out.append(RESET)
            # Erasing at the last column would eat the final cell
            if visible_width(line) < width:
                out.append("\x1b[K")
            written += 1

        if out:
            self.terminal.write("".join(out))

        self._previous_lines = lines
        self._previous_size = (width, height)
        logger.debug("Rendered %d/%d rows (full=%s)", written, height, full)
        return written
