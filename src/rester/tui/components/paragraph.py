"""Read-only scrollable text pane with a memoised word-wrap layout."""

from __future__ import annotations

from dataclasses import dataclass

from rester.tui.utils import pad_to_width, slice_columns, wrap_line


@dataclass(frozen=True)
class WrappedCache:
    """Word-wrapped layout of one content version at one width."""

    version: int
    width: int
    wrapped_text: str
    line_count: int
    rows: tuple[str, ...]


def _wrap_rows(text: str, width: int) -> list[str]:
    if width <= 0:
        return text.split("\n")
    rows: list[str] = []
    for line in text.split("\n"):
        rows.extend(wrap_line(line, width))
    return rows


def wrap_text(text: str, width: int) -> tuple[str, int]:
    """Word-wrap *text* to *width* cells.

    Returns the wrapped text and the number of line breaks it contains.
    A non-positive width leaves the text untouched.
    """
    if width <= 0:
        return text, text.count("\n")
    rows = _wrap_rows(text, width)
    return "\n".join(rows), len(rows) - 1


def clamp_scroll(requested: int, line_count: int, viewport_height: int) -> int:
    """Clamp a scroll offset to ``[0, max(0, line_count - viewport_height + 1)]``."""
    limit = max(0, line_count - viewport_height + 1)
    return max(0, min(requested, limit))


class ScrollableContent:
    """Text content plus a scroll offset.

    Every setter bumps ``version``, which invalidates the wrap cache; the
    cache is otherwise reused for as long as the width stays the same.
    ``builds`` counts how many times the layout was actually recomputed.
    """

    def __init__(self, text: str = "") -> None:
        self._text = text
        self._version = 0
        self._cache: WrappedCache | None = None
        self.scroll = 0
        self.builds = 0
        self._viewport_height = 1

    @property
    def text(self) -> str:
        return self._text

    @property
    def version(self) -> int:
        return self._version

    def is_empty(self) -> bool:
        return not self._text

    def set_value(self, text: str) -> None:
        self._text = text
        self._version += 1

    def append_value(self, text: str) -> None:
        self._text += text
        self._version += 1

    def reset(self) -> None:
        self._text = ""
        self.scroll = 0
        self._version += 1

    def wrapped(self, width: int) -> WrappedCache:
        cache = self._cache
        if cache is not None and cache.version == self._version and cache.width == width:
            return cache
        rows = tuple(_wrap_rows(self._text, width))
        self.builds += 1
        self._cache = WrappedCache(self._version, width, "\n".join(rows), len(rows) - 1, rows)
        return self._cache

    # -- scrolling ----------------------------------------------------------

    def scroll_by(self, delta: int) -> None:
        # Upper bound is applied at render time, when the layout is known
        self.scroll = max(0, self.scroll + delta)

    def scroll_to_top(self) -> None:
        self.scroll = 0

    def scroll_to_bottom(self) -> None:
        if self._cache is not None:
            self.scroll = clamp_scroll(
                self._cache.line_count, self._cache.line_count, self._viewport_height
            )

    def handle_input(self, key: str) -> bool:
        """Apply a navigation key. Returns ``True`` when the key was used."""
        page = max(1, self._viewport_height - 1)
        match key:
            case "up":
                self.scroll_by(-1)
            case "down":
                self.scroll_by(1)
            case "pageUp":
                self.scroll_by(-page)
            case "pageDown" | "space":
                self.scroll_by(page)
            case "home":
                self.scroll_to_top()
            case "end":
                self.scroll_to_bottom()
            case _:
                return False
        return True

    # -- rendering ----------------------------------------------------------

    def render(self, width: int, height: int) -> list[str]:
        """Render exactly *height* lines of *width* cells from the scroll offset."""
        if width <= 0 or height <= 0:
            return []
        self._viewport_height = height
        cache = self.wrapped(width)
        self.scroll = clamp_scroll(self.scroll, cache.line_count, height)
        rows = cache.rows[self.scroll : self.scroll + height]
        lines = [pad_to_width(slice_columns(row, 0, width), width) for row in rows]
        while len(lines) < height:
            lines.append(" " * width)
        return lines
