"""Editable text pane backed by an :class:`EditBuffer`."""

from __future__ import annotations

import grapheme

from rester.tui.keys import parse_key
from rester.tui.text_buffer import EditBuffer, EditCommand, row_topology
from rester.tui.utils import TAB_TEXT, pad_to_width, slice_columns, visible_width

PASTE_START = "\x1b[200~"
PASTE_END = "\x1b[201~"

_KEY_COMMANDS: dict[str, EditCommand] = {
    "left": EditCommand.CURSOR_BACKWARD,
    "right": EditCommand.CURSOR_FORWARD,
    "up": EditCommand.CURSOR_UP,
    "down": EditCommand.CURSOR_DOWN,
    "home": EditCommand.CURSOR_LINE_START,
    "end": EditCommand.CURSOR_LINE_END,
    "backspace": EditCommand.DELETE_BACKWARD,
    "delete": EditCommand.DELETE_FORWARD,
}


class TextArea:
    """Edit buffer plus rendering with a reverse-video cursor and scrolling.

    In single-line mode newlines are never inserted: Enter is left to the
    caller and pasted line breaks are dropped.
    """

    def __init__(self, text: str = "", multiline: bool = True) -> None:
        self.buffer = EditBuffer(self._normalize(text, multiline))
        self.multiline = multiline
        self.focused: bool = False
        self._x_scroll = 0
        self._y_scroll = 0

    @property
    def text(self) -> str:
        return self.buffer.text

    def set_value(self, text: str) -> None:
        """Replace the text and put the cursor after it."""
        self.buffer.set_value(self._normalize(text, self.multiline))
        self.buffer.set_cursor(len(self.buffer.text))

    def clear(self) -> None:
        self.buffer.clear()
        self._x_scroll = 0
        self._y_scroll = 0

    @staticmethod
    def _normalize(text: str, multiline: bool) -> str:
        text = text.replace("\r\n", "\n").replace("\r", "\n")
        return text if multiline else text.replace("\n", "")

    # -- input --------------------------------------------------------------

    def handle_input(self, data: str) -> bool:
        """Apply raw terminal input. Returns ``True`` when it was consumed."""
        if data.startswith(PASTE_START):
            content = data[len(PASTE_START) :]
            if content.endswith(PASTE_END):
                content = content[: -len(PASTE_END)]
            self.buffer.insert(self._normalize(content, self.multiline))
            return True

        key = parse_key(data) or ""

        command = _KEY_COMMANDS.get(key)
        if command is not None:
            self.buffer.handle_command(command)
            return True

        if key == "enter":
            if not self.multiline:
                return False
            self.buffer.insert("\n")
            return True

        if key == "space":
            self.buffer.insert(" ")
            return True

        # Plain characters, or several typed faster than one read
        if data and data.isprintable():
            self.buffer.insert(data)
            return True

        return False

    # -- rendering ----------------------------------------------------------

    def render(self, width: int, height: int) -> list[str]:
        if width <= 0 or height <= 0:
            return []

        text = self.buffer.text
        cursor = self.buffer.cursor
        rows, current = row_topology(text, cursor)
        cursor_row = rows[current]
        before_text = text[cursor_row.start : cursor]
        cursor_cell = visible_width(before_text)

        cluster = next(grapheme.graphemes(text[cursor : cursor_row.end]), "")
        shown = TAB_TEXT if cluster == "\t" else (cluster or " ")
        shown_width = max(1, visible_width(shown))

        # Keep the cursor row and cell inside the viewport
        if current < self._y_scroll:
            self._y_scroll = current
        elif current >= self._y_scroll + height:
            self._y_scroll = current - height + 1
        if cursor_cell < self._x_scroll:
            self._x_scroll = cursor_cell
        elif cursor_cell + shown_width > self._x_scroll + width:
            self._x_scroll = cursor_cell + shown_width - width

        lines: list[str] = []
        for index in range(self._y_scroll, min(len(rows), self._y_scroll + height)):
            row = rows[index]
            if index == current and self.focused:
                before = slice_columns(before_text, self._x_scroll, cursor_cell - self._x_scroll)
                after_text = text[cursor + len(cluster) : row.end]
                after = slice_columns(after_text, 0, width - (cursor_cell - self._x_scroll) - shown_width)
                line = before + f"\x1b[7m{shown}\x1b[27m" + after
            else:
                line = slice_columns(text[row.start : row.end], self._x_scroll, width)
            lines.append(pad_to_width(line, width))

        while len(lines) < height:
            lines.append(" " * width)
        return lines
