"""Editable text buffer with a cursor and newline-delimited row topology."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

import grapheme


@dataclass(frozen=True)
class Row:
    """One newline-delimited row of a buffer.

    ``end`` is the index of the terminating newline, or ``len(text)`` for the
    final row. ``size`` counts the newline when there is one.
    """

    start: int
    end: int
    size: int

    @property
    def length(self) -> int:
        return self.end - self.start


def row_topology(text: str, cursor: int) -> tuple[list[Row], int]:
    """Split *text* into rows and locate the row containing *cursor*.

    Always yields at least one row. The rows tile the text exactly and a
    cursor at or past the end of the text belongs to the last row.
    """
    rows: list[Row] = []
    current_row = -1
    start = 0
    length = len(text)

    while True:
        newline = text.find("\n", start)
        end = length if newline == -1 else newline
        rows.append(Row(start, end, end - start + (0 if newline == -1 else 1)))
        if current_row < 0 and cursor <= end:
            current_row = len(rows) - 1
        if newline == -1:
            break
        start = newline + 1

    if current_row < 0 or cursor >= length:
        current_row = len(rows) - 1
    return rows, current_row


# ---------------------------------------------------------------------------
# Grapheme boundary helpers
# ---------------------------------------------------------------------------


def _prev_boundary(text: str, pos: int) -> int:
    if pos <= 0:
        return 0
    if text[pos - 1] == "\n":
        return pos - 2 if text[pos - 2 : pos] == "\r\n" else pos - 1
    line_start = text.rfind("\n", 0, pos) + 1
    clusters = list(grapheme.graphemes(text[line_start:pos]))
    return pos - len(clusters[-1])


def _next_boundary(text: str, pos: int) -> int:
    if pos >= len(text):
        return len(text)
    if text.startswith("\r\n", pos):
        return pos + 2
    if text[pos] == "\n":
        return pos + 1
    line_end = text.find("\n", pos)
    if line_end == -1:
        line_end = len(text)
    first = next(grapheme.graphemes(text[pos:line_end]))
    return pos + len(first)


def _floor_boundary(text: str, row: Row, pos: int) -> int:
    """Largest grapheme boundary inside *row* that is ``<= pos``."""
    boundary = row.start
    for cluster in grapheme.graphemes(text[row.start : row.end]):
        if boundary + len(cluster) > pos:
            break
        boundary += len(cluster)
    return boundary


# ---------------------------------------------------------------------------
# EditBuffer
# ---------------------------------------------------------------------------


class EditCommand(Enum):
    """Closed set of edits an :class:`EditBuffer` understands."""

    INSERT = auto()
    DELETE_BACKWARD = auto()
    DELETE_FORWARD = auto()
    CURSOR_FORWARD = auto()
    CURSOR_BACKWARD = auto()
    CURSOR_UP = auto()
    CURSOR_DOWN = auto()
    CURSOR_LINE_START = auto()
    CURSOR_LINE_END = auto()


class EditBuffer:
    """Mutable string plus a cursor that always sits on a grapheme boundary.

    ``version`` increases on every change to the text so renderers can tell
    whether cached layout is still valid.
    """

    def __init__(self, text: str = "") -> None:
        self._text = text
        self._cursor = 0
        self._version = 0

    @property
    def text(self) -> str:
        return self._text

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def version(self) -> int:
        return self._version

    def is_empty(self) -> bool:
        return not self._text

    def __str__(self) -> str:
        return self._text

    def set_value(self, text: str) -> None:
        """Replace the whole text, keeping the cursor in range."""
        self._text = text
        self._cursor = min(self._cursor, len(text))
        if self._cursor < len(text):
            rows, current = row_topology(text, self._cursor)
            self._cursor = _floor_boundary(text, rows[current], self._cursor)
        self._version += 1

    def clear(self) -> None:
        self._text = ""
        self._cursor = 0
        self._version += 1

    def set_cursor(self, cursor: int) -> None:
        self._cursor = max(0, min(cursor, len(self._text)))

    def cursor_row_col(self) -> tuple[int, int]:
        """Row index and code point offset of the cursor within that row."""
        rows, current = row_topology(self._text, self._cursor)
        return current, self._cursor - rows[current].start

    # -- commands -----------------------------------------------------------

    def handle_command(self, command: EditCommand, text: str = "") -> None:
        match command:
            case EditCommand.INSERT:
                self.insert(text)
            case EditCommand.DELETE_BACKWARD:
                self.delete_backward()
            case EditCommand.DELETE_FORWARD:
                self.delete_forward()
            case EditCommand.CURSOR_FORWARD:
                self.move_cursor_forward()
            case EditCommand.CURSOR_BACKWARD:
                self.move_cursor_backward()
            case EditCommand.CURSOR_UP:
                self.move_cursor_up()
            case EditCommand.CURSOR_DOWN:
                self.move_cursor_down()
            case EditCommand.CURSOR_LINE_START:
                self.move_cursor_line_start()
            case EditCommand.CURSOR_LINE_END:
                self.move_cursor_line_end()

    def insert(self, text: str) -> None:
        if not text:
            return
        self._text = self._text[: self._cursor] + text + self._text[self._cursor :]
        self._cursor += len(text)
        self._version += 1

    def delete_backward(self) -> None:
        if self._cursor == 0:
            return
        start = _prev_boundary(self._text, self._cursor)
        self._text = self._text[:start] + self._text[self._cursor :]
        self._cursor = start
        self._version += 1

    def delete_forward(self) -> None:
        if self._cursor >= len(self._text):
            return
        end = _next_boundary(self._text, self._cursor)
        self._text = self._text[: self._cursor] + self._text[end:]
        self._version += 1

    def move_cursor_forward(self) -> None:
        self._cursor = _next_boundary(self._text, self._cursor)

    def move_cursor_backward(self) -> None:
        self._cursor = _prev_boundary(self._text, self._cursor)

    def move_cursor_up(self) -> None:
        rows, current = row_topology(self._text, self._cursor)
        if current == 0:
            return
        self._move_to_row(rows, current, current - 1)

    def move_cursor_down(self) -> None:
        rows, current = row_topology(self._text, self._cursor)
        if current == len(rows) - 1:
            return
        self._move_to_row(rows, current, current + 1)

    def move_cursor_line_start(self) -> None:
        rows, current = row_topology(self._text, self._cursor)
        self._cursor = rows[current].start

    def move_cursor_line_end(self) -> None:
        rows, current = row_topology(self._text, self._cursor)
        self._cursor = rows[current].end

    def _move_to_row(self, rows: list[Row], current: int, target: int) -> None:
        column = self._cursor - rows[current].start
        row = rows[target]
        new_pos = row.start + min(column, row.length)
        self._cursor = _floor_boundary(self._text, row, new_pos)
