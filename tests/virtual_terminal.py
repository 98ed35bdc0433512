"""In-memory terminal for tests.

``VirtualTerminal`` satisfies the ``rester.tui.terminal.Terminal`` protocol
without touching a tty. Writes are captured for assertions and input or
resize events can be injected by the test.
"""

from __future__ import annotations

from typing import Callable


class VirtualTerminal:
    """Records every write and lets tests drive input and resizes."""

    def __init__(self, rows: int = 24, columns: int = 80) -> None:
        self._rows = rows
        self._columns = columns
        self._buffer: list[str] = []
        self._started = False
        self._input_handler: Callable[[str], None] | None = None
        self._resize_handler: Callable[[], None] | None = None
        self._cursor_visible = True
        self.title = ""
        self.start_count = 0
        self.stop_count = 0

    # -- Terminal protocol --------------------------------------------------

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def columns(self) -> int:
        return self._columns

    @property
    def kitty_protocol_active(self) -> bool:
        return False

    @property
    def started(self) -> bool:
        return self._started

    def start(
        self,
        on_input: Callable[[str], None],
        on_resize: Callable[[], None],
    ) -> None:
        self._input_handler = on_input
        self._resize_handler = on_resize
        self._started = True
        self.start_count += 1

    def stop(self) -> None:
        self._started = False
        self._input_handler = None
        self._resize_handler = None
        self.stop_count += 1

    def write(self, data: str) -> None:
        self._buffer.append(data)

    def hide_cursor(self) -> None:
        self._cursor_visible = False
        self.write("\x1b[?25l")

    def show_cursor(self) -> None:
        self._cursor_visible = True
        self.write("\x1b[?25h")

    def clear_screen(self) -> None:
        self.write("\x1b[2J\x1b[H")

    def set_title(self, title: str) -> None:
        self.title = title
        self.write(f"\x1b]0;{title}\x07")

    # -- Test helpers -------------------------------------------------------

    @property
    def output(self) -> str:
        """Everything written so far as a single string."""
        return "".join(self._buffer)

    @property
    def write_count(self) -> int:
        return len(self._buffer)

    def clear_buffer(self) -> None:
        self._buffer.clear()

    def simulate_input(self, data: str) -> None:
        """Feed *data* to the registered input handler."""
        if self._input_handler is None:
            raise RuntimeError("No input handler registered -- call start() first")
        self._input_handler(data)

    def simulate_resize(self, rows: int | None = None, columns: int | None = None) -> None:
        """Change the size and fire the resize callback."""
        if rows is not None:
            self._rows = rows
        if columns is not None:
            self._columns = columns
        if self._resize_handler is not None:
            self._resize_handler()
