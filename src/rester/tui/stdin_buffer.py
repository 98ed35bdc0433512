"""Reassemble terminal input into complete key sequences.

Reads from a tty arrive in arbitrary chunks: an arrow key's ``ESC [ A`` can
be split across two reads, and a paste can arrive as dozens of reads. The
:class:`StdinBuffer` holds partial escape sequences until they complete (or
until a short timeout says the ESC really was a lone Escape key) and
collects bracketed pastes into a single event.
"""

from __future__ import annotations

import asyncio
import re
from enum import Enum
from typing import Callable

ESC = "\x1b"
BRACKETED_PASTE_START = "\x1b[200~"
BRACKETED_PASTE_END = "\x1b[201~"

_SGR_MOUSE_RE = re.compile(r"^<\d+;\d+;\d+[Mm]$")


class _Status(Enum):
    COMPLETE = "complete"
    INCOMPLETE = "incomplete"


def _sequence_status(data: str) -> _Status:
    """Decide whether *data* (starting with ESC) is a finished sequence."""
    if len(data) == 1:
        return _Status.INCOMPLETE

    introducer = data[1]

    if introducer == "[":
        if data.startswith("\x1b[M"):
            # X10 mouse: three raw bytes follow
            return _Status.COMPLETE if len(data) >= 6 else _Status.INCOMPLETE
        if len(data) < 3:
            return _Status.INCOMPLETE
        payload = data[2:]
        if not "\x40" <= payload[-1] <= "\x7e":
            return _Status.INCOMPLETE
        if payload.startswith("<") and not _SGR_MOUSE_RE.match(payload):
            return _Status.INCOMPLETE
        return _Status.COMPLETE

    if introducer == "]":
        if data.endswith("\x07") or data.endswith("\x1b\\"):
            return _Status.COMPLETE
        return _Status.INCOMPLETE

    if introducer in "P_":
        # DCS / APC strings end with ST
        return _Status.COMPLETE if data.endswith("\x1b\\") else _Status.INCOMPLETE

    if introducer == "O":
        return _Status.COMPLETE if len(data) >= 3 else _Status.INCOMPLETE

    # ESC + one character: alt-modified key
    return _Status.COMPLETE


def split_sequences(buffer: str) -> tuple[list[str], str]:
    """Split *buffer* into complete sequences plus an unfinished remainder."""
    sequences: list[str] = []
    pos = 0

    while pos < len(buffer):
        if buffer[pos] != ESC:
            sequences.append(buffer[pos])
            pos += 1
            continue

        end = pos + 1
        while end <= len(buffer):
            if _sequence_status(buffer[pos:end]) is _Status.COMPLETE:
                break
            end += 1
        else:
            return sequences, buffer[pos:]

        sequences.append(buffer[pos:end])
        pos = end

    return sequences, ""


class StdinBuffer:
    """Buffers stdin input and emits complete sequences through callbacks."""

    def __init__(self, *, timeout: float = 0.01) -> None:
        self._buffer = ""
        self._timeout = timeout
        self._timeout_handle: asyncio.TimerHandle | None = None
        self._paste: str | None = None

        self._on_data: Callable[[str], None] | None = None
        self._on_paste: Callable[[str], None] | None = None

    def on_data(self, callback: Callable[[str], None]) -> None:
        self._on_data = callback

    def on_paste(self, callback: Callable[[str], None]) -> None:
        self._on_paste = callback

    def _emit_data(self, data: str) -> None:
        if self._on_data is not None:
            self._on_data(data)

    def _emit_paste(self, data: str) -> None:
        if self._on_paste is not None:
            self._on_paste(data)

    def process(self, data: str) -> None:
        """Feed a chunk of input."""
        self._cancel_timeout()

        if self._paste is not None:
            self._paste += data
            self._finish_paste()
            return

        self._buffer += data

        start = self._buffer.find(BRACKETED_PASTE_START)
        if start != -1:
            before = self._buffer[:start]
            self._paste = self._buffer[start + len(BRACKETED_PASTE_START) :]
            self._buffer = ""
            sequences, remainder = split_sequences(before)
            for sequence in sequences:
                self._emit_data(sequence)
            if remainder:
                self._emit_data(remainder)
            self._finish_paste()
            return

        sequences, self._buffer = split_sequences(self._buffer)
        for sequence in sequences:
            self._emit_data(sequence)

        if self._buffer:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                for sequence in self.flush():
                    self._emit_data(sequence)
            else:
                self._timeout_handle = loop.call_later(self._timeout, self._flush_timeout)

    def _finish_paste(self) -> None:
        assert self._paste is not None
        end = self._paste.find(BRACKETED_PASTE_END)
        if end == -1:
            return
        content = self._paste[:end]
        rest = self._paste[end + len(BRACKETED_PASTE_END) :]
        self._paste = None
        self._emit_paste(content)
        if rest:
            self.process(rest)

    def _cancel_timeout(self) -> None:
        if self._timeout_handle is not None:
            self._timeout_handle.cancel()
            self._timeout_handle = None

    def _flush_timeout(self) -> None:
        self._timeout_handle = None
        for sequence in self.flush():
            self._emit_data(sequence)

    def flush(self) -> list[str]:
        """Return whatever is pending as-is and empty the buffer."""
        self._cancel_timeout()
        if not self._buffer:
            return []
        pending = self._buffer
        self._buffer = ""
        return [pending]

    def clear(self) -> None:
        self._cancel_timeout()
        self._buffer = ""
        self._paste = None

    def get_buffer(self) -> str:
        return self._buffer

    def destroy(self) -> None:
        self.clear()
