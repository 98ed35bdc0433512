"""State shared between the response pump and the render path.

Each accessor takes the lock only for the duration of a copy or update,
never across an ``await``.
"""

from __future__ import annotations

import codecs
import json
import threading
from dataclasses import dataclass, field

from rester.client.headers import format_headers
from rester.client.types import Body, Failure, Headers, Response, Status
from rester.tui.utils import sanitize_text


class DirtyFlag:
    """Set by producers, read-and-cleared once per UI tick."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._dirty = False

    def set(self) -> None:
        with self._lock:
            self._dirty = True

    def take(self) -> bool:
        with self._lock:
            dirty, self._dirty = self._dirty, False
            return dirty


@dataclass(frozen=True)
class ResponseSnapshot:
    version: int
    status: Status | None = None
    headers: list[tuple[str, str]] = field(default_factory=list)
    body: bytes = b""
    failure: str | None = None
    # Body decoded so far
    text: str = ""

    def headers_text(self) -> str:
        return format_headers(self.headers)

    def body_text(self) -> str:
        """Body for display: pretty JSON when it parses, plain text otherwise."""
        return format_text(self.text)


def format_text(text: str) -> str:
    stripped = text.strip()
    # Only a complete object or array changes when pretty-printed
    if stripped[:1] in ("{", "[") and stripped[-1:] in ("}", "]"):
        try:
            text = json.dumps(json.loads(stripped), indent=2, ensure_ascii=False)
        except ValueError:
            pass
    return sanitize_text(text)


def format_body(body: bytes) -> str:
    return format_text(body.decode("utf-8", errors="replace"))


def _utf8_decoder() -> codecs.IncrementalDecoder:
    return codecs.getincrementaldecoder("utf-8")(errors="replace")


class ResponseCell:
    """Accumulated response for the current request.

    Body chunks are decoded as they arrive, so a snapshot never re-decodes
    the whole body.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._version = 0
        self._status: Status | None = None
        self._headers: list[tuple[str, str]] = []
        self._body = bytearray()
        self._decoder = _utf8_decoder()
        self._text_parts: list[str] = []
        self._failure: str | None = None

    @property
    def version(self) -> int:
        with self._lock:
            return self._version

    def reset(self) -> None:
        with self._lock:
            self._status = None
            self._headers = []
            self._body = bytearray()
            self._decoder = _utf8_decoder()
            self._text_parts = []
            self._failure = None
            self._version += 1

    def apply(self, message: Response) -> None:
        with self._lock:
            match message:
                case Status():
                    self._status = message
                case Headers(items=items):
                    self._headers = list(items)
                case Body(chunk=chunk):
                    self._body.extend(chunk)
                    self._text_parts.append(self._decoder.decode(chunk))
                case Failure(message=text):
                    self._failure = text
            self._version += 1

    def _decoded_text(self) -> str:
        if len(self._text_parts) > 1:
            self._text_parts = ["".join(self._text_parts)]
        text = self._text_parts[0] if self._text_parts else ""
        # A multi-byte sequence cut off by the chunk boundary
        pending, _ = self._decoder.getstate()
        if pending:
            text += pending.decode("utf-8", errors="replace")
        return text

    def snapshot(self) -> ResponseSnapshot:
        with self._lock:
            return ResponseSnapshot(
                version=self._version,
                status=self._status,
                headers=list(self._headers),
                body=bytes(self._body),
                failure=self._failure,
                text=self._decoded_text(),
            )
