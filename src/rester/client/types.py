"""Messages exchanged between the UI and the network worker."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from rester.client.stream import ResponseStream

Method = Literal["GET", "POST", "PUT", "DELETE", "PATCH"]

METHODS: tuple[Method, ...] = ("GET", "POST", "PUT", "DELETE", "PATCH")


def next_method(method: Method) -> Method:
    """The method after *method*, wrapping from PATCH back to GET."""
    return METHODS[(METHODS.index(method) + 1) % len(METHODS)]


# --- UI -> worker ---


@dataclass
class Request:
    """One HTTP exchange to perform.

    ``headers`` is the raw multi-line text typed by the user; the worker
    parses it. Responses are delivered on ``reply``.
    """

    method: Method
    url: str
    headers: str
    body: str
    reply: ResponseStream = field(repr=False)


@dataclass
class CancelRequest:
    """Pre-empts whatever stream the worker is currently relaying."""


DispatchMessage = Request | CancelRequest


# --- worker -> UI ---


@dataclass
class Status:
    code: int
    reason: str = ""

    def __str__(self) -> str:
        return f"{self.code} {self.reason}".strip()


@dataclass
class Headers:
    items: list[tuple[str, str]]


@dataclass
class Body:
    chunk: bytes


@dataclass
class Failure:
    message: str


Response = Status | Headers | Body | Failure
