"""Network side of rester: dispatch channel, streaming worker and messages."""

from rester.client.dispatch import ChannelClosed, DispatchChannel
from rester.client.headers import format_headers, parse_headers, split_header_lines
from rester.client.stream import ResponseStream
from rester.client.types import (
    METHODS,
    Body,
    CancelRequest,
    DispatchMessage,
    Failure,
    Headers,
    Method,
    Request,
    Response,
    Status,
    next_method,
)
from rester.client.worker import RequestWorker

__all__ = [
    "METHODS",
    "Body",
    "CancelRequest",
    "ChannelClosed",
    "DispatchChannel",
    "DispatchMessage",
    "Failure",
    "Headers",
    "Method",
    "Request",
    "RequestWorker",
    "Response",
    "ResponseStream",
    "Status",
    "format_headers",
    "next_method",
    "parse_headers",
    "split_header_lines",
]
