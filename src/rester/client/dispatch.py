"""Bounded queue of work from the UI to the network worker."""

from __future__ import annotations

import asyncio

from rester.client.types import CancelRequest, DispatchMessage, Request

DEFAULT_CAPACITY = 10


class ChannelClosed(Exception):
    """Raised by ``receive`` once the channel is closed and drained."""


class DispatchChannel:
    """Single-consumer channel carrying :class:`Request` and :class:`CancelRequest`.

    ``submit`` and ``cancel`` suspend when ``capacity`` messages are already
    waiting. After ``close`` the consumer drains what is queued and then
    ``receive`` raises :class:`ChannelClosed`.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        self._queue: asyncio.Queue[DispatchMessage | None] = asyncio.Queue(maxsize=capacity)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def submit(self, request: Request) -> None:
        await self._send(request)

    async def cancel(self) -> None:
        await self._send(CancelRequest())

    def cancel_nowait(self) -> bool:
        """Queue a cancel without waiting. ``False`` if the channel is full or closed."""
        if self._closed:
            return False
        try:
            self._queue.put_nowait(CancelRequest())
        except asyncio.QueueFull:
            return False
        return True

    async def _send(self, message: DispatchMessage) -> None:
        if self._closed:
            raise ChannelClosed("dispatch channel is closed")
        await self._queue.put(message)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._queue.put_nowait(None)
        except asyncio.QueueFull:
            # The consumer sees the closed flag once it drains the queue
            pass

    async def receive(self) -> DispatchMessage:
        if self._closed and self._queue.empty():
            raise ChannelClosed("dispatch channel is closed")
        message = await self._queue.get()
        if message is None:
            raise ChannelClosed("dispatch channel is closed")
        return message

    def pending(self) -> int:
        return self._queue.qsize()
