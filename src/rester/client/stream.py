"""Bounded async stream of response messages for a single request."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

from rester.client.types import Response

_SENTINEL = object()

DEFAULT_CAPACITY = 10


class ResponseStream:
    """Carries :data:`Response` messages from the worker to one consumer.

    The producer awaits ``send`` (which applies back-pressure once
    ``capacity`` messages are queued) and calls ``close`` when done. The
    consumer iterates with ``async for``; iteration ends after ``close``.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        self._queue: asyncio.Queue[Response | object] = asyncio.Queue(maxsize=capacity)
        self._closed = False
        self._abandoned = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def abandoned(self) -> bool:
        """``True`` once the consumer has stopped listening."""
        return self._abandoned

    async def send(self, message: Response) -> bool:
        """Queue *message*. Returns ``False`` if nobody is listening any more."""
        if self._closed or self._abandoned:
            return False
        await self._queue.put(message)
        return True

    async def close(self) -> None:
        """Mark the end of the stream. Idempotent."""
        if self._closed:
            return
        self._closed = True
        if not self._abandoned:
            await self._queue.put(_SENTINEL)

    def abandon(self) -> None:
        """Called by the consumer when it stops reading.

        Pending messages are discarded so a producer blocked in ``send``
        is released.
        """
        self._abandoned = True
        while not self._queue.empty():
            self._queue.get_nowait()

    async def __aiter__(self) -> AsyncIterator[Response]:
        while True:
            item = await self._queue.get()
            if item is _SENTINEL:
                return
            yield item  # type: ignore[misc]
