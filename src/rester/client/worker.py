"""Background task that performs HTTP requests and streams the results back.

The worker consumes :class:`DispatchChannel` messages one at a time. While a
response body is streaming it also listens on the channel: whichever comes
first, the next chunk or the next inbound message, wins. A new message ends
the current stream immediately and is processed next.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator

import httpx

from rester.client.dispatch import ChannelClosed, DispatchChannel
from rester.client.headers import parse_headers
from rester.client.stream import ResponseStream
from rester.client.types import Body, CancelRequest, DispatchMessage, Failure, Headers, Request, Status

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


async def _next_chunk(chunks: AsyncIterator[bytes]) -> bytes | None:
    try:
        return await anext(chunks)
    except StopAsyncIteration:
        return None


class RequestWorker:
    """Serially executes requests from *channel*.

    Pass *client* to reuse an existing ``httpx.AsyncClient`` (the worker will
    not close it), or *transport* to build one around a custom transport.
    """

    def __init__(
        self,
        channel: DispatchChannel,
        *,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> None:
        self._channel = channel
        self._client = client
        self._transport = transport
        self._timeout = timeout
        self._inbound: asyncio.Future[DispatchMessage] | None = None

    async def run(self) -> None:
        """Process messages until the channel is closed."""
        client = self._client or httpx.AsyncClient(
            timeout=httpx.Timeout(self._timeout),
            transport=self._transport,
        )
        logger.debug("Request worker started")
        try:
            while True:
                try:
                    message = await self._next_message()
                except ChannelClosed:
                    break
                if isinstance(message, CancelRequest):
                    logger.debug("Cancel with nothing in flight")
                    continue
                await self._handle(client, message)
        finally:
            if self._inbound is not None and not self._inbound.done():
                self._inbound.cancel()
            if self._client is None:
                await client.aclose()
            logger.debug("Request worker stopped")

    def _listen(self) -> asyncio.Future[DispatchMessage]:
        if self._inbound is None:
            self._inbound = asyncio.ensure_future(self._channel.receive())
        return self._inbound

    async def _next_message(self) -> DispatchMessage:
        inbound = self._listen()
        try:
            return await inbound
        finally:
            self._inbound = None

    # -- one exchange -------------------------------------------------------

    async def _handle(self, client: httpx.AsyncClient, request: Request) -> None:
        reply = request.reply
        try:
            headers = [(name, value.encode("utf-8")) for name, value in parse_headers(request.headers)]
            logger.info("%s %s", request.method, request.url)
            try:
                outgoing = client.build_request(
                    request.method,
                    request.url,
                    headers=headers,
                    content=request.body.encode("utf-8") if request.body else None,
                )
                response = await client.send(outgoing, stream=True)
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                logger.warning("%s %s failed: %s", request.method, request.url, exc)
                await reply.send(Failure(str(exc) or type(exc).__name__))
                return

            try:
                await self._relay(response, reply)
            finally:
                await response.aclose()
        finally:
            await reply.close()

    async def _relay(self, response: httpx.Response, reply: ResponseStream) -> None:
        logger.info("Status %d %s", response.status_code, response.reason_phrase)
        if not await reply.send(Status(response.status_code, response.reason_phrase)):
            return
        if not await reply.send(Headers(response.headers.multi_items())):
            return

        chunks = response.aiter_bytes()
        received = 0
        while True:
            chunk_task = asyncio.ensure_future(_next_chunk(chunks))
            inbound = self._listen()
            await asyncio.wait({chunk_task, inbound}, return_when=asyncio.FIRST_COMPLETED)

            if inbound.done():
                chunk_task.cancel()
                await asyncio.wait({chunk_task})
                logger.info("Stream abandoned after %d bytes", received)
                return

            try:
                chunk = chunk_task.result()
            except httpx.HTTPError as exc:
                logger.warning("Stream ended early after %d bytes: %s", received, exc)
                return

            if chunk is None:
                logger.info("Stream complete, %d bytes", received)
                return
            received += len(chunk)
            if not await reply.send(Body(chunk)):
                logger.debug("Consumer went away, dropping stream")
                return
