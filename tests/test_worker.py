"""Tests for rester.client.worker -- streaming requests over a mock transport."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from rester.client.dispatch import ChannelClosed, DispatchChannel
from rester.client.stream import ResponseStream
from rester.client.types import Body, Failure, Headers, Request, Status
from rester.client.worker import RequestWorker


async def chunked(*chunks: bytes, delay: float = 0.0):
    for chunk in chunks:
        if delay:
            await asyncio.sleep(delay)
        yield chunk


def make_request(url: str = "http://example.test/", method: str = "GET", headers: str = "", body: str = "") -> Request:
    return Request(method=method, url=url, headers=headers, body=body, reply=ResponseStream())


async def collect(stream: ResponseStream, timeout: float = 2.0) -> list:
    async def _collect() -> list:
        return [message async for message in stream]

    return await asyncio.wait_for(_collect(), timeout)


class WorkerHarness:
    """Runs a worker over a handler for the duration of a test."""

    def __init__(self, handler) -> None:
        self.channel = DispatchChannel()
        self.worker = RequestWorker(self.channel, transport=httpx.MockTransport(handler))
        self.task: asyncio.Task | None = None

    async def __aenter__(self) -> WorkerHarness:
        self.task = asyncio.create_task(self.worker.run())
        return self

    async def __aexit__(self, *exc) -> None:
        self.channel.close()
        await asyncio.wait_for(self.task, 2.0)


# ---------------------------------------------------------------------------
# Streaming
# ---------------------------------------------------------------------------


class TestStreaming:
    @pytest.mark.asyncio
    async def test_status_headers_then_body_chunks(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, headers={"X-Test": "yes"}, content=chunked(b"one", b"two", b"three"))

        async with WorkerHarness(handler) as h:
            request = make_request()
            await h.channel.submit(request)
            messages = await collect(request.reply)

        assert isinstance(messages[0], Status)
        assert messages[0].code == 200
        assert isinstance(messages[1], Headers)
        assert ("x-test", "yes") in [(k.lower(), v) for k, v in messages[1].items]
        assert messages[2:] == [Body(b"one"), Body(b"two"), Body(b"three")]

    @pytest.mark.asyncio
    async def test_request_sent_with_method_headers_and_body(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201)

        async with WorkerHarness(handler) as h:
            request = make_request(
                url="http://example.test/items",
                method="POST",
                headers="Content-Type: application/json\nnot a header\nX-Name: café",
                body='{"a": 1}',
            )
            await h.channel.submit(request)
            await collect(request.reply)

        sent = seen[0]
        assert sent.method == "POST"
        assert str(sent.url) == "http://example.test/items"
        assert sent.headers["content-type"] == "application/json"
        assert sent.headers.get_list("x-name") != []
        assert sent.content == b'{"a": 1}'

    @pytest.mark.asyncio
    async def test_empty_body_yields_no_body_messages(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(204)

        async with WorkerHarness(handler) as h:
            request = make_request()
            await h.channel.submit(request)
            messages = await collect(request.reply)

        assert [type(m) for m in messages] == [Status, Headers]

    @pytest.mark.asyncio
    async def test_successive_requests(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=request.url.path.encode())

        async with WorkerHarness(handler) as h:
            first = make_request("http://example.test/first")
            second = make_request("http://example.test/second")
            await h.channel.submit(first)
            first_messages = await collect(first.reply)
            await h.channel.submit(second)
            second_messages = await collect(second.reply)

        assert first_messages[-1] == Body(b"/first")
        assert second_messages[-1] == Body(b"/second")


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestFailure:
    @pytest.mark.asyncio
    async def test_transport_error_gives_single_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with WorkerHarness(handler) as h:
            request = make_request()
            await h.channel.submit(request)
            messages = await collect(request.reply)

        assert len(messages) == 1
        assert isinstance(messages[0], Failure)
        assert "connection refused" in messages[0].message

    @pytest.mark.asyncio
    async def test_unusable_url_gives_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200)

        async with WorkerHarness(handler) as h:
            request = make_request(url="http://example.test:notaport/")
            await h.channel.submit(request)
            messages = await collect(request.reply)

        assert len(messages) == 1
        assert isinstance(messages[0], Failure)

    @pytest.mark.asyncio
    async def test_worker_survives_failure(self):
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            if calls == 1:
                raise httpx.ReadTimeout("timed out", request=request)
            return httpx.Response(200, content=b"ok")

        async with WorkerHarness(handler) as h:
            failing = make_request()
            await h.channel.submit(failing)
            assert isinstance((await collect(failing.reply))[0], Failure)

            working = make_request()
            await h.channel.submit(working)
            messages = await collect(working.reply)

        assert messages[-1] == Body(b"ok")


# ---------------------------------------------------------------------------
# Cancellation and pre-emption
# ---------------------------------------------------------------------------


class TestCancellation:
    @pytest.mark.asyncio
    async def test_cancel_ends_stream(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=chunked(b"first", b"never", delay=0.5))

        async with WorkerHarness(handler) as h:
            request = make_request()
            await h.channel.submit(request)
            received = []
            async for message in request.reply:
                received.append(message)
                if isinstance(message, Headers):
                    await h.channel.cancel()
            assert [type(m) for m in received] == [Status, Headers]

    @pytest.mark.asyncio
    async def test_new_request_preempts_stream(self):
        async def slow_body():
            yield b"a"
            await asyncio.sleep(0.3)
            yield b"b"
            await asyncio.sleep(0.3)
            yield b"c"

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/slow":
                return httpx.Response(200, content=slow_body())
            return httpx.Response(200, content=b"fast")

        log: list[tuple[str, str]] = []

        async def record(name: str, stream: ResponseStream) -> None:
            async for message in stream:
                log.append((name, type(message).__name__))

        async def first_slow_body() -> None:
            while ("slow", "Body") not in log:
                await asyncio.sleep(0.005)

        async with WorkerHarness(handler) as h:
            slow = make_request("http://example.test/slow")
            fast = make_request("http://example.test/fast")
            await h.channel.submit(slow)
            slow_task = asyncio.create_task(record("slow", slow.reply))
            await asyncio.wait_for(first_slow_body(), 2.0)

            await h.channel.submit(fast)
            await asyncio.wait_for(asyncio.gather(slow_task, record("fast", fast.reply)), 2.0)

        fast_status = log.index(("fast", "Status"))
        assert ("slow", "Body") not in log[fast_status:]
        assert log.count(("slow", "Body")) == 1
        assert [entry for entry in log if entry[0] == "fast"] == [
            ("fast", "Status"),
            ("fast", "Headers"),
            ("fast", "Body"),
        ]

    @pytest.mark.asyncio
    async def test_cancel_with_nothing_in_flight_is_ignored(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"ok")

        async with WorkerHarness(handler) as h:
            await h.channel.cancel()
            request = make_request()
            await h.channel.submit(request)
            messages = await collect(request.reply)

        assert messages[-1] == Body(b"ok")

    @pytest.mark.asyncio
    async def test_abandoned_stream_releases_worker(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=chunked(*[b"x"] * 50))

        async with WorkerHarness(handler) as h:
            abandoned = make_request()
            await h.channel.submit(abandoned)
            await asyncio.sleep(0.05)
            abandoned.reply.abandon()

            request = make_request()
            await h.channel.submit(request)
            messages = await collect(request.reply)

        assert isinstance(messages[0], Status)


class TestRun:
    @pytest.mark.asyncio
    async def test_run_returns_when_channel_closed(self):
        channel = DispatchChannel()
        worker = RequestWorker(channel, transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        task = asyncio.create_task(worker.run())
        channel.close()
        await asyncio.wait_for(task, 1.0)
        assert task.done()

    @pytest.mark.asyncio
    async def test_submit_after_close_raises(self):
        channel = DispatchChannel()
        channel.close()
        with pytest.raises(ChannelClosed):
            await channel.submit(make_request())
