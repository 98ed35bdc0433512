"""The UI loop: drain input, sync the response, redraw, once per tick."""

from __future__ import annotations

import asyncio
import logging
import time

import httpx

from rester.app import App
from rester.client.dispatch import DispatchChannel
from rester.client.worker import RequestWorker
from rester.config import Config
from rester.keybindings import KeybindingsManager
from rester.presets import PresetCollection
from rester.tui.screen import Screen
from rester.tui.terminal import ProcessTerminal, Terminal
from rester.ui import render_frame

logger = logging.getLogger(__name__)


class Runtime:
    """Ties an :class:`App` to a terminal and a request worker.

    Input callbacks only queue data; everything that touches app state runs
    in :meth:`tick`, on the event loop.
    """

    def __init__(
        self,
        app: App,
        terminal: Terminal,
        config: Config | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.app = app
        self.terminal = terminal
        self.screen = Screen(terminal)
        self.config = config or Config()
        self._transport = transport
        self._pending_input: list[str] = []
        self._resized = False
        self._needs_render = True

    def _on_input(self, data: str) -> None:
        self._pending_input.append(data)

    def _on_resize(self) -> None:
        self._resized = True

    def tick(self) -> bool:
        """Handle queued input and redraw if anything changed. Returns ``True`` on redraw."""
        pending, self._pending_input = self._pending_input, []
        for data in pending:
            started = time.perf_counter()
            self.app.handle_input(data)
            logger.debug("Input %r handled in %.2fms", data, (time.perf_counter() - started) * 1000)
            if not self.app.running:
                return False
        if pending:
            self._needs_render = True

        if self._resized:
            self._resized = False
            self.screen.invalidate()
            self._needs_render = True

        if self.app.dirty.take() and self.app.sync_response():
            self._needs_render = True

        if not self._needs_render:
            return False
        self._needs_render = False

        started = time.perf_counter()
        width, height = self.screen.size
        rows = self.screen.render(render_frame(self.app, width, height))
        logger.debug("Frame: %d rows in %.2fms", rows, (time.perf_counter() - started) * 1000)
        return True

    async def run(self) -> None:
        """Run until the app quits. The terminal is restored on every exit path."""
        interval = self.config.tick_ms / 1000
        worker_task: asyncio.Task[None] | None = None
        try:
            self.terminal.start(self._on_input, self._on_resize)
            logger.info("rester started")

            worker = RequestWorker(
                self.app.channel,
                transport=self._transport,
                timeout=self.config.request_timeout,
            )
            worker_task = asyncio.create_task(worker.run(), name="request-worker")
            self.terminal.set_title("rester")
            while self.app.running:
                self.tick()
                if worker_task.done():
                    # Raises the worker's exception, if any
                    worker_task.result()
                    logger.error("Request worker exited early")
                    break
                await asyncio.sleep(interval)
        finally:
            self.terminal.stop()
            await self.app.close()
            if worker_task is not None:
                _, pending = await asyncio.wait({worker_task}, timeout=1.0)
                if pending:
                    logger.warning("Request worker did not stop in time")
                    worker_task.cancel()
            logger.info("rester stopped")


async def run_app(
    config: Config,
    terminal: Terminal | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> None:
    """Build the application from *config* and run it on *terminal*."""
    app = App(
        DispatchChannel(),
        presets=PresetCollection.load(config.presets_path),
        keybindings=KeybindingsManager(config.keybindings),
        export_extension=config.export_extension,
    )
    runtime = Runtime(app, terminal or ProcessTerminal(), config, transport=transport)
    await runtime.run()
