"""Application state machine: focus mode, visible view, modal dialogs."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from pathlib import Path

from rester.client.dispatch import ChannelClosed, DispatchChannel
from rester.client.stream import ResponseStream
from rester.client.types import METHODS, Method, Request, next_method
from rester.export import DEFAULT_EXTENSION, save_response
from rester.keybindings import KeybindingsManager, Operation
from rester.presets import Preset, PresetCollection
from rester.shared import DirtyFlag, ResponseCell
from rester.tui.components import ScrollableContent, SelectList, TextArea
from rester.tui.keys import is_key_release, parse_key

logger = logging.getLogger(__name__)


class Mode(Enum):
    URL = "url"
    METHOD = "method"
    REQUEST_HEADERS = "request-headers"
    REQUEST_BODY = "request-body"
    RESPONSE_HEADERS = "response-headers"
    RESPONSE_BODY = "response-body"


# Tab order
MODES: tuple[Mode, ...] = tuple(Mode)


class View(Enum):
    REQUEST = "request"
    RESPONSE = "response"


class Modal(Enum):
    NONE = "none"
    SAVE = "save"
    LOAD_REQUEST = "load-request"


_REQUEST_MODES = (Mode.REQUEST_HEADERS, Mode.REQUEST_BODY)
_RESPONSE_MODES = (Mode.RESPONSE_HEADERS, Mode.RESPONSE_BODY)


class App:
    """All interactive state plus the input handling that drives it.

    ``handle_input`` is synchronous and must run on the event loop thread:
    sending a request spawns a task that submits it to *channel* and pumps
    the replies into ``response``, setting ``dirty`` after each one.
    """

    def __init__(
        self,
        channel: DispatchChannel,
        presets: PresetCollection | None = None,
        keybindings: KeybindingsManager | None = None,
        export_dir: str | Path = ".",
        export_extension: str = DEFAULT_EXTENSION,
    ) -> None:
        self._channel = channel
        self.presets = presets if presets is not None else PresetCollection(path=None)
        self.keybindings = keybindings or KeybindingsManager()
        self._export_dir = Path(export_dir)
        self._export_extension = export_extension

        self.method: Method = "GET"
        self.url = TextArea(multiline=False)
        self.request_headers = TextArea()
        self.request_body = TextArea()
        self.response_body = ScrollableContent()
        self.response_headers = ScrollableContent()

        self.response = ResponseCell()
        self.dirty = DirtyFlag()
        self._response_version = self.response.version
        self._pump: asyncio.Task[None] | None = None
        self._in_flight = False

        self.mode = Mode.URL
        self.view = View.REQUEST
        self.modal = Modal.NONE
        self.request_name = TextArea(multiline=False)
        self.preset_list = SelectList()

        self.running = True
        self.message = ""

    @property
    def channel(self) -> DispatchChannel:
        return self._channel

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def handle_input(self, data: str) -> None:
        if is_key_release(data):
            return

        operation = self.keybindings.operation_for(data)
        if operation is not None:
            if self.modal is Modal.NONE or operation is Operation.QUIT:
                self.run_operation(operation)
            return

        key = parse_key(data)
        if key == "escape":
            if self.modal is Modal.NONE:
                self.quit()
            else:
                self.modal = Modal.NONE
            return

        match self.modal:
            case Modal.SAVE:
                self._handle_save_input(data, key)
                return
            case Modal.LOAD_REQUEST:
                self._handle_load_input(key)
                return

        if key == "tab":
            self.next_mode()
            return
        if key == "shift+tab":
            self.next_mode(previous=True)
            return

        match self.mode:
            case Mode.URL:
                if key == "enter":
                    self.send_request()
                else:
                    self.url.handle_input(data)
            case Mode.METHOD:
                if key in ("down", "enter", "space"):
                    self.method = next_method(self.method)
                elif key == "up":
                    self.method = METHODS[METHODS.index(self.method) - 1]
            case Mode.REQUEST_HEADERS:
                self.request_headers.handle_input(data)
            case Mode.REQUEST_BODY:
                self.request_body.handle_input(data)
            case Mode.RESPONSE_HEADERS:
                if key:
                    self.response_headers.handle_input(key)
            case Mode.RESPONSE_BODY:
                if key:
                    self.response_body.handle_input(key)

    def run_operation(self, operation: Operation) -> None:
        logger.debug("Operation %s", operation.value)
        match operation:
            case Operation.GOTO_URL:
                self.set_mode(Mode.URL)
            case Operation.GOTO_REQUEST_HEADERS:
                self.set_mode(Mode.REQUEST_HEADERS)
            case Operation.GOTO_REQUEST_BODY:
                self.set_mode(Mode.REQUEST_BODY)
            case Operation.GOTO_RESPONSE_HEADERS:
                self.set_mode(Mode.RESPONSE_HEADERS)
            case Operation.GOTO_RESPONSE_BODY:
                self.set_mode(Mode.RESPONSE_BODY)
            case Operation.SWITCH_TO_REQUEST_VIEW:
                self.view = View.REQUEST
                if self.mode in _RESPONSE_MODES:
                    self.mode = Mode.REQUEST_BODY
            case Operation.SWITCH_TO_RESPONSE_VIEW:
                self.view = View.RESPONSE
                if self.mode in _REQUEST_MODES:
                    self.mode = Mode.RESPONSE_BODY
            case Operation.CYCLE_METHOD:
                self.method = next_method(self.method)
            case Operation.SEND_REQUEST:
                self.send_request()
            case Operation.SAVE_REQUEST:
                self.open_save_modal()
            case Operation.LOAD_REQUEST:
                self.open_load_modal()
            case Operation.SAVE_RESPONSE:
                self.save_response()
            case Operation.QUIT:
                self.quit()

    # ------------------------------------------------------------------
    # Focus
    # ------------------------------------------------------------------

    def set_mode(self, mode: Mode) -> None:
        """Focus a pane; the view follows when the pane lives in the other one."""
        self.mode = mode
        if mode in _REQUEST_MODES:
            self.view = View.REQUEST
        elif mode in _RESPONSE_MODES:
            self.view = View.RESPONSE

    def next_mode(self, previous: bool = False) -> None:
        index = MODES.index(self.mode) + (-1 if previous else 1)
        self.set_mode(MODES[index % len(MODES)])

    def quit(self) -> None:
        logger.info("Quit requested")
        self.running = False

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def send_request(self) -> bool:
        """Dispatch the current request. Returns ``False`` when the URL is empty."""
        url = self.url.text.strip()
        if not url:
            self.message = "Enter a URL first"
            return False

        self._stop_pump()
        self.reset_response()

        stream = ResponseStream()
        request = Request(
            method=self.method,
            url=url,
            headers=self.request_headers.text,
            body=self.request_body.text,
            reply=stream,
        )
        self._in_flight = True
        self._pump = asyncio.get_running_loop().create_task(self._pump_response(request))
        self.view = View.RESPONSE
        self.message = ""
        logger.info("Dispatched %s %s", request.method, request.url)
        return True

    async def _pump_response(self, request: Request) -> None:
        stream = request.reply
        try:
            await self._channel.submit(request)
            async for message in stream:
                self.response.apply(message)
                self.dirty.set()
        except ChannelClosed:
            logger.warning("Dispatch channel closed, request dropped")
        finally:
            stream.abandon()
            if self._pump is asyncio.current_task():
                self._in_flight = False
                self._pump = None
                self.dirty.set()

    def _stop_pump(self) -> None:
        if self._pump is not None and not self._pump.done():
            self._pump.cancel()
        self._pump = None
        self._in_flight = False

    def cancel_request(self) -> None:
        """Stop listening to the in-flight request and tell the worker to drop it."""
        if self._in_flight:
            self._stop_pump()
            self._channel.cancel_nowait()

    def reset_response(self) -> None:
        self.response.reset()
        self.response_body.reset()
        self.response_headers.reset()
        self._response_version = self.response.version

    def sync_response(self) -> bool:
        """Copy new response data into the display panes. ``True`` if anything changed."""
        snapshot = self.response.snapshot()
        if snapshot.version == self._response_version:
            return False
        self._response_version = snapshot.version

        headers = snapshot.headers_text()
        if headers != self.response_headers.text:
            self.response_headers.set_value(headers)
        body = snapshot.body_text()
        if snapshot.failure is not None:
            body = f"{body}\n\nRequest failed: {snapshot.failure}" if body else f"Request failed: {snapshot.failure}"
        if body != self.response_body.text:
            self.response_body.set_value(body)
        return True

    def status_text(self) -> str:
        snapshot = self.response.snapshot()
        if snapshot.failure is not None:
            return "Failed"
        if snapshot.status is not None:
            return str(snapshot.status)
        if self._in_flight:
            return "…"
        return ""

    # ------------------------------------------------------------------
    # Save modal
    # ------------------------------------------------------------------

    def open_save_modal(self) -> None:
        self.modal = Modal.SAVE
        self.request_name.focused = True

    def _handle_save_input(self, data: str, key: str | None) -> None:
        if key == "enter":
            self.save_request()
        else:
            self.request_name.handle_input(data)

    def save_request(self) -> bool:
        name = self.request_name.text.strip()
        url = self.url.text.strip()
        if not name or not url:
            return False

        preset = Preset.from_fields(
            key=name,
            method=self.method,
            url=url,
            headers=self.request_headers.text,
            body=self.request_body.text,
        )
        self.presets.upsert(preset)
        self.presets.save()
        self.modal = Modal.NONE
        self.message = f"Saved '{name}'"
        logger.info("Saved preset %s", name)
        return True

    # ------------------------------------------------------------------
    # Load modal
    # ------------------------------------------------------------------

    def open_load_modal(self) -> None:
        if not len(self.presets):
            self.message = "No saved requests"
            return
        self.preset_list.set_items(self.presets.keys())
        self.preset_list.set_selected_index(0)
        self.modal = Modal.LOAD_REQUEST

    def _handle_load_input(self, key: str | None) -> None:
        match key:
            case "up":
                self.preset_list.move_up()
            case "down":
                self.preset_list.move_down()
            case "enter":
                self.apply_preset(self.preset_list.selected_index)
            case "delete":
                self.delete_preset(self.preset_list.selected_index)

    def apply_preset(self, index: int) -> None:
        if not 0 <= index < len(self.presets):
            return
        preset = self.presets.presets[index]

        self.cancel_request()
        self.reset_response()
        self.url.set_value(preset.url)
        self.method = preset.method
        self.request_headers.set_value(preset.headers_text())
        self.request_body.set_value(preset.body or "")
        self.request_name.set_value(preset.key)
        self.modal = Modal.NONE
        self.message = f"Loaded '{preset.key}'"
        logger.info("Loaded preset %s", preset.key)

    def delete_preset(self, index: int) -> None:
        removed = self.presets.remove(index)
        if removed is None:
            return
        self.presets.save()
        logger.info("Deleted preset %s", removed.key)
        self.preset_list.set_items(self.presets.keys())
        if index > 0:
            self.preset_list.set_selected_index(index - 1)
        if not len(self.presets):
            self.modal = Modal.NONE

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def save_response(self) -> Path | None:
        if self.response_body.is_empty():
            self.message = "No response body to save"
            return None
        path = save_response(
            self.url.text.strip(),
            self.response_body.text,
            directory=self._export_dir,
            extension=self._export_extension,
        )
        self.message = f"Saved response to {path.name}" if path else "Could not save response"
        return path

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Stop the response pump and close the dispatch channel."""
        pump = self._pump
        self._stop_pump()
        if pump is not None:
            await asyncio.wait({pump})
        self._channel.close()
