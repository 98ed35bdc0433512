"""Lays out one frame of the application as a list of terminal lines."""

from __future__ import annotations

from rester.app import App, Modal, Mode, View
from rester.keybindings import Operation
from rester.tui.components import Block
from rester.tui.screen import composite_overlay
from rester.tui.utils import pad_to_width, truncate_to_width

METHOD_BOX_WIDTH = 11
TOP_ROW_HEIGHT = 3
FOOTER_HEIGHT = 1
DIM = "\x1b[2m"
RESET = "\x1b[0m"

_FOOTER_HINTS: tuple[tuple[str, Operation], ...] = (
    ("Send", Operation.SEND_REQUEST),
    ("URL", Operation.GOTO_URL),
    ("Method", Operation.CYCLE_METHOD),
    ("Headers", Operation.GOTO_REQUEST_HEADERS),
    ("Body", Operation.GOTO_REQUEST_BODY),
    ("Resp", Operation.GOTO_RESPONSE_BODY),
    ("Resp headers", Operation.GOTO_RESPONSE_HEADERS),
    ("Request", Operation.SWITCH_TO_REQUEST_VIEW),
    ("Response", Operation.SWITCH_TO_RESPONSE_VIEW),
    ("Save", Operation.SAVE_REQUEST),
    ("Load", Operation.LOAD_REQUEST),
    ("Export", Operation.SAVE_RESPONSE),
    ("Quit", Operation.QUIT),
)


def _split(total: int, percent: int) -> tuple[int, int]:
    first = total * percent // 100
    return first, total - first


def _boxed(title: str, active: bool, width: int, height: int, render) -> list[str]:
    block = Block(title, active)
    inner_width, inner_height = Block.inner_size(width, height)
    return block.render(width, height, render(inner_width, inner_height))


def _join_columns(left: list[str], right: list[str]) -> list[str]:
    return [a + b for a, b in zip(left, right)]


def render_top_row(app: App, width: int) -> list[str]:
    method_width = min(METHOD_BOX_WIDTH, width)
    url_width = width - method_width
    editing = app.modal is Modal.NONE

    method = _boxed(
        "Method",
        app.mode is Mode.METHOD,
        method_width,
        TOP_ROW_HEIGHT,
        lambda w, h: [pad_to_width(f" {app.method}", w)],
    )
    app.url.focused = editing and app.mode is Mode.URL
    url = _boxed("URL", app.mode is Mode.URL, url_width, TOP_ROW_HEIGHT, app.url.render)
    return _join_columns(method, url)


def render_request_view(app: App, width: int, height: int) -> list[str]:
    editing = app.modal is Modal.NONE
    headers_height, body_height = _split(height, 40)

    app.request_headers.focused = editing and app.mode is Mode.REQUEST_HEADERS
    app.request_body.focused = editing and app.mode is Mode.REQUEST_BODY
    lines = _boxed(
        "Request Headers",
        app.mode is Mode.REQUEST_HEADERS,
        width,
        headers_height,
        app.request_headers.render,
    )
    lines += _boxed(
        "Request Body",
        app.mode is Mode.REQUEST_BODY,
        width,
        body_height,
        app.request_body.render,
    )
    return lines


def render_response_view(app: App, width: int, height: int) -> list[str]:
    body_height, headers_height = _split(height, 65)
    status = app.status_text()
    body_title = f"Response Body [{status}]" if status else "Response Body"

    lines = _boxed(
        body_title,
        app.mode is Mode.RESPONSE_BODY,
        width,
        body_height,
        app.response_body.render,
    )
    lines += _boxed(
        "Response Headers",
        app.mode is Mode.RESPONSE_HEADERS,
        width,
        headers_height,
        app.response_headers.render,
    )
    return lines


def render_footer(app: App, width: int) -> str:
    hints = " | ".join(app.keybindings.help(label, op) for label, op in _FOOTER_HINTS)
    text = f"{app.message}  {hints}" if app.message else hints
    return DIM + pad_to_width(truncate_to_width(text, width, ellipsis="…"), width) + RESET


def render_save_modal(app: App, width: int) -> list[str]:
    box_width = min(50, width)
    app.request_name.focused = True
    return _boxed("Save request as", True, box_width, 3, app.request_name.render)


def render_load_modal(app: App, width: int, height: int) -> list[str]:
    box_width = min(60, width)
    box_height = max(3, min(len(app.preset_list.items) + 2, height - 4))
    return _boxed(
        "Load request (⏎ load, ⌦ delete)",
        True,
        box_width,
        box_height,
        app.preset_list.render,
    )


def render_frame(app: App, width: int, height: int) -> list[str]:
    """Compose the whole screen for *app* at *width* x *height* cells."""
    if width <= 0 or height <= 0:
        return []

    lines = render_top_row(app, width)
    middle = max(0, height - TOP_ROW_HEIGHT - FOOTER_HEIGHT)
    if app.view is View.REQUEST:
        lines += render_request_view(app, width, middle)
    else:
        lines += render_response_view(app, width, middle)
    lines = lines[: height - FOOTER_HEIGHT]
    lines += [" " * width] * (height - FOOTER_HEIGHT - len(lines))
    lines.append(render_footer(app, width))

    match app.modal:
        case Modal.SAVE:
            lines = composite_overlay(lines, render_save_modal(app, width), width, height)
        case Modal.LOAD_REQUEST:
            lines = composite_overlay(lines, render_load_modal(app, width, height), width, height)
    return lines[:height]
