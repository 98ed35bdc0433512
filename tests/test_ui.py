"""Tests for rester.ui -- frame layout."""

from __future__ import annotations

import pytest

from rester.app import App, Modal, Mode, View
from rester.client.dispatch import DispatchChannel
from rester.client.types import Headers, Status
from rester.presets import Preset, PresetCollection
from rester.tui.utils import visible_width
from rester.ui import render_frame

from .test_screen import strip_sgr


@pytest.fixture
def app() -> App:
    return App(DispatchChannel(), presets=PresetCollection(path=None))


def text_of(lines: list[str]) -> str:
    return "\n".join(strip_sgr(line) for line in lines)


class TestLayout:
    @pytest.mark.parametrize(("width", "height"), [(80, 24), (120, 40), (40, 12)])
    def test_frame_fills_terminal(self, app, width, height):
        lines = render_frame(app, width, height)
        assert len(lines) == height
        assert all(visible_width(line) == width for line in lines)

    def test_request_view_panes(self, app):
        text = text_of(render_frame(app, 80, 24))
        for title in ("Method", "URL", "Request Headers", "Request Body"):
            assert title in text
        assert "Response Body" not in text

    def test_response_view_panes(self, app):
        app.view = View.RESPONSE
        text = text_of(render_frame(app, 80, 24))
        assert "Response Body" in text
        assert "Response Headers" in text
        assert "Request Body" not in text

    def test_method_and_url_shown(self, app):
        app.method = "PATCH"
        app.url.set_value("http://example.test/thing")
        text = text_of(render_frame(app, 80, 24))
        assert "PATCH" in text
        assert "http://example.test/thing" in text

    def test_status_in_response_title(self, app):
        app.view = View.RESPONSE
        app.response.apply(Status(404, "Not Found"))
        app.response.apply(Headers([("content-type", "text/plain")]))
        app.sync_response()
        text = text_of(render_frame(app, 80, 24))
        assert "Response Body [404 Not Found]" in text
        assert "content-type: text/plain" in text

    def test_active_pane_has_double_border(self, app):
        app.set_mode(Mode.REQUEST_BODY)
        lines = [strip_sgr(line) for line in render_frame(app, 80, 24)]
        body_top = next(line for line in lines if "Request Body" in line)
        headers_top = next(line for line in lines if "Request Headers" in line)
        assert body_top.startswith("╔")
        assert headers_top.startswith("┌")

    def test_footer_shows_key_hints(self, app):
        footer = strip_sgr(render_frame(app, 200, 24)[-1])
        assert "Send ⎇⏎" in footer
        assert "URL ^U" in footer
        assert "Quit ^W" in footer

    def test_footer_shows_message(self, app):
        app.message = "Saved 'x'"
        assert strip_sgr(render_frame(app, 80, 24)[-1]).startswith("Saved 'x'")

    @pytest.mark.parametrize(("width", "height"), [(1, 1), (5, 3), (12, 4), (0, 10), (10, 0)])
    def test_tiny_terminals(self, app, width, height):
        lines = render_frame(app, width, height)
        assert len(lines) == (height if width > 0 else 0)


class TestModals:
    def test_save_modal_overlay(self, app):
        app.modal = Modal.SAVE
        app.request_name.set_value("my-request")
        lines = render_frame(app, 80, 24)
        text = text_of(lines)
        assert "Save request as" in text
        assert "my-request" in text
        assert all(visible_width(line) == 80 for line in lines)

    def test_load_modal_lists_presets(self, app):
        for name in ("alpha", "beta"):
            app.presets.upsert(Preset(key=name, url="http://example.test/"))
        app.open_load_modal()
        text = text_of(render_frame(app, 80, 24))
        assert "Load request" in text
        assert "→ alpha" in text
        assert "  beta" in text

    def test_modal_unfocuses_editors(self, app):
        app.modal = Modal.SAVE
        render_frame(app, 80, 24)
        assert app.url.focused is False
