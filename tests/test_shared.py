"""Tests for rester.shared -- the response cell and dirty flag."""

from __future__ import annotations

from rester.client.types import Body, Failure, Headers, Status
from rester.shared import DirtyFlag, ResponseCell, format_body, format_text


class TestDirtyFlag:
    def test_take_clears(self):
        flag = DirtyFlag()
        assert flag.take() is False
        flag.set()
        flag.set()
        assert flag.take() is True
        assert flag.take() is False


class TestResponseCell:
    def test_accumulates_messages(self):
        cell = ResponseCell()
        cell.apply(Status(200, "OK"))
        cell.apply(Headers([("a", "1"), ("b", "2")]))
        cell.apply(Body(b"hel"))
        cell.apply(Body(b"lo"))

        snap = cell.snapshot()
        assert snap.status == Status(200, "OK")
        assert snap.headers_text() == "a: 1\nb: 2"
        assert snap.body == b"hello"
        assert snap.body_text() == "hello"
        assert snap.failure is None

    def test_version_bumps_on_every_change(self):
        cell = ResponseCell()
        versions = [cell.version]
        cell.apply(Status(200, "OK"))
        versions.append(cell.version)
        cell.reset()
        versions.append(cell.version)
        assert versions == sorted(set(versions))

    def test_reset_clears(self):
        cell = ResponseCell()
        cell.apply(Status(500, "Internal Server Error"))
        cell.apply(Body(b"x"))
        cell.apply(Failure("boom"))
        cell.reset()

        snap = cell.snapshot()
        assert snap.status is None
        assert snap.headers == []
        assert snap.body == b""
        assert snap.failure is None

    def test_failure_recorded(self):
        cell = ResponseCell()
        cell.apply(Failure("connection refused"))
        assert cell.snapshot().failure == "connection refused"

    def test_snapshot_is_a_copy(self):
        cell = ResponseCell()
        cell.apply(Body(b"a"))
        snap = cell.snapshot()
        cell.apply(Body(b"b"))
        assert snap.body == b"a"


class TestFormatBody:
    def test_json_pretty_printed(self):
        assert format_body(b'{"a":[1,2]}') == '{\n  "a": [\n    1,\n    2\n  ]\n}'

    def test_json_keeps_unicode(self):
        assert format_body('{"name":"café"}'.encode()) == '{\n  "name": "café"\n}'

    def test_plain_text_unchanged(self):
        assert format_body(b"just text\nmore") == "just text\nmore"

    def test_partial_json_shown_raw(self):
        assert format_body(b'{"a": ') == '{"a": '

    def test_invalid_utf8_replaced(self):
        assert format_body(b"ok\xff") == "ok�"

    def test_control_characters_sanitized(self):
        assert format_body(b"a\x1b[31mb\r\nc\td") == "a�[31mb\nc\td"

    def test_empty(self):
        assert format_body(b"") == ""


class TestIncrementalDecoding:
    def test_character_split_across_chunks(self):
        cell = ResponseCell()
        cell.apply(Body(b"caf\xc3"))
        assert cell.snapshot().text == "caf\ufffd"
        cell.apply(Body(b"\xa9"))
        assert cell.snapshot().text == "café"

    def test_json_split_across_chunks(self):
        cell = ResponseCell()
        cell.apply(Body(b'{"a":'))
        assert cell.snapshot().body_text() == '{"a":'
        cell.apply(Body(b" 1}"))
        assert cell.snapshot().body_text() == '{\n  "a": 1\n}'

    def test_reset_starts_a_fresh_decoder(self):
        cell = ResponseCell()
        cell.apply(Body(b"\xc3"))
        cell.reset()
        cell.apply(Body(b"ok"))
        assert cell.snapshot().text == "ok"

    def test_scalar_json_left_as_is(self):
        assert format_text("  42 ") == "  42 "
