"""Tests for rester.keybindings -- defaults, overrides and footer hints."""

from __future__ import annotations

import logging

from rester.keybindings import (
    DEFAULT_KEYBINDINGS,
    KeybindingsManager,
    Operation,
    key_symbol,
)


class TestDefaults:
    def test_every_operation_bound(self) -> None:
        assert set(DEFAULT_KEYBINDINGS) == set(Operation)

    def test_defaults_are_distinct(self) -> None:
        assert len(set(DEFAULT_KEYBINDINGS.values())) == len(DEFAULT_KEYBINDINGS)

    def test_defaults_avoid_legacy_aliases(self) -> None:
        for key_id in DEFAULT_KEYBINDINGS.values():
            assert key_id not in ("ctrl+h", "ctrl+i", "ctrl+j", "ctrl+m")

    def test_operation_for_raw_input(self) -> None:
        kb = KeybindingsManager()
        assert kb.operation_for("\x15") is Operation.GOTO_URL
        assert kb.operation_for("\x17") is Operation.QUIT
        assert kb.operation_for("\x1b\r") is Operation.SEND_REQUEST
        assert kb.operation_for("\x1bs") is Operation.SAVE_RESPONSE

    def test_unbound_input(self) -> None:
        kb = KeybindingsManager()
        assert kb.operation_for("a") is None
        assert kb.operation_for("\r") is None
        assert kb.operation_for("") is None

    def test_modifiers_must_match_exactly(self) -> None:
        kb = KeybindingsManager()
        # alt+ctrl+u is not ctrl+u
        assert kb.operation_for("\x1b\x15") is None

    def test_kitty_encoding_matches(self) -> None:
        kb = KeybindingsManager()
        assert kb.operation_for("\x1b[117;5u") is Operation.GOTO_URL


class TestOverrides:
    def test_override_replaces_default(self) -> None:
        kb = KeybindingsManager({"quit": "ctrl+x"})
        assert kb.get_key(Operation.QUIT) == "ctrl+x"
        assert kb.operation_for("\x18") is Operation.QUIT
        assert kb.operation_for("\x17") is None

    def test_unknown_operation_warns(self, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="rester.keybindings"):
            kb = KeybindingsManager({"launch-rockets": "ctrl+x"})
        assert "launch-rockets" in caplog.text
        assert kb.operation_for("\x18") is None

    def test_invalid_key_keeps_default(self, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="rester.keybindings"):
            kb = KeybindingsManager({"quit": "ctrl+"})
        assert "Invalid key" in caplog.text
        assert kb.get_key(Operation.QUIT) == "ctrl+w"

    def test_conflicting_binding_warns(self, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="rester.keybindings"):
            kb = KeybindingsManager({"quit": "ctrl+u"})
        assert "bound to both" in caplog.text
        assert kb.operation_for("\x15") is Operation.QUIT

    def test_set_config_rebuilds(self) -> None:
        kb = KeybindingsManager({"quit": "ctrl+x"})
        kb.set_config({})
        assert kb.operation_for("\x17") is Operation.QUIT
        assert kb.operation_for("\x18") is None


class TestHints:
    def test_key_symbols(self) -> None:
        assert key_symbol("alt+enter") == "⎇⏎"
        assert key_symbol("ctrl+u") == "^U"
        assert key_symbol("alt+s") == "⎇S"
        assert key_symbol("shift+tab") == "⇧⇥"
        assert key_symbol("f5") == "f5"
        assert key_symbol("") == ""

    def test_help(self) -> None:
        kb = KeybindingsManager()
        assert kb.help("URL", Operation.GOTO_URL) == "URL ^U"
        assert kb.help("Send", Operation.SEND_REQUEST) == "Send ⎇⏎"

    def test_help_follows_override(self) -> None:
        kb = KeybindingsManager({"send-request": "ctrl+g"})
        assert kb.help("Send", Operation.SEND_REQUEST) == "Send ^G"
