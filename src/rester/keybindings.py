"""Application key bindings."""

from __future__ import annotations

import logging
from enum import Enum

from rester.tui.keys import MODIFIERS, KeyId, parse_key, parse_key_id

logger = logging.getLogger(__name__)


class Operation(Enum):
    GOTO_URL = "goto-url"
    GOTO_REQUEST_BODY = "goto-request-body"
    GOTO_REQUEST_HEADERS = "goto-request-headers"
    GOTO_RESPONSE_BODY = "goto-response-body"
    GOTO_RESPONSE_HEADERS = "goto-response-headers"
    LOAD_REQUEST = "load-request"
    SAVE_REQUEST = "save-request"
    SAVE_RESPONSE = "save-response"
    CYCLE_METHOD = "cycle-method"
    SWITCH_TO_REQUEST_VIEW = "request-view"
    SWITCH_TO_RESPONSE_VIEW = "response-view"
    SEND_REQUEST = "send-request"
    QUIT = "quit"


KeybindingsConfig = dict[str, KeyId]

# ctrl+h, ctrl+i, ctrl+j and ctrl+m arrive as backspace, tab and enter on
# legacy terminals, so the defaults avoid them.
DEFAULT_KEYBINDINGS: dict[Operation, KeyId] = {
    Operation.GOTO_URL: "ctrl+u",
    Operation.GOTO_REQUEST_BODY: "ctrl+b",
    Operation.GOTO_REQUEST_HEADERS: "ctrl+e",
    Operation.GOTO_RESPONSE_BODY: "ctrl+o",
    Operation.GOTO_RESPONSE_HEADERS: "ctrl+n",
    Operation.LOAD_REQUEST: "ctrl+r",
    Operation.SAVE_REQUEST: "ctrl+s",
    Operation.SAVE_RESPONSE: "alt+s",
    Operation.CYCLE_METHOD: "ctrl+p",
    Operation.SWITCH_TO_REQUEST_VIEW: "ctrl+a",
    Operation.SWITCH_TO_RESPONSE_VIEW: "ctrl+q",
    Operation.SEND_REQUEST: "alt+enter",
    Operation.QUIT: "ctrl+w",
}

_KEY_SYMBOLS: dict[str, str] = {
    "backspace": "⌫",
    "enter": "⏎",
    "left": "←",
    "right": "→",
    "up": "↑",
    "down": "↓",
    "home": "⇱",
    "end": "End",
    "pageUp": "PgUp",
    "pageDown": "PgDn",
    "tab": "⇥",
    "delete": "⌦",
    "insert": "Ins",
    "escape": "Esc",
    "space": "Space",
}


def key_symbol(key_id: KeyId) -> str:
    """Compact display form of a key id: ``"alt+enter"`` -> ``"⎇⏎"``."""
    parsed = parse_key_id(key_id)
    if parsed is None:
        return ""
    modifiers, key = parsed
    prefix = ""
    if modifiers & MODIFIERS["alt"]:
        prefix += "⎇"
    if modifiers & MODIFIERS["ctrl"]:
        prefix += "^"
    if modifiers & MODIFIERS["shift"]:
        prefix += "⇧"
    return prefix + _KEY_SYMBOLS.get(key, key.upper() if len(key) == 1 else key)


class KeybindingsManager:
    """Maps raw input to operations.

    Bindings come from :data:`DEFAULT_KEYBINDINGS`, overridden per operation
    by *config* (operation name -> key id). Matching requires the exact
    modifier set.
    """

    def __init__(self, config: KeybindingsConfig | None = None) -> None:
        self._bindings: dict[Operation, KeyId] = {}
        self._lookup: dict[tuple[int, str], Operation] = {}
        self._build_maps(config or {})

    def _build_maps(self, config: KeybindingsConfig) -> None:
        self._bindings = dict(DEFAULT_KEYBINDINGS)
        for name, key_id in config.items():
            try:
                operation = Operation(name)
            except ValueError:
                logger.warning("Unknown operation in keybindings: %s", name)
                continue
            if parse_key_id(key_id) is None:
                logger.warning("Invalid key %r for %s", key_id, name)
                continue
            self._bindings[operation] = key_id

        self._lookup = {}
        for operation, key_id in self._bindings.items():
            parsed = parse_key_id(key_id)
            if parsed in self._lookup:
                logger.warning(
                    "%s is bound to both %s and %s", key_id, self._lookup[parsed].value, operation.value
                )
            self._lookup[parsed] = operation

    def set_config(self, config: KeybindingsConfig) -> None:
        self._build_maps(config)

    def get_key(self, operation: Operation) -> KeyId:
        return self._bindings[operation]

    def operation_for(self, data: str) -> Operation | None:
        """The operation bound to raw input *data*, if any."""
        key = parse_key(data)
        if key is None:
            return None
        parsed = parse_key_id(key)
        if parsed is None:
            return None
        return self._lookup.get(parsed)

    def help(self, label: str, operation: Operation) -> str:
        """``"URL ^U"``-style hint for the footer."""
        key_id = self._bindings.get(operation)
        if key_id is None:
            return label
        return f"{label} {key_symbol(key_id)}"
