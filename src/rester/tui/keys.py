"""Keyboard input parsing for terminal applications.

Turns raw terminal input (legacy escape sequences, control bytes, the Kitty
keyboard protocol's CSI-u encoding and xterm's modifyOtherKeys) into key
identifiers such as ``"a"``, ``"ctrl+u"``, ``"alt+enter"`` or ``"pageDown"``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

KeyId = str

# ---------------------------------------------------------------------------
# Global state: kitty keyboard protocol
# ---------------------------------------------------------------------------

_kitty_protocol_active: bool = False


def set_kitty_protocol_active(active: bool) -> None:
    global _kitty_protocol_active
    _kitty_protocol_active = active


def is_kitty_protocol_active() -> bool:
    return _kitty_protocol_active


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MODIFIERS: dict[str, int] = {
    "shift": 1,
    "alt": 2,
    "ctrl": 4,
}

LOCK_MASK = 64 + 128

CODEPOINTS: dict[int, str] = {
    27: "escape",
    9: "tab",
    13: "enter",
    32: "space",
    127: "backspace",
    57414: "enter",  # keypad enter
}

LEGACY_KEY_SEQUENCES: dict[str, str] = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1b[H": "home",
    "\x1b[F": "end",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\x1bOH": "home",
    "\x1bOF": "end",
    "\x1b[1~": "home",
    "\x1b[2~": "insert",
    "\x1b[3~": "delete",
    "\x1b[4~": "end",
    "\x1b[5~": "pageUp",
    "\x1b[6~": "pageDown",
    "\x1b[7~": "home",
    "\x1b[8~": "end",
    "\x1bOP": "f1",
    "\x1bOQ": "f2",
    "\x1bOR": "f3",
    "\x1bOS": "f4",
    "\x1b[15~": "f5",
    "\x1b[17~": "f6",
    "\x1b[18~": "f7",
    "\x1b[19~": "f8",
    "\x1b[20~": "f9",
    "\x1b[21~": "f10",
    "\x1b[23~": "f11",
    "\x1b[24~": "f12",
    "\x1b[Z": "shift+tab",
}

_LETTER_KEYS: dict[str, str] = {
    "A": "up",
    "B": "down",
    "C": "right",
    "D": "left",
    "H": "home",
    "F": "end",
    "P": "f1",
    "Q": "f2",
    "R": "f3",
    "S": "f4",
}

_TILDE_KEYS: dict[int, str] = {
    1: "home",
    2: "insert",
    3: "delete",
    4: "end",
    5: "pageUp",
    6: "pageDown",
    15: "f5",
    17: "f6",
    18: "f7",
    19: "f8",
    20: "f9",
    21: "f10",
    23: "f11",
    24: "f12",
}

# Kitty CSI-u functional key codepoints (57344+ private use area)
_KITTY_FUNCTIONAL_CODEPOINTS: dict[int, str] = {
    57364 + i: f"f{i + 1}" for i in range(12)
}

# Keys that a legacy terminal reports with an implicit ctrl
_CTRL_ALIASES: dict[str, str] = {
    "\x00": "ctrl+space",
    "\x1c": "ctrl+\\",
    "\x1d": "ctrl+]",
    "\x1e": "ctrl+^",
    "\x1f": "ctrl+_",
}

# ---------------------------------------------------------------------------
# Kitty protocol
# ---------------------------------------------------------------------------


@dataclass
class ParsedKittySequence:
    codepoint: int
    key: str | None
    modifier: int
    event_type: int  # 1 = press, 2 = repeat, 3 = release


# CSI u: \x1b[<codepoint>(:<shifted>(:<base>))?(;<modifier>(:<event>))?u
_KITTY_CSI_U_RE = re.compile(
    r"^\x1b\[(\d+)(?::(\d*)(?::(\d+))?)?(?:;(\d+)(?::(\d+))?)?u$"
)

# Letter-terminated keys with modifiers: \x1b[1;<modifier>(:<event>)?<letter>
_KITTY_LETTER_RE = re.compile(r"^\x1b\[1;(\d+)(?::(\d+))?([ABCDHFPQRS])$")

# Tilde-terminated keys with modifiers: \x1b[<number>;<modifier>(:<event>)?~
_KITTY_TILDE_RE = re.compile(r"^\x1b\[(\d+);(\d+)(?::(\d+))?~$")

# xterm modifyOtherKeys: \x1b[27;<modifier>;<keycode>~
_MODIFY_OTHER_KEYS_RE = re.compile(r"^\x1b\[27;(\d+);(\d+)~$")

_RELEASE_RE = re.compile(r"(?::3u|;\d+:3[~ABCDHFPQRS])$")


def is_key_release(data: str) -> bool:
    """``True`` for Kitty key-release events, which callers usually ignore."""
    if data.startswith("\x1b[200~"):
        return False
    return bool(_RELEASE_RE.search(data))


def parse_kitty_sequence(data: str) -> ParsedKittySequence | None:
    """Parse a Kitty keyboard protocol (or xterm modified key) sequence."""
    m = _KITTY_CSI_U_RE.match(data)
    if m:
        codepoint = int(m.group(1))
        key = CODEPOINTS.get(codepoint) or _KITTY_FUNCTIONAL_CODEPOINTS.get(codepoint)
        if key is None and codepoint > 0:
            ch = chr(codepoint)
            key = ch.lower() if ch.isprintable() else None
        return ParsedKittySequence(
            codepoint=codepoint,
            key=key,
            modifier=int(m.group(4)) if m.group(4) else 1,
            event_type=int(m.group(5)) if m.group(5) else 1,
        )

    m = _KITTY_LETTER_RE.match(data)
    if m:
        return ParsedKittySequence(
            codepoint=0,
            key=_LETTER_KEYS[m.group(3)],
            modifier=int(m.group(1)),
            event_type=int(m.group(2)) if m.group(2) else 1,
        )

    m = _KITTY_TILDE_RE.match(data)
    if m and int(m.group(1)) != 27:
        return ParsedKittySequence(
            codepoint=0,
            key=_TILDE_KEYS.get(int(m.group(1))),
            modifier=int(m.group(2)),
            event_type=int(m.group(3)) if m.group(3) else 1,
        )

    return None


def _modifier_prefix(modifier: int) -> str:
    mod = (modifier - 1) & ~LOCK_MASK
    prefix = ""
    if mod & MODIFIERS["ctrl"]:
        prefix += "ctrl+"
    if mod & MODIFIERS["shift"]:
        prefix += "shift+"
    if mod & MODIFIERS["alt"]:
        prefix += "alt+"
    return prefix


# ---------------------------------------------------------------------------
# parse_key
# ---------------------------------------------------------------------------


def parse_key(data: str) -> KeyId | None:  # noqa: C901
    """Parse raw terminal input and return its key identifier, or ``None``."""
    if not data:
        return None

    parsed = parse_kitty_sequence(data)
    if parsed is not None:
        if parsed.key is None:
            return None
        return _modifier_prefix(parsed.modifier) + parsed.key

    m = _MODIFY_OTHER_KEYS_RE.match(data)
    if m:
        keycode = int(m.group(2))
        key = CODEPOINTS.get(keycode)
        if key is None:
            ch = chr(keycode)
            if not ch.isprintable():
                return None
            key = ch.lower()
        return _modifier_prefix(int(m.group(1))) + key

    legacy = LEGACY_KEY_SEQUENCES.get(data)
    if legacy is not None:
        return legacy

    # Single-byte keys
    if data == "\x1b":
        return "escape"
    if data in ("\r", "\n"):
        return "enter"
    if data == "\t":
        return "tab"
    if data == " ":
        return "space"
    if data in ("\x7f", "\x08"):
        return "backspace"
    if data in _CTRL_ALIASES:
        return _CTRL_ALIASES[data]

    # Ctrl + letter (0x01 - 0x1a)
    if len(data) == 1 and 1 <= ord(data) <= 26:
        return "ctrl+" + chr(ord(data) + ord("a") - 1)

    # Alt + key (ESC prefix)
    if len(data) == 2 and data[0] == "\x1b":
        ch = data[1]
        if ch == "\x1b":
            return "alt+escape"
        if ch in ("\r", "\n"):
            return "alt+enter"
        if ch == "\t":
            return "alt+tab"
        if ch == " ":
            return "alt+space"
        if ch in ("\x7f", "\x08"):
            return "alt+backspace"
        if 1 <= ord(ch) <= 26:
            return "ctrl+alt+" + chr(ord(ch) + ord("a") - 1)
        if ch.isupper():
            return "shift+alt+" + ch.lower()
        if ch.isprintable():
            return "alt+" + ch

    # Plain printable character
    if len(data) == 1 and data.isprintable():
        return data

    return None


# ---------------------------------------------------------------------------
# Key ID parsing and matching
# ---------------------------------------------------------------------------


_KEY_ALIASES: dict[str, str] = {
    "pageup": "pageUp",
    "pagedown": "pageDown",
    "esc": "escape",
    "return": "enter",
}


def parse_key_id(key_id: str) -> tuple[int, str] | None:
    """Split a key identifier like ``"ctrl+shift+a"`` into ``(modifiers, key)``.

    Modifier names are case-insensitive and may appear in any order; the
    bitmask uses shift=1, alt=2, ctrl=4. Returns ``None`` for an empty or
    modifier-only identifier.
    """
    if not key_id:
        return None

    # "ctrl++" binds the plus key
    parts = key_id.split("+")
    if key_id.endswith("++"):
        parts = [*key_id[:-2].split("+"), "+"]

    modifier = 0
    key_parts: list[str] = []
    for part in parts:
        lower = part.lower()
        if lower in MODIFIERS and not key_parts:
            modifier |= MODIFIERS[lower]
        else:
            key_parts.append(part)

    key = "+".join(key_parts)
    if not key:
        return None

    # A bare uppercase letter means shift+letter
    if len(key) == 1 and key.isupper():
        modifier |= MODIFIERS["shift"]
    lower = key.lower()
    return modifier, _KEY_ALIASES.get(lower, lower)


def matches_key(data: str, key_id: KeyId) -> bool:
    """Check whether raw terminal input corresponds to *key_id*.

    Modifiers must match exactly: ``"ctrl+s"`` does not match ctrl+alt+s.
    """
    parsed = parse_key(data)
    if parsed is None:
        return False
    return parse_key_id(parsed) == parse_key_id(key_id)
