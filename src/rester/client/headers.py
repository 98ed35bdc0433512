"""Parsing of the free-form request header text."""

from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

# RFC 9110 token characters
_TOKEN_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")

# Any control character except horizontal tab
_INVALID_VALUE_RE = re.compile(r"[\x00-\x08\x0a-\x1f\x7f]")


def is_valid_name(name: str) -> bool:
    return bool(_TOKEN_RE.match(name))


def is_valid_value(value: str) -> bool:
    return not _INVALID_VALUE_RE.search(value)


def split_header_lines(text: str) -> list[tuple[str, str]]:
    """Split *text* on newlines and each line on its first colon.

    Lines without a colon are skipped; names and values are trimmed. No
    validation happens here.
    """
    pairs: list[tuple[str, str]] = []
    for line in text.split("\n"):
        name, sep, value = line.partition(":")
        if not sep:
            continue
        pairs.append((name.strip(), value.strip()))
    return pairs


def parse_headers(text: str) -> list[tuple[str, str]]:
    """Turn user-typed header text into ``(name, value)`` pairs.

    Malformed lines (no colon, a name that is not a valid header token, or a
    value containing control characters) are dropped. Order and duplicates
    are preserved.
    """
    headers: list[tuple[str, str]] = []
    for name, value in split_header_lines(text):
        if not is_valid_name(name) or not is_valid_value(value):
            logger.debug("Dropping malformed header line %r", f"{name}: {value}")
            continue
        headers.append((name, value))
    return headers


def format_headers(items: list[tuple[str, str]]) -> str:
    """Inverse of :func:`parse_headers`: one ``name: value`` per line."""
    return "\n".join(f"{name}: {value}" for name, value in items)
