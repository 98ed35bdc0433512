"""Terminal text utilities: width measurement, wrapping, column slicing.

All width calculations work on grapheme clusters so that combining marks,
emoji sequences and East Asian wide characters occupy the number of cells a
terminal actually gives them.
"""

from __future__ import annotations

import re
import unicodedata

import grapheme
import wcwidth as _wcwidth

TAB_TEXT = "   "

# SGR / cursor CSI sequences and OSC strings
_STRIP_RE = re.compile(
    r"\x1b\[[0-9;?]*[A-Za-z]"
    r"|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)"
)

# C0 and C1 controls except tab and newline
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b-\x1f\x7f-\x9f]")

_WORD_RE = re.compile(r"\S+|\s+")

REPLACEMENT_CHAR = "�"

# ---------------------------------------------------------------------------
# Width cache (capped at 512 entries)
# ---------------------------------------------------------------------------

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _cache_width(key: str, value: int) -> int:
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[key] = value
    return value


# ---------------------------------------------------------------------------
# Grapheme width
# ---------------------------------------------------------------------------


def grapheme_width(g: str) -> int:
    """Return the terminal display width of a single grapheme cluster.

    Control characters and lone combining marks are zero width, emoji
    sequences (VS16, ZWJ, skin tones, flags) are two cells, everything else
    is whatever wcwidth says about the first codepoint.
    """
    if not g:
        return 0

    if g == "\t":
        return len(TAB_TEXT)

    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or (0x7F <= cp <= 0x9F):
            return 0
        return max(_wcwidth.wcwidth(g), 0)

    for ch in g:
        cp = ord(ch)
        if cp in (0xFE0F, 0x200D):
            return 2
        if 0x1F3FB <= cp <= 0x1F3FF or 0x1F1E6 <= cp <= 0x1F1FF:
            return 2

    first = g[0]
    if ord(first) >= 0x1F000:
        return 2

    cat = unicodedata.category(first)
    if cat.startswith("M") or cat == "Cf":
        return 0

    return max(_wcwidth.wcwidth(first), 0)


def visible_width(text: str) -> int:
    """Visible terminal width of *text*, ignoring escape sequences.

    Tabs count as three cells.
    """
    if not text:
        return 0

    stripped = _STRIP_RE.sub("", text)
    if not stripped:
        return 0

    if stripped.isascii() and stripped.isprintable():
        return len(stripped)

    cached = _width_cache.get(stripped)
    if cached is not None:
        return cached

    total = 0
    for g in grapheme.graphemes(stripped):
        total += grapheme_width(g)
    return _cache_width(stripped, total)


def extract_ansi_code(text: str, pos: int) -> tuple[str, int] | None:
    """Return ``(code, length)`` for an escape sequence starting at *pos*.

    Recognises CSI sequences (``ESC[`` params final-byte) and OSC strings
    terminated by BEL or ST. Returns ``None`` when *pos* is not the start of
    a complete sequence.
    """
    if pos + 1 >= len(text) or text[pos] != "\x1b":
        return None

    next_ch = text[pos + 1]

    if next_ch == "[":
        i = pos + 2
        while i < len(text):
            ch = text[i]
            if "@" <= ch <= "~":
                code = text[pos : i + 1]
                return (code, len(code))
            if ch.isdigit() or ch in ";?":
                i += 1
                continue
            break
        return None

    if next_ch == "]":
        i = pos + 2
        while i < len(text):
            ch = text[i]
            if ch == "\x07":
                code = text[pos : i + 1]
                return (code, len(code))
            if ch == "\x1b" and i + 1 < len(text) and text[i + 1] == "\\":
                code = text[pos : i + 2]
                return (code, len(code))
            i += 1
        return None

    return None


def _iter_units(text: str):
    """Yield ``(unit, is_code)`` pairs: escape sequences and grapheme clusters."""
    pos = 0
    length = len(text)
    while pos < length:
        esc = text.find("\x1b", pos)
        end = length if esc == -1 else esc
        if end > pos:
            for g in grapheme.graphemes(text[pos:end]):
                yield g, False
            pos = end
            continue
        extracted = extract_ansi_code(text, pos)
        if extracted is not None:
            code, code_len = extracted
            yield code, True
            pos += code_len
        else:
            # Lone ESC, treat as a zero-width unit
            yield text[pos], False
            pos += 1


# ---------------------------------------------------------------------------
# Sanitising
# ---------------------------------------------------------------------------


def sanitize_text(text: str) -> str:
    """Replace control characters (other than newline and tab) for display.

    ``\\r\\n`` pairs become plain newlines first so CRLF payloads render
    as expected.
    """
    text = text.replace("\r\n", "\n")
    return _CONTROL_RE.sub(REPLACEMENT_CHAR, text)


# ---------------------------------------------------------------------------
# Column-based operations
# ---------------------------------------------------------------------------


def take_columns(text: str, max_cols: int) -> str:
    """Return the longest prefix of plain *text* that fits in *max_cols* cells."""
    result: list[str] = []
    cols = 0
    for g in grapheme.graphemes(text):
        w = grapheme_width(g)
        if cols + w > max_cols:
            break
        result.append(g)
        cols += w
    return "".join(result)


def slice_columns(text: str, start_col: int, width: int) -> str:
    """Return the cells ``[start_col, start_col + width)`` of plain *text*.

    Wide characters that straddle either edge are replaced by spaces so the
    result never exceeds *width* cells.
    """
    if width <= 0:
        return ""

    end_col = start_col + width
    result: list[str] = []
    col = 0
    for g in grapheme.graphemes(text):
        w = grapheme_width(g)
        if g == "\t":
            g = TAB_TEXT
        char_end = col + w
        if col >= end_col:
            break
        if char_end <= start_col:
            col = char_end
            continue
        if col < start_col or char_end > end_col:
            overlap = min(char_end, end_col) - max(col, start_col)
            result.append(" " * overlap)
        else:
            result.append(g)
        col = char_end
    return "".join(result)


def truncate_to_width(
    text: str,
    max_width: int,
    ellipsis: str = "...",
    pad: bool = False,
) -> str:
    """Truncate *text* to fit within *max_width* visible columns.

    Escape sequences are preserved. When truncation happens *ellipsis* is
    appended (it counts towards the width). With *pad* the result is
    right-padded with spaces to exactly *max_width*.
    """
    if max_width <= 0:
        return ""

    text_width = visible_width(text)
    if text_width <= max_width:
        if pad:
            return text + " " * (max_width - text_width)
        return text

    target_width = max_width - visible_width(ellipsis)
    if target_width <= 0:
        return take_columns(ellipsis, max_width)

    parts: list[str] = []
    cols = 0
    for unit, is_code in _iter_units(text):
        if is_code:
            parts.append(unit)
            continue
        w = grapheme_width(unit)
        if cols + w > target_width:
            break
        parts.append(unit)
        cols += w

    result = "".join(parts)
    if "\x1b[" in text:
        result += "\x1b[0m"
    result += ellipsis
    if pad:
        result_width = visible_width(result)
        if result_width < max_width:
            result += " " * (max_width - result_width)
    return result


def pad_to_width(text: str, width: int) -> str:
    """Truncate or right-pad *text* so it is exactly *width* cells wide."""
    return truncate_to_width(text, width, ellipsis="", pad=True)


def wrap_line(line: str, width: int) -> list[str]:
    """Greedy word wrap of a single plain-text line.

    Words wider than *width* are broken at grapheme boundaries. Whitespace
    at a break point is dropped. A non-positive *width* disables wrapping.
    """
    if width <= 0 or visible_width(line) <= width:
        return [line]

    rows: list[str] = []
    current = ""
    current_w = 0

    for word in _WORD_RE.findall(line):
        w = visible_width(word)

        if word.isspace():
            if current_w + w <= width:
                current += word
                current_w += w
            else:
                rows.append(current.rstrip(" "))
                current = ""
                current_w = 0
            continue

        if current_w + w <= width:
            current += word
            current_w += w
            continue

        if current:
            rows.append(current.rstrip(" "))
            current = ""
            current_w = 0

        while w > width:
            head = take_columns(word, width)
            if not head:
                # A single grapheme wider than the viewport
                head = next(grapheme.graphemes(word))
            rows.append(head)
            word = word[len(head) :]
            w = visible_width(word)

        current = word
        current_w = w

    rows.append(current)
    return rows


# ---------------------------------------------------------------------------
# Overlay compositing
# ---------------------------------------------------------------------------


def extract_segments(
    line: str,
    before_end: int,
    after_start: int,
    after_len: int,
) -> tuple[str, str]:
    """Split *line* around a column range that an overlay will cover.

    * ``before``: columns ``[0, before_end)``
    * ``after``:  columns ``[after_start, after_start + after_len)``

    Wide characters cut by either boundary are replaced with spaces.
    Escape sequences are carried into whichever segment they appear in.
    """
    before_parts: list[str] = []
    after_parts: list[str] = []
    after_end = after_start + after_len
    col = 0

    for unit, is_code in _iter_units(line):
        if is_code:
            if col < before_end:
                before_parts.append(unit)
            elif after_start <= col < after_end:
                after_parts.append(unit)
            continue

        w = grapheme_width(unit)
        char_end = col + w

        if col < before_end:
            if char_end <= before_end:
                before_parts.append(unit)
            else:
                before_parts.append(" " * (before_end - col))

        if char_end > after_start and col < after_end:
            if col < after_start or char_end > after_end:
                overlap = min(char_end, after_end) - max(col, after_start)
                after_parts.append(" " * overlap)
            else:
                after_parts.append(unit)

        col = char_end

    return ("".join(before_parts), "".join(after_parts))
