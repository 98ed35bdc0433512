"""Named request presets persisted as a JSON array on disk."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import BaseModel, TypeAdapter, ValidationError

from rester.client.headers import format_headers, split_header_lines
from rester.client.types import Method

logger = logging.getLogger(__name__)

DEFAULT_PRESETS_FILE = "requests.json"


class KeyValuePair(BaseModel):
    key: str
    value: str


class Preset(BaseModel):
    """A saved request. ``key`` is the unique, user-chosen name."""

    key: str
    method: Method = "GET"
    url: str
    # Lists rather than objects so the file keeps a stable order
    headers: list[KeyValuePair] | None = None
    body: str | None = None

    @classmethod
    def from_fields(cls, key: str, method: Method, url: str, headers: str, body: str) -> Preset:
        """Build a preset from the editable request fields."""
        pairs = [KeyValuePair(key=k, value=v) for k, v in split_header_lines(headers)]
        return cls(
            key=key,
            method=method,
            url=url,
            headers=pairs or None,
            body=body or None,
        )

    def headers_text(self) -> str:
        if not self.headers:
            return ""
        return format_headers([(h.key, h.value) for h in self.headers])


_PRESET_LIST = TypeAdapter(list[Preset])


class PresetCollection:
    """Ordered presets keyed by name, rewritten in full on every change."""

    def __init__(self, presets: list[Preset] | None = None, path: str | Path | None = DEFAULT_PRESETS_FILE) -> None:
        self.presets: list[Preset] = list(presets or [])
        self._path = Path(path) if path is not None else None

    @classmethod
    def load(cls, path: str | Path = DEFAULT_PRESETS_FILE) -> PresetCollection:
        """Read *path*. A missing or unreadable file gives an empty collection."""
        p = Path(path)
        if not p.exists():
            return cls(path=p)
        try:
            presets = _PRESET_LIST.validate_json(p.read_bytes())
        except (OSError, ValidationError) as exc:
            logger.warning("Ignoring preset file %s: %s", p, exc)
            return cls(path=p)
        logger.info("Loaded %d presets from %s", len(presets), p)
        return cls(presets, path=p)

    def __len__(self) -> int:
        return len(self.presets)

    def __iter__(self):
        return iter(self.presets)

    def keys(self) -> list[str]:
        return [preset.key for preset in self.presets]

    def get(self, key: str) -> Preset | None:
        for preset in self.presets:
            if preset.key == key:
                return preset
        return None

    def upsert(self, preset: Preset) -> None:
        """Add *preset*, replacing an existing one with the same key in place."""
        for index, existing in enumerate(self.presets):
            if existing.key == preset.key:
                self.presets[index] = preset
                return
        self.presets.append(preset)

    def remove(self, index: int) -> Preset | None:
        if 0 <= index < len(self.presets):
            return self.presets.pop(index)
        return None

    def to_json(self) -> str:
        data = [preset.model_dump(exclude_none=True) for preset in self.presets]
        return json.dumps(data, indent=2, ensure_ascii=False)

    def save(self) -> bool:
        """Write the whole collection. Failures are logged, never raised."""
        if self._path is None:
            return False
        try:
            self._path.write_text(self.to_json() + "\n", encoding="utf-8")
        except OSError as exc:
            logger.error("Error writing %s: %s", self._path, exc)
            return False
        logger.info("Saved %d presets to %s", len(self.presets), self._path)
        return True
