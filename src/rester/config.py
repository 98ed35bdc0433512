"""Configuration: defaults < settings file < environment < command line."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

LOG_LEVELS = ("debug", "info", "warning", "error")


def default_settings_path() -> str:
    """``~/.rester/settings.json``."""
    return os.path.join(os.path.expanduser("~"), ".rester", "settings.json")


@dataclass
class Config:
    """Runtime configuration."""

    presets_path: str = "requests.json"
    log_path: str = "rester.log"
    log_level: str = "info"
    tick_ms: int = 16
    request_timeout: float | None = 30.0
    export_extension: str = ".txt"
    keybindings: dict[str, str] = field(default_factory=dict)


# settings.json key -> Config field
_SETTINGS_KEYS: dict[str, str] = {
    "presetsPath": "presets_path",
    "logFile": "log_path",
    "logLevel": "log_level",
    "tickMs": "tick_ms",
    "requestTimeout": "request_timeout",
    "exportExtension": "export_extension",
    "keybindings": "keybindings",
}

_ENV_KEYS: dict[str, str] = {
    "RESTER_PRESETS": "presets_path",
    "RESTER_LOG_FILE": "log_path",
    "RESTER_LOG_LEVEL": "log_level",
    "RESTER_TICK_MS": "tick_ms",
    "RESTER_TIMEOUT": "request_timeout",
}


def _load_from_file(path: str) -> tuple[dict[str, Any], Exception | None]:
    """Load settings from a JSON file. Returns (settings, error)."""
    if not os.path.exists(path):
        return {}, None
    try:
        settings = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        return {}, e
    if not isinstance(settings, dict):
        return {}, ValueError(f"{path}: expected a JSON object")
    return settings, None


def _coerce(name: str, value: Any) -> Any:
    """Convert *value* to the type of Config field *name*."""
    match name:
        case "tick_ms":
            tick = int(value)
            if tick <= 0:
                raise ValueError("tick must be positive")
            return tick
        case "request_timeout":
            if value is None:
                return None
            timeout = float(value)
            return timeout if timeout > 0 else None
        case "log_level":
            level = str(value).lower()
            if level not in LOG_LEVELS:
                raise ValueError(f"unknown log level {value!r}")
            return level
        case "keybindings":
            if not isinstance(value, dict):
                raise ValueError("keybindings must be an object")
            return {str(k): str(v) for k, v in value.items()}
        case _:
            return str(value)


def _apply(config: Config, name: str, value: Any, source: str) -> None:
    try:
        setattr(config, name, _coerce(name, value))
    except (TypeError, ValueError) as exc:
        logger.warning("Ignoring %s from %s: %s", name, source, exc)


def load_config(
    settings_path: str | None = None,
    env: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Config:
    """Build a :class:`Config`.

    *overrides* are Config field names (typically parsed CLI flags); ``None``
    values are skipped.
    """
    config = Config()

    path = settings_path or default_settings_path()
    settings, error = _load_from_file(path)
    if error is not None:
        logger.warning("Ignoring settings file %s: %s", path, error)
    for key, value in settings.items():
        name = _SETTINGS_KEYS.get(key)
        if name is None:
            logger.debug("Unknown setting %s", key)
            continue
        _apply(config, name, value, path)

    environ = os.environ if env is None else env
    for var, name in _ENV_KEYS.items():
        if var in environ:
            _apply(config, name, environ[var], var)

    valid = {f.name for f in fields(Config)}
    for name, value in (overrides or {}).items():
        if value is None or name not in valid:
            continue
        _apply(config, name, value, "command line")

    return config
