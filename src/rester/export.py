"""Writing the displayed response body to a file."""

from __future__ import annotations

import logging
import re
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = ".txt"
FALLBACK_NAME = "response"

_UNSAFE_RE = re.compile(r"[^A-Za-z0-9._-]")


def export_filename(url: str, extension: str = DEFAULT_EXTENSION) -> str:
    """File name for a response fetched from *url*.

    ``https://api.example.com/v1/items?id=3`` becomes
    ``https_api.example.com_v1_items_id_3.txt``.
    """
    name = url.strip().replace("://", "_").replace("/", "_")
    name = _UNSAFE_RE.sub("_", name).strip("._") or FALLBACK_NAME
    return name + extension


def save_response(url: str, body: str, directory: str | Path = ".", extension: str = DEFAULT_EXTENSION) -> Path | None:
    """Write *body* next to the working directory. Returns the path, or ``None`` on failure."""
    path = Path(directory) / export_filename(url, extension)
    try:
        path.write_text(body, encoding="utf-8")
    except OSError as exc:
        logger.error("Error writing response to %s: %s", path, exc)
        return None
    logger.info("Saved response (%d chars) to %s", len(body), path)
    return path
