"""JSON file helpers for the run history."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def read_json(path: Path, fallback: Any = None) -> Any:
    """Load JSON from ``path``, returning ``fallback`` when it is missing or unreadable."""
    if not path.exists():
        return fallback
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Failed to read %s: %s", path, e)
        return fallback


def write_json(path: Path, data: Any) -> None:
    """Write ``data`` as JSON, replacing ``path`` atomically.

    The payload goes to a temporary file in the same directory first, so a
    reader never observes a half-written file.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.debug("Wrote %s", path)
