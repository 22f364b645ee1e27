"""Whole-document JSON persistence.

write_document: temp file in the same directory -> flush -> fsync -> os.replace,
so the document on disk is always either the old or the new version and a
successful return means the bytes reached stable storage.
read_document: missing file -> default; unreadable / corrupt file -> default
plus a warning. Startup never fails because of a bad document.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from gridguard.core.errors import PersistenceError

logger = logging.getLogger("gridguard.json_store")


def read_document(path: Path, default: Any) -> Any:
    if not path.exists():
        return default
    try:
        raw = path.read_text(encoding="utf-8")
        if not raw.strip():
            return default
        return json.loads(raw)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.warning("Failed to load %s, starting empty: %s", path, exc)
        return default


def _fsync_dir(directory: Path) -> None:
    """Make the rename itself durable. POSIX only; Windows cannot open directories."""
    if os.name != "posix":
        return
    fd = os.open(directory, os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


def write_document(path: Path, data: Any) -> None:
    """Atomically replace *path* with *data* as JSON. Raises PersistenceError."""
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(data, fh, indent=2, ensure_ascii=False)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, path)
        tmp_name = None
        _fsync_dir(path.parent)
    except (OSError, TypeError, ValueError) as exc:
        raise PersistenceError(path, exc) from exc
    finally:
        if tmp_name is not None:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
