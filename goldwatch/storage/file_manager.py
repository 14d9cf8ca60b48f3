# goldwatch/storage/file_manager.py

"""JSON file helpers with crash-safe whole-file replacement."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from goldwatch.errors import StorageFailure

logger = logging.getLogger("goldwatch.storage")


def read_json(path: Path) -> Any | None:
    """Load a JSON document, or ``None`` if it is missing or unreadable.

    A corrupt file is logged and treated like a missing one so that
    the next run starts from defaults instead of failing.
    """
    if not path.exists():
        logger.debug("No file at %s, using defaults", path)
        return None
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as exc:
        logger.warning(
            "Could not read %s (%s), using defaults", path, exc,
        )
        return None


def write_json_atomic(path: Path, data: Any) -> None:
    """Write *data* to a temp file beside *path*, then rename over it.

    Raises :class:`StorageFailure` if anything goes wrong; the previous
    file content is left intact in that case.
    """
    tmp_name: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp",
        )
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
        tmp_name = None
    except OSError as exc:
        raise StorageFailure(f"Failed to write {path}: {exc}") from exc
    finally:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
    logger.debug("Wrote %s", path)
