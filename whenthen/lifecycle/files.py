"""Filesystem helpers shared by the rule store and the lifecycle manager."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path


def atomic_write(path: Path, data: bytes, mode: int | None = None) -> None:
    """Write *data* to *path* via a sibling temp file and ``os.replace``.

    Readers see either the old content or the new content, never a partial
    file.  Raises OSError on failure; the temp file is removed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        if mode is not None:
            os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def remove_file(path: Path) -> bool:
    """Delete *path* if present.  Returns True if a file was removed."""
    try:
        path.unlink()
        return True
    except FileNotFoundError:
        return False
