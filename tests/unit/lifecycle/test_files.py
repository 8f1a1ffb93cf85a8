"""Unit tests — Atomic file helpers."""

from __future__ import annotations

import stat
from pathlib import Path
from unittest.mock import patch

import pytest

from whenthen.lifecycle.files import atomic_write, remove_file


@pytest.mark.unit
class TestAtomicWrite:
    def test_creates_parents_and_writes(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "b" / "file.sh"
        atomic_write(target, b"#!/bin/bash\n", mode=0o755)
        assert target.read_bytes() == b"#!/bin/bash\n"
        assert stat.S_IMODE(target.stat().st_mode) == 0o755

    def test_replaces_existing(self, tmp_path: Path) -> None:
        target = tmp_path / "file.txt"
        target.write_text("old")
        atomic_write(target, b"new")
        assert target.read_text() == "new"

    def test_failure_leaves_old_content_and_no_temp(self, tmp_path: Path) -> None:
        target = tmp_path / "file.txt"
        target.write_text("old")
        with patch("whenthen.lifecycle.files.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                atomic_write(target, b"new")
        assert target.read_text() == "old"
        assert [p.name for p in tmp_path.iterdir()] == ["file.txt"]


@pytest.mark.unit
class TestRemoveFile:
    def test_remove_present(self, tmp_path: Path) -> None:
        target = tmp_path / "x"
        target.write_text("x")
        assert remove_file(target)
        assert not target.exists()

    def test_remove_absent(self, tmp_path: Path) -> None:
        assert not remove_file(tmp_path / "missing")
