"""Unit tests — LaunchdScheduler output interpretation."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from whenthen.config import SchedulerConfig
from whenthen.lifecycle.scheduler import LaunchdScheduler

PLIST = Path("/tmp/LaunchAgents/io.whenthen.on-login.empty-trash.abc12345.plist")


def _proc(stdout: str = "", stderr: str = "", returncode: int = 0) -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


@pytest.fixture
def launchd() -> LaunchdScheduler:
    return LaunchdScheduler(SchedulerConfig())


@pytest.mark.unit
class TestLoad:
    def test_silent_success(self, launchd: LaunchdScheduler) -> None:
        with patch("whenthen.lifecycle.scheduler.subprocess.run", return_value=_proc()) as run:
            result = launchd.load(PLIST)
        assert result.ok
        assert run.call_args.args[0] == ["/bin/launchctl", "load", str(PLIST)]
        assert run.call_args.kwargs["timeout"] == 15.0

    def test_already_loaded_is_success(self, launchd: LaunchdScheduler) -> None:
        proc = _proc(stderr="service already loaded")
        with patch("whenthen.lifecycle.scheduler.subprocess.run", return_value=proc):
            assert launchd.load(PLIST).ok

    def test_error_output_is_failure(self, launchd: LaunchdScheduler) -> None:
        proc = _proc(stderr="Load failed: 5: Input/output error\n")
        with patch("whenthen.lifecycle.scheduler.subprocess.run", return_value=proc):
            result = launchd.load(PLIST)
        assert not result.ok
        assert result.output == "Load failed: 5: Input/output error"

    def test_timeout_is_failure(self, launchd: LaunchdScheduler) -> None:
        error = subprocess.TimeoutExpired(cmd="launchctl", timeout=15)
        with patch("whenthen.lifecycle.scheduler.subprocess.run", side_effect=error):
            result = launchd.load(PLIST)
        assert not result.ok
        assert "timed out" in result.output

    def test_missing_launchctl_is_failure(self, launchd: LaunchdScheduler) -> None:
        with patch("whenthen.lifecycle.scheduler.subprocess.run", side_effect=FileNotFoundError(2, "nope")):
            assert not launchd.load(PLIST).ok

    def test_silent_nonzero_exit_is_failure(self, launchd: LaunchdScheduler) -> None:
        with patch("whenthen.lifecycle.scheduler.subprocess.run", return_value=_proc(returncode=1)):
            result = launchd.load(PLIST)
        assert not result.ok
        assert result.output == "launchctl load exited with status 1"

    def test_already_loaded_with_nonzero_exit_is_success(self, launchd: LaunchdScheduler) -> None:
        proc = _proc(stderr="service already loaded", returncode=37)
        with patch("whenthen.lifecycle.scheduler.subprocess.run", return_value=proc):
            assert launchd.load(PLIST).ok


@pytest.mark.unit
class TestUnload:
    def test_silent_success(self, launchd: LaunchdScheduler) -> None:
        with patch("whenthen.lifecycle.scheduler.subprocess.run", return_value=_proc()):
            result = launchd.unload(PLIST)
        assert result.ok
        assert not result.not_found

    def test_not_registered_is_success(self, launchd: LaunchdScheduler) -> None:
        proc = _proc(stderr="Unload failed: Could not find specified service")
        with patch("whenthen.lifecycle.scheduler.subprocess.run", return_value=proc):
            result = launchd.unload(PLIST)
        assert result.ok
        assert result.not_found

    def test_other_output_is_failure(self, launchd: LaunchdScheduler) -> None:
        proc = _proc(stderr="Unload failed: 1: Operation not permitted")
        with patch("whenthen.lifecycle.scheduler.subprocess.run", return_value=proc):
            assert not launchd.unload(PLIST).ok

    def test_not_registered_with_nonzero_exit_is_success(self, launchd: LaunchdScheduler) -> None:
        proc = _proc(stderr="Could not find specified service", returncode=113)
        with patch("whenthen.lifecycle.scheduler.subprocess.run", return_value=proc):
            result = launchd.unload(PLIST)
        assert result.ok
        assert result.not_found

    def test_silent_nonzero_exit_is_failure(self, launchd: LaunchdScheduler) -> None:
        with patch("whenthen.lifecycle.scheduler.subprocess.run", return_value=_proc(returncode=5)):
            result = launchd.unload(PLIST)
        assert not result.ok
        assert result.output == "launchctl unload exited with status 5"


@pytest.mark.unit
class TestStart:
    def test_start_by_label(self, launchd: LaunchdScheduler) -> None:
        with patch("whenthen.lifecycle.scheduler.subprocess.run", return_value=_proc()) as run:
            assert launchd.start("io.whenthen.on-login.empty-trash.abc12345").ok
        assert run.call_args.args[0] == ["/bin/launchctl", "start", "io.whenthen.on-login.empty-trash.abc12345"]

    def test_unknown_label_is_failure(self, launchd: LaunchdScheduler) -> None:
        proc = _proc(stderr="Could not find specified service", returncode=113)
        with patch("whenthen.lifecycle.scheduler.subprocess.run", return_value=proc):
            result = launchd.start("io.whenthen.missing")
        assert not result.ok
        assert result.not_found
