"""Scheduler backends — register and unregister plist files.

``LaunchdScheduler`` shells out to launchctl.  Success is judged from the
command's own output and exit status on every call; nothing about
registration state is remembered between calls because launchd's table can
change underneath us.
"""

from __future__ import annotations

import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from whenthen.config import SchedulerConfig
from whenthen.logging import get_logger

log = get_logger(__name__)

# launchctl output fragments meaning "nothing was registered under that plist".
_NOT_FOUND_MARKERS = (
    "could not find specified service",
    "not loaded",
    "no such file",
    "no such process",
)


@dataclass(frozen=True)
class CommandResult:
    ok: bool
    output: str = ""
    not_found: bool = False


class BaseScheduler(ABC):
    """Abstract registration backend."""

    @abstractmethod
    def load(self, plist_path: Path) -> CommandResult:
        """Register the unit.  "Already registered" counts as success."""

    @abstractmethod
    def unload(self, plist_path: Path) -> CommandResult:
        """Unregister the unit.  Not-registered sets ``not_found`` and is still ok."""

    @abstractmethod
    def start(self, label: str) -> CommandResult:
        """Run a registered unit now, outside its schedule."""


class LaunchdScheduler(BaseScheduler):
    def __init__(self, config: SchedulerConfig) -> None:
        self._launchctl = config.launchctl_path
        self._timeout = config.command_timeout_seconds

    def load(self, plist_path: Path) -> CommandResult:
        output, returncode = self._run("load", str(plist_path))
        if returncode is None:
            return CommandResult(ok=False, output=output)
        if "already loaded" in output.lower():
            return CommandResult(ok=True, output=output)
        if not output:
            if returncode != 0:
                return self._silent_failure("load", plist_path.name, returncode)
            log.debug("launchctl_load_ok", plist=plist_path.name)
            return CommandResult(ok=True)
        return CommandResult(ok=False, output=output)

    def unload(self, plist_path: Path) -> CommandResult:
        output, returncode = self._run("unload", str(plist_path))
        if returncode is None:
            return CommandResult(ok=False, output=output)
        lowered = output.lower()
        if any(marker in lowered for marker in _NOT_FOUND_MARKERS):
            return CommandResult(ok=True, output=output, not_found=True)
        if not output:
            if returncode != 0:
                return self._silent_failure("unload", plist_path.name, returncode)
            return CommandResult(ok=True)
        return CommandResult(ok=False, output=output)

    def start(self, label: str) -> CommandResult:
        output, returncode = self._run("start", label)
        if returncode is None:
            return CommandResult(ok=False, output=output)
        lowered = output.lower()
        if any(marker in lowered for marker in _NOT_FOUND_MARKERS):
            return CommandResult(ok=False, output=output, not_found=True)
        if output:
            return CommandResult(ok=False, output=output)
        if returncode != 0:
            return self._silent_failure("start", label, returncode)
        log.debug("launchctl_start_ok", label=label)
        return CommandResult(ok=True)

    def _silent_failure(self, command: str, target: str, returncode: int) -> CommandResult:
        log.warning(
            "launchctl_silent_failure",
            command=command,
            target=target,
            returncode=returncode,
        )
        return CommandResult(ok=False, output=f"launchctl {command} exited with status {returncode}")

    def _run(self, command: str, target: str) -> tuple[str, int | None]:
        """Run launchctl; returns (combined output, exit status or None if it never ran)."""
        argv = [self._launchctl, command, target]
        try:
            proc = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                timeout=self._timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            log.warning("launchctl_timeout", command=command, target=target)
            return f"launchctl {command} timed out after {self._timeout}s", None
        except OSError as exc:
            log.warning("launchctl_unavailable", command=command, error=str(exc))
            return f"Error: {exc}", None
        output = "\n".join(part.strip() for part in (proc.stdout, proc.stderr) if part.strip())
        return output, proc.returncode
