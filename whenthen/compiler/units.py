"""Compiled artifacts — job units and the scripts they run.

These records are disposable: they are never persisted on their own and
can always be re-derived by compiling the owning Rule again.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from whenthen.domain.schedule import ScheduleSpec
from whenthen.domain.scripts import ScriptKind


@dataclass(frozen=True)
class ScriptArtifact:
    path: Path
    kind: ScriptKind
    content: str


@dataclass(frozen=True)
class JobUnit:
    """One launchd agent: label, command, schedule and log destination."""

    label: str
    program_arguments: tuple[str, ...]
    schedule: ScheduleSpec
    log_path: Path
    plist_path: Path
    script: ScriptArtifact


@dataclass(frozen=True)
class UnitPaths:
    """Where a unit's files live, derivable without a valid config."""

    label: str
    plist_path: Path
    script_paths: tuple[Path, ...]


@dataclass(frozen=True)
class CompiledRule:
    """Result of compiling a rule.  ``error`` is set instead of raising."""

    units: tuple[JobUnit, ...] = field(default_factory=tuple)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.units)

    @classmethod
    def failed(cls, error: str) -> CompiledRule:
        return cls(units=(), error=error)
