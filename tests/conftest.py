"""Shared pytest fixtures for the whenthen test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from whenthen.config import Settings, override_settings
from whenthen.lifecycle.manager import LifecycleManager
from whenthen.lifecycle.scheduler import BaseScheduler, CommandResult
from whenthen.lifecycle.store import RuleStore


class FakeScheduler(BaseScheduler):
    """In-memory stand-in for launchctl.

    ``loaded`` holds the labels currently registered.  Any label containing
    one of the strings in ``fail_load`` is refused.
    """

    def __init__(self) -> None:
        self.loaded: list[str] = []
        self.calls: list[tuple[str, str]] = []
        self.fail_load: set[str] = set()

    def load(self, plist_path: Path) -> CommandResult:
        label = plist_path.stem
        self.calls.append(("load", label))
        if any(marker in label for marker in self.fail_load):
            return CommandResult(ok=False, output="Load failed: 5: Input/output error")
        if label not in self.loaded:
            self.loaded.append(label)
        return CommandResult(ok=True)

    def unload(self, plist_path: Path) -> CommandResult:
        label = plist_path.stem
        self.calls.append(("unload", label))
        if label in self.loaded:
            self.loaded.remove(label)
            return CommandResult(ok=True)
        return CommandResult(ok=True, output="Could not find specified service", not_found=True)

    def start(self, label: str) -> CommandResult:
        self.calls.append(("start", label))
        if label in self.loaded:
            return CommandResult(ok=True)
        return CommandResult(ok=False, output="Could not find specified service", not_found=True)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    settings = Settings.rooted_at(tmp_path)
    override_settings(settings)
    return settings


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def store(test_settings: Settings) -> RuleStore:
    return RuleStore(test_settings.paths.store_file)


@pytest.fixture
def manager(test_settings: Settings, scheduler: FakeScheduler, store: RuleStore) -> LifecycleManager:
    return LifecycleManager(test_settings, scheduler, store)


@pytest.fixture
def cli_scheduler(monkeypatch: pytest.MonkeyPatch, test_settings: Settings, scheduler: FakeScheduler) -> FakeScheduler:
    """Route every CLI command to the fake scheduler."""
    monkeypatch.setattr("whenthen.cli.common.make_scheduler", lambda settings: scheduler)
    return scheduler
