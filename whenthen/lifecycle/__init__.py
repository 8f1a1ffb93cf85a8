"""Lifecycle layer — rule persistence and launchd registration."""

from whenthen.lifecycle.manager import LifecycleManager, UnitStatus
from whenthen.lifecycle.scheduler import BaseScheduler, CommandResult, LaunchdScheduler
from whenthen.lifecycle.store import RuleStore

__all__ = [
    "BaseScheduler",
    "CommandResult",
    "LaunchdScheduler",
    "LifecycleManager",
    "RuleStore",
    "UnitStatus",
]
