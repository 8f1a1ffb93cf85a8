"""whenthen — Exception hierarchy.

All exceptions raised by whenthen inherit from WhenThenError so that callers
can catch the full family with a single except clause when needed.

Hierarchy:
    WhenThenError
    ├── DomainError
    │   ├── RuleValidationError
    │   ├── CompatibilityViolation
    │   └── UnknownVariantError
    ├── LifecycleError
    │   ├── ArtifactWriteError
    │   └── SchedulerRegistrationError
    └── StoreError
        └── RuleNotFoundError

The registries and the compiler report validation problems as plain message
strings.  Exceptions are reserved for the strict construction helpers and for
the lifecycle layer, which catches its own errors and surfaces a bool.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class WhenThenError(Exception):
    """Base exception for all whenthen errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = context or {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, context={self.context})"


# ---------------------------------------------------------------------------
# Domain layer
# ---------------------------------------------------------------------------


class DomainError(WhenThenError):
    """Base for trigger/action model errors."""


class RuleValidationError(DomainError):
    """A trigger or action config is missing a value or has one out of range."""

    def __init__(self, variant: str, reason: str) -> None:
        super().__init__(
            f"Invalid config for '{variant}': {reason}",
            context={"variant": variant, "reason": reason},
        )
        self.variant = variant
        self.reason = reason


class CompatibilityViolation(DomainError):
    """The trigger/action pair is not in the compatibility matrix."""

    def __init__(self, trigger: str, action: str) -> None:
        super().__init__(
            f"Trigger '{trigger}' cannot be paired with action '{action}'",
            context={"trigger": trigger, "action": action},
        )
        self.trigger = trigger
        self.action = action


class UnknownVariantError(DomainError):
    """No trigger or action variant is registered under the given tag."""

    def __init__(self, kind: str, tag: str) -> None:
        super().__init__(
            f"Unknown {kind} type '{tag}'",
            context={"kind": kind, "tag": tag},
        )
        self.kind = kind
        self.tag = tag


# ---------------------------------------------------------------------------
# Lifecycle layer
# ---------------------------------------------------------------------------


class LifecycleError(WhenThenError):
    """Base for install / enable / disable failures."""


class ArtifactWriteError(LifecycleError):
    """A script or plist file could not be written."""

    def __init__(self, path: Path, cause: Exception) -> None:
        super().__init__(
            f"Failed to write '{path}': {cause}",
            context={"path": str(path), "cause": str(cause)},
        )
        self.path = path
        self.cause = cause


class SchedulerRegistrationError(LifecycleError):
    """The scheduler's register or unregister command failed."""

    def __init__(self, label: str, command: str, output: str) -> None:
        super().__init__(
            f"launchctl {command} failed for '{label}': {output}",
            context={"label": label, "command": command, "output": output},
        )
        self.label = label
        self.command = command
        self.output = output


# ---------------------------------------------------------------------------
# Store layer
# ---------------------------------------------------------------------------


class StoreError(WhenThenError):
    """Base for rule store errors."""


class RuleNotFoundError(StoreError):
    """No rule with the given ID exists in the store."""

    def __init__(self, rule_id: str) -> None:
        super().__init__(
            f"Rule '{rule_id}' not found",
            context={"rule_id": rule_id},
        )
        self.rule_id = rule_id
