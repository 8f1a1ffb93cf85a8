"""Typed configuration records — one pydantic model per trigger/action variant.

Every field has a default, so ``Model()`` is always the variant's reset
state.  Pydantic enforces types and rejects unknown keys; the range and
presence rules that produce user-facing messages live in ``check()``, which
returns ``None`` when the config is complete.

Raw input (CLI flags, stored JSON, suggestion extractors) goes through
``load_config()`` once at the boundary; everything past that point works on
native types only.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from whenthen.domain.schedule import ALL_DAYS

KEEP_AWAKE_DURATIONS: tuple[int, ...] = (30, 60, 120, 240, 480, 720)


class VariantConfig(BaseModel):
    """Base for every variant config."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    def check(self) -> str | None:
        """Return a user-facing problem description, or None if the config is usable."""
        return None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


ConfigT = TypeVar("ConfigT", bound=VariantConfig)


def load_config(
    model: type[ConfigT], raw: dict[str, Any] | None
) -> tuple[ConfigT | None, str | None]:
    """Build *model* from *raw*, returning ``(config, None)`` or ``(None, message)``.

    Missing keys take their defaults.  The first pydantic error is flattened
    into a single message.
    """
    try:
        return model.model_validate(raw or {}), None
    except ValidationError as exc:
        first = exc.errors()[0]
        where = ".".join(str(part) for part in first.get("loc", ())) or "config"
        return None, f"{where}: {first.get('msg', 'invalid value')}"


# ---------------------------------------------------------------------------
# Shared coercion helpers
# ---------------------------------------------------------------------------


def _coerce_weekdays(value: Any) -> Any:
    """Accept ``2``, ``"2,3,4"`` or any iterable of ints; dedupe and sort."""
    if value is None:
        return list(ALL_DAYS)
    if isinstance(value, int):
        return [value]
    if isinstance(value, str):
        parts = [p.strip() for p in value.split(",")]
        value = [p for p in parts if p]
    if isinstance(value, Iterable):
        try:
            return sorted({int(v) for v in value})
        except (TypeError, ValueError):
            return value
    return value


def _weekday_problem(days: Iterable[int]) -> str | None:
    if any(d < 1 or d > 7 for d in days):
        return "Weekdays must be between 1 (Sunday) and 7 (Saturday)"
    return None


def _time_problem(hour: int, minute: int, what: str = "time") -> str | None:
    if not 0 <= hour <= 23:
        return f"The {what} hour must be between 0 and 23"
    if not 0 <= minute <= 59:
        return f"The {what} minute must be between 0 and 59"
    return None


def _split_list(value: Any, separator: str) -> Any:
    if isinstance(value, str):
        value = value.split(separator)
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if str(v).strip()]
    return value


# ---------------------------------------------------------------------------
# Trigger configs
# ---------------------------------------------------------------------------


class TriggerConfig(VariantConfig):
    pass


class FixedScheduleConfig(TriggerConfig):
    hour: int = 9
    minute: int = 0
    weekdays: list[int] = list(ALL_DAYS)

    @field_validator("weekdays", mode="before")
    @classmethod
    def normalize_weekdays(cls, v: Any) -> Any:
        return _coerce_weekdays(v)

    def check(self) -> str | None:
        return _time_problem(self.hour, self.minute) or _weekday_problem(self.weekdays)


class FixedIntervalConfig(TriggerConfig):
    minutes: int = 30

    def check(self) -> str | None:
        if self.minutes <= 0:
            return "Please enter an interval in minutes (must be > 0)"
        return None


class OnLoginConfig(TriggerConfig):
    pass


class PathWatchConfig(TriggerConfig):
    folder: str = ""

    def check(self) -> str | None:
        if not self.folder.strip():
            return "Please choose a folder to watch"
        return None


class DriveMountConfig(TriggerConfig):
    pass


class TimeRangeConfig(TriggerConfig):
    start_hour: int = 9
    start_minute: int = 0
    end_hour: int = 17
    end_minute: int = 0
    weekdays: list[int] = list(ALL_DAYS)

    @field_validator("weekdays", mode="before")
    @classmethod
    def normalize_weekdays(cls, v: Any) -> Any:
        return _coerce_weekdays(v)

    @property
    def duration_seconds(self) -> int:
        start = self.start_hour * 60 + self.start_minute
        end = self.end_hour * 60 + self.end_minute
        return (end - start) * 60

    def check(self) -> str | None:
        problem = (
            _time_problem(self.start_hour, self.start_minute, "start")
            or _time_problem(self.end_hour, self.end_minute, "end")
            or _weekday_problem(self.weekdays)
        )
        if problem:
            return problem
        # Ranges never wrap past midnight.
        if self.duration_seconds <= 0:
            return "The end time must be later than the start time"
        return None


# ---------------------------------------------------------------------------
# Action configs
# ---------------------------------------------------------------------------


class ActionConfig(VariantConfig):
    pass


class _AppListConfig(ActionConfig):
    apps: list[str] = []

    @field_validator("apps", mode="before")
    @classmethod
    def split_apps(cls, v: Any) -> Any:
        return _split_list(v, ",")

    def check(self) -> str | None:
        if not self.apps:
            return "Please select at least one app"
        return None


class OpenAppsConfig(_AppListConfig):
    pass


class QuitAppsConfig(_AppListConfig):
    pass


class OpenFileConfig(ActionConfig):
    path: str = ""

    def check(self) -> str | None:
        if not self.path.strip():
            return "Please choose a file"
        return None


class OpenUrlsConfig(ActionConfig):
    urls: list[str] = []

    @field_validator("urls", mode="before")
    @classmethod
    def split_urls(cls, v: Any) -> Any:
        return _split_list(v, "\n")

    def check(self) -> str | None:
        if not self.urls:
            return "Please enter at least one URL"
        return None


class EmptyTrashConfig(ActionConfig):
    pass


class CleanDownloadsConfig(ActionConfig):
    days: int = 30

    def check(self) -> str | None:
        if self.days <= 0:
            return "Please enter a number of days (must be > 0)"
        return None


class ToggleAppearanceConfig(ActionConfig):
    mode: Literal["dark", "light", "toggle"] = "dark"


class SetVolumeConfig(ActionConfig):
    level: int = 50

    def check(self) -> str | None:
        if not 0 <= self.level <= 100:
            return "Please enter a volume level between 0 and 100"
        return None


class MoveFilesConfig(ActionConfig):
    destination: str = ""

    def check(self) -> str | None:
        if not self.destination.strip():
            return "Please choose a destination folder"
        return None


class ShowNotificationConfig(ActionConfig):
    message: str = ""

    def check(self) -> str | None:
        if not self.message.strip():
            return "Please enter a message"
        return None


class KeepAwakeConfig(ActionConfig):
    duration_minutes: int = 60

    def check(self) -> str | None:
        if self.duration_minutes not in KEEP_AWAKE_DURATIONS:
            allowed = ", ".join(str(d) for d in KEEP_AWAKE_DURATIONS)
            return f"Keep-awake duration must be one of {allowed} minutes"
        return None
