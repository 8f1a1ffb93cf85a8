"""Trigger variants — the "when" half of a rule.

Each variant is a stateless class describing its config model, field
schema, native schedule spec and sentence fragment.  The single instance of
each lives in ``whenthen.domain.registry.TRIGGERS``.

The set of actions a trigger accepts is not declared here: it is derived
from the actions' ``compatible_triggers`` so the relation cannot drift.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar

from whenthen.domain.configs import (
    DriveMountConfig,
    FixedIntervalConfig,
    FixedScheduleConfig,
    OnLoginConfig,
    PathWatchConfig,
    TimeRangeConfig,
    TriggerConfig,
)
from whenthen.domain.fields import FieldKind, FieldSchema, FieldSpec
from whenthen.domain.schedule import (
    CalendarSchedule,
    IntervalSchedule,
    MountSchedule,
    RunAtLoadSchedule,
    ScheduleSpec,
    WatchPathsSchedule,
    describe_weekdays,
    format_clock,
)

if TYPE_CHECKING:
    from whenthen.domain.actions import ActionType


class TriggerType(str, Enum):
    """Closed set of trigger variants, in declaration order."""

    FIXED_SCHEDULE = "fixed-schedule"
    FIXED_INTERVAL = "fixed-interval"
    ON_LOGIN = "on-login"
    PATH_WATCH = "path-watch"
    DRIVE_MOUNT = "drive-mount"
    TIME_RANGE = "time-range"


_TIME = FieldSpec(name="time", kind=FieldKind.TIME, label="At", keys=("hour", "minute"))
_WEEKDAYS = FieldSpec(name="weekdays", kind=FieldKind.WEEKDAYS, label="On these days")


class TriggerKind(ABC):
    """Behaviour of one trigger variant."""

    type: ClassVar[TriggerType]
    name: ClassVar[str]
    description: ClassVar[str]
    config_model: ClassVar[type[TriggerConfig]]
    fields: ClassVar[FieldSchema] = FieldSchema()

    # Time-range triggers compile to a start unit and an end unit.
    is_range: ClassVar[bool] = False

    def default_config(self) -> TriggerConfig:
        return self.config_model()

    def validate(self, config: TriggerConfig) -> str | None:
        if not isinstance(config, self.config_model):
            return f"Expected {self.config_model.__name__} for '{self.type.value}'"
        return config.check()

    @property
    def compatible_actions(self) -> tuple[ActionType, ...]:
        from whenthen.domain.registry import compatible_actions

        return compatible_actions(self.type)

    @abstractmethod
    def schedule(self, config: TriggerConfig) -> ScheduleSpec:
        """Native schedule spec for the (start) unit."""

    @abstractmethod
    def sentence_fragment(self, config: TriggerConfig) -> str:
        """The "when" part of the rule sentence, e.g. "Every weekday at 9:00 AM"."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.type.value}>"


# ---------------------------------------------------------------------------
# Variants
# ---------------------------------------------------------------------------


class FixedScheduleTrigger(TriggerKind):
    type = TriggerType.FIXED_SCHEDULE
    name = "At a specific time"
    description = "Pick a time and days of the week"
    config_model = FixedScheduleConfig
    fields = FieldSchema((_TIME, _WEEKDAYS))

    def schedule(self, config: FixedScheduleConfig) -> ScheduleSpec:  # type: ignore[override]
        return CalendarSchedule(config.hour, config.minute, tuple(config.weekdays))

    def sentence_fragment(self, config: FixedScheduleConfig) -> str:  # type: ignore[override]
        return f"{describe_weekdays(config.weekdays)} at {format_clock(config.hour, config.minute)}"


class FixedIntervalTrigger(TriggerKind):
    type = TriggerType.FIXED_INTERVAL
    name = "Every N minutes"
    description = "Repeats on a fixed cadence"
    config_model = FixedIntervalConfig
    fields = FieldSchema(
        (
            FieldSpec(
                name="minutes",
                kind=FieldKind.NUMBER,
                label="Repeat every",
                unit="minutes",
                placeholder="30",
            ),
        )
    )

    def schedule(self, config: FixedIntervalConfig) -> ScheduleSpec:  # type: ignore[override]
        return IntervalSchedule(config.minutes * 60)

    def sentence_fragment(self, config: FixedIntervalConfig) -> str:  # type: ignore[override]
        return f"Every {config.minutes} min"


class OnLoginTrigger(TriggerKind):
    type = TriggerType.ON_LOGIN
    name = "On login"
    description = "Runs once when you log in"
    config_model = OnLoginConfig

    def schedule(self, config: TriggerConfig) -> ScheduleSpec:
        return RunAtLoadSchedule()

    def sentence_fragment(self, config: TriggerConfig) -> str:
        return "On login"


class PathWatchTrigger(TriggerKind):
    type = TriggerType.PATH_WATCH
    name = "When a file appears in..."
    description = "Fires when a folder's contents change"
    config_model = PathWatchConfig
    fields = FieldSchema(
        (FieldSpec(name="folder", kind=FieldKind.FOLDER, label="Watch this folder"),)
    )

    def schedule(self, config: PathWatchConfig) -> ScheduleSpec:  # type: ignore[override]
        return WatchPathsSchedule((config.folder,))

    def sentence_fragment(self, config: PathWatchConfig) -> str:  # type: ignore[override]
        folder = Path(config.folder).name if config.folder else ""
        return f"When files appear in {folder or 'a folder'}"


class DriveMountTrigger(TriggerKind):
    type = TriggerType.DRIVE_MOUNT
    name = "When a drive is mounted"
    description = "Fires when a USB drive or SD card is plugged in"
    config_model = DriveMountConfig

    def schedule(self, config: TriggerConfig) -> ScheduleSpec:
        return MountSchedule()

    def sentence_fragment(self, config: TriggerConfig) -> str:
        return "When a drive is mounted"


class TimeRangeTrigger(TriggerKind):
    """Do something at the start time and undo it at the end time."""

    type = TriggerType.TIME_RANGE
    name = "During a time range"
    description = "Runs at the start time and reverts at the end time"
    config_model = TimeRangeConfig
    fields = FieldSchema(
        (
            FieldSpec(
                name="start_time",
                kind=FieldKind.TIME,
                label="From",
                keys=("start_hour", "start_minute"),
            ),
            FieldSpec(
                name="end_time",
                kind=FieldKind.TIME,
                label="Until",
                keys=("end_hour", "end_minute"),
            ),
            _WEEKDAYS,
        )
    )
    is_range = True

    def schedule(self, config: TimeRangeConfig) -> ScheduleSpec:  # type: ignore[override]
        return CalendarSchedule(config.start_hour, config.start_minute, tuple(config.weekdays))

    def end_schedule(self, config: TimeRangeConfig) -> ScheduleSpec:
        return CalendarSchedule(config.end_hour, config.end_minute, tuple(config.weekdays))

    def sentence_fragment(self, config: TimeRangeConfig) -> str:  # type: ignore[override]
        start = format_clock(config.start_hour, config.start_minute)
        end = format_clock(config.end_hour, config.end_minute)
        return f"{describe_weekdays(config.weekdays)} from {start} to {end}"
