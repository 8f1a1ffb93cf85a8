"""Schedule specs — the native launchd representation of a trigger.

Each spec knows which plist keys it contributes to a job unit.  A unit
carries exactly one spec.

Weekday numbering follows launchd: 1 = Sunday … 7 = Saturday.  A weekday
set that is empty or holds all seven days is "every day" and produces a
calendar entry with no ``Weekday`` key at all.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Union

ALL_DAYS: tuple[int, ...] = (1, 2, 3, 4, 5, 6, 7)
WEEKDAYS: frozenset[int] = frozenset({2, 3, 4, 5, 6})
WEEKEND: frozenset[int] = frozenset({1, 7})
DAY_ABBREVIATIONS: dict[int, str] = {
    1: "Sun",
    2: "Mon",
    3: "Tue",
    4: "Wed",
    5: "Thu",
    6: "Fri",
    7: "Sat",
}


# ---------------------------------------------------------------------------
# Weekday / time helpers
# ---------------------------------------------------------------------------


def canonical_weekdays(days: Iterable[int]) -> tuple[int, ...]:
    """Collapse a weekday set: every-day becomes ``()``, anything else is sorted."""
    unique = sorted(set(days))
    if not unique or len(unique) == len(ALL_DAYS):
        return ()
    return tuple(unique)


def describe_weekdays(days: Iterable[int]) -> str:
    """Human phrase for a weekday set: "Every day", "Every weekday", "Mon, Wed"."""
    selected = frozenset(days)
    if not selected or len(selected) == len(ALL_DAYS):
        return "Every day"
    if selected == WEEKDAYS:
        return "Every weekday"
    if selected == WEEKEND:
        return "Every weekend"
    return ", ".join(DAY_ABBREVIATIONS[d] for d in sorted(selected) if d in DAY_ABBREVIATIONS)


def format_clock(hour: int, minute: int) -> str:
    """12-hour clock text: ``format_clock(22, 5) == "10:05 PM"``."""
    period = "PM" if hour >= 12 else "AM"
    display = 12 if hour % 12 == 0 else hour % 12
    return f"{display}:{minute:02d} {period}"


# ---------------------------------------------------------------------------
# Specs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CalendarSchedule:
    """Fire at hour:minute, optionally only on some weekdays."""

    hour: int
    minute: int
    weekdays: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "weekdays", canonical_weekdays(self.weekdays))

    def entries(self) -> list[dict[str, int]]:
        """One calendar dict per selected day, or a single day-less dict."""
        if not self.weekdays:
            return [{"Hour": self.hour, "Minute": self.minute}]
        return [
            {"Hour": self.hour, "Minute": self.minute, "Weekday": day}
            for day in self.weekdays
        ]

    def plist_entries(self) -> dict[str, Any]:
        entries = self.entries()
        return {"StartCalendarInterval": entries[0] if len(entries) == 1 else entries}


@dataclass(frozen=True)
class IntervalSchedule:
    seconds: int

    def plist_entries(self) -> dict[str, Any]:
        return {"StartInterval": self.seconds}


@dataclass(frozen=True)
class RunAtLoadSchedule:
    """Run once whenever the unit is loaded, i.e. at login."""

    def plist_entries(self) -> dict[str, Any]:
        return {"RunAtLoad": True}


@dataclass(frozen=True)
class WatchPathsSchedule:
    paths: tuple[str, ...]

    def plist_entries(self) -> dict[str, Any]:
        return {"WatchPaths": list(self.paths)}


@dataclass(frozen=True)
class MountSchedule:
    def plist_entries(self) -> dict[str, Any]:
        return {"StartOnMount": True}


ScheduleSpec = Union[
    CalendarSchedule,
    IntervalSchedule,
    RunAtLoadSchedule,
    WatchPathsSchedule,
    MountSchedule,
]
