"""Built-in template library — ready-made rules added with one command.

Templates may leave values blank ("pick your apps"); those report
``needs_input`` and must be completed before the rule can be installed.
Paths starting with ``~`` are expanded when the rule is created.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any

from whenthen.domain.actions import ActionType
from whenthen.domain.rule import Rule
from whenthen.domain.triggers import TriggerType
from whenthen.exceptions import WhenThenError

_EVERY_DAY = [1, 2, 3, 4, 5, 6, 7]
_WEEKDAYS = [2, 3, 4, 5, 6]


class TemplateCategory(str, Enum):
    ROUTINES = "Routines"
    FOCUS = "Focus & Wind Down"
    VOLUME = "Volume"
    REMINDERS = "Reminders"
    FILES = "File Organization"
    WEB = "Web & Links"
    DRIVES = "External Drives"
    RANGES = "Time Ranges"


@dataclass(frozen=True)
class Template:
    id: str
    name: str
    subtitle: str
    category: TemplateCategory
    trigger_type: TriggerType
    action_type: ActionType
    trigger_config: Mapping[str, Any] = field(default_factory=dict)
    action_config: Mapping[str, Any] = field(default_factory=dict)

    def to_rule(self, home: Path | None = None, custom_name: str | None = None) -> Rule:
        """A new (not yet validated) rule built from this template."""
        home = home or Path.home()
        return Rule.create(
            trigger_type=self.trigger_type,
            action_type=self.action_type,
            trigger_config=_expand_home(self.trigger_config, home),
            action_config=_expand_home(self.action_config, home),
            custom_name=custom_name,
        )

    @property
    def needs_input(self) -> bool:
        try:
            return self.to_rule(home=Path("/")).validate() is not None
        except WhenThenError:
            return True


def _expand_home(config: Mapping[str, Any], home: Path) -> dict[str, Any]:
    expanded: dict[str, Any] = {}
    for key, value in config.items():
        if isinstance(value, str) and value.startswith("~/"):
            value = str(home / value[2:])
        expanded[key] = value
    return expanded


def _t(
    id: str,
    name: str,
    subtitle: str,
    category: TemplateCategory,
    trigger: TriggerType,
    trigger_config: dict[str, Any],
    action: ActionType,
    action_config: dict[str, Any],
) -> Template:
    return Template(
        id=id,
        name=name,
        subtitle=subtitle,
        category=category,
        trigger_type=trigger,
        action_type=action,
        trigger_config=MappingProxyType(trigger_config),
        action_config=MappingProxyType(action_config),
    )


_C = TemplateCategory
_T = TriggerType
_A = ActionType

TEMPLATES: tuple[Template, ...] = (
    # Routines
    _t("morning-workspace", "Morning Workspace", "Open your chosen apps at 9 AM every weekday",
       _C.ROUTINES, _T.FIXED_SCHEDULE, {"hour": 9, "minute": 0, "weekdays": _WEEKDAYS},
       _A.OPEN_APPS, {"apps": []}),
    _t("daily-journal", "Open Daily Journal", "Open a file of your choice at 8 AM every day",
       _C.ROUTINES, _T.FIXED_SCHEDULE, {"hour": 8, "minute": 0, "weekdays": _EVERY_DAY},
       _A.OPEN_FILE, {"path": ""}),
    _t("startup-apps", "Startup Apps", "Open your chosen apps automatically when you log in",
       _C.ROUTINES, _T.ON_LOGIN, {},
       _A.OPEN_APPS, {"apps": []}),
    _t("morning-music", "Morning Music", "Play a song or playlist file when you log in",
       _C.ROUTINES, _T.ON_LOGIN, {},
       _A.OPEN_FILE, {"path": ""}),
    # Focus & Wind Down
    _t("end-of-day", "End of Day Shutdown", "Quit your chosen apps at 6 PM every weekday",
       _C.FOCUS, _T.FIXED_SCHEDULE, {"hour": 18, "minute": 0, "weekdays": _WEEKDAYS},
       _A.QUIT_APPS, {"apps": []}),
    _t("focus-mode", "Focus Mode", "Quit Messages, Slack, and Discord at 9 AM weekdays",
       _C.FOCUS, _T.FIXED_SCHEDULE, {"hour": 9, "minute": 0, "weekdays": _WEEKDAYS},
       _A.QUIT_APPS, {"apps": ["Messages", "Slack", "Discord"]}),
    _t("dark-mode-night", "Dark Mode at Night", "Turn on Dark Mode at 8 PM every day",
       _C.FOCUS, _T.FIXED_SCHEDULE, {"hour": 20, "minute": 0, "weekdays": _EVERY_DAY},
       _A.TOGGLE_APPEARANCE, {"mode": "dark"}),
    _t("light-mode-morning", "Light Mode in Morning", "Turn on Light Mode at 7 AM every day",
       _C.FOCUS, _T.FIXED_SCHEDULE, {"hour": 7, "minute": 0, "weekdays": _EVERY_DAY},
       _A.TOGGLE_APPEARANCE, {"mode": "light"}),
    # Volume
    _t("quiet-hours", "Quiet Hours", "Mute volume to 0% at 11 PM every day",
       _C.VOLUME, _T.FIXED_SCHEDULE, {"hour": 23, "minute": 0, "weekdays": _EVERY_DAY},
       _A.SET_VOLUME, {"level": 0}),
    _t("morning-volume", "Morning Volume", "Set volume to 50% at 7 AM every day",
       _C.VOLUME, _T.FIXED_SCHEDULE, {"hour": 7, "minute": 0, "weekdays": _EVERY_DAY},
       _A.SET_VOLUME, {"level": 50}),
    # Reminders
    _t("stretch-break", "Stretch Break", 'Every 30 min, notify: "Time to stretch!"',
       _C.REMINDERS, _T.FIXED_INTERVAL, {"minutes": 30},
       _A.SHOW_NOTIFICATION, {"message": "Time to stretch!"}),
    _t("hydration", "Hydration Reminder", 'Every 60 min, notify: "Drink water"',
       _C.REMINDERS, _T.FIXED_INTERVAL, {"minutes": 60},
       _A.SHOW_NOTIFICATION, {"message": "Drink water"}),
    _t("eye-break", "Eye Break (20-20-20)", 'Every 20 min, notify: "Look away for 20 seconds"',
       _C.REMINDERS, _T.FIXED_INTERVAL, {"minutes": 20},
       _A.SHOW_NOTIFICATION, {"message": "Look away from screen for 20 seconds"}),
    # File Organization
    _t("screenshot-organizer", "Screenshot Organizer",
       "When files appear on Desktop, move to Screenshots folder",
       _C.FILES, _T.PATH_WATCH, {"folder": "~/Desktop"},
       _A.MOVE_FILES, {"destination": "~/Pictures/Screenshots"}),
    _t("downloads-sorter", "Downloads Sorter",
       "When files appear in Downloads, move to a folder you pick",
       _C.FILES, _T.PATH_WATCH, {"folder": "~/Downloads"},
       _A.MOVE_FILES, {"destination": ""}),
    _t("weekly-cleanup", "Weekly Downloads Cleanup",
       "Every Sunday at 10 AM, delete files older than 30 days",
       _C.FILES, _T.FIXED_SCHEDULE, {"hour": 10, "minute": 0, "weekdays": [1]},
       _A.CLEAN_DOWNLOADS, {"days": 30}),
    _t("empty-trash", "Empty Trash Weekly", "Every Friday at 5 PM, empty the Trash",
       _C.FILES, _T.FIXED_SCHEDULE, {"hour": 17, "minute": 0, "weekdays": [6]},
       _A.EMPTY_TRASH, {}),
    # Web & Links
    _t("daily-standup", "Daily Standup", "Open a meeting URL at 9:30 AM every weekday",
       _C.WEB, _T.FIXED_SCHEDULE, {"hour": 9, "minute": 30, "weekdays": _WEEKDAYS},
       _A.OPEN_URLS, {"urls": []}),
    _t("weekly-review", "Weekly Review Sites", "Open your dashboard URLs every Monday at 9 AM",
       _C.WEB, _T.FIXED_SCHEDULE, {"hour": 9, "minute": 0, "weekdays": [2]},
       _A.OPEN_URLS, {"urls": []}),
    # External Drives
    _t("backup-reminder", "Backup Reminder",
       'When a drive is plugged in, notify: "Time to back up!"',
       _C.DRIVES, _T.DRIVE_MOUNT, {},
       _A.SHOW_NOTIFICATION, {"message": "External drive connected, time to back up!"}),
    # Time Ranges
    _t("work-hours-dark", "Dark Mode During Work",
       "Dark Mode from 9 AM to 5 PM on weekdays, light again afterwards",
       _C.RANGES, _T.TIME_RANGE,
       {"start_hour": 9, "start_minute": 0, "end_hour": 17, "end_minute": 0, "weekdays": _WEEKDAYS},
       _A.TOGGLE_APPEARANCE, {"mode": "dark"}),
    _t("deep-work", "Deep Work Block",
       "Quit chat apps from 9 AM to noon on weekdays, reopen them afterwards",
       _C.RANGES, _T.TIME_RANGE,
       {"start_hour": 9, "start_minute": 0, "end_hour": 12, "end_minute": 0, "weekdays": _WEEKDAYS},
       _A.QUIT_APPS, {"apps": ["Messages", "Slack"]}),
    _t("presentation-awake", "Stay Awake for Meetings",
       "Keep the Mac awake from 1 PM to 3 PM on weekdays",
       _C.RANGES, _T.TIME_RANGE,
       {"start_hour": 13, "start_minute": 0, "end_hour": 15, "end_minute": 0, "weekdays": _WEEKDAYS},
       _A.KEEP_AWAKE, {"duration_minutes": 120}),
)

TEMPLATES_BY_ID: Mapping[str, Template] = MappingProxyType({t.id: t for t in TEMPLATES})


def get_template(template_id: str) -> Template | None:
    return TEMPLATES_BY_ID.get(template_id)


def grouped() -> list[tuple[TemplateCategory, list[Template]]]:
    """Templates by category, in category declaration order, empty categories skipped."""
    groups = []
    for category in TemplateCategory:
        items = [t for t in TEMPLATES if t.category == category]
        if items:
            groups.append((category, items))
    return groups
