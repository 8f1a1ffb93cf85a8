"""Weighted keyword tables used to score variants against free text.

A variant's score is the sum over its groups of the weight of the first
keyword found in the text: an exact substring earns the full weight, a
fuzzy word-window match (keywords of 4+ characters only) earns 70% of it.
Every group hit after the first adds a small compound bonus.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from whenthen.domain.actions import ActionType
from whenthen.domain.triggers import TriggerType
from whenthen.suggest.fuzzy import fuzzy_contains

FUZZY_MIN_LENGTH = 4
FUZZY_MAX_DISTANCE = 2
FUZZY_FACTOR = 0.7
COMPOUND_BONUS = 0.03


@dataclass(frozen=True)
class KeywordGroup:
    keywords: tuple[str, ...]
    weight: float


def _g(weight: float, *keywords: str) -> KeywordGroup:
    return KeywordGroup(keywords=keywords, weight=weight)


def group_score(group: KeywordGroup, text: str) -> float:
    """Weight earned by *group* against lowercased *text*; 0.0 when nothing matches."""
    for keyword in group.keywords:
        if not keyword:
            continue
        if keyword in text:
            return group.weight
        if len(keyword) >= FUZZY_MIN_LENGTH and fuzzy_contains(text, keyword, FUZZY_MAX_DISTANCE):
            return group.weight * FUZZY_FACTOR
    return 0.0


def score_groups(groups: Iterable[KeywordGroup], text: str) -> float:
    total = 0.0
    hits = 0
    for group in groups:
        earned = group_score(group, text)
        if earned <= 0:
            continue
        total += earned
        hits += 1
        if hits > 1:
            total += COMPOUND_BONUS
    return total


ACTION_KEYWORDS: Mapping[ActionType, tuple[KeywordGroup, ...]] = MappingProxyType(
    {
        ActionType.TOGGLE_APPEARANCE: (
            _g(0.4, "dark mode", "night mode", "light mode"),
            _g(0.2, "dark", "light", "appearance"),
            _g(0.1, "theme", "display mode"),
        ),
        ActionType.SET_VOLUME: (
            _g(0.4, "set volume", "volume to", "mute", "unmute"),
            _g(0.2, "volume", "sound", "audio"),
            _g(0.1, "loud", "quiet", "silent"),
        ),
        ActionType.EMPTY_TRASH: (
            _g(0.4, "empty trash", "empty the trash"),
            _g(0.2, "clear trash", "trash"),
            _g(0.1, "clean up", "delete trash"),
        ),
        # open-apps gets a fourth group at scoring time: installed app names.
        ActionType.OPEN_APPS: (
            _g(0.4, "open app", "launch app", "start app", "open apps"),
            _g(0.15, "open", "launch", "run"),
        ),
        ActionType.QUIT_APPS: (
            _g(0.4, "quit app", "close app", "kill app", "quit apps", "close apps"),
            _g(0.15, "quit", "close", "stop"),
            _g(0.1, "shut down", "exit"),
        ),
        ActionType.SHOW_NOTIFICATION: (
            _g(0.4, "remind me", "notification", "alert me", "send notification"),
            _g(0.2, "remind", "alert", "notify"),
            _g(0.1, "tell me", "popup", "reminder"),
        ),
        ActionType.CLEAN_DOWNLOADS: (
            _g(0.4, "clean downloads", "clear downloads", "clean up downloads"),
            _g(0.2, "old downloads", "old files"),
            _g(0.1, "cleanup"),
        ),
        ActionType.MOVE_FILES: (
            _g(0.4, "move files", "move to folder", "move file"),
            _g(0.2, "organize files", "sort files"),
            _g(0.1, "file to", "put files"),
        ),
        ActionType.OPEN_URLS: (
            _g(0.4, "open url", "open website", "open link", "open urls"),
            _g(0.15, "url", "website", "link"),
            _g(0.1, "browse", "go to"),
        ),
        ActionType.OPEN_FILE: (
            _g(0.4, "open file", "open document", "open a file"),
            _g(0.2, "open the file"),
            _g(0.05, "file"),
        ),
        ActionType.KEEP_AWAKE: (
            _g(0.4, "keep awake", "stay awake", "don't sleep", "dont sleep"),
            _g(0.2, "awake", "caffeinate"),
            _g(0.15, "prevent sleep", "no sleep"),
        ),
    }
)

APP_NAME_WEIGHT = 0.25

TRIGGER_KEYWORDS: Mapping[TriggerType, tuple[KeywordGroup, ...]] = MappingProxyType(
    {
        TriggerType.FIXED_SCHEDULE: (
            _g(
                0.35,
                "every day at",
                "every weekday at",
                "every monday",
                "every tuesday",
                "every wednesday",
                "every thursday",
                "every friday",
                "every saturday",
                "every sunday",
            ),
            _g(0.1, "at", "when it's", "every night", "every morning"),
            _g(0.1, "daily", "nightly"),
        ),
        TriggerType.FIXED_INTERVAL: (
            _g(
                0.4,
                "every 5 minutes",
                "every 10 minutes",
                "every 15 minutes",
                "every 20 minutes",
                "every 30 minutes",
                "every 60 minutes",
                "every hour",
                "every 2 hours",
                "every half hour",
                "every 1 hour",
                "every 3 hours",
            ),
            _g(0.2, "repeatedly", "on repeat", "hourly"),
            _g(0.1, "periodic", "periodically"),
        ),
        TriggerType.ON_LOGIN: (
            _g(0.4, "on login", "at startup", "when i log in", "when i sign in", "on startup", "at login"),
            _g(0.15, "login", "startup", "boot"),
            _g(0.1, "start up", "sign in", "log in"),
        ),
        TriggerType.PATH_WATCH: (
            _g(0.4, "when a file appears", "when files appear", "when a file is added", "when files are added"),
            _g(0.25, "file appears", "new file"),
            _g(0.15, "file drops", "file added"),
        ),
        TriggerType.DRIVE_MOUNT: (
            _g(0.4, "when a drive is mounted", "when usb", "when sd card", "when i plug in", "when drive is plugged"),
            _g(0.25, "drive mount", "external drive", "usb drive"),
            _g(0.15, "plug in", "connect drive"),
        ),
        TriggerType.TIME_RANGE: (
            _g(0.2, "between", "from morning to", "from evening to"),
            _g(0.15, "during", "during the"),
            _g(0.1, "hours of"),
        ),
    }
)
