"""Value extractors — pull config values out of a free-text description.

Each extractor returns ``None`` (or an empty list) when it finds nothing.
Most work on the lowercased text; the message and URL extractors take the
original text so the user's capitalisation survives.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path

from whenthen.domain.configs import KEEP_AWAKE_DURATIONS
from whenthen.domain.schedule import ALL_DAYS

_MERIDIEM = r"(am|pm|a\.m\.|p\.m\.)"
_CLOCK_12 = re.compile(r"(?<!\d)(\d{1,2})(?::(\d{2}))?\s*" + _MERIDIEM)
_CLOCK_24 = re.compile(r"(?<!\d)(\d{1,2}):(\d{2})(?!\d)")
_CLOCK_TEXT = r"\d{1,2}(?::\d{2})?\s*(?:am|pm|a\.m\.|p\.m\.)?"
_RANGE_START = re.compile(r"(?:between|from)\s+(" + _CLOCK_TEXT + ")")
_RANGE_END = (
    re.compile(r"and\s+(" + _CLOCK_TEXT + ")"),
    re.compile(r"(?:to|until|till)\s+(" + _CLOCK_TEXT + ")"),
)

_DAY_NAMES: tuple[tuple[int, tuple[str, ...]], ...] = (
    (1, ("sunday", "sun")),
    (2, ("monday", "mon")),
    (3, ("tuesday", "tues", "tue")),
    (4, ("wednesday", "wed")),
    (5, ("thursday", "thurs", "thur", "thu")),
    (6, ("friday", "fri")),
    (7, ("saturday", "sat")),
)

_EVERY_MINUTES = re.compile(r"every\s+(\d+)\s*(?:min|minute)")
_EVERY_HOURS = re.compile(r"every\s+(\d+)\s*hour")
_NUMBER_PATTERNS = (
    re.compile(r"(\d+)\s*%"),
    re.compile(r"to\s+(\d+)"),
    re.compile(r"(\d+)\s*days?"),
)
_DURATION_HOURS = re.compile(r"(?:for\s+)?(\d+)\s*hours?")

_QUOTED = (
    re.compile(r'"([^"]+)"'),
    re.compile(r"'([^']+)'"),
    re.compile("“([^”]+)”"),
)
_SAYING = (
    re.compile(r"saying\s+(.+)", re.IGNORECASE),
    re.compile(r"that says\s+(.+)", re.IGNORECASE),
)
_REMINDER = (
    re.compile(r"remind me to\s+(.+?)(?:\s+every|\s+at|\s+on|$)", re.IGNORECASE),
    re.compile(r"reminder to\s+(.+?)(?:\s+every|\s+at|\s+on|$)", re.IGNORECASE),
    re.compile(r"notify(?:\s+me)?\s+to\s+(.+?)(?:\s+every|\s+at|\s+on|$)", re.IGNORECASE),
)
_URL = re.compile(r"\b(?:https?://|www\.)[^\s\"'<>]+", re.IGNORECASE)

KNOWN_FOLDERS: dict[str, str] = {
    "desktop": "Desktop",
    "downloads": "Downloads",
    "documents": "Documents",
    "pictures": "Pictures",
    "screenshots": "Pictures/Screenshots",
}


# ---------------------------------------------------------------------------
# Time
# ---------------------------------------------------------------------------


def extract_time(text: str) -> tuple[int, int] | None:
    """First clock time in *text*: "10pm", "10:30 p.m.", "noon", "midnight", "22:00"."""
    if "noon" in text:
        return 12, 0
    if "midnight" in text:
        return 0, 0

    match = _CLOCK_12.search(text)
    if match:
        hour = int(match.group(1))
        minute = int(match.group(2) or 0)
        meridiem = match.group(3)
        if meridiem.startswith("p") and hour < 12:
            hour += 12
        elif meridiem.startswith("a") and hour == 12:
            hour = 0
        if 0 <= hour <= 23 and 0 <= minute <= 59:
            return hour, minute

    match = _CLOCK_24.search(text)
    if match:
        hour, minute = int(match.group(1)), int(match.group(2))
        if 0 <= hour <= 23 and 0 <= minute <= 59:
            return hour, minute
    return None


def extract_range(text: str) -> tuple[tuple[int, int] | None, tuple[int, int] | None]:
    """Start and end of "between 9am and 5pm" / "from 9am to 5pm".

    Without "between"/"from" the start is the first time before the end
    phrase, so "until 5pm" leaves the start unset.
    """
    end: tuple[int, int] | None = None
    end_at = len(text)
    for pattern in _RANGE_END:
        match = pattern.search(text)
        if match and (end := extract_time(match.group(1))) is not None:
            end_at = match.start()
            break

    start: tuple[int, int] | None = None
    match = _RANGE_START.search(text)
    if match:
        start = extract_time(match.group(1))
    if start is None:
        start = extract_time(text[:end_at])
    return start, end


def extract_weekdays(text: str) -> list[int] | None:
    if "every day" in text or "daily" in text or "every night" in text:
        return list(ALL_DAYS)
    if (
        "weekday" in text
        or "mon-fri" in text
        or "monday to friday" in text
        or "monday through friday" in text
    ):
        return [2, 3, 4, 5, 6]
    if "weekend" in text:
        return [1, 7]

    matched = [
        day
        for day, names in _DAY_NAMES
        if any(re.search(rf"\b{name}s?\b", text) for name in names)
    ]
    return matched or None


def extract_interval(text: str) -> int | None:
    """Interval in minutes: "every 15 minutes", "every 2 hours", "hourly", "every half hour"."""
    if "hourly" in text or "every hour" in text:
        return 60
    if "every half hour" in text or "half an hour" in text:
        return 30
    match = _EVERY_MINUTES.search(text)
    if match and int(match.group(1)) > 0:
        return int(match.group(1))
    match = _EVERY_HOURS.search(text)
    if match and int(match.group(1)) > 0:
        return int(match.group(1)) * 60
    return None


# ---------------------------------------------------------------------------
# Numbers and choices
# ---------------------------------------------------------------------------


def extract_number(text: str) -> int | None:
    """First of "N%", "to N", "N days"."""
    for pattern in _NUMBER_PATTERNS:
        match = pattern.search(text)
        if match:
            return int(match.group(1))
    return None


def extract_volume(text: str) -> int | None:
    number = extract_number(text)
    if number is not None and 0 <= number <= 100:
        return number
    if re.search(r"\bmute\b", text):
        return 0
    return None


def extract_day_count(text: str, default: int = 30) -> int:
    number = extract_number(text)
    return number if number is not None and number > 0 else default


def extract_appearance_mode(text: str) -> str:
    if "light mode" in text or "turn on light" in text or "switch to light" in text:
        return "light"
    if "toggle" in text:
        return "toggle"
    return "dark"


def extract_duration(text: str) -> int | None:
    """Keep-awake minutes, limited to the durations the action accepts."""
    if "30 min" in text or "half hour" in text:
        return 30
    match = _DURATION_HOURS.search(text)
    if match:
        minutes = int(match.group(1)) * 60
        if minutes in KEEP_AWAKE_DURATIONS:
            return minutes
    return None


# ---------------------------------------------------------------------------
# Names, messages, paths
# ---------------------------------------------------------------------------


def extract_app_names(text: str, app_names: Iterable[str]) -> list[str]:
    """Installed app names (2+ characters) mentioned in *text*, in catalogue order."""
    return [name for name in app_names if len(name) >= 2 and name.lower() in text]


def extract_quoted_text(original: str) -> str | None:
    """Text in quotes, else whatever follows "saying" / "that says"."""
    for pattern in (*_QUOTED, *_SAYING):
        match = pattern.search(original)
        if match:
            found = match.group(1).strip()
            if found:
                return found
    return None


def extract_reminder(original: str) -> str | None:
    """"remind me to stand up every hour" → "Stand up"."""
    for pattern in _REMINDER:
        match = pattern.search(original)
        if match:
            message = match.group(1).strip()
            if message:
                return message[0].upper() + message[1:]
    return None


def extract_message(original: str) -> str | None:
    return extract_quoted_text(original) or extract_reminder(original)


def extract_urls(original: str) -> list[str]:
    urls = []
    for match in _URL.finditer(original):
        url = match.group(0).rstrip(".,;:!?)")
        if url.lower().startswith("www."):
            url = "https://" + url
        urls.append(url)
    return urls


def extract_folder(text: str, home: Path, prepositions: tuple[str, ...]) -> str | None:
    """A well-known home folder named right after one of *prepositions*.

    ``extract_folder("move files to documents", home, ("to",))`` gives
    ``"<home>/Documents"``.
    """
    for word, relative in KNOWN_FOLDERS.items():
        for prep in prepositions:
            if re.search(rf"\b{prep}\s+(?:the\s+|my\s+)?{word}\b", text):
                return str(home / relative)
    return None
