"""Action variants — the "do this" half of a rule.

Each variant generates its script body from its own config plus the paired
trigger's config (move-files reads the watched folder, keep-awake reads the
range length).  Variants that can be undone also implement
``generate_revert``; only those may pair with the time-range trigger.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import ClassVar

from whenthen.domain.configs import (
    KEEP_AWAKE_DURATIONS,
    ActionConfig,
    CleanDownloadsConfig,
    EmptyTrashConfig,
    KeepAwakeConfig,
    MoveFilesConfig,
    OpenAppsConfig,
    OpenFileConfig,
    OpenUrlsConfig,
    PathWatchConfig,
    QuitAppsConfig,
    SetVolumeConfig,
    ShowNotificationConfig,
    TimeRangeConfig,
    ToggleAppearanceConfig,
    TriggerConfig,
)
from whenthen.domain.fields import FieldKind, FieldSchema, FieldSpec
from whenthen.domain.scripts import ScriptKind, applescript, escape_quotes, shell_script
from whenthen.domain.triggers import TriggerType

T = TriggerType

NOTIFICATION_TITLE = "whenthen"


class ActionType(str, Enum):
    """Closed set of action variants, in declaration order."""

    OPEN_APPS = "open-apps"
    QUIT_APPS = "quit-apps"
    OPEN_FILE = "open-file"
    OPEN_URLS = "open-urls"
    EMPTY_TRASH = "empty-trash"
    CLEAN_DOWNLOADS = "clean-downloads"
    TOGGLE_APPEARANCE = "toggle-appearance"
    SET_VOLUME = "set-volume"
    MOVE_FILES = "move-files"
    SHOW_NOTIFICATION = "show-notification"
    KEEP_AWAKE = "keep-awake"


class ActionKind(ABC):
    """Behaviour of one action variant."""

    type: ClassVar[ActionType]
    name: ClassVar[str]
    config_model: ClassVar[type[ActionConfig]]
    fields: ClassVar[FieldSchema] = FieldSchema()
    body_kind: ClassVar[ScriptKind]
    compatible_triggers: ClassVar[frozenset[TriggerType]]

    # Set on variants that implement generate_revert().
    revert_kind: ClassVar[ScriptKind | None] = None

    @property
    def can_revert(self) -> bool:
        return self.revert_kind is not None

    def default_config(self) -> ActionConfig:
        return self.config_model()

    def validate(self, config: ActionConfig) -> str | None:
        if not isinstance(config, self.config_model):
            return f"Expected {self.config_model.__name__} for '{self.type.value}'"
        return config.check()

    @abstractmethod
    def generate(self, config: ActionConfig, trigger_config: TriggerConfig) -> str:
        """Script body run when the trigger fires."""

    def generate_revert(self, config: ActionConfig, trigger_config: TriggerConfig) -> str | None:
        """Script body undoing ``generate``; None when the action cannot be undone."""
        return None

    @abstractmethod
    def sentence_fragment(self, config: ActionConfig) -> str:
        """The "do" part of the rule sentence, e.g. "open Xcode and Figma"."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.type.value}>"


def _join_names(names: list[str], fallback: str) -> str:
    return " and ".join(names) if names else fallback


def _open_apps_lines(apps: list[str]) -> list[str]:
    return [f'open -a "{escape_quotes(app)}"' for app in apps]


def _quit_apps_lines(apps: list[str]) -> list[str]:
    return [f'tell application "{escape_quotes(app)}" to quit' for app in apps]


def _appearance_script(expression: str) -> str:
    return applescript(
        'tell application "System Events"',
        "    tell appearance preferences",
        f"        set dark mode to {expression}",
        "    end tell",
        "end tell",
    )


_APPEARANCE_EXPRESSIONS = {"dark": "true", "light": "false", "toggle": "not dark mode"}
_APPEARANCE_INVERSE = {"dark": "light", "light": "dark", "toggle": "toggle"}

# The -start and -end scripts of one range share "<base>", so both resolve the
# same pid file and the end unit only stops the caffeinate its own start launched.
_KEEP_AWAKE_PIDFILE = 'pidfile="${0%-*.sh}.pid"'


# ---------------------------------------------------------------------------
# Apps
# ---------------------------------------------------------------------------


class OpenAppsAction(ActionKind):
    type = ActionType.OPEN_APPS
    name = "Open app(s)"
    config_model = OpenAppsConfig
    fields = FieldSchema((FieldSpec(name="apps", kind=FieldKind.APPS, label="Apps to open"),))
    body_kind = ScriptKind.SHELL
    revert_kind = ScriptKind.APPLESCRIPT
    compatible_triggers = frozenset({T.FIXED_SCHEDULE, T.ON_LOGIN, T.DRIVE_MOUNT, T.TIME_RANGE})

    def generate(self, config: OpenAppsConfig, trigger_config: TriggerConfig) -> str:  # type: ignore[override]
        return shell_script("# Open apps", *_open_apps_lines(config.apps))

    def generate_revert(self, config: OpenAppsConfig, trigger_config: TriggerConfig) -> str:  # type: ignore[override]
        return applescript(*_quit_apps_lines(config.apps))

    def sentence_fragment(self, config: OpenAppsConfig) -> str:  # type: ignore[override]
        return f"open {_join_names(config.apps, 'apps')}"


class QuitAppsAction(ActionKind):
    type = ActionType.QUIT_APPS
    name = "Quit app(s)"
    config_model = QuitAppsConfig
    fields = FieldSchema((FieldSpec(name="apps", kind=FieldKind.APPS, label="Apps to quit"),))
    body_kind = ScriptKind.APPLESCRIPT
    revert_kind = ScriptKind.SHELL
    compatible_triggers = frozenset(
        {T.FIXED_SCHEDULE, T.FIXED_INTERVAL, T.ON_LOGIN, T.TIME_RANGE}
    )

    def generate(self, config: QuitAppsConfig, trigger_config: TriggerConfig) -> str:  # type: ignore[override]
        return applescript(*_quit_apps_lines(config.apps))

    def generate_revert(self, config: QuitAppsConfig, trigger_config: TriggerConfig) -> str:  # type: ignore[override]
        return shell_script("# Reopen apps", *_open_apps_lines(config.apps))

    def sentence_fragment(self, config: QuitAppsConfig) -> str:  # type: ignore[override]
        return f"quit {_join_names(config.apps, 'apps')}"


# ---------------------------------------------------------------------------
# Files and links
# ---------------------------------------------------------------------------


class OpenFileAction(ActionKind):
    type = ActionType.OPEN_FILE
    name = "Open a file"
    config_model = OpenFileConfig
    fields = FieldSchema((FieldSpec(name="path", kind=FieldKind.FILE, label="File to open"),))
    body_kind = ScriptKind.SHELL
    compatible_triggers = frozenset({T.FIXED_SCHEDULE, T.ON_LOGIN, T.DRIVE_MOUNT})

    def generate(self, config: OpenFileConfig, trigger_config: TriggerConfig) -> str:  # type: ignore[override]
        return shell_script(f'open "{escape_quotes(config.path)}"')

    def sentence_fragment(self, config: OpenFileConfig) -> str:  # type: ignore[override]
        name = Path(config.path).name if config.path else ""
        return f"open {name or 'a file'}"


class OpenUrlsAction(ActionKind):
    type = ActionType.OPEN_URLS
    name = "Open URL(s)"
    config_model = OpenUrlsConfig
    fields = FieldSchema(
        (FieldSpec(name="urls", kind=FieldKind.URLS, label="URLs (one per line)"),)
    )
    body_kind = ScriptKind.SHELL
    compatible_triggers = frozenset({T.FIXED_SCHEDULE, T.FIXED_INTERVAL, T.ON_LOGIN})

    def generate(self, config: OpenUrlsConfig, trigger_config: TriggerConfig) -> str:  # type: ignore[override]
        return shell_script("# Open URLs", *(f'open "{escape_quotes(u)}"' for u in config.urls))

    def sentence_fragment(self, config: OpenUrlsConfig) -> str:  # type: ignore[override]
        count = len(config.urls)
        return "open 1 URL" if count == 1 else f"open {count} URLs"


class EmptyTrashAction(ActionKind):
    type = ActionType.EMPTY_TRASH
    name = "Empty the Trash"
    config_model = EmptyTrashConfig
    body_kind = ScriptKind.APPLESCRIPT
    compatible_triggers = frozenset({T.FIXED_SCHEDULE, T.FIXED_INTERVAL, T.ON_LOGIN})

    def generate(self, config: ActionConfig, trigger_config: TriggerConfig) -> str:
        return applescript('tell application "Finder"', "    empty the trash", "end tell")

    def sentence_fragment(self, config: ActionConfig) -> str:
        return "empty the Trash"


class CleanDownloadsAction(ActionKind):
    type = ActionType.CLEAN_DOWNLOADS
    name = "Clean old Downloads"
    config_model = CleanDownloadsConfig
    fields = FieldSchema(
        (
            FieldSpec(
                name="days",
                kind=FieldKind.NUMBER,
                label="Delete files older than",
                unit="days",
                placeholder="30",
            ),
        )
    )
    body_kind = ScriptKind.SHELL
    compatible_triggers = frozenset({T.FIXED_SCHEDULE, T.FIXED_INTERVAL, T.ON_LOGIN})

    def generate(self, config: CleanDownloadsConfig, trigger_config: TriggerConfig) -> str:  # type: ignore[override]
        return shell_script(
            'echo "--- Clean: $(date) ---"',
            f"find \"$HOME/Downloads\" -maxdepth 1 -type f -mtime +{config.days} -print0 "
            "| while IFS= read -r -d '' file; do",
            '    echo "Deleting: $file"',
            '    rm "$file"',
            "done",
        )

    def sentence_fragment(self, config: CleanDownloadsConfig) -> str:  # type: ignore[override]
        return f"clean Downloads (files older than {config.days} days)"


class MoveFilesAction(ActionKind):
    type = ActionType.MOVE_FILES
    name = "Move files to..."
    config_model = MoveFilesConfig
    fields = FieldSchema(
        (FieldSpec(name="destination", kind=FieldKind.FOLDER, label="Move files to"),)
    )
    body_kind = ScriptKind.SHELL
    compatible_triggers = frozenset({T.FIXED_SCHEDULE, T.FIXED_INTERVAL, T.PATH_WATCH})

    def generate(self, config: MoveFilesConfig, trigger_config: TriggerConfig) -> str:  # type: ignore[override]
        if isinstance(trigger_config, PathWatchConfig) and trigger_config.folder:
            source = escape_quotes(trigger_config.folder)
        else:
            source = "$HOME/Downloads"
        return shell_script(
            f'SOURCE="{source}"',
            f'DEST="{escape_quotes(config.destination)}"',
            'echo "--- Move: $(date) ---"',
            'mkdir -p "$DEST"',
            "find \"$SOURCE\" -maxdepth 1 -type f -not -name '.*' -print0 "
            "| while IFS= read -r -d '' file; do",
            '    echo "Moving: $(basename "$file")"',
            '    mv "$file" "$DEST/"',
            "done",
        )

    def sentence_fragment(self, config: MoveFilesConfig) -> str:  # type: ignore[override]
        dest = Path(config.destination).name if config.destination else ""
        return f"move files to {dest or 'a folder'}"


# ---------------------------------------------------------------------------
# System
# ---------------------------------------------------------------------------


class ToggleAppearanceAction(ActionKind):
    type = ActionType.TOGGLE_APPEARANCE
    name = "Toggle Dark Mode"
    config_model = ToggleAppearanceConfig
    fields = FieldSchema(
        (
            FieldSpec(
                name="mode",
                kind=FieldKind.CHOICE,
                label="Mode",
                options=("dark", "light", "toggle"),
            ),
        )
    )
    body_kind = ScriptKind.APPLESCRIPT
    revert_kind = ScriptKind.APPLESCRIPT
    compatible_triggers = frozenset({T.FIXED_SCHEDULE, T.ON_LOGIN, T.TIME_RANGE})

    def generate(self, config: ToggleAppearanceConfig, trigger_config: TriggerConfig) -> str:  # type: ignore[override]
        return _appearance_script(_APPEARANCE_EXPRESSIONS[config.mode])

    def generate_revert(self, config: ToggleAppearanceConfig, trigger_config: TriggerConfig) -> str:  # type: ignore[override]
        inverse = _APPEARANCE_INVERSE[config.mode]
        return _appearance_script(_APPEARANCE_EXPRESSIONS[inverse])

    def sentence_fragment(self, config: ToggleAppearanceConfig) -> str:  # type: ignore[override]
        if config.mode == "dark":
            return "switch to Dark Mode"
        if config.mode == "light":
            return "switch to Light Mode"
        return "toggle Dark Mode"


class SetVolumeAction(ActionKind):
    type = ActionType.SET_VOLUME
    name = "Set volume"
    config_model = SetVolumeConfig
    fields = FieldSchema(
        (
            FieldSpec(
                name="level",
                kind=FieldKind.NUMBER,
                label="Volume level",
                unit="% (0-100)",
                placeholder="50",
            ),
        )
    )
    body_kind = ScriptKind.APPLESCRIPT
    compatible_triggers = frozenset(
        {T.FIXED_SCHEDULE, T.FIXED_INTERVAL, T.ON_LOGIN, T.DRIVE_MOUNT}
    )

    def generate(self, config: SetVolumeConfig, trigger_config: TriggerConfig) -> str:  # type: ignore[override]
        return applescript(f"set volume output volume {config.level}")

    def sentence_fragment(self, config: SetVolumeConfig) -> str:  # type: ignore[override]
        return f"set volume to {config.level}%"


class ShowNotificationAction(ActionKind):
    type = ActionType.SHOW_NOTIFICATION
    name = "Show a notification"
    config_model = ShowNotificationConfig
    fields = FieldSchema(
        (
            FieldSpec(
                name="message",
                kind=FieldKind.TEXT,
                label="Message",
                placeholder="Time to stretch!",
            ),
        )
    )
    body_kind = ScriptKind.APPLESCRIPT
    compatible_triggers = frozenset(
        {T.FIXED_SCHEDULE, T.FIXED_INTERVAL, T.ON_LOGIN, T.PATH_WATCH, T.DRIVE_MOUNT}
    )

    def generate(self, config: ShowNotificationConfig, trigger_config: TriggerConfig) -> str:  # type: ignore[override]
        message = escape_quotes(config.message or "Reminder")
        return applescript(
            f'display notification "{message}" with title "{NOTIFICATION_TITLE}"'
        )

    def sentence_fragment(self, config: ShowNotificationConfig) -> str:  # type: ignore[override]
        return f'remind: "{config.message or "reminder"}"'


class KeepAwakeAction(ActionKind):
    """Hold off display and idle sleep with caffeinate.

    Paired with a time range the assertion lasts until the end time; the
    start unit records its caffeinate pid in a pid file beside the scripts and
    the end unit stops only that process.  Otherwise it lasts
    ``duration_minutes``.
    """

    type = ActionType.KEEP_AWAKE
    name = "Keep the Mac awake"
    config_model = KeepAwakeConfig
    fields = FieldSchema(
        (
            FieldSpec(
                name="duration_minutes",
                kind=FieldKind.CHOICE,
                label="Stay awake for",
                unit="minutes",
                options=KEEP_AWAKE_DURATIONS,
            ),
        )
    )
    body_kind = ScriptKind.SHELL
    revert_kind = ScriptKind.SHELL
    compatible_triggers = frozenset({T.FIXED_SCHEDULE, T.ON_LOGIN, T.TIME_RANGE})

    def generate(self, config: KeepAwakeConfig, trigger_config: TriggerConfig) -> str:  # type: ignore[override]
        if not isinstance(trigger_config, TimeRangeConfig):
            seconds = config.duration_minutes * 60
            return shell_script(f"exec /usr/bin/caffeinate -d -i -t {seconds}")
        seconds = trigger_config.duration_seconds
        return shell_script(
            _KEEP_AWAKE_PIDFILE,
            f"/usr/bin/caffeinate -d -i -t {seconds} &",
            'echo $! > "$pidfile"',
            "wait $!",
            'rm -f "$pidfile"',
        )

    def generate_revert(self, config: KeepAwakeConfig, trigger_config: TriggerConfig) -> str:  # type: ignore[override]
        return shell_script(
            _KEEP_AWAKE_PIDFILE,
            '[ -f "$pidfile" ] || exit 0',
            'pid=$(cat "$pidfile")',
            'case "$(/bin/ps -p "$pid" -o comm= 2>/dev/null)" in',
            '  *caffeinate) kill "$pid" ;;',
            "esac",
            'rm -f "$pidfile"',
        )

    def sentence_fragment(self, config: KeepAwakeConfig) -> str:  # type: ignore[override]
        minutes = config.duration_minutes
        if minutes % 60 == 0:
            hours = minutes // 60
            return f"keep the Mac awake for {hours} hour{'s' if hours != 1 else ''}"
        return f"keep the Mac awake for {minutes} minutes"
