"""Unit tests — Action script generation."""

from __future__ import annotations

import pytest

from whenthen.domain.actions import ActionType
from whenthen.domain.configs import (
    FixedScheduleConfig,
    KeepAwakeConfig,
    MoveFilesConfig,
    OnLoginConfig,
    OpenAppsConfig,
    OpenUrlsConfig,
    PathWatchConfig,
    QuitAppsConfig,
    SetVolumeConfig,
    ShowNotificationConfig,
    TimeRangeConfig,
    ToggleAppearanceConfig,
)
from whenthen.domain.registry import ACTIONS, get_action
from whenthen.domain.scripts import SHELL_HEADER, ScriptKind, escape_quotes


@pytest.mark.unit
class TestAppearance:
    def test_dark_and_its_revert(self) -> None:
        action = get_action(ActionType.TOGGLE_APPEARANCE)
        config = ToggleAppearanceConfig(mode="dark")
        assert "set dark mode to true" in action.generate(config, FixedScheduleConfig())
        assert "set dark mode to false" in action.generate_revert(config, TimeRangeConfig())

    def test_light_reverts_to_dark(self) -> None:
        action = get_action(ActionType.TOGGLE_APPEARANCE)
        revert = action.generate_revert(ToggleAppearanceConfig(mode="light"), TimeRangeConfig())
        assert "set dark mode to true" in revert

    def test_toggle_reverts_by_toggling(self) -> None:
        action = get_action(ActionType.TOGGLE_APPEARANCE)
        revert = action.generate_revert(ToggleAppearanceConfig(mode="toggle"), TimeRangeConfig())
        assert "set dark mode to not dark mode" in revert


@pytest.mark.unit
class TestApps:
    def test_open_apps_is_shell(self) -> None:
        action = get_action(ActionType.OPEN_APPS)
        body = action.generate(OpenAppsConfig(apps=["Xcode", "Figma"]), OnLoginConfig())
        assert body.startswith(SHELL_HEADER + "\n")
        assert 'open -a "Xcode"' in body
        assert 'open -a "Figma"' in body

    def test_open_apps_reverts_by_quitting(self) -> None:
        action = get_action(ActionType.OPEN_APPS)
        assert action.revert_kind is ScriptKind.APPLESCRIPT
        revert = action.generate_revert(OpenAppsConfig(apps=["Xcode"]), TimeRangeConfig())
        assert revert == 'tell application "Xcode" to quit\n'

    def test_quit_apps_reverts_by_reopening(self) -> None:
        action = get_action(ActionType.QUIT_APPS)
        assert action.body_kind is ScriptKind.APPLESCRIPT
        assert action.revert_kind is ScriptKind.SHELL
        revert = action.generate_revert(QuitAppsConfig(apps=["Slack"]), TimeRangeConfig())
        assert revert.startswith(SHELL_HEADER)
        assert 'open -a "Slack"' in revert

    def test_quotes_are_escaped(self) -> None:
        action = get_action(ActionType.OPEN_APPS)
        body = action.generate(OpenAppsConfig(apps=['My "App"']), OnLoginConfig())
        assert 'open -a "My \\"App\\""' in body


@pytest.mark.unit
class TestFilesAndSystem:
    def test_move_files_reads_watched_folder(self) -> None:
        action = get_action(ActionType.MOVE_FILES)
        body = action.generate(
            MoveFilesConfig(destination="/Users/me/Pictures/Screenshots"),
            PathWatchConfig(folder="/Users/me/Desktop"),
        )
        assert 'SOURCE="/Users/me/Desktop"' in body
        assert 'DEST="/Users/me/Pictures/Screenshots"' in body

    def test_move_files_defaults_to_downloads(self) -> None:
        action = get_action(ActionType.MOVE_FILES)
        body = action.generate(MoveFilesConfig(destination="/tmp/x"), FixedScheduleConfig())
        assert 'SOURCE="$HOME/Downloads"' in body

    def test_open_urls_one_line_per_url(self) -> None:
        action = get_action(ActionType.OPEN_URLS)
        body = action.generate(
            OpenUrlsConfig(urls=["https://a.example", "https://b.example"]), OnLoginConfig()
        )
        assert body.count("open ") == 2

    def test_volume(self) -> None:
        body = get_action(ActionType.SET_VOLUME).generate(SetVolumeConfig(level=30), OnLoginConfig())
        assert body == "set volume output volume 30\n"

    def test_notification(self) -> None:
        body = get_action(ActionType.SHOW_NOTIFICATION).generate(
            ShowNotificationConfig(message='Say "hi"'), OnLoginConfig()
        )
        assert body == 'display notification "Say \\"hi\\"" with title "whenthen"\n'

    def test_keep_awake_uses_own_duration(self) -> None:
        body = get_action(ActionType.KEEP_AWAKE).generate(
            KeepAwakeConfig(duration_minutes=30), OnLoginConfig()
        )
        assert "caffeinate -d -i -t 1800" in body

    def test_keep_awake_lasts_for_the_range(self) -> None:
        body = get_action(ActionType.KEEP_AWAKE).generate(
            KeepAwakeConfig(duration_minutes=30),
            TimeRangeConfig(start_hour=13, end_hour=15),
        )
        assert "caffeinate -d -i -t 7200" in body

    def test_keep_awake_range_records_its_pid(self) -> None:
        body = get_action(ActionType.KEEP_AWAKE).generate(
            KeepAwakeConfig(), TimeRangeConfig(start_hour=13, end_hour=15)
        )
        assert 'pidfile="${0%-*.sh}.pid"' in body
        assert 'echo $! > "$pidfile"' in body
        assert "wait $!" in body

    def test_keep_awake_revert_stops_only_its_own_process(self) -> None:
        revert = get_action(ActionType.KEEP_AWAKE).generate_revert(KeepAwakeConfig(), TimeRangeConfig())
        assert "pkill" not in revert
        assert "killall" not in revert
        assert 'pidfile="${0%-*.sh}.pid"' in revert
        assert 'kill "$pid"' in revert

    def test_keep_awake_sentence(self) -> None:
        action = get_action(ActionType.KEEP_AWAKE)
        assert action.sentence_fragment(KeepAwakeConfig(duration_minutes=60)) == (
            "keep the Mac awake for 1 hour"
        )
        assert action.sentence_fragment(KeepAwakeConfig(duration_minutes=30)) == (
            "keep the Mac awake for 30 minutes"
        )


@pytest.mark.unit
class TestRevertibility:
    def test_non_revertible_actions_return_none(self) -> None:
        for kind in ACTIONS.values():
            if kind.can_revert:
                continue
            assert kind.generate_revert(kind.default_config(), FixedScheduleConfig()) is None

    def test_escape_quotes(self) -> None:
        assert escape_quotes('a "b" c') == 'a \\"b\\" c'
