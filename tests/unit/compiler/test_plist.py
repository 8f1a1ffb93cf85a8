"""Unit tests — launchd plist documents."""

from __future__ import annotations

import pytest

from whenthen.compiler import plist
from whenthen.compiler.compiler import ScheduleCompiler
from whenthen.config import Settings
from whenthen.domain.rule import Rule


@pytest.mark.unit
class TestUnitDocument:
    def test_calendar_document(self, test_settings: Settings) -> None:
        rule = Rule.create("fixed-schedule", "toggle-appearance", {"hour": 22}, id="abc12345")
        unit = ScheduleCompiler(test_settings).compile(rule).units[0]

        document = plist.loads(plist.dumps(unit))
        assert document == {
            "Label": unit.label,
            "ProgramArguments": ["/usr/bin/osascript", str(unit.script.path)],
            "StartCalendarInterval": {"Hour": 22, "Minute": 0},
            "StandardOutPath": str(unit.log_path),
            "StandardErrorPath": str(unit.log_path),
        }

    def test_label_comes_first(self, test_settings: Settings) -> None:
        unit = ScheduleCompiler(test_settings).compile(Rule.create("on-login", "empty-trash")).units[0]
        assert next(iter(plist.unit_document(unit))) == "Label"

    def test_weekday_entries(self, test_settings: Settings) -> None:
        rule = Rule.create("fixed-schedule", "empty-trash", {"hour": 17, "weekdays": [6, 2]})
        unit = ScheduleCompiler(test_settings).compile(rule).units[0]
        entries = plist.unit_document(unit)["StartCalendarInterval"]
        assert entries == [
            {"Hour": 17, "Minute": 0, "Weekday": 2},
            {"Hour": 17, "Minute": 0, "Weekday": 6},
        ]

    def test_path_watch_document(self, test_settings: Settings) -> None:
        rule = Rule.create(
            "path-watch", "move-files", {"folder": "/Users/me/Desktop"}, {"destination": "/tmp/out"}
        )
        unit = ScheduleCompiler(test_settings).compile(rule).units[0]
        document = plist.unit_document(unit)
        assert document["WatchPaths"] == ["/Users/me/Desktop"]
        assert "StartCalendarInterval" not in document

    def test_drive_mount_document(self, test_settings: Settings) -> None:
        rule = Rule.create("drive-mount", "show-notification", action_config={"message": "Back up"})
        unit = ScheduleCompiler(test_settings).compile(rule).units[0]
        assert plist.unit_document(unit)["StartOnMount"] is True

    def test_xml_format(self, test_settings: Settings) -> None:
        unit = ScheduleCompiler(test_settings).compile(Rule.create("on-login", "empty-trash")).units[0]
        data = plist.dumps(unit)
        assert data.startswith(b"<?xml")
        assert b"<key>RunAtLoad</key>" in data
