"""Unit tests — SuggestionEngine ranking and extraction."""

from __future__ import annotations

from pathlib import Path

import pytest

from whenthen.domain.actions import ActionType
from whenthen.domain.registry import get_trigger
from whenthen.domain.triggers import TriggerType
from whenthen.suggest.engine import SuggestionEngine


@pytest.fixture
def engine() -> SuggestionEngine:
    return SuggestionEngine(app_names=("Slack", "Xcode"), home=Path("/Users/me"))


@pytest.mark.unit
class TestEmptyInput:
    @pytest.mark.parametrize("text", ["", "   "])
    def test_blank_text(self, engine: SuggestionEngine, text: str) -> None:
        result = engine.parse(text)
        assert result.empty
        assert result.suggestions == []

    def test_gibberish(self, engine: SuggestionEngine) -> None:
        assert engine.parse("xyzzy plugh").empty


@pytest.mark.unit
class TestDarkModeAtTen:
    def test_top_suggestion(self, engine: SuggestionEngine) -> None:
        best = engine.parse("dark mode at 10pm").suggestions[0]
        assert best.action_type is ActionType.TOGGLE_APPEARANCE
        assert best.trigger_type is TriggerType.FIXED_SCHEDULE
        assert best.trigger_config == {"hour": 22, "minute": 0, "weekdays": [1, 2, 3, 4, 5, 6, 7]}
        assert best.action_config == {"mode": "dark"}
        assert best.missing_fields == ()
        assert best.complete
        assert best.summary == "Every day at 10:00 PM, switch to Dark Mode"

    def test_scores_are_bounded_and_sorted(self, engine: SuggestionEngine) -> None:
        suggestions = engine.parse("dark mode at 10pm").suggestions
        assert 1 <= len(suggestions) <= 3
        scores = [s.score for s in suggestions]
        assert scores == sorted(scores, reverse=True)
        assert all(0.0 <= s <= 1.0 for s in scores)

    def test_related_templates_share_the_action(self, engine: SuggestionEngine) -> None:
        templates = engine.parse("dark mode at 10pm").matched_templates
        assert 1 <= len(templates) <= 3
        assert all(t.action_type is ActionType.TOGGLE_APPEARANCE for t in templates)

    def test_parse_is_deterministic(self, engine: SuggestionEngine) -> None:
        assert engine.parse("dark mode at 10pm") == engine.parse("dark mode at 10pm")

    def test_suggestion_becomes_valid_rule(self, engine: SuggestionEngine) -> None:
        rule = engine.parse("dark mode at 10pm").suggestions[0].to_rule()
        assert rule.validate() is None
        assert rule.trigger_config.hour == 22


@pytest.mark.unit
class TestOtherPhrases:
    def test_reminder_on_interval(self, engine: SuggestionEngine) -> None:
        best = engine.parse("remind me to stretch every 30 minutes").suggestions[0]
        assert best.action_type is ActionType.SHOW_NOTIFICATION
        assert best.trigger_type is TriggerType.FIXED_INTERVAL
        assert best.trigger_config == {"minutes": 30}
        assert best.action_config == {"message": "Stretch"}

    def test_weekly_trash(self, engine: SuggestionEngine) -> None:
        best = engine.parse("empty the trash every friday at 5pm").suggestions[0]
        assert best.action_type is ActionType.EMPTY_TRASH
        assert best.trigger_type is TriggerType.FIXED_SCHEDULE
        assert best.trigger_config == {"hour": 17, "minute": 0, "weekdays": [6]}

    def test_installed_app_names(self, engine: SuggestionEngine) -> None:
        best = engine.parse("open slack on login").suggestions[0]
        assert best.action_type is ActionType.OPEN_APPS
        assert best.trigger_type is TriggerType.ON_LOGIN
        assert best.action_config == {"apps": ["Slack"]}

    def test_move_files_folders(self, engine: SuggestionEngine) -> None:
        best = engine.parse("move files to documents when files appear in downloads").suggestions[0]
        assert best.action_type is ActionType.MOVE_FILES
        assert best.trigger_type is TriggerType.PATH_WATCH
        assert best.trigger_config == {"folder": "/Users/me/Downloads"}
        assert best.action_config == {"destination": "/Users/me/Documents"}

    def test_default_trigger_reports_missing_time(self, engine: SuggestionEngine) -> None:
        best = engine.parse("stay awake").suggestions[0]
        assert best.action_type is ActionType.KEEP_AWAKE
        assert best.trigger_type is TriggerType.FIXED_SCHEDULE
        assert best.missing_fields == ("time",)
        assert best.action_config == {"duration_minutes": 60}

    def test_template_name_match_without_suggestions(self, engine: SuggestionEngine) -> None:
        result = engine.parse("weekly review sites")
        assert result.suggestions == []
        assert [t.id for t in result.matched_templates] == ["weekly-review"]


@pytest.mark.unit
class TestDefaults:
    @pytest.mark.parametrize(
        "action,trigger",
        [
            (ActionType.OPEN_APPS, TriggerType.ON_LOGIN),
            (ActionType.QUIT_APPS, TriggerType.ON_LOGIN),
            (ActionType.MOVE_FILES, TriggerType.PATH_WATCH),
            (ActionType.SHOW_NOTIFICATION, TriggerType.FIXED_INTERVAL),
            (ActionType.SET_VOLUME, TriggerType.FIXED_SCHEDULE),
        ],
    )
    def test_default_trigger(self, action: ActionType, trigger: TriggerType) -> None:
        assert SuggestionEngine.default_trigger(action) is trigger

    def test_range_extraction(self, engine: SuggestionEngine) -> None:
        config = engine.extract_trigger_config(TriggerType.TIME_RANGE, "between 9am and 5pm on weekdays")
        assert config == {
            "start_hour": 9,
            "start_minute": 0,
            "end_hour": 17,
            "end_minute": 0,
            "weekdays": [2, 3, 4, 5, 6],
        }

    def test_range_without_start_reports_it_missing(self, engine: SuggestionEngine) -> None:
        config = engine.extract_trigger_config(TriggerType.TIME_RANGE, "keep awake until 5pm")
        assert "start_hour" not in config
        assert (config["end_hour"], config["end_minute"]) == (17, 0)
        assert get_trigger(TriggerType.TIME_RANGE).fields.missing(set(config)) == ["start_time"]
