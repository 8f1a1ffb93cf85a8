"""Unit tests — Settings loading and path handling."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from whenthen.config import LoggingConfig, PathsConfig, Settings, get_settings, override_settings


@pytest.mark.unit
class TestDefaults:
    def test_scheduler_defaults(self) -> None:
        settings = Settings()
        assert settings.scheduler.label_prefix == "io.whenthen"
        assert settings.scheduler.launchctl_path == "/bin/launchctl"
        assert settings.interpreters.shell == "/bin/bash"
        assert settings.interpreters.applescript == "/usr/bin/osascript"

    def test_paths_are_expanded(self) -> None:
        paths = PathsConfig()
        assert "~" not in str(paths.data_dir)
        assert paths.launch_agents_dir == Path.home() / "Library" / "LaunchAgents"

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValidationError):
            LoggingConfig(level="loud")  # type: ignore[arg-type]

    def test_timeout_bounds(self) -> None:
        with pytest.raises(ValidationError):
            Settings(scheduler={"command_timeout_seconds": 0})


@pytest.mark.unit
class TestSources:
    def test_environment_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("WHENTHEN_SCHEDULER__LABEL_PREFIX", "com.example")
        assert Settings().scheduler.label_prefix == "com.example"

    def test_yaml_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "scheduler:\n  label_prefix: com.example\nsuggestions:\n  max_suggestions: 5\n"
        )
        settings = Settings.load(config_file=config_file)
        assert settings.scheduler.label_prefix == "com.example"
        assert settings.suggestions.max_suggestions == 5

    def test_missing_files_fall_back_to_defaults(self, tmp_path: Path) -> None:
        settings = Settings.load(config_file=tmp_path / "absent.yaml")
        assert settings.suggestions.max_suggestions == 3


@pytest.mark.unit
class TestRootedAt:
    def test_everything_under_root(self, tmp_path: Path) -> None:
        settings = Settings.rooted_at(tmp_path)
        for directory in settings.paths.all_dirs():
            assert directory.is_relative_to(tmp_path)
        assert settings.paths.store_file == tmp_path / "rules.json"
        assert settings.logging.activity_log is None

    def test_override_settings(self, tmp_path: Path) -> None:
        settings = Settings.rooted_at(tmp_path)
        override_settings(settings)
        assert get_settings() is settings
