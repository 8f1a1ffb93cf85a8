"""whenthen — Configuration.

Configuration is loaded from (in order of increasing priority):
    1. Built-in defaults (this file)
    2. System config: /etc/whenthen/config.yaml
    3. User config:   ~/.whenthen/config.yaml
    4. An explicit ``--config`` file
    5. Environment variables prefixed with WHENTHEN_

Call ``Settings.load()`` once at CLI startup and pass the instance to the
lifecycle manager, the rule store and the suggestion engine.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# ---------------------------------------------------------------------------
# Sub-configuration blocks
# ---------------------------------------------------------------------------


class PathsConfig(BaseModel):
    """Where whenthen keeps its files.

    Everything lives under ``data_dir`` except the plists, which go where
    launchd looks for per-user agents.
    """

    data_dir: Path = Path("~/.whenthen")
    scripts_dir: Path = Path("~/.whenthen/scripts")
    logs_dir: Path = Path("~/.whenthen/logs")
    launch_agents_dir: Path = Path("~/Library/LaunchAgents")
    store_file: Path = Path("~/.whenthen/rules.json")

    @field_validator("*", mode="after")
    @classmethod
    def expand_user(cls, v: Path) -> Path:
        return v.expanduser()

    def all_dirs(self) -> list[Path]:
        return [self.data_dir, self.scripts_dir, self.logs_dir, self.launch_agents_dir]


class SchedulerConfig(BaseModel):
    launchctl_path: str = "/bin/launchctl"
    label_prefix: str = Field(
        default="io.whenthen",
        description="Reverse-DNS prefix of every job unit label and plist file name.",
    )
    command_timeout_seconds: Annotated[float, Field(ge=1.0, le=120.0)] = Field(
        default=15.0,
        description="Maximum seconds to wait for a launchctl invocation.",
    )


class InterpreterConfig(BaseModel):
    shell: str = "/bin/bash"
    applescript: str = "/usr/bin/osascript"


class SuggestionConfig(BaseModel):
    max_suggestions: Annotated[int, Field(ge=1, le=10)] = 3
    max_templates: Annotated[int, Field(ge=0, le=10)] = 3
    application_dirs: list[Path] = Field(
        default_factory=lambda: [Path("/Applications"), Path("~/Applications")],
        description="Directories scanned for .app bundles when matching app names.",
    )

    @field_validator("application_dirs", mode="after")
    @classmethod
    def expand_dirs(cls, v: list[Path]) -> list[Path]:
        return [p.expanduser() for p in v]


class LoggingConfig(BaseModel):
    level: Literal["debug", "info", "warning", "error", "critical"] = "warning"
    format: Literal["json", "console"] = "console"
    file: Path | None = None
    activity_log: Path | None = Path("~/.whenthen/logs/activity.log")

    @field_validator("file", "activity_log", mode="after")
    @classmethod
    def expand_user(cls, v: Path | None) -> Path | None:
        return v.expanduser() if v is not None else None


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="WHENTHEN_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    paths: PathsConfig = Field(default_factory=PathsConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    interpreters: InterpreterConfig = Field(default_factory=InterpreterConfig)
    suggestions: SuggestionConfig = Field(default_factory=SuggestionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, config_file: Path | None = None) -> "Settings":
        """Load settings from file + environment variables."""
        data: dict[str, object] = {}

        candidates = [
            Path("/etc/whenthen/config.yaml"),
            Path.home() / ".whenthen" / "config.yaml",
        ]
        if config_file:
            candidates.append(config_file)

        for path in candidates:
            if path.exists():
                import yaml  # lazy import, only needed when a file exists

                with path.open() as f:
                    loaded = yaml.safe_load(f) or {}
                    data.update(loaded)

        return cls(**data)

    @classmethod
    def rooted_at(cls, root: Path) -> "Settings":
        """Settings whose every path lives under *root*.  Used by tests and sandboxes."""
        return cls(
            paths=PathsConfig(
                data_dir=root,
                scripts_dir=root / "scripts",
                logs_dir=root / "logs",
                launch_agents_dir=root / "LaunchAgents",
                store_file=root / "rules.json",
            ),
            logging=LoggingConfig(activity_log=None),
        )


# Module-level singleton, replaced by ``Settings.load()`` at CLI startup.
_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def override_settings(settings: Settings) -> None:
    """Replace the module-level singleton. Used in tests."""
    global _settings
    _settings = settings
