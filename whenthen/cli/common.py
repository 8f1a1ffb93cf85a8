"""Shared CLI plumbing — service construction and option parsing."""

from __future__ import annotations

from typing import Any

import typer

from whenthen.apps import ApplicationCatalog
from whenthen.config import Settings, get_settings
from whenthen.exceptions import StoreError
from whenthen.lifecycle.manager import LifecycleManager
from whenthen.lifecycle.scheduler import BaseScheduler, LaunchdScheduler
from whenthen.lifecycle.store import RuleStore
from whenthen.suggest.engine import SuggestionEngine


def make_scheduler(settings: Settings) -> BaseScheduler:
    return LaunchdScheduler(settings.scheduler)


def open_store(settings: Settings | None = None) -> RuleStore:
    settings = settings or get_settings()
    try:
        return RuleStore(settings.paths.store_file)
    except StoreError as exc:
        typer.echo(f"Error: {exc.message}", err=True)
        raise typer.Exit(1)


def build_manager(store: RuleStore, settings: Settings | None = None) -> LifecycleManager:
    settings = settings or get_settings()
    return LifecycleManager(settings, make_scheduler(settings), store)


def build_engine(settings: Settings | None = None) -> SuggestionEngine:
    settings = settings or get_settings()
    catalog = ApplicationCatalog(settings.suggestions.application_dirs)
    return SuggestionEngine(
        app_names=catalog.installed_apps(),
        max_suggestions=settings.suggestions.max_suggestions,
        max_templates=settings.suggestions.max_templates,
    )


def parse_assignments(values: list[str] | None) -> dict[str, Any]:
    """Turn ``["hour=22", "apps=Xcode,Figma"]`` into a config mapping.

    Values stay strings; the config model coerces them against its field
    types.  Repeating a key collects its values into a list, so
    ``urls=a urls=b`` yields ``["a", "b"]``.
    """
    config: dict[str, Any] = {}
    for item in values or []:
        key, sep, raw = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise typer.BadParameter(f"Expected KEY=VALUE, got '{item}'")
        if key not in config:
            config[key] = raw
        elif isinstance(config[key], list):
            config[key].append(raw)
        else:
            config[key] = [config[key], raw]
    return config
