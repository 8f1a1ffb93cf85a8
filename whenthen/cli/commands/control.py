"""CLI — Pause and resume every rule at once."""

from __future__ import annotations

import typer
from rich.console import Console

from whenthen.cli.common import build_manager, open_store

console = Console()


def pause() -> None:
    """Unschedule every enabled rule until 'whenthen resume'."""
    store = open_store()
    if store.is_paused:
        console.print("[yellow]Already paused.[/yellow]")
        return
    paused = build_manager(store).pause_all()
    console.print(f"Paused {len(paused)} rule(s).")


def resume() -> None:
    """Reschedule the rules paused by 'whenthen pause'."""
    store = open_store()
    if not store.is_paused:
        console.print("Nothing is paused.")
        return
    resumed = build_manager(store).resume_all()
    console.print(f"Resumed {len(resumed)} rule(s).")


def register(app: typer.Typer) -> None:
    app.command("pause")(pause)
    app.command("resume")(resume)
