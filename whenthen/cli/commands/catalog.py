"""CLI — Trigger and action catalogues."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from whenthen.domain.fields import FieldSchema
from whenthen.domain.registry import ACTIONS, TRIGGERS

console = Console()


def _describe_fields(schema: FieldSchema) -> str:
    if not len(schema):
        return "-"
    parts = []
    for f in schema:
        keys = "+".join(f.config_keys)
        extra = f" ({', '.join(str(o) for o in f.options)})" if f.options else ""
        parts.append(f"{keys}{extra}")
    return "; ".join(parts)


def triggers() -> None:
    """List trigger types, their settings and the actions they accept."""
    table = Table(title="Triggers")
    table.add_column("Type", style="cyan")
    table.add_column("Name")
    table.add_column("Settings")
    table.add_column("Works with")
    for kind in TRIGGERS.values():
        table.add_row(
            kind.type.value,
            kind.name,
            _describe_fields(kind.fields),
            ", ".join(a.value for a in kind.compatible_actions),
        )
    console.print(table)


def actions() -> None:
    """List action types, their settings and whether they can be undone."""
    table = Table(title="Actions")
    table.add_column("Type", style="cyan")
    table.add_column("Name")
    table.add_column("Settings")
    table.add_column("Script")
    table.add_column("Revertible")
    for kind in ACTIONS.values():
        table.add_row(
            kind.type.value,
            kind.name,
            _describe_fields(kind.fields),
            kind.body_kind.value,
            "yes" if kind.can_revert else "",
        )
    console.print(table)


def register(app: typer.Typer) -> None:
    app.command("triggers")(triggers)
    app.command("actions")(actions)
