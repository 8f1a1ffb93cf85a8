"""CLI — Built-in template commands."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from whenthen.cli.commands.rules import install_or_warn
from whenthen.cli.common import open_store, parse_assignments
from whenthen.domain.rule import Rule
from whenthen.exceptions import DomainError
from whenthen.suggest.templates import get_template, grouped

app = typer.Typer(help="Browse and add ready-made rules.")
console = Console()


@app.command("list")
def list_templates() -> None:
    """List templates by category."""
    for category, templates in grouped():
        table = Table(title=category.value)
        table.add_column("ID", style="cyan")
        table.add_column("Name")
        table.add_column("Description")
        table.add_column("Needs input")
        for t in templates:
            table.add_row(t.id, t.name, t.subtitle, "[yellow]yes[/yellow]" if t.needs_input else "")
        console.print(table)


@app.command("add")
def add_template(
    template_id: str = typer.Argument(help="Template ID, see 'whenthen templates list'."),
    when: Annotated[
        list[str] | None, typer.Option("--when", help="Override a trigger setting KEY=VALUE.")
    ] = None,
    do: Annotated[
        list[str] | None, typer.Option("--do", help="Override an action setting KEY=VALUE.")
    ] = None,
    name: str | None = typer.Option(None, "--name", help="Custom display name."),
) -> None:
    """Create a rule from a template, filling blanks with --when / --do."""
    template = get_template(template_id)
    if template is None:
        console.print(f"[red]Error: unknown template '{template_id}'[/red]")
        raise typer.Exit(1)

    base = template.to_rule()
    try:
        rule = Rule.create(
            trigger_type=template.trigger_type,
            action_type=template.action_type,
            trigger_config={**base.trigger_config.to_dict(), **parse_assignments(when)},
            action_config={**base.action_config.to_dict(), **parse_assignments(do)},
            custom_name=name,
            strict=True,
        )
    except DomainError as exc:
        console.print(f"[red]Error: {exc.message}[/red]")
        raise typer.Exit(1)

    store = open_store()
    store.add(rule)
    install_or_warn(store, rule)
