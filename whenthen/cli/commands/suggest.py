"""CLI — Natural-language suggestions."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from whenthen.cli.commands.rules import install_or_warn
from whenthen.cli.common import build_engine, open_store

console = Console()


def suggest(
    text: str = typer.Argument(help='Description, e.g. "dark mode at 10pm on weekdays".'),
    accept: int | None = typer.Option(
        None, "--accept", help="Save and schedule suggestion N (1-based)."
    ),
    name: str | None = typer.Option(None, "--name", help="Custom name when accepting."),
) -> None:
    """Suggest rules for a plain-English description."""
    result = build_engine().parse(text)

    if not result.suggestions:
        console.print("[yellow]No matching automation found.[/yellow]")
    else:
        table = Table(title="Suggestions")
        table.add_column("#", style="cyan")
        table.add_column("Rule")
        table.add_column("Trigger")
        table.add_column("Action")
        table.add_column("Score")
        table.add_column("Still needed")
        for index, s in enumerate(result.suggestions, start=1):
            table.add_row(
                str(index),
                s.summary,
                s.trigger_type.value,
                s.action_type.value,
                f"{s.score:.2f}",
                ", ".join(s.missing_fields) or "-",
            )
        console.print(table)

    if result.matched_templates:
        console.print("Related templates:")
        for template in result.matched_templates:
            console.print(f"  [cyan]{template.id}[/cyan]  {template.name}: {template.subtitle}")

    if accept is None:
        return
    if not 1 <= accept <= len(result.suggestions):
        console.print(f"[red]Error: no suggestion #{accept}[/red]")
        raise typer.Exit(1)

    chosen = result.suggestions[accept - 1]
    rule = chosen.to_rule(custom_name=name)
    problem = rule.validate()
    if problem:
        missing = ", ".join(chosen.missing_fields)
        console.print(f"[red]Error: {problem}[/red]")
        if missing:
            console.print(f"Fill in: {missing} (use 'whenthen rules add' with --when/--do)")
        raise typer.Exit(1)

    store = open_store()
    store.add(rule)
    install_or_warn(store, rule)
