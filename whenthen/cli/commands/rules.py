"""CLI — Rule management commands."""

from __future__ import annotations

import json
from typing import Annotated

import typer
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from whenthen.cli.common import build_manager, open_store, parse_assignments
from whenthen.compiler import plist
from whenthen.domain.rule import Rule
from whenthen.exceptions import DomainError, RuleNotFoundError
from whenthen.lifecycle.store import RuleStore

app = typer.Typer(help="Create, inspect, enable, and remove automation rules.")
console = Console()


def _require(store: RuleStore, rule_id: str) -> Rule:
    try:
        return store.require(rule_id)
    except RuleNotFoundError as exc:
        console.print(f"[red]Error: {exc.message}[/red]")
        raise typer.Exit(1)


@app.command("list")
def list_rules() -> None:
    """List all rules, newest first."""
    store = open_store()
    manager = build_manager(store)
    rules = store.all()
    if not rules:
        console.print("No rules yet. Try [cyan]whenthen suggest \"dark mode at 10pm\"[/cyan].")
        return

    table = Table(title="Rules")
    table.add_column("ID", style="cyan")
    table.add_column("Rule")
    table.add_column("Trigger")
    table.add_column("Action")
    table.add_column("Enabled")
    table.add_column("Installed")

    for rule in rules:
        installed = all(s.installed for s in manager.status(rule))
        table.add_row(
            rule.id,
            rule.display_name,
            rule.trigger_type.value,
            rule.action_type.value,
            "yes" if rule.enabled else "[yellow]no[/yellow]",
            "yes" if installed else "[red]no[/red]",
        )
    console.print(table)
    if store.is_paused:
        console.print("[yellow]All rules are paused. Run 'whenthen resume' to restore them.[/yellow]")


@app.command("show")
def show_rule(
    rule_id: str = typer.Argument(help="Rule ID."),
    json_output: bool = typer.Option(False, "--json", help="Output raw JSON."),
) -> None:
    """Show a rule's configuration and unit status."""
    store = open_store()
    rule = _require(store, rule_id)
    manager = build_manager(store)

    details = {
        "id": rule.id,
        "name": rule.display_name,
        "enabled": rule.enabled,
        "trigger": {"type": rule.trigger_type.value, "config": rule.trigger_config.to_dict()},
        "action": {"type": rule.action_type.value, "config": rule.action_config.to_dict()},
        "created_at": rule.created_at.isoformat(),
        "last_run_at": rule.last_run_at.isoformat() if rule.last_run_at else None,
    }
    if json_output:
        console.print(Syntax(json.dumps(details, indent=2), "json"))
        return

    console.print(f"[bold]{rule.display_name}[/bold]  [dim]{rule.id}[/dim]")
    console.print(Syntax(json.dumps(details, indent=2), "json"))

    table = Table(title="Units")
    table.add_column("Label", style="cyan")
    table.add_column("Plist")
    table.add_column("Script")
    for unit in manager.status(rule):
        table.add_row(
            unit.label,
            "present" if unit.plist_present else "[red]missing[/red]",
            "present" if unit.script_present else "[red]missing[/red]",
        )
    console.print(table)


@app.command("add")
def add_rule(
    trigger: str = typer.Option(..., "--trigger", "-t", help="Trigger type, e.g. fixed-schedule."),
    action: str = typer.Option(..., "--action", "-a", help="Action type, e.g. toggle-appearance."),
    when: Annotated[
        list[str] | None, typer.Option("--when", help="Trigger setting KEY=VALUE (repeatable).")
    ] = None,
    do: Annotated[
        list[str] | None, typer.Option("--do", help="Action setting KEY=VALUE (repeatable).")
    ] = None,
    name: str | None = typer.Option(None, "--name", help="Custom display name."),
) -> None:
    """Create a rule, save it and schedule it."""
    try:
        rule = Rule.create(
            trigger_type=trigger,
            action_type=action,
            trigger_config=parse_assignments(when),
            action_config=parse_assignments(do),
            custom_name=name,
            strict=True,
        )
    except DomainError as exc:
        console.print(f"[red]Error: {exc.message}[/red]")
        raise typer.Exit(1)

    store = open_store()
    store.add(rule)
    install_or_warn(store, rule)


@app.command("remove")
def remove_rule(rule_id: str = typer.Argument(help="Rule ID.")) -> None:
    """Unschedule a rule, delete its files and forget it."""
    store = open_store()
    rule = _require(store, rule_id)
    build_manager(store).uninstall(rule)
    store.remove(rule.id)
    console.print(f"Removed [cyan]{rule.id}[/cyan] ({rule.display_name})")


@app.command("enable")
def enable_rule(rule_id: str = typer.Argument(help="Rule ID.")) -> None:
    """Mark a rule enabled and register its units."""
    store = open_store()
    rule = store.set_enabled(_require(store, rule_id).id, True)
    if not build_manager(store).enable(rule):
        console.print(f"[red]Could not register {rule.id}; see the activity log.[/red]")
        raise typer.Exit(1)
    console.print(f"Enabled [cyan]{rule.id}[/cyan]")


@app.command("disable")
def disable_rule(rule_id: str = typer.Argument(help="Rule ID.")) -> None:
    """Mark a rule disabled and unregister its units (files are kept)."""
    store = open_store()
    rule = store.set_enabled(_require(store, rule_id).id, False)
    if not build_manager(store).disable(rule):
        console.print(f"[red]Could not unregister {rule.id}; see the activity log.[/red]")
        raise typer.Exit(1)
    console.print(f"Disabled [cyan]{rule.id}[/cyan]")


@app.command("run")
def run_rule(rule_id: str = typer.Argument(help="Rule ID.")) -> None:
    """Run a scheduled rule now and record the run."""
    store = open_store()
    rule = _require(store, rule_id)
    if not build_manager(store).run_now(rule):
        console.print(f"[red]Could not run {rule.id}; is it enabled and installed?[/red]")
        raise typer.Exit(1)
    console.print(f"Started [cyan]{rule.id}[/cyan]")


@app.command("compile")
def compile_rule(rule_id: str = typer.Argument(help="Rule ID.")) -> None:
    """Print the plists and scripts a rule compiles to, without writing anything."""
    store = open_store()
    rule = _require(store, rule_id)
    compiled = build_manager(store).compiler.compile(rule)
    if not compiled.ok:
        console.print(f"[red]Error: {compiled.error}[/red]")
        raise typer.Exit(1)
    for unit in compiled.units:
        console.print(f"[bold]{unit.plist_path}[/bold]")
        console.print(Syntax(plist.dumps(unit).decode("utf-8"), "xml"))
        console.print(f"[bold]{unit.script.path}[/bold]")
        lexer = "bash" if unit.script.kind.needs_exec_bit else "applescript"
        console.print(Syntax(unit.script.content, lexer))


def install_or_warn(store: RuleStore, rule: Rule) -> None:
    if build_manager(store).install(rule):
        console.print(f"[green]Scheduled[/green] [cyan]{rule.id}[/cyan]: {rule.display_name}")
        return
    console.print(
        f"[yellow]Saved {rule.id} but could not schedule it; "
        f"see the activity log, then run 'whenthen rules enable {rule.id}'.[/yellow]"
    )
    raise typer.Exit(1)
