"""whenthen CLI — Entry point.

Usage:
    whenthen rules list
    whenthen rules show <rule_id>
    whenthen rules add --trigger fixed-schedule --action toggle-appearance --when hour=22
    whenthen rules enable|disable|remove|compile|run <rule_id>
    whenthen suggest "dark mode at 10pm" [--accept 1]
    whenthen templates list
    whenthen templates add <template_id> [--do apps=Xcode]
    whenthen pause
    whenthen resume
    whenthen triggers
    whenthen actions
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from whenthen.cli.commands import catalog, control, rules, suggest, templates
from whenthen.config import Settings, get_settings, override_settings
from whenthen.logging import configure_logging

app = typer.Typer(
    name="whenthen",
    help="whenthen — personal automation rules scheduled with launchd.",
    no_args_is_help=True,
    pretty_exceptions_enable=False,
)

console = Console()

app.add_typer(rules.app, name="rules")
app.add_typer(templates.app, name="templates")
app.command("suggest")(suggest.suggest)
control.register(app)
catalog.register(app)


@app.callback()
def main_callback(
    config: Annotated[
        Path | None, typer.Option("--config", "-c", help="Path to config.yaml.")
    ] = None,
    log_level: Annotated[
        str | None, typer.Option("--log-level", help="Override the configured log level.")
    ] = None,
) -> None:
    if config is not None:
        if not config.exists():
            console.print(f"[red]Error: config file '{config}' not found[/red]")
            raise typer.Exit(1)
        override_settings(Settings.load(config_file=config))
    settings = get_settings()
    configure_logging(
        level=log_level or settings.logging.level,
        format=settings.logging.format,
        log_file=settings.logging.file,
        activity_log=settings.logging.activity_log,
    )


if __name__ == "__main__":
    app()
