"""Entry point for mapty."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from mapty_cli import __version__
from mapty_cli.commands.home import home_command
from mapty_cli.commands.map import map_command
from mapty_cli.commands.reset import reset_command
from mapty_cli.commands.workouts import add_command, export_command, list_command, show_command
from mapty_cli.core.config import ConfigError, default_config_path, load_config
from mapty_cli.core.state import CLIState

app = typer.Typer(
    add_completion=False,
    help="Map your running and cycling workouts",
    invoke_without_command=True,
)


def configure_logging(console: Console, verbose: bool, quiet: bool) -> None:
    """Route package loggers through rich on the CLI console."""
    level = logging.WARNING
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR

    logger = logging.getLogger("mapty_cli")
    logger.handlers.clear()
    logger.addHandler(RichHandler(console=console, show_time=False, show_path=False))
    logger.setLevel(level)
    logger.propagate = False


@app.callback()
def main_callback(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output JSON where available"),
    plain_output: bool = typer.Option(
        False,
        "--plain",
        help="Output plain text (no rich formatting)",
    ),
    config: Optional[Path] = typer.Option(None, "--config", help="Path to config file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Quiet output"),
    version: bool = typer.Option(False, "--version", help="Show version and exit"),
) -> None:
    """Initialize global CLI state."""
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if json_output and plain_output:
        typer.echo("Options --json and --plain are mutually exclusive.")
        raise typer.Exit(code=2)

    cfg_path = (config or default_config_path()).expanduser().resolve()
    try:
        cfg = load_config(cfg_path)
    except ConfigError as exc:
        typer.echo(f"Config error: {exc}")
        raise typer.Exit(code=2)

    console = Console(
        quiet=quiet,
        no_color=plain_output,
        log_time=False,
        log_path=False,
    )
    log_console = Console(stderr=True, no_color=plain_output)
    configure_logging(log_console, verbose=verbose, quiet=quiet)

    ctx.obj = CLIState(
        json_output=(json_output and not plain_output),
        plain_output=plain_output,
        verbose=verbose,
        quiet=quiet,
        config_path=cfg_path,
        config=cfg,
        console=console,
    )

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)


app.command("add")(add_command)
app.command("list")(list_command)
app.command("show")(show_command)
app.command("map")(map_command)
app.command("export")(export_command)
app.command("reset")(reset_command)
app.command("home")(home_command)


def main() -> None:
    """Console script entrypoint."""
    app()


if __name__ == "__main__":
    main()
