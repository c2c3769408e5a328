"""Entry point for peloton-cli."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from peloton_cli import __version__
from peloton_cli.commands.auth import login_command
from peloton_cli.commands.export import export_command
from peloton_cli.commands.workouts import list_command
from peloton_cli.core.config import ConfigError, default_config_path, load_config
from peloton_cli.core.state import CLIState

app = typer.Typer(
    add_completion=False,
    help="Export Peloton workout history to CSV",
    invoke_without_command=True,
)


def _configure_logging(console: Console, verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
    # urllib3 connection chatter drowns out the pipeline's own messages.
    logging.getLogger("urllib3").setLevel(logging.INFO)


@app.callback()
def main_callback(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output JSON where available"),
    plain_output: bool = typer.Option(
        False,
        "--plain",
        help="Output plain text (no rich formatting/tables)",
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
    _configure_logging(console, verbose)
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


app.command("login")(login_command)
app.command("list")(list_command)
app.command("export")(export_command)


def main() -> None:
    """Console script entrypoint."""
    app()


if __name__ == "__main__":
    main()
