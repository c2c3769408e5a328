"""Shared command helpers."""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

import typer

from peloton_cli.core.config import ConfigError, api_settings
from peloton_cli.core.models import Credentials
from peloton_cli.core.state import CLIState
from peloton_cli.core.throttle import Throttle


def get_state(ctx: typer.Context) -> CLIState:
    """Extract validated CLI state from Typer context."""
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=2)
    return state


def resolve_credentials(
    state: CLIState,
    username: Optional[str],
    password: Optional[str],
) -> Credentials:
    """Combine CLI/env credentials with config, prompting for what is missing."""
    username = username or state.config.get("auth", {}).get("username")
    if not username:
        if state.json_output:
            raise typer.BadParameter("Missing username. Provide --username or PELOTON_USERNAME.")
        username = typer.prompt("Peloton username or email")
    if not password:
        if state.json_output:
            raise typer.BadParameter("Missing password. Provide --password or PELOTON_PASSWORD.")
        password = typer.prompt("Peloton password", hide_input=True)
    return Credentials(username_or_email=str(username), password=str(password))


def load_api_settings(state: CLIState, throttle_ms: Optional[int] = None) -> Dict[str, Any]:
    """Return API settings, exiting with code 2 on invalid config."""
    try:
        settings = api_settings(state.config)
    except ConfigError as exc:
        typer.echo(f"Config error: {exc}")
        raise typer.Exit(code=2)
    if throttle_ms is not None:
        if throttle_ms < 0:
            raise typer.BadParameter("--throttle-ms must be >= 0")
        settings["throttle_ms"] = throttle_ms
    return settings


def build_throttle(settings: Dict[str, Any]) -> Throttle:
    return Throttle(delay_ms=int(settings["throttle_ms"]))


def print_json_payload(state: CLIState, payload: Any) -> None:
    """Print JSON payload with plain-mode fallback for piping."""
    if state.plain_output:
        typer.echo(json.dumps(payload, separators=(",", ":")))
        return
    state.console.print_json(data=payload)
