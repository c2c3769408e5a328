"""Authentication command."""

from __future__ import annotations

from contextlib import nullcontext
from typing import Optional

import typer

from peloton_cli.commands.common import get_state, load_api_settings, print_json_payload, resolve_credentials
from peloton_cli.core.api import PelotonError
from peloton_cli.core.auth import authenticate
from peloton_cli.core.pipeline import describe_error


def login_command(
    ctx: typer.Context,
    username: Optional[str] = typer.Option(None, help="Peloton username or email", envvar="PELOTON_USERNAME"),
    password: Optional[str] = typer.Option(None, help="Peloton password", envvar="PELOTON_PASSWORD"),
) -> None:
    """Check credentials against the Peloton login endpoint."""
    state = get_state(ctx)
    settings = load_api_settings(state)
    credentials = resolve_credentials(state, username, password)

    try:
        status_ctx = state.console.status("Authenticating...") if not state.plain_output else nullcontext()
        with status_ctx:
            session = authenticate(
                credentials,
                base_url=settings["auth_url"],
                timeout=settings["timeout_seconds"],
            )
    except PelotonError as exc:
        message = describe_error(exc)
        if state.json_output:
            print_json_payload(state, {"status": "error", "message": message})
        elif state.plain_output:
            typer.echo("status\terror")
            typer.echo(f"message\t{message}")
        else:
            state.console.print(f"Login failed: {message}")
        raise typer.Exit(code=1)

    if state.json_output:
        print_json_payload(state, {"status": "success", "authenticated": True, "user_id": session.user_id})
        return

    if state.plain_output:
        typer.echo("status\tsuccess")
        typer.echo(f"user_id\t{session.user_id}")
        return

    state.console.print("Login successful")
    state.console.print(f"User: {session.user_id}")
