"""Workout listing command."""

from __future__ import annotations

from contextlib import nullcontext
from typing import Any, Dict, List, Optional

import typer
from rich.table import Table

from peloton_cli.commands.common import (
    build_throttle,
    get_state,
    load_api_settings,
    print_json_payload,
    resolve_credentials,
)
from peloton_cli.core.api import PelotonError
from peloton_cli.core.auth import authenticate
from peloton_cli.core.listing import list_workouts
from peloton_cli.core.models import WorkoutSummary
from peloton_cli.core.naming import base_name, created_at_utc
from peloton_cli.core.pipeline import describe_error


def _row(summary: WorkoutSummary) -> Dict[str, Any]:
    return {
        "workout_id": summary.workout_id,
        "title": summary.title,
        "created_at": created_at_utc(summary).isoformat(),
        "base_name": base_name(summary),
    }


def list_command(
    ctx: typer.Context,
    username: Optional[str] = typer.Option(None, help="Peloton username or email", envvar="PELOTON_USERNAME"),
    password: Optional[str] = typer.Option(None, help="Peloton password", envvar="PELOTON_PASSWORD"),
    throttle_ms: Optional[int] = typer.Option(None, help="Delay between page requests in ms"),
) -> None:
    """List every workout in the account history."""
    state = get_state(ctx)
    settings = load_api_settings(state, throttle_ms=throttle_ms)
    credentials = resolve_credentials(state, username, password)
    throttle = build_throttle(settings)

    try:
        status_ctx = state.console.status("Fetching workout history...") if not state.plain_output else nullcontext()
        with status_ctx:
            session = authenticate(
                credentials,
                base_url=settings["auth_url"],
                timeout=settings["timeout_seconds"],
            )
            workouts = list_workouts(
                session,
                throttle,
                base_url=settings["base_url"],
                timeout=settings["timeout_seconds"],
            )
    except PelotonError as exc:
        message = describe_error(exc)
        if state.json_output:
            print_json_payload(state, {"status": "error", "message": message})
        else:
            typer.echo(f"Error: {message}", err=True)
        raise typer.Exit(code=1)

    rows: List[Dict[str, Any]] = [_row(summary) for summary in workouts]

    if state.json_output:
        print_json_payload(state, {"total": len(rows), "workouts": rows})
        return

    if state.plain_output:
        for row in rows:
            typer.echo("\t".join([row["created_at"], row["workout_id"], row["title"]]))
        return

    table = Table(title=f"Workouts ({len(rows)})")
    table.add_column("Date")
    table.add_column("Title")
    table.add_column("ID")
    table.add_column("File base name")
    for row in rows:
        table.add_row(row["created_at"][:16].replace("T", " "), row["title"], row["workout_id"], row["base_name"])
    state.console.print(table)
