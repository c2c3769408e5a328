"""Export workout metrics to CSV files."""

from __future__ import annotations

from contextlib import nullcontext
from pathlib import Path
from typing import Optional

import typer
from rich.progress import BarColumn, Progress, TextColumn, TimeElapsedColumn

from peloton_cli.commands.common import (
    build_throttle,
    get_state,
    load_api_settings,
    print_json_payload,
    resolve_credentials,
)
from peloton_cli.core.config import resolve_output_dir
from peloton_cli.core.models import RunOutcome
from peloton_cli.core.pipeline import run_export
from peloton_cli.exporters.csv_export import FileSystemError

EXIT_CODES = {
    RunOutcome.COMPLETED_FULLY: 0,
    RunOutcome.ABORTED_DURING_AUTH: 1,
    RunOutcome.ABORTED_DURING_LISTING: 1,
    RunOutcome.COMPLETED_WITH_SKIPPED_ITEMS: 3,
}


def export_command(
    ctx: typer.Context,
    username: Optional[str] = typer.Option(None, help="Peloton username or email", envvar="PELOTON_USERNAME"),
    password: Optional[str] = typer.Option(None, help="Peloton password", envvar="PELOTON_PASSWORD"),
    output_dir: Optional[Path] = typer.Option(None, help="Output directory"),
    overwrite: Optional[bool] = typer.Option(
        None,
        "--overwrite/--no-overwrite",
        help="Re-download workouts whose CSV already exists",
    ),
    raw: Optional[bool] = typer.Option(None, "--raw/--no-raw", help="Also save raw API responses"),
    details: Optional[bool] = typer.Option(
        None,
        "--details/--no-details",
        help="Also export per-workout user details",
    ),
    throttle_ms: Optional[int] = typer.Option(None, help="Delay between requests in ms"),
    create_dir: bool = typer.Option(False, "--create-dir", help="Create the output directory if missing"),
) -> None:
    """Download performance metrics for every workout as CSV."""
    state = get_state(ctx)
    export_cfg = state.config.get("export", {})
    settings = load_api_settings(state, throttle_ms=throttle_ms)

    out_dir = resolve_output_dir(state.config, explicit=output_dir)
    credentials = resolve_credentials(state, username, password)

    show_progress = not (state.plain_output or state.json_output or state.quiet)
    progress_ctx = (
        Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.percentage:>3.0f}%"),
            TimeElapsedColumn(),
            console=state.console,
        )
        if show_progress
        else nullcontext()
    )

    try:
        if create_dir:
            try:
                out_dir.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise FileSystemError(f"Failed to create output directory {out_dir}: {exc}") from exc

        with progress_ctx as progress:
            on_progress = None
            if progress is not None:
                task_id = progress.add_task("Exporting", total=100)

                def on_progress(percent: float) -> None:
                    progress.update(task_id, completed=percent)

            result = run_export(
                credentials,
                out_dir,
                overwrite=bool(export_cfg.get("overwrite", False) if overwrite is None else overwrite),
                sink=state.render_event,
                throttle=build_throttle(settings),
                progress=on_progress,
                api_base=settings["base_url"],
                auth_base=settings["auth_url"],
                timeout=settings["timeout_seconds"],
                save_raw=bool(export_cfg.get("save_raw", False) if raw is None else raw),
                include_details=bool(export_cfg.get("include_details", False) if details is None else details),
            )
    except FileSystemError as exc:
        if state.json_output:
            print_json_payload(state, {"status": "error", "message": str(exc)})
        else:
            typer.echo(f"Error: {exc}\nAborting.", err=True)
        raise typer.Exit(code=1)

    payload = result.to_dict()
    payload["path"] = str(out_dir)

    if state.json_output:
        payload["events"] = [
            {"severity": event.severity.value, "message": event.message} for event in state.events
        ]
        print_json_payload(state, payload)
    elif state.plain_output:
        for key in ("status", "path", "total", "written", "skipped", "failed"):
            typer.echo(f"{key}\t{payload[key]}")
    else:
        state.console.print(
            f"Exported {result.written} of {result.total} workouts to {out_dir} "
            f"({result.skipped} already present, {result.failed} failed)"
        )

    code = EXIT_CODES[result.outcome]
    if code:
        raise typer.Exit(code=code)
