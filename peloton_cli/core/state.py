"""Runtime state container for CLI context."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import typer
from rich.console import Console
from rich.markup import escape

from peloton_cli.core.models import LogEvent, Severity


@dataclass
class CLIState:
    """CLI runtime options, loaded configuration and pipeline event log."""

    json_output: bool
    plain_output: bool
    verbose: bool
    quiet: bool
    config_path: Path
    config: Dict[str, Any]
    console: Console
    events: List[LogEvent] = field(default_factory=list)

    def render_event(self, event: LogEvent) -> None:
        """Pipeline log sink: record the event and show it unless in JSON mode."""
        self.events.append(event)
        if self.json_output:
            return

        message = event.message
        if event.error is not None and self.verbose:
            message += f"\nException: {event.error!r}"

        if self.plain_output:
            prefix = "Error: " if event.severity is Severity.ERROR else ""
            typer.echo(f"{prefix}{message}", err=event.severity is Severity.ERROR)
            return

        if event.severity is Severity.ERROR:
            self.console.print(f"[bold red]Error:[/bold red] {escape(message)}")
        else:
            self.console.print(escape(message))
