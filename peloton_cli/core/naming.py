"""Deterministic output file names for exported workouts."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from peloton_cli.core.constants import DETAILS_SUFFIX, METRICS_SUFFIX, RAW_METRICS_SUFFIX
from peloton_cli.core.models import WorkoutSummary
from peloton_cli.utils.text import sanitize_title

# Year-day-month ordering matches files written by earlier exporter versions,
# which keeps resume working on existing folders.
DATE_FORMAT = "%Y-%d-%m_%H-%M"


def created_at_utc(summary: WorkoutSummary) -> datetime:
    return datetime.fromtimestamp(summary.created_at, tz=timezone.utc)


def base_name(summary: WorkoutSummary) -> str:
    """Return ``<date>_<sanitized-title>`` for a workout.

    No collision handling: two workouts that start in the same minute and
    sanitize to the same title share a name.
    """
    return f"{created_at_utc(summary).strftime(DATE_FORMAT)}_{sanitize_title(summary.title)}"


def metrics_path(output_dir: Path, summary: WorkoutSummary) -> Path:
    return output_dir / f"{base_name(summary)}{METRICS_SUFFIX}"


def raw_metrics_path(output_dir: Path, summary: WorkoutSummary) -> Path:
    return output_dir / f"{base_name(summary)}{RAW_METRICS_SUFFIX}"


def details_path(output_dir: Path, summary: WorkoutSummary) -> Path:
    return output_dir / f"{base_name(summary)}{DETAILS_SUFFIX}"


def display_label(summary: WorkoutSummary) -> str:
    """Human readable workout reference used in log messages."""
    return f"{summary.title} on {created_at_utc(summary).strftime('%Y-%m-%d')}"
