"""Per-workout performance metrics and detail documents."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from peloton_cli.core.api import DeserializationError, request_json
from peloton_cli.core.constants import API_BASE, DEFAULT_TIMEOUT_SECONDS, METRICS_EVERY_N
from peloton_cli.core.models import MetricsDocument, Number, Session
from peloton_cli.exporters.json_export import write_json


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_metrics(payload: Any) -> MetricsDocument:
    """Parse a performance_graph body, enforcing series alignment."""
    if not isinstance(payload, dict):
        raise DeserializationError("Performance graph is not a JSON object")

    elapsed = payload.get("seconds_since_pedaling_start")
    if not isinstance(elapsed, list) or not all(_is_number(value) for value in elapsed):
        raise DeserializationError("Performance graph has no numeric seconds_since_pedaling_start")

    metrics = payload.get("metrics")
    if not isinstance(metrics, list):
        raise DeserializationError("Performance graph has no metrics list")

    series: List[Tuple[str, List[Optional[Number]]]] = []
    seen = set()
    for metric in metrics:
        if not isinstance(metric, dict):
            raise DeserializationError(f"Metric entry is not an object: {metric!r}")
        slug = metric.get("slug")
        values = metric.get("values")
        if not isinstance(slug, str) or not slug:
            raise DeserializationError("Metric entry is missing slug")
        if slug in seen:
            raise DeserializationError(f"Duplicate metric slug: {slug}")
        if not isinstance(values, list):
            raise DeserializationError(f"Metric {slug} has no values list")
        if len(values) != len(elapsed):
            raise DeserializationError(
                f"Metric {slug} has {len(values)} values, expected {len(elapsed)}"
            )
        if not all(value is None or _is_number(value) for value in values):
            raise DeserializationError(f"Metric {slug} contains non-numeric values")
        seen.add(slug)
        series.append((slug, values))

    return MetricsDocument(elapsed_seconds=elapsed, series=tuple(series))


def fetch_metrics(
    session: Session,
    workout_id: str,
    base_url: str = API_BASE,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    raw_path: Optional[Path] = None,
) -> MetricsDocument:
    """Fetch the 5-second performance graph for one workout.

    When ``raw_path`` is given the response body is archived there before it
    is parsed, so malformed documents can still be inspected.
    """
    payload = request_json(
        "GET",
        f"{base_url.rstrip('/')}/api/workout/{workout_id}/performance_graph",
        session=session,
        params={"every_n": METRICS_EVERY_N},
        timeout=timeout,
    )
    if raw_path is not None:
        write_json(raw_path, payload)
    return parse_metrics(payload)


def fetch_workout_details(
    session: Session,
    workout_id: str,
    base_url: str = API_BASE,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> Dict[str, Any]:
    """Fetch the user's detail document for one workout."""
    payload = request_json(
        "GET",
        f"{base_url.rstrip('/')}/api/workout/{workout_id}",
        session=session,
        timeout=timeout,
    )
    if not isinstance(payload, dict):
        raise DeserializationError(f"Workout {workout_id} details are not a JSON object")
    return payload
