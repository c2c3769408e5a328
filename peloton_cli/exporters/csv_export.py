"""CSV writers for workout metrics and workout details."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, Dict, List, Optional

from peloton_cli.core.api import PelotonError
from peloton_cli.core.models import MetricsDocument, Number


class FileSystemError(PelotonError):
    """Raised when an export file or directory cannot be written."""


def _format_value(value: Optional[Number]) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def metrics_to_lines(document: MetricsDocument) -> List[str]:
    """Render a metrics document as CSV lines, header first."""
    lines = [",".join(["elapsed_seconds", *document.slugs])]
    columns = [values for _, values in document.series]
    for index, elapsed in enumerate(document.elapsed_seconds):
        row = [_format_value(elapsed)]
        row.extend(_format_value(values[index]) for values in columns)
        lines.append(",".join(row))
    return lines


def write_metrics_csv(document: MetricsDocument, path: Path) -> Path:
    """Write metrics to ``path``, replacing any existing file."""
    try:
        path.write_text("\n".join(metrics_to_lines(document)) + "\n")
    except OSError as exc:
        raise FileSystemError(f"Failed to write {path}: {exc}") from exc
    return path


def flatten(data: Any, prefix: str = "") -> Dict[str, Any]:
    """Flatten nested dicts/lists into dotted keys."""
    flat: Dict[str, Any] = {}
    if isinstance(data, dict):
        items = [(str(key), value) for key, value in data.items()]
    elif isinstance(data, list):
        items = [(str(index), value) for index, value in enumerate(data)]
    else:
        return {prefix: data}

    if not items and prefix:
        flat[prefix] = ""
    for key, value in items:
        name = f"{prefix}.{key}" if prefix else key
        if isinstance(value, (dict, list)):
            flat.update(flatten(value, name))
        else:
            flat[name] = value
    return flat


def write_details_csv(details: Dict[str, Any], path: Path) -> Path:
    """Write a workout detail document as ``key,value`` rows."""
    try:
        with path.open("w", newline="") as handle:
            writer = csv.writer(handle)
            writer.writerow(["key", "value"])
            for key, value in flatten(details).items():
                writer.writerow([key, "" if value is None else value])
    except OSError as exc:
        raise FileSystemError(f"Failed to write {path}: {exc}") from exc
    return path
