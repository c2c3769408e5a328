from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest
from typer.testing import CliRunner

from peloton_cli.core.models import Credentials, Session, WorkoutSummary


class MockResponse:
    def __init__(
        self,
        status_code: int = 200,
        payload: Any = None,
        text: Optional[str] = None,
        reason: str = "OK",
    ) -> None:
        self.status_code = status_code
        self._payload = payload if payload is not None else {}
        self.text = text if text is not None else json.dumps(self._payload)
        self.reason = reason

    def json(self) -> Any:
        return json.loads(self.text)


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def make_response() -> Callable[..., MockResponse]:
    return MockResponse


@pytest.fixture()
def credentials() -> Credentials:
    return Credentials(username_or_email="rider@example.com", password="s3cret")


@pytest.fixture()
def session() -> Session:
    return Session(session_id="sess-123", user_id="user-42")


def _workout_item(workout_id: str, title: str, created_at: int) -> Dict[str, Any]:
    return {
        "id": workout_id,
        "device_time_created_at": created_at,
        "fitness_discipline": "cycling",
        "ride": {"title": title, "duration": 1800},
    }


@pytest.fixture()
def workout_items() -> List[Dict[str, Any]]:
    return [
        _workout_item("w-1", "30 min Power Zone Ride", 1546300800),
        _workout_item("w-2", "20 min HIIT Ride", 1546387200),
        _workout_item("w-3", "45 min Climb Ride", 1546473600),
    ]


@pytest.fixture()
def summaries(workout_items: List[Dict[str, Any]]) -> List[WorkoutSummary]:
    return [
        WorkoutSummary(
            workout_id=item["id"],
            title=item["ride"]["title"],
            created_at=item["device_time_created_at"],
            extra=item,
        )
        for item in workout_items
    ]


@pytest.fixture()
def metrics_payload() -> Dict[str, Any]:
    return {
        "duration": 15,
        "seconds_since_pedaling_start": [0, 5, 10],
        "metrics": [
            {"slug": "cadence", "display_name": "Cadence", "values": [80, 82, 85]},
            {"slug": "power", "display_name": "Output", "values": [100, 120, 110]},
        ],
    }


@pytest.fixture()
def write_temp_toml(tmp_path: Path):
    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.write_text(content.strip() + "\n")
        return path

    return _write
