from __future__ import annotations

from typing import Any, Dict, List

import pytest

from peloton_cli.core.api import DeserializationError, NetworkError
from peloton_cli.core.listing import list_workouts, parse_summary
from peloton_cli.core.throttle import Throttle


class CountingThrottle(Throttle):
    def __init__(self) -> None:
        super().__init__(delay_ms=0)
        self.calls = 0

    def wait(self) -> None:
        self.calls += 1


def _fake_pages(monkeypatch, pages: List[Any]) -> List[Dict[str, Any]]:
    calls: List[Dict[str, Any]] = []

    def fake_request_json(method, url, **kwargs):  # type: ignore[no-untyped-def]
        calls.append({"method": method, "url": url, **kwargs})
        page = pages[len(calls) - 1]
        if isinstance(page, Exception):
            raise page
        return page

    monkeypatch.setattr("peloton_cli.core.listing.request_json", fake_request_json)
    return calls


def test_list_workouts_concatenates_pages_in_order(monkeypatch, session, workout_items) -> None:
    calls = _fake_pages(
        monkeypatch,
        [
            {"data": workout_items[:2], "show_next": True},
            {"data": workout_items[2:], "show_next": False},
        ],
    )
    throttle = CountingThrottle()

    summaries = list_workouts(session, throttle, base_url="https://api.example.com")

    assert [summary.workout_id for summary in summaries] == ["w-1", "w-2", "w-3"]
    assert len(calls) == 2
    assert throttle.calls == 1
    assert calls[0]["url"] == "https://api.example.com/api/user/user-42/workouts"
    assert calls[0]["params"] == {"joins": "ride", "limit": 10, "page": 0}
    assert calls[1]["params"]["page"] == 1
    assert calls[0]["session"] is session
    assert calls[0]["headers"]["peloton-platform"] == "web"
    assert calls[0]["headers"]["x-requested-with"] == "XmlHttpRequest"


def test_list_workouts_missing_flag_stops(monkeypatch, session, workout_items) -> None:
    calls = _fake_pages(monkeypatch, [{"data": workout_items}])
    throttle = CountingThrottle()

    summaries = list_workouts(session, throttle)

    assert len(summaries) == 3
    assert len(calls) == 1
    assert throttle.calls == 0


def test_list_workouts_empty_history(monkeypatch, session) -> None:
    _fake_pages(monkeypatch, [{"data": [], "show_next": False}])
    assert list_workouts(session, CountingThrottle()) == []


def test_list_workouts_failure_aborts_without_partial_result(monkeypatch, session, workout_items) -> None:
    calls = _fake_pages(
        monkeypatch,
        [
            {"data": workout_items[:1], "show_next": True},
            NetworkError("connection reset"),
            {"data": workout_items[1:], "show_next": False},
        ],
    )
    with pytest.raises(NetworkError):
        list_workouts(session, CountingThrottle())
    assert len(calls) == 2


def test_list_workouts_rejects_page_without_data(monkeypatch, session) -> None:
    _fake_pages(monkeypatch, [{"items": [], "show_next": False}])
    with pytest.raises(DeserializationError):
        list_workouts(session, CountingThrottle())


def test_list_workouts_reports_pages(monkeypatch, session, workout_items) -> None:
    _fake_pages(
        monkeypatch,
        [
            {"data": workout_items[:2], "show_next": True},
            {"data": workout_items[2:], "show_next": False},
        ],
    )
    seen = []
    list_workouts(session, CountingThrottle(), on_page=lambda page, count: seen.append((page, count)))
    assert seen == [(0, 2), (1, 1)]


def test_parse_summary_fallbacks() -> None:
    summary = parse_summary({"id": "abc", "created_at": 1546300800.0, "name": "Cycling Workout", "ride": None})
    assert summary.workout_id == "abc"
    assert summary.title == "Cycling Workout"
    assert summary.created_at == 1546300800
    assert summary.extra["name"] == "Cycling Workout"


def test_parse_summary_requires_id_and_timestamp() -> None:
    with pytest.raises(DeserializationError):
        parse_summary({"device_time_created_at": 1})
    with pytest.raises(DeserializationError):
        parse_summary({"id": "x", "ride": {"title": "Ride"}})


@pytest.mark.parametrize("created_at", [10**12, -(10**15), float("nan"), float("inf"), float("-inf")])
def test_parse_summary_rejects_unusable_timestamps(created_at) -> None:
    with pytest.raises(DeserializationError, match="w-bad"):
        parse_summary({"id": "w-bad", "device_time_created_at": created_at, "ride": {"title": "Ride"}})


def test_list_workouts_non_finite_timestamp_aborts(monkeypatch, session, workout_items) -> None:
    items = workout_items[:1] + [{"id": "w-nan", "device_time_created_at": float("nan")}]
    _fake_pages(monkeypatch, [{"data": items, "show_next": False}])
    with pytest.raises(DeserializationError):
        list_workouts(session, CountingThrottle())
