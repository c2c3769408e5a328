"""Paginated walk over the user's workout history."""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from peloton_cli.core.api import DeserializationError, request_json
from peloton_cli.core.constants import API_BASE, BROWSER_HEADERS, DEFAULT_TIMEOUT_SECONDS, PAGE_SIZE
from peloton_cli.core.models import Session, WorkoutSummary
from peloton_cli.core.throttle import Throttle

logger = logging.getLogger(__name__)

PageCallback = Callable[[int, int], None]


def parse_summary(item: Any) -> WorkoutSummary:
    """Convert one listing item into a WorkoutSummary."""
    if not isinstance(item, dict):
        raise DeserializationError(f"Workout item is not an object: {item!r}")

    workout_id = item.get("id")
    if not workout_id:
        raise DeserializationError("Workout item is missing id")

    created_at = item.get("device_time_created_at")
    if created_at is None:
        created_at = item.get("created_at")
    if isinstance(created_at, bool) or not isinstance(created_at, (int, float)):
        raise DeserializationError(f"Workout {workout_id} has no creation timestamp")
    if isinstance(created_at, float) and not math.isfinite(created_at):
        raise DeserializationError(f"Workout {workout_id} has a non-finite timestamp: {created_at!r}")
    try:
        datetime.fromtimestamp(int(created_at), tz=timezone.utc)
    except (ValueError, OverflowError, OSError) as exc:
        raise DeserializationError(f"Workout {workout_id} timestamp {created_at!r} is out of range") from exc

    ride = item.get("ride")
    title = ride.get("title") if isinstance(ride, dict) else None
    title = title or item.get("name") or "Workout"

    return WorkoutSummary(
        workout_id=str(workout_id),
        title=str(title),
        created_at=int(created_at),
        extra=item,
    )


def fetch_workout_page(
    session: Session,
    page: int,
    base_url: str = API_BASE,
    page_size: int = PAGE_SIZE,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> Dict[str, Any]:
    """Request a single page of the workout history."""
    payload = request_json(
        "GET",
        f"{base_url.rstrip('/')}/api/user/{session.user_id}/workouts",
        session=session,
        params={"joins": "ride", "limit": page_size, "page": page},
        headers=BROWSER_HEADERS,
        timeout=timeout,
    )
    if not isinstance(payload, dict):
        raise DeserializationError(f"Workout page {page} is not a JSON object")
    if not isinstance(payload.get("data"), list):
        raise DeserializationError(f"Workout page {page} has no data list")
    return payload


def list_workouts(
    session: Session,
    throttle: Throttle,
    base_url: str = API_BASE,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    on_page: Optional[PageCallback] = None,
) -> List[WorkoutSummary]:
    """Return every workout summary in the order the service lists them.

    Any failure aborts the whole listing; there is no partial result.
    """
    summaries: List[WorkoutSummary] = []
    page = 0
    while True:
        payload = fetch_workout_page(session, page, base_url=base_url, timeout=timeout)
        items = payload["data"]
        summaries.extend(parse_summary(item) for item in items)
        logger.debug("Workout page %d returned %d items", page, len(items))
        if on_page is not None:
            on_page(page, len(items))

        if payload.get("show_next") is not True:
            break
        throttle.wait()
        page += 1

    return summaries
