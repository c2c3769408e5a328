"""Static constants for the Peloton API."""

from __future__ import annotations

API_BASE = "https://api.onepeloton.com"
AUTH_BASE = "https://api.onepeloton.com"

SESSION_COOKIE = "peloton_session_id"

PAGE_SIZE = 10
METRICS_EVERY_N = 5
DEFAULT_THROTTLE_MS = 3000
DEFAULT_TIMEOUT_SECONDS = 30

METRICS_SUFFIX = "_Metrics.csv"
RAW_METRICS_SUFFIX = "_Metrics.json"
DETAILS_SUFFIX = "_UserWorkoutDetails.csv"
WORKOUT_LIST_FILE = "workout_list.json"

# The listing endpoint rejects requests that do not look like the members site.
BROWSER_HEADERS = {
    "accept": "application/json",
    "accept-language": "en-US,en;q=0.9",
    "origin": "https://members.onepeloton.com",
    "referer": "https://members.onepeloton.com/profile/workouts",
    "user-agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/70.0.3538.102 Safari/537.36"
    ),
    "x-requested-with": "XmlHttpRequest",
    "peloton-platform": "web",
}
