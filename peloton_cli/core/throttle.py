"""Fixed delay between consecutive Peloton requests."""

from __future__ import annotations

import time

from peloton_cli.core.constants import DEFAULT_THROTTLE_MS


class Throttle:
    """Blocks for a fixed delay to stay below the service's rate limits."""

    def __init__(self, delay_ms: int = DEFAULT_THROTTLE_MS) -> None:
        if delay_ms < 0:
            raise ValueError("delay_ms must be >= 0")
        self.delay_ms = delay_ms

    @property
    def delay_seconds(self) -> float:
        return self.delay_ms / 1000.0

    def wait(self) -> None:
        if self.delay_ms > 0:
            time.sleep(self.delay_seconds)
