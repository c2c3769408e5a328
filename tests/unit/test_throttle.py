from __future__ import annotations

import pytest

from peloton_cli.core.throttle import Throttle


def test_throttle_defaults_to_three_seconds(monkeypatch) -> None:
    sleeps = []
    monkeypatch.setattr("peloton_cli.core.throttle.time.sleep", sleeps.append)
    Throttle().wait()
    assert sleeps == [3.0]


def test_throttle_uses_configured_delay(monkeypatch) -> None:
    sleeps = []
    monkeypatch.setattr("peloton_cli.core.throttle.time.sleep", sleeps.append)
    throttle = Throttle(delay_ms=250)
    throttle.wait()
    throttle.wait()
    assert sleeps == [0.25, 0.25]


def test_throttle_zero_does_not_sleep(monkeypatch) -> None:
    monkeypatch.setattr(
        "peloton_cli.core.throttle.time.sleep",
        lambda _: (_ for _ in ()).throw(AssertionError("slept")),
    )
    Throttle(delay_ms=0).wait()


def test_throttle_rejects_negative_delay() -> None:
    with pytest.raises(ValueError):
        Throttle(delay_ms=-1)
