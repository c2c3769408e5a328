from __future__ import annotations

import pytest
import requests

from peloton_cli.core.api import (
    AuthenticationError,
    AuthErrorKind,
    DeserializationError,
    NetworkError,
    request_json,
    session_headers,
)
from peloton_cli.core.models import Session


def test_request_json_returns_decoded_body(monkeypatch, make_response) -> None:
    monkeypatch.setattr(
        "peloton_cli.core.api.requests.request",
        lambda **kwargs: make_response(payload={"ok": True}),
    )
    assert request_json("GET", "https://api.example.com/x") == {"ok": True}


def test_request_json_adds_session_cookie(monkeypatch, make_response, session) -> None:
    captured = {}

    def fake_request(**kwargs):  # type: ignore[no-untyped-def]
        captured.update(kwargs)
        return make_response(payload={})

    monkeypatch.setattr("peloton_cli.core.api.requests.request", fake_request)
    request_json("GET", "https://api.example.com/x", session=session, params={"page": 0}, timeout=5)

    assert captured["headers"]["Cookie"] == "peloton_session_id=sess-123"
    assert captured["headers"]["accept"] == "application/json"
    assert captured["params"] == {"page": 0}
    assert captured["timeout"] == 5


def test_session_headers() -> None:
    assert session_headers(Session(session_id="abc", user_id="u")) == {"Cookie": "peloton_session_id=abc"}


def test_request_json_unauthorized(monkeypatch, make_response) -> None:
    monkeypatch.setattr(
        "peloton_cli.core.api.requests.request",
        lambda **kwargs: make_response(status_code=401, payload={}, reason="Unauthorized"),
    )
    with pytest.raises(AuthenticationError) as excinfo:
        request_json("POST", "https://api.example.com/auth/login")
    assert excinfo.value.kind is AuthErrorKind.UNAUTHORIZED
    assert excinfo.value.status == 401


def test_request_json_protocol_error_keeps_status_and_description(monkeypatch, make_response) -> None:
    monkeypatch.setattr(
        "peloton_cli.core.api.requests.request",
        lambda **kwargs: make_response(status_code=503, text="down", reason="Service Unavailable"),
    )
    with pytest.raises(AuthenticationError) as excinfo:
        request_json("GET", "https://api.example.com/x")
    assert excinfo.value.kind is AuthErrorKind.PROTOCOL_ERROR
    assert excinfo.value.status == 503
    assert excinfo.value.description == "Service Unavailable"
    assert "503" in str(excinfo.value)


def test_request_json_network_error_is_not_retried(monkeypatch) -> None:
    attempts = {"count": 0}

    def fake_request(**kwargs):  # type: ignore[no-untyped-def]
        attempts["count"] += 1
        raise requests.ConnectionError("network down")

    monkeypatch.setattr("peloton_cli.core.api.requests.request", fake_request)
    with pytest.raises(NetworkError, match="network down"):
        request_json("GET", "https://api.example.com/x")
    assert attempts["count"] == 1


def test_request_json_timeout_is_network_error(monkeypatch) -> None:
    def fake_request(**kwargs):  # type: ignore[no-untyped-def]
        raise requests.Timeout("timed out")

    monkeypatch.setattr("peloton_cli.core.api.requests.request", fake_request)
    with pytest.raises(NetworkError):
        request_json("GET", "https://api.example.com/x")


def test_request_json_invalid_body(monkeypatch, make_response) -> None:
    monkeypatch.setattr(
        "peloton_cli.core.api.requests.request",
        lambda **kwargs: make_response(text="<html>nope</html>"),
    )
    with pytest.raises(DeserializationError):
        request_json("GET", "https://api.example.com/x")
