"""Authentication against the Peloton login endpoint."""

from __future__ import annotations

from typing import Any

from peloton_cli.core.api import DeserializationError, request_json
from peloton_cli.core.constants import AUTH_BASE, DEFAULT_TIMEOUT_SECONDS
from peloton_cli.core.models import Credentials, Session


def parse_session(payload: Any) -> Session:
    """Build a Session from the login response body."""
    if not isinstance(payload, dict):
        raise DeserializationError("Login response is not a JSON object")

    session_id = payload.get("session_id")
    user_id = payload.get("user_id")
    if not isinstance(session_id, str) or not session_id:
        raise DeserializationError("Login response is missing session_id")
    if not isinstance(user_id, str) or not user_id:
        raise DeserializationError("Login response is missing user_id")
    return Session(session_id=session_id, user_id=user_id)


def authenticate(
    credentials: Credentials,
    base_url: str = AUTH_BASE,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> Session:
    """Exchange credentials for a session."""
    payload = request_json(
        "POST",
        f"{base_url.rstrip('/')}/auth/login",
        json_data={
            "password": credentials.password,
            "username_or_email": credentials.username_or_email,
        },
        headers={"Content-Type": "application/json"},
        timeout=timeout,
    )
    return parse_session(payload)
