"""Request helper and error taxonomy for the Peloton API."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Optional

import requests

from peloton_cli.core.constants import DEFAULT_TIMEOUT_SECONDS, SESSION_COOKIE
from peloton_cli.core.models import Session

logger = logging.getLogger(__name__)


class PelotonError(RuntimeError):
    """Base class for failures talking to Peloton or writing exports."""


class NetworkError(PelotonError):
    """Raised when the request never produced an HTTP response."""


class DeserializationError(PelotonError):
    """Raised when a response body does not have the expected shape."""


class AuthErrorKind(str, Enum):
    UNAUTHORIZED = "unauthorized"
    PROTOCOL_ERROR = "protocol_error"


class AuthenticationError(PelotonError):
    """Raised for non-success HTTP statuses.

    ``UNAUTHORIZED`` is kept apart from other statuses because the fix is
    always the same: check the username and password.
    """

    def __init__(
        self,
        kind: AuthErrorKind,
        status: Optional[int] = None,
        description: str = "",
    ) -> None:
        self.kind = kind
        self.status = status
        self.description = description
        if kind is AuthErrorKind.UNAUTHORIZED:
            message = "Unauthorized"
        else:
            message = f"HTTP {status} {description}".rstrip()
        super().__init__(message)


def session_headers(session: Session) -> Dict[str, str]:
    """Return the cookie header carrying the session identity."""
    return {"Cookie": f"{SESSION_COOKIE}={session.session_id}"}


def request_json(
    method: str,
    url: str,
    *,
    session: Optional[Session] = None,
    params: Optional[Dict[str, Any]] = None,
    json_data: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> Any:
    """Issue one request and return the decoded JSON body.

    No retries are attempted; every failure is mapped onto the error
    taxonomy above.
    """
    merged: Dict[str, str] = {"accept": "application/json"}
    merged.update(headers or {})
    if session is not None:
        merged.update(session_headers(session))

    try:
        response = requests.request(
            method=method,
            url=url,
            headers=merged,
            params=params,
            json=json_data,
            timeout=timeout,
        )
    except requests.RequestException as exc:
        raise NetworkError(f"{method} {url} failed: {exc}") from exc

    logger.debug("%s %s -> %s (%d bytes)", method, url, response.status_code, len(response.text or ""))

    if response.status_code == 401:
        raise AuthenticationError(AuthErrorKind.UNAUTHORIZED, status=401, description=response.reason or "")
    if not 200 <= response.status_code < 300:
        raise AuthenticationError(
            AuthErrorKind.PROTOCOL_ERROR,
            status=response.status_code,
            description=response.reason or "",
        )

    try:
        return response.json()
    except ValueError as exc:
        raise DeserializationError(f"Response from {url} is not valid JSON: {exc}") from exc
