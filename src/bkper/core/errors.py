"""Errors raised by the request pipeline.

- `AuthResolutionError`: the credential provider failed; nothing was sent.
- `TransportError`: the request never got an HTTP response.
- `HttpError`: the service answered with a non-2xx status.
"""

from __future__ import annotations

from typing import Any

import httpx


class BkperError(Exception):
    """Base class for every error raised by this library."""


class AuthResolutionError(BkperError):
    """A credential provider raised while producing a token."""


class TransportError(BkperError):
    """Network-level failure (DNS, connection reset, timeout...)."""

    def __init__(self, message: str, *, request: httpx.Request | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.request = request


class HttpError(BkperError):
    """The service returned a non-2xx response."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        body: Any = None,
        response: httpx.Response | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.body = body
        self.response = response

    @classmethod
    def from_response(cls, response: httpx.Response, body: Any) -> "HttpError":
        return cls(
            _extract_message(response, body),
            status_code=response.status_code,
            body=body,
            response=response,
        )

    @property
    def is_auth_error(self) -> bool:
        return self.status_code in (401, 403)

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500

    @property
    def is_server_error(self) -> bool:
        return 500 <= self.status_code < 600

    def __str__(self) -> str:
        return f"HTTP {self.status_code}: {self.message}"


def _extract_message(response: httpx.Response, body: Any) -> str:
    # Google API style envelope: {"error": {"code": 404, "message": "..."}}
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
        if isinstance(error, str) and error:
            return error
        if isinstance(body.get("message"), str):
            return body["message"]
    if isinstance(body, str) and body.strip():
        return body.strip()[:500]
    return response.reason_phrase or f"HTTP {response.status_code}"
