"""Exception hierarchy for SMART client request and refresh failures.

Provides specific exception types for each failure mode so callers can
branch on the kind of error instead of parsing messages.
"""

from __future__ import annotations

from typing import Any


class SmartClientError(Exception):
    """Base exception for all SMART client errors."""

    pass


class NoResponseError(SmartClientError):
    """Raised when the request was sent but no response was received."""

    pass


class HttpError(SmartClientError):
    """Raised when the server responds with a non-2xx status.

    Carries the status code and decoded body for inspection by the caller.
    """

    def __init__(self, message: str, status_code: int, body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ProtocolError(HttpError):
    """Raised when the server responds with an OperationOutcome payload.

    The message holds one line per issue.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        body: Any = None,
        issues: list | None = None,
    ):
        super().__init__(message, status_code, body)
        self.issues = issues or []


class TokenError(SmartClientError):
    """Raised when token operations fail."""

    pass


class NoRefreshTokenError(TokenError):
    """Raised when a refresh is attempted without a refresh token.

    The caller has to reauthorize out-of-band.
    """

    pass


class TokenRefreshError(TokenError, HttpError):
    """Raised when the authorization server rejects the refresh grant."""

    def __init__(self, message: str, status_code: int, body: Any = None):
        HttpError.__init__(self, message, status_code, body)
