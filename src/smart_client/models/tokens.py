"""Refresh grant request model (RFC 6749 Section 6)."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RefreshTokenRequest:
    """OAuth 2.0 refresh token request parameters.

    Immutable request parameters for refreshing access tokens.
    """

    token_endpoint: str
    refresh_token: str
    grant_type: str = "refresh_token"

    def to_form_data(self) -> dict[str, str]:
        """Convert to form data for application/x-www-form-urlencoded request."""
        return {
            "grant_type": self.grant_type,
            "refresh_token": self.refresh_token,
        }
