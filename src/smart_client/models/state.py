"""Client state shared between the SMART client and its owner."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class ClientState:
    """Mutable authorization state for one FHIR server.

    Created and owned by the caller. The client reads ``server_url``,
    ``token_uri`` and the access token, and only ever writes
    ``token_response``: a merged replacement after a refresh, or the
    removal of ``refresh_token`` when the server rejects it.
    """

    server_url: str
    token_uri: str
    token_response: dict[str, Any] | None = None

    @property
    def access_token(self) -> str | None:
        """Get current access token."""
        if not self.token_response:
            return None
        return self.token_response.get("access_token")

    @property
    def refresh_token(self) -> str | None:
        """Get current refresh token."""
        if not self.token_response:
            return None
        return self.token_response.get("refresh_token")

    def can_refresh(self) -> bool:
        """Check if token can be refreshed."""
        return bool(self.refresh_token)
