"""Refresh token grant service.

Implements RFC 6749 Section 6 (Refreshing an Access Token) against the
token endpoint recorded in the client state, and keeps that state in sync
with the outcome of the exchange.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from smart_client.models.errors import (
    NoRefreshTokenError,
    NoResponseError,
    TokenRefreshError,
)
from smart_client.models.requests import decode_body
from smart_client.models.state import ClientState
from smart_client.models.tokens import RefreshTokenRequest

logger = logging.getLogger(__name__)


class TokenRefresher:
    """Exchanges the refresh token for a new token set.

    On success the new token fields are merged over the existing
    ``token_response``. When the server answers 401 the refresh token is
    considered dead and removed from the state, so later 401s are not
    retried in a loop.

    Uses application/x-www-form-urlencoded encoding as required by OAuth 2.0.
    """

    def __init__(self, state: ClientState, http_client: httpx.AsyncClient):
        self.state = state
        self._http_client = http_client

    async def refresh(self) -> dict[str, Any]:
        """Use the refresh token to obtain a new access token.

        Returns:
            The token payload returned by the authorization server

        Raises:
            NoRefreshTokenError: If the state holds no refresh token
            TokenRefreshError: If the server rejects the grant
            NoResponseError: If the token endpoint could not be reached
        """
        if not self.state.can_refresh():
            raise NoRefreshTokenError(
                "Trying to refresh but there is no refresh token"
            )

        refresh_request = RefreshTokenRequest(
            token_endpoint=self.state.token_uri,
            refresh_token=self.state.refresh_token,
        )
        logger.debug(f"Refreshing access token at {refresh_request.token_endpoint}")

        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "application/json",
        }

        try:
            response = await self._http_client.post(
                refresh_request.token_endpoint,
                data=refresh_request.to_form_data(),
                headers=headers,
            )
        except httpx.TransportError as e:
            raise NoResponseError(
                "No response received from the authorization server"
            ) from e

        return self._handle_response(response)

    def _handle_response(self, response: httpx.Response) -> dict[str, Any]:
        body = decode_body(response)

        if response.status_code == 401:
            logger.warning(
                "401 received - refresh token expired or invalid, deleting it"
            )
            self.state.token_response.pop("refresh_token", None)
            raise TokenRefreshError(
                "Refresh token rejected by the authorization server",
                status_code=response.status_code,
                body=body,
            )

        if not response.is_success:
            logger.warning(f"Token refresh failed with {response.status_code}")
            raise TokenRefreshError(
                f"Token refresh failed with status {response.status_code}",
                status_code=response.status_code,
                body=body,
            )

        if not isinstance(body, dict):
            raise TokenRefreshError(
                "Invalid token response format: expected a JSON object",
                status_code=response.status_code,
                body=body,
            )

        self.state.token_response = {**(self.state.token_response or {}), **body}
        logger.info("Token refresh successful")
        return body
