"""Authorized request client for SMART on FHIR servers.

Wraps an httpx client so that requests:
1. Can use URLs relative to the server base URL
2. Carry the current access token as a bearer credential
3. Are re-authorized once with the refresh token after a 401
4. Fail with OperationOutcome issues turned into exception messages
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from smart_client.models.errors import HttpError, NoResponseError, ProtocolError
from smart_client.models.outcome import parse_operation_outcome
from smart_client.models.requests import (
    ClientResponse,
    RequestOptions,
    decode_body,
    ensure_trailing_slash,
    resolve_url,
)
from smart_client.models.state import ClientState
from smart_client.services.tokens import TokenRefresher

logger = logging.getLogger(__name__)

NO_FHIR_RESPONSE = "No response received from the FHIR server"


class SmartClient:
    """Issues authorized requests against a FHIR server.

    The client holds a reference to a caller-owned ``ClientState`` and
    mutates only its ``token_response`` (via refresh). Concurrent requests
    are not serialized: two racing 401s may both trigger a refresh.
    """

    def __init__(
        self,
        state: ClientState | None,
        *,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            state: Caller-owned client state
            timeout: HTTP request timeout in seconds, used when no
                http_client is given
            http_client: Optional preconfigured httpx client
            transport: Optional httpx transport for the client created when
                no http_client is given

        Raises:
            ValueError: If no state is provided
        """
        # The state may be lost, e.g. a server restart with memory storage
        if not state:
            raise ValueError("No state provided to the client")

        self.state = state
        self.timeout = timeout
        self._base_url = ensure_trailing_slash(state.server_url)
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(
            timeout=timeout, follow_redirects=True, transport=transport
        )
        self._refresher = TokenRefresher(state, self._http_client)

    @property
    def base_url(self) -> str:
        """Server URL with a single trailing slash."""
        return self._base_url

    async def request(
        self, target: str | dict[str, Any] | RequestOptions
    ) -> ClientResponse:
        """Send an authorized request.

        Args:
            target: URL (relative to the server URL or absolute), an options
                mapping, or RequestOptions

        Returns:
            ClientResponse: Decoded 2xx response

        Raises:
            NoResponseError: If no response was received
            ProtocolError: If the server returned an OperationOutcome
            HttpError: For any other non-2xx response
            TokenError: If the automatic refresh fails
        """
        options = RequestOptions.from_target(target)
        return await self._send(options, allow_refresh=True)

    async def refresh(self) -> dict[str, Any]:
        """Use the refresh token to obtain a new access token.

        If the refresh token is rejected it is deleted from the state, so
        that we don't enter into loops trying to re-authorize.

        Returns:
            The token payload returned by the authorization server
        """
        return await self._refresher.refresh()

    async def _send(
        self, options: RequestOptions, allow_refresh: bool
    ) -> ClientResponse:
        url = resolve_url(self._base_url, options.url)
        headers = self._build_headers(options.headers)

        extra: dict[str, Any] = {}
        if options.timeout is not None:
            extra["timeout"] = options.timeout

        logger.debug(f"{options.method} {url}")

        try:
            response = await self._http_client.request(
                options.method,
                url,
                headers=headers,
                params=options.params,
                json=options.json,
                data=options.data,
                content=options.content,
                **extra,
            )
        except httpx.TransportError as e:
            raise NoResponseError(NO_FHIR_RESPONSE) from e

        if response.is_success:
            return ClientResponse.from_httpx(response)

        if response.status_code == 401:
            logger.debug("401 received")
            if allow_refresh and self.state.can_refresh():
                logger.debug("Refreshing using the refresh token")
                await self.refresh()
                return await self._send(options, allow_refresh=False)

        raise self._error_from_response(response)

    def _build_headers(self, headers: dict[str, str]) -> dict[str, str]:
        """Merge the bearer credential over caller-supplied headers."""
        merged = dict(headers or {})
        access_token = self.state.access_token
        if access_token:
            for name in [h for h in merged if h.lower() == "authorization"]:
                del merged[name]
            merged["Authorization"] = f"Bearer {access_token}"
        return merged

    def _error_from_response(self, response: httpx.Response) -> HttpError:
        body = decode_body(response)

        outcome = parse_operation_outcome(body)
        if outcome is not None:
            logger.debug("OperationOutcome error response detected")
            return ProtocolError(
                outcome.to_message(),
                status_code=response.status_code,
                body=body,
                issues=outcome.issue,
            )

        return HttpError(
            f"Request failed with status {response.status_code}",
            status_code=response.status_code,
            body=body,
        )

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http_client:
            await self._http_client.aclose()

    async def __aenter__(self) -> SmartClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
