from collections.abc import Callable

import httpx
import pytest

from smart_client.client import SmartClient
from smart_client.models.state import ClientState

SERVER_URL = "https://fhir.example.com/r4"
TOKEN_URI = "https://auth.example.com/token"


class ScriptedServer:
    """Mock HTTP server replaying queued responses in order."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._replies: list[httpx.Response | Exception | Callable] = []

    def reply(self, status_code: int = 200, **kwargs) -> None:
        """Queue a response; kwargs are passed to httpx.Response."""
        self._replies.append(httpx.Response(status_code, **kwargs))

    def fail(self, error: Exception) -> None:
        """Queue a transport failure."""
        self._replies.append(error)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._replies:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        reply = self._replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def server() -> ScriptedServer:
    return ScriptedServer()


@pytest.fixture
def state() -> ClientState:
    return ClientState(
        server_url=SERVER_URL,
        token_uri=TOKEN_URI,
        token_response={
            "access_token": "T1",
            "refresh_token": "R1",
            "token_type": "Bearer",
            "scope": "patient/*.read",
            "patient": "123",
        },
    )


@pytest.fixture
async def client(state: ClientState, server: ScriptedServer):
    http_client = httpx.AsyncClient(transport=server.transport)
    yield SmartClient(state, http_client=http_client)
    await http_client.aclose()
