"""Request descriptor and decoded response models.

Contains the structured form of an outgoing request, the decoded response
handed back to callers, and URL resolution against the server base.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlsplit

import httpx

_ABSOLUTE_URL = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.-]*:)?//")


@dataclass(frozen=True)
class RequestOptions:
    """Structured description of a request against the FHIR server.

    ``url`` may be relative to the server base or absolute.
    """

    url: str = ""
    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    params: dict[str, Any] | None = None
    json: Any = None
    data: dict[str, Any] | None = None
    content: str | bytes | None = None
    timeout: float | None = None

    @classmethod
    def from_target(cls, target: str | dict[str, Any] | RequestOptions) -> RequestOptions:
        """Normalize a URL string or options mapping into RequestOptions."""
        if isinstance(target, RequestOptions):
            return target
        if isinstance(target, str):
            return cls(url=target)
        if isinstance(target, dict):
            return cls(**target)
        raise TypeError(f"Unsupported request target: {type(target).__name__}")


@dataclass(frozen=True)
class ClientResponse:
    """Decoded response returned by a successful request."""

    status_code: int
    headers: dict[str, str]
    data: Any = None

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> ClientResponse:
        return cls(
            status_code=response.status_code,
            headers=dict(response.headers),
            data=decode_body(response),
        )


def decode_body(response: httpx.Response) -> Any:
    """Decode a response body as JSON, falling back to text.

    Returns None for an empty body.
    """
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def ensure_trailing_slash(server_url: str) -> str:
    """Append a single trailing slash unless one is already present."""
    return server_url if server_url.endswith("/") else server_url + "/"


def resolve_url(base_url: str, url: str) -> str:
    """Resolve a request URL against the server base.

    Absolute URLs are returned unchanged and protocol-relative URLs take
    the scheme of the base. Relative paths are appended to the base with
    leading slashes dropped.
    """
    if _ABSOLUTE_URL.match(url):
        if url.startswith("//"):
            return f"{urlsplit(base_url).scheme}:{url}"
        return url
    return base_url + url.lstrip("/")
