"""
Transport protocol for the Stability AI client.

The client never talks to sockets directly; it hands a fully built request to
a Transport and gets a TransportResponse back. TLS, connection reuse and raw
socket failures are the transport's business.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True)
class GenerationArtifact:
    """A generated image as returned by the provider, independent of API version."""

    image_bytes: bytes = field(repr=False)
    used_seed: int | None  # seed the provider actually used
    finish_reason: str  # e.g. "SUCCESS", "CONTENT_FILTERED"
    content_type: str = "image/png"
    engine_id: str = ""
    generation_time: float = 0.0  # seconds spent in the remote call


@dataclass(frozen=True)
class TransportResponse:
    """Status, headers and raw body of one HTTP exchange."""

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    content: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def content_type(self) -> str:
        return self.header("content-type")

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def header(self, name: str, default: str = "") -> str:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return default

    def json(self) -> Any:
        """Parse the body as JSON. Raises ValueError if it is not JSON."""
        return json.loads(self.content)


class Transport(Protocol):
    """Protocol for HTTP transports.

    Implementations may raise any exception on network failure; the client
    reports it as a NetworkError.
    """

    def send(
        self,
        url: str,
        *,
        method: str,
        headers: dict[str, str],
        json: dict[str, Any] | None = None,
        data: dict[str, str] | None = None,
        files: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> TransportResponse:
        """Perform one request and return its response without retrying."""
        ...
