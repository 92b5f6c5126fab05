"""
Pytest configuration: default runs most tests; use --run-slow to include slow tests.

Also provides fakes for the transport layer so the pipeline can be exercised
without network access.
"""

import base64
import io
import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from PIL import Image

from stabimg.core.config import Config
from stabimg.core.providers.base import TransportResponse


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="Run slow tests (live Stability AI calls). Default: skip them.",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--run-slow", False):
        return
    skip_slow = pytest.mark.skip(reason="Slow test; run with --run-slow to include")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


class RecordingTransport:
    """Transport that records each send() and replays a canned response or error."""

    def __init__(
        self,
        response: TransportResponse | None = None,
        error: BaseException | None = None,
    ) -> None:
        self.response = response
        self.error = error
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def send(self, url: str, **kwargs: Any) -> TransportResponse:
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        assert self.response is not None, "RecordingTransport has no response configured"
        return self.response


def _png(size: tuple[int, int]) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color=(200, 30, 30)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def png_bytes() -> bytes:
    """Small but real PNG image bytes."""
    return _png((4, 3))


@pytest.fixture
def json_response() -> Callable[..., TransportResponse]:
    def _make(body: Any, status: int = 200) -> TransportResponse:
        return TransportResponse(
            status_code=status,
            headers={"Content-Type": "application/json"},
            content=json.dumps(body).encode("utf-8"),
        )

    return _make


@pytest.fixture
def v1_success(png_bytes: bytes, json_response: Callable[..., TransportResponse]) -> TransportResponse:
    """A v1 JSON-envelope success response carrying png_bytes."""
    return json_response(
        {
            "artifacts": [
                {
                    "base64": base64.b64encode(png_bytes).decode("ascii"),
                    "seed": 1234,
                    "finishReason": "SUCCESS",
                }
            ]
        }
    )


@pytest.fixture
def transport_factory() -> Callable[..., RecordingTransport]:
    return RecordingTransport


@pytest.fixture
def save_dir(tmp_path: Path) -> Path:
    return tmp_path / "images"


@pytest.fixture
def config(save_dir: Path) -> Config:
    return Config(api_key="sk-test-key", image_save_directory=str(save_dir))
