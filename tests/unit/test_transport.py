"""Unit tests for the requests-based transport and TransportResponse."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from stabimg.core.providers.base import TransportResponse
from stabimg.core.providers.transport import RequestsTransport
from stabimg.utils.exceptions import NetworkError, RequestTimeoutError


def _send(**kwargs):
    return RequestsTransport().send(
        "https://api.stability.ai/v1/generation/e/text-to-image",
        method="POST",
        headers={"Authorization": "Bearer sk-key"},
        json={"a": 1},
        timeout=10,
        **kwargs,
    )


@pytest.mark.unit
class TestRequestsTransport:
    def test_wraps_response(self):
        mock_response = MagicMock()
        mock_response.status_code = 201
        mock_response.headers = {"Content-Type": "application/json"}
        mock_response.content = b'{"ok": true}'
        with patch(
            "stabimg.core.providers.transport.requests.request", return_value=mock_response
        ) as mock_request:
            response = _send()
        assert response == TransportResponse(
            status_code=201,
            headers={"Content-Type": "application/json"},
            content=b'{"ok": true}',
        )
        args, kwargs = mock_request.call_args
        assert args == ("POST", "https://api.stability.ai/v1/generation/e/text-to-image")
        assert kwargs["json"] == {"a": 1}
        assert kwargs["timeout"] == 10

    def test_timeout(self):
        with patch(
            "stabimg.core.providers.transport.requests.request",
            side_effect=requests.exceptions.Timeout("slow"),
        ):
            with pytest.raises(RequestTimeoutError) as exc_info:
                _send()
        assert "10 seconds" in str(exc_info.value)

    def test_connection_error(self):
        err = requests.exceptions.ConnectionError("refused")
        with patch("stabimg.core.providers.transport.requests.request", side_effect=err):
            with pytest.raises(NetworkError) as exc_info:
                _send()
        assert exc_info.value.original_error is err
        assert not isinstance(exc_info.value, RequestTimeoutError)

    def test_other_request_exception(self):
        with patch(
            "stabimg.core.providers.transport.requests.request",
            side_effect=requests.exceptions.TooManyRedirects("loop"),
        ):
            with pytest.raises(NetworkError) as exc_info:
                _send()
        assert "loop" in str(exc_info.value)


@pytest.mark.unit
class TestTransportResponse:
    def test_header_lookup_is_case_insensitive(self):
        r = TransportResponse(status_code=200, headers={"Finish-Reason": "SUCCESS"})
        assert r.header("finish-reason") == "SUCCESS"
        assert r.header("seed") == ""
        assert r.header("seed", "0") == "0"

    def test_ok(self):
        assert TransportResponse(status_code=200).ok
        assert TransportResponse(status_code=204).ok
        assert not TransportResponse(status_code=402).ok

    def test_json_and_text(self):
        r = TransportResponse(status_code=200, content=b'{"message": "hi"}')
        assert r.json() == {"message": "hi"}
        assert r.text == '{"message": "hi"}'

    def test_json_raises_value_error(self):
        with pytest.raises(ValueError):
            TransportResponse(status_code=500, content=b"<html>").json()
