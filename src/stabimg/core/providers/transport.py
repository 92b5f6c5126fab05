"""
Default Transport built on requests.
"""

from typing import Any

import requests

from stabimg.core.providers.base import TransportResponse
from stabimg.logging_config import get_logger
from stabimg.utils.exceptions import NetworkError, RequestTimeoutError

logger = get_logger(__name__)


class RequestsTransport:
    """Transport that performs each request with requests.request."""

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
        logger.debug("HTTP %s %s timeout=%s", method, url, timeout)
        try:
            response = requests.request(
                method,
                url,
                headers=headers,
                json=json,
                data=data,
                files=files,
                timeout=timeout,
            )
        except requests.exceptions.Timeout as e:
            raise RequestTimeoutError(
                f"Request timed out after {timeout} seconds. "
                "The generation may be taking longer than expected."
            ) from e
        except requests.exceptions.ConnectionError as e:
            raise NetworkError(
                "Failed to connect to the Stability AI API. "
                "Please check your internet connection.",
                original_error=e,
            ) from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(
                f"Network error during API request: {str(e)}", original_error=e
            ) from e

        return TransportResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            content=response.content,
        )
