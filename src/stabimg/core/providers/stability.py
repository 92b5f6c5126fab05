"""
Stability AI text-to-image client.

Owns authentication headers, sends the request through a Transport and turns
the provider's answer into a GenerationArtifact or a typed error. The v1
engine endpoints answer with a JSON envelope holding base64 artifacts; the
v2beta stable-image endpoint answers with the raw image body. Both are
normalized here so callers never see version-specific shapes.
"""

import base64
import binascii
import json
import time
from dataclasses import dataclass, field
from typing import Any

from stabimg.core.providers.base import GenerationArtifact, Transport, TransportResponse
from stabimg.logging_config import get_logger, redact_headers, truncate_for_log
from stabimg.utils.exceptions import (
    APIError,
    EmptyResultError,
    MissingCredentialError,
    NetworkError,
)

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://api.stability.ai"
DEFAULT_FINISH_REASON = "SUCCESS"
_RAW_CONTENT_TYPES = ("image/", "application/octet-stream")
_RESPONSE_LOG_MAX = 2000


@dataclass(frozen=True)
class JsonEnvelope:
    """A JSON body carrying the image as base64 (v1 artifacts list or v2beta JSON)."""

    body: dict[str, Any]


@dataclass(frozen=True)
class RawBinary:
    """A raw image body with generation details in response headers."""

    content: bytes = field(repr=False)
    content_type: str
    seed: str = ""
    finish_reason: str = ""


ProviderResponse = JsonEnvelope | RawBinary


def _seed_or_none(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def parse_provider_response(response: TransportResponse) -> ProviderResponse:
    """
    Classify a successful response as JsonEnvelope or RawBinary.

    Raises:
        EmptyResultError: If the body is neither an image nor a JSON object
    """
    content_type = response.content_type.lower()
    if content_type.startswith(_RAW_CONTENT_TYPES):
        return RawBinary(
            content=response.content,
            content_type=content_type.split(";")[0].strip(),
            seed=response.header("seed"),
            finish_reason=response.header("finish-reason"),
        )
    try:
        body = response.json()
    except ValueError as e:
        raise EmptyResultError(
            f"Failed to parse API response as JSON: {str(e)}",
            response=response.text[:_RESPONSE_LOG_MAX],
        ) from e
    if not isinstance(body, dict):
        raise EmptyResultError(
            "Unexpected API response: expected a JSON object",
            response=response.text[:_RESPONSE_LOG_MAX],
        )
    return JsonEnvelope(body=body)


def _decode_base64(data: object) -> bytes:
    if not isinstance(data, str) or not data:
        return b""
    try:
        return base64.b64decode("".join(data.split()), validate=True)
    except (binascii.Error, ValueError):
        return b""


def to_artifact(
    parsed: ProviderResponse,
    engine_id: str = "",
    generation_time: float = 0.0,
) -> GenerationArtifact:
    """
    Normalize either response shape into a GenerationArtifact.

    Raises:
        EmptyResultError: If no usable image payload is present
    """
    if isinstance(parsed, RawBinary):
        if not parsed.content:
            raise EmptyResultError("No images were generated (empty image body)")
        return GenerationArtifact(
            image_bytes=parsed.content,
            used_seed=_seed_or_none(parsed.seed),
            finish_reason=parsed.finish_reason or DEFAULT_FINISH_REASON,
            content_type=parsed.content_type or "image/png",
            engine_id=engine_id,
            generation_time=generation_time,
        )

    body = parsed.body
    artifacts = body.get("artifacts")
    if artifacts is not None:
        first = artifacts[0] if isinstance(artifacts, list) and artifacts else {}
        if not isinstance(first, dict):
            first = {}
        encoded = first.get("base64")
        seed = first.get("seed")
        finish_reason = first.get("finishReason")
    else:
        encoded = body.get("image")
        seed = body.get("seed")
        finish_reason = body.get("finish_reason")

    image_bytes = _decode_base64(encoded)
    if not image_bytes:
        raise EmptyResultError(
            "No images were generated",
            response=json.dumps(truncate_for_log(body), default=str)[:_RESPONSE_LOG_MAX],
        )
    return GenerationArtifact(
        image_bytes=image_bytes,
        used_seed=_seed_or_none(seed),
        finish_reason=str(finish_reason) if finish_reason else DEFAULT_FINISH_REASON,
        content_type="image/png",
        engine_id=engine_id,
        generation_time=generation_time,
    )


def error_message(response: TransportResponse) -> str:
    """Provider message from the error body, or a generic status message."""
    try:
        body = response.json()
    except ValueError:
        body = None
    message = body.get("message") if isinstance(body, dict) else None
    if isinstance(message, str) and message.strip():
        return message
    return f"HTTP error, status {response.status_code}"


class StabilityClient:
    """Client for the Stability AI text-to-image endpoints."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        api_version: str = "v1",
        client_id: str = "",
        client_version: str = "",
        organization_id: str = "",
        timeout: float | None = None,
        transport: Transport | None = None,
        debug: bool = False,
    ) -> None:
        """
        Create a client.

        Args:
            api_key: Stability AI API key (required)
            base_url: API root, without trailing slash
            api_version: "v1" (JSON artifacts) or "v2beta" (raw image body)
            client_id: Optional Stability-Client-ID header
            client_version: Optional Stability-Client-Version header
            organization_id: Optional Organization header
            timeout: Seconds handed to the transport; None means no limit
            transport: Transport to send requests with (default: requests)
            debug: Log truncated request/response bodies at INFO

        Raises:
            MissingCredentialError: If api_key is empty
        """
        if not api_key:
            raise MissingCredentialError("API key is required")
        if transport is None:
            from stabimg.core.providers.transport import RequestsTransport

            transport = RequestsTransport()

        self._api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.api_version = api_version
        self.client_id = client_id
        self.client_version = client_version
        self.organization_id = organization_id
        self.timeout = timeout
        self._transport = transport
        self._debug = debug

    def __repr__(self) -> str:
        return f"StabilityClient(base_url={self.base_url!r}, api_version={self.api_version!r})"

    def authenticate(self) -> dict[str, str]:
        """Return the headers every request carries."""
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Accept": "image/*" if self.api_version == "v2beta" else "application/json",
        }
        if self.client_id:
            headers["Stability-Client-ID"] = self.client_id
        if self.client_version:
            headers["Stability-Client-Version"] = self.client_version
        if self.organization_id:
            headers["Organization"] = self.organization_id
        return headers

    def endpoint(self, engine_id: str) -> str:
        """URL of the text-to-image endpoint for engine_id."""
        if self.api_version == "v2beta":
            return f"{self.base_url}/v2beta/stable-image/generate/sd3"
        return f"{self.base_url}/v1/generation/{engine_id}/text-to-image"

    def _send(self, url: str, headers: dict[str, str], payload: dict[str, Any]) -> TransportResponse:
        if self.api_version == "v2beta":
            # files forces multipart/form-data, which the endpoint requires
            return self._transport.send(
                url,
                method="POST",
                headers=headers,
                data=payload,
                files={"none": ""},
                timeout=self.timeout,
            )
        return self._transport.send(
            url,
            method="POST",
            headers={**headers, "Content-Type": "application/json"},
            json=payload,
            timeout=self.timeout,
        )

    def _log_response(self, response: TransportResponse) -> None:
        if response.content_type.startswith(_RAW_CONTENT_TYPES):
            logger.info("API response: <image body, %s bytes>", len(response.content))
            return
        try:
            logged = json.dumps(truncate_for_log(response.json()), indent=2, default=str)
        except ValueError:
            logged = response.text
            if len(logged) > _RESPONSE_LOG_MAX:
                logged = logged[:_RESPONSE_LOG_MAX] + f"... <truncated, {len(response.text)} chars>"
        logger.info("API response (image data truncated): %s", logged)

    def invoke(self, engine_id: str, payload: dict[str, Any]) -> GenerationArtifact:
        """
        Send one generation request and return the generated artifact.

        Raises:
            NetworkError: If the transport failed (RequestTimeoutError on timeout)
            APIError: If the provider answered with a non-success status
            EmptyResultError: If a success response held no usable image
        """
        url = self.endpoint(engine_id)
        headers = self.authenticate()
        logger.info("Generating image engine=%s api_version=%s", engine_id, self.api_version)
        logger.debug("API request url=%s headers=%s", url, redact_headers(headers))
        if self._debug:
            logger.info(
                "API request payload: %s",
                json.dumps(truncate_for_log(payload), indent=2, default=str),
            )

        start_time = time.time()
        try:
            response = self._send(url, headers, payload)
        except NetworkError:
            raise
        except Exception as e:
            raise NetworkError(f"Network error during API request: {str(e)}", original_error=e) from e
        generation_time = time.time() - start_time

        logger.debug(
            "API response status=%s content_type=%s time=%.2fs",
            response.status_code,
            response.content_type,
            generation_time,
        )
        if self._debug:
            self._log_response(response)

        if not response.ok:
            raise APIError(
                error_message(response),
                status_code=response.status_code,
                response=response.text[:_RESPONSE_LOG_MAX],
            )

        artifact = to_artifact(parse_provider_response(response), engine_id, generation_time)
        logger.info(
            "Generated in %.1fs engine=%s finish_reason=%s",
            generation_time,
            engine_id,
            artifact.finish_reason,
        )
        return artifact
