"""
Image generation via the Stability AI API.

Resolves the engine for a GenerationRequest, builds the provider body for the
configured API version and runs it through a StabilityClient.
"""

from typing import Any

from stabimg.core.config import Config
from stabimg.core.engines import resolve_engine
from stabimg.core.providers.base import GenerationArtifact, Transport
from stabimg.core.providers.stability import StabilityClient
from stabimg.core.request import GenerationRequest, build_form, build_payload
from stabimg.logging_config import get_logger, log_prompts

logger = get_logger(__name__)

# Max prompt length for logging (large so prompts are effectively never truncated)
_PROMPT_LOG_MAX = 50_000


def _truncate(text: str) -> str:
    return text if len(text) <= _PROMPT_LOG_MAX else text[:_PROMPT_LOG_MAX] + "..."


def create_client(config: Config, transport: Transport | None = None) -> StabilityClient:
    """
    Build a StabilityClient from config.

    Raises:
        MissingCredentialError: If config has no API key
    """
    return StabilityClient(
        config.api_key,
        base_url=config.base_url,
        api_version=config.api_version,
        client_id=config.client_id,
        client_version=config.client_version,
        organization_id=config.organization_id,
        timeout=config.request_timeout,
        transport=transport,
        debug=config.debug_api,
    )


def generate_image(
    request: GenerationRequest,
    config: Config,
    transport: Transport | None = None,
    *,
    client: StabilityClient | None = None,
) -> GenerationArtifact:
    """
    Generate an image for a validated request.

    Args:
        request: Normalized generation request
        config: Configuration (credential, endpoint, timeout)
        transport: Optional transport for a client built from config
        client: Optional ready-made client; takes precedence over transport

    Returns:
        GenerationArtifact with image bytes, used seed and finish reason

    Raises:
        MissingCredentialError: If no API key is configured
        NetworkError: If the transport fails
        APIError: If the provider rejects the request
        EmptyResultError: If the provider returned no image
    """
    if client is None:
        client = create_client(config, transport)

    engine_id = resolve_engine(request.model, config.api_version)
    if config.api_version == "v2beta":
        payload: dict[str, Any] = build_form(request, engine_id)
    else:
        payload = build_payload(request)

    logger.info(
        "Requesting image model=%s engine=%s seed=%s",
        request.model,
        engine_id,
        request.seed,
    )
    if log_prompts():
        logger.info("Prompt: %s", _truncate(request.prompt))
        if request.negative_prompt:
            logger.info("Negative prompt: %s", _truncate(request.negative_prompt))

    return client.invoke(engine_id, payload)
