"""
Generation handler: the single entry point of the pipeline.

GenerationHandler.handle() validates configuration and inputs, resolves the
engine, calls the provider, persists the artifact and returns a
JSON-serializable result. It never raises: every failure becomes

    {"success": False, "error": ..., "metadata": {"request": <caller params as
     given>, "output": {"seed": ..., "finishReason": "error", "savedTo": None}}}

On success the metadata echoes the normalized request instead, so the record
shows exactly what was sent to the provider.
"""

import base64
import json
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from stabimg.core.config import Config
from stabimg.core.engines import is_known_model
from stabimg.core.image_gen import generate_image
from stabimg.core.providers.base import Transport
from stabimg.core.request import coerce_seed, normalize_request
from stabimg.core.storage import (
    build_output_metadata,
    content_digest,
    ensure_directory,
    persist,
)
from stabimg.logging_config import get_logger
from stabimg.utils.exceptions import StabimgError

logger = get_logger(__name__)


def failure_result(error: BaseException, params: object) -> dict[str, Any]:
    """Failure outcome echoing the caller's raw parameters."""
    raw = dict(params) if isinstance(params, Mapping) else {}
    return {
        "success": False,
        "error": str(error) or error.__class__.__name__,
        "errorType": error.__class__.__name__,
        "metadata": {
            "request": raw,
            "output": {
                "seed": coerce_seed(raw.get("seed")),
                "finishReason": "error",
                "savedTo": None,
            },
        },
    }


class GenerationHandler:
    """Drives one generation per handle() call; holds no per-call state."""

    def __init__(self, config: Config, transport: Transport | None = None) -> None:
        self.config = config
        self.transport = transport

    def handle(self, params: Mapping[str, Any]) -> dict[str, Any]:
        """
        Run the pipeline for params and return the outcome dict.

        Args:
            params: prompt (required), model, negative_prompt, seed,
                aspect_ratio, cfg_scale, style, samples

        Returns:
            Success: {"success": True, "filePath", "metadataFilePath", "metadata"}
            (or "imageData" instead of paths when persistence is disabled).
            Failure: {"success": False, "error", "errorType", "metadata"}.
        """
        try:
            return self._run(params)
        except StabimgError as e:
            logger.error("Image generation failed: %s", e)
            return failure_result(e, params)
        except Exception as e:
            logger.exception("Unexpected error during image generation")
            return failure_result(e, params)

    def handle_json(self, params: Mapping[str, Any]) -> str:
        """handle() serialized to a JSON string."""
        return json.dumps(self.handle(params), default=str)

    def _run(self, params: Mapping[str, Any]) -> dict[str, Any]:
        config = self.config
        started = datetime.now(timezone.utc)

        config.validate()
        request = normalize_request(params, default_model=config.default_model)
        if config.persist:
            # Must hold before the provider is called
            ensure_directory(config.image_save_directory)

        fallback = not is_known_model(request.model, config.api_version)
        if fallback:
            logger.warning(
                "Unknown model %r; falling back to the default engine", request.model
            )

        artifact = generate_image(request, config, self.transport)
        extra = {
            "engine": artifact.engine_id,
            "modelFallback": fallback,
            "apiVersion": config.api_version,
        }

        if not config.persist:
            metadata = {
                "request": request.to_dict(),
                "output": build_output_metadata(
                    artifact, None, content_digest(artifact.image_bytes), started, extra
                ),
            }
            return {
                "success": True,
                "imageData": base64.b64encode(artifact.image_bytes).decode("ascii"),
                "metadata": metadata,
            }

        record = persist(
            artifact,
            request,
            config.image_save_directory,
            extra_output=extra,
            now=started,
        )
        return {
            "success": True,
            "filePath": record.file_path,
            "metadataFilePath": record.metadata_path,
            "metadata": record.metadata,
        }


def handle_request(
    params: Mapping[str, Any],
    runtime_args: Mapping[str, object] | None = None,
    transport: Transport | None = None,
) -> dict[str, Any]:
    """
    One-shot handler call with configuration read from runtime_args.

    Args:
        params: Generation parameters (see GenerationHandler.handle)
        runtime_args: Environment-style settings (default: os.environ)
        transport: Optional transport

    Returns:
        The outcome dict; never raises.
    """
    try:
        config = Config.from_env() if runtime_args is None else Config.from_mapping(runtime_args)
    except StabimgError as e:
        logger.error("Invalid configuration: %s", e)
        return failure_result(e, params)
    return GenerationHandler(config, transport).handle(params)
