"""
Configuration management for stabimg.

This module holds the API credential, persistence settings and endpoint
options. A Config is built explicitly (or from the environment / a runtime
mapping) and handed to the handler; there is no process-wide instance.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from dotenv import load_dotenv

from stabimg.logging_config import get_logger
from stabimg.utils.exceptions import (
    ConfigurationError,
    MissingConfigurationError,
    MissingCredentialError,
)

logger = get_logger(__name__)

# Load environment variables from .env file
load_dotenv()

# Default configuration constants
DEFAULT_BASE_URL = "https://api.stability.ai"
DEFAULT_API_VERSION = "v1"
DEFAULT_MODEL = "sd3-large"
DEFAULT_REQUEST_TIMEOUT = 180

# v1: JSON envelope responses; v2beta: raw image bodies
KNOWN_API_VERSIONS = ("v1", "v2beta")

_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off")


def _bool_value(raw: object, default: bool) -> bool:
    if raw is None or raw == "":
        return default
    if isinstance(raw, bool):
        return raw
    text = str(raw).strip().lower()
    if text in _TRUTHY:
        return True
    if text in _FALSY:
        return False
    raise ConfigurationError(f"Expected a boolean value, got {raw!r}.")


def _int_value(raw: object, default: int, name: str) -> int:
    if raw is None or raw == "":
        return default
    try:
        return int(str(raw))
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}.") from e


@dataclass(frozen=True)
class Config:
    """Configuration for one or more handler invocations."""

    # api_key excluded from repr to avoid leaking secrets
    api_key: str = field(default="", repr=False)
    image_save_directory: str = ""
    persist: bool = True

    # Endpoint
    base_url: str = DEFAULT_BASE_URL
    api_version: str = DEFAULT_API_VERSION
    default_model: str = DEFAULT_MODEL
    request_timeout: int = DEFAULT_REQUEST_TIMEOUT

    # Client identification headers; empty means "do not send"
    client_id: str = ""
    client_version: str = ""
    organization_id: str = ""

    # Debug: log raw API payload/response with image data truncated
    debug_api: bool = False

    @classmethod
    def from_mapping(cls, values: Mapping[str, object]) -> "Config":
        """
        Create a Config from environment-style keys.

        Keys:
            STABILITY_API_KEY (or API_KEY): Required for image generation
            IMAGE_SAVE_DIRECTORY: Required when persistence is enabled
            STABIMG_PERSIST: Optional, "0"/"false" disables writing files
            STABILITY_BASE_URL: Optional API base URL
            STABIMG_API_VERSION: Optional "v1" (default) or "v2beta"
            STABIMG_DEFAULT_MODEL: Optional default model name
            STABIMG_REQUEST_TIMEOUT: Optional transport timeout in seconds
            STABILITY_CLIENT_ID, STABILITY_CLIENT_VERSION, STABILITY_ORGANIZATION:
                Optional client identification headers
            STABIMG_DEBUG_API: Optional, log truncated payloads/responses

        Returns:
            Config instance populated from the mapping

        Raises:
            ConfigurationError: If a value cannot be parsed
        """

        def _str(name: str, default: str = "") -> str:
            val = values.get(name)
            return default if val is None else str(val).strip()

        return cls(
            api_key=_str("STABILITY_API_KEY") or _str("API_KEY"),
            image_save_directory=_str("IMAGE_SAVE_DIRECTORY"),
            persist=_bool_value(values.get("STABIMG_PERSIST"), True),
            base_url=_str("STABILITY_BASE_URL") or DEFAULT_BASE_URL,
            api_version=_str("STABIMG_API_VERSION") or DEFAULT_API_VERSION,
            default_model=_str("STABIMG_DEFAULT_MODEL") or DEFAULT_MODEL,
            request_timeout=_int_value(
                values.get("STABIMG_REQUEST_TIMEOUT"),
                DEFAULT_REQUEST_TIMEOUT,
                "STABIMG_REQUEST_TIMEOUT",
            ),
            client_id=_str("STABILITY_CLIENT_ID"),
            client_version=_str("STABILITY_CLIENT_VERSION"),
            organization_id=_str("STABILITY_ORGANIZATION"),
            debug_api=_bool_value(values.get("STABIMG_DEBUG_API"), False),
        )

    @classmethod
    def from_env(cls) -> "Config":
        """Create a Config instance from environment variables (see from_mapping)."""
        return cls.from_mapping(os.environ)

    def validate(self) -> None:
        """
        Validate the configuration.

        Raises:
            MissingCredentialError: If no API key is set
            MissingConfigurationError: If persistence is on and no directory is set
            ConfigurationError: If another setting is invalid
        """
        logger.debug("Validating config")

        if not self.api_key:
            raise MissingCredentialError(
                "STABILITY_API_KEY is required but not provided. "
                "Set it in the environment or pass api_key explicitly."
            )
        if self.persist and not self.image_save_directory:
            raise MissingConfigurationError(
                "IMAGE_SAVE_DIRECTORY is required when saving images is enabled.",
                setting="IMAGE_SAVE_DIRECTORY",
            )
        if self.api_version not in KNOWN_API_VERSIONS:
            raise ConfigurationError(
                f"Unknown api_version: {self.api_version!r}. "
                f"Must be one of: {', '.join(KNOWN_API_VERSIONS)}."
            )
        if self.request_timeout <= 0:
            raise ConfigurationError(
                f"request_timeout must be positive, got {self.request_timeout}."
            )
