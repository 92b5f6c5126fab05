"""
stabimg - Stability AI image generation with auditable persistence

A Python package that validates generation parameters, calls the Stability AI
text-to-image API and saves each image with a JSON sidecar recording the
request, the seed used and a SHA-256 digest of the saved bytes.

Library usage:
- GenerationHandler(config).handle(params) returns a JSON-serializable dict
  and never raises; handle_request(params, runtime_args) builds the Config
  from an environment-style mapping first.
- generate_image(request, config) and persist(artifact, request, directory)
  are the lower-level steps; they raise StabimgError subclasses.
- Logging: control verbosity with set_verbosity(0|1|2) or configure_logging(verbose_level, quiet);
  STABIMG_VERBOSITY env (0/1/2) is read when the CLI runs.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("stabimg")
except PackageNotFoundError:
    # Package is not installed (e.g., running from source in development)
    __version__ = "0.0.0.dev"

__author__ = "codeprimate"

from stabimg.core.config import DEFAULT_BASE_URL, DEFAULT_MODEL, Config
from stabimg.core.engines import is_known_model, known_models, resolve_engine
from stabimg.core.handler import GenerationHandler, handle_request
from stabimg.core.image_gen import generate_image
from stabimg.core.providers import (
    GenerationArtifact,
    StabilityClient,
    Transport,
    TransportResponse,
)
from stabimg.core.request import GenerationRequest, normalize_request, normalize_seed
from stabimg.core.storage import PersistedRecord, persist
from stabimg.logging_config import configure_logging, set_verbosity
from stabimg.utils.exceptions import (
    APIError,
    ConfigurationError,
    DirectoryUnavailableError,
    EmptyResultError,
    InvalidSeedError,
    MetadataWriteError,
    MissingConfigurationError,
    MissingCredentialError,
    NetworkError,
    RequestTimeoutError,
    StabimgError,
    StorageError,
    ValidationError,
)

__all__ = [
    "APIError",
    "Config",
    "ConfigurationError",
    "DEFAULT_BASE_URL",
    "DEFAULT_MODEL",
    "DirectoryUnavailableError",
    "EmptyResultError",
    "GenerationArtifact",
    "GenerationHandler",
    "GenerationRequest",
    "InvalidSeedError",
    "MetadataWriteError",
    "MissingConfigurationError",
    "MissingCredentialError",
    "NetworkError",
    "PersistedRecord",
    "RequestTimeoutError",
    "StabilityClient",
    "StabimgError",
    "StorageError",
    "Transport",
    "TransportResponse",
    "ValidationError",
    "configure_logging",
    "generate_image",
    "handle_request",
    "is_known_model",
    "known_models",
    "normalize_request",
    "normalize_seed",
    "persist",
    "resolve_engine",
    "set_verbosity",
]
