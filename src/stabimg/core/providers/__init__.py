"""
Stability AI provider: transport protocol, default transport and client.

The requests-based transport is imported lazily by StabilityClient so that
callers supplying their own Transport never touch the network stack.
"""

from stabimg.core.providers.base import (
    GenerationArtifact as GenerationArtifact,
)
from stabimg.core.providers.base import (
    Transport as Transport,
)
from stabimg.core.providers.base import (
    TransportResponse as TransportResponse,
)
from stabimg.core.providers.stability import (
    JsonEnvelope,
    ProviderResponse,
    RawBinary,
    StabilityClient,
    parse_provider_response,
    to_artifact,
)

__all__ = [
    "GenerationArtifact",
    "JsonEnvelope",
    "ProviderResponse",
    "RawBinary",
    "StabilityClient",
    "Transport",
    "TransportResponse",
    "parse_provider_response",
    "to_artifact",
]
