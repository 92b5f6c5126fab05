"""
Model to engine resolution.

Maps user-facing model names (e.g. "sd3-large") to the engine identifiers the
Stability AI endpoints expect. Unknown names never fail here: they resolve to
the default engine, and the remote service is left to reject them if needed.
"""

DEFAULT_ENGINE_V1 = "stable-diffusion-xl-1024-v1-0"
DEFAULT_ENGINE_V2BETA = "sd3-large"

ENGINE_MAP_V1: dict[str, str] = {
    "sd3-large": "stable-diffusion-xl-1024-v1-0",
    "sd3-medium": "stable-diffusion-v1-6",
    "sd3-large-turbo": "stable-diffusion-xl-1024-v1-0",
}

# v2beta stable-image endpoint takes the SD3 model name as-is
ENGINE_MAP_V2BETA: dict[str, str] = {
    "sd3-large": "sd3-large",
    "sd3-large-turbo": "sd3-large-turbo",
    "sd3-medium": "sd3-medium",
}

_MAPS = {
    "v1": (ENGINE_MAP_V1, DEFAULT_ENGINE_V1),
    "v2beta": (ENGINE_MAP_V2BETA, DEFAULT_ENGINE_V2BETA),
}


def _table(api_version: str) -> tuple[dict[str, str], str]:
    try:
        return _MAPS[api_version]
    except KeyError:
        raise ValueError(f"Unknown api_version: {api_version!r}") from None


def resolve_engine(model: str | None, api_version: str = "v1") -> str:
    """Return the engine id for model, or the default engine when model is unknown."""
    mapping, default = _table(api_version)
    if model is None:
        return default
    return mapping.get(model, default)


def is_known_model(model: str | None, api_version: str = "v1") -> bool:
    """Return True if model has an explicit mapping (no fallback would occur)."""
    mapping, _ = _table(api_version)
    return model is not None and model in mapping


def known_models(api_version: str = "v1") -> list[str]:
    """Return the model names with explicit mappings."""
    mapping, _ = _table(api_version)
    return list(mapping.keys())
