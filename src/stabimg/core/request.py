"""
Generation request value, input normalization and payload building.

normalize_request() turns loose caller parameters into an immutable
GenerationRequest (or raises ValidationError). build_payload() and
build_form() turn that request into the provider body for the v1 JSON and
v2beta multipart endpoints respectively. Nothing here performs I/O.
"""

import math
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any

from stabimg.core.config import DEFAULT_MODEL
from stabimg.utils.exceptions import InvalidSeedError, ValidationError

SEED_MIN = 0
SEED_MAX = 4_294_967_295
SEED_RANGE_MESSAGE = f"Seed must be a number between {SEED_MIN} and {SEED_MAX}"

DEFAULT_SEED = 0
DEFAULT_CFG_SCALE = 7
DEFAULT_STYLE = "enhance"
DEFAULT_SAMPLES = 1
DEFAULT_ASPECT_RATIO = "1:1"
STEPS = 50

CFG_SCALE_MAX = 35
# One image and one sidecar are persisted per call
SAMPLES_MAX = 1

# SDXL-supported (width, height) per aspect ratio for the v1 endpoint
ASPECT_RATIO_DIMENSIONS: dict[str, tuple[int, int]] = {
    "1:1": (1024, 1024),
    "16:9": (1344, 768),
    "9:16": (768, 1344),
    "21:9": (1536, 640),
    "9:21": (640, 1536),
    "3:2": (1216, 832),
    "2:3": (832, 1216),
    "5:4": (1152, 896),
    "4:5": (896, 1152),
}

# Caller-facing parameter names accepted by normalize_request
REQUEST_FIELDS = (
    "prompt",
    "model",
    "negative_prompt",
    "seed",
    "aspect_ratio",
    "cfg_scale",
    "style",
    "samples",
)


@dataclass(frozen=True)
class GenerationRequest:
    """A validated, defaulted generation request."""

    prompt: str
    negative_prompt: str = ""
    model: str = DEFAULT_MODEL
    seed: int | None = None  # None lets the provider pick
    aspect_ratio: str = DEFAULT_ASPECT_RATIO
    cfg_scale: float = DEFAULT_CFG_SCALE
    style: str = DEFAULT_STYLE
    samples: int = DEFAULT_SAMPLES

    def to_dict(self) -> dict[str, Any]:
        """Return the request as a JSON-serializable dict keyed by caller names."""
        return asdict(self)


def _number_from_text(text: str) -> int | float | None:
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return None


def _coerce_number(value: object, default: int | None) -> int | float | None:
    if value is None:
        return default
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return default
        number = _number_from_text(text)
    elif isinstance(value, float):
        number = value
    else:
        return None
    if isinstance(number, float):
        if not math.isfinite(number):
            return None
        if number.is_integer():
            return int(number)
    return number


def coerce_seed(value: object) -> int | float | None:
    """
    Best-effort numeric view of a raw seed, for reporting only.

    Never raises. Returns None when value has no numeric reading.
    """
    return _coerce_number(value, DEFAULT_SEED)


def normalize_seed(value: object) -> int:
    """
    Coerce value to a seed in [0, 4294967295].

    None and blank strings mean "not given" and become 0 (provider picks).

    Raises:
        InvalidSeedError: If value is non-numeric, non-integral or out of range
    """
    number = coerce_seed(value)
    if not isinstance(number, int) or not SEED_MIN <= number <= SEED_MAX:
        raise InvalidSeedError(SEED_RANGE_MESSAGE, value=value)
    return number


def validate_prompt(prompt: object) -> str:
    """
    Validate a text prompt.

    Returns:
        The prompt unchanged

    Raises:
        ValidationError: If prompt is missing or blank
    """
    if not isinstance(prompt, str) or not prompt.strip():
        raise ValidationError("Prompt is required and cannot be empty", field="prompt")
    return prompt


def _optional_str(params: Mapping[str, Any], name: str, default: str) -> str:
    value = params.get(name)
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be a string", field=name)
    return value


def _cfg_scale(value: object) -> float:
    if value is None or value == "":
        return DEFAULT_CFG_SCALE
    if isinstance(value, bool):
        raise ValidationError("cfg_scale must be a number", field="cfg_scale")
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as e:
        raise ValidationError("cfg_scale must be a number", field="cfg_scale") from e
    if not math.isfinite(number) or not 0 <= number <= CFG_SCALE_MAX:
        raise ValidationError(
            f"cfg_scale must be between 0 and {CFG_SCALE_MAX}", field="cfg_scale"
        )
    return int(number) if number.is_integer() else number


def _samples(value: object) -> int:
    if value is None or value == "":
        return DEFAULT_SAMPLES
    number = _coerce_number(value, None)
    if not isinstance(number, int) or not 1 <= number <= SAMPLES_MAX:
        raise ValidationError(
            f"samples must be {SAMPLES_MAX}; one image is generated and saved per call",
            field="samples",
        )
    return number


def normalize_request(
    params: Mapping[str, Any],
    *,
    default_model: str = DEFAULT_MODEL,
) -> GenerationRequest:
    """
    Build a GenerationRequest from caller parameters, applying defaults.

    Args:
        params: Caller parameters (see REQUEST_FIELDS)
        default_model: Model name used when none is given

    Raises:
        ValidationError: If any parameter is invalid (InvalidSeedError for seed)
    """
    seed = normalize_seed(params.get("seed"))
    prompt = validate_prompt(params.get("prompt"))

    aspect_ratio = _optional_str(params, "aspect_ratio", DEFAULT_ASPECT_RATIO) or (
        DEFAULT_ASPECT_RATIO
    )
    if aspect_ratio not in ASPECT_RATIO_DIMENSIONS:
        raise ValidationError(
            f"Unsupported aspect_ratio {aspect_ratio!r}. "
            f"Must be one of: {', '.join(ASPECT_RATIO_DIMENSIONS)}.",
            field="aspect_ratio",
        )

    return GenerationRequest(
        prompt=prompt,
        negative_prompt=_optional_str(params, "negative_prompt", ""),
        model=_optional_str(params, "model", default_model) or default_model,
        seed=seed,
        aspect_ratio=aspect_ratio,
        cfg_scale=_cfg_scale(params.get("cfg_scale")),
        style=_optional_str(params, "style", DEFAULT_STYLE) or DEFAULT_STYLE,
        samples=_samples(params.get("samples")),
    )


def build_payload(request: GenerationRequest) -> dict[str, Any]:
    """Build the v1 text-to-image JSON body."""
    text_prompts: list[dict[str, Any]] = [{"text": request.prompt, "weight": 1.0}]
    if request.negative_prompt:
        text_prompts.append({"text": request.negative_prompt, "weight": -1.0})

    width, height = ASPECT_RATIO_DIMENSIONS.get(
        request.aspect_ratio, ASPECT_RATIO_DIMENSIONS[DEFAULT_ASPECT_RATIO]
    )
    payload: dict[str, Any] = {
        "text_prompts": text_prompts,
        "cfg_scale": request.cfg_scale if request.cfg_scale is not None else DEFAULT_CFG_SCALE,
        "style_preset": request.style or DEFAULT_STYLE,
        "samples": request.samples or DEFAULT_SAMPLES,
        "steps": STEPS,
        "width": width,
        "height": height,
    }
    if request.seed is not None:
        payload["seed"] = request.seed
    return payload


def build_form(request: GenerationRequest, engine_id: str) -> dict[str, str]:
    """Build the v2beta stable-image multipart fields (all values as strings)."""
    form = {
        "prompt": request.prompt,
        "model": engine_id,
        "aspect_ratio": request.aspect_ratio or DEFAULT_ASPECT_RATIO,
        "output_format": "png",
        "cfg_scale": str(request.cfg_scale),
        "style_preset": request.style or DEFAULT_STYLE,
    }
    if request.negative_prompt:
        form["negative_prompt"] = request.negative_prompt
    if request.seed is not None:
        form["seed"] = str(request.seed)
    return form
