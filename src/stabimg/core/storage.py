"""
Artifact persistence and sidecar metadata.

persist() writes the image bytes under a timestamp-derived name, hashes the
file as it landed on disk and writes a JSON sidecar next to it with the same
base name. The image is written first; the sidecar only after the write
succeeded, so a failed image write never leaves a sidecar behind. A failed
sidecar write leaves the image in place (no rollback).

Filenames carry a UTC timestamp with microsecond resolution. Two invocations
landing in the same microsecond in the same directory would collide; the
image is opened in exclusive-create mode so such a collision fails loudly
instead of overwriting. Callers running many concurrent invocations against
one directory should use separate directories.
"""

import contextlib
import hashlib
import io
import json
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from PIL import Image, UnidentifiedImageError

from stabimg.core.providers.base import GenerationArtifact
from stabimg.core.request import GenerationRequest
from stabimg.logging_config import get_logger
from stabimg.utils.exceptions import (
    DirectoryUnavailableError,
    MetadataWriteError,
    StorageError,
)

logger = get_logger(__name__)

IMAGE_PREFIX = "image_"
IMAGE_EXTENSION = ".png"
METADATA_EXTENSION = ".json"
DIGEST_ALGORITHM = "sha256"


@dataclass(frozen=True)
class PersistedRecord:
    """Where an artifact was written and the metadata stored beside it."""

    file_path: str
    metadata_path: str
    metadata: dict[str, Any] = field(default_factory=dict)


def sortable_timestamp(moment: datetime) -> str:
    """UTC timestamp safe for filenames, e.g. 2026-10-18T19-40-00-123456Z."""
    utc = moment.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.%fZ").replace(":", "-").replace(".", "-")


def image_filename(moment: datetime) -> str:
    return f"{IMAGE_PREFIX}{sortable_timestamp(moment)}{IMAGE_EXTENSION}"


def metadata_path_for(image_path: Path) -> Path:
    """Sidecar path: the image path with its extension swapped for .json."""
    return image_path.with_suffix(METADATA_EXTENSION)


def content_digest(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def file_sha256(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


def image_dimensions(data: bytes) -> tuple[int | None, int | None]:
    """Read (width, height) without re-encoding; (None, None) if not an image."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            return img.size
    except (UnidentifiedImageError, OSError) as e:
        logger.warning("Could not read image dimensions: %s", e)
        return (None, None)


def build_output_metadata(
    artifact: GenerationArtifact,
    saved_to: str | None,
    digest: str,
    generated_at: datetime,
    extra: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """The "output" block of a metadata record."""
    width, height = image_dimensions(artifact.image_bytes)
    output: dict[str, Any] = {
        "usedSeed": artifact.used_seed,
        "finishReason": artifact.finish_reason,
        "savedTo": saved_to,
        "contentDigest": digest,
        "digestAlgorithm": DIGEST_ALGORITHM,
        "width": width,
        "height": height,
        "generatedAt": generated_at.astimezone(timezone.utc).isoformat().replace("+00:00", "Z"),
    }
    if extra:
        output.update(extra)
    return output


def ensure_directory(target_directory: str | Path) -> Path:
    """
    Create target_directory if needed and check it is writable.

    Raises:
        DirectoryUnavailableError: If it cannot be created or written to
    """
    directory = Path(target_directory).expanduser()
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DirectoryUnavailableError(
            f"Image save directory is unavailable: {directory} ({e.strerror or e})",
            path=str(directory),
        ) from e
    if not directory.is_dir() or not os.access(directory, os.W_OK | os.X_OK):
        raise DirectoryUnavailableError(
            f"Image save directory is not writable: {directory}",
            path=str(directory),
        )
    return directory.resolve()


def _write_image(path: Path, data: bytes) -> None:
    try:
        with path.open("xb") as f:
            f.write(data)
    except FileExistsError as e:
        raise StorageError(
            f"Refusing to overwrite existing image: {path}", path=str(path)
        ) from e
    except OSError as e:
        with contextlib.suppress(OSError):
            path.unlink()
        raise StorageError(f"Failed to write image {path}: {e}", path=str(path)) from e


def persist(
    artifact: GenerationArtifact,
    request: GenerationRequest,
    target_directory: str | Path,
    *,
    extra_output: dict[str, Any] | None = None,
    now: datetime | None = None,
) -> PersistedRecord:
    """
    Write artifact bytes and their sidecar metadata into target_directory.

    Args:
        artifact: Generated image and provenance
        request: Normalized request, echoed into the metadata
        target_directory: Directory for both files (created if missing)
        extra_output: Additional keys merged into metadata["output"]
        now: Generation time used for the filename (default: current UTC time)

    Returns:
        PersistedRecord with absolute image and metadata paths

    Raises:
        DirectoryUnavailableError: If the directory cannot be used
        StorageError: If the image cannot be written
        MetadataWriteError: If the sidecar cannot be written (image is kept)
    """
    moment = now or datetime.now(timezone.utc)
    directory = ensure_directory(target_directory)
    image_path = directory / image_filename(moment)

    _write_image(image_path, artifact.image_bytes)
    logger.debug("Wrote %s bytes to %s", len(artifact.image_bytes), image_path)

    digest = file_sha256(image_path)
    metadata = {
        "request": request.to_dict(),
        "output": build_output_metadata(artifact, str(image_path), digest, moment, extra_output),
    }

    metadata_path = metadata_path_for(image_path)
    try:
        metadata_path.write_text(
            json.dumps(metadata, indent=2, ensure_ascii=False, default=str),
            encoding="utf-8",
        )
    except OSError as e:
        raise MetadataWriteError(
            f"Image saved to {image_path} but metadata could not be written: {e}",
            path=str(metadata_path),
            image_path=str(image_path),
        ) from e

    logger.info("Saved image %s (sha256 %s)", image_path, digest[:12])
    return PersistedRecord(
        file_path=str(image_path),
        metadata_path=str(metadata_path),
        metadata=metadata,
    )
