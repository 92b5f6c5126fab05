"""
Integration tests for Stability AI image generation.

These tests call the real Stability AI API. They are slow and cost credits.
Run rarely and only when you need to verify the live API path.

To run:
  STABIMG_RUN_INTEGRATION_TESTS=1 STABILITY_API_KEY=sk-... pytest -m integration --run-slow
"""

import hashlib
import json
import os
from pathlib import Path

import pytest

from stabimg.core.config import Config
from stabimg.core.handler import GenerationHandler


def _integration_enabled() -> bool:
    return os.getenv("STABIMG_RUN_INTEGRATION_TESTS", "").strip() == "1"


@pytest.mark.integration
@pytest.mark.slow
@pytest.mark.expensive
class TestStabilityImageGeneration:
    """Real Stability AI generation (requires API key and opt-in env)."""

    @pytest.fixture(autouse=True)
    def _require_opt_in(self) -> None:
        if not _integration_enabled():
            pytest.skip(
                "Integration tests are disabled. "
                "Set STABIMG_RUN_INTEGRATION_TESTS=1 to run (slow, costs credits)."
            )
        if not os.getenv("STABILITY_API_KEY", "").strip():
            pytest.skip(
                "STABILITY_API_KEY not set. "
                "Set it in .env or environment to run integration tests."
            )

    def test_generate_and_persist(self, tmp_path: Path) -> None:
        """Generate one image with a fixed seed and check files on disk."""
        config = Config.from_mapping(
            {**os.environ, "IMAGE_SAVE_DIRECTORY": str(tmp_path), "STABIMG_PERSIST": "1"}
        )
        result = GenerationHandler(config).handle(
            {"prompt": "A single red circle on a white background.", "seed": 42}
        )

        assert result["success"] is True, result.get("error")
        image_path = Path(result["filePath"])
        metadata_path = Path(result["metadataFilePath"])
        assert image_path.is_file()
        assert metadata_path == image_path.with_suffix(".json")

        metadata = json.loads(metadata_path.read_text(encoding="utf-8"))
        assert metadata["request"]["seed"] == 42
        assert metadata["output"]["usedSeed"] == 42
        assert metadata["output"]["savedTo"] == str(image_path)
        assert metadata["output"]["contentDigest"] == hashlib.sha256(
            image_path.read_bytes()
        ).hexdigest()

    def test_invalid_key_reports_api_error(self, tmp_path: Path) -> None:
        config = Config(api_key="sk-invalid", image_save_directory=str(tmp_path))
        result = GenerationHandler(config).handle({"prompt": "a red circle"})

        assert result["success"] is False
        assert result["errorType"] == "APIError"
        assert list(tmp_path.iterdir()) == []
