"""Unit tests for the stabimg CLI."""

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner, Result

from stabimg.cli import cli
from stabimg.cli.handlers import map_exception_to_exit
from stabimg.cli.utils import (
    EXIT_API_OR_NETWORK,
    EXIT_VALIDATION_OR_CONFIG,
    exit_code_for_error_type,
)
from stabimg.core.config import Config
from stabimg.utils.exceptions import (
    APIError,
    ConfigurationError,
    DirectoryUnavailableError,
    ValidationError,
)

_SUCCESS = {
    "success": True,
    "filePath": "/out/image_2026-10-18T19-40-05-123456Z.png",
    "metadataFilePath": "/out/image_2026-10-18T19-40-05-123456Z.json",
    "metadata": {
        "request": {"prompt": "a red cube", "model": "sd3-large", "seed": 42},
        "output": {
            "usedSeed": 42,
            "finishReason": "SUCCESS",
            "savedTo": "/out/image_2026-10-18T19-40-05-123456Z.png",
            "contentDigest": "ab" * 32,
            "engine": "stable-diffusion-xl-1024-v1-0",
            "modelFallback": False,
        },
    },
}

_FAILURE = {
    "success": False,
    "error": "Insufficient balance",
    "errorType": "APIError",
    "metadata": {
        "request": {"prompt": "a red cube"},
        "output": {"seed": 0, "finishReason": "error", "savedTo": None},
    },
}


def _run_cli(*args: str, env: dict[str, str] | None = None) -> Result:
    """Invoke stabimg generate with given args; returns Click's Result."""
    runner = CliRunner()
    return runner.invoke(cli, ["generate", *args], env=env)


@pytest.mark.unit
class TestGenerateCommand:
    def test_required_prompt(self) -> None:
        result = _run_cli()
        assert result.exit_code != 0
        assert "prompt" in result.output.lower() or "Missing" in result.output

    @patch("stabimg.cli.commands.GenerationHandler")
    def test_success_prints_path(self, mock_handler_cls: MagicMock) -> None:
        mock_handler_cls.return_value.handle.return_value = _SUCCESS
        result = _run_cli("-p", "a red cube", "--seed", "42", "-o", "/out", "--api-key", "sk-k", "-q")
        assert result.exit_code == 0
        assert result.output.strip().endswith(_SUCCESS["filePath"])

        params = mock_handler_cls.return_value.handle.call_args[0][0]
        assert params == {"prompt": "a red cube", "negative_prompt": "", "seed": "42"}
        config: Config = mock_handler_cls.call_args[0][0]
        assert config.api_key == "sk-k"
        assert config.image_save_directory == "/out"

    @patch("stabimg.cli.commands.GenerationHandler")
    def test_seed_passed_raw(self, mock_handler_cls: MagicMock) -> None:
        mock_handler_cls.return_value.handle.return_value = _SUCCESS
        _run_cli("-p", "x", "--seed", "not-a-number", "-q")
        params = mock_handler_cls.return_value.handle.call_args[0][0]
        assert params["seed"] == "not-a-number"

    @patch("stabimg.cli.commands.GenerationHandler")
    def test_optional_parameters(self, mock_handler_cls: MagicMock) -> None:
        mock_handler_cls.return_value.handle.return_value = _SUCCESS
        _run_cli(
            "-p", "x", "-m", "sd3-medium", "-n", "blur", "-a", "16:9",
            "--cfg-scale", "5", "--style", "anime", "--api-version", "v2beta", "-q",
        )
        params = mock_handler_cls.return_value.handle.call_args[0][0]
        assert params == {
            "prompt": "x",
            "negative_prompt": "blur",
            "model": "sd3-medium",
            "aspect_ratio": "16:9",
            "cfg_scale": 5.0,
            "style": "anime",
        }
        assert mock_handler_cls.call_args[0][0].api_version == "v2beta"

    @patch("stabimg.cli.commands.GenerationHandler")
    def test_json_output(self, mock_handler_cls: MagicMock) -> None:
        mock_handler_cls.return_value.handle.return_value = _SUCCESS
        result = _run_cli("-p", "a red cube", "--json", "-q")
        assert result.exit_code == 0
        assert json.loads(result.output) == _SUCCESS

    @patch("stabimg.cli.commands.GenerationHandler")
    def test_failure_exit_code(self, mock_handler_cls: MagicMock) -> None:
        mock_handler_cls.return_value.handle.return_value = _FAILURE
        result = _run_cli("-p", "a red cube", "-q")
        assert result.exit_code == EXIT_API_OR_NETWORK
        assert "Insufficient balance" in result.output

    @patch("stabimg.cli.commands.GenerationHandler")
    def test_failure_message_with_markup_characters(self, mock_handler_cls: MagicMock) -> None:
        failure = dict(_FAILURE, error="invalid_prompts: [/bold] not allowed")
        mock_handler_cls.return_value.handle.return_value = failure
        result = _run_cli("-p", "a red cube")
        assert result.exit_code == EXIT_API_OR_NETWORK
        assert "[/bold] not allowed" in result.output

    @patch("stabimg.cli.commands.GenerationHandler")
    def test_validation_failure_exit_code(self, mock_handler_cls: MagicMock) -> None:
        failure = dict(_FAILURE, error="Seed must be a number", errorType="InvalidSeedError")
        mock_handler_cls.return_value.handle.return_value = failure
        result = _run_cli("-p", "x", "--json", "-q")
        assert result.exit_code == EXIT_VALIDATION_OR_CONFIG
        assert json.loads(result.output)["errorType"] == "InvalidSeedError"

    def test_bad_environment_config(self) -> None:
        result = _run_cli("-p", "x", "-q", env={"STABIMG_REQUEST_TIMEOUT": "soon"})
        assert result.exit_code == EXIT_VALIDATION_OR_CONFIG
        assert "STABIMG_REQUEST_TIMEOUT" in result.output

    def test_end_to_end_missing_key(self, tmp_path: Path) -> None:
        result = _run_cli(
            "-p", "x", "-q", "-o", str(tmp_path),
            env={"STABILITY_API_KEY": "", "API_KEY": ""},
        )
        assert result.exit_code == EXIT_VALIDATION_OR_CONFIG
        assert "STABILITY_API_KEY is required" in result.output
        assert list(tmp_path.iterdir()) == []


@pytest.mark.unit
class TestModelsCommand:
    def test_lists_models(self) -> None:
        result = CliRunner().invoke(cli, ["models", "--api-version", "v1"])
        assert result.exit_code == 0
        assert "sd3-medium\tv1\tstable-diffusion-v1-6" in result.output
        assert "v2beta" not in result.output

    def test_lists_all_versions(self) -> None:
        result = CliRunner().invoke(cli, ["models"])
        assert result.exit_code == 0
        assert "sd3-large\tv2beta\tsd3-large" in result.output


@pytest.mark.unit
class TestExitCodes:
    def test_error_types(self) -> None:
        assert exit_code_for_error_type("InvalidSeedError") == EXIT_VALIDATION_OR_CONFIG
        assert exit_code_for_error_type("MissingCredentialError") == EXIT_VALIDATION_OR_CONFIG
        assert exit_code_for_error_type("APIError") == EXIT_API_OR_NETWORK
        assert exit_code_for_error_type("EmptyResultError") == EXIT_API_OR_NETWORK
        assert exit_code_for_error_type("") == EXIT_API_OR_NETWORK

    def test_map_exception_to_exit(self) -> None:
        assert map_exception_to_exit(ValidationError("bad", field="seed")) == (
            EXIT_VALIDATION_OR_CONFIG,
            "bad (field: seed)",
        )
        assert map_exception_to_exit(ConfigurationError("cfg"))[0] == EXIT_VALIDATION_OR_CONFIG
        assert map_exception_to_exit(APIError("api"))[0] == EXIT_API_OR_NETWORK
        assert map_exception_to_exit(DirectoryUnavailableError("dir"))[0] == EXIT_VALIDATION_OR_CONFIG
        assert map_exception_to_exit(RuntimeError("x")) == (EXIT_API_OR_NETWORK, "x")
