"""
Click command definitions for the stabimg CLI.

This module contains the Click command group and its commands
(generate, models).
"""

import dataclasses
import json
import sys

import click

from stabimg import Config, GenerationHandler, __version__
from stabimg.cli import progress
from stabimg.cli.handlers import run_with_error_handling
from stabimg.cli.utils import EXIT_SUCCESS, exit_code_for_error_type
from stabimg.core.config import KNOWN_API_VERSIONS
from stabimg.core.engines import known_models, resolve_engine
from stabimg.logging_config import configure_logging, get_verbosity_from_env


@click.group(
    help=f"""Stability AI text-to-image generation with JSON sidecar metadata.

\b
Version: {__version__}
"""
)
@click.version_option(version=__version__, package_name="stabimg")
@click.pass_context
def cli(ctx: click.Context) -> None:
    ctx.color = True


@cli.command()
@click.option("--prompt", "-p", required=True, help="Text description of the image to generate.")
@click.option("--model", "-m", help="Model name, e.g. sd3-large (default from config).")
@click.option("--negative-prompt", "-n", default="", help="Elements to keep out of the image.")
@click.option(
    "--seed",
    "-s",
    default=None,
    help="Seed between 0 and 4294967295 (0 or omitted: provider picks).",
)
@click.option("--aspect-ratio", "-a", default=None, help="Aspect ratio, e.g. 1:1 or 16:9.")
@click.option("--cfg-scale", type=float, default=None, help="Prompt adherence (default 7).")
@click.option("--style", default=None, help="Style preset (default: enhance).")
@click.option(
    "--out-dir",
    "-o",
    envvar="IMAGE_SAVE_DIRECTORY",
    help="Directory for the image and its metadata (overrides IMAGE_SAVE_DIRECTORY).",
)
@click.option(
    "--api-key",
    envvar="STABILITY_API_KEY",
    help="Stability AI API key (overrides STABILITY_API_KEY environment variable).",
)
@click.option(
    "--api-version",
    type=click.Choice(list(KNOWN_API_VERSIONS), case_sensitive=False),
    default=None,
    help="Endpoint family: v1 (JSON artifacts) or v2beta (raw image).",
)
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    help="Print the full JSON result to stdout instead of the saved path.",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    help="Minimize progress messages; only print result path or errors.",
)
@click.option(
    "--verbose",
    "-v",
    "verbose_count",
    count=True,
    help="Increase verbosity: -v also show prompts, -vv show API detail.",
)
@click.option(
    "--debug-api",
    is_flag=True,
    help="Log API request payload and response (image data truncated) for debugging.",
)
def generate(
    prompt: str,
    model: str | None,
    negative_prompt: str,
    seed: str | None,
    aspect_ratio: str | None,
    cfg_scale: float | None,
    style: str | None,
    out_dir: str | None,
    api_key: str | None,
    api_version: str | None,
    as_json: bool,
    quiet: bool,
    verbose_count: int,
    debug_api: bool,
) -> None:
    """Generate an image from a text prompt and save it with a metadata sidecar."""
    # CLI flags override STABIMG_VERBOSITY
    verbose_level = min(verbose_count, 2) if verbose_count > 0 else get_verbosity_from_env()
    configure_logging(verbose_level=verbose_level, quiet=quiet)

    def do_generate() -> None:
        config = Config.from_env()
        overrides: dict = {}
        if api_key is not None:
            overrides["api_key"] = api_key
        if out_dir is not None:
            overrides["image_save_directory"] = out_dir
        if api_version is not None:
            overrides["api_version"] = api_version.lower()
        if debug_api:
            overrides["debug_api"] = True
        config = dataclasses.replace(config, **overrides)

        params = {"prompt": prompt, "negative_prompt": negative_prompt}
        for name, value in (
            ("model", model),
            ("seed", seed),
            ("aspect_ratio", aspect_ratio),
            ("cfg_scale", cfg_scale),
            ("style", style),
        ):
            if value is not None:
                params[name] = value

        handler = GenerationHandler(config)
        if quiet:
            result = handler.handle(params)
        else:
            with progress.generation_progress(model=model or config.default_model, seed=seed):
                result = handler.handle(params)

        if as_json:
            click.echo(json.dumps(result, indent=2, default=str))
        if not result["success"]:
            if not as_json:
                if quiet:
                    click.echo(result["error"], err=True)
                else:
                    progress.print_error(result["error"])
            sys.exit(exit_code_for_error_type(result.get("errorType", "")))

        if not quiet:
            progress.print_success_result(result)
        if not as_json:
            click.echo(result.get("filePath") or result.get("imageData", ""))
        sys.exit(EXIT_SUCCESS)

    run_with_error_handling(do_generate, quiet=quiet)


@cli.command()
@click.option(
    "--api-version",
    type=click.Choice(list(KNOWN_API_VERSIONS), case_sensitive=False),
    default=None,
    help="Only list models for this endpoint family.",
)
def models(api_version: str | None) -> None:
    """List known model names and the engine each resolves to."""
    versions = [api_version.lower()] if api_version else list(KNOWN_API_VERSIONS)
    rows = [
        (name, version, resolve_engine(name, version))
        for version in versions
        for name in known_models(version)
    ]
    default_engine = ", ".join(f"{v}: {resolve_engine(None, v)}" for v in versions)
    progress.print_models(rows, default_engine)
    for name, version, engine in rows:
        click.echo(f"{name}\t{version}\t{engine}")
