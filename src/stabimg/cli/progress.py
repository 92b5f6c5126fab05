"""
Rich progress displays for CLI operations.

All output goes to stderr to preserve stdout for machine-readable output
(the saved path, or the JSON result with --json).
"""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

# Console for stderr output (preserves stdout for machine output)
console = Console(stderr=True)


@contextmanager
def generation_progress(model: str | None = None, seed: object = None) -> Iterator[None]:
    """
    Display a spinner while the image is generated and saved.

    Args:
        model: The model name being requested
        seed: The seed as given on the command line
    """
    progress = Progress(
        SpinnerColumn(spinner_name="dots"),
        TextColumn("[green]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )

    desc_parts = ["Generating image"]
    if model:
        model_display = model if len(model) <= 40 else f"{model[:37]}..."
        desc_parts.append(f"[dim]({model_display})[/dim]")
    if seed not in (None, "", 0, "0"):
        desc_parts.append(f"[dim]• seed {seed}[/dim]")

    with progress:
        task = progress.add_task(" ".join(desc_parts), total=None)
        yield
        progress.update(task, completed=True)


def print_success_result(result: dict[str, Any]) -> None:
    """Print a panel with the saved paths and generation details of a success result."""
    metadata = result.get("metadata", {})
    request = metadata.get("request", {})
    output = metadata.get("output", {})

    table = Table.grid(padding=(0, 2))
    table.add_column(style="cyan", justify="right", vertical="top")
    table.add_column(style="white")

    if result.get("filePath"):
        table.add_row("Saved to", f"[bold green]{result['filePath']}[/bold green]")
        table.add_row("Metadata", str(result.get("metadataFilePath", "")))
    model = escape(str(request.get("model", "")))
    if output.get("modelFallback"):
        model = f"{model} [yellow](unknown, default engine used)[/yellow]"
    table.add_row("Model", model)
    table.add_row("Engine", str(output.get("engine", "")))
    table.add_row("Seed", str(output.get("usedSeed")))
    table.add_row("Finish", str(output.get("finishReason", "")))
    if output.get("width") and output.get("height"):
        table.add_row("Size", f"{output['width']}×{output['height']}")
    table.add_row("SHA-256", f"[dim]{output.get('contentDigest', '')}[/dim]")
    table.add_row("Prompt", f"[dim]{escape(str(request.get('prompt', '')))}[/dim]")
    if request.get("negative_prompt"):
        table.add_row("Negative", f"[dim]{escape(request['negative_prompt'])}[/dim]")

    panel = Panel(
        table,
        title="[bold green]✓ Image Generated[/bold green]",
        border_style="green",
        padding=(1, 2),
    )

    console.print()
    console.print(panel)


def print_models(rows: list[tuple[str, str, str]], default_engine: str) -> None:
    """Print known model names with their engine per API version."""
    table = Table(title="Known models")
    table.add_column("Model", style="cyan")
    table.add_column("API", style="dim")
    table.add_column("Engine", style="white")
    for model, api_version, engine in rows:
        table.add_row(model, api_version, engine)
    console.print(table)
    console.print(f"[dim]Unknown models use the default engine: {default_engine}[/dim]")


def print_error(message: str) -> None:
    """Print an error message in red."""
    console.print(f"[red]✗[/red] {escape(message)}")
