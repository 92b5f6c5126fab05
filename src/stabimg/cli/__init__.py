"""
Command-line interface for stabimg.

This package contains CLI implementations using Click.
Uses only the public API: from stabimg import ...
"""

from stabimg.cli.commands import cli


def main() -> None:
    """Entry point for the stabimg console script."""
    cli()


__all__ = ["cli", "main"]
