"""CLI entry point for porutham."""

from . import cli as cli_module


def run() -> None:
    """Entry point for the porutham CLI."""
    cli_module.cli()
