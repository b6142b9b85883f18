"""Main CLI group and logging setup for porutham."""

from __future__ import annotations

import logging

import click
import colorlog


def setup_logging(verbosity: int) -> None:
    """Configure logging based on verbosity level."""
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = colorlog.StreamHandler()
    handler.setFormatter(
        colorlog.ColoredFormatter(
            "%(log_color)s%(levelname)-8s%(reset)s %(message)s",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "red,bg_white",
            },
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)


@click.group()
@click.version_option(package_name="porutham")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v for INFO, -vv for DEBUG)")
@click.pass_context
def cli(ctx: click.Context, verbose: int) -> None:
    """Nakshatra porutham matching over a profile snapshot."""
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


# import and register subcommands
from . import match as match_module  # noqa: E402
from . import rasi as rasi_module  # noqa: E402
from . import tables as tables_module  # noqa: E402

cli.add_command(match_module.match)
cli.add_command(rasi_module.rasi)
cli.add_command(tables_module.tables)
