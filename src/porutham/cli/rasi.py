"""Rasi subcommand for checking a single rasi/lagnam pair."""

from __future__ import annotations

import click

from porutham import core

from . import util


@click.command()
@click.argument("male_side")
@click.argument("female_side")
def rasi(male_side: str, female_side: str) -> None:
    """Check whether a male and a female rasi/lagnam are compatible.

    Values are slash-delimited tokens. The order matters: the first argument
    is always the male side.

    \b
    Examples:
      porutham rasi Suth Suth            # compatible
      porutham rasi Sani/Kethu Kethu     # compatible (shared Kethu)
      porutham rasi Suth Sani            # not compatible
    """
    male = core.rasi.parse_rasi(male_side)
    female = core.rasi.parse_rasi(female_side)
    if not male or not female:
        raise click.ClickException("Both rasi values must contain at least one token")

    if core.rasi.is_compatible(male_side=male, female_side=female):
        click.echo(util.C.green(f"Compatible: {male_side} (male) / {female_side} (female)"))
    else:
        click.echo(util.C.red(f"Not compatible: {male_side} (male) / {female_side} (female)"))
        shared = (male & core.rasi.RISK_TOKENS) | (female & core.rasi.RISK_TOKENS)
        if male == {core.rasi.SUTH}:
            click.echo(util.C.dim("A pure Suth male side needs a pure Suth female side"))
        elif shared:
            click.echo(util.C.dim(f"No shared risk token among: {', '.join(sorted(shared))}"))
        else:
            click.echo(util.C.dim("Neither side carries a risk token"))
