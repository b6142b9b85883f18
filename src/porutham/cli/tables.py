"""Tables subcommand for inspecting the loaded compatibility tables."""

from __future__ import annotations

from pathlib import Path

import click

from porutham import core

from . import config, util


def summarize_table(table: core.tables.CompatibilityTable) -> dict:
    """Count rows and qualifying entries, and collect the qualifying score range."""
    qualifying = [
        value for row in table.rows.values() for value in row.values() if value > core.resolver.PORUTHAM_THRESHOLD
    ]
    return {
        "name": table.name,
        "rows": len(table),
        "entries": sum(len(row) for row in table.rows.values()),
        "qualifying": len(qualifying),
        "scores": util.format_range(qualifying),
    }


@click.command()
@click.option(
    "-c",
    "--config",
    "cfg",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to porutham.yml (default: nearest porutham.yml upwards)",
)
@click.option(
    "--data-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Directory holding the compatibility table files",
)
@click.option("--star", type=int, help="Show the qualifying entries of every table for this seeker nakshatra id")
def tables(cfg: Path | None, data_dir: Path | None, star: int | None) -> None:
    """Summarize the compatibility tables.

    \b
    Examples:
      porutham tables                    # Row and score counts per table
      porutham tables --star 5           # Qualifying targets for nakshatra 5
    """
    try:
        settings = config.resolve_settings(cfg, data_dir)
        if star is not None:
            core.validation.validate_nakshatra_id(star, field="star")
    except (ValueError, core.errors.ValidationError) as e:
        raise click.ClickException(str(e)) from None

    table_set = config.load_table_set(settings)

    header = f"{'Table':<16}  {'Rows':>4}  {'Entries':>7}  {'Qualifying':>10}  Scores"
    click.echo(util.C.bold(header))
    click.echo(util.C.dim("-" * (len(header) + 4)))
    for table in table_set.tables().values():
        summary = summarize_table(table)
        line = (
            f"{summary['name']:<16}  {summary['rows']:>4}  {summary['entries']:>7}  "
            f"{summary['qualifying']:>10}  {summary['scores']}"
        )
        if table.name in table_set.degraded:
            click.echo(util.C.red(f"{line}  (failed to load)"))
        else:
            click.echo(line)

    if star is None:
        return

    click.echo()
    for table in table_set.tables().values():
        row = table.row(star)
        qualifying = {t: v for t, v in sorted(row.items()) if v > core.resolver.PORUTHAM_THRESHOLD}
        entries = ", ".join(f"{t}={v}" for t, v in qualifying.items()) or util.C.dim("none")
        click.echo(f"{util.C.cyan(table.name)}: {entries}")
