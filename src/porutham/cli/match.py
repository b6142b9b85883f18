"""Match subcommand: resolve, filter and rank candidates for a seeker."""

from __future__ import annotations

import json
from pathlib import Path

import click
import yaml

from porutham import core
from porutham.core.models import IncomeRange, MatchCandidate, SearchCriteria

from . import config, util

TIER_LABELS = {"uthamam": "Uthamam", "mathimam": "Mathimam"}


def build_criteria(
    serial: str | None,
    profile_id: str | None,
    nakshatra: int | None,
    gender: str | None,
    mathimam: bool,
    remarried: bool,
    rasi_compat: bool,
    exact_qualification: bool,
    age: int | None,
    age_preference: int | None,
    qualification: str | None,
    regions: tuple[str, ...],
    min_income: str | None,
    max_income: str | None,
    prefer: tuple[str, ...],
    gothram: str | None,
    rasi: str | None,
) -> SearchCriteria:
    """Normalize command line input into canonical search criteria.

    Raises ValueError for input that cannot be parsed at all; range and
    membership checks are left to the core validators.
    """
    if (serial or profile_id) and (nakshatra is not None or gender):
        raise ValueError("Use either --serial/--profile-id or --nakshatra/--gender, not both")

    income = None
    if min_income or max_income:
        minimum = util.parse_float(min_income) if min_income else None
        maximum = util.parse_float(max_income) if max_income else None
        if min_income and minimum is None:
            raise ValueError(f"Invalid minimum income: '{min_income}'")
        if max_income and maximum is None:
            raise ValueError(f"Invalid maximum income: '{max_income}'")
        income = IncomeRange(minimum=minimum, maximum=maximum)

    return SearchCriteria(
        profile_id=profile_id or None,
        serial_no=serial or None,
        nakshatra_id=nakshatra,
        gender=gender.strip().capitalize() if gender else None,
        include_mathimam=mathimam,
        include_remarried=remarried,
        enable_rasi_compatibility=rasi_compat,
        exact_qualification=exact_qualification,
        seeker_age=age,
        age_preference=age_preference,
        qualification=qualification.strip() if qualification and qualification.strip() else None,
        regions=util.parse_csv_values(regions),
        income=income,
        nakshatra_preferences=util.parse_nakshatra_preferences(prefer),
        gothram=gothram,
        rasi=rasi,
    )


def candidate_to_dict(candidate: MatchCandidate) -> dict:
    """Flatten a candidate for YAML/JSON output."""
    profile = candidate.profile
    return {
        "id": profile.id,
        "serial_no": profile.serial_no,
        "name": profile.name,
        "gender": profile.gender,
        "nakshatra_id": profile.nakshatra_id,
        "porutham": candidate.porutham,
        "matching_source": candidate.matching_source,
        "age": candidate.age,
        "gothram": profile.gothram,
        "rasi_lagnam": "/".join(sorted(profile.rasi_lagnam)),
        "qualification": profile.qualification,
        "region": profile.region,
        "monthly_income": profile.monthly_income,
        "is_remarried": profile.is_remarried,
    }


def print_table(matches: list[MatchCandidate]) -> None:
    """Print formatted table of ranked matches."""
    if not matches:
        click.echo(util.C.yellow("No matches found."))
        return

    max_serial = max(max(len(m.profile.serial_no) for m in matches), 6)
    max_name = min(max(max(len(m.profile.name) for m in matches), 4), 30)

    header = (
        f"{'#':>3}  "
        f"{'Serial':<{max_serial}}  "
        f"{'Name':<{max_name}}  "
        f"{'Star':>4}  "
        f"{'Tier':<8}  "
        f"{'Score':>5}  "
        f"{'Age':>3}  "
        f"{'Qual':<7}  "
        f"{'Income':>9}  "
        f"Region"
    )
    click.echo(util.C.bold(header))
    click.echo(util.C.dim("-" * (len(header) + 12)))

    for position, m in enumerate(matches, start=1):
        profile = m.profile
        tier = TIER_LABELS.get(m.matching_source, m.matching_source)
        star = str(profile.nakshatra_id) if profile.nakshatra_id is not None else "?"
        age = str(m.age) if m.age is not None else "N/A"
        row = (
            f"{position:>3}  "
            f"{profile.serial_no:<{max_serial}}  "
            f"{profile.name[:max_name]:<{max_name}}  "
            f"{star:>4}  "
            f"{tier:<8}  "
            f"{m.porutham:>5}  "
            f"{age:>3}  "
            f"{profile.qualification or 'N/A':<7}  "
            f"{util.format_income(profile.monthly_income):>9}  "
            f"{profile.region or 'N/A'}"
        )
        if m.matching_source == "uthamam":
            click.echo(util.C.green(row))
        else:
            click.echo(row)

    click.echo()
    uthamam = sum(1 for m in matches if m.matching_source == "uthamam")
    click.echo(util.C.dim(f"Total: {len(matches)} matches ({uthamam} uthamam, {len(matches) - uthamam} mathimam)"))


def print_yaml(matches: list[MatchCandidate]) -> None:
    """Print ranked matches as a YAML list."""
    if not matches:
        click.echo(util.C.yellow("No matches found."))
        return
    click.echo(yaml.safe_dump([candidate_to_dict(m) for m in matches], sort_keys=False, allow_unicode=True), nl=False)


def print_json(matches: list[MatchCandidate]) -> None:
    """Print ranked matches as a JSON array (empty array when none)."""
    click.echo(json.dumps([candidate_to_dict(m) for m in matches], indent=2, ensure_ascii=False))


@click.command()
@click.option("--serial", help="Seeker's registered serial number")
@click.option("--profile-id", help="Seeker's registered profile id")
@click.option("--nakshatra", type=int, help="Seeker's nakshatra id (1-36), with --gender")
@click.option("--gender", help="Seeker's gender (Male/Female), with --nakshatra")
@click.option("--mathimam", is_flag=True, help="Include mathimam (second tier) matches")
@click.option("--remarried", is_flag=True, help="Include remarried candidates")
@click.option("--rasi-compat", is_flag=True, help="Only keep rasi/lagnam compatible candidates")
@click.option("--exact-qualification", is_flag=True, help="Match the qualification exactly instead of 'or higher'")
@click.option("--age", type=int, help="Seeker's age (defaults to the profile's age in serial mode)")
@click.option("--age-preference", type=int, help="Youngest (male seeker) or oldest (female seeker) candidate age")
@click.option("--qualification", help="School, Diploma, UG, PG, PHD or Doctor")
@click.option(
    "--region",
    "regions",
    multiple=True,
    help="Region to include. Can be specified multiple times or comma-separated.",
)
@click.option("--min-income", metavar="AMOUNT", help="Minimum monthly income")
@click.option("--max-income", metavar="AMOUNT", help="Maximum monthly income")
@click.option(
    "--prefer",
    multiple=True,
    metavar="NAKSHATRA",
    help="Preferred candidate nakshatra id. Can be specified multiple times or comma-separated.",
)
@click.option("--gothram", help="Seeker's gothram (nakshatra mode; serial mode uses the profile's)")
@click.option("--rasi", help="Seeker's rasi/lagnam, e.g. 'Sani/Kethu' (nakshatra mode)")
@click.option(
    "-o",
    "--output",
    type=click.Choice(["list", "yaml", "json"]),
    default="list",
    help="Output format: list (table), yaml or json",
)
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
    help="Directory holding the profile and compatibility table files",
)
@click.option(
    "--profiles",
    "profiles_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Profiles JSON file (overrides config)",
)
def match(
    serial: str | None,
    profile_id: str | None,
    nakshatra: int | None,
    gender: str | None,
    mathimam: bool,
    remarried: bool,
    rasi_compat: bool,
    exact_qualification: bool,
    age: int | None,
    age_preference: int | None,
    qualification: str | None,
    regions: tuple[str, ...],
    min_income: str | None,
    max_income: str | None,
    prefer: tuple[str, ...],
    gothram: str | None,
    rasi: str | None,
    output: str,
    cfg: Path | None,
    data_dir: Path | None,
    profiles_path: Path | None,
) -> None:
    """Find ranked porutham matches for a seeker.

    \b
    Examples:
      porutham match --serial A102                        # Registered seeker
      porutham match --serial A102 --mathimam             # Include second tier
      porutham match --nakshatra 5 --gender Male --gothram Kashyapa --age 30
      porutham match --serial A102 --region Chennai,Vellore --qualification UG
      porutham match --serial A102 --min-income 30000 -o json
    """
    try:
        criteria = build_criteria(
            serial,
            profile_id,
            nakshatra,
            gender,
            mathimam,
            remarried,
            rasi_compat,
            exact_qualification,
            age,
            age_preference,
            qualification,
            regions,
            min_income,
            max_income,
            prefer,
            gothram,
            rasi,
        )
        settings = config.resolve_settings(cfg, data_dir, profiles_path)
    except ValueError as e:
        raise click.ClickException(str(e)) from None

    store = config.ProfileStore(settings.profiles, ttl=settings.cache_ttl)
    profiles = store.get_all()
    if not profiles:
        raise click.ClickException(f"No profiles are available for matching ({settings.profiles})")

    tables = config.load_table_set(settings)
    if tables.degraded:
        click.echo(util.C.yellow(f"Warning: missing compatibility tables: {', '.join(tables.degraded)}"), err=True)

    try:
        matches = core.orchestrator.find_matches(profiles, tables, criteria)
    except core.errors.MatchingError as e:
        raise click.ClickException(str(e)) from None

    if output == "json":
        print_json(matches)
    elif output == "yaml":
        print_yaml(matches)
    else:
        print_table(matches)
