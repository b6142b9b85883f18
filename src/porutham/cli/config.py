"""Configuration loading and data access for the porutham CLI."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from porutham.core.models import Profile
from porutham.core.rasi import parse_rasi
from porutham.core.tables import TABLE_SPECS, CompatibilityTable, CompatibilityTableSet, parse_table

from . import util

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "porutham.yml"
DEFAULT_DATA_DIR = "data"
DEFAULT_PROFILES = "profiles.json"
DEFAULT_CACHE_TTL = 1.0


@dataclass
class Settings:
    """Resolved data locations and cache settings."""

    data_dir: Path
    profiles: Path
    tables: dict[str, Path] = field(default_factory=dict)
    cache_ttl: float = DEFAULT_CACHE_TTL

    def table_path(self, name: str) -> Path:
        return self.tables[name]


def default_settings(base_dir: Path) -> Settings:
    """Settings for a data directory laid out with the default file names."""
    return parse_settings_from_data({}, base_dir)


def parse_settings_from_data(data: dict | None, base_dir: Path) -> Settings:
    """Parse settings from loaded YAML data.

    Relative data_dir is resolved against base_dir; relative profile and
    table paths against data_dir.
    """
    data = data or {}

    data_dir = Path(data.get("data_dir") or DEFAULT_DATA_DIR)
    if not data_dir.is_absolute():
        data_dir = base_dir / data_dir

    profiles = Path(data.get("profiles") or DEFAULT_PROFILES)
    if not profiles.is_absolute():
        profiles = data_dir / profiles

    configured = data.get("tables") or {}
    unknown = set(configured) - {spec.name for spec in TABLE_SPECS}
    if unknown:
        raise ValueError(f"Unknown table(s) in config: {', '.join(sorted(unknown))}")

    tables = {}
    for spec in TABLE_SPECS:
        path = Path(configured.get(spec.name) or spec.filename)
        tables[spec.name] = path if path.is_absolute() else data_dir / path

    cache_ttl = data.get("cache_ttl", DEFAULT_CACHE_TTL)
    if isinstance(cache_ttl, bool) or not isinstance(cache_ttl, (int, float)) or cache_ttl < 0:
        raise ValueError(f"Invalid cache_ttl: {cache_ttl!r} (must be a non-negative number of seconds)")

    return Settings(data_dir=data_dir, profiles=profiles, tables=tables, cache_ttl=float(cache_ttl))


def load_settings(yaml_path: Path) -> Settings:
    """Load settings from a porutham.yml file."""
    with open(yaml_path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is not None and not isinstance(data, dict):
        raise ValueError(f"Invalid config file {yaml_path}: expected a mapping")

    return parse_settings_from_data(data, yaml_path.parent)


def find_config(start: Path) -> Path | None:
    """Find porutham.yml in start or any of its parents."""
    current = start.resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if current == current.parent:
            return None
        current = current.parent


def resolve_settings(
    cfg: Path | None = None,
    data_dir: Path | None = None,
    profiles: Path | None = None,
) -> Settings:
    """Settings from an explicit config, a discovered porutham.yml, or defaults.

    data_dir and profiles override whatever the config says.
    """
    if cfg is not None:
        settings = load_settings(cfg)
    else:
        found = find_config(Path.cwd())
        if found is not None:
            logger.info("Using config %s", found)
            settings = load_settings(found)
        else:
            settings = default_settings(Path.cwd())

    if data_dir is not None:
        # re-root table files that were under the old data directory
        settings.tables = {
            name: data_dir / path.relative_to(settings.data_dir) if path.is_relative_to(settings.data_dir) else path
            for name, path in settings.tables.items()
        }
        if settings.profiles.is_relative_to(settings.data_dir):
            settings.profiles = data_dir / settings.profiles.relative_to(settings.data_dir)
        settings.data_dir = data_dir
    if profiles is not None:
        settings.profiles = profiles

    return settings


def _read_json_list(path: Path, description: str) -> list:
    """Read a JSON file whose top-level value is an array."""
    if not path.is_file():
        raise FileNotFoundError(f"{description} file not found: {path}")

    content = path.read_text(encoding="utf-8")
    if not content.strip():
        raise ValueError(f"{description} file is empty: {path}")

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ValueError(f"{description} file contains invalid JSON: {path}") from e

    if not isinstance(data, list):
        raise ValueError(f"{description} file does not contain a JSON array: {path}")
    return data


def load_table(path: Path, name: str) -> CompatibilityTable | None:
    """Load one compatibility table, or None when the file is unusable."""
    spec = next(s for s in TABLE_SPECS if s.name == name)
    try:
        rows = _read_json_list(path, f"{name} table")
    except (OSError, ValueError) as e:
        logger.error("Failed to load %s table, using an empty table: %s", name, e)
        return None

    table = parse_table(name, rows, spec.source_key, spec.target_key)
    logger.debug("Loaded %s table with %d rows from %s", name, len(table), path)
    return table


def load_table_set(settings: Settings) -> CompatibilityTableSet:
    """Load all four tables; any that fail are empty and listed as degraded."""
    tables = {}
    degraded = []
    for spec in TABLE_SPECS:
        table = load_table(settings.table_path(spec.name), spec.name)
        if table is None:
            degraded.append(spec.name)
        else:
            tables[spec.name] = table
    return CompatibilityTableSet.from_tables(tables, degraded=tuple(degraded))


def _text(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


def parse_profile(raw: dict) -> Profile | None:
    """Normalize a raw profile record into a Profile.

    Loose encodings are resolved here: remarried flags like 'yes' or 1,
    string nakshatra ids and incomes, slash-delimited rasi. Records without
    an id are skipped.
    """
    profile_id = _text(raw.get("id"))
    if not profile_id:
        return None

    return Profile(
        id=profile_id,
        serial_no=_text(raw.get("serial_no")),
        name=_text(raw.get("name")),
        gender=_text(raw.get("gender")),
        nakshatra_id=util.parse_int(raw.get("nakshatraid")),
        rasi_lagnam=parse_rasi(raw.get("rasi_lagnam") if isinstance(raw.get("rasi_lagnam"), str) else None),
        gothram=_text(raw.get("gothram")),
        birth_date=_text(raw.get("birth_date")) or None,
        region=_text(raw.get("region")) or None,
        qualification=_text(raw.get("qualification")) or None,
        monthly_income=util.parse_float(raw.get("monthly_income")),
        is_remarried=util.parse_bool(raw.get("is_remarried")),
    )


def load_profiles(path: Path) -> list[Profile]:
    """Load and normalize profiles from a JSON array file."""
    records = _read_json_list(path, "Profiles")

    profiles = []
    skipped = 0
    for raw in records:
        profile = parse_profile(raw) if isinstance(raw, dict) else None
        if profile is None:
            skipped += 1
            continue
        profiles.append(profile)

    if skipped:
        logger.warning("Skipped %d profile records without an id", skipped)
    return profiles


class ProfileStore:
    """Read-through cache of the profile snapshot.

    get_all() reloads from disk once the snapshot is older than ttl seconds.
    A failed load returns the last good snapshot (or an empty list) instead of
    raising. reload() drops the snapshot so the next read goes to disk.
    """

    def __init__(self, path: Path, ttl: float = DEFAULT_CACHE_TTL, clock: Callable[[], float] = time.monotonic):
        self.path = path
        self.ttl = ttl
        self._clock = clock
        self._snapshot: list[Profile] | None = None
        self._loaded_at = 0.0
        self._last_good: list[Profile] = []

    def get_all(self) -> list[Profile]:
        now = self._clock()
        if self._snapshot is not None and now - self._loaded_at < self.ttl:
            return self._snapshot

        try:
            profiles = load_profiles(self.path)
        except (OSError, ValueError) as e:
            logger.error(
                "Failed to load profiles, using %d cached profiles: %s",
                len(self._last_good),
                e,
            )
            return self._last_good

        self._snapshot = profiles
        self._last_good = profiles
        self._loaded_at = now
        logger.debug("Loaded %d profiles from %s", len(profiles), self.path)
        return profiles

    def reload(self) -> None:
        self._snapshot = None
