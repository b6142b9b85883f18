"""Nakshatra compatibility tables."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableSpec:
    """Where a table lives on disk and which JSON keys its rows use.

    Male tables are keyed by the female seeker's nakshatra id and list male
    targets; female tables are keyed by the male seeker's id.
    """

    name: str
    filename: str
    source_key: str
    target_key: str


TABLE_SPECS = (
    TableSpec("male_uthamam", "male_matching_uthamam.json", "female_nakshatra_id", "male_nakshatra_id"),
    TableSpec("male_mathimam", "male_matching_mathimam.json", "female_nakshatra_id", "male_nakshatra_id"),
    TableSpec("female_uthamam", "female_matching_uthamam.json", "male_nakshatra_id", "female_nakshatra_id"),
    TableSpec("female_mathimam", "female_matching_mathimam.json", "male_nakshatra_id", "female_nakshatra_id"),
)

_EMPTY_ROW: Mapping[int, float] = MappingProxyType({})


@dataclass(frozen=True)
class CompatibilityTable:
    """Scores per (seeker nakshatra id, target nakshatra id)."""

    name: str
    rows: Mapping[int, Mapping[int, float]] = field(default_factory=lambda: MappingProxyType({}))

    def row(self, source_id: int) -> Mapping[int, float]:
        """Return {target_id: value} for a seeker id, empty when unknown."""
        return self.rows.get(source_id, _EMPTY_ROW)

    def __len__(self) -> int:
        return len(self.rows)


def _as_int(value) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    return None


def parse_table(name: str, rows: list, source_key: str, target_key: str) -> CompatibilityTable:
    """Build a table from raw rows of the form
    {source_key: id, "matching": [{target_key: id, "value": score}, ...]}.

    Malformed rows and entries are skipped. A repeated source id keeps the
    first row, matching a first-match lookup over the raw list.
    """
    parsed: dict[int, Mapping[int, float]] = {}
    skipped = 0

    for raw in rows:
        if not isinstance(raw, dict):
            skipped += 1
            continue
        source_id = _as_int(raw.get(source_key))
        matching = raw.get("matching")
        if source_id is None or not isinstance(matching, list):
            skipped += 1
            continue
        if source_id in parsed:
            continue

        entries: dict[int, float] = {}
        for entry in matching:
            if not isinstance(entry, dict):
                skipped += 1
                continue
            target_id = _as_int(entry.get(target_key))
            value = entry.get("value")
            if target_id is None or isinstance(value, bool) or not isinstance(value, (int, float)):
                skipped += 1
                continue
            if isinstance(value, float):
                if not math.isfinite(value):
                    skipped += 1
                    continue
                # fractional scores are compared as-is, never truncated
                value = int(value) if value.is_integer() else value
            # first entry wins for a repeated target
            entries.setdefault(target_id, value)
        parsed[source_id] = MappingProxyType(entries)

    if skipped:
        logger.warning("Skipped %d malformed entries in %s table", skipped, name)

    return CompatibilityTable(name=name, rows=MappingProxyType(parsed))


@dataclass(frozen=True)
class CompatibilityTableSet:
    """The four compatibility tables, built once and passed to the resolver.

    degraded lists the tables that failed to load and were replaced by
    empty ones.
    """

    male_uthamam: CompatibilityTable
    male_mathimam: CompatibilityTable
    female_uthamam: CompatibilityTable
    female_mathimam: CompatibilityTable
    degraded: tuple[str, ...] = ()

    @classmethod
    def from_tables(cls, tables: Mapping[str, CompatibilityTable], degraded: tuple[str, ...] = ()):
        """Assemble a set from tables keyed by TABLE_SPECS name; missing ones are empty."""
        kwargs = {spec.name: tables.get(spec.name, CompatibilityTable(spec.name)) for spec in TABLE_SPECS}
        return cls(**kwargs, degraded=degraded)

    @classmethod
    def empty(cls) -> CompatibilityTableSet:
        return cls.from_tables({})

    def for_candidates(self, candidate_gender: str) -> tuple[CompatibilityTable, CompatibilityTable]:
        """Return the (uthamam, mathimam) tables whose targets have this gender."""
        if candidate_gender == "Male":
            return self.male_uthamam, self.male_mathimam
        if candidate_gender == "Female":
            return self.female_uthamam, self.female_mathimam
        raise ValueError(f"No compatibility tables for gender: {candidate_gender!r}")

    def tables(self) -> dict[str, CompatibilityTable]:
        return {spec.name: getattr(self, spec.name) for spec in TABLE_SPECS}
