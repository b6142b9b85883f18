"""Shared pytest fixtures for porutham tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from porutham.core.models import MatchCandidate, Profile
from porutham.core.tables import TABLE_SPECS, CompatibilityTableSet, parse_table

# compatibility tables covering both lookup directions. Female tables are
# keyed by the male seeker's star, male tables by the female seeker's star.
SAMPLE_TABLES = {
    "female_uthamam": [
        {
            "male_nakshatra_id": 5,
            "matching": [
                {"female_nakshatra_id": 2, "value": 8},
                {"female_nakshatra_id": 7, "value": 9},
                {"female_nakshatra_id": 9, "value": 3},  # at threshold, never qualifies
                {"female_nakshatra_id": 12, "value": 4},
            ],
        },
        {"male_nakshatra_id": 10, "matching": [{"female_nakshatra_id": 3, "value": 6}]},
    ],
    "female_mathimam": [
        {
            "male_nakshatra_id": 5,
            "matching": [
                {"female_nakshatra_id": 2, "value": 5},  # also uthamam, uthamam wins
                {"female_nakshatra_id": 14, "value": 7},
                {"female_nakshatra_id": 15, "value": 2},
            ],
        },
    ],
    "male_uthamam": [
        {
            "female_nakshatra_id": 2,
            "matching": [
                {"male_nakshatra_id": 5, "value": 8},
                {"male_nakshatra_id": 6, "value": 4},
            ],
        },
    ],
    "male_mathimam": [
        {
            "female_nakshatra_id": 2,
            "matching": [
                {"male_nakshatra_id": 11, "value": 6},
                {"male_nakshatra_id": 5, "value": 9},
            ],
        },
    ],
}

# raw profile records as stored on disk, including the loose encodings the
# loader must normalize (string ids, 'yes' flags, string and null incomes)
SAMPLE_PROFILES = [
    {
        "id": 1,
        "serial_no": "A101",
        "name": "Arun",
        "gender": "Male",
        "nakshatraid": "5",
        "gothram": "Bharadwaja",
        "birth_date": "1990-01-01",
        "rasi_lagnam": "Sani/Kethu",
        "qualification": "PG",
        "region": "Chennai",
        "monthly_income": 90000,
        "is_remarried": "false",
    },
    {
        "id": 2,
        "serial_no": "A102",
        "name": "Bhavani",
        "gender": "Female",
        "nakshatraid": "2",
        "gothram": "Kashyapa",
        "birth_date": "1995-06-15",
        "rasi_lagnam": "Kethu/Raghu",
        "qualification": "UG",
        "region": "Chennai",
        "monthly_income": "40000",
        "is_remarried": False,
    },
    {
        "id": 3,
        "serial_no": "A103",
        "name": "Chitra",
        "gender": "Female",
        "nakshatraid": "7",
        "gothram": " bharadwaja ",
        "birth_date": "1994-02-02",
        "rasi_lagnam": "Sani",
        "qualification": "PG",
        "region": "Vellore",
        "monthly_income": 70000,
        "is_remarried": False,
    },
    {
        "id": 4,
        "serial_no": "A104",
        "name": "Deepa",
        "gender": "Female",
        "nakshatraid": "12",
        "gothram": "",
        "birth_date": "1997-09-09",
        "rasi_lagnam": "Suth",
        "qualification": "School",
        "region": "Overseas",
        "monthly_income": None,
        "is_remarried": False,
    },
    {
        "id": 5,
        "serial_no": "A105",
        "name": "Eswari",
        "gender": "Female",
        "nakshatraid": "14",
        "gothram": "Vasishta",
        "birth_date": "1996-12-12",
        "rasi_lagnam": "Sevai/Sani",
        "qualification": "Doctor",
        "region": "Chennai",
        "monthly_income": "65000",
        "is_remarried": "yes",
    },
    {
        "id": 6,
        "serial_no": "A106",
        "name": "Fathima",
        "gender": "Female",
        "nakshatraid": "9",
        "gothram": "Atri",
        "birth_date": "1995-05-05",
        "rasi_lagnam": "Kethu",
        "qualification": "UG",
        "region": "Chennai",
        "monthly_income": 30000,
        "is_remarried": False,
    },
    {
        "id": 7,
        "serial_no": "A107",
        "name": "Gayathri",
        "gender": "Female",
        "nakshatraid": "2",
        "gothram": "Atri",
        "birth_date": "1993-04-04",
        "rasi_lagnam": "Raghu",
        "qualification": "PHD",
        "region": "Chengalpattu",
        "monthly_income": 120000,
        "is_remarried": False,
    },
    {
        "id": 20,
        "serial_no": "B201",
        "name": "Hema",
        "gender": "Female",
        "nakshatraid": "2",
        "gothram": "Kashyapa",
        "birth_date": "1996-03-10",
        "rasi_lagnam": "Kethu",
        "qualification": "UG",
        "region": "Chennai",
        "monthly_income": 45000,
        "is_remarried": 0,
    },
    {
        "id": 21,
        "serial_no": "B202",
        "name": "Ilango",
        "gender": "Male",
        "nakshatraid": "5",
        "gothram": "Kashyapa",
        "birth_date": "1988-05-05",
        "rasi_lagnam": "Kethu/Sani",
        "qualification": "PG",
        "region": "Chennai",
        "monthly_income": 80000,
        "is_remarried": False,
    },
    {
        "id": 22,
        "serial_no": "B203",
        "name": "Jagan",
        "gender": "Male",
        "nakshatraid": "11",
        "gothram": "Atri",
        "birth_date": "1985-01-20",
        "rasi_lagnam": "Suth",
        "qualification": "UG",
        "region": "Vellore",
        "monthly_income": 50000,
        "is_remarried": False,
    },
    {
        "id": 23,
        "serial_no": "B204",
        "name": "Karthik",
        "gender": "Male",
        "nakshatraid": "6",
        "gothram": "Gautama",
        "birth_date": "1992-07-07",
        "rasi_lagnam": "Sevai",
        "qualification": "UG",
        "region": "Chennai",
        "monthly_income": "",
        "is_remarried": False,
    },
]


@pytest.fixture
def sample_tables() -> CompatibilityTableSet:
    """Build the sample table set directly, without touching disk."""
    built = {
        spec.name: parse_table(spec.name, SAMPLE_TABLES[spec.name], spec.source_key, spec.target_key)
        for spec in TABLE_SPECS
    }
    return CompatibilityTableSet.from_tables(built)


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Write sample profiles and tables into a data directory and return it."""
    directory = tmp_path / "data"
    directory.mkdir()
    (directory / "profiles.json").write_text(json.dumps(SAMPLE_PROFILES))
    for spec in TABLE_SPECS:
        (directory / spec.filename).write_text(json.dumps(SAMPLE_TABLES[spec.name]))
    return directory


@pytest.fixture
def config_path(tmp_path: Path, data_dir: Path) -> Path:
    """Create a porutham.yml pointing at the sample data directory."""
    config = tmp_path / "porutham.yml"
    config.write_text("""\
data_dir: data
profiles: profiles.json
cache_ttl: 0.5
""")
    return config


@pytest.fixture
def sample_profiles(data_dir: Path) -> list[Profile]:
    """Load the sample profiles through the real loader."""
    from porutham.cli.config import load_profiles

    return load_profiles(data_dir / "profiles.json")


@pytest.fixture
def in_tmp_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run with the working directory set to tmp_path."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def make_profile():
    """Factory for profiles with sensible defaults."""

    def _make(**overrides) -> Profile:
        values = {
            "id": "p1",
            "gender": "Female",
            "nakshatra_id": 2,
            "serial_no": "S1",
            "gothram": "Atri",
            "birth_date": "1995-01-01",
        }
        values.update(overrides)
        return Profile(**values)

    return _make


@pytest.fixture
def make_candidate(make_profile):
    """Factory for match candidates; profile fields pass through to make_profile."""

    def _make(porutham: int = 8, matching_source: str = "uthamam", age: int | None = None, **profile_fields):
        return MatchCandidate(
            profile=make_profile(**profile_fields),
            porutham=porutham,
            matching_source=matching_source,
            age=age,
        )

    return _make
