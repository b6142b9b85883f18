"""Parameter validators.

Each validator returns on success (some return the parsed value) and raises
ValidationError naming the offending field otherwise. Validators run before
the filter stage that consumes their value.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .errors import ValidationError
from .models import IncomeRange, SearchCriteria

logger = logging.getLogger(__name__)

GENDERS = ("Male", "Female")

# ordered lowest to highest; see filters.QUALIFICATION_HIERARCHY
QUALIFICATIONS = ("School", "Diploma", "UG", "PG", "PHD", "Doctor")

VALID_REGIONS = (
    "Chennai",
    "Chengalpattu",
    "Thiruvallur",
    "Kancheepuram",
    "Vellore",
    "Other Districts in TN",
    "Pondicherry",
    "Andhra Pradesh",
    "Other States in India",
    "Overseas",
    "Others(TN)",
    "Others(IND)",
)

NAKSHATRA_RANGE = (1, 36)
SEEKER_AGE_RANGE = (18, 100)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value == value


def validate_nakshatra_id(nakshatra_id, field: str = "nakshatra_id") -> int:
    """Nakshatra id must be an integer in [1, 36]."""
    low, high = NAKSHATRA_RANGE
    if nakshatra_id is None:
        raise ValidationError(field, "a nakshatra id is required")
    if not _is_int(nakshatra_id) or not low <= nakshatra_id <= high:
        raise ValidationError(field, f"must be an integer between {low} and {high}, got {nakshatra_id!r}")
    return nakshatra_id


def validate_gender(gender, field: str = "gender") -> str:
    if gender not in GENDERS:
        raise ValidationError(field, f"must be one of {', '.join(GENDERS)}, got {gender!r}")
    return gender


def validate_qualification(qualification) -> str:
    if qualification not in QUALIFICATIONS:
        raise ValidationError(
            "qualification",
            f"must be one of {', '.join(QUALIFICATIONS)}, got {qualification!r}",
        )
    return qualification


def validate_regions(regions: Iterable[str]) -> frozenset[str]:
    """All region codes must belong to VALID_REGIONS. An empty set is allowed."""
    if isinstance(regions, str):
        raise ValidationError("regions", "expected a set of region codes, got a single string")
    region_set = frozenset(regions)
    invalid = sorted(r for r in region_set if r not in VALID_REGIONS)
    if invalid:
        raise ValidationError("regions", f"invalid region(s): {', '.join(map(str, invalid))}")
    return region_set


def validate_income_range(income: IncomeRange) -> IncomeRange:
    """Income bounds must be non-negative numbers with minimum <= maximum."""
    for field, value in (("min_income", income.minimum), ("max_income", income.maximum)):
        if value is None:
            continue
        if not _is_number(value) or value < 0:
            raise ValidationError(field, f"must be a non-negative number, got {value!r}")

    if income.minimum is not None and income.maximum is not None and income.minimum > income.maximum:
        raise ValidationError(
            "income",
            f"minimum income ({income.minimum:g}) cannot be greater than maximum income ({income.maximum:g})",
        )
    return income


def validate_seeker_age(seeker_age, field: str = "seeker_age") -> int:
    """Seeker age must be an integer in [18, 100]."""
    low, high = SEEKER_AGE_RANGE
    if not _is_int(seeker_age) or not low <= seeker_age <= high:
        raise ValidationError(field, f"must be an integer between {low} and {high}, got {seeker_age!r}")
    return seeker_age


def validate_age_preference(age_preference) -> int:
    return validate_seeker_age(age_preference, field="age_preference")


def validate_nakshatra_preferences(preferences: Iterable[int]) -> frozenset[int]:
    """Every preferred nakshatra id must be an integer in [1, 36].

    Duplicates are not an error, only logged.
    """
    values = list(preferences)
    for value in values:
        validate_nakshatra_id(value, field="nakshatra_preferences")

    unique = frozenset(values)
    if len(unique) != len(values):
        logger.warning(
            "Duplicate nakshatra ids in preferences: %d given, %d unique",
            len(values),
            len(unique),
        )
    return unique


def validate_seeker_rasi(enable_rasi_compatibility: bool, seeker_rasi: str | None) -> None:
    """Criteria-mode searches with rasi compatibility need the seeker's rasi."""
    if enable_rasi_compatibility and (seeker_rasi is None or not seeker_rasi.strip()):
        raise ValidationError("rasi", "a seeker rasi/lagnam is required when rasi compatibility is enabled")


def validate_seeker_reference(criteria: SearchCriteria) -> None:
    """Profile mode needs an id or serial number; criteria mode needs nakshatra id and gender."""
    if criteria.mode == "profile":
        return
    if criteria.nakshatra_id is None and criteria.gender is None:
        raise ValidationError("seeker", "provide a profile id, a serial number, or a nakshatra id and gender")
    validate_nakshatra_id(criteria.nakshatra_id)
    validate_gender(criteria.gender)
    validate_seeker_rasi(criteria.enable_rasi_compatibility, criteria.rasi)
