"""Candidate resolution from the nakshatra compatibility tables."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .models import MATHIMAM, UTHAMAM, MatchCandidate, Profile
from .tables import CompatibilityTableSet

logger = logging.getLogger(__name__)

# a score only qualifies when strictly greater than this
PORUTHAM_THRESHOLD = 3


def opposite_gender(gender: str | None) -> str | None:
    """Return the gender a seeker is matched against, None if unknown."""
    if gender == "Male":
        return "Female"
    if gender == "Female":
        return "Male"
    return None


def build_porutham_map(
    tables: CompatibilityTableSet,
    seeker_nakshatra_id: int,
    seeker_gender: str,
    include_mathimam: bool = False,
) -> dict[int, tuple[float, str]]:
    """Map candidate nakshatra id -> (porutham, tier) for a seeker.

    Uthamam entries are collected first; mathimam entries only fill ids that
    uthamam did not already claim.
    """
    candidate_gender = opposite_gender(seeker_gender)
    if candidate_gender is None:
        return {}

    uthamam, mathimam = tables.for_candidates(candidate_gender)

    poruthams: dict[int, tuple[float, str]] = {}
    for target_id, value in uthamam.row(seeker_nakshatra_id).items():
        if value > PORUTHAM_THRESHOLD:
            poruthams[target_id] = (value, UTHAMAM)

    if include_mathimam:
        for target_id, value in mathimam.row(seeker_nakshatra_id).items():
            if value > PORUTHAM_THRESHOLD and target_id not in poruthams:
                poruthams[target_id] = (value, MATHIMAM)

    return poruthams


def resolve_candidates(
    profiles: Iterable[Profile],
    tables: CompatibilityTableSet,
    seeker_nakshatra_id: int,
    seeker_gender: str,
    include_mathimam: bool = False,
) -> list[MatchCandidate]:
    """Return every opposite-gender profile whose nakshatra scores above threshold.

    An unknown seeker nakshatra id simply yields no candidates.
    """
    candidate_gender = opposite_gender(seeker_gender)
    if candidate_gender is None:
        logger.warning("Unknown seeker gender %r, no candidates resolved", seeker_gender)
        return []

    poruthams = build_porutham_map(tables, seeker_nakshatra_id, seeker_gender, include_mathimam)

    candidates = []
    pool = 0
    for profile in profiles:
        if profile.gender != candidate_gender:
            continue
        pool += 1
        match = poruthams.get(profile.nakshatra_id) if profile.nakshatra_id is not None else None
        if match is None:
            continue
        value, source = match
        candidates.append(MatchCandidate(profile=profile, porutham=value, matching_source=source))

    logger.debug(
        "Resolved %d of %d %s profiles for nakshatra %s (%d qualifying stars, mathimam=%s)",
        len(candidates),
        pool,
        candidate_gender.lower(),
        seeker_nakshatra_id,
        len(poruthams),
        include_mathimam,
    )
    return candidates
