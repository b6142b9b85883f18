"""Entry points that wire a seeker to the resolver, filters and ranking."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date

from . import filters, ranking, rasi, resolver, validation
from .errors import NotFoundError
from .models import MatchCandidate, Profile, SearchCriteria
from .tables import CompatibilityTableSet

logger = logging.getLogger(__name__)


def find_profile(
    profiles: Sequence[Profile],
    profile_id: str | int | None = None,
    serial_no: str | None = None,
) -> Profile:
    """Look up a profile by id, or by serial number (trimmed, case-insensitive).

    Raises NotFoundError when no profile matches.
    """
    if profile_id is not None and str(profile_id).strip():
        wanted = str(profile_id).strip()
        for profile in profiles:
            if profile.id == wanted:
                return profile
        raise NotFoundError(f"id {wanted}")

    if serial_no is not None and serial_no.strip():
        wanted = serial_no.strip().lower()
        for profile in profiles:
            if profile.serial_no and profile.serial_no.strip().lower() == wanted:
                return profile
        raise NotFoundError(f"serial number {serial_no.strip()}")

    raise NotFoundError("no profile id or serial number given")


def resolve_by_profile(
    profiles: Sequence[Profile],
    tables: CompatibilityTableSet,
    profile_id: str | int | None,
    include_mathimam: bool = False,
    serial_no: str | None = None,
) -> list[MatchCandidate]:
    """Resolve candidates for a registered seeker, matched against the opposite gender."""
    seeker = find_profile(profiles, profile_id, serial_no)
    return _resolve_for_seeker(profiles, tables, seeker, include_mathimam)


def _resolve_for_seeker(
    profiles: Sequence[Profile],
    tables: CompatibilityTableSet,
    seeker: Profile,
    include_mathimam: bool,
) -> list[MatchCandidate]:
    if seeker.nakshatra_id is None:
        logger.warning("Seeker profile %s has no valid nakshatra id", seeker.id)
        return []

    logger.info(
        "Matching profile %s (%s, nakshatra %d, mathimam=%s)",
        seeker.serial_no or seeker.id,
        seeker.gender,
        seeker.nakshatra_id,
        include_mathimam,
    )
    return resolver.resolve_candidates(profiles, tables, seeker.nakshatra_id, seeker.gender, include_mathimam)


def resolve_by_criteria(
    profiles: Sequence[Profile],
    tables: CompatibilityTableSet,
    nakshatra_id: int | None,
    gender: str | None,
    include_mathimam: bool = False,
    seeker_rasi: str | None = None,
    enable_rasi_compatibility: bool = False,
) -> list[MatchCandidate]:
    """Resolve candidates for an explicit nakshatra + gender seeker.

    With rasi compatibility enabled, the explicit seeker rasi screens the
    pool here, since there is no seeker profile for the rasi filter stage.
    """
    validation.validate_nakshatra_id(nakshatra_id)
    validation.validate_gender(gender)
    validation.validate_seeker_rasi(enable_rasi_compatibility, seeker_rasi)

    logger.info("Matching nakshatra %d (%s, mathimam=%s)", nakshatra_id, gender, include_mathimam)
    candidates = resolver.resolve_candidates(profiles, tables, nakshatra_id, gender, include_mathimam)

    if not enable_rasi_compatibility:
        return candidates

    seeker_tokens = rasi.parse_rasi(seeker_rasi)
    screened = []
    for candidate in candidates:
        if not candidate.rasi_lagnam:
            continue
        try:
            if rasi.is_pair_compatible(gender, seeker_tokens, candidate.rasi_lagnam):
                screened.append(candidate)
        except Exception as e:
            logger.warning("Rasi check failed for profile %s, excluding it: %s", candidate.id, e)

    logger.debug("Rasi screen: %d -> %d candidates", len(candidates), len(screened))
    return screened


def resolve_with_seeker(
    profiles: Sequence[Profile],
    tables: CompatibilityTableSet,
    criteria: SearchCriteria,
) -> tuple[list[MatchCandidate], Profile | None]:
    """Resolve the unfiltered pool for a search, along with the seeker.

    Returns (candidates, seeker profile). The seeker profile is None for
    explicit nakshatra + gender searches.
    """
    validation.validate_seeker_reference(criteria)

    if criteria.mode == "profile":
        seeker = find_profile(profiles, criteria.profile_id, criteria.serial_no)
        return _resolve_for_seeker(profiles, tables, seeker, criteria.include_mathimam), seeker

    candidates = resolve_by_criteria(
        profiles,
        tables,
        criteria.nakshatra_id,
        criteria.gender,
        include_mathimam=criteria.include_mathimam,
        seeker_rasi=criteria.rasi,
        enable_rasi_compatibility=criteria.enable_rasi_compatibility,
    )
    return candidates, None


def resolve_matches(
    profiles: Sequence[Profile],
    tables: CompatibilityTableSet,
    criteria: SearchCriteria,
) -> list[MatchCandidate]:
    """Resolve the unfiltered, unranked candidate pool for a search."""
    candidates, _seeker = resolve_with_seeker(profiles, tables, criteria)
    return candidates


def find_matches(
    profiles: Sequence[Profile],
    tables: CompatibilityTableSet,
    criteria: SearchCriteria,
    today: date | None = None,
) -> list[MatchCandidate]:
    """Resolve, filter and rank in one call. An empty list means no matches."""
    candidates, seeker = resolve_with_seeker(profiles, tables, criteria)
    if not candidates:
        logger.info("No candidates resolved for %s search", criteria.mode)
        return []

    filtered = filters.apply_filters(candidates, criteria, seeker=seeker, today=today)
    return ranking.rank(filtered)
