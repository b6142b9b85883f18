"""Deterministic ordering of filtered candidates."""

from __future__ import annotations

from collections.abc import Iterable

from .models import MATHIMAM, UTHAMAM, MatchCandidate

TIER_RANK = {UTHAMAM: 1, MATHIMAM: 2}
OTHER_TIER_RANK = 3


def sort_key(candidate: MatchCandidate) -> tuple[int, float, int]:
    """Tier (uthamam first), then porutham (highest first), then nakshatra id."""
    tier = TIER_RANK.get(candidate.matching_source, OTHER_TIER_RANK)
    nakshatra_id = candidate.nakshatra_id if candidate.nakshatra_id is not None else 0
    return tier, -candidate.porutham, nakshatra_id


def rank(candidates: Iterable[MatchCandidate]) -> list[MatchCandidate]:
    """Return candidates in their presentation order.

    sorted() is stable, so candidates equal on all three keys keep their
    input order. Every output channel reuses this order.
    """
    return sorted(candidates, key=sort_key)
