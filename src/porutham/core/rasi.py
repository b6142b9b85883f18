"""Rasi/lagnam compatibility rules."""

from __future__ import annotations

from collections.abc import Iterable

SUTH = "Suth"
RISK_TOKENS = frozenset({"Sani", "Sevai", "Kethu", "Raghu"})


def parse_rasi(value: str | Iterable[str] | None) -> frozenset[str]:
    """Split a rasi/lagnam value into its tokens.

    e.g., 'Sani/Kethu' -> {'Sani', 'Kethu'}. Already-split iterables are
    stripped the same way; blank tokens are dropped.
    """
    if value is None:
        return frozenset()
    parts = value.split("/") if isinstance(value, str) else value
    return frozenset(p.strip() for p in parts if p and p.strip())


def is_compatible(*, male_side: str | Iterable[str], female_side: str | Iterable[str]) -> bool:
    """Check a rasi pair. Sides are keyword-only so callers name which is which.

    - male side exactly 'Suth' -> female side must be exactly 'Suth'
    - otherwise the risk tokens (Sani, Sevai, Kethu, Raghu) of both sides
      must share at least one token
    """
    male = parse_rasi(male_side)
    female = parse_rasi(female_side)

    if male == {SUTH}:
        return female == {SUTH}

    return bool((male & RISK_TOKENS) & (female & RISK_TOKENS))


def is_pair_compatible(
    seeker_gender: str | None,
    seeker_rasi: str | Iterable[str],
    candidate_rasi: str | Iterable[str],
) -> bool:
    """Check seeker vs candidate, placing each on the side their gender dictates.

    A female seeker's candidates are male, so the candidate takes the male
    side. Any other seeker gender keeps the seeker on the male side.
    """
    if seeker_gender == "Female":
        return is_compatible(male_side=candidate_rasi, female_side=seeker_rasi)
    return is_compatible(male_side=seeker_rasi, female_side=candidate_rasi)
