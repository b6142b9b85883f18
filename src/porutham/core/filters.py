"""Ordered filter stages that narrow a resolved candidate pool.

Every stage has the signature (candidates, params) -> candidates and never
mutates its input: it returns a new list, or the same list when it has
nothing to do. Validated stages raise ValidationError before touching the
candidates, which aborts the whole run. The gothram and rasi stages are
best effort: internal failures are logged and absorbed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from datetime import date

from . import rasi, validation
from .age import calculate_age
from .errors import ValidationError
from .models import IncomeRange, MatchCandidate, Profile, SearchCriteria

logger = logging.getLogger(__name__)

# matrimonial age bounds used by the default age window
MIN_CANDIDATE_AGE = 18
MAX_CANDIDATE_AGE = 75
FALLBACK_AGE_TOLERANCE = 5

# "X or higher". PHD and Doctor are terminal tiers matched exactly even in
# hierarchical mode: asking for PHD never returns Doctor and vice versa.
QUALIFICATION_HIERARCHY = {
    "School": ("School", "Diploma", "UG", "PG", "PHD", "Doctor"),
    "Diploma": ("Diploma", "UG", "PG", "PHD", "Doctor"),
    "UG": ("UG", "PG", "PHD", "Doctor"),
    "PG": ("PG", "PHD", "Doctor"),
    "PHD": ("PHD",),
    "Doctor": ("Doctor",),
}


@dataclass(frozen=True)
class FilterParams:
    """Effective seeker values and filter settings for one pipeline run."""

    seeker_gender: str | None = None
    seeker_age: int | None = None
    seeker_gothram: str | None = None
    seeker_rasi: frozenset[str] = field(default_factory=frozenset)
    nakshatra_preferences: frozenset[int] = field(default_factory=frozenset)
    age_preference: int | None = None
    qualification: str | None = None
    exact_qualification: bool = False
    regions: frozenset[str] = field(default_factory=frozenset)
    income: IncomeRange | None = None
    include_remarried: bool = False
    enable_rasi_compatibility: bool = False
    today: date | None = None

    @classmethod
    def build(
        cls,
        criteria: SearchCriteria,
        seeker: Profile | None = None,
        today: date | None = None,
    ) -> FilterParams:
        """Derive params from criteria and, in profile mode, the seeker's profile.

        A seeker profile supplies gender, gothram and rasi. Its age comes from
        criteria.seeker_age when given, otherwise from its birth date. Without
        a profile the explicit criteria are used, including criteria.rasi for
        the rasi stage.
        """
        if seeker is not None:
            seeker_age = criteria.seeker_age
            if seeker_age is None:
                seeker_age = calculate_age(seeker.birth_date, today)
            return cls(
                seeker_gender=seeker.gender,
                seeker_age=seeker_age,
                seeker_gothram=seeker.gothram,
                seeker_rasi=seeker.rasi_lagnam,
                **_filter_settings(criteria, today),
            )

        return cls(
            seeker_gender=criteria.gender,
            seeker_age=criteria.seeker_age,
            seeker_gothram=criteria.gothram,
            seeker_rasi=rasi.parse_rasi(criteria.rasi),
            **_filter_settings(criteria, today),
        )


def _filter_settings(criteria: SearchCriteria, today: date | None) -> dict:
    return {
        "nakshatra_preferences": criteria.nakshatra_preferences,
        "age_preference": criteria.age_preference,
        "qualification": criteria.qualification,
        "exact_qualification": criteria.exact_qualification,
        "regions": criteria.regions,
        "income": criteria.income,
        "include_remarried": criteria.include_remarried,
        "enable_rasi_compatibility": criteria.enable_rasi_compatibility,
        "today": today,
    }


def _log_stage(stage: str, before: int, after: int, detail: str = "") -> None:
    logger.debug(
        "%s filter: %d -> %d candidates%s",
        stage,
        before,
        after,
        f" ({detail})" if detail else "",
    )


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def filter_gothram(candidates: list[MatchCandidate], params: FilterParams) -> list[MatchCandidate]:
    """Drop candidates sharing the seeker's gothram.

    A blank seeker gothram makes every candidate incompatible. A blank
    candidate gothram is assumed compatible.
    """
    if _is_blank(params.seeker_gothram):
        logger.warning("Seeker gothram missing, all %d candidates excluded", len(candidates))
        return []

    try:
        seeker_gothram = params.seeker_gothram.strip().lower()
        result = [c for c in candidates if _is_blank(c.gothram) or c.gothram.strip().lower() != seeker_gothram]
    except Exception:
        logger.exception("Gothram filter failed, continuing without it")
        return candidates

    _log_stage("gothram", len(candidates), len(result), f"seeker gothram {params.seeker_gothram.strip()}")
    return result


def filter_nakshatra_preference(candidates: list[MatchCandidate], params: FilterParams) -> list[MatchCandidate]:
    """Keep only candidates whose nakshatra is in the preferred set."""
    if not params.nakshatra_preferences:
        return candidates

    preferred = validation.validate_nakshatra_preferences(params.nakshatra_preferences)

    result = [c for c in candidates if c.nakshatra_id is not None and c.nakshatra_id in preferred]

    _log_stage("nakshatra preference", len(candidates), len(result), f"{len(preferred)} preferred")
    if candidates and not result:
        logger.warning("Nakshatra preferences %s excluded every candidate", sorted(preferred))
    return result


def derive_ages(candidates: list[MatchCandidate], params: FilterParams) -> list[MatchCandidate]:
    """Attach each candidate's age as of params.today (None when unknown)."""
    result = [replace(c, age=calculate_age(c.profile.birth_date, params.today)) for c in candidates]

    unknown = sum(1 for c in result if c.age is None)
    if unknown:
        logger.debug("%d of %d candidates have no usable birth date", unknown, len(result))
    return result


def age_window(seeker_gender: str | None, seeker_age: int) -> tuple[int, int]:
    """Default candidate age window for a seeker.

    Male seekers see candidates aged 18 up to their own age, female seekers
    candidates from their own age up to 75, anyone else +/- 5 years.
    """
    if seeker_gender == "Male":
        return MIN_CANDIDATE_AGE, seeker_age
    if seeker_gender == "Female":
        return seeker_age, MAX_CANDIDATE_AGE
    return seeker_age - FALLBACK_AGE_TOLERANCE, seeker_age + FALLBACK_AGE_TOLERANCE


def filter_age_range(candidates: list[MatchCandidate], params: FilterParams) -> list[MatchCandidate]:
    """Apply the default age window; candidates without an age are excluded."""
    if params.seeker_age is None:
        return candidates

    seeker_age = validation.validate_seeker_age(params.seeker_age)
    low, high = age_window(params.seeker_gender, seeker_age)

    result = [c for c in candidates if c.age is not None and low <= c.age <= high]

    _log_stage("age", len(candidates), len(result), f"{low}-{high}")
    return result


def filter_age_preference(candidates: list[MatchCandidate], params: FilterParams) -> list[MatchCandidate]:
    """Narrow the age window with the seeker's preference.

    Male seekers set a minimum (preference..own age), female seekers a
    maximum (own age..preference). It only ever narrows the default window
    because it runs on that stage's output.
    """
    if params.age_preference is None:
        return candidates
    if params.seeker_age is None:
        logger.warning("Age preference %s ignored, seeker age unknown", params.age_preference)
        return candidates

    preference = validation.validate_age_preference(params.age_preference)
    seeker_age = params.seeker_age

    if params.seeker_gender == "Male":
        low, high = preference, seeker_age
    elif params.seeker_gender == "Female":
        low, high = seeker_age, preference
    else:
        return candidates

    result = [c for c in candidates if c.age is not None and low <= c.age <= high]

    _log_stage("age preference", len(candidates), len(result), f"{low}-{high}")
    return result


def filter_qualification(candidates: list[MatchCandidate], params: FilterParams) -> list[MatchCandidate]:
    """Keep candidates with the requested qualification, or higher unless exact."""
    if params.qualification is None:
        return candidates

    qualification = validation.validate_qualification(params.qualification)

    if params.exact_qualification:
        accepted: tuple[str, ...] = (qualification,)
    else:
        accepted = QUALIFICATION_HIERARCHY[qualification]

    result = [c for c in candidates if c.qualification in accepted]

    mode = "exact" if params.exact_qualification else "or higher"
    _log_stage("qualification", len(candidates), len(result), f"{qualification} {mode}")
    return result


def filter_region(candidates: list[MatchCandidate], params: FilterParams) -> list[MatchCandidate]:
    """Keep candidates whose region is one of the selected regions."""
    if not params.regions:
        return candidates

    regions = validation.validate_regions(params.regions)

    result = [c for c in candidates if c.region in regions]

    _log_stage("region", len(candidates), len(result), ", ".join(sorted(regions)))
    return result


def filter_income(candidates: list[MatchCandidate], params: FilterParams) -> list[MatchCandidate]:
    """Check numeric incomes against the bounds; unknown incomes are always kept."""
    if params.income is None or (params.income.minimum is None and params.income.maximum is None):
        return candidates

    income = validation.validate_income_range(params.income)

    result = [c for c in candidates if c.monthly_income is None or income.matches(c.monthly_income)]

    unknown = sum(1 for c in result if c.monthly_income is None)
    _log_stage("income", len(candidates), len(result), f"{income}, {unknown} without income kept")
    return result


def filter_remarried(candidates: list[MatchCandidate], params: FilterParams) -> list[MatchCandidate]:
    """Exclude remarried candidates unless the seeker opted in."""
    if params.include_remarried:
        return candidates

    result = [c for c in candidates if not c.profile.is_remarried]

    _log_stage("remarried", len(candidates), len(result))
    return result


def filter_rasi(candidates: list[MatchCandidate], params: FilterParams) -> list[MatchCandidate]:
    """Keep candidates whose rasi/lagnam is compatible with the seeker's.

    Only runs when enabled and the seeker has a rasi, from the profile or
    from criteria.rasi. Candidates without a rasi, or whose check fails,
    are excluded.
    """
    if not params.enable_rasi_compatibility:
        return candidates
    if not params.seeker_rasi:
        logger.warning("Rasi compatibility enabled but the seeker has no rasi/lagnam, skipping")
        return candidates

    result = []
    for candidate in candidates:
        if not candidate.rasi_lagnam:
            continue
        try:
            compatible = rasi.is_pair_compatible(params.seeker_gender, params.seeker_rasi, candidate.rasi_lagnam)
        except Exception as e:
            logger.warning("Rasi check failed for profile %s, excluding it: %s", candidate.id, e)
            continue
        if compatible:
            result.append(candidate)

    _log_stage("rasi", len(candidates), len(result), "/".join(sorted(params.seeker_rasi)))
    return result


Stage = Callable[[list[MatchCandidate], FilterParams], list[MatchCandidate]]

# order is significant
STAGES: tuple[tuple[str, Stage], ...] = (
    ("gothram", filter_gothram),
    ("nakshatra_preference", filter_nakshatra_preference),
    ("age", derive_ages),
    ("age_range", filter_age_range),
    ("age_preference", filter_age_preference),
    ("qualification", filter_qualification),
    ("region", filter_region),
    ("income", filter_income),
    ("remarried", filter_remarried),
    ("rasi", filter_rasi),
)


def run_stages(
    candidates: Sequence[MatchCandidate],
    params: FilterParams,
    stages: Sequence[tuple[str, Stage]] = STAGES,
) -> list[MatchCandidate]:
    """Run the stages in order, feeding each the previous stage's output."""
    result = list(candidates)
    for _name, stage in stages:
        result = stage(result, params)
    return result


def apply_filters(
    candidates: Sequence[MatchCandidate],
    criteria: SearchCriteria,
    seeker: Profile | None = None,
    today: date | None = None,
) -> list[MatchCandidate]:
    """Narrow a resolved pool with every filter stage.

    seeker is the seeker's profile in profile mode, None for explicit
    criteria. Raises ValidationError for malformed filter values, and when
    profile-mode criteria come without the seeker's profile.
    """
    if criteria.mode == "profile" and seeker is None:
        raise ValidationError("seeker", "profile-mode criteria need the seeker's profile")

    params = FilterParams.build(criteria, seeker, today)
    result = run_stages(candidates, params)
    logger.info("Filters kept %d of %d candidates", len(result), len(candidates))
    return result
