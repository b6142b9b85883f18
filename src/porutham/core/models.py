"""Profiles, match candidates and search criteria."""

from __future__ import annotations

from dataclasses import dataclass, field

UTHAMAM = "uthamam"
MATHIMAM = "mathimam"


@dataclass(frozen=True)
class Profile:
    """A registered profile, already normalized to strict types.

    nakshatra_id is None when the stored value does not parse as an integer.
    rasi_lagnam holds the tokens of the slash-delimited rasi/lagnam string.
    """

    id: str
    gender: str
    nakshatra_id: int | None
    serial_no: str = ""
    name: str = ""
    rasi_lagnam: frozenset[str] = frozenset()
    gothram: str = ""
    birth_date: str | None = None
    region: str | None = None
    qualification: str | None = None
    monthly_income: float | None = None
    is_remarried: bool = False


@dataclass(frozen=True)
class MatchCandidate:
    """A profile resolved for a seeker, with its porutham score and tier."""

    profile: Profile
    porutham: float
    matching_source: str
    age: int | None = None

    @property
    def id(self) -> str:
        return self.profile.id

    @property
    def nakshatra_id(self) -> int | None:
        return self.profile.nakshatra_id

    @property
    def gothram(self) -> str:
        return self.profile.gothram

    @property
    def qualification(self) -> str | None:
        return self.profile.qualification

    @property
    def region(self) -> str | None:
        return self.profile.region

    @property
    def monthly_income(self) -> float | None:
        return self.profile.monthly_income

    @property
    def rasi_lagnam(self) -> frozenset[str]:
        return self.profile.rasi_lagnam


@dataclass(frozen=True)
class IncomeRange:
    """Optional monthly income bounds, both inclusive."""

    minimum: float | None = None
    maximum: float | None = None

    def matches(self, value: float) -> bool:
        """Check if an income lies within the bounds."""
        if self.minimum is not None and value < self.minimum:
            return False
        if self.maximum is not None and value > self.maximum:
            return False
        return True

    def __str__(self) -> str:
        low = "0" if self.minimum is None else f"{self.minimum:g}"
        high = "unlimited" if self.maximum is None else f"{self.maximum:g}"
        return f"{low}-{high}"


@dataclass(frozen=True)
class SearchCriteria:
    """Everything a caller can ask of a single matching run.

    The seeker is either a registered profile (profile_id or serial_no) or an
    explicit nakshatra_id + gender pair. All collections are canonical sets and
    all toggles are real booleans; loose form input is normalized before it
    gets here.
    """

    profile_id: str | None = None
    serial_no: str | None = None
    nakshatra_id: int | None = None
    gender: str | None = None

    include_mathimam: bool = False
    include_remarried: bool = False
    enable_rasi_compatibility: bool = False
    exact_qualification: bool = False

    seeker_age: int | None = None
    age_preference: int | None = None
    qualification: str | None = None
    regions: frozenset[str] = field(default_factory=frozenset)
    income: IncomeRange | None = None
    nakshatra_preferences: frozenset[int] = field(default_factory=frozenset)
    gothram: str | None = None
    rasi: str | None = None

    @property
    def mode(self) -> str:
        """'profile' when the seeker is a registered profile, else 'criteria'."""
        if self.profile_id or self.serial_no:
            return "profile"
        return "criteria"
