"""Tests for porutham.core.resolver and porutham.core.tables modules."""

from __future__ import annotations

import pytest

from porutham.core.models import MATHIMAM, UTHAMAM, Profile
from porutham.core.resolver import build_porutham_map, opposite_gender, resolve_candidates
from porutham.core.tables import CompatibilityTableSet, parse_table


class TestParseTable:
    """Tests for parse_table function."""

    def test_rows_keyed_by_source(self):
        table = parse_table(
            "female_uthamam",
            [{"male_nakshatra_id": 5, "matching": [{"female_nakshatra_id": 2, "value": 8}]}],
            "male_nakshatra_id",
            "female_nakshatra_id",
        )

        assert len(table) == 1
        assert dict(table.row(5)) == {2: 8}

    def test_unknown_source_is_empty(self):
        table = parse_table("female_uthamam", [], "male_nakshatra_id", "female_nakshatra_id")
        assert dict(table.row(99)) == {}

    def test_first_row_wins(self):
        rows = [
            {"male_nakshatra_id": 5, "matching": [{"female_nakshatra_id": 2, "value": 8}]},
            {"male_nakshatra_id": 5, "matching": [{"female_nakshatra_id": 2, "value": 1}]},
        ]
        table = parse_table("female_uthamam", rows, "male_nakshatra_id", "female_nakshatra_id")
        assert table.row(5)[2] == 8

    def test_skips_malformed_entries(self):
        rows = [
            "not a row",
            {"male_nakshatra_id": "x", "matching": []},
            {"male_nakshatra_id": 5, "matching": "nope"},
            {
                "male_nakshatra_id": "6",
                "matching": [
                    {"female_nakshatra_id": 1, "value": "high"},
                    {"female_nakshatra_id": None, "value": 5},
                    {"female_nakshatra_id": 3, "value": True},
                    {"female_nakshatra_id": 5, "value": float("nan")},
                    {"female_nakshatra_id": 6, "value": float("inf")},
                    {"female_nakshatra_id": 7, "value": float("-inf")},
                    {"female_nakshatra_id": 4, "value": 7},
                ],
            },
        ]
        table = parse_table("female_uthamam", rows, "male_nakshatra_id", "female_nakshatra_id")

        assert list(table.rows) == [6]
        assert dict(table.row(6)) == {4: 7}

    def test_fractional_scores_kept(self):
        rows = [
            {
                "male_nakshatra_id": 5,
                "matching": [
                    {"female_nakshatra_id": 2, "value": 3.5},
                    {"female_nakshatra_id": 3, "value": 8.0},
                ],
            }
        ]
        table = parse_table("female_uthamam", rows, "male_nakshatra_id", "female_nakshatra_id")

        assert table.row(5)[2] == 3.5
        assert table.row(5)[3] == 8
        assert isinstance(table.row(5)[3], int)

    def test_fractional_score_above_threshold_qualifies(self):
        rows = [
            {
                "male_nakshatra_id": 5,
                "matching": [
                    {"female_nakshatra_id": 2, "value": 3.5},
                    {"female_nakshatra_id": 3, "value": 2.9},
                ],
            }
        ]
        table = parse_table("female_uthamam", rows, "male_nakshatra_id", "female_nakshatra_id")
        tables = CompatibilityTableSet.from_tables({"female_uthamam": table})

        assert build_porutham_map(tables, 5, "Male") == {2: (3.5, UTHAMAM)}


class TestCompatibilityTableSet:
    """Tests for CompatibilityTableSet class."""

    def test_for_candidates(self, sample_tables: CompatibilityTableSet):
        uthamam, mathimam = sample_tables.for_candidates("Female")
        assert uthamam.name == "female_uthamam"
        assert mathimam.name == "female_mathimam"

        uthamam, mathimam = sample_tables.for_candidates("Male")
        assert uthamam.name == "male_uthamam"
        assert mathimam.name == "male_mathimam"

    def test_for_candidates_unknown_gender(self, sample_tables: CompatibilityTableSet):
        with pytest.raises(ValueError):
            sample_tables.for_candidates("Other")

    def test_empty(self):
        tables = CompatibilityTableSet.empty()
        assert all(len(t) == 0 for t in tables.tables().values())
        assert tables.degraded == ()


class TestOppositeGender:
    """Tests for opposite_gender function."""

    @pytest.mark.parametrize(
        "gender,expected",
        [("Male", "Female"), ("Female", "Male"), ("Other", None), (None, None), ("male", None)],
    )
    def test_opposite(self, gender, expected):
        assert opposite_gender(gender) == expected


class TestBuildPoruthamMap:
    """Tests for build_porutham_map function."""

    def test_threshold_is_exclusive(self, sample_tables: CompatibilityTableSet):
        poruthams = build_porutham_map(sample_tables, 5, "Male")

        # value 3 for nakshatra 9 does not qualify, value 4 does
        assert 9 not in poruthams
        assert poruthams[12] == (4, UTHAMAM)

    def test_uthamam_only_by_default(self, sample_tables: CompatibilityTableSet):
        poruthams = build_porutham_map(sample_tables, 5, "Male")
        assert poruthams == {2: (8, UTHAMAM), 7: (9, UTHAMAM), 12: (4, UTHAMAM)}

    def test_uthamam_takes_precedence(self, sample_tables: CompatibilityTableSet):
        poruthams = build_porutham_map(sample_tables, 5, "Male", include_mathimam=True)

        assert poruthams[2] == (8, UTHAMAM)
        assert poruthams[14] == (7, MATHIMAM)
        assert 15 not in poruthams

    def test_female_seeker_uses_male_tables(self, sample_tables: CompatibilityTableSet):
        poruthams = build_porutham_map(sample_tables, 2, "Female", include_mathimam=True)
        assert poruthams == {5: (8, UTHAMAM), 6: (4, UTHAMAM), 11: (6, MATHIMAM)}

    def test_unknown_gender(self, sample_tables: CompatibilityTableSet):
        assert build_porutham_map(sample_tables, 5, "Other") == {}


class TestResolveCandidates:
    """Tests for resolve_candidates function."""

    def test_male_seeker(self, sample_profiles: list[Profile], sample_tables: CompatibilityTableSet):
        candidates = resolve_candidates(sample_profiles, sample_tables, 5, "Male")

        assert [c.id for c in candidates] == ["2", "3", "4", "7", "20"]
        assert all(c.profile.gender == "Female" for c in candidates)
        assert all(c.matching_source == UTHAMAM for c in candidates)
        assert all(c.porutham > 3 for c in candidates)

    def test_with_mathimam(self, sample_profiles: list[Profile], sample_tables: CompatibilityTableSet):
        candidates = resolve_candidates(sample_profiles, sample_tables, 5, "Male", include_mathimam=True)

        by_id = {c.id: c for c in candidates}
        assert by_id["5"].matching_source == MATHIMAM
        assert by_id["5"].porutham == 7
        # listed in both tables, kept once as uthamam
        assert by_id["2"].matching_source == UTHAMAM
        assert by_id["2"].porutham == 8
        assert len(candidates) == len(by_id)

    def test_female_seeker(self, sample_profiles: list[Profile], sample_tables: CompatibilityTableSet):
        candidates = resolve_candidates(sample_profiles, sample_tables, 2, "Female")

        assert [c.id for c in candidates] == ["1", "21", "23"]
        assert all(c.profile.gender == "Male" for c in candidates)

    def test_unknown_nakshatra(self, sample_profiles: list[Profile], sample_tables: CompatibilityTableSet):
        assert resolve_candidates(sample_profiles, sample_tables, 33, "Male") == []

    def test_unknown_gender(self, sample_profiles: list[Profile], sample_tables: CompatibilityTableSet):
        assert resolve_candidates(sample_profiles, sample_tables, 5, "Other") == []

    def test_profiles_without_nakshatra_skipped(self, make_profile, sample_tables: CompatibilityTableSet):
        profiles = [make_profile(id="x", nakshatra_id=None), make_profile(id="y", nakshatra_id=2)]
        candidates = resolve_candidates(profiles, sample_tables, 5, "Male")
        assert [c.id for c in candidates] == ["y"]

    def test_empty_tables(self, sample_profiles: list[Profile]):
        assert resolve_candidates(sample_profiles, CompatibilityTableSet.empty(), 5, "Male") == []
