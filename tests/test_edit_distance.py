"""Tests for scraptriage.core.edit_distance."""

import pytest

from scraptriage.core.edit_distance import distance, similarity


class TestDistance:
    @pytest.mark.parametrize(
        "a, b, expected",
        [
            ("", "", 0),
            ("abc", "", 3),
            ("", "abc", 3),
            ("kitten", "sitting", 3),
            ("flaw", "lawn", 2),
            ("scrap metal", "scrap metal", 0),
        ],
    )
    def test_known_distances(self, a, b, expected):
        assert distance(a, b) == expected

    @pytest.mark.parametrize(
        "a, b",
        [("assorted seeds", "assortd seeds"), ("ammo", "memo"), ("", "x"), ("abc", "cba")],
    )
    def test_symmetric(self, a, b):
        assert distance(a, b) == distance(b, a)

    def test_single_substitution(self):
        assert distance("gold watch", "gold match") == 1


class TestSimilarity:
    @pytest.mark.parametrize("s", ["a", "Scrap Metal", "486/500", "x"])
    def test_identity(self, s):
        assert similarity(s, s) == 1.0

    def test_both_empty(self):
        assert similarity("", "") == 1.0

    def test_one_empty(self):
        assert similarity("abc", "") == 0.0

    def test_typo_scores_high(self):
        score = similarity("assorted seeds", "assortd seeds")
        assert score == pytest.approx(1 - 1 / 14)

    def test_range(self):
        score = similarity("energy cell", "canned food")
        assert 0.0 <= score <= 1.0
