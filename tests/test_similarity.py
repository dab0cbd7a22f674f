"""Tests for Levenshtein name similarity."""

import pytest

from accredit.matching import (
    CACHE_NAME_THRESHOLD,
    ICF_ACCEPT_THRESHOLD,
    ICF_CANDIDATE_THRESHOLD,
    name_similarity,
    name_tokens,
    similarity,
    split_name,
    surname,
)


class TestSimilarity:
    @pytest.mark.parametrize("a,b", [
        ("jane doe", "john doe"),
        ("carole adams", "carol adams"),
        ("", "abc"),
        ("kitten", "sitting"),
    ])
    def test_symmetric(self, a, b):
        assert similarity(a, b) == similarity(b, a)

    @pytest.mark.parametrize("a", ["jane doe", "x", "Carole Adams"])
    def test_identity_is_perfect(self, a):
        assert similarity(a, a) == 1.0

    def test_both_empty_is_perfect(self):
        assert similarity("", "") == 1.0

    def test_one_empty_is_zero(self):
        assert similarity("", "abc") == 0.0

    def test_disjoint_strings_score_low(self):
        assert similarity("abc", "xyz") < 0.5

    def test_normalised_by_longer_string(self):
        # kitten -> sitting is 3 edits over 7 characters
        assert similarity("kitten", "sitting") == pytest.approx(1 - 3 / 7)

    def test_bounds(self):
        for a, b in [("a", "b"), ("abcdef", "abc"), ("jane", "janet")]:
            assert 0.0 <= similarity(a, b) <= 1.0

    def test_case_sensitive_without_folding(self):
        assert similarity("JANE", "jane") == 0.0


class TestNameSimilarity:
    def test_folds_case_and_whitespace(self):
        assert name_similarity("  Jane Doe ", "jane doe") == 1.0

    def test_one_typo_clears_cache_threshold(self):
        assert name_similarity("Carole Adams", "Carol Adams") >= CACHE_NAME_THRESHOLD

    def test_different_person_fails_cache_threshold(self):
        assert name_similarity("Jane Doe", "John Smith") < CACHE_NAME_THRESHOLD


class TestThresholds:
    def test_icf_band_ordering(self):
        assert ICF_CANDIDATE_THRESHOLD < ICF_ACCEPT_THRESHOLD

    def test_values(self):
        assert CACHE_NAME_THRESHOLD == 0.85
        assert ICF_CANDIDATE_THRESHOLD == 0.70
        assert ICF_ACCEPT_THRESHOLD == 0.85


class TestNameHelpers:
    def test_tokens_lowercased(self):
        assert name_tokens("Mary  Jane Watson") == ["mary", "jane", "watson"]

    def test_split_name_uses_first_and_last(self):
        assert split_name("Mary Jane Watson") == ("Mary", "Watson")

    def test_split_single_word(self):
        assert split_name("Madonna") == ("Madonna", "")

    def test_split_empty(self):
        assert split_name("   ") == ("", "")

    def test_surname(self):
        assert surname("Carole Adams") == "Adams"
        assert surname("") == ""
