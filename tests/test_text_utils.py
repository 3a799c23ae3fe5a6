import pytest

from replica.utils.text import (
    collapse_whitespace,
    levenshtein_distance,
    normalize_text,
    text_similarity,
)


class TestNormalizeText:
    def test_lowercases_trims_and_strips_punctuation(self):
        assert normalize_text("  SUBSCRIBE NOW!!! ") == "subscribe now"

    def test_keeps_inner_whitespace(self):
        assert normalize_text("Link  in bio") == "link  in bio"

    def test_punctuation_only_becomes_empty(self):
        assert normalize_text("?!...") == ""

    def test_keeps_underscores_and_digits(self):
        assert normalize_text("Top_10 #Tips") == "top_10 tips"

    def test_near_duplicates_do_not_collapse(self):
        assert normalize_text("SUBSCRIBE") != normalize_text("SUBCRIBE")


class TestCollapseWhitespace:
    def test_collapses_runs(self):
        assert collapse_whitespace("  Swipe \t  UP ") == "swipe up"


class TestLevenshtein:
    @pytest.mark.parametrize(
        ("a", "b", "expected"),
        [
            ("", "", 0),
            ("abc", "", 3),
            ("kitten", "sitting", 3),
            ("subscribe", "subcribe", 1),
            ("same", "same", 0),
        ],
    )
    def test_distance(self, a, b, expected):
        assert levenshtein_distance(a, b) == expected
        assert levenshtein_distance(b, a) == expected


class TestTextSimilarity:
    def test_identical(self):
        assert text_similarity("follow", "follow") == 1.0

    def test_both_empty(self):
        assert text_similarity("", "") == 1.0

    def test_one_typo_is_above_threshold(self):
        assert text_similarity("subscribe", "subcribe") == pytest.approx(8 / 9)
        assert text_similarity("subscribe", "subcribe") >= 0.8

    def test_unrelated_is_low(self):
        assert text_similarity("hello", "world") < 0.8
