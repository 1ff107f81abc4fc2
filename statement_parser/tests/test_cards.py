"""
Tests for masked card-number parsing.
"""
import time

import pytest

from ..core.cards import (
    card_candidates, extract_card_ending, extract_most_frequent_last4,
    extract_strict_masked_last4, is_placeholder,
)


class TestExtractCardEnding:
    """Scored header parser."""

    def test_card_number_label_with_mask(self):
        assert extract_card_ending("Card Number: XXXX XXXX XXXX 1234") == "1234"

    @pytest.mark.parametrize("line", [
        "**** **** **** 5678",
        "••••-••••-••••-5678",
        "4375 XXXX XXXX 5678",
    ])
    def test_mask_glyph_variants(self, line):
        assert extract_card_ending(line) == "5678"

    def test_ocr_confusions_in_group(self):
        assert extract_card_ending("Card ending XXXX XXXX XXXX 2IIS") == "2115"

    def test_ending_label_with_ocr_group(self):
        assert extract_card_ending("Card ending 2IIS\n") == "2115"
        # card label (+2), ending label (+4), ending pattern (+4)
        assert card_candidates("Card ending 2IIS") == [("2115", 10)]

    def test_fully_printed_number(self):
        assert extract_card_ending("4375 1234 5678 9012") == "9012"

    def test_placeholder_loses_to_real_number(self):
        text = "Card ending XXXX XXXX XXXX 0000\nXXXX XXXX XXXX 4321"
        assert extract_card_ending(text) == "4321"

    def test_placeholder_when_nothing_else(self):
        assert extract_card_ending("XXXX XXXX XXXX 0000") == "0000"

    def test_higher_context_score_wins(self):
        text = "XXXX XXXX XXXX 2468\nCard ending XXXX XXXX XXXX 1357"
        assert extract_card_ending(text) == "1357"

    def test_ties_go_to_first_occurrence(self):
        text = "XXXX XXXX XXXX 2468\nXXXX XXXX XXXX 1357"
        assert extract_card_ending(text) == "2468"

    def test_only_header_is_scanned(self):
        text = "x\n" * 5000 + "XXXX XXXX XXXX 1234"
        assert extract_card_ending(text) is None

    @pytest.mark.parametrize("text", [None, "", "no card here", "XXXX XXXX XXXX XXXX"])
    def test_no_candidates(self, text):
        assert extract_card_ending(text) is None

    def test_candidates_are_scored(self):
        candidates = card_candidates("Card No: XXXX XXXX XXXX 1234")
        # card label (+2), mask glyph (+1), label pattern (+4) / mask pattern (+3)
        assert [(c.value, c.score) for c in candidates] == [("1234", 7), ("1234", 6)]


class TestStrictMaskedLast4:
    """Last-4 straight after a mask run."""

    def test_digits_before_mask(self):
        assert extract_strict_masked_last4("Card No: 4375 XX XXXX 9876") == "9876"

    def test_skips_placeholder(self):
        text = "XXXX XXXX XXXX 0000\nXXXX XXXX XXXX 4321"
        assert extract_strict_masked_last4(text) == "4321"

    def test_masked_line_fallback(self):
        assert extract_strict_masked_last4("Account **** 12-34") == "1234"

    def test_none(self):
        assert extract_strict_masked_last4("Statement for March") is None


class TestMostFrequentLast4:
    """Candidate counting across the document."""

    def test_most_frequent_wins(self):
        text = "\n".join([
            "Card ending 9999",
            "XXXX XXXX XXXX 4321",
            "XXXX XXXX XXXX 8765",
            "XXXX XXXX XXXX 4321",
        ])
        assert extract_most_frequent_last4(text) == "4321"

    def test_ties_go_to_first_seen(self):
        text = "XXXX XXXX XXXX 8765\nXXXX XXXX XXXX 4321"
        assert extract_most_frequent_last4(text) == "8765"

    def test_placeholders_never_counted(self):
        assert extract_most_frequent_last4("XXXX XXXX XXXX 1111") is None


class TestPlaceholder:

    @pytest.mark.parametrize("value,expected", [("0000", True), ("9999", True), ("1234", False)])
    def test_uniform_digits(self, value, expected):
        assert is_placeholder(value) is expected


class TestSeparatorLines:
    """Long runs of mask glyphs with no digits after them."""

    @pytest.mark.parametrize("extract", [
        extract_card_ending, extract_strict_masked_last4, extract_most_frequent_last4,
    ])
    def test_returns_promptly(self, extract):
        start = time.perf_counter()
        assert extract("*" * 60) is None
        assert extract("=" * 10 + "\n" + "*" * 200 + "\n" + "X-" * 100) is None
        assert time.perf_counter() - start < 1.0

    @pytest.mark.parametrize("extract", [
        extract_card_ending, extract_strict_masked_last4, extract_most_frequent_last4,
    ])
    def test_card_after_separator(self, extract):
        assert extract("*" * 200 + "\nXXXX XXXX XXXX 1234") == "1234"
