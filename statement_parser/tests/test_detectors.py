"""
Tests for issuing bank detection.
"""
from ..core.detectors import detect_bank


class TestBankDetector:
    """Keyword scoring over the statement header."""

    def test_no_evidence(self):
        bank, score, scores = detect_bank("Statement of account\nThank you")
        assert (bank, score) == ("axis", 0)
        assert set(scores.values()) == {0}

    def test_score_per_pattern(self):
        bank, score, scores = detect_bank("HDFC Bank\nHDFC Bank MyCards")
        assert bank == "hdfc"
        assert score == 7
        assert scores["hdfc"] == 7

    def test_canonical_key_order(self):
        _, _, scores = detect_bank("")
        assert list(scores) == ["axis", "hdfc", "sbi", "icici", "amex"]

    def test_tie_goes_to_earlier_bank(self):
        bank, score, scores = detect_bank("Axis Bank and HDFC Bank")
        assert scores["axis"] == scores["hdfc"] == 3
        assert bank == "axis"

    def test_match_count_is_capped(self):
        _, _, scores = detect_bank("amex amex amex amex amex")
        assert scores["amex"] == 5

    def test_only_header_is_scanned(self):
        bank, score, _ = detect_bank("x" * 9000 + " HDFC Bank")
        assert (bank, score) == ("axis", 0)
