"""
End-to-end parsing orchestration.

Every bank profile parses the same text; the most complete record wins,
unless the caller asked for a bank whose record is nearly as complete.
"""
from typing import Dict, Optional
import logging

from .banks import BANK_IDS, get_profile, resolve_bank
from .detectors import BankDetector
from .generic import parse_generic
from .templates import get_template
from ..models.schema import ArbitrationResult, ParsedStatement

logger = logging.getLogger(__name__)


def completeness_score(parsed: ParsedStatement) -> int:
    """
    How complete a parsed record is.

    3 for the card ending, 2 each for period start, period end, due date
    and total due, plus one per transaction up to 15.
    """
    score = 0
    if parsed.card_ending:
        score += 3
    if parsed.statement_period.from_date:
        score += 2
    if parsed.statement_period.to_date:
        score += 2
    if parsed.payment_due_date:
        score += 2
    if parsed.total_amount_due is not None:
        score += 2
    return score + min(len(parsed.transactions), 15)


class StatementArbiter:
    """Runs all bank profiles and picks one result."""

    def __init__(self, preference_tolerance: Optional[int] = None):
        if preference_tolerance is None:
            preference_tolerance = int(
                get_template("generic").section("arbitration").get("preference_tolerance", 2)
            )
        self.preference_tolerance = preference_tolerance
        self.detector = BankDetector()

    def parse(self, text: str, bank_hint: Optional[str] = None) -> ArbitrationResult:
        """
        Parse statement text, choosing the best bank profile.

        Args:
            text: Raw statement text
            bank_hint: Bank the caller believes issued the statement

        Returns:
            ArbitrationResult with the detector guess, every profile's score
            and the chosen record
        """
        text = text or ""
        bank_detected, detection_score, detection_scores = self.detector.detect(text)

        results: Dict[str, ParsedStatement] = {}
        scores: Dict[str, int] = {}
        for bank in BANK_IDS:
            results[bank] = get_profile(bank).parse(text)
            scores[bank] = completeness_score(results[bank])

        best_bank, best_score = BANK_IDS[0], -1
        for bank in BANK_IDS:
            if scores[bank] > best_score:
                best_bank, best_score = bank, scores[bank]

        bank_used = best_bank
        preferred = resolve_bank(bank_hint)
        if preferred and best_score - scores[preferred] <= self.preference_tolerance:
            bank_used = preferred
        elif bank_hint and not preferred:
            logger.debug(f"Ignoring unknown bank hint: {bank_hint}")

        logger.info(f"Bank used: {bank_used} (detected {bank_detected}, scores {scores})")
        return ArbitrationResult(
            bank_detected=bank_detected,
            detection_score=detection_score,
            detection_scores=detection_scores,
            bank_used=bank_used,
            parse_scores=scores,
            parsed=results[bank_used],
        )


def parse(text: str, bank_hint: Optional[str] = None) -> ArbitrationResult:
    """
    Parse statement text with every bank profile and arbitrate.

    Args:
        text: Raw statement text
        bank_hint: Optional preferred bank (case-insensitive)

    Returns:
        ArbitrationResult
    """
    return StatementArbiter().parse(text, bank_hint)


def parse_by_bank(text: str, bank: Optional[str] = None) -> ParsedStatement:
    """
    Parse with one bank's profile; unknown or missing banks use the generic rules.

    Args:
        text: Raw statement text
        bank: Bank ID or alias

    Returns:
        ParsedStatement
    """
    bank_id = resolve_bank(bank)
    if bank_id is None:
        return parse_generic(text or "")
    return get_profile(bank_id).parse(text)
