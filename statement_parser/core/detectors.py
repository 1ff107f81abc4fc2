"""
Issuing bank detection.
"""
from typing import Dict, Mapping, Optional, Tuple
import logging

from .banks import BANK_IDS
from .normalize import normalize_text
from .templates import BankTemplate, get_template, load_templates

logger = logging.getLogger(__name__)


class BankDetector:
    """Scores statement text against each bank's identity patterns."""

    def __init__(self, templates: Optional[Mapping[str, BankTemplate]] = None):
        templates = templates or load_templates()
        self.templates = {bank: templates[bank] for bank in BANK_IDS if bank in templates}
        self.header_chars = get_template("generic").limit("detect_chars", 8000)

    def score(self, header: str, template: BankTemplate) -> int:
        """
        Identity score of one bank for a header.

        Each identity pattern adds 2 when it is present plus its match
        count, capped at 3.
        """
        total = 0
        for pattern in template.identity_patterns:
            count = sum(1 for _ in pattern.finditer(header))
            if count:
                total += 2 + min(count, 3)
        return total

    def detect(self, text: str) -> Tuple[str, int, Dict[str, int]]:
        """
        Detect the issuing bank.

        Args:
            text: Statement text

        Returns:
            (bank, score, scores by bank). Ties go to the earlier bank in
            canonical order; with no evidence the first bank is returned
            with score 0.
        """
        header = normalize_text(text)[:self.header_chars]
        scores = {bank: self.score(header, template) for bank, template in self.templates.items()}

        bank, best = BANK_IDS[0], -1
        for candidate, value in scores.items():
            if value > best:
                bank, best = candidate, value

        logger.debug(f"Detection scores: {scores}")
        return bank, max(best, 0), scores


def detect_bank(text: str) -> Tuple[str, int, Dict[str, int]]:
    """
    Convenience function to detect the issuing bank of statement text.

    Args:
        text: Statement text

    Returns:
        (bank, score, scores by bank)
    """
    return BankDetector().detect(text)
