"""
Masked card-number parsing.

Statements print the card as a run of mask glyphs followed by the last four
digits, e.g. ``XXXX XXXX XXXX 1234`` or ``4375 ●●●● ●●●● 1234``. OCR often
turns those digits into look-alike letters, so each 4-character group is
passed through the digit-confusion table before it is accepted.
"""
import re
from collections import Counter
from typing import List, NamedTuple, Optional
import logging

from .normalize import correct_digit_confusions

logger = logging.getLogger(__name__)

MASK = "[xX*#\u2022\u2217\u2731\u25cf\u00b7\u25aa\u25ab\u25a0\u25a1]"
_GROUP = r"([0-9A-Za-z|\u00a7\u00b0]{4})(?![0-9A-Za-z])"

HEADER_CHARS = 8000
DOCUMENT_CHARS = 20000

_CARD_LABEL = re.compile(r"\bcard\b|\bcredit\b", re.IGNORECASE)
_ENDING_LABEL = re.compile(r"\bending\b|\bends?\s*with\b|\blast\s*4\b", re.IGNORECASE)
_MASK_GLYPH = re.compile(MASK)

# Mask runs of 2+ glyphs split by spaces or dashes. A match starts at the first
# glyph of a run and runs must be separated, so there is one way to match.
_MASK_RUNS = (r"(?<!" + MASK + r")" + MASK + r"{2,}(?:[\s\-]+" + MASK + r"{2,})*[\s\-]*")
# Same, with at least four glyphs in total (two runs, or one run of four)
_MASK_RUNS_4 = (r"(?<!" + MASK + r")(?=" + MASK + r"{4}|" + MASK + r"{2,3}[\s\-]+" + MASK + r"{2})"
                + MASK + r"{2,}(?:[\s\-]+" + MASK + r"{2,})*[\s\-]*")

# (pattern, bonus) in priority order
_SCORED_PATTERNS = [
    (re.compile(r"\bcard\s*(?:no\.?|number)?\s*[:\-]?\s*(?:" + MASK + r"[\s\-]*){2,}" + _GROUP,
                re.IGNORECASE), 4),
    (re.compile(r"(?:\bending\b|\bends?\s*with\b|\blast\s*4\b)\s*[:\-]?\s*" + _GROUP, re.IGNORECASE), 4),
    (re.compile(_MASK_RUNS + _GROUP), 3),
    (re.compile(r"(?<!\d)(?:\d{4}[^\d\n]{1,3}){3}(\d{4})(?!\d)"), 2),
]

_STRICT_PATTERNS = [
    re.compile(r"(?:\d{4,8}\s*)?(?<!" + MASK + r")(?:" + MASK + r"\s*){3,}\s*" + _GROUP),
    re.compile(_MASK_RUNS_4 + _GROUP),
    re.compile(r"card\s*(?:no|number)?[^\n]*?(?:" + MASK + r"[\s\-]*){2,}" + _GROUP, re.IGNORECASE),
]

_FREQUENCY_PATTERNS = [
    re.compile(_MASK_RUNS_4 + _GROUP),
    re.compile(r"(?<!\d)(?:\d{4}[^\d\n]{1,3}){3}" + _GROUP),
    re.compile(r"(?:ending|ends?\s*with|last\s*4)\s*[:\-]?\s*" + _GROUP, re.IGNORECASE),
    re.compile(r"card\s*(?:number|no\.?)\s*[:\-]?[^\n]*?" + _GROUP, re.IGNORECASE),
]


class CardCandidate(NamedTuple):
    """A possible last-4 with its confidence score."""
    value: str
    score: int


def is_placeholder(value: str) -> bool:
    """Uniform digits such as 0000 or 9999 are layout filler, not card numbers."""
    return len(set(value)) == 1


def _as_last4(raw: str) -> Optional[str]:
    value = re.sub(r"\D", "", correct_digit_confusions(raw))
    return value if len(value) == 4 else None


def _pick(values: List[str]) -> Optional[str]:
    for value in values:
        if not is_placeholder(value):
            return value
    return values[0] if values else None


def _line_context_score(line: str) -> int:
    score = 0
    if _CARD_LABEL.search(line):
        score += 2
    if _ENDING_LABEL.search(line):
        score += 4
    if _MASK_GLYPH.search(line):
        score += 1
    return score


def card_candidates(text: str, limit: int = HEADER_CHARS) -> List[CardCandidate]:
    """
    Score every masked or fully printed card group in the header.

    Args:
        text: Normalized statement text
        limit: Number of leading characters to scan

    Returns:
        Candidates in document order
    """
    candidates = []
    for line in (text or "")[:limit].split("\n"):
        line = line.strip()
        if not line:
            continue
        context = _line_context_score(line)
        for pattern, bonus in _SCORED_PATTERNS:
            for m in pattern.finditer(line):
                value = _as_last4(m.group(1))
                if value:
                    candidates.append(CardCandidate(value, context + bonus))
    return candidates


def extract_card_ending(text: str, limit: int = HEADER_CHARS) -> Optional[str]:
    """
    Best-scoring last-4 from the statement header.

    Placeholders are only returned when nothing else was found. Ties go to
    the first candidate in the document.
    """
    candidates = card_candidates(text, limit)
    if not candidates:
        return None

    real = [c for c in candidates if not is_placeholder(c.value)]
    best = max(real or candidates, key=lambda c: c.score)
    logger.debug(f"Card ending {best.value} chosen from {len(candidates)} candidates")
    return best.value


def extract_strict_masked_last4(text: str, limit: int = DOCUMENT_CHARS) -> Optional[str]:
    """
    Last-4 that directly follows a mask run.

    When no masked group exists, the trailing four digits of a line carrying
    at least two mask glyphs are used instead.
    """
    head = (text or "")[:limit]
    values = []
    for pattern in _STRICT_PATTERNS:
        for m in pattern.finditer(head):
            value = _as_last4(m.group(1))
            if value and value not in values:
                values.append(value)

    if not values:
        for line in head.split("\n"):
            if len(_MASK_GLYPH.findall(line)) < 2:
                continue
            digits = re.sub(r"\D", "", line)
            if len(digits) >= 4 and digits[-4:] not in values:
                values.append(digits[-4:])

    return _pick(values)


def extract_most_frequent_last4(text: str, limit: int = DOCUMENT_CHARS) -> Optional[str]:
    """Last-4 seen most often across every card pattern in the document."""
    head = (text or "")[:limit]
    counts = Counter()
    for pattern in _FREQUENCY_PATTERNS:
        for m in pattern.finditer(head):
            value = _as_last4(m.group(1))
            if value and not is_placeholder(value):
                counts[value] += 1

    if not counts:
        return None
    # Counter keeps first-seen order, so max() breaks ties by first occurrence
    return max(counts, key=counts.get)
