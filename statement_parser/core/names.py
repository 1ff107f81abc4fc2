"""
Card owner name heuristics.

Names are printed as a short all-caps line near the address block. Each
bank template lists positional anchors to try first (an inline ``Name:``
label, the line below a name label, the lines above a postal code or an
``Email`` label) and then falls back to scanning the top of the document.
"""
import re
from functools import lru_cache
from typing import List, Optional, Pattern, Sequence
import logging

from rapidfuzz import fuzz, process

from .normalize import split_lines
from .templates import BankTemplate, compile_pattern

logger = logging.getLogger(__name__)

_NAME_TOKEN = re.compile(r"^[A-Z][A-Z'\-]*$")
_TITLES = re.compile(r"^(?:MR|MRS|MS|SHRI|SMT|KUMARI)\.?\s+", re.IGNORECASE)
_SPACES = re.compile(r"\s+")


def _word_pattern(words: Sequence[str]) -> Optional[Pattern]:
    if not words:
        return None
    alternatives = "|".join(re.escape(w).replace(r"\ ", r"\s+") for w in words)
    return compile_pattern(r"\b(?:" + alternatives + r")\b")


class NameRules:
    """Owner-name rules read from the ``owner_name`` template section."""

    def __init__(self, template: BankTemplate):
        section = template.section("owner_name")
        self.region_chars = int(section.get("region_chars", 5000))
        self.scan_lines = int(section.get("scan_lines", 40))
        self.max_tokens = int(section.get("max_tokens", 4))
        self.stoplist = list(section.get("stoplist", ()))
        self.stoplist_threshold = float(section.get("stoplist_threshold", 90))
        self.strip_titles = bool(section.get("strip_titles", False))
        self.deny = _word_pattern(section.get("deny_keywords", ()))
        self.address = _word_pattern(section.get("address_words", ()))
        self.anchors = list(section.get("anchors", ()))

    def clean(self, line: str) -> str:
        """Collapse whitespace and drop an honorific when configured."""
        line = _SPACES.sub(" ", line).strip()
        if self.strip_titles:
            line = _TITLES.sub("", line)
        return line

    def is_stoplisted(self, line: str) -> bool:
        """Fuzzy match against known header phrases (tolerates OCR noise)."""
        if not self.stoplist:
            return False
        return process.extractOne(line, self.stoplist, scorer=fuzz.ratio,
                                  score_cutoff=self.stoplist_threshold) is not None

    def accepts(self, candidate: str) -> bool:
        """
        Check whether a cleaned line looks like a person's name.

        Args:
            candidate: Line after ``clean``

        Returns:
            True if the line is 2-4 all-caps name tokens and not a header
        """
        tokens = candidate.split(" ")
        if not 2 <= len(tokens) <= self.max_tokens:
            return False
        if not all(_NAME_TOKEN.match(t) for t in tokens):
            return False
        if self.deny and self.deny.search(candidate):
            return False
        if self.address and self.address.search(candidate):
            return False
        return not self.is_stoplisted(candidate)

    def pick(self, line: str) -> Optional[str]:
        """Cleaned name if the line qualifies."""
        candidate = self.clean(line)
        return candidate if self.accepts(candidate) else None


@lru_cache(maxsize=None)
def name_rules(template: BankTemplate) -> NameRules:
    return NameRules(template)


def _from_inline(lines: List[str], rules: NameRules, anchor) -> Optional[str]:
    label = compile_pattern(anchor["pattern"])
    for line in lines[:int(anchor.get("lines", len(lines)))]:
        m = label.search(line)
        if m:
            name = rules.pick(m.group(1))
            if name:
                return name
    return None


def _from_below(lines: List[str], rules: NameRules, anchor) -> Optional[str]:
    label = compile_pattern(anchor["pattern"])
    window = int(anchor.get("window", 2))
    for i, line in enumerate(lines[:int(anchor.get("lines", len(lines)))]):
        if not label.search(line):
            continue
        for below in lines[i + 1:i + 1 + window]:
            name = rules.pick(below)
            if name:
                return name
        break
    return None


def _from_above(lines: List[str], rules: NameRules, anchor) -> Optional[str]:
    label = compile_pattern(anchor["pattern"])
    window = int(anchor.get("window", 4))
    index = next((i for i, line in enumerate(lines) if label.search(line)), None)
    if not index:
        return None
    # nearest line first
    for above in reversed(lines[max(0, index - window):index]):
        name = rules.pick(above)
        if name:
            return name
    return None


_ANCHOR_KINDS = {
    "inline": _from_inline,
    "below": _from_below,
    "above": _from_above,
}


def extract_owner_name(text: str, template: BankTemplate) -> Optional[str]:
    """
    Find the card owner's name using a bank template's rules.

    Args:
        text: Normalized statement text
        template: Bank template carrying the ``owner_name`` section

    Returns:
        Name as printed (whitespace collapsed), or None
    """
    rules = name_rules(template)
    lines = split_lines(text[:rules.region_chars])

    for anchor in rules.anchors:
        finder = _ANCHOR_KINDS.get(anchor.get("kind"))
        if finder is None:
            logger.warning(f"Unknown name anchor kind in {template.template_id}: {anchor.get('kind')}")
            continue
        name = finder(lines, rules, anchor)
        if name:
            logger.debug(f"Owner name found via {anchor['kind']} anchor '{anchor['pattern']}'")
            return name

    for line in lines[:rules.scan_lines]:
        name = rules.pick(line)
        if name:
            logger.debug(f"Owner name found by header scan: {name}")
            return name

    return None
