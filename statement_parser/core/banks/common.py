"""
Override steps shared by several bank profiles.

Every step reads its labels, windows and limits from the profile's template.
"""
from decimal import Decimal
from typing import Optional
import logging

from ..anchors import locate_value
from ..cards import extract_card_ending, extract_strict_masked_last4
from ..generic import TransactionRules, parse_transactions
from ..names import extract_owner_name
from ..normalize import RIGHTMOST, extract_date, parse_money
from ...models.schema import ParsedStatement
from .base import Document, override

logger = logging.getLogger(__name__)


def owner_name(record: ParsedStatement, doc: Document) -> ParsedStatement:
    return override(record, card_owner_name=extract_owner_name(doc.text, doc.template))


def strict_card_ending(record: ParsedStatement, doc: Document) -> ParsedStatement:
    """Masked last-4 straight after a mask run, else the scored header parser."""
    card = extract_strict_masked_last4(doc.head()) or extract_card_ending(doc.text)
    return override(record, card_ending=card)


def locate_amount(doc: Document, section: str = "total_due") -> Optional[Decimal]:
    """
    First amount found at or below any of a section's labels.

    Labels are tried in order; each gets the same line plus ``window``
    following lines. ``policy`` picks the leftmost or rightmost amount of a
    line (rightmost by default).
    """
    config = doc.template.section(section)
    window = int(config.get("window", 2))
    policy = config.get("policy", RIGHTMOST)
    exclude = doc.template.pattern(section, "exclude")
    lines = doc.head_lines()

    for label in doc.template.patterns(section, "labels"):
        amount = locate_value(lines, label,
                              lambda s: parse_money(s, policy, signed=False, allow_integer=False),
                              window=window, exclude=exclude)
        if amount is not None:
            logger.debug(f"{doc.template.template_id}: total found via '{label.pattern}'")
            return amount
    return None


def locate_date(doc: Document, section: str = "payment_due_date"):
    """First valid date at or below any of a section's labels."""
    window = int(doc.template.section(section).get("window", 2))
    lines = doc.head_lines()
    for label in doc.template.patterns(section, "labels"):
        found = locate_value(lines, label, extract_date, window=window)
        if found is not None:
            return found
    return None


def total_due(record: ParsedStatement, doc: Document) -> ParsedStatement:
    return override(record, total_amount_due=locate_amount(doc))


def due_date(record: ParsedStatement, doc: Document) -> ParsedStatement:
    return override(record, payment_due_date=locate_date(doc))


def transactions(record: ParsedStatement, doc: Document) -> ParsedStatement:
    rules = TransactionRules.from_template(doc.template)
    return override(record, transactions=parse_transactions(doc.lines, rules))
