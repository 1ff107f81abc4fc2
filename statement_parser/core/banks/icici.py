"""
ICICI Bank profile.
"""
from decimal import Decimal
from typing import Optional
import logging

from ..anchors import collect_values, locate_value
from ..normalize import LEFTMOST, find_money_tokens, parse_date, parse_money
from ...models.schema import ParsedStatement, StatementPeriod
from .base import BankProfile, Document, override
from .common import due_date, locate_date, owner_name, strict_card_ending, transactions

logger = logging.getLogger(__name__)


def _leftmost_amount(line: str) -> Optional[Decimal]:
    return parse_money(line, LEFTMOST, signed=False, allow_integer=False)


def extract_total_due(doc: Document) -> Optional[Decimal]:
    """
    Leftmost amount on or just below the label; else the largest plausible
    amount in a wider window; else the ``amount payable`` label.
    """
    template = doc.template
    config = template.section("total_due")
    label = template.pattern("total_due", "label")
    lines = doc.head_lines()

    amount = locate_value(lines, label, _leftmost_amount, window=int(config.get("window", 2)))
    if amount is not None:
        return amount

    values = collect_values(lines, label, lambda s: [t.value for t in find_money_tokens(s)],
                            window=int(config.get("range_window", 6)))
    low = Decimal(str(config.get("plausible_min", 500)))
    high = Decimal(str(config.get("plausible_max", 500000)))
    ceiling = Decimal(str(config.get("fallback_max", 1000000)))
    plausible = [v for v in values if low <= v <= high]
    fallback = [v for v in values if 0 < v <= ceiling]
    amount = max(plausible or fallback, default=None)
    if amount is not None:
        return amount

    for alternative in template.patterns("total_due", "alternative_labels"):
        amount = locate_value(lines, alternative, _leftmost_amount,
                              window=int(config.get("alternative_window", 3)))
        if amount is not None:
            return amount
    return None


def total_due(record: ParsedStatement, doc: Document) -> ParsedStatement:
    return override(record, total_amount_due=extract_total_due(doc))


def statement_period(record: ParsedStatement, doc: Document) -> ParsedStatement:
    """
    Explicit ``Statement Period`` span, else earliest transaction date up to
    the statement date. The derived span is only trusted when it is longer
    than the template's minimum.
    """
    config = doc.template.section("statement_period")
    m = doc.template.pattern("statement_period", "pattern").search(
        doc.head(int(config.get("document_chars", 25000)))
    )
    if m:
        start, end = parse_date(m.group(1)), parse_date(m.group(2))
        if start and end:
            return override(record, statement_period=StatementPeriod(from_date=start, to_date=end))

    statement_date = locate_date(doc, "statement_date")
    dates = [t.transaction_date for t in record.transactions if t.transaction_date]
    if statement_date is None or not dates:
        return record

    start = min(dates)
    if (statement_date - start).days <= int(config.get("min_span_days", 10)):
        logger.debug(f"Ignoring short derived period {start} - {statement_date}")
        return record
    return override(record, statement_period=StatementPeriod(from_date=start, to_date=statement_date))


ICICI = BankProfile("icici", [
    owner_name,
    strict_card_ending,
    total_due,
    due_date,
    transactions,
    statement_period,
])
