"""
SBI Card profile.
"""
import logging

from ..normalize import parse_date
from ...models.schema import ParsedStatement, StatementPeriod
from .base import BankProfile, Document, override
from .common import due_date, owner_name, strict_card_ending, total_due, transactions

logger = logging.getLogger(__name__)


def balance_period(record: ParsedStatement, doc: Document) -> ParsedStatement:
    """Fill missing period ends from ``Opening/Closing Balance on d/m/y`` lines."""
    period = record.statement_period
    if period.from_date and period.to_date:
        return record

    opening = doc.template.pattern("statement_period", "opening_balance").search(doc.text)
    closing = doc.template.pattern("statement_period", "closing_balance").search(doc.text)
    start = period.from_date or (parse_date(opening.group(1)) if opening else None)
    end = period.to_date or (parse_date(closing.group(1)) if closing else None)

    if start == period.from_date and end == period.to_date:
        return record
    return override(record, statement_period=StatementPeriod(from_date=start, to_date=end))


SBI = BankProfile("sbi", [
    owner_name,
    strict_card_ending,
    total_due,
    due_date,
    transactions,
    balance_period,
])
