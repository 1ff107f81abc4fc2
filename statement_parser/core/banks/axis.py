"""
Axis Bank profile.

Axis statements repeat the masked card number on every page, print the due
date only on some layouts and OCR the ``Dr`` suffix badly, so this profile
counts card candidates across the document, derives a due date from the
period end and accepts OCR variants of the debit marker.
"""
from datetime import timedelta
from decimal import Decimal
import logging

from ..cards import extract_most_frequent_last4
from ..normalize import quantize_money
from ...models.schema import ParsedStatement
from .base import BankProfile, Document, override
from .common import locate_date, owner_name, total_due, transactions

logger = logging.getLogger(__name__)


def card_ending(record: ParsedStatement, doc: Document) -> ParsedStatement:
    return override(record, card_ending=extract_most_frequent_last4(doc.head()))


def due_date(record: ParsedStatement, doc: Document) -> ParsedStatement:
    """Labelled due date, else the period end plus the usual grace days."""
    found = locate_date(doc)
    period_end = record.statement_period.to_date
    if found is None and record.payment_due_date is None and period_end is not None:
        days = int(doc.template.section("payment_due_date").get("offset_days", 20))
        try:
            found = period_end + timedelta(days=days)
        except OverflowError:
            logger.debug(f"Period end {period_end} too late to derive a due date")
        else:
            logger.debug(f"Due date derived from period end: {found}")
    return override(record, payment_due_date=found)


def total_from_debits(record: ParsedStatement, doc: Document) -> ParsedStatement:
    """When no total was printed, use the sum of debit magnitudes."""
    if record.total_amount_due is not None or not record.transactions:
        return record
    debits = sum((-t.amount for t in record.transactions if t.amount < 0), Decimal("0"))
    return override(record, total_amount_due=quantize_money(debits))


AXIS = BankProfile("axis", [
    owner_name,
    card_ending,
    total_due,
    due_date,
    transactions,
    total_from_debits,
])
