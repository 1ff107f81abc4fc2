"""
HDFC Bank profile.

HDFC prints the total due in a boxed summary whose neighbours (credit limit,
available cash) are often larger and land on the same lines after text
extraction. The profile therefore cross-checks the value near the label
against the total computed from the summary row.
"""
import re
from decimal import Decimal
from typing import List, Optional, Sequence
import logging

from ..anchors import collect_values, locate_value
from ..normalize import find_money_tokens, quantize_money
from ...models.schema import ParsedStatement
from .base import BankProfile, Document, override
from .common import due_date, owner_name

logger = logging.getLogger(__name__)

# UTF-8 rupee sign decoded as cp1252
GARBLED_RUPEE = "\u00e2\u201a\u00b9"

_EQUALS_AMOUNT = re.compile(r"=\s*(?:₹|Rs\.?\s*)?\s*([\d,]+\.\d{2})", re.IGNORECASE)

_SUMMARY_KEYS = ("previous_dues", "payments_credits", "purchases_debit", "finance_charges")


def repair_rupee(text: str) -> str:
    return text.replace(GARBLED_RUPEE, "₹")


def _currency_amounts(line: str) -> List[Decimal]:
    return [t.value for t in find_money_tokens(line, currency_only=True)]


def _first_currency_amount(line: str) -> Optional[Decimal]:
    amounts = _currency_amounts(line)
    return amounts[0] if amounts else None


def _equals_amount(line: str) -> Optional[Decimal]:
    m = _EQUALS_AMOUNT.search(line)
    return Decimal(m.group(1).replace(",", "")) if m else None


def _smallest_non_negative(values: Sequence[Decimal]) -> Optional[Decimal]:
    return min((v for v in values if v >= 0), default=None)


def summary_total(lines: Sequence[str], doc: Document) -> Optional[Decimal]:
    """
    Total computed from the account summary row.

    previous dues - payments/credits + purchases/debit + finance charges.
    Missing components count as zero; a negative result is discarded.
    """
    template = doc.template
    window = int(template.section("summary").get("window", 2))
    exclude = template.pattern("summary", "exclude")

    parts = {
        key: locate_value(lines, template.pattern("summary", key), _first_currency_amount,
                          window=window, exclude=exclude, after_label=True)
        for key in _SUMMARY_KEYS
    }
    if all(v is None for v in parts.values()):
        return None

    zero = Decimal("0")
    total = ((parts["previous_dues"] or zero) - (parts["payments_credits"] or zero)
             + (parts["purchases_debit"] or zero) + (parts["finance_charges"] or zero))
    total = quantize_money(total)
    logger.debug(f"HDFC summary components {parts} -> {total}")
    if total is None or total < 0:
        return None
    return total


def extract_total_due(doc: Document) -> Optional[Decimal]:
    """
    Pick the HDFC total amount due.

    Order: ``= amount`` line under the label, then the smaller of the
    label-window value and the computed summary (the label value is treated
    as inflated when it crosses the template thresholds), then alternative
    labels, then the first currency amount near the top of the document.
    """
    template = doc.template
    config = template.section("total_due")
    label = template.pattern("total_due", "label")
    exclude = template.pattern("total_due", "exclude")
    window = int(config.get("window", 4))
    lines = doc.head_lines()

    equals = locate_value(lines, label, _equals_amount,
                          window=int(config.get("equals_window", 6)), include_label_line=False)
    if equals is not None:
        return equals

    near_label = _smallest_non_negative(
        collect_values(lines, label, _currency_amounts, window=window, exclude=exclude, after_label=True)
    )
    computed = summary_total(lines, doc)

    if computed is not None and near_label is not None:
        inflated = Decimal(str(config.get("inflated_threshold", 2000)))
        margin = Decimal(str(config.get("divergence_margin", 500)))
        if near_label >= inflated or computed < near_label - margin:
            return computed
        return near_label
    if computed is not None:
        return computed
    if near_label is not None:
        return near_label

    for alternative in template.patterns("total_due", "alternative_labels"):
        amount = _smallest_non_negative(
            collect_values(lines, alternative, _currency_amounts, window=window,
                           exclude=exclude, after_label=True)
        )
        if amount is not None:
            return amount

    for line in lines[:int(config.get("last_resort_lines", 100))]:
        amount = _first_currency_amount(line)
        if amount is not None:
            return amount
    return None


def total_due(record: ParsedStatement, doc: Document) -> ParsedStatement:
    return override(record, total_amount_due=extract_total_due(doc))


HDFC = BankProfile("hdfc", [owner_name, total_due, due_date], prepare=repair_rupee)
