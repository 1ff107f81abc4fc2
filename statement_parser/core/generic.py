"""
Bank-agnostic field extraction.

This is the baseline every bank profile starts from. It reads the
``generic`` template and never raises for a missing field.
"""
import re
from typing import Iterator, List, NamedTuple, Optional, Pattern, Sequence
import logging

from .anchors import first_label, locate_value
from .cards import extract_card_ending
from .normalize import (
    DATE_TOKEN, apply_sign, extract_date, find_money_tokens, normalize_text,
    parse_date, parse_money, split_lines,
)
from .templates import BankTemplate, get_template
from ..models.schema import ParsedStatement, StatementPeriod, Transaction

logger = logging.getLogger(__name__)

_DATES = re.compile(r"(?<!\d)" + DATE_TOKEN)
_DATE_SPAN = re.compile(
    r"(?<!\d)(" + DATE_TOKEN + r")\s*(?:to|-)\s*(" + DATE_TOKEN + r")", re.IGNORECASE
)
_FROM_TO = re.compile(r"from\s+(.+?)\s+(?:to|-)\s+(.+)", re.IGNORECASE)
_LABEL_SEPARATOR = re.compile(r"^\s*[:\-]?\s*")
_SPACES = re.compile(r"\s+")


class TransactionRules(NamedTuple):
    """How a bank's transaction lines look."""
    line_pattern: Pattern
    credit: Pattern
    debit: Pattern
    skip_invalid_dates: bool = False

    @classmethod
    def from_template(cls, template: BankTemplate) -> "TransactionRules":
        section = template.section("transactions")
        return cls(
            line_pattern=template.pattern("transactions", "line_pattern"),
            credit=template.pattern("transactions", "credit_markers"),
            debit=template.pattern("transactions", "debit_markers"),
            skip_invalid_dates=bool(section.get("skip_invalid_dates", False)),
        )


def classify_line(line: str, rules: TransactionRules) -> Optional[Transaction]:
    """
    Turn one statement line into a transaction, or None if it is not one.

    A transaction line starts with a date followed by whitespace and has a
    two-decimal amount somewhere after it. The last amount on the line is
    the transaction amount; CR/DR markers anywhere on the line set its sign.

    Args:
        line: Trimmed statement line
        rules: Bank transaction rules

    Returns:
        Transaction or None
    """
    m = rules.line_pattern.match(line)
    if not m:
        return None

    rest = m.group(2)
    tokens = find_money_tokens(rest)
    if not tokens:
        return None

    transaction_date = parse_date(m.group(1))
    if transaction_date is None and rules.skip_invalid_dates:
        logger.debug(f"Skipping line with invalid date: {line}")
        return None

    token = tokens[-1]
    description = _SPACES.sub(" ", rest[:token.start]).strip()
    return Transaction(
        transaction_date=transaction_date,
        description=description or None,
        amount=apply_sign(token.value, line, rules.credit, rules.debit),
    )


def iter_transactions(lines: Sequence[str], rules: TransactionRules) -> Iterator[Transaction]:
    for line in lines:
        transaction = classify_line(line, rules)
        if transaction is not None:
            yield transaction


def parse_transactions(lines: Sequence[str], rules: TransactionRules) -> List[Transaction]:
    """All transactions in document order; non-matching lines are skipped."""
    return list(iter_transactions(lines, rules))


def _label_value(header: str, labels: Sequence[Pattern]) -> Optional[str]:
    for label in labels:
        m = label.search(header)
        if m:
            end = header.find("\n", m.end())
            value = header[m.end():] if end < 0 else header[m.end():end]
            return _LABEL_SEPARATOR.sub("", value)
    return None


def extract_period(text: str, template: BankTemplate) -> StatementPeriod:
    """
    Billing period from the statement header.

    Tries the labelled value (two dates, or ``from X to Y``), then the first
    unlabelled ``date - date`` span.
    """
    header = text[:template.limit("header_chars", 4000)]

    value = _label_value(header, template.patterns("statement_period", "labels"))
    if value:
        dates = _DATES.findall(value)
        if len(dates) >= 2:
            return StatementPeriod(from_date=parse_date(dates[0]), to_date=parse_date(dates[1]))
        m = _FROM_TO.search(value)
        if m:
            return StatementPeriod(from_date=parse_date(m.group(1)), to_date=parse_date(m.group(2)))

    m = _DATE_SPAN.search(header)
    if m:
        return StatementPeriod(from_date=parse_date(m.group(1)), to_date=parse_date(m.group(2)))

    return StatementPeriod()


def extract_due_date(lines: Sequence[str], template: BankTemplate):
    """Payment due date from the rest of the first label line found."""
    label = first_label(lines, template.patterns("payment_due_date", "labels"))
    if label is None:
        return None
    return locate_value(lines, label, extract_date,
                        window=int(template.section("payment_due_date").get("window", 0)),
                        after_label=True)


def extract_total_due(lines: Sequence[str], template: BankTemplate):
    """
    Total amount due.

    The rightmost amount after the label on its own line wins; otherwise the
    next lines are scanned, skipping minimum-due lines.
    """
    section = template.section("total_due")
    label = first_label(lines, template.patterns("total_due", "labels"))
    if label is None:
        return None

    amount = locate_value(lines, label, lambda s: parse_money(s, signed=False), after_label=True)
    if amount is not None:
        return amount

    return locate_value(lines, label,
                        lambda s: parse_money(s, signed=False, allow_integer=False),
                        window=int(section.get("window", 2)),
                        exclude=template.pattern("total_due", "exclude"),
                        include_label_line=False)


def extract_generic_card_ending(text: str, template: BankTemplate) -> Optional[str]:
    """Masked card number first, then ``ending NNNN`` / ``card no ... NNNN``."""
    head = text[:template.limit("card_chars", 8000)]
    card_ending = extract_card_ending(head)
    if card_ending:
        return card_ending

    for pattern in template.patterns("card_ending", "fallback_patterns"):
        m = pattern.search(head)
        if m:
            return m.group(1)
    return None


def parse_generic(text: str) -> ParsedStatement:
    """
    Extract every field with bank-agnostic rules.

    Args:
        text: Raw or normalized statement text

    Returns:
        ParsedStatement; fields that could not be found are None
    """
    template = get_template("generic")
    text = normalize_text(text)
    lines = split_lines(text)
    header_lines = split_lines(text[:template.limit("header_chars", 4000)])

    parsed = ParsedStatement(
        card_ending=extract_generic_card_ending(text, template),
        statement_period=extract_period(text, template),
        payment_due_date=extract_due_date(header_lines, template),
        total_amount_due=extract_total_due(header_lines, template),
        transactions=parse_transactions(lines, TransactionRules.from_template(template)),
    )
    logger.debug(f"Generic pass: {len(parsed.transactions)} transactions")
    return parsed
