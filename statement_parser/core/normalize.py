"""
Text normalization and token extraction: dates, money and OCR digit fixes.
"""
import re
from datetime import date
from decimal import Decimal, InvalidOperation
from types import MappingProxyType
from typing import List, Mapping, NamedTuple, Optional, Pattern
import logging

logger = logging.getLogger(__name__)

RIGHTMOST = "rightmost"
LEFTMOST = "leftmost"

CENTS = Decimal("0.01")

MONTHS = MappingProxyType({
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "sept": 9, "oct": 10, "nov": 11, "dec": 12,
})

# OCR look-alikes seen inside masked card groups
DIGIT_CONFUSIONS = MappingProxyType({
    "O": "0", "o": "0", "D": "0", "°": "0",
    "I": "1", "l": "1", "|": "1",
    "Z": "2", "z": "2",
    "S": "5", "s": "5",
    "B": "8", "§": "8",
    "q": "9", "g": "9",
})

CREDIT_MARKERS = re.compile(r"\bCR\b|credit", re.IGNORECASE)
DEBIT_MARKERS = re.compile(r"\bDR\b|debit", re.IGNORECASE)

_MONTH = r"(jan|feb|mar|apr|may|jun|jul|aug|sep|sept|oct|nov|dec)"
_MONTH_NC = r"(?:jan|feb|mar|apr|may|jun|jul|aug|sep|sept|oct|nov|dec)"

# Shape of a date inside a line: "12/03/2024", "15-Jan-2024", "1 March, 24"
DATE_TOKEN = r"\d{1,2}[ /\-](?:[A-Za-z]{3}|[01]?\d)[A-Za-z]*,?[ /\-]\d{2,4}"

_ORDINAL = re.compile(r"(\d)(st|nd|rd|th)", re.IGNORECASE)

_DAY_MONTHNAME_YEAR = re.compile(
    r"(?<!\d)(\d{1,2})[ \-/]" + _MONTH + r"[a-z]*,?[ \-/](\d{2,4})(?!\d)", re.IGNORECASE
)
_DAY_MONTH_YEAR = re.compile(r"(?<!\d)(\d{1,2})[/\-](\d{1,2})[/\-](\d{2,4})(?!\d)")
_MONTHNAME_DAY_YEAR = re.compile(
    r"\b" + _MONTH + r"[a-z]*[ \-](\d{1,2}),?[ \-](\d{2,4})(?!\d)", re.IGNORECASE
)

_DATE_TOKENS = [
    re.compile(r"(?<!\d)" + DATE_TOKEN),
    re.compile(r"(?<!\d)\d{1,2}[/\-]\d{1,2}[/\-]\d{2,4}"),
    re.compile(r"(?<!\d)\d{1,2}\s+" + _MONTH_NC + r"[a-z]*,?\s+\d{2,4}", re.IGNORECASE),
    re.compile(r"\b" + _MONTH_NC + r"[a-z]*\s+\d{1,2},?\s+\d{2,4}", re.IGNORECASE),
]

_MONEY_TOKEN = re.compile(
    r"(?P<currency>(?:₹|(?<![A-Za-z])(?:[Rr][Ss]\.?|INR))\s*)?"
    r"(?P<sign>(?<![\w\-])-)?"
    r"(?P<number>\d[\d,]*\.\d{2})(?!\d|\.\d)"
)
_INTEGER_TOKEN = re.compile(r"(?<![\w/:\-])(?<!\d\.)(?P<number>\d[\d,]*)(?![\w/:\-]|\.\d)")

_DASHES = re.compile("[\u2010\u2011\u2012\u2013\u2014\u2015\u2212]")
_SINGLE_QUOTES = re.compile("[\u2018\u2019\u201a\u2032]")
_DOUBLE_QUOTES = re.compile("[\u201c\u201d\u201e\u2033]")
_HORIZONTAL_SPACE = re.compile(r"[^\S\n]+")


class MoneyToken(NamedTuple):
    """A money amount found in a line, with its offset."""
    value: Decimal
    start: int
    currency: bool


def normalize_text(value: Optional[str]) -> str:
    """
    Canonicalize raw statement text.

    Carriage returns are dropped, dash and quote variants become ASCII,
    non-breaking spaces become spaces and runs of horizontal whitespace
    collapse to one space. Line breaks are kept. Running it twice is a no-op.

    Args:
        value: Raw text, possibly empty

    Returns:
        Normalized text
    """
    if not value:
        return ""

    text = value.replace("\r", "")
    text = _DASHES.sub("-", text)
    text = _SINGLE_QUOTES.sub("'", text)
    text = _DOUBLE_QUOTES.sub('"', text)
    text = text.replace("\u00a0", " ")

    return _HORIZONTAL_SPACE.sub(" ", text)


def split_lines(text: str) -> List[str]:
    """Split into trimmed, non-empty lines."""
    return [line.strip() for line in text.split("\n") if line.strip()]


def _to_date(year: int, month: int, day: int) -> Optional[date]:
    if year < 100:
        year += 2000
    try:
        return date(year, month, day)
    except ValueError:
        logger.debug(f"Rejected invalid calendar date: {year}-{month}-{day}")
        return None


def parse_date(value: Optional[str]) -> Optional[date]:
    """
    Parse a short date string.

    Shapes are tried in a fixed order: day/month-name/year, day/month/year,
    month-name/day/year. The first shape that matches decides the outcome;
    if it is not a real calendar date the result is None.

    Args:
        value: Candidate string, e.g. "15-Jan-2024", "12/03/24", "Mar 1st, 2024"

    Returns:
        Date object or None
    """
    if not value:
        return None

    src = _ORDINAL.sub(r"\1", value).strip()

    m = _DAY_MONTHNAME_YEAR.search(src)
    if m:
        return _to_date(int(m.group(3)), MONTHS[m.group(2).lower()], int(m.group(1)))

    m = _DAY_MONTH_YEAR.search(src)
    if m:
        return _to_date(int(m.group(3)), int(m.group(2)), int(m.group(1)))

    m = _MONTHNAME_DAY_YEAR.search(src)
    if m:
        return _to_date(int(m.group(3)), MONTHS[m.group(1).lower()], int(m.group(2)))

    return None


def find_date_token(value: Optional[str]) -> Optional[str]:
    """Return the first date-shaped substring of a line."""
    if not value:
        return None
    for pattern in _DATE_TOKENS:
        m = pattern.search(value)
        if m:
            return m.group(0)
    return None


def extract_date(value: Optional[str]) -> Optional[date]:
    """Parse the first date-shaped substring of a line."""
    token = find_date_token(value)
    return parse_date(token) if token else None


def _to_decimal(number: str) -> Optional[Decimal]:
    try:
        return Decimal(number.replace(",", ""))
    except InvalidOperation:
        logger.debug(f"Could not read amount: {number}")
        return None


def find_money_tokens(value: Optional[str], currency_only: bool = False) -> List[MoneyToken]:
    """
    Find all two-decimal amounts in a string.

    Args:
        value: Text to scan
        currency_only: Keep only amounts prefixed by a rupee marker

    Returns:
        Tokens in order of appearance
    """
    if not value:
        return []

    tokens = []
    for m in _MONEY_TOKEN.finditer(value):
        has_currency = bool(m.group("currency"))
        if currency_only and not has_currency:
            continue
        amount = _to_decimal(m.group("number"))
        if amount is None:
            continue
        if m.group("sign"):
            amount = -amount
        tokens.append(MoneyToken(amount, m.start(), has_currency))
    return tokens


def quantize_money(amount: Decimal) -> Optional[Decimal]:
    """Round to paise; None for digit runs too long to be an amount."""
    try:
        return amount.quantize(CENTS)
    except InvalidOperation:
        logger.debug(f"Amount out of range: {amount}")
        return None


def _integer_tokens(value: str) -> List[MoneyToken]:
    tokens = []
    for m in _INTEGER_TOKEN.finditer(value):
        amount = _to_decimal(m.group("number").rstrip(","))
        if amount is not None:
            amount = quantize_money(amount)
        if amount is not None:
            tokens.append(MoneyToken(amount, m.start(), False))
    return tokens


def apply_sign(amount: Decimal, context: str,
               credit: Pattern = CREDIT_MARKERS, debit: Pattern = DEBIT_MARKERS) -> Decimal:
    """
    Force the sign of an amount from CR/DR markers in its context.

    A credit marker wins over a debit marker. Without markers the amount
    is returned as printed.
    """
    if credit.search(context):
        return abs(amount)
    if debit.search(context):
        return -abs(amount)
    return amount


def parse_money(value: Optional[str], policy: str = RIGHTMOST, context: Optional[str] = None,
                signed: bool = True, allow_integer: bool = True,
                credit: Pattern = CREDIT_MARKERS, debit: Pattern = DEBIT_MARKERS) -> Optional[Decimal]:
    """
    Parse an amount out of a text span.

    Args:
        value: Text containing the amount
        policy: RIGHTMOST picks the last token, LEFTMOST the first
        context: Text scanned for CR/DR markers (defaults to value)
        signed: Apply CR/DR markers at all
        allow_integer: Accept a bare integer when no two-decimal token exists

    Returns:
        Decimal amount or None
    """
    if not value:
        return None
    if policy not in (RIGHTMOST, LEFTMOST):
        raise ValueError(f"Unknown money policy: {policy}")

    tokens = find_money_tokens(value)
    if not tokens and allow_integer:
        tokens = _integer_tokens(value)
    if not tokens:
        return None

    token = tokens[-1] if policy == RIGHTMOST else tokens[0]
    amount = token.value
    if signed:
        amount = apply_sign(amount, value if context is None else context, credit, debit)
    return amount


def correct_digit_confusions(run: str, table: Mapping[str, str] = DIGIT_CONFUSIONS) -> str:
    """Map OCR look-alike characters in a candidate digit run to digits."""
    return "".join(table.get(ch, ch) for ch in run)
