"""
Credit Card Statement Parser

A deterministic, rule-based parser for Indian credit card statements. Text
from a PDF (or OCR) is run through every bank profile; the most complete
result wins, with the caller's preferred bank honoured when it is close.
"""

__version__ = "1.0.0"
__author__ = "BillBuddy Team"

from .core.runner import parse, parse_by_bank
from .core.detectors import detect_bank
from .core.loader import load_text, TextExtractionError
from .models.schema import ArbitrationResult, ParsedStatement, StatementPeriod, Transaction

__all__ = [
    "parse",
    "parse_by_bank",
    "detect_bank",
    "load_text",
    "TextExtractionError",
    "ArbitrationResult",
    "ParsedStatement",
    "StatementPeriod",
    "Transaction",
]
