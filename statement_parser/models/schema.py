"""
Pydantic models for parsed credit card statement data.
"""
from datetime import date
from decimal import Decimal
from typing import Annotated, List, Optional, Dict

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator
from pydantic.alias_generators import to_camel


# Amounts stay Decimal in Python and go out as JSON numbers on the wire.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class _Record(BaseModel):
    """Frozen base: extractors build new records instead of mutating."""
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class StatementPeriod(_Record):
    """Billing cycle boundaries."""
    from_date: Optional[date] = Field(None, alias="from")
    to_date: Optional[date] = Field(None, alias="to")


class Transaction(_Record):
    """
    Individual transaction line.

    Debits are negative, credits positive. A line with no CR/DR marker
    keeps the sign it was printed with.
    """
    transaction_date: Optional[date] = Field(None, alias="date")
    description: Optional[str] = None
    amount: Money


class ParsedStatement(_Record):
    """Complete statement record. Every field is present, missing ones are None."""
    card_ending: Optional[str] = None
    card_owner_name: Optional[str] = None
    statement_period: StatementPeriod = Field(default_factory=StatementPeriod)
    payment_due_date: Optional[date] = None
    total_amount_due: Optional[Money] = None
    transactions: List[Transaction] = Field(default_factory=list)

    @field_validator('card_ending')
    @classmethod
    def validate_card_ending(cls, v):
        """Card ending is exactly four digits."""
        if v is not None and (len(v) != 4 or not v.isdigit()):
            raise ValueError(f"Card ending must be 4 digits: {v!r}")
        return v


class ArbitrationResult(_Record):
    """Outcome of running every bank profile against one document."""
    bank_detected: str
    detection_score: int
    detection_scores: Dict[str, int]
    bank_used: str
    parse_scores: Dict[str, int]
    parsed: ParsedStatement
