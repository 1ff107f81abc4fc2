"""
Tests for the per-bank override chains.
"""
import pytest
from datetime import date
from decimal import Decimal

from ..core.banks import BANK_IDS, get_profile, override, resolve_bank
from ..core.banks.amex import AMEX
from ..core.banks.axis import AXIS
from ..core.banks.hdfc import GARBLED_RUPEE, HDFC, repair_rupee
from ..core.banks.icici import ICICI
from ..core.banks.sbi import SBI
from ..core.generic import parse_generic
from ..models.schema import ParsedStatement, StatementPeriod


class TestRegistry:

    def test_canonical_order(self):
        assert BANK_IDS == ("axis", "hdfc", "sbi", "icici", "amex")

    @pytest.mark.parametrize("name,expected", [
        ("HDFC", "hdfc"),
        (" Axis ", "axis"),
        ("American Express", "amex"),
        ("citi", None),
        ("", None),
        (None, None),
    ])
    def test_resolve_bank(self, name, expected):
        assert resolve_bank(name) == expected

    def test_unknown_profile(self):
        with pytest.raises(ValueError):
            get_profile("citi")


class TestOverride:

    def test_missing_values_keep_baseline(self):
        record = ParsedStatement(card_ending="1234")
        assert override(record, card_ending=None, transactions=[]) is record

    def test_present_values_replace(self):
        record = ParsedStatement(card_ending="1234")
        updated = override(record, card_ending="5678")
        assert updated.card_ending == "5678"
        assert record.card_ending == "1234"


class TestAxis:

    TEXT = "\n".join([
        "AXIS BANK",
        "Statement Period: 01/03/2024 to 31/03/2024",
        "Card No: XXXX XXXX XXXX 4321",
        "XXXX XXXX XXXX 4321",
        "05/03/2024 SWIGGY ORDER 450.00 Dr",
        "06/03/2024 UBER TRIP 300.00 0r",
        "10/03/2024 REFUND 100.00 Cr",
    ])

    def test_statement(self):
        parsed = AXIS.parse(self.TEXT)
        assert parsed.card_ending == "4321"
        assert parsed.statement_period == StatementPeriod(from_date=date(2024, 3, 1),
                                                          to_date=date(2024, 3, 31))
        assert parsed.payment_due_date == date(2024, 4, 20)
        assert [t.amount for t in parsed.transactions] == [
            Decimal("-450.00"), Decimal("-300.00"), Decimal("100.00"),
        ]
        assert parsed.total_amount_due == Decimal("750.00")

    def test_ocr_debit_marker_is_axis_only(self):
        generic = parse_generic(self.TEXT)
        assert generic.transactions[1].amount == Decimal("300.00")

    def test_printed_due_date_wins(self):
        parsed = AXIS.parse(self.TEXT + "\nPayment Due Date: 15/04/2024")
        assert parsed.payment_due_date == date(2024, 4, 15)

    def test_total_below_label(self):
        parsed = AXIS.parse("AXIS BANK\nTotal Payment Due\n12,345.67")
        assert parsed.total_amount_due == Decimal("12345.67")


class TestHDFC:

    def test_equals_line(self):
        text = "\n".join([
            "HDFC BANK",
            "Total Amount Due",
            "Minimum Due 200.00",
            "= Rs. 999.00",
            "Credit Limit 1,00,000.00",
        ])
        assert HDFC.parse(text).total_amount_due == Decimal("999.00")

    def test_repair_rupee(self):
        assert repair_rupee(GARBLED_RUPEE + "1,000.00") == "₹1,000.00"

    def test_summary_beats_inflated_label_value(self):
        r = GARBLED_RUPEE
        text = "\n".join([
            "HDFC BANK",
            f"Previous Statement Dues {r}1,000.00",
            f"Payments/Credits Received {r}1,000.00",
            f"Purchases/Debit {r}850.00",
            f"Finance Charges {r}0.00",
            "TOTAL AMOUNT DUE",
            f"{r}2,500.00",
        ])
        assert HDFC.parse(text).total_amount_due == Decimal("850.00")

    def test_due_date_far_below_label(self):
        text = "\n".join([
            "HDFC BANK",
            "Payment Due Date",
            "Statement Date",
            "Credit Limit",
            "Available Credit Limit",
            "Available Cash Limit",
            "15/04/2024",
        ])
        assert HDFC.parse(text).payment_due_date == date(2024, 4, 15)
        assert parse_generic(text).payment_due_date is None


class TestICICI:

    TEXT = "\n".join([
        "ICICI Bank",
        "Name: MR. RAVI KUMAR",
        "Card Number 4375 XXXX XXXX 8899",
        "Statement Date 20/03/2024",
        "Total Amount Due 1,200.00 5,000.00",
        "Mar 05, 2024 AMAZON PURCHASE 500.00",
        "31/02/2024 BAD ROW 10.00",
        "12/03/2024 REFUND 50.00 CR",
    ])

    def test_statement(self):
        parsed = ICICI.parse(self.TEXT)
        assert parsed.card_owner_name == "RAVI KUMAR"
        assert parsed.card_ending == "8899"
        assert parsed.total_amount_due == Decimal("1200.00")
        assert [(t.transaction_date, t.amount) for t in parsed.transactions] == [
            (date(2024, 3, 5), Decimal("500.00")),
            (date(2024, 3, 12), Decimal("50.00")),
        ]
        assert parsed.statement_period == StatementPeriod(from_date=date(2024, 3, 5),
                                                          to_date=date(2024, 3, 20))

    def test_short_derived_period_ignored(self):
        parsed = ICICI.parse("ICICI Bank\nStatement Date 10/03/2024\n05/03/2024 SHOP 100.00")
        assert parsed.statement_period == StatementPeriod()

    def test_explicit_period(self):
        parsed = ICICI.parse("ICICI Bank\nStatement period : 05 Feb 2024 to 04 Mar 2024")
        assert parsed.statement_period == StatementPeriod(from_date=date(2024, 2, 5),
                                                          to_date=date(2024, 3, 4))


class TestSBI:

    def test_statement(self):
        text = "\n".join([
            "SBI Card",
            "Account Holder Name: KAVYA IYER",
            "Card Number: XXXX XXXX XXXX 2468",
            "Opening Balance on 01/03/2024 0.00",
            "Closing Balance on 31/03/2024 3,210.00",
            "Total Amount Due",
            "3,210.00",
        ])
        parsed = SBI.parse(text)
        assert parsed.card_owner_name == "KAVYA IYER"
        assert parsed.card_ending == "2468"
        assert parsed.total_amount_due == Decimal("3210.00")
        assert parsed.statement_period == StatementPeriod(from_date=date(2024, 3, 1),
                                                          to_date=date(2024, 3, 31))


class TestAmex:

    def test_statement(self):
        text = "\n".join([
            "American Express",
            "ANITA DESAI",
            "Card Number: XXXX XXXXXX X1005",
            "New Balance Rs. 4,500.00",
            "Minimum Payment Due Rs. 225.00",
            "Payment Due Date",
            "12/04/2024",
        ])
        parsed = AMEX.parse(text)
        assert parsed.card_owner_name == "ANITA DESAI"
        assert parsed.card_ending == "1005"
        assert parsed.total_amount_due == Decimal("4500.00")
        assert parsed.payment_due_date == date(2024, 4, 12)

    def test_empty_text(self):
        assert AMEX.parse("") == ParsedStatement()
