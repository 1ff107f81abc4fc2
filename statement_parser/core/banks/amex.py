"""
American Express profile.
"""
from .base import BankProfile
from .common import due_date, owner_name, strict_card_ending, total_due, transactions

AMEX = BankProfile("amex", [owner_name, strict_card_ending, total_due, due_date, transactions])
