"""
Bank profile registry.

Profiles are listed in canonical order; ties in detection and arbitration
go to the earlier bank.
"""
from typing import Dict, Optional

from .amex import AMEX
from .axis import AXIS
from .base import BankProfile, Document, override
from .hdfc import HDFC
from .icici import ICICI
from .sbi import SBI

PROFILES: Dict[str, BankProfile] = {p.bank_id: p for p in (AXIS, HDFC, SBI, ICICI, AMEX)}

BANK_IDS = tuple(PROFILES)

ALIASES = {
    "american express": "amex",
}


def resolve_bank(name: Optional[str]) -> Optional[str]:
    """Canonical bank ID for a user-supplied name, or None if unknown."""
    if not name:
        return None
    key = name.strip().lower()
    key = ALIASES.get(key, key)
    return key if key in PROFILES else None


def get_profile(bank_id: str) -> BankProfile:
    """Get a bank profile by ID."""
    profile = PROFILES.get(bank_id)
    if profile is None:
        raise ValueError(f"Unknown bank: {bank_id}")
    return profile


__all__ = [
    "PROFILES", "BANK_IDS", "ALIASES", "BankProfile", "Document",
    "override", "resolve_bank", "get_profile",
]
