"""
app/domain/policy_row.py

Typed view of one policy CSV row after normalization.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class NormalizedRow:
    """
    One CSV row with every recognized column coerced to its stored type.

    Missing or unparsable optional values are None; premiums default to 0.0
    and the two flags default to False.
    """

    agent: str | None = None
    agency_id: str | None = None

    firstname: str | None = None
    dob: date | None = None
    address: str | None = None
    phone: str | None = None
    state: str | None = None
    zip: str | None = None
    email: str | None = None
    gender: str | None = None
    user_type: str | None = None
    city: str | None = None

    account_name: str | None = None
    account_type: str | None = None
    category_name: str | None = None
    company_name: str | None = None

    policy_number: str | None = None
    policy_start_date: date | None = None
    policy_end_date: date | None = None
    premium_amount: float = 0.0
    premium_amount_written: float = 0.0
    policy_type: str | None = None
    policy_mode: int | None = None
    producer: str | None = None
    csr: str | None = None
    primary: bool = False
    applicant_id: str | None = None
    has_active: bool = False
