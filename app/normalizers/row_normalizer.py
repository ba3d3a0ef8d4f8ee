"""
app/normalizers/row_normalizer.py

Field coercion for policy CSV rows.

Nothing here raises: a malformed value degrades to the field's default so a
single bad cell never aborts the row.
"""

from __future__ import annotations

import logging
import math
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from app.domain.policy_row import NormalizedRow

logger = logging.getLogger(__name__)

DATE_FORMATS: tuple[str, ...] = (
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%m-%d-%Y",
    "%d %b %Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%Y-%m-%d %H:%M:%S",
)

# source column -> NormalizedRow field, for plain text values
TEXT_COLUMNS: dict[str, str] = {
    "agent": "agent",
    "agency_id": "agency_id",
    "firstname": "firstname",
    "address": "address",
    "phone": "phone",
    "state": "state",
    "zip": "zip",
    "email": "email",
    "gender": "gender",
    "userType": "user_type",
    "city": "city",
    "account_name": "account_name",
    "account_type": "account_type",
    "category_name": "category_name",
    "company_name": "company_name",
    "policy_number": "policy_number",
    "policy_type": "policy_type",
    "producer": "producer",
    "csr": "csr",
    "Applicant ID": "applicant_id",
}

DATE_COLUMNS: dict[str, str] = {
    "dob": "dob",
    "policy_start_date": "policy_start_date",
    "policy_end_date": "policy_end_date",
}

AMOUNT_COLUMNS: dict[str, str] = {
    "premium_amount": "premium_amount",
    "premium_amount_written": "premium_amount_written",
}

FLAG_COLUMNS: dict[str, str] = {
    "primary": "primary",
    "hasActive": "has_active",
}

# policy_mode is stored in a 32-bit integer column
INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1
POLICY_MODE_MAX_DIGITS = 9


class RowNormalizer:
    """
    Turns one string-keyed CSV row into a NormalizedRow.
    """

    def normalize(self, raw_row: Mapping[str, Any]) -> NormalizedRow:
        values: dict[str, Any] = {}

        for column, field_name in TEXT_COLUMNS.items():
            values[field_name] = self.parse_text(raw_row.get(column))
        for column, field_name in DATE_COLUMNS.items():
            values[field_name] = self.parse_date(raw_row.get(column))
        for column, field_name in AMOUNT_COLUMNS.items():
            values[field_name] = self.parse_amount(raw_row.get(column))
        for column, field_name in FLAG_COLUMNS.items():
            values[field_name] = self.parse_flag(raw_row.get(column))
        values["policy_mode"] = self.parse_policy_mode(raw_row.get("policy_mode"))

        return NormalizedRow(**values)

    def parse_text(self, value: Any) -> str | None:
        if self._is_blank(value):
            return None
        return str(value).strip()

    def parse_date(self, value: Any) -> date | None:
        """
        ISO-8601 first, then the fixed DATE_FORMATS list; otherwise None.
        """

        if self._is_blank(value):
            return None

        raw = str(value).strip()
        normalized = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
        try:
            return datetime.fromisoformat(normalized).date()
        except ValueError:
            pass

        for fmt in DATE_FORMATS:
            try:
                return datetime.strptime(raw, fmt).date()
            except ValueError:
                continue

        logger.debug("Unparsable date value %r; storing no value", raw)
        return None

    def parse_amount(self, value: Any) -> float:
        number = self._parse_decimal(value)
        if number is None:
            return 0.0
        amount = float(number)
        # Decimal accepts exponents a float cannot hold; those overflow to inf.
        return amount if math.isfinite(amount) else 0.0

    def parse_policy_mode(self, value: Any) -> int | None:
        number = self._parse_decimal(value)
        if number is None or number.adjusted() > POLICY_MODE_MAX_DIGITS:
            return None
        mode = int(number)
        if not INT32_MIN <= mode <= INT32_MAX:
            logger.debug("policy_mode %r outside the integer column range; storing no value", value)
            return None
        return mode

    def parse_flag(self, value: Any) -> bool:
        # Case-sensitive: "TRUE" and "True" are false.
        return value == "true"

    def _parse_decimal(self, value: Any) -> Decimal | None:
        if self._is_blank(value):
            return None
        try:
            number = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return None
        if not number.is_finite():
            return None
        return number

    @staticmethod
    def _is_blank(value: Any) -> bool:
        if value is None:
            return True
        return str(value).strip() == ""
