from __future__ import annotations

import unittest
from datetime import date

from app.normalizers.row_normalizer import RowNormalizer


class TestRowNormalizer(unittest.TestCase):
    def setUp(self) -> None:
        self.normalizer = RowNormalizer()

    def test_blank_premium_defaults_to_zero(self) -> None:
        row = self.normalizer.normalize({"premium_amount": "", "premium_amount_written": "  "})

        self.assertEqual(row.premium_amount, 0.0)
        self.assertEqual(row.premium_amount_written, 0.0)

    def test_non_numeric_and_non_finite_premiums_default_to_zero(self) -> None:
        self.assertEqual(self.normalizer.parse_amount("n/a"), 0.0)
        self.assertEqual(self.normalizer.parse_amount("NaN"), 0.0)
        self.assertEqual(self.normalizer.parse_amount("Infinity"), 0.0)
        self.assertAlmostEqual(self.normalizer.parse_amount(" 1180.83 "), 1180.83)

    def test_flags_are_true_only_for_lowercase_true(self) -> None:
        self.assertTrue(self.normalizer.parse_flag("true"))
        self.assertFalse(self.normalizer.parse_flag("TRUE"))
        self.assertFalse(self.normalizer.parse_flag("True"))
        self.assertFalse(self.normalizer.parse_flag("1"))
        self.assertFalse(self.normalizer.parse_flag(None))

    def test_policy_mode_parse(self) -> None:
        self.assertIsNone(self.normalizer.parse_policy_mode("abc"))
        self.assertIsNone(self.normalizer.parse_policy_mode(""))
        self.assertEqual(self.normalizer.parse_policy_mode("12"), 12)
        self.assertEqual(self.normalizer.parse_policy_mode("6.9"), 6)
        self.assertEqual(self.normalizer.parse_policy_mode("0"), 0)

    def test_policy_mode_outside_integer_column_range_is_dropped(self) -> None:
        self.assertIsNone(self.normalizer.parse_policy_mode("99999999999999999999"))
        self.assertIsNone(self.normalizer.parse_policy_mode("2147483648"))
        self.assertIsNone(self.normalizer.parse_policy_mode("-2147483649"))
        self.assertEqual(self.normalizer.parse_policy_mode("2147483647"), 2147483647)
        self.assertEqual(self.normalizer.parse_policy_mode("-5"), -5)

    def test_policy_mode_with_huge_exponent_returns_none(self) -> None:
        row = self.normalizer.normalize({"policy_mode": "1e999999999"})

        self.assertIsNone(row.policy_mode)
        self.assertIsNone(self.normalizer.parse_policy_mode("0e999999999"))
        self.assertEqual(self.normalizer.parse_policy_mode("1e-999999999"), 0)

    def test_premium_beyond_float_range_defaults_to_zero(self) -> None:
        self.assertEqual(self.normalizer.parse_amount("1e400"), 0.0)
        self.assertEqual(self.normalizer.parse_amount("-1e999999999"), 0.0)
        self.assertEqual(self.normalizer.parse_amount("1e300"), 1e300)

    def test_dates_accept_iso_and_common_formats(self) -> None:
        self.assertEqual(self.normalizer.parse_date("2018-11-02"), date(2018, 11, 2))
        self.assertEqual(self.normalizer.parse_date("2018-11-02T10:30:00Z"), date(2018, 11, 2))
        self.assertEqual(self.normalizer.parse_date("11/02/2018"), date(2018, 11, 2))
        self.assertEqual(self.normalizer.parse_date("2 Nov 2018"), date(2018, 11, 2))

    def test_unparsable_or_blank_dates_become_none(self) -> None:
        self.assertIsNone(self.normalizer.parse_date("not a date"))
        self.assertIsNone(self.normalizer.parse_date(""))
        self.assertIsNone(self.normalizer.parse_date(None))

    def test_text_is_stripped_and_blank_becomes_none(self) -> None:
        row = self.normalizer.normalize({"firstname": "  Lura ", "email": "   ", "userType": "Active Client"})

        self.assertEqual(row.firstname, "Lura")
        self.assertIsNone(row.email)
        self.assertEqual(row.user_type, "Active Client")

    def test_renamed_source_columns_are_mapped(self) -> None:
        row = self.normalizer.normalize({"Applicant ID": "AP-9", "hasActive": "true", "company_name": "Integon"})

        self.assertEqual(row.applicant_id, "AP-9")
        self.assertTrue(row.has_active)
        self.assertEqual(row.company_name, "Integon")

    def test_missing_columns_use_defaults(self) -> None:
        row = self.normalizer.normalize({})

        self.assertIsNone(row.policy_number)
        self.assertIsNone(row.dob)
        self.assertIsNone(row.policy_mode)
        self.assertFalse(row.primary)
        self.assertFalse(row.has_active)
        self.assertEqual(row.premium_amount, 0.0)


if __name__ == "__main__":
    unittest.main()
