"""
Derived field tests.

Verifies:
- digital root of a mobile number
- RTS transition on and after the RTS date (date-only comparison)
- safe custody arrival for COCP numbers
"""

from datetime import date, datetime
from types import SimpleNamespace

import pytest

from numberflow.services.derived_fields import (
    RtsState,
    digital_root,
    evaluate_rts_transition,
    is_rts_due,
    safe_custody_due,
)


class TestDigitalRoot:

    @pytest.mark.parametrize(
        "mobile,expected",
        [
            ("9876543210", 9),
            ("1111111111", 1),
            ("1234567890", 9),
            ("9000000001", 1),
            ("0000000000", 0),
        ],
    )
    def test_reduces_to_single_digit(self, mobile, expected):
        assert digital_root(mobile) == expected

    def test_skips_non_digits(self):
        assert digital_root("98765-43210") == digital_root("9876543210")

    @pytest.mark.parametrize(
        "mobile",
        ["9876543210", "1000000000", "9999999999", "1234512345", "5550001234", "0000000009", "7012345678"],
    )
    def test_matches_mod_nine_formula(self, mobile):
        digit_sum = sum(int(ch) for ch in mobile)
        assert digit_sum > 0
        assert digital_root(mobile) == 1 + (digit_sum - 1) % 9


class TestRtsTransition:

    NOW = datetime(2024, 6, 1, 8, 30)

    def test_due_number_becomes_rts_and_clears_date(self):
        record = RtsState("9876543210", "Non-RTS", datetime(2024, 5, 31))
        result = evaluate_rts_transition(record, self.NOW)
        assert result.status == "RTS"
        assert result.rts_date is None
        assert result.mobile == "9876543210"

    def test_same_day_later_time_is_due(self):
        record = RtsState("9876543210", "Non-RTS", datetime(2024, 6, 1, 23, 0))
        assert evaluate_rts_transition(record, self.NOW).status == "RTS"

    def test_future_date_is_unchanged(self):
        record = RtsState("9876543210", "Non-RTS", datetime(2024, 6, 2))
        assert evaluate_rts_transition(record, self.NOW) is record

    def test_already_rts_is_unchanged(self):
        record = RtsState("9876543210", "RTS", None)
        assert evaluate_rts_transition(record, self.NOW) is record

    def test_missing_date_is_unchanged(self):
        record = RtsState("9876543210", "Non-RTS", None)
        assert evaluate_rts_transition(record, self.NOW) is record

    def test_accepts_plain_dates(self):
        assert is_rts_due(date(2024, 6, 1), self.NOW)
        assert not is_rts_due(date(2024, 6, 2), self.NOW)
        assert not is_rts_due(None, self.NOW)


class TestSafeCustody:

    NOW = datetime(2024, 6, 1, 12, 0)

    def _number(self, **overrides):
        fields = {
            "number_type": "COCP",
            "safe_custody_date": datetime(2024, 6, 1),
            "safe_custody_notified": False,
        }
        fields.update(overrides)
        return SimpleNamespace(**fields)

    def test_arrived_date_is_due(self):
        assert safe_custody_due(self._number(), self.NOW)

    def test_future_date_is_not_due(self):
        assert not safe_custody_due(self._number(safe_custody_date=datetime(2024, 6, 2)), self.NOW)

    def test_already_notified_is_not_due(self):
        assert not safe_custody_due(self._number(safe_custody_notified=True), self.NOW)

    def test_only_cocp_numbers(self):
        assert not safe_custody_due(self._number(number_type="Prepaid"), self.NOW)
