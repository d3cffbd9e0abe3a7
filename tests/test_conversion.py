"""
Tests for currency conversion.
"""

import pytest

from payment_tracker.currency import MissingRateError, convert, from_anchor, to_anchor
from payment_tracker.models.payment import Currency

from tests.conftest import RATES


class TestConvert:
    """Tests for convert()."""

    def test_same_currency_is_identity(self):
        """Test same-currency conversion returns the amount unchanged."""
        assert convert(123.456, "EUR", "EUR", RATES) == 123.456

    def test_same_currency_needs_no_rate(self):
        """Test identity conversion works even with an empty table."""
        assert convert(10, Currency.GBP, Currency.GBP, {}) == 10

    def test_via_anchor(self):
        """Test cross conversion goes through TRY."""
        # 100 USD = 4000 TRY = 80 EUR
        assert convert(100, "USD", "EUR", RATES) == pytest.approx(80)

    def test_to_and_from_anchor(self):
        """Test conversion to and from TRY."""
        assert convert(2, "EUR", "TRY", RATES) == pytest.approx(100)
        assert convert(120, "TRY", "GBP", RATES) == pytest.approx(2)

    def test_legacy_code(self):
        """Test TL is accepted as TRY."""
        assert convert(50, "TL", "EUR", RATES) == pytest.approx(1)

    def test_round_trip(self):
        """Test converting there and back returns the original amount."""
        amount = 987.65
        there = convert(amount, "GBP", "USD", RATES)
        assert convert(there, "USD", "GBP", RATES) == pytest.approx(amount)


class TestMissingRate:
    """Tests for missing or unusable rates."""

    def test_missing_source_rate(self):
        """Test a missing source rate raises MissingRateError."""
        rates = {Currency.TRY: 1.0, Currency.EUR: 50.0}
        with pytest.raises(MissingRateError) as exc_info:
            convert(10, "USD", "EUR", rates)
        assert exc_info.value.currency == Currency.USD

    def test_missing_target_rate(self):
        """Test a missing target rate raises MissingRateError."""
        rates = {Currency.TRY: 1.0, Currency.USD: 40.0}
        with pytest.raises(MissingRateError) as exc_info:
            convert(10, "USD", "GBP", rates)
        assert exc_info.value.currency == Currency.GBP

    def test_missing_rate_is_never_one(self):
        """Test a missing rate is never treated as 1."""
        with pytest.raises(MissingRateError):
            to_anchor(10, Currency.EUR, {})

    def test_zero_rate_is_unusable(self):
        """Test a zero rate counts as missing."""
        with pytest.raises(MissingRateError):
            from_anchor(10, Currency.EUR, {Currency.EUR: 0})

    def test_anchor_needs_no_rate(self):
        """Test TRY needs no entry in the table."""
        assert to_anchor(10, Currency.TRY, {}) == 10
        assert from_anchor(10, Currency.TRY, {}) == 10
