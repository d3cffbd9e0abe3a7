"""
Currency Conversion

Pure functions over a rate table. A rate table maps each currency to how many
units of the anchor currency (TRY) one unit of it is worth, so
rates[TRY] == 1.0 and rates[EUR] == 50.0 means 1 EUR = 50 TRY.

A missing rate is an error. It is never treated as 1.
"""

from typing import Mapping

from payment_tracker.models.payment import (
    ANCHOR_CURRENCY,
    Currency,
    normalize_currency,
)


RateTable = Mapping[Currency, float]


class CurrencyError(Exception):
    """Base exception for currency conversion errors."""
    pass


class MissingRateError(CurrencyError):
    """A currency needed for a conversion is absent from the rate table."""

    def __init__(self, currency: Currency):
        self.currency = currency
        super().__init__(f"No usable exchange rate for {currency.value}")


def _rate_for(currency: Currency, rates: RateTable) -> float:
    try:
        rate = rates[currency]
    except KeyError:
        raise MissingRateError(currency) from None
    if rate is None or rate <= 0:
        raise MissingRateError(currency)
    return rate


def to_anchor(amount: float, currency, rates: RateTable) -> float:
    """Convert an amount into anchor (TRY) units."""
    currency = normalize_currency(currency)
    if currency == ANCHOR_CURRENCY:
        return amount
    return amount * _rate_for(currency, rates)


def from_anchor(amount: float, currency, rates: RateTable) -> float:
    """Convert an amount of anchor (TRY) units into the given currency."""
    currency = normalize_currency(currency)
    if currency == ANCHOR_CURRENCY:
        return amount
    return amount / _rate_for(currency, rates)


def convert(
    amount: float,
    from_currency,
    to_currency,
    rates: RateTable,
) -> float:
    """
    Convert an amount between currencies via the anchor currency.

    Same-currency conversions return the amount untouched, so no rounding is
    introduced when nothing needs converting.

    Raises:
        MissingRateError: If either currency has no rate in the table
    """
    source = normalize_currency(from_currency)
    target = normalize_currency(to_currency)
    if source == target:
        return amount
    return from_anchor(to_anchor(amount, source, rates), target, rates)
