"""
Currency Package

Exchange rates (with caching and a static fallback) and conversion between
the supported currencies.
"""

from payment_tracker.currency.conversion import (
    CurrencyError,
    MissingRateError,
    RateTable,
    convert,
    from_anchor,
    to_anchor,
)
from payment_tracker.currency.interface import RateQuote, RateSource, RateSourceError
from payment_tracker.currency.provider import (
    FALLBACK_RATES,
    CachedRates,
    RateProvider,
    anchor_rates_from_quote,
)
from payment_tracker.currency.frankfurter import FrankfurterRateSource

__all__ = [
    # Conversion
    "CurrencyError",
    "MissingRateError",
    "RateTable",
    "convert",
    "from_anchor",
    "to_anchor",
    # Rate sources
    "RateQuote",
    "RateSource",
    "RateSourceError",
    "FrankfurterRateSource",
    # Provider
    "FALLBACK_RATES",
    "CachedRates",
    "RateProvider",
    "anchor_rates_from_quote",
]
