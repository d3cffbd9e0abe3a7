"""
Exchange Rate Provider

DESIGN DECISION: Rates fail soft.
If the rate source is down, the dashboard still has to render and saves still
have to go through, so get_rates() ALWAYS returns a usable table:
1. Fresh cache → returned as is, no network
2. Otherwise fetch, derive the TRY-anchored table and cache it
3. Any failure → the hard-coded fallback table (not cached, so the next call retries)

This is deliberately different from storage errors, which always propagate.
"""

from datetime import datetime, timedelta
from typing import Callable, Optional

import structlog
from pydantic import BaseModel, Field

from payment_tracker.audit import AuditLogger
from payment_tracker.currency.interface import RateQuote, RateSource, RateSourceError
from payment_tracker.models.payment import Currency, utc_now


# TRY per unit, used whenever live rates are unavailable
FALLBACK_RATES: dict[Currency, float] = {
    Currency.TRY: 1.0,
    Currency.USD: 43.10,
    Currency.EUR: 50.00,
    Currency.GBP: 57.80,
}

QUOTE_BASE = Currency.EUR
QUOTE_SYMBOLS = [Currency.TRY, Currency.USD, Currency.GBP]

DEFAULT_CACHE_DURATION = timedelta(hours=24)


class CachedRates(BaseModel):
    """A rate table and when it was fetched."""

    rates: dict[Currency, float]
    fetched_at: datetime
    rate_date: Optional[str] = Field(
        default=None,
        description="Date reported by the rate source"
    )

    def is_fresh(self, now: datetime, max_age: timedelta) -> bool:
        return now - self.fetched_at < max_age


def anchor_rates_from_quote(quote: RateQuote) -> dict[Currency, float]:
    """
    Turn EUR-based quotes into a TRY-anchored table.

    Quotes say 1 EUR = X TRY and 1 EUR = Y USD, so 1 USD = X / Y TRY.
    """
    if quote.base.upper() != QUOTE_BASE.value:
        raise RateSourceError(f"Expected {QUOTE_BASE.value} quotes, got {quote.base}")

    quoted = {code.upper(): value for code, value in quote.rates.items()}
    missing = [c.value for c in QUOTE_SYMBOLS if c.value not in quoted]
    if missing:
        raise RateSourceError(f"Rate source response missing: {', '.join(missing)}")
    if any(not quoted[c.value] or quoted[c.value] <= 0 for c in QUOTE_SYMBOLS):
        raise RateSourceError("Rate source returned a non-positive rate")

    try_per_eur = quoted[Currency.TRY.value]
    return {
        Currency.TRY: 1.0,
        Currency.USD: try_per_eur / quoted[Currency.USD.value],
        Currency.EUR: try_per_eur,
        Currency.GBP: try_per_eur / quoted[Currency.GBP.value],
    }


class RateProvider:
    """
    Serves TRY-anchored rate tables with time-based caching and a static fallback.

    The cache is owned by this instance; nothing else mutates it.
    """

    def __init__(
        self,
        source: RateSource,
        cache_duration: timedelta = DEFAULT_CACHE_DURATION,
        clock: Optional[Callable[[], datetime]] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._source = source
        self._cache_duration = cache_duration
        self._clock = clock or utc_now
        self._audit_logger = audit_logger
        self._cache: Optional[CachedRates] = None
        self._logger = structlog.get_logger(__name__)

    @property
    def cached(self) -> Optional[CachedRates]:
        return self._cache

    def invalidate(self) -> None:
        """Drop the cached table so the next call fetches again."""
        self._cache = None

    async def get_rates(self) -> dict[Currency, float]:
        """
        Get the current rate table. Never raises.
        """
        now = self._clock()
        if self._cache is not None and self._cache.is_fresh(now, self._cache_duration):
            return dict(self._cache.rates)

        try:
            quote = await self._source.fetch_latest(
                base=QUOTE_BASE.value,
                symbols=[c.value for c in QUOTE_SYMBOLS],
            )
            rates = anchor_rates_from_quote(quote)
        except Exception as e:
            # Any failure here degrades to the fallback table
            self._logger.warning("rates_fallback_used", error=str(e))
            if self._audit_logger:
                await self._audit_logger.log_rates_fallback_used(str(e))
            return dict(FALLBACK_RATES)

        self._cache = CachedRates(rates=rates, fetched_at=now, rate_date=quote.date)
        if self._audit_logger:
            await self._audit_logger.log_rates_fetched(
                {c.value: r for c, r in rates.items()},
                quote.date,
            )
        return dict(rates)
