"""
Tests for the exchange rate provider and the Frankfurter source.
"""

import pytest
import requests

from payment_tracker.audit import AuditLogger
from payment_tracker.currency import (
    FALLBACK_RATES,
    FrankfurterRateSource,
    RateProvider,
    RateQuote,
    RateSourceError,
    anchor_rates_from_quote,
)
from payment_tracker.models.audit import AuditEventType
from payment_tracker.models.payment import Currency

from tests.conftest import FakeRateSource, eur_quote


class TestAnchorRates:
    """Tests for deriving the TRY-anchored table from EUR quotes."""

    def test_derivation(self):
        """Test USD and GBP are derived through the TRY/EUR quote."""
        rates = anchor_rates_from_quote(eur_quote(try_per_eur=50.0, usd_per_eur=1.25, gbp_per_eur=0.8))
        assert rates[Currency.TRY] == 1.0
        assert rates[Currency.EUR] == 50.0
        assert rates[Currency.USD] == pytest.approx(40.0)
        assert rates[Currency.GBP] == pytest.approx(62.5)

    def test_missing_symbol(self):
        """Test a quote without GBP is rejected."""
        quote = RateQuote(base="EUR", rates={"TRY": 50.0, "USD": 1.1})
        with pytest.raises(RateSourceError, match="GBP"):
            anchor_rates_from_quote(quote)

    def test_wrong_base(self):
        """Test quotes must be EUR-based."""
        quote = RateQuote(base="USD", rates={"TRY": 40.0, "USD": 1.0, "GBP": 0.8})
        with pytest.raises(RateSourceError):
            anchor_rates_from_quote(quote)

    def test_non_positive_rate(self):
        """Test zero quotes are rejected."""
        with pytest.raises(RateSourceError):
            anchor_rates_from_quote(eur_quote(usd_per_eur=0))


class TestRateProvider:
    """Tests for caching and fallback."""

    @pytest.mark.asyncio
    async def test_fetches_and_caches(self, clock):
        """Test a successful fetch is cached."""
        source = FakeRateSource(eur_quote())
        provider = RateProvider(source, clock=clock)

        first = await provider.get_rates()
        second = await provider.get_rates()

        assert first == second
        assert source.calls == 1
        assert provider.cached is not None
        assert provider.cached.rate_date == "2026-01-15"

    @pytest.mark.asyncio
    async def test_cache_expires_after_24_hours(self, clock):
        """Test a stale cache triggers a new fetch."""
        source = FakeRateSource(eur_quote(try_per_eur=50.0), eur_quote(try_per_eur=52.0))
        provider = RateProvider(source, clock=clock)

        assert (await provider.get_rates())[Currency.EUR] == 50.0
        clock.advance(hours=23, minutes=59)
        assert (await provider.get_rates())[Currency.EUR] == 50.0
        clock.advance(minutes=1)
        assert (await provider.get_rates())[Currency.EUR] == 52.0
        assert source.calls == 2

    @pytest.mark.asyncio
    async def test_fallback_on_failure(self, clock, rate_source):
        """Test a failing source yields the fallback table."""
        provider = RateProvider(rate_source, clock=clock)
        rates = await provider.get_rates()
        assert rates == FALLBACK_RATES
        assert rates[Currency.EUR] == 50.0
        assert rates[Currency.USD] == 43.10

    @pytest.mark.asyncio
    async def test_fallback_not_cached(self, clock):
        """Test the next call after a fallback tries the source again."""
        source = FakeRateSource(RateSourceError("offline"), eur_quote(try_per_eur=51.0))
        provider = RateProvider(source, clock=clock)

        assert await provider.get_rates() == FALLBACK_RATES
        assert provider.cached is None
        assert (await provider.get_rates())[Currency.EUR] == 51.0
        assert source.calls == 2

    @pytest.mark.asyncio
    async def test_unexpected_error_falls_back(self, clock):
        """Test even unexpected errors never escape."""
        provider = RateProvider(FakeRateSource(KeyError("boom")), clock=clock)
        assert await provider.get_rates() == FALLBACK_RATES

    @pytest.mark.asyncio
    async def test_returns_copies(self, clock):
        """Test callers can't mutate the cached table."""
        provider = RateProvider(FakeRateSource(eur_quote()), clock=clock)
        rates = await provider.get_rates()
        rates[Currency.EUR] = 0
        assert (await provider.get_rates())[Currency.EUR] == 50.0

    @pytest.mark.asyncio
    async def test_invalidate(self, clock):
        """Test invalidate forces a fetch."""
        source = FakeRateSource(eur_quote())
        provider = RateProvider(source, clock=clock)
        await provider.get_rates()
        provider.invalidate()
        await provider.get_rates()
        assert source.calls == 2

    @pytest.mark.asyncio
    async def test_audit_events(self, clock):
        """Test fetches and fallbacks are audited."""
        audit_logger = AuditLogger()
        source = FakeRateSource(RateSourceError("offline"), eur_quote())
        provider = RateProvider(source, clock=clock, audit_logger=audit_logger)

        await provider.get_rates()
        await provider.get_rates()

        types = [e.event_type for e in audit_logger.recent_events]
        assert types == [AuditEventType.RATES_FETCHED, AuditEventType.RATES_FALLBACK_USED]


class FakeResponse:
    def __init__(self, status_code=200, payload=None, json_error=None):
        self.status_code = status_code
        self._payload = payload
        self._json_error = json_error
        self.text = ""

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if self._json_error:
            raise self._json_error
        return self._payload


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.requests = []

    def get(self, url, **kwargs):
        self.requests.append((url, kwargs))
        return self.response


class TestFrankfurterRateSource:
    """Tests for the Frankfurter HTTP source (no network)."""

    @pytest.mark.asyncio
    async def test_fetch_latest(self):
        """Test the request shape and parsed quote."""
        session = FakeSession(FakeResponse(payload={
            "amount": 1.0,
            "base": "EUR",
            "date": "2026-01-15",
            "rates": {"GBP": 0.8, "TRY": 50.0, "USD": 1.25},
        }))
        source = FrankfurterRateSource(api_url="https://rates.test/v1/", timeout=5, session=session)

        quote = await source.fetch_latest("EUR", ["TRY", "USD", "GBP"])

        url, kwargs = session.requests[0]
        assert url == "https://rates.test/v1/latest"
        assert kwargs["params"] == {"base": "EUR", "symbols": "TRY,USD,GBP"}
        assert kwargs["timeout"] == 5
        assert quote.base == "EUR"
        assert quote.rates["TRY"] == 50.0
        assert quote.date == "2026-01-15"

    @pytest.mark.asyncio
    async def test_http_error(self):
        """Test HTTP errors become RateSourceError."""
        source = FrankfurterRateSource(
            api_url="https://rates.test", timeout=5, session=FakeSession(FakeResponse(status_code=503))
        )
        with pytest.raises(RateSourceError):
            await source.fetch_latest("EUR", ["TRY"])

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        """Test an unparseable body becomes RateSourceError."""
        response = FakeResponse(json_error=ValueError("Expecting value"))
        source = FrankfurterRateSource(api_url="https://rates.test", timeout=5, session=FakeSession(response))
        with pytest.raises(RateSourceError):
            await source.fetch_latest("EUR", ["TRY"])

    @pytest.mark.asyncio
    async def test_missing_rates(self):
        """Test a body without rates becomes RateSourceError."""
        response = FakeResponse(payload={"message": "not found"})
        source = FrankfurterRateSource(api_url="https://rates.test", timeout=5, session=FakeSession(response))
        with pytest.raises(RateSourceError):
            await source.fetch_latest("EUR", ["TRY"])

    @pytest.mark.asyncio
    async def test_provider_falls_back_on_http_error(self, clock):
        """Test the provider degrades to fallback rates when the API fails."""
        source = FrankfurterRateSource(
            api_url="https://rates.test", timeout=5, session=FakeSession(FakeResponse(status_code=500))
        )
        provider = RateProvider(source, clock=clock)
        assert await provider.get_rates() == FALLBACK_RATES
