"""
Shared fixtures for Payment Tracker tests.

No real API calls in tests: rate sources and remote stores are in-memory fakes.
"""

from datetime import datetime, timedelta, timezone

import pytest

from payment_tracker.currency import RateProvider, RateQuote, RateSource, RateSourceError
from payment_tracker.models.payment import Currency
from payment_tracker.services.storage import InMemoryJSONStore, LocalFileSource


PATH = "payments.json"

# TRY per unit
RATES = {
    Currency.TRY: 1.0,
    Currency.USD: 40.0,
    Currency.EUR: 50.0,
    Currency.GBP: 60.0,
}


class FakeRateSource(RateSource):
    """Returns queued quotes (or raises queued errors) and counts calls."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = 0

    async def fetch_latest(self, base, symbols):
        self.calls += 1
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start=None):
        self.now = start or datetime(2026, 1, 15, 9, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


def eur_quote(try_per_eur=50.0, usd_per_eur=1.25, gbp_per_eur=0.8, date="2026-01-15"):
    return RateQuote(
        base="EUR",
        rates={"TRY": try_per_eur, "USD": usd_per_eur, "GBP": gbp_per_eur},
        date=date,
    )


def payment_dict(payment_id, **overrides):
    data = {
        "id": payment_id,
        "itemName": f"Item {payment_id}",
        "companyName": "Acme Ltd",
        "serviceType": "Consulting",
        "projectName": "Alpha",
        "currency": "TRY",
        "previousDebt": 0,
        "currentDebt": 100,
        "totalDebt": 100,
        "paid": 0,
        "remaining": 100,
        "invoiceStatus": "FATURASIZ",
        "documentUploaded": False,
        "documentURL": "",
    }
    data.update(overrides)
    return data


def document_dict(*payments):
    return {
        "payments": list(payments),
        "summary": {},
        "metadata": {"currency": {"TRY": 1, "EUR": 50}, "lastUpdate": None},
    }


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rate_source():
    return FakeRateSource(RateSourceError("offline"))


@pytest.fixture
def fixed_rate_provider(clock):
    """Provider whose every fetch succeeds with RATES (1 EUR = 50 TRY etc.)."""
    quote = eur_quote(try_per_eur=50.0, usd_per_eur=1.25, gbp_per_eur=50.0 / 60.0)
    return RateProvider(FakeRateSource(quote), clock=clock)


@pytest.fixture
def remote():
    return InMemoryJSONStore({PATH: document_dict(
        payment_dict(1),
        payment_dict(2, itemName="Hosting", companyName="Globex", currency="EUR",
                     currentDebt=200, totalDebt=200, remaining=200, projectName="Beta"),
    )})


@pytest.fixture
def empty_local(tmp_path):
    return LocalFileSource(tmp_path)
