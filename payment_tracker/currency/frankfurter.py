"""
Frankfurter Rate Source

Fetches the latest ECB reference rates from the Frankfurter API
(https://frankfurter.dev). No API key is needed.

Network hiccups (connection errors, timeouts) are retried; HTTP errors and
malformed bodies are not, they surface as RateSourceError straight away.
"""

import asyncio
from typing import Optional

import requests
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from payment_tracker.config import get_settings
from payment_tracker.currency.interface import RateQuote, RateSource, RateSourceError


class FrankfurterRateSource(RateSource):
    """Rate source backed by the Frankfurter `/latest` endpoint."""

    def __init__(
        self,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        settings = get_settings()
        self._api_url = (api_url or settings.currency.api_url).rstrip("/")
        self._timeout = timeout or settings.app.request_timeout_seconds
        self._session = session or requests.Session()

    @retry(
        retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _get_latest(self, base: str, symbols: list[str]) -> requests.Response:
        return self._session.get(
            f"{self._api_url}/latest",
            params={"base": base, "symbols": ",".join(symbols)},
            timeout=self._timeout,
        )

    async def fetch_latest(self, base: str, symbols: list[str]) -> RateQuote:
        """Fetch the latest quotes for base against symbols."""
        try:
            response = await asyncio.to_thread(self._get_latest, base, symbols)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            raise RateSourceError(f"Frankfurter API unavailable: {e}") from e
        except ValueError as e:
            raise RateSourceError(f"Frankfurter returned invalid JSON: {e}") from e

        rates = payload.get("rates") if isinstance(payload, dict) else None
        if not isinstance(rates, dict):
            raise RateSourceError("Frankfurter response missing rates")

        try:
            return RateQuote(
                base=payload.get("base", base),
                rates=rates,
                date=payload.get("date"),
            )
        except ValueError as e:
            raise RateSourceError(f"Frankfurter returned unusable rates: {e}") from e
