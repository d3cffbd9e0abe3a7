"""
Abstract Rate Source Interface

The rate provider only needs one thing from the outside world: the latest
quotes for a base currency. Keeping that behind an interface lets tests use a
fake source and keeps Frankfurter details out of the caching logic.
"""

from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel, Field


class RateQuote(BaseModel):
    """Latest quotes as returned by a rate source: units of X per 1 base unit."""

    base: str
    rates: dict[str, float] = Field(default_factory=dict)
    date: Optional[str] = Field(
        default=None,
        description="Date the quotes are valid for (YYYY-MM-DD)"
    )


class RateSource(ABC):
    """Anything that can fetch the latest exchange rates."""

    @abstractmethod
    async def fetch_latest(self, base: str, symbols: list[str]) -> RateQuote:
        """
        Fetch the latest quotes for base against the given symbols.

        Raises:
            RateSourceError: If the source is unreachable or the response is unusable
        """
        pass


class RateSourceError(Exception):
    """Rates could not be fetched or parsed."""
    pass
