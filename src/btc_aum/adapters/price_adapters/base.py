from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from ...constants import BTC_SYMBOL


class BasePriceResolver(ABC):
    """Abstract BTC price source.

    Implementations must hold no mutable state so that a single instance can
    serve overlapping valuations.
    """

    quote_currency: str = "USD"

    @property
    def quote_pair(self) -> str:
        """Label of the BTC/quote pair, used in missing-price errors."""
        return f"{BTC_SYMBOL}/{self.quote_currency}"

    @abstractmethod
    async def price_of_btc_in_quote_currency(self) -> Decimal:
        """Return the price of 1 BTC in the configured quote currency."""
        ...

    @abstractmethod
    async def price_of_btc_in_asset(self, asset: str) -> Decimal:
        """Return how many units of ``asset`` equal 1 BTC."""
        ...
