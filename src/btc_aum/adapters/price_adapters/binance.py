from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING

from ...constants import BTC_SYMBOL
from ...errors import BinanceAPIError, MissingPriceError
from ...units import AUM_DECIMAL_CONTEXT
from .base import BasePriceResolver

if TYPE_CHECKING:
    from ...clients.binance import BinanceClient

logger = logging.getLogger(__name__)


class BinancePriceResolver(BasePriceResolver):
    """Resolve BTC prices from Binance spot tickers.

    Exchanges often list only one side of an asset/BTC pair, so an asset is
    looked up as ``BTC<ASSET>`` first and as ``<ASSET>BTC`` (inverted) when the
    direct pair does not exist. Only Binance's "Invalid symbol" error counts as
    a missing pair; every other failure propagates.
    """

    def __init__(self, client: BinanceClient, quote_currency: str):
        self.client = client
        self.quote_currency = quote_currency.strip().upper()

    async def _ticker_or_none(self, symbol: str) -> Decimal | None:
        """Fetch a ticker price, returning None when the pair is unknown."""
        try:
            return await self.client.ticker_price(symbol)
        except BinanceAPIError as e:
            if e.is_unknown_symbol:
                logger.debug("Pair %s not listed: %s", symbol, e)
                return None
            raise

    async def price_of_btc_in_quote_currency(self) -> Decimal:
        price = await self.client.ticker_price(f"{BTC_SYMBOL}{self.quote_currency}")
        if price.is_zero():
            raise MissingPriceError(self.quote_pair)
        return price

    async def price_of_btc_in_asset(self, asset: str) -> Decimal:
        """Return the price of 1 BTC denominated in ``asset``.

        Args:
            asset: Asset symbol, any case.

        Returns:
            Units of ``asset`` per BTC.

        Raises:
            MissingPriceError: If neither ``BTC<ASSET>`` nor ``<ASSET>BTC`` is
                listed, or the inverse pair is quoted at zero.
            BinanceAPIError: For any API error other than an unknown pair.
        """
        asset = asset.strip().upper()
        if asset == BTC_SYMBOL:
            return Decimal(1)

        if asset == self.quote_currency:
            return await self.price_of_btc_in_quote_currency()

        direct = await self._ticker_or_none(f"{BTC_SYMBOL}{asset}")
        if direct is not None:
            return direct

        inverse = await self._ticker_or_none(f"{asset}{BTC_SYMBOL}")
        if inverse is None or inverse.is_zero():
            raise MissingPriceError(asset)

        logger.debug("Using inverse pair %s%s for %s", asset, BTC_SYMBOL, asset)
        return AUM_DECIMAL_CONTEXT.divide(Decimal(1), inverse)
