from __future__ import annotations

import asyncio
import logging
from decimal import Decimal, localcontext

from ..adapters.price_adapters.base import BasePriceResolver
from ..constants import WBTC_SYMBOL
from ..domain import AumCalculation, PortfolioSnapshot, SpotContribution, SpotHolding
from ..errors import MissingPriceError, NegativeAumError
from ..units import (
    AUM_DECIMAL_CONTEXT,
    EXACT_DECIMAL_CONTEXT,
    from_fixed_point,
    to_fixed_point,
)

logger = logging.getLogger(__name__)


async def _btc_to_asset_price(
    holding: SpotHolding, resolver: BasePriceResolver
) -> Decimal:
    asset = holding.asset.upper()
    if asset == WBTC_SYMBOL:
        # Wrapped BTC is redeemable 1:1 and never priced
        return Decimal(1)
    price = await resolver.price_of_btc_in_asset(asset)
    if price.is_zero():
        raise MissingPriceError(asset)
    return price


async def _lookup_prices_concurrently(
    holdings: tuple[SpotHolding, ...], resolver: BasePriceResolver
) -> list[Decimal]:
    """Resolve every holding in parallel; the first failure cancels the rest."""
    try:
        async with asyncio.TaskGroup() as tg:
            tasks = [
                tg.create_task(_btc_to_asset_price(holding, resolver))
                for holding in holdings
            ]
    except ExceptionGroup as eg:
        raise eg.exceptions[0] from None
    return [task.result() for task in tasks]


async def compute_aum(
    snapshot: PortfolioSnapshot,
    resolver: BasePriceResolver,
    *,
    concurrent: bool = True,
) -> AumCalculation:
    """Value a portfolio snapshot in BTC.

    Args:
        snapshot: Margin equity and spot holdings to value
        resolver: Source of BTC prices
        concurrent: Issue per-holding price lookups concurrently

    Returns:
        AumCalculation with the full-precision total, its truncated 1e-8 BTC
        fixed-point encoding and one contribution per holding in input order.

    Raises:
        MissingPriceError: If any required price is zero or unavailable
        NegativeAumError: If margin equity and spot value sum below zero
        FixedPointOverflowError: If the total does not fit a signed 128-bit
            integer of 1e-8 BTC units

    Resolver failures propagate unchanged; no partial result is returned.
    Quotients are taken at ``AUM_DECIMAL_CONTEXT`` precision; the sums built
    from them are exact.
    """
    holdings = snapshot.spot_holdings
    if concurrent:
        prices = await _lookup_prices_concurrently(holdings, resolver)
    else:
        prices = [await _btc_to_asset_price(holding, resolver) for holding in holdings]

    btc_usd_price = await resolver.price_of_btc_in_quote_currency()
    if btc_usd_price.is_zero():
        raise MissingPriceError(resolver.quote_pair)

    contributions: list[SpotContribution] = []
    for holding, price in zip(holdings, prices):
        if holding.asset.upper() == WBTC_SYMBOL:
            amount_btc = holding.amount
        else:
            amount_btc = AUM_DECIMAL_CONTEXT.divide(holding.amount, price)
        contributions.append(
            SpotContribution(
                asset=holding.asset,
                amount=holding.amount,
                btc_to_asset_price=price,
                amount_btc=amount_btc,
            )
        )
        logger.debug(
            "%s: %s @ %s per BTC -> %s BTC",
            holding.asset,
            holding.amount,
            price,
            amount_btc,
        )

    pm_equity_btc = AUM_DECIMAL_CONTEXT.divide(
        snapshot.margin_equity_quote, btc_usd_price
    )

    with localcontext(EXACT_DECIMAL_CONTEXT):
        spot_total_btc = Decimal(0)
        for contribution in contributions:
            spot_total_btc += contribution.amount_btc
        aum_btc = pm_equity_btc + spot_total_btc

    if aum_btc < 0:
        raise NegativeAumError(aum_btc)

    aum_wbtc_u8 = to_fixed_point(aum_btc)
    aum_wbtc = from_fixed_point(aum_wbtc_u8)

    return AumCalculation(
        aum_btc_18dp=aum_btc,
        aum_wbtc_u8=aum_wbtc_u8,
        aum_wbtc=aum_wbtc,
        spot_total_btc=spot_total_btc,
        pm_equity_usd=snapshot.margin_equity_quote,
        btc_usd_price=btc_usd_price,
        spot_contributions=tuple(contributions),
    )
