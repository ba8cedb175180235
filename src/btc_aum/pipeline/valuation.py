"""Portfolio valuation."""

from __future__ import annotations

from ..processors import compute_aum
from .context import PipelineContext


async def value_portfolio(ctx: PipelineContext) -> None:
    """Value the collected snapshot in BTC.

    Sets the calculation in the context.

    Raises:
        MissingPriceError: If a required price is unavailable
        NegativeAumError: If the portfolio is worth less than zero
    """
    s = ctx.state.settings
    log = ctx.state.logger
    snapshot = ctx.snapshot_required

    log.info("Valuing %d spot holdings in BTC...", len(snapshot.spot_holdings))
    calculation = await compute_aum(
        snapshot, ctx.resolver, concurrent=s.concurrent_price_lookups
    )
    log.info(
        "AUM: %s BTC (%d wBTC units)",
        calculation.aum_wbtc,
        calculation.aum_wbtc_u8,
    )

    ctx.calculation = calculation
