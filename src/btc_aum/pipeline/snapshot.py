"""Portfolio snapshot collection."""

from __future__ import annotations

from .context import PipelineContext


async def collect_snapshot(ctx: PipelineContext) -> None:
    """Fetch margin account and spot balances from Binance.

    Sets the snapshot in the context.
    """
    s = ctx.state.settings
    log = ctx.state.logger

    log.info(
        "Fetching account data (%d spot assets, %d positions)...",
        len(s.spot_assets),
        len(s.um_positions),
    )
    ctx.snapshot = await ctx.client.fetch_portfolio_snapshot(
        s.um_positions, s.spot_assets
    )
    log.debug("Snapshot: %s", ctx.snapshot)
