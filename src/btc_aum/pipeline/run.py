"""High-level pipeline orchestration."""

from __future__ import annotations

import asyncio

from ..adapters.price_adapters import BinancePriceResolver
from ..clients.binance import BinanceClient
from ..state import AppState
from .context import PipelineContext
from .report import build_report, publish_report
from .snapshot import collect_snapshot
from .valuation import value_portfolio


def build_context(state: AppState) -> PipelineContext:
    """Wire the Binance client and price resolver from settings."""
    s = state.settings
    client = BinanceClient(
        s.api_key_required,
        s.api_secret_required,
        s.api_base_url,
        s.papi_base_url,
        timeout=s.timeout,
        max_tries=s.http_retries,
    )
    resolver = BinancePriceResolver(client, s.quote_currency)
    return PipelineContext(state=state, client=client, resolver=resolver)


async def run_report(
    state: AppState, ctx: PipelineContext | None = None
) -> PipelineContext:
    """Execute one fetch-value-publish cycle.

    This is a thin orchestrator that sequences the pipeline steps:
    1. Snapshot collection
    2. Valuation
    3. Report generation
    4. Publishing

    Args:
        state: Application state containing settings and logger
        ctx: Pre-built context, built from settings when omitted

    Returns:
        The context populated with snapshot, calculation and report
    """
    s = state.settings
    log = state.logger
    ctx = ctx or build_context(state)

    log.info("Starting report", extra={"quote_currency": s.quote_currency})

    timeout_s = s.global_timeout_seconds

    async def _run_pipeline() -> None:
        await collect_snapshot(ctx)
        await value_portfolio(ctx)
        await build_report(ctx)
        await publish_report(ctx)

    try:
        if timeout_s is None or timeout_s <= 0:
            await _run_pipeline()
        else:
            async with asyncio.timeout(timeout_s):
                await _run_pipeline()
    except asyncio.TimeoutError as exc:
        log.error("Report pipeline timed out", extra={"timeout_seconds": timeout_s})
        raise asyncio.TimeoutError(
            f"Report exceeded global timeout {timeout_s}s\n N.B. This can be changed via "
            "`global_timeout_seconds` or env var `BTC_AUM_GLOBAL_TIMEOUT_SECONDS`."
        ) from exc

    log.info("Report completed")
    return ctx


async def run_forever(state: AppState, max_iterations: int | None = None) -> None:
    """Run the report every ``interval`` seconds.

    Failures of a single cycle are logged and the loop continues.

    Args:
        state: Application state containing settings and logger
        max_iterations: Stop after this many cycles (unbounded when None)
    """
    s = state.settings
    log = state.logger
    iteration = 0

    while max_iterations is None or iteration < max_iterations:
        iteration += 1
        try:
            await run_report(state, build_context(state))
        except Exception as e:
            log.error("Failed to fetch/compute report: %s", e)

        if max_iterations is not None and iteration >= max_iterations:
            break
        await asyncio.sleep(s.interval)
