import asyncio
import json
import logging
import os
from decimal import Decimal

import pytest

from btc_aum.adapters.price_adapters import BinancePriceResolver
from btc_aum.adapters.price_adapters.base import BasePriceResolver
from btc_aum.clients.binance import BinanceClient
from btc_aum.domain import PortfolioSnapshot, SpotHolding
from btc_aum.errors import MissingConfigError, NegativeAumError
from btc_aum.pipeline import run as pipeline_run
from btc_aum.pipeline.context import PipelineContext
from btc_aum.settings import AumSettings, OutputFormat
from btc_aum.state import AppState


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    for key in list(os.environ):
        if key.startswith("BTC_AUM_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("BTC_AUM_CONFIG", str(tmp_path / "missing.toml"))


class FakeClient:
    def __init__(self, snapshot: PortfolioSnapshot):
        self.snapshot = snapshot
        self.requests: list[tuple[list[str], list[str]]] = []

    async def fetch_portfolio_snapshot(self, um_positions, spot_assets):
        self.requests.append((list(um_positions), list(spot_assets)))
        return self.snapshot


class StaticResolver(BasePriceResolver):
    def __init__(self, btc_quote: Decimal, prices: dict[str, Decimal]):
        self.btc_quote = btc_quote
        self.prices = prices

    async def price_of_btc_in_quote_currency(self) -> Decimal:
        return self.btc_quote

    async def price_of_btc_in_asset(self, asset: str) -> Decimal:
        return self.prices[asset.upper()]


def make_state(**overrides) -> AppState:
    settings = AumSettings(**overrides)
    return AppState(settings=settings, logger=logging.getLogger("test"))


def make_context(state: AppState, equity: str = "200000") -> PipelineContext:
    snapshot = PortfolioSnapshot(
        margin_equity_quote=Decimal(equity),
        spot_holdings=(SpotHolding("ETH", Decimal("1")),),
    )
    return PipelineContext(
        state=state,
        client=FakeClient(snapshot),  # type: ignore[arg-type]
        resolver=StaticResolver(Decimal(100_000), {"ETH": Decimal(50)}),
    )


@pytest.mark.asyncio
async def test_run_report_end_to_end(capsys):
    state = make_state(
        output_format=OutputFormat.JSON,
        spot_assets="ETH",
        um_positions="BTCUSDT",
    )
    ctx = make_context(state)

    result = await pipeline_run.run_report(state, ctx)

    assert result is ctx
    assert ctx.client.requests == [(["BTCUSDT"], ["ETH"])]  # type: ignore[attr-defined]
    assert ctx.calculation_required.aum_wbtc_u8 == 202_000_000
    assert ctx.report_required.data is ctx.snapshot_required

    output = json.loads(capsys.readouterr().out)
    assert output["calculation"]["aum_wbtc"] == "2.02000000"
    assert output["data"]["pm_account_actual_equity"] == "200000"


@pytest.mark.asyncio
async def test_run_report_propagates_validation_failure(capsys):
    state = make_state(output_format=OutputFormat.JSON)
    ctx = make_context(state, equity="-1000000")

    with pytest.raises(NegativeAumError):
        await pipeline_run.run_report(state, ctx)

    assert ctx.report is None
    assert capsys.readouterr().out == ""


@pytest.mark.asyncio
async def test_run_report_completes_within_timeout(monkeypatch):
    calls: list[str] = []

    def stage(name: str):
        async def _inner(ctx):  # type: ignore[unused-arg]
            calls.append(name)
            await asyncio.sleep(0.01)

        return _inner

    monkeypatch.setattr(pipeline_run, "collect_snapshot", stage("snapshot"))
    monkeypatch.setattr(pipeline_run, "value_portfolio", stage("valuation"))
    monkeypatch.setattr(pipeline_run, "build_report", stage("build"))
    monkeypatch.setattr(pipeline_run, "publish_report", stage("publish"))

    state = make_state(global_timeout_seconds=0.2)

    await pipeline_run.run_report(state, make_context(state))

    assert calls == ["snapshot", "valuation", "build", "publish"]


@pytest.mark.asyncio
async def test_run_report_raises_timeout(monkeypatch):
    async def slow(ctx):  # type: ignore[unused-arg]
        await asyncio.sleep(0.2)

    async def noop(ctx):  # type: ignore[unused-arg]
        await asyncio.sleep(0)

    monkeypatch.setattr(pipeline_run, "collect_snapshot", slow)
    monkeypatch.setattr(pipeline_run, "value_portfolio", noop)
    monkeypatch.setattr(pipeline_run, "build_report", noop)
    monkeypatch.setattr(pipeline_run, "publish_report", noop)

    state = make_state(global_timeout_seconds=0.05)

    with pytest.raises(asyncio.TimeoutError, match="global timeout"):
        await pipeline_run.run_report(state, make_context(state))


@pytest.mark.asyncio
async def test_run_forever_continues_after_failure(monkeypatch):
    state = make_state(interval=0.01)
    attempts: list[int] = []

    async def flaky_run_report(_state, _ctx):
        attempts.append(len(attempts))
        if len(attempts) == 1:
            raise ConnectionError("binance unreachable")
        return _ctx

    monkeypatch.setattr(pipeline_run, "build_context", lambda s: make_context(s))
    monkeypatch.setattr(pipeline_run, "run_report", flaky_run_report)

    await pipeline_run.run_forever(state, max_iterations=2)

    assert attempts == [0, 1]


def test_build_context_wires_client_and_resolver():
    state = make_state(
        api_key="key",
        api_secret="secret",
        quote_currency="fdusd",
        timeout=3,
        http_retries=2,
    )

    ctx = pipeline_run.build_context(state)

    assert isinstance(ctx.client, BinanceClient)
    assert ctx.client.timeout == 3
    assert ctx.client.max_tries == 2
    assert isinstance(ctx.resolver, BinancePriceResolver)
    assert ctx.resolver.quote_currency == "FDUSD"
    assert ctx.snapshot is None


def test_build_context_requires_credentials():
    state = make_state(api_key="key")

    with pytest.raises(MissingConfigError):
        pipeline_run.build_context(state)


def test_context_required_properties_guard_stage_order():
    ctx = make_context(make_state())

    with pytest.raises(RuntimeError, match="collect_snapshot"):
        _ = ctx.snapshot_required
    with pytest.raises(RuntimeError, match="value_portfolio"):
        _ = ctx.calculation_required
    with pytest.raises(RuntimeError, match="build_report"):
        _ = ctx.report_required
