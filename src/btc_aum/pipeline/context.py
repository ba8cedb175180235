from __future__ import annotations

from dataclasses import dataclass

from ..adapters.price_adapters.base import BasePriceResolver
from ..clients.binance import BinanceClient
from ..domain import AumCalculation, PortfolioSnapshot
from ..report import AumReport
from ..state import AppState


@dataclass
class PipelineContext:
    state: AppState
    client: BinanceClient
    resolver: BasePriceResolver
    snapshot: PortfolioSnapshot | None = None
    calculation: AumCalculation | None = None
    report: AumReport | None = None

    @property
    def snapshot_required(self) -> PortfolioSnapshot:
        if self.snapshot is None:
            raise RuntimeError(
                "Snapshot has not been set. Ensure collect_snapshot() is called before accessing this property."
            )
        return self.snapshot

    @property
    def calculation_required(self) -> AumCalculation:
        if self.calculation is None:
            raise RuntimeError(
                "Calculation has not been set. Ensure value_portfolio() is called before accessing this property."
            )
        return self.calculation

    @property
    def report_required(self) -> AumReport:
        if self.report is None:
            raise RuntimeError(
                "Report has not been set. Ensure build_report() is called before accessing this property."
            )
        return self.report
