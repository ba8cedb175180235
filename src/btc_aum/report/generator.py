from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from ..domain import AumCalculation, PortfolioSnapshot


@dataclass(frozen=True)
class AumReport:
    """AUM calculation together with the snapshot it was derived from."""

    timestamp: datetime
    data: PortfolioSnapshot
    calculation: AumCalculation

    def to_dict(self) -> dict[str, object]:
        """Convert report to dictionary format."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "data": self.data.to_dict(),
            "calculation": self.calculation.to_dict(),
        }


async def generate_report(
    snapshot: PortfolioSnapshot,
    calculation: AumCalculation,
    timestamp: datetime | None = None,
) -> AumReport:
    """Generate an AUM report from processed data.

    Args:
        snapshot: Portfolio snapshot that was valued
        calculation: Result of the valuation
        timestamp: Report time, defaults to now (UTC)

    Returns:
        Complete report ready for publishing
    """
    return AumReport(
        timestamp=timestamp or datetime.now(timezone.utc),
        data=snapshot,
        calculation=calculation,
    )
