"""Domain models for portfolio valuation."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal


def _decimal_str(value: Decimal) -> str:
    return format(value, "f")


@dataclass(frozen=True)
class UmPosition:
    """Open USDⓈ-M position, carried for diagnostics only."""

    symbol: str
    amount: Decimal
    pnl: Decimal

    def to_dict(self) -> dict[str, str]:
        return {
            "symbol": self.symbol,
            "amount": _decimal_str(self.amount),
            "pnl": _decimal_str(self.pnl),
        }


@dataclass(frozen=True)
class SpotHolding:
    """Spot balance of a single asset (free + locked)."""

    asset: str
    amount: Decimal

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError(
                f"Spot holding amount must be non-negative: {self.asset}={self.amount}"
            )

    def to_dict(self) -> dict[str, str]:
        return {"asset": self.asset, "amount": _decimal_str(self.amount)}


@dataclass(frozen=True)
class PortfolioSnapshot:
    """Point-in-time view of the margin account and spot balances.

    Only ``margin_equity_quote`` and ``spot_holdings`` feed the AUM figure.
    The remaining fields are passed through to the report unchanged.
    """

    margin_equity_quote: Decimal
    spot_holdings: tuple[SpotHolding, ...] = ()
    margin_ratio: Decimal = Decimal(0)
    positions: tuple[UmPosition, ...] = ()
    um_wallet_balance: Decimal = Decimal(0)
    withdrawable_amount: Decimal = Decimal(0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "spot_holdings", tuple(self.spot_holdings))
        object.__setattr__(self, "positions", tuple(self.positions))

    def to_dict(self) -> dict[str, object]:
        return {
            "unimmr": _decimal_str(self.margin_ratio),
            "positions": [p.to_dict() for p in self.positions],
            "um_balance_usdt": _decimal_str(self.um_wallet_balance),
            "spot_balances": [h.to_dict() for h in self.spot_holdings],
            "pm_account_actual_equity": _decimal_str(self.margin_equity_quote),
            "withdrawable_usdt": _decimal_str(self.withdrawable_amount),
        }


@dataclass(frozen=True)
class SpotContribution:
    """BTC equivalent of one spot holding."""

    asset: str
    amount: Decimal
    btc_to_asset_price: Decimal
    amount_btc: Decimal

    def to_dict(self) -> dict[str, str]:
        return {
            "asset": self.asset,
            "amount": _decimal_str(self.amount),
            "btc_to_asset_price": _decimal_str(self.btc_to_asset_price),
            "amount_btc": _decimal_str(self.amount_btc),
        }


@dataclass(frozen=True)
class AumCalculation:
    """Validated AUM figure with its full breakdown."""

    aum_btc_18dp: Decimal
    aum_wbtc_u8: int
    aum_wbtc: Decimal
    spot_total_btc: Decimal
    pm_equity_usd: Decimal
    btc_usd_price: Decimal
    spot_contributions: tuple[SpotContribution, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, object]:
        """Serialize with stable field names. Decimals are emitted as strings."""
        return {
            "aum_btc_18dp": _decimal_str(self.aum_btc_18dp),
            "aum_wbtc_u8": self.aum_wbtc_u8,
            "aum_wbtc": _decimal_str(self.aum_wbtc),
            "spot_total_btc": _decimal_str(self.spot_total_btc),
            "pm_equity_usd": _decimal_str(self.pm_equity_usd),
            "btc_usd_price": _decimal_str(self.btc_usd_price),
            "spot_contributions": [c.to_dict() for c in self.spot_contributions],
        }


__all__ = [
    "AumCalculation",
    "PortfolioSnapshot",
    "SpotContribution",
    "SpotHolding",
    "UmPosition",
]
