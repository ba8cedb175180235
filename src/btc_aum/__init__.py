"""Binance portfolio AUM valuation in BTC and wrapped-BTC units."""

from __future__ import annotations

from .adapters.price_adapters import BasePriceResolver, BinancePriceResolver
from .domain import AumCalculation, PortfolioSnapshot, SpotContribution, SpotHolding
from .errors import (
    AumError,
    FixedPointOverflowError,
    MissingPriceError,
    NegativeAumError,
)
from .processors import compute_aum

__all__ = [
    "AumCalculation",
    "AumError",
    "BasePriceResolver",
    "BinancePriceResolver",
    "FixedPointOverflowError",
    "MissingPriceError",
    "NegativeAumError",
    "PortfolioSnapshot",
    "SpotContribution",
    "SpotHolding",
    "compute_aum",
]
