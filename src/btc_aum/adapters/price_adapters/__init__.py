from __future__ import annotations

from .base import BasePriceResolver
from .binance import BinancePriceResolver

__all__ = ["BasePriceResolver", "BinancePriceResolver"]
