from __future__ import annotations

from .price_adapters import BasePriceResolver, BinancePriceResolver

__all__ = ["BasePriceResolver", "BinancePriceResolver"]
