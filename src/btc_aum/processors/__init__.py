from __future__ import annotations

from .aum_calculator import compute_aum

__all__ = ["compute_aum"]
