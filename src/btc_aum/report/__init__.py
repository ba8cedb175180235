from __future__ import annotations

from .generator import AumReport, generate_report
from .publisher import publish_report

__all__ = [
    "AumReport",
    "generate_report",
    "publish_report",
]
