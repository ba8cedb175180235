from __future__ import annotations

from .context import PipelineContext
from .run import build_context, run_forever, run_report

__all__ = ["PipelineContext", "build_context", "run_forever", "run_report"]
