"""Report generation."""

from __future__ import annotations

from ..report import generate_report
from ..report import publish_report as publish_report_impl
from .context import PipelineContext


async def build_report(ctx: PipelineContext) -> None:
    """Generate the AUM report.

    Sets the report in the context.
    """
    ctx.state.logger.info("Generating report...")
    ctx.report = await generate_report(ctx.snapshot_required, ctx.calculation_required)


async def publish_report(ctx: PipelineContext) -> None:
    """Publish the AUM report in the configured format."""
    s = ctx.state.settings
    ctx.state.logger.info("Publishing report (format=%s)...", s.output_format.value)

    await publish_report_impl(s, ctx.report_required)
