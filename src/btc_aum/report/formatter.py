"""Rich console formatter for AUM reports."""

from __future__ import annotations

from decimal import Decimal

from rich.columns import Columns
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table

from .generator import AumReport


def _format_decimal(value: Decimal, places: int = 18) -> str:
    """Format a decimal with a fixed number of places for display."""
    return f"{value:.{places}f}"


def build_report_panel(report: AumReport) -> Panel:
    """Build the two-column AUM dashboard."""
    calc = report.calculation
    data = report.data

    summary_table = Table(show_header=False, box=None, padding=(0, 1))
    summary_table.add_column("Key", style="dim")
    summary_table.add_column("Value", style="green")
    summary_table.add_row("Timestamp", report.timestamp.isoformat())
    summary_table.add_row("AUM (wBTC units)", f"{calc.aum_wbtc_u8:,}")
    summary_table.add_row("AUM (wBTC)", _format_decimal(calc.aum_wbtc, 8))
    summary_table.add_row("AUM (BTC)", _format_decimal(calc.aum_btc_18dp))
    summary_table.add_row("Spot total (BTC)", _format_decimal(calc.spot_total_btc))
    summary_table.add_row("PM equity", _format_decimal(calc.pm_equity_usd, 8))
    summary_table.add_row("BTC price", _format_decimal(calc.btc_usd_price, 8))

    summary_panel = Panel(summary_table, title="[bold]Summary[/]", border_style="green")

    diagnostics_table = Table(show_header=False, box=None, padding=(0, 1))
    diagnostics_table.add_column("Key", style="dim")
    diagnostics_table.add_column("Value", style="cyan")
    diagnostics_table.add_row("uniMMR", _format_decimal(data.margin_ratio, 8))
    diagnostics_table.add_row(
        "UM balance (USDT)", _format_decimal(data.um_wallet_balance, 8)
    )
    diagnostics_table.add_row(
        "Withdrawable (USDT)", _format_decimal(data.withdrawable_amount, 8)
    )
    for position in data.positions:
        diagnostics_table.add_row(
            position.symbol,
            f"amount={_format_decimal(position.amount)} "
            f"pnl={_format_decimal(position.pnl)}",
        )

    diagnostics_panel = Panel(
        diagnostics_table, title="[bold]Diagnostics[/]", border_style="blue"
    )

    top_row = Columns([summary_panel, diagnostics_panel], equal=True, expand=True)

    spot_table = Table(title=None, expand=True, show_lines=False)
    spot_table.add_column("Asset", style="cyan", no_wrap=True)
    spot_table.add_column("Amount", justify="right")
    spot_table.add_column("BTC→Asset Price", justify="right", style="yellow")
    spot_table.add_column("Value (BTC)", justify="right", style="green")

    for spot in calc.spot_contributions:
        spot_table.add_row(
            spot.asset,
            _format_decimal(spot.amount),
            _format_decimal(spot.btc_to_asset_price),
            _format_decimal(spot.amount_btc),
        )

    spot_table.add_row(
        "[bold]TOTAL[/]",
        "",
        "",
        f"[bold]{_format_decimal(calc.spot_total_btc)}[/]",
        style="bold",
    )

    spot_panel = Panel(
        spot_table,
        title="[bold]Spot Contributions[/]",
        border_style="cyan",
    )

    return Panel(
        Group(top_row, "", spot_panel),
        title="[bold white]BTC AUM[/]",
        border_style="white",
        padding=(1, 2),
    )


def format_report_table(report: AumReport, console: Console | None = None) -> None:
    """Print the rich formatted dashboard to stdout.

    Args:
        report: The AUM report to format
        console: Console to print to, defaults to a new stdout console
    """
    console = console or Console()

    console.print()
    console.print(build_report_panel(report))
    console.print()
