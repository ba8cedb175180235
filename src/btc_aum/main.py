"""CLI entrypoint for btc-aum."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Annotated, Any

import typer

from .errors import AumError
from .logger import setup_logging
from .settings import AumSettings, OutputFormat
from .state import AppState

app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    add_help_option=True,
    pretty_exceptions_enable=True,
    pretty_exceptions_short=True,
    pretty_exceptions_show_locals=False,
    rich_markup_mode="rich",
    help="Value a Binance portfolio-margin account and spot balances in BTC.",
)


def _build_logger() -> logging.Logger:
    """Build a logger instance."""
    return logging.getLogger("btc_aum")


@app.callback(invoke_without_command=True)
def report(
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to a TOML config file (can include [btc_aum] table).",
        ),
    ] = None,
    quote_currency: Annotated[
        str | None,
        typer.Option(
            "--quote-currency",
            "-q",
            help="Quote currency of the margin account equity (e.g. USDT).",
        ),
    ] = None,
    spot_assets: Annotated[
        str | None,
        typer.Option(
            "--spot-assets",
            help="Comma-separated spot assets to value.",
        ),
    ] = None,
    um_positions: Annotated[
        str | None,
        typer.Option(
            "--um-positions",
            help="Comma-separated USDⓈ-M symbols to include as diagnostics.",
        ),
    ] = None,
    output_format: Annotated[
        OutputFormat | None,
        typer.Option(
            "--output-format",
            "-o",
            help="Output format (table or json).",
        ),
    ] = None,
    once: Annotated[
        bool | None,
        typer.Option(
            "--once/--loop",
            help="Run a single report, or repeat every --interval seconds.",
        ),
    ] = None,
    interval: Annotated[
        float | None,
        typer.Option(
            "--interval",
            help="Seconds between reports when looping.",
        ),
    ] = None,
    timeout: Annotated[
        float | None,
        typer.Option(
            "--timeout",
            help="Per-request HTTP timeout in seconds.",
        ),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help="Override logging verbosity (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL).",
        ),
    ] = None,
    show_config: Annotated[
        bool,
        typer.Option(
            "--show-config",
            help="Print effective config (with secrets redacted) and exit.",
        ),
    ] = False,
):
    """Fetch Binance balances, compute AUM in BTC and print the report.

    This is the default command: it loads configuration, validates it and
    runs the report once or on an interval.
    """
    if config_path:
        os.environ["BTC_AUM_CONFIG"] = str(config_path)

    init_kwargs: dict[str, Any] = {}
    if quote_currency is not None:
        init_kwargs["quote_currency"] = quote_currency
    if spot_assets is not None:
        init_kwargs["spot_assets"] = spot_assets
    if um_positions is not None:
        init_kwargs["um_positions"] = um_positions
    if output_format is not None:
        init_kwargs["output_format"] = output_format
    if once is not None:
        init_kwargs["once"] = once
    if interval is not None:
        init_kwargs["interval"] = interval
    if timeout is not None:
        init_kwargs["timeout"] = timeout
    if log_level is not None:
        init_kwargs["log_level"] = log_level.upper()

    settings = AumSettings(**init_kwargs)

    setup_logging(settings.log_level)
    logger = _build_logger()
    state = AppState(settings=settings, logger=logger)

    if show_config:
        typer.echo(json.dumps(settings.as_safe_dict(), indent=2))
        raise typer.Exit(code=0)

    if settings.api_key is None:
        raise typer.BadParameter(
            "api_key must be configured.",
            param_hint=["BTC_AUM_API_KEY"],
        )
    if settings.api_secret is None:
        raise typer.BadParameter(
            "api_secret must be configured.",
            param_hint=["BTC_AUM_API_SECRET"],
        )

    from .pipeline.run import run_forever, run_report

    logger.info("btc-aum started")
    if settings.once:
        try:
            asyncio.run(run_report(state))
        except AumError as e:
            logger.error("btc-aum failed: %s", e)
            raise typer.Exit(code=1) from e
    else:
        asyncio.run(run_forever(state))


def run() -> None:
    """Entrypoint used by the console script."""
    app()


if __name__ == "__main__":
    run()
