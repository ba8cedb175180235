"""Binance REST client for account snapshots and ticker prices.

Covers the spot API (``api.binance.com``) and the portfolio-margin API
(``papi.binance.com``). Signed endpoints use HMAC-SHA256 over the query string.
"""

from __future__ import annotations

import asyncio
import hashlib
import hmac
import time
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterable, Sequence, TypedDict
from urllib.parse import urlencode

import backoff
import requests

from ..constants import (
    PM_ACCOUNT_ENDPOINT,
    PM_BALANCE_ENDPOINT,
    RETRYABLE_STATUS_CODES,
    SPOT_ACCOUNT_ENDPOINT,
    TICKER_PRICE_ENDPOINT,
    UM_BALANCE_ASSET,
    UM_POSITION_RISK_ENDPOINT,
)
from ..domain import PortfolioSnapshot, SpotHolding, UmPosition
from ..errors import BinanceAPIError, BinanceHTTPError, DecimalParseError
from ..logger import get_logger

logger = get_logger(__name__)


class UmPositionPayload(TypedDict, total=False):
    symbol: str
    positionAmt: str
    unrealizedProfit: str
    unRealizedProfit: str


class PmAccountPayload(TypedDict, total=False):
    uniMMR: str
    actualEquity: str
    virtualMaxWithdrawAmount: str


class PmBalancePayload(TypedDict, total=False):
    asset: str
    umWalletBalance: str


class SpotBalancePayload(TypedDict):
    asset: str
    free: str
    locked: str


class SpotAccountPayload(TypedDict):
    balances: list[SpotBalancePayload]


def build_query(pairs: Iterable[tuple[str, str]]) -> str:
    return urlencode(list(pairs))


def sign_query(query: str, secret: str) -> str:
    """Return the hex HMAC-SHA256 signature of ``query``."""
    return hmac.new(secret.encode(), query.encode(), hashlib.sha256).hexdigest()


def parse_decimal(field: str, value: Any) -> Decimal:
    """Parse an exchange decimal string exactly.

    Raises:
        DecimalParseError: If ``value`` is missing, malformed or not finite.
    """
    if value is None:
        raise DecimalParseError(field, value)
    try:
        parsed = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise DecimalParseError(field, value) from e
    if not parsed.is_finite():
        raise DecimalParseError(field, value)
    return parsed


def _giveup(e: Exception) -> bool:
    return (
        isinstance(e, requests.exceptions.HTTPError)
        and e.response is not None
        and e.response.status_code not in RETRYABLE_STATUS_CODES
    )


def parse_response(response: requests.Response) -> Any:
    """Decode a Binance response body, mapping error payloads to exceptions."""
    if not response.ok:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and "code" in body and "msg" in body:
            raise BinanceAPIError(
                int(body["code"]), str(body["msg"]), status=response.status_code
            )
        raise BinanceHTTPError(response.status_code, response.text)

    try:
        return response.json()
    except ValueError as e:
        raise ValueError("Invalid JSON from Binance API") from e


def filter_positions(
    positions: Sequence[UmPositionPayload], required_symbols: Sequence[str]
) -> list[UmPosition]:
    filtered: list[UmPosition] = []
    for position in positions:
        if position.get("symbol") not in required_symbols:
            continue
        pnl = position.get("unrealizedProfit", position.get("unRealizedProfit"))
        filtered.append(
            UmPosition(
                symbol=position["symbol"],
                amount=parse_decimal("positionAmt", position.get("positionAmt")),
                pnl=parse_decimal("unrealizedProfit", pnl),
            )
        )
    return filtered


def filter_spot_balances(
    account_info: SpotAccountPayload, required_assets: Sequence[str]
) -> list[SpotHolding]:
    """Keep the configured assets and sum their free and locked amounts."""
    filtered: list[SpotHolding] = []
    for balance in account_info.get("balances", []):
        if balance.get("asset") not in required_assets:
            continue
        free = parse_decimal("free", balance.get("free"))
        locked = parse_decimal("locked", balance.get("locked"))
        filtered.append(SpotHolding(asset=balance["asset"], amount=free + locked))
    return filtered


def um_wallet_balance(balances: Sequence[PmBalancePayload]) -> Decimal:
    for balance in balances:
        if balance.get("asset") == UM_BALANCE_ASSET:
            return parse_decimal("umWalletBalance", balance.get("umWalletBalance"))
    return Decimal(0)


class BinanceClient:
    """Async-compatible Binance client.

    Requests run in worker threads via ``asyncio.to_thread``. Connection
    failures and 429/5xx responses are retried with exponential backoff; API
    errors (4xx with a ``{"code", "msg"}`` body) are raised immediately.
    The client keeps no per-request state and can be shared between tasks.
    """

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        api_base_url: str,
        papi_base_url: str,
        *,
        timeout: float = 10.0,
        max_tries: int = 5,
    ):
        """Initialize the client.

        Args:
            api_key: Binance API key, sent as ``X-MBX-APIKEY``
            api_secret: Secret used to sign private requests
            api_base_url: Spot API base URL
            papi_base_url: Portfolio-margin API base URL
            timeout: Per-request timeout in seconds
            max_tries: Attempts per request for transient failures
        """
        self._api_key = api_key
        self._api_secret = api_secret
        self.api_base_url = api_base_url.rstrip("/")
        self.papi_base_url = papi_base_url.rstrip("/")
        self.timeout = timeout
        self.max_tries = max(1, max_tries)

    @property
    def _headers(self) -> dict[str, str]:
        return {"X-MBX-APIKEY": self._api_key}

    async def _get(self, endpoint: str, build_url: Callable[[], str]) -> Any:
        @backoff.on_exception(
            backoff.expo,
            requests.exceptions.RequestException,
            max_tries=self.max_tries,
            giveup=_giveup,
            jitter=backoff.full_jitter,
        )
        async def _send() -> requests.Response:
            # Rebuilt per attempt so signed requests carry a fresh timestamp
            url = build_url()
            response = await asyncio.to_thread(
                requests.get, url, headers=self._headers, timeout=self.timeout
            )
            if response.status_code in RETRYABLE_STATUS_CODES:
                response.raise_for_status()
            return response

        logger.debug("Calling %s", endpoint)
        response = await _send()
        return parse_response(response)

    async def get_public(
        self, base_url: str, endpoint: str, params: Sequence[tuple[str, str]] = ()
    ) -> Any:
        def _build() -> str:
            query = build_query(params)
            url = f"{base_url}{endpoint}"
            return f"{url}?{query}" if query else url

        return await self._get(endpoint, _build)

    async def get_signed(
        self, base_url: str, endpoint: str, params: Sequence[tuple[str, str]] = ()
    ) -> Any:
        def _build() -> str:
            timestamp = str(int(time.time() * 1000))
            query = build_query([*params, ("timestamp", timestamp)])
            signature = sign_query(query, self._api_secret)
            return f"{base_url}{endpoint}?{query}&signature={signature}"

        return await self._get(endpoint, _build)

    async def ticker_price(self, symbol: str) -> Decimal:
        """Fetch the last traded price for ``symbol`` (e.g. ``BTCUSDT``).

        Raises:
            BinanceAPIError: On API errors, including code -1121 for unknown
                symbols.
            DecimalParseError: If the price field is malformed.
        """
        ticker = await self.get_public(
            self.api_base_url, TICKER_PRICE_ENDPOINT, [("symbol", symbol)]
        )
        if not isinstance(ticker, dict):
            raise ValueError(f"Invalid ticker response structure: {ticker}")
        return parse_decimal("price", ticker.get("price"))

    async def get_um_positions(self) -> list[UmPositionPayload]:
        return await self.get_signed(self.papi_base_url, UM_POSITION_RISK_ENDPOINT)

    async def get_pm_account_info(self) -> PmAccountPayload:
        return await self.get_signed(self.papi_base_url, PM_ACCOUNT_ENDPOINT)

    async def get_pm_account_balances(self) -> list[PmBalancePayload]:
        return await self.get_signed(self.papi_base_url, PM_BALANCE_ENDPOINT)

    async def get_spot_account_info(self) -> SpotAccountPayload:
        return await self.get_signed(self.api_base_url, SPOT_ACCOUNT_ENDPOINT)

    async def fetch_portfolio_snapshot(
        self, um_positions: Sequence[str], spot_assets: Sequence[str]
    ) -> PortfolioSnapshot:
        """Fetch account data and assemble a portfolio snapshot.

        Args:
            um_positions: Futures symbols to keep as diagnostic positions
            spot_assets: Spot assets to value

        Returns:
            Snapshot with margin equity, filtered spot holdings and
            diagnostic fields.
        """
        positions, account, balances, spot = await asyncio.gather(
            self.get_um_positions(),
            self.get_pm_account_info(),
            self.get_pm_account_balances(),
            self.get_spot_account_info(),
        )

        snapshot = PortfolioSnapshot(
            margin_equity_quote=parse_decimal(
                "actualEquity", account.get("actualEquity")
            ),
            spot_holdings=tuple(filter_spot_balances(spot, spot_assets)),
            margin_ratio=parse_decimal("uniMMR", account.get("uniMMR")),
            positions=tuple(filter_positions(positions, um_positions)),
            um_wallet_balance=um_wallet_balance(balances),
            withdrawable_amount=parse_decimal(
                "virtualMaxWithdrawAmount", account.get("virtualMaxWithdrawAmount")
            ),
        )
        logger.debug(
            "Snapshot: %d spot holdings, %d positions",
            len(snapshot.spot_holdings),
            len(snapshot.positions),
        )
        return snapshot
