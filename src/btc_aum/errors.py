"""Exception types raised while fetching data and valuing the portfolio."""

from __future__ import annotations

from decimal import Decimal

from .constants import BINANCE_UNKNOWN_SYMBOL_CODE


class AumError(Exception):
    """Base class for all btc-aum failures."""


class MissingPriceError(AumError):
    """Raised when a conversion price cannot be determined."""

    def __init__(self, asset: str):
        self.asset = asset
        super().__init__(f"price unavailable for asset `{asset}`")


class NegativeAumError(AumError):
    """Raised when the aggregated AUM is below zero."""

    def __init__(self, value: Decimal):
        self.value = value
        super().__init__(f"negative aum computed: {value}")


class ConfigurationError(AumError):
    """Raised when a configuration value is invalid."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"invalid configuration value for {field}: {reason}")


class FixedPointOverflowError(ConfigurationError):
    """Raised when a value does not fit the fixed-point integer range."""


class MissingConfigError(AumError):
    def __init__(self, field: str):
        self.field = field
        super().__init__(f"missing configuration value: {field}")


class DecimalParseError(AumError):
    """Raised when an upstream payload carries a malformed decimal string."""

    def __init__(self, field: str, value: object):
        self.field = field
        self.value = value
        super().__init__(f"failed to parse decimal from `{field}` value `{value}`")


class BinanceAPIError(AumError):
    """Structured error body ({"code": ..., "msg": ...}) returned by Binance."""

    def __init__(self, code: int, msg: str, status: int | None = None):
        self.code = code
        self.msg = msg
        self.status = status
        super().__init__(f"binance api error {code}: {msg}")

    @property
    def is_unknown_symbol(self) -> bool:
        return self.code == BINANCE_UNKNOWN_SYMBOL_CODE


class BinanceHTTPError(AumError):
    """Non-2xx response without a structured Binance error body."""

    def __init__(self, status: int, body: str):
        self.status = status
        self.body = body
        super().__init__(f"binance api returned error status {status}: {body}")
