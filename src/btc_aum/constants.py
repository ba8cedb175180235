"""Exchange symbols, endpoints and defaults."""

BTC_SYMBOL = "BTC"
WBTC_SYMBOL = "WBTC"

# 1 wrapped-BTC unit is 1e-8 BTC
WBTC_DECIMALS = 8

# Binance "Invalid symbol" error code
BINANCE_UNKNOWN_SYMBOL_CODE = -1121

DEFAULT_API_BASE_URL = "https://api.binance.com"
DEFAULT_PAPI_BASE_URL = "https://papi.binance.com"

DEFAULT_UM_POSITIONS = ("BTCUSDT", "ETHUSDT", "SOLUSDT")
DEFAULT_SPOT_ASSETS = ("USDT", "BTC", "ETH", "SOL")
DEFAULT_QUOTE_CURRENCY = "USDT"

# Asset whose portfolio-margin wallet balance is reported as a diagnostic
UM_BALANCE_ASSET = "USDT"

TICKER_PRICE_ENDPOINT = "/api/v3/ticker/price"
SPOT_ACCOUNT_ENDPOINT = "/api/v3/account"
PM_ACCOUNT_ENDPOINT = "/papi/v1/account"
PM_BALANCE_ENDPOINT = "/papi/v1/balance"
UM_POSITION_RISK_ENDPOINT = "/papi/v1/um/positionRisk"

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
