"""Settings module with unified configuration precedence: CLI > ENV > CONFIG FILE."""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Annotated, Any

import tomllib

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import (
    BaseSettings,
    NoDecode,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from .constants import (
    DEFAULT_API_BASE_URL,
    DEFAULT_PAPI_BASE_URL,
    DEFAULT_QUOTE_CURRENCY,
    DEFAULT_SPOT_ASSETS,
    DEFAULT_UM_POSITIONS,
)
from .errors import MissingConfigError

load_dotenv()

SECRET_FIELDS = {"api_key", "api_secret"}


class OutputFormat(str, Enum):
    TABLE = "table"
    JSON = "json"


def parse_symbol_list(value: Any) -> list[str]:
    """Normalize a CSV string or list of symbols: trimmed, uppercased, non-empty."""
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = [str(v) for v in value]
    else:
        raise ValueError(f"Expected a comma-separated string or list, got {value!r}")

    symbols = [item.strip().upper() for item in items if item.strip()]
    if not symbols:
        raise ValueError("value list must not be empty")
    return symbols


class AumSettings(BaseSettings):
    """Single source of truth for configuration. Values may come from:
    - CLI (init kwargs)
    - ENV / .env (prefixed with BTC_AUM_)
    - Config file (TOML), lowest precedence

    Do not read os.environ or files elsewhere in the codebase.
    """

    # --- credentials ---
    api_key: SecretStr | None = None
    api_secret: SecretStr | None = None

    # --- portfolio selection ---
    um_positions: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_UM_POSITIONS)
    )
    spot_assets: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_SPOT_ASSETS)
    )
    quote_currency: str = DEFAULT_QUOTE_CURRENCY

    # --- endpoints ---
    api_base_url: str = DEFAULT_API_BASE_URL
    papi_base_url: str = DEFAULT_PAPI_BASE_URL

    # --- scheduling / timeouts ---
    once: bool = True
    interval: float = Field(default=30.0, gt=0)
    timeout: float = Field(default=10.0, gt=0)
    global_timeout_seconds: float = 60.0
    http_retries: int = Field(default=5, ge=1)

    # --- valuation ---
    concurrent_price_lookups: bool = True

    # --- output / logging ---
    output_format: OutputFormat = OutputFormat.TABLE
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="BTC_AUM_",
        env_file=".env",
        extra="ignore",  # ignore unknown keys in env/config file
    )

    @field_validator("api_key", "api_secret", mode="before")
    @classmethod
    def wrap_secrets(cls, v: Any) -> SecretStr | None:
        """Wrap string secrets in SecretStr; blank values count as unset."""
        if v is None or isinstance(v, SecretStr):
            return v
        if isinstance(v, str) and not v.strip():
            return None
        return SecretStr(v)

    @field_validator("um_positions", "spot_assets", mode="before")
    @classmethod
    def split_symbols(cls, v: Any) -> list[str]:
        return parse_symbol_list(v)

    @field_validator("quote_currency")
    @classmethod
    def normalize_quote_currency(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("quote_currency must not be empty")
        return v

    @field_validator("api_base_url", "papi_base_url")
    @classmethod
    def trim_base_url(cls, v: str) -> str:
        return v.strip().rstrip("/")

    @field_validator("log_level")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return v.strip().upper()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Custom config-file source with explicit precedence: CLI > ENV > FILE."""
        env_cfg = os.environ.get("BTC_AUM_CONFIG")
        cfg_path = Path(env_cfg) if env_cfg else None

        class TomlConfigSource(PydanticBaseSettingsSource):
            def __init__(self, settings_cls: type[BaseSettings], path: Path | None):
                super().__init__(settings_cls)
                self._path = path

            def get_field_value(
                self, field: Any, field_name: str
            ) -> tuple[Any, str, bool]:
                return None, "", False

            def __call__(self) -> dict[str, Any]:
                if not self._path:
                    local_config = Path("btc-aum.toml")
                    user_config = Path.home() / ".config" / "btc-aum" / "config.toml"
                    if local_config.exists():
                        self._path = local_config
                    elif user_config.exists():
                        self._path = user_config
                    else:
                        return {}

                if not self._path.exists():
                    return {}

                with self._path.open("rb") as f:
                    data = tomllib.load(f)  # supports top-level or [btc_aum]
                body = data.get("btc_aum", data)
                if not isinstance(body, dict):
                    return {}

                for key in SECRET_FIELDS:
                    if key in body:
                        raise ValueError(
                            f"Security violation: '{key}' found in TOML config file. "
                            f"Secrets must only be provided via environment variables or CLI flags."
                        )

                return body

        return (
            init_settings,  # CLI (highest)
            env_settings,  # ENV
            dotenv_settings,  # .env
            TomlConfigSource(settings_cls, cfg_path),  # CONFIG (lowest)
            file_secret_settings,  # optional secrets dir
        )

    def as_safe_dict(self) -> dict[str, Any]:
        """Return the config as a JSON-friendly dict with secrets redacted."""
        data = self.model_dump(mode="json")
        for key in SECRET_FIELDS:
            if getattr(self, key) is not None:
                data[key] = "***redacted***"
        return data

    @property
    def api_key_required(self) -> str:
        """Get api_key, raising MissingConfigError if not set."""
        if self.api_key is None:
            raise MissingConfigError("BTC_AUM_API_KEY")
        return self.api_key.get_secret_value()

    @property
    def api_secret_required(self) -> str:
        """Get api_secret, raising MissingConfigError if not set."""
        if self.api_secret is None:
            raise MissingConfigError("BTC_AUM_API_SECRET")
        return self.api_secret.get_secret_value()
