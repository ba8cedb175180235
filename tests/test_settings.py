"""Tests for settings configuration loading."""

from __future__ import annotations

import os
from textwrap import dedent

import pytest
from pydantic import ValidationError

from btc_aum.errors import MissingConfigError
from btc_aum.settings import AumSettings, OutputFormat, parse_symbol_list


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Run each test without ambient BTC_AUM_* variables or config files."""
    for key in list(os.environ):
        if key.startswith("BTC_AUM_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("BTC_AUM_CONFIG", str(tmp_path / "missing.toml"))


def write_config(tmp_path, monkeypatch, body: str):
    config_path = tmp_path / "config.toml"
    config_path.write_text(dedent(body).strip())
    monkeypatch.setenv("BTC_AUM_CONFIG", str(config_path))
    return config_path


def test_defaults():
    settings = AumSettings()

    assert settings.api_key is None
    assert settings.quote_currency == "USDT"
    assert settings.spot_assets == ["USDT", "BTC", "ETH", "SOL"]
    assert settings.um_positions == ["BTCUSDT", "ETHUSDT", "SOLUSDT"]
    assert settings.api_base_url == "https://api.binance.com"
    assert settings.papi_base_url == "https://papi.binance.com"
    assert settings.once is True
    assert settings.output_format is OutputFormat.TABLE
    assert settings.concurrent_price_lookups is True


def test_env_lists_are_comma_separated(monkeypatch):
    monkeypatch.setenv("BTC_AUM_SPOT_ASSETS", " eth, wbtc ,,sol ")
    monkeypatch.setenv("BTC_AUM_UM_POSITIONS", "btcusdt")

    settings = AumSettings()

    assert settings.spot_assets == ["ETH", "WBTC", "SOL"]
    assert settings.um_positions == ["BTCUSDT"]


def test_toml_table_is_loaded(tmp_path, monkeypatch):
    write_config(
        tmp_path,
        monkeypatch,
        """
        [btc_aum]
        quote_currency = "fdusd"
        spot_assets = ["btc", "eth"]
        um_positions = "BTCUSDT,ETHUSDT"
        output_format = "json"
        interval = 5
        concurrent_price_lookups = false
        """,
    )

    settings = AumSettings()

    assert settings.quote_currency == "FDUSD"
    assert settings.spot_assets == ["BTC", "ETH"]
    assert settings.um_positions == ["BTCUSDT", "ETHUSDT"]
    assert settings.output_format is OutputFormat.JSON
    assert settings.interval == 5
    assert settings.concurrent_price_lookups is False


def test_top_level_toml_keys_are_loaded(tmp_path, monkeypatch):
    write_config(tmp_path, monkeypatch, 'log_level = "debug"')

    assert AumSettings().log_level == "DEBUG"


def test_precedence_cli_over_env_over_file(tmp_path, monkeypatch):
    write_config(
        tmp_path,
        monkeypatch,
        """
        quote_currency = "USDC"
        interval = 11
        timeout = 3
        """,
    )
    monkeypatch.setenv("BTC_AUM_INTERVAL", "22")
    monkeypatch.setenv("BTC_AUM_QUOTE_CURRENCY", "FDUSD")

    settings = AumSettings(quote_currency="TUSD")

    assert settings.quote_currency == "TUSD"
    assert settings.interval == 22
    assert settings.timeout == 3


def test_local_config_file_is_discovered(tmp_path, monkeypatch):
    monkeypatch.delenv("BTC_AUM_CONFIG")
    (tmp_path / "btc-aum.toml").write_text('quote_currency = "USDC"')

    assert AumSettings().quote_currency == "USDC"


@pytest.mark.parametrize("key", ["api_key", "api_secret"])
def test_secrets_in_toml_are_rejected(tmp_path, monkeypatch, key):
    write_config(tmp_path, monkeypatch, f'{key} = "leaked"')

    with pytest.raises(ValueError, match="Security violation"):
        AumSettings()


def test_empty_symbol_list_is_rejected(monkeypatch):
    monkeypatch.setenv("BTC_AUM_SPOT_ASSETS", " , ")

    with pytest.raises(ValidationError):
        AumSettings()


def test_non_positive_interval_is_rejected():
    with pytest.raises(ValidationError):
        AumSettings(interval=0)


def test_base_urls_are_trimmed():
    settings = AumSettings(api_base_url=" https://api.example.com/ ")

    assert settings.api_base_url == "https://api.example.com"


def test_safe_dict_redacts_secrets():
    settings = AumSettings(api_key="key", api_secret="secret")

    data = settings.as_safe_dict()

    assert data["api_key"] == "***redacted***"
    assert data["api_secret"] == "***redacted***"
    assert data["output_format"] == "table"


def test_blank_secret_counts_as_unset(monkeypatch):
    monkeypatch.setenv("BTC_AUM_API_KEY", "  ")

    settings = AumSettings()

    assert settings.api_key is None
    assert settings.as_safe_dict()["api_key"] is None


def test_required_credentials():
    settings = AumSettings(api_key="key")

    assert settings.api_key_required == "key"
    with pytest.raises(MissingConfigError, match="BTC_AUM_API_SECRET"):
        _ = settings.api_secret_required


def test_parse_symbol_list_rejects_other_types():
    with pytest.raises(ValueError):
        parse_symbol_list(42)
