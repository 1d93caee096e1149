from __future__ import annotations

from datetime import time
from zoneinfo import ZoneInfo

import pytest

from betastream.config import Settings, parse_symbol, parse_timezone_overrides
from betastream.domain.models import Resolution, SecurityType, Symbol
from betastream.errors import ConfigError
from betastream.indicators.beta import Beta

ENV_KEYS = [
    "TARGET_SYMBOL",
    "REFERENCE_SYMBOL",
    "BETA_PERIOD",
    "RESOLUTION",
    "HISTORICAL_DATA_DIR",
    "EVENTS_DIR",
    "LOG_LEVEL",
    "WRITE_REPORT",
    "SYMBOL_TIMEZONES",
    "DAILY_CLOSE",
]


def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("betastream.config.load_dotenv", lambda *args, **kwargs: None)
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults_when_environment_is_empty(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)

    settings = Settings.from_env()

    assert settings.target() == Symbol("AAPL")
    assert settings.reference() == Symbol("SPY")
    assert settings.period == 20
    assert settings.bar_resolution() == Resolution.DAILY
    assert settings.write_report is True
    assert settings.symbol_timezones == {}


def test_environment_values_are_normalized(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("TARGET_SYMBOL", "usa:msft")
    monkeypatch.setenv("REFERENCE_SYMBOL", "QQQ")
    monkeypatch.setenv("BETA_PERIOD", "60")
    monkeypatch.setenv("RESOLUTION", "Hour")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("WRITE_REPORT", "no")
    monkeypatch.setenv("SYMBOL_TIMEZONES", "usa:ADR=Europe/London")

    settings = Settings.from_env()

    assert settings.target_symbol == "usa:MSFT"
    assert settings.reference_symbol == "usa:QQQ"
    assert settings.period == 60
    assert settings.bar_resolution() == Resolution.HOUR
    assert settings.log_level == "DEBUG"
    assert settings.write_report is False
    assert settings.symbol_timezones == {"usa:ADR": "Europe/London"}


def test_period_below_two_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("BETA_PERIOD", "1")

    with pytest.raises(ConfigError, match="period"):
        Settings.from_env()


def test_non_numeric_period_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("BETA_PERIOD", "twenty")

    with pytest.raises(ConfigError, match="integer"):
        Settings.from_env()


def test_identical_symbols_are_rejected() -> None:
    with pytest.raises(ConfigError, match="must differ"):
        Settings(target_symbol="usa:SPY", reference_symbol="usa:SPY").validate()


def test_unknown_resolution_is_rejected() -> None:
    with pytest.raises(ConfigError, match="resolution"):
        Settings().with_overrides(resolution="weekly")


def test_with_overrides_returns_new_settings() -> None:
    base = Settings()

    updated = base.with_overrides(target_symbol="binance:btcusdt", period=5)

    assert updated.target_symbol == "binance:BTCUSDT"
    assert updated.period == 5
    assert base.period == 20


def test_parse_symbol_defaults_market() -> None:
    assert parse_symbol("spy", "usa:AAPL") == "usa:SPY"
    assert parse_symbol("  ", "usa:AAPL") == "usa:AAPL"
    assert parse_symbol(None, "usa:AAPL") == "usa:AAPL"


def test_parse_timezone_overrides_rejects_malformed_pairs() -> None:
    assert parse_timezone_overrides("usa:ADR=Europe/London, ,binance:ETH=UTC") == {
        "usa:ADR": "Europe/London",
        "binance:ETH": "UTC",
    }
    with pytest.raises(ConfigError):
        parse_timezone_overrides("usa:ADR")


def test_symbol_parse_keeps_market_and_type() -> None:
    symbol = Symbol.parse("Binance:btcusdt", security_type=SecurityType.CRYPTO)

    assert symbol.ticker == "BTCUSDT"
    assert symbol.market == "binance"
    assert symbol.security_type == SecurityType.CRYPTO
    assert str(symbol) == "BTCUSDT"


def test_security_type_is_inferred_from_market(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("TARGET_SYMBOL", "binance:btcusdt")
    monkeypatch.setenv("REFERENCE_SYMBOL", "oanda:eurusd")

    settings = Settings.from_env()

    assert settings.target() == Symbol("BTCUSDT", market="binance", security_type="crypto")
    assert settings.reference().security_type == SecurityType.FOREX
    assert Beta(settings.target(), settings.reference(), 5).timezone_mismatch


def test_explicit_security_type_prefix_is_kept() -> None:
    settings = Settings().with_overrides(target_symbol="Future:CME:es")

    assert settings.target_symbol == "future:cme:ES"
    assert settings.target() == Symbol("ES", market="cme", security_type=SecurityType.FUTURE)
    assert settings.reference().security_type == SecurityType.EQUITY


def test_unknown_security_type_is_rejected() -> None:
    with pytest.raises(ConfigError, match="Unknown security type 'bond'"):
        parse_symbol("bond:usa:T10", "usa:AAPL")


def test_timezone_overrides_follow_the_market_type() -> None:
    settings = Settings(
        target_symbol="binance:ETHUSDT",
        symbol_timezones={"binance:ETHUSDT": "Asia/Singapore"},
    )

    database = settings.timezone_database()

    assert database.timezone_for(settings.target()) == ZoneInfo("Asia/Singapore")


def test_daily_close_is_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("DAILY_CLOSE", "15:30")

    settings = Settings.from_env()

    assert settings.session_close() == time(15, 30)
    assert Settings().session_close() == time(16, 0)


def test_malformed_daily_close_is_rejected() -> None:
    with pytest.raises(ConfigError, match="daily_close"):
        Settings().with_overrides(daily_close="4pm")
