from __future__ import annotations

from zoneinfo import ZoneInfo

import pytest

from betastream.data.exchange_timezones import (
    ExchangeTimezoneDatabase,
    default_timezone_database,
)
from betastream.domain.models import SecurityType, Symbol
from betastream.errors import InvalidArgumentError, UnknownExchangeError


def test_default_database_covers_common_markets() -> None:
    database = ExchangeTimezoneDatabase.default()

    assert database.get_timezone("usa", "SPY", SecurityType.EQUITY) == ZoneInfo("America/New_York")
    assert database.get_timezone("cme", "ES", SecurityType.FUTURE) == ZoneInfo("America/Chicago")
    assert database.get_timezone("binance", "BTCUSDT", "crypto") == ZoneInfo("UTC")
    assert database.get_timezone("India", "infy", SecurityType.EQUITY) == ZoneInfo("Asia/Kolkata")


def test_unknown_market_raises() -> None:
    database = ExchangeTimezoneDatabase.default()

    with pytest.raises(UnknownExchangeError, match="nowhere"):
        database.get_timezone("nowhere", "ABC", SecurityType.EQUITY)


def test_security_type_is_part_of_the_key() -> None:
    database = ExchangeTimezoneDatabase.default()

    with pytest.raises(UnknownExchangeError):
        database.get_timezone("binance", "BTCUSDT", SecurityType.EQUITY)


def test_overrides_win_over_wildcard_entries() -> None:
    database = ExchangeTimezoneDatabase.default().with_overrides({"usa:ADR": "Europe/London"})

    assert database.timezone_for(Symbol("ADR")) == ZoneInfo("Europe/London")
    assert database.timezone_for(Symbol("SPY")) == ZoneInfo("America/New_York")


def test_overrides_do_not_mutate_the_source_database() -> None:
    base = ExchangeTimezoneDatabase.default()
    base.with_overrides({"usa:ADR": "Europe/London"})

    assert base.timezone_for(Symbol("ADR")) == ZoneInfo("America/New_York")


def test_overrides_reject_unknown_zones() -> None:
    with pytest.raises(InvalidArgumentError, match="Not/AZone"):
        ExchangeTimezoneDatabase.default().with_overrides({"usa:SPY": "Not/AZone"})


def test_default_database_is_shared() -> None:
    assert default_timezone_database() is default_timezone_database()


def test_security_type_is_looked_up_by_market() -> None:
    database = ExchangeTimezoneDatabase.default()

    assert database.security_type_for_market("Binance") == SecurityType.CRYPTO
    assert database.security_type_for_market("cme") == SecurityType.FUTURE
    assert database.security_type_for_market("oanda") == SecurityType.FOREX
    assert database.security_type_for_market("usa") == SecurityType.EQUITY
    assert database.security_type_for_market("nowhere") == SecurityType.EQUITY


def test_resolve_symbol_prefers_an_explicit_type() -> None:
    database = ExchangeTimezoneDatabase.default()

    inferred = database.resolve_symbol("oanda:xauusd")
    explicit = database.resolve_symbol("cfd:oanda:xauusd")

    assert inferred.security_type == SecurityType.FOREX
    assert explicit == Symbol("XAUUSD", market="oanda", security_type=SecurityType.CFD)
    assert database.timezone_for(explicit) == ZoneInfo("America/New_York")


def test_overrides_register_under_the_market_type() -> None:
    database = ExchangeTimezoneDatabase.default().with_overrides({"kraken:XBTEUR": "Europe/Paris"})

    crypto = Symbol("XBTEUR", market="kraken", security_type=SecurityType.CRYPTO)
    assert database.timezone_for(crypto) == ZoneInfo("Europe/Paris")
