from __future__ import annotations

from datetime import UTC, datetime, timedelta

from betastream.data.exchange_timezones import ExchangeTimezoneDatabase
from betastream.domain.models import Resolution, SecurityType, Symbol, TradeBar
from betastream.indicators.beta import Beta

TARGET = Symbol("AAPL")
REFERENCE = Symbol("BTCUSDT", market="binance", security_type=SecurityType.CRYPTO)


def _hour_bar(symbol: Symbol, end: datetime, close: float) -> TradeBar:
    return TradeBar(symbol=symbol, time=end - timedelta(hours=1), end_time=end, close=close)


def test_mismatched_timezones_extend_warm_up() -> None:
    indicator = Beta(TARGET, REFERENCE, 5)

    assert indicator.timezone_mismatch
    assert indicator.warm_up_period == 7


def test_bars_pair_when_utc_times_match() -> None:
    indicator = Beta(TARGET, REFERENCE, 2)

    # 11:00 in New York during winter is 16:00 UTC.
    indicator.update(_hour_bar(TARGET, datetime(2024, 1, 2, 11, 0), 185.0))
    indicator.update(_hour_bar(REFERENCE, datetime(2024, 1, 2, 16, 0), 45000.0))

    assert indicator.resolution == Resolution.HOUR
    assert indicator.pairs == 1


def test_bars_pair_when_reference_arrives_first() -> None:
    indicator = Beta(TARGET, REFERENCE, 2)

    indicator.update(_hour_bar(REFERENCE, datetime(2024, 1, 2, 16, 0), 45000.0))
    indicator.update(_hour_bar(TARGET, datetime(2024, 1, 2, 11, 0), 185.0))

    assert indicator.pairs == 1


def test_matching_local_times_do_not_pair_across_zones() -> None:
    indicator = Beta(TARGET, REFERENCE, 2)

    indicator.update(_hour_bar(TARGET, datetime(2024, 1, 2, 16, 0), 185.0))
    indicator.update(_hour_bar(REFERENCE, datetime(2024, 1, 2, 16, 0), 45000.0))

    assert indicator.pairs == 0


def test_summer_offset_is_applied() -> None:
    indicator = Beta(TARGET, REFERENCE, 2)

    # New York is UTC-4 in July.
    indicator.update(_hour_bar(TARGET, datetime(2024, 7, 2, 11, 0), 210.0))
    indicator.update(_hour_bar(REFERENCE, datetime(2024, 7, 2, 15, 0), 62000.0))

    assert indicator.pairs == 1


def test_aware_timestamps_are_converted_directly() -> None:
    indicator = Beta(TARGET, REFERENCE, 2)

    indicator.update(_hour_bar(TARGET, datetime(2024, 1, 2, 16, 0, tzinfo=UTC), 185.0))
    indicator.update(_hour_bar(REFERENCE, datetime(2024, 1, 2, 16, 0), 45000.0))

    assert indicator.pairs == 1


def test_shared_timezone_skips_conversion() -> None:
    database = ExchangeTimezoneDatabase.default().with_overrides(
        {"equity:binance:BTCUSDT": "UTC"}
    )
    target = Symbol("BTCUSDT", market="binance")
    reference = Symbol("ETHUSDT", market="binance", security_type=SecurityType.CRYPTO)
    indicator = Beta(target, reference, 2, timezones=database)

    indicator.update(_hour_bar(target, datetime(2024, 1, 2, 16, 0), 45000.0))
    indicator.update(_hour_bar(reference, datetime(2024, 1, 2, 16, 0), 2500.0))

    assert not indicator.timezone_mismatch
    assert indicator.warm_up_period == 3
    assert indicator.pairs == 1
