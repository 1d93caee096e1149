"""Core market data and indicator domain models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import StrEnum

DEFAULT_MARKET = "usa"


class SecurityType(StrEnum):
    """Supported security types for exchange lookups."""

    EQUITY = "equity"
    INDEX = "index"
    OPTION = "option"
    FUTURE = "future"
    FOREX = "forex"
    CRYPTO = "crypto"
    CFD = "cfd"


class Resolution(StrEnum):
    """Sampling cadence of a bar stream."""

    TICK = "tick"
    SECOND = "second"
    MINUTE = "minute"
    HOUR = "hour"
    DAILY = "daily"

    def to_timedelta(self) -> timedelta:
        """Return the bar length for this resolution (zero for ticks)."""
        return _RESOLUTION_PERIODS[self]


_RESOLUTION_PERIODS = {
    Resolution.TICK: timedelta(0),
    Resolution.SECOND: timedelta(seconds=1),
    Resolution.MINUTE: timedelta(minutes=1),
    Resolution.HOUR: timedelta(hours=1),
    Resolution.DAILY: timedelta(days=1),
}


@dataclass(frozen=True)
class Symbol:
    """Tradable identifier qualified by market and security type."""

    ticker: str
    market: str = DEFAULT_MARKET
    security_type: SecurityType = SecurityType.EQUITY

    def __post_init__(self) -> None:
        ticker = self.ticker.strip().upper()
        if not ticker:
            raise ValueError("Ticker symbol cannot be empty")
        object.__setattr__(self, "ticker", ticker)
        object.__setattr__(self, "market", self.market.strip().lower() or DEFAULT_MARKET)
        try:
            security_type = SecurityType(self.security_type)
        except ValueError as exc:
            supported = ", ".join(item.value for item in SecurityType)
            raise ValueError(
                f"Unknown security type '{self.security_type}'. Expected one of: {supported}"
            ) from exc
        object.__setattr__(self, "security_type", security_type)

    @classmethod
    def parse(
        cls,
        value: str,
        security_type: SecurityType = SecurityType.EQUITY,
    ) -> Symbol:
        """Parse ``"type:market:TICKER"``, ``"market:TICKER"`` or a bare ticker.

        An explicit type prefix wins over ``security_type``.
        """
        parts = value.strip().split(":")
        if len(parts) == 1:
            return cls(ticker=parts[0], security_type=security_type)
        if len(parts) == 2:
            market, ticker = parts
            return cls(ticker=ticker, market=market, security_type=security_type)
        if len(parts) == 3:
            type_name, market, ticker = parts
            return cls(ticker=ticker, market=market, security_type=type_name.strip().lower())
        raise ValueError(f"Symbol '{value}' must look like [type:]market:TICKER")

    @staticmethod
    def has_explicit_type(value: str) -> bool:
        return value.strip().count(":") == 2

    def __str__(self) -> str:
        return self.ticker


@dataclass(frozen=True)
class TradeBar:
    """One OHLCV sample for one symbol.

    ``time`` is the bar open and ``end_time`` the bar close, both in the
    symbol's exchange timezone when naive.
    """

    symbol: Symbol
    time: datetime
    end_time: datetime
    close: float
    open: float | None = None
    high: float | None = None
    low: float | None = None
    volume: float = 0.0

    @property
    def period(self) -> timedelta:
        return self.end_time - self.time


@dataclass(frozen=True)
class IndicatorDataPoint:
    """Indicator output sample."""

    time: datetime | None
    value: float
