"""Environment and CLI runtime configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from datetime import time
from typing import Self

from dotenv import load_dotenv

from betastream.data.exchange_timezones import ExchangeTimezoneDatabase, default_timezone_database
from betastream.domain.models import Resolution, Symbol
from betastream.errors import ConfigError

DEFAULT_TARGET = "usa:AAPL"
DEFAULT_REFERENCE = "usa:SPY"
DEFAULT_DAILY_CLOSE = "16:00"


def parse_bool(value: str | None, default: bool) -> bool:
    """Parse truthy environment strings."""
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def parse_positive_int(value: str | None, *, field_name: str, default: int) -> int:
    """Parse a positive integer from an env string."""
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value.strip())
    except ValueError as exc:
        raise ConfigError(f"{field_name} must be an integer") from exc
    if parsed <= 0:
        raise ConfigError(f"{field_name} must be positive")
    return parsed


def parse_clock(value: str, *, field_name: str) -> time:
    """Parse an ``HH:MM`` wall-clock time."""
    try:
        return time.fromisoformat(value.strip())
    except ValueError as exc:
        raise ConfigError(f"{field_name} must look like HH:MM") from exc


def parse_symbol(value: str | None, default: str) -> str:
    """Normalize a ``[type:]market:TICKER`` string, falling back to ``default``."""
    text = (value or "").strip()
    if not text:
        return default
    try:
        symbol = Symbol.parse(text)
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc
    if Symbol.has_explicit_type(text):
        return f"{symbol.security_type}:{symbol.market}:{symbol.ticker}"
    return f"{symbol.market}:{symbol.ticker}"


def parse_timezone_overrides(value: str | None) -> dict[str, str]:
    """Parse ``usa:AAPL=America/New_York,binance:BTCUSDT=UTC`` pairs."""
    overrides: dict[str, str] = {}
    if not value:
        return overrides
    for item in value.split(","):
        text = item.strip()
        if not text:
            continue
        if "=" not in text:
            raise ConfigError(f"Timezone override '{text}' must look like market:TICKER=Zone")
        raw_symbol, zone_name = text.split("=", 1)
        if not raw_symbol.strip() or not zone_name.strip():
            raise ConfigError(f"Timezone override '{text}' must look like market:TICKER=Zone")
        overrides[parse_symbol(raw_symbol, default="")] = zone_name.strip()
    return overrides


@dataclass(frozen=True)
class Settings:
    """Immutable replay settings."""

    target_symbol: str = DEFAULT_TARGET
    reference_symbol: str = DEFAULT_REFERENCE
    period: int = 20
    resolution: str = Resolution.DAILY.value
    historical_data_dir: str = "historical_data"
    events_dir: str = "runs"
    log_level: str = "INFO"
    write_report: bool = True
    symbol_timezones: dict[str, str] = field(default_factory=dict)
    daily_close: str = DEFAULT_DAILY_CLOSE

    @classmethod
    def from_env(cls) -> Self:
        """Create settings from environment variables."""
        load_dotenv()
        raw = cls(
            target_symbol=parse_symbol(os.getenv("TARGET_SYMBOL"), DEFAULT_TARGET),
            reference_symbol=parse_symbol(os.getenv("REFERENCE_SYMBOL"), DEFAULT_REFERENCE),
            period=parse_positive_int(os.getenv("BETA_PERIOD"), field_name="period", default=20),
            resolution=str(os.getenv("RESOLUTION", Resolution.DAILY.value)).strip().lower(),
            historical_data_dir=str(os.getenv("HISTORICAL_DATA_DIR", "historical_data")).strip(),
            events_dir=str(os.getenv("EVENTS_DIR", "runs")).strip(),
            log_level=str(os.getenv("LOG_LEVEL", "INFO")).strip().upper(),
            write_report=parse_bool(os.getenv("WRITE_REPORT"), True),
            symbol_timezones=parse_timezone_overrides(os.getenv("SYMBOL_TIMEZONES")),
            daily_close=str(os.getenv("DAILY_CLOSE", DEFAULT_DAILY_CLOSE)).strip(),
        )
        return raw.validate()

    def with_overrides(self, **kwargs: object) -> Self:
        """Return a new settings object with updated values."""
        overrides = dict(kwargs)
        for key, default in (
            ("target_symbol", self.target_symbol),
            ("reference_symbol", self.reference_symbol),
        ):
            value = overrides.get(key)
            if isinstance(value, str):
                overrides[key] = parse_symbol(value, default)
        resolution = overrides.get("resolution")
        if isinstance(resolution, str):
            overrides["resolution"] = resolution.strip().lower()
        updated = replace(self, **overrides)
        return updated.validate()

    def timezone_database(self) -> ExchangeTimezoneDatabase:
        database = default_timezone_database()
        if self.symbol_timezones:
            return database.with_overrides(self.symbol_timezones)
        return database

    def target(self) -> Symbol:
        return self.timezone_database().resolve_symbol(self.target_symbol)

    def reference(self) -> Symbol:
        return self.timezone_database().resolve_symbol(self.reference_symbol)

    def session_close(self) -> time:
        return parse_clock(self.daily_close, field_name="daily_close")

    def bar_resolution(self) -> Resolution:
        return Resolution(self.resolution)

    def validate(self) -> Self:
        """Validate settings fields."""
        if self.period < 2:
            raise ConfigError("period must be at least 2")
        if self.resolution not in {item.value for item in Resolution}:
            supported = ", ".join(item.value for item in Resolution)
            raise ConfigError(f"resolution must be one of {supported}")
        self.session_close()
        if self.target() == self.reference():
            raise ConfigError("target_symbol and reference_symbol must differ")
        if not self.historical_data_dir:
            raise ConfigError("historical_data_dir must not be empty")
        return self
