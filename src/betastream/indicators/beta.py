"""Rolling Beta of a target symbol against a reference symbol.

Beta measures how strongly the target's returns move with the reference's
returns over the last ``period`` paired observations::

    beta = Cov(R_target, R_reference) / Var(R_reference)

Bars from both symbols arrive through the same ``update`` call. The indicator
only advances when a bar and the previously seen bar come from different
symbols and fall in the same sampling bucket; otherwise the last Beta value
is filled forward.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, tzinfo

from betastream.data.exchange_timezones import ExchangeTimezoneDatabase, default_timezone_database
from betastream.domain.models import Resolution, Symbol, TradeBar
from betastream.errors import InvalidArgumentError
from betastream.indicators.base import BarIndicator, is_nan_or_zero, safe_divide
from betastream.indicators.resolution import detect_resolution, truncate_to_resolution
from betastream.indicators.rolling_window import RollingWindow

logger = logging.getLogger("betastream.indicators.beta")


class Beta(BarIndicator):
    """Streaming Beta fed with interleaved bars of two symbols."""

    def __init__(
        self,
        target_symbol: Symbol,
        reference_symbol: Symbol,
        period: int,
        name: str | None = None,
        timezones: ExchangeTimezoneDatabase | None = None,
    ) -> None:
        # Two returns are the minimum for a sample variance.
        if period < 2:
            raise InvalidArgumentError(
                f"Period parameter for Beta indicator must be at least 2 but was {period}."
            )
        super().__init__(name or f"B({period})")
        self.period = int(period)
        self.target_symbol = target_symbol
        self.reference_symbol = reference_symbol

        self._target_prices: RollingWindow[float] = RollingWindow(2)
        self._reference_prices: RollingWindow[float] = RollingWindow(2)
        self._target_returns: RollingWindow[float] = RollingWindow(self.period)
        self._reference_returns: RollingWindow[float] = RollingWindow(self.period)
        self._beta = 0.0
        self.pairs = 0

        self._previous_input: TradeBar | None = None
        self._previous_symbol_is_target = False
        self._resolution: Resolution | None = None

        database = timezones or default_timezone_database()
        self._target_timezone = database.timezone_for(target_symbol)
        self._reference_timezone = database.timezone_for(reference_symbol)
        self.timezone_mismatch = self._target_timezone != self._reference_timezone
        self._warm_up_period = self.period + 1 + (1 if self.timezone_mismatch else 0)

    @classmethod
    def from_name_period(
        cls,
        name: str,
        period: int,
        target_symbol: Symbol,
        reference_symbol: Symbol,
        timezones: ExchangeTimezoneDatabase | None = None,
    ) -> Beta:
        """Build with the legacy ``(name, period, target, reference)`` ordering."""
        return cls(target_symbol, reference_symbol, period, name=name, timezones=timezones)

    @property
    def warm_up_period(self) -> int:
        return self._warm_up_period

    @property
    def is_ready(self) -> bool:
        return self._target_returns.is_ready and self._reference_returns.is_ready

    @property
    def resolution(self) -> Resolution | None:
        return self._resolution

    def compute_next_value(self, bar: TradeBar) -> float:
        if self._previous_input is None:
            self._previous_input = bar
            self._previous_symbol_is_target = bar.symbol == self.target_symbol
            if self._resolution is None:
                self._resolution = detect_resolution(bar.time, bar.end_time)
            return self._beta

        input_end_time = bar.end_time
        previous_end_time = self._previous_input.end_time
        if self.timezone_mismatch:
            if self._previous_symbol_is_target:
                input_end_time = _to_utc(input_end_time, self._reference_timezone)
                previous_end_time = _to_utc(previous_end_time, self._target_timezone)
            else:
                input_end_time = _to_utc(input_end_time, self._target_timezone)
                previous_end_time = _to_utc(previous_end_time, self._reference_timezone)

        same_bucket = truncate_to_resolution(
            input_end_time, self._resolution
        ) == truncate_to_resolution(previous_end_time, self._resolution)
        if bar.symbol != self._previous_input.symbol and same_bucket:
            # Resolve both sides first so an unknown symbol leaves the windows untouched.
            pair = [
                (bar, self._windows_for(bar.symbol)),
                (self._previous_input, self._windows_for(self._previous_input.symbol)),
            ]
            for paired_bar, (prices, returns) in pair:
                prices.add(float(paired_bar.close))
                if prices.count > 1:
                    returns.add(safe_divide(prices[0], prices[1]) - 1)
            self.pairs += 1
            self._compute_beta()
        else:
            logger.debug(
                "%s skipped %s at %s (pending %s at %s)",
                self.name,
                bar.symbol,
                bar.end_time,
                self._previous_input.symbol,
                self._previous_input.end_time,
            )

        self._previous_input = bar
        self._previous_symbol_is_target = bar.symbol == self.target_symbol
        return self._beta

    def _windows_for(
        self, symbol: Symbol
    ) -> tuple[RollingWindow[float], RollingWindow[float]]:
        if symbol == self.target_symbol:
            return self._target_prices, self._target_returns
        if symbol == self.reference_symbol:
            return self._reference_prices, self._reference_returns
        raise InvalidArgumentError(
            f"The given symbol {symbol} was not {self.target_symbol} "
            f"or {self.reference_symbol} symbol"
        )

    def _compute_beta(self) -> None:
        variance = self._reference_returns.variance()
        covariance = self._target_returns.covariance(self._reference_returns)

        if is_nan_or_zero(variance):
            variance = 1.0
        if is_nan_or_zero(covariance):
            covariance = 0.0
        self._beta = covariance / variance

    def reset(self) -> None:
        self._previous_input = None
        self._previous_symbol_is_target = False
        self._target_prices.reset()
        self._reference_prices.reset()
        self._target_returns.reset()
        self._reference_returns.reset()
        self._beta = 0.0
        self.pairs = 0
        super().reset()


def _to_utc(timestamp: datetime, zone: tzinfo) -> datetime:
    """Convert an exchange-local (naive) or aware timestamp to naive UTC."""
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=zone)
    return timestamp.astimezone(UTC).replace(tzinfo=None)
