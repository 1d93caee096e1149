"""Minimal bar-indicator framework."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from collections.abc import Callable

from betastream.domain.models import IndicatorDataPoint, TradeBar

UpdatedCallback = Callable[["BarIndicator", IndicatorDataPoint], None]


def safe_divide(numerator: float, denominator: float, fail_value: float = 0.0) -> float:
    """Divide, returning ``fail_value`` instead of raising on a zero denominator."""
    if denominator == 0:
        return fail_value
    return numerator / denominator


def is_nan_or_zero(value: float) -> bool:
    return math.isnan(value) or value == 0.0


class BarIndicator(ABC):
    """Base class for indicators fed one ``TradeBar`` at a time."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.samples = 0
        self.current = IndicatorDataPoint(time=None, value=0.0)
        self.previous = IndicatorDataPoint(time=None, value=0.0)
        self.updated: list[UpdatedCallback] = []

    @property
    @abstractmethod
    def is_ready(self) -> bool:
        """True once the indicator has seen enough data."""

    @property
    def warm_up_period(self) -> int:
        return 1

    @abstractmethod
    def compute_next_value(self, bar: TradeBar) -> float:
        """Consume one bar and return the new indicator value."""

    def update(self, bar: TradeBar) -> float:
        value = self.compute_next_value(bar)
        self.samples += 1
        self.previous = self.current
        self.current = IndicatorDataPoint(time=bar.end_time, value=float(value))
        for callback in list(self.updated):
            callback(self, self.current)
        return self.current.value

    def reset(self) -> None:
        self.samples = 0
        self.current = IndicatorDataPoint(time=None, value=0.0)
        self.previous = IndicatorDataPoint(time=None, value=0.0)

    def __str__(self) -> str:
        return f"{self.name}: {self.current.value:.6f}"
