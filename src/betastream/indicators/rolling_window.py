"""Fixed-capacity rolling window with sample statistics."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Generic, TypeVar

import pandas as pd

from betastream.errors import InvalidArgumentError

T = TypeVar("T")


class RollingWindow(Generic[T]):
    """Circular buffer where ``window[0]`` is the most recent value.

    Adding to a full window evicts the oldest value.
    """

    def __init__(self, size: int) -> None:
        if size < 1:
            raise InvalidArgumentError(f"RollingWindow size must be at least 1 but was {size}")
        self._size = int(size)
        self._items: list[T | None] = [None] * self._size
        self._head = 0
        self._count = 0
        self._most_recently_removed: T | None = None

    @property
    def size(self) -> int:
        return self._size

    @property
    def count(self) -> int:
        return self._count

    @property
    def is_ready(self) -> bool:
        return self._count == self._size

    @property
    def most_recently_removed(self) -> T | None:
        return self._most_recently_removed

    def add(self, value: T) -> None:
        if self.is_ready:
            self._most_recently_removed = self._items[self._head]
        else:
            self._count += 1
        self._items[self._head] = value
        self._head = (self._head + 1) % self._size

    def reset(self) -> None:
        self._items = [None] * self._size
        self._head = 0
        self._count = 0
        self._most_recently_removed = None

    def __getitem__(self, index: int) -> T:
        if index < 0 or index >= self._count:
            raise IndexError(f"Index {index} is out of range for a window holding {self._count}")
        position = (self._head - 1 - index) % self._size
        return self._items[position]  # type: ignore[return-value]

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[T]:
        for index in range(self._count):
            yield self[index]

    def to_series(self) -> pd.Series:
        """Return held values oldest first as a float series."""
        return pd.Series([float(value) for value in reversed(list(self))], dtype="float64")

    def variance(self) -> float:
        """Sample variance (ddof=1); NaN with fewer than two values."""
        if self._count < 2:
            return float("nan")
        return float(self.to_series().var(ddof=1))

    def covariance(self, other: RollingWindow) -> float:
        """Sample covariance (ddof=1) against another window of equal count."""
        if self._count != other.count:
            raise InvalidArgumentError(
                f"Covariance needs windows of equal count, got {self._count} and {other.count}"
            )
        if self._count < 2:
            return float("nan")
        return float(self.to_series().cov(other.to_series(), ddof=1))
