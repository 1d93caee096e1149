"""Bar provider contract."""

from __future__ import annotations

from typing import Protocol

from betastream.domain.models import Symbol, TradeBar


class BarProvider(Protocol):
    """Interface for bar retrieval."""

    def get_bars(self, symbol: Symbol) -> list[TradeBar]:
        """Return bars for one symbol ordered by end time."""
