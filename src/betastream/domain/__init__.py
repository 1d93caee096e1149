"""Domain models and event types."""

from .events import BetaEvent
from .models import (
    IndicatorDataPoint,
    Resolution,
    SecurityType,
    Symbol,
    TradeBar,
)

__all__ = [
    "BetaEvent",
    "IndicatorDataPoint",
    "Resolution",
    "SecurityType",
    "Symbol",
    "TradeBar",
]
