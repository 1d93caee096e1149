"""Streaming indicators."""

from .base import BarIndicator, safe_divide
from .beta import Beta
from .resolution import detect_resolution, truncate_to_resolution
from .rolling_window import RollingWindow

__all__ = [
    "BarIndicator",
    "Beta",
    "RollingWindow",
    "detect_resolution",
    "safe_divide",
    "truncate_to_resolution",
]
