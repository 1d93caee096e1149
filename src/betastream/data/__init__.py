"""Bar providers and exchange metadata."""

from .base import BarProvider
from .csv_data import CsvBarProvider
from .exchange_timezones import ExchangeTimezoneDatabase, default_timezone_database

__all__ = [
    "BarProvider",
    "CsvBarProvider",
    "ExchangeTimezoneDatabase",
    "default_timezone_database",
]
