"""Exchange timezone lookup keyed by security type, market and ticker."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from functools import lru_cache
from zoneinfo import ZoneInfo

from betastream.domain.models import SecurityType, Symbol
from betastream.errors import InvalidArgumentError, UnknownExchangeError

WILDCARD = "*"

EntryKey = tuple[SecurityType, str, str]

_DEFAULT_ENTRIES: dict[EntryKey, str] = {
    (SecurityType.EQUITY, "usa", WILDCARD): "America/New_York",
    (SecurityType.INDEX, "usa", WILDCARD): "America/New_York",
    (SecurityType.OPTION, "usa", WILDCARD): "America/New_York",
    (SecurityType.EQUITY, "india", WILDCARD): "Asia/Kolkata",
    (SecurityType.INDEX, "india", WILDCARD): "Asia/Kolkata",
    (SecurityType.FUTURE, "cme", WILDCARD): "America/Chicago",
    (SecurityType.FUTURE, "cbot", WILDCARD): "America/Chicago",
    (SecurityType.FUTURE, "nymex", WILDCARD): "America/New_York",
    (SecurityType.FUTURE, "comex", WILDCARD): "America/New_York",
    (SecurityType.FUTURE, "ice", WILDCARD): "America/New_York",
    (SecurityType.FUTURE, "eurex", WILDCARD): "Europe/Berlin",
    (SecurityType.FOREX, "oanda", WILDCARD): "America/New_York",
    (SecurityType.FOREX, "fxcm", WILDCARD): "America/New_York",
    (SecurityType.CFD, "oanda", WILDCARD): "America/New_York",
    (SecurityType.CRYPTO, "coinbase", WILDCARD): "UTC",
    (SecurityType.CRYPTO, "binance", WILDCARD): "UTC",
    (SecurityType.CRYPTO, "kraken", WILDCARD): "UTC",
    (SecurityType.CRYPTO, "bitfinex", WILDCARD): "UTC",
    (SecurityType.CRYPTO, "bybit", WILDCARD): "UTC",
}


class ExchangeTimezoneDatabase:
    """Resolve the exchange timezone of a symbol.

    Lookups try the exact ticker first and then the market-wide wildcard
    entry for the security type.
    """

    def __init__(self, entries: Mapping[EntryKey, str] | None = None) -> None:
        self._entries: dict[EntryKey, str] = {}
        for (security_type, market, ticker), zone_name in (entries or {}).items():
            self._entries[self._key(security_type, market, ticker)] = zone_name

    @classmethod
    def default(cls) -> ExchangeTimezoneDatabase:
        return cls(_DEFAULT_ENTRIES)

    def get_timezone(
        self,
        market: str,
        ticker: str,
        security_type: SecurityType | str,
    ) -> ZoneInfo:
        exact = self._entries.get(self._key(security_type, market, ticker))
        if exact is not None:
            return ZoneInfo(exact)
        wildcard = self._entries.get(self._key(security_type, market, WILDCARD))
        if wildcard is not None:
            return ZoneInfo(wildcard)
        raise UnknownExchangeError(
            f"No exchange timezone registered for {security_type} {ticker} in market {market}"
        )

    def timezone_for(self, symbol: Symbol) -> ZoneInfo:
        return self.get_timezone(symbol.market, symbol.ticker, symbol.security_type)

    def security_type_for_market(self, market: str) -> SecurityType:
        """Return the first security type registered for ``market``, else equity."""
        normalized = market.strip().lower()
        for security_type, entry_market, _ in self._entries:
            if entry_market == normalized:
                return security_type
        return SecurityType.EQUITY

    def resolve_symbol(self, value: str) -> Symbol:
        """Parse ``[type:]market:TICKER``, inferring a missing type from the market."""
        symbol = Symbol.parse(value)
        if Symbol.has_explicit_type(value):
            return symbol
        return replace(symbol, security_type=self.security_type_for_market(symbol.market))

    def with_overrides(
        self,
        overrides: Mapping[str, str],
        security_type: SecurityType | None = None,
    ) -> ExchangeTimezoneDatabase:
        """Return a copy with extra ``"[type:]market:TICKER" -> zone`` entries.

        Keys without a type prefix use ``security_type`` when given, otherwise
        the type registered for their market.
        """
        merged = dict(self._entries)
        for raw_symbol, zone_name in overrides.items():
            if security_type is not None and not Symbol.has_explicit_type(raw_symbol):
                symbol = Symbol.parse(raw_symbol, security_type=security_type)
            else:
                symbol = self.resolve_symbol(raw_symbol)
            try:
                ZoneInfo(zone_name)
            except (KeyError, ValueError) as exc:
                raise InvalidArgumentError(
                    f"Unknown timezone '{zone_name}' for {raw_symbol}"
                ) from exc
            merged[self._key(symbol.security_type, symbol.market, symbol.ticker)] = zone_name
        return ExchangeTimezoneDatabase(merged)

    @staticmethod
    def _key(security_type: SecurityType | str, market: str, ticker: str) -> EntryKey:
        normalized_ticker = ticker.strip().upper() or WILDCARD
        return SecurityType(security_type), market.strip().lower(), normalized_ticker


@lru_cache(maxsize=1)
def default_timezone_database() -> ExchangeTimezoneDatabase:
    """Return the shared default database, building it on first use."""
    return ExchangeTimezoneDatabase.default()
