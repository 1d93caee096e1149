"""CSV-backed bar provider."""

from __future__ import annotations

from datetime import datetime, time
from pathlib import Path

import pandas as pd

from betastream.domain.models import Resolution, Symbol, TradeBar
from betastream.errors import DataProviderError

DEFAULT_DAILY_CLOSE = time(16, 0)


class CsvBarProvider:
    """Load OHLCV bars from local CSV files as ``TradeBar`` lists.

    Each row's timestamp is the bar open. Intraday bars end one resolution
    step later; daily bars end at ``daily_close`` on the same exchange-local
    date so that sessions of different exchanges share a UTC date.
    """

    date_column_candidates = ("date", "datetime", "timestamp", "time")

    def __init__(
        self,
        data_dir: str,
        resolution: Resolution = Resolution.DAILY,
        daily_close: time = DEFAULT_DAILY_CLOSE,
    ) -> None:
        self.data_dir = Path(data_dir)
        self.resolution = Resolution(resolution)
        self.daily_close = daily_close
        self._frames_cache: dict[Symbol, pd.DataFrame] = {}

    def get_bars(self, symbol: Symbol) -> list[TradeBar]:
        frame = self.get_frame(symbol)
        bars: list[TradeBar] = []
        for timestamp, row in frame.iterrows():
            start = pd.Timestamp(timestamp).to_pydatetime()
            bars.append(
                TradeBar(
                    symbol=symbol,
                    time=start,
                    end_time=self._bar_end(start),
                    open=float(row["open"]),
                    high=float(row["high"]),
                    low=float(row["low"]),
                    close=float(row["close"]),
                    volume=float(row["volume"]),
                )
            )
        return bars

    def _bar_end(self, start: datetime) -> datetime:
        bar_length = self.resolution.to_timedelta()
        if self.resolution != Resolution.DAILY:
            return start + bar_length
        end = datetime.combine(start.date(), self.daily_close, tzinfo=start.tzinfo)
        if end <= start:
            return start + bar_length
        return end

    def get_frame(self, symbol: Symbol) -> pd.DataFrame:
        """Return the normalized OHLCV frame indexed by bar open time."""
        cached = self._frames_cache.get(symbol)
        if cached is not None:
            return cached

        path = self._resolve_path(symbol)
        if path is None:
            raise DataProviderError(f"No CSV found for {symbol.ticker} under {self.data_dir}")
        frame = pd.read_csv(path)
        normalized = self._normalize_csv(frame, symbol)
        self._frames_cache[symbol] = normalized
        return normalized

    def _resolve_path(self, symbol: Symbol) -> Path | None:
        ticker_upper = symbol.ticker.upper()
        ticker_lower = symbol.ticker.lower()
        market_upper = symbol.market.upper()
        market_lower = symbol.market.lower()
        candidates = [
            self.data_dir / market_lower / f"{ticker_upper}.csv",
            self.data_dir / market_lower / f"{ticker_lower}.csv",
            self.data_dir / market_upper / f"{ticker_upper}.csv",
            self.data_dir / market_upper / f"{ticker_lower}.csv",
            self.data_dir / f"{ticker_upper}.csv",
            self.data_dir / f"{ticker_lower}.csv",
        ]
        seen: set[Path] = set()
        for candidate in candidates:
            if candidate in seen:
                continue
            seen.add(candidate)
            if candidate.exists():
                return candidate
        return None

    def _normalize_csv(self, frame: pd.DataFrame, symbol: Symbol) -> pd.DataFrame:
        lower_to_original = {str(column).strip().lower(): column for column in frame.columns}
        date_column = self._pick_date_column(lower_to_original)
        rename_map = self._build_ohlcv_rename_map(lower_to_original, symbol)
        normalized = frame.rename(columns=rename_map)
        normalized.index = self._parse_timestamps(normalized[date_column], symbol)
        normalized = normalized.sort_index()
        if "volume" not in normalized.columns:
            normalized["volume"] = 0.0
        normalized = normalized[["open", "high", "low", "close", "volume"]].copy()
        normalized = normalized.apply(pd.to_numeric, errors="coerce")
        normalized = normalized.dropna(subset=["open", "high", "low", "close"])
        normalized["volume"] = normalized["volume"].fillna(0.0)
        if normalized.empty:
            raise DataProviderError(f"{symbol.ticker}: data has no valid OHLCV rows")
        return normalized

    @staticmethod
    def _parse_timestamps(values: pd.Series, symbol: Symbol) -> pd.DatetimeIndex:
        try:
            parsed = pd.to_datetime(values, utc=False)
        except ValueError:
            parsed = None
        if parsed is None or not pd.api.types.is_datetime64_any_dtype(parsed):
            # Mixed UTC offsets cannot share one zone; fall back to UTC.
            try:
                parsed = pd.to_datetime(values, utc=True)
            except ValueError as exc:
                raise DataProviderError(f"{symbol.ticker}: unparseable timestamps") from exc
        return pd.DatetimeIndex(parsed)

    def _pick_date_column(self, lower_to_original: dict[str, str]) -> str:
        for candidate in self.date_column_candidates:
            if candidate in lower_to_original:
                return lower_to_original[candidate]
        candidates = ", ".join(self.date_column_candidates)
        raise DataProviderError(f"CSV missing date column. Expected one of: {candidates}")

    @staticmethod
    def _build_ohlcv_rename_map(
        lower_to_original: dict[str, str],
        symbol: Symbol,
    ) -> dict[str, str]:
        rename_map: dict[str, str] = {}
        for name in ("open", "high", "low", "close"):
            source = lower_to_original.get(name)
            if source is None:
                raise DataProviderError(f"{symbol.ticker}: CSV missing required column '{name}'")
            rename_map[source] = name
        volume_source = lower_to_original.get("volume")
        if volume_source is not None:
            rename_map[volume_source] = "volume"
        return rename_map
