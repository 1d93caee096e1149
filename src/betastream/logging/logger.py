"""Concise human-readable replay logger."""

from __future__ import annotations

import logging
from datetime import datetime


class HumanLogger:
    """Console logger with fixed line types."""

    def __init__(self, level: str = "INFO") -> None:
        self._logger = logging.getLogger("betastream")
        self._logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        self._logger.propagate = False
        if not self._logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter("%(asctime)s | %(message)s", "%Y-%m-%d %H:%M:%S")
            handler.setFormatter(formatter)
            self._logger.addHandler(handler)

    def run_started(
        self,
        run_id: str,
        indicator: str,
        target: str,
        reference: str,
        warm_up_period: int,
    ) -> None:
        self._logger.info(
            "run | %s | %s | target %s | reference %s | warm_up %s",
            self._short_id(run_id),
            indicator,
            target,
            reference,
            warm_up_period,
        )

    def paired(self, end_time: datetime, beta: float, samples: int) -> None:
        self._logger.debug(
            "pair | bar %s | beta %s | samples %s",
            self._short_ts(end_time),
            self._format_beta(beta),
            samples,
        )

    def ready(self, indicator: str, end_time: datetime, beta: float) -> None:
        self._logger.info(
            "ready | %s | bar %s | beta %s",
            indicator,
            self._short_ts(end_time),
            self._format_beta(beta),
        )

    def summary(self, indicator: str, bars: int, pairs: int, beta: float, ready: bool) -> None:
        parts = [
            f"summary | {indicator}",
            f"bars {bars}",
            f"pairs {pairs}",
            f"beta {self._format_beta(beta)}",
        ]
        if not ready:
            parts.append("not ready")
        self._logger.info(" | ".join(parts))

    def error(self, message: str) -> None:
        self._logger.error("error | %s", message)

    @staticmethod
    def _short_id(value: str | None, head: int = 10, tail: int = 6) -> str:
        if not value:
            return ""
        text = str(value)
        if len(text) <= head + tail + 1:
            return text
        return f"{text[:head]}...{text[-tail:]}"

    @staticmethod
    def _format_beta(value: float, precision: int = 4) -> str:
        normalized = 0.0 if abs(float(value)) < 1e-12 else float(value)
        return f"{normalized:+.{max(0, precision)}f}"

    @staticmethod
    def _short_ts(value: datetime) -> str:
        if value.hour == 0 and value.minute == 0 and value.second == 0:
            return value.strftime("%Y-%m-%d")
        return value.strftime("%Y-%m-%d %H:%M:%S")
