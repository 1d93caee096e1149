"""Runtime wiring and the bar replay loop."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import UTC, datetime, tzinfo
from pathlib import Path
from uuid import uuid4

from betastream.config import Settings
from betastream.data.base import BarProvider
from betastream.data.csv_data import CsvBarProvider
from betastream.data.exchange_timezones import ExchangeTimezoneDatabase
from betastream.domain.events import BetaEvent
from betastream.domain.models import TradeBar
from betastream.indicators.beta import Beta
from betastream.logging.event_sink import JsonlEventSink, generate_plotly_report
from betastream.logging.logger import HumanLogger


@dataclass(frozen=True)
class ReplayResult:
    """Outcome of driving one indicator over a bar stream."""

    bars: int
    pairs: int
    beta: float
    ready: bool


def interleave_bars(
    target_bars: Iterable[TradeBar],
    reference_bars: Iterable[TradeBar],
    target_zone: tzinfo | None = None,
    reference_zone: tzinfo | None = None,
) -> list[TradeBar]:
    """Merge two bar lists by UTC end time; target bars come first on ties.

    Naive end times are read in the given exchange zone. Without a zone they
    are compared as they are.
    """
    tagged = [
        (_sort_key(bar.end_time, target_zone), 0, index, bar)
        for index, bar in enumerate(target_bars)
    ]
    tagged.extend(
        (_sort_key(bar.end_time, reference_zone), 1, index, bar)
        for index, bar in enumerate(reference_bars)
    )
    tagged.sort(key=lambda item: item[:3])
    return [bar for *_, bar in tagged]


def _sort_key(timestamp: datetime, zone: tzinfo | None) -> datetime:
    if timestamp.tzinfo is None:
        if zone is None:
            return timestamp
        timestamp = timestamp.replace(tzinfo=zone)
    return timestamp.astimezone(UTC).replace(tzinfo=None)


def run_indicator(
    indicator: Beta,
    bars: Iterable[TradeBar],
    run_id: str = "",
    event_sink: JsonlEventSink | None = None,
    human_logger: HumanLogger | None = None,
) -> ReplayResult:
    """Feed bars into the indicator, reporting every paired update."""
    count = 0
    pairs = 0
    was_ready = indicator.is_ready
    for bar, paired in _updates(indicator, bars):
        count += 1
        if not paired:
            continue
        pairs += 1
        value = indicator.current.value
        if human_logger is not None:
            human_logger.paired(bar.end_time, value, indicator.samples)
        if event_sink is not None:
            event_sink.emit(
                BetaEvent(
                    run_id=run_id,
                    indicator=indicator.name,
                    event_type="beta_updated",
                    payload={
                        "symbol": str(bar.symbol),
                        "end_time": bar.end_time.isoformat(),
                        "beta": value,
                        "ready": indicator.is_ready,
                    },
                )
            )
        if indicator.is_ready and not was_ready:
            was_ready = True
            if human_logger is not None:
                human_logger.ready(indicator.name, bar.end_time, value)
            if event_sink is not None:
                event_sink.emit(
                    BetaEvent(
                        run_id=run_id,
                        indicator=indicator.name,
                        event_type="indicator_ready",
                        payload={
                            "end_time": bar.end_time.isoformat(),
                            "samples": indicator.samples,
                        },
                    )
                )
    return ReplayResult(
        bars=count,
        pairs=pairs,
        beta=indicator.current.value,
        ready=indicator.is_ready,
    )


def _updates(indicator: Beta, bars: Iterable[TradeBar]) -> Iterator[tuple[TradeBar, bool]]:
    for bar in bars:
        before = indicator.pairs
        indicator.update(bar)
        yield bar, indicator.pairs != before


def replay(settings: Settings) -> int:
    """Replay two CSV bar histories through a Beta indicator."""
    run_id = uuid4().hex
    run_directory = Path(settings.events_dir) / run_id
    run_directory.mkdir(parents=True, exist_ok=True)
    events_path = run_directory / "events.jsonl"
    report_path = run_directory / "report.html"

    event_sink = JsonlEventSink(str(events_path))
    human_logger = HumanLogger(level=settings.log_level)
    indicator_name = f"B({settings.period})"

    exit_code = 0
    try:
        timezones = build_timezone_database(settings)
        target = settings.target()
        reference = settings.reference()
        indicator = Beta(target, reference, settings.period, timezones=timezones)
        indicator_name = indicator.name
        human_logger.run_started(
            run_id,
            indicator.name,
            settings.target_symbol,
            settings.reference_symbol,
            indicator.warm_up_period,
        )
        event_sink.emit(
            BetaEvent(
                run_id=run_id,
                indicator=indicator.name,
                event_type="run_started",
                payload={
                    "target": settings.target_symbol,
                    "reference": settings.reference_symbol,
                    "period": settings.period,
                    "warm_up_period": indicator.warm_up_period,
                    "timezone_mismatch": indicator.timezone_mismatch,
                },
            )
        )
        provider = build_bar_provider(settings)
        bars = interleave_bars(
            provider.get_bars(target),
            provider.get_bars(reference),
            target_zone=timezones.timezone_for(target),
            reference_zone=timezones.timezone_for(reference),
        )
        result = run_indicator(
            indicator,
            bars,
            run_id=run_id,
            event_sink=event_sink,
            human_logger=human_logger,
        )
        human_logger.summary(indicator.name, result.bars, result.pairs, result.beta, result.ready)
        event_sink.emit(
            BetaEvent(
                run_id=run_id,
                indicator=indicator.name,
                event_type="run_finished",
                payload={
                    "bars": result.bars,
                    "pairs": result.pairs,
                    "beta": result.beta,
                    "ready": result.ready,
                },
            )
        )
    except KeyboardInterrupt:
        exit_code = 0
    except Exception as exc:
        human_logger.error(str(exc))
        event_sink.emit(
            BetaEvent(
                run_id=run_id,
                indicator=indicator_name,
                event_type="error",
                payload={"message": str(exc)},
            )
        )
        exit_code = 1
    finally:
        if settings.write_report:
            generate_plotly_report(str(events_path), str(report_path))

    return exit_code


def build_timezone_database(settings: Settings) -> ExchangeTimezoneDatabase:
    return settings.timezone_database()


def build_bar_provider(settings: Settings) -> BarProvider:
    return CsvBarProvider(
        settings.historical_data_dir,
        resolution=settings.bar_resolution(),
        daily_close=settings.session_close(),
    )
