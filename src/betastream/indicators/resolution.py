"""Resolution detection and timestamp truncation for bar pairing."""

from __future__ import annotations

from datetime import datetime, timedelta

from betastream.domain.models import Resolution

_ONE_HOUR = timedelta(hours=1)


def to_higher_resolution_equivalent(duration: timedelta) -> Resolution:
    """Map a bar duration to the largest resolution bucket it reaches."""
    if duration >= timedelta(days=1):
        return Resolution.DAILY
    if duration >= _ONE_HOUR:
        return Resolution.HOUR
    if duration >= timedelta(minutes=1):
        return Resolution.MINUTE
    if duration >= timedelta(seconds=1):
        return Resolution.SECOND
    return Resolution.TICK


def detect_resolution(start: datetime, end: datetime) -> Resolution:
    """Infer the sampling cadence from one bar's duration.

    Anything longer than an hour is treated as daily so that session-length
    bars (e.g. 09:30-16:00) pair by calendar date.
    """
    duration = end - start
    if duration > _ONE_HOUR:
        return Resolution.DAILY
    return to_higher_resolution_equivalent(duration)


def truncate_to_resolution(timestamp: datetime, resolution: Resolution) -> datetime:
    if resolution == Resolution.DAILY:
        return timestamp.replace(hour=0, minute=0, second=0, microsecond=0)
    if resolution == Resolution.HOUR:
        return timestamp.replace(minute=0, second=0, microsecond=0)
    if resolution == Resolution.MINUTE:
        return timestamp.replace(second=0, microsecond=0)
    return timestamp
