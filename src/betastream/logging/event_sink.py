"""JSONL event sink and per-run Plotly report generator."""

from __future__ import annotations

import json
import logging
from collections.abc import Collection
from pathlib import Path
from typing import Any

import pandas as pd
import plotly.express as px

from betastream.domain.events import BetaEvent

logger = logging.getLogger("betastream.logging.event_sink")


class JsonlEventSink:
    """Append-only JSONL writer for one replay run."""

    def __init__(self, path: str) -> None:
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        self.path = output_path
        self.emitted = 0

    def emit(self, event: BetaEvent) -> None:
        line = json.dumps(event.to_record(), sort_keys=True, default=str)
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(f"{line}\n")
        self.emitted += 1


def load_events(
    path: str | Path,
    event_types: Collection[str] | None = None,
) -> list[dict[str, Any]]:
    """Load JSONL records, optionally keeping only ``event_types``.

    Lines that are not JSON objects (for example a record truncated by an
    interrupted run) are skipped with a warning.
    """
    records: list[dict[str, Any]] = []
    input_path = Path(path)
    if not input_path.exists():
        return records
    with input_path.open("r", encoding="utf-8") as handle:
        for line_number, line in enumerate(handle, start=1):
            text = line.strip()
            if not text:
                continue
            try:
                record = json.loads(text)
            except json.JSONDecodeError:
                record = None
            if not isinstance(record, dict):
                logger.warning("skipping malformed event at %s:%d", input_path, line_number)
                continue
            if event_types is not None and record.get("event_type") not in event_types:
                continue
            records.append(record)
    return records


def beta_frame(events: list[dict[str, Any]]) -> pd.DataFrame:
    """Collect ``beta_updated`` payloads into a frame indexed by bar time."""
    rows: list[dict[str, Any]] = []
    for event in events:
        if event.get("event_type") != "beta_updated":
            continue
        payload = event.get("payload", {})
        rows.append(
            {
                "bar_time": payload.get("end_time"),
                "beta": payload.get("beta"),
                "ready": bool(payload.get("ready", False)),
            }
        )
    frame = pd.DataFrame(rows, columns=["bar_time", "beta", "ready"])
    frame["bar_time"] = pd.to_datetime(frame["bar_time"], utc=True, errors="coerce")
    frame["beta"] = pd.to_numeric(frame["beta"], errors="coerce")
    return frame.dropna(subset=["bar_time", "beta"]).reset_index(drop=True)


def generate_plotly_report(events_jsonl_path: str, output_html_path: str) -> None:
    """Render the Beta series of one replay as an interactive report."""
    events = load_events(events_jsonl_path, event_types={"run_started", "beta_updated"})
    output = Path(output_html_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    frame = beta_frame(events)
    if frame.empty:
        empty_df = pd.DataFrame({"event_type": ["none"], "count": [0]})
        figure = px.bar(empty_df, x="event_type", y="count", title="No Beta Updates")
        figure.write_html(str(output), include_plotlyjs="cdn")
        return

    title = "Rolling Beta"
    for event in events:
        if event.get("event_type") == "run_started":
            payload = event.get("payload", {})
            title = (
                f"{event.get('indicator', 'Beta')} "
                f"{payload.get('target', '')} vs {payload.get('reference', '')}"
            )
            break

    timeline = px.line(
        frame,
        x="bar_time",
        y="beta",
        title=title,
        markers=True,
        hover_data=["ready"],
    )
    summary = frame.groupby("ready", dropna=False).size().reset_index(name="count")
    summary["ready"] = summary["ready"].map({True: "ready", False: "warming up"})
    bars = px.bar(summary, x="ready", y="count", title="Updates by Readiness")
    html_parts = [
        "<html><head><meta charset='utf-8'><title>betastream replay report</title></head><body>",
        timeline.to_html(full_html=False, include_plotlyjs="cdn"),
        bars.to_html(full_html=False, include_plotlyjs=False),
        "</body></html>",
    ]
    output.write_text("".join(html_parts), encoding="utf-8")
