"""Command-line interface for the Beta replay runtime."""

from __future__ import annotations

import argparse
import sys

from betastream.config import Settings, parse_timezone_overrides
from betastream.domain.models import Resolution
from betastream.runtime import replay


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""
    parser = argparse.ArgumentParser(description="Replay two bar histories through a rolling Beta")
    parser.add_argument("--target", type=str, help="Target symbol as [type:]market:TICKER")
    parser.add_argument("--reference", type=str, help="Reference symbol as [type:]market:TICKER")
    parser.add_argument("--period", type=int, help="Number of paired returns in the window")
    parser.add_argument(
        "--resolution",
        choices=[item.value for item in Resolution],
        help="Bar length used to derive bar end times from CSV timestamps",
    )
    parser.add_argument(
        "--daily-close",
        type=str,
        metavar="HH:MM",
        help="Exchange-local session close used as the end of daily bars",
    )
    parser.add_argument("--data-dir", type=str, help="CSV historical data directory")
    parser.add_argument("--events-dir", type=str, help="Run outputs directory")
    parser.add_argument("--log-level", type=str, help="Console log level")
    parser.add_argument(
        "--timezone",
        action="append",
        default=[],
        metavar="[TYPE:]MARKET:TICKER=ZONE",
        help="Override the exchange timezone of a symbol (repeatable)",
    )
    parser.add_argument("--no-report", action="store_true", help="Skip the HTML report")
    return parser


def apply_cli_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Apply CLI values onto environment-derived settings."""
    overrides: dict[str, object] = {}
    if args.target:
        overrides["target_symbol"] = args.target
    if args.reference:
        overrides["reference_symbol"] = args.reference
    if args.period is not None:
        overrides["period"] = args.period
    if args.resolution:
        overrides["resolution"] = args.resolution
    if args.daily_close:
        overrides["daily_close"] = args.daily_close.strip()
    if args.data_dir:
        overrides["historical_data_dir"] = args.data_dir
    if args.events_dir:
        overrides["events_dir"] = args.events_dir
    if args.log_level:
        overrides["log_level"] = args.log_level.strip().upper()
    if args.timezone:
        merged_timezones = dict(settings.symbol_timezones)
        merged_timezones.update(parse_timezone_overrides(",".join(args.timezone)))
        overrides["symbol_timezones"] = merged_timezones
    if args.no_report:
        overrides["write_report"] = False
    return settings.with_overrides(**overrides)


def main() -> int:
    """CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args()
    try:
        settings = apply_cli_overrides(Settings.from_env(), args)
    except ValueError as exc:
        print(f"Configuration error: {exc}")
        return 2
    return replay(settings)


if __name__ == "__main__":
    sys.exit(main())
