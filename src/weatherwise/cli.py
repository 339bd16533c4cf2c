"""
WeatherWise CLI entrypoint.

This CLI is intended for quick local demos and debugging without the web client.
It delegates all analysis logic to `weatherwise.planner.analyze.analyze_request`.
"""

from __future__ import annotations

import argparse
import asyncio
import json
from functools import partial
from typing import Any

from pydantic import TypeAdapter

from weatherwise.config.settings import get_settings
from weatherwise.core.logging import configure_logging
from weatherwise.core.time import parse_date
from weatherwise.domain.models import (
    ClimateAnalysisRequest,
    EventTime,
    EventType,
    LocationInput,
    LocationResult,
)
from weatherwise.ingestion.climate_client import ClimateClient
from weatherwise.ingestion.geocoding import geocode
from weatherwise.ingestion.holiday_client import HolidayClient
from weatherwise.planner.analyze import analyze_request, build_cache
from weatherwise.scoring.explain import one_line_summary


def _parse_location(value: str) -> LocationInput:
    """Parse `NAME:LAT:LON` (the name itself may not contain colons)."""
    parts = value.rsplit(":", 2)
    if len(parts) != 3:
        raise ValueError(f"Invalid --location '{value}', expected NAME:LAT:LON")
    name, lat, lon = parts
    return LocationInput(name=name.strip(), latitude=float(lat), longitude=float(lon))


def build_request(args: argparse.Namespace) -> ClimateAnalysisRequest:
    event_time = None
    if args.start_time:
        event_time = EventTime(start_time=args.start_time, end_time=args.end_time, is_all_day=False)

    return ClimateAnalysisRequest(
        location=args.place,
        locations=[_parse_location(v) for v in args.location] or None,
        date=parse_date(args.date),
        event_type=EventType.parse(args.event_type),
        preferred_temperature=float(args.preferred_temperature),
        event_time=event_time,
        country_code=args.country,
    )


def _cmd_analyze(args: argparse.Namespace) -> int:
    """Handle the `analyze` subcommand."""
    settings = get_settings()
    cache = build_cache(settings)
    request = build_request(args)

    result = asyncio.run(
        analyze_request(
            request,
            settings=settings,
            climate_client=ClimateClient(settings, cache),
            holiday_client=HolidayClient(settings, cache),
            geocoder=partial(geocode, settings),
        )
    )
    results = result if isinstance(result, list) else [result]

    if args.json:
        adapter = TypeAdapter(list[LocationResult])
        print(json.dumps(adapter.dump_python(results, mode="json", by_alias=True), ensure_ascii=False, indent=2))
        return 0

    for item in results:
        print(one_line_summary(item))
        for alt in getattr(item, "alternative_dates", []):
            print(f"    - {alt.display_date}: icp={alt.icp} rain={alt.rain_probability}%")
        if getattr(item, "requested_date", None) and item.requested_date.alert_message:
            print(f"    ! {item.requested_date.alert_message}")
    return 0


def _cmd_holidays(args: argparse.Namespace) -> int:
    settings = get_settings()
    client = HolidayClient(settings, build_cache(settings))
    holidays = asyncio.run(client.find_nearby(parse_date(args.date), country_code=args.country))
    for h in holidays:
        print(f"{h.date.isoformat()}  +{h.days_from_target:>3}d  {h.name}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the WeatherWise CLI."""
    parser = argparse.ArgumentParser(prog="weatherwise")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at DEBUG level")
    sub = parser.add_subparsers(dest="command", required=True)

    an = sub.add_parser("analyze", help="Climate comfort analysis for a date at one or more locations.")
    an.add_argument(
        "--location",
        action="append",
        default=[],
        help="Repeatable. NAME:LAT:LON (e.g. 'Sao Paulo:-23.55:-46.63')",
    )
    an.add_argument("--place", type=str, default=None, help="Free-text place (geocoded) or 'lat, lon'")
    an.add_argument("--date", required=True, help="Target date (YYYY-MM-DD)")
    an.add_argument(
        "--event-type",
        default=EventType.OUTDOOR.value,
        choices=[e.value for e in EventType],
    )
    an.add_argument("--preferred-temperature", type=float, default=24.0)
    an.add_argument("--start-time", default=None, help="Event start (HH:MM); enables hourly analysis")
    an.add_argument("--end-time", default=None, help="Event end (HH:MM); defaults to start + 2h")
    an.add_argument("--country", default=None, help="Holiday country code (e.g. BR)")
    an.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    an.set_defaults(func=_cmd_analyze)

    hol = sub.add_parser("holidays", help="Public holidays in the months after a date.")
    hol.add_argument("--date", required=True, help="Reference date (YYYY-MM-DD)")
    hol.add_argument("--country", default=None)
    hol.set_defaults(func=_cmd_holidays)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m weatherwise.cli`."""
    args = build_parser().parse_args(argv)
    configure_logging("DEBUG" if args.verbose else None)
    func: Any = getattr(args, "func")
    return int(func(args))


if __name__ == "__main__":
    raise SystemExit(main())
