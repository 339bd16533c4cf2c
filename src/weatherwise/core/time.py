"""
Date and clock-time parsing.

WeatherWise works with calendar dates (`YYYY-MM-DD`) and wall-clock event times
(`HH:MM`); there is no need for timezone-aware datetimes except when deciding what
"today" is for the historical window.
"""

from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo


def today_in(timezone: str) -> date:
    """Return the current calendar date in `timezone`."""
    return datetime.now(ZoneInfo(timezone)).date()


def parse_date(value: str) -> date:
    """Parse an ISO calendar date (`YYYY-MM-DD`)."""
    return date.fromisoformat(value.strip())


def parse_hour(value: str) -> int:
    """Return the hour component of an `HH:MM` (or bare `HH`) string.

    Minutes are ignored: slot analysis works on whole hours.
    """
    head = value.strip().split(":", 1)[0]
    hour = int(head)
    if not 0 <= hour <= 23:
        raise ValueError(f"Hour out of range in time '{value}'")
    return hour
