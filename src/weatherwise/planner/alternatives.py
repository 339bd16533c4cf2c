"""
Alternative-date ranker.

Evaluates the dates two and one weeks before and after the target with the same
fetch -> reduce -> score pipeline as the target itself, all in parallel. A candidate
whose fetch fails is dropped; the survivors are sorted by ICP, best first.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, timedelta
from typing import Protocol

from weatherwise.domain.models import DateResult, EventType
from weatherwise.features.descriptions import build_date_result
from weatherwise.features.statistics import calculate_statistics
from weatherwise.ingestion.climate_client import HistoricalWindow
from weatherwise.scoring.icp import calculate_icp

logger = logging.getLogger(__name__)

ALTERNATIVE_OFFSETS_DAYS: tuple[int, ...] = (-14, -7, 7, 14)


class WindowSource(Protocol):
    async def get_window(
        self, *, lat: float, lon: float, target_date: date, today: date | None = None
    ) -> HistoricalWindow: ...


async def evaluate_date(
    climate_client: WindowSource,
    *,
    lat: float,
    lon: float,
    day: date,
    preferred_temperature: float,
    event_type: EventType,
    today: date | None = None,
) -> DateResult:
    """Fetch, reduce and score a single calendar date."""
    window = await climate_client.get_window(lat=lat, lon=lon, target_date=day, today=today)
    statistics = calculate_statistics(window)
    icp = calculate_icp(statistics, preferred_temperature, event_type)
    return build_date_result(day, statistics, icp)


async def rank_alternative_dates(
    climate_client: WindowSource,
    *,
    lat: float,
    lon: float,
    target_date: date,
    preferred_temperature: float,
    event_type: EventType,
    today: date | None = None,
) -> list[DateResult]:
    candidates = [target_date + timedelta(days=offset) for offset in ALTERNATIVE_OFFSETS_DAYS]
    outcomes = await asyncio.gather(
        *(
            evaluate_date(
                climate_client,
                lat=lat,
                lon=lon,
                day=day,
                preferred_temperature=preferred_temperature,
                event_type=event_type,
                today=today,
            )
            for day in candidates
        ),
        return_exceptions=True,
    )

    ranked: list[DateResult] = []
    for day, outcome in zip(candidates, outcomes):
        if isinstance(outcome, DateResult):
            ranked.append(outcome)
        elif isinstance(outcome, Exception):
            logger.warning("Dropping alternative date %s: %s", day.isoformat(), outcome)
        else:
            raise outcome

    ranked.sort(key=lambda r: r.icp, reverse=True)
    return ranked
