from __future__ import annotations

# This module is the "orchestrator" for the climate analysis pipeline.
# It wires together:
# - domain input (ClimateAnalysisRequest)
# - ingestion (historical climate window, holidays, geocoding)
# - pure derivations (statistics, ICP, trend, hourly profile)
# - final response shape (LocationAnalysis / LocationFailure)
#
# Failure policy:
# - Missing provider credential or no location at all: the whole request fails.
# - Anything raised inside one location's pipeline: that location becomes a LocationFailure.
# - Holidays and hourly synthesis are enrichment: on error they fall back to empty values.

import asyncio
import logging
import random
import time
from datetime import date
from typing import Awaitable, Callable, Protocol

from weatherwise.config.settings import Settings
from weatherwise.core.cache import FileCache
from weatherwise.core.env import resolve_project_path
from weatherwise.core.time import parse_hour
from weatherwise.domain.models import (
    ClimateAnalysisRequest,
    ClimateStatistics,
    Coordinate,
    DataSource,
    EventTime,
    Holiday,
    HourlySlotAnalysis,
    LocationAnalysis,
    LocationFailure,
    LocationInput,
    LocationRef,
    LocationResult,
    TimeSlotRecommendation,
)
from weatherwise.errors import InvalidRequestError
from weatherwise.features.descriptions import build_date_result
from weatherwise.features.holidays import build_holiday_context
from weatherwise.features.hourly import (
    DEFAULT_DURATION_HOURS,
    analyze_time_slot,
    find_optimal_time_slots,
    make_rng,
    synthesize_hourly,
)
from weatherwise.features.statistics import calculate_statistics
from weatherwise.features.trend import detect_trend
from weatherwise.planner.alternatives import WindowSource, rank_alternative_dates
from weatherwise.scoring.icp import calculate_icp

logger = logging.getLogger(__name__)

Geocoder = Callable[[str], Awaitable[Coordinate]]


class ClimateSource(WindowSource, Protocol):
    @property
    def provider_name(self) -> str: ...

    def require_api_key(self) -> str | None: ...


class HolidaySource(Protocol):
    async def find_nearby(self, target_date: date, *, country_code: str | None = None) -> list[Holiday]: ...


def build_cache(settings: Settings) -> FileCache:
    return FileCache(
        resolve_project_path(settings.cache.dir),
        enabled=settings.cache.enabled,
        default_ttl_seconds=settings.cache.default_ttl_seconds,
    )


def _ms(since: float) -> int:
    return int((time.perf_counter() - since) * 1000)


def event_hours(event_time: EventTime) -> tuple[int, int]:
    """Return (start_hour, end_hour); a missing end means a two-hour event."""
    start_hour = parse_hour(event_time.start_time or "")
    end_hour = parse_hour(event_time.end_time) if event_time.end_time else start_hour + DEFAULT_DURATION_HOURS
    return start_hour, end_hour


async def _hourly_enrichment(
    day: date, statistics: ClimateStatistics, event_time: EventTime, rng: random.Random
) -> tuple[HourlySlotAnalysis | None, list[TimeSlotRecommendation]]:
    try:
        start_hour, end_hour = event_hours(event_time)
        samples = synthesize_hourly(day, statistics, rng=rng)
        analysis = analyze_time_slot(samples, start_hour, end_hour)
        recommended = find_optimal_time_slots(samples, start_hour, end_hour)
        return analysis, recommended
    except Exception as exc:
        logger.warning("Hourly analysis failed for %s: %s", day.isoformat(), exc)
        return None, []


async def _holiday_enrichment(
    holiday_client: HolidaySource | None, day: date, country_code: str | None
) -> list[Holiday]:
    if holiday_client is None:
        return []
    try:
        return await holiday_client.find_nearby(day, country_code=country_code)
    except Exception as exc:
        logger.warning("Holiday lookup failed for %s: %s", day.isoformat(), exc)
        return []


async def _no_hourly() -> tuple[HourlySlotAnalysis | None, list[TimeSlotRecommendation]]:
    return None, []


async def analyze_location(
    location: LocationInput,
    request: ClimateAnalysisRequest,
    *,
    climate_client: ClimateSource,
    holiday_client: HolidaySource | None = None,
    rng: random.Random | None = None,
    today: date | None = None,
) -> LocationResult:
    """Run the full pipeline for one location; never raises."""
    try:
        logger.info("Processing location: %s", location.name)
        started = time.perf_counter()
        performance: dict[str, int] = {}
        lat, lon = location.latitude, location.longitude

        t1 = time.perf_counter()
        window = await climate_client.get_window(lat=lat, lon=lon, target_date=request.date, today=today)
        performance["fetchHistoricalData"] = _ms(t1)

        t2 = time.perf_counter()
        statistics = calculate_statistics(window)
        icp = calculate_icp(statistics, request.preferred_temperature, request.event_type)
        trend = detect_trend(window)
        performance["calculations"] = _ms(t2)

        t3 = time.perf_counter()
        hourly_task = (
            _hourly_enrichment(request.date, statistics, request.event_time, rng or make_rng())
            if request.event_time is not None and request.event_time.wants_hourly
            else _no_hourly()
        )
        holidays, alternatives, (hourly_analysis, recommended) = await asyncio.gather(
            _holiday_enrichment(holiday_client, request.date, request.country_code),
            rank_alternative_dates(
                climate_client,
                lat=lat,
                lon=lon,
                target_date=request.date,
                preferred_temperature=request.preferred_temperature,
                event_type=request.event_type,
                today=today,
            ),
            hourly_task,
        )
        performance["parallelRequests"] = _ms(t3)
        performance["total"] = _ms(started)
        logger.info(
            "Location %s done in %sms (%s alternatives, %s holidays)",
            location.name,
            performance["total"],
            len(alternatives),
            len(holidays),
        )

        return LocationAnalysis(
            location=location,
            requested_date=build_date_result(
                request.date,
                statistics,
                icp,
                alert_message=trend.message if trend.is_significant else None,
            ),
            alternative_dates=alternatives,
            hourly_analysis=hourly_analysis,
            recommended_time_slots=recommended,
            holidays=build_holiday_context(holidays, statistics),
            data_source=DataSource(
                provider=climate_client.provider_name,
                period=f"{window.start_year}-{window.end_year}",
                years_analyzed=window.year_count,
                mode=window.mode,
            ),
            performance=performance,
        )
    except Exception as exc:
        logger.warning("Error processing location %s: %s", location.name, exc)
        return LocationFailure(
            location=LocationRef(name=location.name, latitude=location.latitude, longitude=location.longitude),
            error=str(exc) or type(exc).__name__,
        )


async def analyze_request(
    request: ClimateAnalysisRequest,
    *,
    settings: Settings,
    climate_client: ClimateSource,
    holiday_client: HolidaySource | None = None,
    geocoder: Geocoder | None = None,
    rng: random.Random | None = None,
    today: date | None = None,
) -> LocationResult | list[LocationResult]:
    """Analyze every requested location concurrently.

    Returns a single result for the legacy free-text `location` form, otherwise a list
    in the same order as `request.locations`.

    Raises:
        ConfigurationError: If the climate provider credential is missing.
        InvalidRequestError: If the request names no location at all.
    """
    climate_client.require_api_key()
    logger.info(
        "Climate analysis request: locations=%s date=%s event_type=%s event_time=%s",
        len(request.locations or []) or (1 if request.location else 0),
        request.date.isoformat(),
        request.event_type.value,
        bool(request.event_time),
    )
    seed_rng = rng or make_rng(settings.analysis.hourly_seed)

    if request.locations:
        locations = list(request.locations)
    elif request.location:
        if geocoder is None:
            raise InvalidRequestError("Free-text location given but no geocoder is configured.")
        try:
            coordinate = await geocoder(request.location)
        except Exception as exc:
            logger.warning("Geocoding failed for %r: %s", request.location, exc)
            return LocationFailure(location=LocationRef(name=request.location), error=str(exc))
        locations = [
            LocationInput(name=request.location, latitude=coordinate.latitude, longitude=coordinate.longitude)
        ]
    else:
        raise InvalidRequestError('No location provided. Use "location" or "locations".')

    # One generator per location keeps seeded runs independent of scheduling order.
    rngs = [random.Random(seed_rng.getrandbits(64)) for _ in locations]
    results = await asyncio.gather(
        *(
            analyze_location(
                loc,
                request,
                climate_client=climate_client,
                holiday_client=holiday_client,
                rng=loc_rng,
                today=today,
            )
            for loc, loc_rng in zip(locations, rngs)
        )
    )
    results = list(results)
    return results[0] if request.is_legacy else results
