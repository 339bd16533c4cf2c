"""
Statistics reducer.

Collapses one `HistoricalWindow` (one sample per year for a calendar day) into a
`ClimateStatistics` record. Pure and deterministic: the same window always yields
the same record.
"""

from __future__ import annotations

from statistics import fmean

from weatherwise.domain.models import ClimateStatistics
from weatherwise.errors import DataInsufficientError
from weatherwise.ingestion.climate_client import DailyObservation, HistoricalWindow
from weatherwise.scoring.composite import clamp, round_half_up

# Above this much precipitation a day counts as rainy (below is trace/dew).
RAIN_DAY_MM = 1.0
COLD_DAY_C = 10.0
HOT_DAY_C = 35.0
HEAVY_RAIN_MM = 10.0


def is_rain_day(obs: DailyObservation) -> bool:
    return obs.precipitation_mm > RAIN_DAY_MM


def is_extreme_day(obs: DailyObservation) -> bool:
    """Cold, hot or heavy rain; any one of the three is enough."""
    return (
        obs.temperature_c < COLD_DAY_C
        or obs.temperature_c > HOT_DAY_C
        or obs.precipitation_mm > HEAVY_RAIN_MM
    )


def rain_frequency_pct(observations: tuple[DailyObservation, ...] | list[DailyObservation]) -> float:
    """Percentage (unrounded) of observations that are rain days."""
    if not observations:
        return 0.0
    return 100.0 * sum(1 for o in observations if is_rain_day(o)) / len(observations)


def _pct(x: float) -> int:
    return int(clamp(round_half_up(x), 0, 100))


def calculate_statistics(window: HistoricalWindow) -> ClimateStatistics:
    """Reduce a historical window to its representative-day statistics.

    Raises:
        DataInsufficientError: If the window contains no observations.
    """
    observations = window.observations
    if not observations:
        raise DataInsufficientError(
            f"No historical observations for {window.start_year}-{window.end_year}"
        )

    temps = [o.temperature_c for o in observations]
    extreme_days = sum(1 for o in observations if is_extreme_day(o))

    return ClimateStatistics(
        avg_temperature=round_half_up(fmean(temps)),
        min_temperature=round_half_up(min(temps)),
        max_temperature=round_half_up(max(temps)),
        rain_probability=_pct(rain_frequency_pct(observations)),
        avg_humidity=_pct(fmean(o.humidity_pct for o in observations)),
        avg_wind_speed=max(0, round_half_up(fmean(o.wind_speed_kmh for o in observations))),
        avg_cloud_cover=_pct(fmean(o.cloud_cover_pct for o in observations)),
        extreme_events_probability=_pct(100.0 * extreme_days / len(observations)),
    )
