"""
Personal Comfort Index (ICP).

The ICP starts at 100 and subtracts fixed penalties for:
- distance between the typical temperature and the user's preferred one,
- rain-day frequency,
- wind above the event type's tolerance,
- humidity away from 60%,
- extreme-day frequency.

The coefficients define the product's notion of "comfortable" and are not configurable.
"""

from __future__ import annotations

from weatherwise.domain.models import ClimateStatistics, EventType
from weatherwise.scoring.composite import clamp, round_half_up

# km/h of average wind an event tolerates before it is penalized.
WIND_THRESHOLDS_KMH: dict[EventType, float] = {
    EventType.WEDDING: 15,
    EventType.SPORTS: 20,
    EventType.FESTIVAL: 18,
    EventType.AGRICULTURE: 25,
    EventType.CORPORATE: 15,
    EventType.OUTDOOR: 20,
    EventType.OTHER: 20,
}

OPTIMAL_HUMIDITY_PCT = 60
TEMPERATURE_WEIGHT = 2.5
RAIN_WEIGHT = 0.3
WIND_WEIGHT = 1.5
HUMIDITY_WEIGHT = 0.15
EXTREME_WEIGHT = 1.5


def wind_threshold(event_type: EventType | str) -> float:
    """Return the wind tolerance for an event type; unknown types get the default."""
    return WIND_THRESHOLDS_KMH[EventType.parse(event_type)]


def calculate_icp(
    statistics: ClimateStatistics, preferred_temperature: float, event_type: EventType | str
) -> int:
    """Score one day's statistics against a preference; always an integer in [0, 100]."""
    score = 100.0
    score -= abs(statistics.avg_temperature - preferred_temperature) * TEMPERATURE_WEIGHT
    score -= statistics.rain_probability * RAIN_WEIGHT
    score -= max(0.0, statistics.avg_wind_speed - wind_threshold(event_type)) * WIND_WEIGHT
    score -= abs(statistics.avg_humidity - OPTIMAL_HUMIDITY_PCT) * HUMIDITY_WEIGHT
    score -= statistics.extreme_events_probability * EXTREME_WEIGHT
    return int(clamp(round_half_up(score), 0, 100))
