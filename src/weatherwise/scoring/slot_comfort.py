"""
Slot comfort index (hour-range score).

This is a different formula from the daily ICP (`weatherwise.scoring.icp`):
- each condition is first normalized to 0..100 with its own "ideal range" rule,
- the normalized values are blended with fixed weights (temperature matters most).

The ICP answers "is this day good for me?"; this score answers "which hours of this
day are the most pleasant?".
"""

from __future__ import annotations

from weatherwise.scoring.composite import round_half_up, weighted_blend

SLOT_WEIGHTS: dict[str, float] = {
    "temperature": 0.4,
    "precipitation": 0.3,
    "humidity": 0.2,
    "wind_speed": 0.1,
}


def normalize_temperature(temp_c: float) -> float:
    """22..25°C scores 100; 5 points lost per degree outside the band."""
    if 22 <= temp_c <= 25:
        return 100.0
    distance = (22 - temp_c) if temp_c < 22 else (temp_c - 25)
    return max(0.0, 100 - distance * 5)


def normalize_precipitation(chance_pct: float) -> float:
    """Inverted rain chance: 0% scores 100, 100% scores 0."""
    return max(0.0, 100 - chance_pct)


def normalize_humidity(humidity_pct: float) -> float:
    """40..60% scores 100; 2 points lost per percent outside the band."""
    if 40 <= humidity_pct <= 60:
        return 100.0
    distance = (40 - humidity_pct) if humidity_pct < 40 else (humidity_pct - 60)
    return max(0.0, 100 - distance * 2)


def normalize_wind_speed(speed_kmh: float) -> float:
    """Calm up to 15 km/h scores 100, linear falloff to 30 km/h, then a floor of 10."""
    if speed_kmh <= 15:
        return 100.0
    if speed_kmh <= 30:
        return max(0.0, 100 - (speed_kmh - 15) * 3)
    return 10.0


def calculate_slot_comfort(
    *, temperature: float, precipitation_chance: float, humidity: float, wind_speed: float
) -> int:
    components = {
        "temperature": normalize_temperature(temperature),
        "precipitation": normalize_precipitation(precipitation_chance),
        "humidity": normalize_humidity(humidity),
        "wind_speed": normalize_wind_speed(wind_speed),
    }
    return round_half_up(weighted_blend(components, SLOT_WEIGHTS))
