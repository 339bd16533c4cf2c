"""
Hourly profile synthesizer and time-slot analysis.

There is no second data fetch here: an hour-by-hour profile for 6:00..22:00 is
derived from the day's `ClimateStatistics` with a fixed shape plus random jitter:
- temperature follows a sine curve peaking at 14:00 (±5°C) with ±1°C noise,
- rain chance gets a +10 point afternoon bias (14:00..18:00) with ±7.5 points noise,
- humidity and wind wobble around their daily averages.

Because of the jitter, two calls with the same input differ unless the caller passes
a seeded `random.Random`.
"""

from __future__ import annotations

import math
import random
from datetime import date, datetime, time

from weatherwise.domain.models import (
    ClimateStatistics,
    HourlySample,
    HourlySlotAnalysis,
    TimeSlotRecommendation,
)
from weatherwise.scoring.composite import clamp, round_half_up, round_to
from weatherwise.scoring.slot_comfort import calculate_slot_comfort

FIRST_HOUR = 6
LAST_HOUR = 22
# Alternative slots must end by this hour.
LATEST_SLOT_END = 20
DEFAULT_DURATION_HOURS = 2
TOP_SLOTS = 3

TEMPERATURE_AMPLITUDE_C = 5.0
TEMPERATURE_NOISE_C = 1.0
AFTERNOON_RAIN_BIAS = 10.0
RAIN_NOISE = 7.5
HUMIDITY_NOISE = 5.0
WIND_NOISE_KMH = 2.5


def make_rng(seed: int | None = None) -> random.Random:
    """Seeded source for tests and reproducible runs; `None` uses real entropy."""
    return random.Random(seed)


def describe_condition(chance_of_rain: float) -> str:
    if chance_of_rain > 60:
        return "possible rain"
    if chance_of_rain > 30:
        return "partly cloudy"
    return "clear"


def synthesize_hourly(
    day: date, statistics: ClimateStatistics, *, rng: random.Random | None = None
) -> list[HourlySample]:
    """Return one synthetic sample per hour from 6:00 to 22:00 inclusive."""
    rng = rng or make_rng()
    samples: list[HourlySample] = []
    for hour in range(FIRST_HOUR, LAST_HOUR + 1):
        temperature = (
            statistics.avg_temperature
            + TEMPERATURE_AMPLITUDE_C * math.sin((hour - FIRST_HOUR) * math.pi / 16)
            + rng.uniform(-TEMPERATURE_NOISE_C, TEMPERATURE_NOISE_C)
        )
        afternoon = AFTERNOON_RAIN_BIAS if 14 <= hour <= 18 else 0.0
        chance = clamp(
            statistics.rain_probability + afternoon + rng.uniform(-RAIN_NOISE, RAIN_NOISE), 0, 100
        )
        humidity = clamp(statistics.avg_humidity + rng.uniform(-HUMIDITY_NOISE, HUMIDITY_NOISE), 0, 100)
        wind = max(0.0, statistics.avg_wind_speed + rng.uniform(-WIND_NOISE_KMH, WIND_NOISE_KMH))
        precipitation = rng.uniform(0, 5) if chance > 60 else 0.0
        uv = min(11.0, 3 + rng.uniform(0, 5)) if 10 <= hour <= 16 else 0.0

        samples.append(
            HourlySample(
                time=datetime.combine(day, time(hour=hour)),
                hour=hour,
                temperature=round_to(temperature, 1),
                condition=describe_condition(chance),
                precipitation_mm=round_to(precipitation, 1),
                chance_of_rain=round_half_up(chance),
                humidity=round_half_up(humidity),
                wind_speed=round_to(wind, 1),
                uv=round_to(uv, 1),
                is_day=FIRST_HOUR <= hour <= 18,
            )
        )
    return samples


def format_time_slot(start_hour: int, end_hour: int) -> str:
    return f"{start_hour}:00 - {end_hour}:00"


def _slot_alert(max_rain: float, avg_temp: float) -> str | None:
    # First matching condition wins: rain, then heat, then cold.
    if max_rain > 50:
        return f"High chance of rain ({round_half_up(max_rain)}%) during the selected time."
    if avg_temp > 30:
        return f"High average temperature ({avg_temp:.1f}°C) during the selected time."
    if avg_temp < 15:
        return f"Low average temperature ({avg_temp:.1f}°C) during the selected time."
    return None


def analyze_time_slot(
    samples: list[HourlySample], start_hour: int, end_hour: int
) -> HourlySlotAnalysis | None:
    """Summarize the hours in [start_hour, end_hour]; None when no sample falls inside.

    Rain uses the worst hour (max), the other conditions the mean.
    """
    relevant = [s for s in samples if start_hour <= s.hour <= end_hour]
    if not relevant:
        return None

    n = len(relevant)
    avg_temp = sum(s.temperature for s in relevant) / n
    max_rain = max(s.chance_of_rain for s in relevant)
    avg_humidity = sum(s.humidity for s in relevant) / n
    avg_wind = sum(s.wind_speed for s in relevant) / n

    return HourlySlotAnalysis(
        time_slot=format_time_slot(start_hour, end_hour),
        average_temperature=round_to(avg_temp, 1),
        max_precipitation_chance=round_half_up(max_rain),
        average_humidity=round_half_up(avg_humidity),
        average_wind_speed=round_to(avg_wind, 1),
        comfort_index=calculate_slot_comfort(
            temperature=avg_temp,
            precipitation_chance=max_rain,
            humidity=avg_humidity,
            wind_speed=avg_wind,
        ),
        alert_message=_slot_alert(max_rain, avg_temp),
        hourly_data=relevant,
    )


def find_optimal_time_slots(
    samples: list[HourlySample], start_hour: int, end_hour: int, *, top: int = TOP_SLOTS
) -> list[TimeSlotRecommendation]:
    """Rank every other same-duration slot starting in [6, 20 - duration]."""
    duration = end_hour - start_hour
    if duration < 0:
        return []

    slots: list[TimeSlotRecommendation] = []
    for candidate_start in range(FIRST_HOUR, LATEST_SLOT_END - duration + 1):
        if candidate_start == start_hour:
            continue
        candidate_end = candidate_start + duration
        analysis = analyze_time_slot(samples, candidate_start, candidate_end)
        if analysis is None:
            continue
        slots.append(
            TimeSlotRecommendation(
                start_hour=candidate_start,
                end_hour=candidate_end,
                time_slot=analysis.time_slot,
                comfort_index=analysis.comfort_index,
            )
        )
    slots.sort(key=lambda s: s.comfort_index, reverse=True)
    return slots[:top]
