"""
Human-readable labels for the numeric fields of a `DateResult`.
"""

from __future__ import annotations

from datetime import date

from weatherwise.domain.models import ClimateStatistics, DateResult

MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def describe_wind(speed_kmh: float) -> str:
    if speed_kmh < 10:
        return "Light wind, excellent conditions"
    if speed_kmh < 20:
        return "Moderate wind, normal conditions"
    if speed_kmh < 30:
        return "Strong wind, may cause discomfort"
    return "Very strong wind, not recommended for outdoor events"


def describe_humidity(humidity_pct: float) -> str:
    if humidity_pct < 40:
        return "Dry air"
    if humidity_pct < 70:
        return "Comfortable humidity"
    return "High humidity, may cause discomfort"


def describe_cloud_cover(cloud_pct: float) -> str:
    if cloud_pct < 20:
        return "Clear sky"
    if cloud_pct < 50:
        return "Few clouds"
    if cloud_pct < 80:
        return "Partly cloudy"
    return "Overcast"


def describe_extremes(probability_pct: float) -> str:
    if probability_pct < 5:
        return "Minimal chance of extremes"
    if probability_pct < 15:
        return "Low chance of extremes"
    if probability_pct < 30:
        return "Moderate chance of extremes"
    return "High chance of extreme events"


def format_display_date(value: date) -> str:
    """E.g. `14 March 2025`."""
    return f"{value.day} {MONTHS[value.month - 1]} {value.year}"


def build_date_result(
    day: date, statistics: ClimateStatistics, icp: int, *, alert_message: str | None = None
) -> DateResult:
    """Attach labels and the ICP to one day's statistics."""
    return DateResult(
        date=day,
        display_date=format_display_date(day),
        icp=icp,
        rain_probability=statistics.rain_probability,
        temperature=statistics.avg_temperature,
        temperature_range=f"{statistics.min_temperature}°C - {statistics.max_temperature}°C",
        wind_speed=statistics.avg_wind_speed,
        wind_description=describe_wind(statistics.avg_wind_speed),
        humidity=statistics.avg_humidity,
        humidity_description=describe_humidity(statistics.avg_humidity),
        cloud_cover=statistics.avg_cloud_cover,
        cloud_description=describe_cloud_cover(statistics.avg_cloud_cover),
        extreme_events=statistics.extreme_events_probability,
        extreme_description=describe_extremes(statistics.extreme_events_probability),
        alert_message=alert_message,
    )
