"""
Holiday context messages.

Turns nearby holidays plus the requested day's statistics into short advisory lines.
"""

from __future__ import annotations

from weatherwise.domain.models import ClimateStatistics, Holiday, HolidayContext

MAJOR_HOLIDAY_KEYWORDS = (
    "Christmas",
    "New Year",
    "Easter",
    "Good Friday",
    "Independence",
    "Republic",
    "Carnival",
    "Natal",
    "Ano Novo",
    "Páscoa",
    "Independência",
    "Proclamação da República",
    "Carnaval",
)
CARNIVAL_KEYWORDS = ("Carnival", "Carnaval")
ALERT_WINDOW_DAYS = 14
CLIMATE_WINDOW_DAYS = 7


def _names(holiday: Holiday) -> str:
    return f"{holiday.name} {holiday.name_en or ''}"


def _when(days: int) -> str:
    if days == 0:
        return "on the same day"
    return f"in {days} day{'s' if days > 1 else ''}"


def holiday_messages(holidays: list[Holiday], statistics: ClimateStatistics) -> list[str]:
    messages: list[str] = []
    for holiday in holidays:
        messages.append(f"{holiday.name} is {_when(holiday.days_from_target)}")
        if holiday.days_from_target > ALERT_WINDOW_DAYS:
            continue

        names = _names(holiday)
        if holiday.is_global and any(k in names for k in MAJOR_HOLIDAY_KEYWORDS):
            messages.append(
                "National holiday: shops may be closed, less traffic, high demand for services"
            )

        if holiday.days_from_target <= CLIMATE_WINDOW_DAYS:
            rain = statistics.rain_probability
            temp = statistics.avg_temperature
            if rain > 60:
                messages.append(f"Holiday with {rain}% chance of rain: plan covered activities")
            elif rain < 20 and 20 < temp < 30:
                messages.append(f"Excellent weather to enjoy the holiday outdoors ({temp}°C)")
            if temp > 35:
                messages.append(f"Intense heat expected ({temp}°C): stay hydrated and avoid strong sun")

        if any(k in names for k in CARNIVAL_KEYWORDS):
            messages.append("Carnival: expect crowds, street parties and heavy movement")
    return messages


def build_holiday_context(holidays: list[Holiday], statistics: ClimateStatistics) -> HolidayContext:
    return HolidayContext(
        count=len(holidays),
        nearby=holidays,
        messages=holiday_messages(holidays, statistics),
    )
