"""
Domain models (Pydantic).

These types represent the stable "contract" between layers:
- API/CLI inputs (`ClimateAnalysisRequest`)
- reduced climate facts (`ClimateStatistics`)
- explainable analysis output (`LocationAnalysis` / `LocationFailure`)

JSON uses camelCase field names (the web client's convention); Python code uses
snake_case attributes. Both spellings are accepted on input.
"""

from __future__ import annotations

import datetime as dt
import re
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

_CLOCK_RE = re.compile(r"^([01]?\d|2[0-3])(:[0-5]\d)?$")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EventType(str, Enum):
    """Closed set of event kinds; anything else maps to `OTHER`."""

    WEDDING = "wedding"
    SPORTS = "sports"
    FESTIVAL = "festival"
    AGRICULTURE = "agriculture"
    CORPORATE = "corporate"
    OUTDOOR = "outdoor"
    OTHER = "other"

    @classmethod
    def parse(cls, value: object) -> "EventType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.OTHER


class Coordinate(CamelModel):
    """A geographic point in decimal degrees."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class LocationInput(Coordinate):
    """A named, already-geocoded location."""

    name: str


class EventTime(CamelModel):
    start_time: str | None = None
    end_time: str | None = None
    is_all_day: bool = False

    @field_validator("start_time", "end_time")
    @classmethod
    def _validate_clock(cls, value: str | None) -> str | None:
        if value is None or value == "":
            return None
        if not _CLOCK_RE.match(value.strip()):
            raise ValueError(f"Invalid time '{value}', expected HH:MM")
        return value.strip()

    @property
    def wants_hourly(self) -> bool:
        return not self.is_all_day and self.start_time is not None


class ClimateAnalysisRequest(CamelModel):
    """Request body of the climate analysis endpoint."""

    location: str | None = None
    locations: list[LocationInput] | None = None
    date: dt.date
    event_type: EventType = EventType.OUTDOOR
    preferred_temperature: float = Field(..., allow_inf_nan=False)
    event_time: EventTime | None = None
    country_code: str | None = Field(default=None, min_length=2, max_length=2)

    @field_validator("event_type", mode="before")
    @classmethod
    def _coerce_event_type(cls, value: object) -> EventType:
        return EventType.parse(value)

    @property
    def is_legacy(self) -> bool:
        """True when only the single free-text `location` form was used."""
        return bool(self.location) and self.locations is None


class ClimateStatistics(CamelModel):
    """Representative-day statistics reduced from one historical window."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    avg_temperature: int
    min_temperature: int
    max_temperature: int
    rain_probability: int = Field(..., ge=0, le=100)
    avg_humidity: int = Field(..., ge=0, le=100)
    avg_wind_speed: int = Field(..., ge=0)
    avg_cloud_cover: int = Field(..., ge=0, le=100)
    extreme_events_probability: int = Field(..., ge=0, le=100)

    @model_validator(mode="after")
    def _validate_order(self) -> "ClimateStatistics":
        if not self.min_temperature <= self.avg_temperature <= self.max_temperature:
            raise ValueError("expected min_temperature <= avg_temperature <= max_temperature")
        return self


class DateResult(CamelModel):
    """One evaluated calendar date (the requested one or an alternative)."""

    date: dt.date
    display_date: str
    icp: int = Field(..., ge=0, le=100)
    rain_probability: int
    temperature: int
    temperature_range: str
    wind_speed: int
    wind_description: str
    humidity: int
    humidity_description: str
    cloud_cover: int
    cloud_description: str
    extreme_events: int
    extreme_description: str
    alert_message: str | None = None


class HourlySample(CamelModel):
    """One synthetic hour derived from daily statistics."""

    time: dt.datetime
    hour: int = Field(..., ge=0, le=23)
    temperature: float
    condition: str
    precipitation_mm: float
    chance_of_rain: int = Field(..., ge=0, le=100)
    humidity: int = Field(..., ge=0, le=100)
    wind_speed: float = Field(..., ge=0)
    uv: float
    is_day: bool


class HourlySlotAnalysis(CamelModel):
    time_slot: str
    average_temperature: float
    max_precipitation_chance: int
    average_humidity: int
    average_wind_speed: float
    comfort_index: int = Field(..., ge=0, le=100)
    alert_message: str | None = None
    hourly_data: list[HourlySample] = Field(default_factory=list)


class TimeSlotRecommendation(CamelModel):
    start_hour: int
    end_hour: int
    time_slot: str
    comfort_index: int = Field(..., ge=0, le=100)


class Holiday(CamelModel):
    date: dt.date
    name: str
    name_en: str | None = None
    is_global: bool = True
    types: list[str] = Field(default_factory=list)
    days_from_target: int


class HolidayContext(CamelModel):
    count: int = 0
    nearby: list[Holiday] = Field(default_factory=list)
    messages: list[str] = Field(default_factory=list)


class DataSource(CamelModel):
    provider: str
    period: str
    years_analyzed: int
    mode: Literal["live", "cache", "stale"] = "live"


class LocationAnalysis(CamelModel):
    """Full analysis result for one requested location."""

    location: LocationInput
    requested_date: DateResult
    alternative_dates: list[DateResult] = Field(default_factory=list, max_length=4)
    hourly_analysis: HourlySlotAnalysis | None = None
    recommended_time_slots: list[TimeSlotRecommendation] = Field(default_factory=list)
    holidays: HolidayContext = Field(default_factory=HolidayContext)
    data_source: DataSource
    performance: dict[str, int] = Field(default_factory=dict)

    @field_validator("alternative_dates")
    @classmethod
    def _validate_ranked(cls, dates: list[DateResult]) -> list[DateResult]:
        if any(a.icp < b.icp for a, b in zip(dates, dates[1:])):
            raise ValueError("alternative_dates must be sorted by icp descending")
        return dates


class LocationRef(CamelModel):
    """Location echo for failures; coordinates are absent when geocoding failed."""

    name: str
    latitude: float | None = None
    longitude: float | None = None


class LocationFailure(CamelModel):
    """Result for a location whose pipeline raised; siblings are unaffected."""

    location: LocationRef
    error: str
    requested_date: None = None
    alternative_dates: list[DateResult] = Field(default_factory=list, max_length=0)
    data_source: None = None


LocationResult = LocationAnalysis | LocationFailure
