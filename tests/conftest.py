from __future__ import annotations

from datetime import date
from typing import Callable

import pytest

from weatherwise.config.settings import Settings, get_settings
from weatherwise.domain.models import Holiday
from weatherwise.errors import ClimateProviderError
from weatherwise.ingestion.climate_client import DailyObservation, HistoricalWindow

# Fixed "today" so the historical window is always 2005..2024 in tests.
TODAY = date(2025, 6, 1)

# 14 wet years (one extreme) and 6 dry ones, spread so the oldest and newest
# five years rain equally often and no trend is reported.
SCENARIO_PRECS = [0.0, 5.0, 5.0, 5.0, 0.0, 5.0, 5.0, 0.0, 5.0, 5.0, 12.0, 5.0, 5.0, 0.0, 5.0, 0.0, 5.0, 5.0, 5.0, 0.0]


def make_window(
    *,
    temps: list[float],
    precs: list[float] | None = None,
    hums: list[float] | None = None,
    winds: list[float] | None = None,
    clouds: list[float] | None = None,
    start_year: int = 2005,
    end_year: int | None = None,
) -> HistoricalWindow:
    n = len(temps)
    precs = precs if precs is not None else [0.0] * n
    hums = hums if hums is not None else [60.0] * n
    winds = winds if winds is not None else [5.0] * n
    clouds = clouds if clouds is not None else [30.0] * n
    observations = tuple(
        DailyObservation(
            year=start_year + i,
            temperature_c=temps[i],
            precipitation_mm=precs[i],
            humidity_pct=hums[i],
            wind_speed_kmh=winds[i],
            cloud_cover_pct=clouds[i],
        )
        for i in range(n)
    )
    return HistoricalWindow(
        observations=observations,
        start_year=start_year,
        end_year=end_year if end_year is not None else start_year + max(n, 1) - 1,
    )


class StubClimateClient:
    """In-memory historical source; `window_for(lat, day)` returns a window or raises."""

    provider_name = "Stub POWER"

    def __init__(self, window_for: Callable[[float, date], HistoricalWindow]):
        self._window_for = window_for
        self.calls: list[tuple[float, float, date]] = []

    def require_api_key(self) -> str | None:
        return "test"

    async def get_window(self, *, lat: float, lon: float, target_date: date, today: date | None = None):
        self.calls.append((lat, lon, target_date))
        return self._window_for(lat, target_date)


class StubHolidayClient:
    def __init__(self, holidays: list[Holiday] | None = None, *, fail: bool = False):
        self._holidays = holidays or []
        self._fail = fail

    async def find_nearby(self, target_date: date, *, country_code: str | None = None) -> list[Holiday]:
        if self._fail:
            raise RuntimeError("holiday service down")
        return list(self._holidays)


def failing_window(message: str = "provider down") -> HistoricalWindow:
    raise ClimateProviderError(message)


@pytest.fixture
def window_factory():
    return make_window


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Default settings with a provider key, zero retry delays and an isolated cache."""
    base = get_settings()
    retry = base.ingestion.climate.retry.model_copy(
        update={"max_attempts": 2, "base_delay_seconds": 0.0, "max_delay_seconds": 0.0}
    )
    climate = base.ingestion.climate.model_copy(update={"api_key": "test", "retry": retry})
    ingestion = base.ingestion.model_copy(update={"climate": climate})
    cache = base.cache.model_copy(update={"dir": str(tmp_path / "cache")})
    return base.model_copy(update={"ingestion": ingestion, "cache": cache})
