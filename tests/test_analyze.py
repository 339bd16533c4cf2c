import asyncio
from datetime import date

import pytest

from conftest import SCENARIO_PRECS, TODAY, StubClimateClient, StubHolidayClient, failing_window, make_window
from weatherwise.domain.models import (
    ClimateAnalysisRequest,
    Coordinate,
    EventTime,
    Holiday,
    LocationAnalysis,
    LocationFailure,
)
from weatherwise.errors import ConfigurationError, GeocodingError, InvalidRequestError
from weatherwise.planner.analyze import analyze_location, analyze_request, event_hours
from weatherwise.scoring.explain import one_line_summary

SAO_PAULO = {"name": "São Paulo", "latitude": -23.55, "longitude": -46.63}
RIO = {"name": "Rio de Janeiro", "latitude": -22.91, "longitude": -43.17}


def _scenario_window(_lat: float, _day: date):
    return make_window(
        temps=[24.0] * 20,
        precs=SCENARIO_PRECS,
        hums=[68.0] * 20,
        winds=[10.0] * 20,
        clouds=[40.0] * 20,
    )


def _request(**overrides) -> ClimateAnalysisRequest:
    body = {
        "locations": [SAO_PAULO],
        "date": "2025-03-15",
        "eventType": "wedding",
        "preferredTemperature": 25,
    }
    body.update(overrides)
    return ClimateAnalysisRequest.model_validate(body)


class KeylessClimateClient(StubClimateClient):
    def require_api_key(self):
        raise ConfigurationError("NASA_API_KEY is not configured")


@pytest.mark.asyncio
async def test_single_location_full_result(settings):
    client = StubClimateClient(_scenario_window)

    results = await analyze_request(_request(), settings=settings, climate_client=client, today=TODAY)

    assert isinstance(results, list) and len(results) == 1
    result = results[0]
    assert isinstance(result, LocationAnalysis)
    assert result.requested_date.icp == 68
    assert result.requested_date.rain_probability == 70
    assert result.requested_date.alert_message is None
    assert len(result.alternative_dates) == 4
    assert result.hourly_analysis is None
    assert result.recommended_time_slots == []
    assert result.data_source.period == "2005-2024"
    assert result.data_source.years_analyzed == 20
    assert set(result.performance) == {"fetchHistoricalData", "calculations", "parallelRequests", "total"}
    # 1 target + 4 alternatives
    assert len(client.calls) == 5
    assert "icp=68" in one_line_summary(result)


@pytest.mark.asyncio
async def test_results_keep_request_order_and_isolate_failures(settings):
    def window_for(lat, day):
        if lat == RIO["latitude"]:
            return failing_window("NASA POWER unavailable")
        return _scenario_window(lat, day)

    results = await analyze_request(
        _request(locations=[RIO, SAO_PAULO]),
        settings=settings,
        climate_client=StubClimateClient(window_for),
        today=TODAY,
    )

    assert [r.location.name for r in results] == ["Rio de Janeiro", "São Paulo"]
    failure, success = results
    assert isinstance(failure, LocationFailure)
    assert failure.error == "NASA POWER unavailable"
    assert failure.requested_date is None
    assert failure.alternative_dates == []
    assert failure.location.latitude == RIO["latitude"]
    assert isinstance(success, LocationAnalysis)
    assert success.requested_date.icp == 68


@pytest.mark.asyncio
async def test_empty_history_becomes_location_failure(settings):
    client = StubClimateClient(lambda lat, day: make_window(temps=[], start_year=2005, end_year=2024))
    results = await analyze_request(_request(), settings=settings, climate_client=client, today=TODAY)
    assert isinstance(results[0], LocationFailure)
    assert "No historical observations" in results[0].error


@pytest.mark.asyncio
async def test_missing_api_key_fails_whole_request(settings):
    client = KeylessClimateClient(_scenario_window)
    with pytest.raises(ConfigurationError):
        await analyze_request(_request(), settings=settings, climate_client=client, today=TODAY)
    assert client.calls == []


@pytest.mark.asyncio
async def test_no_location_is_invalid(settings):
    request = _request(locations=None)
    with pytest.raises(InvalidRequestError):
        await analyze_request(request, settings=settings, climate_client=StubClimateClient(_scenario_window))


@pytest.mark.asyncio
async def test_trend_message_lands_on_requested_date(settings):
    def window_for(lat, day):
        return make_window(temps=[24.0] * 10, precs=[0.0] * 5 + [5.0] * 5)

    results = await analyze_request(
        _request(), settings=settings, climate_client=StubClimateClient(window_for), today=TODAY
    )
    assert "increased 100%" in results[0].requested_date.alert_message
    assert all(a.alert_message is None for a in results[0].alternative_dates)


@pytest.mark.asyncio
async def test_front_loaded_rain_reports_a_decrease(settings):
    def window_for(lat, day):
        return make_window(temps=[24.0] * 20, precs=[5.0] * 14 + [0.0] * 6)

    results = await analyze_request(
        _request(), settings=settings, climate_client=StubClimateClient(window_for), today=TODAY
    )
    assert "decreased 100%" in results[0].requested_date.alert_message


@pytest.mark.asyncio
async def test_event_time_adds_hourly_analysis_and_slots(settings):
    request = _request(eventTime={"startTime": "14:00", "endTime": "16:00", "isAllDay": False})

    results = await analyze_request(
        request,
        settings=settings,
        climate_client=StubClimateClient(_scenario_window),
        today=TODAY,
    )
    result = results[0]

    assert result.hourly_analysis is not None
    assert result.hourly_analysis.time_slot == "14:00 - 16:00"
    assert [s.hour for s in result.hourly_analysis.hourly_data] == [14, 15, 16]
    assert 1 <= len(result.recommended_time_slots) <= 3
    assert all(s.start_hour != 14 for s in result.recommended_time_slots)


@pytest.mark.asyncio
async def test_all_day_event_skips_hourly(settings):
    request = _request(eventTime={"startTime": "14:00", "isAllDay": True})
    results = await analyze_request(
        request, settings=settings, climate_client=StubClimateClient(_scenario_window), today=TODAY
    )
    assert results[0].hourly_analysis is None


@pytest.mark.asyncio
async def test_seeded_runs_are_reproducible(settings):
    seeded = settings.model_copy(
        update={"analysis": settings.analysis.model_copy(update={"hourly_seed": 11})}
    )
    request = _request(eventTime={"startTime": "9:00"})

    async def run():
        results = await analyze_request(
            request, settings=seeded, climate_client=StubClimateClient(_scenario_window), today=TODAY
        )
        return results[0].hourly_analysis

    first, second = await run(), await run()
    assert first == second


def test_event_hours_defaults_to_two_hours():
    assert event_hours(EventTime(start_time="18:30")) == (18, 20)
    assert event_hours(EventTime(start_time="08:00", end_time="12:00")) == (8, 12)


@pytest.mark.asyncio
async def test_holidays_attached_and_failures_fail_open(settings):
    holiday = Holiday(date=date(2025, 3, 18), name="Feriado", days_from_target=3)

    ok = await analyze_request(
        _request(),
        settings=settings,
        climate_client=StubClimateClient(_scenario_window),
        holiday_client=StubHolidayClient([holiday]),
        today=TODAY,
    )
    assert ok[0].holidays.count == 1
    assert ok[0].holidays.messages[0] == "Feriado is in 3 days"

    down = await analyze_request(
        _request(),
        settings=settings,
        climate_client=StubClimateClient(_scenario_window),
        holiday_client=StubHolidayClient(fail=True),
        today=TODAY,
    )
    assert isinstance(down[0], LocationAnalysis)
    assert down[0].holidays.count == 0


@pytest.mark.asyncio
async def test_legacy_location_is_geocoded_and_returns_single_object(settings):
    async def geocoder(text: str) -> Coordinate:
        assert text == "São Paulo, BR"
        return Coordinate(latitude=-23.55, longitude=-46.63)

    request = _request(locations=None, location="São Paulo, BR")
    result = await analyze_request(
        request,
        settings=settings,
        climate_client=StubClimateClient(_scenario_window),
        geocoder=geocoder,
        today=TODAY,
    )

    assert isinstance(result, LocationAnalysis)
    assert result.location.name == "São Paulo, BR"
    assert result.location.latitude == -23.55


@pytest.mark.asyncio
async def test_legacy_geocoding_failure_has_no_coordinates(settings):
    async def geocoder(text: str) -> Coordinate:
        raise GeocodingError(f"Location not found: {text}")

    result = await analyze_request(
        _request(locations=None, location="Atlantis"),
        settings=settings,
        climate_client=StubClimateClient(_scenario_window),
        geocoder=geocoder,
        today=TODAY,
    )

    assert isinstance(result, LocationFailure)
    assert result.location.name == "Atlantis"
    assert result.location.latitude is None
    assert "Atlantis" in result.error


@pytest.mark.asyncio
async def test_analyze_location_runs_concurrently_with_siblings(settings):
    started = asyncio.Event()
    release = asyncio.Event()

    class SlowClient(StubClimateClient):
        async def get_window(self, *, lat, lon, target_date, today=None):
            if lat == RIO["latitude"]:
                started.set()
                await release.wait()
            return await super().get_window(lat=lat, lon=lon, target_date=target_date, today=today)

    client = SlowClient(_scenario_window)
    request = _request(locations=[RIO, SAO_PAULO])
    rio_task = asyncio.ensure_future(
        analyze_location(request.locations[0], request, climate_client=client, today=TODAY)
    )
    await started.wait()
    sp = await analyze_location(request.locations[1], request, climate_client=client, today=TODAY)
    release.set()
    rio = await rio_task

    assert isinstance(sp, LocationAnalysis)
    assert isinstance(rio, LocationAnalysis)


@pytest.mark.asyncio
async def test_empty_locations_list_keeps_list_shape(settings):
    async def geocoder(text: str) -> Coordinate:
        return Coordinate(latitude=-23.55, longitude=-46.63)

    result = await analyze_request(
        _request(locations=[], location="São Paulo, BR"),
        settings=settings,
        climate_client=StubClimateClient(_scenario_window),
        geocoder=geocoder,
        today=TODAY,
    )

    assert isinstance(result, list) and len(result) == 1
    assert result[0].location.name == "São Paulo, BR"


@pytest.mark.asyncio
async def test_extreme_preferred_temperature_is_scored_not_rejected(settings):
    request = _request(preferredTemperature=75)
    assert request.preferred_temperature == 75

    results = await analyze_request(
        request, settings=settings, climate_client=StubClimateClient(_scenario_window), today=TODAY
    )
    assert results[0].requested_date.icp == 0
