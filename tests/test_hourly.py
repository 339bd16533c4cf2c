from datetime import date, datetime

from weatherwise.domain.models import ClimateStatistics, HourlySample
from weatherwise.features.hourly import (
    analyze_time_slot,
    find_optimal_time_slots,
    make_rng,
    synthesize_hourly,
)
from weatherwise.scoring.slot_comfort import (
    calculate_slot_comfort,
    normalize_humidity,
    normalize_temperature,
    normalize_wind_speed,
)

DAY = date(2025, 3, 14)


def _flat(chance_by_hour: dict[int, int] | None = None, *, temperature: float = 23.0) -> list[HourlySample]:
    chance_by_hour = chance_by_hour or {}
    return [
        HourlySample(
            time=datetime(2025, 3, 14, hour),
            hour=hour,
            temperature=temperature,
            condition="clear",
            precipitation_mm=0.0,
            chance_of_rain=chance_by_hour.get(hour, 10),
            humidity=50,
            wind_speed=5.0,
            uv=0.0,
            is_day=hour <= 18,
        )
        for hour in range(6, 23)
    ]


def _stats(**overrides) -> ClimateStatistics:
    values = dict(
        avg_temperature=24,
        min_temperature=20,
        max_temperature=28,
        rain_probability=30,
        avg_humidity=65,
        avg_wind_speed=10,
        avg_cloud_cover=40,
        extreme_events_probability=0,
    )
    values.update(overrides)
    return ClimateStatistics(**values)


def test_normalizers_follow_ideal_bands():
    assert normalize_temperature(23) == 100
    assert normalize_temperature(20) == 90
    assert normalize_temperature(28) == 85
    assert normalize_temperature(60) == 0
    assert normalize_humidity(50) == 100
    assert normalize_humidity(70) == 80
    assert normalize_humidity(30) == 80
    assert normalize_wind_speed(15) == 100
    assert normalize_wind_speed(25) == 70
    assert normalize_wind_speed(30) == 55
    assert normalize_wind_speed(31) == 10


def test_slot_comfort_weights():
    assert calculate_slot_comfort(temperature=23, precipitation_chance=10, humidity=50, wind_speed=5) == 97
    assert calculate_slot_comfort(temperature=23, precipitation_chance=0, humidity=50, wind_speed=5) == 100


def test_synthesis_produces_seventeen_hours_in_range():
    samples = synthesize_hourly(DAY, _stats(), rng=make_rng(7))

    assert [s.hour for s in samples] == list(range(6, 23))
    for s in samples:
        assert 0 <= s.chance_of_rain <= 100
        assert 0 <= s.humidity <= 100
        assert s.wind_speed >= 0
        assert s.time.date() == DAY
        assert s.is_day == (s.hour <= 18)
        if not 10 <= s.hour <= 16:
            assert s.uv == 0


def test_synthesis_is_reproducible_with_a_seed():
    first = synthesize_hourly(DAY, _stats(), rng=make_rng(42))
    second = synthesize_hourly(DAY, _stats(), rng=make_rng(42))
    assert first == second


def test_synthesized_temperatures_stay_near_the_daily_average():
    for seed in range(20):
        for s in synthesize_hourly(DAY, _stats(), rng=make_rng(seed)):
            assert abs(s.temperature - 24) <= 7


def test_synthesized_temperature_peaks_in_the_afternoon():
    samples = synthesize_hourly(DAY, _stats(), rng=make_rng(3))
    by_hour = {s.hour: s.temperature for s in samples}
    # Sine peak at 14:00 (+5) vs 6:00 (+0); noise is at most ±1.
    assert by_hour[14] > by_hour[6] + 2


def test_extreme_statistics_keep_samples_clamped():
    stats = _stats(rain_probability=100, avg_humidity=100, avg_wind_speed=0)
    for s in synthesize_hourly(DAY, stats, rng=make_rng(1)):
        assert s.chance_of_rain <= 100
        assert s.humidity <= 100
        assert s.wind_speed >= 0
        assert s.condition == "possible rain"


def test_slot_analysis_uses_max_rain_and_mean_of_the_rest():
    analysis = analyze_time_slot(_flat({15: 50}), 14, 16)

    assert analysis is not None
    assert analysis.time_slot == "14:00 - 16:00"
    assert analysis.max_precipitation_chance == 50
    assert analysis.average_temperature == 23
    assert analysis.comfort_index == 85
    assert analysis.alert_message is None
    assert [s.hour for s in analysis.hourly_data] == [14, 15, 16]


def test_slot_alert_priority_rain_first():
    hot_and_wet = _flat({10: 80}, temperature=33.0)
    analysis = analyze_time_slot(hot_and_wet, 9, 11)
    assert analysis.alert_message.startswith("High chance of rain (80%)")


def test_slot_alert_heat_and_cold():
    assert "High average temperature" in analyze_time_slot(_flat(temperature=31.0), 12, 14).alert_message
    assert "Low average temperature" in analyze_time_slot(_flat(temperature=12.0), 12, 14).alert_message


def test_slot_outside_synthesized_hours_is_none():
    assert analyze_time_slot(_flat(), 2, 4) is None


def test_optimal_slots_exclude_original_start_and_rank_by_comfort():
    # Rain makes every slot touching 10..12 worse.
    samples = _flat({10: 90, 11: 90, 12: 90})
    slots = find_optimal_time_slots(samples, 14, 16)

    assert len(slots) == 3
    assert all(s.start_hour != 14 for s in slots)
    assert all(6 <= s.start_hour <= 18 for s in slots)
    assert all(s.end_hour - s.start_hour == 2 for s in slots)
    assert [s.comfort_index for s in slots] == sorted((s.comfort_index for s in slots), reverse=True)
    assert all(s.comfort_index == 97 for s in slots)


def test_optimal_slots_for_long_duration_have_few_candidates():
    slots = find_optimal_time_slots(_flat(), 8, 20)
    # duration 12: starts 6..8 end by 20:00 and 8 is the original.
    assert [(s.start_hour, s.end_hour) for s in slots] == [(6, 18), (7, 19)]
