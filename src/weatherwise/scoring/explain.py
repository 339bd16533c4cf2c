"""
Small explainability formatting helpers.

Used by the CLI to print compact summaries of analysis results.
"""

from __future__ import annotations

from weatherwise.domain.models import LocationFailure, LocationResult


def one_line_summary(result: LocationResult) -> str:
    """Render a compact single-line summary for one location result."""
    if isinstance(result, LocationFailure):
        return f"{result.location.name}: error={result.error}"

    req = result.requested_date
    parts = [
        f"{result.location.name}: icp={req.icp}",
        f"rain={req.rain_probability}%",
        f"temp={req.temperature}°C ({req.temperature_range})",
        f"wind={req.wind_speed}km/h",
    ]
    if result.alternative_dates:
        best = result.alternative_dates[0]
        parts.append(f"best_alt={best.date.isoformat()} (icp={best.icp})")
    if result.hourly_analysis is not None:
        parts.append(f"slot={result.hourly_analysis.time_slot} (comfort={result.hourly_analysis.comfort_index})")
    return " | ".join(parts)
