"""
Rain-frequency trend signal.

A two-group comparison, not a regression: the rain-day frequency of the oldest five
years is compared with the newest five years of the window. A shift of more than
10 percentage points is reported as significant.
"""

from __future__ import annotations

from dataclasses import dataclass

from weatherwise.features.statistics import rain_frequency_pct
from weatherwise.ingestion.climate_client import HistoricalWindow
from weatherwise.scoring.composite import round_half_up

MIN_YEARS = 10
GROUP_SIZE = 5
SIGNIFICANT_SHIFT_PCT = 10.0


@dataclass(frozen=True)
class TrendSignal:
    is_significant: bool
    message: str = ""
    difference: float = 0.0


def detect_trend(window: HistoricalWindow) -> TrendSignal:
    if window.year_count < MIN_YEARS:
        return TrendSignal(is_significant=False)

    # Providers do not promise year order; slice only after sorting.
    observations = window.chronological().observations
    older = observations[:GROUP_SIZE]
    recent = observations[-GROUP_SIZE:]
    difference = rain_frequency_pct(recent) - rain_frequency_pct(older)

    if abs(difference) <= SIGNIFICANT_SHIFT_PCT:
        return TrendSignal(is_significant=False, difference=difference)

    magnitude = round_half_up(abs(difference))
    if difference > 0:
        message = (
            f"Rain probability increased {magnitude}% over the last decade in this region "
            "for this time of year. We strongly recommend a covered backup plan or alternative dates."
        )
    else:
        message = (
            f"Rain probability decreased {magnitude}% over the last decade in this region "
            "for this time of year. Conditions for outdoor events have been improving."
        )
    return TrendSignal(is_significant=True, message=message, difference=difference)
