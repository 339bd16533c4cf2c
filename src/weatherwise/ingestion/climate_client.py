"""
Historical climate ingestion client (NASA POWER daily point API).

This module fetches multi-decade daily observations for a coordinate and extracts
one sample per year for a given calendar day:
- temperature at 2 m (T2M, °C)
- corrected precipitation (PRECTOTCORR, mm/day)
- relative humidity at 2 m (RH2M, %)
- wind speed at 2 m (WS2M, m/s, converted to km/h here)
- cloud amount (CLOUD_AMT, %)

The window covers the `lookback_years` calendar years ending with the year before
"today"; the current and future years are never included. Reduction into statistics
lives in `weatherwise.features.statistics`.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Any

import httpx

from weatherwise.config.settings import Settings
from weatherwise.core.cache import FileCache
from weatherwise.core.http import get_json
from weatherwise.core.time import today_in
from weatherwise.errors import ClimateProviderError, ConfigurationError

logger = logging.getLogger(__name__)

# NASA POWER marks missing values with this fill number.
FILL_VALUE = -999.0
MS_TO_KMH = 3.6


@dataclass(frozen=True)
class DailyObservation:
    """One calendar day's observation for one historical year."""

    year: int
    temperature_c: float
    precipitation_mm: float
    humidity_pct: float
    wind_speed_kmh: float
    cloud_cover_pct: float


@dataclass(frozen=True)
class HistoricalWindow:
    """Same-calendar-day observations across the lookback window (one per year)."""

    observations: tuple[DailyObservation, ...]
    start_year: int
    end_year: int
    mode: str = "live"

    @property
    def year_count(self) -> int:
        return len(self.observations)

    @property
    def expected_years(self) -> int:
        return self.end_year - self.start_year + 1

    @property
    def is_sparse(self) -> bool:
        """Fewer samples than calendar years; results are lower confidence."""
        return self.year_count < self.expected_years

    def chronological(self) -> "HistoricalWindow":
        """Return a copy whose observations are ordered oldest to newest."""
        ordered = tuple(sorted(self.observations, key=lambda o: o.year))
        if ordered == self.observations:
            return self
        return replace(self, observations=ordered)


def window_years(today: date, lookback_years: int) -> tuple[int, int]:
    """Return the inclusive (start_year, end_year) for a strictly historical window."""
    end_year = today.year - 1
    return end_year - lookback_years + 1, end_year


def _value(series: dict[str, Any], key: str) -> float | None:
    raw = series.get(key)
    if raw is None:
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if value <= FILL_VALUE:
        return None
    return value


def extract_day_observations(
    parameters: dict[str, Any], *, month: int, day: int, start_year: int, end_year: int
) -> tuple[DailyObservation, ...]:
    """Pick the `month`/`day` sample of every year from a POWER `parameter` mapping.

    Years without a temperature value (including Feb 29 in non-leap years) are skipped;
    other missing variables count as 0.
    """
    temps = parameters.get("T2M") or {}
    precs = parameters.get("PRECTOTCORR") or {}
    hums = parameters.get("RH2M") or {}
    winds = parameters.get("WS2M") or {}
    clouds = parameters.get("CLOUD_AMT") or {}

    out: list[DailyObservation] = []
    for year in range(start_year, end_year + 1):
        key = f"{year}{month:02d}{day:02d}"
        temperature = _value(temps, key)
        if temperature is None:
            continue
        out.append(
            DailyObservation(
                year=year,
                temperature_c=temperature,
                precipitation_mm=_value(precs, key) or 0.0,
                humidity_pct=_value(hums, key) or 0.0,
                wind_speed_kmh=(_value(winds, key) or 0.0) * MS_TO_KMH,
                cloud_cover_pct=_value(clouds, key) or 0.0,
            )
        )
    return tuple(out)


class ClimateClient:
    """Fetches and caches NASA POWER daily data, then extracts `HistoricalWindow`s."""

    def __init__(
        self,
        settings: Settings,
        cache: FileCache,
        *,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._settings = settings
        self._cache = cache
        self._http_client = http_client

    @property
    def provider_name(self) -> str:
        return self._settings.ingestion.climate.provider_name

    def require_api_key(self) -> str | None:
        """Return the provider key, raising when the deployment requires one and has none."""
        cfg = self._settings.ingestion.climate
        if cfg.require_api_key and not cfg.api_key:
            raise ConfigurationError(
                "NASA_API_KEY is not configured. Set it in the environment or .env file."
            )
        return cfg.api_key

    async def _fetch_power(self, lat: float, lon: float, start_year: int, end_year: int) -> dict[str, Any]:
        """GET the POWER daily point endpoint with retry/backoff for 429/transient errors."""
        cfg = self._settings.ingestion.climate
        api_key = self.require_api_key()
        headers = {"Authorization": f"Bearer {api_key}"} if api_key else None
        params = {
            "parameters": ",".join(cfg.parameters),
            "community": cfg.community,
            "longitude": lon,
            "latitude": lat,
            "start": f"{start_year}0101",
            "end": f"{end_year}1231",
            "format": "JSON",
        }

        max_attempts = int(cfg.retry.max_attempts)
        base_delay_seconds = float(cfg.retry.base_delay_seconds)
        max_delay_seconds = float(cfg.retry.max_delay_seconds)

        for attempt in range(max_attempts + 1):
            try:
                logger.info("Fetching %s data for lat=%.4f lon=%.4f", cfg.provider_name, lat, lon)
                payload = await get_json(
                    cfg.base_url,
                    params=params,
                    headers=headers,
                    timeout_seconds=self._settings.app.http_timeout_seconds,
                    client=self._http_client,
                )
                break
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                if status not in {429, 500, 502, 503, 504} or attempt >= max_attempts:
                    raise ClimateProviderError(
                        f"Failed to fetch {cfg.provider_name} data: {status}", status_code=status
                    ) from exc
                delay = min(max_delay_seconds, base_delay_seconds * (2**attempt))
                logger.warning(
                    "%s request failed with status=%s; retrying in %.2fs (attempt %s/%s)",
                    cfg.provider_name,
                    status,
                    delay,
                    attempt + 1,
                    max_attempts,
                )
                await asyncio.sleep(delay)
            except httpx.TransportError as exc:
                if attempt >= max_attempts:
                    raise ClimateProviderError(f"Failed to reach {cfg.provider_name}: {exc}") from exc
                delay = min(max_delay_seconds, base_delay_seconds * (2**attempt))
                logger.warning(
                    "%s transport error; retrying in %.2fs (attempt %s/%s)",
                    cfg.provider_name,
                    delay,
                    attempt + 1,
                    max_attempts,
                )
                await asyncio.sleep(delay)
            except ValueError as exc:
                raise ClimateProviderError(f"{cfg.provider_name} returned invalid JSON") from exc

        try:
            parameters = payload["properties"]["parameter"]
        except (KeyError, TypeError) as exc:
            raise ClimateProviderError(f"{cfg.provider_name} payload is missing properties.parameter") from exc
        if not isinstance(parameters, dict):
            raise ClimateProviderError(f"{cfg.provider_name} payload has a malformed parameter block")
        return parameters

    async def _fetch_within_timeout(
        self, lat: float, lon: float, start_year: int, end_year: int
    ) -> dict[str, Any]:
        cfg = self._settings.ingestion.climate
        try:
            return await asyncio.wait_for(
                self._fetch_power(lat, lon, start_year, end_year),
                timeout=cfg.fetch_timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            raise ClimateProviderError(
                f"{cfg.provider_name} did not respond within {cfg.fetch_timeout_seconds:g}s"
            ) from exc

    async def _get_parameters(
        self, lat: float, lon: float, start_year: int, end_year: int
    ) -> tuple[dict[str, Any], str]:
        """Return the cached or freshly fetched parameter block plus its source mode.

        A provider failure, timeout included, falls back to a stale cache entry when
        one exists. Cache file I/O runs in a worker thread.
        """
        cfg = self._settings.ingestion.climate
        cache_key = f"power:{lat:.4f}:{lon:.4f}:{start_year}:{end_year}"
        ttl_seconds = int(cfg.cache_ttl_seconds)

        cached = await asyncio.to_thread(self._cache.get, "climate", cache_key, ttl_seconds=ttl_seconds)
        if isinstance(cached, dict):
            return cached, "cache"

        try:
            parameters = await self._fetch_within_timeout(lat, lon, start_year, end_year)
        except ClimateProviderError:
            stale = await asyncio.to_thread(self._cache.get_stale, "climate", cache_key)
            if isinstance(stale, dict):
                logger.warning("Serving stale climate data for lat=%.4f lon=%.4f", lat, lon)
                return stale, "stale"
            raise

        await asyncio.to_thread(self._cache.set, "climate", cache_key, parameters, ttl_seconds=ttl_seconds)
        return parameters, "live"

    async def get_window(
        self, *, lat: float, lon: float, target_date: date, today: date | None = None
    ) -> HistoricalWindow:
        """Return the same-day historical window for `target_date`.

        Raises:
            ConfigurationError: If the provider credential is required but missing.
            ClimateProviderError: On provider failure, malformed payload or timeout,
                when no stale cache entry can stand in.
        """
        cfg = self._settings.ingestion.climate
        today = today or today_in(self._settings.app.timezone)
        start_year, end_year = window_years(today, cfg.lookback_years)

        parameters, mode = await self._get_parameters(lat, lon, start_year, end_year)

        observations = extract_day_observations(
            parameters,
            month=target_date.month,
            day=target_date.day,
            start_year=start_year,
            end_year=end_year,
        )
        window = HistoricalWindow(
            observations=observations, start_year=start_year, end_year=end_year, mode=mode
        )
        if window.is_sparse:
            logger.info(
                "Sparse window for %s: %s of %s years", target_date.isoformat(), window.year_count, window.expected_years
            )
        return window
