"""
Public-holiday ingestion client (Nager.Date).

Holidays are an enrichment: every public method here is fail-open and returns an
empty list when the provider or the cache misbehaves. The cache is keyed by
(country, year) and written with a merge-upsert keyed by holiday date, so
concurrent requests for the same year can store their copies in any order.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Any

import httpx

from weatherwise.config.settings import Settings
from weatherwise.core.cache import FileCache
from weatherwise.core.http import get_json
from weatherwise.domain.models import Holiday

logger = logging.getLogger(__name__)


def _normalize(raw: dict[str, Any]) -> dict[str, Any] | None:
    """Convert one Nager.Date record into the cached record shape."""
    holiday_date = raw.get("date")
    name = raw.get("localName") or raw.get("name")
    if not holiday_date or not name:
        return None
    return {
        "date": str(holiday_date),
        "name": str(name),
        "name_en": raw.get("name"),
        "is_global": bool(raw.get("global", True)),
        "types": list(raw.get("types") or ["Public"]),
    }


class HolidayClient:
    """Fetches public holidays per (country, year), cache-first."""

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

    async def _fetch_from_api(self, year: int, country_code: str) -> list[dict[str, Any]]:
        cfg = self._settings.ingestion.holidays
        url = f"{cfg.base_url.rstrip('/')}/{year}/{country_code}"
        logger.info("Fetching holidays for %s %s", country_code, year)
        try:
            payload = await get_json(
                url,
                timeout_seconds=self._settings.app.http_timeout_seconds,
                client=self._http_client,
            )
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Holiday lookup failed for %s %s: %s", country_code, year, exc)
            return []
        if not isinstance(payload, list):
            return []
        return [rec for rec in (_normalize(r) for r in payload if isinstance(r, dict)) if rec]

    async def get_year(self, year: int, country_code: str) -> list[dict[str, Any]]:
        """Return normalized holiday records for one year (cache, then API)."""
        cfg = self._settings.ingestion.holidays
        cache_key = f"{country_code}:{year}"

        cached = await asyncio.to_thread(self._cache.get, "holidays", cache_key, ttl_seconds=cfg.cache_ttl_seconds)
        if isinstance(cached, list) and cached:
            logger.debug("Using cached holidays for %s %s (%s)", country_code, year, len(cached))
            return cached

        records = await self._fetch_from_api(year, country_code)
        if not records:
            stale = await asyncio.to_thread(self._cache.get_stale, "holidays", cache_key)
            return stale if isinstance(stale, list) else []

        try:
            return await asyncio.to_thread(
                self._cache.merge_records,
                "holidays",
                cache_key,
                records,
                identity=lambda rec: str(rec.get("date")),
                ttl_seconds=cfg.cache_ttl_seconds,
            )
        except OSError as exc:
            logger.warning("Failed to cache holidays for %s %s: %s", country_code, year, exc)
            return records

    async def find_nearby(self, target_date: date, *, country_code: str | None = None) -> list[Holiday]:
        """Return holidays from `target_date` up to the configured horizon, soonest first."""
        cfg = self._settings.ingestion.holidays
        if not cfg.enabled:
            return []
        country = (country_code or cfg.country_code).upper()

        current_year, next_year = await asyncio.gather(
            self.get_year(target_date.year, country),
            self.get_year(target_date.year + 1, country),
        )

        nearby: list[Holiday] = []
        for rec in [*current_year, *next_year]:
            try:
                holiday_date = date.fromisoformat(str(rec["date"]))
            except (KeyError, ValueError):
                continue
            days = (holiday_date - target_date).days
            if not 0 <= days <= cfg.horizon_days:
                continue
            nearby.append(
                Holiday(
                    date=holiday_date,
                    name=rec.get("name") or rec.get("name_en") or "",
                    name_en=rec.get("name_en"),
                    is_global=bool(rec.get("is_global", True)),
                    types=list(rec.get("types") or []),
                    days_from_target=days,
                )
            )
        nearby.sort(key=lambda h: h.days_from_target)
        return nearby
