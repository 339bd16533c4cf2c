"""
Free-text geocoding (OpenStreetMap Nominatim).

Only the legacy single-location request form needs this; the multi-location form
arrives pre-resolved. Direct coordinates such as `"-23.55, -46.63"` bypass the
network call.
"""

from __future__ import annotations

import logging
import re

import httpx

from weatherwise.config.settings import Settings
from weatherwise.core.http import get_json
from weatherwise.domain.models import Coordinate
from weatherwise.errors import GeocodingError

logger = logging.getLogger(__name__)

_COORD_RE = re.compile(r"^\s*(-?\d+(?:\.\d*)?)\s*,\s*(-?\d+(?:\.\d*)?)\s*$")
_COUNTRY_SUFFIX_RE = re.compile(r"\s*,\s*(BRA|BR)$", re.IGNORECASE)


def parse_coordinates(text: str) -> Coordinate | None:
    """Return a `Coordinate` when `text` is a valid "lat, lon" pair, else None."""
    match = _COORD_RE.match(text)
    if not match:
        return None
    lat, lon = float(match.group(1)), float(match.group(2))
    if -90 <= lat <= 90 and -180 <= lon <= 180:
        return Coordinate(latitude=lat, longitude=lon)
    return None


def clean_query(text: str) -> str:
    return _COUNTRY_SUFFIX_RE.sub(", Brazil", text.strip()).strip()


async def geocode(
    settings: Settings, text: str, *, http_client: httpx.AsyncClient | None = None
) -> Coordinate:
    """Resolve `text` to a coordinate.

    Raises:
        GeocodingError: If the geocoder fails or finds nothing.
    """
    direct = parse_coordinates(text)
    if direct is not None:
        logger.info("Using direct coordinates: %s", direct)
        return direct

    cfg = settings.ingestion.geocoding
    query = clean_query(text)
    logger.info("Geocoding location: %s", query)
    try:
        data = await get_json(
            cfg.base_url,
            params={"q": query, "format": "json", "limit": 1, "accept-language": cfg.accept_language},
            headers={"User-Agent": cfg.user_agent},
            timeout_seconds=settings.app.http_timeout_seconds,
            client=http_client,
        )
    except (httpx.HTTPError, ValueError) as exc:
        raise GeocodingError("Failed to geocode location") from exc

    if not isinstance(data, list) or not data:
        raise GeocodingError(
            'Location not found. Try "City, State" or direct coordinates "lat, lon".'
        )
    try:
        return Coordinate(latitude=float(data[0]["lat"]), longitude=float(data[0]["lon"]))
    except (KeyError, TypeError, ValueError) as exc:
        raise GeocodingError("Geocoder returned an invalid coordinate") from exc
