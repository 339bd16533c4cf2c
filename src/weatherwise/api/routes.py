"""
API routes.

Endpoints:
- POST `/api/climate-analysis`: main analysis entrypoint (one or many locations).
- GET  `/api/event-types`: supported event types and their wind tolerance.
- GET  `/api/settings`: public settings for the web UI (secrets redacted).
- GET  `/api/health`: liveness probe.
"""

from __future__ import annotations

import logging
from functools import lru_cache, partial
from typing import Union

from fastapi import APIRouter, HTTPException

from weatherwise.config.settings import get_settings
from weatherwise.core.cache import FileCache
from weatherwise.domain.models import (
    ClimateAnalysisRequest,
    EventType,
    LocationAnalysis,
    LocationFailure,
)
from weatherwise.errors import ConfigurationError, InvalidRequestError
from weatherwise.ingestion.climate_client import ClimateClient
from weatherwise.ingestion.geocoding import geocode
from weatherwise.ingestion.holiday_client import HolidayClient
from weatherwise.planner.analyze import analyze_request, build_cache
from weatherwise.scoring.icp import WIND_THRESHOLDS_KMH

logger = logging.getLogger(__name__)

router = APIRouter()

AnalysisResponse = Union[
    LocationAnalysis,
    LocationFailure,
    list[Union[LocationAnalysis, LocationFailure]],
]


@lru_cache
def _cache() -> FileCache:
    return build_cache(get_settings())


@lru_cache
def _clients() -> tuple[ClimateClient, HolidayClient]:
    settings = get_settings()
    cache = _cache()
    return ClimateClient(settings, cache), HolidayClient(settings, cache)


@router.get("/api/health")
def get_health() -> dict:
    return {"status": "ok"}


@router.post("/api/climate-analysis", response_model=AnalysisResponse)
async def post_climate_analysis(request: ClimateAnalysisRequest) -> AnalysisResponse:
    """Run the climate analysis for every requested location."""
    settings = get_settings()
    climate_client, holiday_client = _clients()
    try:
        return await analyze_request(
            request,
            settings=settings,
            climate_client=climate_client,
            holiday_client=holiday_client,
            geocoder=partial(geocode, settings),
        )
    except ConfigurationError as e:
        logger.error("Server misconfiguration: %s", e)
        raise HTTPException(
            status_code=500,
            detail={"code": "CONFIGURATION_ERROR", "message": str(e)},
        ) from e
    except InvalidRequestError as e:
        raise HTTPException(
            status_code=400,
            detail={"code": "VALIDATION_ERROR", "message": str(e)},
        ) from e
    except Exception as e:
        logger.exception("Unexpected error in climate analysis")
        raise HTTPException(
            status_code=500,
            detail={"code": "INTERNAL_ERROR", "message": str(e)},
        ) from e


@router.get("/api/event-types")
def get_event_types() -> dict:
    """Return the closed set of event types and the wind each one tolerates (km/h)."""
    return {
        "eventTypes": [
            {"eventType": event_type.value, "windThresholdKmh": WIND_THRESHOLDS_KMH[event_type]}
            for event_type in EventType
            if event_type is not EventType.OTHER
        ],
        "defaultWindThresholdKmh": WIND_THRESHOLDS_KMH[EventType.OTHER],
    }


@router.get("/api/settings")
def get_public_settings() -> dict:
    """Return safe-to-expose settings for UI defaults (credentials removed)."""
    data = get_settings().model_dump(mode="json")
    return {
        "app": {"name": data["app"]["name"], "timezone": data["app"]["timezone"]},
        "ingestion": {
            "climate": {
                "provider_name": data["ingestion"]["climate"]["provider_name"],
                "lookback_years": data["ingestion"]["climate"]["lookback_years"],
            },
            "holidays": {
                "enabled": data["ingestion"]["holidays"]["enabled"],
                "country_code": data["ingestion"]["holidays"]["country_code"],
                "horizon_days": data["ingestion"]["holidays"]["horizon_days"],
            },
        },
    }
