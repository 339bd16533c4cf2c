# src/weatherwise/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/weatherwise/config/defaults.yaml`, then optionally overridden by:
- environment variables (e.g., `NASA_API_KEY`, `WEATHERWISE_LOG_LEVEL`)
- an external YAML file via `WEATHERWISE_CONFIG_PATH`

Design rule:
- Operational knobs (URLs, timeouts, TTLs) live in YAML.
- The comfort formulas are product constants and live in `weatherwise.scoring`.
"""

from __future__ import annotations

import copy
import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Callable

import yaml
from pydantic import BaseModel, Field

from weatherwise.core.env import load_dotenv_if_present


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `weatherwise.config`."""
    text = resources.files("weatherwise.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "WeatherWise"
    timezone: str = "UTC"
    http_timeout_seconds: float = 20
    log_level: str = "INFO"


class CacheSettings(BaseModel):
    enabled: bool = True
    dir: str = ".cache/weatherwise"
    default_ttl_seconds: int = 60 * 60 * 24


class RetrySettings(BaseModel):
    max_attempts: int = Field(2, ge=0)
    base_delay_seconds: float = Field(0.5, ge=0)
    max_delay_seconds: float = Field(4.0, ge=0)


class ClimateProviderSettings(BaseModel):
    provider_name: str = "NASA POWER"
    base_url: str
    community: str = "RE"
    parameters: list[str] = Field(
        default_factory=lambda: ["T2M", "PRECTOTCORR", "RH2M", "WS2M", "CLOUD_AMT"]
    )
    lookback_years: int = Field(20, ge=1)
    fetch_timeout_seconds: float = Field(30, gt=0)
    cache_ttl_seconds: int = 60 * 60 * 24 * 7
    require_api_key: bool = True
    api_key: str | None = None
    retry: RetrySettings = Field(default_factory=RetrySettings)


class HolidaySettings(BaseModel):
    enabled: bool = True
    base_url: str
    country_code: str = "BR"
    horizon_days: int = Field(180, ge=0)
    cache_ttl_seconds: int = 60 * 60 * 24 * 30


class GeocodingSettings(BaseModel):
    base_url: str
    user_agent: str = "WeatherWise-Planner/1.0"
    accept_language: str = "pt-BR,pt,en"


class IngestionSettings(BaseModel):
    climate: ClimateProviderSettings
    holidays: HolidaySettings
    geocoding: GeocodingSettings


class AnalysisSettings(BaseModel):
    # None means real entropy for the hourly jitter.
    hourly_seed: int | None = None


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    ingestion: IngestionSettings
    analysis: AnalysisSettings = Field(default_factory=AnalysisSettings)


ENV_OVERRIDES: tuple[tuple[str, tuple[str, ...], Callable[[str], Any]], ...] = (
    ("WEATHERWISE_CACHE_DIR", ("cache", "dir"), str),
    ("WEATHERWISE_LOG_LEVEL", ("app", "log_level"), str),
    ("NASA_API_KEY", ("ingestion", "climate", "api_key"), str),
    ("WEATHERWISE_HOLIDAY_COUNTRY", ("ingestion", "holidays", "country_code"), str.upper),
    ("WEATHERWISE_HOURLY_SEED", ("analysis", "hourly_seed"), int),
)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of the raw settings with whitelisted env variables applied.

    Only the names in `ENV_OVERRIDES` are read; paths such as the config file itself
    cannot be redirected through here.
    """
    load_dotenv_if_present()
    data = copy.deepcopy(data)
    for env_name, path, convert in ENV_OVERRIDES:
        raw = os.getenv(env_name)
        if not raw:
            continue
        node = data
        for part in path[:-1]:
            node = node.setdefault(part, {})
        node[path[-1]] = convert(raw.strip())
    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("WEATHERWISE_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
