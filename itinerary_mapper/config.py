"""Centralized configuration using Pydantic Settings.

This module provides a single source of truth for all configuration:
geocoding endpoint settings, resolution radii, cache policy, extraction
limits and outlier tuning.

Configuration can be overridden via environment variables:
- ITM_GEO_USER_AGENT=my-app/1.0
- ITM_GEO_RATE_LIMIT_DELAY=1.5
- ITM_CACHE_STORAGE_DIR=/var/lib/itinerary-mapper
- ITM_OUTLIER_MULTIPLIER=2.5
- etc.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GeocodingConfig(BaseSettings):
    """Geocoding service configuration.

    Environment variables prefixed with ITM_GEO_.
    """

    model_config = SettingsConfigDict(env_prefix="ITM_GEO_")

    user_agent: str = "itinerary-mapper"
    domain: str = "nominatim.openstreetmap.org"
    timeout_seconds: float = 5.0
    # Nominatim's usage policy allows one request per second
    rate_limit_delay: float = 1.1
    max_retries: int = 0
    error_wait_seconds: float = 2.0
    language: Optional[str] = "en"


class CityResolutionConfig(BaseSettings):
    """City anchor resolution configuration.

    Environment variables prefixed with ITM_CITY_.
    """

    model_config = SettingsConfigDict(env_prefix="ITM_CITY_")

    candidate_limit: int = 5
    importance_threshold: float = 0.5
    disambiguation_suffix: str = "university"


class ResolutionConfig(BaseSettings):
    """Per-venue resolution configuration.

    Environment variables prefixed with ITM_RESOLVE_.
    """

    model_config = SettingsConfigDict(env_prefix="ITM_RESOLVE_")

    base_max_distance_km: float = 80.0
    candidate_limit: int = 1
    bounded_viewbox: bool = True


class CacheConfig(BaseSettings):
    """Persistent geo cache configuration.

    Environment variables prefixed with ITM_CACHE_.
    """

    model_config = SettingsConfigDict(env_prefix="ITM_CACHE_")

    storage_dir: Path = Field(
        default_factory=lambda: Path.home() / ".cache" / "itinerary-mapper"
    )
    storage_key: str = "daily_geocache"
    # Bump when cached coordinates become unsafe to reuse
    version: int = 2
    ttl_seconds: int = 7 * 24 * 60 * 60
    max_entries: int = 500
    eviction_fraction: float = 0.2

    @property
    def retained_entries(self) -> int:
        """Number of entries kept after an eviction pass."""
        return int(self.max_entries * (1 - self.eviction_fraction))


class ExtractionConfig(BaseSettings):
    """Place extraction configuration.

    Environment variables prefixed with ITM_EXTRACT_.
    """

    model_config = SettingsConfigDict(env_prefix="ITM_EXTRACT_")

    stay_slots: int = 4
    places_per_day: int = 10
    max_places: int = 25


class OutlierConfig(BaseSettings):
    """Outlier rejection configuration.

    Environment variables prefixed with ITM_OUTLIER_.
    """

    model_config = SettingsConfigDict(env_prefix="ITM_OUTLIER_")

    multiplier: float = 3.0
    floor_km: float = 5.0
    min_points: int = 3


class ObservabilityConfig(BaseSettings):
    """Logging configuration.

    Environment variables prefixed with ITM_LOG_.
    """

    model_config = SettingsConfigDict(env_prefix="ITM_LOG_")

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class AppConfig(BaseSettings):
    """Main application configuration aggregating all sub-configs.

    This is the main entry point for configuration. Sub-configurations
    can be accessed via attributes:

        config = get_config()
        print(config.geocoding.rate_limit_delay)
        print(config.cache.storage_dir)

    Environment variables prefixed with ITM_.
    """

    model_config = SettingsConfigDict(env_prefix="ITM_")

    geocoding: GeocodingConfig = Field(default_factory=GeocodingConfig)
    city: CityResolutionConfig = Field(default_factory=CityResolutionConfig)
    resolution: ResolutionConfig = Field(default_factory=ResolutionConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    outliers: OutlierConfig = Field(default_factory=OutlierConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Get the singleton application configuration.

    Configuration is loaded once and cached. To reload configuration
    (e.g., in tests), use reset_config() first.

    Returns:
        The application configuration instance.
    """
    return AppConfig()


def reset_config() -> None:
    """Reset the configuration cache.

    Call this in tests to ensure a fresh configuration is loaded.
    """
    get_config.cache_clear()
