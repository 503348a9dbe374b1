"""Domain layer - Core business models and errors.

This module contains immutable domain models and typed errors
used throughout the application. No external dependencies.
"""

from .errors import (
    CacheError,
    CityResolutionError,
    ConfigurationError,
    GeocodingError,
    ItineraryMapperError,
    StorageError,
)
from .models import (
    BoundingBox,
    CityGeoResult,
    Coordinates,
    ExtractedPlaces,
    GeocodeMatch,
    MapLocation,
    RouteUpdate,
)

__all__ = [
    # Models
    "BoundingBox",
    "Coordinates",
    "MapLocation",
    "CityGeoResult",
    "GeocodeMatch",
    "ExtractedPlaces",
    "RouteUpdate",
    # Errors
    "ItineraryMapperError",
    "GeocodingError",
    "CityResolutionError",
    "CacheError",
    "StorageError",
    "ConfigurationError",
]
