"""Services layer - Application orchestration.

This module contains the application services that orchestrate the
flow of data through adapters to fulfill use cases.

Available services:
- CityResolver: Anchors a trip to a canonical city
- GeocodeResolver: Resolves and validates venues within the anchor
- RouteBuilderService: One itinerary-to-route run
- RouteSession: Background runs with cancellation of stale input
"""

from .city_resolver import CityResolver
from .geocode_resolver import CacheLookup, CacheStatus, GeocodeResolver
from .route_builder import RouteBuilderService
from .route_session import RouteRun, RouteSession

__all__ = [
    "CityResolver",
    "GeocodeResolver",
    "CacheLookup",
    "CacheStatus",
    "RouteBuilderService",
    "RouteSession",
    "RouteRun",
]
