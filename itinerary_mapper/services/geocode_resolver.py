"""Geocode resolver service - Venue name to validated coordinates.

Every coordinate leaving this service, whether it came from the cache,
the geocoder or an embedded map link, has been checked against the city
anchor's effective radius. Coordinates are only cached after passing
that check, so the cache never holds a rejected location.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Tuple

from ..config import ResolutionConfig, get_config
from ..domain.errors import GeocodingError
from ..domain.models import CityGeoResult, Coordinates
from ..ports.cache import GeoCachePort
from ..ports.geocoding import GeocoderPort
from ..routing.geometry import bounding_box_radius_km, distance_km, viewbox_around


class CacheStatus(Enum):
    """Outcome of a cache lookup for one venue."""

    MISS = "miss"
    HIT = "hit"
    REJECTED = "rejected"


@dataclass(frozen=True)
class CacheLookup:
    """A cache lookup result; coordinates are set for HIT only."""

    status: CacheStatus
    coordinates: Optional[Coordinates] = None

    @property
    def is_hit(self) -> bool:
        return self.status is CacheStatus.HIT


# (place, city name, city anchor) -> free-text query
QueryBuilder = Callable[[str, str, CityGeoResult], str]


@dataclass
class GeocodeResolver:
    """Resolve venue names within a city anchor.

    Query strategies, tried in order until one yields a valid match:
    1. qualified: "place, city" (plus ", country" for city-scale anchors)
    2. bare: "place" alone, which helps when the anchor is not an
       administrative area (a park, a campus)

    Both are constrained by a viewbox around the anchor and by the
    anchor's country code.

    Attributes:
        geocoder: Geocoding service
        cache: Shared geo cache
        config: Distance and query settings
    """

    geocoder: GeocoderPort
    cache: GeoCachePort
    config: ResolutionConfig = field(default_factory=lambda: get_config().resolution)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    @property
    def strategies(self) -> Tuple[Tuple[str, QueryBuilder], ...]:
        return (
            ("qualified", self._qualified_query),
            ("bare", self._bare_query),
        )

    def effective_radius_km(self, city: CityGeoResult) -> float:
        """Maximum venue distance from the anchor.

        Half the bounding box diagonal, but never less than the base
        distance, so region-scale trips accept venues far apart while
        city-scale trips stay tight.
        """
        return max(bounding_box_radius_km(city.bounding_box), self.config.base_max_distance_km)

    def is_city_scale(self, city: CityGeoResult) -> bool:
        return bounding_box_radius_km(city.bounding_box) <= self.config.base_max_distance_km

    def is_within_city(self, coords: Coordinates, city: CityGeoResult) -> bool:
        return (
            distance_km(coords.lat, coords.lng, city.lat, city.lng)
            <= self.effective_radius_km(city)
        )

    def lookup_cached(self, place: str, city_name: str, city: CityGeoResult) -> CacheLookup:
        """Look a venue up in the cache and re-validate the hit.

        A cached entry is rejected when it is out of range for the
        current anchor, e.g. when the same city name now resolves to a
        different place.
        """
        coords = self.cache.get(place, city_name)
        if coords is None:
            return CacheLookup(CacheStatus.MISS)

        if not self.is_within_city(coords, city):
            self._logger.debug(
                "Cached location rejected",
                extra={"place": place, "city": city_name, "lat": coords.lat, "lng": coords.lng},
            )
            return CacheLookup(CacheStatus.REJECTED)

        self._logger.debug("Cache hit", extra={"place": place, "city": city_name})
        return CacheLookup(CacheStatus.HIT, coords)

    def accept(
        self, place: str, city_name: str, coords: Coordinates, city: CityGeoResult
    ) -> bool:
        """Validate coordinates from another source and cache them if valid.

        Returns:
            True if the coordinates are within the anchor's radius.
        """
        if not self.is_within_city(coords, city):
            self._logger.debug(
                "Location rejected",
                extra={"place": place, "city": city_name, "lat": coords.lat, "lng": coords.lng},
            )
            return False
        self.cache.put(place, city_name, coords)
        return True

    def resolve(
        self, place: str, city_name: str, city: CityGeoResult
    ) -> Optional[Coordinates]:
        """Resolve a venue to validated coordinates.

        Args:
            place: Venue name as extracted.
            city_name: City text the trip was requested for; part of the
                cache key.
            city: Resolved city anchor.

        Returns:
            Coordinates within the effective radius, or None. Never
            raises for geocoder failures.
        """
        cached = self.lookup_cached(place, city_name, city)
        if cached.status is not CacheStatus.MISS:
            return cached.coordinates

        radius = self.effective_radius_km(city)
        viewbox = viewbox_around(city.lat, city.lng, radius)
        country_codes = [city.country_code] if city.country_code else None

        for name, build_query in self.strategies:
            query = build_query(place, city_name, city)
            for coords in self._search(query, viewbox, country_codes):
                if self.accept(place, city_name, coords, city):
                    self._logger.debug(
                        "Place resolved",
                        extra={"place": place, "strategy": name, "query": query},
                    )
                    return coords

        self._logger.info(
            "Place could not be resolved",
            extra={"place": place, "city": city_name},
        )
        return None

    def _search(self, query, viewbox, country_codes) -> List[Coordinates]:
        try:
            matches = self.geocoder.search(
                query,
                limit=self.config.candidate_limit,
                country_codes=country_codes,
                viewbox=viewbox,
                bounded=self.config.bounded_viewbox,
            )
        except GeocodingError as e:
            self._logger.warning(
                "Place search failed",
                extra={"query": query, "error": str(e), "rate_limited": e.is_rate_limited},
            )
            return []
        return [match.coordinates for match in matches]

    def _qualified_query(self, place: str, city_name: str, city: CityGeoResult) -> str:
        parts = [place, city_name]
        # Country names in another script break region-scale queries
        if city.country and self.is_city_scale(city):
            parts.append(city.country)
        return ", ".join(parts)

    def _bare_query(self, place: str, city_name: str, city: CityGeoResult) -> str:
        return place
