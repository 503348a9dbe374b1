"""Immutable domain models for the itinerary mapper.

All models are frozen dataclasses with slots for memory efficiency.
These models have no external dependencies and represent the core
business concepts of the application.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Mapping, Optional


@dataclass(frozen=True, slots=True)
class Coordinates:
    """GPS coordinates of a resolved place."""

    lat: float
    lng: float

    def __post_init__(self) -> None:
        """Validate coordinate ranges."""
        if not -90 <= self.lat <= 90:
            raise ValueError(f"Latitude must be between -90 and 90, got {self.lat}")
        if not -180 <= self.lng <= 180:
            raise ValueError(
                f"Longitude must be between -180 and 180, got {self.lng}"
            )


@dataclass(frozen=True, slots=True)
class MapLocation:
    """A resolved, validated venue ready for the rendering layer.

    Attributes:
        name: Venue name as extracted from the itinerary text
        lat: Latitude in degrees
        lng: Longitude in degrees
    """

    name: str
    lat: float
    lng: float

    @property
    def coordinates(self) -> Coordinates:
        """Return the location as bare coordinates."""
        return Coordinates(lat=self.lat, lng=self.lng)

    @classmethod
    def at(cls, name: str, coords: Coordinates) -> MapLocation:
        """Build a location from a name and its coordinates."""
        return cls(name=name, lat=coords.lat, lng=coords.lng)

    def to_dict(self) -> dict[str, object]:
        """Return the ``{name, lat, lng}`` shape consumed by map renderers."""
        return {"name": self.name, "lat": self.lat, "lng": self.lng}


# (south, north, west, east), the order used by Nominatim's "boundingbox"
BoundingBox = tuple[float, float, float, float]


@dataclass(frozen=True, slots=True)
class CityGeoResult:
    """The city anchor of a pipeline run.

    Produced once per run by the city resolver and read by every
    subsequent venue validation.

    Attributes:
        lat: Anchor latitude
        lng: Anchor longitude
        country_code: ISO 3166-1 alpha-2 code, lowercase
        country: Country name as returned by the geocoder
        state: State or region
        resolved_city: City name the geocoder resolved the query to
        bounding_box: Extent of the resolved area as (south, north, west, east)
        importance: Relevance score of the selected candidate
        display_name: Full label returned by the geocoder
    """

    lat: float
    lng: float
    country_code: Optional[str] = None
    country: Optional[str] = None
    state: Optional[str] = None
    resolved_city: Optional[str] = None
    bounding_box: Optional[BoundingBox] = None
    importance: float = 0.0
    display_name: Optional[str] = None

    @property
    def coordinates(self) -> Coordinates:
        """Return the anchor as bare coordinates."""
        return Coordinates(lat=self.lat, lng=self.lng)


@dataclass(frozen=True, slots=True)
class GeocodeMatch:
    """One candidate returned by the geocoding service.

    Attributes:
        lat: Candidate latitude
        lng: Candidate longitude
        display_name: Full label of the candidate
        importance: Relevance score (0.0 when the service omits it)
        address: Address components (city, country_code, state, ...)
        bounding_box: Extent as (south, north, west, east), if provided
    """

    lat: float
    lng: float
    display_name: str = ""
    importance: float = 0.0
    address: Mapping[str, str] = field(default_factory=dict)
    bounding_box: Optional[BoundingBox] = None

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(lat=self.lat, lng=self.lng)

    @property
    def city_name(self) -> Optional[str]:
        """Best-effort settlement name from the address components.

        A leading "City of" is dropped, so "City of Ithaca" reads "Ithaca".
        """
        name = (
            self.address.get("city")
            or self.address.get("town")
            or self.address.get("village")
            or self.address.get("municipality")
            or self.address.get("hamlet")
        )
        if not name:
            return None
        return re.sub(r"^city of\s+", "", name, flags=re.IGNORECASE).strip() or None

    def to_city(self) -> CityGeoResult:
        """Promote this candidate to a city anchor."""
        country_code = self.address.get("country_code")
        return CityGeoResult(
            lat=self.lat,
            lng=self.lng,
            country_code=country_code.lower() if country_code else None,
            country=self.address.get("country") or None,
            state=self.address.get("state") or self.address.get("region") or None,
            resolved_city=self.city_name,
            bounding_box=self.bounding_box,
            importance=self.importance,
            display_name=self.display_name or None,
        )


@dataclass(frozen=True, slots=True)
class ExtractedPlaces:
    """Candidate venue names split by itinerary section.

    Attributes:
        itinerary: Names found in the daily plan, in text order
        stay: Names found in the accommodation section, in text order
    """

    itinerary: tuple[str, ...] = field(default_factory=tuple)
    stay: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.itinerary and not self.stay

    def names(self, max_results: int, stay_slots: int = 4) -> list[str]:
        """Merge both sections, guaranteeing room for accommodation.

        Up to ``stay_slots`` slots are reserved for the stay section so a
        long list of daily activities never crowds out lodging.
        """
        max_results = max(max_results, 0)
        reserved = min(stay_slots, len(self.stay), max_results)

        merged = list(self.itinerary[: max_results - reserved])
        stay = [name for name in self.stay if name not in merged]
        room = max(reserved, max_results - len(merged))
        merged.extend(stay[:room])
        return merged


@dataclass(frozen=True, slots=True)
class RouteUpdate:
    """A snapshot emitted to the rendering layer.

    Attributes:
        locations: Outlier-filtered locations in visiting order
        resolved_count: Number of places resolved so far
        total_places: Number of candidate places in this run
        is_final: True for the last snapshot of a completed run
    """

    locations: tuple[MapLocation, ...] = field(default_factory=tuple)
    resolved_count: int = 0
    total_places: int = 0
    is_final: bool = False

    @property
    def is_empty(self) -> bool:
        """Check if no location could be mapped."""
        return len(self.locations) == 0

    @property
    def names(self) -> list[str]:
        return [location.name for location in self.locations]
