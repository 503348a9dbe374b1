"""Spherical geometry helpers shared by validation and routing.

Distances use the haversine formula on a spherical Earth, which is
accurate to well under one percent at the scales an itinerary spans.
"""

import math
from typing import Iterable, Optional, Tuple

from ..domain.models import BoundingBox, MapLocation

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE = 111.0


def distance_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Calculate the distance in km between two GPS coordinates.

    Uses the Haversine formula for accurate distance on Earth's surface.
    The result is symmetric and exactly 0 for identical points.
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lng = math.radians(lng2 - lng1)

    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def bounding_box_radius_km(bounding_box: Optional[BoundingBox]) -> float:
    """Half the diagonal of a (south, north, west, east) box, in km.

    Returns 0.0 when no box is known.
    """
    if bounding_box is None:
        return 0.0
    south, north, west, east = bounding_box
    return distance_km(south, west, north, east) / 2


def viewbox_around(lat: float, lng: float, radius_km: float) -> BoundingBox:
    """Square box of ``radius_km`` around a point, as (south, north, west, east).

    Parameters
    ----------
    lat, lng:
        Center of the box.
    radius_km:
        Half the side of the box.

    Returns
    -------
    BoundingBox
        Latitudes are clamped to [-90, 90] and longitudes to
        [-180, 180], so boxes near the poles or the antimeridian are
        truncated rather than wrapped.
    """
    lat_deg = radius_km / KM_PER_DEGREE
    cos_lat = math.cos(math.radians(lat))
    lng_deg = 180.0 if cos_lat < 1e-6 else min(radius_km / (KM_PER_DEGREE * cos_lat), 180.0)

    return (
        max(lat - lat_deg, -90.0),
        min(lat + lat_deg, 90.0),
        max(lng - lng_deg, -180.0),
        min(lng + lng_deg, 180.0),
    )


def centroid(locations: Iterable[MapLocation]) -> Tuple[float, float]:
    """Arithmetic mean of latitudes and longitudes.

    Raises ValueError on an empty input.
    """
    points = [(loc.lat, loc.lng) for loc in locations]
    if not points:
        raise ValueError("centroid() of an empty sequence")
    lat = sum(p[0] for p in points) / len(points)
    lng = sum(p[1] for p in points) / len(points)
    return lat, lng
