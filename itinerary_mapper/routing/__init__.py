"""Geometry, outlier rejection and route ordering for resolved places.

These modules are pure functions over MapLocation sequences; they never
touch the network or the cache.
"""

from .geometry import bounding_box_radius_km, centroid, distance_km, viewbox_around
from .nearest_neighbor import optimize_route
from .outliers import remove_outliers

__all__ = [
    "distance_km",
    "bounding_box_radius_km",
    "viewbox_around",
    "centroid",
    "remove_outliers",
    "optimize_route",
]
