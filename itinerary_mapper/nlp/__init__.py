"""Text mining components for the itinerary mapper.

This subpackage groups modules that read generated itinerary markdown,
such as venue extraction and day counting.
"""

from .extract_places import (
    detect_day_count,
    extract_place_coords,
    extract_place_groups,
    extract_places,
    places_limit,
)

__all__ = [
    "extract_places",
    "extract_place_groups",
    "extract_place_coords",
    "detect_day_count",
    "places_limit",
]
