"""Visiting order by the nearest-neighbor heuristic.

This is an ordering heuristic, not a shortest-path solver: latitude and
longitude are treated as planar coordinates, which is good enough to
draw a sensible route at city or country scale.
"""

from typing import List, Sequence

from ..domain.models import MapLocation


def _squared_distance(a: MapLocation, b: MapLocation) -> float:
    dlat = a.lat - b.lat
    dlng = a.lng - b.lng
    return dlat * dlat + dlng * dlng


def optimize_route(locations: Sequence[MapLocation]) -> List[MapLocation]:
    """Order locations into a route starting from the first one.

    Parameters
    ----------
    locations:
        Locations to visit; the first element is the start of the route.

    Returns
    -------
    list[MapLocation]
        A new list holding the same elements. At each step the closest
        remaining location is visited next; ties go to the one that
        appears first in the input, so the result is deterministic.
        Inputs of two elements or fewer come back in their input order.
    """
    if len(locations) <= 2:
        return list(locations)

    remaining = list(locations[1:])
    ordered = [locations[0]]

    while remaining:
        last = ordered[-1]
        nearest = min(
            range(len(remaining)),
            key=lambda i: _squared_distance(remaining[i], last),
        )
        ordered.append(remaining.pop(nearest))

    return ordered
