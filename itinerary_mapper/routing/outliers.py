"""Statistical rejection of geocoded points far from the trip's cluster.

One bad point drags the centroid towards itself and inflates the median
distance, which can hide a second bad point. The filter therefore drops
a single point per pass and recomputes everything before the next one.
"""

import logging
import statistics
from typing import List, Sequence

from ..domain.models import MapLocation
from .geometry import centroid, distance_km

logger = logging.getLogger(__name__)

DEFAULT_MULTIPLIER = 3.0
DEFAULT_FLOOR_KM = 5.0
DEFAULT_MIN_POINTS = 3


def remove_outliers(
    locations: Sequence[MapLocation],
    *,
    multiplier: float = DEFAULT_MULTIPLIER,
    floor_km: float = DEFAULT_FLOOR_KM,
    min_points: int = DEFAULT_MIN_POINTS,
) -> List[MapLocation]:
    """Iteratively remove the farthest point while it is an outlier.

    Parameters
    ----------
    locations:
        Resolved locations, in any order. Not mutated.
    multiplier:
        A point is an outlier when its distance to the centroid exceeds
        ``median * multiplier``.
    floor_km:
        Lower bound of the threshold, so tight clusters keep their
        natural spread.
    min_points:
        Inputs of this size or smaller are returned unchanged, and the
        filter never shrinks the list below it.

    Returns
    -------
    list[MapLocation]
        Survivors, in their input order.
    """
    kept = list(locations)
    if len(kept) <= min_points:
        return kept

    while len(kept) > min_points:
        center_lat, center_lng = centroid(kept)
        distances = [
            distance_km(loc.lat, loc.lng, center_lat, center_lng) for loc in kept
        ]
        threshold = max(statistics.median(distances) * multiplier, floor_km)

        farthest = max(range(len(kept)), key=distances.__getitem__)
        if distances[farthest] <= threshold:
            break

        removed = kept.pop(farthest)
        logger.debug(
            "Outlier removed",
            extra={
                "place": removed.name,
                "distance_km": round(distances[farthest], 1),
                "threshold_km": round(threshold, 1),
            },
        )

    return kept
