"""Route builder service - One itinerary-to-route run.

This service sequences the pipeline for one (itinerary text, city) pair:

1. City anchor resolution (a failed anchor ends the run silently)
2. Venue extraction
3. Fast path: embedded map-link coordinates and valid cache hits
4. Slow path: sequential geocoding of the remaining venues
5. Outlier rejection and route ordering after every new arrival

Snapshots are pushed to a listener as they become available, so a map
can show the cached venues at once and refine as the geocoder answers.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..config import ExtractionConfig, OutlierConfig, get_config
from ..domain.models import MapLocation, RouteUpdate
from ..nlp.extract_places import extract_place_coords, extract_places, places_limit
from ..ports.listener import RouteListenerPort
from ..routing.nearest_neighbor import optimize_route
from ..routing.outliers import remove_outliers
from .city_resolver import CityResolver
from .geocode_resolver import CacheStatus, GeocodeResolver


@dataclass
class RouteBuilderService:
    """Build an ordered, validated route from itinerary text.

    Runs are synchronous and single-threaded; RouteSession runs them on
    a worker thread and cancels superseded ones.

    Attributes:
        city_resolver: Resolves the trip's city anchor
        geocode_resolver: Resolves and validates venues
        extraction: Result count and accommodation reservation
        outliers: Outlier rejection parameters
    """

    city_resolver: CityResolver
    geocode_resolver: GeocodeResolver
    extraction: ExtractionConfig = field(default_factory=lambda: get_config().extraction)
    outliers: OutlierConfig = field(default_factory=lambda: get_config().outliers)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def build(
        self,
        content: str,
        city: str,
        max_results: Optional[int] = None,
        listener: Optional[RouteListenerPort] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Optional[RouteUpdate]:
        """Run the pipeline once.

        Args:
            content: Itinerary markdown.
            city: Trip location as typed by the user.
            max_results: Venue budget; defaults to a per-day budget
                derived from the number of day headings.
            listener: Receives partial snapshots and the final one.
            cancel_event: When set, the run stops at the next check,
                emits nothing more and returns None.

        Returns:
            The final snapshot, or None if the city could not be
            resolved or the run was cancelled.
        """

        def cancelled() -> bool:
            return cancel_event is not None and cancel_event.is_set()

        if cancelled():
            return None

        anchor = self.city_resolver.resolve(city)
        if cancelled():
            return None
        if anchor is None:
            self._logger.info("Run aborted, no city anchor", extra={"city": city})
            return None

        if max_results is None:
            max_results = places_limit(
                content,
                per_day=self.extraction.places_per_day,
                cap=self.extraction.max_places,
            )
        names = extract_places(
            content, city, max_results, stay_slots=self.extraction.stay_slots
        )
        embedded = extract_place_coords(content)
        total = len(names)

        resolved: List[MapLocation] = []
        uncached: List[str] = []
        for name in names:
            coords = embedded.get(name)
            if coords is not None and self.geocode_resolver.accept(name, city, coords, anchor):
                resolved.append(MapLocation.at(name, coords))
                continue

            lookup = self.geocode_resolver.lookup_cached(name, city, anchor)
            if lookup.is_hit:
                resolved.append(MapLocation.at(name, lookup.coordinates))
            elif lookup.status is CacheStatus.MISS:
                uncached.append(name)

        self._logger.info(
            "Places partitioned",
            extra={
                "city": city,
                "places": total,
                "fast_path": len(resolved),
                "uncached": len(uncached),
            },
        )

        if resolved:
            self._emit(listener, self._snapshot(resolved, total, is_final=False))

        for name in uncached:
            if cancelled():
                return None
            coords = self.geocode_resolver.resolve(name, city, anchor)
            if cancelled():
                return None
            if coords is None:
                continue
            resolved.append(MapLocation.at(name, coords))
            self._emit(listener, self._snapshot(resolved, total, is_final=False))

        final = self._snapshot(resolved, total, is_final=True)
        self._emit(listener, final)
        self._logger.info(
            "Route built",
            extra={
                "city": city,
                "resolved": final.resolved_count,
                "mapped": len(final.locations),
            },
        )
        return final

    def _snapshot(
        self, resolved: Sequence[MapLocation], total: int, is_final: bool
    ) -> RouteUpdate:
        kept = remove_outliers(
            resolved,
            multiplier=self.outliers.multiplier,
            floor_km=self.outliers.floor_km,
            min_points=self.outliers.min_points,
        )
        return RouteUpdate(
            locations=tuple(optimize_route(kept)),
            resolved_count=len(resolved),
            total_places=total,
            is_final=is_final,
        )

    def _emit(self, listener: Optional[RouteListenerPort], update: RouteUpdate) -> None:
        if listener is None:
            return
        try:
            if update.is_final:
                listener.on_complete(update)
            else:
                listener.on_partial(update)
        except Exception:
            # A broken listener must not lose the rest of the run
            self._logger.exception(
                "Route listener failed",
                extra={"is_final": update.is_final, "locations": len(update.locations)},
            )
