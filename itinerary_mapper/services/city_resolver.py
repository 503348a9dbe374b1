"""City resolver service - Anchors a trip to a canonical city.

A single free-text search is not enough: institution and landmark names
("Cornell", "Stanford") often collide with small unrelated towns, and
the geocoder then returns a low-importance match that merely echoes the
input. The resolver therefore runs an ordered tuple of strategies, each
of which may replace the current best result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence, Tuple

from ..config import CityResolutionConfig, get_config
from ..domain.errors import CityResolutionError, GeocodingError
from ..domain.models import CityGeoResult, GeocodeMatch
from ..ports.geocoding import GeocoderPort

# (query, current best) -> replacement, or None to keep the current best
CityStrategy = Callable[[str, Optional[CityGeoResult]], Optional[CityGeoResult]]


def _same_place_name(a: Optional[str], b: Optional[str]) -> bool:
    return (a or "").strip().lower() == (b or "").strip().lower()


@dataclass
class CityResolver:
    """Resolve a location query into a CityGeoResult.

    Strategies, in order:
    1. primary: search the query, keep the most important candidate
    2. disambiguation: when the primary result is weak and only echoes
       the query, search "<query> <suffix>" and keep that result if it
       lands in a different city

    Attributes:
        geocoder: Geocoding service
        config: Candidate limit, importance threshold and suffix
    """

    geocoder: GeocoderPort
    config: CityResolutionConfig = field(default_factory=lambda: get_config().city)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    @property
    def strategies(self) -> Tuple[Tuple[str, CityStrategy], ...]:
        return (
            ("primary", self._primary),
            ("disambiguation", self._disambiguation),
        )

    def resolve(self, query: Optional[str]) -> Optional[CityGeoResult]:
        """Resolve a location query.

        Args:
            query: Free-text location, e.g. "Paris" or "Cornell".

        Returns:
            The city anchor, or None if the query is empty, nothing
            matched, or the geocoder failed.
        """
        query = (query or "").strip()
        if not query:
            return None

        current: Optional[CityGeoResult] = None
        for name, strategy in self.strategies:
            replacement = strategy(query, current)
            if replacement is not None:
                self._logger.debug(
                    "City strategy selected a result",
                    extra={
                        "query": query,
                        "strategy": name,
                        "resolved_city": replacement.resolved_city,
                        "importance": replacement.importance,
                    },
                )
                current = replacement

        if current is None:
            self._logger.warning("City could not be resolved", extra={"query": query})
        else:
            self._logger.info(
                "City resolved",
                extra={
                    "query": query,
                    "resolved_city": current.resolved_city,
                    "country_code": current.country_code,
                },
            )
        return current

    def resolve_or_raise(self, query: Optional[str]) -> CityGeoResult:
        """Resolve a location query, failing loudly.

        Raises:
            CityResolutionError: If the query could not be resolved.
        """
        city = self.resolve(query)
        if city is None:
            raise CityResolutionError(f"Could not resolve location {query!r}", query=query or "")
        return city

    def needs_disambiguation(self, query: str, city: CityGeoResult) -> bool:
        """Whether a result is too weak to trust as-is.

        True when its importance is under the threshold and its resolved
        city name is the query itself. A result with no city component (a
        region, a park) is kept as-is.
        """
        if city.importance >= self.config.importance_threshold:
            return False
        return city.resolved_city is not None and _same_place_name(city.resolved_city, query)

    def _primary(self, query: str, current: Optional[CityGeoResult]) -> Optional[CityGeoResult]:
        if current is not None:
            return None
        return self._best(query)

    def _disambiguation(
        self, query: str, current: Optional[CityGeoResult]
    ) -> Optional[CityGeoResult]:
        if current is None or not self.needs_disambiguation(query, current):
            return None

        retry = self._best(f"{query} {self.config.disambiguation_suffix}")
        if retry is None or retry.resolved_city is None:
            return None
        if _same_place_name(retry.resolved_city, query):
            return None
        return retry

    def _best(self, query: str) -> Optional[CityGeoResult]:
        """Search and promote the highest-importance candidate."""
        try:
            candidates: Sequence[GeocodeMatch] = self.geocoder.search(
                query,
                limit=self.config.candidate_limit,
            )
        except GeocodingError as e:
            self._logger.warning(
                "City search failed",
                extra={"query": query, "error": str(e), "rate_limited": e.is_rate_limited},
            )
            return None

        if not candidates:
            return None
        # max() keeps the first of equally important candidates
        best = max(candidates, key=lambda c: c.importance)
        return best.to_city()
