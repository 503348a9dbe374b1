"""Nominatim geocoder adapter.

This adapter wraps geopy's Nominatim client with:
- Configuration injection (user agent, endpoint, timeout)
- Rate limiting shared by every outbound call
- Viewbox and country-code constraints
- Typed errors instead of geopy exceptions
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence

from geopy.exc import GeocoderRateLimited, GeopyError
from geopy.extra.rate_limiter import RateLimiter
from geopy.geocoders import Nominatim

from ...config import GeocodingConfig, get_config
from ...domain.errors import GeocodingError
from ...domain.models import BoundingBox, GeocodeMatch


def _parse_bounding_box(raw: Any) -> Optional[BoundingBox]:
    """Parse Nominatim's ``boundingbox`` ([south, north, west, east] strings)."""
    if not isinstance(raw, (list, tuple)) or len(raw) != 4:
        return None
    try:
        south, north, west, east = (float(v) for v in raw)
    except (TypeError, ValueError):
        return None
    return (south, north, west, east)


def parse_match(raw: Mapping[str, Any]) -> Optional[GeocodeMatch]:
    """Convert one raw Nominatim result into a GeocodeMatch.

    Returns None for results without usable coordinates.
    """
    try:
        lat = float(raw["lat"])
        lng = float(raw["lon"])
    except (KeyError, TypeError, ValueError):
        return None
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        return None

    try:
        importance = float(raw.get("importance") or 0.0)
    except (TypeError, ValueError):
        importance = 0.0

    address = raw.get("address") or {}
    return GeocodeMatch(
        lat=lat,
        lng=lng,
        display_name=str(raw.get("display_name") or ""),
        importance=importance,
        address={str(k): str(v) for k, v in address.items()},
        bounding_box=_parse_bounding_box(raw.get("boundingbox")),
    )


@dataclass
class NominatimGeocoderAdapter:
    """Nominatim geocoder adapter with rate limiting.

    This adapter implements GeocoderPort using OpenStreetMap's Nominatim
    geocoding service. All searches go through one RateLimiter, so two
    consecutive requests are always at least ``rate_limit_delay`` apart.

    Attributes:
        config: Geocoding configuration
    """

    config: GeocodingConfig = field(default_factory=lambda: get_config().geocoding)

    _geolocator: Optional[Nominatim] = field(default=None, repr=False)
    _geocode_fn: Optional[Any] = field(default=None, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def _get_geocoder(self) -> Any:
        """Get or initialize the geocoder with rate limiting."""
        if self._geocode_fn is not None:
            return self._geocode_fn

        self._logger.debug(
            "Initializing Nominatim geocoder",
            extra={
                "user_agent": self.config.user_agent,
                "domain": self.config.domain,
                "timeout": self.config.timeout_seconds,
            },
        )

        self._geolocator = Nominatim(
            user_agent=self.config.user_agent,
            domain=self.config.domain,
            timeout=self.config.timeout_seconds,
        )

        self._geocode_fn = RateLimiter(
            self._geolocator.geocode,
            min_delay_seconds=self.config.rate_limit_delay,
            max_retries=self.config.max_retries,
            error_wait_seconds=self.config.error_wait_seconds,
            swallow_exceptions=False,  # surfaced as GeocodingError below
        )

        return self._geocode_fn

    def search(
        self,
        query: str,
        *,
        limit: int = 1,
        country_codes: Optional[Sequence[str]] = None,
        viewbox: Optional[BoundingBox] = None,
        bounded: bool = False,
    ) -> Sequence[GeocodeMatch]:
        """Search Nominatim for a free-text query.

        Args:
            query: Free-text query.
            limit: Maximum number of candidates.
            country_codes: Restrict results to these ISO country codes.
            viewbox: Preferred area as (south, north, west, east).
            bounded: If True, only return results inside the viewbox.

        Returns:
            Parsed candidates in Nominatim's order, empty if none.

        Raises:
            GeocodingError: On timeout, throttling or service failure.
        """
        if not query or not query.strip():
            return []

        params: dict[str, Any] = {
            "exactly_one": False,
            "limit": limit,
            "addressdetails": True,
        }
        if self.config.language:
            params["language"] = self.config.language
        if country_codes:
            params["country_codes"] = list(country_codes)
        if viewbox is not None:
            south, north, west, east = viewbox
            params["viewbox"] = [(south, west), (north, east)]
            params["bounded"] = bounded

        try:
            geocode_fn = self._get_geocoder()
            locations = geocode_fn(query, **params)
        except GeocoderRateLimited as e:
            self._logger.warning(
                "Geocode rate limited",
                extra={"query": query, "retry_after": e.retry_after},
            )
            raise GeocodingError(
                "Geocoding service is throttling requests",
                query=query,
                is_rate_limited=True,
                cause=e,
            )
        except GeopyError as e:
            self._logger.warning(
                "Geocode service error",
                extra={"query": query, "error": str(e)},
            )
            raise GeocodingError("Geocoding request failed", query=query, cause=e)
        except Exception as e:
            self._logger.error(
                "Geocode unexpected error",
                extra={"query": query, "error": str(e)},
            )
            raise GeocodingError("Geocoding request failed", query=query, cause=e)

        if not locations:
            self._logger.debug("Geocode returned no result", extra={"query": query})
            return []

        matches = [m for m in (parse_match(loc.raw) for loc in locations) if m]
        self._logger.debug(
            "Geocode success",
            extra={"query": query, "candidates": len(matches)},
        )
        return matches
