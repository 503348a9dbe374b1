"""Geocoding port - Abstraction for free-text place search.

This protocol defines the contract for geocoding services, allowing
different implementations (Nominatim, a test double, etc.) to be used.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol, Sequence

if TYPE_CHECKING:
    from ..domain.models import BoundingBox, GeocodeMatch


class GeocoderPort(Protocol):
    """Port for geocoding services.

    Implementation: adapters/geocoding/nominatim_adapter.py

    The implementation owns the outbound rate limit and the request
    timeout, so callers can issue queries back to back.
    """

    def search(
        self,
        query: str,
        *,
        limit: int = 1,
        country_codes: Optional[Sequence[str]] = None,
        viewbox: Optional[BoundingBox] = None,
        bounded: bool = False,
    ) -> Sequence[GeocodeMatch]:
        """Search the service for a free-text query.

        Args:
            query: Free-text query (e.g., "Louvre, Paris, France").
            limit: Maximum number of candidates to return.
            country_codes: Restrict results to these ISO country codes.
            viewbox: Preferred area as (south, north, west, east).
            bounded: If True, only return results inside the viewbox.

        Returns:
            Candidates in the service's relevance order, empty if none.

        Raises:
            GeocodingError: If the service timed out or is unavailable.
        """
        ...
