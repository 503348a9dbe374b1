"""Null geo cache implementation for testing.

This cache always misses, ensuring that tests don't accidentally
depend on cached state from previous tests. Use this cache in
test fixtures to force every place through the geocoder.

Example:
    @pytest.fixture
    def resolver(fake_geocoder):
        return GeocodeResolver(geocoder=fake_geocoder, cache=NullGeoCache())
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from ...domain.models import Coordinates


@dataclass
class NullGeoCache:
    """No-op geo cache for testing - always misses.

    This cache implements the GeoCachePort protocol but never actually
    caches anything. Every get() returns None, every put() is dropped.
    """

    name: str = "null"

    def get(self, place: str, city: str) -> Optional[Coordinates]:
        """Always returns None (cache miss)."""
        return None

    def put(self, place: str, city: str, coords: Coordinates) -> None:
        """Does nothing."""
        pass

    def clear(self) -> int:
        """Does nothing, returns 0."""
        return 0

    def size(self) -> int:
        """Always returns 0."""
        return 0

    def stats(self) -> Dict[str, int]:
        """Return empty stats.

        Returns:
            Dictionary with all zeros.
        """
        return {
            "size": 0,
            "hits": 0,
            "misses": 0,
            "expired": 0,
            "hit_rate_percent": 0,
        }
