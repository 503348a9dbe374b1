"""Cache ports - Injectable geo cache and storage abstractions.

These protocols replace a module-level cache with explicit objects that
are passed into the pipeline. The geo cache keeps the "load once,
mutate, persist" lifecycle behind its own methods; the storage port is
the raw key/value backend it persists to.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional, Protocol

if TYPE_CHECKING:
    from ..domain.models import Coordinates


class GeoCachePort(Protocol):
    """Port for the (place, city) -> coordinates cache.

    Implementations:
    - adapters/cache/geo_cache.py (VersionedGeoCache) - Production
    - adapters/cache/null_cache.py (NullGeoCache) - Testing
    """

    def get(self, place: str, city: str) -> Optional[Coordinates]:
        """Get cached coordinates for a place in a city.

        Args:
            place: Venue name, case-sensitive.
            city: City name, case-sensitive.

        Returns:
            The cached coordinates, or None if absent or expired.
        """
        ...

    def put(self, place: str, city: str, coords: Coordinates) -> None:
        """Store coordinates for a place in a city.

        Args:
            place: Venue name, case-sensitive.
            city: City name, case-sensitive.
            coords: Validated coordinates to store.
        """
        ...

    def clear(self) -> int:
        """Clear all entries from the cache.

        Returns:
            Number of entries that were cleared.
        """
        ...

    def size(self) -> int:
        """Return the number of entries in the cache.

        Returns:
            Current number of cached entries, expired ones included.
        """
        ...

    def stats(self) -> Dict[str, Any]:
        """Return hit/miss statistics."""
        ...


class StoragePort(Protocol):
    """Port for persisting serialized records under a fixed key.

    Implementations:
    - adapters/storage/file_storage.py (JsonFileStorage)
    - adapters/storage/memory_storage.py (InMemoryStorage)
    """

    def read(self, key: str) -> Optional[str]:
        """Read the record stored under ``key``.

        Returns:
            The serialized record, or None if nothing is stored.

        Raises:
            StorageError: If the backend could not be read.
        """
        ...

    def write(self, key: str, value: str) -> None:
        """Replace the record stored under ``key``.

        Raises:
            StorageError: If the backend could not be written.
        """
        ...

    def delete(self, key: str) -> bool:
        """Delete the record stored under ``key``.

        Returns:
            True if a record existed and was removed.
        """
        ...
