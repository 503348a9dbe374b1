"""Versioned, TTL-bounded, capacity-bounded geo cache.

The whole cache is one serialized record stored under a fixed key:

    {"version": 2, "entries": {"Louvre|||Paris": {"lat": .., "lng": .., "ts": ..}}}

Rules:
- An entry is valid while ``now - ts < ttl``.
- A record whose version differs from the configured one is discarded
  as a whole. Older generations were produced without geographic
  constraints and must not be reused.
- When a write pushes the entry count over ``max_entries`` the oldest
  entries are evicted until ``retained_entries`` remain.
- An unreadable record is an empty cache; the next write replaces it.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel, Field, ValidationError

from ...config import CacheConfig, get_config
from ...domain.errors import CacheError, StorageError
from ...domain.models import Coordinates
from ...ports.cache import StoragePort
from ..storage.memory_storage import InMemoryStorage

KEY_SEPARATOR = "|||"


class CacheEntryRecord(BaseModel):
    """One cached coordinate pair; ``ts`` is epoch milliseconds."""

    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)
    ts: int


class CacheStoreRecord(BaseModel):
    """The persisted cache record.

    ``version`` is optional so that records written before versioning
    parse and are then discarded as a version mismatch.
    """

    version: Optional[int] = None
    entries: Dict[str, CacheEntryRecord] = Field(default_factory=dict)


@dataclass
class VersionedGeoCache:
    """Persistent (place, city) -> coordinates cache.

    This cache implements the GeoCachePort protocol. Every operation
    reloads the record from storage so concurrent runs sharing the same
    storage see each other's writes; read-modify-write cycles within the
    process are serialized by a lock.

    Attributes:
        storage: Backend holding the serialized record
        config: Cache policy (TTL, version, capacity)
        clock: Returns the current time in seconds since the epoch

    Example:
        cache = VersionedGeoCache(storage=JsonFileStorage(Path("/tmp/geo")))
        cache.put("Louvre", "Paris", Coordinates(48.8606, 2.3376))
        cache.get("Louvre", "Paris")
    """

    storage: StoragePort = field(default_factory=lambda: InMemoryStorage(name="geocache"))
    config: CacheConfig = field(default_factory=lambda: get_config().cache)
    clock: Callable[[], float] = field(default=time.time, repr=False)

    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    # Statistics
    _hits: int = field(default=0, repr=False)
    _misses: int = field(default=0, repr=False)
    _expired: int = field(default=0, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    @staticmethod
    def build_key(place: str, city: str) -> str:
        """Generate the cache key for a place in a city.

        The key is case-sensitive: ``Louvre|||Paris`` and
        ``louvre|||paris`` are different entries.

        Example:
            >>> VersionedGeoCache.build_key("Louvre", "Paris")
            'Louvre|||Paris'
        """
        return f"{place}{KEY_SEPARATOR}{city}"

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    def _decode(self, raw: str) -> CacheStoreRecord:
        try:
            return CacheStoreRecord.model_validate_json(raw)
        except ValidationError as e:
            raise CacheError(
                "Cache record is corrupted", key=self.config.storage_key, cause=e
            )

    def load(self) -> Dict[str, CacheEntryRecord]:
        """Load all entries from storage.

        A version mismatch wipes the stored record as a side effect.

        Returns:
            Mapping of cache key to entry, empty if storage is missing,
            unreadable or from another cache generation.
        """
        key = self.config.storage_key
        with self._lock:
            try:
                raw = self.storage.read(key)
            except StorageError as e:
                self._logger.warning(
                    "Cache storage unreadable, starting empty",
                    extra={"key": key, "error": str(e)},
                )
                return {}

            if raw is None:
                return {}

            try:
                record = self._decode(raw)
            except CacheError as e:
                self._logger.warning(
                    "Cache record corrupted, starting empty",
                    extra={"key": key, "error": str(e)},
                )
                return {}

            if record.version != self.config.version:
                self._logger.info(
                    "Cache version mismatch, discarding all entries",
                    extra={
                        "key": key,
                        "stored_version": record.version,
                        "expected_version": self.config.version,
                        "entries_discarded": len(record.entries),
                    },
                )
                self.save({})
                return {}

            return dict(record.entries)

    def save(self, entries: Dict[str, CacheEntryRecord]) -> None:
        """Persist ``entries`` under the current version.

        Storage failures are logged and ignored; the in-memory state of
        the caller is unaffected and the next write retries.
        """
        record = CacheStoreRecord(version=self.config.version, entries=entries)
        with self._lock:
            try:
                self.storage.write(self.config.storage_key, record.model_dump_json())
            except StorageError as e:
                self._logger.warning(
                    "Cache write failed",
                    extra={"key": self.config.storage_key, "error": str(e)},
                )

    def get(self, place: str, city: str) -> Optional[Coordinates]:
        """Get cached coordinates for a place in a city.

        Args:
            place: Venue name.
            city: City name.

        Returns:
            The cached coordinates, or None if absent, expired, or the
            stored record belongs to another cache version.
        """
        key = self.build_key(place, city)
        with self._lock:
            entry = self.load().get(key)
            if entry is None:
                self._misses += 1
                return None

            age_ms = self._now_ms() - entry.ts
            if age_ms >= self.config.ttl_seconds * 1000:
                self._logger.debug(
                    "Cache entry expired",
                    extra={"key": key, "age_seconds": age_ms // 1000},
                )
                self._expired += 1
                self._misses += 1
                return None

            self._hits += 1
            return Coordinates(lat=entry.lat, lng=entry.lng)

    def put(self, place: str, city: str, coords: Coordinates) -> None:
        """Store coordinates for a place in a city, stamped with now.

        Args:
            place: Venue name.
            city: City name.
            coords: Coordinates that passed distance validation.
        """
        key = self.build_key(place, city)
        with self._lock:
            entries = self.load()
            entries[key] = CacheEntryRecord(
                lat=coords.lat, lng=coords.lng, ts=self._now_ms()
            )
            if len(entries) > self.config.max_entries:
                entries = self._evict_oldest(entries)
            self.save(entries)

        self._logger.debug(
            "Cache entry set",
            extra={"key": key, "lat": coords.lat, "lng": coords.lng},
        )

    def _evict_oldest(
        self, entries: Dict[str, CacheEntryRecord]
    ) -> Dict[str, CacheEntryRecord]:
        """Keep only the ``retained_entries`` most recently written entries."""
        keep = self.config.retained_entries
        by_age = sorted(entries, key=lambda k: entries[k].ts)
        evicted = by_age[: len(by_age) - keep]
        for key in evicted:
            del entries[key]

        self._logger.info(
            "Cache evicted entries",
            extra={"evicted": len(evicted), "remaining": len(entries)},
        )
        return entries

    def clear(self) -> int:
        """Clear all entries from the cache.

        Returns:
            Number of entries that were cleared.
        """
        with self._lock:
            count = len(self.load())
            self.save({})
            self._hits = 0
            self._misses = 0
            self._expired = 0
            self._logger.info("Cache cleared", extra={"entries_cleared": count})
            return count

    def size(self) -> int:
        """Return the number of stored entries, expired ones included."""
        return len(self.load())

    def stats(self) -> Dict[str, Any]:
        """Return cache statistics.

        Returns:
            Dictionary with hit/miss counts and size.
        """
        with self._lock:
            total = self._hits + self._misses
            hit_rate = (self._hits / total * 100) if total > 0 else 0.0
            return {
                "size": self.size(),
                "hits": self._hits,
                "misses": self._misses,
                "expired": self._expired,
                "hit_rate_percent": round(hit_rate, 1),
            }
