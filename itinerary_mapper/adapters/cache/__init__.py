"""Cache adapters - Implementations of the GeoCachePort.

Available implementations:
- VersionedGeoCache: Persistent cache with TTL, versioning and eviction
- NullGeoCache: No-op cache for testing (always misses)
"""

from .geo_cache import CacheEntryRecord, CacheStoreRecord, VersionedGeoCache
from .null_cache import NullGeoCache

__all__ = [
    "VersionedGeoCache",
    "NullGeoCache",
    "CacheEntryRecord",
    "CacheStoreRecord",
]
