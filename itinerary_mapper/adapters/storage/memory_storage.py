"""Thread-safe in-memory storage implementation.

Holds serialized records in a dict for the lifetime of the process.
Used by tests and by short-lived runs that should not touch the disk.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass
class InMemoryStorage:
    """Thread-safe in-memory key/value storage.

    This storage implements the StoragePort protocol.

    Attributes:
        name: Storage name for logging

    Example:
        storage = InMemoryStorage(name="geocache")
        cache = VersionedGeoCache(storage=storage)
    """

    name: str = "memory"

    _records: Dict[str, str] = field(default_factory=dict, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(f"storage.{self.name}")

    def read(self, key: str) -> Optional[str]:
        """Read the record stored under ``key``.

        Args:
            key: The storage key.

        Returns:
            The stored record, or None if nothing is stored.
        """
        with self._lock:
            return self._records.get(key)

    def write(self, key: str, value: str) -> None:
        """Replace the record stored under ``key``.

        Args:
            key: The storage key.
            value: The serialized record.
        """
        with self._lock:
            self._records[key] = value
            self._logger.debug(
                "Record written",
                extra={"key": key, "bytes": len(value)},
            )

    def delete(self, key: str) -> bool:
        """Delete the record stored under ``key``.

        Args:
            key: The storage key.

        Returns:
            True if the key existed and was removed.
        """
        with self._lock:
            if key in self._records:
                del self._records[key]
                self._logger.debug("Record deleted", extra={"key": key})
                return True
            return False

    def keys(self) -> list[str]:
        """Return all stored keys.

        Returns:
            List of storage keys.
        """
        with self._lock:
            return list(self._records.keys())
