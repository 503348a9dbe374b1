"""JSON file storage implementation.

Each key maps to ``<directory>/<key>.json``. Writes go to a temporary
file in the same directory and are moved into place, so a crash never
leaves a half-written record behind.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ...config import CacheConfig, get_config
from ...domain.errors import StorageError

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")


@dataclass
class JsonFileStorage:
    """File-backed key/value storage.

    This storage implements the StoragePort protocol.

    Attributes:
        directory: Directory holding one file per key
    """

    directory: Path = field(default_factory=lambda: get_config().cache.storage_dir)

    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.directory = Path(self.directory)
        self._logger = logging.getLogger(__name__)

    @classmethod
    def from_config(cls, config: CacheConfig) -> JsonFileStorage:
        return cls(directory=config.storage_dir)

    def path_for(self, key: str) -> Path:
        """Return the file backing ``key``."""
        safe = _UNSAFE_KEY_CHARS.sub("_", key).strip("._") or "record"
        return self.directory / f"{safe}.json"

    def read(self, key: str) -> Optional[str]:
        """Read the record stored under ``key``.

        Raises:
            StorageError: If the file exists but cannot be read.
        """
        path = self.path_for(key)
        with self._lock:
            try:
                return path.read_text(encoding="utf-8")
            except FileNotFoundError:
                return None
            except (OSError, UnicodeDecodeError) as e:
                raise StorageError(
                    f"Could not read {key!r}", path=str(path), cause=e
                )

    def write(self, key: str, value: str) -> None:
        """Atomically replace the record stored under ``key``.

        Raises:
            StorageError: If the directory or file cannot be written.
        """
        path = self.path_for(key)
        with self._lock:
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(
                    dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp"
                )
                try:
                    with os.fdopen(fd, "w", encoding="utf-8") as fh:
                        fh.write(value)
                    os.replace(tmp_name, path)
                except BaseException:
                    Path(tmp_name).unlink(missing_ok=True)
                    raise
            except OSError as e:
                raise StorageError(
                    f"Could not write {key!r}", path=str(path), cause=e
                )

        self._logger.debug(
            "Record written",
            extra={"key": key, "path": str(path), "bytes": len(value)},
        )

    def delete(self, key: str) -> bool:
        """Delete the record stored under ``key``.

        Returns:
            True if the file existed and was removed.
        """
        path = self.path_for(key)
        with self._lock:
            try:
                path.unlink()
            except FileNotFoundError:
                return False
            except OSError as e:
                raise StorageError(
                    f"Could not delete {key!r}", path=str(path), cause=e
                )
        return True
