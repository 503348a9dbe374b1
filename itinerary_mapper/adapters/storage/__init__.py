"""Storage adapters - Implementations of the StoragePort.

Available implementations:
- JsonFileStorage: One JSON file per key, atomic replace on write
- InMemoryStorage: Thread-safe dict, for tests and ephemeral runs
"""

from .file_storage import JsonFileStorage
from .memory_storage import InMemoryStorage

__all__ = ["JsonFileStorage", "InMemoryStorage"]
