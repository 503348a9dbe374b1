"""Typed domain errors for the itinerary mapper.

Adapters raise these errors so that services can tell an expected
external failure (no match, timeout, unreadable storage) apart from a
programming error, then recover by omission at their boundary.

All errors inherit from ItineraryMapperError and can optionally
wrap a root cause exception for debugging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class ItineraryMapperError(Exception):
    """Base error for the itinerary mapper domain.

    All domain-specific errors inherit from this class.

    Attributes:
        message: Human-readable error description
        cause: Optional underlying exception that caused this error
    """

    message: str
    cause: Optional[Exception] = field(default=None, repr=False)

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def __post_init__(self) -> None:
        super().__init__(self.message)


@dataclass
class GeocodingError(ItineraryMapperError):
    """The geocoding service could not answer a query.

    Covers timeouts, unreachable endpoints and throttling. A query that
    simply has no match is not an error, it returns no candidates.

    Attributes:
        query: The free-text query that failed
        is_rate_limited: Whether the failure was due to rate limiting
    """

    query: str = ""
    is_rate_limited: bool = False


@dataclass
class CityResolutionError(ItineraryMapperError):
    """The trip's target location could not be anchored.

    Attributes:
        query: The location text that failed to resolve
    """

    query: str = ""


@dataclass
class CacheError(ItineraryMapperError):
    """The geo cache record could not be decoded.

    Attributes:
        key: Storage key of the record
    """

    key: str = ""


@dataclass
class StorageError(ItineraryMapperError):
    """Reading or writing persisted state failed.

    Attributes:
        path: Location of the backing file, if any
    """

    path: Optional[str] = None


@dataclass
class ConfigurationError(ItineraryMapperError):
    """Invalid or missing configuration.

    Attributes:
        setting_name: Name of the problematic setting
        expected_type: Expected type or format
    """

    setting_name: str = ""
    expected_type: Optional[str] = None
