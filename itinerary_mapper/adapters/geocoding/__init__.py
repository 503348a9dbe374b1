"""Geocoding adapters - Implementations of GeocoderPort.

Available implementations:
- NominatimGeocoderAdapter: OpenStreetMap Nominatim geocoding
"""

from .nominatim_adapter import NominatimGeocoderAdapter, parse_match

__all__ = ["NominatimGeocoderAdapter", "parse_match"]
