"""Adapters layer - Concrete implementations of ports.

This module contains implementations of the port interfaces,
connecting the application to external systems like:
- Geocoding services (Nominatim)
- Geo caching (versioned persistent cache, null)
- Storage backends (JSON files, in-memory)
"""
