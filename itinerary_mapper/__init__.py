"""Top-level package for the itinerary mapper project.

This package turns generated itinerary text into an ordered list of
geocoded, validated venues ready for a map renderer:

- ``nlp``: venue extraction from itinerary markdown
- ``routing``: distances, outlier rejection and route ordering
- ``services``: city and venue resolution, route runs and sessions
- ``adapters``: Nominatim geocoding, the geo cache and its storage
"""
