"""High-level pipeline entry points for the itinerary mapper.

The pipeline is organized in several stages:

1. City anchor resolution (free text to a canonical city).
2. Venue extraction from the itinerary markdown.
3. Venue geocoding, cache first, with distance validation.
4. Outlier rejection and route ordering.

This module wires these stages together through the default container
without implementing any business logic. Each step delegates work to
dedicated, testable modules.
"""

from typing import List, Optional

from .container import Container, get_container
from .domain.models import MapLocation
from .logging_setup import configure_logging
from .services import RouteBuilderService

SAMPLE_ITINERARY = """\
# Day 1

## Morning
Start at [Eiffel Tower](https://www.google.com/maps/search/?api=1&query=Eiffel+Tower,+Paris)
and walk to **Musée d'Orsay**.

## Afternoon
Lunch at [Café de Flore](https://www.google.com/maps/search/?api=1&query=Cafe+de+Flore,+Paris),
then the [Louvre](https://www.google.com/maps/search/?api=1&query=Louvre,+Paris).

## Where to Stay
- [Hôtel du Louvre](https://www.google.com/maps/search/?api=1&query=Hotel+du+Louvre,+Paris)

## Soundtrack
- **La Vie en Rose** - Édith Piaf
"""


def resolve_itinerary_route(
    content: str,
    city: str,
    max_results: Optional[int] = None,
    *,
    container: Optional[Container] = None,
) -> List[MapLocation]:
    """Run the core pipeline on an itinerary and return the route.

    This helper is designed to be reused from other front-ends
    (CLI, web handlers, tests, etc.). It blocks until every venue has
    been tried, so expect roughly one second per uncached venue.

    Returns:
        Locations in visiting order; empty if the city could not be
        resolved or no venue was found.
    """
    container = container or get_container()
    builder: RouteBuilderService = container.resolve(RouteBuilderService)
    final = builder.build(content, city, max_results=max_results)
    if final is None:
        return []
    return list(final.locations)


def run_pipeline() -> None:
    """Resolve the bundled sample itinerary and print the route."""
    configure_logging()
    city = "Paris"
    print("City:", city)

    route = resolve_itinerary_route(SAMPLE_ITINERARY, city)
    if not route:
        print("No route could be built.")
        return

    for index, location in enumerate(route, start=1):
        print(f"{index}. {location.name} ({location.lat:.5f}, {location.lng:.5f})")


if __name__ == "__main__":
    run_pipeline()
