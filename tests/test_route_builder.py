"""Tests for one itinerary-to-route run."""

import threading

import pytest

from conftest import RecordingListener, match
from itinerary_mapper.config import ExtractionConfig
from itinerary_mapper.domain.models import Coordinates
from itinerary_mapper.services import RouteBuilderService

VENUES = {
    "Louvre Museum": (48.8606, 2.3376),
    "Musée d'Orsay": (48.8600, 2.3266),
    "Centre Pompidou": (48.8607, 2.3522),
    "Sainte-Chapelle": (48.8554, 2.3450),
    "Palais Garnier": (48.8720, 2.3316),
    "Panthéon": (48.8462, 2.3464),
    "Hôtel Lutetia": (48.8512, 2.3266),
    "Château de Versailles": (48.8049, 2.1204),
}


def itinerary(*names, stay=()):
    text = "# Day 1\n## Morning\n" + "".join(f"- **{name}**\n" for name in names)
    if stay:
        text += "## Where to Stay\n" + "".join(f"- **{name}**\n" for name in stay)
    return text + "## Soundtrack\n- **Ne me quitte pas**\n"


@pytest.fixture
def paris_geocoder(fake_geocoder):
    fake_geocoder.add(
        "Paris",
        match(48.8566, 2.3522, importance=0.9, city="Paris", country_code="fr", country="France"),
    )
    for name, coords in VENUES.items():
        fake_geocoder.add(f"{name}, Paris, France", match(*coords))
    return fake_geocoder


def venue_queries(geocoder):
    return [q for q in geocoder.queries if q != "Paris"]


def test_end_to_end_keeps_accommodation(route_builder, paris_geocoder, listener):
    names = ["Louvre Museum", "Musée d'Orsay", "Centre Pompidou",
             "Sainte-Chapelle", "Palais Garnier", "Panthéon"]
    content = itinerary(*names, stay=["Hôtel Lutetia"])

    final = route_builder.build(content, "Paris", max_results=5, listener=listener)

    assert final.is_final
    assert len(final.locations) <= 5 + 4
    assert "Hôtel Lutetia" in final.names
    assert final.total_places == 5
    assert final.resolved_count == 5
    assert listener.finals == [final]
    assert len(listener.partials) == 5
    assert not any(update.is_final for update in listener.partials)
    assert [len(u.locations) for u in listener.partials] == [1, 2, 3, 4, 5]


def test_unresolved_city_emits_nothing(route_builder, fake_geocoder, listener):
    content = itinerary("Louvre Museum")

    assert route_builder.build(content, "Atlantis", listener=listener) is None
    assert listener.partials == [] and listener.finals == []
    assert fake_geocoder.queries == ["Atlantis"]


def test_cached_places_take_the_fast_path(route_builder, paris_geocoder, geo_cache, listener):
    geo_cache.put("Louvre Museum", "Paris", Coordinates(*VENUES["Louvre Museum"]))
    geo_cache.put("Centre Pompidou", "Paris", Coordinates(*VENUES["Centre Pompidou"]))
    content = itinerary("Louvre Museum", "Musée d'Orsay", "Centre Pompidou")

    final = route_builder.build(content, "Paris", listener=listener)

    assert sorted(listener.partials[0].names) == ["Centre Pompidou", "Louvre Museum"]
    assert venue_queries(paris_geocoder) == ["Musée d'Orsay, Paris, France"]
    assert sorted(final.names) == ["Centre Pompidou", "Louvre Museum", "Musée d'Orsay"]


def test_rejected_cache_hit_is_dropped(route_builder, paris_geocoder, geo_cache):
    geo_cache.put("Louvre Museum", "Paris", Coordinates(45.7640, 4.8357))

    final = route_builder.build(itinerary("Louvre Museum", "Panthéon"), "Paris")

    assert final.names == ["Panthéon"]
    assert venue_queries(paris_geocoder) == ["Panthéon, Paris, France"]


def test_embedded_coordinates_skip_the_geocoder(route_builder, paris_geocoder, geo_cache):
    content = (
        "# Day 1\n"
        "[Eiffel Tower](https://www.google.com/maps/place/Eiffel+Tower/@48.8584,2.2945,17z)\n"
    )

    final = route_builder.build(content, "Paris")

    assert final.names == ["Eiffel Tower"]
    assert venue_queries(paris_geocoder) == []
    assert geo_cache.get("Eiffel Tower", "Paris") == Coordinates(48.8584, 2.2945)


def test_outlier_is_filtered_but_counted(route_builder, paris_geocoder):
    content = itinerary(
        "Louvre Museum", "Musée d'Orsay", "Centre Pompidou",
        "Sainte-Chapelle", "Château de Versailles",
    )

    final = route_builder.build(content, "Paris")

    assert "Château de Versailles" not in final.names
    assert len(final.locations) == 4
    assert final.resolved_count == 5


def test_default_budget_comes_from_day_count(route_builder, paris_geocoder):
    names = [f"Venue Number {chr(65 + i)}" for i in range(12)]

    final = route_builder.build(itinerary(*names), "Paris")

    assert final.total_places == 10


def test_cancellation_stops_emissions_and_keeps_cache(route_builder, paris_geocoder, geo_cache):
    cancel = threading.Event()

    class CancellingListener(RecordingListener):
        def on_partial(self, update):
            super().on_partial(update)
            cancel.set()

    listener = CancellingListener()
    content = itinerary("Louvre Museum", "Musée d'Orsay", "Centre Pompidou")

    result = route_builder.build(content, "Paris", listener=listener, cancel_event=cancel)

    assert result is None
    assert len(listener.partials) == 1
    assert listener.finals == []
    assert venue_queries(paris_geocoder) == ["Louvre Museum, Paris, France"]
    assert geo_cache.get("Louvre Museum", "Paris") is not None


def test_cancelled_before_start_does_nothing(route_builder, paris_geocoder):
    cancel = threading.Event()
    cancel.set()

    assert route_builder.build(itinerary("Louvre Museum"), "Paris", cancel_event=cancel) is None
    assert paris_geocoder.calls == []


def test_failing_listener_does_not_abort_run(route_builder, paris_geocoder):
    class ExplodingListener(RecordingListener):
        def on_partial(self, update):
            raise RuntimeError("renderer crashed")

    listener = ExplodingListener()

    final = route_builder.build(itinerary("Louvre Museum", "Panthéon"), "Paris", listener=listener)

    assert len(final.locations) == 2
    assert listener.finals == [final]


def test_extraction_settings_come_from_environment(
    monkeypatch, city_resolver, geocode_resolver, paris_geocoder
):
    monkeypatch.setenv("ITM_EXTRACT_PLACES_PER_DAY", "5")
    builder = RouteBuilderService(
        city_resolver=city_resolver,
        geocode_resolver=geocode_resolver,
        extraction=ExtractionConfig(),
    )
    names = [f"Venue Number {chr(65 + i)}" for i in range(12)]

    final = builder.build(itinerary(*names), "Paris")

    assert final.total_places == 5
    assert set(ExtractionConfig.model_fields) == {"stay_slots", "places_per_day", "max_places"}
