"""Shared fixtures: a scripted geocoder, a fake clock and in-memory storage.

No test touches the network or sleeps.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

import pytest

from itinerary_mapper.adapters.cache import VersionedGeoCache
from itinerary_mapper.adapters.storage import InMemoryStorage
from itinerary_mapper.config import (
    CacheConfig,
    CityResolutionConfig,
    ExtractionConfig,
    OutlierConfig,
    ResolutionConfig,
    reset_config,
)
from itinerary_mapper.domain.models import CityGeoResult, GeocodeMatch
from itinerary_mapper.services import (
    CityResolver,
    GeocodeResolver,
    RouteBuilderService,
)

Response = Union[Sequence[GeocodeMatch], Exception]


@dataclass
class FakeGeocoder:
    """GeocoderPort double answering from a query -> response table.

    Unknown queries return no candidates. A response may be an
    exception instance, which is raised instead.
    """

    responses: Dict[str, Response] = field(default_factory=dict)
    calls: List[Dict[str, Any]] = field(default_factory=list)

    def add(self, query: str, *matches: GeocodeMatch) -> None:
        self.responses[query] = list(matches)

    def fail(self, query: str, error: Exception) -> None:
        self.responses[query] = error

    @property
    def queries(self) -> List[str]:
        return [call["query"] for call in self.calls]

    def search(
        self,
        query: str,
        *,
        limit: int = 1,
        country_codes: Optional[Sequence[str]] = None,
        viewbox=None,
        bounded: bool = False,
    ) -> Sequence[GeocodeMatch]:
        self.calls.append(
            {
                "query": query,
                "limit": limit,
                "country_codes": country_codes,
                "viewbox": viewbox,
                "bounded": bounded,
            }
        )
        response = self.responses.get(query, [])
        if isinstance(response, Exception):
            raise response
        return list(response)[:limit]


class FakeClock:
    """Manually advanced replacement for time.time."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass
class RecordingListener:
    partials: List[Any] = field(default_factory=list)
    finals: List[Any] = field(default_factory=list)

    def on_partial(self, update) -> None:
        self.partials.append(update)

    def on_complete(self, update) -> None:
        self.finals.append(update)


def match(lat: float, lng: float, importance: float = 0.5, **address: str) -> GeocodeMatch:
    return GeocodeMatch(lat=lat, lng=lng, importance=importance, address=address)


PARIS = CityGeoResult(
    lat=48.8566,
    lng=2.3522,
    country_code="fr",
    country="France",
    state="Île-de-France",
    resolved_city="Paris",
    bounding_box=(48.8155, 48.9022, 2.2242, 2.4699),
    importance=0.9,
)

JAPAN = CityGeoResult(
    lat=36.5748,
    lng=139.2394,
    country_code="jp",
    country="日本",
    resolved_city=None,
    bounding_box=(20.2145, 45.7112, 122.7141, 154.2056),
    importance=0.9,
)


@pytest.fixture(autouse=True)
def _fresh_config(monkeypatch, tmp_path):
    """Keep tests away from the user's cache directory and env."""
    monkeypatch.setenv("ITM_CACHE_STORAGE_DIR", str(tmp_path / "cache"))
    reset_config()
    yield
    reset_config()


@pytest.fixture
def fake_geocoder() -> FakeGeocoder:
    return FakeGeocoder()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_storage() -> InMemoryStorage:
    return InMemoryStorage(name="test")


@pytest.fixture
def cache_config(tmp_path) -> CacheConfig:
    return CacheConfig(storage_dir=tmp_path / "cache")


@pytest.fixture
def geo_cache(memory_storage, cache_config, fake_clock) -> VersionedGeoCache:
    return VersionedGeoCache(storage=memory_storage, config=cache_config, clock=fake_clock)


@pytest.fixture
def city_resolver(fake_geocoder) -> CityResolver:
    return CityResolver(geocoder=fake_geocoder, config=CityResolutionConfig())


@pytest.fixture
def geocode_resolver(fake_geocoder, geo_cache) -> GeocodeResolver:
    return GeocodeResolver(
        geocoder=fake_geocoder, cache=geo_cache, config=ResolutionConfig()
    )


@pytest.fixture
def route_builder(city_resolver, geocode_resolver) -> RouteBuilderService:
    return RouteBuilderService(
        city_resolver=city_resolver,
        geocode_resolver=geocode_resolver,
        extraction=ExtractionConfig(),
        outliers=OutlierConfig(),
    )


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()
