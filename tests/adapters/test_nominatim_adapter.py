"""Tests for the Nominatim geocoder adapter (geopy mocked, no network)."""

from unittest.mock import MagicMock, patch

import pytest
from geopy.exc import GeocoderRateLimited, GeocoderTimedOut

from itinerary_mapper.adapters.geocoding import NominatimGeocoderAdapter, parse_match
from itinerary_mapper.config import GeocodingConfig
from itinerary_mapper.domain.errors import GeocodingError

MODULE = "itinerary_mapper.adapters.geocoding.nominatim_adapter"

LOUVRE_RAW = {
    "lat": "48.8611473",
    "lon": "2.3380277",
    "display_name": "Louvre, Paris, France",
    "importance": 0.82,
    "address": {"city": "Paris", "country_code": "fr", "country": "France"},
    "boundingbox": ["48.8593", "48.8629", "2.3318", "2.3405"],
}


class TestParseMatch:
    def test_parses_nominatim_result(self):
        result = parse_match(LOUVRE_RAW)

        assert result.lat == pytest.approx(48.8611473)
        assert result.lng == pytest.approx(2.3380277)
        assert result.importance == pytest.approx(0.82)
        assert result.city_name == "Paris"
        assert result.bounding_box == (48.8593, 48.8629, 2.3318, 2.3405)

    def test_missing_optional_fields(self):
        result = parse_match({"lat": "1", "lon": "2"})

        assert result.importance == 0.0
        assert result.address == {}
        assert result.bounding_box is None

    @pytest.mark.parametrize(
        "raw",
        [{}, {"lat": "x", "lon": "2"}, {"lat": "91", "lon": "0"}, {"lat": "0", "lon": None}],
    )
    def test_unusable_result_is_skipped(self, raw):
        assert parse_match(raw) is None


class TestNominatimGeocoderAdapter:
    @pytest.fixture
    def config(self):
        return GeocodingConfig(user_agent="itinerary-mapper-tests", rate_limit_delay=1.1)

    @pytest.fixture
    def geocode_fn(self):
        with patch(f"{MODULE}.Nominatim") as nominatim, patch(f"{MODULE}.RateLimiter") as limiter:
            fn = MagicMock()
            limiter.return_value = fn
            fn.nominatim = nominatim
            fn.limiter = limiter
            yield fn

    def test_builds_rate_limited_client_once(self, config, geocode_fn):
        geocode_fn.return_value = []
        adapter = NominatimGeocoderAdapter(config)

        adapter.search("Louvre")
        adapter.search("Orsay")

        geocode_fn.nominatim.assert_called_once_with(
            user_agent="itinerary-mapper-tests",
            domain="nominatim.openstreetmap.org",
            timeout=5.0,
        )
        geocode_fn.limiter.assert_called_once()
        assert geocode_fn.limiter.call_args.kwargs["min_delay_seconds"] == 1.1
        assert geocode_fn.limiter.call_args.kwargs["swallow_exceptions"] is False

    def test_passes_constraints_to_geopy(self, config, geocode_fn):
        geocode_fn.return_value = [MagicMock(raw=LOUVRE_RAW)]
        adapter = NominatimGeocoderAdapter(config)

        matches = adapter.search(
            "Louvre, Paris, France",
            limit=3,
            country_codes=["fr"],
            viewbox=(48.0, 49.0, 2.0, 3.0),
            bounded=True,
        )

        assert len(matches) == 1
        assert matches[0].city_name == "Paris"
        geocode_fn.assert_called_once_with(
            "Louvre, Paris, France",
            exactly_one=False,
            limit=3,
            addressdetails=True,
            language="en",
            country_codes=["fr"],
            viewbox=[(48.0, 2.0), (49.0, 3.0)],
            bounded=True,
        )

    def test_no_result_is_empty(self, config, geocode_fn):
        geocode_fn.return_value = None

        assert NominatimGeocoderAdapter(config).search("Atlantis") == []

    def test_blank_query_skips_network(self, config, geocode_fn):
        assert NominatimGeocoderAdapter(config).search("   ") == []
        geocode_fn.assert_not_called()

    def test_timeout_becomes_geocoding_error(self, config, geocode_fn):
        geocode_fn.side_effect = GeocoderTimedOut("slow")

        with pytest.raises(GeocodingError) as exc_info:
            NominatimGeocoderAdapter(config).search("Louvre")

        assert exc_info.value.query == "Louvre"
        assert not exc_info.value.is_rate_limited
        assert isinstance(exc_info.value.cause, GeocoderTimedOut)

    def test_throttling_is_flagged(self, config, geocode_fn):
        geocode_fn.side_effect = GeocoderRateLimited("429", retry_after=3)

        with pytest.raises(GeocodingError) as exc_info:
            NominatimGeocoderAdapter(config).search("Louvre")

        assert exc_info.value.is_rate_limited
