import math

import pytest

from itinerary_mapper.domain.models import MapLocation
from itinerary_mapper.routing.geometry import (
    bounding_box_radius_km,
    centroid,
    distance_km,
    viewbox_around,
)

TOKYO = (35.6762, 139.6503)
KYOTO = (35.0116, 135.7681)


def test_distance_to_self_is_zero():
    assert distance_km(*TOKYO, *TOKYO) == 0


def test_distance_is_symmetric():
    assert distance_km(*TOKYO, *KYOTO) == pytest.approx(distance_km(*KYOTO, *TOKYO))


def test_tokyo_to_kyoto():
    assert 350 <= distance_km(*TOKYO, *KYOTO) <= 400


def test_bounding_box_radius_is_half_the_diagonal():
    box = (48.8155, 48.9022, 2.2242, 2.4699)

    radius = bounding_box_radius_km(box)

    assert radius == pytest.approx(distance_km(48.8155, 2.2242, 48.9022, 2.4699) / 2)
    assert 8 < radius < 12
    assert bounding_box_radius_km(None) == 0.0


def test_viewbox_around_point():
    south, north, west, east = viewbox_around(48.8566, 2.3522, 80)

    assert north - south == pytest.approx(2 * 80 / 111)
    lng_span = 2 * 80 / (111 * math.cos(math.radians(48.8566)))
    assert east - west == pytest.approx(lng_span)
    assert south < 48.8566 < north
    assert west < 2.3522 < east


def test_viewbox_is_clamped():
    south, north, west, east = viewbox_around(89.9, 179.9, 500)

    assert north == 90.0
    assert east == 180.0
    assert -90.0 <= south and -180.0 <= west


def test_centroid():
    points = [MapLocation("a", 0, 0), MapLocation("b", 2, 4)]

    assert centroid(points) == (1, 2)

    with pytest.raises(ValueError):
        centroid([])
