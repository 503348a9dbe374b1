import random
from collections import Counter

from itinerary_mapper.domain.models import MapLocation
from itinerary_mapper.routing.nearest_neighbor import optimize_route


def test_visits_nearest_remaining_first():
    start = MapLocation("start", 0, 0)
    far = MapLocation("far", 10, 10)
    near = MapLocation("near", 1, 1)
    mid = MapLocation("mid", 5, 5)

    assert optimize_route([start, far, near, mid]) == [start, near, mid, far]


def test_result_is_a_permutation_starting_at_first_element():
    rng = random.Random(7)
    locations = [MapLocation(f"p{i}", rng.uniform(-5, 5), rng.uniform(-5, 5)) for i in range(12)]
    locations.append(locations[3])

    route = optimize_route(locations)

    assert Counter(route) == Counter(locations)
    assert route[0] == locations[0]


def test_deterministic_and_input_untouched():
    locations = [MapLocation(f"p{i}", i % 3, i % 5) for i in range(8)]
    snapshot = list(locations)

    first = optimize_route(locations)

    assert optimize_route(locations) == first
    assert locations == snapshot


def test_ties_go_to_earliest_element():
    start = MapLocation("start", 0, 0)
    east = MapLocation("east", 0, 1)
    west = MapLocation("west", 0, -1)

    assert optimize_route([start, east, west])[1] == east
    assert optimize_route([start, west, east])[1] == west


def test_trivial_inputs_are_unchanged():
    a = MapLocation("a", 0, 0)
    b = MapLocation("b", 5, 5)

    assert optimize_route([]) == []
    assert optimize_route([a]) == [a]
    assert optimize_route([b, a]) == [b, a]
