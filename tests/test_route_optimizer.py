import math
import random

import pytest

from src.fieldroute.models.domain import Coordinates
from src.fieldroute.services.geospatial import EARTH_RADIUS_KM
from src.fieldroute.services.routing.models import Route, Stop
from src.fieldroute.services.routing.optimizer import optimize, optimize_route, tour_length_km

ONE_DEGREE_KM = EARTH_RADIUS_KM * math.pi / 180
ORIGIN = Coordinates(0, 0)


def _stop(sid: str, lat: float | None, lon: float | None, order: int = 0) -> Stop:
    coordinates = Coordinates(lat, lon) if lat is not None else None
    return Stop(id=sid, claim_id=f"claim-{sid}", address=f"{sid} Street", coordinates=coordinates, order=order)


def test_already_nearest_order_is_kept():
    stops = [_stop("a", 0, 0, 0), _stop("b", 0, 1, 1), _stop("c", 0, 2, 2)]

    result = optimize(stops, ORIGIN)

    assert [stop.id for stop in result] == ["a", "b", "c"]
    assert tour_length_km(result, ORIGIN) == pytest.approx(2 * ONE_DEGREE_KM)


def test_reorders_by_nearest_neighbor():
    stops = [_stop("far", 0, 3, 0), _stop("near", 0, 1, 1), _stop("mid", 0, 2, 2)]

    result = optimize(stops, ORIGIN)

    assert [stop.id for stop in result] == ["near", "mid", "far"]
    assert [stop.order for stop in result] == [0, 1, 2]


@pytest.mark.parametrize("count", [0, 1, 2])
def test_short_routes_are_returned_unchanged(count):
    stops = [_stop("x", 0, 5, 7), _stop("y", 0, 1, 9)][:count]

    result = optimize(stops, ORIGIN)

    assert [stop.id for stop in result] == [stop.id for stop in stops]
    assert [stop.order for stop in result] == [7, 9][:count]


def test_stops_without_coordinates_go_last():
    stops = [_stop("unknown", None, None), _stop("two", 0, 2), _stop("one", 0, 1)]

    result = optimize(stops, ORIGIN)

    assert [stop.id for stop in result] == ["one", "two", "unknown"]


def test_equal_distances_keep_first_candidate():
    # all three are exactly one degree from the origin
    stops = [_stop("east", 0, 1), _stop("north", 1, 0), _stop("west", 0, -1)]
    assert [stop.id for stop in optimize(stops, ORIGIN)] == ["east", "north", "west"]

    swapped = [_stop("north", 1, 0), _stop("east", 0, 1), _stop("west", 0, -1)]
    assert [stop.id for stop in optimize(swapped, ORIGIN)] == ["north", "east", "west"]


def test_output_is_permutation_and_never_longer_than_input():
    rng = random.Random(42)
    for _ in range(20):
        stops = [
            _stop(f"s{i}", rng.uniform(21.3, 21.8), rng.uniform(39.0, 39.5), i)
            for i in range(rng.randint(3, 15))
        ]
        start = Coordinates(21.5, 39.2)
        naive_length = tour_length_km(stops, start)

        result = optimize(list(stops), start)

        assert len(result) == len(stops)
        assert {stop.id for stop in result} == {stop.id for stop in stops}
        assert [stop.order for stop in result] == list(range(len(result)))
        assert tour_length_km(result, start) <= naive_length + 1e-9


def test_input_order_kept_when_greedy_tour_is_longer():
    # greedy goes to the near stop first and then has to cross back over the start
    stops = [_stop("left", 0, -1.2), _stop("right_near", 0, 1), _stop("right_far", 0, 2)]
    greedy = [stops[1], stops[2], stops[0]]
    assert tour_length_km(stops, ORIGIN) < tour_length_km(greedy, ORIGIN)

    result = optimize(stops, ORIGIN)

    assert [stop.id for stop in result] == ["left", "right_near", "right_far"]


def test_optimize_route_marks_route_and_refreshes_totals():
    stops = [_stop("far", 0, 3, 0), _stop("near", 0, 1, 1), _stop("mid", 0, 2, 2)]
    route = Route(id="route_1", date="2026-10-20", stops=stops, total_distance_km=0.0, estimated_duration_min=0)

    optimize_route(route, ORIGIN)

    assert route.optimized is True
    assert [stop.id for stop in route.stops] == ["near", "mid", "far"]
    assert route.total_distance_km == pytest.approx(2 * ONE_DEGREE_KM)
    assert route.estimated_duration_min == math.floor(2 * ONE_DEGREE_KM / 40 * 60 + 90 + 0.5)
