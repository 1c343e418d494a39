import math

import pytest

from src.fieldroute.models.domain import Coordinates
from src.fieldroute.services.geospatial import (
    EARTH_RADIUS_KM,
    degrees_to_radians,
    distance,
    haversine_km,
    travel_minutes,
)

ONE_DEGREE_KM = EARTH_RADIUS_KM * math.pi / 180


def test_degrees_to_radians():
    assert degrees_to_radians(180) == pytest.approx(math.pi)
    assert degrees_to_radians(0) == 0
    for degrees in (-180, -33.86, 21.5, 90, 359.9):
        assert degrees_to_radians(degrees) == math.radians(degrees)


def test_distance_identity():
    for point in [Coordinates(0, 0), Coordinates(21.5, 39.2), Coordinates(-33.86, 151.2)]:
        assert distance(point, point) == 0


def test_distance_is_symmetric():
    pairs = [
        (Coordinates(21.5, 39.2), Coordinates(21.55, 39.25)),
        (Coordinates(40.7128, -74.006), Coordinates(34.0522, -118.2437)),
        (Coordinates(-89.9, 179.9), Coordinates(89.9, -179.9)),
    ]
    for a, b in pairs:
        assert distance(a, b) == pytest.approx(distance(b, a), rel=1e-9)


def test_one_degree_along_equator_and_meridian():
    origin = Coordinates(0, 0)
    assert distance(origin, Coordinates(0, 1)) == pytest.approx(ONE_DEGREE_KM)
    assert distance(origin, Coordinates(1, 0)) == pytest.approx(ONE_DEGREE_KM)


def test_known_city_distance():
    # London -> Paris is roughly 344 km great-circle
    assert haversine_km(51.5074, -0.1278, 48.8566, 2.3522) == pytest.approx(343.5, abs=1.0)


def test_travel_minutes_at_flat_speed():
    assert travel_minutes(40, 40) == pytest.approx(60)
    assert travel_minutes(0, 40) == 0
    with pytest.raises(ValueError):
        travel_minutes(10, 0)


def test_coordinates_reject_out_of_range_values():
    with pytest.raises(ValueError):
        Coordinates(91, 0)
    with pytest.raises(ValueError):
        Coordinates(0, -181)
    assert Coordinates(-90, 180).as_tuple() == (-90, 180)
