import math

import pytest

from app.services.errors import InvalidArgument
from app.services.geo import Point, distance_m, haversine_m


def test_one_degree_of_latitude_is_about_111km():
    d = haversine_m(37.0, 127.0, 38.0, 127.0)
    assert d == pytest.approx(111195, rel=1e-3)


def test_distance_to_self_is_zero():
    p = Point(127.0276, 37.4979)
    assert distance_m(p, p) == 0.0


def test_distance_is_symmetric():
    a = Point(127.0276, 37.4979)
    b = Point(126.9780, 37.5665)
    assert distance_m(a, b) == pytest.approx(distance_m(b, a))


def test_antipodal_points_do_not_overflow():
    d = haversine_m(0.0, 0.0, 0.0, 180.0)
    assert d == pytest.approx(math.pi * 6371000.0, rel=1e-9)


@pytest.mark.parametrize(
    "lng, lat",
    [(181.0, 0.0), (-180.5, 0.0), (0.0, 90.1), (0.0, -91.0), (float("nan"), 0.0), (0.0, float("inf"))],
)
def test_point_rejects_invalid_coordinates(lng, lat):
    with pytest.raises(InvalidArgument):
        Point(lng, lat)


def test_point_accepts_boundaries():
    Point(180.0, 90.0)
    Point(-180.0, -90.0)
