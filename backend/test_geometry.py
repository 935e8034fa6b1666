import pytest

from schemas import Point
from services.spatial.geometry import (
    Rect, angle, distance, distance_to_segment, format_measurement, is_point_near_segment,
    manhattan_distance, midpoint, perimeter, rectangle_area, snap_to_grid,
)


def P(x, y):
    return Point(x=x, y=y)


@pytest.mark.parametrize(
    "p1, p2, expected",
    [
        (P(0, 0), P(3, 4), 5.0),
        (P(1, 1), P(4, 1), 3.0),
        (P(-2, -2), P(-2, -2), 0.0),
        (P(0, 0), P(1, 1), 1.41),
    ],
)
def test_distance_symmetric(p1, p2, expected):
    assert distance(p1, p2) == expected
    assert distance(p2, p1) == expected


def test_distance_to_self_is_zero():
    assert distance(P(7.3, -2.1), P(7.3, -2.1)) == 0


@pytest.mark.parametrize("w, h", [(2, 3), (0.5, 10), (12.25, 4)])
def test_area_and_perimeter(w, h):
    assert rectangle_area(w, h) == round(w * h, 2)
    assert perimeter(w, h) == round(2 * (w + h), 2)


@pytest.mark.parametrize(
    "p1, vertex, p3, expected",
    [
        (P(1, 0), P(0, 0), P(0, 1), 90.0),
        (P(1, 0), P(0, 0), P(-1, 0), 180.0),
        (P(1, 0), P(0, 0), P(1, 1), 45.0),
        (P(1, 0), P(0, 0), P(1, 0), 0.0),
        (P(-1, -1), P(0, 0), P(-1, 1), 90.0),
    ],
)
def test_angle_in_range_regardless_of_order(p1, vertex, p3, expected):
    assert angle(p1, vertex, p3) == expected
    assert angle(p3, vertex, p1) == expected
    assert 0 <= angle(p1, vertex, p3) <= 180


def test_angle_degenerate_is_defined():
    assert angle(P(0, 0), P(0, 0), P(0, 0)) == 0.0


def test_midpoint():
    assert midpoint(P(0, 0), P(4, 6)) == P(2, 3)


def test_manhattan():
    assert manhattan_distance(P(0, 0), P(3, -4)) == {"horizontal": 3, "vertical": 4, "total": 7}


@pytest.mark.parametrize(
    "point, expected",
    [
        (P(5, 3), 3.0),     # above the middle
        (P(-3, 4), 5.0),    # beyond the start
        (P(13, 0), 3.0),    # beyond the end
        (P(4, 0), 0.0),     # on the segment
    ],
)
def test_distance_to_segment(point, expected):
    assert distance_to_segment(point, P(0, 0), P(10, 0)) == expected


def test_distance_to_zero_length_segment():
    assert distance_to_segment(P(3, 4), P(0, 0), P(0, 0)) == 5.0


def test_point_near_segment():
    assert is_point_near_segment(P(5, 10), P(0, 0), P(10, 0))
    assert not is_point_near_segment(P(5, 10.5), P(0, 0), P(10, 0))
    assert is_point_near_segment(P(5, 2), P(0, 0), P(10, 0), threshold=2)


@pytest.mark.parametrize(
    "point, grid, expected",
    [
        (P(4.4, 5.6), 1, P(4, 6)),
        (P(2.5, 7.5), 1, P(3, 8)),
        (P(14, 16), 10, P(10, 20)),
        (P(3.3, 3.3), 0, P(3.3, 3.3)),
    ],
)
def test_snap_to_grid(point, grid, expected):
    assert snap_to_grid(point, grid) == expected


def test_rect_edges():
    r = Rect(2, 3, 4, 6)
    assert (r.left, r.right, r.center_x) == (2, 6, 4)
    assert (r.top, r.bottom, r.center_y) == (3, 9, 6)
    assert r.center == P(4, 6)


def test_format_measurement():
    assert format_measurement(3.5, "distance", "m") == "3.5 m"
    assert format_measurement(12, "area", "m") == "12 m²"
    assert format_measurement(90.0, "angle") == "90.0°"
