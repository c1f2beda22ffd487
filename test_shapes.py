"""
Tests for shape containment.
"""

import pytest

from worldengine.procgen.shapes import dist_point_to_segment, point_in_polygon, shape_contains


def test_rect_boundary():
    rect = {"kind": "rect", "x": 0, "y": 0, "w": 10, "h": 10}
    assert shape_contains(rect, 0, 0)
    assert shape_contains(rect, 9, 9)
    assert not shape_contains(rect, 10, 10)
    assert not shape_contains(rect, -1, 0)
    assert not shape_contains(rect, 10, 0)
    assert not shape_contains(rect, 0, 10)


def test_rect_coordinates_are_floored():
    rect = {"kind": "rect", "x": 1.7, "y": 1.2, "w": 2.9, "h": 2.9}
    # Becomes x=1, y=1, w=2, h=2
    assert shape_contains(rect, 1, 1)
    assert shape_contains(rect, 2, 2)
    assert not shape_contains(rect, 3, 3)


@pytest.mark.parametrize("w,h", [(0, 5), (5, 0), (-3, 5)])
def test_empty_rect(w, h):
    assert not shape_contains({"kind": "rect", "x": 0, "y": 0, "w": w, "h": h}, 0, 0)


def test_round_rect_cuts_corners():
    shape = {"kind": "roundRect", "x": 0, "y": 0, "w": 10, "h": 10, "round": 3}
    # Corner cell is farther than r from the corner circle centre (3, 3)
    assert not shape_contains(shape, 0, 0)
    # Edge middles and centre are inside
    assert shape_contains(shape, 5, 0)
    assert shape_contains(shape, 0, 5)
    assert shape_contains(shape, 5, 5)
    # Inside the corner circle
    assert shape_contains(shape, 1, 1)


def test_round_rect_without_round_is_rect():
    shape = {"kind": "roundRect", "x": 0, "y": 0, "w": 10, "h": 10}
    assert shape_contains(shape, 0, 0)
    assert shape_contains(shape, 9, 9)
    assert not shape_contains(shape, 10, 10)


def test_round_is_ignored_for_rect():
    shape = {"kind": "rect", "x": 0, "y": 0, "w": 10, "h": 10, "round": 4}
    assert shape_contains(shape, 0, 0)


def test_circle_is_closed():
    circle = {"kind": "circle", "cx": 5, "cy": 5, "r": 3}
    assert shape_contains(circle, 5, 5)
    assert shape_contains(circle, 8, 5)
    assert not shape_contains(circle, 8, 8)


def test_circle_missing_radius_is_a_point():
    circle = {"kind": "circle", "cx": 2, "cy": 2}
    assert shape_contains(circle, 2, 2)
    assert not shape_contains(circle, 3, 2)


def test_polygon_triangle():
    tri = {"kind": "polygon", "points": [[0, 0], [10, 0], [0, 10]]}
    assert shape_contains(tri, 2, 2)
    assert not shape_contains(tri, 8, 8)
    assert not shape_contains(tri, -1, 5)


def test_polygon_needs_three_points():
    assert not shape_contains({"kind": "polygon", "points": [[0, 0], [10, 0]]}, 1, 0)
    assert not shape_contains({"kind": "polygon", "points": "nope"}, 1, 0)


def test_polygon_malformed_point():
    shape = {"kind": "polygon", "points": [[0, 0], [10, 0], ["a", 10]]}
    assert not shape_contains(shape, 2, 2)


def test_point_in_polygon_concave():
    # U shape opening upward
    poly = [(0, 0), (9, 0), (9, 9), (6, 9), (6, 3), (3, 3), (3, 9), (0, 9)]
    assert point_in_polygon(poly, 1, 5)
    assert point_in_polygon(poly, 7, 5)
    assert not point_in_polygon(poly, 4.5, 6)


def test_line_thickness():
    line = {"kind": "line", "a": [0, 0], "b": [10, 0], "thickness": 4}
    assert shape_contains(line, 5, 2)
    assert not shape_contains(line, 5, 3)
    # Beyond the endpoint the distance is to the endpoint itself
    assert shape_contains(line, 11, 0)
    assert not shape_contains(line, 13, 0)


def test_line_default_thickness():
    line = {"kind": "line", "a": [0, 0], "b": [0, 10]}
    assert shape_contains(line, 0, 5)
    assert not shape_contains(line, 1, 5)


def test_line_requires_endpoints():
    assert not shape_contains({"kind": "line", "a": [0, 0]}, 0, 0)


def test_dist_point_to_segment_degenerate():
    assert dist_point_to_segment(3, 4, 0, 0, 0, 0) == 5.0


@pytest.mark.parametrize("shape", [None, "rect", {}, {"kind": "hexagon", "r": 5}])
def test_unknown_shapes_contain_nothing(shape):
    assert not shape_contains(shape, 0, 0)
