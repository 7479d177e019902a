"""Tests for hit-testing and outline sampling."""

import math

import pytest

from hand_arcade.geometry import (
    Shape,
    distance,
    perimeter_sample,
    point_in_circle,
    point_near_circle_outline,
    point_near_square_edge,
    point_on_outline,
)


class TestDistance:
    def test_pythagorean(self):
        assert distance((0, 0), (3, 4)) == pytest.approx(5.0)

    def test_symmetric(self):
        assert distance((1, 2), (7, -3)) == pytest.approx(distance((7, -3), (1, 2)))


class TestCircleHits:
    def test_inside(self):
        assert point_in_circle((105, 100), (100, 100), 30)

    def test_boundary_is_outside(self):
        assert not point_in_circle((130, 100), (100, 100), 30)

    def test_near_outline(self):
        assert point_near_circle_outline((148, 100), (100, 100), 50, 5)

    def test_center_not_near_outline(self):
        assert not point_near_circle_outline((100, 100), (100, 100), 50, 5)


class TestSquareEdge:
    def test_on_left_edge(self):
        assert point_near_square_edge((52, 100), (100, 100), 100, 10)

    def test_center_is_not_edge(self):
        assert not point_near_square_edge((100, 100), (100, 100), 100, 10)

    def test_corner(self):
        assert point_near_square_edge((50, 50), (100, 100), 100, 10)

    def test_far_outside_box(self):
        # On the extension of the top edge line but well past the corner
        assert not point_near_square_edge((300, 50), (100, 100), 100, 10)

    def test_slightly_past_corner(self):
        assert point_near_square_edge((155, 50), (100, 100), 100, 10)


class TestPerimeterSample:
    def test_circle_points_on_circle(self):
        points = perimeter_sample(Shape.CIRCLE, (320, 240), 144, 16)
        assert len(points) == 16
        for p in points:
            assert distance(p, (320, 240)) == pytest.approx(144)

    def test_circle_first_point_at_angle_zero(self):
        points = perimeter_sample(Shape.CIRCLE, (0, 0), 10, 4)
        assert points[0] == pytest.approx((10, 0))
        assert points[1] == pytest.approx((0, 10), abs=1e-9)

    def test_square_points_on_edges(self):
        points = perimeter_sample(Shape.SQUARE, (100, 100), 80, 16)
        assert len(points) == 16
        for p in points:
            assert point_near_square_edge(p, (100, 100), 80, 1e-6)

    def test_square_all_sides_covered(self):
        points = perimeter_sample(Shape.SQUARE, (100, 100), 80, 16)
        top = [p for p in points if p[1] == pytest.approx(60)]
        bottom = [p for p in points if p[1] == pytest.approx(140)]
        left = [p for p in points if p[0] == pytest.approx(60)]
        right = [p for p in points if p[0] == pytest.approx(140)]
        assert top and bottom and left and right

    def test_square_starts_top_left(self):
        points = perimeter_sample(Shape.SQUARE, (100, 100), 80, 8)
        assert points[0] == pytest.approx((60, 60))
        assert points[1] == pytest.approx((100, 60))

    def test_single_sample(self):
        assert len(perimeter_sample(Shape.CIRCLE, (0, 0), 5, 1)) == 1

    def test_zero_samples_rejected(self):
        with pytest.raises(ValueError):
            perimeter_sample(Shape.CIRCLE, (0, 0), 5, 0)

    def test_circle_spacing_uniform(self):
        points = perimeter_sample(Shape.CIRCLE, (0, 0), 100, 8)
        gaps = [distance(points[i], points[(i + 1) % 8]) for i in range(8)]
        expected = 2 * 100 * math.sin(math.pi / 8)
        assert gaps == pytest.approx([expected] * 8)


class TestPointOnOutline:
    def test_dispatches_by_shape(self):
        assert point_on_outline(Shape.CIRCLE, (150, 100), (100, 100), 50, 5)
        assert point_on_outline(Shape.SQUARE, (75, 100), (100, 100), 50, 5)
        assert not point_on_outline(Shape.SQUARE, (100, 100), (100, 100), 50, 5)
