"""Geometry helpers for hit-testing and checkpoint layout.

All functions are pure and work in canvas pixel space. Points are
``(x, y)`` tuples with y growing downward, matching the video frame.
"""

from __future__ import annotations

import math
from enum import Enum

import numpy as np

Point = tuple[float, float]


class Shape(Enum):
    """Outline shapes the tracing game can ask for."""
    CIRCLE = "circle"
    SQUARE = "square"


def distance(p1: Point, p2: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(p1[0] - p2[0], p1[1] - p2[1])


def point_in_circle(p: Point, center: Point, radius: float) -> bool:
    return distance(p, center) < radius


def point_near_circle_outline(p: Point, center: Point, radius: float, tolerance: float) -> bool:
    """True if ``p`` lies within ``tolerance`` of the circle's circumference."""
    return abs(distance(p, center) - radius) < tolerance


def point_near_square_edge(p: Point, center: Point, size: float, tolerance: float) -> bool:
    """True if ``p`` is close to the outline of an axis-aligned square.

    The point must sit inside the square's bounding box grown by
    ``tolerance`` and within ``tolerance`` of at least one of the four
    edge lines. Being near any single edge line is enough, so corners
    and points slightly past an edge's end still count.
    """
    half = size / 2
    left, right = center[0] - half, center[0] + half
    top, bottom = center[1] - half, center[1] + half
    x, y = p

    inside = (
        left - tolerance <= x <= right + tolerance
        and top - tolerance <= y <= bottom + tolerance
    )
    near_edge = (
        abs(x - left) < tolerance
        or abs(x - right) < tolerance
        or abs(y - top) < tolerance
        or abs(y - bottom) < tolerance
    )
    return inside and near_edge


def perimeter_sample(
    shape: Shape, center: Point, extent: float, n: int
) -> list[Point]:
    """Sample ``n`` points on a shape's outline.

    Args:
        shape: Circle or square.
        center: Shape center in pixels.
        extent: Radius for a circle, side length for a square.
        n: Number of samples.

    A circle is sampled at angles ``2*pi*i/n``. A square is sampled
    uniformly along its full perimeter, clockwise from the top-left
    corner, so every side gets the same share of points.
    """
    if n < 1:
        raise ValueError(f"need at least one sample, got {n}")

    cx, cy = center
    if shape is Shape.CIRCLE:
        angles = 2 * np.pi * np.arange(n) / n
        xs = cx + extent * np.cos(angles)
        ys = cy + extent * np.sin(angles)
        return [(float(x), float(y)) for x, y in zip(xs, ys)]

    half = extent / 2
    corners = np.array([
        [cx - half, cy - half],  # top-left
        [cx + half, cy - half],  # top-right
        [cx + half, cy + half],  # bottom-right
        [cx - half, cy + half],  # bottom-left
    ])
    distances = np.arange(n) * (4 * extent / n)
    points = []
    for d in distances:
        side = min(int(d // extent), 3)
        t = (d - side * extent) / extent if extent > 0 else 0.0
        start, end = corners[side], corners[(side + 1) % 4]
        x, y = start + t * (end - start)
        points.append((float(x), float(y)))
    return points


def point_on_outline(
    shape: Shape, p: Point, center: Point, extent: float, tolerance: float
) -> bool:
    """Near-perimeter test for either shape (``extent`` as in :func:`perimeter_sample`)."""
    if shape is Shape.CIRCLE:
        return point_near_circle_outline(p, center, extent, tolerance)
    return point_near_square_edge(p, center, extent, tolerance)
