from __future__ import annotations

from typing import Iterable, NamedTuple

import numpy as np

EQ_EPSILON = 4.0 * float(np.finfo(np.float64).eps)


class Point(NamedTuple):
    x: float
    y: float


class DegenerateTriangleError(ArithmeticError):
    """Raised when three points are too close to collinear to have a stable circumcenter."""


def circumcenter(a, b, c) -> Point:
    """
    Circumcenter of triangle abc.

    The triangle is moved so that `a` is the origin before solving the
    perpendicular-bisector system; this keeps precision for sites far from (0, 0).
    """
    bx = float(b[0]) - float(a[0])
    by = float(b[1]) - float(a[1])
    cx = float(c[0]) - float(a[0])
    cy = float(c[1]) - float(a[1])

    bb = bx * bx + by * by
    cc = cx * cx + cy * cy
    det = bx * cy - by * cx

    # det is twice the signed area, compare it against the squared edge lengths
    if abs_diff_eq(det, 0.0, EQ_EPSILON * (bb + cc)):
        raise DegenerateTriangleError(f"Collinear triangle {tuple(a)}, {tuple(b)}, {tuple(c)}")

    d = 0.5 / det
    return Point(
        float(a[0]) + d * (cy * bb - by * cc),
        float(a[1]) + d * (bx * cc - cx * bb),
    )


def dist2(a, b) -> float:
    """Squared euclidean distance."""
    x = float(a[0]) - float(b[0])
    y = float(a[1]) - float(b[1])
    return x * x + y * y


def approximate_centroid(points: Iterable) -> Point:
    """Arithmetic mean of the points (not the area centroid)."""
    sx = 0.0
    sy = 0.0
    n = 0
    for p in points:
        sx += float(p[0])
        sy += float(p[1])
        n += 1

    if n == 0:
        raise ValueError("approximate_centroid needs at least one point")

    return Point(sx / n, sy / n)


def abs_diff_eq(a: float, b: float, epsilon: float) -> bool:
    return abs(a - b) <= epsilon


def orient2d(a, b, c) -> float:
    """
    Twice the signed area of triangle abc.
    > 0 if c is left of a->b (counter-clockwise), < 0 if right, 0 if collinear.
    """
    return (float(b[0]) - float(a[0])) * (float(c[1]) - float(a[1])) - \
        (float(b[1]) - float(a[1])) * (float(c[0]) - float(a[0]))


def polygon_area(vertices) -> float:
    """Signed shoelace area, positive for counter-clockwise polygons."""
    V = np.asarray(vertices, dtype=np.float64)
    if len(V) < 3:
        return 0.0
    x = V[:, 0]
    y = V[:, 1]
    return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y))


def polygon_centroid(vertices) -> Point:
    """
    Area centroid of a simple polygon.
    Falls back to the vertex mean for (near) zero-area input.
    """
    V = np.asarray(vertices, dtype=np.float64)
    area = polygon_area(V)
    if len(V) < 3 or abs(area) <= EQ_EPSILON:
        return approximate_centroid(V)

    # shift to the first vertex for precision
    o = V[0]
    P = V - o
    x0, y0 = P[:, 0], P[:, 1]
    x1, y1 = np.roll(x0, -1), np.roll(y0, -1)
    cross = x0 * y1 - x1 * y0
    cx = float(np.sum((x0 + x1) * cross)) / (6.0 * area)
    cy = float(np.sum((y0 + y1) * cross)) / (6.0 * area)
    return Point(float(o[0]) + cx, float(o[1]) + cy)
