from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np
from shapely.geometry import Polygon

from .clipping import clip_polygon
from .geometry import EQ_EPSILON, Point, orient2d, polygon_area


class ConvexBoundary(ABC):
    """
    Convex region the diagram is clipped to.

    Cell construction only relies on `vertices`, `is_inside` and `clip`, so any
    convex shape can be plugged in.
    """

    @abstractmethod
    def vertices(self) -> np.ndarray:
        """Corners (N,2), counter-clockwise."""

    @abstractmethod
    def is_inside(self, point, tolerance: float = EQ_EPSILON) -> bool:
        """Containment test; `tolerance` is relative to the boundary's coordinate scale."""

    def clip(self, polygon: np.ndarray) -> np.ndarray:
        """Clip a closed polygon (N,2) to the boundary."""
        return clip_polygon(polygon, self.vertices())

    def scale(self) -> float:
        return max(1.0, float(np.max(np.abs(self.vertices()))))

    def extent(self) -> float:
        """Diagonal of the corners' bounding box."""
        V = self.vertices()
        return float(np.linalg.norm(V.max(axis=0) - V.min(axis=0)))

    def contains_all(self, points, tolerance: float = EQ_EPSILON) -> np.ndarray:
        return np.array([self.is_inside(p, tolerance) for p in np.asarray(points)], dtype=bool)


class BoundingBox(ConvexBoundary):
    """Axis-aligned rectangle given by its center, width and height."""

    def __init__(self, center, width: float, height: float):
        width = float(width)
        height = float(height)
        if not (np.isfinite(width) and np.isfinite(height)) or width <= 0 or height <= 0:
            raise ValueError(f"BoundingBox needs positive width and height, got {width} x {height}")

        self.center = Point(float(center[0]), float(center[1]))
        self.width = width
        self.height = height
        self.min_x = self.center.x - width / 2.0
        self.max_x = self.center.x + width / 2.0
        self.min_y = self.center.y - height / 2.0
        self.max_y = self.center.y + height / 2.0

        corners = np.array([
            [self.min_x, self.min_y],
            [self.max_x, self.min_y],
            [self.max_x, self.max_y],
            [self.min_x, self.max_y],
        ], dtype=np.float64)
        corners.flags.writeable = False
        self._corners = corners

    def __repr__(self):
        return f"BoundingBox(center={tuple(self.center)}, width={self.width}, height={self.height})"

    def vertices(self) -> np.ndarray:
        return self._corners

    def is_inside(self, point, tolerance: float = EQ_EPSILON) -> bool:
        tol = tolerance * self.scale()
        x, y = float(point[0]), float(point[1])
        return (self.min_x - tol <= x <= self.max_x + tol) and (self.min_y - tol <= y <= self.max_y + tol)

    def clip(self, polygon: np.ndarray) -> np.ndarray:
        clipped = clip_polygon(polygon, self._corners)
        if len(clipped):
            # interpolation can land an ulp outside the box
            clipped[:, 0] = np.clip(clipped[:, 0], self.min_x, self.max_x)
            clipped[:, 1] = np.clip(clipped[:, 1], self.min_y, self.max_y)
        return clipped


class ConvexPolygonBoundary(ConvexBoundary):
    """Arbitrary convex polygon; corners may be given in either orientation."""

    def __init__(self, vertices):
        V = np.asarray(vertices, dtype=np.float64)
        if V.ndim != 2 or V.shape[1] != 2 or len(V) < 3:
            raise ValueError("Boundary polygon must be (N,2) with N >= 3")
        if not np.all(np.isfinite(V)):
            raise ValueError("Boundary polygon has non-finite coordinates")

        poly = Polygon(V)
        if poly.is_empty or not poly.is_valid or poly.area <= 0:
            raise ValueError("Boundary polygon must be a valid, non-empty polygon")
        if not np.isclose(poly.convex_hull.area, poly.area, rtol=1e-9, atol=0.0):
            raise ValueError("Boundary polygon must be convex")

        if polygon_area(V) < 0:
            V = V[::-1]
        V = np.ascontiguousarray(V)
        V.flags.writeable = False
        self._corners = V

    def __repr__(self):
        return f"ConvexPolygonBoundary({self._corners.tolist()})"

    def vertices(self) -> np.ndarray:
        return self._corners

    def is_inside(self, point, tolerance: float = EQ_EPSILON) -> bool:
        V = self._corners
        tol = tolerance * self.scale()
        for i in range(len(V)):
            a = V[i]
            b = V[(i + 1) % len(V)]
            edge_len = float(np.hypot(b[0] - a[0], b[1] - a[1]))
            # orient2d / |ab| is the signed distance of point from edge ab
            if orient2d(a, b, point) < -tol * edge_len:
                return False
        return True


class CircleBoundary(ConvexPolygonBoundary):
    """Circle approximated by an inscribed regular polygon with `segments` corners."""

    def __init__(self, center, radius: float, segments: int = 64):
        radius = float(radius)
        segments = int(segments)
        if not np.isfinite(radius) or radius <= 0:
            raise ValueError(f"CircleBoundary needs a positive radius, got {radius}")
        if segments < 3:
            raise ValueError("CircleBoundary needs at least 3 segments")

        self.center = Point(float(center[0]), float(center[1]))
        self.radius = radius
        self.segments = segments

        angles = np.linspace(0.0, 2.0 * np.pi, segments, endpoint=False)
        super().__init__(np.column_stack([
            self.center.x + radius * np.cos(angles),
            self.center.y + radius * np.sin(angles),
        ]))

    def __repr__(self):
        return f"CircleBoundary(center={tuple(self.center)}, radius={self.radius}, segments={self.segments})"
