from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterator, Tuple

import numpy as np

from .boundary import ConvexBoundary
from .geometry import Point, dist2, polygon_area, polygon_centroid
from .triangulation import EMPTY, Triangulation


@dataclass(frozen=True, eq=False)
class VoronoiCell:
    """
    Bounded voronoi cell of one site.

    polygon is (N,2), counter-clockwise, convex, read-only.
    triangle_indices are the delaunay triangles around the site; their
    circumcenters are the unclipped voronoi vertices of the cell.
    """
    site_index: int
    position: Point
    polygon: np.ndarray
    triangle_indices: FrozenSet[int]
    neighbors: Tuple[int, ...]  # delaunay neighbors, counter-clockwise
    on_hull: bool

    def site(self) -> int:
        return self.site_index

    def site_position(self) -> Point:
        return self.position

    def iter_vertices(self) -> Tuple[Point, ...]:
        return tuple(Point(float(x), float(y)) for x, y in self.polygon)

    def triangles(self) -> FrozenSet[int]:
        return self.triangle_indices

    def iter_neighbors(self) -> Tuple[int, ...]:
        return self.neighbors

    def is_on_hull(self) -> bool:
        return self.on_hull

    def area(self) -> float:
        return polygon_area(self.polygon)

    def centroid(self) -> Point:
        return polygon_centroid(self.polygon)


@dataclass(frozen=True, eq=False)
class VoronoiDiagram:
    site_positions: np.ndarray  # (N,2), read-only
    convex_boundary: ConvexBoundary
    cells: Tuple[VoronoiCell, ...]
    triangulation: Triangulation

    def sites(self) -> np.ndarray:
        return self.site_positions

    def boundary(self) -> ConvexBoundary:
        return self.convex_boundary

    def cell(self, site_index: int) -> VoronoiCell:
        return self.cells[site_index]

    def iter_cells(self) -> Tuple[VoronoiCell, ...]:
        return self.cells

    def cell_count(self) -> int:
        return len(self.cells)

    def has_common_voronoi_edge(self, a: int, b: int) -> bool:
        """
        True if cells a and b share a voronoi edge, i.e. at least two triangles.
        A single shared triangle means the cells only touch at a vertex.
        """
        n = len(self.cells)
        if not (0 <= a < n and 0 <= b < n):
            return False
        return len(self.cells[a].triangle_indices & self.cells[b].triangle_indices) >= 2

    def delaunay_edge_from_voronoi_edge(self, a: int, b: int) -> int:
        return self.triangulation.delaunay_edge_from_voronoi_edge(a, b)

    def iter_path(self, start: int, destination) -> Iterator[int]:
        """
        Walk from cell `start` towards the cell containing `destination`,
        always stepping to the neighbor whose site is closest to it.
        Yields the visited site indices; the last one is the nearest site.
        """
        if not 0 <= start < len(self.cells):
            return

        current = start
        best = dist2(self.site_positions[current], destination)
        yield current

        while True:
            step = EMPTY
            for nb in self.cells[current].neighbors:
                d = dist2(self.site_positions[nb], destination)
                if d < best:
                    best = d
                    step = nb
            if step == EMPTY:
                return
            current = step
            yield current

    def nearest_site(self, point, start: int = 0) -> int:
        last = EMPTY
        for last in self.iter_path(start, point):
            pass
        return last
