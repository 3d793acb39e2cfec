from __future__ import annotations

import numpy as np

from bounded_voronoi.geometry import EQ_EPSILON, orient2d, polygon_area

# slack for points lying exactly on a cell edge (sites on the boundary, corners)
ON_EDGE_TOL = 1e-9


def is_convex_ccw(vertices: np.ndarray, tol: float = ON_EDGE_TOL) -> bool:
    """Every turn is a left turn (collinear within tol counts as convex)."""
    V = np.asarray(vertices, dtype=np.float64)
    n = len(V)
    if n < 3:
        return False
    V = V - V.mean(axis=0)
    scale = max(1.0, float(np.max(np.abs(V))))
    for i in range(n):
        if orient2d(V[i - 1], V[i], V[(i + 1) % n]) < -tol * scale * scale:
            return False
    return True


def is_point_inside(vertices: np.ndarray, point, tol: float = ON_EDGE_TOL) -> bool:
    """Point inside or on the edge of a convex, counter-clockwise polygon."""
    V = np.asarray(vertices, dtype=np.float64)
    origin = V.mean(axis=0)
    V = V - origin
    point = np.asarray(point, dtype=np.float64) - origin
    scale = max(1.0, float(np.max(np.abs(V))))
    for i in range(len(V)):
        if orient2d(V[i], V[(i + 1) % len(V)], point) < -tol * scale * scale:
            return False
    return True


def validate_voronoi(diagram, boundary_tol: float = EQ_EPSILON) -> None:
    """Assert the invariants every bounded diagram must satisfy."""
    boundary = diagram.boundary()
    assert diagram.cell_count() == len(diagram.sites())

    for i, cell in enumerate(diagram.iter_cells()):
        assert cell.site() == i
        vertices = np.array(cell.iter_vertices(), dtype=np.float64)
        assert len(vertices) >= 3, f"Cell {i} has {len(vertices)} vertices"

        area = polygon_area(vertices)
        assert area > 0, f"Cell {i}: not counter-clockwise. Area is {area}"

        for v, p in enumerate(vertices):
            assert boundary.is_inside(p, boundary_tol), \
                f"Cell {i}: vertex {v} {p} is outside diagram boundary"

        assert is_convex_ccw(vertices), f"Cell {i} is not convex: {vertices.tolist()}"
        assert is_point_inside(vertices, cell.site_position()), \
            f"Cell {i} site is outside the voronoi cell"

    for corner in boundary.vertices():
        assert any(is_point_inside(c.polygon, corner) for c in diagram.iter_cells()), \
            f"Corner {corner} is not inside any hull cell"


def total_area(diagram) -> float:
    return float(sum(c.area() for c in diagram.iter_cells()))
