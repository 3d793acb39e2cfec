from __future__ import annotations

from typing import List, NamedTuple, Tuple

import numpy as np
import structlog

from .boundary import ConvexBoundary
from .clipping import close_hull_chain
from .datastructures import VoronoiCell, VoronoiDiagram
from .geometry import DegenerateTriangleError, Point, approximate_centroid, circumcenter, polygon_area
from .triangulation import EMPTY, Triangulation, next_halfedge, prev_halfedge, triangle_of_edge, triangulate

logger = structlog.get_logger()


class VoronoiConfigError(ValueError):
    """Invalid input for diagram construction."""


class VoronoiConfig(NamedTuple):
    """Configuration for diagram construction."""
    sites: np.ndarray
    boundary: ConvexBoundary
    lloyd_relaxation_iterations: int = 0
    remove_outside_sites: bool = True  # otherwise sites outside the boundary are an error


def _validate_sites(sites) -> np.ndarray:
    try:
        S = np.array(sites, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise VoronoiConfigError("sites must be a sequence of (x, y) positions") from exc

    if S.ndim != 2 or S.shape[1] != 2:
        raise VoronoiConfigError(f"sites must be (N,2), got shape {S.shape}")
    if not np.all(np.isfinite(S)):
        raise VoronoiConfigError("sites must have finite coordinates")
    return S


def _sites_inside(sites: np.ndarray, boundary: ConvexBoundary, remove_outside: bool) -> np.ndarray:
    inside = boundary.contains_all(sites)
    if not inside.any():
        raise VoronoiConfigError(f"{boundary!r} contains none of the {len(sites)} sites")

    if not inside.all():
        outside = np.flatnonzero(~inside).tolist()
        if not remove_outside:
            raise VoronoiConfigError(f"Sites {outside} lie outside {boundary!r}")
        logger.info("Removing sites outside boundary", removed=len(outside), kept=int(inside.sum()))
        sites = sites[inside]

    return sites


def _voronoi_vertices(triangulation: Triangulation, sites: np.ndarray) -> np.ndarray:
    """
    Circumcenter of every triangle.
    Near-collinear triangles get the mean of their sites instead, trading a
    slightly displaced vertex for a finite one.
    """
    n_tri = triangulation.triangle_count()
    vertices = np.zeros((n_tri, 2), dtype=np.float64)
    degenerate = 0

    for t in range(n_tri):
        a, b, c = (sites[i] for i in triangulation.triangle_sites(t))
        try:
            vertices[t] = circumcenter(a, b, c)
        except DegenerateTriangleError:
            vertices[t] = approximate_centroid((a, b, c))
            degenerate += 1
            logger.debug("Degenerate triangle, using centroid", triangle=t)

    if degenerate:
        logger.info("Replaced degenerate circumcenters", count=degenerate)
    return vertices


def _seed_halfedges(triangulation: Triangulation, n_sites: int) -> np.ndarray:
    """
    One incoming half-edge per site. For hull sites the incoming hull edge
    (no twin) is used, so the walk around the site starts at an open end.
    """
    seeds = np.full(n_sites, EMPTY, dtype=np.int64)
    for e in range(len(triangulation.triangles)):
        # the half-edge before e in its triangle ends where e starts
        s = int(triangulation.triangles[e])
        incoming = prev_halfedge(e)
        if seeds[s] == EMPTY or triangulation.halfedges[incoming] == EMPTY:
            seeds[s] = incoming
    return seeds


def _walk_cell_triangles(triangulation: Triangulation, seed: int) -> Tuple[List[int], List[int], bool]:
    """
    Rotate around the site `seed` points to.

    Returns (triangles, neighbor sites, closed), clockwise. closed is False for
    hull sites, whose walk ends at a half-edge without twin; their neighbor list
    then has one more entry than the triangle list.
    """
    triangles = []
    neighbors = []
    e = seed
    for _ in range(len(triangulation.triangles)):
        triangles.append(triangle_of_edge(e))
        neighbors.append(int(triangulation.triangles[e]))

        outgoing = next_halfedge(e)
        e = int(triangulation.halfedges[outgoing])
        if e == EMPTY:
            neighbors.append(triangulation.site_of_incoming(outgoing))
            return triangles, neighbors, False
        if e == seed:
            return triangles, neighbors, True

    raise RuntimeError(f"Half-edge walk from {seed} does not terminate")


def _raw_cell_chain(triangulation: Triangulation, vertices: np.ndarray, seed: int):
    """Counter-clockwise circumcenter chain of one site, open for hull sites."""
    triangles, neighbors, closed = _walk_cell_triangles(triangulation, seed)
    triangles.reverse()
    neighbors.reverse()
    return vertices[triangles], triangles, neighbors, closed


def _build_cell(
    site: int,
    sites: np.ndarray,
    boundary: ConvexBoundary,
    triangulation: Triangulation,
    vertices: np.ndarray,
    seed: int,
) -> VoronoiCell:
    chain, triangles, neighbors, closed = _raw_cell_chain(triangulation, vertices, seed)

    if closed:
        raw = chain
    else:
        prev_site, next_site = neighbors[-1], neighbors[0]
        raw = close_hull_chain(chain, sites[site], sites[prev_site], sites[next_site], boundary.extent())

    polygon = boundary.clip(raw)
    if len(polygon) < 3 or polygon_area(polygon) <= 0.0:
        raise RuntimeError(f"Cell {site} collapsed while clipping to {boundary!r}")
    polygon.flags.writeable = False

    return VoronoiCell(
        site_index=site,
        position=Point(float(sites[site, 0]), float(sites[site, 1])),
        polygon=polygon,
        triangle_indices=frozenset(triangles),
        neighbors=tuple(neighbors),
        on_hull=not closed,
    )


def _build_diagram(sites: np.ndarray, boundary: ConvexBoundary) -> VoronoiDiagram:
    triangulation = triangulate(sites)
    vertices = _voronoi_vertices(triangulation, sites)
    seeds = _seed_halfedges(triangulation, len(sites))

    cells = []
    for site in range(len(sites)):
        if seeds[site] == EMPTY:
            raise RuntimeError(f"Site {site} is not part of the triangulation")
        cells.append(_build_cell(site, sites, boundary, triangulation, vertices, int(seeds[site])))

    S = sites.copy()
    S.flags.writeable = False
    return VoronoiDiagram(
        site_positions=S,
        convex_boundary=boundary,
        cells=tuple(cells),
        triangulation=triangulation,
    )


def build_voronoi(config: VoronoiConfig) -> VoronoiDiagram:
    """
    Build a bounded voronoi diagram from `config`.

    All input is validated before any cell is built; either every cell is
    valid or an exception is raised.
    """
    if not isinstance(config.boundary, ConvexBoundary):
        raise VoronoiConfigError(f"boundary must be a ConvexBoundary, got {type(config.boundary).__name__}")

    iterations = int(config.lloyd_relaxation_iterations)
    if iterations < 0:
        raise VoronoiConfigError("lloyd_relaxation_iterations must be >= 0")

    sites = _validate_sites(config.sites)
    sites = _sites_inside(sites, config.boundary, config.remove_outside_sites)
    if len(sites) < 3:
        raise VoronoiConfigError(f"At least 3 sites inside the boundary are required, got {len(sites)}")

    logger.info("Building voronoi diagram", sites=len(sites), boundary=repr(config.boundary))

    try:
        diagram = _build_diagram(sites, config.boundary)
        for i in range(iterations):
            # lloyd relaxation: move every site to its cell's centroid
            sites = np.array([c.centroid() for c in diagram.cells], dtype=np.float64)
            diagram = _build_diagram(sites, config.boundary)
            logger.debug("Lloyd relaxation step", iteration=i + 1)
    except VoronoiConfigError:
        raise
    except ValueError as exc:
        # triangulation rejects collinear and coincident sites
        raise VoronoiConfigError(str(exc)) from exc

    logger.info(
        "Voronoi diagram built",
        cells=diagram.cell_count(),
        triangles=diagram.triangulation.triangle_count(),
        hull=len(diagram.triangulation.hull),
    )
    return diagram


def compute_voronoi(
    sites,
    boundary: ConvexBoundary,
    *,
    lloyd_relaxation_iterations: int = 0,
    remove_outside_sites: bool = True,
) -> VoronoiDiagram:
    """
    Compute the voronoi diagram of `sites` clipped to the convex `boundary`.

    Key design detail:
    - Cells are the duals of a Delaunay triangulation: the circumcenters of the
      triangles around each site, walked through the half-edge structure.
    - Hull sites have unbounded cells; their open chains are extended along the
      hull edge normals and closed before clipping.
    - Sites outside the boundary are dropped (or rejected with
      remove_outside_sites=False); cell indices follow the kept sites.
    """
    return build_voronoi(VoronoiConfig(
        sites=sites,
        boundary=boundary,
        lloyd_relaxation_iterations=lloyd_relaxation_iterations,
        remove_outside_sites=remove_outside_sites,
    ))
