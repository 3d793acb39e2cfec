from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

import numpy as np
import structlog
from scipy.spatial import Delaunay, QhullError

logger = structlog.get_logger()

EMPTY = -1


def triangle_of_edge(e: int) -> int:
    """Index of the triangle half-edge `e` belongs to."""
    return e // 3


def next_halfedge(e: int) -> int:
    return e - 2 if e % 3 == 2 else e + 1


def prev_halfedge(e: int) -> int:
    return e + 2 if e % 3 == 0 else e - 1


@dataclass(frozen=True, eq=False)
class Triangulation:
    """
    Delaunay triangulation in flat half-edge form.

    - triangles: (3T,) site index each half-edge starts at
    - halfedges: (3T,) twin half-edge, or EMPTY on the convex hull
    - hull: (H,) hull site indices, counter-clockwise

    Triangles are counter-clockwise: half-edges 3t, 3t+1, 3t+2 walk triangle t.
    """
    triangles: np.ndarray
    halfedges: np.ndarray
    hull: np.ndarray

    def __post_init__(self):
        if len(self.triangles) != len(self.halfedges):
            raise ValueError("triangles and halfedges must have the same length")
        if len(self.triangles) % 3 != 0:
            raise ValueError("half-edge count must be a multiple of 3")

    def triangle_count(self) -> int:
        return len(self.triangles) // 3

    def site_of_incoming(self, e: int) -> int:
        """Site half-edge `e` points to (`triangles[e]` is the site it starts at)."""
        return int(self.triangles[next_halfedge(e)])

    def triangle_sites(self, t: int) -> Tuple[int, int, int]:
        return (
            int(self.triangles[3 * t]),
            int(self.triangles[3 * t + 1]),
            int(self.triangles[3 * t + 2]),
        )

    def delaunay_edge_from_voronoi_edge(self, a: int, b: int) -> int:
        """
        Delaunay half-edge shared by triangles `a` and `b`, whose circumcenters
        are the endpoints of a voronoi edge.

        Returns EMPTY if the indices are out of range or the triangles are not
        adjacent (e.g. the voronoi vertex was created by clipping).
        """
        n = len(self.triangles)
        ta = a * 3
        tb = b * 3
        if a < 0 or b < 0 or ta >= n or tb >= n:
            return EMPTY

        for _ in range(3):
            for _ in range(3):
                if ta == int(self.halfedges[tb]):
                    return ta
                tb = next_halfedge(tb)
            ta = next_halfedge(ta)

        return EMPTY


def _pair_halfedges(triangles: np.ndarray) -> np.ndarray:
    halfedges = np.full(len(triangles), EMPTY, dtype=np.int64)
    unpaired: Dict[Tuple[int, int], int] = {}
    seen = set()

    for e in range(len(triangles)):
        origin = int(triangles[e])
        dest = int(triangles[next_halfedge(e)])
        if (origin, dest) in seen:
            # two triangles on the same side of one edge: they overlap
            raise ValueError(f"Edge {origin}->{dest} is used twice; sites are too close to collinear")
        seen.add((origin, dest))

        twin = unpaired.pop((dest, origin), None)
        if twin is None:
            unpaired[(origin, dest)] = e
        else:
            halfedges[e] = twin
            halfedges[twin] = e

    return halfedges


def _hull_from_halfedges(triangles: np.ndarray, halfedges: np.ndarray) -> np.ndarray:
    hull_next = {}
    for e in np.flatnonzero(halfedges == EMPTY):
        origin = int(triangles[e])
        if origin in hull_next:
            raise ValueError(f"Site {origin} appears twice on the hull; sites are too close to collinear")
        hull_next[origin] = int(triangles[next_halfedge(int(e))])

    if not hull_next:
        return np.zeros(0, dtype=np.int64)

    start = min(hull_next)
    hull = [start]
    s = hull_next[start]
    while s != start:
        if s not in hull_next or len(hull) >= len(hull_next):
            raise ValueError("Hull half-edges do not form a single loop")
        hull.append(s)
        s = hull_next[s]

    if len(hull) != len(hull_next):
        raise ValueError("Hull half-edges do not form a single loop")

    return np.asarray(hull, dtype=np.int64)


def triangulate(sites: np.ndarray) -> Triangulation:
    """
    Delaunay triangulation of `sites` (N,2) via scipy/qhull, converted to
    counter-clockwise half-edge form.

    Raises ValueError for fewer than 3 sites, all-collinear sites, sites
    qhull drops because they coincide with another site, and near-collinear
    input whose triangles overlap.
    """
    P = np.asarray(sites, dtype=np.float64)
    if P.ndim != 2 or P.shape[1] != 2:
        raise ValueError("sites must be (N,2)")
    if len(P) < 3:
        raise ValueError(f"At least 3 sites are required, got {len(P)}")

    # qhull works in absolute precision; centered coordinates keep distinct
    # sites far from the origin distinct
    Q = P - P.mean(axis=0)

    try:
        tri = Delaunay(Q)
    except QhullError as exc:
        raise ValueError("Sites cannot be triangulated (collinear or degenerate input)") from exc

    if len(tri.coplanar):
        dropped = sorted(int(i) for i in tri.coplanar[:, 0])
        raise ValueError(f"Sites {dropped} coincide with other sites; deduplicate the input")

    simplices = np.array(tri.simplices, dtype=np.int64)

    # qhull does not guarantee orientation; flip clockwise triangles
    a = Q[simplices[:, 0]]
    b = Q[simplices[:, 1]]
    c = Q[simplices[:, 2]]
    orient = (b[:, 0] - a[:, 0]) * (c[:, 1] - a[:, 1]) - (b[:, 1] - a[:, 1]) * (c[:, 0] - a[:, 0])
    cw = orient < 0
    simplices[cw, 1], simplices[cw, 2] = simplices[cw, 2].copy(), simplices[cw, 1].copy()

    triangles = simplices.reshape(-1)
    halfedges = _pair_halfedges(triangles)
    hull = _hull_from_halfedges(triangles, halfedges)

    for arr in (triangles, halfedges, hull):
        arr.flags.writeable = False

    logger.debug("Triangulated sites", sites=len(P), triangles=len(simplices), hull=len(hull))

    return Triangulation(triangles=triangles, halfedges=halfedges, hull=hull)
