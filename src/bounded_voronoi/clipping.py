from __future__ import annotations

import math

import numpy as np

from .geometry import EQ_EPSILON, dist2, orient2d

# vertices closer than this (relative to the coordinate scale) are merged
MERGE_EPSILON = 1e3 * EQ_EPSILON


def _intersect(a, b, p, q, side_p: float, side_q: float) -> np.ndarray:
    """Point where segment pq crosses the line through clip edge ab."""
    t = side_p / (side_p - side_q)
    x = p[0] + t * (q[0] - p[0])
    y = p[1] + t * (q[1] - p[1])

    # snap onto axis-aligned clip edges
    if a[0] == b[0]:
        x = a[0]
    if a[1] == b[1]:
        y = a[1]
    return np.array([x, y], dtype=np.float64)


def clip_polygon(subject, clip_vertices) -> np.ndarray:
    """
    Sutherland-Hodgman clipping of a closed polygon against a convex,
    counter-clockwise clip polygon.

    Returns the cleaned (N,2) result; N == 0 if nothing is left.
    """
    C = np.asarray(clip_vertices, dtype=np.float64)
    output = [p for p in np.asarray(subject, dtype=np.float64)]

    for i in range(len(C)):
        if not output:
            break
        a = C[i]
        b = C[(i + 1) % len(C)]

        points = output
        output = []
        prev = points[-1]
        side_prev = orient2d(a, b, prev)
        for cur in points:
            side_cur = orient2d(a, b, cur)
            if side_cur >= 0.0:
                if side_prev < 0.0:
                    output.append(_intersect(a, b, prev, cur, side_prev, side_cur))
                output.append(cur)
            elif side_prev >= 0.0:
                output.append(_intersect(a, b, prev, cur, side_prev, side_cur))
            prev, side_prev = cur, side_cur

    scale = max(1.0, float(np.max(np.abs(C)))) if len(C) else 1.0
    return clean_polygon(output, scale)


def clean_polygon(points, scale: float = 1.0) -> np.ndarray:
    """Drop coincident and collinear vertices of a closed polygon."""
    tol = MERGE_EPSILON * max(1.0, float(scale))

    out = []
    for p in points:
        if out and dist2(out[-1], p) <= tol * tol:
            continue
        out.append(np.asarray(p, dtype=np.float64))
    while len(out) > 1 and dist2(out[0], out[-1]) <= tol * tol:
        out.pop()

    changed = True
    while changed and len(out) >= 3:
        changed = False
        for i in range(len(out)):
            a = out[i - 1]
            b = out[i]
            c = out[(i + 1) % len(out)]
            # |orient2d| / |ac| is the distance of b from line ac
            if abs(orient2d(a, b, c)) <= tol * math.sqrt(dist2(a, c)):
                del out[i]
                changed = True
                break

    if not out:
        return np.zeros((0, 2), dtype=np.float64)
    return np.asarray(out, dtype=np.float64)


def _outward_normal(p, q) -> np.ndarray:
    """Unit normal pointing right of p->q, i.e. out of a counter-clockwise hull."""
    dx = float(q[0]) - float(p[0])
    dy = float(q[1]) - float(p[1])
    n = math.hypot(dx, dy)
    return np.array([dy / n, -dx / n], dtype=np.float64)


def close_hull_chain(chain, site, prev_site, next_site, extent: float) -> np.ndarray:
    """
    Close the open voronoi chain of a hull site into a finite polygon.

    chain: (N,2) counter-clockwise circumcenters. chain[0] lies on the bisector
    of site/next_site, chain[-1] on the bisector of prev_site/site, where
    prev_site -> site -> next_site runs counter-clockwise along the hull.

    Both ends are extended along the outward normals of the adjacent hull edges
    far past the boundary, and the wedge is closed through a point on the
    exterior angle bisector. Clipping the result to the boundary yields the
    bounded cell, including any boundary corners inside the wedge.

    extent is the diameter of the boundary, which contains the site.
    """
    chain = np.asarray(chain, dtype=np.float64)
    n_in = _outward_normal(prev_site, site)
    n_out = _outward_normal(site, next_site)

    local = np.vstack([chain, [site]])
    # every boundary point is within extent of the site
    reach = 4.0 * (float(np.linalg.norm(local.max(axis=0) - local.min(axis=0))) + float(extent)) + 1.0

    bisector = n_in + n_out
    norm = float(np.linalg.norm(bisector))
    if norm <= EQ_EPSILON:
        # hull folds back on itself; the wedge is a half-plane
        bisector = np.array([-n_in[1], n_in[0]], dtype=np.float64)
    else:
        bisector = bisector / norm

    far_in = chain[-1] + reach * n_in
    far_out = chain[0] + reach * n_out
    far_mid = 0.5 * (far_in + far_out) + reach * bisector

    return np.vstack([chain, far_in, far_mid, far_out])
