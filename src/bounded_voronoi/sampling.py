import numpy as np

from .boundary import ConvexBoundary
from .geometry import polygon_area


def sample_sites_in_boundary(
    boundary: ConvexBoundary,
    *,
    target_area: float | None = None,
    n_points: int | None = None,
    rng: np.random.Generator,
    batch_size: int = 256,
) -> np.ndarray:
    """
    Uniformly sample sites inside the boundary.

    Candidates are drawn in batches over the corners' bounding box and
    rejected with `boundary.is_inside` (no tolerance). With `target_area`
    the count is the boundary area divided by it, at least 1.
    """
    V = boundary.vertices()

    if n_points is None:
        if target_area is None:
            raise ValueError("Either target_area or n_points required")
        if target_area <= 0:
            raise ValueError("target_area must be > 0")
        n_points = max(1, int(polygon_area(V) / target_area))

    lo = V.min(axis=0)
    hi = V.max(axis=0)

    accepted = []
    count = 0
    while count < n_points:
        candidates = rng.uniform(lo, hi, size=(batch_size, 2))
        inside = candidates[boundary.contains_all(candidates, tolerance=0.0)]
        accepted.append(inside)
        count += len(inside)

    return np.concatenate(accepted)[:n_points]


def generate_rect_sites(
    center,
    width: float,
    height: float,
    nx: int,
    ny: int,
    *,
    jitter: float = 0.0,
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """
    nx * ny sites at the centers of a regular grid over the rectangle.
    jitter (fraction of the grid spacing, < 0.5) moves each site randomly.
    """
    if nx < 1 or ny < 1:
        raise ValueError("nx and ny must be >= 1")
    if not 0.0 <= jitter < 0.5:
        raise ValueError("jitter must be in [0, 0.5)")

    dx = float(width) / nx
    dy = float(height) / ny
    x0 = float(center[0]) - float(width) / 2.0 + dx / 2.0
    y0 = float(center[1]) - float(height) / 2.0 + dy / 2.0

    gx, gy = np.meshgrid(x0 + dx * np.arange(nx), y0 + dy * np.arange(ny))
    sites = np.column_stack([gx.ravel(), gy.ravel()])

    if jitter > 0.0:
        if rng is None:
            raise ValueError("rng required when jitter > 0")
        sites = sites + rng.uniform(-jitter, jitter, size=sites.shape) * np.array([dx, dy])

    return sites


def generate_square_sites(center, size: float, n: int, **kwargs) -> np.ndarray:
    return generate_rect_sites(center, size, size, n, n, **kwargs)


def generate_circle_sites(center, radius: float, n_points: int, *, include_center: bool = True) -> np.ndarray:
    """n_points sites evenly spaced on a circle, optionally plus its center."""
    if n_points < 3:
        raise ValueError("n_points must be >= 3")

    angles = np.linspace(0.0, 2.0 * np.pi, n_points, endpoint=False)
    ring = np.column_stack([
        float(center[0]) + float(radius) * np.cos(angles),
        float(center[1]) + float(radius) * np.sin(angles),
    ])
    if include_center:
        ring = np.vstack([[float(center[0]), float(center[1])], ring])
    return ring
