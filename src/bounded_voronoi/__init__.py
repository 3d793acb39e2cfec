from .boundary import ConvexBoundary, BoundingBox, ConvexPolygonBoundary, CircleBoundary
from .datastructures import VoronoiDiagram, VoronoiCell
from .geometry import EQ_EPSILON, Point, DegenerateTriangleError
from .sampling import sample_sites_in_boundary, generate_rect_sites, generate_square_sites, generate_circle_sites
from .triangulation import EMPTY, Triangulation, triangulate, triangle_of_edge, next_halfedge, prev_halfedge
from .voronoi import VoronoiConfig, VoronoiConfigError, build_voronoi, compute_voronoi

__all__ = [
    "ConvexBoundary",
    "BoundingBox",
    "ConvexPolygonBoundary",
    "CircleBoundary",
    "VoronoiDiagram",
    "VoronoiCell",
    "EQ_EPSILON",
    "Point",
    "DegenerateTriangleError",
    "sample_sites_in_boundary",
    "generate_rect_sites",
    "generate_square_sites",
    "generate_circle_sites",
    "EMPTY",
    "Triangulation",
    "triangulate",
    "triangle_of_edge",
    "next_halfedge",
    "prev_halfedge",
    "VoronoiConfig",
    "VoronoiConfigError",
    "build_voronoi",
    "compute_voronoi",
]
