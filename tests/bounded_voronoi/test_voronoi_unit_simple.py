import numpy as np
import pytest

from bounded_voronoi.boundary import BoundingBox
from bounded_voronoi.triangulation import EMPTY
from bounded_voronoi.voronoi import VoronoiConfig, VoronoiConfigError, build_voronoi, compute_voronoi

from tests.bounded_voronoi.helpers_validate import is_point_inside, total_area, validate_voronoi


def _unit_square_corners():
    return np.array([
        [0.0, 0.0],
        [1.0, 0.0],
        [1.0, 1.0],
        [0.0, 1.0],
    ], dtype=np.float64)


def test_square_corners_split_into_four_quadrants():
    sites = _unit_square_corners()
    d = compute_voronoi(sites, BoundingBox((0.5, 0.5), 1.0, 1.0))

    validate_voronoi(d)
    assert d.cell_count() == 4
    assert total_area(d) == pytest.approx(1.0)

    for cell in d.iter_cells():
        vertices = np.array(cell.iter_vertices())
        assert len(vertices) == 4
        assert cell.area() == pytest.approx(0.25)
        # all quadrants meet at the center
        assert np.any(np.all(np.isclose(vertices, (0.5, 0.5)), axis=1))
        assert cell.is_on_hull()


def test_three_sites_single_triangle():
    sites = np.array([[2.0, 2.0], [8.0, 3.0], [4.0, 7.0]], dtype=np.float64)
    d = compute_voronoi(sites, BoundingBox((5.0, 5.0), 10.0, 10.0))

    validate_voronoi(d)
    assert d.triangulation.triangle_count() == 1
    assert total_area(d) == pytest.approx(100.0)
    for cell in d.iter_cells():
        assert cell.triangles() == frozenset({0})
        assert len(cell.iter_neighbors()) == 2


def test_center_has_four_neighbors_in_symmetric_setup():
    # 5 points: center + 4 around it
    sites = np.array([
        [5.0, 5.0],   # center (id 0)
        [2.5, 5.0],   # left
        [7.5, 5.0],   # right
        [5.0, 2.5],   # bottom
        [5.0, 7.5],   # top
    ], dtype=np.float64)

    d = compute_voronoi(sites, BoundingBox((5.0, 5.0), 10.0, 10.0))
    validate_voronoi(d)

    center = d.cell(0)
    assert not center.is_on_hull()
    assert set(center.iter_neighbors()) == {1, 2, 3, 4}
    # square [3.75, 6.25]^2 bounded by the four bisectors
    assert center.area() == pytest.approx(6.25)
    assert total_area(d) == pytest.approx(100.0)

    for other in (1, 2, 3, 4):
        assert d.has_common_voronoi_edge(0, other)
        assert d.has_common_voronoi_edge(other, 0)


def test_collinear_sites_raise_config_error():
    sites = np.array([[1.0, 1.0], [2.0, 2.0], [3.0, 3.0]], dtype=np.float64)
    with pytest.raises(VoronoiConfigError):
        compute_voronoi(sites, BoundingBox((2.0, 2.0), 10.0, 10.0))


def test_too_few_sites_raise_config_error():
    with pytest.raises(VoronoiConfigError):
        compute_voronoi([[0.0, 0.0], [1.0, 1.0]], BoundingBox((0.0, 0.0), 10.0, 10.0))


def test_boundary_containing_no_site_raises():
    sites = _unit_square_corners() + 100.0
    with pytest.raises(VoronoiConfigError, match="contains none"):
        compute_voronoi(sites, BoundingBox((0.0, 0.0), 1.0, 1.0))


def test_sites_outside_boundary_are_removed_or_rejected():
    sites = np.array([[1, 1], [9, 1], [5, 8], [5, 4], [50, 50]], dtype=np.float64)
    boundary = BoundingBox((5.0, 5.0), 10.0, 10.0)

    d = compute_voronoi(sites, boundary)
    validate_voronoi(d)
    assert d.cell_count() == 4
    assert np.allclose(d.sites(), sites[:4])

    with pytest.raises(VoronoiConfigError, match="outside"):
        compute_voronoi(sites, boundary, remove_outside_sites=False)


def test_non_finite_sites_raise():
    sites = np.array([[0, 0], [1, 0], [np.nan, 1]], dtype=np.float64)
    with pytest.raises(VoronoiConfigError):
        compute_voronoi(sites, BoundingBox((0.0, 0.0), 10.0, 10.0))


def test_config_validation():
    sites = _unit_square_corners()
    with pytest.raises(VoronoiConfigError):
        build_voronoi(VoronoiConfig(sites=sites, boundary=(0.0, 0.0, 1.0, 1.0)))
    with pytest.raises(VoronoiConfigError):
        build_voronoi(VoronoiConfig(sites=sites, boundary=BoundingBox((0.5, 0.5), 1.0, 1.0),
                                    lloyd_relaxation_iterations=-1))


def test_diagram_is_read_only():
    d = compute_voronoi(_unit_square_corners(), BoundingBox((0.5, 0.5), 2.0, 2.0))
    with pytest.raises(ValueError):
        d.sites()[0, 0] = 3.0
    with pytest.raises(ValueError):
        d.cell(0).polygon[0, 0] = 3.0


def test_iter_vertices_is_restartable():
    d = compute_voronoi(_unit_square_corners(), BoundingBox((0.5, 0.5), 2.0, 2.0))
    cell = d.cell(2)
    assert list(cell.iter_vertices()) == list(cell.iter_vertices())
    assert [c.site() for c in d.iter_cells()] == [c.site() for c in d.iter_cells()]


def test_site_position_is_inside_its_cell():
    d = compute_voronoi(_unit_square_corners(), BoundingBox((0.5, 0.5), 2.0, 2.0))
    for cell in d.iter_cells():
        assert tuple(cell.site_position()) == tuple(d.sites()[cell.site()])
        assert is_point_inside(cell.polygon, cell.site_position())


def test_delaunay_edge_lookup_through_diagram():
    d = compute_voronoi(_unit_square_corners(), BoundingBox((0.5, 0.5), 2.0, 2.0))
    e = d.delaunay_edge_from_voronoi_edge(0, 1)
    assert e != EMPTY
    assert d.delaunay_edge_from_voronoi_edge(0, 2) == EMPTY
    assert d.delaunay_edge_from_voronoi_edge(2, 0) == EMPTY


def test_degenerate_triangle_uses_centroid():
    from bounded_voronoi.triangulation import Triangulation
    from bounded_voronoi.voronoi import _voronoi_vertices

    sites = np.array([[0.0, 0.0], [1.0, 1.0], [2.0, 2.0], [0.0, 2.0]], dtype=np.float64)
    tri = Triangulation(
        triangles=np.array([0, 1, 2, 0, 2, 3]),
        halfedges=np.array([EMPTY, EMPTY, 3, 2, EMPTY, EMPTY]),
        hull=np.array([0, 1, 2, 3]),
    )
    vertices = _voronoi_vertices(tri, sites)

    assert np.all(np.isfinite(vertices))
    assert np.allclose(vertices[0], (1.0, 1.0))  # mean of the collinear sites
    assert np.allclose(vertices[1], (1.0, 1.0))  # circumcenter of the right triangle
