import numpy as np
import pytest

import trigrid.pipeline as pipeline
from trigrid.errors import GridSetupError, NoDataError, OptionError
from trigrid.grid import xy_grid
from trigrid.models import Points
from trigrid.pipeline import TriangulateOptions, triangulate

GRID = dict(region=(0.0, 4.0, 0.0, 4.0), inc=(1.0, 1.0))


def test_default_output_is_indices(plane_points):
    result = triangulate(plane_points, TriangulateOptions())
    assert result.grid is None
    assert len(result.segments) == 1
    header, rows = result.segments[0]
    assert header is None
    assert rows == [tuple(t) for t in result.triangles.tolist()]


def test_plane_grid(plane_points):
    result = triangulate(plane_points, TriangulateOptions(grid_mode="z", **GRID))
    x, y = xy_grid(result.grid.spec)
    np.testing.assert_allclose(result.grid.data.ravel(), 2 * x + 3 * y + 1, atol=1e-9)
    assert result.segments == []


@pytest.mark.parametrize("mode, expected", [("dx", 2.0), ("dy", 3.0)])
def test_derivative_grid(plane_points, mode, expected):
    result = triangulate(plane_points, TriangulateOptions(grid_mode=mode, **GRID))
    np.testing.assert_allclose(result.grid.data, expected, atol=1e-9)


def test_grid_plus_indices(plane_points):
    result = triangulate(plane_points, TriangulateOptions(grid_mode="z", export="indices", **GRID))
    assert result.grid is not None
    assert len(result.segments[0][1]) == 4


def test_edges_with_z(plane_points):
    result = triangulate(plane_points, TriangulateOptions(export="edges", with_z=True))
    assert len(result.edges) == 8
    assert len(result.segments) == 8
    header, rows = result.segments[0]
    begin, end = result.edges[0]
    assert header == f"Edge {begin}-{end}"
    assert rows[0] == (plane_points.x[begin], plane_points.y[begin], plane_points.z[begin])


def test_polygons(plane_points):
    result = triangulate(plane_points, TriangulateOptions(export="polygons"))
    assert len(result.segments) == 4
    header, rows = result.segments[2]
    i, j, k = result.triangles[2]
    assert header == f"Polygon {i}-{j}-{k} -Z2"
    assert len(rows) == 3 and len(rows[0]) == 2


def test_voronoi_skips_delaunay(plane_points, monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("delaunay must not run for Voronoi output")
    monkeypatch.setattr(pipeline, "delaunay", fail)
    result = triangulate(plane_points, TriangulateOptions(export="voronoi", region=(-10.0, 10.0, -10.0, 10.0)))
    assert result.voronoi.shape == (8, 2, 2)
    assert [h for h, _ in result.segments] == [f"Edge {n}" for n in range(8)]


def test_uncertainty_grid(uncertain_points):
    slope = np.zeros((5, 5))
    result = triangulate(uncertain_points, TriangulateOptions(grid_mode="uncertainty", **GRID), slope=slope)
    assert np.isfinite(result.grid.data).all()
    assert (result.grid.data >= 0.0).all()


def test_uncertainty_options_reach_params(uncertain_points):
    slope = np.zeros((5, 5))
    base = triangulate(uncertain_points, TriangulateOptions(grid_mode="uncertainty", **GRID), slope=slope)
    wider = triangulate(uncertain_points, TriangulateOptions(grid_mode="uncertainty", s_h=3.0, **GRID), slope=slope)
    assert (wider.grid.data >= base.grid.data).all()
    assert (wider.grid.data > base.grid.data).any()


# region Fatal conditions happen before triangulation
@pytest.fixture
def no_delaunay(monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("triangulation ran")
    monkeypatch.setattr(pipeline, "delaunay", fail)


@pytest.mark.parametrize("options, slope, error", [
    (TriangulateOptions(grid_mode="z"), None, GridSetupError),
    (TriangulateOptions(grid_mode="z", region=(0.0, 4.0, 0.0, 4.0), inc=(0.0, 0.0)), None, GridSetupError),
    (TriangulateOptions(grid_mode="z", export="voronoi", **GRID), None, OptionError),
    (TriangulateOptions(export="voronoi"), None, OptionError),
    (TriangulateOptions(export="hull"), None, OptionError),
    (TriangulateOptions(grid_mode="uncertainty", **GRID), None, OptionError),
    (TriangulateOptions(grid_mode="uncertainty", **GRID), np.zeros((2, 2)), GridSetupError),
])
def test_fatal_before_triangulation(uncertain_points, no_delaunay, options, slope, error):
    with pytest.raises(error):
        triangulate(uncertain_points, options, slope=slope)


def test_no_points(no_delaunay):
    with pytest.raises(NoDataError):
        triangulate(Points([], []), TriangulateOptions())


def test_plane_grid_needs_z(no_delaunay):
    with pytest.raises(OptionError):
        triangulate(Points([0.0, 1.0, 0.0], [0.0, 0.0, 1.0]), TriangulateOptions(grid_mode="z", **GRID))
# endregion


def test_unneeded_increment_warns(plane_points, caplog):
    triangulate(plane_points, TriangulateOptions(inc=(1.0, 1.0)))
    assert "Increments not needed" in caplog.text


def test_projection_only_changes_triangulation():
    lon = np.array([0.0, 1.0, 0.0, 1.0, 0.5])
    lat = np.array([45.0, 45.0, 46.0, 46.0, 45.5])
    pts = Points(lon, lat, z=np.ones(5))
    result = triangulate(pts, TriangulateOptions(export="polygons", with_z=True, projection="EPSG:3857"))
    assert len(result.triangles) == 4
    # rows keep the input lon/lat
    xs = {row[0] for _, rows in result.segments for row in rows}
    assert xs <= set(lon.tolist())
