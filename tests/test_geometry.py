import math
import numpy as np
import pytest

from trigrid.geometry import INSIDE, ON_EDGE, OUTSIDE, close_ring, fit_plane, non_zero_winding, vertex_distances


@pytest.mark.parametrize("vx, vy, vz", [
    ([0.0, 4.0, 0.0], [0.0, 0.0, 4.0], [1.0, 2.0, 3.0]),
    ([1.5, -2.0, 7.25], [0.3, 5.5, -1.0], [10.0, -4.0, 0.5]),
    ([1e5, 1e5 + 3.0, 1e5 + 1.0], [2e5, 2e5 + 1.0, 2e5 + 4.0], [-3.0, 8.0, 0.0]),
])
def test_plane_reproduces_vertices(vx, vy, vz):
    plane = fit_plane(vx, vy, vz)
    assert not plane.degenerate
    for x, y, z in zip(vx, vy, vz):
        assert plane.evaluate(x, y) == pytest.approx(z, rel=1e-9, abs=1e-7)


def test_plane_coefficients():
    plane = fit_plane([0.0, 4.0, 0.0], [0.0, 0.0, 4.0], [1.0, 2.0, 3.0])
    assert plane.a == pytest.approx(0.25)
    assert plane.b == pytest.approx(0.5)
    assert plane.c == pytest.approx(1.0)


def test_collinear_triangle_is_degenerate():
    plane = fit_plane([0.0, 1.0, 2.0], [0.0, 1.0, 2.0], [1.0, 2.0, 3.0])
    assert plane.degenerate
    assert math.isnan(plane.a) and math.isnan(plane.b) and math.isnan(plane.c)


def test_winding_classification():
    rx, ry = close_ring([0.0, 4.0, 0.0], [0.0, 0.0, 4.0])
    assert len(rx) == 4 and rx[0] == rx[-1] and ry[0] == ry[-1]

    xp = np.array([1.0, 3.0, 2.0, 0.0, 2.0, -1.0])
    yp = np.array([1.0, 3.0, 2.0, 0.0, 0.0, 1.0])
    got = non_zero_winding(xp, yp, rx, ry)
    assert got.tolist() == [INSIDE, OUTSIDE, ON_EDGE, ON_EDGE, ON_EDGE, OUTSIDE]


def test_winding_ignores_orientation():
    rx, ry = close_ring([0.0, 0.0, 4.0], [0.0, 4.0, 0.0])
    assert non_zero_winding(1.0, 1.0, rx, ry) == INSIDE


def test_vertex_distances():
    d = vertex_distances([0.0, 3.0], [0.0, 4.0], [0.0, 3.0, 0.0], [0.0, 0.0, 4.0])
    assert d.shape == (3, 2)
    np.testing.assert_allclose(d[:, 0], [0.0, 3.0, 4.0])
    np.testing.assert_allclose(d[:, 1], [5.0, 4.0, 3.0])
