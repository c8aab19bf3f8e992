import matplotlib
matplotlib.use("Agg")

import numpy as np
import pytest

from trigrid.models import GridSpec, Points


@pytest.fixture
def plane_points():
    """Square corners plus center, sampled from z = 2x + 3y + 1."""
    x = np.array([0.0, 4.0, 0.0, 4.0, 2.0])
    y = np.array([0.0, 0.0, 4.0, 4.0, 2.0])
    return Points(x, y, z=2 * x + 3 * y + 1)


@pytest.fixture
def uncertain_points(plane_points):
    p = plane_points
    return Points(p.x, p.y, z=p.z,
                  h=np.array([0.5, -1.0, 0.25, 0.0, 1.5]),
                  v=np.array([0.1, 0.2, -0.3, 0.4, 0.05]))


@pytest.fixture
def unit_spec():
    return GridSpec.from_region(0.0, 4.0, 0.0, 4.0, 1.0)
