import math
import numpy as np
import pytest
import rasterio

from trigrid.errors import GridSetupError
from trigrid.gridio import read_grid, read_slope_grid, write_grid
from trigrid.models import Grid, GridSpec
from trigrid.slope import slope_angles, slope_grid, to_radians


@pytest.mark.parametrize("registration", ["gridline", "pixel"])
def test_write_read_roundtrip(tmp_path, registration):
    spec = GridSpec.from_region(10.0, 14.0, -2.0, 1.0, 0.5, registration=registration)
    data = np.arange(spec.size, dtype=np.float64).reshape(spec.shape)
    data[0, 0] = np.nan
    path = str(tmp_path / "g.tif")
    write_grid(Grid(spec, data), path, title="test")

    with rasterio.open(path) as ds:
        assert ds.tags()["REGISTRATION"] == registration
        assert ds.dtypes[0] == "float32"

    back = read_grid(path)
    assert back.spec.registration == registration
    assert back.spec.shape == spec.shape
    assert back.spec.x_min == pytest.approx(spec.x_min)
    assert back.spec.y_min == pytest.approx(spec.y_min)
    assert back.spec.x_inc == pytest.approx(0.5)
    np.testing.assert_array_equal(np.isnan(back.data), np.isnan(data))
    np.testing.assert_allclose(back.data[1:], data[1:])


def test_numeric_nodata_reads_back_as_nan(tmp_path):
    spec = GridSpec.from_region(0.0, 2.0, 0.0, 2.0, 1.0)
    data = np.full(spec.shape, -9999.0)
    data[1, 1] = 3.0
    path = str(tmp_path / "g.tif")
    write_grid(Grid(spec, data), path, nodata=-9999.0)
    back = read_grid(path)
    assert back.data[1, 1] == 3.0
    assert np.isnan(back.data).sum() == 8


def test_slope_grid_in_degrees(tmp_path):
    spec = GridSpec.from_region(0.0, 4.0, 0.0, 4.0, 1.0)
    path = str(tmp_path / "slope.tif")
    write_grid(Grid(spec, np.full(spec.shape, 45.0)), path)
    slope = read_slope_grid(path, spec, degrees=True)
    np.testing.assert_allclose(slope, math.pi / 4)


def test_slope_grid_shape_must_match(tmp_path):
    spec = GridSpec.from_region(0.0, 4.0, 0.0, 4.0, 1.0)
    other = GridSpec.from_region(0.0, 2.0, 0.0, 2.0, 1.0)
    path = str(tmp_path / "slope.tif")
    write_grid(Grid(other, np.zeros(other.shape)), path)
    with pytest.raises(GridSetupError):
        read_slope_grid(path, spec)


def test_slope_from_ramp():
    spec = GridSpec.from_region(0.0, 4.0, 0.0, 4.0, 1.0)
    xs = np.arange(5, dtype=np.float64)
    dem = Grid(spec, np.tile(xs, (5, 1)))
    np.testing.assert_allclose(slope_grid(dem).data, math.pi / 4)


def test_slope_nan_is_flat():
    elev = np.zeros((3, 3))
    elev[1, 1] = np.nan
    assert np.isfinite(slope_angles(elev, 1.0, 1.0)).all()
    assert slope_angles(elev, 1.0, 1.0)[1, 1] == 0.0


def test_to_radians_passthrough():
    assert to_radians([0.5])[0] == 0.5
    assert to_radians([180.0], degrees=True)[0] == pytest.approx(math.pi)
