# gridio.py
import logging
from typing import Optional
import numpy as np
import rasterio
from rasterio.transform import from_origin

from trigrid.config import DEFAULT_EMPTY, GRID_FILE_DRIVER, GRID_FILE_DTYPE, REGISTRATIONS
from trigrid.errors import GridSetupError
from trigrid.models import Grid, GridSpec
from trigrid.slope import to_radians

logger = logging.getLogger(__name__)


def _grid_transform(spec: GridSpec):
    # raster cells are areas; gridline nodes sit at cell centers half an increment outside the region
    west = spec.x_min + (spec.node_offset - 0.5) * spec.x_inc
    north = spec.y_max + (0.5 - spec.node_offset) * spec.y_inc
    return from_origin(west, north, spec.x_inc, spec.y_inc)


def write_grid(grid: Grid, path: str, crs=None, nodata: float = DEFAULT_EMPTY, title: Optional[str] = None) -> str:
    spec = grid.spec
    with rasterio.open(
        path, "w",
        driver=GRID_FILE_DRIVER,
        height=spec.n_rows, width=spec.n_columns, count=1,
        dtype=GRID_FILE_DTYPE,
        crs=crs,
        transform=_grid_transform(spec),
        nodata=nodata,
    ) as ds:
        ds.write(grid.data.astype(GRID_FILE_DTYPE), 1)
        tags = {"REGISTRATION": spec.registration}
        if title:
            tags["TITLE"] = title
        ds.update_tags(**tags)
    logger.info(f"Wrote {spec.n_columns} x {spec.n_rows} grid to {path}")
    return path


def read_grid(path: str, registration: Optional[str] = None) -> Grid:
    """
    Read band 1 of a raster as a Grid. Registration comes from the file's
    REGISTRATION tag (written by write_grid), else the argument, else pixel.
    """
    with rasterio.open(path) as ds:
        tf = ds.transform
        if tf.b != 0.0 or tf.d != 0.0:
            raise GridSetupError(f"{path}: rotated rasters are not supported")
        reg = ds.tags().get("REGISTRATION") or registration or "pixel"
        if reg not in REGISTRATIONS:
            raise GridSetupError(f"{path}: unknown registration '{reg}'")

        arr = ds.read(1).astype(np.float64)
        nodata = ds.nodata
        if nodata is not None and not np.isnan(nodata):
            arr = np.where(np.isclose(arr, nodata), np.nan, arr)
        if tf.e > 0:  # south-up raster
            arr = arr[::-1]

        x_inc, y_inc = abs(tf.a), abs(tf.e)
        off = 0.5 if reg == "pixel" else 0.0
        spec = GridSpec(
            x_min=ds.bounds.left + (0.5 - off) * x_inc,
            y_min=ds.bounds.bottom + (0.5 - off) * y_inc,
            x_inc=x_inc, y_inc=y_inc,
            n_columns=ds.width, n_rows=ds.height,
            registration=reg,
        )
    return Grid(spec=spec, data=arr)


def read_slope_grid(path: str, spec: GridSpec, degrees: bool = False) -> np.ndarray:
    """Slope angles (radians) aligned node for node with the output grid."""
    slope = read_grid(path, registration=spec.registration)
    if slope.data.shape != spec.shape:
        raise GridSetupError(
            f"Slope grid {path} is {slope.data.shape[1]} x {slope.data.shape[0]}, "
            f"output grid is {spec.n_columns} x {spec.n_rows}"
        )
    return to_radians(slope.data, degrees=degrees)
