# region Imports
from __future__ import annotations
from typing import Callable, Optional, Tuple
import logging
import numpy as np

from trigrid.config import DEFAULT_EMPTY, DEGENERATE_POLICIES, GRID_MODES
from trigrid.errors import GridSetupError, OptionError
from trigrid.geometry import OUTSIDE, close_ring, fit_plane, non_zero_winding
from trigrid.grid import GridAccumulator, col_to_x, row_to_y, x_to_col, y_to_row
from trigrid.models import Grid, GridSpec, PlaneFit, Points
from trigrid.uncertainty import UncertaintyParams, triangle_uncertainty_fn
# endregion

logger = logging.getLogger(__name__)

# producer(rows, cols, xp, yp) -> values for the inside nodes
ValueFn = Callable[[np.ndarray, np.ndarray, np.ndarray, np.ndarray], np.ndarray]


# region Candidate Box
def triangle_index_box(vx, vy, spec: GridSpec) -> Optional[Tuple[int, int, int, int]]:
    """
    Row/col range a triangle may cover, clipped to the grid; None when the
    triangle's bounding box misses the grid. row_min <= row_max and
    col_min <= col_max always hold.
    """
    col_min = int(x_to_col(min(vx), spec))
    col_max = int(x_to_col(max(vx), spec))
    row_min = int(y_to_row(max(vy), spec))
    row_max = int(y_to_row(min(vy), spec))

    if col_max < 0 or col_min >= spec.n_columns:
        return None
    if row_max < 0 or row_min >= spec.n_rows:
        return None

    col_min, col_max = max(col_min, 0), min(col_max, spec.n_columns - 1)
    row_min, row_max = max(row_min, 0), min(row_max, spec.n_rows - 1)
    return row_min, row_max, col_min, col_max
# endregion


# region Single Triangle
def rasterize_triangle(vx, vy, spec: GridSpec, value_fn: ValueFn, acc: GridAccumulator, box=None) -> int:
    """
    Write value_fn at every node inside (or on the edge of) the triangle.
    box: precomputed triangle_index_box, looked up when not given.
    """
    if box is None:
        box = triangle_index_box(vx, vy, spec)
        if box is None:
            return 0
    row_min, row_max, col_min, col_max = box

    rows, cols = np.mgrid[row_min:row_max + 1, col_min:col_max + 1]
    xp = col_to_x(cols, spec)
    yp = row_to_y(rows, spec)

    ring_x, ring_y = close_ring(vx, vy)
    inside = non_zero_winding(xp, yp, ring_x, ring_y) != OUTSIDE
    if not inside.any():
        return 0

    rows, cols, xp, yp = rows[inside], cols[inside], xp[inside], yp[inside]
    return acc.write(rows, cols, value_fn(rows, cols, xp, yp))
# endregion


# region Value Producers
def plane_value_fn(mode: str, plane: PlaneFit) -> ValueFn:
    if mode == "dx":
        return lambda rows, cols, xp, yp: plane.a
    if mode == "dy":
        return lambda rows, cols, xp, yp: plane.b
    return lambda rows, cols, xp, yp: plane.evaluate(xp, yp)
# endregion


# region Gridding Driver
def grid_triangles(
    points: Points,
    triangles: np.ndarray,
    spec: GridSpec,
    mode: str = "z",
    *,
    slope: Optional[np.ndarray] = None,
    empty: float = DEFAULT_EMPTY,
    degenerate: str = "propagate",
    write_policy: str = "last",
    params: Optional[UncertaintyParams] = None,
) -> Grid:
    """
    Grid a triangulation, one plane per triangle, in triangulation order.

    mode:       "z" plane value, "dx"/"dy" plane gradient, "uncertainty"
    slope:      node-aligned slope angles in radians ("uncertainty" only)
    degenerate: "propagate" writes the non-finite plane of a collinear
                triangle into the nodes it touches, "skip" drops it
    """
    if mode not in GRID_MODES:
        raise OptionError(f"Unknown grid mode '{mode}', use one of {GRID_MODES}.")
    if degenerate not in DEGENERATE_POLICIES:
        raise OptionError(f"Unknown degenerate policy '{degenerate}', use one of {DEGENERATE_POLICIES}.")

    if mode == "uncertainty":
        if not points.has_uncertainty:
            raise OptionError("Uncertainty gridding needs (x,y,h,v) or (x,y,z,h,v) input.")
        if slope is None:
            raise OptionError("Uncertainty gridding needs a slope grid.")
        slope = np.asarray(slope, dtype=np.float64)
        if slope.shape != spec.shape:
            raise GridSetupError(f"Slope grid shape {slope.shape} does not match output grid {spec.shape}.")
        if params is None:
            params = UncertaintyParams(delta_min=spec.x_inc)
    elif not points.has_z:
        raise OptionError(f"Grid mode '{mode}' needs (x,y,z) input.")

    triangles = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
    acc = GridAccumulator(spec, empty=empty, policy=write_policy)
    z = points.z if points.has_z else np.zeros(len(points))

    n_missed = n_degenerate = 0
    for k, tri in enumerate(triangles):
        vx, vy, vz = points.x[tri], points.y[tri], z[tri]
        plane = fit_plane(vx, vy, vz)

        if plane.degenerate:
            n_degenerate += 1
            if degenerate == "skip":
                logger.debug(f"Skipping degenerate triangle {k} {tuple(tri)}")
                continue

        box = triangle_index_box(vx, vy, spec)
        if box is None:
            n_missed += 1
            continue

        if mode == "uncertainty":
            value_fn = triangle_uncertainty_fn(vx, vy, points.h[tri], points.v[tri], slope, params)
        else:
            value_fn = plane_value_fn(mode, plane)
        rasterize_triangle(vx, vy, spec, value_fn, acc, box=box)

    if n_degenerate:
        action = "skipped" if degenerate == "skip" else "gridded with non-finite planes"
        logger.warning(f"{n_degenerate} degenerate triangle(s) {action}")
    logger.debug(f"{n_missed} triangle(s) outside the grid")
    logger.info(f"Gridded {len(triangles)} triangles into {spec.n_columns} x {spec.n_rows} nodes "
                f"({acc.n_claimed} covered)")
    return acc.to_grid()
# endregion
