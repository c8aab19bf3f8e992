# region Imports
import numpy as np
from trigrid.config import DEFAULT_EMPTY, WRITE_POLICIES
from trigrid.models import Grid, GridSpec
# endregion

# region Coordinate <-> Index
# Row 0 is the top (y_max) row; pixel-registered nodes sit at cell centers.
def x_to_col(x, spec: GridSpec):
    return np.floor((x - spec.x_min) / spec.x_inc - spec.node_offset + 0.5).astype(np.int64)


def y_to_row(y, spec: GridSpec):
    return np.floor((spec.y_max - y) / spec.y_inc - spec.node_offset + 0.5).astype(np.int64)


def col_to_x(col, spec: GridSpec):
    return spec.x_min + (col + spec.node_offset) * spec.x_inc


def row_to_y(row, spec: GridSpec):
    return spec.y_max - (row + spec.node_offset) * spec.y_inc
# endregion

# region Node Coordinates
def node_coords(spec: GridSpec):
    """Per-column x and per-row y of every node."""
    xs = col_to_x(np.arange(spec.n_columns, dtype=np.float64), spec)
    ys = row_to_y(np.arange(spec.n_rows, dtype=np.float64), spec)
    return xs, ys


def xy_grid(spec: GridSpec):
    xs, ys = node_coords(spec)
    return np.tile(xs, spec.n_rows), np.repeat(ys, spec.n_columns)
# endregion

# region Accumulator
class GridAccumulator:
    """
    Single owner of the output buffer. Every node starts at `empty`; writes
    go through `write`, whose behaviour on already-claimed nodes is fixed by
    `policy`:
      "last":  last writer wins (triangulation order decides shared nodes)
      "first": set-if-unset (the earliest triangle keeps shared nodes)
    """
    def __init__(self, spec: GridSpec, empty: float = DEFAULT_EMPTY, policy: str = "last", dtype=np.float64):
        if policy not in WRITE_POLICIES:
            raise ValueError(f"Unknown write policy '{policy}', use one of {WRITE_POLICIES}.")
        self.spec = spec
        self.empty = float(empty)
        self.policy = policy
        self.data = np.full(spec.shape, self.empty, dtype=dtype)
        self._claimed = np.zeros(spec.shape, dtype=bool)

    @property
    def n_claimed(self) -> int:
        return int(self._claimed.sum())

    def write(self, rows, cols, values) -> int:
        """Store `values` at (rows, cols); returns how many nodes were written."""
        rows = np.asarray(rows, dtype=np.int64).ravel()
        cols = np.asarray(cols, dtype=np.int64).ravel()
        values = np.broadcast_to(np.asarray(values, dtype=np.float64), rows.shape)
        if self.policy == "first":
            free = ~self._claimed[rows, cols]
            rows, cols, values = rows[free], cols[free], values[free]
        self.data[rows, cols] = values
        self._claimed[rows, cols] = True
        return int(rows.size)

    def to_grid(self) -> Grid:
        return Grid(spec=self.spec, data=self.data)
# endregion
