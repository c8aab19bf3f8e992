# models.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import logging
import math
import numpy as np

from trigrid.config import DEFAULT_REGISTRATION, GRID_INC_TOLERANCE, REGISTRATIONS
from trigrid.errors import GridSetupError, NoDataError

logger = logging.getLogger(__name__)


# region Points
@dataclass(frozen=True)
class Points:
    """
    Scattered input samples held as parallel arrays; the array index is the
    vertex id used by triangles and edges.
      z: field value (optional)
      h: horizontal uncertainty, stored as absolute value (optional)
      v: vertical uncertainty, stored as absolute value (optional)
    """
    x: np.ndarray
    y: np.ndarray
    z: Optional[np.ndarray] = None
    h: Optional[np.ndarray] = None
    v: Optional[np.ndarray] = None

    def __post_init__(self):
        n = None
        for name in ("x", "y", "z", "h", "v"):
            arr = getattr(self, name)
            if arr is None:
                continue
            arr = np.asarray(arr, dtype=np.float64).ravel()
            if name in ("h", "v"):
                arr = np.abs(arr)
            arr.setflags(write=False)
            if n is None:
                n = arr.size
            elif arr.size != n:
                raise ValueError(f"Column '{name}' has {arr.size} values, expected {n}.")
            object.__setattr__(self, name, arr)
        if (self.h is None) != (self.v is None):
            raise ValueError("Horizontal and vertical uncertainty must be given together.")

    def __len__(self) -> int:
        return int(self.x.size)

    @property
    def has_z(self) -> bool:
        return self.z is not None

    @property
    def has_uncertainty(self) -> bool:
        return self.h is not None

    @classmethod
    def from_columns(cls, table, has_z: bool = True, has_uncertainty: bool = False) -> Points:
        """
        Map a (n, k) table onto point columns:
          (x,y)  (x,y,z)  (x,y,h,v)  (x,y,z,h,v)
        Extra trailing columns are ignored.
        """
        arr = np.asarray(table, dtype=np.float64)
        if arr.size == 0:
            raise NoDataError("No data points given - so no triangulation can take effect.")
        arr = np.atleast_2d(arr)
        need = 2 + int(has_z) + 2 * int(has_uncertainty)
        if arr.shape[1] < need:
            raise ValueError(f"Expected at least {need} columns per record, got {arr.shape[1]}.")
        z = arr[:, 2] if has_z else None
        h = v = None
        if has_uncertainty:
            k = 3 if has_z else 2
            h, v = arr[:, k], arr[:, k + 1]
        return cls(arr[:, 0], arr[:, 1], z=z, h=h, v=v)

    @classmethod
    def from_records(cls, records) -> Points:
        """Build from pre-parsed tuples of 2, 3, 4 or 5 floats (all the same length)."""
        records = list(records)
        if not records:
            raise NoDataError("No data points given - so no triangulation can take effect.")
        widths = {len(r) for r in records}
        if len(widths) != 1:
            raise ValueError(f"Records have mixed widths: {sorted(widths)}")
        width = widths.pop()
        layouts = {2: (False, False), 3: (True, False), 4: (False, True), 5: (True, True)}
        if width not in layouts:
            raise ValueError(f"Records must have 2 to 5 fields, got {width}.")
        has_z, has_unc = layouts[width]
        return cls.from_columns(records, has_z=has_z, has_uncertainty=has_unc)
# endregion


# region Grid Header
@dataclass(frozen=True)
class GridSpec:
    x_min: float
    y_min: float
    x_inc: float
    y_inc: float
    n_columns: int
    n_rows: int
    registration: str = DEFAULT_REGISTRATION

    @property
    def is_pixel(self) -> bool:
        return self.registration == "pixel"

    @property
    def node_offset(self) -> float:
        # pixel-registered nodes sit half a cell inside the region
        return 0.5 if self.is_pixel else 0.0

    @property
    def x_max(self) -> float:
        return self.x_min + (self.n_columns - 1 + 2 * self.node_offset) * self.x_inc

    @property
    def y_max(self) -> float:
        return self.y_min + (self.n_rows - 1 + 2 * self.node_offset) * self.y_inc

    @property
    def shape(self):
        return (self.n_rows, self.n_columns)

    @property
    def size(self) -> int:
        return self.n_rows * self.n_columns

    @classmethod
    def from_region(
        cls,
        x_min: float,
        x_max: float,
        y_min: float,
        y_max: float,
        x_inc: float,
        y_inc: Optional[float] = None,
        registration: str = DEFAULT_REGISTRATION,
    ) -> GridSpec:
        """Resolve a region and spacing into a grid header."""
        if y_inc is None:
            y_inc = x_inc
        if registration not in REGISTRATIONS:
            raise GridSetupError(f"Unknown registration '{registration}', use one of {REGISTRATIONS}.")
        if not (x_inc > 0.0 and y_inc > 0.0):
            raise GridSetupError("Must specify positive increment(s).")
        if not (x_max > x_min and y_max > y_min):
            raise GridSetupError(f"Region {x_min}/{x_max}/{y_min}/{y_max} is empty.")

        extra = 0 if registration == "pixel" else 1
        # whole increments only; the grid never reaches past x_max/y_max
        n_columns = int(math.floor((x_max - x_min) / x_inc + GRID_INC_TOLERANCE)) + extra
        n_rows = int(math.floor((y_max - y_min) / y_inc + GRID_INC_TOLERANCE)) + extra
        if n_columns < 1 or n_rows < 1:
            raise GridSetupError("Increments are larger than the region.")

        spec = cls(float(x_min), float(y_min), float(x_inc), float(y_inc), n_columns, n_rows, registration)
        if not (math.isclose(spec.x_max, x_max, rel_tol=0.0, abs_tol=GRID_INC_TOLERANCE * x_inc)
                and math.isclose(spec.y_max, y_max, rel_tol=0.0, abs_tol=GRID_INC_TOLERANCE * y_inc)):
            logger.warning(f"Region is not a whole number of increments; "
                           f"x_max/y_max adjusted to {spec.x_max:g}/{spec.y_max:g}")
        return spec
# endregion


# region Grid
@dataclass
class Grid:
    spec: GridSpec
    data: np.ndarray   # (n_rows, n_columns), row 0 = y_max

    def __post_init__(self):
        if self.data.shape != self.spec.shape:
            raise GridSetupError(f"Grid data shape {self.data.shape} does not match header {self.spec.shape}.")
# endregion


# region Plane Fit
@dataclass(frozen=True)
class PlaneFit:
    """z = a*x + b*y + c; degenerate fits (collinear vertices) carry NaN."""
    a: float
    b: float
    c: float
    degenerate: bool = False

    def evaluate(self, x, y):
        return self.a * x + self.b * y + self.c
# endregion
