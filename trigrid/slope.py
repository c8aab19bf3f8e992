# slope.py
import numpy as np
from trigrid.models import Grid


def slope_angles(elevation: np.ndarray, x_inc: float, y_inc: float) -> np.ndarray:
    """
    Terrain slope from an elevation grid using central differences.
      slope = arctan( sqrt( (dz/dx)^2 + (dz/dy)^2 ) )  [radians]
    NaN elevations give slope 0.
    """
    elev = np.asarray(elevation, dtype=np.float64)
    if elev.ndim != 2 or min(elev.shape) < 2:
        raise ValueError(f"Elevation grid must be 2-D with at least 2 rows and columns, got {elev.shape}")
    gy, gx = np.gradient(elev, y_inc, x_inc)
    slope = np.arctan(np.hypot(gx, gy))
    return np.nan_to_num(slope, nan=0.0, posinf=np.pi / 2, neginf=0.0)


def slope_grid(elevation: Grid) -> Grid:
    spec = elevation.spec
    return Grid(spec=spec, data=slope_angles(elevation.data, spec.x_inc, spec.y_inc))


def to_radians(slope: np.ndarray, degrees: bool = False) -> np.ndarray:
    slope = np.asarray(slope, dtype=np.float64)
    return np.radians(slope) if degrees else slope
