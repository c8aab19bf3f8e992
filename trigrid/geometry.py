# region Imports
import math
import numpy as np
from trigrid.models import PlaneFit
# endregion

# region Winding Classes
OUTSIDE = 0
ON_EDGE = 1
INSIDE = 2
# endregion

# region Plane Fit
def fit_plane(vx, vy, vz) -> PlaneFit:
    """
    Plane z = a*x + b*y + c through three vertices.
    Collinear vertices give a degenerate fit with NaN coefficients.
    """
    xkj, ykj, zkj = vx[1] - vx[0], vy[1] - vy[0], vz[1] - vz[0]
    xlj, ylj, zlj = vx[2] - vx[0], vy[2] - vy[0], vz[2] - vz[0]

    det = float(xkj * ylj - ykj * xlj)
    if det == 0.0 or not math.isfinite(det):
        return PlaneFit(math.nan, math.nan, math.nan, degenerate=True)

    f = 1.0 / det
    a = -f * (ykj * zlj - zkj * ylj)
    b = -f * (zkj * xlj - xkj * zlj)
    c = -a * vx[1] - b * vy[1] + vz[1]
    return PlaneFit(float(a), float(b), float(c))
# endregion

# region Point in Polygon
def close_ring(vx, vy):
    """Repeat the first vertex so the polygon is closed."""
    vx = np.asarray(vx, dtype=np.float64)
    vy = np.asarray(vy, dtype=np.float64)
    return np.append(vx, vx[0]), np.append(vy, vy[0])


def non_zero_winding(xp, yp, vx, vy):
    """
    Classify query points against a closed polygon (last vertex == first)
    with the non-zero winding rule.

    Returns OUTSIDE, ON_EDGE or INSIDE per point (array shaped like xp).
    """
    xp = np.asarray(xp, dtype=np.float64)
    yp = np.asarray(yp, dtype=np.float64)
    wn = np.zeros(xp.shape, dtype=np.int64)
    on_edge = np.zeros(xp.shape, dtype=bool)

    for i in range(len(vx) - 1):
        x0, y0, x1, y1 = vx[i], vy[i], vx[i + 1], vy[i + 1]
        # > 0 when the point is left of the directed edge
        side = (x1 - x0) * (yp - y0) - (xp - x0) * (y1 - y0)

        on_edge |= (
            (side == 0.0)
            & (xp >= min(x0, x1)) & (xp <= max(x0, x1))
            & (yp >= min(y0, y1)) & (yp <= max(y0, y1))
        )
        wn += ((y0 <= yp) & (y1 > yp) & (side > 0.0)).astype(np.int64)
        wn -= ((y0 > yp) & (y1 <= yp) & (side < 0.0)).astype(np.int64)

    return np.where(on_edge, ON_EDGE, np.where(wn != 0, INSIDE, OUTSIDE))
# endregion

# region Distances
def vertex_distances(xp, yp, vx, vy):
    """(3, N) distances from each query point to each triangle vertex."""
    xp = np.asarray(xp, dtype=np.float64)
    yp = np.asarray(yp, dtype=np.float64)
    return np.stack([np.hypot(xp - vx[i], yp - vy[i]) for i in range(3)])
# endregion
