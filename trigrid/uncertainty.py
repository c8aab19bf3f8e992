# region Imports
from dataclasses import dataclass
import numpy as np
from trigrid.config import EPS_D, UNCERTAINTY_ALPHA, UNCERTAINTY_S_H
from trigrid.geometry import vertex_distances
# endregion

# region Uncertainty Parameters
@dataclass
class UncertaintyParams:
    delta_min: float = 1.0          # minimum resolvable distance (grid x increment)
    alpha: float = UNCERTAINTY_ALPHA
    s_h: float = UNCERTAINTY_S_H    # horizontal uncertainty scale
    eps: float = EPS_D              # "query point is on the vertex" threshold

    def __post_init__(self):
        if not self.delta_min > 0.0:
            raise ValueError(f"delta_min must be positive, got {self.delta_min}")
# endregion

# region Per-vertex Contribution
def vertex_contributions(dist, h, v, theta, P: UncertaintyParams) -> np.ndarray:
    """
    u_i = v_i^2 * (1 + ((d_i + s_H*h_i)/delta_min)^alpha) + (tan(theta)*h_i)^2
    dist is (3, N); h, v are per-vertex; theta is per query point.
    """
    h = np.asarray(h, dtype=np.float64).reshape(3, 1)
    v = np.asarray(v, dtype=np.float64).reshape(3, 1)
    tan_t = np.tan(theta)
    return v ** 2 * (1.0 + ((dist + P.s_h * h) / P.delta_min) ** P.alpha) + (tan_t * h) ** 2
# endregion

# region Propagation
def propagate_uncertainty(dist, h, v, theta, P: UncertaintyParams) -> np.ndarray:
    """
    Inverse-distance weighted RMS of the three vertex contributions:

        sigma = sqrt( sum(u_i / d_i) / sum(1 / d_i) )

    A query point on a vertex (|d_i| < eps) takes sqrt(u_i) of that vertex
    directly; vertices are checked in triangle order.
    """
    dist = np.asarray(dist, dtype=np.float64).reshape(3, -1)
    n = dist.shape[1]
    theta = np.broadcast_to(np.asarray(theta, dtype=np.float64), (n,))
    u = vertex_contributions(dist, h, v, theta, P)

    with np.errstate(divide="ignore", invalid="ignore"):
        sigma = np.sqrt(np.sum(u / dist, axis=0) / np.sum(1.0 / dist, axis=0))

    for i in (2, 1, 0):
        on_vertex = np.abs(dist[i]) < P.eps
        sigma = np.where(on_vertex, np.sqrt(u[i]), sigma)
    return sigma
# endregion

# region Factory
def triangle_uncertainty_fn(vx, vy, h, v, slope: np.ndarray, params: UncertaintyParams):
    """Value producer for one triangle; slope is the node-aligned angle grid (radians)."""
    def sigma(rows, cols, xp, yp):
        dist = vertex_distances(xp, yp, vx, vy)
        return propagate_uncertainty(dist, h, v, slope[rows, cols], params)

    return sigma
# endregion
