# region Imports
from typing import Optional
import logging
import numpy as np
from scipy.spatial import Delaunay, QhullError, Voronoi
# endregion

logger = logging.getLogger(__name__)


# region Delaunay
def delaunay(x, y, qhull_options: Optional[str] = None) -> np.ndarray:
    """
    Delaunay triangles as an (n, 3) array of vertex indices. Inputs Qhull
    cannot triangulate (fewer than three points, all collinear) give zero
    triangles instead of an error.
    """
    pts = np.column_stack([np.asarray(x, dtype=np.float64), np.asarray(y, dtype=np.float64)])
    if len(pts) < 3:
        logger.warning(f"Need at least 3 points to triangulate, got {len(pts)}")
        return np.empty((0, 3), dtype=np.int64)
    try:
        tri = Delaunay(pts, qhull_options=qhull_options)
    except QhullError as e:
        logger.warning(f"Delaunay triangulation failed: {e}")
        return np.empty((0, 3), dtype=np.int64)

    simplices = tri.simplices.astype(np.int64)
    logger.info(f"Qhull Delaunay triangulation: {len(simplices)} triangles found")
    return simplices
# endregion


# region Voronoi
def voronoi_edges(x, y, x_min: float, x_max: float) -> np.ndarray:
    """
    Voronoi ridges as (n, 2, 2) endpoint coordinates. Unbounded ridges start
    at their finite vertex and run away from the point cloud for the region
    width (x_max - x_min).
    """
    pts = np.column_stack([np.asarray(x, dtype=np.float64), np.asarray(y, dtype=np.float64)])
    try:
        vor = Voronoi(pts)
    except QhullError as e:
        logger.warning(f"Voronoi diagram failed: {e}")
        return np.empty((0, 2, 2), dtype=np.float64)

    center = pts.mean(axis=0)
    span = float(x_max - x_min)
    segments = []
    for (p, q), ridge in zip(vor.ridge_points, vor.ridge_vertices):
        ridge = np.asarray(ridge)
        if np.all(ridge >= 0):
            segments.append(vor.vertices[ridge])
            continue

        # region Unbounded Ridge
        i = ridge[ridge >= 0][0]
        t = pts[q] - pts[p]
        t /= np.linalg.norm(t)
        normal = np.array([-t[1], t[0]])
        midpoint = pts[[p, q]].mean(axis=0)
        direction = np.sign(np.dot(midpoint - center, normal)) * normal
        segments.append(np.array([vor.vertices[i], vor.vertices[i] + direction * span]))
        # endregion

    edges = np.array(segments, dtype=np.float64).reshape(-1, 2, 2)
    logger.info(f"{len(edges)} Voronoi edges found")
    return edges
# endregion
