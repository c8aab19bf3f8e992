# region Imports
import logging
import numpy as np
# endregion

logger = logging.getLogger(__name__)


# region Edge Extraction
def triangle_edges(triangles) -> np.ndarray:
    """
    Three edges per triangle (i0,i1), (i1,i2), (i0,i2), canonicalized so
    begin <= end. Shape (3*n, 2), in triangle order.
    """
    tri = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
    edges = np.empty((3 * len(tri), 2), dtype=np.int64)
    edges[0::3] = tri[:, [0, 1]]
    edges[1::3] = tri[:, [1, 2]]
    edges[2::3] = tri[:, [0, 2]]
    edges.sort(axis=1)
    return edges
# endregion


# region Deduplication
def unique_edges(triangles) -> np.ndarray:
    """
    Undirected edges of a triangulation, each listed once, sorted by
    (begin, end). An edge shared by two triangles collapses to one row.
    """
    edges = triangle_edges(triangles)
    if len(edges) == 0:
        logger.info("0 unique triangle edges")
        return edges

    order = np.lexsort((edges[:, 1], edges[:, 0]))
    edges = edges[order]
    keep = np.ones(len(edges), dtype=bool)
    keep[1:] = np.any(edges[1:] != edges[:-1], axis=1)
    edges = edges[keep]

    logger.info(f"{len(edges)} unique triangle edges")
    return edges
# endregion
