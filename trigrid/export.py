# region Imports
from __future__ import annotations
import json
import logging
import sys
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple
import numpy as np
from trigrid.models import Points
# endregion

logger = logging.getLogger(__name__)

# (segment header or None, rows of numbers)
Segment = Tuple[Optional[str], List[Tuple]]


# region Vertex Rows
def _vertex_row(points: Points, i: int, with_z: bool) -> Tuple:
    if with_z and points.has_z:
        return (float(points.x[i]), float(points.y[i]), float(points.z[i]))
    return (float(points.x[i]), float(points.y[i]))
# endregion

# region Segment Builders
def edge_segments(points: Points, edges: np.ndarray, with_z: bool = False) -> Iterator[Segment]:
    """One two-point segment per unique edge, headed 'Edge i-j'."""
    for begin, end in edges:
        yield f"Edge {begin}-{end}", [_vertex_row(points, begin, with_z), _vertex_row(points, end, with_z)]


def polygon_segments(points: Points, triangles: np.ndarray, with_z: bool = False) -> Iterator[Segment]:
    """One three-vertex polygon per triangle, headed 'Polygon i-j-k -Z<n>'."""
    for n, (i, j, k) in enumerate(triangles):
        yield f"Polygon {i}-{j}-{k} -Z{n}", [_vertex_row(points, v, with_z) for v in (i, j, k)]


def voronoi_segments(edges: np.ndarray) -> Iterator[Segment]:
    for n, ((x0, y0), (x1, y1)) in enumerate(edges):
        yield f"Edge {n}", [(float(x0), float(y0)), (float(x1), float(y1))]


def index_rows(triangles: np.ndarray) -> Iterator[Segment]:
    yield None, [tuple(int(i) for i in tri) for tri in triangles]
# endregion

# region Text Writer
def _fmt(value) -> str:
    if isinstance(value, (int, np.integer)):
        return str(int(value))
    return f"{value:.10g}"


def write_segments(segments: Iterable[Segment], out=None) -> int:
    """
    Write segments as a multi-segment text table ('> header' lines between
    tab-separated rows). out: path, '-'/None for stdout, or a text stream.
    Returns the number of data rows written.
    """
    if out is None or out == "-":
        return write_segments(segments, sys.stdout)
    if not hasattr(out, "write"):
        with open(out, "w") as fh:
            n = write_segments(segments, fh)
        logger.info(f"Wrote {n} records to {out}")
        return n

    n = 0
    for header, rows in segments:
        if header is not None:
            out.write(f"> {header}\n")
        for row in rows:
            out.write("\t".join(_fmt(v) for v in row) + "\n")
            n += 1
    return n
# endregion

# region JSON Export
def mesh_to_dict(points: Points, triangles: np.ndarray, edges: Optional[np.ndarray] = None) -> dict:
    doc = {
        "vertices": [list(_vertex_row(points, i, True)) for i in range(len(points))],
        "triangles": np.asarray(triangles, dtype=np.int64).tolist(),
    }
    if edges is not None:
        doc["edges"] = np.asarray(edges, dtype=np.int64).tolist()
    return doc


def write_mesh_json(
    points: Points,
    triangles: Sequence,
    out_path: str = "mesh.json",
    edges: Optional[np.ndarray] = None,
) -> None:
    """Export vertices, triangles and (optionally) unique edges for web viewers."""
    with open(out_path, "w") as f:
        json.dump(mesh_to_dict(points, triangles, edges), f, indent=2)
    logger.info(f"Wrote {len(points)} vertices and {len(triangles)} triangles to {out_path}")
# endregion
