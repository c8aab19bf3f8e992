# region Imports
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
import logging
import numpy as np

from trigrid.config import DEFAULT_EMPTY, DEFAULT_REGISTRATION, EXPORT_MODES, GRID_MODES
from trigrid.edges import unique_edges
from trigrid.errors import GridSetupError, NoDataError, OptionError
from trigrid.export import Segment, edge_segments, index_rows, polygon_segments, voronoi_segments
from trigrid.models import Grid, GridSpec, Points
from trigrid.projection import lonlat_to_xy_factory
from trigrid.rasterize import grid_triangles
from trigrid.triangulation import delaunay, voronoi_edges
from trigrid.uncertainty import UncertaintyParams
# endregion

logger = logging.getLogger(__name__)


# region Options
@dataclass
class TriangulateOptions:
    """
    region:       (x_min, x_max, y_min, y_max) of the output grid / Voronoi clip
    inc:          (x_inc, y_inc) node spacing
    grid_mode:    None (no grid) or "z" | "dx" | "dy" | "uncertainty"
    export:       None or "edges" | "polygons" | "indices" | "voronoi"
    with_z:       carry z in edge/polygon output
    projection:   CRS for lon/lat input; only the triangulation sees projected x/y
    degenerate:   "propagate" | "skip" for collinear triangles
    write_policy: "last" | "first" for nodes shared by triangles
    """
    region: Optional[Tuple[float, float, float, float]] = None
    inc: Optional[Tuple[float, float]] = None
    registration: str = DEFAULT_REGISTRATION
    grid_mode: Optional[str] = None
    export: Optional[str] = None
    with_z: bool = False
    empty: float = DEFAULT_EMPTY
    projection: Optional[str] = None
    degenerate: str = "propagate"
    write_policy: str = "last"
    qhull_options: Optional[str] = None
    alpha: Optional[float] = None
    s_h: Optional[float] = None

    @property
    def gridding(self) -> bool:
        return self.grid_mode is not None

    @property
    def needs_z(self) -> bool:
        return self.grid_mode in ("z", "dx", "dy") or self.with_z

    @property
    def needs_uncertainty(self) -> bool:
        return self.grid_mode == "uncertainty"

    @property
    def output_mode(self) -> Optional[str]:
        """Table output; the vertex index table is the default without a grid."""
        if self.export is None and not self.gridding:
            return "indices"
        return self.export

    def validate(self) -> None:
        if self.grid_mode is not None and self.grid_mode not in GRID_MODES:
            raise OptionError(f"Unknown grid mode '{self.grid_mode}', use one of {GRID_MODES}.")
        if self.export is not None and self.export not in EXPORT_MODES:
            raise OptionError(f"Unknown export mode '{self.export}', use one of {EXPORT_MODES}.")
        if self.gridding and self.export == "voronoi":
            raise OptionError("Gridding cannot be combined with Voronoi output.")
        if self.export == "voronoi" and self.region is None:
            raise OptionError("Voronoi output requires a region.")
        if self.gridding and (self.region is None or self.inc is None):
            raise GridSetupError("Must specify region and increments for gridding.")
        if self.inc is not None and not (self.inc[0] > 0.0 and self.inc[1] > 0.0):
            raise GridSetupError("Must specify positive increment(s).")
        if not self.gridding and self.inc is not None:
            logger.warning("Increments not needed when no grid is requested")
        if not (self.gridding or self.export == "voronoi") and self.region is not None:
            logger.warning("Region not needed when neither a grid nor Voronoi edges are requested")
        if self.export == "voronoi" and self.with_z:
            logger.info("z is read but only (x,y) is written for Voronoi edges")

    def grid_spec(self) -> GridSpec:
        if self.region is None or self.inc is None:
            raise GridSetupError("Must specify region and increments for gridding.")
        x_min, x_max, y_min, y_max = self.region
        return GridSpec.from_region(x_min, x_max, y_min, y_max, self.inc[0], self.inc[1], self.registration)

    def uncertainty_params(self, spec: GridSpec) -> UncertaintyParams:
        params = UncertaintyParams(delta_min=spec.x_inc)
        if self.alpha is not None:
            params.alpha = float(self.alpha)
        if self.s_h is not None:
            params.s_h = float(self.s_h)
        return params
# endregion


# region Result
@dataclass
class TriangulateResult:
    triangles: np.ndarray
    grid: Optional[Grid] = None
    edges: Optional[np.ndarray] = None
    voronoi: Optional[np.ndarray] = None
    segments: List[Segment] = field(default_factory=list)
# endregion


# region Planar Coordinates
def _planar_xy(points: Points, options: TriangulateOptions):
    if options.projection is None:
        return points.x, points.y
    logger.info(f"Projecting coordinates with {options.projection} for triangulation")
    return lonlat_to_xy_factory(options.projection)(points.x, points.y)


def _planar_x_range(options: TriangulateOptions):
    x_min, x_max, y_min, y_max = options.region
    if options.projection is None:
        return x_min, x_max
    mid = 0.5 * (y_min + y_max)
    xs, _ = lonlat_to_xy_factory(options.projection)([x_min, x_max], [mid, mid])
    return float(np.min(xs)), float(np.max(xs))
# endregion


# region Run
def triangulate(points: Points, options: TriangulateOptions, slope: Optional[np.ndarray] = None) -> TriangulateResult:
    """
    Triangulate the points, then grid and/or build export records as the
    options ask. Fatal conditions (no data, bad grid setup, conflicting
    options) raise before any triangulation happens.
    """
    if len(points) == 0:
        raise NoDataError("No data points given - so no triangulation can take effect.")
    options.validate()
    if options.needs_z and not points.has_z:
        raise OptionError("Expected (x,y,z) input for the requested output.")
    if options.needs_uncertainty and not points.has_uncertainty:
        raise OptionError("Uncertainty gridding needs (x,y,h,v) or (x,y,z,h,v) input.")

    spec = None
    if options.gridding:
        spec = options.grid_spec()
        if options.needs_uncertainty:
            if slope is None:
                raise OptionError("Uncertainty gridding needs a slope grid.")
            if np.shape(slope) != spec.shape:
                raise GridSetupError(f"Slope grid shape {np.shape(slope)} does not match output grid {spec.shape}.")

    logger.info(f"Processing {len(points)} input points")
    x, y = _planar_xy(points, options)
    mode = options.output_mode

    if mode == "voronoi":
        x_lo, x_hi = _planar_x_range(options)
        vor = voronoi_edges(x, y, x_lo, x_hi)
        return TriangulateResult(
            triangles=np.empty((0, 3), dtype=np.int64),
            voronoi=vor,
            segments=list(voronoi_segments(vor)),
        )

    triangles = delaunay(x, y, qhull_options=options.qhull_options)
    result = TriangulateResult(triangles=triangles)

    if spec is not None:
        params = options.uncertainty_params(spec) if options.needs_uncertainty else None
        result.grid = grid_triangles(
            points, triangles, spec, options.grid_mode,
            slope=slope,
            empty=options.empty,
            degenerate=options.degenerate,
            write_policy=options.write_policy,
            params=params,
        )

    if mode == "edges":
        result.edges = unique_edges(triangles)
        result.segments = list(edge_segments(points, result.edges, with_z=options.with_z))
    elif mode == "polygons":
        result.segments = list(polygon_segments(points, triangles, with_z=options.with_z))
    elif mode == "indices":
        result.segments = list(index_rows(triangles))
    return result
# endregion
