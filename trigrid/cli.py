"""
trigrid: Delaunay triangulation of x,y[,z[,h,v]] tables, with optional
gridding of the triangle planes (values, x/y derivatives, or propagated
uncertainty) and export of edges, polygons, vertex indices or Voronoi edges.

    trigrid points.txt                                   # vertex index triples
    trigrid points.txt -M -Z -o edges.txt                # unique edges with z
    trigrid points.txt -G surf.tif -R 0/10/0/10 -I 0.5   # plane-value grid
    trigrid points.txt -G dzdx.tif -R 0/10/0/10 -I 0.5 -D x
    trigrid pts_hv.txt -G sigma.tif -R 0/10/0/10 -I 0.5 -u slope.tif
"""
# region Imports
from __future__ import annotations
from typing import List, Optional
import argparse
import logging
import math
import sys

from trigrid.config import DEFAULT_REGISTRATION, REGISTRATIONS
from trigrid.errors import OptionError, TriGridError
from trigrid.export import write_mesh_json, write_segments
from trigrid.gridio import read_grid, read_slope_grid, write_grid
from trigrid.models import Points
from trigrid.pipeline import TriangulateOptions, triangulate
from trigrid.records import n_input_columns, read_table
from trigrid.slope import slope_grid
# endregion

logger = logging.getLogger(__name__)


# region Argument Types
def region_arg(text: str):
    try:
        x_min, x_max, y_min, y_max = [float(v) for v in text.split("/")]
    except ValueError:
        raise argparse.ArgumentTypeError("region must be x_min/x_max/y_min/y_max")
    return x_min, x_max, y_min, y_max


def inc_arg(text: str):
    try:
        parts = [float(v) for v in text.split("/")]
    except ValueError:
        raise argparse.ArgumentTypeError("increment must be dx[/dy]")
    if len(parts) == 1:
        return parts[0], parts[0]
    if len(parts) == 2:
        return parts[0], parts[1]
    raise argparse.ArgumentTypeError("increment must be dx[/dy]")


def empty_arg(text: str) -> float:
    if text[:1] in ("N", "n"):
        return math.nan
    try:
        return float(text)
    except ValueError:
        raise argparse.ArgumentTypeError("empty value must be a number or NaN")
# endregion


# region Parser
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trigrid",
        description="Optimal (Delaunay) triangulation and gridding of Cartesian table data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("table", nargs="?", default="-", help="input table [stdin]")
    parser.add_argument("-D", "--derivative", choices=("x", "y"),
                        help="grid the x- or y-derivative instead of z (needs -G)")
    parser.add_argument("-E", "--empty", type=empty_arg, default=math.nan,
                        help="value for nodes no triangle covers [NaN]")
    parser.add_argument("-G", "--grid", metavar="OUTGRID", help="write a grid of the triangle planes")
    parser.add_argument("-I", "--inc", type=inc_arg, help="grid spacing dx[/dy]")
    parser.add_argument("-J", "--projection", metavar="CRS",
                        help="project lon/lat input (EPSG code or proj string) before triangulating")
    parser.add_argument("-R", "--region", type=region_arg, help="x_min/x_max/y_min/y_max")
    parser.add_argument("-r", "--registration", choices=REGISTRATIONS, default=DEFAULT_REGISTRATION)

    out = parser.add_mutually_exclusive_group()
    out.add_argument("-M", "--edges", action="store_true", help="write unique triangle edges as segments")
    out.add_argument("-N", "--indices", action="store_true",
                     help="also write vertex index triples when -G is used")
    out.add_argument("-Q", "--voronoi", action="store_true", help="write Voronoi edges instead (needs -R)")
    out.add_argument("-S", "--polygons", action="store_true", help="write triangle polygons as segments")

    parser.add_argument("-u", "--slopes", metavar="SLOPEGRID",
                        help="propagate uncertainty using this slope grid; input is x,y,z,h,v")
    parser.add_argument("--slope-from-dem", metavar="DEMGRID",
                        help="derive the slope grid for -u from an elevation grid")
    parser.add_argument("--slope-degrees", action="store_true", help="slope grid is in degrees [radians]")
    parser.add_argument("--alpha", type=float, help="uncertainty distance exponent [2.0]")
    parser.add_argument("--s-h", dest="s_h", type=float, help="horizontal uncertainty scale [1.0]")
    parser.add_argument("-Z", "--with-z", action="store_true", help="input (and edge/polygon output) has z")
    parser.add_argument("--skip-degenerate", action="store_true",
                        help="drop collinear triangles instead of gridding non-finite values")
    parser.add_argument("--first-writer", action="store_true",
                        help="nodes shared by triangles keep the first value written")
    parser.add_argument("--qhull-options", help="extra Qhull options for the triangulation")
    parser.add_argument("-o", "--output", default="-", help="table output [stdout]")
    parser.add_argument("--json", metavar="PATH", help="also write the mesh as JSON")
    parser.add_argument("--plot", action="store_true", help="show the mesh (and grid) with matplotlib")
    parser.add_argument("--plot-3d", action="store_true", help="show the grid surface with pyvista")
    parser.add_argument("-V", "--verbose", action="store_true")
    return parser
# endregion


# region Options
def options_from_args(args) -> TriangulateOptions:
    uncertainty = bool(args.slopes or args.slope_from_dem)
    if args.slopes and args.slope_from_dem:
        raise OptionError("Give either -u or --slope-from-dem, not both.")
    if uncertainty and not args.grid:
        raise OptionError("-u must be used with -G.")
    if args.derivative and not args.grid:
        raise OptionError("-D only applies with -G.")
    if args.derivative and uncertainty:
        raise OptionError("-D cannot be combined with -u.")
    if args.indices and not args.grid:
        raise OptionError("-N is only required with -G.")
    if args.grid and args.voronoi:
        raise OptionError("-G cannot be used with -Q.")

    grid_mode = None
    if args.grid:
        if uncertainty:
            grid_mode = "uncertainty"
        elif args.derivative:
            grid_mode = "d" + args.derivative
        else:
            grid_mode = "z"

    export = None
    for flag, name in ((args.edges, "edges"), (args.voronoi, "voronoi"),
                       (args.polygons, "polygons"), (args.indices, "indices")):
        if flag:
            export = name

    return TriangulateOptions(
        region=args.region,
        inc=args.inc,
        registration=args.registration,
        grid_mode=grid_mode,
        export=export,
        with_z=args.with_z,
        empty=args.empty,
        projection=args.projection,
        degenerate="skip" if args.skip_degenerate else "propagate",
        write_policy="first" if args.first_writer else "last",
        qhull_options=args.qhull_options,
        alpha=args.alpha,
        s_h=args.s_h,
    )


def load_slope(args, options: TriangulateOptions):
    if not options.needs_uncertainty:
        return None
    spec = options.grid_spec()
    if args.slopes:
        return read_slope_grid(args.slopes, spec, degrees=args.slope_degrees)
    dem = read_grid(args.slope_from_dem, registration=spec.registration)
    return slope_grid(dem).data
# endregion


# region Main
def run(args) -> int:
    options = options_from_args(args)

    # z is read whenever gridding (the plane needs it) or asked for
    has_z = options.gridding or args.with_z
    table = read_table(args.table, n_input_columns(has_z, options.needs_uncertainty))
    points = Points.from_columns(table, has_z=has_z, has_uncertainty=options.needs_uncertainty)
    logger.info(f"Read {len(points)} points from {args.table}")

    slope = load_slope(args, options)
    result = triangulate(points, options, slope=slope)

    if result.grid is not None:
        crs = "EPSG:4326" if options.projection else None
        write_grid(result.grid, args.grid, crs=crs, nodata=options.empty, title="trigrid")
    if result.segments:
        write_segments(result.segments, args.output)
    if args.json:
        write_mesh_json(points, result.triangles, args.json, edges=result.edges)

    if args.plot:
        from trigrid.viz import show_mesh
        show_mesh(points, result.triangles, grid=result.grid, voronoi=result.voronoi)
    if args.plot_3d and result.grid is not None:
        from trigrid.terrain_3d import plot_grid_3d
        plot_grid_3d(result.grid, points=points, triangles=result.triangles)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(name)s: %(levelname)s: %(message)s",
    )
    try:
        return run(args)
    except TriGridError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
# endregion
