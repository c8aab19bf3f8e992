# app.py: slim Flask API over the triangulation / gridding pipeline
# deps: pip install flask numpy scipy pillow pyproj

from __future__ import annotations
from typing import Any, Dict, Optional
import io
import logging
import math
import numpy as np
from flask import Flask, request, jsonify, make_response
from PIL import Image

from trigrid.config import API_MAX_POINTS, API_PORT
from trigrid.errors import TriGridError
from trigrid.models import Grid, Points
from trigrid.pipeline import TriangulateOptions, triangulate

logger = logging.getLogger(__name__)

app = Flask(__name__)


# ======= CORS =======
@app.after_request
def _cors(resp):
    resp.headers["Access-Control-Allow-Origin"] = "*"
    resp.headers["Access-Control-Allow-Headers"] = "*"
    resp.headers["Access-Control-Allow-Methods"] = "GET,POST,OPTIONS"
    return resp


@app.errorhandler(TriGridError)
def _trigrid_error(e):
    return jsonify({"error": str(e)}), 400


# ======= request parsing =======
def _opt_float(data: Dict[str, Any], key: str) -> Optional[float]:
    v = data.get(key, None)
    return None if v in (None, "", "null") else float(v)


def _points_from_json(data: Dict[str, Any]) -> Points:
    pts = data.get("points") or []
    if len(pts) > API_MAX_POINTS:
        raise ValueError(f"at most {API_MAX_POINTS} points per request")
    return Points.from_records(pts)


def _options_from_json(data: Dict[str, Any]) -> TriangulateOptions:
    g = data.get("grid") or {}
    inc = g.get("inc")
    if inc is not None and not isinstance(inc, (list, tuple)):
        inc = (inc, inc)
    empty = g.get("empty", None)
    # Voronoi output takes its region at the top level
    region = g.get("region") or data.get("region")
    return TriangulateOptions(
        region=tuple(float(v) for v in region) if region else None,
        inc=tuple(float(v) for v in inc) if inc is not None else None,
        registration=g.get("registration", "gridline"),
        grid_mode=(g.get("mode") or "z") if g else None,
        export=data.get("export") or None,
        with_z=bool(data.get("with_z", False)),
        empty=math.nan if empty in (None, "NaN", "nan") else float(empty),
        projection=data.get("projection") or None,
        degenerate=g.get("degenerate", "propagate"),
        write_policy=g.get("write_policy", "last"),
        alpha=_opt_float(g, "alpha"),
        s_h=_opt_float(g, "s_h"),
    )


def _grid_to_json(grid: Grid) -> Dict[str, Any]:
    s = grid.spec
    values = [[None if not np.isfinite(v) else float(v) for v in row] for row in grid.data]
    return {
        "header": {
            "x_min": s.x_min, "x_max": s.x_max, "y_min": s.y_min, "y_max": s.y_max,
            "x_inc": s.x_inc, "y_inc": s.y_inc,
            "n_columns": s.n_columns, "n_rows": s.n_rows,
            "registration": s.registration,
        },
        "values": values,
    }


def _run_request():
    data = request.get_json(force=True, silent=True) or {}
    points = _points_from_json(data)
    options = _options_from_json(data)
    slope = data.get("slope")
    if slope is not None:
        slope = np.asarray(slope, dtype=np.float64)
        if data.get("slope_degrees"):
            slope = np.radians(slope)
    return triangulate(points, options, slope=slope)


# ======= endpoints =======
@app.route("/", methods=["GET"])
def root():
    return {"ok": True, "triangulate": "/triangulate (POST JSON)", "preview": "/grid/preview (POST JSON)"}


@app.route("/triangulate", methods=["POST"])
def triangulate_endpoint():
    """
    JSON body:
    {
      "points": [[x, y, z?, h?, v?], ...],
      "export": "indices" | "edges" | "polygons" | "voronoi",   // optional
      "with_z": false,
      "projection": null,                                        // e.g. "EPSG:3857"
      "region": [x_min, x_max, y_min, y_max],                    // Voronoi only
      "grid": {                                                  // optional
        "region": [x_min, x_max, y_min, y_max], "inc": 0.5,
        "mode": "z" | "dx" | "dy" | "uncertainty",
        "registration": "gridline", "empty": null
      },
      "slope": [[...], ...], "slope_degrees": false              // uncertainty only
    }
    """
    try:
        result = _run_request()
    except TriGridError:
        raise
    except (KeyError, TypeError, ValueError) as e:
        return jsonify({"error": f"bad request: {e}"}), 400

    resp: Dict[str, Any] = {"triangles": result.triangles.tolist()}
    if result.edges is not None:
        resp["edges"] = result.edges.tolist()
    if result.voronoi is not None:
        resp["voronoi"] = result.voronoi.tolist()
    if result.segments:
        resp["segments"] = [{"header": h, "rows": rows} for h, rows in result.segments]
    if result.grid is not None:
        resp["grid"] = _grid_to_json(result.grid)
    return jsonify(resp)


@app.route("/grid/preview", methods=["POST"])
def grid_preview():
    """Same body as /triangulate with "grid" set; returns a grayscale PNG."""
    try:
        result = _run_request()
    except TriGridError:
        raise
    except (KeyError, TypeError, ValueError) as e:
        return jsonify({"error": f"bad request: {e}"}), 400
    if result.grid is None:
        return jsonify({"error": "grid parameters required"}), 400

    arr = result.grid.data
    valid = arr[np.isfinite(arr)]
    if valid.size == 0:
        lo, hi = 0.0, 1.0
    else:
        lo, hi = np.percentile(valid, [2, 98])
        if hi <= lo:
            lo, hi = float(np.min(valid)), float(np.max(valid))
            if hi <= lo:
                lo, hi = lo - 0.5, lo + 0.5

    scaled = np.clip((np.nan_to_num(arr, nan=lo) - lo) / max(hi - lo, 1e-6), 0, 1)
    buf = io.BytesIO()
    Image.fromarray((scaled * 255).astype("uint8")).save(buf, "PNG")
    buf.seek(0)
    resp = make_response(buf.read())
    resp.headers["Content-Type"] = "image/png"
    return resp


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    app.run(host="0.0.0.0", port=API_PORT, threaded=True)
