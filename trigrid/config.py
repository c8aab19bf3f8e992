# config.py
import math

# Distances below this count as "on the vertex" in uncertainty propagation
EPS_D = 2.2204460492503131e-16

# Uncertainty model defaults (exponent on the distance term, horizontal scale)
UNCERTAINTY_ALPHA = 2.0
UNCERTAINTY_S_H = 1.0

# Value written to grid nodes no triangle covers
DEFAULT_EMPTY = math.nan

REGISTRATIONS = ("gridline", "pixel")
DEFAULT_REGISTRATION = "gridline"
# Fraction of an increment a region may fall short of a whole node count
GRID_INC_TOLERANCE = 1e-6

# Grid output modes: plane value, x/y derivative, propagated uncertainty
GRID_MODES = ("z", "dx", "dy", "uncertainty")
# Table output modes
EXPORT_MODES = ("edges", "polygons", "indices", "voronoi")

# Degenerate triangle handling and shared-node write policy
DEGENERATE_POLICIES = ("propagate", "skip")
WRITE_POLICIES = ("last", "first")

# Grid files are stored single precision
GRID_FILE_DTYPE = "float32"
GRID_FILE_DRIVER = "GTiff"

# API limits
API_MAX_POINTS = 200_000
API_PORT = 8081
