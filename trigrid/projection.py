# region Imports
import logging
import numpy as np
from pyproj import CRS, Transformer
# endregion

logger = logging.getLogger(__name__)

GEOGRAPHIC = CRS.from_epsg(4326)


# region Lon/Lat -> Planar
def lonlat_to_xy_factory(crs):
    """Returns f(lon, lat) -> (x, y) for a target CRS (EPSG code, proj string or CRS)."""
    target = CRS.from_user_input(crs)
    if target.is_geographic:
        logger.warning(f"Projection {target.to_string()} is geographic; coordinates stay in degrees")
    to_xy = Transformer.from_crs(GEOGRAPHIC, target, always_xy=True)

    def f(lon, lat):
        x, y = to_xy.transform(np.asarray(lon, dtype=np.float64), np.asarray(lat, dtype=np.float64))
        return np.asarray(x, dtype=np.float64), np.asarray(y, dtype=np.float64)

    return f

# endregion
