"""Geographic to Web Mercator (EPSG:3857) projection.

Matches OpenLayers' ``fromLonLat`` for the default view projection, so points
projected here can be handed to the web page as-is.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .models import XY, LonLat

EARTH_RADIUS_M = 6378137.0
# Latitude where Web Mercator becomes square; OpenLayers clamps to this too.
MAX_LAT = 85.0511287798066


def lonlat_to_mercator(coords: Sequence[LonLat]) -> np.ndarray:
    """Project an (N, 2) array-like of lon/lat degrees to (N, 2) metres."""
    arr = np.asarray(coords, dtype=np.float64).reshape(-1, 2)
    lon = arr[:, 0]
    lat = np.clip(arr[:, 1], -MAX_LAT, MAX_LAT)
    x = EARTH_RADIUS_M * np.deg2rad(lon)
    y = EARTH_RADIUS_M * np.log(np.tan(np.pi / 4.0 + np.deg2rad(lat) / 2.0))
    return np.column_stack([x, y])


def web_mercator(lonlat: LonLat) -> XY:
    """Project a single (lon, lat) pair."""
    x, y = lonlat_to_mercator([lonlat])[0]
    return (float(x), float(y))
