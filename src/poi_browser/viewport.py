from __future__ import annotations

import math
from typing import Iterable, Tuple

from poi_browser.models import Bounds, Coordinate, Place


TILE_SIZE_PX = 256
MAX_MERCATOR_LAT = 85.05112878


def filter_visible(places: Iterable[Place], bounds: Bounds) -> Tuple[Place, ...]:
    return tuple(place for place in places if bounds.contains(place.position))


def _project(point: Coordinate, world_px: float) -> Tuple[float, float]:
    lat = max(-MAX_MERCATOR_LAT, min(MAX_MERCATOR_LAT, point.lat))
    x = (point.lon + 180.0) / 360.0 * world_px
    sin_lat = math.sin(math.radians(lat))
    y = (0.5 - math.log((1 + sin_lat) / (1 - sin_lat)) / (4 * math.pi)) * world_px
    return x, y


def _unproject(x: float, y: float, world_px: float) -> Coordinate:
    lon = x / world_px * 360.0 - 180.0
    n = math.pi - 2.0 * math.pi * y / world_px
    lat = math.degrees(math.atan(math.sinh(n)))
    return Coordinate(lat, lon)


def bounds_around(
    center: Coordinate, zoom: int, width_px: int, height_px: int
) -> Bounds:
    world_px = TILE_SIZE_PX * (2**zoom)
    cx, cy = _project(center, world_px)
    half_w = width_px / 2.0
    half_h = height_px / 2.0

    south_west = _unproject(cx - half_w, min(world_px, cy + half_h), world_px)
    north_east = _unproject(cx + half_w, max(0.0, cy - half_h), world_px)
    return Bounds(south_west=south_west, north_east=north_east)
