"""Coordinate transform between the map projection and WGS84.

The map surface reports coordinates in its rendering projection
(Web Mercator meters by default). The engine works with GeoPoint
(longitude/latitude). pyproj does the conversion in both directions.

Transformers are built once per (source, target) pair and shared,
they are immutable and safe to reuse.
"""

import logging
from functools import lru_cache
from math import isfinite
from typing import Sequence

from pyproj import CRS, Transformer
from pyproj.aoi import AreaOfUse
from pyproj.exceptions import CRSError

from cogprobe.constants import MapConfig, RasterConfig
from cogprobe.exceptions import InvalidCoordinate
from cogprobe.model.geo_point import GeoPoint

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def get_transformer(source_crs: str, target_crs: str) -> Transformer:
    """Return a cached always_xy Transformer (x=lon/easting, y=lat/northing)."""
    logger.debug(f"Building transformer {source_crs} -> {target_crs}")
    return Transformer.from_crs(source_crs, target_crs, always_xy=True)


@lru_cache(maxsize=None)
def get_area_of_use(projection: str) -> AreaOfUse | None:
    """Return the lon/lat bounds a projection is defined for (None if PROJ has none)."""
    return CRS.from_user_input(projection).area_of_use


class CoordinateTransform:
    """Pure, invertible mapping between map coordinates and GeoPoint.

    Example:
        transform = CoordinateTransform()
        x, y = transform.to_map(GeoPoint(lon=78.9629, lat=20.5937))
        point = transform.to_geo((x, y))  # ≈ GeoPoint(78.9629, 20.5937)
    """

    def __init__(self, map_projection: str = MapConfig.MAP_PROJECTION) -> None:
        """Initialize transform.

        Args:
            map_projection: CRS of the map surface (anything pyproj accepts)

        Raises:
            InvalidCoordinate: If pyproj does not know the projection
        """
        self.map_projection = map_projection
        try:
            self._to_geo = get_transformer(map_projection, RasterConfig.GEOGRAPHIC_CRS)
            self._to_map = get_transformer(RasterConfig.GEOGRAPHIC_CRS, map_projection)
            self._area_of_use = get_area_of_use(map_projection)
        except CRSError as e:
            logger.warning(f"[TRANSFORM] Unknown map projection {map_projection!r}: {e}")
            raise InvalidCoordinate(f"Unknown map projection {map_projection!r}") from e

    def for_projection(self, projection: str) -> "CoordinateTransform":
        """Return a transform for another map projection (self if unchanged)."""
        if projection == self.map_projection:
            return self
        return CoordinateTransform(map_projection=projection)

    def to_geo(self, map_coordinate: Sequence[float]) -> GeoPoint:
        """Convert a map coordinate (x, y) to a GeoPoint.

        Raises:
            InvalidCoordinate: If the coordinate is malformed or has no geographic equivalent.
        """
        x, y = self._validate_pair(map_coordinate)
        lon, lat = self._to_geo.transform(x, y)
        if not (isfinite(lon) and isfinite(lat)):
            raise InvalidCoordinate(f"Map coordinate ({x}, {y}) has no {self.map_projection} inverse")
        return GeoPoint(lon=float(lon), lat=float(lat))

    def to_map(self, point: GeoPoint) -> tuple[float, float]:
        """Convert a GeoPoint to (x, y) in the map projection.

        Points outside the projection's area of use are rejected even when
        PROJ returns finite numbers for them (Web Mercator stops at ±85.06°).

        Raises:
            InvalidCoordinate: If the projection cannot represent the point (e.g. poles in Web Mercator).
        """
        area = self._area_of_use
        if area is not None and not (
            area.west <= point.lon <= area.east and area.south <= point.lat <= area.north
        ):
            raise InvalidCoordinate(f"{point} is outside the area of use of {self.map_projection}")
        x, y = self._to_map.transform(point.lon, point.lat)
        if not (isfinite(x) and isfinite(y)):
            raise InvalidCoordinate(f"{point} cannot be represented in {self.map_projection}")
        return (float(x), float(y))

    @staticmethod
    def _validate_pair(map_coordinate: Sequence[float]) -> tuple[float, float]:
        """Check the coordinate is a finite numeric (x, y) pair."""
        try:
            x, y = (float(v) for v in map_coordinate)
        except (TypeError, ValueError) as e:
            raise InvalidCoordinate(f"Map coordinate must be a numeric (x, y) pair, got {map_coordinate!r}") from e
        if not (isfinite(x) and isfinite(y)):
            raise InvalidCoordinate(f"Map coordinate must be finite, got ({x}, {y})")
        return x, y

    def __repr__(self) -> str:
        return f"CoordinateTransform(map_projection={self.map_projection!r})"
