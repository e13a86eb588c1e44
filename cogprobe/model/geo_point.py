"""GeoPoint - The fundamental geometry atom for raster probing.

A GeoPoint is a single WGS84 longitude/latitude pair.
It is the single source of truth for location throughout the system.

Used by:
- SampleResult (where the raster was sampled)
- Pin (probe marker location)
- PathVertex (path geometry)
"""

from dataclasses import dataclass
from math import isfinite

from cogprobe.exceptions import InvalidCoordinate


@dataclass(frozen=True)
class GeoPoint:
    """A geographic point in decimal degrees (WGS84).

    Attributes:
        lon: Longitude in decimal degrees, [-180, 180]
        lat: Latitude in decimal degrees, [-90, 90]

    Example:
        point = GeoPoint(lon=78.9629, lat=20.5937)
    """

    lon: float
    lat: float

    def __post_init__(self) -> None:
        """Validate data after initialization."""
        if not (isfinite(self.lon) and isfinite(self.lat)):
            raise InvalidCoordinate(f"GeoPoint must be finite, got ({self.lon}, {self.lat})")
        if not -180.0 <= self.lon <= 180.0:
            raise InvalidCoordinate(f"Longitude {self.lon} outside [-180, 180]")
        if not -90.0 <= self.lat <= 90.0:
            raise InvalidCoordinate(f"Latitude {self.lat} outside [-90, 90]")

    @property
    def lat_lon(self) -> tuple[float, float]:
        """Return (lat, lon) tuple - standard geographic order."""
        return (self.lat, self.lon)

    @property
    def lon_lat(self) -> tuple[float, float]:
        """Return (lon, lat) tuple - GeoJSON/Pydeck order."""
        return (self.lon, self.lat)

    def __repr__(self) -> str:
        return f"GeoPoint(lon={self.lon:.5f}, lat={self.lat:.5f})"
