"""Pin - a dropped probe marker.

Pins are created by PinStore.add() and are immutable afterwards.
Identity is the integer id assigned by the store.
"""

from dataclasses import dataclass
from typing import Any, Optional

from cogprobe.model.geo_point import GeoPoint


@dataclass(frozen=True)
class Pin:
    """A probe result pinned on the map.

    Attributes:
        id: Unique identifier within the session (1, 2, 3, ...)
        point: Pinned location
        value: Sampled value, None for no data
    """

    id: int
    point: GeoPoint
    value: Optional[float]

    @property
    def lon(self) -> float:
        """Longitude delegated from point."""
        return self.point.lon

    @property
    def lat(self) -> float:
        """Latitude delegated from point."""
        return self.point.lat

    def to_dict(self) -> dict[str, Any]:
        """Serialize for rendering layers and sidebars."""
        return {"id": self.id, "lon": self.lon, "lat": self.lat, "value": self.value}

    def __repr__(self) -> str:
        return f"Pin({self.id}, {self.point}, value={self.value})"
