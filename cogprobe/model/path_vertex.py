"""PathVertex - one sampled point of a drawn path."""

from dataclasses import dataclass
from typing import Optional

from cogprobe.model.geo_point import GeoPoint


@dataclass(frozen=True)
class PathVertex:
    """A path vertex with its sampled value.

    Attributes:
        point: Vertex location
        value: Sampled value, None for no data
        sequence: Append order, 0-indexed since the last reset
    """

    point: GeoPoint
    value: Optional[float]
    sequence: int

    def __post_init__(self) -> None:
        if self.sequence < 0:
            raise ValueError(f"PathVertex sequence must be >= 0, got {self.sequence}")

    def __repr__(self) -> str:
        return f"PathVertex(#{self.sequence}, {self.point}, value={self.value})"
