"""ProfileSample - one (distance, elevation) pair of a derived profile."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ProfileSample:
    """A point on the elevation profile chart.

    Attributes:
        distance: Position along the path (placeholder units, see ProfileConfig)
        elevation: Sampled value, 0 where the vertex had no data
    """

    distance: float
    elevation: float

    def to_dict(self) -> dict[str, float]:
        """Chart payload record: {"distance": ..., "elevation": ...}."""
        return {"distance": self.distance, "elevation": self.elevation}
