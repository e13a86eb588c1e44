"""SampleResult - outcome of one raster probe.

A SampleResult always carries the probed point and a value that is either
a float or None ("no data"). The status tells the engine WHY a value is
missing, so backend failures can be logged apart from legitimate no-data
while consumers only look at value.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from cogprobe.model.geo_point import GeoPoint


class SampleStatus(Enum):
    """Why a sample has (or lacks) a value."""

    OK = "ok"  # Value read from the raster
    NO_DATA = "no_data"  # Outside extent, masked pixel, or nodata sentinel
    UNAVAILABLE = "unavailable"  # Backend error or timeout


@dataclass(frozen=True)
class SampleResult:
    """Raster value at a geographic point.

    Attributes:
        point: Where the raster was sampled
        value: Canonical scalar (first band), None for no data
        bands: All band values when requested, else just (value,)
        status: OK, NO_DATA or UNAVAILABLE
    """

    point: GeoPoint
    value: Optional[float]
    bands: tuple[Optional[float], ...] = field(default=())
    status: SampleStatus = SampleStatus.OK

    def __post_init__(self) -> None:
        """Validate invariants - STRICT: value and status must agree."""
        if self.status == SampleStatus.OK and self.value is None:
            raise ValueError("OK sample must have a value")
        if self.status != SampleStatus.OK and self.value is not None:
            raise ValueError(f"{self.status.name} sample must not have a value")
        if not self.bands:
            object.__setattr__(self, "bands", (self.value,))

    @property
    def has_value(self) -> bool:
        """True if the raster produced a value at this point."""
        return self.value is not None

    @property
    def is_unavailable(self) -> bool:
        """True if the backend failed (as opposed to legitimate no-data)."""
        return self.status == SampleStatus.UNAVAILABLE

    @classmethod
    def no_data(cls, point: GeoPoint) -> "SampleResult":
        """Factory for a legitimate no-data sample."""
        return cls(point=point, value=None, status=SampleStatus.NO_DATA)

    @classmethod
    def unavailable(cls, point: GeoPoint) -> "SampleResult":
        """Factory for a failed sample (presented as no-data)."""
        return cls(point=point, value=None, status=SampleStatus.UNAVAILABLE)
