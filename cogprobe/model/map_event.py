"""Map event types - typed interaction events fed into the probe engine.

This module defines the canonical types for ALL map interactions:
- MapEventType: Source of the event (POINTER_MOVE or CLICK)
- MapEvent: Base event with map coordinate, view resolution and projection
- PointerMoved / Clicked: Concrete events dispatched by the session

The engine only consumes coordinate, resolution and projection.
Coordinates are in the map projection's native units (e.g. meters for EPSG:3857).

STRICT: All interactions flow through MapEvent. Any deviation is a bug.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from math import isfinite

from cogprobe.constants import CoordinateConfig, MapConfig


class MapEventType(Enum):
    """Kind of map interaction - EXACTLY one per event."""

    POINTER_MOVE = "pointermove"
    CLICK = "click"


@dataclass(frozen=True)
class MapEvent(ABC):
    """Interaction on the map surface, abstract over the kind of interaction.

    STRICT CONTRACT:
    - coordinate is (x, y) in the map projection, both finite
    - resolution is ground distance per display unit, > 0
    - projection identifies the map projection (e.g. "EPSG:3857")
    """

    coordinate: tuple[float, float]
    resolution: float
    projection: str = MapConfig.MAP_PROJECTION

    def __post_init__(self) -> None:
        """Validate invariants - STRICT: fail immediately on invalid state."""
        if len(self.coordinate) != 2:
            raise ValueError(f"Map coordinate must be (x, y), got {self.coordinate}")
        if not (self.resolution > 0 and isfinite(self.resolution)):
            raise ValueError(f"View resolution must be positive, got {self.resolution}")
        if not self.projection:
            raise ValueError("Map event must name its projection")

    @property
    @abstractmethod
    def event_type(self) -> MapEventType:
        """Kind of interaction, fixed by each concrete event class."""

    @property
    def x(self) -> float:
        return self.coordinate[0]

    @property
    def y(self) -> float:
        return self.coordinate[1]

    def make_dedup_key(self) -> str:
        """Generate deduplication key, e.g. "click_8790000.123456_2340000.654321"."""
        decimals = CoordinateConfig.DEDUP_KEY_DECIMALS
        return f"{self.event_type.value}_{self.x:.{decimals}f}_{self.y:.{decimals}f}"


@dataclass(frozen=True)
class PointerMoved(MapEvent):
    """Pointer moved over the map (hover probing)."""

    @property
    def event_type(self) -> MapEventType:
        return MapEventType.POINTER_MOVE


@dataclass(frozen=True)
class Clicked(MapEvent):
    """Map clicked (pin drop or path step)."""

    @property
    def event_type(self) -> MapEventType:
        return MapEventType.CLICK
