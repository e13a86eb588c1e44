"""Data model classes for raster probing.

- GeoPoint: Geometry atom (lon, lat)
- SampleResult: Raster value (or no data) at a GeoPoint
- Pin / PinStore: Dropped probe markers with stable ids
- PathVertex / PathAccumulator: Append-only sampled path
- ProfileSample: Derived (distance, elevation) pair
- PointerMoved / Clicked: Typed map events fed into the engine
"""

from cogprobe.model.geo_point import GeoPoint
from cogprobe.model.map_event import Clicked, MapEvent, MapEventType, PointerMoved
from cogprobe.model.path_accumulator import PathAccumulator
from cogprobe.model.path_vertex import PathVertex
from cogprobe.model.pin import Pin
from cogprobe.model.pin_store import PinStore
from cogprobe.model.profile_sample import ProfileSample
from cogprobe.model.sample_result import SampleResult, SampleStatus

__all__ = [
    "GeoPoint",
    "SampleResult",
    "SampleStatus",
    "Pin",
    "PinStore",
    "PathVertex",
    "PathAccumulator",
    "ProfileSample",
    "MapEvent",
    "MapEventType",
    "PointerMoved",
    "Clicked",
]
