"""Core engine - coordinate conversion, raster sampling and profile derivation."""

from cogprobe.core.coordinate_transform import CoordinateTransform, get_transformer
from cogprobe.core.profile_deriver import derive_profile, profile_to_records
from cogprobe.core.raster_sampler import RasterSampler, ResolutionLevel, select_level
from cogprobe.core.request_sequencer import RequestSequencer, SampleSlot

__all__ = [
    "CoordinateTransform",
    "get_transformer",
    "RasterSampler",
    "ResolutionLevel",
    "select_level",
    "RequestSequencer",
    "SampleSlot",
    "derive_profile",
    "profile_to_records",
]
