"""COG Probe - Read raster values and elevation profiles from cloud-optimized GeoTIFFs.

An interactive raster probing application featuring:
- Resolution-aware sampling of local or remote COGs (full resolution or overviews)
- Pins with sampled values and an append-only drawn path
- Elevation profile derived from the path
- Stale hover responses suppressed by per-slot sequence numbers

Modules:
    core: Engine (coordinate transform, raster sampler, request sequencer, profile deriver)
    model: Data structures (GeoPoint, SampleResult, Pin, PathVertex, ProfileSample)
    ui: Streamlit interface components (session, state machine, renderers, sidebar)

Example:
    from cogprobe.core import RasterSampler
    from cogprobe.ui.session import ProbeSession
    from cogprobe.model import Clicked
"""
