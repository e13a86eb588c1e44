"""Configuration constants for COG Probe.

All configurable parameters are centralized here for easy tuning.

Classes:
    AppConfig: UI application settings
    MapConfig: Default map view parameters and projection constants
    RasterConfig: Raster source defaults
    SamplingConfig: Raster sampling behavior (timeouts, bands)
    ProfileConfig: Elevation profile derivation
    MarkerConfig: Map marker styling
    StyleConfig: Visual colors
    ChartConfig: Chart rendering dimensions
    CoordinateConfig: Coordinate display and comparison
"""

from pathlib import Path

# Package root directory (where cogprobe/ lives)
PACKAGE_DIR = Path(__file__).parent

# Project root directory (parent of cogprobe/)
PROJECT_ROOT = PACKAGE_DIR.parent

# Data directory outside package (local rasters, not shipped with package)
DATA_DIR = PROJECT_ROOT / "data"


class AppConfig:
    """UI application settings."""

    TITLE = "COG Probe - Raster Values and Elevation Profiles"
    ICON = "📍"
    LAYOUT = "wide"


class MapConfig:
    """Default map view parameters."""

    # Initial center: India
    START_CENTER_LAT = 20.5937
    START_CENTER_LON = 78.9629
    DEFAULT_ZOOM = 5

    # Rendering projection of the map surface (Web Mercator, meters)
    MAP_PROJECTION = "EPSG:3857"

    # Web Mercator ground resolution (m/px) at zoom 0 for 256px tiles
    # 2 * pi * 6378137 / 256
    WEB_MERCATOR_RESOLUTION_Z0 = 156543.03392804097

    MAP_HEIGHT_PX = 600


class RasterConfig:
    """Raster source defaults."""

    # Placeholder until a real COG URL or local path is entered
    DEFAULT_COG_URL = "https://your-cog-link.tif"

    # Local sample raster written by scripts/make_cog.py
    LOCAL_COG_PATH = DATA_DIR / "probe_cog.tif"

    # Geographic reference frame of GeoPoint
    GEOGRAPHIC_CRS = "EPSG:4326"

    # Block size and overview factors for COGs written by scripts/make_cog.py
    COG_BLOCK_SIZE = 256
    COG_OVERVIEW_FACTORS = [2, 4, 8, 16]


class SamplingConfig:
    """Raster sampling behavior."""

    # Caller-imposed wait before a pending sample counts as failed (seconds)
    TIMEOUT_S = 5.0

    # GDAL HTTP limits, so a stalled range request also ends inside the worker thread
    # (timeouts in seconds)
    GDAL_HTTP_TIMEOUT_S = 5
    GDAL_HTTP_CONNECT_TIMEOUT_S = 3
    GDAL_HTTP_MAX_RETRY = 0

    # Band whose value is the canonical scalar (rasterio bands are 1-indexed)
    CANONICAL_BAND = 1


class ProfileConfig:
    """Elevation profile derivation."""

    # Fixed spacing between consecutive path vertices on the distance axis.
    # Placeholder approximation, not geodesic distance.
    UNIT_STEP = 10.0


class MarkerConfig:
    """Map marker styling for pins, path and hover readout."""

    PIN_RADIUS_PX = 8
    PIN_COLOR = [220, 38, 38, 230]  # Red-600
    PIN_NO_DATA_COLOR = [156, 163, 175, 230]  # Gray-400
    PIN_BORDER_COLOR = [255, 255, 255, 255]

    PATH_COLOR = [239, 68, 68, 255]  # Red-500
    PATH_WIDTH_PX = 2
    VERTEX_RADIUS_PX = 5

    HOVER_RADIUS_PX = 6
    HOVER_COLOR = [59, 130, 246, 200]  # Blue-500


class StyleConfig:
    """Visual colors and styling."""

    PROFILE_LINE_COLOR = "#8884D8"
    GRID_COLOR = "rgba(200, 200, 200, 0.3)"

    # OpenStreetMap raster basemap as Mapbox GL style (no API key required)
    OSM_TILES = "https://a.tile.openstreetmap.org/{z}/{x}/{y}.png"


class ChartConfig:
    """Chart rendering dimensions and settings."""

    PROFILE_HEIGHT = 250
    DEFAULT_WIDTH = 800

    # Y-axis padding settings
    ELEVATION_PADDING_FACTOR = 0.1  # 10% padding above/below
    ELEVATION_PADDING_MIN = 5.0


class CoordinateConfig:
    """Configuration for coordinate display and comparison.

    STRICT: Click de-duplication must use these precisions,
    NEVER compare lat/lon floats with == directly!
    """

    # Decimal places for readouts (5 decimals ≈ 1m precision)
    DISPLAY_DECIMALS: int = 5

    # Decimal places for sampled values in readouts
    VALUE_DECIMALS: int = 2

    # Decimal places for dedup key generation (6 decimals ≈ 10cm precision)
    DEDUP_KEY_DECIMALS: int = 6
