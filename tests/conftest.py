"""Shared pytest fixtures for cogprobe tests.

Provides MockRasterSampler, small real GeoTIFFs written with rasterio and
helpers to build map events. All fixtures use explicit values with
documented rationale.

TEST RASTER GEOMETRY (probe_cog_path):
    EPSG:4326, origin (78.0 E, 22.0 N), 256 x 256 pixels of 1/128 degree,
    so it covers lon 78..80, lat 20..22. Overviews 2x, 4x, 8x (average).

    - Background: 100.0 everywhere
    - (78.9629, 20.5937) -> pixel row 180, col 123 holds 245.7
    - Rows/cols 32..63: constant 500.0 block (identical at every overview)
    - Rows/cols 0..15: nodata (-9999) block in the north-west corner
    - Band 2 is band 1 times 2
"""

import asyncio
import threading
import time
from typing import Callable, Optional

import numpy as np
import pytest
import rasterio
from rasterio.enums import Resampling
from rasterio.transform import from_origin

from cogprobe.constants import MapConfig
from cogprobe.core.coordinate_transform import CoordinateTransform
from cogprobe.exceptions import SampleUnavailable
from cogprobe.model.geo_point import GeoPoint
from cogprobe.model.map_event import Clicked, MapEvent, PointerMoved
from cogprobe.model.sample_result import SampleResult, SampleStatus
from cogprobe.ui.session import ProbeSession

# =============================================================================
# TEST RASTER CONSTANTS
# =============================================================================

RASTER_ORIGIN_LON = 78.0
RASTER_ORIGIN_LAT = 22.0
RASTER_SIZE_PX = 256
RASTER_RES_DEG = 2.0 / RASTER_SIZE_PX  # 0.0078125
RASTER_OVERVIEWS = [2, 4, 8]
NODATA = -9999.0

BACKGROUND_VALUE = 100.0
PEAK_VALUE = 245.7
PEAK_LON = 78.9629
PEAK_LAT = 20.5937
PLATEAU_VALUE = 500.0
PLATEAU_LON = 78.0 + 40.5 * RASTER_RES_DEG  # Center of col 40
PLATEAU_LAT = 22.0 - 40.5 * RASTER_RES_DEG  # Center of row 40
NODATA_LON = 78.0 + 4.5 * RASTER_RES_DEG
NODATA_LAT = 22.0 - 4.5 * RASTER_RES_DEG

# Web Mercator resolution at zoom 8 (~611 m/px): finer than one raster pixel
# (~870 m at this latitude), so the full resolution level is selected
RESOLUTION_Z8 = MapConfig.WEB_MERCATOR_RESOLUTION_Z0 / 2**8


# =============================================================================
# MOCK RASTER SAMPLER
# =============================================================================


class MockRasterSampler:
    """Scriptable stand-in for RasterSampler.

    Each call to sample() consumes the next entry of delays and failures
    (if any are left), so tests can make responses arrive out of order or
    fail on purpose.

    Args:
        value_fn: Value for a point, None for no data
        delays: Seconds to wait per call, in call order
        failures: Exception to raise per call (None = succeed), in call order
    """

    def __init__(
        self,
        value_fn: Optional[Callable[[GeoPoint], Optional[float]]] = None,
        delays: Optional[list[float]] = None,
        failures: Optional[list[Optional[Exception]]] = None,
    ) -> None:
        self.value_fn = value_fn or (lambda point: PEAK_VALUE)
        self.delays = list(delays or [])
        self.failures = list(failures or [])
        self.calls: list[tuple[GeoPoint, float, str]] = []

    async def sample(
        self,
        point: GeoPoint,
        resolution: float,
        target_projection: str = MapConfig.MAP_PROJECTION,
        all_bands: bool = False,
    ) -> SampleResult:
        self.calls.append((point, resolution, target_projection))
        delay = self.delays.pop(0) if self.delays else 0.0
        failure = self.failures.pop(0) if self.failures else None

        await asyncio.sleep(delay)
        if failure is not None:
            raise failure

        value = self.value_fn(point)
        if value is None:
            return SampleResult.no_data(point=point)
        return SampleResult(point=point, value=value, status=SampleStatus.OK)


class BlockingRasterSampler:
    """Sampler whose read blocks a worker thread, like a stalled GDAL HTTP read.

    Args:
        block_s: Seconds each read holds its worker thread
    """

    def __init__(self, block_s: float) -> None:
        self.block_s = block_s
        self.finished = threading.Event()

    def _read(self, point: GeoPoint) -> SampleResult:
        time.sleep(self.block_s)
        self.finished.set()
        return SampleResult(point=point, value=PEAK_VALUE, status=SampleStatus.OK)

    async def sample(
        self,
        point: GeoPoint,
        resolution: float,
        target_projection: str = MapConfig.MAP_PROJECTION,
        all_bands: bool = False,
    ) -> SampleResult:
        return await asyncio.to_thread(self._read, point)


# =============================================================================
# SAMPLER FIXTURES
# =============================================================================


@pytest.fixture
def mock_sampler() -> MockRasterSampler:
    """Mock sampler returning 245.7 everywhere, instantly."""
    return MockRasterSampler()


@pytest.fixture
def mock_sampler_lon_value() -> MockRasterSampler:
    """Mock sampler whose value is the longitude rounded to 3 decimals.

    Makes every probe location distinguishable by its value.
    """
    return MockRasterSampler(value_fn=lambda point: round(point.lon, 3))


@pytest.fixture
def failing_sampler() -> MockRasterSampler:
    """Mock sampler whose first call raises SampleUnavailable, later calls succeed."""
    return MockRasterSampler(failures=[SampleUnavailable("HTTP 503 from COG host")])


# =============================================================================
# SESSION FIXTURES
# =============================================================================


@pytest.fixture
def session(mock_sampler: MockRasterSampler) -> ProbeSession:
    """Probe session on the constant mock sampler, Web Mercator map, idle."""
    return ProbeSession(sampler=mock_sampler, transform=CoordinateTransform())


@pytest.fixture
def pin_session(session: ProbeSession) -> ProbeSession:
    """Probe session in pin dropping mode."""
    session.state_machine.drop_pins()
    return session


@pytest.fixture
def path_session(session: ProbeSession) -> ProbeSession:
    """Probe session in path drawing mode (empty path)."""
    session.state_machine.draw_path()
    return session


# =============================================================================
# MAP EVENT HELPERS
# =============================================================================


@pytest.fixture
def web_mercator() -> CoordinateTransform:
    return CoordinateTransform(map_projection="EPSG:3857")


@pytest.fixture
def click_at(web_mercator: CoordinateTransform) -> Callable[..., Clicked]:
    """Factory: Clicked event at (lon, lat) in Web Mercator at zoom 8."""

    def _make(lon: float, lat: float, resolution: float = RESOLUTION_Z8) -> Clicked:
        return Clicked(coordinate=web_mercator.to_map(GeoPoint(lon=lon, lat=lat)), resolution=resolution)

    return _make


@pytest.fixture
def move_to(web_mercator: CoordinateTransform) -> Callable[..., PointerMoved]:
    """Factory: PointerMoved event at (lon, lat) in Web Mercator at zoom 8."""

    def _make(lon: float, lat: float, resolution: float = RESOLUTION_Z8) -> PointerMoved:
        return PointerMoved(coordinate=web_mercator.to_map(GeoPoint(lon=lon, lat=lat)), resolution=resolution)

    return _make


def events_in_parallel(session: ProbeSession, events: list[MapEvent]) -> list:
    """Handle events concurrently on one loop (issued in list order)."""

    async def _all() -> list:
        return await asyncio.gather(*(session.handle(e) for e in events))

    return asyncio.run(_all())


@pytest.fixture
def handle_concurrently() -> Callable:
    """Handle several map events concurrently, returning updates in issue order."""
    return events_in_parallel


# =============================================================================
# REAL RASTER FIXTURES
# =============================================================================


def _probe_band() -> np.ndarray:
    data = np.full((RASTER_SIZE_PX, RASTER_SIZE_PX), BACKGROUND_VALUE, dtype=np.float32)
    data[32:64, 32:64] = PLATEAU_VALUE
    data[180, 123] = PEAK_VALUE
    data[0:16, 0:16] = NODATA
    return data


@pytest.fixture(scope="session")
def probe_cog_path(tmp_path_factory: pytest.TempPathFactory):
    """Two-band EPSG:4326 GeoTIFF with internal overviews (see module docstring)."""
    path = tmp_path_factory.mktemp("rasters") / "probe_cog.tif"
    band1 = _probe_band()
    band2 = np.where(band1 == NODATA, NODATA, band1 * 2).astype(np.float32)

    profile = {
        "driver": "GTiff",
        "height": RASTER_SIZE_PX,
        "width": RASTER_SIZE_PX,
        "count": 2,
        "dtype": "float32",
        "crs": "EPSG:4326",
        "transform": from_origin(RASTER_ORIGIN_LON, RASTER_ORIGIN_LAT, RASTER_RES_DEG, RASTER_RES_DEG),
        "nodata": NODATA,
        "tiled": True,
        "blockxsize": 128,
        "blockysize": 128,
    }
    with rasterio.open(path, "w", **profile) as dst:
        dst.write(band1, 1)
        dst.write(band2, 2)
    with rasterio.open(path, "r+") as dst:
        dst.build_overviews(RASTER_OVERVIEWS, Resampling.average)
    return path


@pytest.fixture(scope="session")
def mercator_cog_path(tmp_path_factory: pytest.TempPathFactory):
    """Single-band EPSG:3857 GeoTIFF of constant 42.0, 100 x 100 px of 1 km.

    North-west corner at (78.0 E, 22.0 N), so it covers roughly 78.0..78.9 E
    and 21.2..22.0 N. One 2x overview.
    """
    path = tmp_path_factory.mktemp("rasters") / "mercator_cog.tif"
    x0, y0 = CoordinateTransform(map_projection="EPSG:3857").to_map(GeoPoint(lon=78.0, lat=22.0))

    profile = {
        "driver": "GTiff",
        "height": 100,
        "width": 100,
        "count": 1,
        "dtype": "float32",
        "crs": "EPSG:3857",
        "transform": from_origin(x0, y0, 1000.0, 1000.0),
        "nodata": NODATA,
    }
    with rasterio.open(path, "w", **profile) as dst:
        dst.write(np.full((100, 100), 42.0, dtype=np.float32), 1)
    with rasterio.open(path, "r+") as dst:
        dst.build_overviews([2], Resampling.average)
    return path
