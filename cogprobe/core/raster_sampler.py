"""Raster sampler for cloud-optimized GeoTIFFs.

Resolves a GeoPoint to a pixel value of a (remote or local) raster:
- Coordinate transformation from WGS84 to the raster's native CRS
- Resolution-aware level selection among full resolution and internal overviews
- Masked single-pixel reads (nodata, mask and NaN become None)
- Blocking GDAL reads run in a worker thread, one at a time, under
  GDAL HTTP timeouts so an abandoned read does not hang its thread

Data Source:
    Any GeoTIFF rasterio can open. Remote COGs are read over HTTP range
    requests (GDAL vsicurl), so only the touched blocks are fetched.
"""

import asyncio
import logging
import threading
from dataclasses import dataclass
from math import hypot, isfinite, log
from pathlib import Path
from typing import Optional, Union

import numpy as np
import rasterio
from rasterio.errors import RasterioError
from rasterio.warp import transform, transform_bounds
from rasterio.windows import Window

from cogprobe.constants import MapConfig, RasterConfig, SamplingConfig
from cogprobe.exceptions import SampleUnavailable
from cogprobe.model.geo_point import GeoPoint
from cogprobe.model.sample_result import SampleResult, SampleStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolutionLevel:
    """One readable detail level of the raster.

    Attributes:
        index: 0 for full resolution, i for the i-th overview
        resolution: Pixel size in raster CRS units
    """

    index: int
    resolution: float

    @property
    def overview_level(self) -> Optional[int]:
        """rasterio overview_level to open this level with (None = full resolution)."""
        return None if self.index == 0 else self.index - 1


def select_level(levels: list[ResolutionLevel], requested_resolution: float) -> ResolutionLevel:
    """Pick the level whose pixel size is nearest to the requested resolution.

    Distance is measured in log scale so that 2x finer and 2x coarser count
    the same. Ties go to the finer level.

    Args:
        levels: Available levels, finest first
        requested_resolution: Desired pixel size in raster CRS units

    Returns:
        The matching (or nearest) level.
    """
    if not levels:
        raise ValueError("Raster has no resolution levels")
    if not (requested_resolution > 0 and isfinite(requested_resolution)):
        return levels[0]
    return min(levels, key=lambda lvl: (abs(log(lvl.resolution / requested_resolution)), lvl.index))


class RasterSampler:
    """Samples values from one GeoTIFF/COG.

    One instance per raster source, owned by the caller (no singleton).
    Dataset handles are opened on first use per level and kept until close().

    Example:
        sampler = RasterSampler(url="https://example.com/dem_cog.tif")
        result = await sampler.sample(point=GeoPoint(lon=78.96, lat=20.59), resolution=611.5,
                                      target_projection="EPSG:3857")
    """

    def __init__(
        self,
        url: Union[str, Path],
        http_timeout_s: int = SamplingConfig.GDAL_HTTP_TIMEOUT_S,
    ) -> None:
        """Initialize sampler.

        Args:
            url: HTTP(S) URL or local path of the raster
            http_timeout_s: GDAL timeout for a single HTTP request, in seconds
        """
        self.url = str(url)
        self.http_timeout_s = http_timeout_s
        self._lock = threading.Lock()
        self._datasets: dict[int, rasterio.io.DatasetReader] = {}
        self._levels: Optional[list[ResolutionLevel]] = None
        self._crs: Optional[str] = None

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    async def sample(
        self,
        point: GeoPoint,
        resolution: float,
        target_projection: str = MapConfig.MAP_PROJECTION,
        all_bands: bool = False,
    ) -> SampleResult:
        """Sample the raster at a point, at the detail level matching the view.

        Args:
            point: Where to sample
            resolution: Ground distance per display unit, in target_projection units
            target_projection: CRS the resolution is expressed in (the map projection)
            all_bands: If True, read every band into SampleResult.bands

        Returns:
            SampleResult with the first band as value, or None for no data.

        Raises:
            ValueError: If resolution is not positive.
            SampleUnavailable: If the raster backend fails.
        """
        if not (resolution > 0 and isfinite(resolution)):
            raise ValueError(f"Resolution must be positive, got {resolution}")
        return await asyncio.to_thread(self._sample_blocking, point, resolution, target_projection, all_bands)

    @property
    def gdal_options(self) -> dict[str, int]:
        """GDAL config options every open and read runs under."""
        return {
            "GDAL_HTTP_TIMEOUT": self.http_timeout_s,
            "GDAL_HTTP_CONNECTTIMEOUT": min(self.http_timeout_s, SamplingConfig.GDAL_HTTP_CONNECT_TIMEOUT_S),
            "GDAL_HTTP_MAX_RETRY": SamplingConfig.GDAL_HTTP_MAX_RETRY,
        }

    @property
    def levels(self) -> list[ResolutionLevel]:
        """Available detail levels, finest first."""
        with self._lock, rasterio.Env(**self.gdal_options):
            self._ensure_opened()
            assert self._levels is not None
            return list(self._levels)

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        """Return (west, south, east, north) bounds in WGS84."""
        with self._lock, rasterio.Env(**self.gdal_options):
            dataset = self._ensure_opened()
            b = dataset.bounds
            if self._crs != RasterConfig.GEOGRAPHIC_CRS:
                return transform_bounds(self._crs, RasterConfig.GEOGRAPHIC_CRS, b.left, b.bottom, b.right, b.top)
            return b.left, b.bottom, b.right, b.top

    def close(self) -> None:
        """Close all open dataset handles."""
        with self._lock:
            for dataset in self._datasets.values():
                dataset.close()
            self._datasets.clear()
            self._levels = None
            self._crs = None

    # =========================================================================
    # BLOCKING IMPLEMENTATION (worker thread)
    # =========================================================================

    def _sample_blocking(
        self,
        point: GeoPoint,
        resolution: float,
        target_projection: str,
        all_bands: bool,
    ) -> SampleResult:
        """Synchronous body of sample(), serialized by the dataset lock."""
        with self._lock, rasterio.Env(**self.gdal_options):
            try:
                full = self._ensure_opened()
                x, y = self._to_raster_crs(point=point)

                b = full.bounds
                if not (b.left <= x < b.right and b.bottom < y <= b.top):
                    logger.debug(f"[SAMPLE] {point} outside raster extent {tuple(b)}")
                    return SampleResult.no_data(point=point)

                raster_resolution = self._resolution_in_raster_units(
                    point=point, resolution=resolution, target_projection=target_projection
                )
                assert self._levels is not None
                level = select_level(levels=self._levels, requested_resolution=raster_resolution)
                dataset = self._open_level(level=level)
                bands = self._read_pixel(dataset=dataset, x=x, y=y, all_bands=all_bands)
            except RasterioError as e:
                raise SampleUnavailable(f"Reading {self.url} at {point} failed: {e}") from e

        value = bands[0]
        logger.debug(f"[SAMPLE] {point} level={level.index} res={level.resolution:.3f} -> {bands}")
        if value is None:
            return SampleResult(point=point, value=None, bands=bands, status=SampleStatus.NO_DATA)
        return SampleResult(point=point, value=value, bands=bands, status=SampleStatus.OK)

    def _ensure_opened(self) -> rasterio.io.DatasetReader:
        """Open the full-resolution dataset and discover levels (caller holds lock)."""
        full = self._datasets.get(0)
        if full is not None:
            return full

        logger.info(f"Opening raster {self.url}...")
        full = rasterio.open(self.url)
        self._datasets[0] = full
        self._crs = full.crs.to_string() if full.crs else RasterConfig.GEOGRAPHIC_CRS

        native = abs(full.res[0])
        factors = full.overviews(SamplingConfig.CANONICAL_BAND)
        self._levels = [ResolutionLevel(index=0, resolution=native)] + [
            ResolutionLevel(index=i + 1, resolution=native * factor) for i, factor in enumerate(factors)
        ]
        logger.info(
            f"Raster opened (shape: {full.height}x{full.width}, bands: {full.count}, "
            f"CRS: {self._crs}, overviews: {factors})"
        )
        return full

    def _open_level(self, level: ResolutionLevel) -> rasterio.io.DatasetReader:
        """Return the dataset handle for a level, opening it on first use (caller holds lock)."""
        dataset = self._datasets.get(level.index)
        if dataset is None:
            dataset = rasterio.open(self.url, overview_level=level.overview_level)
            self._datasets[level.index] = dataset
            logger.debug(f"Opened overview level {level.overview_level} ({dataset.width}x{dataset.height})")
        return dataset

    def _to_raster_crs(self, point: GeoPoint) -> tuple[float, float]:
        """Transform WGS84 point to raster CRS if needed."""
        if self._crs == RasterConfig.GEOGRAPHIC_CRS:
            return point.lon, point.lat
        xs, ys = transform(RasterConfig.GEOGRAPHIC_CRS, self._crs, [point.lon], [point.lat])
        return xs[0], ys[0]

    def _resolution_in_raster_units(self, point: GeoPoint, resolution: float, target_projection: str) -> float:
        """Express one display unit at the point as a length in raster CRS units.

        Projects the point into target_projection, steps one resolution east,
        and measures that step in the raster CRS.
        """
        if target_projection == self._crs:
            return resolution

        mx, my = transform(RasterConfig.GEOGRAPHIC_CRS, target_projection, [point.lon], [point.lat])
        xs, ys = transform(target_projection, self._crs, [mx[0], mx[0] + resolution], [my[0], my[0]])
        step = hypot(xs[1] - xs[0], ys[1] - ys[0])
        if not (step > 0 and isfinite(step)):
            logger.warning(f"[SAMPLE] Cannot convert resolution {resolution} at {point}, using full resolution")
            return 0.0
        return step

    @staticmethod
    def _read_pixel(
        dataset: rasterio.io.DatasetReader,
        x: float,
        y: float,
        all_bands: bool,
    ) -> tuple[Optional[float], ...]:
        """Read one pixel; masked, nodata and NaN values become None."""
        row, col = dataset.index(x, y)
        indexes = list(dataset.indexes) if all_bands else [SamplingConfig.CANONICAL_BAND]

        if not (0 <= row < dataset.height and 0 <= col < dataset.width):
            return tuple(None for _ in indexes)

        data = dataset.read(indexes=indexes, window=Window(col, row, 1, 1), masked=True)
        mask = np.ma.getmaskarray(data)

        values: list[Optional[float]] = []
        for band_idx in range(data.shape[0]):
            if mask[band_idx, 0, 0]:
                values.append(None)
                continue
            raw = float(data.data[band_idx, 0, 0])
            values.append(raw if isfinite(raw) else None)
        return tuple(values)

    def __repr__(self) -> str:
        return f"RasterSampler(url={self.url!r}, http_timeout_s={self.http_timeout_s})"
