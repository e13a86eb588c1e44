"""Tests for RasterSampler on small real GeoTIFFs written by rasterio.

Fixture geometry is documented in conftest.py. Resolutions are given in
EPSG:4326 degrees unless a test says otherwise, so 1/128 degree is one
full resolution pixel.
"""

import asyncio

import pytest
import rasterio
from rasterio.env import getenv
from conftest import (
    BACKGROUND_VALUE,
    NODATA_LAT,
    NODATA_LON,
    PEAK_LAT,
    PEAK_LON,
    PEAK_VALUE,
    PLATEAU_LAT,
    PLATEAU_LON,
    PLATEAU_VALUE,
    RASTER_RES_DEG,
    RESOLUTION_Z8,
)

from cogprobe.constants import SamplingConfig
from cogprobe.core.raster_sampler import RasterSampler
from cogprobe.exceptions import SampleUnavailable
from cogprobe.model.geo_point import GeoPoint
from cogprobe.model.sample_result import SampleStatus

PEAK = GeoPoint(lon=PEAK_LON, lat=PEAK_LAT)
PLATEAU = GeoPoint(lon=PLATEAU_LON, lat=PLATEAU_LAT)
NODATA_POINT = GeoPoint(lon=NODATA_LON, lat=NODATA_LAT)


@pytest.fixture
def sampler(probe_cog_path) -> RasterSampler:
    """Sampler on the two-band EPSG:4326 test raster, closed after the test."""
    sampler = RasterSampler(url=probe_cog_path)
    yield sampler
    sampler.close()


def sample(sampler: RasterSampler, point: GeoPoint, resolution: float, **kwargs):
    return asyncio.run(sampler.sample(point=point, resolution=resolution, target_projection="EPSG:4326", **kwargs))


class TestLevels:
    """Test discovery of full resolution and overviews."""

    def test_levels_full_resolution_first(self, sampler: RasterSampler) -> None:
        resolutions = [level.resolution for level in sampler.levels]
        assert resolutions == pytest.approx([RASTER_RES_DEG * f for f in (1, 2, 4, 8)])
        assert [level.index for level in sampler.levels] == [0, 1, 2, 3]

    def test_bounds_in_wgs84(self, sampler: RasterSampler) -> None:
        west, south, east, north = sampler.bounds
        assert (west, south, east, north) == pytest.approx((78.0, 20.0, 80.0, 22.0))


class TestSampleValues:
    """Test values read at different detail levels."""

    def test_full_resolution_reads_exact_pixel(self, sampler: RasterSampler) -> None:
        """A request finer than one pixel reads the full resolution value."""
        result = sample(sampler, PEAK, resolution=RASTER_RES_DEG / 2)
        assert result.status == SampleStatus.OK
        assert result.value == pytest.approx(PEAK_VALUE, abs=1e-3)
        assert result.point == PEAK

    def test_coarse_request_reads_overview(self, sampler: RasterSampler) -> None:
        """At 8x the pixel size the peak is averaged with 63 background pixels."""
        result = sample(sampler, PEAK, resolution=RASTER_RES_DEG * 8)
        expected = (63 * BACKGROUND_VALUE + PEAK_VALUE) / 64
        assert result.value == pytest.approx(expected, abs=1e-2)

    @pytest.mark.parametrize("factor", [0.5, 1, 2, 4, 8, 100])
    def test_constant_block_same_at_every_level(self, sampler: RasterSampler, factor: float) -> None:
        result = sample(sampler, PLATEAU, resolution=RASTER_RES_DEG * factor)
        assert result.value == pytest.approx(PLATEAU_VALUE)

    def test_first_band_is_canonical(self, sampler: RasterSampler) -> None:
        result = sample(sampler, PLATEAU, resolution=RASTER_RES_DEG)
        assert result.bands == (result.value,)

    def test_all_bands(self, sampler: RasterSampler) -> None:
        result = sample(sampler, PLATEAU, resolution=RASTER_RES_DEG, all_bands=True)
        assert result.value == pytest.approx(PLATEAU_VALUE)
        assert result.bands == pytest.approx((PLATEAU_VALUE, 2 * PLATEAU_VALUE))

    def test_web_mercator_resolution_converted(self, sampler: RasterSampler) -> None:
        """611 m/px (zoom 8) is finer than one ~870 m pixel, so full resolution is read."""
        result = asyncio.run(sampler.sample(point=PEAK, resolution=RESOLUTION_Z8, target_projection="EPSG:3857"))
        assert result.value == pytest.approx(PEAK_VALUE, abs=1e-3)

    def test_repeated_reads_reuse_dataset_handles(self, sampler: RasterSampler) -> None:
        first = sample(sampler, PEAK, resolution=RASTER_RES_DEG)
        second = sample(sampler, PEAK, resolution=RASTER_RES_DEG)
        assert first.value == second.value


class TestNoData:
    """Test points without a value."""

    @pytest.mark.parametrize(
        "point",
        [
            GeoPoint(lon=10.0, lat=47.0),  # Far away
            GeoPoint(lon=77.99, lat=21.0),  # Just west of the raster
            GeoPoint(lon=79.0, lat=22.01),  # Just north of the raster
            GeoPoint(lon=80.0, lat=21.0),  # On the east edge (exclusive)
        ],
    )
    def test_outside_extent_is_no_data(self, sampler: RasterSampler, point: GeoPoint) -> None:
        result = sample(sampler, point, resolution=RASTER_RES_DEG)
        assert result.value is None
        assert result.status == SampleStatus.NO_DATA
        assert not result.has_value

    @pytest.mark.parametrize("factor", [1, 2, 8])
    def test_nodata_pixel_is_no_data(self, sampler: RasterSampler, factor: int) -> None:
        result = sample(sampler, NODATA_POINT, resolution=RASTER_RES_DEG * factor)
        assert result.value is None
        assert result.status == SampleStatus.NO_DATA

    def test_nodata_all_bands(self, sampler: RasterSampler) -> None:
        result = sample(sampler, NODATA_POINT, resolution=RASTER_RES_DEG, all_bands=True)
        assert result.bands == (None, None)


class TestFailures:
    """Test backend errors and invalid requests."""

    def test_missing_file_raises_sample_unavailable(self, tmp_path) -> None:
        sampler = RasterSampler(url=tmp_path / "does_not_exist.tif")
        with pytest.raises(SampleUnavailable):
            sample(sampler, PEAK, resolution=RASTER_RES_DEG)

    def test_not_a_raster_raises_sample_unavailable(self, tmp_path) -> None:
        bogus = tmp_path / "bogus.tif"
        bogus.write_text("this is not a GeoTIFF")
        sampler = RasterSampler(url=bogus)
        with pytest.raises(SampleUnavailable):
            sample(sampler, PEAK, resolution=RASTER_RES_DEG)

    @pytest.mark.parametrize("resolution", [0.0, -1.0, float("nan")])
    def test_non_positive_resolution_raises(self, sampler: RasterSampler, resolution: float) -> None:
        with pytest.raises(ValueError):
            sample(sampler, PEAK, resolution=resolution)

    def test_close_then_sample_reopens(self, sampler: RasterSampler) -> None:
        sample(sampler, PEAK, resolution=RASTER_RES_DEG)
        sampler.close()
        result = sample(sampler, PEAK, resolution=RASTER_RES_DEG)
        assert result.value == pytest.approx(PEAK_VALUE, abs=1e-3)


class TestHttpLimits:
    """GDAL HTTP timeouts bound how long a worker thread can block."""

    def test_default_options(self, sampler: RasterSampler) -> None:
        assert sampler.gdal_options == {
            "GDAL_HTTP_TIMEOUT": SamplingConfig.GDAL_HTTP_TIMEOUT_S,
            "GDAL_HTTP_CONNECTTIMEOUT": SamplingConfig.GDAL_HTTP_CONNECT_TIMEOUT_S,
            "GDAL_HTTP_MAX_RETRY": SamplingConfig.GDAL_HTTP_MAX_RETRY,
        }

    def test_connect_timeout_never_exceeds_request_timeout(self, probe_cog_path) -> None:
        options = RasterSampler(url=probe_cog_path, http_timeout_s=1).gdal_options
        assert options["GDAL_HTTP_TIMEOUT"] == 1
        assert options["GDAL_HTTP_CONNECTTIMEOUT"] == 1

    def test_opens_run_under_http_limits(self, probe_cog_path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Every dataset open in the worker thread sees the sampler's GDAL options."""
        seen: list[dict] = []
        real_open = rasterio.open

        def recording_open(*args, **kwargs):
            seen.append(getenv())
            return real_open(*args, **kwargs)

        monkeypatch.setattr(rasterio, "open", recording_open)
        sampler = RasterSampler(url=probe_cog_path, http_timeout_s=2)
        try:
            sample(sampler, PEAK, resolution=RASTER_RES_DEG * 8)
        finally:
            sampler.close()

        assert len(seen) == 2  # Full resolution, then the overview
        for options in seen:
            assert str(options["GDAL_HTTP_TIMEOUT"]) == "2"
            assert str(options["GDAL_HTTP_MAX_RETRY"]) == str(SamplingConfig.GDAL_HTTP_MAX_RETRY)


class TestProjectedRaster:
    """Test a raster whose CRS differs from GeoPoint's."""

    def test_reprojects_point(self, mercator_cog_path) -> None:
        sampler = RasterSampler(url=mercator_cog_path)
        result = asyncio.run(
            sampler.sample(point=GeoPoint(lon=78.4, lat=21.6), resolution=1000.0, target_projection="EPSG:3857")
        )
        assert result.value == pytest.approx(42.0)
        sampler.close()

    def test_resolution_from_other_projection(self, mercator_cog_path) -> None:
        """Degrees per display unit are converted into raster meters."""
        sampler = RasterSampler(url=mercator_cog_path)
        result = asyncio.run(
            sampler.sample(point=GeoPoint(lon=78.4, lat=21.6), resolution=0.02, target_projection="EPSG:4326")
        )
        assert result.value == pytest.approx(42.0)
        sampler.close()

    def test_bounds_transformed_to_wgs84(self, mercator_cog_path) -> None:
        sampler = RasterSampler(url=mercator_cog_path)
        west, south, east, north = sampler.bounds
        assert west == pytest.approx(78.0, abs=1e-6)
        assert north == pytest.approx(22.0, abs=1e-6)
        assert east > 78.8 and south < 21.3
        sampler.close()
