"""Crop a GeoTIFF to a WGS84 bounding box and write it as a cloud-optimized GeoTIFF.

Developer utility: creates the local raster the app opens by default
(RasterConfig.LOCAL_COG_PATH). Any elevation GeoTIFF works, e.g. a tile of
SRTM or Copernicus DEM.

The output is tiled, compressed and carries internal overviews, so the
sampler can pick a detail level matching the map zoom and a remote copy
can be read with HTTP range requests.

Run: python scripts/make_cog.py INPUT.tif --bbox 68 8 97 37
"""

import argparse
import tempfile
from pathlib import Path

import rasterio
from rasterio.enums import Resampling
from rasterio.mask import mask
from rasterio.shutil import copy as rio_copy
from rasterio.warp import transform_bounds
from shapely.geometry import box

from cogprobe.constants import RasterConfig

# Default crop: India (west, south, east, north in degrees)
DEFAULT_BBOX_DEG = (68.0, 8.0, 97.5, 37.0)


def make_cog(
    input_file: Path,
    output_file: Path,
    bbox_deg: tuple[float, float, float, float] = DEFAULT_BBOX_DEG,
) -> None:
    """Crop input_file to bbox_deg and save as COG with internal overviews."""
    with rasterio.open(input_file) as src:
        print(f"Input CRS: {src.crs}")
        print(f"Input bounds: {src.bounds}")
        print(f"Input shape: {src.width} x {src.height}, bands: {src.count}")

        # Bounding box in the raster's native CRS
        src_crs = src.crs or RasterConfig.GEOGRAPHIC_CRS
        west, south, east, north = transform_bounds(RasterConfig.GEOGRAPHIC_CRS, src_crs, *bbox_deg)
        geo = [box(west, south, east, north).__geo_interface__]
        print(f"Crop bbox in {src_crs}: W={west}, S={south}, E={east}, N={north}")

        out_image, out_transform = mask(dataset=src, shapes=geo, crop=True)
        out_meta = src.meta.copy()

    out_meta.update(
        {
            "driver": "GTiff",
            "height": out_image.shape[1],
            "width": out_image.shape[2],
            "transform": out_transform,
            "tiled": True,
            "blockxsize": RasterConfig.COG_BLOCK_SIZE,
            "blockysize": RasterConfig.COG_BLOCK_SIZE,
            "compress": "deflate",
        }
    )
    print(f"Output shape: {out_meta['width']} x {out_meta['height']}")

    # Overviews are built on a temporary file, then copied so they are laid out
    # before the full-resolution data (cloud-optimized ordering)
    with tempfile.TemporaryDirectory() as tmp_dir:
        tmp_file = Path(tmp_dir) / "cropped.tif"
        with rasterio.open(tmp_file, "w", **out_meta) as dest:
            dest.write(out_image)
            dest.build_overviews(RasterConfig.COG_OVERVIEW_FACTORS, Resampling.average)
            dest.update_tags(ns="rio_overview", resampling="average")

        output_file.parent.mkdir(parents=True, exist_ok=True)
        rio_copy(
            tmp_file,
            output_file,
            driver="GTiff",
            copy_src_overviews=True,
            tiled=True,
            blockxsize=RasterConfig.COG_BLOCK_SIZE,
            blockysize=RasterConfig.COG_BLOCK_SIZE,
            compress="deflate",
        )

    print(f"Saved COG with overviews {RasterConfig.COG_OVERVIEW_FACTORS} to {output_file}")


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("input_file", type=Path, help="Source GeoTIFF")
    parser.add_argument("--output", type=Path, default=RasterConfig.LOCAL_COG_PATH, help="Output COG path")
    parser.add_argument(
        "--bbox",
        type=float,
        nargs=4,
        default=DEFAULT_BBOX_DEG,
        metavar=("WEST", "SOUTH", "EAST", "NORTH"),
        help="Crop box in WGS84 degrees",
    )
    args = parser.parse_args()
    make_cog(input_file=args.input_file, output_file=args.output, bbox_deg=tuple(args.bbox))


if __name__ == "__main__":
    main()
