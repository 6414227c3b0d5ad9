import logging
from pathlib import Path
from typing import Any, Union

import xarray as xr
import rioxarray as rxr

from demcurv.errors import InvalidArgument

logger = logging.getLogger(__name__)


def squeeze_dataset(ds: Union[xr.Dataset, xr.DataArray]) -> Union[xr.Dataset, xr.DataArray]:
    """Drop singleton dimensions (other than x and y) so the data can be written as bands."""
    extra_dims = [d for d in ds.dims if d not in ("x", "y") and ds.sizes[d] == 1]
    if extra_dims:
        ds = ds.squeeze(extra_dims, drop=True)
    return ds


def load_dem(dem_path: Union[str, Path], band_index: int = 0) -> xr.DataArray:
    """Load a single band of a DEM raster, nodata masked to NaN.

    Args:
        dem_path: Path to the DEM (any format rasterio can read).
        band_index: 0-indexed band to read.

    Returns:
        2D DataArray with the raster CRS and transform attached.
    """
    dem_path = Path(dem_path)
    if not dem_path.exists():
        logger.error(f"DEM not found: {dem_path}")
        raise FileNotFoundError(f"DEM not found: {dem_path}")

    logger.info(f"Loading DEM: {dem_path} (band index: {band_index})")
    try:
        dem = rxr.open_rasterio(dem_path, masked=True)
    except Exception as e:
        logger.error(f"Failed to load DEM from {dem_path}: {e}")
        raise
    if "band" in dem.dims:
        if not 0 <= band_index < dem.sizes["band"]:
            raise InvalidArgument(
                f"Band index {band_index} out of range for {dem_path} ({dem.sizes['band']} bands)"
            )
        dem = dem.isel(band=band_index, drop=True)
    return dem.rename("dem")


def save_curvature(
    curvature: Union[xr.DataArray, xr.Dataset],
    output_path: Union[str, Path],
    **raster_kwargs: Any,
) -> Path:
    """Write curvature layer(s) to a raster file.

    A Dataset is written as a multi-band raster, one band per variable.

    Args:
        curvature: Output of ``compute_curvature`` or ``curvature_dataset``.
        output_path: Destination path (GeoTIFF by default).
        **raster_kwargs: Passed through to ``rio.to_raster`` (e.g. ``compress="LZW"``).

    Returns:
        The output path.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    curvature = squeeze_dataset(curvature)
    try:
        logger.info(f"Saving curvature to: {output_path}")
        curvature.rio.to_raster(output_path, **raster_kwargs)
    except Exception as e:
        logger.error(f"Failed to save curvature to {output_path}: {e}")
        raise
    return output_path
