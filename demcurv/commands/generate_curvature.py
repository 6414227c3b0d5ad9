import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from demcurv.utils.logging_utils import setup_logging
from demcurv.utils.config import load_curvature_config, load_raster_options
from demcurv.raster.io import load_dem, save_curvature
from demcurv.curvature import compute_curvature, curvature_dataset


def _resolve_options(config_path: Optional[Path], **overrides: Any) -> Dict[str, Any]:
    """Config values with any non-None overrides applied on top."""
    options = load_curvature_config(config_path)
    options.update({k: v for k, v in overrides.items() if v is not None})
    return options


def generate_curvature(
    input_dem_path: Path,
    output_path: Path,
    variant: Optional[str] = None,
    window_size: Optional[int] = None,
    pad_value: Optional[float] = None,
    pad_mode: Optional[str] = None,
    band_index: Optional[int] = None,
    n_workers: Optional[int] = None,
    config_path: Optional[Path] = None,
    verbose: bool = False
) -> Path:
    """
    Calculates one curvature variant from a DEM and saves it as a GeoTIFF.

    Options left as None are taken from the config file.

    Args:
        input_dem_path: Path to the input Digital Elevation Model (DEM).
        output_path: Path to save the curvature raster.
        variant: 'planform', 'profile', 'total', 'mcnab' or 'bolstad'.
        window_size: Focal window size (pixels) for 'mcnab' and 'bolstad'.
        pad_value: Fill value for out-of-grid window cells ('constant' pad mode).
        pad_mode: Edge policy: 'constant', 'nearest' or 'mirror'.
        band_index: 0-indexed band of the DEM to process.
        n_workers: Threads used to process row blocks.
        config_path: YAML config file; the packaged default when None.
        verbose: Enable verbose logging.

    Returns:
        Path to the saved curvature raster.

    Raises:
        FileNotFoundError: If the input DEM is not found.
        InvalidArgument: If an option is invalid.
    """
    setup_logging(verbose=verbose)
    options = _resolve_options(
        config_path,
        variant=variant,
        window_size=window_size,
        pad_value=pad_value,
        pad_mode=pad_mode,
        band_index=band_index,
        n_workers=n_workers,
    )
    logging.info(f"Starting {options['variant']} curvature generation for DEM: {input_dem_path}")

    dem = load_dem(input_dem_path, band_index=options.pop("band_index"))
    curvature = compute_curvature(dem, options.pop("variant"), progress=verbose, **options)

    saved_path = save_curvature(curvature, output_path, **load_raster_options(config_path))
    logging.info(f"Curvature successfully saved to: {saved_path}")
    return saved_path


def generate_curvature_stack(
    input_dem_path: Path,
    output_path: Path,
    variants: Optional[List[str]] = None,
    window_size: Optional[int] = None,
    pad_value: Optional[float] = None,
    pad_mode: Optional[str] = None,
    band_index: Optional[int] = None,
    n_workers: Optional[int] = None,
    config_path: Optional[Path] = None,
    verbose: bool = False
) -> Path:
    """
    Calculates several curvature variants from a DEM and saves them as a
    multi-band GeoTIFF, one band per variant (all five when ``variants`` is empty).
    """
    setup_logging(verbose=verbose)
    options = _resolve_options(
        config_path,
        window_size=window_size,
        pad_value=pad_value,
        pad_mode=pad_mode,
        band_index=band_index,
        n_workers=n_workers,
    )
    options.pop("variant")
    logging.info(f"Starting curvature stack generation for DEM: {input_dem_path}")

    dem = load_dem(input_dem_path, band_index=options.pop("band_index"))
    curvature_ds = curvature_dataset(dem, variants=variants or None, **options)

    saved_path = save_curvature(curvature_ds, output_path, **load_raster_options(config_path))
    logging.info(f"Curvature stack ({', '.join(curvature_ds.data_vars)}) saved to: {saved_path}")
    return saved_path
