"""
Apply curvature kernels across a whole elevation grid.
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional, Tuple, Union

import numpy as np
import xarray as xr
import rioxarray as rxr  # Required for .rio accessor
from rioxarray.exceptions import RioXarrayError
from tqdm import tqdm

from demcurv.errors import InvalidArgument, NumericSingularity, TypeMismatch
from demcurv.raster.window import PadMode, pad_grid, parse_pad_mode, stack_padded, validate_window_size
from demcurv.curvature.kernels import Kernel, bolstad_index, singular_mask
from demcurv.curvature.variants import (
    CurvatureType,
    ZT_VARIANTS,
    effective_window_size,
    parse_curvature_type,
    select_kernel,
)

logger = logging.getLogger(__name__)

Grid = Union[np.ndarray, xr.DataArray]

# Memory allowed for the window stacks of all blocks in flight at once.
# A block stack holds rows * cols * s * s float64 values.
BLOCK_BYTES = 16 * 1024 * 1024


def _coerce_grid(grid: Grid) -> Tuple[np.ndarray, Optional[xr.DataArray]]:
    """Return the grid values as a 2D float64 array plus the DataArray template (if any)."""
    template = None
    if isinstance(grid, xr.DataArray):
        if "band" in grid.dims:
            if grid.sizes["band"] != 1:
                raise TypeMismatch(f"Expected a single band grid, got {grid.sizes['band']} bands")
            grid = grid.squeeze("band", drop=True)
        template = grid
        values = grid.values
    elif isinstance(grid, np.ndarray):
        values = grid
    else:
        raise TypeMismatch(f"Expected a numpy array or xarray.DataArray, got {type(grid).__name__}")

    if values.ndim != 2:
        raise TypeMismatch(f"Expected a 2D grid, got {values.ndim} dimensions")
    if values.size == 0:
        raise TypeMismatch("Grid has no cells")
    if values.dtype == bool or not np.issubdtype(values.dtype, np.number):
        raise TypeMismatch(f"Grid values must be real numbers, got dtype {values.dtype}")
    if np.issubdtype(values.dtype, np.complexfloating):
        raise TypeMismatch("Grid values must be real numbers, got complex values")
    return values.astype(np.float64, copy=False), template


def grid_resolution(grid: xr.DataArray) -> Optional[float]:
    """Cell size of a DataArray, from its transform or its x coordinate spacing."""
    try:
        x_res, y_res = grid.rio.resolution()
        x_res, y_res = abs(float(x_res)), abs(float(y_res))
        if not math.isclose(x_res, y_res):
            logger.warning(
                "Cells are not square (x=%s, y=%s); using the x resolution", x_res, y_res
            )
        return x_res
    except RioXarrayError:
        pass
    if "x" in grid.coords and grid.sizes.get("x", 0) > 1:
        return abs(float(grid["x"][1] - grid["x"][0]))
    return None


def _resolve_resolution(template: Optional[xr.DataArray], resolution: Optional[float]) -> float:
    if resolution is None and template is not None:
        resolution = grid_resolution(template)
    if resolution is None:
        logger.debug("No resolution available for the grid, assuming 1.0")
        resolution = 1.0
    try:
        resolution = float(resolution)
    except (TypeError, ValueError):
        raise InvalidArgument(f"Resolution must be a number, got {resolution!r}") from None
    if not math.isfinite(resolution) or resolution <= 0:
        raise InvalidArgument(f"Resolution must be a positive number, got {resolution}")
    return resolution


def rows_per_block(n_cols: int, window_size: int, n_workers: int = 1) -> int:
    """Rows whose window stack fits in an equal share of BLOCK_BYTES (at least one)."""
    row_bytes = n_cols * window_size * window_size * np.dtype(np.float64).itemsize
    return max(1, BLOCK_BYTES // (row_bytes * n_workers))


def _row_blocks(n_rows: int, block_rows: int, n_workers: int) -> List[Tuple[int, int]]:
    n_blocks = max(math.ceil(n_rows / block_rows), n_workers)
    n_blocks = min(n_blocks, n_rows)
    edges = np.linspace(0, n_rows, n_blocks + 1).astype(int)
    return [(int(a), int(b)) for a, b in zip(edges[:-1], edges[1:])]


def map_kernel(
    values: np.ndarray,
    kernel: Kernel,
    window_size: int,
    resolution: float,
    pad_value: float = 0.0,
    pad_mode: PadMode = PadMode.CONSTANT,
    n_workers: int = 1,
    progress: bool = False,
) -> np.ndarray:
    """Apply ``kernel`` to the window of every cell.

    The grid is padded once; rows are then processed in disjoint blocks, each
    writing only its own slice of the output. With ``n_workers > 1`` the
    blocks run on a thread pool.
    """
    padded = pad_grid(values, window_size, pad_value=pad_value, pad_mode=pad_mode)
    half = window_size // 2
    out = np.empty(values.shape, dtype=np.float64)

    def _run_block(start: int, stop: int) -> None:
        stack = stack_padded(padded[start:stop + 2 * half], window_size)
        out[start:stop] = kernel(stack, resolution)

    block_rows = rows_per_block(values.shape[1], window_size, n_workers)
    blocks = _row_blocks(values.shape[0], block_rows, n_workers)
    if n_workers > 1 and len(blocks) > 1:
        with ThreadPoolExecutor(max_workers=n_workers) as executor:
            futures = [executor.submit(_run_block, start, stop) for start, stop in blocks]
            for future in tqdm(futures, total=len(futures), desc="Row blocks", disable=not progress):
                future.result()
    else:
        for start, stop in tqdm(blocks, total=len(blocks), desc="Row blocks", disable=not progress):
            _run_block(start, stop)
    return out


def _wrap_output(result: np.ndarray, template: Optional[xr.DataArray], name: str) -> Grid:
    if template is None:
        return result
    out = xr.DataArray(
        result,
        coords=template.coords,
        dims=template.dims,
        name=name,
        attrs=template.attrs.copy(),
    )
    for attr in ("_FillValue", "scale_factor", "add_offset"):
        out.attrs.pop(attr, None)
    if template.rio.crs is not None:
        out.rio.write_crs(template.rio.crs, inplace=True)
        try:
            out.rio.write_transform(template.rio.transform(), inplace=True)
        except RioXarrayError:
            logger.debug("Could not derive a transform for %s", name)
    out.rio.write_nodata(np.nan, inplace=True)
    return out


def compute_curvature(
    grid: Grid,
    variant: Union[str, CurvatureType],
    window_size: int = 3,
    resolution: Optional[float] = None,
    pad_value: float = 0.0,
    pad_mode: Union[str, PadMode] = PadMode.CONSTANT,
    n_workers: int = 1,
    strict: bool = False,
    progress: bool = False,
) -> Grid:
    """Calculate surface curvature for every cell of an elevation grid.

    Args:
        grid: 2D elevation grid (numpy array or xarray.DataArray).
        variant: One of 'planform', 'profile', 'total', 'mcnab', 'bolstad'.
        window_size: Focal window size for 'mcnab' and 'bolstad'. The
            Zevenbergen & Thorne variants always use 3.
        resolution: Cell size. Derived from a DataArray when not given, 1.0
            for plain arrays.
        pad_value: Value used for out-of-grid window positions with the
            'constant' pad mode.
        pad_mode: Edge policy: 'constant', 'nearest' or 'mirror'.
        n_workers: Threads used to process row blocks.
        strict: Raise NumericSingularity instead of returning NaN for cells
            with zero gradient.
        progress: Show a progress bar over row blocks.

    Returns:
        A grid with the same shape as the input (DataArray in, DataArray out).

    Raises:
        TypeMismatch: If ``grid`` is not a 2D numeric grid.
        InvalidArgument: If any other argument is invalid.
        NumericSingularity: If ``strict`` and any cell has zero gradient.
    """
    values, template = _coerce_grid(grid)
    curvature_type = parse_curvature_type(variant)
    window_size = validate_window_size(window_size)
    mode = parse_pad_mode(pad_mode)
    resolution = _resolve_resolution(template, resolution)
    try:
        pad_value = float(pad_value)
    except (TypeError, ValueError):
        raise InvalidArgument(f"Pad value must be a number, got {pad_value!r}") from None
    if isinstance(n_workers, bool) or not isinstance(n_workers, (int, np.integer)) or n_workers < 1:
        raise InvalidArgument(f"Number of workers must be a positive integer, got {n_workers!r}")

    size = effective_window_size(curvature_type, window_size)
    if size != window_size:
        logger.debug("Window size %d ignored for %s curvature, using %d", window_size, curvature_type, size)

    logger.info(
        "Calculating %s curvature (grid %dx%d, window %d, resolution %s, pad %s)",
        curvature_type, values.shape[0], values.shape[1], size, resolution,
        pad_value if mode is PadMode.CONSTANT else mode,
    )
    options = dict(
        window_size=size,
        resolution=resolution,
        pad_value=pad_value,
        pad_mode=mode,
        n_workers=int(n_workers),
    )
    result = map_kernel(values, select_kernel(curvature_type), progress=progress, **options)

    if curvature_type is CurvatureType.BOLSTAD:
        # Second pass: the kernel produced the focal mean grid
        result = bolstad_index(values, result)

    if curvature_type in ZT_VARIANTS:
        n_singular = int(np.count_nonzero(map_kernel(values, singular_mask, **options)))
        if n_singular:
            if strict:
                raise NumericSingularity(n_singular, str(curvature_type))
            logger.warning("%d cell(s) have zero gradient; %s curvature set to NaN", n_singular, curvature_type)

    return _wrap_output(result, template, str(curvature_type))


def curvature_dataset(
    dem: Grid,
    variants: Optional[Iterable[Union[str, CurvatureType]]] = None,
    **options,
) -> xr.Dataset:
    """Calculate several curvature variants into one Dataset (one variable per variant).

    Args:
        dem: 2D elevation grid.
        variants: Variants to calculate, all five when None.
        **options: Passed to ``compute_curvature``.
    """
    if variants is None:
        variants = list(CurvatureType)
    curvature_types = list(dict.fromkeys(parse_curvature_type(v) for v in variants))
    if not curvature_types:
        raise InvalidArgument("At least one curvature type is required")
    if isinstance(dem, np.ndarray):
        _coerce_grid(dem)
        dem = xr.DataArray(dem, dims=["y", "x"], name="dem")

    layers = {}
    for curvature_type in curvature_types:
        layers[str(curvature_type)] = compute_curvature(dem, curvature_type, **options)
    return xr.Dataset(layers)
