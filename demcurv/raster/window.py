"""
Focal window extraction with an explicit edge (padding) policy.

Every cell gets a full s x s neighbourhood. Cells within ``(s - 1) // 2`` of a
border have the missing positions filled according to the pad policy, so the
output grid keeps the input shape. Values computed from such windows are
biased and should not be trusted near the edges.
"""

from enum import StrEnum
from typing import Union

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from demcurv.errors import InvalidArgument


class PadMode(StrEnum):
    CONSTANT = "constant"
    NEAREST = "nearest"
    MIRROR = "mirror"


# PadMode -> numpy.pad mode
_NUMPY_PAD_MODES = {
    PadMode.CONSTANT: "constant",
    PadMode.NEAREST: "edge",
    PadMode.MIRROR: "reflect",
}


def parse_pad_mode(pad_mode: Union[str, PadMode]) -> PadMode:
    try:
        return PadMode(pad_mode)
    except ValueError:
        valid = ", ".join(m.value for m in PadMode)
        raise InvalidArgument(f"Unknown pad mode '{pad_mode}'. Valid options: {valid}") from None


def validate_window_size(window_size: int) -> int:
    """Window sizes must be positive odd integers so the window has a centre cell."""
    if isinstance(window_size, bool) or not isinstance(window_size, (int, np.integer)):
        raise InvalidArgument(f"Window size must be an integer, got {window_size!r}")
    if window_size < 1 or window_size % 2 == 0:
        raise InvalidArgument(f"Window size must be a positive odd integer, got {window_size}")
    return int(window_size)


def pad_grid(
    grid: np.ndarray,
    window_size: int,
    pad_value: float = 0.0,
    pad_mode: Union[str, PadMode] = PadMode.CONSTANT,
) -> np.ndarray:
    """Pad a 2D grid by half a window on every side.

    Args:
        grid: 2D elevation array.
        window_size: Odd window size; ``(window_size - 1) // 2`` cells are added per border.
        pad_value: Fill value used by ``PadMode.CONSTANT``.
        pad_mode: ``constant`` (fill with ``pad_value``), ``nearest`` (repeat the
            edge cell) or ``mirror`` (reflect about the edge cell).

    Returns:
        The padded float64 array.
    """
    window_size = validate_window_size(window_size)
    mode = parse_pad_mode(pad_mode)
    half = window_size // 2
    grid = np.asarray(grid, dtype=np.float64)
    if half == 0:
        return grid.copy()
    if mode is PadMode.CONSTANT:
        return np.pad(grid, half, mode="constant", constant_values=pad_value)
    return np.pad(grid, half, mode=_NUMPY_PAD_MODES[mode])


def stack_padded(padded: np.ndarray, window_size: int) -> np.ndarray:
    """Turn an already padded grid into a ``(rows, cols, s*s)`` window stack."""
    windows = sliding_window_view(padded, (window_size, window_size))
    stack = windows.reshape(windows.shape[0], windows.shape[1], window_size * window_size)
    stack.flags.writeable = False
    return stack


def window_stack(
    grid: np.ndarray,
    window_size: int = 3,
    pad_value: float = 0.0,
    pad_mode: Union[str, PadMode] = PadMode.CONSTANT,
) -> np.ndarray:
    """Windows for every cell of ``grid``.

    Returns:
        Read-only array of shape ``(rows, cols, window_size**2)``. Entry
        ``[i, j]`` is the row-major flattened window centred on cell ``(i, j)``.
    """
    padded = pad_grid(grid, window_size, pad_value=pad_value, pad_mode=pad_mode)
    return stack_padded(padded, window_size)


def extract_window(
    grid: np.ndarray,
    row: int,
    col: int,
    window_size: int = 3,
    pad_value: float = 0.0,
    pad_mode: Union[str, PadMode] = PadMode.CONSTANT,
) -> np.ndarray:
    """The flattened (row-major, top-left to bottom-right) window centred on one cell."""
    grid = np.asarray(grid)
    n_rows, n_cols = grid.shape
    if not (0 <= row < n_rows and 0 <= col < n_cols):
        raise InvalidArgument(f"Cell ({row}, {col}) is outside a grid of shape {grid.shape}")
    padded = pad_grid(grid, window_size, pad_value=pad_value, pad_mode=pad_mode)
    window = padded[row:row + window_size, col:col + window_size].ravel().copy()
    window.flags.writeable = False
    return window
