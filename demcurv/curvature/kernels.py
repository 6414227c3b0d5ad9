"""
Curvature kernels.

Each kernel maps a flattened, row-major focal window to a single value. The
window is the last axis of the input, so the same function works on one
window (shape ``(9,)``) or on a whole stack of windows (shape ``(rows, cols, 9)``).

Zevenbergen & Thorne (1987) fit a quadratic surface to the 3x3 neighbourhood::

    m[0] m[1] m[2]        z1 z2 z3
    m[3] m[4] m[5]   ==   z4 z5 z6
    m[6] m[7] m[8]        z7 z8 z9

McNab (1989, 1993) and Bolstad & Lillesand (1992) describe concavity /
convexity indices that use an edge correction of 36.2 m, the radius to the
outermost cell of the reference window.
"""

from typing import Callable, NamedTuple, Optional, Union

import numpy as np

# Radius (m) to the outermost cell of the reference window
EDGE_CORRECTION_M = 36.2
ROUND_DECIMALS = 6

ArrayOrFloat = Union[np.ndarray, float]
Kernel = Callable[[np.ndarray, Optional[float]], ArrayOrFloat]


class SurfaceDerivatives(NamedTuple):
    p: ArrayOrFloat  # dz/dx
    q: ArrayOrFloat  # dz/dy
    r: ArrayOrFloat  # d2z/dx2
    t: ArrayOrFloat  # d2z/dy2
    s: ArrayOrFloat  # d2z/dxdy


def _as_result(value: np.ndarray) -> ArrayOrFloat:
    return float(value) if np.ndim(value) == 0 else value


# Correctly rounded: the decimal nearest the exact binary value of each element
_round_decimals = np.frompyfunc(lambda value: round(float(value), ROUND_DECIMALS), 1, 1)


def round6(value: ArrayOrFloat) -> ArrayOrFloat:
    """Round to 6 decimal places, correctly rounded. NaN stays NaN."""
    rounded = _round_decimals(np.asarray(value, dtype=np.float64))
    return np.asarray(rounded, dtype=np.float64)


def zt_derivatives(m: np.ndarray, resolution: float) -> SurfaceDerivatives:
    """First and second partial derivatives of the fitted quadratic surface."""
    m = np.asarray(m, dtype=np.float64)
    if m.shape[-1] != 9:
        raise ValueError(f"Zevenbergen & Thorne kernels need 3x3 windows, got {m.shape[-1]} values")
    z1, z2, z3, z4, z5, z6, z7, z8, z9 = (m[..., i] for i in range(9))
    res = float(resolution)
    return SurfaceDerivatives(
        p=(z6 - z4) / (2 * res),
        q=(z2 - z8) / (2 * res),
        r=(z4 + z6 - 2 * z5) / (2 * res**2),
        t=(z2 + z8 - 2 * z5) / (2 * res**2),
        s=(z3 + z7 - z1 - z9) / (4 * res**2),
    )


def singular_mask(m: np.ndarray, resolution: float) -> ArrayOrFloat:
    """True where the window has zero gradient (p² + q² == 0)."""
    d = zt_derivatives(m, resolution)
    return (d.p**2 + d.q**2) == 0


def _planform_raw(d: SurfaceDerivatives) -> np.ndarray:
    p, q, r, t, s = d.p, d.q, d.r, d.t, d.s
    gradient = p**2 + q**2
    with np.errstate(divide="ignore", invalid="ignore"):
        value = -(q**2 * r - 2 * p * q * s + p**2 * t) / (gradient * np.sqrt(1 + gradient))
    return np.where(gradient == 0, np.nan, value)


def _profile_raw(d: SurfaceDerivatives) -> np.ndarray:
    p, q, r, t, s = d.p, d.q, d.r, d.t, d.s
    gradient = p**2 + q**2
    with np.errstate(divide="ignore", invalid="ignore"):
        value = -(p**2 * r + 2 * p * q * s + q**2 * t) / (gradient * np.sqrt(1 + gradient) ** 3)
    return np.where(gradient == 0, np.nan, value)


def planform_curvature(m: np.ndarray, resolution: float) -> ArrayOrFloat:
    """Curvature perpendicular to the slope direction, rounded to 6 decimals.

    Positive values are laterally convex, negative values laterally concave.
    Windows with no gradient return NaN.
    """
    return _as_result(round6(_planform_raw(zt_derivatives(m, resolution))))


def profile_curvature(m: np.ndarray, resolution: float) -> ArrayOrFloat:
    """Curvature along the slope direction, rounded to 6 decimals.

    Negative values are upwardly convex, positive values upwardly concave.
    Windows with no gradient return NaN.
    """
    return _as_result(round6(_profile_raw(zt_derivatives(m, resolution))))


def total_curvature(m: np.ndarray, resolution: float) -> ArrayOrFloat:
    """Planform plus profile curvature.

    Both terms are rounded to 6 decimals *before* they are summed.
    """
    d = zt_derivatives(m, resolution)
    planform = round6(_planform_raw(d))
    profile = round6(_profile_raw(d))
    return _as_result(planform + profile)


def mcnab_index(m: np.ndarray, resolution: Optional[float] = None) -> ArrayOrFloat:
    """McNab's concavity/convexity index for an s x s window.

    ``sum(2 * (centre - x)) / 4 / 36.2``. Positive values mark convex cells.
    ``resolution`` is accepted for a uniform kernel signature and not used.
    """
    m = np.asarray(m, dtype=np.float64)
    centre = m[..., m.shape[-1] // 2][..., np.newaxis]
    value = (2 * np.sum(centre - m, axis=-1) / 4) / EDGE_CORRECTION_M
    return _as_result(value)


def focal_mean(m: np.ndarray, resolution: Optional[float] = None) -> ArrayOrFloat:
    """Arithmetic mean of the window."""
    m = np.asarray(m, dtype=np.float64)
    return _as_result(np.mean(m, axis=-1))


def bolstad_index(grid: np.ndarray, mean_grid: np.ndarray) -> np.ndarray:
    """Bolstad's index from a grid and its focal mean.

    ``10000 * ((grid - focal_mean) / 1000 / 36.2)``
    """
    grid = np.asarray(grid, dtype=np.float64)
    mean_grid = np.asarray(mean_grid, dtype=np.float64)
    return 10000 * ((grid - mean_grid) / 1000 / EDGE_CORRECTION_M)
