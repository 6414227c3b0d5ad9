from enum import StrEnum
from typing import Dict, Union

from demcurv.errors import InvalidArgument
from demcurv.curvature.kernels import (
    Kernel,
    planform_curvature,
    profile_curvature,
    total_curvature,
    mcnab_index,
    focal_mean,
)


class CurvatureType(StrEnum):
    PLANFORM = "planform"
    PROFILE = "profile"
    TOTAL = "total"
    MCNAB = "mcnab"
    BOLSTAD = "bolstad"


# Zevenbergen & Thorne variants always use a 3x3 window
ZT_VARIANTS = (CurvatureType.PLANFORM, CurvatureType.PROFILE, CurvatureType.TOTAL)
ZT_WINDOW_SIZE = 3

# Bolstad is not a single window kernel: its per-window step is the focal mean,
# combined with the grid afterwards (see core.compute_curvature).
_KERNELS: Dict[CurvatureType, Kernel] = {
    CurvatureType.PLANFORM: planform_curvature,
    CurvatureType.PROFILE: profile_curvature,
    CurvatureType.TOTAL: total_curvature,
    CurvatureType.MCNAB: mcnab_index,
    CurvatureType.BOLSTAD: focal_mean,
}


def parse_curvature_type(variant: Union[str, CurvatureType]) -> CurvatureType:
    """Case-sensitive lookup of a curvature variant by name."""
    if isinstance(variant, CurvatureType):
        return variant
    try:
        return CurvatureType(variant)
    except ValueError:
        valid = ", ".join(f"'{v.value}'" for v in CurvatureType)
        raise InvalidArgument(
            f"Unknown curvature type {variant!r}. Valid options: {valid}"
        ) from None


def select_kernel(variant: Union[str, CurvatureType]) -> Kernel:
    return _KERNELS[parse_curvature_type(variant)]


def effective_window_size(variant: Union[str, CurvatureType], window_size: int) -> int:
    """The window size actually used: fixed at 3 for the Zevenbergen & Thorne variants."""
    if parse_curvature_type(variant) in ZT_VARIANTS:
        return ZT_WINDOW_SIZE
    return window_size
