"""
Surface curvature (Zevenbergen & Thorne, McNab, Bolstad) for digital elevation models.
"""

from .errors import CurvatureError, TypeMismatch, InvalidArgument, NumericSingularity
from .curvature import CurvatureType, compute_curvature, curvature_dataset
from .raster import PadMode

__version__ = "0.1.0"

__all__ = [
    "CurvatureError",
    "TypeMismatch",
    "InvalidArgument",
    "NumericSingularity",
    "CurvatureType",
    "compute_curvature",
    "curvature_dataset",
    "PadMode",
]
