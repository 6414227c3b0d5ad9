"""
Curvature kernels and the grid mapper that applies them.
"""

from .variants import CurvatureType, parse_curvature_type, select_kernel
from .core import compute_curvature, curvature_dataset

__all__ = [
    "CurvatureType",
    "parse_curvature_type",
    "select_kernel",
    "compute_curvature",
    "curvature_dataset",
]
