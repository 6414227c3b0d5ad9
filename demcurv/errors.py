"""
Exceptions raised by the curvature tools.
"""


class CurvatureError(Exception):
    """Base class for all curvature errors."""


class TypeMismatch(CurvatureError, TypeError):
    """The input is not a valid 2D elevation grid."""


class InvalidArgument(CurvatureError, ValueError):
    """An argument (variant, window size, resolution, ...) is not valid."""


class NumericSingularity(CurvatureError, ArithmeticError):
    """A locally flat cell (p² + q² == 0) has no defined curvature.

    Kernels never raise this; singular cells are written as NaN. It is only
    raised by ``compute_curvature(..., strict=True)``.
    """

    def __init__(self, n_cells: int, variant: str):
        self.n_cells = n_cells
        self.variant = variant
        super().__init__(
            f"{n_cells} cell(s) have zero gradient and no defined {variant} curvature"
        )
