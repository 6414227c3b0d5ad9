# demcurv/raster/__init__.py
from .window import PadMode, extract_window, window_stack, pad_grid
from .io import load_dem, save_curvature

__all__ = [
    "PadMode",
    "extract_window",
    "window_stack",
    "pad_grid",
    "load_dem",
    "save_curvature",
]
