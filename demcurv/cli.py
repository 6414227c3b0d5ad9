# Command Line Interface for demcurv
import typer
from pathlib import Path
from typing_extensions import Annotated
from typing import Optional, List

from demcurv.errors import CurvatureError
from demcurv.curvature import CurvatureType
from demcurv.raster import PadMode
from demcurv.commands.generate_curvature import generate_curvature, generate_curvature_stack

app = typer.Typer(
    name="demcurv",
    help="Surface curvature (Zevenbergen & Thorne, McNab, Bolstad) for digital elevation models",
    add_completion=False,
)

InputDem = Annotated[
    Path,
    typer.Argument(
        help="Path to the input DEM raster (e.g., GeoTIFF).",
        exists=True, readable=True, resolve_path=True
    )
]
WindowSize = Annotated[
    Optional[int],
    typer.Option("--window-size", "-s", help="Focal window size (odd) for 'mcnab' and 'bolstad'. Ignored by the Zevenbergen & Thorne types.")
]
PadValue = Annotated[
    Optional[float],
    typer.Option(help="Value used for window cells outside the grid with --pad-mode constant.")
]
PadModeOption = Annotated[
    Optional[PadMode],
    typer.Option(help="Edge policy for windows that overlap the grid border.")
]
Band = Annotated[
    Optional[int],
    typer.Option("--band", help="0-indexed band of the DEM to process.")
]
Workers = Annotated[
    Optional[int],
    typer.Option("--workers", "-w", help="Number of threads used to process row blocks.")
]
ConfigFile = Annotated[
    Optional[Path],
    typer.Option("--config", help="YAML config file with default options.", exists=True, readable=True, resolve_path=True)
]
Verbose = Annotated[bool, typer.Option("--verbose", "-v", help="Enable verbose logging.")]


@app.command()
def compute(
    input_dem_path: InputDem,
    output_path: Annotated[
        Path,
        typer.Argument(help="Path to save the curvature raster.", resolve_path=True)
    ],
    variant: Annotated[
        Optional[CurvatureType],
        typer.Option("--type", "-t", help="Curvature type to calculate.")
    ] = None,
    window_size: WindowSize = None,
    pad_value: PadValue = None,
    pad_mode: PadModeOption = None,
    band_index: Band = None,
    n_workers: Workers = None,
    config_path: ConfigFile = None,
    verbose: Verbose = False
) -> None:
    """
    Calculates a single curvature layer from a DEM and saves it as a GeoTIFF.
    """
    try:
        generate_curvature(
            input_dem_path=input_dem_path,
            output_path=output_path,
            variant=variant,
            window_size=window_size,
            pad_value=pad_value,
            pad_mode=pad_mode,
            band_index=band_index,
            n_workers=n_workers,
            config_path=config_path,
            verbose=verbose
        )
    except CurvatureError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


@app.command()
def stack(
    input_dem_path: InputDem,
    output_path: Annotated[
        Path,
        typer.Argument(help="Path to save the multi-band curvature raster.", resolve_path=True)
    ],
    variants: Annotated[
        Optional[List[CurvatureType]],
        typer.Option("--type", "-t", help="Curvature type to include (repeatable). All types when omitted.")
    ] = None,
    window_size: WindowSize = None,
    pad_value: PadValue = None,
    pad_mode: PadModeOption = None,
    band_index: Band = None,
    n_workers: Workers = None,
    config_path: ConfigFile = None,
    verbose: Verbose = False
) -> None:
    """
    Calculates several curvature layers from a DEM and saves them as one
    multi-band GeoTIFF (one band per curvature type).
    """
    try:
        generate_curvature_stack(
            input_dem_path=input_dem_path,
            output_path=output_path,
            variants=variants,
            window_size=window_size,
            pad_value=pad_value,
            pad_mode=pad_mode,
            band_index=band_index,
            n_workers=n_workers,
            config_path=config_path,
            verbose=verbose
        )
    except CurvatureError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
