import pytest
import numpy as np
import xarray as xr
import rioxarray as rxr  # noqa: F401, registers the .rio accessor
from typer.testing import CliRunner
from unittest.mock import patch

from demcurv.cli import app
from demcurv.curvature import CurvatureType
from demcurv.errors import InvalidArgument
from demcurv.raster import PadMode

runner = CliRunner()


@pytest.fixture
def dem_file(tmp_path):
    """The CLI only checks the file exists; the workflow itself is mocked."""
    path = tmp_path / "dem.tif"
    path.write_bytes(b"")
    return path


@patch("demcurv.cli.generate_curvature")
def test_compute(mock_generate, dem_file, tmp_path):
    result = runner.invoke(app, [
        "compute", str(dem_file), str(tmp_path / "out.tif"),
        "--type", "planform", "--pad-mode", "mirror", "--workers", "2",
    ])
    assert result.exit_code == 0, result.output
    kwargs = mock_generate.call_args.kwargs
    assert kwargs["variant"] == CurvatureType.PLANFORM
    assert kwargs["pad_mode"] == PadMode.MIRROR
    assert kwargs["n_workers"] == 2
    assert kwargs["window_size"] is None


@patch("demcurv.cli.generate_curvature")
def test_compute_rejects_unknown_type(mock_generate, dem_file, tmp_path):
    result = runner.invoke(app, ["compute", str(dem_file), str(tmp_path / "out.tif"), "-t", "slope"])
    assert result.exit_code != 0
    mock_generate.assert_not_called()


@patch("demcurv.cli.generate_curvature")
def test_compute_reports_invalid_argument(mock_generate, dem_file, tmp_path):
    mock_generate.side_effect = InvalidArgument("Window size must be a positive odd integer, got 4")
    result = runner.invoke(app, ["compute", str(dem_file), str(tmp_path / "out.tif"), "-t", "mcnab", "-s", "4"])
    assert result.exit_code == 1
    assert "positive odd integer" in result.output


def test_compute_missing_input(tmp_path):
    result = runner.invoke(app, ["compute", str(tmp_path / "missing.tif"), str(tmp_path / "out.tif")])
    assert result.exit_code != 0


@patch("demcurv.cli.generate_curvature_stack")
def test_stack(mock_generate, dem_file, tmp_path):
    result = runner.invoke(app, [
        "stack", str(dem_file), str(tmp_path / "out.tif"), "-t", "mcnab", "-t", "bolstad", "-s", "5",
    ])
    assert result.exit_code == 0, result.output
    kwargs = mock_generate.call_args.kwargs
    assert list(kwargs["variants"]) == [CurvatureType.MCNAB, CurvatureType.BOLSTAD]
    assert kwargs["window_size"] == 5


def test_compute_reports_bad_config(dem_file, tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text("curvature:\n  kernel: fancy\n")
    result = runner.invoke(app, [
        "compute", str(dem_file), str(tmp_path / "out.tif"), "--config", str(config_path),
    ])
    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "kernel" in result.output


def test_compute_reports_bad_band(tmp_path):
    da = xr.DataArray(
        np.arange(16, dtype=np.float32).reshape(4, 4),
        dims=["y", "x"],
        coords={"y": 40 - 10 * np.arange(4) - 5, "x": 10 * np.arange(4) + 5},
    ).rio.write_crs("EPSG:27700")
    dem_path = tmp_path / "real_dem.tif"
    da.rio.to_raster(dem_path)

    result = runner.invoke(app, ["compute", str(dem_path), str(tmp_path / "out.tif"), "--band", "3"])
    assert result.exit_code == 1
    assert "Band index 3 out of range" in result.output
    assert not (tmp_path / "out.tif").exists()
