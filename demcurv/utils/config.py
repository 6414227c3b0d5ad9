from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from demcurv.errors import InvalidArgument

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "default.yaml"

CURVATURE_DEFAULTS: Dict[str, Any] = {
    "variant": "total",
    "window_size": 3,
    "pad_mode": "constant",
    "pad_value": 0.0,
    "n_workers": 1,
    "band_index": 0,
}


def load_config(config_path: Union[str, Path] = CONFIG_PATH) -> Dict:
    """Loads the YAML configuration file."""
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    with open(config_path, "r") as f:
        try:
            config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise InvalidArgument(f"Could not parse config file {config_path}: {e}") from e
    return config or {}


def load_curvature_config(config_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """The 'curvature' section of the config, merged over the built-in defaults."""
    config = load_config(config_path or CONFIG_PATH)
    section = config.get("curvature") or {}
    unknown = set(section) - set(CURVATURE_DEFAULTS)
    if unknown:
        raise InvalidArgument(f"Unknown curvature config keys: {sorted(unknown)}")
    return {**CURVATURE_DEFAULTS, **section}


def load_raster_options(config_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """Options passed through to ``rio.to_raster`` when writing outputs."""
    config = load_config(config_path or CONFIG_PATH)
    return dict((config.get("output") or {}).get("raster_options") or {})
