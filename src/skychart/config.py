import json
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from appdirs import user_config_dir

from .paths import APP_ID, APP_AUTHOR
from .types import DisplayOptions


_config_file = Path(user_config_dir(APP_ID, APP_AUTHOR)) / "config.json"

_OPTION_KEYS = (
    "show_constellations",
    "show_labels",
    "show_alt_az_grid",
    "show_eq_grid",
    "magnitude_limit",
    "show_sun",
)


def _read(config_file: Path) -> Dict[str, Any]:
    try:
        data = json.loads(config_file.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except json.JSONDecodeError:
        return {}
    return data if isinstance(data, dict) else {}


def _write(config_file: Path, data: Dict[str, Any]) -> None:
    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")


def load_last_location(config_file: Optional[Path] = None) -> Optional[Tuple[float, float]]:
    data = _read(config_file or _config_file)
    try:
        return float(data["latitude"]), float(data["longitude"])
    except (KeyError, TypeError, ValueError):
        return None


def save_last_location(lat: float, lon: float, config_file: Optional[Path] = None) -> None:
    path = config_file or _config_file
    data = _read(path)
    data.update({"latitude": lat, "longitude": lon})
    _write(path, data)


def load_display_options(config_file: Optional[Path] = None) -> DisplayOptions:
    data = _read(config_file or _config_file)
    stored = data.get("display", {})
    if not isinstance(stored, dict):
        stored = {}
    kwargs = {k: stored[k] for k in _OPTION_KEYS if k in stored}
    try:
        return DisplayOptions(**kwargs)
    except TypeError:
        return DisplayOptions()


def save_display_options(options: DisplayOptions, config_file: Optional[Path] = None) -> None:
    path = config_file or _config_file
    data = _read(path)
    data["display"] = {k: getattr(options, k) for k in _OPTION_KEYS}
    _write(path, data)
