import json
import logging
import os

from .constants import AVERAGE_DETECTIONS, DEFAULT_TOP_N

CONFIG_ENV_VAR = "PESTSCAN_CONFIG"

CONFIG_PATH = os.path.expanduser("~/.pestscan_config.json")

DEFAULT_SETTINGS = {
    "top_n": DEFAULT_TOP_N,
    "variant": "detail",
    "show_index": True,
    "show_corner_accents": True,
    "font_path": None,
    "average_detections": AVERAGE_DETECTIONS,
}


def config_path(path=None):
    """Explicit path, then $PESTSCAN_CONFIG, then ~/.pestscan_config.json."""
    return path or os.environ.get(CONFIG_ENV_VAR) or CONFIG_PATH


def load_settings(path=None):
    """Load settings from the config file merged over DEFAULT_SETTINGS.

    Missing files give the defaults; unreadable files log a warning and give
    the defaults as well.
    """
    settings = DEFAULT_SETTINGS.copy()
    path = config_path(path)
    try:
        if os.path.exists(path):
            with open(path) as f:
                saved_settings = json.load(f)
            if not isinstance(saved_settings, dict):
                raise ValueError(f"expected a JSON object, got {type(saved_settings).__name__}")
            unknown = set(saved_settings) - set(DEFAULT_SETTINGS)
            if unknown:
                logging.warning(f"[settings] ignoring unknown keys in {path}: {sorted(unknown)}")
            settings.update({k: v for k, v in saved_settings.items() if k in DEFAULT_SETTINGS})
    except (OSError, ValueError) as e:
        logging.warning(f"Could not load settings from {path}: {e}")
    return settings


def save_settings(values, path=None):
    """Merge `values` into the existing config file and write it back."""
    path = config_path(path)
    existing = {}
    if os.path.exists(path):
        try:
            with open(path) as f:
                existing = json.load(f)
        except (OSError, ValueError) as e:
            logging.warning(f"[settings] overwriting unreadable config {path}: {e}")
            existing = {}
    existing.update(values)
    parent_dir = os.path.dirname(path)
    if parent_dir:
        os.makedirs(parent_dir, exist_ok=True)
    with open(path, "w") as f:
        json.dump(existing, f, indent=2)
    logging.debug(f"[settings] saved {len(existing)} keys to {path}")
    return existing
