import json
import logging
import os
from typing import Any, Dict, Optional, Tuple

import attr

from app_utils import get_persistent_config_dir_path
from stitch_config import (
    CROP_CORNER_THRESHOLD_PX,
    MAX_TOTAL_PIXELS,
    STITCH_PREVIEW_MAX_SIZE,
    THUMBNAIL_MAX_SIZE,
)

CONFIG_FILENAME_ONLY = "imagetool_config.json"

logger = logging.getLogger(__name__)


def get_default_config_path():
    """Settings file inside the per-user config directory."""
    return os.path.join(get_persistent_config_dir_path(), CONFIG_FILENAME_ONLY)


def save_config(config_file_path, config_data):
    """Saves the configuration data to a JSON file."""
    try:
        os.makedirs(os.path.dirname(config_file_path), exist_ok=True)
        with open(config_file_path, "w") as f:
            json.dump(config_data, f, indent=4)
        logger.info("Config saved: %s", config_file_path)
        return True
    except (OSError, TypeError, ValueError) as e:
        logger.error("Error saving config to %s: %s", config_file_path, e)
        return False


def load_config(config_file_path):
    """Loads configuration data from a JSON file."""
    config_data = {}
    try:
        if os.path.exists(config_file_path):
            with open(config_file_path, "r") as f:
                config_data = json.load(f)
            logger.info("Config loaded: %s", config_file_path)
    except (OSError, ValueError) as e:
        logger.warning("Could not load config from %s: %s", config_file_path, e)
    if not isinstance(config_data, dict):
        logger.warning("Ignoring config in %s: not a JSON object", config_file_path)
        return {}
    return config_data


def get_default_config_values():
    """Returns a dictionary of default configuration values."""
    return {
        "output_dir": "",
        "last_stitch_mode": "vertical",
        "last_aspect_ratio": "Free",
        "preview_max_size": list(STITCH_PREVIEW_MAX_SIZE),
        "thumbnail_max_size": list(THUMBNAIL_MAX_SIZE),
        "corner_threshold_px": CROP_CORNER_THRESHOLD_PX,
        "max_total_pixels": MAX_TOTAL_PIXELS,
    }


def merge_with_defaults(config_data):
    """Overlay known keys from a loaded config onto the defaults."""
    merged = get_default_config_values()
    for key, value in (config_data or {}).items():
        if key in merged:
            merged[key] = value
        else:
            logger.debug("Ignoring unknown config key: %s", key)
    return merged


def _to_size(value) -> Tuple[int, int]:
    width, height = value
    return int(width), int(height)


@attr.s(frozen=True)
class AppSettings:
    """Typed view over the persisted configuration."""
    output_dir: str = attr.ib(default="")
    last_stitch_mode: str = attr.ib(default="vertical")
    last_aspect_ratio: str = attr.ib(default="Free")
    preview_max_size: Tuple[int, int] = attr.ib(default=STITCH_PREVIEW_MAX_SIZE, converter=_to_size)
    thumbnail_max_size: Tuple[int, int] = attr.ib(default=THUMBNAIL_MAX_SIZE, converter=_to_size)
    corner_threshold_px: float = attr.ib(default=CROP_CORNER_THRESHOLD_PX, converter=float)
    max_total_pixels: int = attr.ib(default=MAX_TOTAL_PIXELS, converter=int)

    @classmethod
    def from_dict(cls, config_data: Dict[str, Any]) -> 'AppSettings':
        """Build settings from a (possibly partial) config dictionary."""
        return cls(**merge_with_defaults(config_data))

    @classmethod
    def load(cls, config_file_path: Optional[str] = None) -> 'AppSettings':
        return cls.from_dict(load_config(config_file_path or get_default_config_path()))

    def to_dict(self) -> Dict[str, Any]:
        data = attr.asdict(self)
        data["preview_max_size"] = list(self.preview_max_size)
        data["thumbnail_max_size"] = list(self.thumbnail_max_size)
        return data

    def save(self, config_file_path: Optional[str] = None) -> bool:
        return save_config(config_file_path or get_default_config_path(), self.to_dict())
