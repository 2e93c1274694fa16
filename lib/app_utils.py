import logging
import os
import sys

APP_NAME_FOR_CONFIG = "ImageTool"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def get_persistent_config_dir_path():
    home_dir = os.path.expanduser("~")
    if sys.platform == "win32":
        app_data_env = os.getenv("APPDATA", os.path.join(home_dir, "AppData", "Roaming"))
    elif sys.platform == "darwin":
        app_data_env = os.path.join(home_dir, "Library", "Application Support")
    else:
        app_data_env = os.getenv("XDG_CONFIG_HOME", os.path.join(home_dir, ".config"))

    config_directory = os.path.join(app_data_env, APP_NAME_FOR_CONFIG)

    if not os.path.exists(config_directory):
        try:
            os.makedirs(config_directory, exist_ok=True)
        except OSError:
            logger.warning("Could not create config directory %s.", config_directory)
            return os.path.abspath(os.path.dirname(sys.argv[0]))
    return config_directory


def get_default_media_dir_path():
    """Shared picture folder used as the default media store location."""
    from stitch_config import DEFAULT_OUTPUT_SUBFOLDER_NAME

    home_dir = os.path.expanduser("~")
    pictures_dir = os.path.join(home_dir, "Pictures")
    if not os.path.isdir(pictures_dir):
        pictures_dir = home_dir
    return os.path.join(pictures_dir, DEFAULT_OUTPUT_SUBFOLDER_NAME)


def configure_logging(level=logging.INFO, stream=None):
    """Attach a console handler to the root logger once."""
    root_logger = logging.getLogger()
    if not any(getattr(h, "_imagetool", False) for h in root_logger.handlers):
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._imagetool = True
        root_logger.addHandler(handler)
    root_logger.setLevel(level)
    return root_logger
