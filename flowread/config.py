"""Configuration paths and logging setup."""

import logging
import os
from pathlib import Path

from textual.logging import TextualHandler


def _default_config_dir() -> Path:
    home = os.environ.get("FLOWREAD_HOME", "").strip()
    if home:
        return Path(home).expanduser()
    return Path.home() / ".config" / "flowread"


# Configuration paths
CONFIG_DIR = _default_config_dir()
LOG_FILE_NAME = "flowread.log"

LIBRARY_KEY = "flowread_library"
SETTINGS_KEY = "flowread_settings"
STATS_KEY = "flowread_stats"

DEFAULT_LOG_LEVEL = os.environ.get("FLOWREAD_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def ensure_config_dirs(config_dir: Path = CONFIG_DIR) -> Path:
    """Ensure the configuration directory exists."""
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def setup_logging(level: str = DEFAULT_LOG_LEVEL, config_dir: Path = CONFIG_DIR) -> None:
    """Route log records to the Textual console and a log file."""
    handlers: list[logging.Handler] = [TextualHandler()]
    file_error = None
    try:
        ensure_config_dirs(config_dir)
        handlers.append(logging.FileHandler(config_dir / LOG_FILE_NAME, encoding="utf-8"))
    except OSError as e:
        file_error = e

    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
    if file_error is not None:
        logging.getLogger(__name__).warning("File logging disabled: %s", file_error)
