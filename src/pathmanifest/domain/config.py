from __future__ import annotations

"""
Configuration Domain Management.

Handles persistent storage of user preferences for the manifest tools using
JSON. Stored values are merged over the defaults so new keys always exist.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from pathmanifest.infra.fs import get_user_data_dir

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
CONFIG_FILE_NAME = "config.json"
CURRENT_CONFIG_VERSION = "1.0.0"


def get_config_path() -> str:
    """Absolute path of the persisted configuration file."""
    return os.path.join(get_user_data_dir(), CONFIG_FILE_NAME)


# -----------------------------------------------------------------------------
# Configuration Models (Dict-based)
# -----------------------------------------------------------------------------
def get_default_config() -> Dict[str, Any]:
    """
    Generate the default runtime configuration.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # Input
        "manifest_path": "",
        "delimiter": "/",
        "on_duplicate": "error",

        # Search
        "search_mode": "substring",
        "case_sensitive": True,

        # Tree view
        "tree_max_depth": 0,
        "show_line_counts": True,

        # Diagnostics
        "log_level": "INFO",
        "save_log_file": False,
    }


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the stored configuration, merged over the defaults.

    Args:
        path: Configuration file; defaults to the user data directory.

    Returns:
        Dict[str, Any]: The loaded configuration or the defaults on failure.
    """
    config_file = path or get_config_path()
    config = get_default_config()

    if not os.path.exists(config_file):
        logger.debug("Config file not found. Returning defaults.")
        return config

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load config: {e}. Using defaults.")
        return config

    if not isinstance(data, dict):
        logger.warning("Corrupted config file. Resetting to defaults.")
        return config

    settings = data.get("settings", {})
    if isinstance(settings, dict):
        config.update({k: v for k, v in settings.items() if k in config})
    return config


def save_config(config: Dict[str, Any], path: Optional[str] = None) -> None:
    """
    Persist configuration to disk with a version stamp.

    Args:
        config: The configuration dictionary to save.
        path: Configuration file; defaults to the user data directory.
    """
    config_file = path or get_config_path()
    state = {"version": CURRENT_CONFIG_VERSION, "settings": config}
    try:
        os.makedirs(os.path.dirname(os.path.abspath(config_file)), exist_ok=True)
        with open(config_file, "w", encoding="utf-8") as f:
            json.dump(state, f, ensure_ascii=False, indent=4)
        logger.debug(f"Configuration saved to {config_file}")
    except OSError as e:
        logger.error(f"Failed to save configuration: {e}")
