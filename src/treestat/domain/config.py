from __future__ import annotations

"""
Configuration Domain Management.

Handles the scan settings used by the traversal engine: the dict-based
session configuration persisted as JSON in the user data directory, and
the immutable typed view handed to the engine.
"""

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from treestat.infra.fs import get_user_data_dir

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
CONFIG_FILE_NAME = "config.json"
CHILD_ORDER_LISTING = "listing"
CHILD_ORDER_COMPLETION = "completion"
CHILD_ORDERS = (CHILD_ORDER_LISTING, CHILD_ORDER_COMPLETION)


def get_default_config() -> Dict[str, Any]:
    """
    Generate the default scan configuration.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # Concurrency
        "max_concurrency": None,
        "workers": None,

        # Output shape
        "child_order": CHILD_ORDER_LISTING,

        # Size accounting
        "apparent_size": False,
    }


def get_config_path() -> str:
    """Absolute path of the persisted configuration file."""
    return os.path.join(get_user_data_dir(), CONFIG_FILE_NAME)

# -----------------------------------------------------------------------------
# Typed Configuration
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ScanConfig:
    """
    Immutable settings for one traversal.

    Attributes:
        max_concurrency: Cap on filesystem operations in flight. None means
                         unbounded fan-out.
        workers: Thread pool size for blocking filesystem calls. None lets
                 the executor pick its default.
        child_order: "listing" keeps children in listing order, "completion"
                     appends them as their builds finish.
        apparent_size: Report logical sizes instead of allocated sizes.
    """
    max_concurrency: Optional[int] = None
    workers: Optional[int] = None
    child_order: str = CHILD_ORDER_LISTING
    apparent_size: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScanConfig":
        """Build from an already validated configuration dictionary."""
        defaults = get_default_config()
        return cls(**{key: data.get(key, value) for key, value in defaults.items()})


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------

def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the persisted configuration merged over the defaults.

    Args:
        path: Optional file location. Defaults to the user data directory.

    Returns:
        Dict[str, Any]: The loaded configuration or defaults on failure.
    """
    config_path = path or get_config_path()
    config = get_default_config()

    if not os.path.exists(config_path):
        logger.debug("Config file not found. Returning defaults.")
        return config

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to load config '{config_path}': {e}. Using defaults.")
        return config

    if not isinstance(data, dict):
        logger.warning("Corrupted config file. Resetting to defaults.")
        return config

    # Only known keys survive the merge
    for key in config:
        if key in data:
            config[key] = data[key]
    return config


def save_config(config: Dict[str, Any], path: Optional[str] = None) -> bool:
    """
    Persist the configuration to disk.

    Args:
        config: The configuration dictionary to save.
        path: Optional file location. Defaults to the user data directory.

    Returns:
        bool: True if the file was written.
    """
    config_path = path or get_config_path()
    try:
        os.makedirs(os.path.dirname(os.path.abspath(config_path)), exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(config, f, ensure_ascii=False, indent=4)
    except OSError as e:
        logger.error(f"Failed to save configuration: {e}")
        return False
    logger.debug(f"Configuration saved to {config_path}")
    return True
