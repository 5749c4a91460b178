"""
Configuration Manager for goalforest.

Central place for runtime constants. Every value can be overridden from
config/runtime.yaml.

Usage:
    from goalforest.config_manager import config
    indent = config.JSON_INDENT
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from goalforest.exceptions import ConfigError

CONFIG_DIR = Path(__file__).parent.parent / "config"
RUNTIME_CONFIG_PATH = CONFIG_DIR / "runtime.yaml"


@dataclass
class SystemConfig:
    """
    Runtime constants.
    """

    # === Persistence ===

    # State file (profile + history + app config) inside the data directory
    DATA_FILE_NAME: str = "state.json"

    # JSONL mirror of the goal event history inside the data directory
    EVENT_LOG_FILE_NAME: str = "goal_events.jsonl"

    # Mirror every history record to EVENT_LOG_FILE_NAME as it is appended
    MIRROR_EVENT_LOG: bool = False

    # Indentation of the JSON state file; 0 writes compact JSON
    JSON_INDENT: int = 2

    # === Hosting shell ===

    # Save the state file after every request that emitted events
    AUTOSAVE: bool = True


def _load_runtime_config(path: Optional[Path] = None) -> dict:
    """Load runtime overrides if the file exists."""
    path = path or RUNTIME_CONFIG_PATH
    if not path.exists():
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (yaml.YAMLError, OSError):
        return {}

    if not isinstance(data, dict):
        raise ConfigError("runtime config must be a mapping", config_path=str(path))
    return data


def get_config(path: Optional[Path] = None) -> SystemConfig:
    """
    Build the system config.

    Priority: runtime.yaml > defaults
    """
    base = SystemConfig()
    overrides = _load_runtime_config(path)

    for key, value in overrides.items():
        if hasattr(base, key):
            setattr(base, key, value)

    return base


# module level singleton
config = get_config()
