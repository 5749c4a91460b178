"""
Filesystem locations of a goal forest.

Everything a running forest writes lives under one data directory: the state
file, the optional JSONL event mirror and, unless told otherwise, the logs.
Each location can be moved with an environment variable.
"""
import os
from pathlib import Path
from typing import Optional

PROJECT_ROOT = Path(__file__).parent.parent


def _env_path(name: str) -> Optional[Path]:
    raw = os.getenv(name, "").strip()
    return Path(raw).expanduser() if raw else None


def get_data_dir() -> Path:
    """
    Return runtime data directory.

    Priority:
    1. GOALFOREST_DATA_DIR env var
    2. <project_root>/data
    """
    return _env_path("GOALFOREST_DATA_DIR") or PROJECT_ROOT / "data"


def get_logs_dir() -> Path:
    """
    Return the log directory.

    Priority:
    1. GOALFOREST_LOGS_DIR env var
    2. <data dir>/logs when GOALFOREST_DATA_DIR relocates the forest
    3. <project_root>/logs
    """
    explicit = _env_path("GOALFOREST_LOGS_DIR")
    if explicit is not None:
        return explicit
    data_dir = _env_path("GOALFOREST_DATA_DIR")
    if data_dir is not None:
        return data_dir / "logs"
    return PROJECT_ROOT / "logs"


def get_state_path(file_name: str, data_dir: Optional[Path] = None) -> Path:
    """
    Return the state file location.

    GOALFOREST_STATE_PATH names the file directly; otherwise it is file_name
    inside data_dir (default: the data directory).
    """
    return _env_path("GOALFOREST_STATE_PATH") or (data_dir or get_data_dir()) / file_name


DATA_DIR = get_data_dir()
