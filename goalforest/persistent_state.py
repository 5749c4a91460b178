"""
Persistent state: profile + goal event history + app config in one JSON file.

Path: <data dir>/state.json by default (see goalforest.paths and
SystemConfig.DATA_FILE_NAME). Loading a missing file writes a fresh default
state first.
"""
import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from goalforest.config_manager import config as system_config
from goalforest.event_log import EventHistory
from goalforest.exceptions import StateError
from goalforest.logger import get_logger
from goalforest.paths import DATA_DIR, get_state_path
from goalforest.profile import Profile

logger = get_logger("persistent_state")

STATE_FORMAT_VERSION = 1


class LoadError(StateError):
    """State file could not be created, read or decoded."""

    def __init__(self, message: str, path: Optional[Path] = None, corrupted_data: Optional[str] = None):
        super().__init__(message, corrupted_data=corrupted_data)
        self.path = path


class SaveError(StateError):
    """State could not be written."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message, hint="check that the data directory is writable")
        self.path = path


@dataclass
class CommandlineDisplayConfig:
    font_size_pixels: int = 14
    background_color: str = "gray"
    font_color: str = "black"


@dataclass
class DisplayConfig:
    commandline: CommandlineDisplayConfig = field(default_factory=CommandlineDisplayConfig)


@dataclass
class AppConfig:
    """Shell settings saved with the profile; the goal store never reads them."""
    display: DisplayConfig = field(default_factory=DisplayConfig)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "AppConfig":
        commandline = (d.get("display") or {}).get("commandline") or {}
        defaults = CommandlineDisplayConfig()
        return cls(
            display=DisplayConfig(
                commandline=CommandlineDisplayConfig(
                    font_size_pixels=commandline.get("font_size_pixels", defaults.font_size_pixels),
                    background_color=commandline.get("background_color", defaults.background_color),
                    font_color=commandline.get("font_color", defaults.font_color),
                )
            )
        )


def data_path() -> Path:
    """State file location: GOALFOREST_STATE_PATH, else <data dir>/<DATA_FILE_NAME>."""
    return get_state_path(system_config.DATA_FILE_NAME, DATA_DIR)


@dataclass
class PersistentState:
    profile: Profile = field(default_factory=Profile)
    history: EventHistory = field(default_factory=EventHistory)
    config: AppConfig = field(default_factory=AppConfig)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": STATE_FORMAT_VERSION,
            "profile": self.profile.to_dict(),
            "goal_event_history": self.history.to_list(),
            "config": self.config.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], mirror_path: Optional[Path] = None) -> "PersistentState":
        return cls(
            profile=Profile.from_dict(data.get("profile", {})),
            history=EventHistory.from_list(data.get("goal_event_history", []), mirror_path=mirror_path),
            config=AppConfig.from_dict(data.get("config", {})),
        )

    def to_bytes(self) -> bytes:
        indent = system_config.JSON_INDENT or None
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=indent).encode("utf-8")

    @classmethod
    def from_bytes(cls, raw: bytes, mirror_path: Optional[Path] = None) -> "PersistentState":
        try:
            data = json.loads(raw.decode("utf-8"))
            if not isinstance(data, dict):
                raise ValueError("top level value is not an object")
            return cls.from_dict(data, mirror_path=mirror_path)
        except StateError as e:
            raise LoadError(f"state data is malformed: {e.message}", corrupted_data=e.corrupted_data) from e
        except (UnicodeDecodeError, ValueError, KeyError, TypeError, AttributeError) as e:
            raise LoadError(f"state data is malformed: {e}", corrupted_data=raw[:200].decode("utf-8", "replace")) from e

    def save(self, path: Optional[Path] = None) -> Path:
        path = Path(path) if path is not None else data_path()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = path.with_suffix(path.suffix + ".tmp")
            tmp_path.write_bytes(self.to_bytes())
            tmp_path.replace(path)
        except OSError as e:
            logger.error(f"Failed to save state to {path}: {e}")
            raise SaveError(f"failed to write state file {path}: {e}", path=path) from e
        logger.debug("saved state to %s", path)
        return path

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "PersistentState":
        path = Path(path) if path is not None else data_path()
        mirror_path = path.parent / system_config.EVENT_LOG_FILE_NAME if system_config.MIRROR_EVENT_LOG else None

        if not path.exists():
            logger.info("no state at %s, creating a default one", path)
            try:
                cls().save(path)
            except SaveError as e:
                raise LoadError(f"failed to create default state at {path}: {e.message}", path=path) from e

        try:
            raw = path.read_bytes()
        except OSError as e:
            raise LoadError(f"failed to read state file {path}: {e}", path=path) from e

        try:
            state = cls.from_bytes(raw, mirror_path=mirror_path)
        except LoadError as e:
            e.path = path
            logger.error(f"State file {path} is malformed: {e.message}")
            raise
        return state
