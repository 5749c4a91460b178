"""
goalforest exception definitions.

Hierarchy of the errors the system knows about:
- GoalForestError: base class for every expected error
- TreeStructureError: a parent's children list would be corrupted
  - DuplicateChildError: child id already present under the parent
  - NoSuchChildError: child id is not present under the parent
- ConfigError: runtime configuration file problems
- StateError: stored state is inconsistent or unreadable

Unknown goal or event ids are not errors: store operations return None/False.
"""
from typing import Optional


class GoalForestError(Exception):
    """Base exception for goalforest.

    Catching this handles every expected error condition.
    """

    def __init__(self, message: str, hint: Optional[str] = None):
        """
        Args:
            message: error description
            hint: suggestion for the user
        """
        super().__init__(message)
        self.message = message
        self.hint = hint

    def get_user_message(self) -> str:
        """Return a user facing message."""
        if self.hint:
            return f"{self.message}\nHint: {self.hint}"
        return self.message


class TreeStructureError(GoalForestError):
    """A parent's ordered children list cannot be changed as requested."""

    def __init__(self, message: str, parent_id: int, child_id: int, hint: Optional[str] = None):
        super().__init__(message, hint)
        self.parent_id = parent_id
        self.child_id = child_id


class DuplicateChildError(TreeStructureError):
    """Raised when a child id is already in the parent's children list."""

    def __init__(self, parent_id: int, child_id: int):
        super().__init__(
            f"goal {child_id} is already a child of goal {parent_id}",
            parent_id,
            child_id,
            hint="the goal id counter may have been restored from stale data",
        )


class NoSuchChildError(TreeStructureError):
    """Raised when a child id is not in the parent's children list."""

    def __init__(self, parent_id: int, child_id: int):
        super().__init__(
            f"goal {child_id} is not a child of goal {parent_id}",
            parent_id,
            child_id,
        )


class ConfigError(GoalForestError):
    """Configuration file error.

    Raised when a config file is malformed or holds illegal values.
    """

    def __init__(self, message: str, config_path: Optional[str] = None):
        hint = f"check the config file: {config_path}" if config_path else "check the config file format"
        super().__init__(message, hint)
        self.config_path = config_path


class StateError(GoalForestError):
    """State related error.

    Raised when the goal store is inconsistent or stored data cannot be decoded.
    """

    def __init__(self, message: str, corrupted_data: Optional[str] = None, hint: Optional[str] = None):
        super().__init__(message, hint or "the state file may be corrupted")
        self.corrupted_data = corrupted_data
