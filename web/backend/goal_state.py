"""
Shared goal state for the web shell.

One PersistentState per process, guarded by an asyncio.Lock so requests from
concurrent handlers are applied one at a time.
"""
import asyncio
from pathlib import Path
from typing import List, Optional

from goalforest.config_manager import config as system_config
from goalforest.event_log import EventHistory
from goalforest.logger import get_logger
from goalforest.persistent_state import PersistentState, data_path
from goalforest.requests import GoalRequest, handle_request

logger = get_logger("web.goal_state")


class GoalStateHolder:
    def __init__(self, path: Optional[Path] = None, state: Optional[PersistentState] = None):
        self.path = path or data_path()
        self.lock = asyncio.Lock()
        self._state = state

    @property
    def state(self) -> PersistentState:
        if self._state is None:
            self._state = PersistentState.load(self.path)
            logger.info("loaded goal state from %s", self.path)
        return self._state

    @property
    def history(self) -> EventHistory:
        return self.state.history

    def apply(self, request: GoalRequest) -> List[dict]:
        """Handle one request, record its events and save if anything changed."""
        events = handle_request(self.state.profile, request)
        records = self.state.history.append(events)
        if records and system_config.AUTOSAVE:
            self.save()
        return records

    def save(self) -> Path:
        return self.state.save(self.path)


_holder: Optional[GoalStateHolder] = None


def get_goal_state() -> GoalStateHolder:
    global _holder
    if _holder is None:
        _holder = GoalStateHolder()
    return _holder
