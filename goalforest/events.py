"""
Goal events: what a handled request changed.

Events are history only. Nothing rebuilds a Profile from them; they exist so
shells can show what happened (including the full tree of a deleted goal and
the previous name of a renamed one).
"""
from dataclasses import dataclass, field, fields
from typing import Any, ClassVar, Dict, FrozenSet, Type

from goalforest.exceptions import StateError
from goalforest.models import GoalId, PopulatedGoal


@dataclass(frozen=True)
class GoalEvent:
    """Base class; subclasses set `type` and declare their payload as fields."""
    type: ClassVar[str] = ""

    def to_payload(self) -> Dict[str, Any]:
        payload = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, (set, frozenset)):
                value = sorted(value)
            payload[f.name] = value
        return payload

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "payload": self.to_payload()}

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "GoalEvent":
        return cls(**payload)


@dataclass(frozen=True)
class GoalAdded(GoalEvent):
    type: ClassVar[str] = "goal_added"
    goal_id: GoalId


@dataclass(frozen=True)
class GoalRefined(GoalEvent):
    type: ClassVar[str] = "goal_refined"
    parent_goal_id: GoalId
    parent_effort_removed: int
    new_child_goal_id: GoalId


@dataclass(frozen=True)
class GoalRescoped(GoalEvent):
    type: ClassVar[str] = "goal_rescoped"
    goal_id: GoalId
    new_effort_to_complete: int
    original_effort_to_complete: int


@dataclass(frozen=True)
class GoalRescopedByFinish(GoalEvent):
    type: ClassVar[str] = "goal_rescoped_by_finish"
    goal_id: GoalId
    effort_done: int
    original_effort_to_complete: int


@dataclass(frozen=True)
class GoalRenamed(GoalEvent):
    type: ClassVar[str] = "goal_renamed"
    goal_id: GoalId
    old_name: str


@dataclass(frozen=True)
class GoalDeleted(GoalEvent):
    type: ClassVar[str] = "goal_deleted"
    deleted_goal_tree: PopulatedGoal = field(compare=False)

    def to_payload(self) -> Dict[str, Any]:
        return {"deleted_goal_tree": self.deleted_goal_tree.to_dict()}

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "GoalDeleted":
        return cls(deleted_goal_tree=PopulatedGoal.from_dict(payload["deleted_goal_tree"]))


@dataclass(frozen=True)
class EffortAdded(GoalEvent):
    type: ClassVar[str] = "effort_added"
    goal_id: GoalId
    effort: int


@dataclass(frozen=True)
class EffortRemoved(GoalEvent):
    type: ClassVar[str] = "effort_removed"
    goal_id: GoalId
    effort: int


@dataclass(frozen=True)
class GoalFocused(GoalEvent):
    type: ClassVar[str] = "goal_focused"
    focus_root_id: GoalId
    focused_children: FrozenSet[GoalId]

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "GoalFocused":
        return cls(
            focus_root_id=payload["focus_root_id"],
            focused_children=frozenset(payload.get("focused_children", [])),
        )


@dataclass(frozen=True)
class GoalUnfocused(GoalEvent):
    type: ClassVar[str] = "goal_unfocused"
    unfocus_root_id: GoalId
    unfocused_children: FrozenSet[GoalId]

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "GoalUnfocused":
        return cls(
            unfocus_root_id=payload["unfocus_root_id"],
            unfocused_children=frozenset(payload.get("unfocused_children", [])),
        )


@dataclass(frozen=True)
class SingleGoalFocused(GoalEvent):
    type: ClassVar[str] = "single_goal_focused"
    goal_id: GoalId


@dataclass(frozen=True)
class SingleGoalUnfocused(GoalEvent):
    type: ClassVar[str] = "single_goal_unfocused"
    goal_id: GoalId


@dataclass(frozen=True)
class ChildrenReordered(GoalEvent):
    type: ClassVar[str] = "children_reordered"
    parent_goal_id: GoalId
    first_child_id: GoalId
    second_child_id: GoalId


EVENT_TYPES: Dict[str, Type[GoalEvent]] = {
    cls.type: cls
    for cls in (
        GoalAdded,
        GoalRefined,
        GoalRescoped,
        GoalRescopedByFinish,
        GoalRenamed,
        GoalDeleted,
        EffortAdded,
        EffortRemoved,
        GoalFocused,
        GoalUnfocused,
        SingleGoalFocused,
        SingleGoalUnfocused,
        ChildrenReordered,
    )
}


def goal_event_from_dict(data: Dict[str, Any]) -> GoalEvent:
    event_type = data.get("type")
    cls = EVENT_TYPES.get(event_type)
    if cls is None:
        raise StateError(f"unknown goal event type: {event_type!r}", corrupted_data=str(data)[:200])
    try:
        return cls.from_payload(data.get("payload", {}))
    except (KeyError, TypeError) as e:
        raise StateError(f"malformed {event_type} payload: {e}", corrupted_data=str(data)[:200]) from e
