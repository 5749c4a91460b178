"""
Goal requests and their handler.

Each request kind maps to exactly one Profile call. handle_request returns
the events describing what changed; an unknown target id yields an empty
list, not an error. Telling the user about it is the caller's job.
"""
from dataclasses import dataclass
from typing import List, Union

from goalforest.events import (
    ChildrenReordered,
    EffortAdded,
    EffortRemoved,
    GoalAdded,
    GoalDeleted,
    GoalEvent,
    GoalFocused,
    GoalRefined,
    GoalRenamed,
    GoalRescoped,
    GoalRescopedByFinish,
    GoalUnfocused,
    SingleGoalFocused,
    SingleGoalUnfocused,
)
from goalforest.logger import get_logger
from goalforest.models import GoalId
from goalforest.profile import Profile

logger = get_logger("requests")


@dataclass(frozen=True)
class AddGoal:
    name: str
    effort_to_complete: int


@dataclass(frozen=True)
class RefineGoal:
    parent_goal_id: GoalId
    child_name: str
    child_effort_to_complete: int
    parent_effort_removed: int = 0


@dataclass(frozen=True)
class RescopeGoal:
    goal_id: GoalId
    new_effort_to_complete: int


@dataclass(frozen=True)
class RescopeByFinish:
    goal_id: GoalId
    effort_done: int


@dataclass(frozen=True)
class RenameGoal:
    goal_id: GoalId
    new_name: str


@dataclass(frozen=True)
class DeleteGoal:
    goal_id: GoalId


@dataclass(frozen=True)
class AddEffort:
    goal_id: GoalId
    effort: int


@dataclass(frozen=True)
class RemoveEffort:
    goal_id: GoalId
    effort: int


@dataclass(frozen=True)
class FocusGoal:
    goal_id: GoalId


@dataclass(frozen=True)
class UnfocusGoal:
    goal_id: GoalId


@dataclass(frozen=True)
class FocusSingleGoal:
    goal_id: GoalId


@dataclass(frozen=True)
class UnfocusSingleGoal:
    goal_id: GoalId


@dataclass(frozen=True)
class ReorderChildren:
    parent_goal_id: GoalId
    first_child_id: GoalId
    second_child_id: GoalId


GoalRequest = Union[
    AddGoal,
    RefineGoal,
    RescopeGoal,
    RescopeByFinish,
    RenameGoal,
    DeleteGoal,
    AddEffort,
    RemoveEffort,
    FocusGoal,
    UnfocusGoal,
    FocusSingleGoal,
    UnfocusSingleGoal,
    ReorderChildren,
]


def handle_request(profile: Profile, request: GoalRequest) -> List[GoalEvent]:
    """
    Apply a request to the profile.

    Returns:
        events describing the change; empty if the target does not exist.

    Raises:
        DuplicateChildError / NoSuchChildError from RefineGoal / ReorderChildren.
        TypeError for an object that is not a GoalRequest.
    """
    events: List[GoalEvent] = []

    if isinstance(request, AddGoal):
        goal_id = profile.add_goal(request.name, request.effort_to_complete)
        events.append(GoalAdded(goal_id=goal_id))

    elif isinstance(request, RefineGoal):
        child_goal_id = profile.refine_goal(
            request.parent_goal_id,
            request.child_name,
            request.child_effort_to_complete,
            request.parent_effort_removed,
        )
        if child_goal_id is not None:
            events.append(GoalRefined(
                parent_goal_id=request.parent_goal_id,
                parent_effort_removed=request.parent_effort_removed,
                new_child_goal_id=child_goal_id,
            ))

    elif isinstance(request, RescopeGoal):
        original = profile.rescope_goal(request.goal_id, request.new_effort_to_complete)
        if original is not None:
            events.append(GoalRescoped(
                goal_id=request.goal_id,
                new_effort_to_complete=request.new_effort_to_complete,
                original_effort_to_complete=original,
            ))

    elif isinstance(request, RescopeByFinish):
        original = profile.rescope_by_finish(request.goal_id, request.effort_done)
        if original is not None:
            events.append(GoalRescopedByFinish(
                goal_id=request.goal_id,
                effort_done=request.effort_done,
                original_effort_to_complete=original,
            ))

    elif isinstance(request, RenameGoal):
        old_name = profile.rename_goal(request.goal_id, request.new_name)
        if old_name is not None:
            events.append(GoalRenamed(goal_id=request.goal_id, old_name=old_name))

    elif isinstance(request, DeleteGoal):
        deleted_goal_tree = profile.remove_goal(request.goal_id)
        if deleted_goal_tree is not None:
            events.append(GoalDeleted(deleted_goal_tree=deleted_goal_tree))

    elif isinstance(request, AddEffort):
        if profile.add_effort(request.goal_id, request.effort):
            events.append(EffortAdded(goal_id=request.goal_id, effort=request.effort))

    elif isinstance(request, RemoveEffort):
        if profile.remove_effort(request.goal_id, request.effort):
            events.append(EffortRemoved(goal_id=request.goal_id, effort=request.effort))

    elif isinstance(request, FocusGoal):
        focused = profile.focus_goal(request.goal_id)
        if focused is not None:
            events.append(GoalFocused(
                focus_root_id=request.goal_id,
                focused_children=frozenset(focused - {request.goal_id}),
            ))

    elif isinstance(request, UnfocusGoal):
        unfocused = profile.unfocus_goal(request.goal_id)
        if unfocused is not None:
            events.append(GoalUnfocused(
                unfocus_root_id=request.goal_id,
                unfocused_children=frozenset(unfocused - {request.goal_id}),
            ))

    elif isinstance(request, FocusSingleGoal):
        if profile.focus_single_goal(request.goal_id):
            events.append(SingleGoalFocused(goal_id=request.goal_id))

    elif isinstance(request, UnfocusSingleGoal):
        if profile.unfocus_single_goal(request.goal_id):
            events.append(SingleGoalUnfocused(goal_id=request.goal_id))

    elif isinstance(request, ReorderChildren):
        if profile.swap_children(request.parent_goal_id, request.first_child_id, request.second_child_id):
            events.append(ChildrenReordered(
                parent_goal_id=request.parent_goal_id,
                first_child_id=request.first_child_id,
                second_child_id=request.second_child_id,
            ))

    else:
        raise TypeError(f"not a goal request: {request!r}")

    if not events:
        logger.debug("%s matched no goal", type(request).__name__)
    return events
