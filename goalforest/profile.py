"""
Profile: the goal store.

Owns every goal and event in flat id-keyed maps, the set of focused goals and
the two monotonic id counters. Unknown ids are never errors here: lookups and
mutations on them return None/False.
"""
from typing import Any, Dict, List, Optional, Set

from goalforest.exceptions import DuplicateChildError, NoSuchChildError, StateError
from goalforest.logger import get_logger
from goalforest.models import Event, EventId, Goal, GoalId, PopulatedGoal
from goalforest.traversal import (
    PartitionedPopulatedTree,
    get_root_goals,
    populate_goal_tree,
    populate_partitioned_goal_tree,
    visit_tree_with_predicate,
)

logger = get_logger("profile")


class Profile:
    """In-memory goal forest plus the events that reference it."""

    def __init__(self):
        self.goal_id_count = 0
        self.event_id_count = 0
        self.focused_goals: Set[GoalId] = set()
        self.goals: Dict[GoalId, Goal] = {}
        self.events: Dict[EventId, Event] = {}

    # ---------------------------------------------------------------------
    # Id allocation
    # ---------------------------------------------------------------------
    def _next_goal_id(self) -> GoalId:
        goal_id = GoalId(self.goal_id_count)
        if goal_id in self.goals:
            raise StateError(f"goal id {goal_id} allocated twice", hint="goal id counter is behind the stored goals")
        self.goal_id_count += 1
        return goal_id

    # ---------------------------------------------------------------------
    # Goal mutations
    # ---------------------------------------------------------------------
    def add_goal(self, name: str, effort_to_complete: int) -> GoalId:
        goal_id = self._next_goal_id()
        self.goals[goal_id] = Goal(name=name, effort_to_complete=effort_to_complete)
        logger.debug("added goal %s (%r)", goal_id, name)
        return goal_id

    def refine_goal(
        self,
        parent_goal_id: GoalId,
        child_name: str,
        child_effort_to_complete: int,
        parent_effort_removed: int,
    ) -> Optional[GoalId]:
        """
        Create a child goal under parent_goal_id.

        The parent's effort_to_complete drops by parent_effort_removed, never
        below zero.

        Raises:
            DuplicateChildError: the newly allocated id is already a child of
                the parent. Nothing is changed in that case.
        """
        parent_goal = self.goals.get(parent_goal_id)
        if parent_goal is None:
            return None

        child_goal_id = GoalId(self.goal_id_count)
        if parent_goal.has_child(child_goal_id):
            logger.warning("refusing duplicate child %s under goal %s", child_goal_id, parent_goal_id)
            raise DuplicateChildError(parent_goal_id, child_goal_id)

        child_goal_id = self._next_goal_id()
        parent_goal.remove_effort_to_complete(parent_effort_removed)
        parent_goal.add_child(child_goal_id)
        self.goals[child_goal_id] = Goal(name=child_name, effort_to_complete=child_effort_to_complete)

        logger.debug("refined goal %s into %s (%r)", parent_goal_id, child_goal_id, child_name)
        return child_goal_id

    def rescope_goal(self, goal_id: GoalId, new_effort_to_complete: int) -> Optional[int]:
        goal = self.goals.get(goal_id)
        if goal is None:
            return None
        return goal.rescope(new_effort_to_complete)

    def rescope_by_finish(self, goal_id: GoalId, effort_done: int) -> Optional[int]:
        """Add effort_done and mark the goal finished; returns the old effort_to_complete."""
        goal = self.goals.get(goal_id)
        if goal is None:
            return None
        return goal.rescope_by_finish(effort_done)

    def add_effort(self, goal_id: GoalId, effort: int) -> bool:
        goal = self.goals.get(goal_id)
        if goal is None:
            return False
        goal.add_effort(effort)
        return True

    def remove_effort(self, goal_id: GoalId, effort: int) -> bool:
        goal = self.goals.get(goal_id)
        if goal is None:
            return False
        goal.remove_effort(effort)
        return True

    def rename_goal(self, goal_id: GoalId, new_name: str) -> Optional[str]:
        goal = self.goals.get(goal_id)
        if goal is None:
            return None
        return goal.rename(new_name)

    def swap_children(self, parent_goal_id: GoalId, first_child_id: GoalId, second_child_id: GoalId) -> bool:
        """
        Exchange the positions of two children of parent_goal_id.

        Returns False if the parent is unknown.

        Raises:
            NoSuchChildError: naming whichever child id is not under the parent.
        """
        parent_goal = self.goals.get(parent_goal_id)
        if parent_goal is None:
            return False

        children = parent_goal.children
        for child_id in (first_child_id, second_child_id):
            if child_id not in children:
                raise NoSuchChildError(parent_goal_id, child_id)

        first_index = children.index(first_child_id)
        second_index = children.index(second_child_id)
        children[first_index], children[second_index] = children[second_index], children[first_index]
        return True

    def remove_goal(self, goal_id: GoalId) -> Optional[PopulatedGoal]:
        """
        Delete goal_id and its whole subtree.

        Removed ids leave the goal map, the focus set and every event's goal
        relationships; goal_id is detached from its parent.

        Returns:
            snapshot of the deleted subtree, or None if goal_id is unknown.
        """
        populated = populate_goal_tree(self.goals, goal_id)
        if populated is None:
            return None

        populated_goal, descendant_ids = populated
        removed_ids = descendant_ids | {goal_id}

        for removed_id in removed_ids:
            del self.goals[removed_id]
        self.focused_goals -= removed_ids

        self._remove_goals_from_event_relationships(removed_ids)

        if populated_goal.parent_goal_id is not None:
            parent_goal = self.goals.get(populated_goal.parent_goal_id)
            if parent_goal is not None:
                parent_goal.remove_child(goal_id)

        logger.info("removed goal %s with %d descendants", goal_id, len(descendant_ids))
        return populated_goal

    def _remove_goals_from_event_relationships(self, goal_ids: Set[GoalId]) -> None:
        for event in self.events.values():
            event.goal_relationships = [
                relationship
                for relationship in event.goal_relationships
                if relationship.goal_id not in goal_ids
            ]

    # ---------------------------------------------------------------------
    # Focus
    # ---------------------------------------------------------------------
    def focus_goal(self, goal_id: GoalId) -> Optional[Set[GoalId]]:
        """
        Focus goal_id and every descendant not already focused.

        Returns:
            ids whose focus changed, goal_id included; None if goal_id is unknown.
        """
        need_focusing = visit_tree_with_predicate(
            self.goals,
            goal_id,
            lambda child_id, _: child_id not in self.focused_goals,
        )
        if need_focusing is None:
            return None

        need_focusing.add(goal_id)
        self.focused_goals |= need_focusing
        return need_focusing

    def unfocus_goal(self, goal_id: GoalId) -> Optional[Set[GoalId]]:
        """
        Unfocus goal_id and every focused descendant.

        Returns:
            ids whose focus changed, goal_id included; None if goal_id is not focused.
        """
        if goal_id not in self.focused_goals:
            return None

        need_unfocusing = visit_tree_with_predicate(
            self.goals,
            goal_id,
            lambda child_id, _: child_id in self.focused_goals,
        )
        if need_unfocusing is None:
            return None

        need_unfocusing.add(goal_id)
        self.focused_goals -= need_unfocusing
        return need_unfocusing

    def focus_single_goal(self, goal_id: GoalId) -> bool:
        if goal_id not in self.goals:
            return False
        self.focused_goals.add(goal_id)
        return True

    def unfocus_single_goal(self, goal_id: GoalId) -> bool:
        if goal_id not in self.focused_goals:
            return False
        self.focused_goals.discard(goal_id)
        return True

    # ---------------------------------------------------------------------
    # Events
    # ---------------------------------------------------------------------
    def add_event(self, event: Event) -> EventId:
        event_id = EventId(self.event_id_count)
        if event_id in self.events:
            raise StateError(f"event id {event_id} allocated twice", hint="event id counter is behind the stored events")
        self.event_id_count += 1
        self.events[event_id] = event
        return event_id

    def remove_event(self, event_id: EventId) -> Optional[Event]:
        return self.events.pop(event_id, None)

    def get_event(self, event_id: EventId) -> Optional[Event]:
        return self.events.get(event_id)

    # ---------------------------------------------------------------------
    # Queries
    # ---------------------------------------------------------------------
    def get_goal(self, goal_id: GoalId) -> Optional[Goal]:
        return self.goals.get(goal_id)

    def goal_ids(self) -> Set[GoalId]:
        return set(self.goals)

    def unfocused_goals(self) -> Set[GoalId]:
        return self.goal_ids() - self.focused_goals

    def finished_goals(self) -> Set[GoalId]:
        return {goal_id for goal_id, goal in self.goals.items() if goal.finished()}

    def unfinished_goals(self) -> Set[GoalId]:
        return {goal_id for goal_id, goal in self.goals.items() if goal.unfinished()}

    def root_goal_ids(self) -> List[GoalId]:
        return get_root_goals(self.goals)

    def populate_goal(self, goal_id: GoalId) -> Optional[PopulatedGoal]:
        populated = populate_goal_tree(self.goals, goal_id)
        return populated[0] if populated else None

    def populate_goals(self) -> List[PopulatedGoal]:
        """Fresh snapshot of every root goal's tree, roots in ascending id order."""
        return [self.populate_goal(root_id) for root_id in self.root_goal_ids()]

    def partition_finished(self, goal_id: GoalId) -> Optional[PartitionedPopulatedTree]:
        return populate_partitioned_goal_tree(self.goals, goal_id, lambda _, goal: goal.finished())

    # ---------------------------------------------------------------------
    # Serialization
    # ---------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        return {
            "goal_id_count": self.goal_id_count,
            "event_id_count": self.event_id_count,
            "focused_goals": sorted(self.focused_goals),
            "goals": [dict(id=goal_id, **goal.to_dict()) for goal_id, goal in sorted(self.goals.items())],
            "events": [dict(id=event_id, **event.to_dict()) for event_id, event in sorted(self.events.items())],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Profile":
        profile = cls()
        profile.goal_id_count = data.get("goal_id_count", 0)
        profile.event_id_count = data.get("event_id_count", 0)
        profile.focused_goals = {GoalId(i) for i in data.get("focused_goals", [])}
        for d in data.get("goals", []):
            profile.goals[GoalId(d["id"])] = Goal.from_dict(d)
        for d in data.get("events", []):
            profile.events[EventId(d["id"])] = Event.from_dict(d)
        return profile
