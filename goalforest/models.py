"""
goalforest models: goals, populated goal snapshots and scheduled events.

Goals live in a flat id -> Goal map owned by Profile. A goal only knows the
ordered ids of its children; parents are derived by scanning the map.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, NewType, Optional

GoalId = NewType("GoalId", int)
EventId = NewType("EventId", int)


@dataclass
class Goal:
    """
    Single node of the goal forest.
    Mutable; Profile updates it in place.
    """
    name: str
    effort_to_date: int = 0
    effort_to_complete: int = 0
    children: List[GoalId] = field(default_factory=list)

    def rename(self, new_name: str) -> str:
        old_name = self.name
        self.name = new_name
        return old_name

    def add_effort(self, effort: int) -> None:
        self.effort_to_date += effort

    def remove_effort(self, effort: int) -> None:
        self.effort_to_date = max(0, self.effort_to_date - effort)

    def rescope(self, new_effort: int) -> int:
        original = self.effort_to_complete
        self.effort_to_complete = new_effort
        return original

    def rescope_by_finish(self, effort_done: int) -> int:
        """Record the last bit of effort and mark the goal exactly finished."""
        original = self.effort_to_complete
        self.effort_to_date += effort_done
        self.effort_to_complete = self.effort_to_date
        return original

    def remove_effort_to_complete(self, effort: int) -> None:
        self.effort_to_complete = max(0, self.effort_to_complete - effort)

    def has_child(self, child_id: GoalId) -> bool:
        return child_id in self.children

    def add_child(self, child_id: GoalId) -> bool:
        """Append child_id; False if it is already a child."""
        if child_id in self.children:
            return False
        self.children.append(child_id)
        return True

    def remove_child(self, child_id: GoalId) -> bool:
        if child_id not in self.children:
            return False
        self.children.remove(child_id)
        return True

    def finished(self) -> bool:
        return self.effort_to_date >= self.effort_to_complete

    def unfinished(self) -> bool:
        return not self.finished()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "effort_to_date": self.effort_to_date,
            "effort_to_complete": self.effort_to_complete,
            "children": list(self.children),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Goal":
        return cls(
            name=d["name"],
            effort_to_date=d.get("effort_to_date", 0),
            effort_to_complete=d.get("effort_to_complete", 0),
            children=[GoalId(c) for c in d.get("children", [])],
        )


@dataclass
class PopulatedGoal:
    """
    Read-only nested snapshot of a goal subtree with layout metrics.

    max_child_layer_width: widest sibling layer at or below the layer directly
        beneath this node.
    max_child_depth: length of the longest path from this node to a leaf.
    """
    id: GoalId
    parent_goal_id: Optional[GoalId]
    name: str
    effort_to_date: int
    effort_to_complete: int
    max_child_layer_width: int = 0
    max_child_depth: int = 0
    children: List["PopulatedGoal"] = field(default_factory=list)

    def finished(self) -> bool:
        return self.effort_to_date >= self.effort_to_complete

    def count_nodes(self) -> int:
        total = 0
        stack = [self]
        while stack:
            node = stack.pop()
            total += 1
            stack.extend(node.children)
        return total

    def to_dict(self) -> Dict[str, Any]:
        # iterative so deep trees don't hit the recursion limit
        root = self._shallow_dict()
        stack = [(self, root)]
        while stack:
            node, data = stack.pop()
            for child in node.children:
                child_data = child._shallow_dict()
                data["children"].append(child_data)
                stack.append((child, child_data))
        return root

    def _shallow_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "parentGoalId": self.parent_goal_id,
            "name": self.name,
            "effortToDate": self.effort_to_date,
            "effortToComplete": self.effort_to_complete,
            "maxChildLayerWidth": self.max_child_layer_width,
            "maxChildLayerDepth": self.max_child_depth,
            "children": [],
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PopulatedGoal":
        root = cls._shallow_from_dict(d)
        stack = [(d, root)]
        while stack:
            data, node = stack.pop()
            for child_data in data.get("children", []):
                child = cls._shallow_from_dict(child_data)
                node.children.append(child)
                stack.append((child_data, child))
        return root

    @classmethod
    def _shallow_from_dict(cls, d: Dict[str, Any]) -> "PopulatedGoal":
        parent = d.get("parentGoalId")
        return cls(
            id=GoalId(d["id"]),
            parent_goal_id=GoalId(parent) if parent is not None else None,
            name=d["name"],
            effort_to_date=d.get("effortToDate", 0),
            effort_to_complete=d.get("effortToComplete", 0),
            max_child_layer_width=d.get("maxChildLayerWidth", 0),
            max_child_depth=d.get("maxChildLayerDepth", 0),
        )


class RelationshipKind(Enum):
    REQUIRES = "requires"
    ENDS = "ends"
    WORKS_ON = "works_on"
    STARTS = "starts"


@dataclass(frozen=True)
class GoalRelationship:
    kind: RelationshipKind
    goal_id: GoalId

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "goal_id": self.goal_id}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "GoalRelationship":
        return cls(kind=RelationshipKind(d["kind"]), goal_id=GoalId(d["goal_id"]))


class EventKind(Enum):
    BLOCK = "block"        # start + duration
    INSTANT = "instant"    # single point in time
    FLOATING = "floating"  # date + time of day


@dataclass
class Event:
    """
    Scheduled event referencing goals.

    Timing data belongs to the scheduling layer and is kept as an opaque dict;
    the goal store only touches goal_relationships.
    """
    kind: EventKind
    timing: Dict[str, Any] = field(default_factory=dict)
    goal_relationships: List[GoalRelationship] = field(default_factory=list)

    def referenced_goal_ids(self) -> List[GoalId]:
        return [r.goal_id for r in self.goal_relationships]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "timing": dict(self.timing),
            "goal_relationships": [r.to_dict() for r in self.goal_relationships],
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Event":
        return cls(
            kind=EventKind(d["kind"]),
            timing=dict(d.get("timing", {})),
            goal_relationships=[GoalRelationship.from_dict(r) for r in d.get("goal_relationships", [])],
        )
