"""
Goal tree traversal.

Goals are stored flat (GoalId -> Goal, children as ordered id lists). Every
walk over a goal's subtree goes through visit_goal_child_tree, an iterative
depth-first visitor that threads a per-node value from parent to child. The
populators and predicate visitors below are all built on it.

Known cost: a goal's parent is found by scanning the whole map, so
populate_goal_tree is O(n) in the number of goals even for a small subtree.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Set, Tuple, TypeVar

from goalforest.exceptions import StateError
from goalforest.models import Goal, GoalId, PopulatedGoal

V = TypeVar("V")

# Child indices from a populated root down to a node; () is the root itself.
GoalChildIndexPath = Tuple[int, ...]

GoalMap = Dict[GoalId, Goal]


def get_goal_parent_id(goals: GoalMap, goal_id: GoalId) -> Optional[GoalId]:
    for candidate_id, candidate in goals.items():
        if goal_id in candidate.children:
            return candidate_id
    return None


def get_root_goals(goals: GoalMap) -> List[GoalId]:
    """Ids that are nobody's child, in ascending id order."""
    child_ids = {child_id for goal in goals.values() for child_id in goal.children}
    return sorted(goal_id for goal_id in goals if goal_id not in child_ids)


def visit_goal_child_tree(
    goals: GoalMap,
    goal_id: GoalId,
    goal_visitor: Callable[[GoalId, V, GoalId, Goal], V],
    root_visitor_data: V,
) -> Optional[Set[GoalId]]:
    """
    Visit every descendant of goal_id.

    The visitor is called as goal_visitor(parent_id, parent_data, child_id,
    child_goal) and its return value becomes child_data for that child's own
    children. root_visitor_data is the data handed to the root's children.
    The root itself is never visited and is not part of the returned set.

    Siblings are visited in stored order: a node's children are all visited
    when the node is popped, then pushed in reverse so the first child's
    subtree is expanded first.

    Example, summing effort_to_complete along each path:

        totals = {}

        def add_effort(_, parent_total, child_id, child):
            totals[child_id] = parent_total + child.effort_to_complete
            return totals[child_id]

        visit_goal_child_tree(goals, root_id, add_effort, goals[root_id].effort_to_complete)

    Returns:
        ids of all visited descendants, or None if goal_id is not in goals.

    Raises:
        StateError: a child id is missing from the map, or a goal is reached
            twice (cycle or shared child).
    """
    if goal_id not in goals:
        return None

    visited_ids: Set[GoalId] = set()
    needs_visiting: List[Tuple[GoalId, V]] = [(goal_id, root_visitor_data)]

    while needs_visiting:
        current_goal_id, current_visitor_data = needs_visiting.pop()
        children = goals[current_goal_id].children

        child_entries = []
        for child_id in children:
            child = goals.get(child_id)
            if child is None:
                raise StateError(f"goal {current_goal_id} lists missing child {child_id}")
            if child_id in visited_ids or child_id == goal_id:
                raise StateError(f"goal {child_id} is reachable twice from goal {goal_id}")
            visited_ids.add(child_id)

            child_visitor_data = goal_visitor(current_goal_id, current_visitor_data, child_id, child)
            child_entries.append((child_id, child_visitor_data))

        needs_visiting.extend(reversed(child_entries))

    return visited_ids


# ---------------------------------------------------------------------------
# Populated tree helpers
# ---------------------------------------------------------------------------

def populated_goal_template(
    goal_id: GoalId,
    goal: Goal,
    parent_goal_id: Optional[GoalId],
) -> PopulatedGoal:
    return PopulatedGoal(
        id=goal_id,
        parent_goal_id=parent_goal_id,
        name=goal.name,
        effort_to_date=goal.effort_to_date,
        effort_to_complete=goal.effort_to_complete,
    )


def traverse_populated_goal_children(
    root_goal: PopulatedGoal,
    path: GoalChildIndexPath,
) -> Optional[PopulatedGoal]:
    current = root_goal
    for index in path:
        if index >= len(current.children):
            return None
        current = current.children[index]
    return current


def visit_goal_path_from(
    root_goal: PopulatedGoal,
    path: GoalChildIndexPath,
    visitor: Callable[[PopulatedGoal, GoalChildIndexPath], None],
) -> None:
    """Call visitor(node, node_path) on every node from the root down to path."""
    current = root_goal
    for depth, index in enumerate(path):
        visitor(current, path[:depth])
        current = current.children[index]
    visitor(current, path)


def visit_populated_goal_children(
    root_goal: PopulatedGoal,
    visitor: Callable[[GoalChildIndexPath, V, GoalChildIndexPath, PopulatedGoal], V],
    root_visitor_data: V,
) -> None:
    """
    Same walk as visit_goal_child_tree, over an already populated tree.

    visitor(parent_path, parent_data, child_path, child_node) may mutate
    child_node in place.
    """
    needs_visiting: List[Tuple[GoalChildIndexPath, V]] = [((), root_visitor_data)]

    while needs_visiting:
        current_path, current_visitor_data = needs_visiting.pop()
        current_goal = traverse_populated_goal_children(root_goal, current_path)

        child_entries = []
        for child_index, child_goal in enumerate(current_goal.children):
            child_path = current_path + (child_index,)
            child_visitor_data = visitor(current_path, current_visitor_data, child_path, child_goal)
            child_entries.append((child_path, child_visitor_data))

        needs_visiting.extend(reversed(child_entries))


# ---------------------------------------------------------------------------
# Populators
# ---------------------------------------------------------------------------

def populate_goal_tree(
    goals: GoalMap,
    goal_id: GoalId,
) -> Optional[Tuple[PopulatedGoal, Set[GoalId]]]:
    """
    Build the nested PopulatedGoal for goal_id's subtree.

    Every node gets:
    - max_child_depth: longest path from the node down to a leaf
    - max_child_layer_width: largest number of nodes found in any single
      layer at or below the layer directly beneath the node (counted across
      the whole subtree of goal_id), or the node's own child count when it
      has nothing below it in that layer

    Returns:
        (populated tree, ids of all descendants) or None if goal_id is unknown.
    """
    goal = goals.get(goal_id)
    if goal is None:
        return None

    root_populated_goal = populated_goal_template(goal_id, goal, get_goal_parent_id(goals, goal_id))

    # widths[d - 1] counts the nodes at depth d
    widths: List[int] = []

    def add_node_to_widths(node_depth: int) -> None:
        index = node_depth - 1
        if index < len(widths):
            widths[index] += 1
        else:
            widths.extend([0] * (index - len(widths)))
            widths.append(1)

    def add_child(
        parent_goal_id: GoalId,
        parent_path: GoalChildIndexPath,
        child_id: GoalId,
        child_goal: Goal,
    ) -> GoalChildIndexPath:
        parent_node = traverse_populated_goal_children(root_populated_goal, parent_path)
        child_path = parent_path + (len(parent_node.children),)

        parent_node.children.append(populated_goal_template(child_id, child_goal, parent_goal_id))
        add_node_to_widths(len(child_path))

        if not child_goal.children:
            leaf_depth = len(child_path)

            def record_depth(node: PopulatedGoal, node_path: GoalChildIndexPath) -> None:
                node.max_child_depth = max(node.max_child_depth, leaf_depth - len(node_path))

            visit_goal_path_from(root_populated_goal, parent_path, record_depth)

        return child_path

    visited_ids = visit_goal_child_tree(goals, goal_id, add_child, ())

    # each layer becomes the widest layer at or below it
    for index in range(len(widths) - 2, -1, -1):
        widths[index] = max(widths[index], widths[index + 1])

    # the traversal never visits the root
    root_populated_goal.max_child_layer_width = (
        widths[0] if widths else len(root_populated_goal.children)
    )

    def assign_width(
        _parent_path: GoalChildIndexPath,
        _parent_data: None,
        child_path: GoalChildIndexPath,
        child_node: PopulatedGoal,
    ) -> None:
        layer_below = len(child_path)
        child_node.max_child_layer_width = (
            widths[layer_below] if layer_below < len(widths) else len(child_node.children)
        )

    visit_populated_goal_children(root_populated_goal, assign_width, None)

    return root_populated_goal, visited_ids


@dataclass
class PartitionedPopulatedTree:
    """
    Populated tree (no layout metrics) plus the (path, id) pairs of every
    descendant, split by a predicate. path locates the node inside
    populated_tree.
    """
    populated_tree: PopulatedGoal
    satisfies_predicate: Set[Tuple[GoalChildIndexPath, GoalId]] = field(default_factory=set)
    does_not_satisfy_predicate: Set[Tuple[GoalChildIndexPath, GoalId]] = field(default_factory=set)


def populate_partitioned_goal_tree(
    goals: GoalMap,
    goal_id: GoalId,
    predicate: Callable[[GoalId, Goal], bool],
) -> Optional[PartitionedPopulatedTree]:
    goal = goals.get(goal_id)
    if goal is None:
        return None

    partitioned = PartitionedPopulatedTree(
        populated_tree=populated_goal_template(goal_id, goal, get_goal_parent_id(goals, goal_id))
    )

    def add_child(
        parent_goal_id: GoalId,
        parent_path: GoalChildIndexPath,
        child_id: GoalId,
        child_goal: Goal,
    ) -> GoalChildIndexPath:
        parent_node = traverse_populated_goal_children(partitioned.populated_tree, parent_path)
        child_path = parent_path + (len(parent_node.children),)

        parent_node.children.append(populated_goal_template(child_id, child_goal, parent_goal_id))

        if predicate(child_id, child_goal):
            partitioned.satisfies_predicate.add((child_path, child_id))
        else:
            partitioned.does_not_satisfy_predicate.add((child_path, child_id))

        return child_path

    visit_goal_child_tree(goals, goal_id, add_child, ())

    return partitioned


# ---------------------------------------------------------------------------
# Predicate visitors
# ---------------------------------------------------------------------------

def visit_tree_with_predicate(
    goals: GoalMap,
    goal_id: GoalId,
    predicate: Callable[[GoalId, Goal], bool],
) -> Optional[Set[GoalId]]:
    """Ids of descendants for which predicate(child_id, child_goal) holds."""
    passing_child_ids: Set[GoalId] = set()

    def check(_parent_id: GoalId, _parent_data: Any, child_id: GoalId, child_goal: Goal) -> None:
        if predicate(child_id, child_goal):
            passing_child_ids.add(child_id)

    if visit_goal_child_tree(goals, goal_id, check, None) is None:
        return None
    return passing_child_ids


def visit_tree_with_predicate_and_parent(
    goals: GoalMap,
    goal_id: GoalId,
    predicate: Callable[[GoalId, bool, GoalId, Goal], bool],
    does_root_satisfy_predicate: bool,
) -> Optional[Set[GoalId]]:
    """
    Like visit_tree_with_predicate, but the predicate also receives the parent
    id and whether the parent satisfied it (does_root_satisfy_predicate for
    the root's children).
    """
    passing_child_ids: Set[GoalId] = set()

    def check(parent_id: GoalId, parent_satisfied: bool, child_id: GoalId, child_goal: Goal) -> bool:
        if predicate(parent_id, parent_satisfied, child_id, child_goal):
            passing_child_ids.add(child_id)
            return True
        return False

    if visit_goal_child_tree(goals, goal_id, check, does_root_satisfy_predicate) is None:
        return None
    return passing_child_ids


def partition_tree_with_predicate(
    goals: GoalMap,
    goal_id: GoalId,
    predicate: Callable[[GoalId, Goal], bool],
) -> Optional[Tuple[Set[GoalId], Set[GoalId]]]:
    """Split the descendants into (satisfies, does not satisfy)."""
    passing_child_ids: Set[GoalId] = set()
    failing_child_ids: Set[GoalId] = set()

    def check(_parent_id: GoalId, _parent_data: Any, child_id: GoalId, child_goal: Goal) -> None:
        if predicate(child_id, child_goal):
            passing_child_ids.add(child_id)
        else:
            failing_child_ids.add(child_id)

    if visit_goal_child_tree(goals, goal_id, check, None) is None:
        return None
    return passing_child_ids, failing_child_ids
