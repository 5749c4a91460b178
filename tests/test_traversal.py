import pytest

from goalforest.exceptions import StateError
from goalforest.models import Goal, GoalId
from goalforest.traversal import (
    get_goal_parent_id,
    get_root_goals,
    partition_tree_with_predicate,
    populate_goal_tree,
    populate_partitioned_goal_tree,
    traverse_populated_goal_children,
    visit_goal_child_tree,
    visit_tree_with_predicate,
    visit_tree_with_predicate_and_parent,
)


def build_goals(layout):
    """layout: {id: (name, effort_to_complete, [child ids])}"""
    return {
        GoalId(goal_id): Goal(name=name, effort_to_complete=effort, children=[GoalId(c) for c in children])
        for goal_id, (name, effort, children) in layout.items()
    }


def wide_tree():
    # R -> A, B, C ; A -> A1, A2 ; B -> B1 ; B1 -> X, Y, Z, W
    return build_goals({
        0: ("R", 10, [1, 2, 3]),
        1: ("A", 1, [4, 5]),
        2: ("B", 1, [6]),
        3: ("C", 1, []),
        4: ("A1", 1, []),
        5: ("A2", 1, []),
        6: ("B1", 1, [7, 8, 9, 10]),
        7: ("X", 1, []),
        8: ("Y", 1, []),
        9: ("Z", 1, []),
        10: ("W", 1, []),
    })


def test_visit_skips_root_and_returns_descendants():
    goals = wide_tree()
    seen = []

    visited = visit_goal_child_tree(goals, GoalId(0), lambda _p, _d, child_id, _c: seen.append(child_id), None)

    assert visited == set(range(1, 11))
    assert 0 not in seen
    assert sorted(seen) == list(range(1, 11))


def test_visit_unknown_root_returns_none():
    assert visit_goal_child_tree(wide_tree(), GoalId(99), lambda *_: None, None) is None


def test_visit_threads_parent_data_to_children():
    goals = build_goals({
        1: ("root", 1, [2, 3]),
        2: ("left", 1, []),
        3: ("right", 4, [4]),
        4: ("right-grandchild", 5, []),
    })
    totals = {}

    def add_effort(_parent_id, parent_total, child_id, child):
        totals[child_id] = parent_total + child.effort_to_complete
        return totals[child_id]

    visit_goal_child_tree(goals, GoalId(1), add_effort, goals[GoalId(1)].effort_to_complete)

    assert totals == {2: 2, 3: 5, 4: 10}


def test_visit_order_follows_stored_sibling_order():
    goals = build_goals({
        0: ("R", 0, [1, 2]),
        1: ("A", 0, [3]),
        2: ("B", 0, [4]),
        3: ("A1", 0, []),
        4: ("B1", 0, []),
    })
    order = []

    visit_goal_child_tree(goals, GoalId(0), lambda _p, _d, child_id, _c: order.append(child_id), None)

    assert order == [1, 2, 3, 4]


def test_visit_rejects_missing_child():
    goals = build_goals({0: ("R", 0, [5])})
    with pytest.raises(StateError):
        visit_goal_child_tree(goals, GoalId(0), lambda *_: None, None)


def test_visit_rejects_cycles():
    goals = build_goals({0: ("R", 0, [1]), 1: ("A", 0, [0])})
    with pytest.raises(StateError):
        visit_goal_child_tree(goals, GoalId(0), lambda *_: None, None)


def test_parent_and_root_lookup():
    goals = wide_tree()
    goals[GoalId(11)] = Goal(name="other root")

    assert get_goal_parent_id(goals, GoalId(6)) == 2
    assert get_goal_parent_id(goals, GoalId(0)) is None
    assert get_root_goals(goals) == [0, 11]


def test_populate_two_children_width_and_depth():
    goals = build_goals({0: ("root", 3, [1, 2]), 1: ("A", 0, []), 2: ("B", 0, [])})

    root, visited = populate_goal_tree(goals, GoalId(0))

    assert visited == {1, 2}
    assert [c.name for c in root.children] == ["A", "B"]
    assert root.max_child_depth == 1
    assert root.max_child_layer_width == 2
    assert all(c.parent_goal_id == 0 for c in root.children)
    assert all(c.max_child_depth == 0 for c in root.children)


def test_populate_layer_widths_propagate_from_deeper_layers():
    root, visited = populate_goal_tree(wide_tree(), GoalId(0))

    assert root.count_nodes() - 1 == len(visited)
    assert root.max_child_layer_width == 4
    assert root.max_child_depth == 3

    a, b, c = root.children
    assert (a.max_child_depth, b.max_child_depth, c.max_child_depth) == (1, 2, 0)
    assert (a.max_child_layer_width, b.max_child_layer_width, c.max_child_layer_width) == (4, 4, 4)

    b1 = traverse_populated_goal_children(root, (1, 0))
    assert b1.name == "B1"
    assert b1.max_child_depth == 1
    assert b1.max_child_layer_width == 4
    assert [leaf.max_child_layer_width for leaf in b1.children] == [0, 0, 0, 0]
    assert [leaf.name for leaf in b1.children] == ["X", "Y", "Z", "W"]


def test_populate_shallow_layer_keeps_its_own_width():
    goals = build_goals({
        0: ("R", 0, [1, 2, 3, 4]),
        1: ("A", 0, [5]),
        2: ("B", 0, []),
        3: ("C", 0, []),
        4: ("D", 0, []),
        5: ("A1", 0, []),
    })

    root, _ = populate_goal_tree(goals, GoalId(0))

    assert root.max_child_layer_width == 4
    assert root.max_child_depth == 2
    assert [c.max_child_layer_width for c in root.children] == [1, 1, 1, 1]
    assert root.children[0].children[0].max_child_layer_width == 0


def test_populate_subtree_records_parent_and_leaf_root():
    goals = wide_tree()

    subtree, visited = populate_goal_tree(goals, GoalId(6))
    assert subtree.parent_goal_id == 2
    assert visited == {7, 8, 9, 10}
    assert subtree.max_child_layer_width == 4

    leaf, visited = populate_goal_tree(goals, GoalId(3))
    assert visited == set()
    assert leaf.max_child_layer_width == 0
    assert leaf.max_child_depth == 0

    assert populate_goal_tree(goals, GoalId(42)) is None


def test_predicate_visitors():
    goals = wide_tree()
    goals[GoalId(4)].effort_to_date = 1
    goals[GoalId(7)].effort_to_date = 3

    finished = visit_tree_with_predicate(goals, GoalId(0), lambda _, goal: goal.finished())
    assert finished == {4, 7}

    passing, failing = partition_tree_with_predicate(goals, GoalId(2), lambda _, goal: goal.finished())
    assert passing == {7}
    assert failing == {6, 8, 9, 10}

    assert visit_tree_with_predicate(goals, GoalId(99), lambda *_: True) is None
    assert partition_tree_with_predicate(goals, GoalId(99), lambda *_: True) is None


def test_predicate_with_parent_sees_parent_result():
    goals = wide_tree()
    calls = {}

    def only_under_b(parent_id, parent_matched, child_id, _goal):
        calls[child_id] = (parent_id, parent_matched)
        return parent_matched or child_id == 2

    matched = visit_tree_with_predicate_and_parent(goals, GoalId(0), only_under_b, False)

    assert matched == {2, 6, 7, 8, 9, 10}
    assert calls[6] == (2, True)
    assert calls[4] == (1, False)
    assert visit_tree_with_predicate_and_parent(goals, GoalId(99), only_under_b, True) is None


def test_partitioned_tree_paths_locate_nodes():
    goals = wide_tree()
    goals[GoalId(3)].effort_to_date = 1

    partitioned = populate_partitioned_goal_tree(goals, GoalId(0), lambda _, goal: goal.finished())
    tree = partitioned.populated_tree

    assert ((2,), 3) in partitioned.satisfies_predicate
    assert len(partitioned.does_not_satisfy_predicate) == 9
    for path, goal_id in partitioned.satisfies_predicate | partitioned.does_not_satisfy_predicate:
        assert traverse_populated_goal_children(tree, path).id == goal_id
    assert tree.max_child_layer_width == 0
    assert populate_partitioned_goal_tree(goals, GoalId(99), lambda *_: True) is None
