import pytest

from goalforest.exceptions import DuplicateChildError, NoSuchChildError
from goalforest.models import Event, EventKind, GoalRelationship, RelationshipKind
from goalforest.profile import Profile
from goalforest.traversal import populate_goal_tree


def three_level_profile():
    """root -> (child_a -> grandchild, child_b)"""
    profile = Profile()
    root = profile.add_goal("root", 10)
    child_a = profile.refine_goal(root, "child a", 3, 0)
    child_b = profile.refine_goal(root, "child b", 2, 0)
    grandchild = profile.refine_goal(child_a, "grandchild", 1, 0)
    return profile, root, child_a, child_b, grandchild


def test_add_goal_allocates_increasing_ids():
    profile = Profile()
    first = profile.add_goal("first", 1)
    second = profile.add_goal("second", 0)

    assert (first, second) == (0, 1)
    assert profile.goal_id_count == 2
    assert profile.root_goal_ids() == [0, 1]
    assert profile.get_goal(second).finished()
    assert profile.get_goal(first).unfinished()


def test_refine_moves_effort_and_saturates():
    profile = Profile()
    root = profile.add_goal("root", 4)

    child = profile.refine_goal(root, "A", 0, 1)
    assert profile.goals[root].effort_to_complete == 3
    assert profile.goals[root].children == [child]

    profile.refine_goal(root, "B", 0, 100)
    assert profile.goals[root].effort_to_complete == 0
    assert profile.refine_goal(42, "orphan", 1, 0) is None
    assert profile.goal_id_count == 3


def test_refine_refuses_duplicate_child_without_changes():
    profile = Profile()
    root = profile.add_goal("root", 5)
    child = profile.refine_goal(root, "child", 1, 0)
    profile.goal_id_count = child

    with pytest.raises(DuplicateChildError) as exc:
        profile.refine_goal(root, "again", 1, 2)

    assert exc.value.parent_id == root
    assert exc.value.child_id == child
    assert profile.goals[child].name == "child"
    assert profile.goals[root].children == [child]
    assert profile.goals[root].effort_to_complete == 5
    assert profile.goal_id_count == child


def test_refined_root_snapshot_width_and_depth():
    profile = Profile()
    root = profile.add_goal("root", 4)
    a = profile.refine_goal(root, "A", 0, 1)
    assert profile.goals[root].effort_to_complete == 3
    b = profile.refine_goal(root, "B", 0, 0)
    assert profile.goals[root].effort_to_complete == 3

    populated, visited = populate_goal_tree(profile.goals, root)

    assert visited == {a, b}
    assert [child.id for child in populated.children] == [a, b]
    assert populated.max_child_depth == 1
    assert populated.max_child_layer_width == 2
    assert populated.count_nodes() - 1 == len(visited)


def test_effort_changes_saturate_at_zero():
    profile = Profile()
    goal_id = profile.add_goal("g", 3)

    assert profile.add_effort(goal_id, 2)
    assert profile.remove_effort(goal_id, 5)
    assert profile.goals[goal_id].effort_to_date == 0
    assert not profile.add_effort(99, 1)
    assert not profile.remove_effort(99, 1)


def test_rescope_and_finish_report_original_effort():
    profile = Profile()
    goal_id = profile.add_goal("g", 8)
    profile.add_effort(goal_id, 2)

    assert profile.rescope_goal(goal_id, 5) == 8
    assert profile.rescope_by_finish(goal_id, 1) == 5
    goal = profile.goals[goal_id]
    assert (goal.effort_to_date, goal.effort_to_complete) == (3, 3)
    assert goal_id in profile.finished_goals()
    assert profile.rescope_goal(99, 1) is None
    assert profile.rescope_by_finish(99, 1) is None


def test_rename_returns_previous_name():
    profile = Profile()
    goal_id = profile.add_goal("old", 0)

    assert profile.rename_goal(goal_id, "new") == "old"
    assert profile.goals[goal_id].name == "new"
    assert profile.rename_goal(99, "x") is None


def test_swap_children():
    profile, root, child_a, child_b, grandchild = three_level_profile()

    assert profile.swap_children(root, child_a, child_b)
    assert profile.goals[root].children == [child_b, child_a]
    assert [c.name for c in profile.populate_goal(root).children] == ["child b", "child a"]
    assert not profile.swap_children(99, child_a, child_b)

    with pytest.raises(NoSuchChildError) as exc:
        profile.swap_children(root, child_a, grandchild)
    assert exc.value.child_id == grandchild

    with pytest.raises(NoSuchChildError) as exc:
        profile.swap_children(root, 77, child_b)
    assert exc.value.child_id == 77
    assert profile.goals[root].children == [child_b, child_a]


def test_remove_goal_cleans_every_reference():
    profile, root, child_a, child_b, grandchild = three_level_profile()
    profile.focus_goal(root)
    event_id = profile.add_event(Event(
        kind=EventKind.INSTANT,
        timing={"time": "2024-01-01T09:00:00"},
        goal_relationships=[
            GoalRelationship(RelationshipKind.WORKS_ON, child_a),
            GoalRelationship(RelationshipKind.REQUIRES, grandchild),
            GoalRelationship(RelationshipKind.ENDS, child_b),
        ],
    ))

    deleted = profile.remove_goal(child_a)

    assert deleted.id == child_a
    assert deleted.parent_goal_id == root
    assert [c.id for c in deleted.children] == [grandchild]
    assert profile.goal_ids() == {root, child_b}
    assert profile.goals[root].children == [child_b]
    assert profile.focused_goals == {root, child_b}
    assert profile.get_event(event_id).referenced_goal_ids() == [child_b]
    assert profile.remove_goal(child_a) is None


def test_remove_root_goal():
    profile, root, *_ = three_level_profile()
    other = profile.add_goal("other", 1)

    profile.remove_goal(root)

    assert profile.goal_ids() == {other}
    assert profile.root_goal_ids() == [other]


def test_focus_and_unfocus_subtree():
    profile, root, child_a, child_b, grandchild = three_level_profile()

    assert profile.focus_goal(root) == {root, child_a, child_b, grandchild}
    assert profile.unfocused_goals() == set()

    assert profile.unfocus_goal(root) == {root, child_a, child_b, grandchild}
    assert profile.focused_goals == set()


def test_focus_reports_only_changed_goals():
    profile, root, child_a, child_b, grandchild = three_level_profile()
    profile.focus_single_goal(child_a)

    assert profile.focus_goal(root) == {root, child_b, grandchild}
    assert profile.focus_goal(99) is None


def test_unfocus_requires_focused_root():
    profile, root, child_a, _, grandchild = three_level_profile()
    profile.focus_goal(child_a)

    assert profile.unfocus_goal(root) is None
    assert profile.focused_goals == {child_a, grandchild}


def test_single_focus():
    profile, root, child_a, *_ = three_level_profile()

    assert profile.focus_single_goal(child_a)
    assert profile.focused_goals == {child_a}
    assert not profile.focus_single_goal(99)
    assert profile.unfocus_single_goal(child_a)
    assert not profile.unfocus_single_goal(child_a)
    assert not profile.unfocus_single_goal(root)


def test_events_use_their_own_counter():
    profile = Profile()
    profile.add_goal("g", 0)
    first = profile.add_event(Event(kind=EventKind.FLOATING))
    second = profile.add_event(Event(kind=EventKind.BLOCK))

    assert (first, second) == (0, 1)
    assert profile.remove_event(first).kind is EventKind.FLOATING
    assert profile.remove_event(first) is None
    assert profile.event_id_count == 2


def test_partition_finished():
    profile, root, child_a, child_b, grandchild = three_level_profile()
    profile.rescope_by_finish(grandchild, 1)

    partitioned = profile.partition_finished(root)

    assert partitioned.satisfies_predicate == {((0, 0), grandchild)}
    assert {goal_id for _, goal_id in partitioned.does_not_satisfy_predicate} == {child_a, child_b}
    assert profile.partition_finished(99) is None


def test_profile_dict_round_trip_keeps_counters_and_order():
    profile, root, child_a, child_b, _ = three_level_profile()
    profile.swap_children(root, child_a, child_b)
    profile.focus_single_goal(child_b)
    profile.add_event(Event(kind=EventKind.INSTANT, goal_relationships=[GoalRelationship(RelationshipKind.STARTS, root)]))
    profile.remove_goal(child_a)

    restored = Profile.from_dict(profile.to_dict())

    assert restored.goal_id_count == profile.goal_id_count == 4
    assert restored.event_id_count == 1
    assert restored.goals == profile.goals
    assert restored.goals[root].children == [child_b]
    assert restored.focused_goals == {child_b}
    assert restored.events == profile.events
    assert restored.add_goal("next", 0) == 4
