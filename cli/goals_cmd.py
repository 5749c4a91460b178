"""
CLI command: goals

Each subcommand loads the state file, applies one request, records the
emitted events and saves. Output is JSON so shells and scripts can consume it.
"""
import json
import logging
from pathlib import Path
from typing import Optional

import click

from goalforest.exceptions import GoalForestError
from goalforest.logger import setup_logging
from goalforest.persistent_state import PersistentState, data_path
from goalforest.requests import (
    AddEffort,
    AddGoal,
    DeleteGoal,
    FocusGoal,
    FocusSingleGoal,
    RefineGoal,
    RemoveEffort,
    RenameGoal,
    ReorderChildren,
    RescopeByFinish,
    RescopeGoal,
    UnfocusGoal,
    UnfocusSingleGoal,
    handle_request,
)


def _echo_json(payload) -> None:
    click.echo(json.dumps(payload, ensure_ascii=False, indent=2))


def _run(ctx: click.Context, request) -> None:
    path: Path = ctx.obj["path"]
    try:
        state = PersistentState.load(path)
        events = handle_request(state.profile, request)
        records = state.history.append(events)
        if records:
            state.save(path)
    except GoalForestError as e:
        raise click.ClickException(e.get_user_message())

    if not records:
        click.echo("No matching goal; nothing changed.", err=True)
    _echo_json(records)


@click.group()
@click.option(
    "--state-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="State file (defaults to GOALFOREST_STATE_PATH or the data directory).",
)
@click.option("--verbose", is_flag=True, help="Echo INFO logs to the console.")
@click.pass_context
def goals(ctx: click.Context, state_file: Optional[Path], verbose: bool):
    """Manage the goal forest."""
    setup_logging(console_level=logging.INFO if verbose else logging.WARNING)
    ctx.ensure_object(dict)
    ctx.obj["path"] = state_file or data_path()


@goals.command()
@click.argument("name")
@click.argument("effort_to_complete", type=click.IntRange(min=0), default=0)
@click.pass_context
def add(ctx, name, effort_to_complete):
    """Create a new root goal."""
    _run(ctx, AddGoal(name=name, effort_to_complete=effort_to_complete))


@goals.command()
@click.argument("parent_goal_id", type=int)
@click.argument("child_name")
@click.argument("child_effort_to_complete", type=click.IntRange(min=0), default=0)
@click.option("--parent-effort-removed", type=click.IntRange(min=0), default=0,
              help="Effort moved from the parent to the new child.")
@click.pass_context
def refine(ctx, parent_goal_id, child_name, child_effort_to_complete, parent_effort_removed):
    """Create a child goal under PARENT_GOAL_ID."""
    _run(ctx, RefineGoal(
        parent_goal_id=parent_goal_id,
        child_name=child_name,
        child_effort_to_complete=child_effort_to_complete,
        parent_effort_removed=parent_effort_removed,
    ))


@goals.command()
@click.argument("goal_id", type=int)
@click.argument("new_name")
@click.pass_context
def rename(ctx, goal_id, new_name):
    _run(ctx, RenameGoal(goal_id=goal_id, new_name=new_name))


@goals.command()
@click.argument("goal_id", type=int)
@click.argument("amount", type=click.IntRange(min=0))
@click.option("--remove", is_flag=True, help="Remove effort instead of adding it.")
@click.pass_context
def effort(ctx, goal_id, amount, remove):
    """Add AMOUNT of effort to a goal."""
    if remove:
        _run(ctx, RemoveEffort(goal_id=goal_id, effort=amount))
    else:
        _run(ctx, AddEffort(goal_id=goal_id, effort=amount))


@goals.command()
@click.argument("goal_id", type=int)
@click.argument("new_effort_to_complete", type=click.IntRange(min=0))
@click.pass_context
def rescope(ctx, goal_id, new_effort_to_complete):
    _run(ctx, RescopeGoal(goal_id=goal_id, new_effort_to_complete=new_effort_to_complete))


@goals.command()
@click.argument("goal_id", type=int)
@click.argument("effort_done", type=click.IntRange(min=0), default=0)
@click.pass_context
def finish(ctx, goal_id, effort_done):
    """Record the final EFFORT_DONE and mark the goal finished."""
    _run(ctx, RescopeByFinish(goal_id=goal_id, effort_done=effort_done))


@goals.command()
@click.argument("goal_id", type=int)
@click.pass_context
def delete(ctx, goal_id):
    """Delete a goal and its whole subtree."""
    _run(ctx, DeleteGoal(goal_id=goal_id))


@goals.command()
@click.argument("goal_id", type=int)
@click.option("--single", is_flag=True, help="Only this goal, not its subtree.")
@click.pass_context
def focus(ctx, goal_id, single):
    _run(ctx, FocusSingleGoal(goal_id=goal_id) if single else FocusGoal(goal_id=goal_id))


@goals.command()
@click.argument("goal_id", type=int)
@click.option("--single", is_flag=True, help="Only this goal, not its subtree.")
@click.pass_context
def unfocus(ctx, goal_id, single):
    _run(ctx, UnfocusSingleGoal(goal_id=goal_id) if single else UnfocusGoal(goal_id=goal_id))


@goals.command()
@click.argument("parent_goal_id", type=int)
@click.argument("first_child_id", type=int)
@click.argument("second_child_id", type=int)
@click.pass_context
def swap(ctx, parent_goal_id, first_child_id, second_child_id):
    """Swap the positions of two children of PARENT_GOAL_ID."""
    _run(ctx, ReorderChildren(
        parent_goal_id=parent_goal_id,
        first_child_id=first_child_id,
        second_child_id=second_child_id,
    ))


@goals.command()
@click.argument("goal_id", type=int, required=False)
@click.pass_context
def tree(ctx, goal_id):
    """Dump the populated tree of GOAL_ID, or of every root goal."""
    try:
        state = PersistentState.load(ctx.obj["path"])
    except GoalForestError as e:
        raise click.ClickException(e.get_user_message())

    if goal_id is None:
        _echo_json([g.to_dict() for g in state.profile.populate_goals()])
        return

    populated = state.profile.populate_goal(goal_id)
    if populated is None:
        raise click.ClickException(f"goal {goal_id} not found")
    _echo_json(populated.to_dict())


@goals.command()
@click.option("--limit", type=int, default=20, show_default=True)
@click.pass_context
def history(ctx, limit):
    """Show the most recent goal events."""
    try:
        state = PersistentState.load(ctx.obj["path"])
    except GoalForestError as e:
        raise click.ClickException(e.get_user_message())
    _echo_json(state.history.latest(limit))


if __name__ == "__main__":
    goals()
