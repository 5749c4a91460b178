from typing import Annotated, List, Literal, Optional, Union

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from goalforest.exceptions import StateError, TreeStructureError
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
)
from web.backend.goal_state import get_goal_state

router = APIRouter()

NonNegative = Annotated[int, Field(ge=0)]


class AddBody(BaseModel):
    kind: Literal["add"]
    name: str
    effort_to_complete: NonNegative = 0

    def to_request(self):
        return AddGoal(name=self.name, effort_to_complete=self.effort_to_complete)


class RefineBody(BaseModel):
    kind: Literal["refine"]
    parent_goal_id: int
    child_name: str
    child_effort_to_complete: NonNegative = 0
    parent_effort_removed: NonNegative = 0

    def to_request(self):
        return RefineGoal(
            parent_goal_id=self.parent_goal_id,
            child_name=self.child_name,
            child_effort_to_complete=self.child_effort_to_complete,
            parent_effort_removed=self.parent_effort_removed,
        )


class RescopeBody(BaseModel):
    kind: Literal["rescope"]
    goal_id: int
    new_effort_to_complete: NonNegative

    def to_request(self):
        return RescopeGoal(goal_id=self.goal_id, new_effort_to_complete=self.new_effort_to_complete)


class RescopeByFinishBody(BaseModel):
    kind: Literal["rescope_by_finish"]
    goal_id: int
    effort_done: NonNegative = 0

    def to_request(self):
        return RescopeByFinish(goal_id=self.goal_id, effort_done=self.effort_done)


class RenameBody(BaseModel):
    kind: Literal["rename"]
    goal_id: int
    new_name: str

    def to_request(self):
        return RenameGoal(goal_id=self.goal_id, new_name=self.new_name)


class DeleteBody(BaseModel):
    kind: Literal["delete"]
    goal_id: int

    def to_request(self):
        return DeleteGoal(goal_id=self.goal_id)


class EffortBody(BaseModel):
    kind: Literal["add_effort", "remove_effort"]
    goal_id: int
    effort: NonNegative

    def to_request(self):
        if self.kind == "add_effort":
            return AddEffort(goal_id=self.goal_id, effort=self.effort)
        return RemoveEffort(goal_id=self.goal_id, effort=self.effort)


class FocusBody(BaseModel):
    kind: Literal["focus", "unfocus", "focus_single", "unfocus_single"]
    goal_id: int

    def to_request(self):
        request_type = {
            "focus": FocusGoal,
            "unfocus": UnfocusGoal,
            "focus_single": FocusSingleGoal,
            "unfocus_single": UnfocusSingleGoal,
        }[self.kind]
        return request_type(goal_id=self.goal_id)


class ReorderBody(BaseModel):
    kind: Literal["reorder"]
    parent_goal_id: int
    first_child_id: int
    second_child_id: int

    def to_request(self):
        return ReorderChildren(
            parent_goal_id=self.parent_goal_id,
            first_child_id=self.first_child_id,
            second_child_id=self.second_child_id,
        )


GoalRequestBody = Annotated[
    Union[
        AddBody,
        RefineBody,
        RescopeBody,
        RescopeByFinishBody,
        RenameBody,
        DeleteBody,
        EffortBody,
        FocusBody,
        ReorderBody,
    ],
    Field(discriminator="kind"),
]


class DisplayConfigUpdateRequest(BaseModel):
    font_size_pixels: Optional[int] = Field(default=None, gt=0)
    background_color: Optional[str] = None
    font_color: Optional[str] = None


def _snapshot_payload() -> dict:
    state = get_goal_state().state
    return {
        "populatedGoals": [goal.to_dict() for goal in state.profile.populate_goals()],
        "focusedGoals": sorted(state.profile.focused_goals),
        "config": state.config.to_dict(),
    }


@router.get("")
async def get_snapshot():
    """Fresh populated tree of every root goal."""
    holder = get_goal_state()
    async with holder.lock:
        return _snapshot_payload()


@router.post("/requests")
async def submit_request(body: GoalRequestBody):
    """
    Apply one goal request.

    Unknown ids are not an error: the response simply carries no events.
    """
    holder = get_goal_state()
    async with holder.lock:
        try:
            records = holder.apply(body.to_request())
        except TreeStructureError as e:
            raise HTTPException(status_code=409, detail=e.get_user_message())
        except StateError as e:
            raise HTTPException(status_code=500, detail=e.get_user_message())
        return {"events": records, **_snapshot_payload()}


@router.get("/history")
async def get_history(limit: int = 50):
    holder = get_goal_state()
    async with holder.lock:
        return {"total": len(holder.history), "events": holder.history.latest(limit)}


@router.put("/config/display")
async def update_display_config(req: DisplayConfigUpdateRequest):
    holder = get_goal_state()
    async with holder.lock:
        commandline = holder.state.config.display.commandline
        if req.font_size_pixels is not None:
            commandline.font_size_pixels = req.font_size_pixels
        if req.background_color is not None:
            commandline.background_color = req.background_color
        if req.font_color is not None:
            commandline.font_color = req.font_color
        try:
            holder.save()
        except StateError as e:
            raise HTTPException(status_code=500, detail=e.get_user_message())
        return {"status": "updated", "config": holder.state.config.to_dict()}


@router.get("/{goal_id}")
async def get_goal_tree(goal_id: int):
    holder = get_goal_state()
    async with holder.lock:
        populated = holder.state.profile.populate_goal(goal_id)
        if populated is None:
            raise HTTPException(status_code=404, detail="Goal not found")
        return {
            "populatedGoal": populated.to_dict(),
            "focused": goal_id in holder.state.profile.focused_goals,
        }


@router.get("/{goal_id}/partition")
async def get_finished_partition(goal_id: int):
    """Populated tree with descendants split into finished / unfinished."""
    holder = get_goal_state()
    async with holder.lock:
        partitioned = holder.state.profile.partition_finished(goal_id)
        if partitioned is None:
            raise HTTPException(status_code=404, detail="Goal not found")

        def pairs(entries) -> List[dict]:
            return [{"path": list(path), "id": child_id} for path, child_id in sorted(entries)]

        return {
            "populatedTree": partitioned.populated_tree.to_dict(),
            "finished": pairs(partitioned.satisfies_predicate),
            "unfinished": pairs(partitioned.does_not_satisfy_predicate),
        }
