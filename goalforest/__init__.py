# goalforest: effort-tracked goal forest with layout-annotated tree snapshots.

from goalforest.models import Event, EventId, Goal, GoalId, GoalRelationship, PopulatedGoal
from goalforest.profile import Profile
from goalforest.requests import GoalRequest, handle_request

__all__ = [
    "Event",
    "EventId",
    "Goal",
    "GoalId",
    "GoalRelationship",
    "GoalRequest",
    "PopulatedGoal",
    "Profile",
    "handle_request",
]
