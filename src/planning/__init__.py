# src/planning/__init__.py
"""
Planning surface for the patrol solver:
- domain: typed task/action variants, decomposition library, dispatch
- sequencer: greedy waypoint tour ordering
"""

from .domain import (
    ACTIONS,
    METHODS,
    FollowPath,
    GlobalPathfind,
    GoalNavigatePath,
    GoalNavigateTo,
    GoalPatrol,
    LocomotionDomain,
    MarkWaypointReached,
    MoveAndRotate,
    MoveTo,
    NavigatePath,
    NavigateTo,
    Patrol,
    ReturnToStart,
    RotateTo,
    apply_effect,
)
from .sequencer import order_indices, order_waypoints, total_distance

__all__ = [
    "ACTIONS",
    "METHODS",
    "FollowPath",
    "GlobalPathfind",
    "GoalNavigatePath",
    "GoalNavigateTo",
    "GoalPatrol",
    "LocomotionDomain",
    "MarkWaypointReached",
    "MoveAndRotate",
    "MoveTo",
    "NavigatePath",
    "NavigateTo",
    "Patrol",
    "ReturnToStart",
    "RotateTo",
    "apply_effect",
    "order_indices",
    "order_waypoints",
    "total_distance",
]
