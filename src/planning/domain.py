# task/action variants and the locomotion decomposition library
# src/planning/domain.py
"""
Locomotion planning domain.

Closed set of typed variants:

  Tasks (decomposed by methods):
    NavigateTo, NavigatePath, Patrol, ReturnToStart, GlobalPathfind,
    FollowPath
  Goals (goal-oriented entry points):
    GoalNavigateTo, GoalNavigatePath, GoalPatrol
  Primitive actions (executed by commands):
    MoveTo, RotateTo, MoveAndRotate, MarkWaypointReached

Decomposition functions are pure: they read the state they are given and
return an ordered list of subtasks/actions. They never fail; an
unreachable target degrades to a direct MoveTo that the command layer
will reject with a specific error, which leaves backtracking to the
planner.

LocomotionDomain is the callback surface an external planner drives:
decompose() for tasks and goals, execute() for primitive actions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, ClassVar, Dict, List, Optional, Tuple, Union

from locomotion.commands import (
    CommandResult,
    mark_reached_effect,
    mark_waypoint_reached,
    move_and_rotate,
    move_and_rotate_effect,
    move_effect,
    move_to,
    rotate_effect,
    rotate_to,
)
from locomotion.errors import PathNotFound
from locomotion.predicates import quantized_position, quantized_rotation, waypoint_reached
from locomotion.spaces import find_nearest_index
from locomotion.state import LocomotionState
from locomotion.tracing import CommandTracer

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Primitive actions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MoveTo:
    name: ClassVar[str] = "move_to"
    entity: str
    target_index: int


@dataclass(frozen=True)
class RotateTo:
    name: ClassVar[str] = "rotate_to"
    entity: str
    rotation_index: int


@dataclass(frozen=True)
class MoveAndRotate:
    name: ClassVar[str] = "move_and_rotate"
    entity: str
    position_index: int
    rotation_index: int


@dataclass(frozen=True)
class MarkWaypointReached:
    name: ClassVar[str] = "mark_waypoint_reached"
    entity: str
    waypoint: str


# ---------------------------------------------------------------------------
# Compound tasks
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NavigateTo:
    name: ClassVar[str] = "navigate_to"
    entity: str
    waypoint: str


@dataclass(frozen=True)
class NavigatePath:
    name: ClassVar[str] = "navigate_path"
    entity: str
    waypoints: Tuple[str, ...]


@dataclass(frozen=True)
class Patrol:
    name: ClassVar[str] = "patrol"
    entity: str
    waypoints: Tuple[str, ...]


@dataclass(frozen=True)
class ReturnToStart:
    name: ClassVar[str] = "return_to_start"
    entity: str
    start_index: int


@dataclass(frozen=True)
class GlobalPathfind:
    name: ClassVar[str] = "global_pathfind"
    entity: str
    target_index: int


@dataclass(frozen=True)
class FollowPath:
    name: ClassVar[str] = "follow_path"
    entity: str
    indices: Tuple[int, ...]
    final_target: int


# ---------------------------------------------------------------------------
# Goals
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GoalNavigateTo:
    name: ClassVar[str] = "goal_navigate_to"
    entity: str
    waypoint: str


@dataclass(frozen=True)
class GoalNavigatePath:
    name: ClassVar[str] = "goal_navigate_path"
    entity: str
    waypoints: Tuple[str, ...]


@dataclass(frozen=True)
class GoalPatrol:
    name: ClassVar[str] = "goal_patrol"
    entity: str
    waypoints: Tuple[str, ...]


Action = Union[MoveTo, RotateTo, MoveAndRotate, MarkWaypointReached]
Task = Union[NavigateTo, NavigatePath, Patrol, ReturnToStart, GlobalPathfind, FollowPath]
Goal = Union[GoalNavigateTo, GoalNavigatePath, GoalPatrol]
PlanItem = Union[Action, Task, Goal]

ACTION_TYPES = (MoveTo, RotateTo, MoveAndRotate, MarkWaypointReached)
TASK_TYPES = (NavigateTo, NavigatePath, Patrol, ReturnToStart, GlobalPathfind, FollowPath)
GOAL_TYPES = (GoalNavigateTo, GoalNavigatePath, GoalPatrol)


def is_primitive(item: PlanItem) -> bool:
    return isinstance(item, ACTION_TYPES)


# ---------------------------------------------------------------------------
# Task decomposition library
# ---------------------------------------------------------------------------


def navigate_to(state: LocomotionState, entity: str, waypoint: str) -> List[PlanItem]:
    if waypoint_reached(state, entity, waypoint):
        return []

    wp = state.waypoints.get(waypoint)
    if wp is None:
        # let mark_waypoint_reached report unknown_waypoint
        return [MarkWaypointReached(entity, waypoint)]

    if quantized_position(state, entity) == wp.position_index:
        if quantized_rotation(state, entity) == wp.rotation_index:
            return [MarkWaypointReached(entity, waypoint)]
        return [
            RotateTo(entity, wp.rotation_index),
            MarkWaypointReached(entity, waypoint),
        ]

    return [
        GlobalPathfind(entity, wp.position_index),
        RotateTo(entity, wp.rotation_index),
        MarkWaypointReached(entity, waypoint),
    ]


def navigate_path(state: LocomotionState, entity: str, waypoints: Tuple[str, ...]) -> List[PlanItem]:
    return [NavigateTo(entity, wp) for wp in waypoints]


def patrol(state: LocomotionState, entity: str, waypoints: Tuple[str, ...]) -> List[PlanItem]:
    # start is fixed now, not when ReturnToStart is decomposed
    start_index = quantized_position(state, entity)
    return [
        NavigatePath(entity, tuple(waypoints)),
        ReturnToStart(entity, start_index),
    ]


def return_to_start(state: LocomotionState, entity: str, start_index: int) -> List[PlanItem]:
    if quantized_position(state, entity) == start_index:
        return []
    return [MoveTo(entity, start_index)]


def global_pathfind(state: LocomotionState, entity: str, target_index: int) -> List[PlanItem]:
    """
    Route through navmesh-derived intermediate grid indices.

    Falls back to a single MoveTo when there is no navmesh, the points do
    not resolve, the mesh has no path, or the path is a straight segment.
    """
    current_index = quantized_position(state, entity)
    if current_index == target_index:
        return []

    direct: List[PlanItem] = [MoveTo(entity, target_index)]
    if state.navmesh is None:
        return direct

    from_point = state.position_space.get_point(current_index)
    to_point = state.position_space.get_point(target_index)
    if from_point is None or to_point is None:
        return direct

    try:
        path = state.navmesh.find_path(from_point, to_point)
    except PathNotFound as exc:
        log.debug("global_pathfind: no navmesh path entity=%s code=%s", entity, exc.code)
        return direct

    if len(path) <= 2:
        return direct

    intermediates: List[int] = []
    for point in path:
        idx = find_nearest_index(state.position_space, point)
        if idx in (current_index, target_index) or idx in intermediates:
            continue
        intermediates.append(idx)

    if not intermediates:
        return direct
    return [FollowPath(entity, tuple(intermediates), target_index)]


def follow_path(
    state: LocomotionState,
    entity: str,
    indices: Tuple[int, ...],
    final_target: int,
) -> List[PlanItem]:
    steps: List[PlanItem] = [MoveTo(entity, idx) for idx in indices]
    steps.append(MoveTo(entity, final_target))
    return steps


# ---------------------------------------------------------------------------
# Goal methods
# ---------------------------------------------------------------------------


def goal_navigate_to(state: LocomotionState, entity: str, waypoint: str) -> List[PlanItem]:
    if waypoint_reached(state, entity, waypoint):
        return []
    return [NavigateTo(entity, waypoint)]


def goal_navigate_path(state: LocomotionState, entity: str, waypoints: Tuple[str, ...]) -> List[PlanItem]:
    if all(waypoint_reached(state, entity, wp) for wp in waypoints):
        return []
    return [NavigatePath(entity, tuple(waypoints))]


def goal_patrol(state: LocomotionState, entity: str, waypoints: Tuple[str, ...]) -> List[PlanItem]:
    if not waypoints:
        return []
    return [Patrol(entity, tuple(waypoints))]


# ---------------------------------------------------------------------------
# Callback maps (name -> function)
# ---------------------------------------------------------------------------

METHODS: Dict[str, Callable[..., List[PlanItem]]] = {
    NavigateTo.name: navigate_to,
    NavigatePath.name: navigate_path,
    Patrol.name: patrol,
    ReturnToStart.name: return_to_start,
    GlobalPathfind.name: global_pathfind,
    FollowPath.name: follow_path,
    GoalNavigateTo.name: goal_navigate_to,
    GoalNavigatePath.name: goal_navigate_path,
    GoalPatrol.name: goal_patrol,
}

ACTIONS: Dict[str, Callable[..., CommandResult]] = {
    MoveTo.name: move_to,
    RotateTo.name: rotate_to,
    MoveAndRotate.name: move_and_rotate,
    MarkWaypointReached.name: mark_waypoint_reached,
}


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


def decompose(state: LocomotionState, item: PlanItem) -> List[PlanItem]:
    """Run the method for a task or goal variant."""
    if isinstance(item, NavigateTo):
        return navigate_to(state, item.entity, item.waypoint)
    elif isinstance(item, NavigatePath):
        return navigate_path(state, item.entity, item.waypoints)
    elif isinstance(item, Patrol):
        return patrol(state, item.entity, item.waypoints)
    elif isinstance(item, ReturnToStart):
        return return_to_start(state, item.entity, item.start_index)
    elif isinstance(item, GlobalPathfind):
        return global_pathfind(state, item.entity, item.target_index)
    elif isinstance(item, FollowPath):
        return follow_path(state, item.entity, item.indices, item.final_target)
    elif isinstance(item, GoalNavigateTo):
        return goal_navigate_to(state, item.entity, item.waypoint)
    elif isinstance(item, GoalNavigatePath):
        return goal_navigate_path(state, item.entity, item.waypoints)
    elif isinstance(item, GoalPatrol):
        return goal_patrol(state, item.entity, item.waypoints)
    raise TypeError(f"Not a decomposable task: {item!r}")


def execute(state: LocomotionState, action: Action) -> CommandResult:
    """Run the command for a primitive action variant."""
    if isinstance(action, MoveTo):
        return move_to(state, action.entity, action.target_index)
    elif isinstance(action, RotateTo):
        return rotate_to(state, action.entity, action.rotation_index)
    elif isinstance(action, MoveAndRotate):
        return move_and_rotate(state, action.entity, action.position_index, action.rotation_index)
    elif isinstance(action, MarkWaypointReached):
        return mark_waypoint_reached(state, action.entity, action.waypoint)
    raise TypeError(f"Not a primitive action: {action!r}")


def apply_effect(state: LocomotionState, action: Action) -> LocomotionState:
    """Effect of an already-accepted action, without precondition checks."""
    if isinstance(action, MoveTo):
        return move_effect(state, action.entity, action.target_index)
    elif isinstance(action, RotateTo):
        return rotate_effect(state, action.entity, action.rotation_index)
    elif isinstance(action, MoveAndRotate):
        return move_and_rotate_effect(state, action.entity, action.position_index, action.rotation_index)
    elif isinstance(action, MarkWaypointReached):
        return mark_reached_effect(state, action.entity, action.waypoint)
    raise TypeError(f"Not a primitive action: {action!r}")


class LocomotionDomain:
    """
    Callback surface for an external planner.

    Holds no world state: every call receives the state to work on.
    Executed commands are recorded on the tracer when one is attached.
    """

    def __init__(self, tracer: Optional[CommandTracer] = None) -> None:
        self.tracer = tracer

    def is_primitive(self, item: PlanItem) -> bool:
        return is_primitive(item)

    def decompose(self, state: LocomotionState, item: PlanItem) -> List[PlanItem]:
        return decompose(state, item)

    def execute(self, state: LocomotionState, action: Action) -> CommandResult:
        result = execute(state, action)
        if self.tracer is not None:
            self.tracer.record(action=action, result=result)
        return result
