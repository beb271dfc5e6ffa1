# atomic locomotion commands: move_to, rotate_to, move_and_rotate, mark_waypoint_reached
# src/locomotion/commands.py
"""
Atomic state transitions driven by the external planner.

Each command:
  1) checks its preconditions in a fixed order,
  2) on success applies its effect and returns the new state with the
     transition duration,
  3) on failure returns the *unchanged* state and a typed error.

Commands never raise for precondition failures; StateInconsistency is the
only exception that escapes (broken internal invariants).

The *_effect functions are the effect halves without any validation and
are shared with trajectory replay.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Optional

from spec.types import MOVEMENT_TYPES
from .errors import (
    ConstraintViolation,
    LocomotionError,
    PathNotFound,
    ValidationError,
)
from .predicates import (
    entity_speed,
    movement_type,
    quantized_position,
    set_quantized_position,
    set_quantized_rotation,
    set_waypoint_reached,
)
from .spaces import is_upward_movement
from .state import LocomotionState, calculate_distance, calculate_duration

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """
    Outcome of one command.

    On failure `state` is the input state and `duration_ms` is 0.
    """

    state: LocomotionState
    duration_ms: int = 0
    error: Optional[LocomotionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def to_milliseconds(seconds: float) -> int:
    return int(seconds * 1000)


# ---------------------------------------------------------------------------
# Precondition checks
# ---------------------------------------------------------------------------

Check = Callable[[], Optional[LocomotionError]]


def _check_entity(state: LocomotionState, entity: str) -> Optional[LocomotionError]:
    if not state.has_entity(entity):
        return ValidationError("unknown_entity", {"entity": entity})
    return None


def _check_can_move(state: LocomotionState, entity: str) -> Optional[LocomotionError]:
    current = movement_type(state, entity)
    if current not in MOVEMENT_TYPES:
        return ValidationError(
            "movement_type_disallowed",
            {"entity": entity, "movement_type": current},
        )
    return None


def _check_speed(state: LocomotionState, entity: str) -> Optional[LocomotionError]:
    speed = entity_speed(state, entity)
    if speed <= 0.0:
        return ValidationError("non_positive_speed", {"entity": entity, "speed": speed})
    return None


def _check_position_index(state: LocomotionState, index: int) -> Optional[LocomotionError]:
    if not state.position_space.contains_index(index):
        return ValidationError(
            "position_index_out_of_range",
            {"index": index, "max": state.position_space.n - 1},
        )
    return None


def _check_rotation_index(state: LocomotionState, index: int) -> Optional[LocomotionError]:
    if not state.rotation_space.contains_index(index):
        return ValidationError(
            "rotation_index_out_of_range",
            {"index": index, "max": state.rotation_space.n - 1},
        )
    return None


def _check_not_upward(state: LocomotionState, entity: str, target: int) -> Optional[LocomotionError]:
    if not state.maze_mode:
        return None
    current = state.position_point(quantized_position(state, entity))
    goal = state.position_point(target)
    if is_upward_movement(current, goal):
        return ConstraintViolation(
            "upward_movement",
            {"entity": entity, "from_z": current[2], "to_z": goal[2]},
        )
    return None


def _check_navmesh(state: LocomotionState, entity: str, target: int) -> Optional[LocomotionError]:
    mesh = state.navmesh
    if mesh is None:
        return None

    current = state.position_point(quantized_position(state, entity))
    goal = state.position_point(target)
    if not (mesh.walkable(current) and mesh.walkable(goal)):
        return ConstraintViolation(
            "not_walkable",
            {"entity": entity, "from": current, "to": goal},
        )
    try:
        mesh.find_path(current, goal)
    except PathNotFound as exc:
        return exc
    return None


def _first_failure(*checks: Check) -> Optional[LocomotionError]:
    for check in checks:
        error = check()
        if error is not None:
            return error
    return None


def _reject(command: str, entity: str, state: LocomotionState, error: LocomotionError) -> CommandResult:
    log.debug("%s rejected entity=%s code=%s details=%s", command, entity, error.code, error.details)
    return CommandResult(state=state, duration_ms=0, error=error)


# ---------------------------------------------------------------------------
# Effects (no validation)
# ---------------------------------------------------------------------------


def move_effect(state: LocomotionState, entity: str, target: int) -> LocomotionState:
    # distance uses the position before the update
    current = quantized_position(state, entity)
    seconds = calculate_duration(
        calculate_distance(state, current, target),
        entity_speed(state, entity),
    )
    new_state = set_quantized_position(state, entity, target)
    return replace(new_state, last_duration=seconds)


def rotate_effect(state: LocomotionState, entity: str, target: int) -> LocomotionState:
    new_state = set_quantized_rotation(state, entity, target)
    return replace(new_state, last_duration=state.rotation_duration)


def move_and_rotate_effect(
    state: LocomotionState,
    entity: str,
    position_index: int,
    rotation_index: int,
) -> LocomotionState:
    moved = move_effect(state, entity, position_index)
    seconds = max(moved.last_duration or 0.0, state.rotation_duration)
    rotated = set_quantized_rotation(moved, entity, rotation_index)
    return replace(rotated, last_duration=seconds)


def mark_reached_effect(state: LocomotionState, entity: str, waypoint: str) -> LocomotionState:
    return replace(set_waypoint_reached(state, entity, waypoint, True), last_duration=0.0)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def move_to(state: LocomotionState, entity: str, target_position_index: int) -> CommandResult:
    """
    Move `entity` to a position index.

    Check order: entity known, movement type allows moving, speed > 0,
    index in range, no upward move (maze mode), both points walkable and
    connected (navmesh present).
    """
    error = _first_failure(
        lambda: _check_entity(state, entity),
        lambda: _check_can_move(state, entity),
        lambda: _check_speed(state, entity),
        lambda: _check_position_index(state, target_position_index),
        lambda: _check_not_upward(state, entity, target_position_index),
        lambda: _check_navmesh(state, entity, target_position_index),
    )
    if error is not None:
        return _reject("move_to", entity, state, error)

    new_state = move_effect(state, entity, target_position_index)
    return CommandResult(state=new_state, duration_ms=to_milliseconds(new_state.last_duration))


def rotate_to(state: LocomotionState, entity: str, target_rotation_index: int) -> CommandResult:
    error = _first_failure(
        lambda: _check_entity(state, entity),
        lambda: _check_rotation_index(state, target_rotation_index),
    )
    if error is not None:
        return _reject("rotate_to", entity, state, error)

    new_state = rotate_effect(state, entity, target_rotation_index)
    return CommandResult(state=new_state, duration_ms=to_milliseconds(new_state.last_duration))


def move_and_rotate(
    state: LocomotionState,
    entity: str,
    target_position_index: int,
    target_rotation_index: int,
) -> CommandResult:
    """Both preconditions sets; duration is the longer of the two."""
    error = _first_failure(
        lambda: _check_entity(state, entity),
        lambda: _check_can_move(state, entity),
        lambda: _check_speed(state, entity),
        lambda: _check_position_index(state, target_position_index),
        lambda: _check_rotation_index(state, target_rotation_index),
        lambda: _check_not_upward(state, entity, target_position_index),
        lambda: _check_navmesh(state, entity, target_position_index),
    )
    if error is not None:
        return _reject("move_and_rotate", entity, state, error)

    new_state = move_and_rotate_effect(
        state, entity, target_position_index, target_rotation_index
    )
    return CommandResult(state=new_state, duration_ms=to_milliseconds(new_state.last_duration))


def mark_waypoint_reached(state: LocomotionState, entity: str, waypoint: str) -> CommandResult:
    error = _check_entity(state, entity)
    if error is None and not state.has_waypoint(waypoint):
        error = ValidationError("unknown_waypoint", {"waypoint": waypoint})
    if error is not None:
        return _reject("mark_waypoint_reached", entity, state, error)

    return CommandResult(state=mark_reached_effect(state, entity, waypoint), duration_ms=0)
