# predicate accessors over LocomotionState
# src/locomotion/predicates.py
"""
Get/set pairs for the quantized locomotion predicates.

Getters return a fixed default when the key is absent:
    quantized_position -> 0
    quantized_rotation -> 0
    entity_speed       -> 1.0
    movement_type      -> "walking"
    waypoint_reached   -> False

Setters never mutate their input; they return a new state with a copied map.
"""

from __future__ import annotations

from dataclasses import replace

from .state import LocomotionState

DEFAULT_POSITION_INDEX = 0
DEFAULT_ROTATION_INDEX = 0
DEFAULT_SPEED = 1.0
DEFAULT_MOVEMENT_TYPE = "walking"


def quantized_position(state: LocomotionState, entity: str) -> int:
    return state.positions.get(entity, DEFAULT_POSITION_INDEX)


def set_quantized_position(state: LocomotionState, entity: str, index: int) -> LocomotionState:
    positions = dict(state.positions)
    positions[entity] = index
    return replace(state, positions=positions)


def quantized_rotation(state: LocomotionState, entity: str) -> int:
    return state.rotations.get(entity, DEFAULT_ROTATION_INDEX)


def set_quantized_rotation(state: LocomotionState, entity: str, index: int) -> LocomotionState:
    rotations = dict(state.rotations)
    rotations[entity] = index
    return replace(state, rotations=rotations)


def entity_speed(state: LocomotionState, entity: str) -> float:
    return state.speeds.get(entity, DEFAULT_SPEED)


def set_entity_speed(state: LocomotionState, entity: str, speed: float) -> LocomotionState:
    speeds = dict(state.speeds)
    speeds[entity] = float(speed)
    return replace(state, speeds=speeds)


def movement_type(state: LocomotionState, entity: str) -> str:
    return state.movement_types.get(entity, DEFAULT_MOVEMENT_TYPE)


def set_movement_type(state: LocomotionState, entity: str, value: str) -> LocomotionState:
    movement_types = dict(state.movement_types)
    movement_types[entity] = value
    return replace(state, movement_types=movement_types)


def waypoint_reached(state: LocomotionState, entity: str, waypoint: str) -> bool:
    return state.reached.get((entity, waypoint), False)


def set_waypoint_reached(
    state: LocomotionState,
    entity: str,
    waypoint: str,
    value: bool = True,
) -> LocomotionState:
    reached = dict(state.reached)
    reached[(entity, waypoint)] = bool(value)
    return replace(state, reached=reached)


def reached_by(state: LocomotionState, waypoint: str) -> list[str]:
    """Entity ids (in entity order) that have reached `waypoint`."""
    return [e for e in state.entities if state.reached.get((e, waypoint), False)]
