# src/locomotion/__init__.py
"""
Locomotion core: quantized spaces, navmesh, per-entity state and the
atomic commands an external planner executes.
"""

from .commands import (
    CommandResult,
    mark_waypoint_reached,
    move_and_rotate,
    move_to,
    rotate_to,
)
from .errors import (
    ConstraintViolation,
    LocomotionError,
    PathNotFound,
    StateInconsistency,
    ValidationError,
)
from .nav import NavMesh
from .state import LocomotionState, calculate_distance, calculate_duration, initialize
from .tracing import CommandTracer

__all__ = [
    "CommandResult",
    "CommandTracer",
    "ConstraintViolation",
    "LocomotionError",
    "LocomotionState",
    "NavMesh",
    "PathNotFound",
    "StateInconsistency",
    "ValidationError",
    "calculate_distance",
    "calculate_duration",
    "initialize",
    "mark_waypoint_reached",
    "move_and_rotate",
    "move_to",
    "rotate_to",
]
