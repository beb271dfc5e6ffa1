# src/spec/__init__.py

from __future__ import annotations

"""
Public spec surface for the patrol solver.

This module re-exports *interfaces and data types* used across the codebase:
  - Geometry primitives (Point, Quaternion, Rotation)
  - Solve inputs (EntitySpec, Waypoint)
  - Replay types (ActionRecord, TrajectoryStep and its snapshots)
  - The external Planner protocol

Deliberately does NOT export concrete domain logic to avoid circular
imports; that lives in locomotion/, planning/ and trajectory/.
"""

from .planner import Planner
from .types import (
    IDENTITY_ROTATION,
    MOVEMENT_TYPES,
    ActionRecord,
    EntitySnapshot,
    EntitySpec,
    Point,
    Quaternion,
    Rotation,
    TrajectoryStep,
    Waypoint,
    WaypointSnapshot,
)

__all__ = [
    # Geometry
    "Point",
    "Quaternion",
    "Rotation",
    "IDENTITY_ROTATION",
    "MOVEMENT_TYPES",
    # Inputs
    "EntitySpec",
    "Waypoint",
    # Replay
    "ActionRecord",
    "EntitySnapshot",
    "WaypointSnapshot",
    "TrajectoryStep",
    # Planner seam
    "Planner",
]
