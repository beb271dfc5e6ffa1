# LocomotionState and initialize()
# src/locomotion/state.py
"""
Per-solve locomotion state.

LocomotionState is a value: every command receives one and returns a new
one. The index maps are copied on write (see predicates.py), the spaces
and navmesh are shared read-only between all derived states.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple

from spec.types import EntitySpec, Point, Waypoint
from .errors import StateInconsistency, ValidationError
from .nav.mesh import NavMesh
from .spaces import (
    IndexedSpace,
    distance,
    generate_grid,
    generate_sphere,
    quantize_position,
    quantize_rotation,
)

log = logging.getLogger(__name__)

DEFAULT_ROTATION_DURATION = 0.5


@dataclass(frozen=True)
class LocomotionState:
    """
    Quantized world state for one solve.

    Inputs (never change after initialize):
        entities, waypoints, position_space, rotation_space, navmesh,
        maze_mode, rotation_duration

    Mutable through commands only (copied on every change):
        positions, rotations, speeds, movement_types, reached

    Transient:
        last_duration: seconds taken by the most recent transition
    """

    entities: Mapping[str, EntitySpec]
    waypoints: Mapping[str, Waypoint]
    position_space: IndexedSpace
    rotation_space: IndexedSpace
    navmesh: Optional[NavMesh] = None
    maze_mode: bool = False
    rotation_duration: float = DEFAULT_ROTATION_DURATION

    positions: Dict[str, int] = field(default_factory=dict)
    rotations: Dict[str, int] = field(default_factory=dict)
    speeds: Dict[str, float] = field(default_factory=dict)
    movement_types: Dict[str, str] = field(default_factory=dict)
    reached: Dict[Tuple[str, str], bool] = field(default_factory=dict)

    last_duration: Optional[float] = None

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def has_entity(self, entity: str) -> bool:
        return entity in self.entities

    def has_waypoint(self, waypoint: str) -> bool:
        return waypoint in self.waypoints

    def position_point(self, index: int) -> Point:
        """Real-space point of a position index; StateInconsistency if stale."""
        point = self.position_space.get_point(index)
        if point is None:
            raise StateInconsistency(
                "space_size_mismatch",
                {"position_index": index, "space_size": self.position_space.n},
            )
        return point

    def rotation_point(self, index: int) -> Point:
        point = self.rotation_space.get_point(index)
        if point is None:
            raise StateInconsistency(
                "space_size_mismatch",
                {"rotation_index": index, "space_size": self.rotation_space.n},
            )
        return point


# ---------------------------------------------------------------------------
# Distance / duration
# ---------------------------------------------------------------------------


def calculate_distance(state: LocomotionState, from_index: int, to_index: int) -> float:
    return distance(state.position_space, from_index, to_index)


def calculate_duration(distance_value: float, speed: float) -> float:
    """Seconds to cover `distance_value` at `speed`; inf when speed <= 0."""
    if speed <= 0:
        return math.inf
    return distance_value / speed


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def _build_navmesh(
    config: Any,
    mesh_data: Optional[Mapping[str, Any]],
    mesh_format: str,
) -> NavMesh:
    if mesh_data is not None:
        try:
            return NavMesh.from_mesh_data(mesh_data, mesh_format)
        except (ValueError, ValidationError) as exc:
            log.warning("Invalid navmesh data (%s); falling back to grid mesh", exc)

    return NavMesh.from_grid(
        config.grid_width,
        config.grid_height,
        config.grid_spacing,
        config.obstacles,
    )


def _unique(kind: str, ids: Iterable[str]) -> None:
    seen = set()
    for item in ids:
        if item in seen:
            raise ValidationError("duplicate_id", {"kind": kind, "id": item})
        seen.add(item)


def initialize(
    entities: Sequence[EntitySpec],
    waypoints: Sequence[Waypoint],
    config: Any,
    *,
    mesh_data: Optional[Mapping[str, Any]] = None,
    mesh_format: str = "json",
    position_space: Optional[IndexedSpace] = None,
) -> LocomotionState:
    """
    Build the initial LocomotionState.

    `config` is a SolverConfig (env.schema) or anything exposing the same
    attributes: maze_mode, grid_width, grid_height, grid_spacing,
    sphere_points, rotation_points, obstacles, rotation_duration.

    Maze mode: grid position space, small rotation sphere, navmesh built
    from the grid (or imported from `mesh_data`). Sphere mode: a single
    sphere serves as both position and rotation space, no navmesh.

    `position_space` replaces the generated position space (custom
    layouts); it must still contain every waypoint index.

    Raises:
        ValidationError for duplicate ids, out-of-range waypoint indices,
        or a maze-mode waypoint whose point has z != 0.
    """
    _unique("entity", (e.id for e in entities))
    _unique("waypoint", (w.id for w in waypoints))

    maze_mode = bool(config.maze_mode)
    navmesh: Optional[NavMesh] = None

    if maze_mode:
        if position_space is None:
            position_space = generate_grid(
                config.grid_width, config.grid_height, config.grid_spacing
            )
        rotation_space = generate_sphere(config.rotation_points)
        navmesh = _build_navmesh(config, mesh_data, mesh_format)
    else:
        sphere = generate_sphere(config.sphere_points)
        if position_space is None:
            position_space = sphere
        rotation_space = sphere

    for wp in waypoints:
        point = position_space.get_point(wp.position_index)
        if point is None:
            raise ValidationError(
                "position_index_out_of_range",
                {"waypoint": wp.id, "index": wp.position_index, "max": position_space.n - 1},
            )
        if not rotation_space.contains_index(wp.rotation_index):
            raise ValidationError(
                "rotation_index_out_of_range",
                {"waypoint": wp.id, "index": wp.rotation_index, "max": rotation_space.n - 1},
            )
        if maze_mode and point[2] != 0.0:
            raise ValidationError("upward_waypoint", {"waypoint": wp.id, "z": point[2]})

    positions = {e.id: quantize_position(position_space, e.position) for e in entities}
    rotations = {e.id: quantize_rotation(rotation_space, e.rotation) for e in entities}
    speeds = {e.id: float(e.speed) for e in entities}
    movement_types = {e.id: e.movement_type for e in entities}
    reached = {(e.id, w.id): False for e in entities for w in waypoints}

    state = LocomotionState(
        entities={e.id: e for e in entities},
        waypoints={w.id: w for w in waypoints},
        position_space=position_space,
        rotation_space=rotation_space,
        navmesh=navmesh,
        maze_mode=maze_mode,
        rotation_duration=float(getattr(config, "rotation_duration", DEFAULT_ROTATION_DURATION)),
        positions=positions,
        rotations=rotations,
        speeds=speeds,
        movement_types=movement_types,
        reached=reached,
    )

    log.info(
        "Initialized locomotion state: mode=%s positions=%d rotations=%d entities=%d waypoints=%d navmesh=%s",
        "maze" if maze_mode else "sphere",
        position_space.n,
        rotation_space.n,
        len(entities),
        len(waypoints),
        navmesh,
    )
    return state
