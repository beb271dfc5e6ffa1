# src/app/scenario.py
"""
Scenario construction from a SolverConfig.

Produces the solve inputs: one walking entity at the origin and
`num_waypoints` waypoints scattered deterministically over the active
position space.

Sphere mode:  position = i * (N // k) mod N, rotation = (position + 5) mod N
Maze mode:    positions spread the same way over the walkable cells
              connected to the origin; rotation = i mod rotation_points
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Tuple

from env.schema import SolverConfig
from locomotion.nav.mesh import NavMesh
from locomotion.spaces import generate_grid
from spec.types import IDENTITY_ROTATION, EntitySpec, Waypoint

log = logging.getLogger(__name__)

DEFAULT_ENTITY_ID = "entity1"
ORIGIN = (0.0, 0.0, 0.0)


@dataclass(frozen=True)
class Scenario:
    entities: Tuple[EntitySpec, ...]
    waypoints: Tuple[Waypoint, ...]


def default_entity(config: SolverConfig) -> EntitySpec:
    return EntitySpec(
        id=DEFAULT_ENTITY_ID,
        position=ORIGIN,
        rotation=IDENTITY_ROTATION,
        speed=config.entity_speed,
        movement_type="walking",
    )


def sphere_waypoints(num_waypoints: int, sphere_points: int) -> List[Waypoint]:
    stride = sphere_points // num_waypoints
    waypoints = []
    for i in range(num_waypoints):
        position = (i * stride) % sphere_points
        waypoints.append(
            Waypoint(
                id=f"wp{i + 1}",
                position_index=position,
                rotation_index=(position + 5) % sphere_points,
            )
        )
    return waypoints


def reachable_cells(config: SolverConfig) -> List[int]:
    """
    Grid indices whose cell is walkable and in the origin's mesh region.

    Raises ValueError when the origin cell itself is an obstacle.
    """
    grid = generate_grid(config.grid_width, config.grid_height, config.grid_spacing)
    mesh = NavMesh.from_grid(
        config.grid_width, config.grid_height, config.grid_spacing, config.obstacles
    )
    origin_face = mesh.find_face(ORIGIN)
    if origin_face is None or not mesh.is_face_walkable(origin_face):
        raise ValueError(f"Profile '{config.name}' blocks the origin cell the entity starts on")
    origin_region = mesh.region_of(origin_face)

    cells = []
    for idx, point in enumerate(grid.points):
        face = mesh.find_face(point)
        if face is None or not mesh.is_face_walkable(face):
            continue
        if mesh.region_of(face) != origin_region:
            continue
        cells.append(idx)
    return cells


def maze_waypoints(config: SolverConfig) -> List[Waypoint]:
    cells = reachable_cells(config)
    count = len(cells)
    stride = max(1, count // config.num_waypoints)
    waypoints = []
    for i in range(config.num_waypoints):
        waypoints.append(
            Waypoint(
                id=f"wp{i + 1}",
                position_index=cells[(i * stride) % count],
                rotation_index=i % config.rotation_points,
            )
        )
    return waypoints


def build_scenario(config: SolverConfig) -> Scenario:
    if config.maze_mode:
        waypoints = maze_waypoints(config)
    else:
        waypoints = sphere_waypoints(config.num_waypoints, config.sphere_points)

    log.info(
        "Scenario '%s': %d waypoints at %s",
        config.name,
        len(waypoints),
        [wp.position_index for wp in waypoints],
    )
    return Scenario(entities=(default_entity(config),), waypoints=tuple(waypoints))
