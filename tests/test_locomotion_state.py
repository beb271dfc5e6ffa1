# tests/test_locomotion_state.py
"""
Tests for initialize() and the predicate accessors.
"""

from __future__ import annotations

import logging
from dataclasses import replace

import pytest

from locomotion import predicates as p
from locomotion.errors import StateInconsistency, ValidationError
from locomotion.spaces import GridSpace, SphereSpace, generate_grid
from locomotion.state import calculate_duration, initialize
from spec.types import EntitySpec, Waypoint


def _entity(**overrides) -> EntitySpec:
    values = dict(id="e1", position=(0.0, 0.0, 0.0), speed=2.0)
    values.update(overrides)
    return EntitySpec(**values)


def test_maze_initialize_builds_grid_sphere_and_navmesh(grid_config) -> None:
    state = initialize(
        [_entity(position=(3.2, 1.9, 0.0))],
        [Waypoint("wp1", 24, 3), Waypoint("wp2", 6, 0)],
        grid_config,
    )

    assert isinstance(state.position_space, GridSpace)
    assert state.position_space.n == 25
    assert isinstance(state.rotation_space, SphereSpace)
    assert state.rotation_space.n == 8
    assert state.navmesh is not None
    assert state.maze_mode

    assert p.quantized_position(state, "e1") == 2 * 5 + 3
    assert p.entity_speed(state, "e1") == 2.0
    assert p.movement_type(state, "e1") == "walking"
    assert state.reached == {("e1", "wp1"): False, ("e1", "wp2"): False}


def test_sphere_initialize_shares_one_space(sphere_config) -> None:
    state = initialize([_entity()], [Waypoint("wp1", 19, 4)], sphere_config)

    assert state.position_space is state.rotation_space
    assert state.position_space.n == 20
    assert state.navmesh is None
    assert not state.maze_mode


def test_maze_mode_rejects_waypoint_with_nonzero_z(grid_config) -> None:
    points = list(generate_grid(5, 5).points)
    points[12] = (2.0, 2.0, 1.0)
    raised = GridSpace(points, 5, 5, 1.0)

    with pytest.raises(ValidationError) as excinfo:
        initialize([_entity()], [Waypoint("wp1", 12, 0)], grid_config, position_space=raised)
    assert excinfo.value.code == "upward_waypoint"


def test_waypoint_indices_are_range_checked(grid_config) -> None:
    with pytest.raises(ValidationError) as excinfo:
        initialize([_entity()], [Waypoint("wp1", 25, 0)], grid_config)
    assert excinfo.value.code == "position_index_out_of_range"

    with pytest.raises(ValidationError) as excinfo:
        initialize([_entity()], [Waypoint("wp1", 3, 8)], grid_config)
    assert excinfo.value.code == "rotation_index_out_of_range"


def test_duplicate_ids_are_rejected(grid_config) -> None:
    with pytest.raises(ValidationError):
        initialize([_entity(), _entity()], [], grid_config)
    with pytest.raises(ValidationError):
        initialize([_entity()], [Waypoint("a", 1), Waypoint("a", 2)], grid_config)


def test_invalid_mesh_data_falls_back_to_grid(grid_config, caplog) -> None:
    caplog.set_level(logging.WARNING)
    state = initialize(
        [_entity()],
        [],
        grid_config,
        mesh_data={"vertices": [["bad"]], "faces": []},
    )

    assert state.navmesh is not None
    assert state.navmesh.metadata["type"] == "grid"
    assert any("falling back" in r.getMessage() for r in caplog.records)


def test_imported_mesh_is_used_when_valid(grid_config) -> None:
    data = {
        "vertices": [[-1, -1, 0], [5, -1, 0], [-1, 5, 0], [5, 5, 0]],
        "faces": [[0, 1, 2], [1, 3, 2]],
    }
    state = initialize([_entity()], [], grid_config, mesh_data=data, mesh_format="unity")
    assert state.navmesh.metadata["type"] == "unity"
    assert state.navmesh.face_count == 2


def test_predicate_defaults_for_missing_keys(grid_config) -> None:
    state = initialize([_entity()], [Waypoint("wp1", 1)], grid_config)

    assert p.quantized_position(state, "ghost") == 0
    assert p.quantized_rotation(state, "ghost") == 0
    assert p.entity_speed(state, "ghost") == 1.0
    assert p.movement_type(state, "ghost") == "walking"
    assert p.waypoint_reached(state, "ghost", "wp1") is False


def test_setters_return_new_state_and_leave_input_untouched(grid_config) -> None:
    state = initialize([_entity()], [Waypoint("wp1", 1)], grid_config)

    moved = p.set_quantized_position(state, "e1", 7)
    turned = p.set_quantized_rotation(moved, "e1", 2)
    slowed = p.set_entity_speed(turned, "e1", 0.5)
    flying = p.set_movement_type(slowed, "e1", "flying")
    done = p.set_waypoint_reached(flying, "e1", "wp1")

    assert p.quantized_position(state, "e1") == 0
    assert p.quantized_position(done, "e1") == 7
    assert p.quantized_rotation(done, "e1") == 2
    assert p.entity_speed(done, "e1") == 0.5
    assert p.movement_type(done, "e1") == "flying"
    assert p.waypoint_reached(done, "e1", "wp1") is True
    assert p.waypoint_reached(state, "e1", "wp1") is False
    assert p.reached_by(done, "wp1") == ["e1"]


def test_stale_index_is_a_state_inconsistency(grid_config) -> None:
    state = initialize([_entity()], [], grid_config)
    broken = replace(state, positions={"e1": 99})

    with pytest.raises(StateInconsistency):
        broken.position_point(p.quantized_position(broken, "e1"))


def test_calculate_duration() -> None:
    assert calculate_duration(5.0, 2.0) == 2.5
    assert calculate_duration(5.0, 0.0) == float("inf")
