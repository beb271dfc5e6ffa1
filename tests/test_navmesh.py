# tests/test_navmesh.py
"""
Unit tests for NavMesh + face-graph A*.

Grid meshes are built directly with NavMesh.from_grid; grid point (x, y)
sits in cell (x, y), so obstacle cells line up with maze indices.
"""

from __future__ import annotations

import pytest

from locomotion.errors import PathNotFound, ValidationError
from locomotion.nav import (
    NavMesh,
    find_face_path,
    point_in_triangle,
    segment_hits_triangle,
    segments_intersect,
)


def test_from_grid_counts_vertices_and_faces() -> None:
    mesh = NavMesh.from_grid(4, 3)

    assert len(mesh.vertices) == 5 * 4
    assert mesh.face_count == 2 * 4 * 3
    assert all(mesh.walkable_mask.values())
    assert mesh.metadata["type"] == "grid"


def test_obstacle_cells_are_unwalkable() -> None:
    mesh = NavMesh.from_grid(3, 3, obstacles=[(1, 1), (10, 10)])

    assert not mesh.walkable((1.0, 1.0, 0.0))
    assert mesh.walkable((0.0, 0.0, 0.0))
    assert mesh.walkable((2.0, 1.0, 0.0))
    # out-of-grid obstacles are ignored
    assert mesh.metadata["obstacles"] == ((1, 1),)
    assert sum(1 for ok in mesh.walkable_mask.values() if not ok) == 2


def test_walkable_is_false_off_mesh() -> None:
    mesh = NavMesh.from_grid(3, 3)
    assert not mesh.walkable((10.0, 10.0, 0.0))
    assert mesh.find_face((-2.0, 0.0, 0.0)) is None


def test_adjacency_is_symmetric_and_shares_edges() -> None:
    mesh = NavMesh.from_grid(2, 2)

    for face, neighbors in mesh.adjacency.items():
        for other in neighbors:
            assert face in mesh.adjacency[other]
            shared = set(mesh.faces[face]) & set(mesh.faces[other])
            assert len(shared) == 2
    # each cell's two triangles neighbour each other
    assert 1 in mesh.neighbors(0)


def test_adjacent_cells_give_two_point_path() -> None:
    mesh = NavMesh.from_grid(3, 3)

    path = mesh.find_path((0.0, 0.0, 0.0), (1.0, 0.0, 0.0))

    assert path == [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0)]


def test_open_grid_diagonal_is_a_straight_line() -> None:
    mesh = NavMesh.from_grid(5, 5)
    assert len(mesh.find_path((0.0, 0.0, 0.0), (4.0, 4.0, 0.0))) == 2


def test_unwalkable_target_raises_path_not_found() -> None:
    mesh = NavMesh.from_grid(3, 3, obstacles=[(2, 2)])

    with pytest.raises(PathNotFound):
        mesh.find_path((0.0, 0.0, 0.0), (2.0, 2.0, 0.0))


def test_disconnected_regions_raise_path_not_found() -> None:
    wall = [(1, y) for y in range(3)]
    mesh = NavMesh.from_grid(3, 3, obstacles=wall)

    assert len(mesh.regions) == 2
    assert mesh.region_of(mesh.find_face((0.0, 0.0, 0.0))) == 0
    assert mesh.region_of(mesh.find_face((2.0, 0.0, 0.0))) == 1
    assert mesh.region_of(mesh.find_face((1.0, 0.0, 0.0))) is None
    with pytest.raises(PathNotFound) as excinfo:
        mesh.find_path((0.0, 0.0, 0.0), (2.0, 0.0, 0.0))
    assert excinfo.value.code == "no_path_found"


def test_off_mesh_endpoint_raises_no_containing_face() -> None:
    mesh = NavMesh.from_grid(3, 3)
    with pytest.raises(PathNotFound) as excinfo:
        mesh.find_path((0.0, 0.0, 0.0), (7.0, 7.0, 0.0))
    assert excinfo.value.code == "no_containing_face"


def test_path_around_wall_stays_on_walkable_faces() -> None:
    # wall at x = 2 with a gap at the top row
    wall = [(2, y) for y in range(4)]
    mesh = NavMesh.from_grid(5, 5, obstacles=wall)

    path = mesh.find_path((0.0, 0.0, 0.0), (4.0, 0.0, 0.0))

    assert path[0] == (0.0, 0.0, 0.0)
    assert path[-1] == (4.0, 0.0, 0.0)
    assert len(path) > 2
    for point in path:
        assert mesh.walkable(point)
    # the detour has to climb to the gap row
    assert max(p[1] for p in path) > 3.0


def test_get_nearest_walkable() -> None:
    mesh = NavMesh.from_grid(3, 3, obstacles=[(1, 1)])

    assert mesh.get_nearest_walkable((0.0, 0.0, 0.0)) == (0.0, 0.0, 0.0)

    nearest = mesh.get_nearest_walkable((1.0, 1.0, 0.0))
    assert mesh.walkable(nearest)
    assert nearest != (1.0, 1.0, 0.0)


def test_get_nearest_walkable_without_walkable_faces() -> None:
    mesh = NavMesh.from_grid(1, 1, obstacles=[(0, 0)])
    with pytest.raises(PathNotFound):
        mesh.get_nearest_walkable((0.0, 0.0, 0.0))


def test_with_obstacles_builds_new_mesh() -> None:
    mesh = NavMesh.from_grid(3, 3)
    blocked = mesh.with_obstacles([(0, 1)])

    assert blocked is not mesh
    assert mesh.walkable((0.0, 1.0, 0.0))
    assert not blocked.walkable((0.0, 1.0, 0.0))


def test_from_mesh_data_imports_2d_vertices() -> None:
    data = {
        "vertices": [[0, 0], [2, 0], [0, 2], [2, 2]],
        "faces": [[0, 1, 2], [1, 3, 2]],
        "walkable": [True, False],
    }
    mesh = NavMesh.from_mesh_data(data, "godot")

    assert mesh.vertices[3] == (2.0, 2.0, 0.0)
    assert mesh.walkable((0.2, 0.2, 0.0))
    assert not mesh.walkable((1.8, 1.8, 0.0))
    assert mesh.metadata["type"] == "godot"


def test_from_mesh_data_rejects_bad_input() -> None:
    with pytest.raises(ValueError):
        NavMesh.from_mesh_data({"vertices": [], "faces": []}, "obj")
    with pytest.raises(ValueError):
        NavMesh.from_mesh_data({"vertices": [["a", 0, 0]], "faces": []})
    with pytest.raises(ValidationError):
        NavMesh.from_mesh_data({"vertices": [[0, 0, 0]], "faces": [[0, 1, 2]]})


def test_walkable_mask_must_reference_existing_faces() -> None:
    with pytest.raises(ValidationError):
        NavMesh([(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0)], [(0, 1, 2)], {5: False})


def test_face_search_respects_step_limit() -> None:
    mesh = NavMesh.from_grid(6, 1)

    result = find_face_path(mesh, 0, mesh.face_count - 1, max_steps=1)
    assert not result.success
    assert result.reason == "max_steps_exhausted"

    full = find_face_path(mesh, 0, mesh.face_count - 1)
    assert full.success
    assert full.path[0] == 0 and full.path[-1] == mesh.face_count - 1


def test_point_in_triangle_includes_edges() -> None:
    a, b, c = (0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0)
    assert point_in_triangle((0.5, 0.5), a, b, c)
    assert point_in_triangle((0.0, 0.0), a, b, c)
    assert not point_in_triangle((0.8, 0.8), a, b, c)


def test_segment_intersection_counts_touching() -> None:
    assert segments_intersect((0, 0), (2, 2), (0, 2), (2, 0))
    # endpoint resting on the other segment
    assert segments_intersect((0, 0), (1, 1), (1, 1), (2, 0))
    # collinear overlap
    assert segments_intersect((0, 0), (2, 0), (1, 0), (3, 0))
    assert not segments_intersect((0, 0), (1, 0), (0, 1), (1, 1))
    assert not segments_intersect((0, 0), (1, 0), (2, 0), (3, 0))


def test_segment_hits_triangle_at_a_corner() -> None:
    a, b, c = (1.0, 1.0, 0.0), (2.0, 1.0, 0.0), (1.0, 2.0, 0.0)

    assert segment_hits_triangle((0.0, 2.0), (2.0, 0.0), a, b, c)
    assert segment_hits_triangle((1.2, 1.2), (1.3, 1.3), a, b, c)
    assert not segment_hits_triangle((0.0, 1.9), (0.9, 0.0), a, b, c)


def _assert_segments_walkable(mesh: NavMesh, path, step: float = 0.02) -> None:
    for (ax, ay, _), (bx, by, _) in zip(path, path[1:]):
        n = max(1, int(((bx - ax) ** 2 + (by - ay) ** 2) ** 0.5 / step))
        for i in range(n + 1):
            t = i / n
            point = (ax + (bx - ax) * t, ay + (by - ay) * t, 0.0)
            assert mesh.walkable(point), (path, point)


@pytest.mark.parametrize(
    "start, goal",
    [
        ((5.0, 0.0, 0.0), (3.0, 4.0, 0.0)),
        ((6.0, 2.0, 0.0), (4.0, 6.0, 0.0)),
        ((1.0, 7.0, 0.0), (3.0, 5.0, 0.0)),
    ],
)
def test_smoothed_path_never_clips_obstacle_corners(start, goal) -> None:
    mesh = NavMesh.from_grid(8, 8, obstacles=[(3, 3), (4, 5), (2, 6)])

    path = mesh.find_path(start, goal)

    assert path[0] == start and path[-1] == goal
    _assert_segments_walkable(mesh, path)


def test_smoothed_paths_from_bottom_row_stay_walkable() -> None:
    obstacles = [(3, 3), (4, 5), (2, 6)]
    mesh = NavMesh.from_grid(8, 8, obstacles=obstacles)
    cells = [(x, y) for y in range(8) for x in range(8) if (x, y) not in obstacles]

    for sx in range(8):
        for gx, gy in cells:
            start, goal = (float(sx), 0.0, 0.0), (float(gx), float(gy), 0.0)
            if start == goal:
                continue
            _assert_segments_walkable(mesh, mesh.find_path(start, goal), step=0.05)


def test_smoothing_does_not_leave_a_concave_mesh() -> None:
    # L shape: the square [1, 2] x [1, 2] is missing
    data = {
        "vertices": [[0, 0], [1, 0], [2, 0], [0, 1], [1, 1], [2, 1], [0, 2], [1, 2]],
        "faces": [[0, 1, 4], [0, 4, 3], [1, 2, 5], [1, 5, 4], [3, 4, 7], [3, 7, 6]],
    }
    mesh = NavMesh.from_mesh_data(data)

    path = mesh.find_path((1.8, 0.6, 0.0), (0.6, 1.8, 0.0))

    assert len(path) > 2
    _assert_segments_walkable(mesh, path)
