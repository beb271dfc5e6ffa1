# A* pathfinding over the navmesh face graph
# src/locomotion/nav/pathfinder.py
"""
A* pathfinding over a NavMesh face-adjacency graph.

- Edge cost: Euclidean distance between face centroids.
- Heuristic: Euclidean distance from a face centroid to the goal centroid.
- Only walkable faces are expanded.
- max_steps guard (default: twice the face count) so disconnected meshes
  fail fast instead of searching forever.
"""

from __future__ import annotations

import heapq
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Optional

from ..spaces import euclidean_3d

if TYPE_CHECKING:
    from .mesh import NavMesh


@dataclass
class PathfindingResult:
    """Structured result for a face-graph search."""

    path: List[int]
    success: bool
    reason: str | None = None
    expanded: int = 0


def find_face_path(
    mesh: "NavMesh",
    start: int,
    goal: int,
    max_steps: Optional[int] = None,
) -> PathfindingResult:
    """
    A* search from face `start` to face `goal`.

    Returns a PathfindingResult with:
      - path: face indices including start and goal (empty on failure)
      - success: bool
      - reason: "no_path_found" or "max_steps_exhausted" on failure

    Does not mutate the mesh.
    """
    if start == goal:
        return PathfindingResult(path=[start], success=True)

    if max_steps is None:
        max_steps = 2 * mesh.face_count

    goal_centroid = mesh.centroid(goal)

    counter = 0
    open_heap: List[tuple[float, int, int]] = [
        (euclidean_3d(mesh.centroid(start), goal_centroid), counter, start)
    ]
    came_from: Dict[int, int] = {}
    g_score: Dict[int, float] = {start: 0.0}
    closed: set[int] = set()

    steps_remaining = max_steps

    while open_heap and steps_remaining > 0:
        _, _, current = heapq.heappop(open_heap)
        if current in closed:
            continue
        steps_remaining -= 1

        if current == goal:
            return PathfindingResult(
                path=_reconstruct_path(came_from, current),
                success=True,
                expanded=max_steps - steps_remaining,
            )

        closed.add(current)
        current_centroid = mesh.centroid(current)

        for nxt in mesh.neighbors(current):
            if nxt in closed or not mesh.is_face_walkable(nxt):
                continue
            nxt_centroid = mesh.centroid(nxt)
            tentative_g = g_score[current] + euclidean_3d(current_centroid, nxt_centroid)

            if tentative_g < g_score.get(nxt, float("inf")):
                came_from[nxt] = current
                g_score[nxt] = tentative_g
                f_score = tentative_g + euclidean_3d(nxt_centroid, goal_centroid)
                counter += 1
                heapq.heappush(open_heap, (f_score, counter, nxt))

    reason = (
        "max_steps_exhausted"
        if steps_remaining <= 0 and open_heap
        else "no_path_found"
    )
    return PathfindingResult(
        path=[],
        success=False,
        reason=reason,
        expanded=max_steps - steps_remaining,
    )


def _reconstruct_path(came_from: Dict[int, int], current: int) -> List[int]:
    """Reconstruct full face path from came_from map."""
    path: List[int] = [current]
    while current in came_from:
        current = came_from[current]
        path.append(current)
    path.reverse()
    return path
