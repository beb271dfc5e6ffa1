# src/planning/sequencer.py
"""
Waypoint tour ordering.

Greedy nearest-neighbour heuristic, not an optimal TSP solver. Each step
scans every unvisited waypoint, so ordering k waypoints costs O(k^2)
distance evaluations; k is expected to stay in the tens.

Ties resolve to the waypoint that comes first in the input.
"""

from __future__ import annotations

import math
from typing import Callable, List, Sequence

from spec.types import Waypoint

DistanceFn = Callable[[int, int], float]


def order_waypoints(
    waypoints: Sequence[Waypoint],
    start_index: int,
    distance_fn: DistanceFn,
) -> List[str]:
    """Ids of `waypoints` in visiting order, starting from `start_index`."""
    remaining = list(waypoints)
    order: List[str] = []
    current = start_index

    while remaining:
        best_pos = 0
        best_distance = math.inf
        for pos, wp in enumerate(remaining):
            d = distance_fn(current, wp.position_index)
            if d < best_distance:
                best_pos, best_distance = pos, d
        chosen = remaining.pop(best_pos)
        order.append(chosen.id)
        current = chosen.position_index

    return order


def total_distance(
    order: Sequence[int],
    start_index: int,
    distance_fn: DistanceFn,
) -> float:
    """
    Closed-loop length of a tour given as position indices:
    start -> order[0] -> ... -> order[-1] -> start.
    """
    if not order:
        return 0.0

    stops = [start_index, *order, start_index]
    return sum(distance_fn(a, b) for a, b in zip(stops, stops[1:]))


def order_indices(order: Sequence[str], waypoints: Sequence[Waypoint]) -> List[int]:
    """Position indices of waypoint ids, in the given order."""
    by_id = {wp.id: wp.position_index for wp in waypoints}
    return [by_id[wp_id] for wp_id in order]
