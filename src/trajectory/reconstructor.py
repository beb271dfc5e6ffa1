# replay executed actions into time-stamped trajectory steps
# src/trajectory/reconstructor.py
"""
Trajectory reconstruction.

Input: the planner's accepted primitive actions (ActionRecords, or a
solution graph to extract them from) and the initial LocomotionState.

For each action in order:
  - apply its effect to a working state (no precondition checks; the
    action was validated when the planner accepted it),
  - snapshot every entity and waypoint in real-space coordinates,
  - advance elapsed time by the action's duration.

Step `time` is the elapsed time when the action started, in seconds.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Sequence

from locomotion.predicates import (
    entity_speed,
    movement_type,
    quantized_position,
    quantized_rotation,
    reached_by,
)
from locomotion.state import LocomotionState
from planning.domain import apply_effect
from spec.types import (
    ActionRecord,
    EntitySnapshot,
    TrajectoryDocument,
    TrajectoryStep,
    WaypointSnapshot,
)

log = logging.getLogger(__name__)

ACTION_NODE_TYPE = "A"


# ---------------------------------------------------------------------------
# Solution graph extraction
# ---------------------------------------------------------------------------


def _node_field(node: Any, key: str, default: Any = None) -> Any:
    if isinstance(node, Mapping):
        return node.get(key, default)
    return getattr(node, key, default)


def extract_actions(solution_graph: Mapping[Any, Any]) -> List[ActionRecord]:
    """
    Primitive action nodes of a solution graph, in execution order.

    Nodes are mappings (or objects) with `type`, `action`, optional
    `duration_ms` and optional `start_time`. Only nodes with type "A"
    are kept. They are ordered by start_time when every kept node has
    one and the values compare; otherwise graph (insertion) order wins.
    """
    records = [
        ActionRecord(
            action=_node_field(node, "action"),
            duration_ms=float(_node_field(node, "duration_ms", 0.0) or 0.0),
            start_time=_node_field(node, "start_time"),
        )
        for node in solution_graph.values()
        if _node_field(node, "type") == ACTION_NODE_TYPE
    ]

    if records and all(r.start_time is not None for r in records):
        try:
            return sorted(records, key=lambda r: r.start_time)
        except TypeError:
            log.debug("Action start times are not comparable; keeping graph order")
    return records


# ---------------------------------------------------------------------------
# Replay
# ---------------------------------------------------------------------------


def capture_step(state: LocomotionState, step: int, time: float) -> TrajectoryStep:
    entities = tuple(
        EntitySnapshot(
            id=entity_id,
            position=state.position_point(quantized_position(state, entity_id)),
            position_index=quantized_position(state, entity_id),
            rotation=state.rotation_point(quantized_rotation(state, entity_id)),
            rotation_index=quantized_rotation(state, entity_id),
            speed=entity_speed(state, entity_id),
            movement_type=movement_type(state, entity_id),
        )
        for entity_id in state.entities
    )
    waypoints = tuple(
        WaypointSnapshot(
            id=wp.id,
            position=state.position_point(wp.position_index),
            position_index=wp.position_index,
            rotation=state.rotation_point(wp.rotation_index),
            rotation_index=wp.rotation_index,
            reached_by=tuple(reached_by(state, wp.id)),
        )
        for wp in state.waypoints.values()
    )
    return TrajectoryStep(step=step, time=time, entities=entities, waypoints=waypoints)


def reconstruct(
    actions: Iterable[ActionRecord],
    initial_state: LocomotionState,
) -> List[TrajectoryStep]:
    """Replay `actions` from `initial_state`; one step per action."""
    steps: List[TrajectoryStep] = []
    state = initial_state
    elapsed = 0.0

    for idx, record in enumerate(actions):
        state = apply_effect(state, record.action)
        steps.append(capture_step(state, idx, elapsed))
        elapsed += record.duration_ms / 1000.0

    log.debug("Reconstructed %d trajectory steps (%.3fs)", len(steps), elapsed)
    return steps


def export(steps: Sequence[TrajectoryStep]) -> TrajectoryDocument:
    """JSON-compatible document: {"metadata": {...}, "steps": [...]}."""
    return {
        "metadata": {
            "total_steps": len(steps),
            "total_time": steps[-1].time if steps else 0.0,
        },
        "steps": [s.to_dict() for s in steps],
    }
