# src/app/runtime.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from env.schema import SolverConfig
from locomotion.predicates import quantized_position
from locomotion.state import LocomotionState, calculate_distance, initialize
from locomotion.tracing import CommandTracer
from planning.domain import LocomotionDomain, Patrol
from planning.sequencer import order_indices, order_waypoints, total_distance
from spec.planner import Planner
from spec.types import ActionRecord, TrajectoryDocument, TrajectoryStep
from trajectory.reconstructor import export, reconstruct

from .scenario import Scenario, build_scenario

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SolveResult:
    """Everything one solve produced; writing it anywhere is the caller's job."""
    optimized_sequence: Tuple[str, ...]
    total_distance: float
    actions: Tuple[ActionRecord, ...]
    trajectory: Tuple[TrajectoryStep, ...]
    document: TrajectoryDocument
    initial_state: LocomotionState


def solve(
    config: SolverConfig,
    planner: Planner,
    *,
    scenario: Optional[Scenario] = None,
    tracer: Optional[CommandTracer] = None,
) -> SolveResult:
    """
    Full patrol pipeline:

      1) scenario (entities + waypoints) from config
      2) initial LocomotionState
      3) nearest-neighbour waypoint order and its closed-loop distance
      4) external planner solves Patrol(entity, order) against the domain
      5) accepted actions replayed into a trajectory and exported

    Rejected commands stay inside the planner's search. StateInconsistency
    propagates and aborts the solve.
    """
    scenario = scenario or build_scenario(config)
    state = initialize(scenario.entities, scenario.waypoints, config)

    entity = scenario.entities[0].id
    start_index = quantized_position(state, entity)

    def distance_fn(a: int, b: int) -> float:
        return calculate_distance(state, a, b)

    sequence = order_waypoints(scenario.waypoints, start_index, distance_fn)
    tour_length = total_distance(
        order_indices(sequence, scenario.waypoints), start_index, distance_fn
    )
    log.info("Optimized sequence: %s (total distance %.3f)", sequence, tour_length)

    domain = LocomotionDomain(tracer=tracer or CommandTracer())
    actions: List[ActionRecord] = planner.solve(domain, state, [Patrol(entity, tuple(sequence))])

    steps = reconstruct(actions, state)
    document = export(steps)
    log.info(
        "Solved patrol: %d actions, %.3fs total",
        len(actions),
        document["metadata"]["total_time"],
    )

    return SolveResult(
        optimized_sequence=tuple(sequence),
        total_distance=tour_length,
        actions=tuple(actions),
        trajectory=tuple(steps),
        document=document,
        initial_state=state,
    )
