"""
Application wiring for the patrol solver.

- build_scenario: entities and waypoints from a SolverConfig
- solve: scenario -> state -> tour order -> external planner -> trajectory
- configure_logging: one-time process logging setup
"""

from __future__ import annotations

from .logging_config import configure_logging
from .runtime import SolveResult, solve
from .scenario import Scenario, build_scenario

__all__ = [
    "Scenario",
    "SolveResult",
    "build_scenario",
    "configure_logging",
    "solve",
]
