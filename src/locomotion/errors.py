# src/locomotion/errors.py
"""
Error taxonomy for the locomotion domain.

- ValidationError: malformed input (unknown ids, bad indices, bad speed,
  disallowed movement type, upward waypoint in maze mode).
- ConstraintViolation: a well-formed transition the world forbids
  (upward movement, unwalkable source/target).
- PathNotFound: the navmesh search could not connect two points.
- StateInconsistency: an internal invariant is broken. This is the only
  class that should abort a solve; the others are reported back to the
  planner as rejected options.

Commands return these inside a CommandResult instead of raising them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class LocomotionError(Exception):
    """Base error with a stable machine-readable code and free-form details."""

    code: str
    details: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, details={self.details!r})"


class ValidationError(LocomotionError):
    pass


class ConstraintViolation(LocomotionError):
    pass


class PathNotFound(LocomotionError):
    pass


class StateInconsistency(LocomotionError):
    """Programming error: indices or spaces no longer agree with each other."""
