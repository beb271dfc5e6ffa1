# src/trajectory/__init__.py
"""
Trajectory replay and export for executed patrol plans.
"""

from .reconstructor import capture_step, export, extract_actions, reconstruct
from .render import print_trajectory, trajectory_table

__all__ = [
    "capture_step",
    "export",
    "extract_actions",
    "print_trajectory",
    "reconstruct",
    "trajectory_table",
]
