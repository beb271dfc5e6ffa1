# tests/conftest.py

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure src/ is on sys.path for test imports like `import locomotion`,
# and the project root for `tests.fakes`.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = PROJECT_ROOT / "src"

for root in (SRC_ROOT, PROJECT_ROOT):
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))

from env.schema import SolverConfig  # noqa: E402


@pytest.fixture
def grid_config() -> SolverConfig:
    """Open 5x5 maze, unit spacing, no obstacles."""
    return SolverConfig(
        name="test_grid",
        num_waypoints=3,
        maze_mode=True,
        grid_width=5,
        grid_height=5,
        grid_spacing=1.0,
        rotation_points=8,
        entity_speed=2.0,
    )


@pytest.fixture
def sphere_config() -> SolverConfig:
    return SolverConfig(
        name="test_sphere",
        num_waypoints=4,
        maze_mode=False,
        sphere_points=20,
        entity_speed=1.0,
    )
