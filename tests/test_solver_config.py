# tests/test_solver_config.py
"""
Tests for SolverConfig and the YAML profile loader.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path

import pytest

from app.logging_config import configure_logging
from env.loader import DEFAULT_CONFIG_PATH, load_solver_config
from env.schema import SolverConfig


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "solver.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_from_mapping_defaults_and_coercion() -> None:
    cfg = SolverConfig.from_mapping({"obstacles": [[1, 2], [3, 4]], "entity_speed": 3}, name="x")

    assert cfg.name == "x"
    assert cfg.num_waypoints == 7
    assert cfg.maze_mode is True
    assert cfg.obstacles == ((1, 2), (3, 4))
    assert cfg.entity_speed == 3.0
    assert cfg.rotation_duration == 0.5


def test_from_mapping_rejects_unknown_keys() -> None:
    with pytest.raises(ValueError):
        SolverConfig.from_mapping({"num_waypionts": 3})


def test_load_active_profile_and_override(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        """
profile: small
profiles:
  small:
    num_waypoints: 3
    grid_width: 4
    grid_height: 4
  sphere:
    maze_mode: false
    sphere_points: 30
""",
    )

    small = load_solver_config(path)
    sphere = load_solver_config(path, profile="sphere")

    assert small.name == "small"
    assert (small.grid_width, small.grid_height, small.num_waypoints) == (4, 4, 3)
    assert sphere.maze_mode is False
    assert sphere.sphere_points == 30


def test_missing_file_and_profile(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_solver_config(tmp_path / "nope.yaml")

    path = _write(tmp_path, "profile: a\nprofiles:\n  b: {}\n")
    with pytest.raises(KeyError):
        load_solver_config(path)


def test_malformed_documents(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        load_solver_config(_write(tmp_path, "- just\n- a list\n"))
    with pytest.raises(ValueError):
        load_solver_config(_write(tmp_path, "profiles: {a: {}}\n"))
    with pytest.raises(ValueError):
        load_solver_config(_write(tmp_path, "profile: a\nprofiles:\n  a:\n    entity_speed: 0\n"))


def test_shipped_config_profiles_load() -> None:
    assert DEFAULT_CONFIG_PATH.exists()

    maze = load_solver_config()
    assert maze.name == "maze"
    assert maze.maze_mode
    assert (0, 0) not in maze.obstacles
    assert all(0 <= x < maze.grid_width and 0 <= y < maze.grid_height for x, y in maze.obstacles)

    for name in ("small_maze", "sphere"):
        assert load_solver_config(profile=name).name == name


@contextmanager
def bare_root_logger():
    # pytest attaches its own capture handlers for the duration of each test
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    root.handlers = []
    try:
        yield root
    finally:
        root.handlers = saved_handlers
        root.setLevel(saved_level)
        logging.getLogger("locomotion.command").setLevel(logging.NOTSET)


def test_configure_logging_is_idempotent() -> None:
    with bare_root_logger() as root:
        configure_logging("debug", trace_commands=False)
        configure_logging(logging.INFO)

        assert len(root.handlers) == 1
        assert root.level == logging.DEBUG
        assert logging.getLogger("locomotion.command").level == logging.WARNING


def test_configure_logging_rejects_unknown_level() -> None:
    with bare_root_logger():
        with pytest.raises(ValueError):
            configure_logging("LOUD")
