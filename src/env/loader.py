# solver.yaml loader with profile selection
# src/env/loader.py

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Tuple

import yaml

from .schema import SolverConfig


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[2]
CONFIG_ROOT = PROJECT_ROOT / "config"
DEFAULT_CONFIG_PATH = CONFIG_ROOT / "solver.yaml"


def _load_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML mapping from `path`."""
    if not path.exists():
        raise FileNotFoundError(f"Missing config file: {path}")
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected mapping at top of {path}, got {type(data)}")
    return data


def _select_profile(cfg: Dict[str, Any], override: str | None) -> Tuple[str, Dict[str, Any]]:
    """Return (active_profile_name, active_profile_mapping)."""
    profile_name = override or cfg.get("profile")
    if not profile_name:
        raise ValueError("solver.yaml must define a 'profile' key.")
    profiles = cfg.get("profiles")
    if not isinstance(profiles, dict):
        raise ValueError("solver.yaml must define a 'profiles' mapping.")
    if profile_name not in profiles:
        raise KeyError(f"Profile '{profile_name}' not found in solver.yaml profiles.")
    return profile_name, profiles[profile_name] or {}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_solver_config(path: str | Path | None = None, profile: str | None = None) -> SolverConfig:
    """Main entry point: returns the SolverConfig of the active profile."""
    cfg = _load_yaml(Path(path) if path is not None else DEFAULT_CONFIG_PATH)
    name, raw = _select_profile(cfg, profile)
    if not isinstance(raw, dict):
        raise ValueError(f"Profile '{name}' must be a mapping, got {type(raw)}")

    config = SolverConfig.from_mapping(raw, name=name)
    _validate_config(config)
    return config


def _validate_config(config: SolverConfig) -> None:
    """Minimal sanity checks for a resolved profile."""
    if config.num_waypoints <= 0:
        raise ValueError(f"num_waypoints must be positive, got {config.num_waypoints}")
    if config.entity_speed <= 0.0:
        raise ValueError(f"entity_speed must be positive, got {config.entity_speed}")
    if config.rotation_duration < 0.0:
        raise ValueError(f"rotation_duration must be >= 0, got {config.rotation_duration}")

    if config.maze_mode:
        if config.grid_width <= 0 or config.grid_height <= 0:
            raise ValueError(
                f"Grid must be non-empty, got {config.grid_width}x{config.grid_height}"
            )
        if config.grid_spacing <= 0.0:
            raise ValueError(f"grid_spacing must be positive, got {config.grid_spacing}")
        if config.rotation_points <= 0:
            raise ValueError(f"rotation_points must be positive, got {config.rotation_points}")
    elif config.sphere_points <= 0:
        raise ValueError(f"sphere_points must be positive, got {config.sphere_points}")
